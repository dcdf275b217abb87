# src/map_pins/io/config.py
import json
from pathlib import Path

from map_pins.config.models import AppModel


def load_config(path: str | Path) -> AppModel:
    """Read and validate a JSON config file (raises pydantic.ValidationError)."""
    with Path(path).open("r", encoding="utf-8") as f:
        return AppModel.model_validate(json.load(f))
