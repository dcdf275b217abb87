# main.py
"""Replay a scripted map session headlessly and print where it ended up."""

import argparse
import json
import sys
from pathlib import Path
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from map_pins.app.build import MapSession, build
from map_pins.app.events import DeleteClicked, ListItemClicked, MapClicked
from map_pins.config.models import AppModel
from map_pins.io.config import load_config
from map_pins.io.map_view import HeadlessMapView
from map_pins.io.prompt import ScriptedPrompt


class Interaction(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["map_click", "list_click", "overlay_click", "delete_click"]
    t: float = Field(ge=0)
    lat: float
    lng: float


class Scenario(BaseModel):
    model_config = ConfigDict(extra="forbid")
    answers: list[bool] = Field(default_factory=list)  # consumed by confirm() in order
    default_answer: bool = True
    interactions: list[Interaction] = Field(default_factory=list)
    until: float | None = None  # None: drain everything


_EVENTS = {
    "map_click": MapClicked,
    "list_click": ListItemClicked,
    "delete_click": DeleteClicked,
}


def report(session: MapSession, prompt: ScriptedPrompt) -> dict:
    summary = session.routes.summary
    pos = session.user_location
    return {
        "markers": [m.to_record() for m in session.markers()],
        "user_location": [pos.lat, pos.lng] if pos else None,
        "route": (
            {
                "target": summary.target_name,
                "distance": summary.distance_text,
                "time": summary.time_text,
            }
            if summary
            else None
        ),
        "notices": list(prompt.notices),
    }


def run(cfg: AppModel | dict | None, scenario: Scenario, use_logging: bool = True) -> dict:
    view = HeadlessMapView()
    prompt = ScriptedPrompt(scenario.answers, default=scenario.default_answer)
    session = build(cfg, view=view, prompt=prompt, use_logging=use_logging)

    session.start(at=0.0)
    for step in sorted(scenario.interactions, key=lambda s: s.t):
        # everything due before the click has happened by the time the user clicks
        session.settle(until=step.t)
        if step.kind == "overlay_click":
            if view.overlay_at((step.lat, step.lng)) is None:
                continue  # nothing drawn there (yet)
            view.click_overlay((step.lat, step.lng))
        else:
            session.submit(_EVENTS[step.kind](t=step.t, lat=step.lat, lng=step.lng))
    session.settle(until=scenario.until)
    return report(session, prompt)


def main(argv=None) -> int:
    ap = argparse.ArgumentParser(description=__doc__)
    ap.add_argument("scenario", type=Path, help="scenario JSON (answers + interactions)")
    ap.add_argument("--config", type=Path, default=None, help="app config JSON")
    ap.add_argument("--quiet", action="store_true", help="no kernel log lines on stderr")
    args = ap.parse_args(argv)

    cfg = load_config(args.config) if args.config else AppModel()
    scenario = Scenario.model_validate_json(args.scenario.read_text(encoding="utf-8"))
    out = run(cfg, scenario, use_logging=not args.quiet)
    json.dump(out, sys.stdout, indent=2)
    sys.stdout.write("\n")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
