from typing import Annotated, Literal

from pydantic import BaseModel, ConfigDict, Field, ValidationInfo, field_validator, model_validator


def _check_lat_lng(lat: float, lng: float) -> None:
    if not -90.0 <= lat <= 90.0:
        raise ValueError(f"lat must be within [-90, 90], got {lat}")
    if not -180.0 <= lng <= 180.0:
        raise ValueError(f"lng must be within [-180, 180], got {lng}")


class SessionModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    name: str = "map-pins"
    run_id: str = "local"
    storage_key: str = "userLocations"
    default_center: tuple[float, float] = (10.3157, 123.8854)  # Cebu
    default_zoom: int = Field(default=10, ge=0, le=22)
    located_zoom: int = Field(default=13, ge=0, le=22)
    clear_route_on_delete: bool = False

    @field_validator("default_center")
    @classmethod
    def _center_in_range(cls, v: tuple[float, float]) -> tuple[float, float]:
        _check_lat_lng(*v)
        return v


class LogModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = "INFO"
    debug: bool = False
    business_events: bool = False  # also write analytics records as JSON lines
    business_events_path: str | None = None  # append there instead of stderr


# ----------------- STORE ---------------------


class StoreMemoryModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["memory"] = "memory"
    initial: dict[str, str] = Field(default_factory=dict)


class StoreJsonFileModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["json_file"] = "json_file"
    path: str


StoreUnion = Annotated[StoreMemoryModel | StoreJsonFileModel, Field(discriminator="kind")]


# ----------------- NAME RESOLVER ---------------------


class StaticLabelModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    lat: float
    lng: float
    name: str


class ResolverStaticModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["static"] = "static"
    entries: list[StaticLabelModel] = Field(default_factory=list)
    fallback: str = "Unknown Location"


class ResolverNominatimModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["nominatim"] = "nominatim"
    base_url: str = "https://nominatim.openstreetmap.org"
    timeout_s: float = Field(default=5.0, gt=0)
    user_agent: str = "map-pins/0.1"


ResolverUnion = Annotated[
    ResolverStaticModel | ResolverNominatimModel, Field(discriminator="kind")
]


# ----------------- ROUTE ENGINE ---------------------


class RouteEngineStraightLineModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["straight_line"] = "straight_line"
    speed_mps: float = Field(default=13.9, gt=0)  # ~50 km/h
    samples: int = Field(default=32, ge=2)


class RouteEngineOSRMModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["osrm"] = "osrm"
    base_url: str = "https://router.project-osrm.org"
    profile: Literal["driving", "walking", "cycling"] = "driving"
    timeout_s: float = Field(default=5.0, gt=0)


RouteEngineUnion = Annotated[
    RouteEngineStraightLineModel | RouteEngineOSRMModel, Field(discriminator="kind")
]


# ----------------- GEOLOCATION ---------------------


class GeolocatorUnavailableModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["unavailable"] = "unavailable"
    reason: str = "geolocation unavailable"


class GeolocatorFixedModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["fixed"] = "fixed"
    lat: float
    lng: float

    @model_validator(mode="after")
    def _in_range(self):
        _check_lat_lng(self.lat, self.lng)
        return self


GeolocatorUnion = Annotated[
    GeolocatorUnavailableModel | GeolocatorFixedModel, Field(discriminator="kind")
]


# ----------------- LATENCY ---------------------


class LatencyFixedModel(BaseModel):
    """Completion delays in session seconds, per external call kind."""

    model_config = ConfigDict(extra="forbid")
    kind: Literal["fixed"] = "fixed"
    seconds: dict[Literal["geolocate", "resolve_name", "route"], float] = Field(
        default_factory=dict
    )
    default_s: float = 0.0

    @field_validator("seconds")
    @classmethod
    def _nonneg(cls, v: dict[str, float]) -> dict[str, float]:
        bad = {k: s for k, s in v.items() if s < 0}
        if bad:
            raise ValueError(f"latencies must be >= 0, got {bad}")
        return v

    @field_validator("default_s")
    @classmethod
    def _nonneg_default(cls, v: float, info: ValidationInfo) -> float:
        if v < 0:
            raise ValueError(f"{info.field_name} must be >= 0")
        return v


class LatencyMeasuredModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    kind: Literal["measured"] = "measured"


LatencyUnion = Annotated[LatencyFixedModel | LatencyMeasuredModel, Field(discriminator="kind")]


# ------------------------------------------------------------------


class AppModel(BaseModel):
    model_config = ConfigDict(extra="forbid")
    session: SessionModel = Field(default_factory=SessionModel)
    log: LogModel = Field(default_factory=LogModel)
    store: StoreUnion = Field(default_factory=StoreMemoryModel)
    resolver: ResolverUnion = Field(default_factory=ResolverStaticModel)
    route_engine: RouteEngineUnion = Field(default_factory=RouteEngineStraightLineModel)
    geolocator: GeolocatorUnion = Field(default_factory=GeolocatorUnavailableModel)
    latency: LatencyUnion = Field(default_factory=LatencyFixedModel)
