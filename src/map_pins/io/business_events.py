# map_pins/io/business_events.py

from dataclasses import dataclass


# Analytics records (not scheduled in the kernel!)
@dataclass
class BizEvent:
    run_id: str
    t: float  # session time
    name: str  # stable event name


@dataclass
class MarkerSavedBiz(BizEvent):
    lat: float
    lng: float
    label: str
    fallback_label: bool = False


@dataclass
class MarkerDeletedBiz(BizEvent):
    lat: float
    lng: float
    label: str


@dataclass
class RouteShownBiz(BizEvent):
    request_id: int
    label: str
    distance_m: float
    time_s: float


@dataclass
class RouteFailedBiz(BizEvent):
    request_id: int
    label: str
    reason: str | None = None
