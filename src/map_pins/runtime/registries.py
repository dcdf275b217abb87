# runtime/registries.py
from collections.abc import Callable
from typing import Any

from map_pins.app.protocols import (
    GeoNameResolver,
    Geolocator,
    KeyValueStore,
    LatencyModel,
    RouteEngine,
)
from map_pins.config.models import (
    GeolocatorFixedModel,
    GeolocatorUnavailableModel,
    LatencyFixedModel,
    LatencyMeasuredModel,
    ResolverNominatimModel,
    ResolverStaticModel,
    RouteEngineOSRMModel,
    RouteEngineStraightLineModel,
    StoreJsonFileModel,
    StoreMemoryModel,
)
from map_pins.services.geocoding import NominatimResolver, StaticNameResolver
from map_pins.services.geolocation import FixedGeolocator, UnavailableGeolocator
from map_pins.services.latency import FixedLatency, MeasuredLatency
from map_pins.services.routing import OSRMRouteEngine, StraightLineRouteEngine
from map_pins.services.storage import JsonFileStore, MemoryStore

Factory = Callable[[Any], Any]

_registries: dict[str, dict[str, Factory]] = {
    "store": {},
    "resolver": {},
    "route_engine": {},
    "geolocator": {},
    "latency": {},
}


def register(section: str, kind: str):
    def deco(fn: Factory):
        _registries[section][kind] = fn
        return fn

    return deco


def _make(section: str, cfg):
    try:
        factory = _registries[section][cfg.kind]
    except KeyError:
        raise ValueError(f"Unknown {section} kind {cfg.kind!r}") from None
    return factory(cfg)


def make_store(cfg) -> KeyValueStore:
    return _make("store", cfg)


def make_resolver(cfg) -> GeoNameResolver:
    return _make("resolver", cfg)


def make_route_engine(cfg) -> RouteEngine:
    return _make("route_engine", cfg)


def make_geolocator(cfg) -> Geolocator:
    return _make("geolocator", cfg)


def make_latency(cfg) -> LatencyModel:
    return _make("latency", cfg)


# ------------------- Stores ---------------------------


@register("store", "memory")
def _make_memory(cfg: StoreMemoryModel):
    return MemoryStore(cfg.initial)


@register("store", "json_file")
def _make_json_file(cfg: StoreJsonFileModel):
    return JsonFileStore(cfg.path)


# ------------------- Name resolvers ---------------------------


@register("resolver", "static")
def _make_static(cfg: ResolverStaticModel):
    return StaticNameResolver([(e.lat, e.lng, e.name) for e in cfg.entries], cfg.fallback)


@register("resolver", "nominatim")
def _make_nominatim(cfg: ResolverNominatimModel):
    return NominatimResolver(cfg.base_url, timeout_s=cfg.timeout_s, user_agent=cfg.user_agent)


# --------------------- Route engines  ---------------------


@register("route_engine", "straight_line")
def _make_straight_line(cfg: RouteEngineStraightLineModel):
    return StraightLineRouteEngine(speed_mps=cfg.speed_mps, samples=cfg.samples)


@register("route_engine", "osrm")
def _make_osrm(cfg: RouteEngineOSRMModel):
    return OSRMRouteEngine(cfg.base_url, profile=cfg.profile, timeout_s=cfg.timeout_s)


# ---------------------- Geolocation / latency ----------------------------


@register("geolocator", "fixed")
def _make_fixed_geo(cfg: GeolocatorFixedModel):
    return FixedGeolocator(cfg.lat, cfg.lng)


@register("geolocator", "unavailable")
def _make_no_geo(cfg: GeolocatorUnavailableModel):
    return UnavailableGeolocator(cfg.reason)


@register("latency", "fixed")
def _make_fixed_latency(cfg: LatencyFixedModel):
    return FixedLatency(dict(cfg.seconds), default_s=cfg.default_s)


@register("latency", "measured")
def _make_measured_latency(cfg: LatencyMeasuredModel):
    return MeasuredLatency()
