# map_pins/app/wiring.py
from map_pins.app.controllers.map import MapController
from map_pins.app.controllers.routes import RouteSession
from map_pins.app.events import (
    DeleteClicked,
    ListItemClicked,
    LocationFound,
    LocationUnavailable,
    MapClicked,
    NameResolved,
    OverlayClicked,
    RouteFound,
    RoutingError,
    SessionStarted,
)
from map_pins.sim.kernel import Kernel


def wire(kernel: Kernel, *, controller: MapController, routes: RouteSession) -> None:
    k = kernel

    # startup
    k.on(SessionStarted, controller.on_session_started)  # load markers, ask for position
    k.on(LocationFound, controller.on_location_found)
    k.on(LocationUnavailable, controller.on_location_unavailable)

    # add
    k.on(MapClicked, controller.on_map_click)  # confirm + name lookup
    k.on(NameResolved, controller.on_name_resolved)  # persist + reconcile

    # route
    k.on(ListItemClicked, controller.on_list_item_click)
    k.on(OverlayClicked, controller.on_overlay_click)
    k.on(RouteFound, routes.on_route_found)  # drops stale request ids
    k.on(RouteFound, controller.on_route_settled)  # list highlight follows the panel
    k.on(RoutingError, routes.on_routing_error)
    k.on(RoutingError, controller.on_route_settled)

    # delete
    k.on(DeleteClicked, controller.on_delete_click)
