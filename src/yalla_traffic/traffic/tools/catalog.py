"""The closed set of traffic tools and the registry that exposes them to the model."""

from datetime import datetime
from enum import Enum
from typing import Callable, Dict, Optional

from yalla_traffic.core import ToolRegistry, ToolRegistrationError, get_logger
from ..clients import GooglePlacesClient, TomTomClient
from .departure_times import DEFAULT_OFFSET_TIMEOUT, DepartureTimesTool
from .incidents import IncidentsTool
from .routes import CalculateRoutesTool
from .search_place import SearchPlaceTool
from .traffic_flow import TrafficFlowTool

logger = get_logger(__name__)


class TrafficTool(str, Enum):
    SEARCH_PLACE = "search_place"
    CALCULATE_ROUTES = "calculate_routes"
    GET_TRAFFIC_FLOW = "get_traffic_flow"
    GET_DEPARTURE_TIMES = "get_departure_times"
    GET_INCIDENTS = "get_incidents"


def build_traffic_registry(
    tomtom: TomTomClient,
    places: GooglePlacesClient,
    clock: Optional[Callable[[], datetime]] = None,
    offset_timeout: float = DEFAULT_OFFSET_TIMEOUT,
) -> ToolRegistry:
    """
    Build the frozen registry holding one executor per :class:`TrafficTool`.

    Args:
        tomtom: Client for routing, flow and incident data.
        places: Client for place search.
        clock: Optional "now" source for departure-time comparisons.
        offset_timeout: Seconds each departure offset may take; keep it below the tool timeout.

    Returns:
        A frozen :class:`ToolRegistry`.

    Raises:
        ToolRegistrationError: If the registered names do not match :class:`TrafficTool`.
    """
    executors: Dict[TrafficTool, Callable] = {
        TrafficTool.SEARCH_PLACE: SearchPlaceTool(places).run,
        TrafficTool.CALCULATE_ROUTES: CalculateRoutesTool(tomtom).run,
        TrafficTool.GET_TRAFFIC_FLOW: TrafficFlowTool(tomtom).run,
        TrafficTool.GET_DEPARTURE_TIMES: DepartureTimesTool(tomtom, clock=clock, offset_timeout=offset_timeout).run,
        TrafficTool.GET_INCIDENTS: IncidentsTool(tomtom).run,
    }

    missing = set(TrafficTool) - set(executors)
    if missing:
        raise ToolRegistrationError(f"No executor bound for: {', '.join(sorted(t.value for t in missing))}")

    registry = ToolRegistry()
    for tool, func in executors.items():
        registry.register(tool.value, func=func)

    logger.info(f"Built traffic registry with {len(registry)} tools.")
    return registry.freeze()
