"""Traffic tool executors and the registry factory."""

from .catalog import TrafficTool, build_traffic_registry
from .search_place import SearchPlaceTool
from .routes import CalculateRoutesTool
from .traffic_flow import TrafficFlowTool, CongestionTier, classify_congestion
from .departure_times import (
    DepartureTimesTool,
    recommend_departure,
    offset_timeout_for,
    DEPARTURE_OFFSETS_MINUTES,
)
from .incidents import IncidentsTool, incident_type_name, severity_label, CLEAR_MESSAGE

__all__ = [
    "TrafficTool",
    "build_traffic_registry",
    "SearchPlaceTool",
    "CalculateRoutesTool",
    "TrafficFlowTool",
    "CongestionTier",
    "classify_congestion",
    "DepartureTimesTool",
    "recommend_departure",
    "offset_timeout_for",
    "DEPARTURE_OFFSETS_MINUTES",
    "IncidentsTool",
    "incident_type_name",
    "severity_label",
    "CLEAR_MESSAGE",
]
