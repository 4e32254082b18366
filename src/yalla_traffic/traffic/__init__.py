"""Dubai traffic domain: upstream clients, tools, persona and the assistant facade."""

from .models import Coordinate, BoundingBox, RouteSummary, FlowSegment, Place, PlaceSuggestion
from .clients import TomTomClient, GooglePlacesClient
from .tools import TrafficTool, build_traffic_registry
from .prompt import YALLA_SYSTEM_PROMPT, YALLA_GREETING
from .assistant import TrafficAssistant, check_health, suggestions, parse_history

__all__ = [
    "Coordinate",
    "BoundingBox",
    "RouteSummary",
    "FlowSegment",
    "Place",
    "PlaceSuggestion",
    "TomTomClient",
    "GooglePlacesClient",
    "TrafficTool",
    "build_traffic_registry",
    "YALLA_SYSTEM_PROMPT",
    "YALLA_GREETING",
    "TrafficAssistant",
    "check_health",
    "suggestions",
    "parse_history",
]
