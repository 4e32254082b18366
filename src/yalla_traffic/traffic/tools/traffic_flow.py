from enum import Enum
from typing import Annotated, Any, Dict

from pydantic import Field

from yalla_traffic.core import ToolExecutionError, get_logger
from ..clients import TomTomClient
from ..models import Coordinate

logger = get_logger(__name__)


class CongestionTier(str, Enum):
    SEVERE = "severe"
    HEAVY = "heavy"
    MODERATE = "moderate"
    LIGHT = "light"
    CLEAR = "clear"


# (upper bound on current/free-flow speed ratio, tier), checked in order
_TIER_THRESHOLDS = (
    (0.3, CongestionTier.SEVERE),
    (0.5, CongestionTier.HEAVY),
    (0.7, CongestionTier.MODERATE),
    (0.9, CongestionTier.LIGHT),
)

ROAD_CLOSED = "closed"


def classify_congestion(current_speed: float, free_flow_speed: float) -> CongestionTier:
    """Congestion tier from the ratio of current to free-flow speed."""
    if free_flow_speed <= 0:
        raise ValueError("Free-flow speed must be positive")

    ratio = current_speed / free_flow_speed
    for bound, tier in _TIER_THRESHOLDS:
        if ratio < bound:
            return tier
    return CongestionTier.CLEAR


class TrafficFlowTool:
    """Point traffic-flow lookup."""

    def __init__(self, tomtom: TomTomClient) -> None:
        self.tomtom = tomtom

    async def run(
        self,
        lat: Annotated[float, Field(description="Latitude of the location")],
        lon: Annotated[float, Field(description="Longitude of the location")],
    ) -> Dict[str, Any]:
        """Get current traffic flow conditions at a specific location. Returns current speed, free flow speed, and traffic condition."""
        logger.info(f"Getting traffic flow at {lat},{lon}")

        segment = await self.tomtom.flow_segment(Coordinate(lat=lat, lon=lon))
        if segment is None:
            raise ToolExecutionError("Could not get traffic flow")
        if segment.free_flow_speed <= 0:
            raise ToolExecutionError("Traffic flow data has no free-flow speed")

        tier = classify_congestion(segment.current_speed, segment.free_flow_speed)
        return {
            "current_speed_kmh": round(segment.current_speed),
            "free_flow_speed_kmh": round(segment.free_flow_speed),
            "speed_ratio": round(segment.current_speed / segment.free_flow_speed, 2),
            "condition": ROAD_CLOSED if segment.road_closure else tier.value,
            "speed_condition": tier.value,
            "road_closed": segment.road_closure,
        }
