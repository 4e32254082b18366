from typing import Annotated, Any, Dict

from pydantic import Field

from yalla_traffic.core import ToolExecutionError, get_logger
from ..clients import TomTomClient
from ..models import Coordinate

logger = get_logger(__name__)

MAX_ALTERNATIVES = 2


class CalculateRoutesTool:
    """Live-traffic route alternatives between two points."""

    def __init__(self, tomtom: TomTomClient) -> None:
        self.tomtom = tomtom

    async def run(
        self,
        origin_lat: Annotated[float, Field(description="Origin latitude")],
        origin_lon: Annotated[float, Field(description="Origin longitude")],
        dest_lat: Annotated[float, Field(description="Destination latitude")],
        dest_lon: Annotated[float, Field(description="Destination longitude")],
    ) -> Dict[str, Any]:
        """Calculate driving routes between two points. Returns multiple route options with traffic-aware ETAs, distances, and delay information."""
        logger.info(f"Calculating routes from {origin_lat},{origin_lon} to {dest_lat},{dest_lon}")

        routes = await self.tomtom.calculate_route(
            Coordinate(lat=origin_lat, lon=origin_lon),
            Coordinate(lat=dest_lat, lon=dest_lon),
            max_alternatives=MAX_ALTERNATIVES,
        )
        if not routes:
            raise ToolExecutionError("No routes found")

        formatted = [
            {
                "route_number": i,
                "duration_minutes": route.duration_minutes,
                "distance_km": route.distance_km,
                "traffic_delay_minutes": route.traffic_delay_minutes,
                "arrival_time": route.arrival_time,
            }
            for i, route in enumerate(routes[: MAX_ALTERNATIVES + 1], start=1)
        ]
        logger.info(f"Found {len(formatted)} routes")
        return {"routes": formatted}
