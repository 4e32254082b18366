import asyncio
from datetime import datetime, timedelta, timezone
from typing import Annotated, Any, Callable, Dict, List, Optional, Sequence

from pydantic import Field

from yalla_traffic.core import ToolExecutionError, get_logger
from ..clients import TomTomClient
from ..models import Coordinate

logger = get_logger(__name__)

DEPARTURE_OFFSETS_MINUTES = (0, 30, 60, 120)

# Share of the tool timeout each departure offset may use.
OFFSET_TIMEOUT_SHARE = 0.8


def offset_timeout_for(tool_timeout: float) -> float:
    return tool_timeout * OFFSET_TIMEOUT_SHARE


DEFAULT_OFFSET_TIMEOUT = offset_timeout_for(10.0)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def offset_label(offset_minutes: int) -> str:
    return "Now" if offset_minutes == 0 else f"+{offset_minutes} min"


def recommend_departure(options: List[Dict[str, Any]]) -> Dict[str, Any]:
    """
    Pick the fastest departure and phrase the recommendation.

    ``options`` must be non-empty and ordered by offset. Marks ``is_best`` on
    every option in place; ties go to the earliest offset.

    Returns:
        ``recommendation`` text and ``time_saved_minutes`` versus leaving now
        (None when the "now" estimate is unavailable).
    """
    best = min(options, key=lambda option: option["duration_minutes"])
    for option in options:
        option["is_best"] = option is best

    now = next((option for option in options if option["offset_minutes"] == 0), None)
    if best is now:
        return {"recommendation": "Now is the best time to leave!", "time_saved_minutes": 0}

    if now is None:
        return {
            "recommendation": f"Leaving in {best['offset_minutes']} min is the fastest option found",
            "time_saved_minutes": None,
        }

    time_saved = now["duration_minutes"] - best["duration_minutes"]
    return {
        "recommendation": f"Wait {best['offset_minutes']} min to save {time_saved} minutes",
        "time_saved_minutes": time_saved,
    }


class DepartureTimesTool:
    """Compares live-traffic ETAs for several departure times."""

    def __init__(
        self,
        tomtom: TomTomClient,
        offsets: Sequence[int] = DEPARTURE_OFFSETS_MINUTES,
        clock: Optional[Callable[[], datetime]] = None,
        offset_timeout: float = DEFAULT_OFFSET_TIMEOUT,
    ) -> None:
        """
        Args:
            tomtom: Routing client.
            offsets: Departure offsets in minutes from now, "now" first.
            clock: Optional "now" source.
            offset_timeout: Seconds each offset may take before it is dropped.
        """
        self.tomtom = tomtom
        self.offsets = tuple(offsets)
        self.clock = clock or _utcnow
        self.offset_timeout = offset_timeout

    async def run(
        self,
        origin_lat: Annotated[float, Field(description="Origin latitude")],
        origin_lon: Annotated[float, Field(description="Origin longitude")],
        dest_lat: Annotated[float, Field(description="Destination latitude")],
        dest_lon: Annotated[float, Field(description="Destination longitude")],
    ) -> Dict[str, Any]:
        """Calculate optimal departure times by comparing ETAs at different times (now, +30min, +1hr, +2hr). Use this when user asks "when should I leave" or "best time to go"."""
        logger.info("Calculating departure times")

        origin = Coordinate(lat=origin_lat, lon=origin_lon)
        destination = Coordinate(lat=dest_lat, lon=dest_lon)
        now = self.clock()

        # Each offset is an independent best-effort computation; failures are dropped, not retried.
        outcomes = await asyncio.gather(
            *(
                asyncio.wait_for(self._estimate(origin, destination, now, offset), timeout=self.offset_timeout)
                for offset in self.offsets
            ),
            return_exceptions=True,
        )

        options: List[Dict[str, Any]] = []
        for offset, outcome in zip(self.offsets, outcomes):
            if isinstance(outcome, asyncio.TimeoutError):
                logger.warning(f"Departure time for +{offset}min timed out after {self.offset_timeout} seconds")
            elif isinstance(outcome, BaseException):
                logger.warning(f"Failed to get departure time for +{offset}min: {outcome!r}")
            elif outcome is not None:
                options.append(outcome)

        if not options:
            raise ToolExecutionError("Could not calculate departure times")

        summary = recommend_departure(options)
        return {"departure_times": options, **summary}

    async def _estimate(
        self, origin: Coordinate, destination: Coordinate, now: datetime, offset: int
    ) -> Optional[Dict[str, Any]]:
        depart_at = now + timedelta(minutes=offset)
        routes = await self.tomtom.calculate_route(origin, destination, depart_at=depart_at)
        if not routes:
            logger.warning(f"No route returned for +{offset}min")
            return None

        route = routes[0]
        return {
            "label": offset_label(offset),
            "offset_minutes": offset,
            "departure_time": depart_at.isoformat(),
            "duration_minutes": route.duration_minutes,
            "traffic_delay_minutes": route.traffic_delay_minutes,
        }
