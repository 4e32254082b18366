"""Client for the TomTom routing, traffic flow and traffic incident APIs."""

from datetime import datetime
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from yalla_traffic.core import UpstreamError, get_logger
from ..models import BoundingBox, Coordinate, FlowSegment, RouteSummary
from .base import DEFAULT_TIMEOUT, HttpCollaborator

logger = get_logger(__name__)

TOMTOM_BASE_URL = "https://api.tomtom.com"

INCIDENT_FIELDS = (
    "{incidents{type,geometry{type,coordinates},"
    "properties{iconCategory,magnitudeOfDelay,events{description},from,to,delay,roadNumbers}}}"
)
INCIDENT_CATEGORY_FILTER = "0,1,2,3,4,5,6,7,8,9,10,11,14"


class TomTomClient(HttpCollaborator):
    """Thin async wrapper around the TomTom endpoints the traffic tools consume."""

    service = "tomtom"
    api_key_env = "TOMTOM_API_KEY"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = TOMTOM_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(api_key, base_url=base_url, timeout=timeout, http_client=http_client)

    def _authorize(self, api_key: str, params: Dict[str, Any], headers: Dict[str, str]) -> None:
        params["key"] = api_key

    async def calculate_route(
        self,
        origin: Coordinate,
        destination: Coordinate,
        *,
        depart_at: Optional[datetime] = None,
        max_alternatives: Optional[int] = None,
    ) -> List[RouteSummary]:
        """
        Calculate the fastest car routes between two points with live traffic.

        Args:
            origin: Start of the route.
            destination: End of the route.
            depart_at: Optional future departure time; defaults to now.
            max_alternatives: Number of alternatives besides the best route.

        Returns:
            One summary per route, best route first. Empty when TomTom found none.
        """
        params: Dict[str, Any] = {
            "routeType": "fastest",
            "traffic": "true",
            "travelMode": "car",
            "computeTravelTimeFor": "all",
        }
        if max_alternatives is not None:
            params["maxAlternatives"] = max_alternatives
            params["sectionType"] = "traffic"
        if depart_at is not None:
            params["departAt"] = depart_at.isoformat()

        data = await self._request(
            "GET",
            f"/routing/1/calculateRoute/{origin.as_query()}:{destination.as_query()}/json",
            params=params,
        )

        routes = (data.get("routes") or []) if isinstance(data, dict) else []
        try:
            return [RouteSummary.model_validate(route["summary"]) for route in routes]
        except (KeyError, TypeError, ValidationError) as exc:
            logger.error(f"Unexpected TomTom route payload: {exc}")
            raise UpstreamError("Malformed route data from tomtom", service=self.service) from exc

    async def flow_segment(self, point: Coordinate) -> Optional[FlowSegment]:
        """Current vs free-flow speed on the road segment nearest to ``point``, in km/h."""
        data = await self._request(
            "GET",
            "/traffic/services/4/flowSegmentData/relative0/10/json",
            params={"point": point.as_query(), "unit": "KMPH"},
        )

        segment = data.get("flowSegmentData") if isinstance(data, dict) else None
        if not segment:
            return None
        try:
            return FlowSegment.model_validate(segment)
        except ValidationError as exc:
            logger.error(f"Unexpected TomTom flow payload: {exc}")
            raise UpstreamError("Malformed traffic flow data from tomtom", service=self.service) from exc

    async def incident_details(self, bbox: BoundingBox, language: str = "en-GB") -> List[Dict[str, Any]]:
        """Raw incidents currently active inside ``bbox``."""
        data = await self._request(
            "GET",
            "/traffic/services/5/incidentDetails",
            params={
                "bbox": bbox.as_query(),
                "fields": INCIDENT_FIELDS,
                "language": language,
                "categoryFilter": INCIDENT_CATEGORY_FILTER,
                "timeValidityFilter": "present",
            },
        )

        incidents = data.get("incidents") if isinstance(data, dict) else None
        if incidents is None:
            return []
        if not isinstance(incidents, list):
            raise UpstreamError("Malformed incident data from tomtom", service=self.service)
        return incidents
