from types import MappingProxyType
from typing import Annotated, Any, Dict, Mapping, Optional

from pydantic import Field

from yalla_traffic.core import get_logger
from ..clients import TomTomClient
from ..models import BoundingBox, Coordinate, to_minutes

logger = get_logger(__name__)

MAX_INCIDENTS = 5
DEFAULT_RADIUS_KM = 5.0
CLEAR_MESSAGE = "No incidents reported in this area - roads are clear!"

INCIDENT_TYPES: Mapping[int, str] = MappingProxyType(
    {
        0: "Unknown",
        1: "Accident",
        2: "Fog",
        3: "Dangerous Conditions",
        4: "Rain",
        5: "Ice",
        6: "Jam",
        7: "Lane Closed",
        8: "Road Closed",
        9: "Road Works",
        10: "Wind",
        11: "Flooding",
        14: "Broken Down Vehicle",
    }
)

SEVERITY_LABELS: Mapping[int, str] = MappingProxyType(
    {
        0: "Unknown",
        1: "Minor",
        2: "Moderate",
        3: "Major",
        4: "Severe",
    }
)


def incident_type_name(icon_category: Optional[int]) -> str:
    return INCIDENT_TYPES.get(icon_category, "Incident") if icon_category is not None else "Incident"


def severity_label(magnitude: Optional[int]) -> str:
    return SEVERITY_LABELS.get(magnitude, "Unknown") if magnitude is not None else "Unknown"


def format_incident(incident: Dict[str, Any]) -> Dict[str, Any]:
    props = incident.get("properties") or {}
    events = props.get("events") or []
    delay = props.get("delay")
    return {
        "type": incident_type_name(props.get("iconCategory")),
        "description": (events[0].get("description") if events else None) or "Traffic incident",
        "from": props.get("from"),
        "to": props.get("to"),
        "delay_minutes": to_minutes(delay) if delay else None,
        "severity": severity_label(props.get("magnitudeOfDelay")),
    }


class IncidentsTool:
    """Traffic incidents around a point."""

    def __init__(self, tomtom: TomTomClient) -> None:
        self.tomtom = tomtom

    async def run(
        self,
        lat: Annotated[float, Field(description="Center latitude")],
        lon: Annotated[float, Field(description="Center longitude")],
        radius_km: Annotated[float, Field(description="Search radius in kilometers (default 5)")] = DEFAULT_RADIUS_KM,
    ) -> Dict[str, Any]:
        """Get traffic incidents (accidents, construction, road closures) near a location or along a route."""
        if radius_km <= 0:
            raise ValueError("Search radius must be positive")
        logger.info(f"Getting incidents near {lat},{lon} (radius {radius_km} km)")

        bbox = BoundingBox.around(Coordinate(lat=lat, lon=lon), radius_km)
        incidents = await self.tomtom.incident_details(bbox)

        if not incidents:
            return {"incidents": [], "total_count": 0, "message": CLEAR_MESSAGE}

        return {
            "incidents": [format_incident(incident) for incident in incidents[:MAX_INCIDENTS]],
            "total_count": len(incidents),
        }
