"""Client for the Google Places API (New): text search, autocomplete and details."""

from typing import Any, Dict, List, Optional

import httpx

from yalla_traffic.core import get_logger
from ..models import Coordinate, Place, PlaceSuggestion
from .base import DEFAULT_TIMEOUT, HttpCollaborator

logger = get_logger(__name__)

GOOGLE_PLACES_BASE_URL = "https://places.googleapis.com/v1"
DEFAULT_BIAS_RADIUS_M = 50_000
MAX_RESULT_COUNT = 20

_PLACE_FIELDS = (
    "id",
    "displayName",
    "formattedAddress",
    "location",
    "types",
    "primaryType",
    "shortFormattedAddress",
)


def _location_bias(near: Coordinate, radius_m: float) -> Dict[str, Any]:
    return {
        "circle": {
            "center": {"latitude": near.lat, "longitude": near.lon},
            "radius": float(radius_m),
        }
    }


class GooglePlacesClient(HttpCollaborator):
    """Async wrapper around the Places endpoints; authenticates with the X-Goog-Api-Key header."""

    service = "google_places"
    api_key_env = "GOOGLE_PLACES_API_KEY"
    auth_failure_message = "Google API authentication failed"

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = GOOGLE_PLACES_BASE_URL,
        timeout: float = DEFAULT_TIMEOUT,
        http_client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        super().__init__(api_key, base_url=base_url, timeout=timeout, http_client=http_client)

    def _authorize(self, api_key: str, params: Dict[str, Any], headers: Dict[str, str]) -> None:
        headers["X-Goog-Api-Key"] = api_key
        headers["Content-Type"] = "application/json"

    async def search_places(
        self,
        query: str,
        *,
        near: Optional[Coordinate] = None,
        radius_m: float = DEFAULT_BIAS_RADIUS_M,
        limit: int = MAX_RESULT_COUNT,
    ) -> List[Dict[str, Any]]:
        """
        Text search for places.

        Args:
            query: Free-text place description.
            near: Optional point to bias results towards.
            radius_m: Radius of the bias circle in meters.
            limit: Maximum number of results; Google caps this at 20.

        Returns:
            Raw place objects as returned by Google.
        """
        body: Dict[str, Any] = {
            "textQuery": query,
            "languageCode": "en",
            "maxResultCount": min(limit, MAX_RESULT_COUNT),
        }
        if near is not None:
            body["locationBias"] = _location_bias(near, radius_m)

        # Request only the fields we need (reduces cost)
        field_mask = ",".join(f"places.{field}" for field in _PLACE_FIELDS)
        data = await self._request(
            "POST", "/places:searchText", json=body, headers={"X-Goog-FieldMask": field_mask}
        )
        return (data.get("places") or []) if isinstance(data, dict) else []

    async def autocomplete(self, text: str, *, near: Optional[Coordinate] = None) -> List[Dict[str, Any]]:
        """Autocomplete suggestions for partially typed input."""
        body: Dict[str, Any] = {"input": text, "languageCode": "en"}
        if near is not None:
            body["locationBias"] = _location_bias(near, DEFAULT_BIAS_RADIUS_M)

        data = await self._request("POST", "/places:autocomplete", json=body)
        return (data.get("suggestions") or []) if isinstance(data, dict) else []

    async def place_details(self, place_id: str) -> Dict[str, Any]:
        data = await self._request(
            "GET", f"/places/{place_id}", headers={"X-Goog-FieldMask": ",".join(_PLACE_FIELDS)}
        )
        return data if isinstance(data, dict) else {}

    @staticmethod
    def transform_place(place: Dict[str, Any]) -> Place:
        """Normalize a Google place object."""
        location = place.get("location")
        types = place.get("types") or []
        return Place(
            id=place.get("id"),
            name=(place.get("displayName") or {}).get("text") or place.get("formattedAddress"),
            address=place.get("formattedAddress") or place.get("shortFormattedAddress"),
            position=Coordinate(lat=location["latitude"], lon=location["longitude"]) if location else None,
            category=place.get("primaryType") or (types[0] if types else "place"),
        )

    @staticmethod
    def transform_suggestion(suggestion: Dict[str, Any]) -> Optional[PlaceSuggestion]:
        """Normalize an autocomplete suggestion; None for non-place (query) predictions."""
        prediction = suggestion.get("placePrediction")
        if not prediction:
            return None

        structured = prediction.get("structuredFormat") or {}
        return PlaceSuggestion(
            id=prediction.get("placeId"),
            text=(prediction.get("text") or {}).get("text") or (structured.get("mainText") or {}).get("text"),
            secondary_text=(structured.get("secondaryText") or {}).get("text"),
            place_id=prediction.get("placeId"),
            types=prediction.get("types") or [],
        )
