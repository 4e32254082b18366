from typing import Annotated, Any, Dict, Optional

from pydantic import Field

from yalla_traffic.core import ToolExecutionError, get_logger
from ..clients import GooglePlacesClient
from ..models import Coordinate

logger = get_logger(__name__)

MAX_PLACES = 3
BIAS_RADIUS_M = 50_000


class SearchPlaceTool:
    """Resolves a free-text place description to candidate locations."""

    def __init__(self, places: GooglePlacesClient) -> None:
        self.places = places

    async def run(
        self,
        query: Annotated[
            str, Field(description='The place name to search for (e.g. "Dubai Mall", "DIFC", "Marina Mall")')
        ],
        near_lat: Annotated[
            Optional[float], Field(description="Optional latitude to bias search results near this location")
        ] = None,
        near_lon: Annotated[
            Optional[float], Field(description="Optional longitude to bias search results near this location")
        ] = None,
    ) -> Dict[str, Any]:
        """Search for a place by name and get its coordinates. Use this when the user mentions a destination like "Dubai Mall", "DIFC", "Marina Mall", etc."""
        logger.info(f"Searching for place: {query}")

        near = None
        if near_lat is not None and near_lon is not None:
            near = Coordinate(lat=near_lat, lon=near_lon)

        results = await self.places.search_places(query, near=near, radius_m=BIAS_RADIUS_M)
        if not results:
            raise ToolExecutionError(f"No places found for '{query}'")

        places = [self.places.transform_place(p).model_dump() for p in results[:MAX_PLACES]]
        logger.info(f"Found {len(places)} places for: {query}")
        return {"places": places, "query": query}
