"""Normalized shapes of the data exchanged with the traffic and places providers."""

import math
from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

KM_PER_DEGREE_LAT = 111.0


def to_minutes(seconds: float) -> int:
    """Seconds to whole minutes, halves rounded up."""
    return math.floor(seconds / 60 + 0.5)


class Coordinate(BaseModel):
    model_config = ConfigDict(frozen=True)

    lat: float
    lon: float

    def as_query(self) -> str:
        return f"{self.lat},{self.lon}"


class BoundingBox(BaseModel):
    """Axis-aligned box in degrees."""

    model_config = ConfigDict(frozen=True)

    min_lat: float
    min_lon: float
    max_lat: float
    max_lon: float

    @classmethod
    def around(cls, center: Coordinate, radius_km: float) -> "BoundingBox":
        """Approximate box around ``center``: 1 degree of latitude is ~111 km,
        a degree of longitude shrinks with cos(latitude)."""
        lat_delta = radius_km / KM_PER_DEGREE_LAT
        lon_delta = radius_km / (KM_PER_DEGREE_LAT * math.cos(math.radians(center.lat)))
        return cls(
            min_lat=center.lat - lat_delta,
            min_lon=center.lon - lon_delta,
            max_lat=center.lat + lat_delta,
            max_lon=center.lon + lon_delta,
        )

    def as_query(self) -> str:
        """TomTom order: minLon,minLat,maxLon,maxLat."""
        return f"{self.min_lon},{self.min_lat},{self.max_lon},{self.max_lat}"


class RouteSummary(BaseModel):
    """Summary block of a TomTom route."""

    model_config = ConfigDict(populate_by_name=True)

    length_in_meters: float = Field(alias="lengthInMeters")
    travel_time_in_seconds: float = Field(alias="travelTimeInSeconds")
    traffic_delay_in_seconds: Optional[float] = Field(default=0, alias="trafficDelayInSeconds")
    departure_time: Optional[str] = Field(default=None, alias="departureTime")
    arrival_time: Optional[str] = Field(default=None, alias="arrivalTime")

    @property
    def duration_minutes(self) -> int:
        return to_minutes(self.travel_time_in_seconds)

    @property
    def traffic_delay_minutes(self) -> int:
        return to_minutes(self.traffic_delay_in_seconds or 0)

    @property
    def distance_km(self) -> float:
        return round(self.length_in_meters / 1000, 1)


class FlowSegment(BaseModel):
    """Traffic flow reading for the road segment closest to a point."""

    model_config = ConfigDict(populate_by_name=True)

    current_speed: float = Field(alias="currentSpeed")
    free_flow_speed: float = Field(alias="freeFlowSpeed")
    current_travel_time: Optional[float] = Field(default=None, alias="currentTravelTime")
    free_flow_travel_time: Optional[float] = Field(default=None, alias="freeFlowTravelTime")
    confidence: Optional[float] = None
    road_closure: bool = Field(default=False, alias="roadClosure")


class Place(BaseModel):
    id: Optional[str] = None
    name: Optional[str] = None
    address: Optional[str] = None
    position: Optional[Coordinate] = None
    category: str = "place"
    type: str = "POI"
    source: str = "google"


class PlaceSuggestion(BaseModel):
    id: Optional[str] = None
    text: Optional[str] = None
    secondary_text: Optional[str] = None
    place_id: Optional[str] = None
    types: List[str] = Field(default_factory=list)
