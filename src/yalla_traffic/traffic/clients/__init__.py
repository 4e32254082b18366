"""Upstream data collaborators used by the traffic tools."""

from .base import HttpCollaborator, DEFAULT_TIMEOUT
from .tomtom import TomTomClient, TOMTOM_BASE_URL
from .google_places import GooglePlacesClient, GOOGLE_PLACES_BASE_URL

__all__ = [
    "HttpCollaborator",
    "DEFAULT_TIMEOUT",
    "TomTomClient",
    "TOMTOM_BASE_URL",
    "GooglePlacesClient",
    "GOOGLE_PLACES_BASE_URL",
]
