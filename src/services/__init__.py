"""External service integrations for itinerary planning.

This package provides the clients and LangChain tool factories used by the
itinerary generation workflow:

- Google Places: Place resolution (text search) and the place lookup tool

Each service module exports:
    - create_*_client: Factory to create the API client
    - create_*_tool: Factory to create the LangChain tool from the client
    - Input schemas: Pydantic models for tool parameters

Example Usage:
    >>> from src.services.google_places import create_google_places_client, PlaceLookupAdapter
    >>> from src.core.config import ApiSettings
    >>>
    >>> settings = ApiSettings.from_env()
    >>> client = create_google_places_client(settings)
    >>> adapter = PlaceLookupAdapter(client)
"""

from src.services.google_places import (
    GooglePlaces,
    PlaceLookupAdapter,
    create_find_places_tool,
    create_google_places_client,
)

__all__ = [
    "GooglePlaces",
    "PlaceLookupAdapter",
    "create_find_places_tool",
    "create_google_places_client",
]
