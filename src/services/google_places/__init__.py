"""Google Places integration.

This module provides the place resolver and the place lookup tool that the
itinerary generation engine binds to the language model.

Public API:
    - GooglePlaces: Async, fail-soft client for the Places Text Search API
    - create_google_places_client: Factory building the client from settings
    - PlaceLookupAdapter: Validating, error-absorbing wrapper around a resolver
    - create_find_places_tool: Factory building the LangChain tool
"""
from src.services.google_places.client import (
    MAX_CANDIDATES,
    GooglePlaces,
    build_search_text,
    create_google_places_client,
    select_category_label,
)
from src.services.google_places.tools import (
    FIND_PLACES_TOOL_NAME,
    PlaceLookupAdapter,
    PlaceResolver,
    create_find_places_tool,
    serialise_candidates,
)

__all__ = [
    "MAX_CANDIDATES",
    "GooglePlaces",
    "build_search_text",
    "create_google_places_client",
    "select_category_label",
    "FIND_PLACES_TOOL_NAME",
    "PlaceLookupAdapter",
    "PlaceResolver",
    "create_find_places_tool",
    "serialise_candidates",
]
