"""Schemas for the Google Places Text Search upstream."""
from typing import Any, List, Optional

from pydantic import BaseModel, ConfigDict, Field

# Tool category -> Google Places type used in the search text and tie-break.
UPSTREAM_TYPES = {
    "restaurant": "restaurant",
    "attraction": "tourist_attraction",
    "cafe": "cafe",
}


class PlaceLocation(BaseModel):
    """Latitude/longitude pair reported by the upstream."""
    lat: Optional[float] = None
    lng: Optional[float] = None

    model_config = ConfigDict(extra="ignore")


class PlaceGeometry(BaseModel):
    """Geometry wrapper around the place location."""
    location: Optional[PlaceLocation] = None

    model_config = ConfigDict(extra="ignore")


class PlacePhoto(BaseModel):
    """Photo reference attached to a place result."""
    photo_reference: str
    height: Optional[int] = None
    width: Optional[int] = None
    html_attributions: List[str] = Field(default_factory=list)

    model_config = ConfigDict(extra="ignore")


class PlaceResult(BaseModel):
    """Single record from a text search response."""
    place_id: str
    name: str
    formatted_address: Optional[str] = None
    vicinity: Optional[str] = None
    types: List[str] = Field(default_factory=list)
    geometry: Optional[PlaceGeometry] = None
    photos: List[PlacePhoto] = Field(default_factory=list)
    rating: Optional[float] = None
    user_ratings_total: Optional[int] = None

    model_config = ConfigDict(extra="ignore")


class TextSearchResponse(BaseModel):
    """Envelope returned by ``/place/textsearch/json``."""
    status: str
    results: List[Any] = Field(default_factory=list)
    error_message: Optional[str] = None
    next_page_token: Optional[str] = None

    model_config = ConfigDict(extra="ignore")
