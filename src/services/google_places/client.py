import logging
from typing import Any, Dict, List, Optional

import httpx
from pydantic import ValidationError

from src.core.config import ApiSettings
from src.core.errors import ResolverUpstreamError
from src.core.schemas import PlaceCandidate
from src.services.google_places.schemas import UPSTREAM_TYPES, PlaceResult, TextSearchResponse

logger = logging.getLogger(__name__)

MAX_CANDIDATES = 5
PHOTO_MAX_WIDTH = 400


def _humanise(place_type: str) -> str:
    return place_type.replace("_", " ")


def build_search_text(location: str, category: str, query: Optional[str] = None) -> str:
    """Combine query, category and location into one free-text search string."""

    term = _humanise(UPSTREAM_TYPES.get(category, category))
    if query and query.strip():
        return f"{query.strip()} {term} in {location}"
    return f"{term} in {location}"


def select_category_label(types: List[str], category: str) -> str:
    """Pick the category label for a result.

    Prefers the upstream type matching the requested category, then the first
    reported type, then the requested category itself.
    """

    wanted = _humanise(UPSTREAM_TYPES.get(category, category))
    labels = [_humanise(t) for t in types if t]
    if wanted in labels:
        return wanted
    if labels:
        return labels[0]
    return category


class GooglePlaces:
    """Thin async wrapper around the Google Places Text Search API.

    ``resolve`` is fail-soft: any upstream problem yields an empty list so a
    places outage only reduces how many activities carry place details.
    """

    def __init__(
        self,
        api_key: Optional[str],
        *,
        base_url: str = "https://maps.googleapis.com/maps/api/place",
        timeout_s: float = 10.0,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ) -> None:
        self.api_key = api_key
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            headers={"accept": "application/json"},
            timeout=httpx.Timeout(timeout_s, connect=5.0),
            transport=transport,
        )

    async def aclose(self) -> None:
        """Close the underlying HTTPX client."""

        await self._client.aclose()

    async def __aenter__(self) -> "GooglePlaces":
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        await self._client.aclose()

    def photo_url(self, photo_reference: str) -> str:
        """Build the image URL for a photo reference."""

        params = httpx.QueryParams(
            {"maxwidth": PHOTO_MAX_WIDTH, "photoreference": photo_reference, "key": self.api_key or ""}
        )
        return f"{self.base_url}/photo?{params}"

    async def _text_search(self, search_text: str) -> List[Dict[str, Any]]:
        """Run one text search and return the raw result records."""

        if not self.api_key:
            raise ResolverUpstreamError("Google Places API key is missing; set GOOGLE_MAPS_API_KEY")

        try:
            response = await self._client.get("/textsearch/json", params={"query": search_text, "key": self.api_key})
        except httpx.HTTPError as exc:
            raise ResolverUpstreamError(f"Transport error: {exc}") from exc

        if response.is_error:
            raise ResolverUpstreamError(
                f"Places request failed with status {response.status_code}: {response.text[:200]}"
            )

        try:
            payload = TextSearchResponse.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            raise ResolverUpstreamError(f"Unparsable places response: {exc}") from exc

        if payload.status == "ZERO_RESULTS":
            return []
        if payload.status != "OK":
            raise ResolverUpstreamError(
                f"Places API error: {payload.status} - {payload.error_message or 'No error message provided.'}"
            )
        return payload.results

    def _to_candidate(self, record: Dict[str, Any], category: str) -> Optional[PlaceCandidate]:
        try:
            result = PlaceResult.model_validate(record)
        except ValidationError as exc:
            logger.debug("Skipping malformed place record: %s", exc)
            return None

        latitude = longitude = None
        location = result.geometry.location if result.geometry else None
        if location and location.lat is not None and location.lng is not None:
            latitude, longitude = location.lat, location.lng

        image_url = self.photo_url(result.photos[0].photo_reference) if result.photos else None

        try:
            return PlaceCandidate(
                id=result.place_id,
                name=result.name,
                category=select_category_label(result.types, category),
                description=result.formatted_address or result.vicinity,
                latitude=latitude,
                longitude=longitude,
                imageUrl=image_url,
            )
        except ValidationError as exc:
            logger.debug("Skipping place record %s: %s", result.place_id, exc)
            return None

    async def resolve(
        self,
        location: str,
        category: str,
        query: Optional[str] = None,
    ) -> List[PlaceCandidate]:
        """Return up to five ranked candidates, or ``[]`` on any upstream failure."""

        search_text = build_search_text(location, category, query)
        logger.info("Searching places: %s", search_text)

        try:
            records = await self._text_search(search_text)
        except ResolverUpstreamError as exc:
            logger.warning("Place lookup for %r degraded to no results: %s", search_text, exc)
            return []

        candidates: List[PlaceCandidate] = []
        for record in records:
            if len(candidates) >= MAX_CANDIDATES:
                break
            if not isinstance(record, dict):
                continue
            candidate = self._to_candidate(record, category)
            if candidate is not None:
                candidates.append(candidate)
        return candidates


def create_google_places_client(settings: ApiSettings) -> GooglePlaces:
    """Instantiate the places client; a missing key is tolerated."""

    if not settings.google_maps_api_key:
        logger.warning("GOOGLE_MAPS_API_KEY is not set; place lookups will return no results")
    return GooglePlaces(settings.google_maps_api_key, timeout_s=settings.places_timeout_s)
