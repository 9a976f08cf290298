import json
import logging
from typing import Any, List, Mapping, Optional, Protocol

from langchain_core.tools import StructuredTool
from pydantic import ValidationError

from src.core.errors import ToolContractViolation
from src.core.schemas import FindPlacesInput, PlaceCandidate

logger = logging.getLogger(__name__)

FIND_PLACES_TOOL_NAME = "find_places"
FIND_PLACES_TOOL_DESCRIPTION = (
    "Fetches real-time suggestions for places like restaurants, tourist attractions, or cafes "
    "in a given location. Returns up to 5 ranked places with id, name, category, address, "
    "coordinates and an image URL when available. Use this to find specific establishments to "
    "include in the itinerary. Always use the exact name returned by this tool when referring "
    "to the place in the itinerary. Input: location (required), category "
    "(restaurant/attraction/cafe, required), query (optional)."
)


class PlaceResolver(Protocol):
    async def resolve(
        self, location: str, category: str, query: Optional[str] = None
    ) -> List[PlaceCandidate]: ...


class PlaceLookupAdapter:
    """Boundary between the generation engine and the place resolver.

    Arguments are checked against ``FindPlacesInput`` before the resolver is
    touched; resolver exceptions never cross this boundary.
    """

    def __init__(self, resolver: PlaceResolver) -> None:
        self._resolver = resolver

    @staticmethod
    def validate(arguments: Any) -> FindPlacesInput:
        """Check raw tool arguments against the tool schema."""

        if not isinstance(arguments, Mapping):
            raise ToolContractViolation(f"{FIND_PLACES_TOOL_NAME} arguments must be an object")
        try:
            return FindPlacesInput.model_validate(dict(arguments))
        except ValidationError as exc:
            raise ToolContractViolation(f"Invalid {FIND_PLACES_TOOL_NAME} arguments: {exc}") from exc

    async def find_places(
        self,
        location: str,
        category: str,
        query: Optional[str] = None,
    ) -> List[PlaceCandidate]:
        return await self.lookup({"location": location, "category": category, "query": query})

    async def lookup(self, arguments: Mapping[str, Any]) -> List[PlaceCandidate]:
        """Validate the lookup, then return the resolver's candidates or ``[]``."""

        lookup = self.validate(arguments)
        try:
            return list(await self._resolver.resolve(lookup.location, lookup.category, lookup.query))
        except Exception as exc:
            logger.error("Place resolver failed for %s/%s: %s", lookup.location, lookup.category, exc)
            return []


def serialise_candidates(candidates: List[PlaceCandidate]) -> str:
    """Render candidates as the JSON text handed back to the model."""

    return json.dumps([candidate.model_dump(exclude_none=True) for candidate in candidates], ensure_ascii=False)


def create_find_places_tool(adapter: PlaceLookupAdapter) -> StructuredTool:
    """Expose the adapter as the LangChain tool bound to the chat model."""

    async def find_places(**kwargs: Any) -> str:
        return serialise_candidates(await adapter.lookup(kwargs))

    return StructuredTool.from_function(
        coroutine=find_places,
        name=FIND_PLACES_TOOL_NAME,
        description=FIND_PLACES_TOOL_DESCRIPTION,
        args_schema=FindPlacesInput,
    )
