from typing import Optional, Sequence

from langchain_core.language_models.chat_models import BaseChatModel

from src.core.agents_builder import build_chat_model, build_itinerary_generator
from src.core.assistants import suggest_destinations, summarize_activity_reviews
from src.core.config import ApiSettings
from src.core.schemas import DestinationSuggestions, GenerationReport, ReviewSummary, TripRequest
from src.services import GooglePlaces, create_google_places_client


class PlannerBundle:
    """Container for the itinerary generator and its dependencies.

    One bundle is shared by all requests. Nothing request-specific is stored
    on it, so concurrent planning calls stay independent.

    Attributes:
        settings: API configuration with external service credentials
        llm: Chat model driving generation and the auxiliary flows
        places_client: Google Places resolver shared by all requests
        generator: Itinerary generation engine
    """

    def __init__(
        self,
        settings: ApiSettings,
        *,
        llm: Optional[BaseChatModel] = None,
        places_client: Optional[GooglePlaces] = None,
    ) -> None:
        settings.apply_langsmith_tracing()

        self.settings = settings
        self.llm = llm or build_chat_model(settings)
        self.places_client = places_client or create_google_places_client(settings)
        self.generator = build_itinerary_generator(self.llm, self.places_client, settings)

    def __repr__(self) -> str:
        llm_name = getattr(self.llm, "model_name", None) or getattr(self.llm, "model", None) or type(self.llm).__name__
        return (
            f"PlannerBundle(\n"
            f"  llm='{llm_name}',\n"
            f"  max_tool_round_trips={self.generator.max_tool_round_trips},\n"
            f"  timeout_s={self.generator.timeout_s},\n"
            f"  places_configured={bool(self.settings.google_maps_api_key)}\n"
            f")"
        )

    async def close(self) -> None:
        await self.places_client.aclose()

    async def generate_itinerary(self, request: TripRequest) -> GenerationReport:
        """Run one atomic itinerary generation."""

        return await self.generator.generate_report(request)

    async def suggest_destinations(self, trip_description: str) -> DestinationSuggestions:
        return await suggest_destinations(self.llm, trip_description)

    async def summarize_reviews(self, activity_name: str, reviews: Sequence[str]) -> ReviewSummary:
        return await summarize_activity_reviews(self.llm, activity_name, reviews)
