from langchain_core.language_models.chat_models import BaseChatModel
from langchain_openai import ChatOpenAI
from langchain_xai import ChatXAI

from src.core.config import ApiSettings
from src.core.generator import ItineraryGenerator
from src.services.google_places import PlaceLookupAdapter, PlaceResolver

DEFAULT_MODELS = {
    "xai": "grok-4-fast-reasoning",
    "openai": "gpt-4o-mini",
}


def build_chat_model(settings: ApiSettings, *, temperature: float = 0.7) -> BaseChatModel:
    """Instantiate the chat model for the configured provider."""

    model = settings.llm_model or DEFAULT_MODELS[settings.llm_provider]
    if settings.llm_provider == "openai":
        return ChatOpenAI(
            model=model,
            temperature=temperature,
            api_key=settings.ensure("openai_api_key"),
        )
    return ChatXAI(
        model=model,
        temperature=temperature,
        api_key=settings.ensure("xai_api_key"),
    )


def build_itinerary_generator(
    llm: BaseChatModel,
    resolver: PlaceResolver,
    settings: ApiSettings,
) -> ItineraryGenerator:
    """Wire the place lookup adapter and the generator from settings."""

    return ItineraryGenerator(
        llm,
        PlaceLookupAdapter(resolver),
        max_tool_round_trips=settings.max_tool_round_trips,
        timeout_s=settings.generation_timeout_s,
    )
