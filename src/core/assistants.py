"""Single-shot structured flows that sit beside itinerary generation."""
from __future__ import annotations

import logging
from typing import Sequence

from langchain_core.language_models.chat_models import BaseChatModel

from src.core.errors import GenerationFailed
from src.core.prompts import no_reviews_instruction, suggest_destinations_prompt, summarize_reviews_prompt
from src.core.schemas import DestinationSuggestions, ReviewSummary

logger = logging.getLogger(__name__)


async def suggest_destinations(llm: BaseChatModel, trip_description: str) -> DestinationSuggestions:
    """Suggest destinations matching a free-text trip description."""

    if not trip_description or not trip_description.strip():
        raise ValueError("trip_description must not be empty")

    structured_llm = llm.with_structured_output(DestinationSuggestions)
    prompt = suggest_destinations_prompt.format(trip_description=trip_description.strip())
    try:
        suggestions = await structured_llm.ainvoke(prompt)
    except Exception as exc:
        logger.error(f"Error invoking destination suggestions: {exc}")
        raise GenerationFailed(f"Destination suggestion failed: {exc}") from exc

    if suggestions is None:
        raise GenerationFailed("AI failed to suggest destinations.")
    logger.info("Suggested %s destination(s)", len(suggestions.destinations))
    return suggestions


async def summarize_activity_reviews(
    llm: BaseChatModel,
    activity_name: str,
    reviews: Sequence[str],
) -> ReviewSummary:
    """Summarise user reviews for an itinerary activity."""

    cleaned = [review.strip() for review in reviews if review and review.strip()]
    reviews_block = "\n".join(f"- {review}" for review in cleaned) if cleaned else no_reviews_instruction

    structured_llm = llm.with_structured_output(ReviewSummary)
    prompt = summarize_reviews_prompt.format(activity_name=activity_name, reviews_block=reviews_block)
    try:
        summary = await structured_llm.ainvoke(prompt)
    except Exception as exc:
        logger.error(f"Error invoking review summary for {activity_name}: {exc}")
        raise GenerationFailed(f"Review summary failed: {exc}") from exc

    if summary is None:
        raise GenerationFailed(f"AI failed to summarize reviews for {activity_name}.")
    return summary
