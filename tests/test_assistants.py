"""Tests for the destination suggestion and review summary flows."""
from __future__ import annotations

from typing import Any, Dict, List, Tuple, Type

import pytest

from src.core.assistants import suggest_destinations, summarize_activity_reviews
from src.core.errors import GenerationFailed
from src.core.prompts import no_reviews_instruction
from src.core.schemas import DestinationSuggestions, ReviewSummary, SuggestedDestination


class StructuredResponder:
    """Mimics the object returned by `llm.with_structured_output`."""

    def __init__(self, parent: "StubLLM", model_cls: Type[Any], response: Any):
        self._parent = parent
        self._model_cls = model_cls
        self._response = response

    async def ainvoke(self, prompt: str) -> Any:
        self._parent.calls.append((self._model_cls, prompt))
        if isinstance(self._response, Exception):
            raise self._response
        return self._response


class StubLLM:
    """Captures prompts and yields preconfigured structured responses."""

    def __init__(self) -> None:
        self.responses: Dict[Type[Any], Any] = {}
        self.calls: List[Tuple[Type[Any], str]] = []

    def set_response(self, model_cls: Type[Any], value: Any) -> None:
        self.responses[model_cls] = value

    def with_structured_output(self, model_cls: Type[Any]) -> StructuredResponder:
        try:
            value = self.responses[model_cls]
        except KeyError as exc:  # pragma: no cover - protects against missing test fixtures
            raise AssertionError(f"No stubbed response for {model_cls}") from exc
        return StructuredResponder(self, model_cls, value)


@pytest.fixture
def stub_llm() -> StubLLM:
    return StubLLM()


async def test_suggest_destinations_returns_structured_output(stub_llm: StubLLM):
    suggestions = DestinationSuggestions(
        destinations=[
            SuggestedDestination(name="Maldives", description="Atolls", reason="Quiet beaches"),
            SuggestedDestination(name="Algarve", description="Coastline", reason="Warm water"),
        ]
    )
    stub_llm.set_response(DestinationSuggestions, suggestions)

    result = await suggest_destinations(stub_llm, "  a relaxing beach vacation ")

    assert result == suggestions
    model_cls, prompt = stub_llm.calls[-1]
    assert model_cls is DestinationSuggestions
    assert "a relaxing beach vacation" in prompt


async def test_suggest_destinations_rejects_empty_description(stub_llm: StubLLM):
    with pytest.raises(ValueError):
        await suggest_destinations(stub_llm, "   ")
    assert stub_llm.calls == []


@pytest.mark.parametrize("response", [None, RuntimeError("rate limited")])
async def test_suggest_destinations_failures(stub_llm: StubLLM, response: Any):
    stub_llm.set_response(DestinationSuggestions, response)

    with pytest.raises(GenerationFailed):
        await suggest_destinations(stub_llm, "an adventurous mountain hike")


async def test_summarize_reviews_includes_reviews(stub_llm: StubLLM):
    stub_llm.set_response(ReviewSummary, ReviewSummary(summary="Loved for its art, crowded at noon."))

    result = await summarize_activity_reviews(stub_llm, "Louvre Museum", ["Stunning art", "  ", "Very crowded"])

    assert result.summary == "Loved for its art, crowded at noon."
    _, prompt = stub_llm.calls[-1]
    assert "Louvre Museum" in prompt
    assert "- Stunning art" in prompt
    assert "- Very crowded" in prompt


async def test_summarize_reviews_without_reviews(stub_llm: StubLLM):
    stub_llm.set_response(ReviewSummary, ReviewSummary(summary="No reviews yet."))

    await summarize_activity_reviews(stub_llm, "Café de Flore", [])

    _, prompt = stub_llm.calls[-1]
    assert no_reviews_instruction in prompt


async def test_summarize_reviews_provider_error(stub_llm: StubLLM):
    stub_llm.set_response(ReviewSummary, RuntimeError("provider down"))

    with pytest.raises(GenerationFailed):
        await summarize_activity_reviews(stub_llm, "Louvre Museum", ["Great"])
