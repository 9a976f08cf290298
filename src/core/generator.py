"""Atomic itinerary generation on top of the LangGraph state machine."""
from __future__ import annotations

import asyncio
import logging
from typing import Any, Dict

from langchain_core.language_models.chat_models import BaseChatModel

from src.core.errors import GenerationFailed, GenerationTimeout
from src.core.graph_builder import build_itinerary_graph
from src.core.schemas import GenerationReport, Itinerary, State, TripRequest
from src.services.google_places.tools import PlaceLookupAdapter

logger = logging.getLogger(__name__)

DEFAULT_MAX_TOOL_ROUND_TRIPS = 12
DEFAULT_TIMEOUT_S = 120.0


class ItineraryGenerator:
    """Expose the model/tool exchange as one atomic ``generate`` call.

    The generator holds only immutable collaborators (the compiled graph and
    its limits), so concurrent ``generate`` calls share no mutable state.

    Attributes:
        graph: Compiled LangGraph workflow
        max_tool_round_trips: Upper bound on tool rounds per generation
        timeout_s: Wall-clock budget for a whole generation
    """

    def __init__(
        self,
        llm: BaseChatModel,
        adapter: PlaceLookupAdapter,
        *,
        max_tool_round_trips: int = DEFAULT_MAX_TOOL_ROUND_TRIPS,
        timeout_s: float = DEFAULT_TIMEOUT_S,
    ) -> None:
        if max_tool_round_trips < 0:
            raise ValueError("max_tool_round_trips must be non-negative")
        if timeout_s <= 0:
            raise ValueError("timeout_s must be positive")

        self.max_tool_round_trips = max_tool_round_trips
        self.timeout_s = timeout_s
        self.graph = build_itinerary_graph(
            llm=llm,
            adapter=adapter,
            max_tool_round_trips=max_tool_round_trips,
        )

    def _make_config(self) -> Dict[str, Any]:
        # compose + model + finalize, plus a tools/model pair per round trip
        return {"recursion_limit": 2 * self.max_tool_round_trips + 5}

    async def generate_report(self, request: TripRequest) -> GenerationReport:
        """Generate an itinerary and return it with the recorded anomalies.

        Raises:
            GenerationTimeout: The generation exceeded ``timeout_s``; any
                in-flight tool call is cancelled with it.
            GenerationFailed: The model produced no parsable payload or the
                provider call failed.
        """
        try:
            result = await asyncio.wait_for(
                self.graph.ainvoke(State(), context=request, config=self._make_config()),
                timeout=self.timeout_s,
            )
        except asyncio.TimeoutError as exc:
            logger.error("Itinerary generation for %s timed out after %ss", request.destination, self.timeout_s)
            raise GenerationTimeout(f"Itinerary generation timed out after {self.timeout_s:g}s") from exc
        except GenerationFailed:
            raise
        except Exception as exc:
            logger.error("Itinerary generation for %s failed: %s", request.destination, exc, exc_info=True)
            raise GenerationFailed(f"Itinerary generation failed: {exc}") from exc

        itinerary = result.get("itinerary")
        if result.get("phase") != "completed" or itinerary is None:
            raise GenerationFailed(result.get("error") or "AI failed to generate itinerary output.")

        return GenerationReport(
            itinerary=itinerary,
            anomalies=list(result.get("anomalies") or []),
            tool_round_trips=result.get("tool_round_trips", 0),
        )

    async def generate(self, request: TripRequest) -> Itinerary:
        """Generate an itinerary for the trip request."""

        report = await self.generate_report(request)
        return report.itinerary
