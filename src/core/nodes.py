"""LangGraph nodes for the itinerary generation state machine."""
from __future__ import annotations

import asyncio
import json
import logging
from typing import Any, Callable, Dict, List, Literal, Sequence

from langchain_core.language_models.chat_models import BaseChatModel
from langchain_core.messages import AIMessage, BaseMessage, HumanMessage, ToolMessage
from langchain_core.tools import BaseTool
from langgraph.runtime import Runtime

from src.core.errors import ToolContractViolation
from src.core.post_processing import extract_json_payload, index_places, normalize_itinerary
from src.core.prompts import itinerary_prompt, tool_budget_exhausted_prompt
from src.core.schemas import Itinerary, PlaceCandidate, State, TripRequest
from src.core.types import PLACE_CATEGORIES
from src.services.google_places.tools import (
    FIND_PLACES_TOOL_NAME,
    PlaceLookupAdapter,
    serialise_candidates,
)

logger = logging.getLogger(__name__)


def message_text(message: BaseMessage) -> str | None:
    """Flatten message content (plain, dict, or chunk list) into text."""

    content = message.content
    if isinstance(content, str):
        return content
    if isinstance(content, dict):
        return json.dumps(content)
    if isinstance(content, list):
        text_chunks: List[str] = []
        for chunk in content:
            if isinstance(chunk, dict) and chunk.get("type") == "text":
                text_chunks.append(chunk.get("text", ""))
            elif isinstance(chunk, str):
                text_chunks.append(chunk)
        return "\n".join(text_chunks) if text_chunks else None
    if content is not None:
        return str(content)
    return None


def render_itinerary_prompt(request: TripRequest) -> str:
    """Render the policy prompt for a trip request."""

    return itinerary_prompt.format(
        destination=request.destination,
        start_date=request.startDate.isoformat(),
        end_date=request.endDate.isoformat(),
        days_number=request.days_number,
        number_of_people=request.numberOfPeople,
        budget=f"{request.budget:g}",
        preferences=request.preferences or "No specific preferences",
        tool_name=FIND_PLACES_TOOL_NAME,
        output_schema=json.dumps(Itinerary.model_json_schema(), indent=2),
    )


def make_compose_request_node():
    """Return the entry node that turns the trip request into the first message."""

    async def node(state: State, runtime: Runtime[TripRequest]) -> Dict[str, Any]:
        request = runtime.context
        logger.info(
            "Composing itinerary request for %s (%s to %s, %s people)",
            request.destination,
            request.startDate,
            request.endDate,
            request.numberOfPeople,
        )
        return {
            "messages": [HumanMessage(content=render_itinerary_prompt(request), name="trip_request")],
            "phase": "requested",
        }

    return node


def make_model_node(llm: BaseChatModel, tools: Sequence[BaseTool], max_tool_round_trips: int):
    """Return the node that advances generation by one model turn.

    While the tool budget lasts the model sees the place lookup tool; after
    that it is invoked without tools and asked to finish.
    """

    llm_with_tools = llm.bind_tools(list(tools))

    async def node(state: State) -> Dict[str, Any]:
        if state.tool_round_trips >= max_tool_round_trips:
            logger.info("Tool budget of %s round trips exhausted; requesting final answer", max_tool_round_trips)
            response = await llm.ainvoke(
                [*state.messages, HumanMessage(content=tool_budget_exhausted_prompt)]
            )
        else:
            response = await llm_with_tools.ainvoke(state.messages)

        update: Dict[str, Any] = {"messages": [response]}
        if getattr(response, "tool_calls", None) and state.tool_round_trips < max_tool_round_trips:
            logger.debug("Model requested %s tool call(s)", len(response.tool_calls))
            update["phase"] = "tool_call_pending"
        return update

    return node


def make_route_after_model(max_tool_round_trips: int) -> Callable[[State], Literal["tools", "finalize"]]:
    """Route to the tools node while calls are pending and budget remains."""

    def route(state: State) -> Literal["tools", "finalize"]:
        last = state.messages[-1] if state.messages else None
        if (
            isinstance(last, AIMessage)
            and last.tool_calls
            and state.tool_round_trips < max_tool_round_trips
        ):
            return "tools"
        return "finalize"

    return route


def make_tools_node(adapter: PlaceLookupAdapter):
    """Return the node executing every tool call of the last model turn."""

    async def run_call(call: Dict[str, Any]) -> tuple[ToolMessage, List[PlaceCandidate]]:
        call_id = call.get("id") or ""
        name = call.get("name")
        if name != FIND_PLACES_TOOL_NAME:
            logger.warning("Model called unknown tool %r", name)
            return (
                ToolMessage(
                    content=f"Error: unknown tool {name!r}. Only {FIND_PLACES_TOOL_NAME} is available.",
                    tool_call_id=call_id,
                    name=str(name),
                    status="error",
                ),
                [],
            )
        try:
            candidates = await adapter.lookup(call.get("args") or {})
        except ToolContractViolation as exc:
            logger.warning("Rejected %s call: %s", FIND_PLACES_TOOL_NAME, exc)
            return (
                ToolMessage(
                    content=f"Error: {exc}. category must be one of {', '.join(PLACE_CATEGORIES)}.",
                    tool_call_id=call_id,
                    name=FIND_PLACES_TOOL_NAME,
                    status="error",
                ),
                [],
            )
        logger.info("%s returned %s candidate(s)", FIND_PLACES_TOOL_NAME, len(candidates))
        return (
            ToolMessage(
                content=serialise_candidates(candidates),
                tool_call_id=call_id,
                name=FIND_PLACES_TOOL_NAME,
            ),
            candidates,
        )

    async def node(state: State) -> Dict[str, Any]:
        last = state.messages[-1]
        tool_calls = getattr(last, "tool_calls", None) or []
        results = await asyncio.gather(*(run_call(call) for call in tool_calls))

        found: List[PlaceCandidate] = []
        for _, candidates in results:
            found.extend(candidates)

        return {
            "messages": [message for message, _ in results],
            "found_places": found,
            "tool_round_trips": state.tool_round_trips + 1,
            "phase": "tool_result_received",
        }

    return node


def make_finalize_node():
    """Return the terminal node that parses and normalises the model answer."""

    async def node(state: State, runtime: Runtime[TripRequest]) -> Dict[str, Any]:
        last = state.messages[-1] if state.messages else None
        raw_output = message_text(last) if isinstance(last, AIMessage) else None
        payload = extract_json_payload(raw_output)

        if payload is None:
            logger.error("Model produced no parsable itinerary payload")
            logger.debug("Raw model output: %s", raw_output)
            return {"phase": "failed", "error": "Model response contained no parsable itinerary JSON."}

        itinerary, anomalies = normalize_itinerary(
            payload,
            request=runtime.context,
            known_places=index_places(state.found_places),
        )
        logger.info(
            "Itinerary %r generated with %s day(s) after %s tool round trip(s)",
            itinerary.itineraryTitle,
            len(itinerary.structuredItinerary),
            state.tool_round_trips,
        )
        return {"phase": "completed", "itinerary": itinerary, "anomalies": anomalies}

    return node
