from typing import Any

from langchain_core.language_models.chat_models import BaseChatModel
from langgraph.graph import END, START, StateGraph

from src.core.nodes import (
    make_compose_request_node,
    make_finalize_node,
    make_model_node,
    make_route_after_model,
    make_tools_node,
)
from src.core.schemas import State, TripRequest
from src.services.google_places.tools import PlaceLookupAdapter, create_find_places_tool


def build_itinerary_graph(
    *,
    llm: BaseChatModel,
    adapter: PlaceLookupAdapter,
    max_tool_round_trips: int = 12,
) -> Any:
    """Wire the generation nodes into a compiled LangGraph state machine.

    compose_request -> model -> (tools -> model)* -> finalize
    """

    find_places_tool = create_find_places_tool(adapter)

    graph_builder = StateGraph(state_schema=State, context_schema=TripRequest)

    graph_builder.add_node("compose_request", make_compose_request_node())
    graph_builder.add_node("model", make_model_node(llm, [find_places_tool], max_tool_round_trips))
    graph_builder.add_node("tools", make_tools_node(adapter))
    graph_builder.add_node("finalize", make_finalize_node())

    graph_builder.add_edge(START, "compose_request")
    graph_builder.add_edge("compose_request", "model")
    graph_builder.add_conditional_edges(
        "model",
        make_route_after_model(max_tool_round_trips),
        {"tools": "tools", "finalize": "finalize"},
    )
    graph_builder.add_edge("tools", "model")
    graph_builder.add_edge("finalize", END)

    # No checkpointer: every generation is an independent, stateless run.
    return graph_builder.compile()
