"""Pydantic data models for the itinerary generation pipeline.

This module contains the trip request, the output contract the language model
must satisfy, and the LangGraph state that flows through the generation
workflow. Contract models use the same camelCase field names the model is
asked to emit, so a validated payload can be returned to callers verbatim.

Key model categories:
- TripRequest: Immutable trip parameters supplied by the caller
- PlaceCandidate: A real-world place returned by the place resolver
- Activity / DayPlan / Itinerary: The structured output contract
- GenerationReport: Itinerary plus the anomalies recorded while producing it
- State: LangGraph workflow state for one generation call
"""
from __future__ import annotations

from datetime import date, timedelta
from typing import Annotated, List, Literal, Optional

from langchain_core.messages import AnyMessage
from langgraph.graph.message import add_messages
from pydantic import BaseModel, ConfigDict, Field, computed_field, model_validator

from src.core.reducer import merge_places
from src.core.types import Lat, Lon, NonEmptyStr, NonNegMoney, PlaceCategory

DEFAULT_ITINERARY_TITLE = "Generated Itinerary"


class TripRequest(BaseModel):
    """Immutable parameters describing the trip being planned."""

    destination: NonEmptyStr = Field(description="The destination for the trip, e.g. 'Paris, France'")
    startDate: date = Field(description="First day of the trip (YYYY-MM-DD)")
    endDate: date = Field(description="Last day of the trip (YYYY-MM-DD)")
    numberOfPeople: int = Field(gt=0, description="Number of people on the trip")
    budget: NonNegMoney = Field(description="Total budget for the trip")
    preferences: str = Field(default="", description="Free-text preferences (attractions, food, pace)")

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_dates(self) -> "TripRequest":
        if self.startDate > self.endDate:
            raise ValueError("startDate must be before or equal to endDate")
        return self

    @computed_field(return_type=int)
    @property
    def days_number(self) -> int:
        return (self.endDate - self.startDate).days + 1

    def trip_dates(self) -> List[date]:
        """Return every calendar date spanned by the trip, in order."""

        return [self.startDate + timedelta(days=offset) for offset in range(self.days_number)]


class PlaceCandidate(BaseModel):
    """A single place record produced by the place resolver.

    Attributes:
        id: Stable identifier from the upstream (e.g. a Google Place ID)
        name: Display name of the place
        category: Human-readable category label (e.g. "restaurant", "museum")
        description: Address or vicinity text
        latitude/longitude: Coordinates; both present or both absent
        imageUrl: URL or opaque handle for a representative photo
    """

    id: NonEmptyStr
    name: NonEmptyStr
    category: NonEmptyStr
    description: Optional[str] = None
    latitude: Optional[Lat] = None
    longitude: Optional[Lon] = None
    imageUrl: Optional[str] = None

    model_config = ConfigDict(extra="forbid", frozen=True)

    @model_validator(mode="after")
    def validate_coordinates(self) -> "PlaceCandidate":
        if (self.latitude is None) != (self.longitude is None):
            raise ValueError("latitude and longitude must be provided together")
        return self


class FindPlacesInput(BaseModel):
    """Arguments accepted by the place lookup tool."""

    location: NonEmptyStr = Field(description='The city and country, e.g. "Paris, France"')
    category: PlaceCategory = Field(description="The type of place to search for")
    query: Optional[str] = Field(
        default=None,
        description='A specific query for the place, e.g. "pizza", "museum of history", "coffee shop with Wi-Fi"',
    )

    model_config = ConfigDict(extra="forbid")


class Activity(BaseModel):
    """A single activity or event in the itinerary."""

    id: NonEmptyStr = Field(description="Unique id within the itinerary, e.g. 'day1-activity2'")
    time: Optional[str] = Field(default=None, description="Suggested time, e.g. 'Morning' or '1:00 PM'")
    description: NonEmptyStr = Field(description="Engaging description of the activity")
    placeDetails: Optional[PlaceCandidate] = Field(
        default=None, description="Details of the place found with the place lookup tool"
    )
    notes: Optional[str] = Field(default=None, description="Tips, booking info or opening hours")

    model_config = ConfigDict(extra="forbid", frozen=True)


class DayPlan(BaseModel):
    """The itinerary for a single day."""

    day: int = Field(ge=1, description="1-based day number")
    date: Optional[str] = Field(default=None, description="Calendar date for the day (YYYY-MM-DD)")
    title: Optional[str] = Field(default=None, description="Short title for the day")
    summary: Optional[str] = Field(default=None, description="One or two sentence summary")
    activities: List[Activity] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid", frozen=True)


class Itinerary(BaseModel):
    """Complete trip plan returned to the caller."""

    itineraryTitle: NonEmptyStr = Field(description="Short, catchy title for the whole trip")
    structuredItinerary: List[DayPlan] = Field(
        default_factory=list, description="One entry per day, in itinerary order"
    )

    model_config = ConfigDict(extra="forbid", frozen=True)


class GenerationReport(BaseModel):
    """Itinerary together with the observability data of its generation."""

    itinerary: Itinerary
    anomalies: List[str] = Field(default_factory=list)
    tool_round_trips: int = Field(default=0, ge=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @computed_field(return_type=bool)
    @property
    def degraded(self) -> bool:
        return bool(self.anomalies)


class SuggestedDestination(BaseModel):
    """A destination proposed for a free-text trip description."""

    name: str = Field(description="The name of the destination")
    description: str = Field(description="A brief description of the destination")
    reason: str = Field(description="Why this destination suits the trip description")


class DestinationSuggestions(BaseModel):
    """Structured output of the destination suggestion flow."""

    destinations: List[SuggestedDestination] = Field(default_factory=list)


class ReviewSummary(BaseModel):
    """Structured output of the review summarisation flow."""

    summary: str = Field(description="A summary of recent user reviews and ratings for the activity")


GenerationPhase = Literal[
    "requested",
    "tool_call_pending",
    "tool_result_received",
    "completed",
    "failed",
]


class State(BaseModel):
    """LangGraph state for a single itinerary generation.

    The phase field makes the model/tool exchange an explicit state machine:

    1. requested: the policy prompt has been composed
    2. tool_call_pending: the model asked for one or more place lookups
    3. tool_result_received: lookups answered, model resumes generation
    4. completed / failed: terminal, set by the finalize node

    Attributes:
        messages: Conversation with the model, including tool messages
        phase: Current state machine phase
        tool_round_trips: Number of tool rounds executed so far
        found_places: Every candidate returned by the tool during this call
        itinerary: Normalised itinerary (completed phase only)
        anomalies: Contract deviations repaired by the normaliser
        error: Reason for the failed phase
    """

    messages: Annotated[List[AnyMessage], add_messages] = Field(default_factory=list)
    phase: GenerationPhase = "requested"
    tool_round_trips: int = 0
    found_places: Annotated[List[PlaceCandidate], merge_places] = Field(default_factory=list)
    itinerary: Optional[Itinerary] = None
    anomalies: List[str] = Field(default_factory=list)
    error: Optional[str] = None

    model_config = ConfigDict(extra="forbid")


__all__ = [
    "DEFAULT_ITINERARY_TITLE",
    "TripRequest",
    "PlaceCandidate",
    "FindPlacesInput",
    "Activity",
    "DayPlan",
    "Itinerary",
    "GenerationReport",
    "SuggestedDestination",
    "DestinationSuggestions",
    "ReviewSummary",
    "GenerationPhase",
    "State",
]
