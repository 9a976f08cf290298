from typing import List, Literal

from pydantic import BaseModel, Field

from src.core.schemas import DestinationSuggestions, Itinerary, ReviewSummary, TripRequest


class PlanRequest(TripRequest):
    """Request payload used to generate a new itinerary."""
    pass


class ItineraryResponse(BaseModel):
    """Response returned by the itinerary generation endpoint."""

    status: Literal["complete", "degraded"] = Field(
        ..., description="'degraded' when the model output had to be repaired"
    )
    itinerary: Itinerary
    anomalies: List[str] = Field(
        default_factory=list, description="Repairs applied to the model output"
    )
    tool_round_trips: int = Field(default=0, description="Place lookup rounds used during generation")


class SuggestDestinationsRequest(BaseModel):
    """Free-text description of the desired trip."""

    tripDescription: str = Field(
        ..., min_length=1, description="e.g. 'a relaxing beach vacation' or 'an adventurous mountain hike'"
    )


class SummarizeReviewsRequest(BaseModel):
    """Reviews to summarise for one itinerary activity."""

    activityName: str = Field(..., min_length=1)
    reviews: List[str] = Field(default_factory=list)


SuggestDestinationsResponse = DestinationSuggestions
SummarizeReviewsResponse = ReviewSummary
