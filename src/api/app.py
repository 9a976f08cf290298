"""FastAPI surface for the itinerary planner."""
from __future__ import annotations

import os
# Load environment variables from .env file
from dotenv import load_dotenv

# Load .env file before any other imports that might need environment variables
load_dotenv()


from typing import Dict, Any
from fastapi import FastAPI, HTTPException
import logging
import sentry_sdk
from fastapi.middleware.cors import CORSMiddleware

from src.api.schemas import (
    ItineraryResponse,
    PlanRequest,
    SuggestDestinationsRequest,
    SuggestDestinationsResponse,
    SummarizeReviewsRequest,
    SummarizeReviewsResponse,
)
from src.api.dependencies import lifespan, get_planner_bundle
from src.api.response_builder import _report_to_response
from src.core.errors import GenerationFailed, GenerationTimeout

logger = logging.getLogger(__name__)

if os.getenv("SENTRY_DSN"):  # pragma: no cover - runtime configuration
    sentry_sdk.init(
        dsn=os.getenv("SENTRY_DSN"),
        enable_logs=True,
        send_default_pii=False,
        traces_sample_rate=float(os.getenv("SENTRY_TRACES_SAMPLE_RATE", "1.0")),
    )

app = FastAPI(title="Itinerary Planner API", version="0.1.0", lifespan=lifespan)

origins = [
    "http://localhost:3000",
    "http://localhost:9002",
]


app.add_middleware(
    CORSMiddleware,
    allow_origins=origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


@app.post("/itinerary/generate", response_model=ItineraryResponse)
async def generate_itinerary(payload: PlanRequest) -> ItineraryResponse:
    """Generate a day-by-day itinerary enriched with real place details.

    The model may look up places (restaurants, attractions, cafes) while it
    writes the plan; matching places are attached to activities as
    ``placeDetails``.

    Returns:
        ItineraryResponse with ``status`` "complete", or "degraded" when the
        model output violated the contract and had to be repaired (the
        repairs are listed in ``anomalies``).

    Raises:
        HTTPException: 400 for invalid input, 502 when the model produced no
            itinerary (safe to retry), 504 when generation timed out.

    Example JSON payload:
        ```json
        {
            "destination": "Paris, France",
            "startDate": "2024-08-15",
            "endDate": "2024-08-16",
            "numberOfPeople": 2,
            "budget": 1000,
            "preferences": "museums and cafes"
        }
        ```
    """

    logger.info("Starting new itinerary request")
    logger.info(f"Destination: {payload.destination}")
    logger.info(f"Travel dates: {payload.startDate} to {payload.endDate}")
    logger.info(f"Group size: {payload.numberOfPeople}, budget: {payload.budget}")

    bundle = get_planner_bundle()
    try:
        report = await bundle.generate_itinerary(payload)
        logger.info("Itinerary generation completed successfully")
        if report.degraded:
            logger.warning(f"Itinerary returned with {len(report.anomalies)} repaired anomalies")
    except GenerationTimeout as exc:
        logger.error(f"Timed out during itinerary generation: {str(exc)}")
        raise HTTPException(status_code=504, detail=str(exc)) from exc
    except GenerationFailed as exc:
        logger.error(f"Generation failed: {str(exc)}")
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ValueError as exc:
        logger.error(f"Value error during generation: {str(exc)}")
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except Exception as exc:
        logger.error(f"Unexpected error during generation: {str(exc)}", exc_info=True)
        raise HTTPException(status_code=500, detail=str(exc)) from exc

    return _report_to_response(report)


@app.post("/destinations/suggest", response_model=SuggestDestinationsResponse)
async def suggest_destinations(payload: SuggestDestinationsRequest) -> SuggestDestinationsResponse:
    """Suggest destinations for a free-text trip description."""
    logger.info("Destination suggestion request received")

    bundle = get_planner_bundle()
    try:
        return await bundle.suggest_destinations(payload.tripDescription)
    except GenerationFailed as exc:
        logger.error(f"Destination suggestion failed: {str(exc)}")
        raise HTTPException(status_code=502, detail=str(exc)) from exc
    except ValueError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc


@app.post("/activities/summarize-reviews", response_model=SummarizeReviewsResponse)
async def summarize_reviews(payload: SummarizeReviewsRequest) -> SummarizeReviewsResponse:
    """Summarise user reviews for one activity."""
    logger.info(f"Review summary request received for {payload.activityName}")

    bundle = get_planner_bundle()
    try:
        return await bundle.summarize_reviews(payload.activityName, payload.reviews)
    except GenerationFailed as exc:
        logger.error(f"Review summary failed: {str(exc)}")
        raise HTTPException(status_code=502, detail=str(exc)) from exc


@app.get("/health")
async def health_check() -> Dict[str, str]:
    """Simple health endpoint used for readiness probes."""

    return {"status": "healthy", "service": "itinerary-planner-api"}


@app.get("/workflow/info")
async def get_workflow_info() -> Dict[str, Any]:
    """Get information about the generation configuration."""
    bundle = get_planner_bundle()

    return {
        'workflow_info': {
            'llm_model': getattr(bundle.llm, 'model_name', None) or type(bundle.llm).__name__,
            'max_tool_round_trips': bundle.generator.max_tool_round_trips,
            'timeout_s': bundle.generator.timeout_s,
            'places_configured': bool(bundle.settings.google_maps_api_key),
        }
    }
