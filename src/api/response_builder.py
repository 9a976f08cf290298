from src.api.schemas import ItineraryResponse
from src.core.schemas import GenerationReport


def _report_to_response(report: GenerationReport) -> ItineraryResponse:
    return ItineraryResponse(
        status="degraded" if report.degraded else "complete",
        itinerary=report.itinerary,
        anomalies=list(report.anomalies),
        tool_round_trips=report.tool_round_trips,
    )
