"""Output normalisation for model-produced itineraries.

The language model is asked for a JSON object matching ``Itinerary``. Models
do not always comply, so this module turns whatever object was produced into
a guaranteed-valid ``Itinerary`` and reports every repair it had to make.
Nothing here raises: a missing payload is detected by the caller through
``extract_json_payload`` returning ``None``.
"""
import json
import logging
import re
from datetime import date, timedelta
from typing import Any, Dict, Iterable, List, Mapping, Optional, Set, Tuple

from pydantic import ValidationError

from src.core.schemas import (
    DEFAULT_ITINERARY_TITLE,
    Activity,
    DayPlan,
    Itinerary,
    PlaceCandidate,
    TripRequest,
)

logger = logging.getLogger(__name__)

_CODE_BLOCK_PATTERN = re.compile(r"```(?:json)?\s*(.*?)\s*```", re.DOTALL)
_PLACE_FIELDS = ("id", "name", "category", "description", "latitude", "longitude", "imageUrl")


def extract_json_payload(raw_output: Optional[str]) -> Optional[Dict[str, Any]]:
    """Extract a JSON object from raw model text with tolerant parsing.

    Tries, in order: the whole text, fenced code blocks, and the outermost
    ``{...}`` span. Returns ``None`` when no candidate parses to an object.
    """
    if not raw_output:
        return None

    candidates: List[str] = []
    stripped = raw_output.strip()
    if stripped:
        candidates.append(stripped)

    for match in _CODE_BLOCK_PATTERN.finditer(raw_output):
        block = match.group(1).strip()
        if block:
            candidates.append(block)

    start_idx = stripped.find("{")
    end_idx = stripped.rfind("}")
    if start_idx != -1 and end_idx > start_idx:
        candidates.append(stripped[start_idx : end_idx + 1])

    last_error: Optional[json.JSONDecodeError] = None
    for candidate in dict.fromkeys(candidates):
        try:
            parsed = json.loads(candidate)
        except json.JSONDecodeError as exc:
            last_error = exc
            continue
        if isinstance(parsed, dict):
            return parsed

    if last_error:
        logger.warning("Failed to parse raw model output as JSON: %s", last_error)
    return None


class _Normaliser:
    """Single-use helper that accumulates anomalies while rebuilding a payload."""

    def __init__(
        self,
        request: Optional[TripRequest],
        known_places: Optional[Mapping[str, List[PlaceCandidate]]],
    ) -> None:
        self.request = request
        self.known_places = known_places
        self.anomalies: List[str] = []
        self._used_ids: Set[str] = set()

    def record(self, message: str) -> None:
        logger.warning("Itinerary output anomaly: %s", message)
        self.anomalies.append(message)

    def title(self, payload: Mapping[str, Any]) -> str:
        raw = payload.get("itineraryTitle")
        if isinstance(raw, str) and raw.strip():
            return raw.strip()
        self.record("itineraryTitle missing or empty; using placeholder title")
        return DEFAULT_ITINERARY_TITLE

    def days(self, raw_days: Any) -> List[DayPlan]:
        if not isinstance(raw_days, list):
            self.record(
                f"structuredItinerary was {type(raw_days).__name__}, expected a list; using an empty itinerary"
            )
            return []

        entries = [entry for entry in raw_days if isinstance(entry, dict)]
        if len(entries) != len(raw_days):
            self.record(f"Skipped {len(raw_days) - len(entries)} day entries that were not objects")

        reported = [_day_number(entry.get("day")) for entry in entries]
        if reported != list(range(1, len(entries) + 1)):
            if entries:
                self.record(f"Day numbers {reported} were not contiguous from 1; renumbered in order")

        days = [self.day(ordinal, entry) for ordinal, entry in enumerate(entries, start=1)]

        if self.request is not None and days and len(days) != self.request.days_number:
            logger.info(
                "Itinerary has %s days but the trip spans %s", len(days), self.request.days_number
            )
        return days

    def day(self, ordinal: int, entry: Mapping[str, Any]) -> DayPlan:
        raw_activities = entry.get("activities")
        if raw_activities is None:
            raw_activities = []
        if not isinstance(raw_activities, list):
            self.record(f"Day {ordinal}: activities was {type(raw_activities).__name__}, expected a list")
            raw_activities = []

        activities: List[Activity] = []
        for position, raw in enumerate(raw_activities, start=1):
            activity = self.activity(ordinal, position, raw)
            if activity is not None:
                activities.append(activity)

        return DayPlan(
            day=ordinal,
            date=self.day_date(ordinal, entry.get("date")),
            title=_optional_text(entry.get("title")),
            summary=_optional_text(entry.get("summary")),
            activities=activities,
        )

    def day_date(self, ordinal: int, raw: Any) -> Optional[str]:
        expected: Optional[date] = None
        if self.request is not None and ordinal <= self.request.days_number:
            expected = self.request.startDate + timedelta(days=ordinal - 1)

        if isinstance(raw, str) and raw.strip():
            try:
                return date.fromisoformat(raw.strip()).isoformat()
            except ValueError:
                self.record(f"Day {ordinal}: unparsable date {raw!r}")
        return expected.isoformat() if expected else None

    def activity(self, ordinal: int, position: int, raw: Any) -> Optional[Activity]:
        if not isinstance(raw, dict):
            self.record(f"Day {ordinal}: skipped activity {position} that was not an object")
            return None

        description = _optional_text(raw.get("description"))
        if description is None:
            self.record(f"Day {ordinal}: skipped activity {position} without a description")
            return None

        return Activity(
            id=self.activity_id(ordinal, position, raw.get("id")),
            time=_optional_text(raw.get("time")),
            description=description,
            placeDetails=self.place_details(ordinal, position, raw.get("placeDetails")),
            notes=_optional_text(raw.get("notes")),
        )

    def activity_id(self, ordinal: int, position: int, raw: Any) -> str:
        if isinstance(raw, str) and raw.strip() and raw.strip() not in self._used_ids:
            value = raw.strip()
        else:
            base = f"day{ordinal}-activity{position}"
            value = base
            suffix = 2
            while value in self._used_ids:
                value = f"{base}-{suffix}"
                suffix += 1
            if isinstance(raw, str) and raw.strip():
                self.record(f"Duplicate activity id {raw.strip()!r} replaced with {value!r}")
        self._used_ids.add(value)
        return value

    def place_details(self, ordinal: int, position: int, raw: Any) -> Optional[PlaceCandidate]:
        if raw is None:
            return None
        where = f"Day {ordinal} activity {position}"
        if not isinstance(raw, dict):
            self.record(f"{where}: placeDetails was not an object; dropped")
            return None

        data = {key: raw[key] for key in _PLACE_FIELDS if raw.get(key) is not None}

        if self.known_places is not None:
            place_id = raw.get("id")
            versions = self.known_places.get(place_id) if isinstance(place_id, str) else None
            if not versions:
                self.record(f"{where}: placeDetails id {place_id!r} was not returned by the place lookup; dropped")
                return None
            return _pick_version(versions, data)

        if ("latitude" in data) != ("longitude" in data):
            self.record(f"{where}: placeDetails had only one coordinate; coordinates dropped")
            data.pop("latitude", None)
            data.pop("longitude", None)
        try:
            return PlaceCandidate(**data)
        except ValidationError as exc:
            self.record(f"{where}: invalid placeDetails dropped ({exc.error_count()} errors)")
            return None


def _day_number(value: Any) -> Any:
    """Read integer-like day numbers (``1``, ``"1"``, ``1.0``) as ints."""

    if isinstance(value, int):
        return value
    if isinstance(value, float) and value.is_integer():
        return int(value)
    if isinstance(value, str) and value.strip().isdigit():
        return int(value.strip())
    return value


def _optional_text(value: Any) -> Optional[str]:
    if value is None:
        return None
    text = value if isinstance(value, str) else str(value)
    text = text.strip()
    return text or None


def _pick_version(versions: List[PlaceCandidate], data: Mapping[str, Any]) -> PlaceCandidate:
    """Choose the returned candidate the model copied.

    Exact field match first, then a match on name and category, then the
    first version returned.
    """
    for candidate in versions:
        if candidate.model_dump(exclude_none=True) == dict(data):
            return candidate
    for candidate in versions:
        if candidate.category == data.get("category") and candidate.name == data.get("name"):
            return candidate
    for candidate in versions:
        if candidate.category == data.get("category"):
            return candidate
    return versions[0]


def index_places(candidates: Iterable[PlaceCandidate]) -> Dict[str, List[PlaceCandidate]]:
    """Group candidates by id, keeping every distinct version in lookup order."""

    indexed: Dict[str, List[PlaceCandidate]] = {}
    for candidate in candidates:
        versions = indexed.setdefault(candidate.id, [])
        if candidate not in versions:
            versions.append(candidate)
    return indexed


def normalize_itinerary(
    payload: Any,
    *,
    request: Optional[TripRequest] = None,
    known_places: Optional[Mapping[str, List[PlaceCandidate]]] = None,
) -> Tuple[Itinerary, List[str]]:
    """Turn a raw model payload into a valid ``Itinerary`` plus anomalies.

    Args:
        payload: Parsed model output; anything other than a dict is treated
            as an empty object.
        request: Trip parameters used to fill missing day dates.
        known_places: Candidates returned by the place lookup during this
            generation, grouped by id (see ``index_places``). When given,
            ``placeDetails`` are replaced by the returned version the model
            copied and unknown ids are dropped.

    Returns:
        The normalised itinerary and the list of repairs that were applied.
    """
    normaliser = _Normaliser(request, known_places)
    if not isinstance(payload, dict):
        normaliser.record(f"Payload was {type(payload).__name__}, expected an object")
        payload = {}

    itinerary = Itinerary(
        itineraryTitle=normaliser.title(payload),
        structuredItinerary=normaliser.days(payload.get("structuredItinerary")),
    )
    return itinerary, normaliser.anomalies
