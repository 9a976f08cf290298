"""Tests for the Google Places resolver and the place lookup tool adapter."""
from __future__ import annotations

import json
from typing import Any, Callable, Dict, List, Optional

import httpx
import pytest

from src.core.config import ApiSettings
from src.core.errors import ToolContractViolation
from src.core.schemas import PlaceCandidate
from src.services.google_places import (
    MAX_CANDIDATES,
    GooglePlaces,
    PlaceLookupAdapter,
    build_search_text,
    create_find_places_tool,
    create_google_places_client,
    select_category_label,
)


def _place_record(index: int, **overrides: Any) -> Dict[str, Any]:
    record = {
        "place_id": f"place-{index}",
        "name": f"Place {index}",
        "formatted_address": f"{index} Rue de Test, Paris",
        "types": ["museum", "tourist_attraction", "point_of_interest"],
        "geometry": {"location": {"lat": 48.86 + index / 1000, "lng": 2.33}},
    }
    record.update(overrides)
    return record


def _make_client(
    handler: Callable[[httpx.Request], httpx.Response],
    *,
    api_key: Optional[str] = "test-key",
) -> GooglePlaces:
    return GooglePlaces(api_key, transport=httpx.MockTransport(handler))


def _json_handler(payload: Any, status_code: int = 200, seen: Optional[List[httpx.Request]] = None):
    def handler(request: httpx.Request) -> httpx.Response:
        if seen is not None:
            seen.append(request)
        return httpx.Response(status_code, json=payload)

    return handler


# ---------------------------------------------------------------------------
# Pure helpers
# ---------------------------------------------------------------------------


def test_build_search_text_with_query():
    assert build_search_text("Paris, France", "cafe", "coffee shop with Wi-Fi") == (
        "coffee shop with Wi-Fi cafe in Paris, France"
    )


def test_build_search_text_without_query_uses_upstream_type():
    assert build_search_text("Rome, Italy", "attraction") == "tourist attraction in Rome, Italy"
    assert build_search_text("Rome, Italy", "restaurant", "   ") == "restaurant in Rome, Italy"


@pytest.mark.parametrize(
    "types, category, expected",
    [
        (["museum", "tourist_attraction"], "attraction", "tourist attraction"),
        (["point_of_interest", "restaurant", "food"], "restaurant", "restaurant"),
        (["bakery", "food"], "cafe", "bakery"),
        ([], "cafe", "cafe"),
    ],
)
def test_select_category_label(types, category, expected):
    assert select_category_label(types, category) == expected


def test_select_category_label_is_deterministic():
    types = ["park", "tourist_attraction", "point_of_interest"]
    labels = {select_category_label(list(types), "attraction") for _ in range(5)}
    assert labels == {"tourist attraction"}


# ---------------------------------------------------------------------------
# GooglePlaces.resolve
# ---------------------------------------------------------------------------


class TestGooglePlaces:
    """Test suite for the Google Places resolver."""

    async def test_resolve_success_maps_records(self):
        seen: List[httpx.Request] = []
        payload = {
            "status": "OK",
            "results": [
                _place_record(
                    1,
                    name="Louvre Museum",
                    photos=[{"photo_reference": "photo-ref-1", "height": 100, "width": 200}],
                )
            ],
        }
        client = _make_client(_json_handler(payload, seen=seen))

        result = await client.resolve("Paris, France", "attraction", "art museum")

        assert len(result) == 1
        candidate = result[0]
        assert candidate.id == "place-1"
        assert candidate.name == "Louvre Museum"
        assert candidate.category == "tourist attraction"
        assert candidate.description == "1 Rue de Test, Paris"
        assert candidate.latitude == pytest.approx(48.861)
        assert candidate.longitude == pytest.approx(2.33)
        assert candidate.imageUrl.startswith("https://maps.googleapis.com/maps/api/place/photo?")
        assert "photoreference=photo-ref-1" in candidate.imageUrl
        assert "maxwidth=400" in candidate.imageUrl

        request = seen[0]
        assert request.url.path == "/maps/api/place/textsearch/json"
        assert request.url.params["query"] == "art museum tourist attraction in Paris, France"
        assert request.url.params["key"] == "test-key"
        await client.aclose()

    async def test_resolve_caps_results_and_preserves_order(self):
        payload = {"status": "OK", "results": [_place_record(i) for i in range(12)]}
        client = _make_client(_json_handler(payload))

        result = await client.resolve("Paris, France", "attraction")

        assert len(result) == MAX_CANDIDATES
        assert [c.id for c in result] == [f"place-{i}" for i in range(MAX_CANDIDATES)]
        await client.aclose()

    async def test_resolve_without_photo_or_geometry(self):
        record = {"place_id": "p-9", "name": "Tiny Cafe", "vicinity": "Somewhere", "types": []}
        client = _make_client(_json_handler({"status": "OK", "results": [record]}))

        result = await client.resolve("Lisbon, Portugal", "cafe")

        assert result == [PlaceCandidate(id="p-9", name="Tiny Cafe", category="cafe", description="Somewhere")]
        await client.aclose()

    async def test_resolve_drops_half_coordinates(self):
        record = _place_record(1, geometry={"location": {"lat": 41.9}})
        client = _make_client(_json_handler({"status": "OK", "results": [record]}))

        result = await client.resolve("Rome, Italy", "restaurant")

        assert result[0].latitude is None and result[0].longitude is None
        await client.aclose()

    async def test_resolve_skips_malformed_records(self):
        payload = {"status": "OK", "results": [{"name": "no id"}, "garbage", _place_record(2)]}
        client = _make_client(_json_handler(payload))

        result = await client.resolve("Paris, France", "attraction")

        assert [c.id for c in result] == ["place-2"]
        await client.aclose()

    @pytest.mark.parametrize(
        "status_code, payload",
        [
            (500, {"error": "boom"}),
            (403, {"error": "forbidden"}),
            (200, {"status": "REQUEST_DENIED", "error_message": "Places API not enabled"}),
            (200, {"status": "ZERO_RESULTS", "results": []}),
            (200, ["not", "an", "object"]),
        ],
    )
    async def test_resolve_fail_soft_on_upstream_problems(self, status_code, payload):
        client = _make_client(_json_handler(payload, status_code=status_code))

        assert await client.resolve("Rome, Italy", "restaurant") == []
        await client.aclose()

    async def test_resolve_fail_soft_on_unparsable_body(self):
        client = _make_client(lambda request: httpx.Response(200, text="<html>oops</html>"))

        assert await client.resolve("Rome, Italy", "restaurant") == []
        await client.aclose()

    async def test_resolve_fail_soft_on_transport_error(self):
        def handler(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        client = _make_client(handler)

        assert await client.resolve("Rome, Italy", "restaurant") == []
        await client.aclose()

    async def test_resolve_without_api_key_makes_no_request(self):
        seen: List[httpx.Request] = []
        client = _make_client(_json_handler({"status": "OK", "results": [_place_record(1)]}, seen=seen), api_key=None)

        assert await client.resolve("Rome, Italy", "restaurant") == []
        assert seen == []
        await client.aclose()

    async def test_tie_break_is_reproducible_for_identical_fixture(self):
        record = _place_record(1, types=["cafe", "bakery", "food"])
        payload = {"status": "OK", "results": [record]}
        first = _make_client(_json_handler(payload))
        second = _make_client(_json_handler(payload))

        a = await first.resolve("Vienna, Austria", "cafe")
        b = await second.resolve("Vienna, Austria", "cafe")

        assert a[0].category == b[0].category == "cafe"
        await first.aclose()
        await second.aclose()


def test_create_client_tolerates_missing_key():
    client = create_google_places_client(ApiSettings(google_maps_api_key=None))
    assert isinstance(client, GooglePlaces)
    assert client.api_key is None


# ---------------------------------------------------------------------------
# PlaceLookupAdapter / find_places tool
# ---------------------------------------------------------------------------


class RecordingResolver:
    """Resolver double that records calls and replays a canned response."""

    def __init__(self, response: Any = None, error: Optional[Exception] = None) -> None:
        self.response = response or []
        self.error = error
        self.calls: List[tuple] = []

    async def resolve(self, location, category, query=None):
        self.calls.append((location, category, query))
        if self.error is not None:
            raise self.error
        return self.response


async def test_find_places_rome_http_500_returns_empty_list():
    client = _make_client(_json_handler({"error": "internal"}, status_code=500))
    adapter = PlaceLookupAdapter(client)

    assert await adapter.find_places("Rome, Italy", "restaurant") == []
    await client.aclose()


async def test_find_places_forwards_validated_arguments():
    candidate = PlaceCandidate(id="x", name="Trattoria", category="restaurant")
    resolver = RecordingResolver(response=[candidate])
    adapter = PlaceLookupAdapter(resolver)

    result = await adapter.find_places("Rome, Italy", "restaurant", "carbonara")

    assert result == [candidate]
    assert resolver.calls == [("Rome, Italy", "restaurant", "carbonara")]


async def test_find_places_absorbs_resolver_exceptions():
    adapter = PlaceLookupAdapter(RecordingResolver(error=RuntimeError("resolver exploded")))

    assert await adapter.find_places("Rome, Italy", "cafe") == []


@pytest.mark.parametrize(
    "arguments",
    [
        {"location": "Rome, Italy", "category": "museum"},
        {"location": "Rome, Italy", "category": "tourist_attraction"},
        {"location": "", "category": "cafe"},
        {"location": "Rome, Italy", "category": "cafe", "placeType": "cafe"},
        ["Rome", "cafe"],
    ],
)
async def test_lookup_rejects_contract_violations_before_resolver(arguments):
    resolver = RecordingResolver()
    adapter = PlaceLookupAdapter(resolver)

    with pytest.raises(ToolContractViolation):
        await adapter.lookup(arguments)
    assert resolver.calls == []


async def test_find_places_tool_returns_serialised_candidates():
    candidate = PlaceCandidate(
        id="ChIJ1", name="Louvre Museum", category="museum", latitude=48.8606, longitude=2.3376
    )
    tool = create_find_places_tool(PlaceLookupAdapter(RecordingResolver(response=[candidate])))

    assert tool.name == "find_places"
    output = await tool.ainvoke({"location": "Paris, France", "category": "attraction"})

    assert json.loads(output) == [
        {"id": "ChIJ1", "name": "Louvre Museum", "category": "museum", "latitude": 48.8606, "longitude": 2.3376}
    ]
