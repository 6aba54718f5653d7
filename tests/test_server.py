"""Tests for the MCP server tools."""

import json
from unittest.mock import AsyncMock

import pytest
from fastmcp import Client

from travel_advisor_mcp import places as places_module
from travel_advisor_mcp.api.client import TravelAdvisorAuthError, TravelAdvisorClient
from travel_advisor_mcp.cache import BoundsCache
from travel_advisor_mcp.config import TravelAdvisorConfig
from travel_advisor_mcp.places import PlacesService
from travel_advisor_mcp.rate_limit import RateLimiter
from travel_advisor_mcp.server import mcp
from travel_advisor_mcp.storage import MemoryStore
from tests.conftest import make_place

VIEWPORT = {"sw_lat": 40.0, "sw_lng": -74.0, "ne_lat": 40.1, "ne_lng": -73.9}


@pytest.fixture
def service(clock):
    """Install an in-memory service so tests never touch the real state dir."""
    store = MemoryStore()
    client = TravelAdvisorClient(TravelAdvisorConfig(rapidapi_key="test-key"))
    client.get_places_data = AsyncMock(
        return_value=[make_place("Joe's Pizza", rating="4.6"), make_place("Diner", rating="3.9")]
    )
    client.search_places_by_location = AsyncMock(return_value=[make_place("Tower")])
    client.get_weather_data = AsyncMock(return_value={"list": [{"name": "New York"}]})
    client.get_autocomplete_suggestions = AsyncMock(return_value={"data": [{"name": "Lisbon"}]})
    svc = PlacesService(
        client,
        BoundsCache(store, max_size=2, clock=clock),
        RateLimiter(store, max_requests=2, clock=clock),
    )
    places_module._singleton = svc
    yield svc
    places_module._singleton = None


async def _call(tool: str, args: dict) -> dict:
    async with Client(mcp) as mcp_client:
        result = await mcp_client.call_tool(tool, args)
    return json.loads(result.content[0].text)


@pytest.mark.asyncio
async def test_search_places_from_api(service):
    data = await _call("search_places", {"query_type": "restaurants", **VIEWPORT})
    assert data["source"] == "api"
    assert data["query_type"] == "restaurants"
    assert [p["name"] for p in data["places"]] == ["Joe's Pizza", "Diner"]
    assert data["bounds"]["sw"] == {"lat": 40.0, "lng": -74.0}


@pytest.mark.asyncio
async def test_search_places_second_call_hits_cache(service):
    await _call("search_places", {"query_type": "restaurants", **VIEWPORT})
    data = await _call(
        "search_places",
        {"query_type": "Restaurants", **VIEWPORT, "min_rating": 4.0},
    )
    assert data["source"] == "cache"
    assert [p["name"] for p in data["places"]] == ["Joe's Pizza"]
    assert service.client.get_places_data.await_count == 1


@pytest.mark.asyncio
async def test_search_places_rate_limited(service):
    service.limiter.record_request()
    service.limiter.record_request()
    data = await _call("search_places", {"query_type": "hotels", **VIEWPORT})
    assert data["source"] == "rate_limited"
    assert data["places"] == []
    assert data["reset_in_minutes"] == 60
    service.client.get_places_data.assert_not_called()


@pytest.mark.asyncio
async def test_search_places_unknown_type(service):
    data = await _call("search_places", {"query_type": "bars", **VIEWPORT})
    assert "Unknown query_type" in data["error"]
    assert data["places"] == []


@pytest.mark.asyncio
async def test_search_places_inverted_bounds(service):
    args = {"query_type": "restaurants", "sw_lat": 41.0, "sw_lng": -74.0, "ne_lat": 40.0, "ne_lng": -73.9}
    data = await _call("search_places", args)
    assert data["error"].startswith("Invalid bounds")
    service.client.get_places_data.assert_not_called()


@pytest.mark.asyncio
async def test_search_places_by_location(service):
    data = await _call("search_places_by_location", {"geo_id": 60763, "query_type": "attractions"})
    assert data["geo_id"] == 60763
    assert [p["name"] for p in data["places"]] == ["Tower"]
    service.client.search_places_by_location.assert_awaited_once_with(60763, "attractions")


@pytest.mark.asyncio
async def test_search_places_by_location_client_error(service):
    service.client.search_places_by_location.side_effect = TravelAdvisorAuthError("Rejected (403)")
    data = await _call("search_places_by_location", {"geo_id": 1})
    assert data["error"] == "Rejected (403)"
    assert data["places"] == []
    assert service.limiter.get_remaining_requests() == 2


@pytest.mark.asyncio
async def test_get_weather(service):
    data = await _call("get_weather", {"lat": 40.7, "lng": -74.0})
    assert data["list"][0]["name"] == "New York"


@pytest.mark.asyncio
async def test_autocomplete_location(service):
    data = await _call("autocomplete_location", {"query": "lisb"})
    assert data["data"][0]["name"] == "Lisbon"


@pytest.mark.asyncio
async def test_api_stats_clear_and_reset(service):
    await _call("search_places", {"query_type": "restaurants", **VIEWPORT})

    stats = await _call("get_api_stats", {})
    assert stats["cache"]["size"] == 1
    assert stats["rate_limit"]["remaining"] == 1

    stats = await _call("clear_cache", {})
    assert stats["cache"]["size"] == 0

    stats = await _call("reset_rate_limit", {})
    assert stats["rate_limit"]["remaining"] == 2
