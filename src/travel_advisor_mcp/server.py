"""Travel Advisor MCP Server — nearby restaurants, hotels and attractions on a map."""

import logging
import sys
from typing import Optional

from fastmcp import FastMCP
from pydantic import ValidationError

from travel_advisor_mcp.api.client import TravelAdvisorClientError
from travel_advisor_mcp.models import Bounds, QueryType
from travel_advisor_mcp.places import get_service

# Route ALL logging to stderr — stdout is reserved for MCP protocol messages
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(name)s: %(message)s",
    stream=sys.stderr,
)
logger = logging.getLogger(__name__)

mcp = FastMCP(
    name="travel-advisor",
    instructions=(
        "Travel Advisor MCP server for discovering places on a map. "
        "Use search_places to list restaurants, hotels or attractions inside a bounding box. "
        "Use autocomplete_location and search_places_by_location to search by place name. "
        "Use get_weather for current conditions and get_api_stats to check the remaining API quota."
    ),
)

_QUERY_TYPES = ", ".join(t.value for t in QueryType)


def _parse_query_type(query_type: str) -> QueryType | None:
    try:
        return QueryType(query_type.strip().lower())
    except ValueError:
        return None


@mcp.tool()
async def search_places(
    query_type: str,
    sw_lat: float,
    sw_lng: float,
    ne_lat: float,
    ne_lng: float,
    min_rating: Optional[float] = None,
) -> dict:
    """Find places of a type inside a map bounding box.

    Results come from a local cache when the box lies inside a recently
    fetched area; otherwise the Travel Advisor API is called if the hourly
    quota allows it.

    Args:
        query_type: One of restaurants, hotels, attractions.
        sw_lat: Latitude of the south-west corner.
        sw_lng: Longitude of the south-west corner.
        ne_lat: Latitude of the north-east corner.
        ne_lng: Longitude of the north-east corner.
        min_rating: Only return places rated at least this much (e.g. 4.0).

    Returns:
        The matching places and where they came from (cache, api, rate_limited, error).
    """
    logger.info("search_places called: type=%s", query_type)
    parsed_type = _parse_query_type(query_type)
    if parsed_type is None:
        return {"error": f"Unknown query_type {query_type!r}, expected one of: {_QUERY_TYPES}", "places": []}
    try:
        bounds = Bounds.from_corners(sw_lat, sw_lng, ne_lat, ne_lng)
    except ValidationError as e:
        return {"error": f"Invalid bounds: {e.errors()[0]['msg']}", "places": []}

    lookup = await get_service().get_places(parsed_type, bounds, min_rating)
    return lookup.model_dump()


@mcp.tool()
async def search_places_by_location(geo_id: int, query_type: str = "restaurants") -> dict:
    """List places of a type for a location id returned by autocomplete_location.

    Args:
        geo_id: Travel Advisor location id (geoId).
        query_type: One of restaurants, hotels, attractions.
    """
    logger.info("search_places_by_location called: geo_id=%s, type=%s", geo_id, query_type)
    parsed_type = _parse_query_type(query_type)
    if parsed_type is None:
        return {"error": f"Unknown query_type {query_type!r}, expected one of: {_QUERY_TYPES}", "places": []}
    try:
        return await get_service().search_places_by_location(geo_id, parsed_type)
    except TravelAdvisorClientError as e:
        logger.error("search_places_by_location error: %s", e)
        return {"error": str(e), "geo_id": geo_id, "places": []}


@mcp.tool()
async def get_weather(lat: float, lng: float) -> dict:
    """Get current weather observations near a coordinate.

    Args:
        lat: Latitude.
        lng: Longitude.
    """
    logger.info("get_weather called: lat=%s, lng=%s", lat, lng)
    try:
        data = await get_service().get_weather(lat, lng)
    except TravelAdvisorClientError as e:
        logger.error("get_weather error: %s", e)
        return {"error": str(e), "lat": lat, "lng": lng}
    return data or {}


@mcp.tool()
async def autocomplete_location(query: str) -> dict:
    """Suggest locations (cities, neighbourhoods, landmarks) matching a search string.

    Args:
        query: Free-text location name, e.g. 'Lisbon' or 'Times Square'.
    """
    logger.info("autocomplete_location called: %s", query)
    try:
        return await get_service().autocomplete(query)
    except TravelAdvisorClientError as e:
        logger.error("autocomplete_location error: %s", e)
        return {"error": str(e), "data": []}


@mcp.tool()
async def get_api_stats() -> dict:
    """Report cache usage and the remaining Travel Advisor API quota."""
    return get_service().get_stats()


@mcp.tool()
async def clear_cache() -> dict:
    """Drop every cached places response."""
    service = get_service()
    service.clear_cache()
    return service.get_stats()


@mcp.tool()
async def reset_rate_limit() -> dict:
    """Forget all recorded API requests. Intended for testing only."""
    service = get_service()
    service.reset_rate_limit()
    return service.get_stats()


if __name__ == "__main__":
    mcp.run(transport="stdio")
