"""Cached, rate-limited places lookups."""

import logging
from typing import Any, Optional

from travel_advisor_mcp.api.client import TravelAdvisorClient, TravelAdvisorClientError
from travel_advisor_mcp.api.parsers import filter_places
from travel_advisor_mcp.cache import BoundsCache
from travel_advisor_mcp.config import TravelAdvisorConfig
from travel_advisor_mcp.models import Bounds, PlacesLookup, QueryType, query_type_value
from travel_advisor_mcp.rate_limit import RateLimiter
from travel_advisor_mcp.storage import FileStore

logger = logging.getLogger(__name__)


class PlacesService:
    """Composes the bounds cache, the rate limiter and the API client.

    A lookup is served from the cache when possible. Otherwise the limiter
    decides whether the metered API may be called; only successful calls
    are recorded against the quota and stored in the cache.
    """

    def __init__(self, client: TravelAdvisorClient, cache: BoundsCache, limiter: RateLimiter):
        self.client = client
        self.cache = cache
        self.limiter = limiter

    async def get_places(
        self,
        query_type: QueryType | str,
        bounds: Bounds,
        min_rating: Optional[float] = None,
    ) -> PlacesLookup:
        type_value = query_type_value(query_type)

        cached = self.cache.get(type_value, bounds)
        if cached is not None:
            return PlacesLookup(
                query_type=type_value,
                bounds=bounds,
                places=filter_places(cached, min_rating),
                source="cache",
            )

        if not self.limiter.can_make_request():
            minutes = self.limiter.get_stats().reset_in_minutes
            logger.warning("Rate limit reached, next request allowed in %d min", minutes)
            return PlacesLookup(
                query_type=type_value,
                bounds=bounds,
                source="rate_limited",
                reset_in_minutes=minutes,
            )

        try:
            data = await self.client.get_places_data(type_value, bounds.sw, bounds.ne)
        except TravelAdvisorClientError as e:
            logger.error("Places fetch failed for %s: %s", type_value, e)
            return PlacesLookup(query_type=type_value, bounds=bounds, source="error", error=str(e))

        self.limiter.record_request()
        self.cache.set(type_value, bounds, data)
        return PlacesLookup(
            query_type=type_value,
            bounds=bounds,
            places=filter_places(data, min_rating),
            source="api",
        )

    async def search_places_by_location(
        self, geo_id: int | str, query_type: QueryType | str = QueryType.RESTAURANTS
    ) -> dict[str, Any]:
        """Places for a geoId picked from autocomplete; counted against the quota, not cached."""
        type_value = query_type_value(query_type)
        if not self.limiter.can_make_request():
            minutes = self.limiter.get_stats().reset_in_minutes
            logger.warning("Rate limit reached, next request allowed in %d min", minutes)
            return {"geo_id": geo_id, "query_type": type_value, "places": [],
                    "rate_limited": True, "reset_in_minutes": minutes}

        data = await self.client.search_places_by_location(geo_id, type_value)
        self.limiter.record_request()
        return {"geo_id": geo_id, "query_type": type_value, "places": filter_places(data),
                "rate_limited": False}

    async def get_weather(self, lat: Optional[float], lng: Optional[float]) -> dict[str, Any] | None:
        return await self.client.get_weather_data(lat, lng)

    async def autocomplete(self, query: str) -> dict[str, Any]:
        return await self.client.get_autocomplete_suggestions(query)

    def get_stats(self) -> dict[str, Any]:
        return {
            "cache": self.cache.get_stats().model_dump(),
            "rate_limit": self.limiter.get_stats().model_dump(),
        }

    def clear_cache(self) -> None:
        self.cache.clear()

    def reset_rate_limit(self) -> None:
        self.limiter.reset()

    async def close(self) -> None:
        await self.client.close()


def build_service(config: TravelAdvisorConfig | None = None) -> PlacesService:
    """Wire a PlacesService whose state lives in ``config.state_dir``."""
    config = config or TravelAdvisorConfig()
    store = FileStore(config.state_dir, max_bytes=config.state_max_bytes)
    cache = BoundsCache(
        store,
        max_size=config.cache_max_entries,
        ttl_ms=config.cache_ttl_seconds * 1000,
        expansion_factor=config.cache_expansion_factor,
    )
    limiter = RateLimiter(
        store,
        max_requests=config.rate_limit_max_requests,
        window_ms=config.rate_limit_window_seconds * 1000,
    )
    return PlacesService(TravelAdvisorClient(config), cache, limiter)


_singleton: PlacesService | None = None


def get_service() -> PlacesService:
    """Return the process-wide PlacesService used by the MCP server."""
    global _singleton
    if _singleton is None:
        _singleton = build_service()
    return _singleton
