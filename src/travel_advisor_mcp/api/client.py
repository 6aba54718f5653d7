"""Async HTTP client for the Travel Advisor RapidAPI endpoints."""

import asyncio
import json
import logging
import time
from typing import Any, Optional

from curl_cffi.requests import AsyncSession, RequestsError

from travel_advisor_mcp.api.parsers import extract_boundary_places, extract_v2_places
from travel_advisor_mcp.api.urls import (
    build_boundary_url,
    build_geo_list_url,
    build_hotels_list_url,
    build_search_url,
    build_weather_url,
)
from travel_advisor_mcp.config import TravelAdvisorConfig
from travel_advisor_mcp.models import LatLng, QueryType, query_type_value

logger = logging.getLogger(__name__)


class TravelAdvisorClientError(Exception):
    """Base exception for Travel Advisor client errors."""


class TravelAdvisorAuthError(TravelAdvisorClientError):
    """Raised when RapidAPI rejects the key (401/403)."""


class TravelAdvisorRateLimitError(TravelAdvisorClientError):
    """Raised when RapidAPI returns 429 and retries are exhausted."""


class TravelAdvisorClient:
    """Async HTTP client with request pacing and retries.

    Caching and quota accounting are not done here; see ``PlacesService``.
    """

    def __init__(self, config: TravelAdvisorConfig | None = None):
        self._config = config or TravelAdvisorConfig()
        self._semaphore = asyncio.Semaphore(self._config.max_concurrent_requests)
        self._last_request_time: float = 0.0
        self._client: AsyncSession | None = None

    def _get_client(self) -> AsyncSession:
        if self._client is None:
            self._client = AsyncSession(timeout=self._config.timeout_seconds)
        return self._client

    def _headers(self, host: str, with_json: bool = False) -> dict[str, str]:
        headers = {
            "x-rapidapi-key": self._config.rapidapi_key,
            "x-rapidapi-host": host,
        }
        if with_json:
            headers["Content-Type"] = "application/json"
        return headers

    async def _enforce_rate_limit(self) -> None:
        elapsed = time.monotonic() - self._last_request_time
        delay = self._config.request_delay_seconds - elapsed
        if delay > 0:
            await asyncio.sleep(delay)
        self._last_request_time = time.monotonic()

    async def _request(
        self,
        method: str,
        url: str,
        host: str,
        params: Optional[dict[str, Any]] = None,
        body: Optional[dict[str, Any]] = None,
    ) -> Any:
        async with self._semaphore:
            return await self._request_with_retries(method, url, host, params, body)

    async def _request_with_retries(
        self,
        method: str,
        url: str,
        host: str,
        params: Optional[dict[str, Any]],
        body: Optional[dict[str, Any]],
    ) -> Any:
        client = self._get_client()
        last_error: Exception | None = None

        for attempt in range(self._config.max_retries):
            await self._enforce_rate_limit()
            try:
                response = await client.request(
                    method,
                    url,
                    params=params,
                    json=body,
                    headers=self._headers(host, with_json=body is not None),
                )

                if response.status_code == 200:
                    try:
                        return response.json()
                    except (json.JSONDecodeError, ValueError) as exc:
                        raise TravelAdvisorClientError(
                            f"Invalid JSON in response from {url}: {exc}"
                        ) from exc

                if response.status_code in (401, 403):
                    raise TravelAdvisorAuthError(
                        f"Rejected by RapidAPI ({response.status_code}) for URL: {url}"
                    )
                if response.status_code == 429:
                    last_error = TravelAdvisorRateLimitError(
                        f"Rate limited (429) for URL: {url}"
                    )
                elif response.status_code >= 500:
                    last_error = TravelAdvisorClientError(
                        f"Server error ({response.status_code}) for URL: {url}"
                    )
                else:
                    raise TravelAdvisorClientError(
                        f"Unexpected status {response.status_code} for URL: {url}"
                    )

            except RequestsError as exc:
                last_error = TravelAdvisorClientError(
                    f"Request failed for URL: {url}: {exc}"
                )

            logger.warning(
                "Attempt %d/%d failed: %s", attempt + 1, self._config.max_retries, last_error
            )
            if attempt < self._config.max_retries - 1:
                await asyncio.sleep(2**attempt)

        raise last_error  # type: ignore[misc]

    async def get_places_data(
        self, query_type: QueryType | str, sw: LatLng, ne: LatLng
    ) -> list[dict[str, Any]]:
        """Fetch places of a type inside the box spanned by ``sw`` and ``ne``."""
        cfg = self._config
        type_value = query_type_value(query_type)
        logger.info("Fetching %s in (%s, %s)-(%s, %s)", type_value, sw.lat, sw.lng, ne.lat, ne.lng)

        if type_value == QueryType.HOTELS.value:
            payload = await self._request(
                "POST",
                build_hotels_list_url(cfg.places_host, cfg.currency, cfg.units, cfg.lang),
                cfg.places_host,
                body={
                    "boundingBox": {
                        "northEastCorner": {"latitude": ne.lat, "longitude": ne.lng},
                        "southWestCorner": {"latitude": sw.lat, "longitude": sw.lng},
                    },
                    "updateToken": "",
                },
            )
            return extract_v2_places(payload)

        payload = await self._request(
            "GET",
            build_boundary_url(type_value, cfg.places_host),
            cfg.places_host,
            params={
                "bl_latitude": sw.lat,
                "bl_longitude": sw.lng,
                "tr_longitude": ne.lng,
                "tr_latitude": ne.lat,
            },
        )
        return extract_boundary_places(payload)

    async def search_places_by_location(
        self, geo_id: int | str, query_type: QueryType | str = QueryType.RESTAURANTS
    ) -> list[dict[str, Any]]:
        cfg = self._config
        payload = await self._request(
            "POST",
            build_geo_list_url(query_type, cfg.places_host, cfg.currency, cfg.units, cfg.lang),
            cfg.places_host,
            body={"geoId": geo_id, "updateToken": ""},
        )
        return extract_v2_places(payload)

    async def get_weather_data(
        self, lat: Optional[float], lng: Optional[float]
    ) -> dict[str, Any] | None:
        if lat is None or lng is None:
            return None
        cfg = self._config
        return await self._request(
            "GET",
            build_weather_url(cfg.weather_host),
            cfg.weather_host,
            params={"lat": lat, "lon": lng},
        )

    async def get_autocomplete_suggestions(self, query: str) -> dict[str, Any]:
        cfg = self._config
        payload = await self._request(
            "POST",
            build_search_url(cfg.places_host, cfg.currency, cfg.units, cfg.lang),
            cfg.places_host,
            body={"query": query, "updateToken": ""},
        )
        return payload if isinstance(payload, dict) else {"data": []}

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None

    async def __aenter__(self) -> "TravelAdvisorClient":
        return self

    async def __aexit__(self, *args: object) -> None:
        await self.close()
