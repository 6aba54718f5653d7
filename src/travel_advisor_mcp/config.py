"""Configuration for the Travel Advisor MCP server."""

from pathlib import Path

from pydantic_settings import BaseSettings


class TravelAdvisorConfig(BaseSettings):
    rapidapi_key: str = ""
    places_host: str = "travel-advisor.p.rapidapi.com"
    weather_host: str = "community-open-weather-map.p.rapidapi.com"
    currency: str = "USD"
    units: str = "km"
    lang: str = "en_US"
    request_delay_seconds: float = 0.0
    max_concurrent_requests: int = 2
    timeout_seconds: float = 30.0
    max_retries: int = 3
    cache_max_entries: int = 10
    cache_ttl_seconds: int = 300
    cache_expansion_factor: float = 0.5
    rate_limit_max_requests: int = 15
    rate_limit_window_seconds: int = 3600
    state_dir: Path = Path.home() / ".travel_advisor_mcp"
    state_max_bytes: int = 5_000_000

    model_config = {"env_prefix": "TRAVEL_ADVISOR_"}
