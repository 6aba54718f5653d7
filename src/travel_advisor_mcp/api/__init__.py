"""Travel Advisor API client package."""

from travel_advisor_mcp.api.client import (
    TravelAdvisorAuthError,
    TravelAdvisorClient,
    TravelAdvisorClientError,
    TravelAdvisorRateLimitError,
)
from travel_advisor_mcp.api.parsers import filter_places, is_valid_place

__all__ = [
    "TravelAdvisorAuthError",
    "TravelAdvisorClient",
    "TravelAdvisorClientError",
    "TravelAdvisorRateLimitError",
    "filter_places",
    "is_valid_place",
]
