"""Pydantic data models for places lookups, cache entries and API usage stats."""

from enum import Enum
from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field, model_validator


class QueryType(str, Enum):
    RESTAURANTS = "restaurants"
    HOTELS = "hotels"
    ATTRACTIONS = "attractions"


class LatLng(BaseModel):
    lat: float
    lng: float


class Bounds(BaseModel):
    """A map viewport given by its south-west and north-east corners."""

    sw: LatLng
    ne: LatLng

    @model_validator(mode="after")
    def _check_corners(self) -> "Bounds":
        if self.sw.lat > self.ne.lat:
            raise ValueError("sw.lat must not exceed ne.lat")
        if self.sw.lng > self.ne.lng:
            raise ValueError("sw.lng must not exceed ne.lng")
        return self

    @classmethod
    def from_corners(
        cls, sw_lat: float, sw_lng: float, ne_lat: float, ne_lng: float
    ) -> "Bounds":
        return cls(sw=LatLng(lat=sw_lat, lng=sw_lng), ne=LatLng(lat=ne_lat, lng=ne_lng))

    def contains(self, other: "Bounds") -> bool:
        """True if ``other`` lies fully inside this box (edges included)."""
        return (
            other.sw.lat >= self.sw.lat
            and other.sw.lng >= self.sw.lng
            and other.ne.lat <= self.ne.lat
            and other.ne.lng <= self.ne.lng
        )

    def expand(self, factor: float) -> "Bounds":
        """Grow the box by ``factor`` of its span on every side."""
        lat_diff = self.ne.lat - self.sw.lat
        lng_diff = self.ne.lng - self.sw.lng
        return Bounds(
            sw=LatLng(lat=self.sw.lat - lat_diff * factor, lng=self.sw.lng - lng_diff * factor),
            ne=LatLng(lat=self.ne.lat + lat_diff * factor, lng=self.ne.lng + lng_diff * factor),
        )


class CacheEntry(BaseModel):
    """A cached upstream response covering an (expanded) bounding box."""

    model_config = ConfigDict(populate_by_name=True)

    query_type: str = Field(alias="type")
    bounds: Bounds
    data: list[Any] = Field(default_factory=list)
    timestamp: int


class StoredCacheItem(BaseModel):
    """One element of the persisted cache blob."""

    key: str
    entry: CacheEntry


class CacheStats(BaseModel):
    size: int
    max_size: int
    entries: list[str] = Field(default_factory=list)


class RateLimitStats(BaseModel):
    remaining: int
    limit: int
    reset_in: int
    reset_in_minutes: int


class PlacesLookup(BaseModel):
    """Outcome of a cached, rate-limited places lookup."""

    query_type: str
    bounds: Bounds
    places: list[dict[str, Any]] = Field(default_factory=list)
    source: Literal["cache", "api", "rate_limited", "error"]
    reset_in_minutes: Optional[int] = None
    error: Optional[str] = None


def query_type_value(query_type: "QueryType | str") -> str:
    """Return the plain string form of a query type."""
    if isinstance(query_type, QueryType):
        return query_type.value
    return str(query_type)
