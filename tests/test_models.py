"""Tests for Pydantic data models."""

import pytest
from pydantic import ValidationError

from travel_advisor_mcp.models import (
    Bounds,
    CacheEntry,
    LatLng,
    PlacesLookup,
    QueryType,
    StoredCacheItem,
    query_type_value,
)


def test_query_type_values():
    assert QueryType.RESTAURANTS.value == "restaurants"
    assert QueryType.HOTELS.value == "hotels"
    assert QueryType.ATTRACTIONS.value == "attractions"


def test_query_type_value_accepts_enum_and_str():
    assert query_type_value(QueryType.HOTELS) == "hotels"
    assert query_type_value("attractions") == "attractions"


def test_bounds_from_corners():
    b = Bounds.from_corners(1.0, 2.0, 3.0, 4.0)
    assert b.sw == LatLng(lat=1.0, lng=2.0)
    assert b.ne == LatLng(lat=3.0, lng=4.0)


def test_bounds_rejects_inverted_latitude():
    with pytest.raises(ValidationError):
        Bounds.from_corners(3.0, 2.0, 1.0, 4.0)


def test_bounds_rejects_inverted_longitude():
    with pytest.raises(ValidationError):
        Bounds.from_corners(1.0, 4.0, 3.0, 2.0)


def test_bounds_allows_degenerate_box():
    b = Bounds.from_corners(1.0, 1.0, 1.0, 1.0)
    assert b.contains(b)


def test_contains():
    outer = Bounds.from_corners(0.0, 0.0, 10.0, 10.0)
    assert outer.contains(Bounds.from_corners(1.0, 1.0, 9.0, 9.0))
    assert outer.contains(outer)
    assert not outer.contains(Bounds.from_corners(-1.0, 1.0, 9.0, 9.0))
    assert not outer.contains(Bounds.from_corners(1.0, 1.0, 9.0, 10.5))
    assert not Bounds.from_corners(1.0, 1.0, 9.0, 9.0).contains(outer)


def test_expand():
    expanded = Bounds.from_corners(10.0, 20.0, 11.0, 22.0).expand(0.5)
    assert expanded == Bounds.from_corners(9.5, 19.0, 11.5, 23.0)


def test_expand_zero_factor_is_identity():
    b = Bounds.from_corners(10.0, 20.0, 11.0, 22.0)
    assert b.expand(0.0) == b


def test_cache_entry_uses_type_alias():
    entry = CacheEntry(
        query_type="hotels",
        bounds=Bounds.from_corners(0.0, 0.0, 1.0, 1.0),
        data=[{"name": "h"}],
        timestamp=123,
    )
    dumped = entry.model_dump(by_alias=True)
    assert dumped["type"] == "hotels"
    assert "query_type" not in dumped
    assert CacheEntry.model_validate(dumped) == entry


def test_stored_item_validation():
    with pytest.raises(ValidationError):
        StoredCacheItem.model_validate({"key": "k", "entry": {"type": "hotels", "timestamp": 1}})


def test_places_lookup_defaults():
    lookup = PlacesLookup(
        query_type="restaurants",
        bounds=Bounds.from_corners(0.0, 0.0, 1.0, 1.0),
        source="cache",
    )
    assert lookup.places == []
    assert lookup.reset_in_minutes is None
    assert lookup.error is None


def test_places_lookup_rejects_unknown_source():
    with pytest.raises(ValidationError):
        PlacesLookup(
            query_type="restaurants",
            bounds=Bounds.from_corners(0.0, 0.0, 1.0, 1.0),
            source="somewhere",
        )
