"""Shared test fixtures."""

import json
from dataclasses import dataclass, field
from typing import Any

import pytest

from travel_advisor_mcp.models import Bounds
from travel_advisor_mcp.storage import MemoryStore


@dataclass
class MockResponse:
    """Lightweight mock for curl_cffi response objects."""

    status_code: int
    payload: Any = field(default=None)
    text: str = ""

    def json(self) -> Any:
        if self.payload is None:
            return json.loads(self.text)
        return self.payload


class FakeClock:
    """Controllable replacement for ``time.time``."""

    def __init__(self, start_ms: int = 1_700_000_000_000):
        self.now_ms = start_ms

    @property
    def now(self) -> float:
        return self.now_ms / 1000

    def __call__(self) -> float:
        return self.now

    def advance_ms(self, ms: int) -> None:
        self.now_ms += ms


def make_bounds(sw_lat: float, sw_lng: float, ne_lat: float, ne_lng: float) -> Bounds:
    return Bounds.from_corners(sw_lat, sw_lng, ne_lat, ne_lng)


def make_place(name: str, rating: str = "4.5", num_reviews: str = "120") -> dict:
    return {"name": name, "rating": rating, "num_reviews": num_reviews}


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def store() -> MemoryStore:
    return MemoryStore()
