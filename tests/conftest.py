"""Shared fixtures for the engine test suite."""

from datetime import date, timedelta
from typing import Iterable, List

import matplotlib

matplotlib.use("Agg")

import pytest

from titan_engine.market_data import PricePoint
from titan_engine.random_source import RandomSource


class ScriptedRandomSource:
    """Returns a fixed sequence of draws; counts how many were consumed."""

    def __init__(self, values: Iterable[float], repeat: bool = False):
        self.values: List[float] = list(values)
        self.repeat = repeat
        self.calls = 0

    def random(self) -> float:
        if self.calls >= len(self.values):
            if not self.repeat:
                raise RuntimeError(f"Scripted source exhausted after {self.calls} draws")
            value = self.values[self.calls % len(self.values)]
        else:
            value = self.values[self.calls]
        self.calls += 1
        return value


def make_series(closes, start=date(2026, 1, 1)):
    """Build a series with the given closes on consecutive days."""
    return tuple(
        PricePoint(date=start + timedelta(days=i), close=float(c), reflexivity=0.0)
        for i, c in enumerate(closes)
    )


@pytest.fixture
def scripted():
    return ScriptedRandomSource


@pytest.fixture
def midpoint_rng():
    """Every draw is 0.5, which zeroes all centered noise terms."""
    return ScriptedRandomSource([0.5], repeat=True)


@pytest.fixture
def seeded_rng():
    return RandomSource(42)


@pytest.fixture
def fixed_today():
    return date(2026, 10, 18)
