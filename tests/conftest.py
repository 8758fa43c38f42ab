"""
Shared fixtures for the regionwatch tests.

Nothing here touches the network: the store is driven by FakeProvider, an
in-process DataProvider whose responses (and failures) are scripted per
location, and whose calls can be held open with an asyncio.Event to test
out-of-order completion.
"""

import asyncio
from datetime import date, datetime, timedelta

import matplotlib
import pytest
from pytz import utc

matplotlib.use("Agg")

from regionwatch.geometry import location_key  # noqa: E402
from regionwatch.models import Point, Sample, TimeSeries  # noqa: E402
from regionwatch.provider import DataFetchError  # noqa: E402

T0 = datetime(2024, 7, 15, 0, tzinfo=utc)


def hour(n: int) -> datetime:
    """T0 + n hours."""
    return T0 + timedelta(hours=n)


def make_series(values: list[float], start: datetime = T0, key: str = "0,0") -> TimeSeries:
    return TimeSeries(
        location_key=key,
        samples=tuple(
            Sample(timestamp=start + timedelta(hours=i), value=v) for i, v in enumerate(values)
        ),
    )


def square(lat: float, lon: float, size: float = 0.01) -> tuple[Point, ...]:
    """Four-corner boundary whose vertex centroid is (lat + size/2, lon + size/2)."""
    return (
        Point(lat, lon),
        Point(lat, lon + size),
        Point(lat + size, lon + size),
        Point(lat + size, lon),
    )


class FakeProvider:
    """Scripted DataProvider.

    `values` maps a location key to the 24 hourly values returned for it
    (default: a constant `default`). Keys listed in `failing` raise
    DataFetchError. Setting `gate` holds every call until the event is set.
    """

    def __init__(self, default: float = 20.0) -> None:
        self.default = default
        self.values: dict[str, list[float]] = {}
        self.failing: set[str] = set()
        self.gate: asyncio.Event | None = None
        self.calls: list[tuple[str, date, date]] = []

    async def fetch_series(
        self, lat: float, lon: float, start_date: date, end_date: date
    ) -> TimeSeries:
        key = location_key(Point(lat, lon))
        self.calls.append((key, start_date, end_date))
        if self.gate is not None:
            await self.gate.wait()
        else:
            await asyncio.sleep(0)
        if key in self.failing:
            raise DataFetchError(f"503 for {key}")
        start = utc.localize(datetime(start_date.year, start_date.month, start_date.day))
        days = (end_date - start_date).days + 1
        values = self.values.get(key, [self.default] * 24)
        return make_series((values * days)[: 24 * days], start=start, key=key)


@pytest.fixture()
def provider() -> FakeProvider:
    return FakeProvider()
