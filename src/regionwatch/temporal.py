"""Timeline layer — hourly grid, slider position mapping, and series lookups.

All timestamps handled here are timezone-aware. Grids step in UTC so an hour
is always sixty minutes across DST changes, and hand out slots in the display
timezone so zones with half-hour offsets still get whole local hours.
"""

import bisect
import math
from collections.abc import Iterator
from datetime import date, datetime, timedelta

import numpy as np
from pytz import timezone, utc

from regionwatch.models import RangeSelection, SingleSelection, TimelineSelection, TimeSeries

HOUR = timedelta(hours=1)


class TimelineGrid:
    """Ordered hourly slots from `center - before` to `center + after`, inclusive.

    Slots are computed on access; iterating twice yields the same sequence.
    """

    def __init__(
        self,
        center: datetime,
        before: timedelta,
        after: timedelta,
        step: timedelta,
        tz_name: str = "UTC",
    ) -> None:
        if step <= timedelta(0):
            raise ValueError(f"Grid step must be positive, got {step}")
        if before < timedelta(0) or after < timedelta(0):
            raise ValueError("Grid window must not be negative")
        if center.tzinfo is None:
            raise ValueError(f"Grid center must be timezone-aware: {center!r}")
        self.tz = timezone(tz_name)
        self.center = center.astimezone(utc)
        self.before = before
        self.after = after
        self.step = step
        self.start = self.center - before
        self._length = (before + after) // step + 1

    def __len__(self) -> int:
        return self._length

    def __iter__(self) -> Iterator[datetime]:
        for i in range(self._length):
            yield self._slot(i)

    def __getitem__(self, index: int) -> datetime:
        if index < 0:
            index += self._length
        if not 0 <= index < self._length:
            raise IndexError(f"Grid index out of range: {index}")
        return self._slot(index)

    def _slot(self, index: int) -> datetime:
        return self.tz.normalize((self.start + index * self.step).astimezone(self.tz))

    @property
    def last(self) -> datetime:
        return self[self._length - 1]

    def index_of(self, ts: datetime) -> int | None:
        """Exact slot index of `ts`, or None when it is not on the grid."""
        offset = ts - self.start
        index, remainder = divmod(offset, self.step)
        if remainder or not 0 <= index < self._length:
            return None
        return index

    def __repr__(self) -> str:
        return (
            f"TimelineGrid(start={self.start.isoformat()}, end={self.last.isoformat()},"
            f" step={self.step}, len={self._length})"
        )


def build_grid(
    center: datetime,
    before: timedelta = timedelta(days=15),
    after: timedelta = timedelta(days=15),
    step: timedelta = HOUR,
    tz_name: str = "UTC",
) -> TimelineGrid:
    """Generate the slider grid around `center`.

    Args:
        center: Aware datetime the window is anchored on (usually start of today).
        before: How far back the grid reaches.
        after: How far forward the grid reaches.
        step: Slot width; one hour for hourly series.
        tz_name: pytz zone the slots are expressed in.

    Returns:
        A fresh TimelineGrid. Grids are regenerated, never patched.
    """
    return TimelineGrid(center, before, after, step, tz_name)


def position_to_timestamp(grid: TimelineGrid, position_percent: float) -> datetime:
    """Map a slider position in [0, 100] to the nearest grid slot.

    Halves round up, and out-of-range positions clamp to the first/last slot.
    """
    raw = position_percent / 100 * (len(grid) - 1)
    index = math.floor(raw + 0.5)
    index = max(0, min(index, len(grid) - 1))
    return grid[index]


def timestamp_to_position(grid: TimelineGrid, ts: datetime) -> float:
    """Inverse of position_to_timestamp.

    A timestamp that is not exactly on the grid maps to position 0. A
    single-slot grid always maps to 0.
    """
    index = grid.index_of(ts)
    if index is None or len(grid) == 1:
        return 0.0
    return index / (len(grid) - 1) * 100


def lookup_exact(series: TimeSeries, instant: datetime) -> float | None:
    """Value of the sample at exactly `instant`, or None. No interpolation."""
    timestamps = series.timestamps
    i = bisect.bisect_left(timestamps, instant)
    if i < len(timestamps) and timestamps[i] == instant:
        return series.samples[i].value
    return None


def average_range(series: TimeSeries, start: datetime, end: datetime) -> float | None:
    """Mean of the samples with start <= timestamp <= end, or None if there are none."""
    values = [s.value for s in series.samples if start <= s.timestamp <= end]
    if not values:
        return None
    return float(np.mean(values))


def value_for_selection(series: TimeSeries, selection: TimelineSelection) -> float | None:
    """Exact lookup for a single hour, average for a range."""
    if isinstance(selection, SingleSelection):
        return lookup_exact(series, selection.instant)
    return average_range(series, selection.start, selection.end)


def floor_to_hour(dt: datetime) -> datetime:
    return dt.replace(minute=0, second=0, microsecond=0)


def current_hour(tz_name: str = "UTC") -> datetime:
    """The current whole hour in `tz_name`, as an aware datetime in that zone."""
    return floor_to_hour(datetime.now(timezone(tz_name)))


def start_of_day(tz_name: str = "UTC", day: date | None = None) -> datetime:
    """Local midnight of `day` (default today) in `tz_name`, as an aware datetime."""
    tz = timezone(tz_name)
    if day is None:
        day = datetime.now(tz).date()
    return tz.localize(datetime(day.year, day.month, day.day), is_dst=False)


def selection_span(selection: TimelineSelection, tz_name: str = "UTC") -> tuple[date, date]:
    """Calendar dates (in `tz_name`) a provider request must cover for `selection`."""
    tz = timezone(tz_name)
    if isinstance(selection, SingleSelection):
        day = selection.instant.astimezone(tz).date()
        return day, day
    assert isinstance(selection, RangeSelection)
    return selection.start.astimezone(tz).date(), selection.end.astimezone(tz).date()
