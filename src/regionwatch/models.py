"""Region, rule and timeline types shared by the drawing, store and render layers."""

from dataclasses import dataclass, field
from datetime import datetime

from regionwatch.config import MIN_POLYGON_POINTS

OPERATORS: tuple[str, ...] = ("=", "<", ">", "<=", ">=")


def _require_hour_aligned(name: str, value: datetime) -> None:
    if value.tzinfo is None or value.utcoffset() is None:
        raise ValueError(f"{name} must be timezone-aware: {value!r}")
    if value.minute or value.second or value.microsecond:
        raise ValueError(f"{name} must be hour-aligned: {value.isoformat()}")


@dataclass(frozen=True)
class Point:
    """A clicked map coordinate. Range is not validated here."""

    latitude: float  # Decimal degrees, [-90, 90]
    longitude: float  # Decimal degrees, [-180, 180]


@dataclass(frozen=True)
class ColorRule:
    """A single threshold rule: values matching `operator threshold` get `color`."""

    id: str
    operator: str  # One of OPERATORS
    threshold: float
    color: str  # Hex token ("#3b82f6")

    def __post_init__(self) -> None:
        if self.operator not in OPERATORS:
            raise ValueError(f"Unknown rule operator: {self.operator!r}")


@dataclass(frozen=True)
class Region:
    """A completed polygon with its data source, rules and last classification."""

    id: str
    name: str
    boundary: tuple[Point, ...]
    data_source: str  # Key into the data-source catalog ("Open-Meteo")
    rules: tuple[ColorRule, ...] = ()
    current_value: float | None = None
    current_color: str | None = None

    def __post_init__(self) -> None:
        if len(self.boundary) < MIN_POLYGON_POINTS:
            raise ValueError(
                f"Region {self.id!r} needs at least {MIN_POLYGON_POINTS} points,"
                f" got {len(self.boundary)}"
            )


@dataclass(frozen=True)
class SingleSelection:
    """One hour on the timeline."""

    instant: datetime

    def __post_init__(self) -> None:
        _require_hour_aligned("instant", self.instant)


@dataclass(frozen=True)
class RangeSelection:
    """An inclusive span of hours on the timeline."""

    start: datetime
    end: datetime

    def __post_init__(self) -> None:
        _require_hour_aligned("start", self.start)
        _require_hour_aligned("end", self.end)
        if self.start > self.end:
            raise ValueError(
                f"Range start {self.start.isoformat()} is after end {self.end.isoformat()}"
            )


TimelineSelection = SingleSelection | RangeSelection


@dataclass(frozen=True)
class Sample:
    """One hourly observation."""

    timestamp: datetime  # Aware, on a whole hour of the provider timezone
    value: float


@dataclass(frozen=True)
class TimeSeries:
    """Hourly samples for one location, strictly increasing by timestamp."""

    location_key: str  # "lat,lon" of the region centroid, 4 decimals
    samples: tuple[Sample, ...] = field(default_factory=tuple)

    def __post_init__(self) -> None:
        for prev, cur in zip(self.samples, self.samples[1:]):
            if cur.timestamp <= prev.timestamp:
                raise ValueError(
                    f"Samples out of order at {cur.timestamp.isoformat()}"
                )

    @property
    def timestamps(self) -> list[datetime]:
        return [s.timestamp for s in self.samples]


@dataclass(frozen=True)
class DraftUpdate:
    """Snapshot emitted by every drawing call so a surface can redraw markers."""

    points: tuple[Point, ...]  # Points of the draft still in progress
    completed: tuple[Point, ...] | None = None  # Finished boundary, if this call closed it

    @property
    def is_complete(self) -> bool:
        return self.completed is not None
