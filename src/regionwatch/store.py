"""Region store — authoritative region state and the fetch → aggregate → classify pipeline."""

import asyncio
import enum
import itertools
import logging
from collections.abc import Callable, Iterable, Mapping, Sequence
from dataclasses import replace

from regionwatch.config import MIN_POLYGON_POINTS
from regionwatch.geometry import vertex_centroid
from regionwatch.models import ColorRule, Point, Region, SingleSelection, TimelineSelection, TimeSeries
from regionwatch.provider import DataFetchError, DataProvider
from regionwatch.rules import DEFAULT_COLOR, default_color_rules, evaluate
from regionwatch.temporal import current_hour, selection_span, value_for_selection

logger = logging.getLogger(__name__)


class StoreEvent(enum.Enum):
    REGIONS_CHANGED = "regions_changed"
    SELECTION_CHANGED = "selection_changed"


Listener = Callable[[StoreEvent], None]


class RegionStore:
    """In-memory regions, their cached series, and the active timeline selection.

    Mutating methods are synchronous and must be called from inside a running
    event loop: any data fetch they need is scheduled as a task. Each region
    has a generation counter that is bumped whenever a fetch is launched for
    it, and a fetch result is applied only if its generation is still the
    latest, so a slow stale response can never overwrite a fresher one.

    Timeline refreshes are keyed on (selection, region count): every region
    is refetched when either changes, and editing a region's rules or data
    source reuses the cached series instead of refetching.
    """

    def __init__(
        self,
        providers: Mapping[str, DataProvider],
        selection: TimelineSelection | None = None,
        tz_name: str = "UTC",
        max_points: int = 12,
    ) -> None:
        if not providers:
            raise ValueError("At least one data provider is required")
        if max_points < MIN_POLYGON_POINTS:
            raise ValueError(f"max_points must be >= {MIN_POLYGON_POINTS}, got {max_points}")
        self._providers = dict(providers)
        self.tz_name = tz_name
        self.max_points = max_points
        self._selection: TimelineSelection = selection or SingleSelection(current_hour(tz_name))
        self._regions: dict[str, Region] = {}
        self._cache: dict[str, TimeSeries] = {}
        self._generations: dict[str, int] = {}
        self._cached_generations: dict[str, int] = {}
        self._tasks: set[asyncio.Task[None]] = set()
        self._listeners: list[Listener] = []
        self._ids = itertools.count(1)
        self._last_batch: tuple[TimelineSelection, int] | None = None

    # --- Read access ---

    @property
    def regions(self) -> tuple[Region, ...]:
        return tuple(self._regions.values())

    @property
    def selection(self) -> TimelineSelection:
        return self._selection

    @property
    def data_sources(self) -> tuple[str, ...]:
        return tuple(self._providers)

    def get(self, region_id: str) -> Region | None:
        return self._regions.get(region_id)

    def cached_series(self, region_id: str) -> TimeSeries | None:
        return self._cache.get(region_id)

    # --- Notifications ---

    def subscribe(self, listener: Listener) -> Callable[[], None]:
        """Register `listener`; returns a function that unregisters it."""
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _notify(self, event: StoreEvent) -> None:
        for listener in list(self._listeners):
            listener(event)

    # --- Mutations ---

    def create_region(
        self,
        boundary: Sequence[Point],
        data_source: str | None = None,
        rules: Iterable[ColorRule] | None = None,
        name: str | None = None,
    ) -> str:
        """Add a completed polygon and schedule its first fetch + classify.

        Args:
            boundary: Polygon vertices, implicitly closed last → first.
            data_source: Catalog key; defaults to the first registered provider.
            rules: Color rules; the default temperature bands when None.
            name: Display name; "Region N" when None.

        Returns:
            The new region's id.

        Raises:
            ValueError: On a boundary outside [MIN_POLYGON_POINTS, max_points]
                or an unknown data source.
        """
        if not MIN_POLYGON_POINTS <= len(boundary) <= self.max_points:
            raise ValueError(
                f"A region needs {MIN_POLYGON_POINTS}..{self.max_points} points,"
                f" got {len(boundary)}"
            )
        source = data_source or self.data_sources[0]
        self._require_source(source)

        seq = next(self._ids)
        region_id = str(seq)
        self._regions[region_id] = Region(
            id=region_id,
            name=name or f"Region {seq}",
            boundary=tuple(boundary),
            data_source=source,
            rules=default_color_rules() if rules is None else tuple(rules),
        )
        logger.info("Created region %s with %d points", region_id, len(boundary))
        self._notify(StoreEvent.REGIONS_CHANGED)

        if not self._refresh():
            self._schedule(region_id)
        return region_id

    def update_rules(self, region_id: str, rules: Iterable[ColorRule]) -> None:
        """Replace a region's rule set and reclassify from its cached series."""
        region = self._regions.get(region_id)
        if region is None:
            return
        self._regions[region_id] = replace(region, rules=tuple(rules))
        self._reclassify(region_id)
        self._notify(StoreEvent.REGIONS_CHANGED)

    def set_data_source(self, region_id: str, data_source: str) -> None:
        """Point a region at another catalog entry.

        The location is unchanged, so a settled cached series is reused. When
        nothing is cached, or a fetch from the previous source is still in
        flight, a new fetch is scheduled and supersedes it.
        """
        self._require_source(data_source)
        region = self._regions.get(region_id)
        if region is None or region.data_source == data_source:
            return
        self._regions[region_id] = replace(region, data_source=data_source)
        if not (self._is_settled(region_id) and self._reclassify(region_id)):
            self._schedule(region_id)
        self._notify(StoreEvent.REGIONS_CHANGED)

    def rename_region(self, region_id: str, name: str) -> None:
        region = self._regions.get(region_id)
        if region is None:
            return
        self._regions[region_id] = replace(region, name=name)
        self._notify(StoreEvent.REGIONS_CHANGED)

    def delete_region(self, region_id: str) -> None:
        """Remove a region together with its cached series and any pending result."""
        if self._regions.pop(region_id, None) is None:
            return
        self._cache.pop(region_id, None)
        self._generations.pop(region_id, None)
        self._cached_generations.pop(region_id, None)
        logger.info("Deleted region %s", region_id)
        self._notify(StoreEvent.REGIONS_CHANGED)
        self._refresh()

    def on_timeline_change(self, selection: TimelineSelection) -> None:
        """Store the new selection and recompute every region for it."""
        self._selection = selection
        self._notify(StoreEvent.SELECTION_CHANGED)
        self._refresh()

    async def settle(self) -> None:
        """Wait until every scheduled fetch has finished."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks))

    # --- Pipeline ---

    def _require_source(self, data_source: str) -> None:
        if data_source not in self._providers:
            raise ValueError(f"Unknown data source: {data_source!r}")

    def _refresh(self) -> bool:
        """Recompute all regions if (selection, region count) changed since the last batch."""
        key = (self._selection, len(self._regions))
        if key == self._last_batch:
            logger.debug("Timeline unchanged; skipping refresh")
            return False
        self._last_batch = key
        if self._regions:
            logger.info("Recomputing %d regions", len(self._regions))
        for region_id in self._regions:
            self._schedule(region_id)
        return True

    def _schedule(self, region_id: str) -> None:
        generation = self._generations.get(region_id, 0) + 1
        self._generations[region_id] = generation
        task = asyncio.get_running_loop().create_task(
            self._recompute(region_id, generation, self._selection)
        )
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    def _is_current(self, region_id: str, generation: int) -> bool:
        return self._generations.get(region_id) == generation

    def _is_settled(self, region_id: str) -> bool:
        """True when the cached series came from the latest scheduled fetch."""
        return self._cached_generations.get(region_id) == self._generations.get(region_id)

    async def _recompute(
        self, region_id: str, generation: int, selection: TimelineSelection
    ) -> None:
        region = self._regions.get(region_id)
        if region is None:
            return
        center = vertex_centroid(region.boundary)
        start_date, end_date = selection_span(selection, self.tz_name)
        provider = self._providers[region.data_source]

        try:
            series = await provider.fetch_series(
                center.latitude, center.longitude, start_date, end_date
            )
        except DataFetchError as e:
            if not self._is_current(region_id, generation):
                return
            logger.warning("Failed to fetch data for region %s: %s", region_id, e)
            current = self._regions[region_id]
            self._regions[region_id] = replace(
                current, current_color=DEFAULT_COLOR, current_value=None
            )
            self._notify(StoreEvent.REGIONS_CHANGED)
            return

        if not self._is_current(region_id, generation):
            logger.debug("Discarding stale result for region %s (gen %d)", region_id, generation)
            return
        self._cache[region_id] = series
        self._cached_generations[region_id] = generation
        if self._classify(region_id, value_for_selection(series, selection)):
            self._notify(StoreEvent.REGIONS_CHANGED)

    def _reclassify(self, region_id: str) -> bool:
        """Classify from the cached series. False when nothing is cached."""
        series = self._cache.get(region_id)
        if series is None:
            return False
        self._classify(region_id, value_for_selection(series, self._selection))
        return True

    def _classify(self, region_id: str, value: float | None) -> bool:
        """Store (value, color) for the region; no value or no rules leaves it untouched."""
        region = self._regions[region_id]
        if value is None or not region.rules:
            return False
        self._regions[region_id] = replace(
            region, current_value=value, current_color=evaluate(value, region.rules)
        )
        return True
