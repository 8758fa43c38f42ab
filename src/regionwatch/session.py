"""Map session — routes surface clicks through the drawing machine into the store."""

import logging
from typing import Protocol

from regionwatch.config import Settings
from regionwatch.drawing import PolygonDraft
from regionwatch.models import DraftUpdate, Point, Region
from regionwatch.store import RegionStore, StoreEvent

logger = logging.getLogger(__name__)


class Surface(Protocol):
    """Anything that can draw the current draft and the finished regions."""

    def render(self, draft_points: tuple[Point, ...], regions: tuple[Region, ...]) -> None: ...


class MapSession:
    """One interactive map: a draft, a store, and the surface that shows them.

    The surface is redrawn after every click, cancel, and store change. The
    session only pushes to the surface; it never reads surface state.
    """

    def __init__(self, store: RegionStore, surface: Surface, settings: Settings | None = None) -> None:
        settings = settings or Settings()
        self.store = store
        self.surface = surface
        # draft cap must match the boundary limit create_region enforces
        self.draft = PolygonDraft(
            max_points=store.max_points,
            closure_threshold=settings.closure_threshold,
        )
        self._unsubscribe = store.subscribe(self._on_store_event)

    def start_drawing(self) -> bool:
        started = self.draft.start()
        if started:
            self._redraw()
        return started

    def cancel_drawing(self) -> None:
        self.draft.cancel()
        self._redraw()

    def on_click(self, point: Point) -> str | None:
        """Handle a map click.

        Returns:
            The id of the region created by this click, if it closed a polygon.
        """
        update: DraftUpdate = self.draft.add_point(point)
        if update.completed is None:
            self._redraw()
            return None
        # create_region notifies the store listeners, which redraws
        return self.store.create_region(update.completed)

    def close(self) -> None:
        self._unsubscribe()

    def _on_store_event(self, event: StoreEvent) -> None:
        logger.debug("Store event: %s", event.value)
        self._redraw()

    def _redraw(self) -> None:
        self.surface.render(self.draft.points, self.store.regions)
