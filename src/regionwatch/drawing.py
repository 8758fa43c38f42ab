"""Polygon drawing state machine — turns a click stream into a polygon boundary."""

import enum
import logging

from regionwatch.config import MIN_POLYGON_POINTS
from regionwatch.geometry import planar_distance
from regionwatch.models import DraftUpdate, Point

logger = logging.getLogger(__name__)


class DraftState(enum.Enum):
    IDLE = "idle"
    DRAFTING = "drafting"


class PolygonDraft:
    """Collects clicked points until the ring closes or the point cap is hit.

    A draft completes when, with at least MIN_POLYGON_POINTS already placed, a
    click lands within `closure_threshold` of the first point (that click is
    not added; the ring closes back to the first point), or when the point
    count reaches `max_points`. Completion returns the machine to IDLE.

    Calls that do not fit the current state are silently ignored so a stray
    click can never break an interactive session.
    """

    def __init__(self, max_points: int = 12, closure_threshold: float = 0.001) -> None:
        if max_points < MIN_POLYGON_POINTS:
            raise ValueError(
                f"max_points must be >= {MIN_POLYGON_POINTS}, got {max_points}"
            )
        self.max_points = max_points
        self.closure_threshold = closure_threshold
        self._state = DraftState.IDLE
        self._points: list[Point] = []

    @property
    def state(self) -> DraftState:
        return self._state

    @property
    def is_drafting(self) -> bool:
        return self._state is DraftState.DRAFTING

    @property
    def points(self) -> tuple[Point, ...]:
        return tuple(self._points)

    def start(self) -> bool:
        """Begin a new draft. Returns False (and changes nothing) if one is open."""
        if self.is_drafting:
            logger.debug("start() ignored: draft already open with %d points", len(self._points))
            return False
        self._state = DraftState.DRAFTING
        self._points = []
        return True

    def add_point(self, point: Point) -> DraftUpdate:
        """Feed one click into the draft.

        Returns:
            The draft snapshot after this click. `completed` holds the boundary
            when this click finished the polygon; the snapshot points are then
            empty because the draft has been consumed.
        """
        if not self.is_drafting:
            logger.debug("add_point() ignored while idle")
            return DraftUpdate(points=())

        if (
            len(self._points) >= MIN_POLYGON_POINTS
            and planar_distance(point, self._points[0]) < self.closure_threshold
        ):
            return self._complete()

        self._points.append(point)
        if len(self._points) >= self.max_points:
            return self._complete()
        return DraftUpdate(points=self.points)

    def cancel(self) -> DraftUpdate:
        """Abandon the open draft, if any."""
        if self.is_drafting:
            logger.debug("Draft cancelled with %d points", len(self._points))
        self._reset()
        return DraftUpdate(points=())

    def _complete(self) -> DraftUpdate:
        boundary = self.points
        self._reset()
        logger.debug("Draft completed with %d points", len(boundary))
        return DraftUpdate(points=(), completed=boundary)

    def _reset(self) -> None:
        self._state = DraftState.IDLE
        self._points = []
