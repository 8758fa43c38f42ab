"""Planar geometry helpers.

Both functions treat latitude/longitude as flat Cartesian coordinates. This is
an approximation that holds at the city-block zoom levels the map works at;
it is not geodesic.
"""

import math
from collections.abc import Sequence

import numpy as np

from regionwatch.models import Point


def planar_distance(a: Point, b: Point) -> float:
    """Euclidean distance in degrees."""
    return math.hypot(a.latitude - b.latitude, a.longitude - b.longitude)


def vertex_centroid(points: Sequence[Point]) -> Point:
    """Arithmetic mean of the vertices (not the area centroid).

    Raises:
        ValueError: If `points` is empty.
    """
    if not points:
        raise ValueError("Cannot take the centroid of an empty polygon")
    coords = np.array([(p.latitude, p.longitude) for p in points], dtype=float)
    lat, lng = coords.mean(axis=0)
    return Point(latitude=float(lat), longitude=float(lng))


def location_key(point: Point) -> str:
    """Cache key for a location, rounded to ~11 m."""
    return f"{point.latitude:.4f},{point.longitude:.4f}"
