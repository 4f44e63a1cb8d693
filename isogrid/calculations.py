"""Vector and polygon helpers for pixel-space movement."""

from __future__ import annotations
from typing import Sequence, Tuple

from pygame.math import Vector2

Point = Tuple[float, float]


def get_dist(p1: Sequence[float], p2: Sequence[float]) -> float:
    """Euclidean distance between two points."""
    return Vector2(p1).distance_to(p2)


def get_unit(v: Sequence[float]) -> Vector2:
    """Unit vector of v; a zero vector stays zero."""
    vec = Vector2(v)
    if vec.length_squared() == 0:
        return vec
    return vec.normalize()


def is_in_polygon(point: Sequence[float], vertices: Sequence[Point]) -> bool:
    """Even-odd test: True if the point lies inside the polygon."""
    test_x, test_y = point[0], point[1]
    inside = False
    j = len(vertices) - 1
    for i in range(len(vertices)):
        xi, yi = vertices[i]
        xj, yj = vertices[j]
        if (yi > test_y) != (yj > test_y) and test_x < (xj - xi) * (
            test_y - yi
        ) / (yj - yi) + xi:
            inside = not inside
        j = i
    return inside
