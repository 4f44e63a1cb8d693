"""Compass directions of map-object movement."""

from enum import IntEnum


class Direction(IntEnum):
    """Direction ids; O is idle (no direction)."""

    O = 0  # noqa: E741
    S = 1
    SW = 2
    W = 3
    NW = 4
    N = 5
    NE = 6
    E = 7
    SE = 8


def get_dir_between(r1: int, c1: int, r2: int, c2: int) -> Direction:
    """Return the direction of a move from (r1, c1) to (r2, c2)."""
    if r1 == r2:
        if c1 == c2:
            return Direction.O
        return Direction.NE if c1 < c2 else Direction.SW
    if r1 < r2:
        if c1 == c2:
            return Direction.SE
        return Direction.E if c1 < c2 else Direction.S
    if c1 == c2:
        return Direction.NW
    return Direction.N if c1 < c2 else Direction.W
