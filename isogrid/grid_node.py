"""Grid cell representation used by the pathfinder."""

from __future__ import annotations
from typing import NamedTuple, Optional

from .config import DIAGONAL_COST


class MapPos(NamedTuple):
    """Column/row location of a cell on the map."""

    c: int
    r: int


class GridNode:
    """
    A single cell of the pathfinding grid.
    Attributes:
        x, y: Column and row index of the cell.
        weight: Effective traversal cost; 0 means impassable.
        static_weight: Terrain passability, set once when the map is built.
        g, h, f, visited, closed, parent: Scratch fields of the current search.
    """

    def __init__(self, c: int, r: int, weight: float = 1) -> None:
        self.x = c
        self.y = r
        self.weight = weight
        self.static_weight = weight
        self.map_pos = MapPos(c, r)
        self.reset()

    def reset(self) -> None:
        """Clear the search scratch fields."""
        self.g = 0.0
        self.h = 0.0
        self.f = 0.0
        self.visited = False
        self.closed = False
        self.parent: Optional[GridNode] = None

    def get_cost(self, from_neighbor: Optional[GridNode]) -> float:
        """Cost of stepping onto this node from the given neighbor."""
        if (
            from_neighbor is not None
            and from_neighbor.x != self.x
            and from_neighbor.y != self.y
        ):
            return self.weight * DIAGONAL_COST
        return self.weight

    def is_wall(self) -> bool:
        return self.weight == 0

    def __repr__(self) -> str:
        return f"<GridNode c={self.x} r={self.y} weight={self.weight}>"
