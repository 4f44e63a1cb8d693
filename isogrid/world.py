from __future__ import annotations
import logging
from typing import Iterable, List, Optional

from pygame.math import Vector2

from .config import (
    PATHFINDING_CLOSEST,
    PATHFINDING_DIAGONAL,
    TILE_FLOOR,
)
from .grid_node import GridNode, MapPos
from .layout import IsoLayout
from .map_object import MapObject
from .pathfinding import PathFinding

logger = logging.getLogger(__name__)


class World:
    """
    Grid state of a map: the pathfinding grid built from a ground map and the
    map-objects standing on each cell.

    map_grid is a list of rows of tile codes; only TILE_FLOOR cells can be
    walked on. Objects that are not movable-to mark the cells they cover as
    dynamically filled.
    """

    def __init__(
        self,
        map_grid: List[List[int]],
        layout: Optional[IsoLayout] = None,
        diagonal: bool = PATHFINDING_DIAGONAL,
        closest: bool = PATHFINDING_CLOSEST,
    ) -> None:
        if not map_grid or not map_grid[0]:
            raise ValueError("Ground map must have at least one row and column")
        width = len(map_grid[0])
        if any(len(row) != width for row in map_grid):
            raise ValueError("Ground map rows must all have the same length")
        self.map = map_grid
        self.height = len(map_grid)
        self.width = width
        self.layout = layout or IsoLayout()
        self.path_finding = PathFinding(
            self.width, self.height, diagonal=diagonal, closest=closest
        )
        for r, row in enumerate(map_grid):
            for c, tile in enumerate(row):
                if tile != TILE_FLOOR:
                    self.path_finding.set_cell(c, r, 0)
        # obj_array[r][c]: objects referenced at each cell
        self.obj_array: List[List[List[MapObject]]] = [
            [[] for _ in range(self.width)] for _ in range(self.height)
        ]

    def is_inside(self, c: int, r: int) -> bool:
        return 0 <= c < self.width and 0 <= r < self.height

    def is_cell_filled(self, c: int, r: int) -> bool:
        return self.path_finding.is_cell_filled(c, r)

    def is_tile_movable_to(self, c: int, r: int) -> bool:
        """True if the ground tile itself can be walked on."""
        return self.is_inside(c, r) and self.map[r][c] == TILE_FLOOR

    def tile_anchor(self, pos: MapPos) -> Vector2:
        return self.layout.object_anchor(pos.r, pos.c)

    def get_path(self, from_pos: MapPos, to_pos: MapPos) -> Optional[List[GridNode]]:
        """Search a path between two locations; see PathFinding.solve."""
        return self.path_finding.solve(from_pos.c, from_pos.r, to_pos.c, to_pos.r)

    def get_objects_at_location(self, pos: MapPos) -> List[MapObject]:
        if not self.is_inside(pos.c, pos.r):
            return []
        return list(self.obj_array[pos.r][pos.c])

    def add_object_to_location(self, obj: MapObject, pos: MapPos) -> None:
        """Place an object on the map and snap its pixel position to the tile."""
        pos = MapPos(*pos)
        for cell in obj.footprint(pos):
            if not self.is_inside(cell.c, cell.r):
                raise ValueError(f"{obj!r} does not fit on the map at {pos}")
        obj.map_pos = pos
        obj.position = self.tile_anchor(pos)
        self._add_obj_ref(obj, obj.footprint())
        logger.debug("Placed %r at %s", obj, pos)

    def remove_object_from_location(
        self, obj: MapObject, pos: Optional[MapPos] = None
    ) -> None:
        pos = pos or obj.map_pos
        if pos is None:
            return
        self._remove_obj_ref(obj, obj.footprint(pos))
        if pos == obj.map_pos:
            obj.map_pos = None

    def arrange_obj_location(self, obj: MapObject, pos: MapPos) -> None:
        """Logically move an object from its current location to pos."""
        if obj.map_pos is not None:
            self._remove_obj_ref(obj, obj.footprint())
        obj.map_pos = MapPos(*pos)
        self._add_obj_ref(obj, obj.footprint())

    def _add_obj_ref(self, obj: MapObject, cells: Iterable[MapPos]) -> None:
        for cell in cells:
            if not self.is_inside(cell.c, cell.r):
                continue
            objects = self.obj_array[cell.r][cell.c]
            if obj not in objects:
                objects.append(obj)
            if not obj.is_movable_to:
                self.path_finding.set_dynamic_cell(cell.c, cell.r, 0)

    def _remove_obj_ref(self, obj: MapObject, cells: Iterable[MapPos]) -> None:
        for cell in cells:
            if not self.is_inside(cell.c, cell.r):
                continue
            objects = self.obj_array[cell.r][cell.c]
            if obj in objects:
                objects.remove(obj)
            # The cell stays filled while any remaining object blocks it
            blocked = any(not o.is_movable_to for o in objects)
            self.path_finding.set_dynamic_cell(cell.c, cell.r, 0 if blocked else 1)
