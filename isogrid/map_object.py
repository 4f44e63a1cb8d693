"""
Map-object module: objects placed on the grid and the movables driven by the
move engine.
"""

from __future__ import annotations
from enum import Enum
from typing import List, Optional, Tuple

from pygame.math import Vector2

from .direction import Direction
from .grid_node import GridNode, MapPos


class MoveState(Enum):
    IDLE = "idle"
    STEPPING_TO_TILE = "stepping_to_tile"
    STEP_ARRIVED = "step_arrived"
    BLOCKED = "blocked"
    REPLANNING = "replanning"
    PATH_COMPLETE = "path_complete"


class MapObject:
    """Represents an object standing on one or more cells of the map."""

    def __init__(
        self,
        object_type: str = "",
        column_span: int = 1,
        row_span: int = 1,
        is_movable_to: bool = False,
        interaction_offset: Optional[Tuple[int, int]] = None,
    ) -> None:
        self.object_type = object_type
        # Footprint: spans columns to the right and rows upward from map_pos
        self.column_span = int(column_span)
        self.row_span = int(row_span)
        # Whether other objects may move onto the cells this object covers
        self.is_movable_to = bool(is_movable_to)
        # Preferred (dc, dr) cell to stand on when interacting with this object
        self.interaction_offset = (
            MapPos(*interaction_offset) if interaction_offset else None
        )
        # Location on the map; set when the object is added to a world
        self.map_pos: Optional[MapPos] = None
        # Pixel position in map space
        self.position = Vector2(0, 0)
        self.current_direction = Direction.O

    def footprint(self, pos: Optional[MapPos] = None) -> List[MapPos]:
        """Cells covered by this object when placed at pos (default: map_pos)."""
        pos = pos or self.map_pos
        return [
            MapPos(c, r)
            for c in range(pos.c, pos.c + self.column_span)
            for r in range(pos.r, pos.r - self.row_span, -1)
        ]

    def __repr__(self) -> str:
        return f"<{type(self).__name__} type={self.object_type!r} pos={self.map_pos}>"


class Movable(MapObject):
    """A map-object that can walk along paths under move engine control."""

    def __init__(
        self,
        object_type: str = "",
        speed: Optional[float] = None,
        column_span: int = 1,
        row_span: int = 1,
        is_movable_to: bool = False,
        interaction_offset: Optional[Tuple[int, int]] = None,
    ) -> None:
        super().__init__(
            object_type,
            column_span=column_span,
            row_span=row_span,
            is_movable_to=is_movable_to,
            interaction_offset=interaction_offset,
        )
        # Pixels per tick; None falls back to the move engine default
        self.speed_magnitude: Optional[float] = speed
        # Unit direction of the current step, zero when inert
        self.speed_unit = Vector2(0, 0)
        self.prev_position = Vector2(0, 0)
        self.current_path: Optional[List[GridNode]] = None
        # Index into current_path of the node being walked to; counts down
        self.current_path_step = -1
        self.current_target: Optional[Vector2] = None
        self.current_target_tile: Optional[GridNode] = None
        self.current_reach_thresh = 0
        # Final location requested for the current move; re-plans aim here
        self.destination: Optional[MapPos] = None
        self.move_state = MoveState.IDLE
