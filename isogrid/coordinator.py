"""
Movement coordination: turns multi-node paths into single-tile moves driven
by the move engine, and re-plans when the next tile gets taken.
"""

from __future__ import annotations
import logging
from typing import Any, List, Optional, Sequence, Tuple

from .calculations import is_in_polygon
from .config import (
    CAMERA_FOLLOW_DURATION,
    CAMERA_FOLLOW_EASING,
    CAMERA_SCALE,
    CHECK_PATH_ON_EACH_TILE,
    FOLLOW_CHARACTER,
    INSTANT_OBJECT_RELOCATION,
    SCREEN_HEIGHT,
    SCREEN_WIDTH,
)
from .direction import get_dir_between
from .events import (
    DirectionChanged,
    EventDispatcher,
    ObjectMoved,
    OtherObjectsOnTile,
    PathBlocked,
    PathComplete,
    TileChanged,
)
from .grid_node import GridNode, MapPos
from .map_object import MapObject, Movable, MoveState
from .move_engine import MoveEngine
from .world import World

logger = logging.getLogger(__name__)


class MovementCoordinator:
    """
    Drives movables along paths one tile at a time.

    A move installs a path and begins its first step. Each step points the
    move engine at the next tile; the engine calls back into
    on_obj_move_step_end() on arrival, which either begins the next step or
    completes the path. A step whose tile became filled since the path was
    computed triggers a new search toward the object's destination.
    """

    def __init__(
        self,
        world: World,
        move_engine: MoveEngine,
        events: Optional[EventDispatcher] = None,
        camera: Any = None,
        check_path_on_each_tile: bool = CHECK_PATH_ON_EACH_TILE,
        instant_object_relocation: bool = INSTANT_OBJECT_RELOCATION,
        follow_character: bool = FOLLOW_CHARACTER,
        external_center: Tuple[float, float] = (SCREEN_WIDTH / 2, SCREEN_HEIGHT / 2),
        camera_scale: float = CAMERA_SCALE,
    ) -> None:
        self.world = world
        self.move_engine = move_engine
        move_engine.delegate = self
        self.events = events or EventDispatcher()
        # Any object with x/y attributes; tweened to keep the controllable centered
        self.camera = camera
        self.check_path_on_each_tile = check_path_on_each_tile
        self.instant_object_relocation = instant_object_relocation
        self.follow_character = follow_character
        self.external_center = external_center
        self.camera_scale = camera_scale
        self.current_controllable: Optional[Movable] = None

    def get_path(
        self, from_pos: Sequence[int], to_pos: Sequence[int]
    ) -> Optional[List[GridNode]]:
        return self.world.get_path(MapPos(*from_pos), MapPos(*to_pos))

    def move_object_to_location(
        self, obj: Movable, pos: Sequence[int], speed: Optional[float] = None
    ) -> bool:
        """
        Search a path to pos and start walking it.
        Returns False if there is no path or the object is already there.
        """
        pos = MapPos(*pos)
        path = self.get_path(obj.map_pos, pos)
        if path is None or (not path and obj.current_target is None):
            return False
        obj.destination = pos
        self.move_object_through(obj, path, speed)
        return True

    def move_object_to_tile(
        self, obj: Movable, pos: Sequence[int], speed: Optional[float] = None
    ) -> bool:
        """Like move_object_to_location, but only onto walkable ground tiles."""
        pos = MapPos(*pos)
        if not self.world.is_tile_movable_to(pos.c, pos.r):
            return False
        return self.move_object_to_location(obj, pos, speed)

    def move_object_to_object(
        self, obj: Movable, target: MapObject, speed: Optional[float] = None
    ) -> bool:
        """
        Walk obj next to target: to its interaction point if it has one and
        it is reachable, else to the adjacent cell with the shortest path.
        """
        base = target.map_pos
        offset = target.interaction_offset
        if offset is not None:
            pos = MapPos(base.c + offset.c, base.r + offset.r)
            if self.world.is_inside(pos.c, pos.r) and self.move_object_to_location(
                obj, pos, speed
            ):
                return True

        cells = self.world.path_finding.get_adjacent_open_cells(
            base.c, base.r, target.column_span, target.row_span
        )
        seen = set()
        min_path = None
        min_pos = None
        for node in cells:
            pos = node.map_pos
            if pos in seen:
                continue
            seen.add(pos)
            if pos == obj.map_pos:
                # Already next to the target: no walking needed
                self.stop_object(obj)
                obj.destination = pos
                self._relocate(obj, pos)
                self._complete(obj)
                return True
            if node.is_wall():
                continue
            path = self.get_path(obj.map_pos, pos)
            if path and (min_path is None or len(path) < len(min_path)):
                min_path = path
                min_pos = pos

        if min_path:
            obj.destination = min_pos
            self.move_object_through(obj, min_path, speed)
            return True
        return False

    def move_object_through(
        self, obj: Movable, path: List[GridNode], speed: Optional[float] = None
    ) -> None:
        """
        Start walking a path, cancelling the step in flight if any.
        An empty path means the object already stands at the end of it.
        """
        if not path:
            obj.destination = obj.map_pos
            if obj.current_target is not None:
                # Still on its tile while stepping off it: walk back
                self._step_back(obj, speed)
            else:
                self._finish(obj)
            return

        if obj.current_target is not None:
            self.stop_object(obj)

        if self.instant_object_relocation:
            self._relocate(obj, path[0].map_pos)
            self._complete(obj)
            return

        self.move_engine.prepare_for_move(obj, path, speed)
        obj.current_target_tile = obj.current_path[obj.current_path_step]
        self.on_obj_move_step_begin(obj, obj.current_target_tile.map_pos)

    def stop_object(self, obj: Movable) -> None:
        obj.current_path = None
        obj.current_target = None
        obj.current_target_tile = None
        obj.move_state = MoveState.IDLE
        self.move_engine.remove_movable(obj)

    def on_obj_move_step_begin(self, obj: Movable, pos: MapPos) -> bool:
        """
        Set up the move to the next tile.
        Returns False if the tile is taken, in which case a new path toward
        the destination is searched instead.
        """
        obj.current_direction = get_dir_between(obj.map_pos.r, obj.map_pos.c, pos.r, pos.c)
        self._emit(DirectionChanged(obj, obj.current_direction, moving=True))

        if not self.world.is_cell_filled(pos.c, pos.r):
            self.move_engine.set_move_parameters(obj, pos)
            self.move_engine.add_movable(obj)
            obj.move_state = MoveState.STEPPING_TO_TILE
            return True

        obj.move_state = MoveState.BLOCKED
        self._emit(PathBlocked(obj, pos))
        self.move_engine.remove_movable(obj)
        self._replan(obj)
        return False

    def on_obj_move_step_end(self, obj: Movable) -> None:
        """Called by the move engine when obj reaches its step target."""
        arrived = obj.current_target_tile
        if arrived is not None and arrived.map_pos != obj.map_pos:
            # Snapped onto the tile before the crossing check fired
            self._change_tile(obj, arrived.map_pos)

        obj.current_path_step -= 1
        obj.current_target = None
        obj.current_target_tile = None
        path_ended = obj.current_path_step < 0
        self.move_engine.remove_movable(obj)

        if path_ended:
            self._finish(obj)
            return

        obj.move_state = MoveState.STEP_ARRIVED
        if self.check_path_on_each_tile:
            self._replan(obj)
        else:
            del obj.current_path[-1]
            self.move_object_through(obj, obj.current_path)

    def check_for_tile_change(self, obj: Movable) -> None:
        """Commit obj to its target tile once it is inside the tile's polygon."""
        self._emit(ObjectMoved(obj))

        tile = obj.current_target_tile
        if tile is None or tile.map_pos == obj.map_pos:
            return
        layout = self.world.layout
        point = (obj.position.x, obj.position.y - layout.tile_half_height)
        if is_in_polygon(point, layout.tile_vertices(tile.y, tile.x)):
            self._change_tile(obj, tile.map_pos)

    def check_for_follow_character(self, obj: Movable) -> None:
        """Tween the camera so the current controllable stays centered."""
        if not (
            self.follow_character
            and self.camera is not None
            and obj is self.current_controllable
        ):
            return
        cx, cy = self.external_center
        self.move_engine.add_tween(
            self.camera,
            CAMERA_FOLLOW_DURATION,
            {
                "x": cx - obj.position.x * self.camera_scale,
                "y": cy - obj.position.y * self.camera_scale,
            },
            0,
            CAMERA_FOLLOW_EASING,
            True,
        )

    def _step_back(self, obj: Movable, speed: Optional[float] = None) -> None:
        self.stop_object(obj)
        pos = obj.map_pos
        node = self.world.path_finding.grid[pos.c][pos.r]
        self.move_engine.prepare_for_move(obj, [node], speed)
        obj.current_target_tile = node
        # Own tile: no occupancy check, the object itself fills it
        self.move_engine.set_move_parameters(obj, pos)
        self.move_engine.add_movable(obj)
        obj.move_state = MoveState.STEPPING_TO_TILE

    def _replan(self, obj: Movable) -> None:
        obj.move_state = MoveState.REPLANNING
        destination = obj.destination
        logger.debug("Re-planning %r from %s to %s", obj, obj.map_pos, destination)
        if destination is None or not self.move_object_to_location(obj, destination):
            self._finish(obj)

    def _change_tile(self, obj: Movable, pos: MapPos) -> None:
        previous = obj.map_pos
        self.world.arrange_obj_location(obj, pos)
        self._emit(TileChanged(obj, previous, obj.map_pos))
        others = [
            o for o in self.world.get_objects_at_location(obj.map_pos) if o is not obj
        ]
        if others:
            self._emit(OtherObjectsOnTile(obj, others))

    def _relocate(self, obj: Movable, pos: MapPos) -> None:
        obj.position = self.world.tile_anchor(pos)
        if pos != obj.map_pos:
            self._change_tile(obj, pos)

    def _finish(self, obj: Movable) -> None:
        self.stop_object(obj)
        self._complete(obj)

    def _complete(self, obj: Movable) -> None:
        obj.move_state = MoveState.PATH_COMPLETE
        reached = obj.destination is not None and obj.map_pos == obj.destination
        if not reached:
            logger.debug("%r stopped at %s short of %s", obj, obj.map_pos, obj.destination)
        self._emit(DirectionChanged(obj, obj.current_direction, moving=False))
        self._emit(PathComplete(obj, reached=reached))

    def _emit(self, event: object) -> None:
        self.events.emit(event)
