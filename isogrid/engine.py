from __future__ import annotations
import logging
import pygame
from typing import Any, List, Optional, Sequence

from .config import (
    CHECK_PATH_ON_EACH_TILE,
    DEFAULT_SPEED,
    FOLLOW_CHARACTER,
    FPS,
    INSTANT_OBJECT_RELOCATION,
    PATHFINDING_CLOSEST,
    PATHFINDING_DIAGONAL,
)
from .coordinator import MovementCoordinator
from .events import EventDispatcher
from .grid_node import GridNode, MapPos
from .layout import IsoLayout
from .map_object import MapObject, Movable
from .move_engine import MoveEngine
from .world import World

logger = logging.getLogger(__name__)


class Engine:
    """
    Host-facing engine: owns the world, the move engine and the movement
    coordinator, and drives them one tick per frame.
    """

    def __init__(
        self,
        map_grid: List[List[int]],
        clock: Optional[pygame.time.Clock] = None,
        layout: Optional[IsoLayout] = None,
        camera: Any = None,
        fps: int = FPS,
        default_speed: float = DEFAULT_SPEED,
        diagonal: bool = PATHFINDING_DIAGONAL,
        closest: bool = PATHFINDING_CLOSEST,
        check_path_on_each_tile: bool = CHECK_PATH_ON_EACH_TILE,
        instant_object_relocation: bool = INSTANT_OBJECT_RELOCATION,
        follow_character: bool = FOLLOW_CHARACTER,
    ) -> None:
        self.world = World(map_grid, layout=layout, diagonal=diagonal, closest=closest)
        self.events = EventDispatcher()
        self.move_engine = MoveEngine(
            layout=self.world.layout, default_speed=default_speed, fps=fps
        )
        self.coordinator = MovementCoordinator(
            self.world,
            self.move_engine,
            events=self.events,
            camera=camera,
            check_path_on_each_tile=check_path_on_each_tile,
            instant_object_relocation=instant_object_relocation,
            follow_character=follow_character,
        )
        # Clock for frame rate (injectable for testing)
        self.clock = clock or pygame.time.Clock()
        self.fps = fps
        self.frame = 0
        # Control flag
        self.running = False

    def add_object(self, obj: MapObject, c: int, r: int) -> MapObject:
        self.world.add_object_to_location(obj, MapPos(c, r))
        return obj

    def remove_object(self, obj: MapObject) -> None:
        """Take an object off the map, stopping it first if it walks."""
        if isinstance(obj, Movable):
            self.coordinator.stop_object(obj)
            self.move_engine.kill_tweens_of(obj)
        if obj is self.coordinator.current_controllable:
            self.coordinator.current_controllable = None
        self.world.remove_object_from_location(obj)

    def get_path(self, from_pos: Sequence[int], to_pos: Sequence[int]) -> Optional[List[GridNode]]:
        return self.coordinator.get_path(from_pos, to_pos)

    @property
    def current_controllable(self) -> Optional[Movable]:
        return self.coordinator.current_controllable

    def set_current_controllable(self, obj: Movable) -> None:
        self.coordinator.current_controllable = obj

    def move_object_to_location(
        self, obj: Movable, pos: Sequence[int], speed: Optional[float] = None
    ) -> bool:
        return self.coordinator.move_object_to_location(obj, pos, speed)

    def move_current_controllable_to_location(
        self, pos: Sequence[int], speed: Optional[float] = None
    ) -> bool:
        if self.current_controllable is None:
            raise RuntimeError("No current controllable has been set")
        return self.coordinator.move_object_to_location(
            self.current_controllable, pos, speed
        )

    def move_current_controllable_to_object(
        self, obj: MapObject, speed: Optional[float] = None
    ) -> bool:
        if self.current_controllable is None:
            raise RuntimeError("No current controllable has been set")
        return self.coordinator.move_object_to_object(
            self.current_controllable, obj, speed
        )

    def tick(self) -> None:
        """Process one frame of movement and tweens."""
        self.move_engine.run()
        self.frame += 1

    def run(self, max_frames: Optional[int] = None, until_idle: bool = False) -> int:
        """
        Main loop: tick once per frame at the configured rate.
        Stops on stop(), after max_frames ticks, or, with until_idle, when
        nothing is moving or tweening anymore. Returns the ticks processed.
        """
        self.running = True
        ticks = 0
        while self.running:
            if max_frames is not None and ticks >= max_frames:
                break
            if until_idle and not self.move_engine.is_active:
                break
            self.clock.tick(self.fps)
            self.tick()
            ticks += 1
        self.running = False
        logger.debug("Engine loop ended after %d ticks", ticks)
        return ticks

    def stop(self) -> None:
        self.running = False

    def destroy(self) -> None:
        """Stop the loop and drop every movable and tween."""
        self.stop()
        self.move_engine.destroy()
