import sys
import logging

from isogrid.config import TILE_FLOOR, TILE_WALL
from isogrid.engine import Engine
from isogrid.events import DirectionChanged, PathBlocked, PathComplete, TileChanged
from isogrid.map_object import MapObject, Movable

logger = logging.getLogger("isogrid.demo")


def log_event(event):
    """Print what the walking objects are doing."""
    if isinstance(event, TileChanged):
        logger.info("%s entered tile %s", event.obj.object_type, tuple(event.current))
    elif isinstance(event, DirectionChanged):
        state = "walking" if event.moving else "idle"
        logger.info("%s faces %s (%s)", event.obj.object_type, event.direction.name, state)
    elif isinstance(event, PathBlocked):
        logger.info("%s blocked at %s, re-planning", event.obj.object_type, tuple(event.cell))
    elif isinstance(event, PathComplete):
        result = "arrived" if event.reached else "gave up"
        logger.info("%s %s at %s", event.obj.object_type, result, tuple(event.obj.map_pos))


def main():
    logging.basicConfig(level=logging.INFO, format="%(name)s: %(message)s")
    F, W = TILE_FLOOR, TILE_WALL
    # Define the ground map: rows of tile codes, walls block movement
    ground = [
        [F, F, F, F, F, F],
        [F, W, W, W, W, F],
        [F, F, F, F, W, F],
        [W, W, W, F, W, F],
        [F, F, F, F, F, F],
    ]
    engine = Engine(ground)
    engine.events.subscribe(log_event)

    hero = engine.add_object(Movable("hero", speed=4), 0, 0)
    chest = engine.add_object(MapObject("chest", interaction_offset=(-1, 0)), 5, 4)
    # A second walker moving at the same time
    guard = engine.add_object(Movable("guard", speed=2), 5, 0)
    engine.set_current_controllable(hero)

    if not engine.move_current_controllable_to_location((3, 4)):
        logger.error("No path for the hero")
        return 1
    engine.move_object_to_location(guard, (5, 3))
    ticks = engine.run(until_idle=True)

    engine.move_current_controllable_to_object(chest)
    ticks += engine.run(until_idle=True)
    logger.info("Done after %d ticks", ticks)
    engine.destroy()
    return 0


if __name__ == "__main__":
    sys.exit(main())
