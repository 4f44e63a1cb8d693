import pytest

from isogrid.config import TILE_FLOOR
from isogrid.coordinator import MovementCoordinator
from isogrid.direction import Direction
from isogrid.events import (
    DirectionChanged,
    EventDispatcher,
    ObjectMoved,
    OtherObjectsOnTile,
    PathBlocked,
    PathComplete,
    TileChanged,
)
from isogrid.grid_node import MapPos
from isogrid.map_object import MapObject, Movable, MoveState
from isogrid.move_engine import MoveEngine
from isogrid.world import World

F = TILE_FLOOR


class DummyCamera:
    def __init__(self):
        self.x = 0.0
        self.y = 0.0


def make_coordinator(columns, rows, **kwargs):
    world = World(map_grid=[[F] * columns for _ in range(rows)])
    engine = MoveEngine(layout=world.layout)
    events = []
    dispatcher = EventDispatcher()
    dispatcher.subscribe(events.append)
    kwargs.setdefault("follow_character", False)
    coord = MovementCoordinator(world, engine, events=dispatcher, **kwargs)
    return coord, events


def run_until_idle(coord, limit=2000):
    frames = 0
    while coord.move_engine.is_active and frames < limit:
        coord.move_engine.run()
        frames += 1
    assert frames < limit, "movement never settled"
    return frames


def of_type(events, event_type):
    return [e for e in events if isinstance(e, event_type)]


def test_walk_along_row_reaches_destination():
    coord, events = make_coordinator(4, 1)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    assert coord.move_object_to_location(hero, (3, 0))
    assert hero.move_state == MoveState.STEPPING_TO_TILE
    run_until_idle(coord)

    assert hero.map_pos == (3, 0)
    assert hero.position == coord.world.tile_anchor(MapPos(3, 0))
    assert hero.move_state == MoveState.PATH_COMPLETE
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]
    changes = [(e.previous, e.current) for e in of_type(events, TileChanged)]
    assert changes == [((0, 0), (1, 0)), ((1, 0), (2, 0)), ((2, 0), (3, 0))]
    assert of_type(events, ObjectMoved)
    # Occupancy follows the object
    assert coord.world.is_cell_filled(3, 0)
    assert not coord.world.is_cell_filled(0, 0)


def test_direction_events_while_walking():
    coord, events = make_coordinator(4, 1)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.move_object_to_location(hero, (2, 0))
    run_until_idle(coord)
    dirs = of_type(events, DirectionChanged)
    assert [d.moving for d in dirs] == [True, True, False]
    assert all(d.direction == Direction.NE for d in dirs)


def test_unreachable_or_same_location_is_rejected():
    coord, events = make_coordinator(3, 1)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.world.add_object_to_location(MapObject("box"), MapPos(1, 0))
    assert coord.move_object_to_location(hero, (2, 0)) is False
    assert coord.move_object_to_location(hero, (0, 0)) is False
    assert not coord.move_engine.is_active
    assert events == []


def test_move_object_to_tile_rejects_non_floor():
    world = World(map_grid=[[F, F, 0]])
    coord = MovementCoordinator(world, MoveEngine(layout=world.layout))
    hero = Movable("hero")
    world.add_object_to_location(hero, MapPos(0, 0))
    assert coord.move_object_to_tile(hero, (2, 0)) is False
    assert coord.move_object_to_tile(hero, (1, 0)) is True


def test_blocked_tile_triggers_replan_to_destination():
    coord, events = make_coordinator(4, 2)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    assert coord.move_object_to_location(hero, (3, 0))
    # Straight path; block its middle after the walk started
    coord.world.add_object_to_location(MapObject("box"), MapPos(2, 0))
    run_until_idle(coord)

    assert of_type(events, PathBlocked) == [PathBlocked(hero, MapPos(2, 0))]
    assert hero.map_pos == (3, 0)
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]
    visited = [e.current for e in of_type(events, TileChanged)]
    assert visited == [(1, 0), (1, 1), (2, 1), (3, 1), (3, 0)]


def test_failed_replan_completes_without_reaching():
    coord, events = make_coordinator(4, 1)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    assert coord.move_object_to_location(hero, (3, 0))
    coord.world.add_object_to_location(MapObject("box"), MapPos(3, 0))
    run_until_idle(coord)

    assert hero.map_pos == (2, 0)
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=False)]
    assert hero.move_state == MoveState.PATH_COMPLETE
    assert not coord.move_engine.has_movable(hero)


def test_new_move_cancels_step_in_flight():
    coord, events = make_coordinator(4, 1)
    hero = Movable("hero", speed=3)
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.move_object_to_location(hero, (3, 0))
    # Far enough to have crossed into (1, 0)
    for _ in range(20):
        coord.move_engine.run()
    assert hero.map_pos == (1, 0)

    assert coord.move_object_to_location(hero, (0, 0))
    run_until_idle(coord)
    assert hero.map_pos == (0, 0)
    assert hero.position == coord.world.tile_anchor(MapPos(0, 0))
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]


def test_new_move_to_tile_being_left_walks_back():
    coord, events = make_coordinator(4, 1)
    hero = Movable("hero", speed=3)
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.move_object_to_location(hero, (3, 0))
    for _ in range(5):
        coord.move_engine.run()
    assert hero.map_pos == (0, 0)
    assert hero.position != coord.world.tile_anchor(MapPos(0, 0))

    assert coord.move_object_to_location(hero, (0, 0))
    run_until_idle(coord)
    assert hero.position == coord.world.tile_anchor(MapPos(0, 0))
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]


def test_stop_object():
    coord, _ = make_coordinator(4, 1)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.move_object_to_location(hero, (3, 0))
    coord.move_engine.run()
    coord.stop_object(hero)
    assert hero.move_state == MoveState.IDLE
    assert hero.current_path is None
    assert not coord.move_engine.has_movable(hero)


def test_move_to_object_picks_shortest_adjacent_cell():
    coord, events = make_coordinator(3, 3)
    hero = Movable("hero")
    chest = MapObject("chest")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.world.add_object_to_location(chest, MapPos(2, 0))
    assert coord.move_object_to_object(hero, chest)
    assert hero.destination == (1, 0)
    run_until_idle(coord)
    assert hero.map_pos == (1, 0)


def test_move_to_object_uses_interaction_offset():
    coord, _ = make_coordinator(3, 3)
    hero = Movable("hero")
    chest = MapObject("chest", interaction_offset=(0, 1))
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.world.add_object_to_location(chest, MapPos(2, 0))
    assert coord.move_object_to_object(hero, chest)
    run_until_idle(coord)
    assert hero.map_pos == (2, 1)


def test_move_to_object_when_already_adjacent():
    coord, events = make_coordinator(3, 1)
    hero = Movable("hero")
    chest = MapObject("chest")
    coord.world.add_object_to_location(hero, MapPos(1, 0))
    coord.world.add_object_to_location(chest, MapPos(2, 0))
    assert coord.move_object_to_object(hero, chest)
    assert not coord.move_engine.is_active
    assert hero.map_pos == (1, 0)
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]


def test_move_to_unreachable_object():
    coord, _ = make_coordinator(3, 1)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.world.add_object_to_location(MapObject("box"), MapPos(1, 0))
    chest = MapObject("chest")
    coord.world.add_object_to_location(chest, MapPos(2, 0))
    assert coord.move_object_to_object(hero, chest) is False


def test_check_path_on_each_tile_replans_every_step(monkeypatch):
    coord, events = make_coordinator(4, 1, check_path_on_each_tile=True)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    calls = []
    real_get_path = coord.world.get_path

    def counting_get_path(from_pos, to_pos):
        calls.append((from_pos, to_pos))
        return real_get_path(from_pos, to_pos)

    monkeypatch.setattr(coord.world, "get_path", counting_get_path)
    coord.move_object_to_location(hero, (3, 0))
    run_until_idle(coord)
    assert hero.map_pos == (3, 0)
    assert [c[0] for c in calls] == [(0, 0), (1, 0), (2, 0)]
    assert all(c[1] == (3, 0) for c in calls)


def test_instant_relocation():
    coord, events = make_coordinator(4, 2, instant_object_relocation=True)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    assert coord.move_object_to_location(hero, (3, 1))
    assert hero.map_pos == (3, 1)
    assert hero.position == coord.world.tile_anchor(MapPos(3, 1))
    assert not coord.move_engine.is_active
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]
    assert coord.world.is_cell_filled(3, 1)
    assert not coord.world.is_cell_filled(0, 0)


def test_other_objects_on_tile_event():
    coord, events = make_coordinator(3, 1)
    hero = Movable("hero")
    rug = MapObject("rug", is_movable_to=True)
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.world.add_object_to_location(rug, MapPos(1, 0))
    coord.move_object_to_location(hero, (2, 0))
    run_until_idle(coord)
    assert of_type(events, OtherObjectsOnTile) == [OtherObjectsOnTile(hero, [rug])]


def test_camera_follows_current_controllable():
    camera = DummyCamera()
    coord, _ = make_coordinator(
        4, 1, camera=camera, follow_character=True, external_center=(400, 300)
    )
    hero = Movable("hero", speed=3)
    guard = Movable("guard")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.world.add_object_to_location(guard, MapPos(3, 0))
    coord.current_controllable = hero

    coord.move_object_to_location(guard, (2, 0))
    coord.move_engine.run()
    # Only the controllable moves the camera
    assert coord.move_engine.get_tweens_of(camera) == []

    coord.move_object_to_location(hero, (1, 0))
    coord.move_engine.run()
    coord.move_engine.run()
    # Each advance overwrites the previous follow tween
    assert len(coord.move_engine.get_tweens_of(camera)) == 1
    run_until_idle(coord)
    assert abs(camera.x - (400 - hero.position.x)) <= 3
    assert abs(camera.y - (300 - hero.position.y)) <= 3


def test_filtered_event_subscription():
    coord, _ = make_coordinator(2, 1)
    completed = []
    coord.events.subscribe(completed.append, PathComplete)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.move_object_to_location(hero, (1, 0))
    run_until_idle(coord)
    assert completed == [PathComplete(hero, reached=True)]
    assert coord.events.unsubscribe(completed.append, PathComplete)
    assert not coord.events.unsubscribe(completed.append, PathComplete)


def test_coordinator_registers_as_delegate():
    coord, _ = make_coordinator(2, 1)
    assert coord.move_engine.delegate is coord
    assert coord.current_controllable is None


@pytest.mark.parametrize("target", [(1, 0), (0, 1)])
def test_each_step_is_committed(target):
    coord, events = make_coordinator(2, 2)
    hero = Movable("hero", speed=80)
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.move_object_to_location(hero, target)
    run_until_idle(coord)
    # A fast walker snaps onto the tile before the crossing check fires
    assert hero.map_pos == target
    assert [e.current for e in of_type(events, TileChanged)] == [target]


@pytest.mark.parametrize("instant", [False, True])
def test_move_through_empty_path_completes_in_place(instant):
    coord, events = make_coordinator(3, 3, instant_object_relocation=instant)
    hero = Movable("hero")
    coord.world.add_object_to_location(hero, MapPos(1, 1))
    path = coord.get_path((1, 1), (1, 1))
    assert path == []
    coord.move_object_through(hero, path)
    assert hero.map_pos == (1, 1)
    assert hero.move_state == MoveState.PATH_COMPLETE
    assert not coord.move_engine.is_active
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]


def test_move_through_empty_path_mid_step_walks_back():
    coord, events = make_coordinator(3, 1)
    hero = Movable("hero", speed=3)
    coord.world.add_object_to_location(hero, MapPos(0, 0))
    coord.move_object_to_location(hero, (2, 0))
    for _ in range(3):
        coord.move_engine.run()
    coord.move_object_through(hero, [])
    run_until_idle(coord)
    assert hero.map_pos == (0, 0)
    assert hero.position == coord.world.tile_anchor(MapPos(0, 0))
    assert of_type(events, PathComplete) == [PathComplete(hero, reached=True)]
