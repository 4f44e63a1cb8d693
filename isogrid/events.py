"""
Notifications emitted by the movement coordinator, and a synchronous
dispatcher the host subscribes to.
"""

from __future__ import annotations
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable, List, Optional, Tuple, Type

from .direction import Direction
from .grid_node import MapPos

if TYPE_CHECKING:
    from .map_object import MapObject, Movable


@dataclass
class DirectionChanged:
    """Visual state change: facing direction and whether the object walks."""

    obj: Movable
    direction: Direction
    moving: bool


@dataclass
class ObjectMoved:
    """The object's pixel position advanced this tick."""

    obj: Movable


@dataclass
class TileChanged:
    """The object crossed into a new tile."""

    obj: Movable
    previous: Optional[MapPos]
    current: MapPos


@dataclass
class OtherObjectsOnTile:
    """The tile the object just entered holds other objects."""

    obj: Movable
    objects: List[MapObject] = field(default_factory=list)


@dataclass
class PathBlocked:
    """The next tile became occupied after the path was computed."""

    obj: Movable
    cell: MapPos


@dataclass
class PathComplete:
    """The object stopped; reached is False when no path could be found."""

    obj: Movable
    reached: bool = True


Handler = Callable[[object], None]


class EventDispatcher:
    """
    Delivers events to subscribed handlers synchronously, in subscription
    order. A handler subscribed with an event type only receives that type.
    """

    def __init__(self) -> None:
        self._subscribers: List[Tuple[Optional[Type], Handler]] = []

    def subscribe(self, handler: Handler, event_type: Optional[Type] = None) -> None:
        self._subscribers.append((event_type, handler))

    def unsubscribe(self, handler: Handler, event_type: Optional[Type] = None) -> bool:
        """Remove a handler; returns False if it was not subscribed."""
        try:
            self._subscribers.remove((event_type, handler))
        except ValueError:
            return False
        return True

    def emit(self, event: object) -> None:
        for event_type, handler in list(self._subscribers):
            if event_type is None or isinstance(event, event_type):
                handler(event)
