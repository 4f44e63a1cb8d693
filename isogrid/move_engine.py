"""
Move engine: per-frame driver for map-object movement and property tweens.
"""

from __future__ import annotations
import logging
import math
from collections.abc import MutableMapping
from typing import TYPE_CHECKING, Any, Callable, Dict, List, Optional

from pygame.math import Vector2

from .calculations import get_dist, get_unit
from .config import DEFAULT_SPEED, FPS
from .easing import EasingFunction, get_easing_func
from .layout import IsoLayout

if TYPE_CHECKING:
    from .grid_node import GridNode, MapPos
    from .map_object import Movable

logger = logging.getLogger(__name__)


def _get_prop(target: Any, prop: str) -> Any:
    if isinstance(target, MutableMapping):
        return target[prop]
    return getattr(target, prop)


def _set_prop(target: Any, prop: str, value: float) -> None:
    if isinstance(target, MutableMapping):
        target[prop] = value
    else:
        setattr(target, prop, value)


class Tween:
    """
    A timed interpolation of numeric properties of one target object.
    Attributes:
        target: Object (or mapping) whose properties are animated.
        props: prop -> (begin value, change, final value).
        total_frames: Number of ticks the animation lasts.
        current_frame: Ticks elapsed since the animation started.
        delay_frames: Ticks left to wait before the animation starts.
    """

    def __init__(
        self,
        target: Any,
        duration: float,
        props: Dict[str, tuple],
        total_frames: int,
        delay_frames: int,
        easing_func: EasingFunction,
        overwrite: bool,
        on_complete: Optional[Callable[[], None]],
    ) -> None:
        self.target = target
        self.duration = duration
        self.props = props
        self.total_frames = total_frames
        self.current_frame = 0
        self.delay_frames = delay_frames
        self.easing_func = easing_func
        self.overwrite = overwrite
        self.on_complete = on_complete

    def __repr__(self) -> str:
        return (
            f"<Tween props={list(self.props)} "
            f"frame={self.current_frame}/{self.total_frames}>"
        )


class MoveEngine:
    """
    Holds and processes everything that moves on the map: movables walking
    toward their current per-tile target, and tweens of arbitrary numeric
    properties. Both registries are driven by run(), called once per frame.

    The delegate (normally the movement coordinator) is notified when a
    movable reaches its step target and after each position advance.
    """

    def __init__(
        self,
        delegate: Any = None,
        layout: Optional[IsoLayout] = None,
        default_speed: float = DEFAULT_SPEED,
        fps: int = FPS,
    ) -> None:
        self.delegate = delegate
        self.layout = layout or IsoLayout()
        self.default_speed = default_speed
        self.fps = fps
        # Set False to freeze all processing (destroy)
        self.process_frame = True
        self._movables: Dict[int, Movable] = {}
        self._tween_targets: Dict[int, List[Tween]] = {}

    @property
    def is_active(self) -> bool:
        """True while there is anything left to process."""
        return self.process_frame and bool(self._movables or self._tween_targets)

    # --- tweens ---------------------------------------------------------

    def add_tween(
        self,
        target: Any,
        duration: float,
        props: Dict[str, float],
        delay: float = 0,
        easing: str = "linear",
        overwrite: bool = False,
        on_complete: Optional[Callable[[], None]] = None,
    ) -> Optional[Tween]:
        """
        Add a tween animating target's properties to the values in props
        over duration seconds. Properties already at their final value are
        skipped; if none are left, nothing is added and None is returned.
        With overwrite, all other tweens of the target are killed first.
        """
        v = {}
        for prop, final in props.items():
            begin = _get_prop(target, prop)
            if begin != final:
                v[prop] = (begin, final - begin, final)
        if not v:
            return None

        tween = Tween(
            target,
            duration,
            v,
            total_frames=max(1, round(duration * self.fps)),
            delay_frames=max(0, round((delay or 0) * self.fps)),
            easing_func=get_easing_func(easing),
            overwrite=bool(overwrite),
            on_complete=on_complete,
        )
        key = id(target)
        if key in self._tween_targets and not tween.overwrite:
            self._tween_targets[key].append(tween)
        else:
            self._tween_targets[key] = [tween]
        return tween

    def get_tweens_of(self, target: Any) -> List[Tween]:
        return list(self._tween_targets.get(id(target), ()))

    def remove_tween(self, target: Any, tween: Tween) -> bool:
        """
        Remove a single tween of the target.
        Returns True if it was the target's last tween and the target was
        dropped. Raises ValueError if the target or the tween is not
        registered.
        """
        key = id(target)
        tweens = self._tween_targets.get(key)
        if tweens is None:
            logger.error("remove_tween: %r has no tweens", target)
            raise ValueError("No tween target defined for this object")
        try:
            tweens.remove(tween)
        except ValueError:
            logger.error("remove_tween: %r is not a tween of %r", tween, target)
            raise ValueError("No tween defined for this object") from None
        tween.on_complete = None
        if not tweens:
            del self._tween_targets[key]
            return True
        return False

    def kill_tweens_of(self, target: Any) -> bool:
        """Remove all tweens of the target; returns False if it had none."""
        tweens = self._tween_targets.pop(id(target), None)
        if tweens is None:
            return False
        for tween in tweens:
            tween.on_complete = None
        return True

    def remove_all_tweens(self) -> None:
        for tweens in self._tween_targets.values():
            for tween in tweens:
                tween.on_complete = None
        self._tween_targets = {}

    # --- movables -------------------------------------------------------

    def add_movable(self, o: Movable) -> None:
        """Register a movable; adding it twice has no effect."""
        key = id(o)
        if key in self._movables:
            return
        if o.speed_magnitude is None:
            o.speed_magnitude = self.default_speed
        self._movables[key] = o

    def has_movable(self, o: Movable) -> bool:
        return id(o) in self._movables

    def remove_movable(self, o: Movable) -> bool:
        """
        Deregister a movable and zero its speed vector.
        Returns False if it was not registered.
        """
        if self._movables.pop(id(o), None) is None:
            return False
        o.speed_unit = Vector2(0, 0)
        return True

    def remove_all_movables(self) -> None:
        for o in self._movables.values():
            o.speed_unit = Vector2(0, 0)
        self._movables = {}

    def prepare_for_move(
        self, o: Movable, path: List[GridNode], speed: Optional[float] = None
    ) -> None:
        """Install a path; walking starts from its last node."""
        o.current_path = path
        o.current_path_step = len(path) - 1
        o.speed_magnitude = speed or o.speed_magnitude or self.default_speed

    def set_move_parameters(self, o: Movable, pos: MapPos) -> None:
        """Aim the object at the tile at pos for the next step."""
        target = self.layout.object_anchor(pos.r, pos.c)
        o.speed_unit = get_unit(target - o.position)
        o.current_target = target
        o.current_reach_thresh = math.ceil(
            o.speed_unit.length() * o.speed_magnitude
        )

    # --- frame ----------------------------------------------------------

    def run(self) -> None:
        """Process a single frame: movables first, then tweens."""
        if not self.process_frame:
            return
        if self._movables:
            self._run_movables()
        if self._tween_targets:
            self._run_tweens()

    def _run_movables(self) -> None:
        for key, o in list(self._movables.items()):
            # Skip entries removed earlier in this pass
            if self._movables.get(key) is not o:
                continue
            o.prev_position = Vector2(o.position)

            if o.current_target is not None:
                dist = get_dist(o.position, o.current_target)
                if dist <= o.current_reach_thresh:
                    # Reached the target: snap onto it, no overshoot
                    o.position.update(o.current_target)
                    self._on_step_end(o)
                    continue

            o.position += o.speed_unit * o.speed_magnitude

            if self.delegate is not None:
                self.delegate.check_for_tile_change(o)
                self.delegate.check_for_follow_character(o)

    def _on_step_end(self, o: Movable) -> None:
        if self.delegate is not None:
            self.delegate.on_obj_move_step_end(o)
        else:
            o.current_target = None
            self.remove_movable(o)

    def _run_tweens(self) -> None:
        for key, tweens in list(self._tween_targets.items()):
            for tween in list(tweens):
                if tween not in self._tween_targets.get(key, ()):
                    continue
                if tween.delay_frames > 0:
                    tween.delay_frames -= 1
                    continue
                tween.current_frame += 1
                target = tween.target
                if tween.current_frame >= tween.total_frames:
                    for prop, (_, _, final) in tween.props.items():
                        _set_prop(target, prop, final)
                    if tween.on_complete is not None:
                        tween.on_complete()
                    # The callback may have replaced or killed the tweens
                    if tween in self._tween_targets.get(key, ()):
                        self.remove_tween(target, tween)
                else:
                    for prop, (begin, change, _) in tween.props.items():
                        _set_prop(
                            target,
                            prop,
                            tween.easing_func(
                                tween.current_frame,
                                begin,
                                change,
                                tween.total_frames,
                            ),
                        )

    def destroy(self) -> None:
        """Stop processing and drop every movable and tween."""
        logger.debug("MoveEngine destroy")
        self.process_frame = False
        self.remove_all_movables()
        self.remove_all_tweens()
