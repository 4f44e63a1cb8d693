"""
Easing functions for tweens. Each takes (t, b, c, d): current frame,
begin value, change in value and total frames.
"""

from __future__ import annotations
from typing import Callable

EasingFunction = Callable[[float, float, float, float], float]


def linear_tween(t: float, b: float, c: float, d: float) -> float:
    return c * t / d + b


def ease_in_quad(t: float, b: float, c: float, d: float) -> float:
    t /= d
    return c * t * t + b


def ease_out_quad(t: float, b: float, c: float, d: float) -> float:
    t /= d
    return -c * t * (t - 2) + b


def ease_in_out_quad(t: float, b: float, c: float, d: float) -> float:
    t /= d / 2
    if t < 1:
        return c / 2 * t * t + b
    t -= 1
    return -c / 2 * (t * (t - 2) - 1) + b


_EASINGS = {
    "easeIn": ease_in_quad,
    "easeInQuad": ease_in_quad,
    "Quad.easeIn": ease_in_quad,
    "easeOut": ease_out_quad,
    "easeOutQuad": ease_out_quad,
    "Quad.easeOut": ease_out_quad,
    "easeInOut": ease_in_out_quad,
    "easeInOutQuad": ease_in_out_quad,
    "Quad.easeInOut": ease_in_out_quad,
    "linear": linear_tween,
}


def get_easing_func(name: str) -> EasingFunction:
    """Return the easing function for an easing id; unknown ids are linear."""
    return _EASINGS.get(name, linear_tween)
