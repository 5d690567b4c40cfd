"""Pursuit simulator: move the sprite toward the pointer.

Pure functions of (position, pointer, bounds, thresholds). The behavior
machine decides *whether* to pursue; this module only decides *how far*
and *which gait*.
"""

from __future__ import annotations

import math
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from profiles import Thresholds


@dataclass(frozen=True)
class Bounds:
    """Screen work area in px."""
    width: int
    height: int

    def max_x(self, t: Thresholds) -> float:
        return float(max(0, self.width - t.sprite_width))

    def max_y(self, t: Thresholds) -> float:
        return float(max(0, self.height - t.sprite_height))

    @property
    def center(self) -> tuple[float, float]:
        return (self.width / 2, self.height / 2)


@dataclass(frozen=True)
class Step:
    x: float
    y: float
    facing_right: bool
    running: bool


def clamp_position(x: float, y: float, bounds: Bounds, t: Thresholds) -> tuple[float, float]:
    x = max(0.0, min(x, bounds.max_x(t)))
    y = max(0.0, min(y, bounds.max_y(t)))
    return (x, y)


def paw_target(pointer: tuple[float, float], bounds: Bounds, t: Thresholds) -> tuple[float, float]:
    """Window position that puts the sprite's paws on the pointer.

    Clamped to the reachable area so the target can always be arrived at.
    """
    px, py = pointer
    return clamp_position(px - t.paw_offset_x, py - t.paw_offset_y, bounds, t)


def target_offset(position: tuple[float, float], pointer: tuple[float, float],
                  bounds: Bounds, t: Thresholds) -> tuple[float, float]:
    """(dx, dy) from the current position to the paw target."""
    tx, ty = paw_target(pointer, bounds, t)
    return (tx - position[0], ty - position[1])


def pointer_distance(position: tuple[float, float], pointer: tuple[float, float],
                     t: Thresholds) -> float:
    """Distance from the sprite's centre to the pointer."""
    cx = position[0] + t.sprite_width / 2
    cy = position[1] + t.sprite_height / 2
    return math.hypot(pointer[0] - cx, pointer[1] - cy)


def step(position: tuple[float, float], pointer: tuple[float, float],
         bounds: Bounds, t: Thresholds, facing_right: bool) -> Step:
    """Advance one tick toward the paw target.

    Beyond ``run_distance`` the gait switches to running and the speed is
    multiplied. The step never overshoots the target; at zero distance the
    position is left unchanged.
    """
    dx, dy = target_offset(position, pointer, bounds, t)
    if dx > 0:
        facing_right = True
    elif dx < 0:
        facing_right = False

    distance = math.hypot(dx, dy)
    running = distance > t.run_distance
    if distance == 0:
        return Step(position[0], position[1], facing_right, running)

    speed = t.walk_speed * t.run_multiplier if running else t.walk_speed
    travel = min(speed, distance)
    x = position[0] + dx / distance * travel
    y = position[1] + dy / distance * travel
    x, y = clamp_position(x, y, bounds, t)
    return Step(x, y, facing_right, running)
