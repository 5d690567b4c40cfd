"""Translate raw pointer events into behavior overrides.

Button 1 press arms a drag. The drag only takes effect once the pointer
has moved past a small slop distance; a release before that is a click
(pet). Double-clicks are detected by the host's multi-click timing and
the release that follows one is swallowed.
"""

from __future__ import annotations

import logging
import math
from typing import TYPE_CHECKING

from pursuit import clamp_position

if TYPE_CHECKING:
    from behavior import BehaviorMachine
    from position_sync import PositionSync

logger = logging.getLogger(__name__)

PRIMARY_BUTTON = 1


class InteractionLayer:
    def __init__(self, machine: BehaviorMachine, sync: PositionSync | None = None) -> None:
        self.machine = machine
        self.sync = sync
        self._armed = False
        self._swallow_release = False
        self._pointer_anchor = (0.0, 0.0)
        self._sprite_anchor = (0.0, 0.0)

    @property
    def state(self):
        return self.machine.state

    def press(self, button: int, x_root: float, y_root: float) -> bool:
        if button != PRIMARY_BUTTON:
            return False
        self._armed = True
        self._pointer_anchor = (x_root, y_root)
        self._sprite_anchor = self.state.position
        return True

    def motion(self, x_root: float, y_root: float) -> bool:
        if not self._armed:
            return False
        s = self.state
        dx = x_root - self._pointer_anchor[0]
        dy = y_root - self._pointer_anchor[1]
        if not s.is_dragging:
            if math.hypot(dx, dy) < self.machine.thresholds.drag_slop:
                return True
            self.machine.begin_drag()
        s.x, s.y = clamp_position(self._sprite_anchor[0] + dx, self._sprite_anchor[1] + dy,
                                  s.bounds, self.machine.thresholds)
        if self.sync is not None:
            self.sync.push()
        return True

    def release(self, button: int) -> bool:
        if button != PRIMARY_BUTTON or not self._armed:
            return False
        self._armed = False
        swallow, self._swallow_release = self._swallow_release, False
        if self.state.is_dragging:
            self.machine.end_drag()
        elif not swallow:
            self.machine.pet()
        return True

    def double_click(self, button: int) -> bool:
        if button != PRIMARY_BUTTON:
            return False
        self._swallow_release = True
        self.machine.double_click()
        return True
