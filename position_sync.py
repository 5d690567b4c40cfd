"""Position sync channel between the engine and the host window.

Outbound: the simulated position is pushed to the window, at most once
per tick and only when it changed. Inbound: pointer samples arrive from
a 20 Hz poll and the work area once at startup; both are plain
assignments the next tick reads.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Callable, Protocol

from pursuit import Bounds

if TYPE_CHECKING:
    from engine import CompanionEngine

logger = logging.getLogger(__name__)

POLL_INTERVAL_MS = 50


class HostWindowProto(Protocol):
    def move(self, x: int, y: int) -> None: ...
    def get_position(self) -> tuple[int, int]: ...


PointerSource = Callable[[], "tuple[float, float] | None"]


class PositionSync:
    """Sole path between the engine state and the host window."""

    def __init__(self, engine: CompanionEngine, host: HostWindowProto) -> None:
        self.engine = engine
        self.host = host
        self._last_pushed: tuple[int, int] | None = None

    def pull_position(self) -> None:
        """Adopt the window's current position as the simulated one."""
        x, y = self.host.get_position()
        s = self.engine.state
        s.x, s.y = float(x), float(y)
        self.engine.set_bounds(s.bounds)  # re-clamp
        self._last_pushed = (int(round(s.x)), int(round(s.y)))

    def push(self) -> bool:
        """Move the window if the rounded position changed."""
        s = self.engine.state
        pos = (int(round(s.x)), int(round(s.y)))
        if pos == self._last_pushed:
            return False
        self._last_pushed = pos
        self.host.move(*pos)
        return True

    def on_pointer_sample(self, x: float, y: float) -> None:
        self.engine.state.pointer = (float(x), float(y))

    def on_screen_size(self, width: int, height: int) -> None:
        logger.debug("Work area %dx%d", width, height)
        self.engine.set_bounds(Bounds(width, height))


class PointerPoller:
    """Samples the global pointer position on a GLib timer.

    Calls callback(x, y) every POLL_INTERVAL_MS while watching. A source
    returning None (pointer unavailable) skips that sample.
    """

    def __init__(self, source: PointerSource, interval_ms: int = POLL_INTERVAL_MS) -> None:
        self._source = source
        self._interval_ms = interval_ms
        self._callback: Callable[[float, float], None] | None = None
        self._watching = False
        self._timeout_id: int | None = None

    @property
    def watching(self) -> bool:
        return self._watching

    def start_watching(self, callback: Callable[[float, float], None]) -> None:
        from gi.repository import GLib

        if self._watching:
            self.stop_watching()
        self._callback = callback
        self._watching = True
        self._poll()
        self._timeout_id = GLib.timeout_add(self._interval_ms, self._poll)

    def stop_watching(self) -> None:
        from gi.repository import GLib

        self._watching = False
        self._callback = None
        if self._timeout_id is not None:
            GLib.source_remove(self._timeout_id)
            self._timeout_id = None

    def _poll(self) -> bool:
        """Returns True to keep the GLib timeout active."""
        if not self._watching:
            return False
        try:
            sample = self._source()
        except Exception:
            logger.exception("Pointer source failed")
            return True
        if sample is not None and self._callback is not None:
            self._callback(*sample)
        return True
