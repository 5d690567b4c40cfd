"""Animation catalog and frame scheduler for Desk Cat.

Animations are immutable descriptors looked up by name. The scheduler
advances the active animation's frame on its own cadence, independent of
the simulation tick that moves the sprite.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Mapping

logger = logging.getLogger(__name__)


class UnknownAnimationError(KeyError):
    """Raised when an animation name is not in the catalog."""


@dataclass(frozen=True)
class AnimationDescriptor:
    """A single playable animation."""
    name: str
    frames: tuple[str, ...]
    frame_ms: int
    loop: bool = True

    def __post_init__(self) -> None:
        if not self.frames:
            raise ValueError(f"animation {self.name!r} has no frames")
        if self.frame_ms <= 0:
            raise ValueError(f"animation {self.name!r} frame_ms must be > 0")


Catalog = Mapping[str, AnimationDescriptor]


def make_catalog(*descriptors: AnimationDescriptor) -> dict[str, AnimationDescriptor]:
    return {d.name: d for d in descriptors}


def get_descriptor(catalog: Catalog, name: str) -> AnimationDescriptor:
    try:
        return catalog[name]
    except KeyError:
        raise UnknownAnimationError(name) from None


def advance_frame(descriptor: AnimationDescriptor, frame: int) -> int:
    """Return the frame after ``frame``.

    Looping animations wrap to 0; non-looping ones hold the last frame.
    """
    frame += 1
    if frame >= len(descriptor.frames):
        return 0 if descriptor.loop else len(descriptor.frames) - 1
    return frame


class FrameScheduler:
    """Tracks the active animation and its frame index.

    At most one frame step happens per tick; the accumulator restarts
    after each step so a long stall does not fast-forward the animation.
    """

    def __init__(self, catalog: Catalog, initial: str) -> None:
        self._catalog = catalog
        self._descriptor = get_descriptor(catalog, initial)
        self._frame: int = 0
        self._elapsed_ms: float = 0.0

    @property
    def animation(self) -> str:
        return self._descriptor.name

    @property
    def frame(self) -> int:
        return self._frame

    @property
    def descriptor(self) -> AnimationDescriptor:
        return self._descriptor

    @property
    def frame_ref(self) -> str:
        """Reference (asset path) of the frame currently showing."""
        return self._descriptor.frames[self._frame]

    def set_animation(self, name: str) -> bool:
        """Switch to ``name``, restarting from frame 0.

        Unknown names are refused and the previous animation keeps
        playing. Returns True if the switch happened.
        """
        try:
            descriptor = get_descriptor(self._catalog, name)
        except UnknownAnimationError:
            logger.warning("Unknown animation %r, keeping %r", name, self.animation)
            return False
        self._descriptor = descriptor
        self._frame = 0
        self._elapsed_ms = 0.0
        return True

    def tick(self, delta_ms: float) -> tuple[str, int]:
        """Advance by delta_ms and return the current (animation, frame)."""
        self._elapsed_ms += delta_ms
        if self._elapsed_ms >= self._descriptor.frame_ms:
            self._elapsed_ms = 0.0
            self._frame = advance_frame(self._descriptor, self._frame)
        return (self._descriptor.name, self._frame)
