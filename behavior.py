"""Behavior state machine for Desk Cat.

Holds the simulation state and decides what the companion does next:
weighted autonomous draws, chase/swat transitions, sleep and wake, and
the overrides forced by direct interaction. Self-expiring behaviors are
driven by named one-shot timeouts that run on simulated time.
"""

from __future__ import annotations

import enum
import logging
import random
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Callable

from animator import FrameScheduler
from pursuit import Bounds, pointer_distance
from weights import BehaviorWeights, weighted_choice

if TYPE_CHECKING:
    from profiles import DrawOption, Profile

logger = logging.getLogger(__name__)


class Behavior(enum.Enum):
    IDLE = "idle"
    IDLE_VARIANT = "idleVariant"
    GROOMING = "grooming"
    SCRATCHING = "scratching"
    SLEEPING = "sleeping"
    WALKING = "walking"
    HITTING = "hitting"
    PLAYING = "playing"


class Cue(enum.Enum):
    """Transient visual effects for the host to show."""
    HEART = "heart"
    BOUNCE = "bounce"
    ZZZ = "zzz"


CHASE_BEHAVIORS = (Behavior.WALKING, Behavior.HITTING)


# ======================================================================
# Timeouts
# ======================================================================

@dataclass
class Timeout:
    name: str
    remaining_ms: float
    callback: Callable[[], None]
    guard: Behavior | None


class Timeouts:
    """Named, cancelable one-shot timers advanced by the simulation tick.

    Scheduling a name that is already pending replaces it. A timer with a
    guard only fires if the current behavior still equals the guard;
    otherwise it is dropped.
    """

    def __init__(self) -> None:
        self._pending: dict[str, Timeout] = {}

    def __contains__(self, name: str) -> bool:
        return name in self._pending

    def __len__(self) -> int:
        return len(self._pending)

    def remaining(self, name: str) -> float | None:
        timeout = self._pending.get(name)
        return timeout.remaining_ms if timeout else None

    def schedule(self, name: str, delay_ms: float, callback: Callable[[], None],
                 guard: Behavior | None = None) -> None:
        self._pending[name] = Timeout(name, float(delay_ms), callback, guard)

    def cancel(self, name: str) -> bool:
        return self._pending.pop(name, None) is not None

    def cancel_guarded(self, behavior: Behavior) -> None:
        """Cancel every timer guarding ``behavior``."""
        for name in [n for n, t in self._pending.items() if t.guard is behavior]:
            del self._pending[name]

    def cancel_all(self) -> None:
        self._pending.clear()

    def advance(self, delta_ms: float, current: Callable[[], Behavior]) -> None:
        for timeout in self._pending.values():
            timeout.remaining_ms -= delta_ms
        due = sorted((t for t in self._pending.values() if t.remaining_ms <= 0),
                     key=lambda t: t.remaining_ms)
        for timeout in due:
            # An earlier callback may have cancelled or replaced this one
            if self._pending.get(timeout.name) is not timeout:
                continue
            del self._pending[timeout.name]
            if timeout.guard is not None and timeout.guard is not current():
                logger.debug("Dropped stale timer %s (guard %s, now %s)",
                             timeout.name, timeout.guard.value, current().value)
                continue
            timeout.callback()


# ======================================================================
# Simulation state
# ======================================================================

@dataclass
class SimulationState:
    """Everything the engine mutates. One instance per companion window."""
    frames: FrameScheduler
    bounds: Bounds
    x: float = 0.0
    y: float = 0.0
    facing_right: bool = True
    behavior: Behavior = Behavior.IDLE
    behavior_elapsed_ms: float = 0.0
    base_animation: str = ""
    pointer: tuple[float, float] = (0.0, 0.0)
    is_dragging: bool = False
    is_sleeping: bool = False
    idle_ticks: int = 0
    boredom_ticks: int = 0
    timers: Timeouts = field(default_factory=Timeouts)
    cues: list[Cue] = field(default_factory=list)

    @classmethod
    def create(cls, profile: Profile, bounds: Bounds,
               position: tuple[float, float] | None = None) -> SimulationState:
        """Fresh idle state; position defaults to bottom centre, pointer to screen centre."""
        t = profile.thresholds
        if position is None:
            position = (bounds.width / 2, bounds.max_y(t))
        state = cls(
            frames=FrameScheduler(profile.catalog, profile.idle_animation),
            bounds=bounds,
            base_animation=profile.idle_animation,
            pointer=bounds.center,
        )
        state.x = max(0.0, min(float(position[0]), bounds.max_x(t)))
        state.y = max(0.0, min(float(position[1]), bounds.max_y(t)))
        return state

    @property
    def position(self) -> tuple[float, float]:
        return (self.x, self.y)

    @property
    def animation(self) -> str:
        return self.frames.animation

    @property
    def frame(self) -> int:
        return self.frames.frame


# ======================================================================
# Behavior machine
# ======================================================================

class BehaviorMachine:
    """Single writer of ``state.behavior``.

    Autonomous decisions come from ``autonomous_tick`` (coarse interval),
    chase transitions from ``check_swat`` (every motion tick) and overrides
    from the interaction methods.
    """

    def __init__(self, state: SimulationState, profile: Profile,
                 weights: BehaviorWeights, rng: random.Random | None = None) -> None:
        self.state = state
        self.profile = profile
        self.weights = weights
        self.rng = rng or random.Random()

    @property
    def thresholds(self):
        return self.profile.thresholds

    # --- transitions ---

    def transition(self, behavior: Behavior, animation: str | None = None) -> bool:
        """Enter ``behavior``, cancelling timers owned by the previous one.

        Refused (returns False) if ``animation`` is not in the catalog.
        """
        s = self.state
        if animation is not None and animation not in self.profile.catalog:
            logger.warning("Refusing %s: unknown animation %r", behavior.value, animation)
            return False
        previous = s.behavior
        s.timers.cancel_guarded(previous)
        s.behavior = behavior
        s.behavior_elapsed_ms = 0.0
        s.is_sleeping = behavior is Behavior.SLEEPING
        if animation is not None:
            s.frames.set_animation(animation)
            s.base_animation = animation
        if previous is not behavior:
            logger.debug("Behavior %s -> %s (%s)", previous.value, behavior.value, s.animation)
        return True

    def go_idle(self, animation: str | None = None) -> None:
        self.transition(Behavior.IDLE, animation or self.profile.idle_animation)

    def start_walking(self) -> None:
        self.state.idle_ticks = 0
        self.state.boredom_ticks = 0
        self.transition(Behavior.WALKING, self.profile.walk_animation)

    def start_hitting(self) -> None:
        self.state.idle_ticks = 0
        self.transition(Behavior.HITTING, self.profile.hit_animation)

    def go_to_sleep(self) -> None:
        if not self.transition(Behavior.SLEEPING, self.profile.sleep_animation):
            return
        lo, hi = self.thresholds.sleep_ms
        self.state.timers.schedule("wake", self.rng.uniform(lo, hi), self.wake,
                                   guard=Behavior.SLEEPING)
        self.state.cues.append(Cue.ZZZ)

    def wake(self) -> bool:
        """Leave sleep with a short stretch. No-op unless sleeping."""
        if not self.state.is_sleeping:
            return False
        self.transition(Behavior.IDLE, self.profile.reaction_animation)
        self.state.timers.schedule("stretch", self.thresholds.wake_stretch_ms,
                                   self._restore_idle, guard=Behavior.IDLE)
        return True

    def start_dwell(self, option: DrawOption) -> None:
        """Enter a self-expiring behavior that reverts to idle."""
        animation = self.rng.choice(option.animations)
        if not self.transition(option.behavior, animation):
            return
        if option.dwell_ms is not None:
            lo, hi = option.dwell_ms
            self.state.timers.schedule("dwell", self.rng.uniform(lo, hi), self.go_idle,
                                       guard=option.behavior)

    def _restore_idle(self) -> None:
        self.state.frames.set_animation(self.profile.idle_animation)
        self.state.base_animation = self.profile.idle_animation

    def _restore_base(self) -> None:
        self.state.frames.set_animation(self.state.base_animation)

    # --- autonomous ---

    def autonomous_tick(self) -> None:
        """One coarse decision step."""
        s = self.state
        t = self.thresholds
        if s.is_dragging:
            return
        if s.behavior is Behavior.HITTING:
            s.boredom_ticks += 1
            if s.boredom_ticks > t.hit_boredom_ticks:
                logger.debug("Bored of hitting after %d ticks", s.boredom_ticks)
                s.boredom_ticks = 0
                self.go_idle()
            return
        if s.behavior is not Behavior.IDLE or s.is_sleeping:
            return

        s.idle_ticks += 1
        if (s.idle_ticks > t.idle_stale_ticks
                and pointer_distance(s.position, s.pointer, t) > t.near_distance):
            self.start_walking()
            return
        self.decide()

    def decide(self) -> None:
        """Draw the next behavior from the weight table."""
        s = self.state
        t = self.thresholds
        distance = pointer_distance(s.position, s.pointer, t)
        if distance > t.far_distance and self.rng.random() * 100 < self.weights.far_chase:
            self.start_walking()
            return
        name = weighted_choice(self.weights.as_dict(), self.rng.random())
        if name is not None:
            self.apply_option(name)

    def apply_option(self, name: str) -> None:
        option = self.profile.options[name]
        if option.behavior is Behavior.WALKING:
            self.start_walking()
        elif option.behavior is Behavior.SLEEPING:
            self.go_to_sleep()
        elif option.behavior is Behavior.IDLE:
            self.state.frames.set_animation(option.animations[0])
            self.state.base_animation = option.animations[0]
        else:
            self.start_dwell(option)

    # --- chase ---

    def check_swat(self, dx: float, dy: float) -> bool:
        """Walking <-> hitting transitions. Returns True if behavior changed."""
        s = self.state
        t = self.thresholds
        aligned = abs(dy) < t.swat_tolerance
        if s.behavior is Behavior.WALKING:
            if abs(dx) < t.swat_distance and aligned:
                self.start_hitting()
                return True
        elif s.behavior is Behavior.HITTING:
            if s.behavior_elapsed_ms > t.hit_max_ms:
                logger.debug("Hit for %.0f ms, chasing again", s.behavior_elapsed_ms)
                self.transition(Behavior.WALKING, self.profile.walk_animation)
                return True
            if abs(dx) > t.swat_release or not aligned:
                self.transition(Behavior.WALKING, self.profile.walk_animation)
                return True
        return False

    # --- interaction overrides ---

    def begin_drag(self) -> None:
        s = self.state
        s.timers.cancel("reaction")
        s.is_dragging = True
        self.transition(Behavior.IDLE, self.profile.reaction_animation)
        logger.debug("Drag started at (%.0f, %.0f)", s.x, s.y)

    def end_drag(self) -> None:
        s = self.state
        s.is_dragging = False
        s.idle_ticks = 0
        self.go_idle()
        s.cues.append(Cue.BOUNCE)
        logger.debug("Drag ended at (%.0f, %.0f)", s.x, s.y)

    def pet(self) -> bool:
        """Single click: heart cue and transient reaction, behavior unchanged.

        Walking and sleeping keep their animation; only the heart shows.
        """
        s = self.state
        if s.is_dragging:
            return False
        s.cues.append(Cue.HEART)
        if s.behavior in (Behavior.WALKING, Behavior.SLEEPING):
            return False
        s.frames.set_animation(self.profile.reaction_animation)
        s.timers.schedule("reaction", self.thresholds.pet_reaction_ms,
                          self._restore_base, guard=s.behavior)
        return True

    def double_click(self) -> None:
        s = self.state
        if s.is_dragging:
            return
        if s.is_sleeping:
            self.wake()
            return
        s.timers.cancel("reaction")
        reaction = self.rng.choice(self.profile.play_reactions)
        if self.transition(Behavior.PLAYING, reaction):
            s.timers.schedule("dwell", self.thresholds.play_ms, self.go_idle,
                              guard=Behavior.PLAYING)
