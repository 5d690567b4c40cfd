"""Companion engine: one tick function that drives everything.

The host calls ``tick`` from its render timer. Each tick runs, in order:
due one-shot timers, the coarse autonomous interval, motion, and frame
playback. State is only mutated here, between ticks, or from input
handlers running on the same main loop.
"""

from __future__ import annotations

import logging
import random

from behavior import CHASE_BEHAVIORS, Behavior, BehaviorMachine, Cue, SimulationState
from profiles import Profile
from pursuit import Bounds, step, target_offset
from weights import BehaviorWeights, InvalidWeightsError

logger = logging.getLogger(__name__)


class CompanionEngine:
    """Owns one SimulationState and the machine that mutates it."""

    def __init__(self, profile: Profile, weights: BehaviorWeights, bounds: Bounds,
                 position: tuple[float, float] | None = None,
                 rng: random.Random | None = None) -> None:
        self.profile = profile
        self.weights = weights
        self.state = SimulationState.create(profile, bounds, position)
        self.machine = BehaviorMachine(self.state, profile, weights, rng)
        self._running = False
        self._decision_accum_ms = 0.0

    @property
    def running(self) -> bool:
        return self._running

    def start(self) -> None:
        """Validate the weights and arm the autonomous loop.

        Raises InvalidWeightsError and stays stopped if the primary
        weights do not sum to 100 or name a behavior the profile lacks.
        """
        unknown = [name for name in self.weights.primary if name not in self.profile.options]
        if unknown:
            raise InvalidWeightsError(
                f"unknown behaviors for profile {self.profile.name}: {', '.join(unknown)}")
        self.weights.validate()
        self._running = True
        self._decision_accum_ms = 0.0
        self.state.timers.schedule("first-decision", self.profile.thresholds.first_decision_ms,
                                   self._first_decision)
        logger.info("Engine started: profile=%s weights=%s far_chase=%d",
                    self.profile.name, self.weights.as_dict(), self.weights.far_chase)

    def _first_decision(self) -> None:
        s = self.state
        if s.behavior is Behavior.IDLE and not s.is_dragging and not s.is_sleeping:
            self.machine.decide()

    # ------------------------------------------------------------------
    # Tick
    # ------------------------------------------------------------------

    def tick(self, delta_ms: float) -> SimulationState:
        s = self.state
        s.timers.advance(delta_ms, lambda: s.behavior)

        if self._running:
            interval = self.profile.thresholds.decision_interval_ms
            self._decision_accum_ms += delta_ms
            if self._decision_accum_ms >= interval:
                # One decision per tick; whole intervals lost to a stall are dropped
                self._decision_accum_ms %= interval
                self.machine.autonomous_tick()

        s.behavior_elapsed_ms += delta_ms
        if not s.is_dragging:
            self._move()
        s.frames.tick(delta_ms)
        return s

    def _move(self) -> None:
        s = self.state
        if s.behavior not in CHASE_BEHAVIORS:
            return
        t = self.profile.thresholds
        dx, dy = target_offset(s.position, s.pointer, s.bounds, t)
        if self.machine.check_swat(dx, dy):
            return

        if s.behavior is Behavior.HITTING:
            if dx:
                s.facing_right = dx > 0
            return

        result = step(s.position, s.pointer, s.bounds, t, s.facing_right)
        s.x, s.y = result.x, result.y
        s.facing_right = result.facing_right
        gait = self.profile.run_animation if result.running else self.profile.walk_animation
        if s.animation != gait:
            s.frames.set_animation(gait)
            s.base_animation = gait

    # ------------------------------------------------------------------
    # Host telemetry
    # ------------------------------------------------------------------

    def set_bounds(self, bounds: Bounds) -> None:
        """New work area; the sprite is pulled back inside it."""
        s = self.state
        t = self.profile.thresholds
        s.bounds = bounds
        s.x = max(0.0, min(s.x, bounds.max_x(t)))
        s.y = max(0.0, min(s.y, bounds.max_y(t)))

    def drain_cues(self) -> list[Cue]:
        cues = self.state.cues[:]
        self.state.cues.clear()
        return cues
