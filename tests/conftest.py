from __future__ import annotations

import random

import pytest

from behavior import BehaviorMachine, SimulationState
from engine import CompanionEngine
from profiles import CAT
from pursuit import Bounds
from weights import BehaviorWeights


class ScriptedRandom(random.Random):
    """random() replays the given rolls, then ``default``.

    uniform() returns the low end and choice() the first item so dwell
    times and animation picks are predictable.
    """

    def __init__(self, rolls=(), default: float = 0.99) -> None:
        super().__init__(0)
        self.rolls = list(rolls)
        self.default = default

    def random(self) -> float:
        return self.rolls.pop(0) if self.rolls else self.default

    def uniform(self, a, b):
        return a

    def choice(self, seq):
        return seq[0]


SCREEN = Bounds(1920, 1080)


def cat_weights(**overrides) -> BehaviorWeights:
    mapping = dict(CAT.default_weights, **overrides)
    return BehaviorWeights.from_mapping(mapping, CAT.order)


def point_at_sprite(state: SimulationState) -> None:
    """Put the pointer on the sprite's centre (distance 0)."""
    t = CAT.thresholds
    state.pointer = (state.x + t.sprite_width / 2, state.y + t.sprite_height / 2)


@pytest.fixture()
def make_machine():
    def _make(rolls=(), position=(500.0, 500.0), weights=None, default=0.99) -> BehaviorMachine:
        state = SimulationState.create(CAT, SCREEN, position)
        point_at_sprite(state)
        return BehaviorMachine(state, CAT, weights or cat_weights(),
                               ScriptedRandom(rolls, default))
    return _make


@pytest.fixture()
def make_engine():
    def _make(rolls=(), position=(500.0, 500.0), weights=None, default=0.99) -> CompanionEngine:
        engine = CompanionEngine(CAT, weights or cat_weights(), SCREEN, position,
                                 rng=ScriptedRandom(rolls, default))
        point_at_sprite(engine.state)
        return engine
    return _make
