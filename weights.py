"""Behavior weights: validation, weighted selection and slider balancing.

Primary weights are integer percentages that must sum to exactly 100.
The far-chase percentage sits outside that budget.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Sequence

logger = logging.getLogger(__name__)

TOTAL = 100
DEFAULT_FAR_CHASE = 70


class InvalidWeightsError(ValueError):
    """Raised when a weight table cannot drive the autonomous loop."""


def _check_percentage(name: str, value: object) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise InvalidWeightsError(f"weight {name!r} must be an integer, got {value!r}")
    if not 0 <= value <= TOTAL:
        raise InvalidWeightsError(f"weight {name!r} must be within 0-100, got {value}")
    return value


@dataclass
class BehaviorWeights:
    """Ordered primary weights (highest priority first) plus far-chase bias."""
    primary: dict[str, int]
    far_chase: int = DEFAULT_FAR_CHASE
    order: tuple[str, ...] = field(default=())

    def __post_init__(self) -> None:
        if not self.order:
            self.order = tuple(self.primary)

    @classmethod
    def from_mapping(cls, mapping: Mapping[str, object], order: Sequence[str],
                     far_chase: object = DEFAULT_FAR_CHASE) -> BehaviorWeights:
        """Build weights for ``order`` from a flat name -> percent mapping.

        Names not in ``order`` are rejected; missing names count as 0.
        """
        unknown = [name for name in mapping if name not in order]
        if unknown:
            raise InvalidWeightsError(f"unknown behaviors: {', '.join(sorted(unknown))}")
        primary = {name: _check_percentage(name, mapping.get(name, 0)) for name in order}
        return cls(primary=primary,
                   far_chase=_check_percentage("farChase", far_chase),
                   order=tuple(order))

    @property
    def total(self) -> int:
        return sum(self.primary.values())

    def validate(self) -> None:
        """Raise InvalidWeightsError unless the primary weights sum to 100."""
        for name, value in self.primary.items():
            _check_percentage(name, value)
        _check_percentage("farChase", self.far_chase)
        if self.total != TOTAL:
            raise InvalidWeightsError(
                f"primary weights must sum to {TOTAL}, got {self.total}")

    def as_dict(self) -> dict[str, int]:
        return {name: self.primary[name] for name in self.order}


def weighted_choice(weights: Mapping[str, int], roll: float) -> str | None:
    """Pick a name by walking the cumulative distribution in mapping order.

    ``roll`` is a uniform sample in [0, 1). Zero weights are never picked.
    Returns None if every weight is zero.
    """
    total = sum(weights.values())
    if total <= 0:
        return None
    target = roll * total
    cumulative = 0
    chosen = None
    for name, weight in weights.items():
        if weight <= 0:
            continue
        chosen = name
        cumulative += weight
        if target < cumulative:
            return name
    # roll == 1.0 or float drift lands past the end
    return chosen


def parse_weights_arg(text: str) -> dict[str, int]:
    """Parse ``"walk=40,groom=15"`` into a mapping."""
    result: dict[str, int] = {}
    for part in text.split(","):
        part = part.strip()
        if not part:
            continue
        name, sep, raw = part.partition("=")
        if not sep:
            raise InvalidWeightsError(f"expected name=value, got {part!r}")
        try:
            result[name.strip()] = int(raw)
        except ValueError:
            raise InvalidWeightsError(f"weight {name.strip()!r} is not an integer: {raw!r}") from None
    return result


class WeightBalancer:
    """Keeps an ordered set of percentage sliders summing to 100.

    Editing one slider pushes the opposite change onto lower-priority
    sliders first, then higher-priority ones bottom-up, and finally back
    onto the edited slider itself if nothing else can absorb it.
    """

    def __init__(self, weights: Mapping[str, int], order: Iterable[str] | None = None) -> None:
        self._order = list(order) if order is not None else list(weights)
        self._values = {name: _check_percentage(name, weights[name]) for name in self._order}
        if sum(self._values.values()) != TOTAL:
            raise InvalidWeightsError(
                f"primary weights must sum to {TOTAL}, got {sum(self._values.values())}")

    @property
    def values(self) -> dict[str, int]:
        return dict(self._values)

    @property
    def total(self) -> int:
        return sum(self._values.values())

    def set(self, name: str, value: int) -> dict[str, int]:
        """Set ``name`` to ``value`` and rebalance. Returns the new values."""
        if name not in self._values:
            raise KeyError(name)
        value = max(0, min(TOTAL, int(value)))
        diff = value - self._values[name]
        if diff == 0:
            return self.values
        self._values[name] = value

        idx = self._order.index(name)
        lower = self._order[idx + 1:]
        higher = list(reversed(self._order[:idx]))
        primary = lower if lower else higher
        remaining = self._distribute(primary, -diff)
        if remaining:
            others = [k for k in reversed(self._order) if k not in primary and k != name]
            remaining = self._distribute(others, remaining)
        if remaining:
            remaining = self._distribute([name], remaining)
        logger.debug("Balanced %s=%d -> %s", name, value, self._values)
        return self.values

    def _distribute(self, keys: Iterable[str], change: int) -> int:
        """Apply ``change`` across keys in order; return what is left over."""
        remaining = change
        for key in keys:
            if remaining == 0:
                break
            current = self._values[key]
            if remaining > 0:
                step = min(remaining, TOTAL - current)
            else:
                step = -min(-remaining, current)
            self._values[key] = current + step
            remaining -= step
        return remaining
