"""Companion profiles: animation catalog, thresholds and draw options.

A profile is plain configuration. The engine is the same for every
variant; only the numbers and the animation table differ.
"""

from __future__ import annotations

from dataclasses import dataclass, field

from animator import AnimationDescriptor, Catalog, make_catalog
from behavior import Behavior


@dataclass(frozen=True)
class Thresholds:
    """Distances in px, durations in ms, speeds in px per frame tick."""
    sprite_width: int = 256
    sprite_height: int = 256
    paw_offset_x: int = 128          # target = pointer - offset
    paw_offset_y: int = 228          # half sprite + 100 so the paws reach the pointer
    walk_speed: float = 4.0
    run_multiplier: float = 1.5
    run_distance: float = 400.0
    swat_distance: float = 50.0      # walking -> hitting below this |dx|
    swat_release: float = 80.0       # hitting -> walking above this |dx|
    swat_tolerance: float = 10.0     # max |dy| for either direction
    hit_max_ms: int = 5000
    hit_boredom_ticks: int = 3
    far_distance: float = 300.0
    near_distance: float = 200.0
    idle_stale_ticks: int = 2
    decision_interval_ms: int = 2000
    first_decision_ms: int = 1000
    sleep_ms: tuple[int, int] = (30000, 90000)
    play_ms: int = 3000
    pet_reaction_ms: int = 1500
    wake_stretch_ms: int = 1500
    bounce_ms: int = 300
    drag_slop: float = 3.0


@dataclass(frozen=True)
class DrawOption:
    """One entry of the autonomous weight table."""
    behavior: Behavior
    animations: tuple[str, ...]
    dwell_ms: tuple[int, int] | None = None


@dataclass(frozen=True)
class Profile:
    name: str
    catalog: Catalog
    options: dict[str, DrawOption]
    default_weights: dict[str, int]
    thresholds: Thresholds = field(default_factory=Thresholds)
    idle_animation: str = "idle"
    reaction_animation: str = "idleAlt"
    walk_animation: str = "walk"
    run_animation: str = "run"
    hit_animation: str = "hit"
    sleep_animation: str = "sleep"
    play_reactions: tuple[str, ...] = ("lickPaw", "lickPawAlt", "jump", "throwUp")

    @property
    def order(self) -> tuple[str, ...]:
        return tuple(self.options)


def _tiles(folder: str, first: int, count: int) -> tuple[str, ...]:
    return tuple(f"{folder}/tile{n:03d}.png" for n in range(first, first + count))


CAT_CATALOG = make_catalog(
    AnimationDescriptor("idle", _tiles("01_idle", 0, 4), 400),
    AnimationDescriptor("idleAlt", _tiles("01_idle", 8, 4), 400),
    AnimationDescriptor("lickPaw", _tiles("02_lick_paw", 16, 4), 200),
    AnimationDescriptor("lickPawAlt", _tiles("02_lick_paw", 24, 4), 200),
    AnimationDescriptor("walk", _tiles("03_running", 32, 8), 100),
    AnimationDescriptor("run", _tiles("03_running", 40, 8), 70),
    AnimationDescriptor("sleep", _tiles("04_sleep", 48, 4), 600),
    AnimationDescriptor("hit", _tiles("05_hit", 56, 6), 80),
    AnimationDescriptor("jump", _tiles("06_jump", 64, 6), 100, loop=False),
    AnimationDescriptor("throwUp", _tiles("08_throw_up", 72, 8), 150),
)

KITTEN_CATALOG = make_catalog(
    *CAT_CATALOG.values(),
    AnimationDescriptor("scratch", _tiles("07_scratch", 80, 4), 120),
)

CAT = Profile(
    name="cat",
    catalog=CAT_CATALOG,
    options={
        "walk": DrawOption(Behavior.WALKING, ("walk",)),
        "groom": DrawOption(Behavior.GROOMING, ("lickPaw", "lickPawAlt"), (3000, 7000)),
        "sleep": DrawOption(Behavior.SLEEPING, ("sleep",)),
        "play": DrawOption(Behavior.PLAYING, ("throwUp",), (2000, 5000)),
        "idleAlt": DrawOption(Behavior.IDLE_VARIANT, ("idleAlt",), (3000, 5000)),
        "idle": DrawOption(Behavior.IDLE, ("idle",)),
    },
    default_weights={"walk": 40, "groom": 15, "sleep": 10, "play": 10, "idleAlt": 10, "idle": 15},
)

KITTEN = Profile(
    name="kitten",
    catalog=KITTEN_CATALOG,
    options={
        "walk": DrawOption(Behavior.WALKING, ("walk",)),
        "groom": DrawOption(Behavior.GROOMING, ("lickPaw", "lickPawAlt"), (2000, 5000)),
        "scratch": DrawOption(Behavior.SCRATCHING, ("scratch",), (1500, 4000)),
        "sleep": DrawOption(Behavior.SLEEPING, ("sleep",)),
        "play": DrawOption(Behavior.PLAYING, ("throwUp", "jump"), (2000, 4000)),
        "idleAlt": DrawOption(Behavior.IDLE_VARIANT, ("idleAlt",), (2000, 4000)),
        "idle": DrawOption(Behavior.IDLE, ("idle",)),
    },
    default_weights={"walk": 45, "groom": 10, "scratch": 10, "sleep": 5, "play": 15,
                     "idleAlt": 5, "idle": 10},
    thresholds=Thresholds(
        walk_speed=5.0,
        swat_distance=120.0,
        swat_release=150.0,
        sleep_ms=(20000, 45000),
    ),
)

PROFILES: dict[str, Profile] = {p.name: p for p in (CAT, KITTEN)}
DEFAULT_PROFILE = "cat"


def get_profile(name: str) -> Profile:
    try:
        return PROFILES[name]
    except KeyError:
        raise ValueError(
            f"unknown profile {name!r}, choose from: {', '.join(sorted(PROFILES))}") from None
