import random

import pytest

from animator import AnimationDescriptor, FrameScheduler, advance_frame, make_catalog

CATALOG = make_catalog(
    AnimationDescriptor("idle", ("a", "b", "c", "d"), 400),
    AnimationDescriptor("jump", ("j0", "j1", "j2"), 100, loop=False),
    AnimationDescriptor("hit", ("h0", "h1"), 80),
)


def test_descriptor_requires_frames_and_positive_duration() -> None:
    with pytest.raises(ValueError):
        AnimationDescriptor("empty", (), 100)
    with pytest.raises(ValueError):
        AnimationDescriptor("zero", ("a",), 0)


def test_advance_wraps_looping_animation() -> None:
    idle = CATALOG["idle"]
    assert advance_frame(idle, 0) == 1
    assert advance_frame(idle, 3) == 0


def test_advance_holds_last_frame_of_one_shot() -> None:
    jump = CATALOG["jump"]
    assert advance_frame(jump, 1) == 2
    assert advance_frame(jump, 2) == 2


def test_tick_waits_for_frame_duration() -> None:
    scheduler = FrameScheduler(CATALOG, "idle")
    assert scheduler.tick(399) == ("idle", 0)
    assert scheduler.tick(1) == ("idle", 1)
    # one step per tick even after a long stall
    assert scheduler.tick(5000) == ("idle", 2)


def test_set_animation_resets_frame_even_for_same_name() -> None:
    scheduler = FrameScheduler(CATALOG, "idle")
    scheduler.tick(400)
    scheduler.tick(400)
    assert scheduler.frame == 2
    assert scheduler.set_animation("idle")
    assert scheduler.frame == 0
    assert scheduler.tick(399) == ("idle", 0)


def test_unknown_animation_is_refused() -> None:
    scheduler = FrameScheduler(CATALOG, "hit")
    scheduler.tick(80)
    assert not scheduler.set_animation("moonwalk")
    assert scheduler.animation == "hit"
    assert scheduler.frame == 1


def test_frame_ref_follows_index() -> None:
    scheduler = FrameScheduler(CATALOG, "jump")
    scheduler.tick(100)
    assert scheduler.frame_ref == "j1"


@pytest.mark.parametrize("name", sorted(CATALOG))
def test_frame_index_stays_in_bounds(name: str) -> None:
    rng = random.Random(7)
    scheduler = FrameScheduler(CATALOG, name)
    length = len(CATALOG[name].frames)
    reached_end = False
    for _ in range(2000):
        _, frame = scheduler.tick(rng.uniform(0, 250))
        assert 0 <= frame < length
        if not CATALOG[name].loop:
            if reached_end:
                assert frame == length - 1
            reached_end = reached_end or frame == length - 1
