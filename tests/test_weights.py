import random

import pytest

from weights import (
    BehaviorWeights,
    InvalidWeightsError,
    WeightBalancer,
    parse_weights_arg,
    weighted_choice,
)

ORDER = ["walk", "groom", "sleep", "play", "idleAlt", "idle"]
DEFAULTS = {"walk": 40, "groom": 15, "sleep": 10, "play": 10, "idleAlt": 10, "idle": 15}


def test_raising_walk_cascades_down_the_priority_list() -> None:
    balancer = WeightBalancer(DEFAULTS, ORDER)
    values = balancer.set("walk", 60)
    assert values == {"walk": 60, "groom": 0, "sleep": 5, "play": 10, "idleAlt": 10, "idle": 15}
    assert balancer.total == 100


def test_lowering_a_weight_gives_to_the_next_one_down() -> None:
    balancer = WeightBalancer(DEFAULTS, ORDER)
    values = balancer.set("walk", 20)
    assert values["groom"] == 35
    assert sum(values.values()) == 100


def test_last_slider_borrows_from_higher_priority_bottom_up() -> None:
    balancer = WeightBalancer(DEFAULTS, ORDER)
    values = balancer.set("idle", 35)
    assert values["idleAlt"] == 0
    assert values["play"] == 0
    assert values["walk"] == 40
    assert sum(values.values()) == 100


def test_exhausted_lower_weights_fall_back_to_higher_ones() -> None:
    balancer = WeightBalancer({"a": 10, "b": 80, "c": 10})
    values = balancer.set("b", 100)
    assert values == {"a": 0, "b": 100, "c": 0}


def test_values_are_clamped_to_percentage_range() -> None:
    balancer = WeightBalancer(DEFAULTS, ORDER)
    values = balancer.set("sleep", 250)
    assert values["sleep"] == 100
    assert sum(values.values()) == 100
    values = balancer.set("sleep", -5)
    assert values["sleep"] == 0
    assert sum(values.values()) == 100


def test_sum_is_always_100_after_every_edit() -> None:
    rng = random.Random(1234)
    balancer = WeightBalancer(DEFAULTS, ORDER)
    for _ in range(1000):
        balancer.set(rng.choice(ORDER), rng.randint(0, 100))
        values = balancer.values
        assert sum(values.values()) == 100
        assert all(0 <= v <= 100 for v in values.values())


def test_balancer_rejects_invalid_start() -> None:
    with pytest.raises(InvalidWeightsError):
        WeightBalancer({"a": 50, "b": 40})


def test_weighted_choice_walks_cumulative_distribution_in_order() -> None:
    weights = {"a": 40, "b": 60}
    assert weighted_choice(weights, 0.0) == "a"
    assert weighted_choice(weights, 0.399) == "a"
    assert weighted_choice(weights, 0.4) == "b"
    assert weighted_choice(weights, 0.999) == "b"


def test_weighted_choice_never_picks_zero_weight() -> None:
    assert weighted_choice({"a": 0, "b": 100, "c": 0}, 0.0) == "b"
    assert weighted_choice({"a": 0, "b": 100, "c": 0}, 0.9999) == "b"
    assert weighted_choice({"a": 0}, 0.5) is None


def test_behavior_weights_validation() -> None:
    BehaviorWeights.from_mapping(DEFAULTS, ORDER).validate()

    short = BehaviorWeights.from_mapping(dict(DEFAULTS, idle=14), ORDER)
    with pytest.raises(InvalidWeightsError, match="sum to 100"):
        short.validate()

    with pytest.raises(InvalidWeightsError, match="unknown"):
        BehaviorWeights.from_mapping({"fly": 100}, ORDER)
    with pytest.raises(InvalidWeightsError):
        BehaviorWeights.from_mapping(dict(DEFAULTS, walk="40"), ORDER)
    with pytest.raises(InvalidWeightsError):
        BehaviorWeights.from_mapping(dict(DEFAULTS, walk=140), ORDER)
    with pytest.raises(InvalidWeightsError):
        BehaviorWeights.from_mapping(DEFAULTS, ORDER, far_chase=101)


def test_missing_weights_count_as_zero() -> None:
    weights = BehaviorWeights.from_mapping({"walk": 100}, ORDER)
    weights.validate()
    assert weights.as_dict()["idle"] == 0
    assert list(weights.as_dict()) == ORDER


def test_parse_weights_arg() -> None:
    assert parse_weights_arg("walk=60, idle=40") == {"walk": 60, "idle": 40}
    with pytest.raises(InvalidWeightsError):
        parse_weights_arg("walk")
    with pytest.raises(InvalidWeightsError):
        parse_weights_arg("walk=lots")
