"""Tests for the seeded random source."""

import math

import numpy as np
import pytest

from core.distributions import RandomSource


def draw_mixture(rng: RandomSource):
    items = list(range(10))
    rng.shuffle(items)
    return (
        rng.uniform(),
        rng.exponential(3.0),
        rng.log_normal(5.0, 0.5),
        rng.chance(0.5),
        items,
    )


def test_same_seed_replays_the_same_draws():
    assert draw_mixture(RandomSource(99)) == draw_mixture(RandomSource(99))


def test_different_seeds_differ():
    assert draw_mixture(RandomSource(1)) != draw_mixture(RandomSource(2))


def test_uniform_is_in_unit_interval():
    rng = RandomSource(5)
    draws = [rng.uniform() for _ in range(10000)]
    assert min(draws) >= 0.0
    assert max(draws) < 1.0


def test_exponential_is_finite_and_has_the_requested_mean():
    rng = RandomSource(7)
    draws = np.array([rng.exponential(2.0) for _ in range(20000)])

    assert np.all(np.isfinite(draws))
    assert np.all(draws >= 0.0)
    assert draws.mean() == pytest.approx(2.0, rel=0.05)


def test_exponential_with_infinite_mean_is_infinite():
    rng = RandomSource(7)
    assert math.isinf(rng.exponential(math.inf))


def test_log_normal_has_the_requested_median():
    rng = RandomSource(11)
    draws = np.array([rng.log_normal(4.0, 0.7) for _ in range(20000)])

    assert np.all(draws > 0.0)
    assert np.median(draws) == pytest.approx(4.0, rel=0.05)


def test_log_normal_without_scatter_is_the_median():
    rng = RandomSource(11)
    assert [rng.log_normal(4.0, 0.0) for _ in range(5)] == [4.0] * 5


def test_chance_extremes():
    rng = RandomSource(3)
    assert not any(rng.chance(0.0) for _ in range(1000))
    assert all(rng.chance(1.0) for _ in range(1000))


def test_chance_frequency():
    rng = RandomSource(3)
    hits = sum(rng.chance(0.3) for _ in range(20000))
    assert hits / 20000 == pytest.approx(0.3, abs=0.02)
