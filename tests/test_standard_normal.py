# tests/test_standard_normal.py
"""
Tests for the polar-method standard normal source.

Covers reproducibility under seeding, the one-value cache between paired
draws, the vectorized batch path and its interaction with the cache, and the
distribution of the generated values.
"""

import math
import threading

import numpy as np
import pytest
from numpy.testing import assert_allclose
from scipy import stats

from gaussdist.core.config import set_config
from gaussdist.models.distributions import StandardNormalSource, resolve_source


def polar_reference(seed: int, count: int) -> list:
    """Independent rendition of the polar method on the same uniform stream."""
    rng = np.random.default_rng(seed)
    values = []
    while len(values) < count:
        u1, u2 = rng.random(2)
        x1, x2 = 2.0 * u1 - 1.0, 2.0 * u2 - 1.0
        w = x1 * x1 + x2 * x2
        if 0.0 < w < 1.0:
            scale = math.sqrt(-2.0 * math.log(w) / w)
            values.extend([x1 * scale, x2 * scale])
    return values[:count]


class ScriptedUniforms:
    """Stand-in generator returning a fixed uniform stream, then 0.5 (the origin)."""

    def __init__(self, values):
        self._values = list(values)

    def random(self, size):
        shape = (size,) if isinstance(size, int) else tuple(size)
        count = int(np.prod(shape))
        taken, self._values = self._values[:count], self._values[count:]
        taken += [0.5] * (count - len(taken))
        return np.array(taken, dtype=np.float64).reshape(shape)


# Pairs map to (0, 0), (1, 0), (1, 1) and finally (0.5, 0) with w = 0.25
REJECTED_THEN_ACCEPTED = [0.5, 0.5, 1.0, 0.5, 1.0, 1.0, 0.75, 0.5]
ACCEPTED_FIRST = 0.5 * math.sqrt(-2.0 * math.log(0.25) / 0.25)


class TestScalarDraws:
    """Tests for ``StandardNormalSource.draw``."""

    def test_draw_returns_float(self, source):
        assert isinstance(source.draw(), float)

    def test_draws_follow_polar_method(self):
        source = StandardNormalSource(seed=123)
        draws = [source.draw() for _ in range(8)]
        assert_allclose(draws, polar_reference(123, 8), rtol=1e-15)

    def test_second_value_of_pair_is_cached(self, source):
        assert not source.has_cached_value
        source.draw()
        assert source.has_cached_value
        source.draw()
        assert not source.has_cached_value

    def test_same_seed_reproduces_sequence(self):
        a = StandardNormalSource(seed=7)
        b = StandardNormalSource(seed=7)
        assert [a.draw() for _ in range(5)] == [b.draw() for _ in range(5)]

    def test_different_seeds_differ(self):
        a = StandardNormalSource(seed=1)
        b = StandardNormalSource(seed=2)
        assert [a.draw() for _ in range(4)] != [b.draw() for _ in range(4)]

    def test_caches_are_per_instance(self):
        a = StandardNormalSource(seed=5)
        b = StandardNormalSource(seed=5)
        a.draw()
        assert a.has_cached_value
        assert not b.has_cached_value

    def test_accepts_generator(self):
        source = StandardNormalSource(np.random.default_rng(123))
        assert_allclose([source.draw(), source.draw()], polar_reference(123, 2), rtol=1e-15)

    def test_configured_seed_used_when_none(self, restore_config):
        set_config("core", "random_seed", 11)
        a = StandardNormalSource()
        b = StandardNormalSource()
        assert [a.draw() for _ in range(3)] == [b.draw() for _ in range(3)]


class TestBatchDraws:
    """Tests for ``StandardNormalSource.standard_normal``."""

    def test_shape(self, source):
        assert source.standard_normal(5).shape == (5,)
        assert source.standard_normal((4, 3)).shape == (4, 3)
        assert source.standard_normal(0).shape == (0,)

    def test_pending_cached_value_used_first(self):
        source = StandardNormalSource(seed=9)
        reference = polar_reference(9, 2)
        source.draw()
        batch = source.standard_normal(3)
        assert batch[0] == pytest.approx(reference[1], rel=1e-15)
        assert not source.has_cached_value

    def test_odd_count_caches_unused_half(self):
        source = StandardNormalSource(seed=3)
        source.standard_normal(3)
        assert source.has_cached_value

    def test_even_count_leaves_no_cache(self):
        source = StandardNormalSource(seed=3)
        source.standard_normal(4)
        assert not source.has_cached_value

    def test_batch_values_are_finite(self, source):
        assert np.all(np.isfinite(source.standard_normal(10000)))

    def test_seeded_batches_reproducible(self):
        a = StandardNormalSource(seed=21).standard_normal((10, 2))
        b = StandardNormalSource(seed=21).standard_normal((10, 2))
        assert_allclose(a, b, rtol=0, atol=0)

    @pytest.mark.slow
    def test_moments(self, source):
        values = source.standard_normal(200000)
        assert abs(values.mean()) < 0.01
        assert abs(values.var() - 1.0) < 0.02

    @pytest.mark.slow
    def test_matches_standard_normal_cdf(self):
        values = StandardNormalSource(seed=2024).standard_normal(20000)
        result = stats.kstest(values, "norm")
        assert result.pvalue > 0.001

    @pytest.mark.slow
    def test_scalar_draws_uncorrelated(self):
        source = StandardNormalSource(seed=77)
        draws = np.array([source.draw() for _ in range(20000)])
        correlation = np.corrcoef(draws[:-1], draws[1:])[0, 1]
        assert abs(correlation) < 0.03


class TestRejectedPairs:
    """Tests for pairs outside the open unit disc, including the origin."""

    def test_draw_skips_origin_and_boundary(self, monkeypatch):
        source = StandardNormalSource(seed=0)
        monkeypatch.setattr(source, "_rng", ScriptedUniforms(REJECTED_THEN_ACCEPTED))
        first = source.draw()
        assert math.isfinite(first)
        assert first == pytest.approx(ACCEPTED_FIRST, rel=1e-12)
        assert source.has_cached_value
        assert source.draw() == 0.0
        assert not source.has_cached_value

    def test_batch_skips_origin_and_boundary(self, monkeypatch):
        source = StandardNormalSource(seed=0)
        monkeypatch.setattr(source, "_rng", ScriptedUniforms(REJECTED_THEN_ACCEPTED))
        values = source.standard_normal(2)
        assert np.all(np.isfinite(values))
        assert_allclose(values, [ACCEPTED_FIRST, 0.0], rtol=1e-12)
        assert not source.has_cached_value

    def test_batch_caches_second_half_after_rejections(self, monkeypatch):
        source = StandardNormalSource(seed=0)
        monkeypatch.setattr(source, "_rng", ScriptedUniforms(REJECTED_THEN_ACCEPTED))
        values = source.standard_normal(1)
        assert_allclose(values, [ACCEPTED_FIRST], rtol=1e-12)
        assert source.has_cached_value
        assert source.draw() == 0.0


class TestSharing:
    """Tests for resolving and sharing sources."""

    def test_resolve_returns_existing_source(self, source):
        assert resolve_source(source) is source

    def test_resolve_builds_source_from_seed(self):
        resolved = resolve_source(123)
        assert isinstance(resolved, StandardNormalSource)
        assert resolved.draw() == pytest.approx(polar_reference(123, 1)[0], rel=1e-15)

    def test_concurrent_draws(self):
        source = StandardNormalSource(seed=0)
        results = []
        lock = threading.Lock()

        def worker():
            values = [source.draw() for _ in range(500)]
            with lock:
                results.extend(values)

        threads = [threading.Thread(target=worker) for _ in range(4)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join()

        # Every value of the stream is handed out exactly once
        assert len(results) == 2000
        assert_allclose(sorted(results), sorted(polar_reference(0, 2000)), rtol=1e-15)
