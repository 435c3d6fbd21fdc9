"""
Tests for Gaussian samplers and seed stream splitting.
"""

import numpy as np
import pytest

from option_engine.rng.gaussian import (
    BoxMullerSampler,
    GaussianSampler,
    NumpyGaussianSampler,
    spawn_seed_sequences,
)


@pytest.mark.parametrize("sampler_cls", [NumpyGaussianSampler, BoxMullerSampler])
class TestSamplers:
    """Behaviour common to every sampler."""

    def test_protocol(self, sampler_cls):
        assert isinstance(sampler_cls(0), GaussianSampler)

    def test_reproducible(self, sampler_cls):
        a = sampler_cls(123).standard_normal(1000)
        b = sampler_cls(123).standard_normal(1000)
        assert np.array_equal(a, b)

    def test_different_seeds_differ(self, sampler_cls):
        a = sampler_cls(1).standard_normal(100)
        b = sampler_cls(2).standard_normal(100)
        assert not np.array_equal(a, b)

    def test_moments(self, sampler_cls):
        z = sampler_cls(7).standard_normal(400_000)
        assert z.shape == (400_000,)
        assert abs(z.mean()) < 0.01
        assert abs(z.std() - 1.0) < 0.01
        # Fraction beyond 1.96 should be close to 5%
        assert abs(np.mean(np.abs(z) > 1.96) - 0.05) < 0.002

    def test_odd_size(self, sampler_cls):
        assert sampler_cls(3).standard_normal(7).shape == (7,)

    def test_next_gaussian_is_float(self, sampler_cls):
        value = sampler_cls(5).next_gaussian()
        assert isinstance(value, float)
        assert np.isfinite(value)

    def test_successive_draws_uncorrelated(self, sampler_cls):
        z = sampler_cls(9).standard_normal(200_000)
        lag1 = np.corrcoef(z[:-1], z[1:])[0, 1]
        assert abs(lag1) < 0.01


class TestBoxMuller:
    """Box-Muller specifics."""

    def test_caches_second_variate(self):
        """Two single draws consume exactly one uniform pair."""
        pair = BoxMullerSampler(42).standard_normal(2)
        sampler = BoxMullerSampler(42)
        assert sampler.next_gaussian() == pair[0]
        assert sampler.next_gaussian() == pair[1]

    def test_negative_size(self):
        with pytest.raises(ValueError):
            BoxMullerSampler(0).standard_normal(-1)


class TestSpawnSeedSequences:
    """Independent child streams."""

    def test_deterministic(self):
        a = [NumpyGaussianSampler(s).standard_normal(5) for s in spawn_seed_sequences(42, 3)]
        b = [NumpyGaussianSampler(s).standard_normal(5) for s in spawn_seed_sequences(42, 3)]
        for x, y in zip(a, b):
            assert np.array_equal(x, y)

    def test_children_distinct(self):
        streams = [NumpyGaussianSampler(s).standard_normal(50) for s in spawn_seed_sequences(42, 4)]
        for i in range(4):
            for j in range(i + 1, 4):
                assert not np.array_equal(streams[i], streams[j])

    def test_prefix_stable(self):
        """Child i depends only on (seed, i), not on how many children were spawned."""
        few = spawn_seed_sequences(42, 2)
        many = spawn_seed_sequences(42, 10)
        assert few[1].spawn_key == many[1].spawn_key
        assert np.array_equal(
            NumpyGaussianSampler(few[1]).standard_normal(10),
            NumpyGaussianSampler(many[1]).standard_normal(10),
        )

    def test_accepts_seed_sequence(self):
        root = np.random.SeedSequence(5)
        assert len(spawn_seed_sequences(root, 3)) == 3

    def test_negative_count(self):
        with pytest.raises(ValueError):
            spawn_seed_sequences(1, -1)
