"""
Gaussian samplers for Monte Carlo simulation.

The simulation code depends only on the :class:`GaussianSampler` protocol,
so the concrete generator can be swapped (seeded pseudo-random, system
entropy, Box-Muller over uniforms) without touching the pricer.

A sampler instance is owned by exactly one worker and is never shared.
Independent streams are derived with ``numpy.random.SeedSequence.spawn``,
which guarantees non-overlapping, statistically independent children.
"""

from typing import Protocol, runtime_checkable

import numpy as np

SeedLike = int | np.random.SeedSequence | None


@runtime_checkable
class GaussianSampler(Protocol):
    """Source of independent standard normal draws."""

    def next_gaussian(self) -> float:
        """Return one N(0,1) draw."""
        ...

    def standard_normal(self, size: int) -> np.ndarray:
        """Return ``size`` independent N(0,1) draws."""
        ...


def spawn_seed_sequences(seed: SeedLike, n: int) -> list[np.random.SeedSequence]:
    """
    Derive ``n`` independent child seed sequences.

    Parameters
    ----------
    seed : int | SeedSequence | None
        Root seed; None draws fresh entropy from the operating system
    n : int
        Number of children

    Returns
    -------
    list[np.random.SeedSequence]
        Children in a fixed order; child i depends only on (seed, i)
    """
    if n < 0:
        raise ValueError("n must be non-negative")
    root = seed if isinstance(seed, np.random.SeedSequence) else np.random.SeedSequence(seed)
    return root.spawn(n)


class NumpyGaussianSampler:
    """
    Normal draws from numpy's PCG64 generator (ziggurat method).

    Parameters
    ----------
    seed : int | SeedSequence | None
        Seed for reproducibility; None uses system entropy
    """

    def __init__(self, seed: SeedLike = None):
        self.rng = np.random.Generator(np.random.PCG64(seed))

    def next_gaussian(self) -> float:
        return float(self.rng.standard_normal())

    def standard_normal(self, size: int) -> np.ndarray:
        return self.rng.standard_normal(size)

    def __repr__(self) -> str:
        return "NumpyGaussianSampler()"


class BoxMullerSampler:
    """
    Normal draws by the Box-Muller transform of uniform pairs.

    For U1 in (0, 1] and U2 in [0, 1):
        Z1 = √(−2 ln U1) cos(2π U2),  Z2 = √(−2 ln U1) sin(2π U2)
    are independent N(0,1). ``next_gaussian`` hands out Z2 from the cache
    on every second call.

    Parameters
    ----------
    seed : int | SeedSequence | None
        Seed for reproducibility; None uses system entropy
    """

    def __init__(self, seed: SeedLike = None):
        self.rng = np.random.Generator(np.random.PCG64(seed))
        self._cached: float | None = None

    def _pairs(self, n_pairs: int) -> tuple[np.ndarray, np.ndarray]:
        u1 = 1.0 - self.rng.random(n_pairs)  # (0, 1], keeps log finite
        u2 = self.rng.random(n_pairs)
        radius = np.sqrt(-2.0 * np.log(u1))
        angle = 2.0 * np.pi * u2
        return radius * np.cos(angle), radius * np.sin(angle)

    def next_gaussian(self) -> float:
        if self._cached is not None:
            z, self._cached = self._cached, None
            return z
        z1, z2 = self._pairs(1)
        self._cached = float(z2[0])
        return float(z1[0])

    def standard_normal(self, size: int) -> np.ndarray:
        if size < 0:
            raise ValueError("size must be non-negative")
        z1, z2 = self._pairs((size + 1) // 2)
        return np.concatenate([z1, z2])[:size]

    def __repr__(self) -> str:
        return "BoxMullerSampler()"
