"""
Random number generation for Monte Carlo simulation.
"""

from option_engine.rng.gaussian import (
    BoxMullerSampler,
    GaussianSampler,
    NumpyGaussianSampler,
    spawn_seed_sequences,
)

__all__ = [
    "BoxMullerSampler",
    "GaussianSampler",
    "NumpyGaussianSampler",
    "spawn_seed_sequences",
]
