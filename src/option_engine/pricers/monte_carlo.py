"""
Monte Carlo pricing engine for European options.

The path count is cut into fixed-size blocks. Block ``i`` always draws from
the ``i``-th child of the root ``SeedSequence``, so the random stream depends
only on (seed, block_size). Contiguous runs of blocks are handed to a thread
pool; each worker builds its own samplers and returns one ``BlockTotals`` per
block. After a single join the totals are merged with ``math.fsum`` in block
order, which makes a seeded price bitwise identical for any worker count.
"""

import logging
import math
import os
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass

import numpy as np

from option_engine.constants import DEFAULT_BLOCK_SIZE, LOW_PATH_WARNING, Z_CRITICAL_95
from option_engine.errors import NumericalInstabilityError, ValidationError
from option_engine.models.gbm import GeometricBrownianMotion, check_terminal_overflow
from option_engine.params import ContractParameters, SimulationConfig
from option_engine.payoffs.plain_vanilla import payoff_for
from option_engine.rng.gaussian import GaussianSampler, NumpyGaussianSampler, spawn_seed_sequences

logger = logging.getLogger(__name__)

SamplerFactory = Callable[[np.random.SeedSequence], GaussianSampler]


@dataclass
class MonteCarloResult:
    """
    Container for Monte Carlo pricing results.

    Attributes
    ----------
    price : float
        Estimated option price
    stderr : float
        Standard error of the estimate (NaN when fewer than two samples)
    ci_lower : float
        Lower bound of 95% confidence interval
    ci_upper : float
        Upper bound of 95% confidence interval
    n_paths : int
        Number of simulation paths used
    n_blocks : int
        Number of seeded blocks the paths were split into
    n_workers : int
        Number of worker threads that ran the blocks
    antithetic : bool
        Whether antithetic pairs were used
    seed : int | None
        Root seed (None when drawn from system entropy)
    """
    price: float
    stderr: float
    ci_lower: float
    ci_upper: float
    n_paths: int
    n_blocks: int = 1
    n_workers: int = 1
    antithetic: bool = True
    seed: int | None = None

    def to_dict(self) -> dict:
        def _clean(x: float) -> float | None:
            return x if math.isfinite(x) else None

        return {
            "price": self.price,
            "stderr": _clean(self.stderr),
            "ci_lower": _clean(self.ci_lower),
            "ci_upper": _clean(self.ci_upper),
            "n_paths": self.n_paths,
            "n_blocks": self.n_blocks,
            "n_workers": self.n_workers,
            "antithetic": self.antithetic,
            "seed": self.seed,
        }

    def __repr__(self) -> str:
        return (
            f"MonteCarloResult(\n"
            f"  price={self.price:.6f},\n"
            f"  stderr={self.stderr:.6f},\n"
            f"  CI95=[{self.ci_lower:.6f}, {self.ci_upper:.6f}],\n"
            f"  n_paths={self.n_paths},\n"
            f"  n_blocks={self.n_blocks},\n"
            f"  n_workers={self.n_workers},\n"
            f"  antithetic={self.antithetic}\n"
            f")"
        )


@dataclass
class BlockTotals:
    """
    Partial sums produced by one block of paths.

    A "unit" is the independent sample the standard error is computed over:
    a single path, or the mean of an antithetic pair.
    """
    payoff_sum: float
    unit_sum: float
    unit_sq_sum: float
    n_units: int
    n_paths: int


def block_sizes(n_paths: int, block_size: int) -> list[int]:
    """Split ``n_paths`` into full blocks plus one short trailing block."""
    n_full, rest = divmod(n_paths, block_size)
    return [block_size] * n_full + ([rest] if rest else [])


def partition_blocks(n_blocks: int, n_workers: int) -> list[range]:
    """
    Split block indices into contiguous, non-empty ranges.

    Parameters
    ----------
    n_blocks : int
        Total number of blocks
    n_workers : int
        Upper bound on the number of ranges

    Returns
    -------
    list[range]
        At most ``n_workers`` ranges covering 0..n_blocks-1 in order
    """
    n_parts = max(1, min(n_workers, n_blocks))
    base, extra = divmod(n_blocks, n_parts)
    ranges = []
    start = 0
    for i in range(n_parts):
        stop = start + base + (1 if i < extra else 0)
        ranges.append(range(start, stop))
        start = stop
    return ranges


def simulate_block(
    model: GeometricBrownianMotion,
    payoff: Callable[[np.ndarray], np.ndarray],
    size: int,
    antithetic: bool,
) -> BlockTotals:
    """
    Simulate one block of undiscounted payoffs.

    Prices come from ``model.simulate_terminal``. With ``antithetic=True``
    the first ``size - size // 2`` prices use draws Z and the rest use -Z for
    the leading ``size // 2`` of them; the odd draw left over (if any) is a
    plain sample.
    """
    payoffs = payoff(model.simulate_terminal(size, antithetic))
    if not antithetic:
        return BlockTotals(
            payoff_sum=float(np.sum(payoffs)),
            unit_sum=float(np.sum(payoffs)),
            unit_sq_sum=float(np.dot(payoffs, payoffs)),
            n_units=size,
            n_paths=size,
        )

    half = size // 2
    plus, minus = payoffs[: size - half], payoffs[size - half :]
    units = np.concatenate([0.5 * (plus[:half] + minus), plus[half:]])
    return BlockTotals(
        payoff_sum=float(np.sum(plus) + np.sum(minus)),
        unit_sum=float(np.sum(units)),
        unit_sq_sum=float(np.dot(units, units)),
        n_units=len(units),
        n_paths=size,
    )


class MonteCarloEngine:
    """
    Parallel Monte Carlo pricing engine for European options under GBM.
    """

    def __init__(
        self,
        params: ContractParameters,
        sim_config: SimulationConfig,
        n_workers: int | None = None,
        block_size: int | None = None,
        sampler_factory: SamplerFactory = NumpyGaussianSampler,
    ):
        """
        Initialize Monte Carlo pricing engine.

        Parameters
        ----------
        params : ContractParameters
            Validated contract to price
        sim_config : SimulationConfig
            Path count, seed and antithetic flag
        n_workers : int, optional
            Size of the worker pool (default: os.cpu_count())
        block_size : int, optional
            Paths per seeded block (default: 65536)
        sampler_factory : Callable, optional
            Builds a fresh sampler from a child SeedSequence; called once per block
        """
        if n_workers is None:
            n_workers = os.cpu_count() or 1
        if block_size is None:
            block_size = DEFAULT_BLOCK_SIZE
        if isinstance(n_workers, bool) or not isinstance(n_workers, int) or n_workers < 1:
            raise ValidationError("n_workers", n_workers, f"n_workers must be a positive integer, got {n_workers!r}")
        if isinstance(block_size, bool) or not isinstance(block_size, int) or block_size < 1:
            raise ValidationError("block_size", block_size, f"block_size must be a positive integer, got {block_size!r}")

        self.params = params
        self.sim_config = sim_config
        self.n_workers = n_workers
        self.block_size = block_size
        self.sampler_factory = sampler_factory
        self.payoff = payoff_for(params.option_type, params.K)

        # Fail on overflow-prone parameters before any thread starts
        check_terminal_overflow(params)

    def _run_blocks(
        self,
        seeds: list[np.random.SeedSequence],
        sizes: list[int],
        indices: range,
    ) -> list[BlockTotals]:
        totals = []
        for i in indices:
            model = GeometricBrownianMotion(self.params, sampler=self.sampler_factory(seeds[i]))
            totals.append(simulate_block(model, self.payoff, sizes[i], self.sim_config.antithetic))
        return totals

    def price(self) -> MonteCarloResult:
        """
        Compute option price via Monte Carlo simulation.

        Returns
        -------
        MonteCarloResult
            Pricing results including price, standard error, and confidence interval

        Raises
        ------
        NumericalInstabilityError
            If the reduced estimate is not finite
        """
        n_paths = self.sim_config.n_paths
        seed = self.sim_config.seed
        if n_paths < LOW_PATH_WARNING:
            logger.debug("pricing with only %d paths; confidence interval is not meaningful", n_paths)

        sizes = block_sizes(n_paths, self.block_size)
        seeds = spawn_seed_sequences(seed, len(sizes))
        ranges = partition_blocks(len(sizes), self.n_workers)

        if len(ranges) == 1:
            per_worker = [self._run_blocks(seeds, sizes, ranges[0])]
        else:
            with ThreadPoolExecutor(max_workers=len(ranges)) as pool:
                futures = [pool.submit(self._run_blocks, seeds, sizes, r) for r in ranges]
                per_worker = [f.result() for f in futures]

        blocks = [b for worker_totals in per_worker for b in worker_totals]
        result = self._reduce(blocks, n_workers=len(ranges), seed=seed)
        logger.debug(
            "MC price %.6f +/- %.6f (n_paths=%d, blocks=%d, workers=%d)",
            result.price, result.stderr, n_paths, len(blocks), len(ranges),
        )
        return result

    def _reduce(self, blocks: list[BlockTotals], n_workers: int, seed: int | None) -> MonteCarloResult:
        n_paths = sum(b.n_paths for b in blocks)
        n_units = sum(b.n_units for b in blocks)
        payoff_sum = math.fsum(b.payoff_sum for b in blocks)
        unit_sum = math.fsum(b.unit_sum for b in blocks)
        unit_sq_sum = math.fsum(b.unit_sq_sum for b in blocks)

        discount_factor = self.params.discount_factor
        price = discount_factor * payoff_sum / n_paths
        if not math.isfinite(price):
            raise NumericalInstabilityError("mc_price", f"Monte Carlo estimate is not finite ({price})")

        if n_units > 1:
            unit_mean = unit_sum / n_units
            variance = max(unit_sq_sum - n_units * unit_mean**2, 0.0) / (n_units - 1)
            stderr = discount_factor * math.sqrt(variance / n_units)
        else:
            stderr = math.nan

        return MonteCarloResult(
            price=price,
            stderr=stderr,
            ci_lower=price - Z_CRITICAL_95 * stderr,
            ci_upper=price + Z_CRITICAL_95 * stderr,
            n_paths=n_paths,
            n_blocks=len(blocks),
            n_workers=n_workers,
            antithetic=self.sim_config.antithetic,
            seed=seed,
        )
