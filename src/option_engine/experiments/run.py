"""
Convergence study runner: Monte Carlo against the closed-form price.
"""

import logging
import platform
import subprocess
import sys
import time
from datetime import datetime

import numpy as np

from option_engine.analytics.black_scholes import bs_price
from option_engine.experiments.types import (
    ConvergenceConfig,
    ConvergenceResult,
    ConvergenceSummary,
    ExperimentMetadata,
)
from option_engine.params import SimulationConfig
from option_engine.pricers.monte_carlo import MonteCarloEngine
from option_engine.service import relative_error_pct

logger = logging.getLogger(__name__)


def get_git_commit() -> str | None:
    """Get current git commit hash if available."""
    try:
        result = subprocess.run(
            ["git", "rev-parse", "HEAD"],
            capture_output=True,
            text=True,
            timeout=1,
            check=False
        )
    except (subprocess.TimeoutExpired, FileNotFoundError):
        return None
    if result.returncode == 0:
        return result.stdout.strip()
    return None


def create_metadata() -> ExperimentMetadata:
    """Create metadata for reproducibility."""
    return ExperimentMetadata(
        timestamp=datetime.now().isoformat(),
        python_version=f"{sys.version_info.major}.{sys.version_info.minor}.{sys.version_info.micro}",
        numpy_version=np.__version__,
        os_platform=platform.platform(),
        git_commit=get_git_commit(),
    )


def run_convergence_study(config: ConvergenceConfig) -> list[ConvergenceResult]:
    """
    Price one contract over every (n_paths, seed) combination.

    Parameters
    ----------
    config : ConvergenceConfig
        Experiment configuration

    Returns
    -------
    list[ConvergenceResult]
        One result per combination, ordered by n_paths then seed

    Raises
    ------
    ValidationError
        If the contract or any path count is invalid
    """
    params = config.contract()
    reference = bs_price(params.S0, params.K, params.r, params.T, params.sigma, params.option_type)
    metadata = create_metadata()

    results = []
    for n_paths in config.n_paths_list:
        for seed in config.seeds:
            sim_config = SimulationConfig(n_paths=n_paths, seed=seed, antithetic=config.antithetic)
            engine = MonteCarloEngine(
                params,
                sim_config,
                n_workers=config.n_workers,
                block_size=config.block_size,
            )

            start_time = time.perf_counter()
            mc = engine.price()
            runtime = time.perf_counter() - start_time

            results.append(ConvergenceResult(
                config_name=config.name,
                n_paths=n_paths,
                seed=seed,
                mc_price=mc.price,
                bs_price=reference,
                stderr=mc.stderr,
                ci_lower=mc.ci_lower,
                ci_upper=mc.ci_upper,
                absolute_error=abs(mc.price - reference),
                relative_error_pct=relative_error_pct(mc.price, reference),
                runtime_seconds=runtime,
                metadata=metadata,
            ))
        logger.info("%s: finished n_paths=%d over %d seeds", config.name, n_paths, len(config.seeds))

    return results


def summarize(results: list[ConvergenceResult]) -> list[ConvergenceSummary]:
    """
    Aggregate results per path count.

    Parameters
    ----------
    results : list[ConvergenceResult]
        Output of :func:`run_convergence_study`

    Returns
    -------
    list[ConvergenceSummary]
        One row per distinct n_paths, in ascending order
    """
    groups: dict[int, list[ConvergenceResult]] = {}
    for r in results:
        groups.setdefault(r.n_paths, []).append(r)

    summary = []
    for n_paths, group in sorted(groups.items()):
        count = len(group)
        summary.append(ConvergenceSummary(
            n_paths=n_paths,
            n_runs=count,
            mean_abs_error=sum(r.absolute_error for r in group) / count,
            mean_stderr=sum(r.stderr for r in group) / count,
            coverage=sum(1 for r in group if r.covered) / count,
            mean_runtime_seconds=sum(r.runtime_seconds for r in group) / count,
        ))
    return summary
