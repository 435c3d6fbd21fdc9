"""
Types and dataclasses for convergence experiments.
"""

import math
from dataclasses import dataclass, field
from typing import Any

from option_engine.params import ContractParameters


@dataclass
class ConvergenceConfig:
    """
    Configuration for a Monte Carlo convergence study.

    Attributes
    ----------
    name : str
        Experiment identifier
    S0, K, r, T, sigma : float
        Contract parameters
    option_type : str
        Option type: 'call' or 'put'
    n_paths_list : list[int]
        List of path counts to test
    seeds : list[int]
        List of random seeds for reproducibility
    antithetic : bool
        Use antithetic variates
    n_workers : int | None
        Worker pool size (None: engine default)
    block_size : int | None
        Paths per seeded block (None: engine default)
    """

    name: str
    S0: float
    K: float
    r: float
    T: float
    sigma: float
    option_type: str = "call"
    n_paths_list: list[int] = field(default_factory=lambda: [1_000, 4_000, 16_000, 64_000])
    seeds: list[int] = field(default_factory=lambda: [42])
    antithetic: bool = True
    n_workers: int | None = None
    block_size: int | None = None

    def contract(self) -> ContractParameters:
        """Validated contract parameters for this study."""
        return ContractParameters(
            S0=self.S0, K=self.K, r=self.r, T=self.T, sigma=self.sigma, option_type=self.option_type
        )


@dataclass
class ExperimentMetadata:
    """
    Environment captured alongside every run.
    """

    timestamp: str
    python_version: str
    numpy_version: str
    os_platform: str
    git_commit: str | None


@dataclass
class ConvergenceResult:
    """
    One (n_paths, seed) run of a convergence study.

    Attributes
    ----------
    config_name : str
        Name of the experiment configuration
    n_paths : int
        Number of simulation paths used
    seed : int
        Root seed of the run
    mc_price : float
        Monte Carlo estimate
    bs_price : float
        Black-Scholes reference price
    stderr : float
        Standard error of the estimate
    ci_lower, ci_upper : float
        95% confidence interval
    absolute_error : float
        |mc_price - bs_price|
    relative_error_pct : float
        Absolute error in percent of bs_price (NaN when bs_price ~ 0)
    runtime_seconds : float
        Wall-clock time of the simulation
    metadata : ExperimentMetadata
        Environment for reproducibility
    """

    config_name: str
    n_paths: int
    seed: int
    mc_price: float
    bs_price: float
    stderr: float
    ci_lower: float
    ci_upper: float
    absolute_error: float
    relative_error_pct: float
    runtime_seconds: float
    metadata: ExperimentMetadata

    @property
    def covered(self) -> bool:
        """Whether the 95% interval contains the Black-Scholes price."""
        return self.ci_lower <= self.bs_price <= self.ci_upper

    def to_dict(self) -> dict[str, Any]:
        """Convert result to dictionary for JSON serialization."""
        return {
            "config_name": self.config_name,
            "n_paths": self.n_paths,
            "seed": self.seed,
            "mc_price": self.mc_price,
            "bs_price": self.bs_price,
            "stderr": self.stderr,
            "ci_lower": self.ci_lower,
            "ci_upper": self.ci_upper,
            "absolute_error": self.absolute_error,
            "relative_error_pct": (
                self.relative_error_pct if math.isfinite(self.relative_error_pct) else None
            ),
            "runtime_seconds": self.runtime_seconds,
            "metadata": {
                "timestamp": self.metadata.timestamp,
                "python_version": self.metadata.python_version,
                "numpy_version": self.metadata.numpy_version,
                "os_platform": self.metadata.os_platform,
                "git_commit": self.metadata.git_commit,
            },
        }


@dataclass
class ConvergenceSummary:
    """Aggregate over all seeds at one path count."""

    n_paths: int
    n_runs: int
    mean_abs_error: float
    mean_stderr: float
    coverage: float
    mean_runtime_seconds: float

    def to_dict(self) -> dict[str, Any]:
        return {
            "n_paths": self.n_paths,
            "n_runs": self.n_runs,
            "mean_abs_error": self.mean_abs_error,
            "mean_stderr": self.mean_stderr,
            "coverage": self.coverage,
            "mean_runtime_seconds": self.mean_runtime_seconds,
        }
