"""
Experiments package for reproducible convergence studies.
"""

from option_engine.experiments.io import load_results, save_results
from option_engine.experiments.run import run_convergence_study, summarize
from option_engine.experiments.types import (
    ConvergenceConfig,
    ConvergenceResult,
    ConvergenceSummary,
    ExperimentMetadata,
)

__all__ = [
    "ConvergenceConfig",
    "ConvergenceResult",
    "ConvergenceSummary",
    "ExperimentMetadata",
    "load_results",
    "run_convergence_study",
    "save_results",
    "summarize",
]
