"""
I/O utilities for saving and loading convergence results.
"""

import json
import logging
from pathlib import Path

from option_engine.experiments.run import summarize
from option_engine.experiments.types import ConvergenceResult

logger = logging.getLogger(__name__)


def save_results(
    results: list[ConvergenceResult],
    out_dir: Path,
    experiment_name: str
) -> None:
    """
    Save convergence results to JSON and summary text files.

    Creates:
    - results.json: Full machine-readable results plus per-N summary
    - summary.txt: Human-readable table summary

    Parameters
    ----------
    results : list[ConvergenceResult]
        Results to save
    out_dir : Path
        Output directory
    experiment_name : str
        Name of experiment for headers
    """
    out_dir = Path(out_dir)
    out_dir.mkdir(parents=True, exist_ok=True)
    summary = summarize(results)

    json_path = out_dir / "results.json"
    json_data = {
        "experiment_name": experiment_name,
        "n_results": len(results),
        "results": [r.to_dict() for r in results],
        "summary": [s.to_dict() for s in summary],
    }
    with open(json_path, "w") as f:
        json.dump(json_data, f, indent=2)

    summary_path = out_dir / "summary.txt"
    with open(summary_path, "w") as f:
        f.write("=" * 90 + "\n")
        f.write(f"Experiment: {experiment_name}\n")
        f.write("=" * 90 + "\n")
        f.write(f"\nTotal runs: {len(results)}\n")

        if results:
            meta = results[0].metadata
            f.write("\nMetadata:\n")
            f.write(f"  Timestamp:      {meta.timestamp}\n")
            f.write(f"  Python:         {meta.python_version}\n")
            f.write(f"  NumPy:          {meta.numpy_version}\n")
            f.write(f"  Platform:       {meta.os_platform}\n")
            f.write(f"  Git commit:     {meta.git_commit or 'N/A'}\n")
            f.write(f"  BS reference:   {results[0].bs_price:.6f}\n")

        f.write("\n" + "-" * 90 + "\n")
        f.write(f"{'n_paths':>12} {'Runs':>6} {'Mean |Error|':>14} {'Mean Stderr':>14} "
                f"{'Coverage':>10} {'Mean Runtime (s)':>18}\n")
        f.write("-" * 90 + "\n")
        for s in summary:
            f.write(f"{s.n_paths:>12} {s.n_runs:>6} {s.mean_abs_error:>14.6f} {s.mean_stderr:>14.6f} "
                    f"{s.coverage * 100:>9.1f}% {s.mean_runtime_seconds:>18.4f}\n")
        f.write("-" * 90 + "\n")

    logger.info("results saved to %s (%s, %s)", out_dir, json_path.name, summary_path.name)


def load_results(results_dir: Path) -> dict:
    """
    Load experiment results from JSON file.

    Parameters
    ----------
    results_dir : Path
        Directory containing results.json

    Returns
    -------
    dict
        Loaded experiment data
    """
    json_path = Path(results_dir) / "results.json"
    with open(json_path) as f:
        return json.load(f)
