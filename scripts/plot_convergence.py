#!/usr/bin/env python
"""
Convergence analysis visualization.

Plots standard error and absolute error vs number of paths on log-log axes
for plain and antithetic sampling, demonstrating O(1/√n) convergence.
"""

import sys
from pathlib import Path

import matplotlib.pyplot as plt
import numpy as np

# Add parent directory to path to allow imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from option_engine.experiments import ConvergenceConfig, run_convergence_study, summarize


def main():
    """Generate convergence plot for plain and antithetic sampling."""
    n_paths_grid = [1000, 2000, 5000, 10000, 20000, 50000, 100000]
    seeds = list(range(10))

    methods = [
        ("Plain MC", False, "o-"),
        ("Antithetic", True, "s-"),
    ]

    print("=" * 80)
    print("Monte Carlo Convergence Analysis")
    print("=" * 80)
    print(f"Seeds: {min(seeds)} to {max(seeds)}")
    print(f"n_paths grid: {n_paths_grid}\n")
    print("Running simulations...")

    summaries = {}
    for method_name, antithetic, _ in methods:
        print(f"  {method_name}...")
        config = ConvergenceConfig(
            name=method_name,
            S0=100.0,
            K=100.0,
            r=0.05,
            T=1.0,
            sigma=0.2,
            n_paths_list=n_paths_grid,
            seeds=seeds,
            antithetic=antithetic,
        )
        summaries[method_name] = summarize(run_convergence_study(config))

    print("\nGenerating plot...")

    fig, (ax_se, ax_err) = plt.subplots(1, 2, figsize=(14, 6))
    for method_name, _, marker in methods:
        rows = summaries[method_name]
        ax_se.loglog(n_paths_grid, [s.mean_stderr for s in rows], marker,
                     label=method_name, linewidth=2, markersize=8)
        ax_err.loglog(n_paths_grid, [s.mean_abs_error for s in rows], marker,
                      label=method_name, linewidth=2, markersize=8)

    n_ref = np.array([n_paths_grid[0], n_paths_grid[-1]])
    stderr_ref = summaries["Plain MC"][0].mean_stderr * np.sqrt(n_paths_grid[0] / n_ref)
    ax_se.loglog(n_ref, stderr_ref, "k--", alpha=0.5, linewidth=1.5, label="O(1/√n) reference")

    ax_se.set_ylabel("Mean Standard Error", fontsize=12)
    ax_err.set_ylabel("Mean |MC - BS|", fontsize=12)
    for ax in (ax_se, ax_err):
        ax.set_xlabel("Number of Paths", fontsize=12)
        ax.legend(fontsize=10, loc="upper right")
        ax.grid(True, alpha=0.3, which="both", linestyle=":")
    fig.suptitle("Monte Carlo Convergence vs Black-Scholes", fontsize=14, fontweight="bold")
    fig.tight_layout()

    plots_dir = Path(__file__).parent.parent / "plots"
    plots_dir.mkdir(exist_ok=True)

    output_path = plots_dir / "convergence_stderr.png"
    fig.savefig(output_path, dpi=150, bbox_inches="tight")
    print(f"\nPlot saved to: {output_path}")

    plt.show()

    print("\n" + "=" * 80)
    print("Observations:")
    print("  • Both methods follow O(1/√n) convergence (parallel to reference line)")
    print("  • Coverage of the 95% interval per path count:")
    for method_name, _, _ in methods:
        coverage = ", ".join(f"{s.coverage:.0%}" for s in summaries[method_name])
        print(f"      {method_name:<12} {coverage}")
    print("=" * 80)


if __name__ == "__main__":
    main()
