#!/usr/bin/env python
"""
Convergence demonstration: plain vs antithetic sampling, and worker scaling.

Prices the reference call at increasing path counts and shows that a fixed
seed reproduces the same estimate whatever the number of worker threads.
"""

import sys
import time
from pathlib import Path

# Add parent directory to path to allow imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from option_engine.analytics.black_scholes import bs_price
from option_engine.params import ContractParameters, SimulationConfig
from option_engine.pricers.monte_carlo import MonteCarloEngine


def main():
    """Run convergence analysis across sampling methods and sample sizes."""
    params = ContractParameters(S0=100.0, K=100.0, r=0.05, T=1.0, sigma=0.2, option_type="call")
    seed = 42
    n_paths_list = [1000, 10000, 100000, 1000000]
    reference = bs_price(params.S0, params.K, params.r, params.T, params.sigma, params.option_type)

    print("=" * 90)
    print("Monte Carlo Convergence Analysis")
    print("=" * 90)
    print(f"\nParameters: S0={params.S0}, K={params.K}, r={params.r}, sigma={params.sigma}, T={params.T}")
    print(f"Black-Scholes: {reference:.6f}")
    print(f"Seed: {seed}\n")
    print("-" * 90)
    print(f"{'Method':<14} {'n_paths':<12} {'Price':<12} {'Std Error':<12} {'|Error|':<12} {'CI Width':<12}")
    print("-" * 90)

    for n_paths in n_paths_list:
        for method_name, antithetic in [("Plain MC", False), ("Antithetic", True)]:
            sim_config = SimulationConfig(n_paths=n_paths, seed=seed, antithetic=antithetic)
            result = MonteCarloEngine(params, sim_config).price()
            ci_width = result.ci_upper - result.ci_lower
            print(
                f"{method_name:<14} {n_paths:<12,} {result.price:<12.6f} {result.stderr:<12.6f} "
                f"{abs(result.price - reference):<12.6f} {ci_width:<12.6f}"
            )
        print("-" * 90)

    print("\nWorker scaling (n_paths=4,000,000, seed fixed):")
    print(f"{'Workers':<10} {'Price':<20} {'Time (s)':<10}")
    sim_config = SimulationConfig(n_paths=4_000_000, seed=seed)
    for n_workers in [1, 2, 4, 8]:
        engine = MonteCarloEngine(params, sim_config, n_workers=n_workers)
        start = time.perf_counter()
        result = engine.price()
        elapsed = time.perf_counter() - start
        print(f"{n_workers:<10} {result.price!r:<20} {elapsed:<10.3f}")

    print("\nObservations:")
    print("  • Standard error decreases as n_paths increases (O(1/√n) convergence)")
    print("  • Antithetic pairs roughly halve the standard error for a call")
    print("  • The seeded price is identical for every worker count")
    print("=" * 90)


if __name__ == "__main__":
    main()
