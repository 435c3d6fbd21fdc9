#!/usr/bin/env python
"""
Implied volatility recovery across strikes.

Prices out-of-the-money options under a synthetic smile, then inverts each
price with the Newton/bisection solver and reports how the solver got there.
"""

import sys
from pathlib import Path

# Add parent directory to path to allow imports
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from option_engine.analytics.black_scholes import bs_price
from option_engine.analytics.implied_vol import solve_implied_vol


def smile(moneyness: float) -> float:
    deviation = moneyness - 1.0
    return 0.20 - 0.15 * deviation + 0.25 * deviation**2


def main():
    """Run IV smile demonstration."""
    S0 = 100.0
    r = 0.05
    T = 1.0
    strikes = [60, 70, 80, 90, 100, 110, 120, 130, 150]

    print("=" * 100)
    print("Implied Volatility Smile Demonstration")
    print("=" * 100)
    print(f"\nParameters: S0={S0}, r={r}, T={T}")
    print("Volatility model: σ(K) = 0.20 - 0.15*(K/S0 - 1) + 0.25*(K/S0 - 1)²")
    print("\n" + "-" * 100)
    print(f"{'Strike':<8} {'Type':<6} {'True Vol':<12} {'Market Price':<15} "
          f"{'Implied Vol':<14} {'Abs Error':<12} {'Method':<10} {'Iter':<5}")
    print("-" * 100)

    errors = []
    for K in strikes:
        option_type = "put" if K < S0 else "call"
        true_sigma = smile(K / S0)
        market_price = bs_price(S0, K, r, T, true_sigma, option_type)

        result = solve_implied_vol(market_price, S0, K, r, T, option_type, raise_on_failure=False)
        if not result.converged:
            print(f"{K:<8.1f} {option_type:<6} {true_sigma:<12.6f} {market_price:<15.6f} {'FAILED':<14}")
            continue

        error = abs(result.implied_vol - true_sigma)
        errors.append(error)
        print(f"{K:<8.1f} {option_type:<6} {true_sigma:<12.6f} {market_price:<15.6f} "
              f"{result.implied_vol:<14.6f} {error:<12.2e} {result.method:<10} {result.iterations:<5}")

    print("-" * 100)
    if errors:
        print("\nRecovery Statistics:")
        print(f"  Maximum error:  {max(errors):.2e}")
        print(f"  Average error:  {sum(errors) / len(errors):.2e}")
        print(f"  All errors < 1e-6: {'✓' if all(e < 1e-6 for e in errors) else '✗'}")

    print("\nInfeasible quotes:")
    for price in [0.0001, 150.0]:
        result = solve_implied_vol(price, S0, 100.0, r, T, "call", raise_on_failure=False)
        print(f"  call @ {price:<10g} converged={result.converged}  iterations={result.iterations}")
    print("=" * 100)


if __name__ == "__main__":
    main()
