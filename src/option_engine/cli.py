#!/usr/bin/env python
"""
Command-line interface for the option pricing engine.

Example usage:
    option-engine price --S0 100 --K 100 --r 0.05 --sigma 0.2 --T 1.0 --n_paths 1000000
    option-engine price --S0 100 --K 100 --r 0.05 --sigma 0.2 --T 1.0 --option_type put --json
    option-engine iv --S0 100 --K 100 --r 0.05 --T 1.0 --market_price 10.45
    option-engine convergence --S0 100 --K 100 --r 0.05 --sigma 0.2 --T 1.0 --seeds 1 2 3
"""

import argparse
import json
import logging
import math
import sys
from pathlib import Path

from option_engine.analytics.black_scholes import bs_price
from option_engine.config import load_config
from option_engine.errors import EngineError
from option_engine.experiments.io import save_results
from option_engine.experiments.run import run_convergence_study, summarize
from option_engine.experiments.types import ConvergenceConfig
from option_engine.params import ContractParameters, ImpliedVolRequest, SimulationConfig
from option_engine.service import PricingService

logger = logging.getLogger(__name__)


def _add_contract_args(parser: argparse.ArgumentParser, with_sigma: bool = True) -> None:
    parser.add_argument("--S0", type=float, required=True, help="Initial spot price")
    parser.add_argument("--K", type=float, required=True, help="Strike price")
    parser.add_argument("--r", type=float, required=True, help="Risk-free rate")
    parser.add_argument("--T", type=float, required=True, help="Time to maturity (years)")
    if with_sigma:
        parser.add_argument("--sigma", type=float, required=True, help="Volatility")
    parser.add_argument(
        "--option_type",
        type=str,
        choices=["call", "put"],
        default="call",
        help="Option type: call or put",
    )


def _add_engine_args(parser: argparse.ArgumentParser) -> None:
    parser.add_argument(
        "--workers",
        type=int,
        default=None,
        help="Monte Carlo worker threads (default: OPTION_ENGINE_WORKERS or CPU count)",
    )
    parser.add_argument(
        "--block_size",
        type=int,
        default=None,
        help="Paths per seeded block (default: OPTION_ENGINE_BLOCK_SIZE or 65536)",
    )
    parser.add_argument(
        "--no_antithetic",
        dest="antithetic",
        action="store_false",
        help="Disable antithetic variates",
    )


def parse_args(args: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments.

    Parameters
    ----------
    args : list[str] | None
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    argparse.Namespace
        Parsed arguments.
    """
    parser = argparse.ArgumentParser(
        description="European option pricing: Black-Scholes, Monte Carlo and implied volatility",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    parser.add_argument(
        "--log_level",
        type=str,
        choices=["DEBUG", "INFO", "WARNING", "ERROR"],
        default="WARNING",
        help="Logging level",
    )
    subparsers = parser.add_subparsers(dest="command", required=True)

    price = subparsers.add_parser(
        "price",
        help="Price with Black-Scholes and Monte Carlo",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_contract_args(price)
    price.add_argument("--n_paths", type=int, default=100000, help="Number of Monte Carlo paths")
    price.add_argument("--seed", type=int, default=None, help="Random seed for reproducibility")
    _add_engine_args(price)
    price.add_argument(
        "--display_units",
        action="store_true",
        help="Show vega and rho per 1%% and theta per day",
    )
    price.add_argument("--json", action="store_true", help="Print the wire response as JSON")

    iv = subparsers.add_parser(
        "iv",
        help="Solve for implied volatility",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_contract_args(iv, with_sigma=False)
    iv.add_argument("--market_price", type=float, required=True, help="Observed option price")
    iv.add_argument("--initial_vol", type=float, default=None, help="Starting volatility for Newton")
    iv.add_argument("--json", action="store_true", help="Print the wire response as JSON")

    conv = subparsers.add_parser(
        "convergence",
        help="Run a Monte Carlo convergence study against Black-Scholes",
        formatter_class=argparse.ArgumentDefaultsHelpFormatter,
    )
    _add_contract_args(conv)
    conv.add_argument(
        "--n_paths_list",
        type=int,
        nargs="+",
        default=[1000, 4000, 16000, 64000, 256000],
        help="Path counts to test",
    )
    conv.add_argument("--seeds", type=int, nargs="+", default=[42], help="Random seeds")
    _add_engine_args(conv)
    conv.add_argument("--name", type=str, default="convergence", help="Experiment name")
    conv.add_argument("--out", type=Path, default=None, help="Directory for results.json / summary.txt")

    return parser.parse_args(args)


def _config_overrides(parsed: argparse.Namespace) -> dict:
    overrides = {}
    if parsed.workers is not None:
        overrides["n_workers"] = parsed.workers
    if parsed.block_size is not None:
        overrides["block_size"] = parsed.block_size
    return overrides


def _print_header(title: str) -> None:
    print("=" * 70)
    print(title)
    print("=" * 70)


def run_price(parsed: argparse.Namespace) -> int:
    service = PricingService(load_config(_config_overrides(parsed)))
    params = ContractParameters(parsed.S0, parsed.K, parsed.r, parsed.T, parsed.sigma, parsed.option_type)
    sim_config = SimulationConfig(parsed.n_paths, seed=parsed.seed, antithetic=parsed.antithetic)
    result = service.price(params, sim_config)

    if parsed.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    _print_header("Option Pricing Engine")
    print("\nInput Parameters:")
    print(f"  Spot Price (S0):        {params.S0:,.2f}")
    print(f"  Strike Price (K):       {params.K:,.2f}")
    print(f"  Risk-free Rate (r):     {params.r:.4f}")
    print(f"  Volatility (σ):         {params.sigma:.4f}")
    print(f"  Time to Maturity (T):   {params.T:.4f} years")
    print(f"  Option Type:            {params.option_type.upper()}")
    print("\nSimulation Parameters:")
    print(f"  Number of Paths:        {sim_config.n_paths:,}")
    print(f"  Antithetic Variates:    {sim_config.antithetic}")
    seed_str = result.seed if result.seed is not None else "None (random)"
    print(f"  Random Seed:            {seed_str}")
    print(f"  Workers:                {service.config.n_workers}")

    print("\nResults:")
    print(f"  Black-Scholes Price:    {result.bs_price:.6f}   ({result.bs_time_ms:.3f} ms)")
    print(f"  Monte Carlo Price:      {result.mc_price:.6f}   ({result.mc_time_ms:.3f} ms)")
    print(f"  Standard Error:         {result.mc_stderr:.6f}")
    print(f"  95% Confidence Interval: [{result.mc_ci_lower:.6f}, {result.mc_ci_upper:.6f}]")
    print(f"  Absolute Error:         {result.absolute_error:.6f}")
    if math.isnan(result.relative_error_pct):
        print("  Relative Error:         undefined (BS price ~ 0)")
    else:
        print(f"  Relative Error:         {result.relative_error_pct:.4f}%")

    greeks = result.greeks.to_display_units() if parsed.display_units else result.greeks
    units = " (vega/rho per 1%, theta per day)" if parsed.display_units else ""
    print(f"\nGreeks{units}:")
    print(f"  Delta:  {greeks.delta:.6f}")
    print(f"  Gamma:  {greeks.gamma:.6f}")
    print(f"  Vega:   {greeks.vega:.6f}")
    print(f"  Theta:  {greeks.theta:.6f}")
    print(f"  Rho:    {greeks.rho:.6f}")

    print("\n" + "=" * 70)
    return 0


def run_iv(parsed: argparse.Namespace) -> int:
    service = PricingService(load_config())
    request = ImpliedVolRequest(
        parsed.S0,
        parsed.K,
        parsed.r,
        parsed.T,
        parsed.market_price,
        parsed.option_type,
        initial_vol=parsed.initial_vol,
    )
    result = service.implied_volatility(request)

    if parsed.json:
        print(json.dumps(result.to_dict(), indent=2))
        return 0

    _print_header("Implied Volatility")
    print(f"\nMarket Price:      {request.market_price:.6f}")
    print(f"Implied Vol:       {result.implied_vol:.6f}")
    print(f"Iterations:        {result.iterations} ({result.method})")
    print(f"Converged:         {result.converged}")

    verify_price = bs_price(request.S0, request.K, request.r, request.T, result.implied_vol, request.option_type)
    print("\nVerification:")
    print(f"  BS(IV) Price:    {verify_price:.6f}")
    print(f"  Target Price:    {request.market_price:.6f}")
    print(f"  Price Error:     {abs(verify_price - request.market_price):.2e}")

    print("\n" + "=" * 70)
    return 0


def run_convergence(parsed: argparse.Namespace) -> int:
    engine_config = load_config(_config_overrides(parsed))
    config = ConvergenceConfig(
        name=parsed.name,
        S0=parsed.S0,
        K=parsed.K,
        r=parsed.r,
        T=parsed.T,
        sigma=parsed.sigma,
        option_type=parsed.option_type,
        n_paths_list=parsed.n_paths_list,
        seeds=parsed.seeds,
        antithetic=parsed.antithetic,
        n_workers=engine_config.n_workers,
        block_size=engine_config.block_size,
    )
    results = run_convergence_study(config)

    _print_header(f"Convergence Study: {config.name}")
    if results:
        print(f"\nBlack-Scholes reference: {results[0].bs_price:.6f}")
    print(f"\n{'n_paths':>12} {'Runs':>6} {'Mean |Error|':>14} {'Mean Stderr':>14} {'Coverage':>10}")
    print("-" * 70)
    for row in summarize(results):
        print(f"{row.n_paths:>12,} {row.n_runs:>6} {row.mean_abs_error:>14.6f} "
              f"{row.mean_stderr:>14.6f} {row.coverage * 100:>9.1f}%")

    if parsed.out is not None:
        save_results(results, parsed.out, config.name)
        print(f"\nResults saved to {parsed.out}")

    print("\n" + "=" * 70)
    return 0


def main(args: list[str] | None = None) -> int:
    """Main entry point for CLI.

    Parameters
    ----------
    args : list[str] | None
        Command-line arguments. If None, uses sys.argv.

    Returns
    -------
    int
        Exit code (0 for success, 1 for engine errors).
    """
    parsed = parse_args(args)
    logging.basicConfig(
        level=getattr(logging, parsed.log_level),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    commands = {"price": run_price, "iv": run_iv, "convergence": run_convergence}
    try:
        return commands[parsed.command](parsed)
    except EngineError as e:
        logger.debug("command %s failed", parsed.command, exc_info=True)
        if getattr(parsed, "json", False):
            print(json.dumps(e.to_dict(), indent=2))
        else:
            print(f"Error: {e}")
        return 1


if __name__ == "__main__":
    sys.exit(main())
