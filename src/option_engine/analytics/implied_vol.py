"""
Implied volatility solver for European options.

Newton-Raphson on the Black-Scholes price with vega as the derivative,
falling back to bisection over a bounded volatility interval when Newton
stalls, leaves the interval or exhausts its iteration budget.
"""

import logging
import math
from dataclasses import dataclass
from typing import Any

from option_engine.analytics.black_scholes import bs_price, bs_vega
from option_engine.constants import (
    IV_DEFAULT_GUESS,
    IV_MAX_BISECTION_ITERATIONS,
    IV_MAX_ITERATIONS,
    IV_MIN_VEGA,
    IV_PRICE_TOLERANCE,
    IV_SIGMA_HIGH,
    IV_SIGMA_LOW,
    IV_VOL_TOLERANCE,
)
from option_engine.errors import SolverNonConvergenceError, ValidationError
from option_engine.params import ImpliedVolRequest

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImpliedVolResult:
    """
    Result from the implied volatility solver.

    Attributes
    ----------
    implied_vol : float
        Solved volatility, or the best estimate when not converged
    iterations : int
        Newton plus bisection iterations spent
    converged : bool
        Whether a tolerance was met
    method : str
        'newton' or 'bisection' (the stage that produced implied_vol)
    price_error : float
        BS(implied_vol) - market_price
    """

    implied_vol: float
    iterations: int
    converged: bool
    method: str
    price_error: float = math.nan

    def to_dict(self) -> dict[str, Any]:
        return {
            "impliedVol": self.implied_vol,
            "iterationsUsed": self.iterations,
            "converged": self.converged,
            "method": self.method,
        }


def arbitrage_bounds(S0: float, K: float, r: float, T: float, option_type: str) -> tuple[float, float]:
    """
    No-arbitrage price bounds for a European option.

    Returns
    -------
    tuple[float, float]
        Call: (max(S0 - K*e^(-rT), 0), S0)
        Put:  (max(K*e^(-rT) - S0, 0), K*e^(-rT))
    """
    discounted_strike = K * math.exp(-r * T)
    if option_type == "call":
        return max(S0 - discounted_strike, 0.0), S0
    return max(discounted_strike - S0, 0.0), discounted_strike


def initial_guess(price: float, S0: float, K: float, T: float) -> float:
    """
    Starting volatility for Newton-Raphson.

    Brenner-Subrahmanyam σ ≈ √(2π/T)·(C/S) near the money (0.9 <= S/K <= 1.1),
    clamped to [1%, 500%]; a flat 20% otherwise, where the approximation is poor.
    """
    moneyness = S0 / K
    if 0.9 <= moneyness <= 1.1:
        guess = math.sqrt(2.0 * math.pi / T) * (price / S0)
        return max(0.01, min(guess, 5.0))
    return IV_DEFAULT_GUESS


def solve_implied_vol(
    price: float,
    S0: float,
    K: float,
    r: float,
    T: float,
    option_type: str,
    *,
    initial_vol: float | None = None,
    tol: float = IV_PRICE_TOLERANCE,
    vol_tol: float = IV_VOL_TOLERANCE,
    max_iter: int = IV_MAX_ITERATIONS,
    sigma_low: float = IV_SIGMA_LOW,
    sigma_high: float = IV_SIGMA_HIGH,
    max_bisect_iter: int = IV_MAX_BISECTION_ITERATIONS,
    raise_on_failure: bool = True,
) -> ImpliedVolResult:
    """
    Solve for σ such that BS(S0, K, r, T, σ, type) = price.

    Parameters
    ----------
    price : float
        Observed market price of the option (must be > 0)
    S0, K, r, T : float
        Contract parameters
    option_type : str
        'call' or 'put'
    initial_vol : float, optional
        Newton starting point (default: Brenner-Subrahmanyam or 20%)
    tol : float, optional
        Convergence tolerance on |BS(σ) - price|, scaled by the price when
        the price is below 1
    vol_tol : float, optional
        Convergence tolerance on the volatility step / bracket width
    max_iter : int, optional
        Newton iteration cap before falling back to bisection
    sigma_low, sigma_high : float, optional
        Volatility bracket used by bisection and to bound Newton steps
    max_bisect_iter : int, optional
        Bisection iteration cap
    raise_on_failure : bool, optional
        If False, failures come back as ImpliedVolResult(converged=False)

    Returns
    -------
    ImpliedVolResult

    Raises
    ------
    ValidationError
        If the request parameters are invalid
    SolverNonConvergenceError
        If the price lies outside the no-arbitrage bounds or outside the
        prices reachable within [sigma_low, sigma_high], or both stages
        exhaust their budgets (only when raise_on_failure is True)
    """
    request = ImpliedVolRequest(
        S0=S0, K=K, r=r, T=T, market_price=price, option_type=option_type, initial_vol=initial_vol
    )
    if not 0 < sigma_low < sigma_high:
        raise ValidationError("sigma_low", sigma_low, "Volatility bracket must satisfy 0 < sigma_low < sigma_high")

    S0, K, r, T = request.S0, request.K, request.r, request.T
    price, option_type = request.market_price, request.option_type
    # Absolute tolerance for prices >= 1, relative below
    price_tol = tol * min(price, 1.0)

    def objective(sigma: float) -> float:
        return bs_price(S0, K, r, T, sigma, option_type) - price

    def fail(message: str, best: float, iterations: int, method: str) -> ImpliedVolResult:
        logger.warning("Implied volatility failed: %s", message)
        if raise_on_failure:
            raise SolverNonConvergenceError(message, best_estimate=best, iterations=iterations)
        error = objective(best) if math.isfinite(best) else math.nan
        return ImpliedVolResult(best, iterations, False, method, error)

    lower_bound, upper_bound = arbitrage_bounds(S0, K, r, T, option_type)
    if not lower_bound < price < upper_bound:
        return fail(
            f"{option_type.capitalize()} price {price:.6f} is outside the no-arbitrage bounds "
            f"({lower_bound:.6f}, {upper_bound:.6f})",
            math.nan,
            0,
            "newton",
        )

    sigma = request.initial_vol if request.initial_vol is not None else initial_guess(price, S0, K, T)
    sigma = min(max(sigma, sigma_low), sigma_high)
    iterations = 0

    # Newton-Raphson
    for _ in range(max_iter):
        iterations += 1
        error = objective(sigma)
        if abs(error) < price_tol:
            return ImpliedVolResult(sigma, iterations, True, "newton", error)

        vega = bs_vega(S0, K, r, T, sigma)
        if vega < IV_MIN_VEGA:
            logger.debug("Vega %.3g too small at sigma=%.6f, switching to bisection", vega, sigma)
            break

        sigma_new = sigma - error / vega
        if not sigma_low <= sigma_new <= sigma_high:
            logger.debug("Newton step to sigma=%.6f left the bracket, switching to bisection", sigma_new)
            break

        if abs(sigma_new - sigma) < vol_tol:
            return ImpliedVolResult(sigma_new, iterations, True, "newton", objective(sigma_new))
        sigma = sigma_new
    else:
        logger.debug("Newton did not converge in %d iterations, switching to bisection", max_iter)

    # Bisection fallback
    lo, hi = sigma_low, sigma_high
    f_lo, f_hi = objective(lo), objective(hi)
    if abs(f_lo) < price_tol:
        return ImpliedVolResult(lo, iterations, True, "bisection", f_lo)
    if abs(f_hi) < price_tol:
        return ImpliedVolResult(hi, iterations, True, "bisection", f_hi)
    if f_lo > 0 or f_hi < 0:
        return fail(
            f"Market price {price:.6f} is not reachable for volatility in "
            f"[{sigma_low:g}, {sigma_high:g}] (model prices {f_lo + price:.6f} to {f_hi + price:.6f})",
            sigma,
            iterations,
            "bisection",
        )

    mid = 0.5 * (lo + hi)
    for _ in range(max_bisect_iter):
        iterations += 1
        mid = 0.5 * (lo + hi)
        f_mid = objective(mid)
        if abs(f_mid) < price_tol or (hi - lo) < vol_tol:
            return ImpliedVolResult(mid, iterations, True, "bisection", f_mid)
        if f_mid > 0:
            hi = mid
        else:
            lo = mid

    return fail(
        f"Implied volatility did not converge after {iterations} iterations. "
        f"Final bracket: [{lo:.6f}, {hi:.6f}], target: {price:.6f}",
        mid,
        iterations,
        "bisection",
    )


def implied_vol(
    price: float,
    S0: float,
    K: float,
    r: float,
    T: float,
    option_type: str,
    **kwargs: Any,
) -> float:
    """
    Implied volatility as a bare float.

    Accepts the keyword arguments of :func:`solve_implied_vol` and always
    raises on failure.
    """
    kwargs["raise_on_failure"] = True
    return solve_implied_vol(price, S0, K, r, T, option_type, **kwargs).implied_vol
