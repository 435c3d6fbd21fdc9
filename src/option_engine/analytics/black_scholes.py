"""
Black-Scholes analytical pricing formulas for European options.

All sensitivities are returned in natural units:

- delta, gamma: per unit of spot
- vega: per 1.00 (i.e. 100 vol points) change in volatility
- theta: per year, sign convention of time decay (dV/dt, calendar time)
- rho: per 1.00 change in the risk-free rate

Conversion to per-vol-point, per-day or per-rate-point figures is the
caller's choice; see :meth:`Greeks.to_display_units`.
"""

import math
from dataclasses import dataclass
from typing import Any

from option_engine.analytics.normal import norm_cdf, norm_pdf
from option_engine.constants import DAYS_PER_YEAR, MAX_EXPONENT, MIN_SIGMA_SQRT_T, PERCENT
from option_engine.errors import NumericalInstabilityError
from option_engine.params import (
    ContractParameters,
    normalize_option_type,
    require_finite,
    require_positive,
)


@dataclass(frozen=True)
class Greeks:
    """
    Closed-form Black-Scholes sensitivities in natural units.

    Attributes
    ----------
    delta : float
        ∂V/∂S
    gamma : float
        ∂²V/∂S²
    vega : float
        ∂V/∂σ per 1.00 of volatility
    theta : float
        Time decay per year (−∂V/∂T)
    rho : float
        ∂V/∂r per 1.00 of rate
    """

    delta: float
    gamma: float
    vega: float
    theta: float
    rho: float

    def to_display_units(self) -> "Greeks":
        """
        Rescale to the figures traders usually quote.

        vega per 1 vol point, theta per calendar day (365-day year),
        rho per 1 rate point. delta and gamma are unchanged.
        """
        return Greeks(
            delta=self.delta,
            gamma=self.gamma,
            vega=self.vega / PERCENT,
            theta=self.theta / DAYS_PER_YEAR,
            rho=self.rho / PERCENT,
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "delta": self.delta,
            "gamma": self.gamma,
            "vega": self.vega,
            "theta": self.theta,
            "rho": self.rho,
        }


def _check_inputs(S0: float, K: float, r: float, T: float, sigma: float) -> None:
    require_positive("S0", S0)
    require_positive("K", K)
    require_finite("r", r)
    require_positive("T", T)
    require_positive("sigma", sigma)
    if abs(r * T) > MAX_EXPONENT:
        raise NumericalInstabilityError(
            "r*T", f"Discount exponent r*T={r * T:.3g} would overflow exp()"
        )


def d1_d2(S0: float, K: float, r: float, T: float, sigma: float) -> tuple[float, float]:
    """
    Compute the Black-Scholes d1 and d2 terms.

    Parameters
    ----------
    S0 : float
        Spot price (must be > 0)
    K : float
        Strike price (must be > 0)
    r : float
        Risk-free interest rate (annualized)
    T : float
        Time to maturity in years (must be > 0)
    sigma : float
        Volatility (annualized, must be > 0)

    Returns
    -------
    tuple[float, float]
        (d1, d2)

    Raises
    ------
    ValidationError
        If any input violates its invariant
    NumericalInstabilityError
        If σ√T underflows below MIN_SIGMA_SQRT_T or d1 is not finite
    """
    _check_inputs(S0, K, r, T, sigma)

    sigma_sqrt_T = sigma * math.sqrt(T)
    if sigma_sqrt_T < MIN_SIGMA_SQRT_T:
        raise NumericalInstabilityError(
            "sigma*sqrt(T)",
            f"sigma*sqrt(T)={sigma_sqrt_T:.3g} is too small to evaluate d1 without dividing by ~0",
        )

    d1 = (math.log(S0 / K) + (r + 0.5 * sigma**2) * T) / sigma_sqrt_T
    if not math.isfinite(d1):
        raise NumericalInstabilityError("d1", f"d1 is not finite (S0={S0}, K={K}, sigma={sigma}, T={T})")
    return d1, d1 - sigma_sqrt_T


def bs_price(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> float:
    """
    Compute European option price using Black-Scholes formula.

    Parameters
    ----------
    S0 : float
        Initial spot price (must be > 0)
    K : float
        Strike price (must be > 0)
    r : float
        Risk-free interest rate (annualized)
    T : float
        Time to maturity in years (must be > 0)
    sigma : float
        Volatility (annualized, must be > 0)
    option_type : str
        'call' or 'put'

    Returns
    -------
    float
        Option price

    Notes
    -----
    Call = S·N(d1) − K·e^(−rT)·N(d2)
    Put  = K·e^(−rT)·N(−d2) − S·N(−d1)
    """
    option_type = normalize_option_type(option_type)
    d1, d2 = d1_d2(S0, K, r, T, sigma)
    discounted_strike = K * math.exp(-r * T)

    if option_type == "call":
        price = S0 * norm_cdf(d1) - discounted_strike * norm_cdf(d2)
    else:  # put
        price = discounted_strike * norm_cdf(-d2) - S0 * norm_cdf(-d1)

    # Both terms are tiny far out of the money; rounding can leave -1e-30
    return max(price, 0.0)


def bs_delta(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> float:
    """
    Delta = ∂V/∂S. Call: N(d1); put: N(d1) − 1.
    """
    option_type = normalize_option_type(option_type)
    d1, _ = d1_d2(S0, K, r, T, sigma)
    if option_type == "call":
        return norm_cdf(d1)
    return norm_cdf(d1) - 1.0


def bs_gamma(S0: float, K: float, r: float, T: float, sigma: float) -> float:
    """
    Gamma = φ(d1) / (S·σ·√T), same for calls and puts.
    """
    d1, _ = d1_d2(S0, K, r, T, sigma)
    return norm_pdf(d1) / (S0 * sigma * math.sqrt(T))


def bs_vega(S0: float, K: float, r: float, T: float, sigma: float) -> float:
    """
    Vega = S·φ(d1)·√T, same for calls and puts, per 1.00 of volatility.
    """
    d1, _ = d1_d2(S0, K, r, T, sigma)
    return S0 * norm_pdf(d1) * math.sqrt(T)


def bs_theta(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> float:
    """
    Compute Theta for European option using Black-Scholes formula, per year.

    Notes
    -----
    For call: -[S*φ(d1)*σ/(2√T)] - r*K*exp(-rT)*N(d2)
    For put: -[S*φ(d1)*σ/(2√T)] + r*K*exp(-rT)*N(-d2)
    """
    option_type = normalize_option_type(option_type)
    d1, d2 = d1_d2(S0, K, r, T, sigma)

    term1 = -(S0 * norm_pdf(d1) * sigma) / (2.0 * math.sqrt(T))
    discounted_strike = K * math.exp(-r * T)

    if option_type == "call":
        return term1 - r * discounted_strike * norm_cdf(d2)
    return term1 + r * discounted_strike * norm_cdf(-d2)


def bs_rho(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> float:
    """
    Rho = ∂V/∂r per 1.00 of rate.

    Call: K·T·e^(−rT)·N(d2); put: −K·T·e^(−rT)·N(−d2).
    """
    option_type = normalize_option_type(option_type)
    _, d2 = d1_d2(S0, K, r, T, sigma)
    discounted_strike = K * math.exp(-r * T)
    if option_type == "call":
        return T * discounted_strike * norm_cdf(d2)
    return -T * discounted_strike * norm_cdf(-d2)


def bs_greeks(S0: float, K: float, r: float, T: float, sigma: float, option_type: str) -> Greeks:
    """
    All five Greeks from a single d1/d2 evaluation.
    """
    option_type = normalize_option_type(option_type)
    d1, d2 = d1_d2(S0, K, r, T, sigma)

    sqrt_T = math.sqrt(T)
    pdf_d1 = norm_pdf(d1)
    discounted_strike = K * math.exp(-r * T)
    theta_common = -(S0 * pdf_d1 * sigma) / (2.0 * sqrt_T)

    if option_type == "call":
        delta = norm_cdf(d1)
        theta = theta_common - r * discounted_strike * norm_cdf(d2)
        rho = T * discounted_strike * norm_cdf(d2)
    else:
        delta = norm_cdf(d1) - 1.0
        theta = theta_common + r * discounted_strike * norm_cdf(-d2)
        rho = -T * discounted_strike * norm_cdf(-d2)

    return Greeks(
        delta=delta,
        gamma=pdf_d1 / (S0 * sigma * sqrt_T),
        vega=S0 * pdf_d1 * sqrt_T,
        theta=theta,
        rho=rho,
    )


def price_contract(params: ContractParameters) -> tuple[float, Greeks]:
    """Black-Scholes price and Greeks for a validated contract."""
    price = bs_price(params.S0, params.K, params.r, params.T, params.sigma, params.option_type)
    greeks = bs_greeks(params.S0, params.K, params.r, params.T, params.sigma, params.option_type)
    return price, greeks
