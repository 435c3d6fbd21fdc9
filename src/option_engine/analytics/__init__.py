"""
Analytics module for Black-Scholes pricing and implied volatility.

Provides closed-form pricing, Greeks, normal distribution primitives,
the implied volatility solver and sensitivity ladders.
"""

from option_engine.analytics.black_scholes import (
    Greeks,
    bs_delta,
    bs_gamma,
    bs_greeks,
    bs_price,
    bs_rho,
    bs_theta,
    bs_vega,
    d1_d2,
    price_contract,
)
from option_engine.analytics.implied_vol import (
    ImpliedVolResult,
    arbitrage_bounds,
    implied_vol,
    initial_guess,
    solve_implied_vol,
)
from option_engine.analytics.normal import norm_cdf, norm_pdf
from option_engine.analytics.scan import LadderPoint, spot_ladder, vol_ladder

__all__ = [
    "Greeks",
    "ImpliedVolResult",
    "LadderPoint",
    "arbitrage_bounds",
    "bs_delta",
    "bs_gamma",
    "bs_greeks",
    "bs_price",
    "bs_rho",
    "bs_theta",
    "bs_vega",
    "d1_d2",
    "implied_vol",
    "initial_guess",
    "norm_cdf",
    "norm_pdf",
    "price_contract",
    "solve_implied_vol",
    "spot_ladder",
    "vol_ladder",
]
