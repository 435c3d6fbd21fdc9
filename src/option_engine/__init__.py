"""
Option Pricing Engine

Black-Scholes closed-form pricing with Greeks, a parallel Monte Carlo
engine with reproducible seeded streams, and an implied volatility solver.
"""

from option_engine._version import __version__

# Core components
from option_engine.config import EngineConfig, get_config, load_config
from option_engine.errors import (
    EngineError,
    NumericalInstabilityError,
    SolverNonConvergenceError,
    ValidationError,
)
from option_engine.models.gbm import GeometricBrownianMotion
from option_engine.params import ContractParameters, ImpliedVolRequest, SimulationConfig
from option_engine.payoffs.plain_vanilla import EuropeanCallPayoff, EuropeanPutPayoff
from option_engine.pricers.monte_carlo import MonteCarloEngine, MonteCarloResult
from option_engine.service import PricingResult, PricingService

# Analytics
from option_engine.analytics.black_scholes import (
    Greeks,
    bs_delta,
    bs_gamma,
    bs_greeks,
    bs_price,
    bs_rho,
    bs_theta,
    bs_vega,
)
from option_engine.analytics.implied_vol import ImpliedVolResult, implied_vol, solve_implied_vol

__all__ = [
    # Version
    "__version__",
    # Configuration and errors
    "EngineConfig",
    "get_config",
    "load_config",
    "EngineError",
    "NumericalInstabilityError",
    "SolverNonConvergenceError",
    "ValidationError",
    # Parameters
    "ContractParameters",
    "ImpliedVolRequest",
    "SimulationConfig",
    # Models
    "GeometricBrownianMotion",
    # Payoffs
    "EuropeanCallPayoff",
    "EuropeanPutPayoff",
    # Pricers
    "MonteCarloEngine",
    "MonteCarloResult",
    "PricingResult",
    "PricingService",
    # Analytics
    "Greeks",
    "ImpliedVolResult",
    "bs_price",
    "bs_delta",
    "bs_gamma",
    "bs_vega",
    "bs_theta",
    "bs_rho",
    "bs_greeks",
    "implied_vol",
    "solve_implied_vol",
]
