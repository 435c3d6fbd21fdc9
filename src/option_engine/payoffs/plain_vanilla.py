"""
Plain vanilla option payoffs (European call and put).
"""

from collections.abc import Callable

import numpy as np

from option_engine.params import normalize_option_type, require_positive

Payoff = Callable[[np.ndarray], np.ndarray]


class EuropeanCallPayoff:
    """
    European call option payoff: max(S_T - K, 0)
    """

    def __init__(self, strike: float):
        """
        Initialize European call payoff.

        Parameters
        ----------
        strike : float
            Strike price K (must be > 0)
        """
        self.strike = require_positive("K", strike)

    def __call__(self, spot_prices: np.ndarray) -> np.ndarray:
        return np.maximum(spot_prices - self.strike, 0.0)

    def __repr__(self) -> str:
        return f"EuropeanCallPayoff(strike={self.strike})"


class EuropeanPutPayoff:
    """
    European put option payoff: max(K - S_T, 0)
    """

    def __init__(self, strike: float):
        self.strike = require_positive("K", strike)

    def __call__(self, spot_prices: np.ndarray) -> np.ndarray:
        return np.maximum(self.strike - spot_prices, 0.0)

    def __repr__(self) -> str:
        return f"EuropeanPutPayoff(strike={self.strike})"


def payoff_for(option_type: str, strike: float) -> Payoff:
    """Payoff object for 'call' or 'put' at ``strike``."""
    if normalize_option_type(option_type) == "call":
        return EuropeanCallPayoff(strike)
    return EuropeanPutPayoff(strike)
