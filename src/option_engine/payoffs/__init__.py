"""
Payoff functions for European options.
"""

from option_engine.payoffs.plain_vanilla import (
    EuropeanCallPayoff,
    EuropeanPutPayoff,
    Payoff,
    payoff_for,
)

__all__ = [
    "EuropeanCallPayoff",
    "EuropeanPutPayoff",
    "Payoff",
    "payoff_for",
]
