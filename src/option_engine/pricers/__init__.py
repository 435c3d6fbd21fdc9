"""
Pricing engines for European options.
"""

from option_engine.pricers.monte_carlo import BlockTotals, MonteCarloEngine, MonteCarloResult

__all__ = ["BlockTotals", "MonteCarloEngine", "MonteCarloResult"]
