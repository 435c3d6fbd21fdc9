"""
Asset price models.
"""

from option_engine.models.gbm import GeometricBrownianMotion

__all__ = ["GeometricBrownianMotion"]
