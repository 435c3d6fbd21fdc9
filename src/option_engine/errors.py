"""
Error taxonomy for the pricing engine.

All engine errors derive from ``ValueError`` so callers written against the
plain ``ValueError`` contract keep working.
"""

import math
from typing import Any


class EngineError(ValueError):
    """Base class for every error raised by the engine."""

    def to_dict(self) -> dict[str, Any]:
        """Structured form for a transport layer."""
        return {"error": type(self).__name__, "message": str(self)}


class ValidationError(EngineError):
    """
    A request parameter violates its invariant.

    Attributes
    ----------
    field : str
        Name of the offending parameter
    value : Any
        The rejected value
    """

    def __init__(self, field: str, value: Any, message: str):
        super().__init__(message)
        self.field = field
        self.value = value

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["field"] = self.field
        return out


class NumericalInstabilityError(EngineError):
    """
    An intermediate quantity would overflow, underflow or divide by ~0.

    Attributes
    ----------
    quantity : str
        Name of the unstable quantity (e.g. 'sigma*sqrt(T)')
    """

    def __init__(self, quantity: str, message: str):
        super().__init__(message)
        self.quantity = quantity

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["quantity"] = self.quantity
        return out


class SolverNonConvergenceError(EngineError):
    """
    Implied volatility search failed or the input is ill-posed.

    Attributes
    ----------
    best_estimate : float
        Last volatility iterate (NaN when no iterate was produced)
    iterations : int
        Total iterations spent
    converged : bool
        Always False
    """

    def __init__(self, message: str, best_estimate: float = math.nan, iterations: int = 0):
        super().__init__(message)
        self.best_estimate = best_estimate
        self.iterations = iterations
        self.converged = False

    def to_dict(self) -> dict[str, Any]:
        out = super().to_dict()
        out["impliedVol"] = None if math.isnan(self.best_estimate) else self.best_estimate
        out["iterationsUsed"] = self.iterations
        out["converged"] = False
        return out
