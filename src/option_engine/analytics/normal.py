"""
Standard normal distribution primitives.
"""

import math

_INV_SQRT_2 = 1.0 / math.sqrt(2.0)
_INV_SQRT_2PI = 1.0 / math.sqrt(2.0 * math.pi)


def norm_cdf(x: float) -> float:
    """
    Cumulative distribution function for standard normal distribution.

    Evaluated as 0.5 * erfc(-x / sqrt(2)). Unlike 0.5 * (1 + erf(x / sqrt(2)))
    this keeps full relative precision in the lower tail, where the erf form
    loses everything to cancellation against 1.

    Parameters
    ----------
    x : float
        Input value

    Returns
    -------
    float
        CDF value at x: P(Z <= x) where Z ~ N(0,1)
    """
    return 0.5 * math.erfc(-x * _INV_SQRT_2)


def norm_pdf(x: float) -> float:
    """
    Probability density function for standard normal distribution.

    Parameters
    ----------
    x : float
        Input value

    Returns
    -------
    float
        PDF value at x: φ(x) = exp(-x²/2)/√(2π)
    """
    return _INV_SQRT_2PI * math.exp(-0.5 * x * x)
