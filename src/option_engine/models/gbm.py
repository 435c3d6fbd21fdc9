"""
Geometric Brownian Motion (GBM) model for terminal asset price simulation.
"""

import math

import numpy as np

from option_engine.constants import MAX_EXPONENT
from option_engine.errors import NumericalInstabilityError
from option_engine.params import ContractParameters
from option_engine.rng.gaussian import GaussianSampler, NumpyGaussianSampler

# Normal draws beyond this many standard deviations are treated as impossible
# when checking the terminal-price exponent for overflow.
_MAX_Z = 10.0


def check_terminal_overflow(params: ContractParameters) -> None:
    """
    Reject contracts whose terminal price could overflow exp().

    The largest plausible log-price is ln(S0) + (r - σ²/2)T + _MAX_Z·σ√T.
    Large negative exponents only underflow S_T to 0, which every payoff
    handles, so only the upper bound is checked.

    Raises
    ------
    NumericalInstabilityError
        If that bound exceeds MAX_EXPONENT
    """
    drift = (params.r - 0.5 * params.sigma**2) * params.T
    upper_exponent = math.log(params.S0) + drift + _MAX_Z * params.sigma * math.sqrt(params.T)
    if upper_exponent > MAX_EXPONENT:
        raise NumericalInstabilityError(
            "terminal price exponent",
            f"log-price exponent up to {upper_exponent:.3g} would overflow exp() "
            f"(S0={params.S0}, r={params.r}, sigma={params.sigma}, T={params.T})",
        )


class GeometricBrownianMotion:
    """
    Geometric Brownian Motion under the risk-neutral measure.

    The model follows:
        dS_t = r * S_t * dt + σ * S_t * dW_t

    so that the terminal price is
        S_T = S_0 * exp((r - σ²/2) * T + σ * √T * Z),   Z ~ N(0,1)
    """

    def __init__(self, params: ContractParameters, sampler: GaussianSampler | None = None):
        """
        Initialize GBM model parameters.

        Parameters
        ----------
        params : ContractParameters
            Validated contract; supplies S0, r, sigma and T
        sampler : GaussianSampler, optional
            Source of normal draws (default: entropy-seeded NumpyGaussianSampler)

        Raises
        ------
        NumericalInstabilityError
            If a plausible draw would overflow exp() for these parameters
        """
        check_terminal_overflow(params)
        self.S0 = params.S0
        self.r = params.r
        self.sigma = params.sigma
        self.T = params.T
        self.sampler = sampler if sampler is not None else NumpyGaussianSampler()

        self.drift = (self.r - 0.5 * self.sigma**2) * self.T
        self.diffusion = self.sigma * math.sqrt(self.T)

    def terminal_from_normals(self, z: np.ndarray) -> np.ndarray:
        """
        Map standard normal draws to terminal prices.

        Parameters
        ----------
        z : np.ndarray
            Standard normal draws

        Returns
        -------
        np.ndarray
            Terminal prices S_T, same shape as z
        """
        return self.S0 * np.exp(self.drift + self.diffusion * z)

    def simulate_terminal(self, n_paths: int, antithetic: bool = False) -> np.ndarray:
        """
        Simulate terminal asset prices at maturity.

        Parameters
        ----------
        n_paths : int
            Number of Monte Carlo paths to simulate
        antithetic : bool, optional
            If True, use antithetic variates for variance reduction

        Returns
        -------
        np.ndarray
            Array of shape (n_paths,) containing terminal prices S_T.
            With antithetic=True the first ceil(n/2) entries use Z and the
            rest use -Z for the leading draws.
        """
        if n_paths <= 0:
            raise ValueError("n_paths must be positive")

        n_random = (n_paths + 1) // 2 if antithetic else n_paths
        z = self.sampler.standard_normal(n_random)

        if antithetic:
            z = np.concatenate([z, -z])[:n_paths]

        return self.terminal_from_normals(z)
