"""
Request-level pricing service.

``PricingService`` validates a request, runs the closed-form and Monte Carlo
pricers, times each stage and assembles the result. The ``handle_*`` methods
speak the wire dictionaries of the transport layer and are the only place
where engine exceptions are turned into structured error payloads.
"""

import logging
import math
import time
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from option_engine.analytics.black_scholes import Greeks, bs_greeks, bs_price
from option_engine.analytics.implied_vol import ImpliedVolResult, solve_implied_vol
from option_engine.config import EngineConfig, get_config
from option_engine.constants import PRICE_EPSILON
from option_engine.errors import EngineError, ValidationError
from option_engine.params import ContractParameters, ImpliedVolRequest, SimulationConfig
from option_engine.pricers.monte_carlo import MonteCarloEngine

logger = logging.getLogger(__name__)


def relative_error_pct(estimate: float, reference: float) -> float:
    """100 * |estimate - reference| / |reference|, or NaN when reference is ~0."""
    if abs(reference) <= PRICE_EPSILON:
        return math.nan
    return 100.0 * abs(estimate - reference) / abs(reference)


def _finite_or_none(x: float) -> float | None:
    return x if math.isfinite(x) else None


@dataclass(frozen=True)
class PricingResult:
    """
    Closed-form and Monte Carlo prices for one contract.

    Attributes
    ----------
    bs_price : float
        Black-Scholes price
    mc_price : float
        Monte Carlo estimate
    bs_time_ms : float
        Wall-clock time of the closed-form price
    mc_time_ms : float
        Wall-clock time of the simulation
    absolute_error : float
        |mc_price - bs_price|
    relative_error_pct : float
        Absolute error as a percentage of bs_price (NaN when bs_price ~ 0)
    greeks : Greeks
        Analytical sensitivities in natural units
    mc_stderr, mc_ci_lower, mc_ci_upper : float
        Standard error and 95% confidence interval of the estimate
    n_paths : int
        Simulated path count
    seed : int | None
        Root seed actually used
    """

    bs_price: float
    mc_price: float
    bs_time_ms: float
    mc_time_ms: float
    absolute_error: float
    relative_error_pct: float
    greeks: Greeks
    mc_stderr: float
    mc_ci_lower: float
    mc_ci_upper: float
    n_paths: int
    seed: int | None = None

    def to_dict(self) -> dict[str, Any]:
        """Wire response (NaN fields become None)."""
        return {
            "bsPrice": self.bs_price,
            "mcPrice": self.mc_price,
            "bsTimeMs": self.bs_time_ms,
            "mcTimeMs": self.mc_time_ms,
            "error": self.absolute_error,
            "relativeErrorPct": _finite_or_none(self.relative_error_pct),
            "greeks": self.greeks.to_dict(),
            "mcStdErr": _finite_or_none(self.mc_stderr),
            "mcCiLower": _finite_or_none(self.mc_ci_lower),
            "mcCiUpper": _finite_or_none(self.mc_ci_upper),
            "simulations": self.n_paths,
            "seed": self.seed,
        }


class PricingService:
    """
    Stateless façade over the analytical and Monte Carlo pricers.

    Parameters
    ----------
    config : EngineConfig, optional
        Worker count, block size, default seed and path cap
        (default: the process-wide :func:`get_config`)
    """

    def __init__(self, config: EngineConfig | None = None):
        self.config = config if config is not None else get_config()

    def _resolve_seed(self, sim_config: SimulationConfig) -> int | None:
        if sim_config.seed is not None:
            return sim_config.seed
        return self.config.default_seed

    def price(self, params: ContractParameters, sim_config: SimulationConfig) -> PricingResult:
        """
        Price a European option both analytically and by simulation.

        Parameters
        ----------
        params : ContractParameters
            Validated contract
        sim_config : SimulationConfig
            Path count, seed and antithetic flag

        Returns
        -------
        PricingResult

        Raises
        ------
        ValidationError
            If the path count exceeds the configured cap
        NumericalInstabilityError
            If either pricer hits an unstable intermediate
        """
        if sim_config.n_paths > self.config.max_paths:
            raise ValidationError(
                "n_paths",
                sim_config.n_paths,
                f"n_paths must not exceed {self.config.max_paths:,}, got {sim_config.n_paths:,}",
            )

        seed = self._resolve_seed(sim_config)
        if seed != sim_config.seed:
            sim_config = SimulationConfig(sim_config.n_paths, seed=seed, antithetic=sim_config.antithetic)

        logger.debug("price request: %s, n_paths=%d, seed=%s", params, sim_config.n_paths, seed)

        start = time.perf_counter()
        bs = bs_price(params.S0, params.K, params.r, params.T, params.sigma, params.option_type)
        bs_time_ms = (time.perf_counter() - start) * 1000.0

        engine = MonteCarloEngine(
            params,
            sim_config,
            n_workers=self.config.n_workers,
            block_size=self.config.block_size,
        )
        start = time.perf_counter()
        mc = engine.price()
        mc_time_ms = (time.perf_counter() - start) * 1000.0

        greeks = bs_greeks(params.S0, params.K, params.r, params.T, params.sigma, params.option_type)

        absolute_error = abs(mc.price - bs)
        return PricingResult(
            bs_price=bs,
            mc_price=mc.price,
            bs_time_ms=bs_time_ms,
            mc_time_ms=mc_time_ms,
            absolute_error=absolute_error,
            relative_error_pct=relative_error_pct(mc.price, bs),
            greeks=greeks,
            mc_stderr=mc.stderr,
            mc_ci_lower=mc.ci_lower,
            mc_ci_upper=mc.ci_upper,
            n_paths=mc.n_paths,
            seed=seed,
        )

    def implied_volatility(self, request: ImpliedVolRequest) -> ImpliedVolResult:
        """Solve for the volatility that reproduces ``request.market_price``."""
        logger.debug("implied vol request: %s", request)
        return solve_implied_vol(
            request.market_price,
            request.S0,
            request.K,
            request.r,
            request.T,
            request.option_type,
            initial_vol=request.initial_vol,
        )

    def handle_price(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Wire request in, wire response or structured error out."""
        try:
            params = ContractParameters.from_dict(payload)
            sim_config = SimulationConfig.from_dict(payload)
            return self.price(params, sim_config).to_dict()
        except EngineError as exc:
            logger.warning("price request rejected: %s", exc)
            return exc.to_dict()

    def handle_implied_vol(self, payload: Mapping[str, Any]) -> dict[str, Any]:
        """Wire request in, wire response or structured error out."""
        try:
            request = ImpliedVolRequest.from_dict(payload)
            return self.implied_volatility(request).to_dict()
        except EngineError as exc:
            logger.warning("implied vol request rejected: %s", exc)
            return exc.to_dict()
