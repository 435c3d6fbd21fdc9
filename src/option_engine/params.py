"""
Validated, immutable request parameters.

Every value object here checks its invariants in ``__post_init__`` and
raises :class:`~option_engine.errors.ValidationError` naming the offending
field. Nothing is clamped.
"""

import math
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any, Literal

from option_engine.constants import MAX_PATHS
from option_engine.errors import ValidationError

OptionType = Literal["call", "put"]

# Wire field names used by the external request/response contract
WIRE_FIELDS = {
    "S0": "spotPrice",
    "K": "strikePrice",
    "T": "timeToMaturity",
    "r": "riskFreeRate",
    "sigma": "volatility",
    "option_type": "optionType",
    "n_paths": "simulations",
    "market_price": "marketPrice",
    "initial_vol": "initialVol",
}


def _is_number(value: Any) -> bool:
    return isinstance(value, (int, float)) and not isinstance(value, bool)


def require_positive(field: str, value: Any) -> float:
    """Return ``value`` as float, or raise if it is not finite and > 0."""
    if not _is_number(value) or not math.isfinite(value):
        raise ValidationError(field, value, f"{field} must be a finite number, got {value!r}")
    if value <= 0:
        raise ValidationError(field, value, f"{field} must be positive, got {value!r}")
    return float(value)


def require_finite(field: str, value: Any) -> float:
    """Return ``value`` as float, or raise if it is not a finite number."""
    if not _is_number(value) or not math.isfinite(value):
        raise ValidationError(field, value, f"{field} must be a finite number, got {value!r}")
    return float(value)


def normalize_option_type(value: Any) -> OptionType:
    """Map 'call'/'put' (any case) to the canonical lower-case form."""
    if isinstance(value, str) and value.strip().lower() in ("call", "put"):
        return value.strip().lower()  # type: ignore[return-value]
    raise ValidationError("option_type", value, f"option_type must be 'call' or 'put', got {value!r}")


def _wire_get(data: Mapping[str, Any], field: str, default: Any = ...) -> Any:
    key = WIRE_FIELDS.get(field, field)
    if key in data:
        return data[key]
    if default is ...:
        raise ValidationError(key, None, f"Missing required field '{key}'")
    return default


def _wire_number(data: Mapping[str, Any], field: str, default: Any = ...) -> Any:
    value = _wire_get(data, field, default)
    if value is None or _is_number(value):
        return value
    key = WIRE_FIELDS.get(field, field)
    if isinstance(value, str):
        try:
            return float(value)
        except ValueError:
            pass
    raise ValidationError(key, value, f"Field '{key}' must be numeric, got {value!r}")


@dataclass(frozen=True)
class ContractParameters:
    """
    European option contract and market parameters.

    Attributes
    ----------
    S0 : float
        Spot price (> 0)
    K : float
        Strike price (> 0)
    r : float
        Risk-free rate, continuously compounded (any finite value)
    T : float
        Time to maturity in years (> 0)
    sigma : float
        Volatility, annualized (> 0)
    option_type : str
        'call' or 'put'
    """

    S0: float
    K: float
    r: float
    T: float
    sigma: float
    option_type: OptionType = "call"

    def __post_init__(self) -> None:
        object.__setattr__(self, "S0", require_positive("S0", self.S0))
        object.__setattr__(self, "K", require_positive("K", self.K))
        object.__setattr__(self, "r", require_finite("r", self.r))
        object.__setattr__(self, "T", require_positive("T", self.T))
        object.__setattr__(self, "sigma", require_positive("sigma", self.sigma))
        object.__setattr__(self, "option_type", normalize_option_type(self.option_type))

    @property
    def discount_factor(self) -> float:
        """e^(-rT)"""
        return math.exp(-self.r * self.T)

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ContractParameters":
        """Build from a request dictionary using wire field names."""
        return cls(
            S0=_wire_number(data, "S0"),
            K=_wire_number(data, "K"),
            r=_wire_number(data, "r"),
            T=_wire_number(data, "T"),
            sigma=_wire_number(data, "sigma"),
            option_type=_wire_get(data, "option_type"),
        )


@dataclass(frozen=True)
class SimulationConfig:
    """
    Monte Carlo request settings.

    Attributes
    ----------
    n_paths : int
        Number of simulated terminal prices (1 <= n_paths <= MAX_PATHS)
    seed : int | None
        Fixed seed for reproducible runs; None draws from system entropy
    antithetic : bool
        Pair every normal draw Z with -Z
    """

    n_paths: int
    seed: int | None = None
    antithetic: bool = True

    def __post_init__(self) -> None:
        n = self.n_paths
        if isinstance(n, float) and n.is_integer():
            n = int(n)
            object.__setattr__(self, "n_paths", n)
        if not isinstance(n, int) or isinstance(n, bool):
            raise ValidationError("n_paths", n, f"n_paths must be an integer, got {n!r}")
        if n <= 0:
            raise ValidationError("n_paths", n, f"n_paths must be positive, got {n}")
        if n > MAX_PATHS:
            raise ValidationError("n_paths", n, f"n_paths must not exceed {MAX_PATHS:,}, got {n:,}")
        if self.seed is not None and (
            not isinstance(self.seed, int) or isinstance(self.seed, bool) or self.seed < 0
        ):
            raise ValidationError("seed", self.seed, f"seed must be a non-negative integer, got {self.seed!r}")
        if not isinstance(self.antithetic, bool):
            raise ValidationError("antithetic", self.antithetic, "antithetic must be a boolean")

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationConfig":
        n_paths = _wire_number(data, "n_paths")
        if isinstance(n_paths, float) and not n_paths.is_integer():
            raise ValidationError("simulations", n_paths, "Field 'simulations' must be an integer")
        seed = data.get("seed")
        return cls(
            n_paths=int(n_paths),
            seed=int(seed) if _is_number(seed) and float(seed).is_integer() else seed,
            antithetic=data.get("antithetic", True),
        )


@dataclass(frozen=True)
class ImpliedVolRequest:
    """
    Contract parameters without volatility, plus an observed option price.

    Attributes
    ----------
    S0, K, r, T : float
        As in ContractParameters
    market_price : float
        Observed option price (> 0)
    option_type : str
        'call' or 'put'
    initial_vol : float | None
        Optional starting point for the solver
    """

    S0: float
    K: float
    r: float
    T: float
    market_price: float
    option_type: OptionType = "call"
    initial_vol: float | None = None

    def __post_init__(self) -> None:
        object.__setattr__(self, "S0", require_positive("S0", self.S0))
        object.__setattr__(self, "K", require_positive("K", self.K))
        object.__setattr__(self, "r", require_finite("r", self.r))
        object.__setattr__(self, "T", require_positive("T", self.T))
        object.__setattr__(self, "market_price", require_positive("market_price", self.market_price))
        object.__setattr__(self, "option_type", normalize_option_type(self.option_type))
        if self.initial_vol is not None:
            object.__setattr__(self, "initial_vol", require_positive("initial_vol", self.initial_vol))

    def with_sigma(self, sigma: float) -> ContractParameters:
        """Contract parameters priced at volatility ``sigma``."""
        return ContractParameters(
            S0=self.S0, K=self.K, r=self.r, T=self.T, sigma=sigma, option_type=self.option_type
        )

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "ImpliedVolRequest":
        return cls(
            S0=_wire_number(data, "S0"),
            K=_wire_number(data, "K"),
            r=_wire_number(data, "r"),
            T=_wire_number(data, "T"),
            market_price=_wire_number(data, "market_price"),
            option_type=_wire_get(data, "option_type"),
            initial_vol=_wire_number(data, "initial_vol", None),
        )
