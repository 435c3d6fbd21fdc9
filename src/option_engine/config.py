"""
Process-wide engine configuration.

Values come from the dataclass defaults, then ``OPTION_ENGINE_*`` environment
variables, then explicit overrides. The cached default returned by
:func:`get_config` is read-only after first use.
"""

import os
from collections.abc import Mapping
from dataclasses import asdict, dataclass, field
from functools import lru_cache
from typing import Any

from option_engine.constants import DEFAULT_BLOCK_SIZE, MAX_PATHS
from option_engine.errors import ValidationError

ENV_WORKERS = "OPTION_ENGINE_WORKERS"
ENV_BLOCK_SIZE = "OPTION_ENGINE_BLOCK_SIZE"
ENV_SEED = "OPTION_ENGINE_SEED"
ENV_MAX_PATHS = "OPTION_ENGINE_MAX_PATHS"


def _default_workers() -> int:
    return os.cpu_count() or 1


def _as_int(name: str, x: Any) -> int:
    if isinstance(x, bool):
        raise ValidationError(name, x, f"{name} must be an integer, got {x!r}")
    if isinstance(x, int):
        return x
    if isinstance(x, float):
        if not x.is_integer():
            raise ValidationError(name, x, f"{name} must be integer-like, got {x!r}")
        return int(x)
    if isinstance(x, str):
        s = x.strip()
        try:
            return int(s)
        except ValueError:
            raise ValidationError(name, x, f"{name} must be an integer, got {x!r}") from None
    raise ValidationError(name, x, f"{name} must be an integer, got {type(x).__name__}")


def _get_env_int(key: str, name: str) -> int | None:
    val = os.getenv(key)
    if val is None or not val.strip():
        return None
    return _as_int(name, val)


@dataclass(frozen=True)
class EngineConfig:
    """
    Engine-wide tuning knobs.

    Attributes
    ----------
    n_workers : int
        Monte Carlo worker pool size (default: os.cpu_count())
    block_size : int
        Paths per seeded block
    default_seed : int | None
        Seed used when a request carries none; None means system entropy
    max_paths : int
        Largest path count a single request may ask for
    """
    n_workers: int = field(default_factory=_default_workers)
    block_size: int = DEFAULT_BLOCK_SIZE
    default_seed: int | None = None
    max_paths: int = MAX_PATHS

    def __post_init__(self) -> None:
        if self.n_workers < 1:
            raise ValidationError("n_workers", self.n_workers, "n_workers must be positive")
        if self.block_size < 1:
            raise ValidationError("block_size", self.block_size, "block_size must be positive")
        if self.default_seed is not None and self.default_seed < 0:
            raise ValidationError("default_seed", self.default_seed, "default_seed must be non-negative")
        if not 1 <= self.max_paths <= MAX_PATHS:
            raise ValidationError("max_paths", self.max_paths, f"max_paths must be in [1, {MAX_PATHS}]")

    def to_dict(self) -> dict[str, Any]:
        return asdict(self)

    @staticmethod
    def from_dict(d: Mapping[str, Any]) -> "EngineConfig":
        seed = d.get("default_seed")
        return EngineConfig(
            n_workers=_as_int("n_workers", d.get("n_workers", _default_workers())),
            block_size=_as_int("block_size", d.get("block_size", DEFAULT_BLOCK_SIZE)),
            default_seed=None if seed is None else _as_int("default_seed", seed),
            max_paths=_as_int("max_paths", d.get("max_paths", MAX_PATHS)),
        )


def load_config(overrides: Mapping[str, Any] | None = None) -> EngineConfig:
    """
    Build a configuration from defaults, environment and overrides.

    Parameters
    ----------
    overrides : Mapping, optional
        Field values that take precedence over the environment

    Returns
    -------
    EngineConfig
        Validated configuration

    Raises
    ------
    ValidationError
        If an environment variable or override is malformed
    """
    merged: dict[str, Any] = EngineConfig().to_dict()
    env_values = {
        "n_workers": _get_env_int(ENV_WORKERS, "n_workers"),
        "block_size": _get_env_int(ENV_BLOCK_SIZE, "block_size"),
        "default_seed": _get_env_int(ENV_SEED, "default_seed"),
        "max_paths": _get_env_int(ENV_MAX_PATHS, "max_paths"),
    }
    merged.update({k: v for k, v in env_values.items() if v is not None})
    if overrides:
        merged.update(overrides)
    return EngineConfig.from_dict(merged)


@lru_cache(maxsize=1)
def get_config() -> EngineConfig:
    """Process-wide default configuration, read from the environment once."""
    return load_config()
