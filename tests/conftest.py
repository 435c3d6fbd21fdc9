"""
Shared fixtures.
"""

import pytest

from option_engine.config import EngineConfig, get_config
from option_engine.params import ContractParameters


@pytest.fixture
def atm_call():
    """The reference contract: S=100, K=100, T=1, r=5%, σ=20%."""
    return ContractParameters(S0=100.0, K=100.0, r=0.05, T=1.0, sigma=0.2, option_type="call")


@pytest.fixture
def atm_put():
    return ContractParameters(S0=100.0, K=100.0, r=0.05, T=1.0, sigma=0.2, option_type="put")


@pytest.fixture
def engine_config():
    """Small, deterministic engine configuration for service tests."""
    return EngineConfig(n_workers=2, block_size=8192, default_seed=None)


@pytest.fixture(autouse=True)
def clear_config_cache():
    get_config.cache_clear()
    yield
    get_config.cache_clear()
