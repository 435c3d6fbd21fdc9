"""
Validation tests comparing Monte Carlo pricing against Black-Scholes.
"""

import numpy as np
import pytest

from option_engine.analytics.black_scholes import bs_price
from option_engine.params import ContractParameters, SimulationConfig
from option_engine.pricers.monte_carlo import MonteCarloEngine

from .utils.black_scholes import black_scholes_call, black_scholes_put


def mc_price(params, n_paths, seed, antithetic=True):
    engine = MonteCarloEngine(params, SimulationConfig(n_paths, seed=seed, antithetic=antithetic), n_workers=4)
    return engine.price()


class TestBlackScholesValidation:
    """Validate Monte Carlo pricing against Black-Scholes analytical prices."""

    @pytest.mark.parametrize("S0,K,r,sigma,T", [
        (100, 100, 0.05, 0.2, 1.0),  # ATM
        (100, 90, 0.05, 0.2, 1.0),   # ITM
        (100, 110, 0.05, 0.2, 1.0),  # OTM
        (120, 100, 0.03, 0.25, 0.5), # ITM, shorter maturity
        (80, 100, 0.02, 0.15, 2.0),  # OTM, longer maturity
    ])
    def test_call_vs_black_scholes(self, S0, K, r, sigma, T):
        """Test MC call price converges to Black-Scholes price."""
        reference = black_scholes_call(S0=S0, K=K, r=r, sigma=sigma, T=T)
        result = mc_price(ContractParameters(S0, K, r, T, sigma, "call"), 200_000, seed=42)

        # MC price should be within 4 standard errors of BS price
        assert np.abs(result.price - reference) < 4 * result.stderr

        rel_error = np.abs(result.price - reference) / reference
        assert rel_error < 0.02, f"Relative error {rel_error:.4f} too large"

    @pytest.mark.parametrize("S0,K,r,sigma,T", [
        (100, 100, 0.05, 0.2, 1.0),  # ATM
        (100, 110, 0.05, 0.2, 1.0),  # ITM
        (100, 90, 0.05, 0.2, 1.0),   # OTM
        (80, 100, 0.03, 0.25, 0.5),  # ITM, shorter maturity
        (120, 100, 0.02, 0.15, 2.0), # OTM, longer maturity
    ])
    def test_put_vs_black_scholes(self, S0, K, r, sigma, T):
        """Test MC put price converges to Black-Scholes price."""
        reference = black_scholes_put(S0=S0, K=K, r=r, sigma=sigma, T=T)
        result = mc_price(ContractParameters(S0, K, r, T, sigma, "put"), 200_000, seed=42)

        assert np.abs(result.price - reference) < 4 * result.stderr

        rel_error = np.abs(result.price - reference) / reference
        assert rel_error < 0.03, f"Relative error {rel_error:.4f} too large"

    def test_put_call_parity(self):
        """Test that MC pricing satisfies put-call parity."""
        S0, K, r, sigma, T = 100, 100, 0.05, 0.2, 1.0
        call = mc_price(ContractParameters(S0, K, r, T, sigma, "call"), 200_000, seed=42).price
        put = mc_price(ContractParameters(S0, K, r, T, sigma, "put"), 200_000, seed=42).price
        assert np.abs((call - put) - (S0 - K * np.exp(-r * T))) < 0.1


class TestReferenceScenario:
    """S=100, K=100, T=1, r=5%, σ=20% call with one million paths."""

    def test_repeated_seeded_trials(self, atm_call):
        reference = bs_price(100, 100, 0.05, 1.0, 0.2, "call")
        assert reference == pytest.approx(10.4506, abs=1e-4)

        hits = 0
        n_trials = 20
        for seed in range(n_trials):
            result = mc_price(atm_call, 1_000_000, seed=seed)
            if abs(result.price - reference) <= 3 * result.stderr:
                hits += 1
        assert hits >= n_trials - 1


class TestConvergenceRate:
    """Error shrinks like 1/√N."""

    def test_stderr_halves_when_paths_quadruple(self, atm_call):
        small = mc_price(atm_call, 50_000, seed=5)
        large = mc_price(atm_call, 200_000, seed=6)
        assert large.stderr / small.stderr == pytest.approx(0.5, abs=0.03)

    def test_mean_error_shrinks(self, atm_call):
        """Averaged over seeds, |error| at 4N is roughly half of that at N."""
        reference = bs_price(100, 100, 0.05, 1.0, 0.2, "call")
        n = 2_000
        seeds = range(40)
        err_n = np.mean([abs(mc_price(atm_call, n, seed=s).price - reference) for s in seeds])
        err_4n = np.mean([abs(mc_price(atm_call, 4 * n, seed=1000 + s).price - reference) for s in seeds])
        ratio = err_4n / err_n
        assert 0.2 < ratio < 0.85

    def test_coverage(self, atm_call):
        """About 95% of seeded 95% intervals contain the true price."""
        reference = bs_price(100, 100, 0.05, 1.0, 0.2, "call")
        covered = 0
        n_trials = 200
        for seed in range(n_trials):
            result = mc_price(atm_call, 5_000, seed=seed)
            covered += result.ci_lower <= reference <= result.ci_upper
        assert 0.88 < covered / n_trials < 0.995
