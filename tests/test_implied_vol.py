"""
Tests for the implied volatility solver.
"""

import math

import numpy as np
import pytest

from option_engine.analytics.black_scholes import bs_price
from option_engine.analytics.implied_vol import (
    ImpliedVolResult,
    arbitrage_bounds,
    implied_vol,
    initial_guess,
    solve_implied_vol,
)
from option_engine.errors import SolverNonConvergenceError, ValidationError


class TestImpliedVolRecovery:
    """Test that implied_vol recovers the true volatility."""

    @pytest.mark.parametrize(
        "S0,K,r,T,sigma,option_type",
        [
            (100, 100, 0.05, 1.0, 0.20, "call"),
            (100, 100, 0.05, 1.0, 0.20, "put"),
            (100, 110, 0.05, 1.0, 0.25, "call"),  # OTM call
            (100, 90, 0.05, 1.0, 0.25, "put"),  # OTM put
            (100, 90, 0.05, 1.0, 0.15, "call"),  # ITM call
            (100, 110, 0.05, 1.0, 0.15, "put"),  # ITM put
            (50, 50, 0.03, 0.5, 0.30, "call"),  # Different params
            (150, 150, 0.02, 2.0, 0.18, "put"),  # Longer maturity
            (80, 100, 0.04, 0.25, 0.40, "call"),  # High vol
        ],
    )
    def test_recovery_accuracy(self, S0, K, r, T, sigma, option_type):
        """Test that IV solver recovers true volatility accurately."""
        price = bs_price(S0, K, r, T, sigma, option_type)
        iv = implied_vol(price, S0, K, r, T, option_type)
        assert abs(iv - sigma) < 1e-6, (
            f"IV recovery failed: got {iv:.8f}, expected {sigma:.8f}, error: {abs(iv - sigma):.2e}"
        )

    def test_random_round_trip(self):
        """σ₀ drawn from (0.01, 2.0) is recovered within 1e-4."""
        S0, K, r, T = 100.0, 100.0, 0.02, 1.0
        rng = np.random.default_rng(11)
        for sigma in rng.uniform(0.01, 2.0, size=40):
            for option_type in ["call", "put"]:
                price = bs_price(S0, K, r, T, sigma, option_type)
                result = solve_implied_vol(price, S0, K, r, T, option_type)
                assert result.converged
                assert abs(result.implied_vol - sigma) < 1e-4

    @pytest.mark.parametrize("option_type,K", [("call", 130.0), ("put", 75.0)])
    def test_far_otm_round_trip(self, option_type, K):
        """Quotes far below 1e-8 still recover their own volatility."""
        S0, r, T = 100.0, 0.05, 0.25
        for sigma in np.linspace(0.05, 0.15, 11):
            price = bs_price(S0, K, r, T, sigma, option_type)
            result = solve_implied_vol(price, S0, K, r, T, option_type)
            assert result.converged
            assert abs(result.implied_vol - sigma) < 1e-4, (
                f"sigma={sigma:.3f} (price {price:.3g}) recovered as {result.implied_vol:.6f}"
            )

    def test_atm_options_various_vols(self):
        """Test ATM options with various volatilities."""
        S0, K, r, T = 100, 100, 0.05, 1.0
        for sigma in [0.05, 0.10, 0.20, 0.30, 0.50, 1.0]:
            for option_type in ["call", "put"]:
                price = bs_price(S0, K, r, T, sigma, option_type)
                iv = implied_vol(price, S0, K, r, T, option_type)
                assert abs(iv - sigma) < 1e-6

    def test_high_volatility(self):
        S0, K, r, T = 100, 100, 0.05, 1.0
        price = bs_price(S0, K, r, T, 2.0, "call")
        assert abs(implied_vol(price, S0, K, r, T, "call") - 2.0) < 1e-4

    def test_user_initial_vol(self):
        price = bs_price(100, 100, 0.05, 1.0, 0.35, "call")
        result = solve_implied_vol(price, 100, 100, 0.05, 1.0, "call", initial_vol=0.9)
        assert result.converged
        assert result.implied_vol == pytest.approx(0.35, abs=1e-6)


class TestResult:
    """Result object and its wire form."""

    def test_newton_result(self):
        price = bs_price(100, 100, 0.05, 1.0, 0.2, "call")
        result = solve_implied_vol(price, 100, 100, 0.05, 1.0, "call")
        assert isinstance(result, ImpliedVolResult)
        assert result.method == "newton"
        assert result.converged is True
        assert 1 <= result.iterations <= 10
        assert abs(result.price_error) < 1e-8

    def test_to_dict(self):
        result = ImpliedVolResult(implied_vol=0.2, iterations=4, converged=True, method="newton")
        out = result.to_dict()
        assert out["impliedVol"] == 0.2
        assert out["iterationsUsed"] == 4
        assert out["converged"] is True

    def test_bisection_fallback(self):
        """A starting point far outside the bracket sends the solver to bisection."""
        price = bs_price(100, 100, 0.05, 1.0, 0.2, "call")
        result = solve_implied_vol(price, 100, 100, 0.05, 1.0, "call", max_iter=1, initial_vol=4.9)
        assert result.converged
        assert result.implied_vol == pytest.approx(0.2, abs=1e-6)
        assert result.method == "bisection"


class TestArbitrageBounds:
    """Test that arbitrage bounds are enforced."""

    def test_bounds_values(self):
        lower, upper = arbitrage_bounds(100, 90, 0.05, 1.0, "call")
        assert lower == pytest.approx(100 - 90 * math.exp(-0.05))
        assert upper == 100
        lower, upper = arbitrage_bounds(100, 90, 0.05, 1.0, "put")
        assert lower == 0.0
        assert upper == pytest.approx(90 * math.exp(-0.05))

    def test_call_below_intrinsic(self):
        """Market price below intrinsic value is ill-posed, not a negative vol."""
        S0, K, r, T = 100, 90, 0.05, 1.0
        intrinsic = S0 - K * math.exp(-r * T)
        with pytest.raises(SolverNonConvergenceError, match="no-arbitrage") as exc_info:
            implied_vol(intrinsic - 0.1, S0, K, r, T, "call")
        assert exc_info.value.converged is False
        assert math.isnan(exc_info.value.best_estimate)

    def test_call_above_spot(self):
        with pytest.raises(SolverNonConvergenceError, match="no-arbitrage"):
            implied_vol(100.1, 100, 100, 0.05, 1.0, "call")

    def test_put_below_intrinsic(self):
        S0, K, r, T = 100, 110, 0.05, 1.0
        intrinsic = K * math.exp(-r * T) - S0
        with pytest.raises(SolverNonConvergenceError):
            implied_vol(intrinsic - 0.1, S0, K, r, T, "put")

    def test_put_above_discounted_strike(self):
        max_put = 100 * math.exp(-0.05)
        with pytest.raises(SolverNonConvergenceError):
            implied_vol(max_put + 0.1, 100, 100, 0.05, 1.0, "put")

    def test_failure_without_raising(self):
        result = solve_implied_vol(0.5, 100, 90, 0.05, 1.0, "call", raise_on_failure=False)
        assert result.converged is False
        assert math.isnan(result.implied_vol)

    def test_unreachable_price(self):
        """Inside the no-arbitrage bounds but above BS(sigma_high)."""
        price = bs_price(100, 100, 0.05, 1.0, 0.9, "call")
        with pytest.raises(SolverNonConvergenceError, match="not reachable"):
            implied_vol(price, 100, 100, 0.05, 1.0, "call", sigma_high=0.5)


class TestMonotonicity:
    """Test monotonicity properties of implied volatility."""

    def test_higher_price_gives_higher_iv(self):
        S0, K, r, T = 100, 100, 0.05, 1.0
        iv1 = implied_vol(bs_price(S0, K, r, T, 0.15, "call"), S0, K, r, T, "call")
        iv2 = implied_vol(bs_price(S0, K, r, T, 0.30, "call"), S0, K, r, T, "call")
        assert iv1 < iv2


class TestEdgeCases:
    """Test edge cases and error handling."""

    def test_invalid_inputs(self):
        """Test that invalid inputs raise ValidationError."""
        S0, K, r, T, price = 100, 100, 0.05, 1.0, 10.0

        with pytest.raises(ValidationError, match="S0 must be positive"):
            implied_vol(price, -1, K, r, T, "call")
        with pytest.raises(ValidationError, match="K must be positive"):
            implied_vol(price, S0, -1, r, T, "call")
        with pytest.raises(ValidationError, match="T must be positive"):
            implied_vol(price, S0, K, r, 0, "call")
        with pytest.raises(ValidationError, match="market_price must be positive"):
            implied_vol(-1, S0, K, r, T, "call")
        with pytest.raises(ValidationError, match="option_type must be"):
            implied_vol(price, S0, K, r, T, "invalid")

    def test_invalid_bracket(self):
        with pytest.raises(ValidationError):
            implied_vol(10.0, 100, 100, 0.05, 1.0, "call", sigma_low=0.5, sigma_high=0.4)

    def test_different_tolerances(self):
        S0, K, r, T, sigma = 100, 100, 0.05, 1.0, 0.25
        price = bs_price(S0, K, r, T, sigma, "call")
        assert abs(implied_vol(price, S0, K, r, T, "call", tol=1e-4) - sigma) < 1e-3
        assert abs(implied_vol(price, S0, K, r, T, "call", tol=1e-10) - sigma) < 1e-8


class TestInitialGuess:
    """Brenner-Subrahmanyam starting point."""

    def test_near_the_money(self):
        price = bs_price(100, 100, 0.0, 1.0, 0.2, "call")
        assert initial_guess(price, 100, 100, 1.0) == pytest.approx(0.2, abs=0.01)

    def test_away_from_the_money(self):
        assert initial_guess(1.0, 100, 150, 1.0) == 0.20

    def test_clamped(self):
        assert initial_guess(1e-9, 100, 100, 1.0) == 0.01
        assert initial_guess(99.0, 100, 100, 0.01) == 5.0
