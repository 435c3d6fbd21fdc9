"""
Numerical constants and default tolerances.
"""

# Simulation limits
MAX_PATHS = 100_000_000
DEFAULT_BLOCK_SIZE = 65_536  # paths per independently seeded block
LOW_PATH_WARNING = 100  # below this the estimate is returned unvalidated

# Confidence interval (conventional 1.96 for 95%)
Z_CRITICAL_95 = 1.96

# Guards
MIN_SIGMA_SQRT_T = 1e-12  # below this d1/d2 are treated as unstable
MAX_EXPONENT = 700.0  # math.exp overflows just above 709
PRICE_EPSILON = 1e-12  # |bs_price| at or below this makes relative error undefined

# Implied volatility solver
IV_PRICE_TOLERANCE = 1e-8
IV_VOL_TOLERANCE = 1e-10
IV_MAX_ITERATIONS = 100
IV_MAX_BISECTION_ITERATIONS = 200
IV_MIN_VEGA = 1e-10
IV_SIGMA_LOW = 1e-4
IV_SIGMA_HIGH = 5.0
IV_DEFAULT_GUESS = 0.20

# Display scaling for Greeks (applied only on explicit request)
DAYS_PER_YEAR = 365.0
PERCENT = 100.0
