"""
Shared constants for options pricing and opportunity scoring.

This module centralizes configuration values used across multiple modules,
making it easier to tune parameters and ensure consistency.
"""

# =============================================================================
# Pricing Defaults
# =============================================================================

DEFAULT_RISK_FREE_RATE = 0.05
"""Default risk-free rate for Black-Scholes calculations (5%)."""

DAYS_PER_YEAR = 365.0
"""Calendar days per year used to convert DTE into years."""

MIN_VOLATILITY = 0.0001
"""Floor substituted for zero/degenerate volatility before pricing."""

MIN_TIME_TO_EXPIRY_YEARS = 0.001
"""Floor substituted for expired contracts when computing Greeks."""

CONTRACT_MULTIPLIER = 100
"""Shares per equity option contract."""


# =============================================================================
# Implied Volatility Solver
# =============================================================================

IV_TOLERANCE = 1e-4
"""Newton-Raphson stops once |observed - model| falls below this (price units)."""

IV_MAX_ITERATIONS = 100
"""Iteration cap for the Newton-Raphson solve."""

IV_INITIAL_GUESS = 0.30
"""Starting volatility for the Newton-Raphson solve."""

IV_MIN_VEGA = 1e-10
"""Vega below this value forces a bisection step instead of a Newton step."""

IV_MAX_VOLATILITY = 5.0
"""Upper end of the volatility bracket searched by the solver (500%)."""


# =============================================================================
# IV Rank
# =============================================================================

MIN_HISTORY_SAMPLES = 30
"""Minimum historical samples for a meaningful IV rank/percentile."""

NEUTRAL_IV_RANK = 50.0
"""Substitute rank when history is flat or insufficient."""


# =============================================================================
# Strike Increments by Price Tier
# =============================================================================

STRIKE_INCREMENTS: dict[tuple[float, float], float] = {
    (0, 10): 0.50,  # Under $10
    (10, 25): 1.00,  # $10-$25
    (25, 100): 2.50,  # $25-$100
    (100, 200): 5.00,  # $100-$200
    (200, float("inf")): 10.00,  # $200 and above
}
"""Synthetic strike spacing based on underlying price."""


# =============================================================================
# Chain Synthesis
# =============================================================================

SYNTHETIC_STRIKE_COUNT = 20
"""Strikes per expiration (10 below spot, 10 at/above)."""

WEEKLY_EXPIRATIONS = 4
"""Number of weekly Friday expirations."""

MONTHLY_EXPIRATIONS = 6
"""Number of monthly (third Friday) expirations."""

SYNTHETIC_BASE_IV_RANGE = (0.30, 0.60)
"""Uniform range for the synthetic base implied volatility."""

PUT_IV_SKEW = 0.05
"""Additive IV skew applied to puts."""

CALL_IV_SKEW = -0.02
"""Additive IV skew applied to calls."""

SYNTHETIC_SPREAD_PCT = 0.02
"""Bid/ask spread as a fraction of the option price."""

UNUSUAL_ACTIVITY_PROBABILITY = 0.05
"""Chance that a synthetic contract receives an unusual-volume spike."""

UNUSUAL_ACTIVITY_MULTIPLIER = (5.0, 25.0)
"""Range of the unusual-volume multiplier."""


# =============================================================================
# Opportunity Scoring
# =============================================================================

COMPONENT_CAPS: dict[str, float] = {
    "liquidity": 15,
    "volatility": 15,
    "momentum": 15,
    "greeks": 10,
    "technical": 10,
    "flow": 10,
    "risk_reward": 10,
    "probability": 10,
    "catalyst": 5,
    "confidence": 10,
}
"""Independent cap for each scoring component."""

MAX_TOTAL_SCORE = sum(COMPONENT_CAPS.values())
"""Nominal score ceiling (110). Totals are not clamped to 100."""

STRONG_COMPONENT_THRESHOLDS: dict[str, float] = {
    "liquidity": 10,
    "volatility": 10,
    "momentum": 10,
    "greeks": 7,
    "technical": 7,
    "flow": 7,
    "risk_reward": 7,
    "probability": 7,
    "catalyst": 3,
}
"""Component score at which a factor counts toward aggregate confidence."""

DAILY_VOLATILITY_PROXY = 0.01
"""Daily move proxy (1%) for the simplified probability-of-profit estimate."""

MAX_RETURN_POTENTIAL = 10.0
"""Cap on the leverage-based return multiplier."""

WIN_PROBABILITY_BOUNDS = (10.0, 85.0)
"""Win probability is never reported outside this band."""

STOP_LOSS_FRACTION = 0.50
"""Stop loss as a fraction of the option price."""

TARGET_MOVE_PER_MULTIPLE = 0.05
"""Underlying move (5%) per unit of return potential for target prices."""


# =============================================================================
# Scanner Defaults
# =============================================================================

DEFAULT_MIN_SCORE = 75.0
"""Scores below this are not reported by the scanner."""

DEFAULT_MIN_COST = 10.0
"""Minimum premium per contract (USD) considered by the scanner."""

DEFAULT_MAX_COST = 500.0
"""Maximum premium per contract (USD) considered by the scanner."""

DEFAULT_RESULT_LIMIT = 50
"""Maximum number of ranked opportunities returned."""
