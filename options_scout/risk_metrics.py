"""
Per-position risk and reward metrics.

Simple, transparent heuristics used by the opportunity scorer and exposed
for direct use: breakevens, a probability-of-profit estimate, Kelly
position sizing, risk/reward, return potential, win probability, risk
level, target price and stop loss.
"""

import math
from collections.abc import Sequence
from typing import Union

from .black_scholes import OptionTypeLike
from .constants import (
    DAILY_VOLATILITY_PROXY,
    DAYS_PER_YEAR,
    MAX_RETURN_POTENTIAL,
    MAX_TOTAL_SCORE,
    STOP_LOSS_FRACTION,
    TARGET_MOVE_PER_MULTIPLE,
    WIN_PROBABILITY_BOUNDS,
)
from .distributions import norm_cdf
from .exceptions import InvalidInputError
from .models import OptionType, PositionSide, RiskLevel, Timeframe

# Kelly fraction is never sized above a quarter of the portfolio
MAX_KELLY_FRACTION = 0.25

# Smallest |delta| used when converting delta into leverage
MIN_LEVERAGE_DELTA = 0.01


def breakeven(strike: float, premium: float, option_type: OptionTypeLike) -> float:
    """
    Underlying price at expiration where a long option breaks even.

    Returns:
        strike + premium for calls, strike - premium for puts
    """
    if OptionType.parse(option_type) is OptionType.CALL:
        return strike + premium
    return strike - premium


def straddle_breakevens(
    strike: float, call_premium: float, put_premium: float
) -> tuple[float, float]:
    """Lower and upper breakevens of a long straddle."""
    total_premium = call_premium + put_premium
    return strike - total_premium, strike + total_premium


def _require_legs(strategy: str, values: Sequence[float], count: int, name: str) -> None:
    if len(values) != count:
        raise InvalidInputError(f"{strategy} needs {count} {name}, got {len(values)}")


def strategy_breakevens(
    strategy: str, strikes: Sequence[float], premiums: Sequence[float]
) -> list[float]:
    """
    Breakeven underlying prices at expiration for common structures.

    Leg order for strikes and premiums:
        long_call, long_put: (strike,), (premium,)
        bull_call_spread: (long call, short call), premiums in the same order
        bear_put_spread: (short put, long put), premiums (long put, short put)
        iron_condor: (long put, short put, short call, long call),
            premiums (short put, short call, long put, long call)
        straddle: (strike,), (call premium, put premium)

    Returns:
        Breakevens in ascending order

    Raises:
        InvalidInputError: If the strategy is unknown or the leg counts are wrong
    """
    key = strategy.strip().lower().replace("-", "_")
    if key == "long_call":
        _require_legs(key, strikes, 1, "strikes")
        _require_legs(key, premiums, 1, "premiums")
        return [breakeven(strikes[0], premiums[0], OptionType.CALL)]
    if key == "long_put":
        _require_legs(key, strikes, 1, "strikes")
        _require_legs(key, premiums, 1, "premiums")
        return [breakeven(strikes[0], premiums[0], OptionType.PUT)]
    if key == "bull_call_spread":
        _require_legs(key, strikes, 2, "strikes")
        _require_legs(key, premiums, 2, "premiums")
        return [strikes[0] + premiums[0] - premiums[1]]
    if key == "bear_put_spread":
        _require_legs(key, strikes, 2, "strikes")
        _require_legs(key, premiums, 2, "premiums")
        return [strikes[1] - (premiums[0] - premiums[1])]
    if key == "iron_condor":
        _require_legs(key, strikes, 4, "strikes")
        _require_legs(key, premiums, 4, "premiums")
        credit = premiums[0] + premiums[1] - premiums[2] - premiums[3]
        return [strikes[1] - credit, strikes[2] + credit]
    if key == "straddle":
        _require_legs(key, strikes, 1, "strikes")
        _require_legs(key, premiums, 2, "premiums")
        return list(straddle_breakevens(strikes[0], premiums[0], premiums[1]))
    raise InvalidInputError(f"Unknown strategy: {strategy!r}")


def probability_of_profit(
    spot: float,
    strike: float,
    premium: float,
    option_type: OptionTypeLike,
    days_to_expiration: float,
    side: Union[PositionSide, str] = PositionSide.LONG,
    daily_volatility: float = DAILY_VOLATILITY_PROXY,
) -> float:
    """
    Estimate the probability of profit in percent.

    Uses a fixed daily volatility proxy rather than the contract's IV:
        move = spot x daily_volatility x sqrt(DTE / 365)
        z = (breakeven - spot) / move
        long:  (1 - N(|z|)) x 100
        short: N(|z|) x 100

    Args:
        spot: Underlying price
        strike: Strike price
        premium: Option premium per share
        option_type: CALL or PUT
        days_to_expiration: Calendar days until expiration
        side: LONG (bought) or SHORT (sold)
        daily_volatility: Daily move proxy (default: 1%)

    Returns:
        Probability in percent; 50.0 when the expected move is zero
    """
    side = PositionSide(side)
    years = max(days_to_expiration, 0) / DAYS_PER_YEAR
    expected_move = spot * daily_volatility * math.sqrt(years)
    if expected_move <= 0:
        return 50.0

    z = (breakeven(strike, premium, option_type) - spot) / expected_move
    if side is PositionSide.LONG:
        return (1 - norm_cdf(abs(z))) * 100
    return norm_cdf(abs(z)) * 100


def kelly_fraction(win_rate_pct: float, avg_win: float, avg_loss: float) -> float:
    """
    Kelly criterion position size as a fraction of capital.

    Args:
        win_rate_pct: Win rate in percent (0-100)
        avg_win: Average winning trade size
        avg_loss: Average losing trade size (sign ignored)

    Returns:
        Fraction in [0, 0.25]; 0 when avg_loss or avg_win is zero
    """
    if avg_loss == 0 or avg_win == 0:
        return 0.0
    b = avg_win / abs(avg_loss)
    p = win_rate_pct / 100
    q = 1 - p
    kelly = (b * p - q) / b
    return max(0.0, min(kelly, MAX_KELLY_FRACTION))


def risk_reward_ratio(max_profit: float, max_loss: float) -> float:
    """Reward per unit of risk; infinite when max_loss is zero."""
    if max_loss == 0:
        return math.inf
    return max_profit / abs(max_loss)


def return_potential(delta: float, timeframe: Timeframe) -> float:
    """
    Leverage-based return multiple.

    Leverage is 1/|delta| (floored at |delta| = 0.01), scaled by the
    timeframe multiplier (0.5 short, 1.0 medium, 1.5 long) and capped at 10.
    """
    leverage = 1 / max(abs(delta), MIN_LEVERAGE_DELTA)
    return min(MAX_RETURN_POTENTIAL, leverage * timeframe.return_multiplier)


def win_probability(score: float, delta: float, timeframe: Timeframe) -> float:
    """
    Heuristic win probability in percent from the composite score.

    (score / 110) x 100, x0.85 for short and x0.95 for long timeframes,
    x1.1 when |delta| > 0.5, clamped to [10, 85].
    """
    probability = score / MAX_TOTAL_SCORE * 100
    if timeframe is Timeframe.SHORT:
        probability *= 0.85
    elif timeframe is Timeframe.LONG:
        probability *= 0.95

    if abs(delta) > 0.5:
        probability *= 1.1

    low, high = WIN_PROBABILITY_BOUNDS
    return min(max(probability, low), high)


def risk_level(days_to_expiration: int, delta: float) -> RiskLevel:
    """
    Classify risk from time remaining and delta.

    HIGH: DTE <= 7 or |delta| < 0.20
    MEDIUM_HIGH: DTE <= 14 or |delta| < 0.35
    MEDIUM: |delta| >= 0.45 and DTE >= 21
    MEDIUM_LOW: everything else
    """
    abs_delta = abs(delta)
    if days_to_expiration <= 7 or abs_delta < 0.20:
        return RiskLevel.HIGH
    if days_to_expiration <= 14 or abs_delta < 0.35:
        return RiskLevel.MEDIUM_HIGH
    if abs_delta >= 0.45 and days_to_expiration >= 21:
        return RiskLevel.MEDIUM
    return RiskLevel.MEDIUM_LOW


def target_price(
    spot: float, return_potential_value: float, option_type: OptionTypeLike
) -> float:
    """Underlying target: spot moved 5% per unit of return potential in the option's favor."""
    move = spot * return_potential_value * TARGET_MOVE_PER_MULTIPLE
    if OptionType.parse(option_type) is OptionType.CALL:
        return spot + move
    return spot - move


def stop_loss(premium: float) -> float:
    """Premium level at which to exit (50% of entry)."""
    return premium * STOP_LOSS_FRACTION


def expected_return(return_potential_value: float, win_probability_pct: float) -> float:
    """Probability-weighted return multiple."""
    return return_potential_value * win_probability_pct / 100
