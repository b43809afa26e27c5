"""
Scoring component functions for the opportunity scorer.

Each function scores one factor of an option contract and returns a value
between zero and that factor's cap in COMPONENT_CAPS. Functions are pure;
any randomness (the technical price-action proxy) is passed in.
"""

from collections.abc import Iterable, Mapping
from typing import Optional

from ..constants import COMPONENT_CAPS, NEUTRAL_IV_RANK, STRONG_COMPONENT_THRESHOLDS
from ..models import CatalystEvent, OptionQuote, Timeframe

# Human-readable reason attached when a component reaches its strong threshold
COMPONENT_REASONS: dict[str, str] = {
    "liquidity": "High liquidity",
    "volatility": "Optimal IV level",
    "momentum": "Strong momentum",
    "greeks": "Favorable Greeks",
    "technical": "Technical setup",
    "flow": "Unusual activity",
    "risk_reward": "Excellent risk/reward",
    "probability": "High probability of profit",
    "catalyst": "Upcoming catalyst",
}


def _capped(name: str, score: float) -> float:
    return min(COMPONENT_CAPS[name], score)


def liquidity_score(quote: OptionQuote) -> float:
    """
    Score volume, open interest and spread tightness (0-15).

    Volume: >5000 -> 5, >1000 -> 3, >500 -> 1
    Open interest: >10000 -> 5, >5000 -> 3, >1000 -> 1
    Spread/last: <3% -> 5, <6% -> 3, <10% -> 1 (no points without a price)
    """
    score = 0.0

    if quote.volume > 5000:
        score += 5
    elif quote.volume > 1000:
        score += 3
    elif quote.volume > 500:
        score += 1

    if quote.open_interest > 10000:
        score += 5
    elif quote.open_interest > 5000:
        score += 3
    elif quote.open_interest > 1000:
        score += 1

    spread = quote.spread_pct
    if spread is not None:
        if spread < 0.03:
            score += 5
        elif spread < 0.06:
            score += 3
        elif spread < 0.10:
            score += 1

    return _capped("liquidity", score)


def volatility_score(quote: OptionQuote, iv_rank: Optional[float]) -> float:
    """
    Score implied volatility level and IV rank (0-15).

    IV: 40-80% -> 10, 30-40% -> 7, 80-120% -> 5
    IV rank: 50-75 -> 5, 30-50 -> 3 (missing rank treated as 50)
    """
    iv_pct = quote.implied_volatility * 100
    rank = NEUTRAL_IV_RANK if iv_rank is None else iv_rank
    score = 0.0

    if 40 <= iv_pct <= 80:
        score += 10
    elif 30 <= iv_pct < 40:
        score += 7
    elif 80 < iv_pct <= 120:
        score += 5

    if 50 <= rank <= 75:
        score += 5
    elif 30 <= rank < 50:
        score += 3

    return _capped("volatility", score)


def momentum_score(quote: OptionQuote) -> float:
    """
    Score delta band and gamma (0-15).

    |delta|: 0.40-0.60 -> 10, 0.25-0.40 -> 7, 0.60-0.75 -> 5
    gamma: >0.03 -> 5, >0.01 -> 3
    """
    abs_delta = abs(quote.delta)
    score = 0.0

    if 0.40 <= abs_delta <= 0.60:
        score += 10
    elif 0.25 <= abs_delta < 0.40:
        score += 7
    elif 0.60 < abs_delta <= 0.75:
        score += 5

    if quote.gamma > 0.03:
        score += 5
    elif quote.gamma > 0.01:
        score += 3

    return _capped("momentum", score)


def greeks_score(quote: OptionQuote, timeframe: Timeframe) -> float:
    """
    Score theta, vega and delta quality (0-10).

    Low decay: |theta| < 0.05 (short) or < 0.03 (otherwise) -> 3
    Vega: >0.10 -> 4, >0.05 -> 2
    Directional delta: |delta| > 0.35 -> 3
    """
    theta_limit = 0.05 if timeframe is Timeframe.SHORT else 0.03
    score = 0.0

    if abs(quote.theta) < theta_limit:
        score += 3

    if quote.vega > 0.10:
        score += 4
    elif quote.vega > 0.05:
        score += 2

    if abs(quote.delta) > 0.35:
        score += 3

    return _capped("greeks", score)


def technical_score(quote: OptionQuote, spot: float, price_action: float) -> float:
    """
    Score moneyness band plus a price-action signal (0-10).

    Moneyness: 0.95-1.05 -> 6, 0.90-0.95 -> 4, 1.05-1.10 -> 4
    Price action (0-10): >7 -> 4, >5 -> 2

    Args:
        quote: Contract to score
        spot: Underlying price
        price_action: Momentum reading in [0, 10]
    """
    moneyness = quote.moneyness(spot)
    score = 0.0

    if 0.95 <= moneyness <= 1.05:
        score += 6
    elif 0.90 <= moneyness < 0.95:
        score += 4
    elif 1.05 < moneyness <= 1.10:
        score += 4

    if price_action > 7:
        score += 4
    elif price_action > 5:
        score += 2

    return _capped("technical", score)


def volume_oi_ratio(quote: OptionQuote) -> float:
    """Volume over open interest; equals volume when open interest is zero."""
    if quote.open_interest == 0:
        return float(quote.volume)
    return quote.volume / quote.open_interest


def flow_score(quote: OptionQuote) -> float:
    """
    Score unusual order flow (0-10).

    Volume/OI: >5 -> 5, >2 -> 3, >1 -> 1
    Volume: >2000 -> 5, >1000 -> 3
    """
    ratio = volume_oi_ratio(quote)
    score = 0.0

    if ratio > 5:
        score += 5
    elif ratio > 2:
        score += 3
    elif ratio > 1:
        score += 1

    if quote.volume > 2000:
        score += 5
    elif quote.volume > 1000:
        score += 3

    return _capped("flow", score)


def risk_reward_score(return_potential: float) -> float:
    """Score the reward/risk multiple: >=5 -> 10, >=3 -> 8, >=2 -> 6, >=1.5 -> 4."""
    if return_potential >= 5:
        score = 10.0
    elif return_potential >= 3:
        score = 8.0
    elif return_potential >= 2:
        score = 6.0
    elif return_potential >= 1.5:
        score = 4.0
    else:
        score = 0.0
    return _capped("risk_reward", score)


def probability_score(pop: float) -> float:
    """Score probability of profit (%): >=45 -> 10, >=35 -> 8, >=25 -> 6, >=15 -> 4."""
    if pop >= 45:
        score = 10.0
    elif pop >= 35:
        score = 8.0
    elif pop >= 25:
        score = 6.0
    elif pop >= 15:
        score = 4.0
    else:
        score = 0.0
    return _capped("probability", score)


def catalyst_score(events: Iterable[CatalystEvent], days_to_expiration: int) -> float:
    """
    Score a scheduled event within the option's life (0-5).

    An event counts when |days_until| <= DTE. Counted events score 5 for
    DTE <= 14 and 3 for DTE <= 30.
    """
    has_event = any(e.within(days_to_expiration) for e in events)
    if not has_event:
        return 0.0
    if days_to_expiration <= 14:
        return _capped("catalyst", 5.0)
    if days_to_expiration <= 30:
        return _capped("catalyst", 3.0)
    return 0.0


def strong_components(scores: Mapping[str, float]) -> list[str]:
    """Names of components at or above their strong threshold, in scoring order."""
    return [
        name
        for name, threshold in STRONG_COMPONENT_THRESHOLDS.items()
        if scores.get(name, 0.0) >= threshold
    ]


def confidence_score(strong_count: int, quote: OptionQuote) -> float:
    """
    Aggregate confidence (0-10).

    1.5 points per strong component, +2 when volume > 3x open interest,
    +1 when IV > 50%, +1 when |delta| > 0.5.
    """
    score = strong_count * 1.5

    if quote.volume > quote.open_interest * 3:
        score += 2
    if quote.implied_volatility > 0.50:
        score += 1
    if abs(quote.delta) > 0.5:
        score += 1

    return _capped("confidence", score)
