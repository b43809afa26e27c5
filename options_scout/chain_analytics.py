"""
Chain-level option analytics.

Aggregate views over an option chain or a set of positions:

- Expected move implied by the at-the-money straddle
- Max pain strike (where option holders lose the most at expiry)
- Put/call volume and open-interest ratios
- Volatility skew between OTM puts and OTM calls
- Gamma exposure near the money ("gamma squeeze" potential)
- Portfolio Greeks with a plain-language interpretation
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .constants import CONTRACT_MULTIPLIER
from .exceptions import InvalidInputError
from .models import OptionQuote, OptionType
from .utils.validation import require_positive

logger = logging.getLogger(__name__)

# Near-the-money band for gamma exposure (|K - S| / S)
GAMMA_BAND_PCT = 0.05
MIN_GAMMA = 0.01
HIGH_GAMMA_EXPOSURE = 1000.0
MEDIUM_GAMMA_EXPOSURE = 500.0

# Skew (in vol points) beyond which the chain is called fearful/greedy
SKEW_THRESHOLD_POINTS = 5.0


@dataclass
class ExpectedMove:
    """
    Expected move implied by a straddle price.

    Attributes:
        dollars: Straddle price (call + put)
        percent: Straddle price as a percentage of spot
        upper_bound: spot + expected move
        lower_bound: spot - expected move
    """

    dollars: float
    percent: float
    upper_bound: float
    lower_bound: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "dollars": round(self.dollars, 2),
            "percent": round(self.percent, 2),
            "upper_bound": round(self.upper_bound, 2),
            "lower_bound": round(self.lower_bound, 2),
        }


@dataclass
class PutCallRatio:
    """Put/call ratios by volume and open interest."""

    volume_ratio: float
    open_interest_ratio: float
    sentiment: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "volume_ratio": round(self.volume_ratio, 3),
            "open_interest_ratio": round(self.open_interest_ratio, 3),
            "sentiment": self.sentiment,
        }


@dataclass
class VolatilitySkew:
    """
    OTM put IV minus OTM call IV for one expiration.

    Attributes:
        skew: Difference in vol points (positive = puts richer)
        interpretation: "Fear (Put Skew)", "Greed (Call Skew)" or "Neutral"
    """

    skew: float
    interpretation: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"skew": round(self.skew, 2), "interpretation": self.interpretation}


@dataclass
class GammaExposure:
    """
    Near-the-money gamma exposure.

    Attributes:
        risk: "HIGH", "MEDIUM" or "LOW"
        exposure: Sum of gamma x open interest over qualifying contracts
        strikes: Strikes that contributed
    """

    risk: str
    exposure: float
    strikes: list[float] = field(default_factory=list)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "risk": self.risk,
            "exposure": round(self.exposure, 2),
            "strikes": list(self.strikes),
        }


@dataclass
class Position:
    """
    An option position for portfolio aggregation.

    Attributes:
        quote: Contract held
        quantity: Contracts (negative for short positions)
    """

    quote: OptionQuote
    quantity: int


@dataclass
class PortfolioGreeks:
    """Position-weighted Greeks (per share x 100 x contracts)."""

    delta: float
    gamma: float
    theta: float
    vega: float
    interpretation: dict[str, str] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "delta": round(self.delta, 2),
            "gamma": round(self.gamma, 2),
            "theta": round(self.theta, 2),
            "vega": round(self.vega, 2),
            "interpretation": dict(self.interpretation),
        }


def expected_move(call_price: float, put_price: float, spot: float) -> ExpectedMove:
    """
    Expected move from an ATM straddle.

    Args:
        call_price: ATM call premium
        put_price: ATM put premium
        spot: Underlying price

    Returns:
        ExpectedMove with dollar, percent and price bounds
    """
    spot = require_positive(spot, "spot")
    straddle = call_price + put_price
    move_pct = straddle / spot
    return ExpectedMove(
        dollars=straddle,
        percent=move_pct * 100,
        upper_bound=spot * (1 + move_pct),
        lower_bound=spot * (1 - move_pct),
    )


def _nearest_expiration(chain: Sequence[OptionQuote]) -> Optional[date]:
    return min((q.expiration for q in chain), default=None)


def _for_expiration(
    chain: Sequence[OptionQuote], expiration: Optional[date]
) -> list[OptionQuote]:
    expiration = expiration or _nearest_expiration(chain)
    return [q for q in chain if q.expiration == expiration]


def expected_move_from_chain(
    chain: Sequence[OptionQuote], spot: float, expiration: Optional[date] = None
) -> Optional[ExpectedMove]:
    """
    Expected move using the strike nearest spot for one expiration.

    Args:
        chain: Option chain
        spot: Underlying price
        expiration: Expiration to use (default: nearest)

    Returns:
        ExpectedMove, or None if the expiration lacks a call/put pair
    """
    quotes = _for_expiration(chain, expiration)
    calls = {q.strike: q for q in quotes if q.option_type is OptionType.CALL}
    puts = {q.strike: q for q in quotes if q.option_type is OptionType.PUT}
    paired = sorted(set(calls) & set(puts))
    if not paired:
        return None

    atm_strike = min(paired, key=lambda k: abs(k - spot))
    return expected_move(calls[atm_strike].last, puts[atm_strike].last, spot)


def max_pain(chain: Sequence[OptionQuote], expiration: Optional[date] = None) -> Optional[float]:
    """
    Strike at which total intrinsic payout to option holders is smallest.

    Args:
        chain: Option chain
        expiration: Expiration to evaluate (default: nearest)

    Returns:
        Max pain strike, or None for an empty chain
    """
    quotes = _for_expiration(chain, expiration)
    if not quotes:
        return None

    strikes = sorted({q.strike for q in quotes})
    best_strike = strikes[len(strikes) // 2]
    min_pain = float("inf")

    for settle in strikes:
        pain = 0.0
        for q in quotes:
            if q.option_type is OptionType.CALL and settle > q.strike:
                pain += (settle - q.strike) * q.open_interest
            elif q.option_type is OptionType.PUT and settle < q.strike:
                pain += (q.strike - settle) * q.open_interest
        if pain < min_pain:
            min_pain = pain
            best_strike = settle

    return best_strike


def put_call_ratio(chain: Sequence[OptionQuote]) -> PutCallRatio:
    """
    Put/call ratios over a whole chain.

    Ratios are 0 when there is no call activity; sentiment is "Bearish"
    when put volume exceeds call volume, otherwise "Bullish".
    """
    call_volume = put_volume = 0
    call_oi = put_oi = 0
    for q in chain:
        if q.option_type is OptionType.CALL:
            call_volume += q.volume
            call_oi += q.open_interest
        else:
            put_volume += q.volume
            put_oi += q.open_interest

    return PutCallRatio(
        volume_ratio=put_volume / call_volume if call_volume > 0 else 0.0,
        open_interest_ratio=put_oi / call_oi if call_oi > 0 else 0.0,
        sentiment="Bearish" if put_volume > call_volume else "Bullish",
    )


def volatility_skew(
    chain: Sequence[OptionQuote], expiration: Optional[date] = None
) -> Optional[VolatilitySkew]:
    """
    Compare OTM put IV (25th percentile strike) to OTM call IV (75th).

    Args:
        chain: Option chain
        expiration: Expiration to evaluate (default: nearest)

    Returns:
        VolatilitySkew, or None with fewer than 3 puts or 3 calls
    """
    quotes = _for_expiration(chain, expiration)
    puts = sorted((q for q in quotes if q.option_type is OptionType.PUT), key=lambda q: q.strike)
    calls = sorted((q for q in quotes if q.option_type is OptionType.CALL), key=lambda q: q.strike)
    if len(puts) < 3 or len(calls) < 3:
        return None

    otm_put_iv = puts[int(len(puts) * 0.25)].implied_volatility
    otm_call_iv = calls[int(len(calls) * 0.75)].implied_volatility
    skew = (otm_put_iv - otm_call_iv) * 100

    if skew > SKEW_THRESHOLD_POINTS:
        interpretation = "Fear (Put Skew)"
    elif skew < -SKEW_THRESHOLD_POINTS:
        interpretation = "Greed (Call Skew)"
    else:
        interpretation = "Neutral"
    return VolatilitySkew(skew=skew, interpretation=interpretation)


def gamma_exposure(chain: Sequence[OptionQuote], spot: float) -> GammaExposure:
    """
    Detect gamma-squeeze potential from near-the-money gamma x open interest.

    Contracts within 5% of spot with gamma above 0.01 contribute.
    Exposure above 1000 is HIGH, above 500 MEDIUM, else LOW.
    """
    spot = require_positive(spot, "spot")
    near = [
        q for q in chain if abs(q.strike - spot) / spot < GAMMA_BAND_PCT and q.gamma > MIN_GAMMA
    ]
    exposure = sum(q.gamma * q.open_interest for q in near)

    if exposure > HIGH_GAMMA_EXPOSURE:
        risk = "HIGH"
    elif exposure > MEDIUM_GAMMA_EXPOSURE:
        risk = "MEDIUM"
    else:
        risk = "LOW"

    if risk != "LOW":
        logger.info(f"Gamma exposure {exposure:.0f} near ${spot:.2f} ({risk})")
    return GammaExposure(risk=risk, exposure=exposure, strikes=[q.strike for q in near])


def portfolio_greeks(positions: Sequence[Position]) -> PortfolioGreeks:
    """
    Aggregate Greeks across positions (x100 shares per contract).

    Raises:
        InvalidInputError: If a position has zero quantity
    """
    delta = gamma = theta = vega = 0.0
    for position in positions:
        if position.quantity == 0:
            raise InvalidInputError(
                f"Position quantity cannot be zero ({position.quote.underlying_symbol} "
                f"{position.quote.strike})"
            )
        multiplier = position.quantity * CONTRACT_MULTIPLIER
        delta += position.quote.delta * multiplier
        gamma += position.quote.gamma * multiplier
        theta += position.quote.theta * multiplier
        vega += position.quote.vega * multiplier

    return PortfolioGreeks(
        delta=delta,
        gamma=gamma,
        theta=theta,
        vega=vega,
        interpretation=interpret_greeks(delta, gamma, theta, vega),
    )


def interpret_greeks(delta: float, gamma: float, theta: float, vega: float) -> dict[str, str]:
    """Plain-language reading of aggregate portfolio Greeks."""
    return {
        "delta": "Bullish position" if delta > 0 else "Bearish position",
        "gamma": "High price sensitivity" if abs(gamma) > 10 else "Low price sensitivity",
        "theta": "Significant time decay" if theta < -50 else "Minimal time decay",
        "vega": "High IV sensitivity" if abs(vega) > 100 else "Low IV sensitivity",
    }
