"""
IV Rank and IV Percentile.

IV Rank places the current implied volatility within its historical
min-max range; IV Percentile reports the share of historical observations
strictly below the current value. Both need a minimum history (30 samples
by default) to be meaningful. With less history the normal accessors
return None and the scorer substitutes a neutral rank of 50.

Signals translate an extreme rank into a premium trade: an iron condor
around one standard deviation when IV is rich, a call debit spread when
it is cheap. The at-the-money IV ranked for a signal is the mean IV of
contracts within 5% of spot that expire in 21-59 days.

Formula Reference:
    IV Rank = (IV_current - IV_min) / (IV_max - IV_min) x 100
    IV Percentile = count(IV_hist < IV_current) / n x 100
"""

import logging
import math
from collections.abc import Iterable, Sequence
from typing import Optional, Union

from .chain_synthesizer import OptionChainSynthesizer
from .constants import DAYS_PER_YEAR, MIN_HISTORY_SAMPLES, NEUTRAL_IV_RANK
from .exceptions import InsufficientHistoryError, InvalidInputError
from .models import (
    DebitSpreadTrade,
    HistoricalVolatilitySample,
    IronCondorTrade,
    IVRankResult,
    IVSignal,
    OptionQuote,
    SignalAction,
    SuggestedTrade,
)
from .utils.validation import require_finite, require_positive

logger = logging.getLogger(__name__)

VolatilitySeries = Sequence[Union[HistoricalVolatilitySample, float]]

# IV rank signal thresholds
SELL_EXTREME_RANK = 80.0
SELL_RANK = 70.0
BUY_RANK = 20.0

# At-the-money IV sample: strikes within 5% of spot, 20 < DTE < 60
ATM_MONEYNESS_BAND = 0.05
ATM_DTE_RANGE = (20, 60)

# Iron condor: short strikes at 1 SD, wings at 1.2 SD, credit ~30% of width
CONDOR_DTE = 35
CONDOR_SHORT_SD = 1.0
CONDOR_LONG_SD = 1.2
CONDOR_CREDIT_FRACTION = 0.30
CONDOR_POP = 68.0

# Call debit spread: long 2% OTM, short 8% OTM, debit ~35% of width
DEBIT_SPREAD_DTE = 45
DEBIT_LONG_MONEYNESS = 1.02
DEBIT_SHORT_MONEYNESS = 1.08
DEBIT_FRACTION = 0.35


def _series_values(series: Optional[VolatilitySeries]) -> list[float]:
    """Extract plain volatility floats from samples or numbers."""
    if not series:
        return []
    return [
        s.volatility if isinstance(s, HistoricalVolatilitySample) else float(s) for s in series
    ]

def _round_to_strike(price: float, increment: float) -> float:
    return round(round(price / increment) * increment, 2)


def atm_implied_volatility(chain: Iterable[OptionQuote], spot: float) -> Optional[float]:
    """
    Mean IV of near-the-money contracts in the 20-60 DTE window.

    Args:
        chain: Option quotes for one underlying
        spot: Underlying price

    Returns:
        Mean implied volatility (decimal), or None when no contract qualifies
    """
    spot = require_positive(spot, "spot")
    min_dte, max_dte = ATM_DTE_RANGE
    ivs = [
        q.implied_volatility
        for q in chain
        if abs(q.strike - spot) < spot * ATM_MONEYNESS_BAND
        and min_dte < q.days_to_expiration < max_dte
    ]
    if not ivs:
        return None
    return sum(ivs) / len(ivs)


def iron_condor_trade(spot: float, volatility: float) -> IronCondorTrade:
    """
    Size a 35 DTE iron condor from the expected one standard deviation move.

    SD = spot x volatility x sqrt(35 / 365). Strikes are rounded to the
    listed increment for the spot price, and each wing is kept at least one
    increment beyond its short strike so the condor never collapses to zero
    width. The credit is estimated at 30% of the average wing width.

    Args:
        spot: Underlying price
        volatility: Current implied volatility (decimal)

    Returns:
        IronCondorTrade with strikes, credit and breakevens
    """
    spot = require_positive(spot, "spot")
    volatility = require_positive(volatility, "volatility")
    increment = OptionChainSynthesizer.strike_increment(spot)
    sd = spot * volatility * math.sqrt(CONDOR_DTE / DAYS_PER_YEAR)

    short_put = max(_round_to_strike(spot - sd * CONDOR_SHORT_SD, increment), 2 * increment)
    long_put = max(
        min(_round_to_strike(spot - sd * CONDOR_LONG_SD, increment), short_put - increment),
        increment,
    )
    short_call = _round_to_strike(spot + sd * CONDOR_SHORT_SD, increment)
    long_call = max(
        _round_to_strike(spot + sd * CONDOR_LONG_SD, increment), short_call + increment
    )

    width = ((short_put - long_put) + (long_call - short_call)) / 2
    credit = width * CONDOR_CREDIT_FRACTION
    return IronCondorTrade(
        days_to_expiration=CONDOR_DTE,
        long_put=long_put,
        short_put=short_put,
        short_call=short_call,
        long_call=long_call,
        width=width,
        credit=credit,
        breakevens=(short_put - credit, short_call + credit),
        probability_of_profit=CONDOR_POP,
    )


def debit_spread_trade(spot: float) -> DebitSpreadTrade:
    """
    Size a 45 DTE call debit spread, long 2% and short 8% out of the money.

    The short strike is kept at least one increment above the long strike.
    The debit is estimated at 35% of the width.
    """
    spot = require_positive(spot, "spot")
    increment = OptionChainSynthesizer.strike_increment(spot)

    long_strike = _round_to_strike(spot * DEBIT_LONG_MONEYNESS, increment)
    short_strike = max(
        _round_to_strike(spot * DEBIT_SHORT_MONEYNESS, increment), long_strike + increment
    )
    width = short_strike - long_strike
    debit = width * DEBIT_FRACTION
    return DebitSpreadTrade(
        days_to_expiration=DEBIT_SPREAD_DTE,
        long_strike=long_strike,
        short_strike=short_strike,
        width=width,
        debit=debit,
        breakeven=long_strike + debit,
    )


class IVRankCalculator:
    """
    Calculator for IV rank, IV percentile and mean-reversion signals.

    Example:
        calculator = IVRankCalculator()
        rank = calculator.iv_rank(0.45, history)
        if rank is not None:
            signal = calculator.generate_signal("AAPL", rank)
    """

    def __init__(self, min_samples: int = MIN_HISTORY_SAMPLES):
        """
        Initialize the calculator.

        Args:
            min_samples: Minimum history length for a meaningful result
        """
        if min_samples < 1:
            raise InvalidInputError(f"min_samples must be at least 1, got {min_samples}")
        self.min_samples = min_samples

    def _usable_history(
        self, current: float, series: Optional[VolatilitySeries]
    ) -> Optional[list[float]]:
        require_finite(current, "current")
        values = _series_values(series)
        if len(values) < self.min_samples:
            logger.warning(
                f"Insufficient volatility history: {len(values)} samples, "
                f"need {self.min_samples}"
            )
            return None
        return values

    def iv_rank(self, current: float, series: Optional[VolatilitySeries]) -> Optional[float]:
        """
        Calculate IV rank (0-100).

        Args:
            current: Current implied volatility (decimal)
            series: Historical volatility samples or floats

        Returns:
            Rank clamped to [0, 100]; 50.0 for a flat history;
            None when history is shorter than min_samples
        """
        values = self._usable_history(current, series)
        if values is None:
            return None

        low, high = min(values), max(values)
        if high == low:
            return NEUTRAL_IV_RANK

        rank = (current - low) / (high - low) * 100
        return max(0.0, min(100.0, rank))

    def iv_percentile(
        self, current: float, series: Optional[VolatilitySeries]
    ) -> Optional[float]:
        """
        Calculate IV percentile (0-100).

        Args:
            current: Current implied volatility (decimal)
            series: Historical volatility samples or floats

        Returns:
            Percentage of samples strictly below current;
            None when history is shorter than min_samples
        """
        values = self._usable_history(current, series)
        if values is None:
            return None

        below = sum(1 for v in values if v < current)
        return below / len(values) * 100

    def analyze(self, current: float, series: Optional[VolatilitySeries]) -> IVRankResult:
        """Compute rank and percentile together."""
        values = _series_values(series)
        sufficient = len(values) >= self.min_samples
        return IVRankResult(
            current_volatility=current,
            iv_rank=self.iv_rank(current, values) if sufficient else None,
            iv_percentile=self.iv_percentile(current, values) if sufficient else None,
            sample_count=len(values),
            sufficient_history=sufficient,
        )

    def require_rank(self, current: float, series: Optional[VolatilitySeries]) -> float:
        """
        Strict variant of iv_rank().

        Raises:
            InsufficientHistoryError: If history is shorter than min_samples
        """
        rank = self.iv_rank(current, series)
        if rank is None:
            raise InsufficientHistoryError(
                f"IV rank needs at least {self.min_samples} samples, "
                f"got {len(_series_values(series))}"
            )
        return rank

    def generate_signal(
        self,
        symbol: str,
        iv_rank: Optional[float],
        current_volatility: Optional[float] = None,
        spot: Optional[float] = None,
    ) -> Optional[IVSignal]:
        """
        Translate an IV rank into a premium buy/sell signal.

        Thresholds:
            >= 80: SELL (Iron Condor), confidence min(95, 60 + (rank - 80) x 1.5)
            >= 70: SELL (Iron Condor), confidence min(75, 50 + (rank - 70))
            <= 20: BUY (Debit Spread), confidence min(85, 50 + (20 - rank) x 1.5)
            otherwise: WAIT, confidence 0

        SELL signals carry an iron condor and BUY signals a call debit
        spread when both current_volatility and spot are given.

        Args:
            symbol: Underlying ticker
            iv_rank: IV rank (0-100), or None
            current_volatility: Ranked implied volatility (decimal)
            spot: Underlying price

        Returns:
            IVSignal, or None when no rank is available
        """
        if iv_rank is None:
            return None

        can_size = current_volatility is not None and spot is not None
        context = {"current_volatility": current_volatility, "spot": spot}

        if iv_rank >= SELL_EXTREME_RANK:
            return IVSignal(
                symbol=symbol,
                action=SignalAction.SELL,
                confidence=min(95.0, 60 + (iv_rank - SELL_EXTREME_RANK) * 1.5),
                strategy="Iron Condor",
                reasoning=(
                    f"IV Rank {iv_rank:.0f}% is extremely high. "
                    "Volatility likely to mean revert. Sell premium."
                ),
                iv_rank=iv_rank,
                trade=iron_condor_trade(spot, current_volatility) if can_size else None,
                **context,
            )
        if iv_rank >= SELL_RANK:
            return IVSignal(
                symbol=symbol,
                action=SignalAction.SELL,
                confidence=min(75.0, 50 + (iv_rank - SELL_RANK)),
                strategy="Iron Condor",
                reasoning=f"IV Rank {iv_rank:.0f}% is elevated. Good opportunity to sell premium.",
                iv_rank=iv_rank,
                trade=iron_condor_trade(spot, current_volatility) if can_size else None,
                **context,
            )
        if iv_rank <= BUY_RANK:
            return IVSignal(
                symbol=symbol,
                action=SignalAction.BUY,
                confidence=min(85.0, 50 + (BUY_RANK - iv_rank) * 1.5),
                strategy="Debit Spread",
                reasoning=(
                    f"IV Rank {iv_rank:.0f}% is extremely low. "
                    "Volatility likely to expand. Buy premium."
                ),
                iv_rank=iv_rank,
                trade=debit_spread_trade(spot) if can_size else None,
                **context,
            )
        return IVSignal(
            symbol=symbol,
            action=SignalAction.WAIT,
            confidence=0.0,
            strategy=None,
            reasoning=f"IV Rank {iv_rank:.0f}% is neutral. Wait for extremes.",
            iv_rank=iv_rank,
            **context,
        )
