"""
Synthetic option chain generation.

Builds a plausible, internally consistent option chain for a symbol when
no live chain is available:

- Expirations: 4 weekly Fridays plus 6 monthly third Fridays
- Strikes: 20 per expiration around spot, spaced by price tier
- IV: one uniform base (30-60%) per chain, with put/call skew
- Prices: Black-Scholes theoretical value split into intrinsic and time
- Activity: volume by moneyness, DTE and IV, with random jitter and
  occasional unusual-activity spikes

All randomness comes from an injected random.Random so a seeded
synthesizer reproduces the same chain.

Example:
    synthesizer = OptionChainSynthesizer(seed=42)
    chain = synthesizer.synthesize("AAPL", 185.50)
    calls = [q for q in chain if q.is_call]
"""

import logging
import math
import random
from datetime import date
from typing import Optional

from .black_scholes import black_scholes_price, intrinsic_value
from .constants import (
    CALL_IV_SKEW,
    DAYS_PER_YEAR,
    DEFAULT_RISK_FREE_RATE,
    MIN_VOLATILITY,
    MONTHLY_EXPIRATIONS,
    PUT_IV_SKEW,
    STRIKE_INCREMENTS,
    SYNTHETIC_BASE_IV_RANGE,
    SYNTHETIC_SPREAD_PCT,
    SYNTHETIC_STRIKE_COUNT,
    UNUSUAL_ACTIVITY_MULTIPLIER,
    UNUSUAL_ACTIVITY_PROBABILITY,
    WEEKLY_EXPIRATIONS,
)
from .greeks import GreeksCalculator
from .models import OptionQuote, OptionType, QuoteSource
from .utils import calculate_days_to_expiry, monthly_expirations, weekly_expirations
from .utils.validation import require_positive

logger = logging.getLogger(__name__)

BASE_VOLUME = 100


class OptionChainSynthesizer:
    """
    Generator for synthetic option chains.

    Attributes:
        rng: Random source for IV, volume and open interest draws
        risk_free_rate: Annual risk-free rate used for pricing and Greeks
        spread_pct: Bid/ask spread as a fraction of last
        unusual_activity_probability: Chance of a volume spike per contract
        today: Fixed reference date (None = date.today() at call time)
    """

    STRIKE_INCREMENTS = STRIKE_INCREMENTS

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        spread_pct: float = SYNTHETIC_SPREAD_PCT,
        unusual_activity_probability: float = UNUSUAL_ACTIVITY_PROBABILITY,
        today: Optional[date] = None,
        greeks_calculator: Optional[GreeksCalculator] = None,
    ):
        """
        Initialize the synthesizer.

        Args:
            rng: Random source (takes precedence over seed)
            seed: Seed for a new random.Random when rng is not given
            risk_free_rate: Annual risk-free rate (default: 0.05)
            spread_pct: Bid/ask spread fraction (default: 0.02)
            unusual_activity_probability: Volume spike chance (default: 0.05)
            today: Reference date for DTE and the expiration ladder
            greeks_calculator: Greeks calculator (default uses risk_free_rate)
        """
        self.rng = rng if rng is not None else random.Random(seed)
        self.risk_free_rate = risk_free_rate
        self.spread_pct = spread_pct
        self.unusual_activity_probability = unusual_activity_probability
        self.today = today
        self.greeks_calculator = greeks_calculator or GreeksCalculator(risk_free_rate)

    @classmethod
    def strike_increment(cls, price: float) -> float:
        """
        Get the strike spacing for an underlying price.

        Args:
            price: Underlying price

        Returns:
            Strike increment ($0.50 under $10 up to $10 at $200 and above)
        """
        for (low, high), increment in cls.STRIKE_INCREMENTS.items():
            if low <= price < high:
                return increment
        return 10.0

    def expiration_ladder(self, today: Optional[date] = None) -> list[date]:
        """
        Build the sorted, de-duplicated expiration ladder.

        Weekly Fridays start strictly after today; monthly third Fridays
        start with next calendar month.
        """
        today = today or self.today or date.today()
        dates = set(weekly_expirations(today, WEEKLY_EXPIRATIONS))
        dates.update(monthly_expirations(today, MONTHLY_EXPIRATIONS))
        return sorted(dates)

    def strike_ladder(self, spot: float) -> list[float]:
        """
        Build the strike ladder around spot.

        Strikes run from -10 to +9 increments around spot rounded to the
        increment. Non-positive strikes are skipped.
        """
        spot = require_positive(spot, "spot")
        increment = self.strike_increment(spot)
        base_strike = round(spot / increment) * increment
        half = SYNTHETIC_STRIKE_COUNT // 2

        strikes = set()
        for offset in range(-half, SYNTHETIC_STRIKE_COUNT - half):
            strike = round(base_strike + offset * increment, 2)
            if strike > 0:
                strikes.add(strike)
        return sorted(strikes)

    def synthesize(
        self,
        symbol: str,
        spot: float,
        base_iv: Optional[float] = None,
        today: Optional[date] = None,
    ) -> list[OptionQuote]:
        """
        Generate a full synthetic option chain.

        Args:
            symbol: Underlying ticker
            spot: Underlying price (> 0)
            base_iv: Fixed base IV (default: uniform 30-60% draw)
            today: Reference date (default: synthesizer today or date.today())

        Returns:
            Quotes sorted by (expiration, option type, strike)

        Raises:
            InvalidInputError: If spot is non-positive
        """
        spot = require_positive(spot, "spot")
        today = today or self.today or date.today()
        if base_iv is None:
            base_iv = self.rng.uniform(*SYNTHETIC_BASE_IV_RANGE)
        else:
            base_iv = require_positive(base_iv, "base_iv")

        strikes = self.strike_ladder(spot)
        chain = []
        for expiration in self.expiration_ladder(today):
            dte = calculate_days_to_expiry(expiration, today)
            for strike in strikes:
                for option_type in (OptionType.CALL, OptionType.PUT):
                    quote = self._build_quote(
                        symbol, spot, strike, option_type, expiration, dte, base_iv
                    )
                    chain.append(quote)

        chain.sort(key=lambda q: (q.expiration, q.option_type.value, q.strike))
        logger.info(
            f"Synthesized {len(chain)} contracts for {symbol} @ ${spot:.2f} "
            f"(base IV {base_iv:.1%}, {len(strikes)} strikes)"
        )
        return chain

    def _build_quote(
        self,
        symbol: str,
        spot: float,
        strike: float,
        option_type: OptionType,
        expiration: date,
        dte: int,
        base_iv: float,
    ) -> OptionQuote:
        skew = CALL_IV_SKEW if option_type is OptionType.CALL else PUT_IV_SKEW
        iv = max(base_iv + skew, MIN_VOLATILITY)

        theoretical = black_scholes_price(
            spot, strike, dte / DAYS_PER_YEAR, self.risk_free_rate, iv, option_type
        )
        intrinsic = intrinsic_value(spot, strike, option_type)
        time_value = max(0.0, theoretical - intrinsic)
        last = intrinsic + time_value

        half_spread = last * self.spread_pct / 2
        bid = max(0.0, math.floor((last - half_spread) * 100) / 100)
        ask = math.ceil((last + half_spread) * 100) / 100

        moneyness = spot / strike if option_type is OptionType.CALL else strike / spot
        volume = self._synthetic_volume(moneyness, dte, iv)
        open_interest = int(volume * self.rng.uniform(2, 5))

        greeks = self.greeks_calculator.calculate(spot, strike, dte, iv, option_type)

        return OptionQuote(
            underlying_symbol=symbol,
            strike=strike,
            option_type=option_type,
            expiration=expiration,
            days_to_expiration=dte,
            bid=bid,
            ask=ask,
            last=last,
            implied_volatility=iv,
            volume=volume,
            open_interest=open_interest,
            delta=greeks.delta,
            gamma=greeks.gamma,
            theta=greeks.theta,
            vega=greeks.vega,
            intrinsic_value=intrinsic,
            time_value=time_value,
            source=QuoteSource.SIMULATED,
        )

    def _synthetic_volume(self, moneyness: float, dte: int, iv: float) -> int:
        """Draw a contract volume weighted toward ATM, near-term, high-IV options."""
        volume = BASE_VOLUME

        if 0.95 < moneyness < 1.05:
            volume *= 5
        elif 0.90 < moneyness < 1.10:
            volume *= 3

        if dte < 7:
            volume *= 4
        elif dte < 30:
            volume *= 2

        if iv > 0.50:
            volume *= 2

        jittered = volume * self.rng.uniform(0.5, 2.5)
        if self.rng.random() < self.unusual_activity_probability:
            jittered *= self.rng.uniform(*UNUSUAL_ACTIVITY_MULTIPLIER)
        return int(jittered)
