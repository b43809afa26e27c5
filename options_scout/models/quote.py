"""Option quote, pricing input and Greeks dataclasses."""

from dataclasses import dataclass, replace
from datetime import date
from typing import Any, Optional

from ..constants import CONTRACT_MULTIPLIER
from ..exceptions import InvalidInputError
from ..utils.validation import require_non_negative, require_positive
from .enums import OptionType, QuoteSource

# Float slack for the bid <= last <= ask and last == intrinsic + time checks
PRICE_TOLERANCE = 1e-9


@dataclass(frozen=True)
class PricingInputs:
    """
    Inputs to a single Black-Scholes evaluation.

    Attributes:
        spot: Underlying price
        strike: Strike price
        time_to_expiration_years: Time to expiry in years (0 means expired)
        risk_free_rate: Annualized risk-free rate (decimal)
        volatility: Annualized volatility (decimal)
        option_type: CALL or PUT
    """

    spot: float
    strike: float
    time_to_expiration_years: float
    risk_free_rate: float
    volatility: float
    option_type: OptionType

    def __post_init__(self) -> None:
        """Validate pricing inputs."""
        require_positive(self.spot, "spot")
        require_positive(self.strike, "strike")
        require_non_negative(self.time_to_expiration_years, "time_to_expiration_years")
        require_positive(self.volatility, "volatility")
        object.__setattr__(self, "option_type", OptionType.parse(self.option_type))


@dataclass(frozen=True)
class Greeks:
    """
    First- and second-order sensitivities of an option price.

    Attributes:
        delta: dPrice/dSpot, in [0, 1] for calls and [-1, 0] for puts
        gamma: dDelta/dSpot
        theta: Price change per calendar day
        vega: Price change per 1 percentage point of volatility
    """

    delta: float
    gamma: float
    theta: float
    vega: float

    def to_dict(self) -> dict[str, float]:
        """Convert to dictionary for serialization."""
        return {
            "delta": round(self.delta, 4),
            "gamma": round(self.gamma, 4),
            "theta": round(self.theta, 4),
            "vega": round(self.vega, 4),
        }


@dataclass(frozen=True)
class OptionQuote:
    """
    A single option contract with market fields and model Greeks.

    Quotes are immutable; re-pricing goes through with_market_data()
    or dataclasses.replace(), which return a new quote.

    Attributes:
        underlying_symbol: Ticker of the underlying
        strike: Strike price
        option_type: CALL or PUT
        expiration: Expiration date
        days_to_expiration: Calendar days until expiration
        bid: Bid price (0 when there is no bid)
        ask: Ask price
        last: Last/theoretical price, the reference for cost and spread
        implied_volatility: Annualized IV as a decimal (0.30 = 30%)
        volume: Contracts traded
        open_interest: Open contracts
        delta: Option delta
        gamma: Option gamma
        theta: Per-day theta
        vega: Vega per 1 vol point
        intrinsic_value: Exercise value at the current spot
        time_value: last minus intrinsic_value
        source: SIMULATED or MARKET
        iv_converged: False when the IV came from a non-converged solve
    """

    underlying_symbol: str
    strike: float
    option_type: OptionType
    expiration: date
    days_to_expiration: int
    bid: float
    ask: float
    last: float
    implied_volatility: float
    volume: int
    open_interest: int
    delta: float
    gamma: float
    theta: float
    vega: float
    intrinsic_value: float
    time_value: float
    source: QuoteSource = QuoteSource.SIMULATED
    iv_converged: bool = True

    def __post_init__(self) -> None:
        """Normalize enum/date fields and validate quote consistency."""
        object.__setattr__(self, "option_type", OptionType.parse(self.option_type))
        if isinstance(self.expiration, str):
            object.__setattr__(self, "expiration", date.fromisoformat(self.expiration))

        require_positive(self.strike, "strike")
        require_positive(self.implied_volatility, "implied_volatility")
        require_non_negative(self.days_to_expiration, "days_to_expiration")
        for name in ("bid", "ask", "last", "volume", "open_interest", "intrinsic_value"):
            require_non_negative(getattr(self, name), name)

        if self.bid > 0 and self.ask > 0:
            if not (
                self.bid <= self.last + PRICE_TOLERANCE
                and self.last <= self.ask + PRICE_TOLERANCE
            ):
                raise InvalidInputError(
                    f"Quote must satisfy bid <= last <= ask, "
                    f"got bid={self.bid}, last={self.last}, ask={self.ask}"
                )

        if not -1.0 <= self.delta <= 1.0:
            raise InvalidInputError(f"delta must be in [-1, 1], got {self.delta}")
        if self.gamma < 0:
            raise InvalidInputError(f"gamma cannot be negative, got {self.gamma}")
        if self.vega < 0:
            raise InvalidInputError(f"vega cannot be negative, got {self.vega}")
        if self.time_value < -PRICE_TOLERANCE:
            raise InvalidInputError(f"time_value cannot be negative, got {self.time_value}")

        if abs(self.intrinsic_value + self.time_value - self.last) > PRICE_TOLERANCE * max(
            1.0, self.last
        ):
            raise InvalidInputError(
                f"last ({self.last}) must equal intrinsic_value ({self.intrinsic_value}) "
                f"+ time_value ({self.time_value})"
            )

    @property
    def is_call(self) -> bool:
        return self.option_type is OptionType.CALL

    @property
    def mid(self) -> float:
        """Midpoint of bid and ask."""
        return (self.bid + self.ask) / 2

    @property
    def spread_pct(self) -> Optional[float]:
        """
        Bid-ask spread as a fraction of last.

        Returns None when last is zero, since the spread cannot be
        expressed relative to a zero price.
        """
        if self.last <= 0:
            return None
        return (self.ask - self.bid) / self.last

    @property
    def cost_per_contract(self) -> float:
        """Premium for one contract (last x 100 shares)."""
        return self.last * CONTRACT_MULTIPLIER

    @property
    def greeks(self) -> Greeks:
        return Greeks(delta=self.delta, gamma=self.gamma, theta=self.theta, vega=self.vega)

    def moneyness(self, spot: float) -> float:
        """
        Moneyness ratio, above 1.0 when in the money.

        Args:
            spot: Current underlying price

        Returns:
            spot/strike for calls, strike/spot for puts
        """
        spot = require_positive(spot, "spot")
        if self.is_call:
            return spot / self.strike
        return self.strike / spot

    def with_market_data(
        self,
        *,
        bid: float,
        ask: float,
        last: float,
        implied_volatility: float,
        greeks: Greeks,
        iv_converged: bool = True,
        volume: Optional[int] = None,
        open_interest: Optional[int] = None,
        intrinsic_value: Optional[float] = None,
    ) -> "OptionQuote":
        """
        Return a copy re-priced from observed market data.

        time_value is recomputed as last minus intrinsic value (the new
        one when given, else the existing one) so the price decomposition
        stays consistent.
        """
        intrinsic = self.intrinsic_value if intrinsic_value is None else intrinsic_value
        return replace(
            self,
            bid=bid,
            ask=ask,
            last=last,
            implied_volatility=implied_volatility,
            delta=greeks.delta,
            gamma=greeks.gamma,
            theta=greeks.theta,
            vega=greeks.vega,
            intrinsic_value=intrinsic,
            time_value=last - intrinsic,
            volume=self.volume if volume is None else volume,
            open_interest=self.open_interest if open_interest is None else open_interest,
            source=QuoteSource.MARKET,
            iv_converged=iv_converged,
        )

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "underlying_symbol": self.underlying_symbol,
            "strike": self.strike,
            "option_type": self.option_type.value,
            "expiration": self.expiration.isoformat(),
            "days_to_expiration": self.days_to_expiration,
            "bid": round(self.bid, 2),
            "ask": round(self.ask, 2),
            "last": round(self.last, 4),
            "implied_volatility": round(self.implied_volatility, 4),
            "implied_volatility_pct": round(self.implied_volatility * 100, 2),
            "volume": self.volume,
            "open_interest": self.open_interest,
            "delta": round(self.delta, 4),
            "gamma": round(self.gamma, 4),
            "theta": round(self.theta, 4),
            "vega": round(self.vega, 4),
            "intrinsic_value": round(self.intrinsic_value, 4),
            "time_value": round(self.time_value, 4),
            "source": self.source.value,
            "iv_converged": self.iv_converged,
        }


