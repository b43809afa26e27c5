"""Volatility history, implied volatility and IV rank dataclasses."""

from dataclasses import dataclass
from datetime import date as date_type
from typing import Any, Optional, Union

from ..constants import CONTRACT_MULTIPLIER
from ..utils.validation import require_non_negative
from .enums import SignalAction


@dataclass(frozen=True)
class HistoricalVolatilitySample:
    """
    One observation in a volatility history series.

    Attributes:
        date: Observation date
        volatility: Annualized volatility on that date (decimal)
    """

    date: date_type
    volatility: float

    def __post_init__(self) -> None:
        if isinstance(self.date, str):
            object.__setattr__(self, "date", date_type.fromisoformat(self.date))
        require_non_negative(self.volatility, "volatility")

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {"date": self.date.isoformat(), "volatility": round(self.volatility, 4)}


@dataclass
class IVSolveResult:
    """
    Outcome of an implied volatility solve.

    Attributes:
        volatility: Best estimate of implied volatility (decimal)
        converged: True when the model price matched within tolerance
        iterations: Newton-Raphson iterations performed
        price_error: Model price minus observed price at the final sigma
        reason: "converged", "max_iterations", "zero_vega" or "below_intrinsic"
    """

    volatility: float
    converged: bool
    iterations: int
    price_error: float
    reason: str

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "volatility": round(self.volatility, 6),
            "volatility_pct": round(self.volatility * 100, 2),
            "converged": self.converged,
            "iterations": self.iterations,
            "price_error": self.price_error,
            "reason": self.reason,
        }


@dataclass
class IVRankResult:
    """
    IV rank and percentile for a current volatility against its history.

    Attributes:
        current_volatility: Volatility being ranked (decimal)
        iv_rank: Position within the historical min-max range (0-100)
        iv_percentile: Share of history strictly below current (0-100)
        sample_count: Number of historical samples used
        sufficient_history: False when too few samples were available
    """

    current_volatility: float
    iv_rank: Optional[float]
    iv_percentile: Optional[float]
    sample_count: int
    sufficient_history: bool

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "current_volatility": round(self.current_volatility, 4),
            "iv_rank": round(self.iv_rank, 2) if self.iv_rank is not None else None,
            "iv_percentile": round(self.iv_percentile, 2)
            if self.iv_percentile is not None
            else None,
            "sample_count": self.sample_count,
            "sufficient_history": self.sufficient_history,
        }


@dataclass
class IronCondorTrade:
    """
    Suggested short iron condor around one standard deviation.

    Prices are per share; max_profit and max_loss are per contract.

    Attributes:
        days_to_expiration: Target DTE
        long_put: Protective put strike
        short_put: Sold put strike
        short_call: Sold call strike
        long_call: Protective call strike
        width: Average wing width
        credit: Estimated net credit per share
        breakevens: (lower, upper) underlying prices at expiration
        probability_of_profit: Approximate POP in percent
    """

    days_to_expiration: int
    long_put: float
    short_put: float
    short_call: float
    long_call: float
    width: float
    credit: float
    breakevens: tuple[float, float]
    probability_of_profit: float

    strategy = "Iron Condor"

    @property
    def max_profit(self) -> float:
        return self.credit * CONTRACT_MULTIPLIER

    @property
    def max_loss(self) -> float:
        return (self.width - self.credit) * CONTRACT_MULTIPLIER

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "strategy": self.strategy,
            "days_to_expiration": self.days_to_expiration,
            "strikes": {
                "long_put": self.long_put,
                "short_put": self.short_put,
                "short_call": self.short_call,
                "long_call": self.long_call,
            },
            "width": round(self.width, 2),
            "credit": round(self.credit, 2),
            "max_profit": round(self.max_profit, 2),
            "max_loss": round(self.max_loss, 2),
            "breakevens": [round(b, 2) for b in self.breakevens],
            "probability_of_profit": self.probability_of_profit,
        }


@dataclass
class DebitSpreadTrade:
    """
    Suggested call debit spread for a volatility expansion play.

    Attributes:
        days_to_expiration: Target DTE
        long_strike: Bought call strike
        short_strike: Sold call strike
        width: Distance between strikes
        debit: Estimated net debit per share
        breakeven: Underlying price at expiration where the spread breaks even
    """

    days_to_expiration: int
    long_strike: float
    short_strike: float
    width: float
    debit: float
    breakeven: float

    strategy = "Call Debit Spread"

    @property
    def max_profit(self) -> float:
        return (self.width - self.debit) * CONTRACT_MULTIPLIER

    @property
    def max_loss(self) -> float:
        return self.debit * CONTRACT_MULTIPLIER

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "strategy": self.strategy,
            "days_to_expiration": self.days_to_expiration,
            "strikes": {"long": self.long_strike, "short": self.short_strike},
            "width": round(self.width, 2),
            "debit": round(self.debit, 2),
            "max_profit": round(self.max_profit, 2),
            "max_loss": round(self.max_loss, 2),
            "breakeven": round(self.breakeven, 2),
        }


SuggestedTrade = Union[IronCondorTrade, DebitSpreadTrade]


@dataclass
class IVSignal:
    """
    Mean-reversion trade idea derived from IV rank.

    Attributes:
        symbol: Underlying ticker
        action: SELL premium, BUY premium or WAIT
        confidence: Signal confidence (0-95)
        strategy: Suggested structure, e.g. "Iron Condor" (None for WAIT)
        reasoning: Human-readable explanation
        iv_rank: IV rank the signal was generated from
        current_volatility: Implied volatility that was ranked (decimal)
        spot: Underlying price when the signal was generated
        trade: Concrete strikes for the suggested structure, when known
    """

    symbol: str
    action: SignalAction
    confidence: float
    strategy: Optional[str]
    reasoning: str
    iv_rank: float
    current_volatility: Optional[float] = None
    spot: Optional[float] = None
    trade: Optional[SuggestedTrade] = None

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "symbol": self.symbol,
            "action": self.action.value,
            "confidence": round(self.confidence, 1),
            "strategy": self.strategy,
            "reasoning": self.reasoning,
            "iv_rank": round(self.iv_rank, 2),
            "current_volatility": round(self.current_volatility, 4)
            if self.current_volatility is not None
            else None,
            "spot": self.spot,
            "trade": self.trade.to_dict() if self.trade else None,
        }
