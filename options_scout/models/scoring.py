"""Opportunity scoring dataclasses."""

from dataclasses import dataclass, field, fields
from typing import Any, Optional

from ..constants import COMPONENT_CAPS
from ..exceptions import InvalidInputError
from .enums import RiskLevel, Timeframe
from .quote import OptionQuote


@dataclass(frozen=True)
class ComponentScores:
    """
    Per-factor points of the composite opportunity score.

    Each field is bounded by its entry in COMPONENT_CAPS; the ten caps
    sum to 110.

    Attributes:
        liquidity: Volume, open interest and spread (0-15)
        volatility: IV level and IV rank (0-15)
        momentum: Delta band and gamma (0-15)
        greeks: Theta, vega and delta quality (0-10)
        technical: Moneyness band plus price-action proxy (0-10)
        flow: Volume/OI ratio and absolute volume (0-10)
        risk_reward: Return potential ladder (0-10)
        probability: Probability of profit ladder (0-10)
        catalyst: Nearby scheduled event (0-5)
        confidence: Count of strong factors plus flow/IV/delta bonuses (0-10)
    """

    liquidity: float = 0.0
    volatility: float = 0.0
    momentum: float = 0.0
    greeks: float = 0.0
    technical: float = 0.0
    flow: float = 0.0
    risk_reward: float = 0.0
    probability: float = 0.0
    catalyst: float = 0.0
    confidence: float = 0.0

    def __post_init__(self) -> None:
        """Validate every component lies within [0, cap]."""
        for f in fields(self):
            value = getattr(self, f.name)
            cap = COMPONENT_CAPS[f.name]
            if not 0 <= value <= cap:
                raise InvalidInputError(f"{f.name} score must be in [0, {cap}], got {value}")

    @property
    def total(self) -> float:
        """Sum of all components, rounded to one decimal."""
        return round(sum(self.as_dict().values()), 1)

    def as_dict(self) -> dict[str, float]:
        return {f.name: getattr(self, f.name) for f in fields(self)}


@dataclass
class ScoredOpportunity:
    """
    A scored option contract with derived trade metrics.

    Attributes:
        quote: The scored contract
        spot_price: Underlying price at scoring time
        timeframe: Holding horizon used for scoring
        component_scores: Per-factor breakdown
        total_score: Sum of components (max 110, not clamped to 100)
        return_potential: Leverage-based return multiple (max 10)
        win_probability: Heuristic win probability in percent (10-85)
        risk_level: Qualitative risk bucket
        reasons: Human-readable notes for each strong factor
        expected_return: return_potential x win_probability / 100
        target_price: Underlying price target for the trade
        stop_loss: Premium level at which to exit
        iv_rank: IV rank used for scoring (None if history was insufficient)
    """

    quote: OptionQuote
    spot_price: float
    timeframe: Timeframe
    component_scores: ComponentScores
    total_score: float
    return_potential: float
    win_probability: float
    risk_level: RiskLevel
    reasons: list[str] = field(default_factory=list)
    expected_return: float = 0.0
    target_price: float = 0.0
    stop_loss: float = 0.0
    iv_rank: Optional[float] = None

    @property
    def symbol(self) -> str:
        return self.quote.underlying_symbol

    @property
    def rank_key(self) -> float:
        """Ranking value: total score weighted by return potential."""
        return self.total_score * self.return_potential

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "symbol": self.symbol,
            "strike": self.quote.strike,
            "option_type": self.quote.option_type.value,
            "expiration": self.quote.expiration.isoformat(),
            "days_to_expiration": self.quote.days_to_expiration,
            "premium": round(self.quote.last, 2),
            "cost_per_contract": round(self.quote.cost_per_contract, 2),
            "spot_price": round(self.spot_price, 2),
            "timeframe": self.timeframe.value,
            "total_score": self.total_score,
            "component_scores": self.component_scores.as_dict(),
            "return_potential": round(self.return_potential, 2),
            "win_probability": round(self.win_probability, 1),
            "risk_level": self.risk_level.value,
            "expected_return": round(self.expected_return, 2),
            "target_price": round(self.target_price, 2),
            "stop_loss": round(self.stop_loss, 2),
            "iv_rank": round(self.iv_rank, 2) if self.iv_rank is not None else None,
            "reasons": list(self.reasons),
        }
