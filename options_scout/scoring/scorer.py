"""
Ten-factor opportunity scorer.

Scores a single option contract on liquidity, volatility, momentum,
Greeks, technical setup, order flow, risk/reward, probability of profit,
catalysts and aggregate confidence. Component caps sum to 110 and the
total is reported unclamped.

Example:
    scorer = OpportunityScorer(seed=42)
    opportunity = scorer.score(quote, spot_price=185.50, timeframe=Timeframe.MEDIUM)
    print(f"{opportunity.total_score}/110 - {opportunity.risk_level.value}")
"""

import logging
import random
from collections.abc import Iterable
from typing import Optional, Union

from ..constants import DAILY_VOLATILITY_PROXY
from ..exceptions import InvalidInputError
from ..iv_rank import IVRankCalculator, VolatilitySeries
from ..models import (
    CatalystEvent,
    ComponentScores,
    OptionQuote,
    PositionSide,
    ScoredOpportunity,
    Timeframe,
)
from ..risk_metrics import (
    expected_return,
    probability_of_profit,
    return_potential,
    risk_level,
    stop_loss,
    target_price,
    win_probability,
)
from ..utils.validation import require_positive
from .components import (
    COMPONENT_REASONS,
    catalyst_score,
    confidence_score,
    flow_score,
    greeks_score,
    liquidity_score,
    momentum_score,
    probability_score,
    risk_reward_score,
    strong_components,
    technical_score,
    volatility_score,
)

logger = logging.getLogger(__name__)


class OpportunityScorer:
    """
    Composite scorer for individual option contracts.

    The scorer does not raise on thin or odd quote data (zero volume, zero
    open interest, zero price); such contracts simply score low. Missing
    or insufficient volatility history falls back to a neutral IV rank.

    Attributes:
        rng: Random source for the technical price-action proxy
        iv_rank_calculator: Calculator used to rank IV against history
        daily_volatility: Daily move proxy for probability of profit
    """

    def __init__(
        self,
        rng: Optional[random.Random] = None,
        seed: Optional[int] = None,
        iv_rank_calculator: Optional[IVRankCalculator] = None,
        daily_volatility: float = DAILY_VOLATILITY_PROXY,
    ):
        """
        Initialize the scorer.

        Args:
            rng: Random source (takes precedence over seed)
            seed: Seed for a new random.Random when rng is not given
            iv_rank_calculator: IV rank calculator (default: 30-sample minimum)
            daily_volatility: Daily move proxy (default: 1%)
        """
        self.rng = rng if rng is not None else random.Random(seed)
        self.iv_rank_calculator = iv_rank_calculator or IVRankCalculator()
        self.daily_volatility = daily_volatility

    def score(
        self,
        quote: OptionQuote,
        spot_price: float,
        timeframe: Union[Timeframe, str],
        history: Optional[VolatilitySeries] = None,
        catalysts: Optional[Iterable[CatalystEvent]] = None,
        momentum_signal: Optional[float] = None,
    ) -> ScoredOpportunity:
        """
        Score one contract.

        Args:
            quote: Contract to score
            spot_price: Current underlying price
            timeframe: Holding horizon (short, medium, long)
            history: Volatility history for IV rank (optional)
            catalysts: Events for the underlying (optional)
            momentum_signal: Price-action reading in [0, 10]; drawn from the
                scorer's random source when not given

        Returns:
            ScoredOpportunity with component breakdown and derived metrics

        Raises:
            InvalidInputError: If spot_price is non-positive or the momentum
                signal is outside [0, 10]
        """
        spot_price = require_positive(spot_price, "spot_price")
        timeframe = Timeframe.parse(timeframe)
        if momentum_signal is None:
            momentum_signal = self.rng.uniform(0, 10)
        elif not 0 <= momentum_signal <= 10:
            raise InvalidInputError(f"momentum_signal must be in [0, 10], got {momentum_signal}")

        iv_rank = None
        if history is not None:
            iv_rank = self.iv_rank_calculator.iv_rank(quote.implied_volatility, history)

        potential = return_potential(quote.delta, timeframe)
        pop = probability_of_profit(
            spot_price,
            quote.strike,
            quote.last,
            quote.option_type,
            quote.days_to_expiration,
            side=PositionSide.LONG,
            daily_volatility=self.daily_volatility,
        )

        scores = {
            "liquidity": liquidity_score(quote),
            "volatility": volatility_score(quote, iv_rank),
            "momentum": momentum_score(quote),
            "greeks": greeks_score(quote, timeframe),
            "technical": technical_score(quote, spot_price, momentum_signal),
            "flow": flow_score(quote),
            "risk_reward": risk_reward_score(potential),
            "probability": probability_score(pop),
            "catalyst": catalyst_score(catalysts or (), quote.days_to_expiration),
        }
        strong = strong_components(scores)
        scores["confidence"] = confidence_score(len(strong), quote)

        components = ComponentScores(**scores)
        total = components.total
        win_prob = win_probability(total, quote.delta, timeframe)

        logger.debug(
            f"Scored {quote.underlying_symbol} {quote.strike} {quote.option_type.value} "
            f"{quote.expiration}: {total}/110 ({', '.join(strong) or 'no strong factors'})"
        )

        return ScoredOpportunity(
            quote=quote,
            spot_price=spot_price,
            timeframe=timeframe,
            component_scores=components,
            total_score=total,
            return_potential=potential,
            win_probability=win_prob,
            risk_level=risk_level(quote.days_to_expiration, quote.delta),
            reasons=[COMPONENT_REASONS[name] for name in strong],
            expected_return=expected_return(potential, win_prob),
            target_price=target_price(spot_price, potential, quote.option_type),
            stop_loss=stop_loss(quote.last),
            iv_rank=iv_rank,
        )
