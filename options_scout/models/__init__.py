"""Data models for options pricing and scoring."""

from .catalyst import CatalystEvent
from .enums import (
    TIMEFRAME_DTE_RANGES,
    TIMEFRAME_RETURN_MULTIPLIERS,
    OptionType,
    PositionSide,
    QuoteSource,
    RiskLevel,
    SignalAction,
    Timeframe,
)
from .quote import Greeks, OptionQuote, PricingInputs
from .scoring import ComponentScores, ScoredOpportunity
from .volatility import (
    DebitSpreadTrade,
    HistoricalVolatilitySample,
    IronCondorTrade,
    IVRankResult,
    IVSignal,
    IVSolveResult,
    SuggestedTrade,
)

__all__ = [
    # Enums
    "OptionType",
    "QuoteSource",
    "PositionSide",
    "Timeframe",
    "TIMEFRAME_DTE_RANGES",
    "TIMEFRAME_RETURN_MULTIPLIERS",
    "RiskLevel",
    "SignalAction",
    # Quotes
    "PricingInputs",
    "Greeks",
    "OptionQuote",
    # Volatility
    "HistoricalVolatilitySample",
    "IVSolveResult",
    "IVRankResult",
    "IVSignal",
    "IronCondorTrade",
    "DebitSpreadTrade",
    "SuggestedTrade",
    # Scoring
    "ComponentScores",
    "ScoredOpportunity",
    # Catalysts
    "CatalystEvent",
]
