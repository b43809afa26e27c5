"""
Options Scout - option pricing analytics and opportunity scoring.

This package prices European options with Black-Scholes, computes Greeks,
recovers implied volatility, ranks IV against history, synthesizes option
chains and scores contracts with a ten-factor model.

Public API:
    black_scholes_price: Theoretical option price
    GreeksCalculator: Delta, gamma, theta and vega
    ImpliedVolatilitySolver: Newton-Raphson implied volatility
    IVRankCalculator: IV rank, percentile and trading signals
    OptionChainSynthesizer: Deterministic synthetic option chains
    OpportunityScorer: Ten-factor contract scorer
    OpportunityScanner: Multi-symbol scan and ranking
    ScoutSettings / load_settings: Configuration
"""

from .black_scholes import black_scholes_price, calculate_d1_d2, intrinsic_value
from .chain_synthesizer import OptionChainSynthesizer
from .config import ScoutSettings, load_settings
from .exceptions import (
    ConfigurationError,
    ConvergenceWarning,
    InsufficientHistoryError,
    InvalidInputError,
    ScoutError,
)
from .greeks import GreeksCalculator
from .implied_volatility import ImpliedVolatilitySolver, implied_volatility, requote_from_market
from .iv_rank import IVRankCalculator
from .models import (
    CatalystEvent,
    ComponentScores,
    Greeks,
    HistoricalVolatilitySample,
    IVRankResult,
    IVSignal,
    IVSolveResult,
    OptionQuote,
    OptionType,
    PricingInputs,
    RiskLevel,
    ScoredOpportunity,
    SignalAction,
    Timeframe,
)
from .scoring import OpportunityScanner, OpportunityScorer, ScanConfig

__version__ = "0.1.0"

__all__ = [
    # Pricing
    "black_scholes_price",
    "calculate_d1_d2",
    "intrinsic_value",
    "GreeksCalculator",
    "ImpliedVolatilitySolver",
    "implied_volatility",
    "requote_from_market",
    # Volatility
    "IVRankCalculator",
    # Chains and scoring
    "OptionChainSynthesizer",
    "OpportunityScorer",
    "OpportunityScanner",
    "ScanConfig",
    # Models
    "OptionType",
    "Timeframe",
    "RiskLevel",
    "SignalAction",
    "PricingInputs",
    "Greeks",
    "OptionQuote",
    "HistoricalVolatilitySample",
    "IVSolveResult",
    "IVRankResult",
    "IVSignal",
    "ComponentScores",
    "ScoredOpportunity",
    "CatalystEvent",
    # Configuration
    "ScoutSettings",
    "load_settings",
    # Exceptions
    "ScoutError",
    "InvalidInputError",
    "InsufficientHistoryError",
    "ConfigurationError",
    "ConvergenceWarning",
]
