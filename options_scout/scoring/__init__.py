"""
Opportunity scoring and scanning.

This package scores individual option contracts with a ten-factor model
(liquidity, volatility, momentum, Greeks, technical, flow, risk/reward,
probability, catalyst, confidence) and scans symbols for the best
low-cost, high-return contracts.

Example:
    from options_scout.scoring import OpportunityScanner, ScanConfig
    from options_scout.providers import SimulatedMarketDataProvider

    scanner = OpportunityScanner(ScanConfig(timeframe="short"), seed=42)
    picks = scanner.scan(["AAPL", "TSLA"], SimulatedMarketDataProvider(seed=42))
"""

from .formatters import (
    build_payload,
    build_signal_payload,
    format_signal_table,
    format_table,
    signals_to_json,
    to_json,
)
from .scanner import OpportunityScanner, ScanConfig
from .scorer import OpportunityScorer

__all__ = [
    "OpportunityScorer",
    "OpportunityScanner",
    "ScanConfig",
    "build_payload",
    "build_signal_payload",
    "format_signal_table",
    "format_table",
    "signals_to_json",
    "to_json",
]
