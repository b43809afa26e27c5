"""
Output formatting for scored opportunities and IV rank signals.

Turns ranked ScoredOpportunity and IVSignal lists into JSON-ready
payloads and fixed-width text lines for the command-line consumer.
"""

import json
from collections.abc import Sequence
from datetime import datetime
from typing import Any, Optional

from ..constants import MAX_TOTAL_SCORE
from ..models import DebitSpreadTrade, IronCondorTrade, IVSignal, ScoredOpportunity

TABLE_HEADER = (
    f"{'#':>3} {'SYMBOL':<6} {'TYPE':<4} {'STRIKE':>8} {'EXPIRY':<10} {'DTE':>4} "
    f"{'COST':>8} {'SCORE':>6} {'RET':>5} {'WIN%':>5} {'RISK':<11}"
)

SIGNAL_TABLE_HEADER = (
    f"{'SYMBOL':<6} {'ACTION':<6} {'CONF':>5} {'RANK':>5} {'ATM IV':>7} {'TRADE':<32}"
)


def build_payload(
    opportunities: Sequence[ScoredOpportunity],
    generated_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """
    Build a serializable scan report.

    Args:
        opportunities: Ranked opportunities
        generated_at: Report timestamp (default: now)

    Returns:
        Dict with metadata and one entry per opportunity
    """
    generated_at = generated_at or datetime.now()
    timeframes = sorted({o.timeframe.value for o in opportunities})
    return {
        "generated_at": generated_at.isoformat(timespec="seconds"),
        "count": len(opportunities),
        "timeframes": timeframes,
        "symbols": sorted({o.symbol for o in opportunities}),
        "max_score": MAX_TOTAL_SCORE,
        "opportunities": [
            {"rank": i, **o.to_dict()} for i, o in enumerate(opportunities, start=1)
        ],
    }


def to_json(
    opportunities: Sequence[ScoredOpportunity],
    generated_at: Optional[datetime] = None,
    indent: Optional[int] = 2,
) -> str:
    """Serialize a scan report to JSON."""
    return json.dumps(build_payload(opportunities, generated_at), indent=indent)


def format_table_row(rank: int, opportunity: ScoredOpportunity) -> str:
    """Format one opportunity as a fixed-width text row matching TABLE_HEADER."""
    q = opportunity.quote
    return (
        f"{rank:>3} {q.underlying_symbol:<6} {q.option_type.value.upper():<4} "
        f"{q.strike:>8.2f} {q.expiration.isoformat():<10} {q.days_to_expiration:>4} "
        f"{q.cost_per_contract:>8.2f} {opportunity.total_score:>6.1f} "
        f"{opportunity.return_potential:>5.1f} {opportunity.win_probability:>5.1f} "
        f"{opportunity.risk_level.value:<11}"
    )


def format_table(opportunities: Sequence[ScoredOpportunity]) -> list[str]:
    """Header plus one row per opportunity."""
    return [TABLE_HEADER] + [
        format_table_row(i, o) for i, o in enumerate(opportunities, start=1)
    ]


def build_signal_payload(
    signals: Sequence[IVSignal],
    generated_at: Optional[datetime] = None,
) -> dict[str, Any]:
    """Build a serializable IV rank signal report."""
    generated_at = generated_at or datetime.now()
    return {
        "generated_at": generated_at.isoformat(timespec="seconds"),
        "count": len(signals),
        "signals": [s.to_dict() for s in signals],
    }


def signals_to_json(
    signals: Sequence[IVSignal],
    generated_at: Optional[datetime] = None,
    indent: Optional[int] = 2,
) -> str:
    """Serialize an IV rank signal report to JSON."""
    return json.dumps(build_signal_payload(signals, generated_at), indent=indent)


def _describe_trade(signal: IVSignal) -> str:
    trade = signal.trade
    if isinstance(trade, IronCondorTrade):
        return (
            f"IC {trade.long_put:g}/{trade.short_put:g}/{trade.short_call:g}/"
            f"{trade.long_call:g} cr {trade.credit:.2f}"
        )
    if isinstance(trade, DebitSpreadTrade):
        return f"CDS {trade.long_strike:g}/{trade.short_strike:g} db {trade.debit:.2f}"
    return "-"


def format_signal_row(signal: IVSignal) -> str:
    """Format one signal as a fixed-width text row matching SIGNAL_TABLE_HEADER."""
    iv = "-" if signal.current_volatility is None else f"{signal.current_volatility:.1%}"
    return (
        f"{signal.symbol:<6} {signal.action.value:<6} {signal.confidence:>5.1f} "
        f"{signal.iv_rank:>5.1f} {iv:>7} {_describe_trade(signal):<32}"
    )


def format_signal_table(signals: Sequence[IVSignal]) -> list[str]:
    """Header plus one row per signal."""
    return [SIGNAL_TABLE_HEADER] + [format_signal_row(s) for s in signals]
