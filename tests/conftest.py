"""Shared fixtures for options_scout tests."""

from datetime import date, timedelta

import pytest

from options_scout.models import HistoricalVolatilitySample, OptionQuote, OptionType

TODAY = date(2026, 1, 14)  # a Wednesday


def build_quote(**overrides) -> OptionQuote:
    """Build a valid at-the-money 30 DTE call, overriding any field."""
    dte = overrides.pop("days_to_expiration", 30)
    fields = {
        "underlying_symbol": "AAPL",
        "strike": 100.0,
        "option_type": OptionType.CALL,
        "expiration": TODAY + timedelta(days=dte),
        "days_to_expiration": dte,
        "bid": 3.60,
        "ask": 3.66,
        "last": 3.63,
        "implied_volatility": 0.30,
        "volume": 1500,
        "open_interest": 6000,
        "delta": 0.54,
        "gamma": 0.046,
        "theta": -0.064,
        "vega": 0.114,
        "intrinsic_value": 0.0,
    }
    fields.update(overrides)
    fields.setdefault("time_value", fields["last"] - fields["intrinsic_value"])
    return OptionQuote(**fields)


@pytest.fixture
def today() -> date:
    """Fixed reference date."""
    return TODAY


@pytest.fixture
def atm_call() -> OptionQuote:
    """At-the-money 30 DTE call on a $100 underlying."""
    return build_quote()


@pytest.fixture
def quote_factory():
    """Factory for quotes with field overrides."""
    return build_quote


@pytest.fixture
def volatility_history() -> list[HistoricalVolatilitySample]:
    """60 daily samples rising linearly from 20% to 49.5%."""
    start = TODAY - timedelta(days=60)
    return [
        HistoricalVolatilitySample(date=start + timedelta(days=i), volatility=0.20 + i * 0.005)
        for i in range(60)
    ]
