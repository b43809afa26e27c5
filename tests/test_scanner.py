"""Tests for the multi-symbol opportunity scanner."""

import logging

import pytest

from options_scout.exceptions import InvalidInputError
from options_scout.models import DebitSpreadTrade, IronCondorTrade, SignalAction, Timeframe
from options_scout.providers import SimulatedMarketDataProvider
from options_scout.scoring import OpportunityScanner, ScanConfig

BASE_PRICES = {"AAPL": 50.0, "MSFT": 80.0, "F": 12.0}


@pytest.fixture
def provider(today) -> SimulatedMarketDataProvider:
    """Simulated provider with fixed spot prices."""
    return SimulatedMarketDataProvider(seed=11, today=today, base_prices=BASE_PRICES)


@pytest.fixture
def open_config() -> ScanConfig:
    """Medium timeframe with no score floor."""
    return ScanConfig(timeframe=Timeframe.MEDIUM, min_score=0)


class NoSpotProvider(SimulatedMarketDataProvider):
    """Simulated provider with no spot price for one symbol."""

    def get_spot_price(self, symbol):
        if symbol.upper() == "GONE":
            return None
        return super().get_spot_price(symbol)


class BrokenChainProvider(SimulatedMarketDataProvider):
    """Simulated provider whose chain for one symbol fails validation."""

    def get_option_chain(self, symbol):
        if symbol.upper() == "BAD":
            raise InvalidInputError("strike must be positive, got -1")
        return super().get_option_chain(symbol)


class FixedHistoryProvider(SimulatedMarketDataProvider):
    """Simulated provider with hand-picked volatility histories."""

    HISTORIES = {
        "HIGH": [0.05 + i * 0.0002 for i in range(252)],
        "LOW": [1.0 + i * 0.004 for i in range(252)],
        "MID": [i / 251 for i in range(252)],
        "SHORT": [0.3] * 5,
    }

    def get_volatility_history(self, symbol):
        return self.HISTORIES.get(symbol.upper())


class ChainOnlyProvider:
    """Provider with spot prices and chains but no volatility history."""

    def __init__(self, inner):
        self._inner = inner

    def get_spot_price(self, symbol):
        return self._inner.get_spot_price(symbol)

    def get_option_chain(self, symbol):
        return self._inner.get_option_chain(symbol)


class TestScanConfig:
    """Tests for ScanConfig validation."""

    def test_defaults(self):
        config = ScanConfig()
        assert config.timeframe is Timeframe.MEDIUM
        assert config.min_score == 75.0
        assert config.min_cost == 10.0
        assert config.max_cost == 500.0
        assert config.limit == 50
        assert config.max_workers == 1

    def test_timeframe_string(self):
        assert ScanConfig(timeframe="LONG").timeframe is Timeframe.LONG

    @pytest.mark.parametrize(
        "kwargs,message",
        [
            ({"min_cost": -1}, "min_cost"),
            ({"min_cost": 100, "max_cost": 50}, "max_cost"),
            ({"limit": 0}, "limit"),
            ({"max_workers": 0}, "max_workers"),
        ],
    )
    def test_invalid(self, kwargs, message):
        with pytest.raises(InvalidInputError, match=message):
            ScanConfig(**kwargs)


class TestFilterCandidates:
    """Tests for DTE window and budget filtering."""

    def test_dte_window(self, quote_factory):
        """Only contracts inside the timeframe's DTE window survive."""
        scanner = OpportunityScanner(ScanConfig(timeframe=Timeframe.SHORT))
        chain = [quote_factory(days_to_expiration=d) for d in (0, 1, 7, 8, 30)]
        assert [q.days_to_expiration for q in scanner.filter_candidates(chain)] == [1, 7]

    def test_budget(self, quote_factory):
        """Premium per contract must lie within min_cost and max_cost."""
        scanner = OpportunityScanner(ScanConfig(min_cost=50, max_cost=400))
        chain = [
            quote_factory(last=0.40, bid=0.39, ask=0.41),
            quote_factory(),
            quote_factory(last=4.50, bid=4.45, ask=4.55),
        ]
        assert [q.last for q in scanner.filter_candidates(chain)] == [3.63]


class TestScanSymbol:
    """Tests for single-symbol scans."""

    def test_provided_chain(self, open_config, atm_call, quote_factory):
        """A provided chain is scored and ranked by score x return potential."""
        scanner = OpportunityScanner(open_config, seed=1)
        otm = quote_factory(strike=105.0, delta=0.30, last=1.50, bid=1.48, ask=1.52)
        results = scanner.scan_symbol("aapl", 100.0, chain=[atm_call, otm])
        assert len(results) == 2
        assert [r.rank_key for r in results] == sorted(
            (r.rank_key for r in results), reverse=True
        )
        assert all(r.symbol == "AAPL" for r in results)

    def test_min_score_filters(self, atm_call):
        """Scores below min_score are dropped."""
        scanner = OpportunityScanner(ScanConfig(min_score=100), seed=1)
        assert scanner.scan_symbol("AAPL", 100.0, chain=[atm_call]) == []

    def test_synthesizes_missing_chain(self, open_config, today):
        """Without a chain one is synthesized for the symbol."""
        scanner = OpportunityScanner(open_config, seed=5, today=today)
        results = scanner.scan_symbol("MSFT", 80.0)
        assert results
        for r in results:
            assert 8 <= r.quote.days_to_expiration <= 30
            assert 10 <= r.quote.cost_per_contract <= 500

    def test_logs_counts(self, open_config, atm_call, caplog):
        """Per-symbol counts are logged."""
        scanner = OpportunityScanner(open_config, seed=1)
        with caplog.at_level(logging.INFO, logger="options_scout.scoring.scanner"):
            scanner.scan_symbol("AAPL", 100.0, chain=[atm_call])
        assert "AAPL: 1 contracts, 1 in window/budget, 1 scored" in caplog.text


class TestScan:
    """Tests for multi-symbol scans through a provider."""

    def test_ranked_across_symbols(self, open_config, provider, today):
        """Results from all symbols are merged and ranked."""
        scanner = OpportunityScanner(open_config, seed=3, today=today)
        results = scanner.scan(["AAPL", "MSFT", "F"], provider)
        assert results
        keys = [r.rank_key for r in results]
        assert keys == sorted(keys, reverse=True)
        assert {r.symbol for r in results} <= {"AAPL", "MSFT", "F"}

    def test_reproducible(self, open_config, provider, today):
        """The same seed gives the same ranking."""
        first = OpportunityScanner(open_config, seed=3, today=today).scan(["AAPL", "F"], provider)
        second = OpportunityScanner(open_config, seed=3, today=today).scan(["AAPL", "F"], provider)
        assert [o.to_dict() for o in first] == [o.to_dict() for o in second]

    def test_thread_pool_matches_sequential(self, provider, today):
        """Parallel scans rank identically to sequential scans."""
        symbols = ["AAPL", "MSFT", "F"]
        sequential = OpportunityScanner(ScanConfig(min_score=0), seed=9, today=today)
        parallel = OpportunityScanner(ScanConfig(min_score=0, max_workers=4), seed=9, today=today)
        assert [o.to_dict() for o in sequential.scan(symbols, provider)] == [
            o.to_dict() for o in parallel.scan(symbols, provider)
        ]

    def test_order_independent(self, open_config, provider, today):
        """Symbol order does not change the ranking."""
        scanner = OpportunityScanner(open_config, seed=3, today=today)
        forward = scanner.scan(["AAPL", "MSFT"], provider)
        backward = scanner.scan(["MSFT", "AAPL"], provider)
        assert [o.to_dict() for o in forward] == [o.to_dict() for o in backward]

    def test_limit(self, provider, today):
        """At most limit opportunities are returned."""
        scanner = OpportunityScanner(ScanConfig(min_score=0, limit=5), seed=3, today=today)
        assert len(scanner.scan(["AAPL", "MSFT"], provider)) == 5

    def test_duplicate_symbols(self, open_config, provider, today):
        """Repeated symbols are scanned once."""
        scanner = OpportunityScanner(open_config, seed=3, today=today)
        once = scanner.scan(["AAPL"], provider)
        twice = scanner.scan(["AAPL", "aapl"], provider)
        assert len(once) == len(twice)

    def test_missing_spot_skipped(self, open_config, today, caplog):
        """A symbol without a spot price is skipped with a warning."""
        provider = NoSpotProvider(seed=11, today=today, base_prices=BASE_PRICES)
        scanner = OpportunityScanner(open_config, seed=3, today=today)
        with caplog.at_level(logging.WARNING):
            results = scanner.scan(["GONE", "AAPL"], provider)
        assert results
        assert "No spot price for GONE" in caplog.text
        assert "GONE" not in {r.symbol for r in results}

    def test_invalid_data_skipped(self, open_config, today, caplog):
        """A symbol whose data fails validation is skipped."""
        provider = BrokenChainProvider(seed=11, today=today, base_prices=BASE_PRICES)
        scanner = OpportunityScanner(open_config, seed=3, today=today)
        with caplog.at_level(logging.WARNING):
            results = scanner.scan(["BAD", "F"], provider)
        assert {r.symbol for r in results} == {"F"}
        assert "Skipping BAD" in caplog.text

    def test_high_floor_returns_nothing(self, provider, today):
        """A floor above the ceiling leaves nothing."""
        scanner = OpportunityScanner(ScanConfig(min_score=111), seed=3, today=today)
        assert scanner.scan(["AAPL", "MSFT"], provider) == []


class TestScanSignals:
    """Tests for the IV rank signal scan."""

    SYMBOLS = ["MID", "LOW", "HIGH", "SHORT"]

    @pytest.fixture
    def history_provider(self, today) -> FixedHistoryProvider:
        """Provider whose histories put HIGH above, LOW below and MID inside the range."""
        return FixedHistoryProvider(
            seed=5, today=today, base_prices={s: 100.0 for s in self.SYMBOLS}
        )

    def test_signals_sorted_by_confidence(self, history_provider, today):
        """Extreme ranks become signals, most confident first; neutral ones are dropped."""
        scanner = OpportunityScanner(seed=5, today=today)
        signals = scanner.scan_signals(self.SYMBOLS, history_provider)
        assert [s.symbol for s in signals] == ["HIGH", "LOW"]

        high, low = signals
        assert high.action is SignalAction.SELL
        assert high.iv_rank == 100.0
        assert high.confidence == pytest.approx(90.0)
        assert isinstance(high.trade, IronCondorTrade)
        assert 0.30 < high.current_volatility < 0.65
        assert high.spot == 100.0

        assert low.action is SignalAction.BUY
        assert low.iv_rank == 0.0
        assert low.confidence == pytest.approx(80.0)
        assert isinstance(low.trade, DebitSpreadTrade)

    def test_limit(self, history_provider, today):
        scanner = OpportunityScanner(ScanConfig(limit=1), seed=5, today=today)
        assert [s.symbol for s in scanner.scan_signals(self.SYMBOLS, history_provider)] == [
            "HIGH"
        ]

    def test_thread_pool_matches_sequential(self, history_provider, today):
        """Parallel signal scans match sequential ones."""
        sequential = OpportunityScanner(seed=5, today=today)
        parallel = OpportunityScanner(ScanConfig(max_workers=4), seed=5, today=today)
        assert [s.to_dict() for s in sequential.scan_signals(self.SYMBOLS, history_provider)] == [
            s.to_dict() for s in parallel.scan_signals(self.SYMBOLS, history_provider)
        ]

    def test_requires_history_source(self, provider, today, caplog):
        """A provider without volatility history yields no signals."""
        scanner = OpportunityScanner(seed=5, today=today)
        with caplog.at_level(logging.WARNING):
            signals = scanner.scan_signals(["AAPL"], ChainOnlyProvider(provider))
        assert signals == []
        assert "No volatility history source for AAPL" in caplog.text

    def test_no_atm_contracts(self, quote_factory, today):
        """A chain without at-the-money 20-60 DTE contracts gives no signal."""
        scanner = OpportunityScanner(seed=5, today=today)
        chain = [quote_factory(days_to_expiration=7)]
        history = FixedHistoryProvider.HISTORIES["HIGH"]
        assert scanner.signal_for_symbol("AAPL", 100.0, chain, history) is None

    def test_short_history(self, quote_factory, today):
        """Too little history gives no signal."""
        scanner = OpportunityScanner(seed=5, today=today)
        chain = [quote_factory(days_to_expiration=30)]
        assert scanner.signal_for_symbol("AAPL", 100.0, chain, [0.3] * 5) is None
