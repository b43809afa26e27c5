"""
Opportunity scanner.

For each symbol: obtain a chain (provided, fetched or synthesized), keep
contracts inside the timeframe's DTE window and premium budget, score
them, drop anything under the minimum score, then rank all survivors by
total score x return potential.

The scanner also runs the IV rank signal scan: rank each symbol's
at-the-money IV against its history and report SELL/BUY premium signals
with suggested trades, most confident first.
"""

import logging
import random
from collections.abc import Callable, Iterable, Sequence
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from datetime import date
from typing import Optional, TypeVar

from ..chain_synthesizer import OptionChainSynthesizer
from ..constants import (
    DAILY_VOLATILITY_PROXY,
    DEFAULT_MAX_COST,
    DEFAULT_MIN_COST,
    DEFAULT_MIN_SCORE,
    DEFAULT_RESULT_LIMIT,
    DEFAULT_RISK_FREE_RATE,
)
from ..exceptions import InvalidInputError, ScoutError
from ..iv_rank import IVRankCalculator, VolatilitySeries, atm_implied_volatility
from ..models import (
    CatalystEvent,
    IVSignal,
    OptionQuote,
    ScoredOpportunity,
    SignalAction,
    Timeframe,
)
from ..providers import CatalystProvider, HistoricalDataProvider, MarketDataProvider
from .scorer import OpportunityScorer

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass
class ScanConfig:
    """
    Scanner filters and limits.

    Attributes:
        timeframe: Holding horizon; selects the DTE window
        min_score: Minimum total score to report (default: 75)
        min_cost: Minimum premium per contract in USD (default: 10)
        max_cost: Maximum premium per contract in USD (default: 500)
        limit: Maximum ranked results (default: 50)
        max_workers: Threads for per-symbol scans (1 = sequential)
    """

    timeframe: Timeframe = Timeframe.MEDIUM
    min_score: float = DEFAULT_MIN_SCORE
    min_cost: float = DEFAULT_MIN_COST
    max_cost: float = DEFAULT_MAX_COST
    limit: int = DEFAULT_RESULT_LIMIT
    max_workers: int = 1

    def __post_init__(self) -> None:
        """Validate configuration values."""
        self.timeframe = Timeframe.parse(self.timeframe)
        if self.min_cost < 0:
            raise InvalidInputError(f"min_cost cannot be negative, got {self.min_cost}")
        if self.max_cost < self.min_cost:
            raise InvalidInputError(
                f"max_cost ({self.max_cost}) must be >= min_cost ({self.min_cost})"
            )
        if self.limit < 1:
            raise InvalidInputError(f"limit must be at least 1, got {self.limit}")
        if self.max_workers < 1:
            raise InvalidInputError(f"max_workers must be at least 1, got {self.max_workers}")


class OpportunityScanner:
    """
    Multi-symbol option opportunity scanner.

    Each symbol is scored with its own random stream derived from the
    scanner seed and the symbol, so results are identical whether symbols
    are scanned sequentially or on a thread pool.

    Example:
        scanner = OpportunityScanner(ScanConfig(timeframe=Timeframe.SHORT), seed=7)
        picks = scanner.scan(["AAPL", "MSFT"], provider)
        for pick in picks[:5]:
            print(pick.symbol, pick.quote.strike, pick.total_score)
    """

    def __init__(
        self,
        config: Optional[ScanConfig] = None,
        seed: Optional[int] = None,
        today: Optional[date] = None,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        daily_volatility: float = DAILY_VOLATILITY_PROXY,
        iv_rank_calculator: Optional[IVRankCalculator] = None,
    ):
        """
        Initialize the scanner.

        Args:
            config: Filters and limits (uses defaults if None)
            seed: Base seed for per-symbol random streams
            today: Reference date for synthesized chains
            risk_free_rate: Rate used when synthesizing chains
            daily_volatility: Daily move proxy for probability of profit
            iv_rank_calculator: IV rank calculator shared by all scorers
        """
        self.config = config or ScanConfig()
        self.seed = seed
        self.today = today
        self.risk_free_rate = risk_free_rate
        self.daily_volatility = daily_volatility
        self.iv_rank_calculator = iv_rank_calculator or IVRankCalculator()

    def _symbol_rng(self, symbol: str, stream: str) -> random.Random:
        return random.Random(f"{self.seed}:{symbol.upper()}:{stream}")

    def filter_candidates(self, chain: Iterable[OptionQuote]) -> list[OptionQuote]:
        """
        Keep contracts inside the DTE window and premium budget.

        Args:
            chain: Option quotes

        Returns:
            Quotes with min_dte <= DTE <= max_dte and
            min_cost <= cost per contract <= max_cost
        """
        min_dte, max_dte = self.config.timeframe.dte_range
        return [
            q
            for q in chain
            if min_dte <= q.days_to_expiration <= max_dte
            and self.config.min_cost <= q.cost_per_contract <= self.config.max_cost
        ]

    def scan_symbol(
        self,
        symbol: str,
        spot: float,
        chain: Optional[Sequence[OptionQuote]] = None,
        history: Optional[VolatilitySeries] = None,
        catalysts: Optional[Iterable[CatalystEvent]] = None,
    ) -> list[ScoredOpportunity]:
        """
        Score one symbol's qualifying contracts.

        Args:
            symbol: Underlying ticker
            spot: Underlying price
            chain: Option chain (synthesized when None)
            history: Volatility history for IV rank
            catalysts: Scheduled events for the symbol

        Returns:
            Opportunities at or above min_score, ranked best first

        Raises:
            InvalidInputError: If spot is non-positive
        """
        symbol = symbol.upper()
        if chain is None:
            synthesizer = OptionChainSynthesizer(
                rng=self._symbol_rng(symbol, "chain"),
                risk_free_rate=self.risk_free_rate,
                today=self.today,
            )
            chain = synthesizer.synthesize(symbol, spot)

        scorer = OpportunityScorer(
            rng=self._symbol_rng(symbol, "score"),
            iv_rank_calculator=self.iv_rank_calculator,
            daily_volatility=self.daily_volatility,
        )
        events = list(catalysts or ())
        candidates = self.filter_candidates(chain)

        results = []
        for quote in candidates:
            opportunity = scorer.score(
                quote, spot, self.config.timeframe, history=history, catalysts=events
            )
            if opportunity.total_score >= self.config.min_score:
                results.append(opportunity)

        logger.info(
            f"{symbol}: {len(chain)} contracts, {len(candidates)} in window/budget, "
            f"{len(results)} scored >= {self.config.min_score}"
        )
        return self.rank(results)

    def _scan_from_provider(
        self, symbol: str, provider: MarketDataProvider
    ) -> list[ScoredOpportunity]:
        try:
            spot = provider.get_spot_price(symbol)
            if spot is None:
                logger.warning(f"No spot price for {symbol}, skipping")
                return []

            chain = provider.get_option_chain(symbol)
            if not chain:
                logger.warning(f"No option chain for {symbol}, skipping")
                return []

            history = None
            if isinstance(provider, HistoricalDataProvider):
                history = provider.get_volatility_history(symbol)

            events: list[CatalystEvent] = []
            if isinstance(provider, CatalystProvider):
                events = provider.get_events(symbol)

            return self.scan_symbol(symbol, spot, chain=chain, history=history, catalysts=events)
        except ScoutError as e:
            logger.warning(f"Skipping {symbol}: {e}")
            return []

    def scan(
        self, symbols: Iterable[str], provider: MarketDataProvider
    ) -> list[ScoredOpportunity]:
        """
        Scan many symbols through a data provider.

        Symbols without a spot price or chain, or whose data fails
        validation, are logged and skipped.

        Args:
            symbols: Tickers to scan
            provider: Market data source; volatility history and catalysts
                are also fetched when the provider supports them

        Returns:
            Ranked opportunities across all symbols, truncated to limit
        """
        symbols = _unique_symbols(symbols)
        per_symbol = self._map_symbols(lambda s: self._scan_from_provider(s, provider), symbols)

        ranked = self.rank([opp for batch in per_symbol for opp in batch])
        logger.info(
            f"Scan complete: {len(symbols)} symbols, {len(ranked)} opportunities "
            f"({self.config.timeframe.value} timeframe)"
        )
        return ranked

    def _map_symbols(self, fn: Callable[[str], T], symbols: list[str]) -> list[T]:
        """Apply fn to each symbol, on a thread pool when configured."""
        if self.config.max_workers > 1 and len(symbols) > 1:
            with ThreadPoolExecutor(max_workers=self.config.max_workers) as executor:
                return list(executor.map(fn, symbols))
        return [fn(s) for s in symbols]

    def signal_for_symbol(
        self,
        symbol: str,
        spot: float,
        chain: Iterable[OptionQuote],
        history: Optional[VolatilitySeries],
    ) -> Optional[IVSignal]:
        """
        Rank a symbol's at-the-money IV and translate it into a signal.

        Args:
            symbol: Underlying ticker
            spot: Underlying price
            chain: Option chain used for the at-the-money IV
            history: Volatility history to rank against

        Returns:
            IVSignal (possibly WAIT), or None when there is no at-the-money
            contract or too little history
        """
        symbol = symbol.upper()
        current = atm_implied_volatility(chain, spot)
        if current is None:
            logger.info(f"{symbol}: no at-the-money contracts in the 20-60 DTE window")
            return None

        rank = self.iv_rank_calculator.iv_rank(current, history)
        signal = self.iv_rank_calculator.generate_signal(symbol, rank, current, spot)
        if signal is not None:
            logger.debug(
                f"{symbol}: ATM IV {current:.2%}, IV rank {rank:.0f}, {signal.action.value}"
            )
        return signal

    def _signal_from_provider(
        self, symbol: str, provider: MarketDataProvider
    ) -> Optional[IVSignal]:
        if not isinstance(provider, HistoricalDataProvider):
            logger.warning(f"No volatility history source for {symbol}, skipping")
            return None
        try:
            spot = provider.get_spot_price(symbol)
            if spot is None:
                logger.warning(f"No spot price for {symbol}, skipping")
                return None

            chain = provider.get_option_chain(symbol)
            if not chain:
                logger.warning(f"No option chain for {symbol}, skipping")
                return None

            history = provider.get_volatility_history(symbol)
            return self.signal_for_symbol(symbol, spot, chain, history)
        except ScoutError as e:
            logger.warning(f"Skipping {symbol}: {e}")
            return None

    def scan_signals(
        self, symbols: Iterable[str], provider: MarketDataProvider
    ) -> list[IVSignal]:
        """
        Scan symbols for IV rank premium signals.

        Symbols without data, without at-the-money contracts or with too
        little volatility history are skipped, as are WAIT signals.

        Args:
            symbols: Tickers to scan
            provider: Market data source that also supplies volatility history

        Returns:
            SELL and BUY signals sorted by confidence (descending), then
            symbol, truncated to limit
        """
        symbols = _unique_symbols(symbols)
        results = self._map_symbols(
            lambda symbol: self._signal_from_provider(symbol, provider), symbols
        )
        signals = [s for s in results if s is not None and s.action is not SignalAction.WAIT]
        signals.sort(key=lambda s: (-s.confidence, s.symbol))
        logger.info(f"Signal scan complete: {len(symbols)} symbols, {len(signals)} signals")
        return signals[: self.config.limit]

    def rank(self, opportunities: Iterable[ScoredOpportunity]) -> list[ScoredOpportunity]:
        """
        Sort by total score x return potential (descending) and truncate.

        Ties are broken by symbol, expiration, strike and option type so
        ordering is stable across runs.
        """
        ordered = sorted(
            opportunities,
            key=lambda o: (
                -o.rank_key,
                o.symbol,
                o.quote.expiration,
                o.quote.strike,
                o.quote.option_type.value,
            ),
        )
        return ordered[: self.config.limit]



def _unique_symbols(symbols: Iterable[str]) -> list[str]:
    """Upper-cased symbols with duplicates removed, first occurrence kept."""
    return list(dict.fromkeys(s.upper() for s in symbols))
