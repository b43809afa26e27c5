"""
Data provider protocols, caching and a simulated provider.

The core pricing and scoring code never fetches data itself. Collaborators
implementing these protocols supply spot prices, option chains, volatility
history and catalyst events. Absence of data is reported as None (or an
empty list), never as an exception.

Caching is injected at the provider boundary: CachingMarketDataProvider
wraps any provider with a Cache, keeping the core cache-free.

Example:
    provider = CachingMarketDataProvider(
        SimulatedMarketDataProvider(seed=7),
        cache=TTLCache(ttl_seconds=300),
    )
    spot = provider.get_spot_price("AAPL")
    chain = provider.get_option_chain("AAPL")
"""

import hashlib
import logging
import random
import threading
import time
from collections.abc import Callable
from datetime import date, timedelta
from typing import Any, Optional, Protocol, runtime_checkable

from .catalysts import CatalystCalendar
from .chain_synthesizer import OptionChainSynthesizer
from .constants import DEFAULT_RISK_FREE_RATE
from .models import CatalystEvent, HistoricalVolatilitySample, OptionQuote

logger = logging.getLogger(__name__)


@runtime_checkable
class MarketDataProvider(Protocol):
    """Source of spot prices and option chains."""

    def get_spot_price(self, symbol: str) -> Optional[float]: ...

    def get_option_chain(self, symbol: str) -> Optional[list[OptionQuote]]: ...


@runtime_checkable
class HistoricalDataProvider(Protocol):
    """Source of historical volatility series."""

    def get_volatility_history(self, symbol: str) -> Optional[list[HistoricalVolatilitySample]]: ...


@runtime_checkable
class CatalystProvider(Protocol):
    """Source of scheduled catalyst events."""

    def get_events(self, symbol: str) -> list[CatalystEvent]: ...


class Cache(Protocol):
    """Minimal key-value cache."""

    def get(self, key: str) -> Optional[Any]: ...

    def put(self, key: str, value: Any) -> None: ...


class TTLCache:
    """
    Thread-safe in-memory cache with per-entry time-to-live.

    Expired entries are dropped when read and swept on every write, so keys
    that are never read again do not accumulate.

    Attributes:
        ttl_seconds: How long entries stay valid
    """

    def __init__(self, ttl_seconds: float = 300.0, clock: Callable[[], float] = time.monotonic):
        """
        Initialize the cache.

        Args:
            ttl_seconds: Entry lifetime in seconds (default: 5 minutes)
            clock: Time source returning seconds (injectable for tests)
        """
        self.ttl_seconds = ttl_seconds
        self._clock = clock
        self._entries: dict[str, tuple[Any, float]] = {}
        self._lock = threading.Lock()

    def get(self, key: str) -> Optional[Any]:
        """Return the cached value, or None if missing or expired."""
        with self._lock:
            entry = self._entries.get(key)
            if entry is None:
                return None
            value, cached_at = entry
            if self._clock() - cached_at >= self.ttl_seconds:
                del self._entries[key]
                return None
            return value

    def put(self, key: str, value: Any) -> None:
        """Store a value, resetting its expiry, and drop expired entries."""
        with self._lock:
            now = self._clock()
            expired = [
                k
                for k, (_, cached_at) in self._entries.items()
                if now - cached_at >= self.ttl_seconds
            ]
            for k in expired:
                del self._entries[k]
            self._entries[key] = (value, now)

    def clear(self) -> None:
        """Remove all entries."""
        with self._lock:
            self._entries.clear()

    def __len__(self) -> int:
        with self._lock:
            return len(self._entries)


class CachingMarketDataProvider:
    """
    Read-through cache around a market data provider.

    Only non-empty results are cached, so a transient miss is retried on
    the next call. Volatility history and catalyst lookups are passed
    through (and cached) when the wrapped provider supports them.
    """

    def __init__(self, provider: MarketDataProvider, cache: Cache):
        self._provider = provider
        self._cache = cache

    def _cached(self, key: str, loader: Callable[[], Any]) -> Any:
        value = self._cache.get(key)
        if value is not None:
            logger.debug(f"Cache hit for {key}")
            return value

        value = loader()
        if value:
            self._cache.put(key, value)
        return value

    def get_spot_price(self, symbol: str) -> Optional[float]:
        symbol = symbol.upper()
        return self._cached(f"spot:{symbol}", lambda: self._provider.get_spot_price(symbol))

    def get_option_chain(self, symbol: str) -> Optional[list[OptionQuote]]:
        symbol = symbol.upper()
        return self._cached(f"chain:{symbol}", lambda: self._provider.get_option_chain(symbol))

    def get_volatility_history(self, symbol: str) -> Optional[list[HistoricalVolatilitySample]]:
        if not isinstance(self._provider, HistoricalDataProvider):
            return None
        symbol = symbol.upper()
        return self._cached(
            f"history:{symbol}", lambda: self._provider.get_volatility_history(symbol)
        )

    def get_events(self, symbol: str) -> list[CatalystEvent]:
        if not isinstance(self._provider, CatalystProvider):
            return []
        return self._provider.get_events(symbol)


def _stable_hash(text: str) -> int:
    """Process-independent integer hash of a string."""
    return int(hashlib.sha256(text.encode("utf-8")).hexdigest()[:12], 16)


class SimulatedMarketDataProvider:
    """
    Deterministic synthetic market data for demos and tests.

    Spot prices are derived from a hash of the symbol (or taken from
    base_prices), chains come from OptionChainSynthesizer and volatility
    histories follow a seeded mean-reverting random walk. Every symbol
    gets its own random stream, so results do not depend on call order.

    Attributes:
        seed: Base seed combined with the symbol for each random stream
        today: Reference date for chains and histories
        history_days: Length of generated volatility histories
    """

    MIN_SPOT = 5.0
    MAX_SPOT = 500.0

    def __init__(
        self,
        seed: Optional[int] = None,
        today: Optional[date] = None,
        base_prices: Optional[dict[str, float]] = None,
        history_days: int = 252,
        risk_free_rate: float = DEFAULT_RISK_FREE_RATE,
        catalysts: Optional[CatalystCalendar] = None,
    ):
        self.seed = seed
        self.today = today
        self.history_days = history_days
        self.risk_free_rate = risk_free_rate
        self._base_prices = {k.upper(): v for k, v in (base_prices or {}).items()}
        self._catalysts = catalysts

    def _rng(self, symbol: str, stream: str) -> random.Random:
        return random.Random(f"{self.seed}:{symbol.upper()}:{stream}")

    def get_spot_price(self, symbol: str) -> Optional[float]:
        symbol = symbol.upper()
        if symbol in self._base_prices:
            return self._base_prices[symbol]
        span_cents = int((self.MAX_SPOT - self.MIN_SPOT) * 100)
        return round(self.MIN_SPOT + (_stable_hash(symbol) % span_cents) / 100, 2)

    def get_option_chain(self, symbol: str) -> Optional[list[OptionQuote]]:
        spot = self.get_spot_price(symbol)
        if spot is None:
            return None
        synthesizer = OptionChainSynthesizer(
            rng=self._rng(symbol, "chain"),
            risk_free_rate=self.risk_free_rate,
            today=self.today,
        )
        return synthesizer.synthesize(symbol.upper(), spot)

    def get_volatility_history(self, symbol: str) -> Optional[list[HistoricalVolatilitySample]]:
        """
        Generate a mean-reverting daily volatility history, oldest first.

        vol[t+1] = vol[t] + 0.1 x (mean - vol[t]) + N(0, 0.02), floored at 5%.
        """
        rng = self._rng(symbol, "history")
        mean = rng.uniform(0.20, 0.60)
        vol = mean
        end = self.today or date.today()
        samples = []
        for i in range(self.history_days):
            vol = max(0.05, vol + 0.1 * (mean - vol) + rng.gauss(0, 0.02))
            day = end - timedelta(days=self.history_days - i)
            samples.append(HistoricalVolatilitySample(date=day, volatility=vol))
        return samples

    def get_events(self, symbol: str) -> list[CatalystEvent]:
        if self._catalysts is None:
            return []
        return self._catalysts.get_events(symbol)
