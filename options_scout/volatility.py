"""
Realized (historical) volatility.

Turns a closing-price history into annualized close-to-close volatility,
either as a single estimate or as a rolling series of
HistoricalVolatilitySample objects that IVRankCalculator can rank against.
All volatility values are decimals (0.25 = 25% annualized).
"""

import logging
import math
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import date
from typing import Any, Optional

from .exceptions import InvalidInputError
from .models import HistoricalVolatilitySample

logger = logging.getLogger(__name__)


@dataclass
class VolatilityConfig:
    """
    Configuration for realized volatility calculations.

    Attributes:
        window: Lookback window in price observations (default: 20)
        annualization_factor: Trading days per year (default: 252)
        min_data_points: Minimum prices required (default: 10)
    """

    window: int = 20
    annualization_factor: float = 252.0
    min_data_points: int = 10

    def __post_init__(self) -> None:
        """Validate configuration values."""
        if self.window < 2:
            raise InvalidInputError("window must be at least 2")
        if self.annualization_factor <= 0:
            raise InvalidInputError("annualization_factor must be positive")
        if self.min_data_points < 2:
            raise InvalidInputError("min_data_points must be at least 2")


@dataclass
class VolatilityResult:
    """
    Result of a realized volatility calculation.

    Attributes:
        volatility: Volatility as decimal (0.25 = 25%)
        window: Lookback window requested
        data_points: Prices actually used
        annualized: Whether the result is annualized
        end_date: Date of the last price, if dates were given
        metadata: Additional information about the calculation
    """

    volatility: float
    window: int
    data_points: int
    annualized: bool
    end_date: Optional[date] = None
    metadata: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            "volatility": round(self.volatility, 4),
            "volatility_percent": round(self.volatility * 100, 2),
            "window": self.window,
            "data_points": self.data_points,
            "annualized": self.annualized,
            "end_date": self.end_date.isoformat() if self.end_date else None,
            "metadata": self.metadata,
        }


class RealizedVolatilityCalculator:
    """
    Close-to-close realized volatility from closing prices.

    Example:
        calculator = RealizedVolatilityCalculator()
        result = calculator.calculate_close_to_close(closes)
        history = calculator.rolling_history(closes, dates)
    """

    def __init__(self, config: Optional[VolatilityConfig] = None):
        """
        Initialize the calculator.

        Args:
            config: Optional configuration. Uses defaults if not provided.
        """
        self.config = config or VolatilityConfig()

    @staticmethod
    def _log_returns(prices: Sequence[float]) -> list[float]:
        if any(p <= 0 for p in prices):
            raise InvalidInputError("All prices must be positive")
        return [math.log(prices[i] / prices[i - 1]) for i in range(1, len(prices))]

    @staticmethod
    def _sample_variance(log_returns: list[float]) -> tuple[float, float]:
        """Return (mean, sample variance) of log returns."""
        mean_return = sum(log_returns) / len(log_returns)
        variance = sum((r - mean_return) ** 2 for r in log_returns) / (len(log_returns) - 1)
        return mean_return, variance

    def calculate_close_to_close(
        self,
        prices: Sequence[float],
        window: Optional[int] = None,
        annualize: bool = True,
        dates: Optional[Sequence[date]] = None,
    ) -> VolatilityResult:
        """
        Calculate close-to-close realized volatility.

        Formula: sigma = sqrt((252 / (n-1)) * sum((r_i - r_mean)^2))
        where r_i = ln(P_i / P_{i-1})

        Args:
            prices: Closing prices (oldest to newest)
            window: Lookback window (None = config window)
            annualize: If True, multiply by sqrt(annualization_factor)
            dates: Optional dates aligned with prices

        Returns:
            VolatilityResult with calculated volatility

        Raises:
            InvalidInputError: If there are too few prices or a price is non-positive
        """
        window = window or self.config.window
        prices_window = list(prices[-window:])

        if len(prices_window) < max(self.config.min_data_points, 3):
            raise InvalidInputError(
                f"Insufficient data: need at least {self.config.min_data_points} points, "
                f"got {len(prices_window)}"
            )

        log_returns = self._log_returns(prices_window)
        mean_return, variance = self._sample_variance(log_returns)
        volatility = math.sqrt(variance)

        if annualize:
            volatility *= math.sqrt(self.config.annualization_factor)

        return VolatilityResult(
            volatility=volatility,
            window=window,
            data_points=len(prices_window),
            annualized=annualize,
            end_date=dates[-1] if dates else None,
            metadata={"returns_count": len(log_returns), "mean_return": mean_return},
        )

    def rolling_history(
        self,
        prices: Sequence[float],
        dates: Sequence[date],
        window: Optional[int] = None,
    ) -> list[HistoricalVolatilitySample]:
        """
        Build a rolling annualized volatility series.

        One sample is produced per date once a full window of prices is
        available, dated at the window's last price.

        Args:
            prices: Closing prices (oldest to newest)
            dates: Dates aligned with prices
            window: Rolling window length (None = config window)

        Returns:
            List of HistoricalVolatilitySample, oldest first

        Raises:
            InvalidInputError: If prices and dates differ in length
        """
        if len(prices) != len(dates):
            raise InvalidInputError("prices must match dates length")

        window = window or self.config.window
        if window < 3:
            raise InvalidInputError("window must be at least 3 for a rolling series")

        samples = []
        for end in range(window, len(prices) + 1):
            chunk = prices[end - window : end]
            _, variance = self._sample_variance(self._log_returns(chunk))
            volatility = math.sqrt(variance * self.config.annualization_factor)
            samples.append(HistoricalVolatilitySample(date=dates[end - 1], volatility=volatility))

        logger.debug(f"Built {len(samples)} rolling volatility samples (window={window})")
        return samples
