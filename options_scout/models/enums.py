"""Enumerations shared by pricing, scoring and scanning."""

from enum import Enum
from typing import Union

from ..exceptions import InvalidInputError


class OptionType(Enum):
    """Contract right: call or put."""

    CALL = "call"
    PUT = "put"

    @classmethod
    def parse(cls, value: Union[str, "OptionType"]) -> "OptionType":
        """
        Coerce a string or OptionType into an OptionType.

        Args:
            value: "call", "put" (any case) or an OptionType member

        Returns:
            Matching OptionType

        Raises:
            InvalidInputError: If the value is not a recognized option type
        """
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInputError(
                f"Option type must be 'call' or 'put', got {value!r}"
            ) from None


class QuoteSource(Enum):
    """Where an option quote came from."""

    SIMULATED = "simulated"
    MARKET = "market"


class PositionSide(Enum):
    """Long (bought) or short (sold) option position."""

    LONG = "long"
    SHORT = "short"


class Timeframe(Enum):
    """
    Holding horizon used to filter expirations and scale return potential.

    Short trades target weekly expirations, medium trades the front month,
    long trades the next one to three months.
    """

    SHORT = "short"
    MEDIUM = "medium"
    LONG = "long"

    @classmethod
    def parse(cls, value: Union[str, "Timeframe"]) -> "Timeframe":
        """Coerce "short"/"medium"/"long" (any case) or a Timeframe."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            raise InvalidInputError(
                f"Timeframe must be 'short', 'medium' or 'long', got {value!r}"
            ) from None

    @property
    def dte_range(self) -> tuple[int, int]:
        """Inclusive (min, max) days-to-expiration window."""
        return TIMEFRAME_DTE_RANGES[self]

    @property
    def return_multiplier(self) -> float:
        """Fraction of raw leverage credited as return potential."""
        return TIMEFRAME_RETURN_MULTIPLIERS[self]


# DTE windows for each timeframe (min_dte, max_dte), inclusive
TIMEFRAME_DTE_RANGES: dict[Timeframe, tuple[int, int]] = {
    Timeframe.SHORT: (1, 7),
    Timeframe.MEDIUM: (8, 30),
    Timeframe.LONG: (31, 90),
}

# Leverage multipliers: short < medium < long
TIMEFRAME_RETURN_MULTIPLIERS: dict[Timeframe, float] = {
    Timeframe.SHORT: 0.5,
    Timeframe.MEDIUM: 1.0,
    Timeframe.LONG: 1.5,
}


class RiskLevel(Enum):
    """Qualitative risk bucket derived from DTE and delta."""

    HIGH = "HIGH"
    MEDIUM_HIGH = "MEDIUM-HIGH"
    MEDIUM = "MEDIUM"
    MEDIUM_LOW = "MEDIUM-LOW"


class SignalAction(Enum):
    """IV-rank mean-reversion trade direction."""

    SELL = "SELL"  # Sell premium (IV rich)
    BUY = "BUY"  # Buy premium (IV cheap)
    WAIT = "WAIT"
