"""Custom exceptions for options analytics."""


class ScoutError(Exception):
    """Base exception for options analytics."""

    pass


class InvalidInputError(ScoutError, ValueError):
    """Pricing input is non-positive, non-finite or otherwise unusable."""

    pass


class InsufficientHistoryError(ScoutError):
    """Too few historical samples for IV rank or percentile."""

    pass


class ConfigurationError(ScoutError):
    """Settings file or environment values are invalid."""

    pass


class ConvergenceWarning(UserWarning):
    """Implied volatility solve stopped before reaching tolerance."""

    pass
