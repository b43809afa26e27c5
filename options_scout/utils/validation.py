"""Input validation utilities."""

import math

from ..exceptions import InvalidInputError


def require_positive(value: float, name: str) -> float:
    """
    Validate that a numeric input is finite and strictly positive.

    Args:
        value: Value to check
        name: Parameter name for the error message

    Returns:
        The value as a float

    Raises:
        InvalidInputError: If value is non-finite or <= 0
    """
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e

    if not math.isfinite(value) or value <= 0:
        raise InvalidInputError(f"{name} must be positive, got {value}")
    return value


def require_non_negative(value: float, name: str) -> float:
    """
    Validate that a numeric input is finite and >= 0.

    Args:
        value: Value to check
        name: Parameter name for the error message

    Returns:
        The value as a float

    Raises:
        InvalidInputError: If value is non-finite or negative
    """
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e

    if not math.isfinite(value) or value < 0:
        raise InvalidInputError(f"{name} cannot be negative, got {value}")
    return value


def require_finite(value: float, name: str) -> float:
    """Validate that a numeric input is a finite float."""
    try:
        value = float(value)
    except (TypeError, ValueError) as e:
        raise InvalidInputError(f"{name} must be a number, got {value!r}") from e

    if not math.isfinite(value):
        raise InvalidInputError(f"{name} must be finite, got {value}")
    return value
