"""Shared utility functions."""

from .date_utils import (
    calculate_days_to_expiry,
    monthly_expirations,
    next_friday,
    third_friday,
    weekly_expirations,
)
from .validation import require_finite, require_non_negative, require_positive

__all__ = [
    "calculate_days_to_expiry",
    "monthly_expirations",
    "next_friday",
    "third_friday",
    "weekly_expirations",
    "require_finite",
    "require_non_negative",
    "require_positive",
]
