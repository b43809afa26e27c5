"""Catalyst event dataclass."""

from dataclasses import dataclass
from datetime import date as date_type
from typing import Any, Optional


@dataclass
class CatalystEvent:
    """
    Scheduled event that can move an underlying (earnings by default).

    Attributes:
        symbol: Stock ticker symbol
        date: Event date
        kind: Event category ("earnings", "dividend", ...)
        time_of_day: When the event occurs ("BMO", "AMC", or "unknown")
            BMO = Before Market Open
            AMC = After Market Close
        days_until: Days until the event (negative if past)
        reference_date: Date days_until is measured from (default today)
    """

    symbol: str
    date: date_type
    kind: str = "earnings"
    time_of_day: str = "unknown"
    days_until: Optional[int] = None
    reference_date: Optional[date_type] = None

    def __post_init__(self) -> None:
        """Normalize the symbol and calculate days until the event."""
        self.symbol = self.symbol.upper()
        if isinstance(self.date, str):
            self.date = date_type.fromisoformat(self.date)
        if self.days_until is None:
            reference = self.reference_date or date_type.today()
            self.days_until = (self.date - reference).days

    @property
    def is_upcoming(self) -> bool:
        """Check if the event is today or in the future."""
        return self.days_until is not None and self.days_until >= 0

    @property
    def is_imminent(self) -> bool:
        """Check if the event is within 7 days."""
        return self.days_until is not None and 0 <= self.days_until <= 7

    def within(self, days: int) -> bool:
        """Check if the event falls within +/- days of the reference date."""
        return self.days_until is not None and abs(self.days_until) <= days

    def to_dict(self) -> dict[str, Any]:
        """Convert to dictionary for serialization."""
        return {
            "symbol": self.symbol,
            "date": self.date.isoformat(),
            "kind": self.kind,
            "time_of_day": self.time_of_day,
            "days_until": self.days_until,
            "is_upcoming": self.is_upcoming,
            "is_imminent": self.is_imminent,
        }
