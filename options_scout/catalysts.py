"""
Catalyst calendar for opportunity scoring.

Holds scheduled events (earnings by default) per symbol in memory and
answers the questions the scorer asks: which events fall within an
option's life, and does an expiration span an event.

Example:
    from options_scout.catalysts import CatalystCalendar
    from options_scout.models import CatalystEvent

    calendar = CatalystCalendar()
    calendar.add_event(CatalystEvent("AAPL", date(2026, 1, 29), time_of_day="AMC"))
    events = calendar.get_events("AAPL")
    spans, event = calendar.expiration_spans_event("AAPL", date(2026, 2, 20))
"""

import logging
from collections import defaultdict
from collections.abc import Iterable
from dataclasses import replace
from datetime import date
from typing import Optional

from .models import CatalystEvent

logger = logging.getLogger(__name__)


class CatalystCalendar:
    """
    In-memory catalyst calendar.

    Implements the CatalystProvider protocol (get_events). Event
    days_until values are recomputed against the calendar's reference
    date on every lookup.

    Attributes:
        reference_date: Date used for days_until (None = date.today())
    """

    def __init__(
        self,
        events: Optional[Iterable[CatalystEvent]] = None,
        reference_date: Optional[date] = None,
    ):
        """
        Initialize the calendar.

        Args:
            events: Initial events
            reference_date: Fixed "today" for days_until calculations
        """
        self.reference_date = reference_date
        self._events: dict[str, list[CatalystEvent]] = defaultdict(list)
        for event in events or ():
            self.add_event(event)

    def add_event(self, event: CatalystEvent) -> None:
        """Register an event; duplicates (same date and kind) are ignored."""
        existing = self._events[event.symbol]
        if any(e.date == event.date and e.kind == event.kind for e in existing):
            logger.debug(f"Duplicate {event.kind} event for {event.symbol} on {event.date}")
            return
        existing.append(event)
        existing.sort(key=lambda e: e.date)

    def get_events(self, symbol: str) -> list[CatalystEvent]:
        """
        Get events for a symbol, oldest first.

        Args:
            symbol: Stock ticker symbol

        Returns:
            Copies of the stored events with days_until measured from the
            reference date; empty list when none are known
        """
        reference = self.reference_date or date.today()
        return [
            replace(e, days_until=None, reference_date=reference)
            for e in self._events.get(symbol.upper(), [])
        ]

    def events_within(self, symbol: str, days: int) -> list[CatalystEvent]:
        """Events whose |days_until| is at most days."""
        return [e for e in self.get_events(symbol) if e.within(days)]

    def expiration_spans_event(
        self, symbol: str, expiration: date
    ) -> tuple[bool, Optional[CatalystEvent]]:
        """
        Check whether an upcoming event falls on or before an expiration.

        Args:
            symbol: Stock ticker symbol
            expiration: Option expiration date

        Returns:
            Tuple of (spans_event, first spanned event or None)
        """
        reference = self.reference_date or date.today()
        for event in self.get_events(symbol):
            if reference <= event.date <= expiration:
                logger.debug(
                    f"{symbol} {event.kind} on {event.date} falls before expiration {expiration}"
                )
                return True, event
        return False, None
