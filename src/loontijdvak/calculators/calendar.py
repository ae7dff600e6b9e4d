"""Pure date arithmetic for wage periods."""

from __future__ import annotations

from datetime import date, datetime
from typing import Any

from loontijdvak.errors import ValidationError


class PeriodCalendar:
    """Stateless helpers for period boundaries.

    Effective-date ranges are half-open ``[start, end)`` for overlap purposes,
    with ``None`` as an unbounded end. Period spans are inclusive of both
    boundary dates.
    """

    @staticmethod
    def inclusive_days(start: date, end: date) -> int:
        """Number of calendar days from start through end, both included."""
        return (PeriodCalendar.as_date(end) - PeriodCalendar.as_date(start)).days + 1

    @staticmethod
    def as_date(value: date) -> date:
        # datetime is a date subclass; strip the time part
        if isinstance(value, datetime):
            return value.date()
        return value

    @staticmethod
    def parse_date(value: Any, error_message: str) -> date:
        """Parse an ISO date string or date, raising ValidationError on failure."""
        if isinstance(value, datetime):
            return value.date()
        if isinstance(value, date):
            return value
        if isinstance(value, str):
            try:
                return date.fromisoformat(value.strip()[:10])
            except ValueError:
                raise ValidationError(error_message, {"value": value}) from None
        raise ValidationError(error_message, {"value": repr(value)})

    @staticmethod
    def ranges_overlap(
        start_a: date,
        end_a: date | None,
        start_b: date,
        end_b: date | None,
    ) -> bool:
        """Check whether two half-open effective ranges overlap."""
        a_before_b_ends = end_b is None or start_a < end_b
        b_before_a_ends = end_a is None or start_b < end_a
        return a_before_b_ends and b_before_a_ends

    @staticmethod
    def is_active_in(
        effective_from: date,
        effective_to: date | None,
        period_start: date,
        period_end: date,
    ) -> bool:
        """Check if a half-open effective range touches an inclusive pay period."""
        if effective_from > period_end:
            return False
        if effective_to is not None and effective_to <= period_start:
            return False
        return True
