"""Statutory wage period (loontijdvak) arithmetic."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from fractions import Fraction
from typing import Any

from loontijdvak.calculators.calendar import PeriodCalendar
from loontijdvak.calculators.period_table import DEFAULT_PERIOD_TABLE, PeriodTable
from loontijdvak.calculators.rounding import round2, to_non_negative_decimal
from loontijdvak.calculators.types import (
    LoontijdvakMetadata,
    PeriodLengthCheck,
    WagePeriodType,
)
from loontijdvak.errors import ValidationError

logger = logging.getLogger(__name__)


class LoontijdvakEngine:
    """Classifies wage periods and apportions amounts between them.

    All amount-bearing operations round half away from zero to cents, and only
    when producing the final value. Intermediate results keep full precision
    so chained conversions do not compound rounding error.

    Period-length tolerances (days):
    - monthly: 3
    - daily, weekly, yearly: 1
    """

    MONTHLY_TOLERANCE_DAYS = Decimal("3")
    DEFAULT_TOLERANCE_DAYS = Decimal("1")

    def __init__(self, period_table: PeriodTable = DEFAULT_PERIOD_TABLE):
        self.period_table = period_table

    def periods_per_year(self, period_type: WagePeriodType | str) -> int:
        """Fixed periods per year for a type; raises InvalidPeriodTypeError."""
        return self.period_table.periods_per_year(period_type)

    def fraction_of_year(self, period_type: WagePeriodType | str) -> Fraction:
        """Exact share of the year covered by one period."""
        return Fraction(1, self.periods_per_year(period_type))

    def standard_period_days(self, period_type: WagePeriodType | str) -> Decimal:
        """Legally expected days in one period (364 / periods per year)."""
        return Decimal(self.period_table.reference_year_days) / Decimal(
            self.periods_per_year(period_type)
        )

    def prorate_annual(self, annual_amount: Any, period_type: WagePeriodType | str) -> Decimal:
        """Apportion an annual amount to a single period of the given type."""
        amount = to_non_negative_decimal(annual_amount, "annual_amount")
        fraction = self.fraction_of_year(period_type)
        return round2(amount * fraction.numerator / fraction.denominator)

    def convert(
        self,
        amount: Any,
        from_type: WagePeriodType | str,
        to_type: WagePeriodType | str,
    ) -> Decimal:
        """Convert a per-period amount from one wage period type to another."""
        value = to_non_negative_decimal(amount, "amount")
        source = self.period_table.coerce(from_type)
        target = self.period_table.coerce(to_type)
        if source == target:
            return value
        return round2(
            value * self.periods_per_year(source) / self.periods_per_year(target)
        )

    def classify(
        self,
        period_start: date,
        period_end: date,
        configured_type: WagePeriodType | str,
        allow_single_day: bool = False,
    ) -> LoontijdvakMetadata:
        """Build metadata for one concrete period.

        The configured type is authoritative; the type is never inferred from
        the dates. Single-day spans are only accepted for runs that opt in.
        """
        resolved = self.period_table.coerce(configured_type)
        start = PeriodCalendar.as_date(period_start)
        end = PeriodCalendar.as_date(period_end)

        if end < start or (end == start and not allow_single_day):
            raise ValidationError(
                "Period end must be after period start",
                {"period_start": str(start), "period_end": str(end)},
            )

        periods = self.periods_per_year(resolved)
        return LoontijdvakMetadata(
            type=resolved,
            fraction=Fraction(1, periods),
            periods_per_year=periods,
            days_in_period=PeriodCalendar.inclusive_days(start, end),
            period_start=start,
            period_end=end,
        )

    def validate_period_length(
        self, actual_days: int, period_type: WagePeriodType | str
    ) -> PeriodLengthCheck:
        """Advisory check of a period's length against the statutory length.

        Never raises for a length mismatch; the mismatch is logged and
        reported in the result.
        """
        resolved = self.period_table.coerce(period_type)
        expected = self.standard_period_days(resolved)
        tolerance = (
            self.MONTHLY_TOLERANCE_DAYS
            if resolved == WagePeriodType.MONTHLY
            else self.DEFAULT_TOLERANCE_DAYS
        )
        is_valid = abs(Decimal(actual_days) - expected) <= tolerance
        expected_days = round2(expected)

        if is_valid:
            return PeriodLengthCheck(
                is_valid=True, expected_days=expected_days, actual_days=actual_days
            )

        warning = (
            f"Period length of {actual_days} days deviates from the expected "
            f"{expected_days} days for a {resolved.value} loontijdvak"
        )
        logger.warning(
            "Loontijdvak period length mismatch: %s",
            warning,
            extra={
                "loontijdvak_type": resolved.value,
                "actual_days": actual_days,
                "expected_days": str(expected_days),
            },
        )
        return PeriodLengthCheck(
            is_valid=False,
            expected_days=expected_days,
            actual_days=actual_days,
            warning=warning,
        )
