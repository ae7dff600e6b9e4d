"""Fixed periods-per-year table for statutory wage periods.

All counts derive from a 364-day reference year (52 weeks of 7 days).
The table is process-wide immutable configuration; it is injected into
LoontijdvakEngine rather than read as ambient state.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import Any, Mapping

from loontijdvak.calculators.types import WagePeriodType
from loontijdvak.errors import InvalidPeriodTypeError

REFERENCE_YEAR_DAYS = 364

PERIODS_PER_YEAR: Mapping[WagePeriodType, int] = MappingProxyType(
    {
        WagePeriodType.DAILY: 364,
        WagePeriodType.WEEKLY: 52,
        WagePeriodType.MONTHLY: 12,
        WagePeriodType.YEARLY: 1,
    }
)


@dataclass(frozen=True)
class PeriodTable:
    """Immutable lookup of periods per year by wage period type."""

    periods: Mapping[WagePeriodType, int] = field(default_factory=lambda: PERIODS_PER_YEAR)
    reference_year_days: int = REFERENCE_YEAR_DAYS

    def __post_init__(self) -> None:
        """Validate table."""
        if self.reference_year_days < 1:
            raise ValueError("reference_year_days must be at least 1")
        for period_type, count in self.periods.items():
            if count < 1:
                raise ValueError(f"periods per year for {period_type} must be positive")

    @staticmethod
    def coerce(period_type: Any) -> WagePeriodType:
        """Resolve a WagePeriodType from an enum member or its string value."""
        if isinstance(period_type, WagePeriodType):
            return period_type
        if isinstance(period_type, str):
            try:
                return WagePeriodType(period_type.strip().lower())
            except ValueError:
                pass
        raise InvalidPeriodTypeError(period_type)

    def periods_per_year(self, period_type: Any) -> int:
        resolved = self.coerce(period_type)
        try:
            return self.periods[resolved]
        except KeyError:
            raise InvalidPeriodTypeError(period_type) from None


DEFAULT_PERIOD_TABLE = PeriodTable()
