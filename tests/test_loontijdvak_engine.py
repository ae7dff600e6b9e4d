"""Unit tests for LoontijdvakEngine and the period table."""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from fractions import Fraction
from types import MappingProxyType

import pytest
from hypothesis import given, settings, strategies as st

from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.calculators.period_table import (
    DEFAULT_PERIOD_TABLE,
    PERIODS_PER_YEAR,
    PeriodTable,
)
from loontijdvak.calculators.types import WagePeriodType
from loontijdvak.errors import InvalidPeriodTypeError, ValidationError

ALL_TYPES = list(WagePeriodType)


class TestPeriodTable:
    """Test the fixed periods-per-year table."""

    def test_periods_per_year_values(self):
        assert DEFAULT_PERIOD_TABLE.periods_per_year(WagePeriodType.DAILY) == 364
        assert DEFAULT_PERIOD_TABLE.periods_per_year(WagePeriodType.WEEKLY) == 52
        assert DEFAULT_PERIOD_TABLE.periods_per_year(WagePeriodType.MONTHLY) == 12
        assert DEFAULT_PERIOD_TABLE.periods_per_year(WagePeriodType.YEARLY) == 1

    def test_table_is_read_only(self):
        assert isinstance(PERIODS_PER_YEAR, MappingProxyType)
        with pytest.raises(TypeError):
            PERIODS_PER_YEAR[WagePeriodType.DAILY] = 365  # type: ignore[index]

    def test_string_types_are_accepted(self):
        assert DEFAULT_PERIOD_TABLE.periods_per_year("monthly") == 12
        assert DEFAULT_PERIOD_TABLE.periods_per_year(" Weekly ") == 52

    @pytest.mark.parametrize("bad", ["biweekly", "", None, 12, "quarterly"])
    def test_unknown_type_raises(self, bad):
        with pytest.raises(InvalidPeriodTypeError):
            DEFAULT_PERIOD_TABLE.periods_per_year(bad)

    def test_invalid_period_type_is_validation_error(self):
        with pytest.raises(ValidationError):
            DEFAULT_PERIOD_TABLE.coerce("fortnightly")

    def test_rejects_non_positive_counts(self):
        with pytest.raises(ValueError):
            PeriodTable(periods={WagePeriodType.DAILY: 0})


class TestFractionOfYear:
    """Test exact year fractions."""

    @pytest.mark.parametrize("period_type", ALL_TYPES)
    def test_periods_times_fraction_is_exactly_one(self, engine, period_type):
        assert engine.periods_per_year(period_type) * engine.fraction_of_year(period_type) == 1

    def test_fraction_is_exact(self, engine):
        assert engine.fraction_of_year(WagePeriodType.DAILY) == Fraction(1, 364)

    def test_standard_period_days(self, engine):
        assert engine.standard_period_days(WagePeriodType.WEEKLY) == Decimal("7")
        assert engine.standard_period_days(WagePeriodType.YEARLY) == Decimal("364")
        assert round(engine.standard_period_days(WagePeriodType.MONTHLY), 2) == Decimal("30.33")


class TestProrateAnnual:
    """Test apportioning annual amounts."""

    def test_monthly(self, engine):
        assert engine.prorate_annual(108000, WagePeriodType.MONTHLY) == Decimal("9000.00")

    def test_weekly(self, engine):
        assert engine.prorate_annual(108000, WagePeriodType.WEEKLY) == Decimal("2076.92")

    def test_daily(self, engine):
        assert engine.prorate_annual(108000, WagePeriodType.DAILY) == Decimal("296.70")

    def test_yearly_is_identity(self, engine):
        assert engine.prorate_annual(Decimal("1234.565"), "yearly") == Decimal("1234.57")

    def test_zero(self, engine):
        assert engine.prorate_annual(0, WagePeriodType.MONTHLY) == Decimal("0.00")

    def test_negative_rejected(self, engine):
        with pytest.raises(ValidationError):
            engine.prorate_annual(-1, WagePeriodType.MONTHLY)

    @pytest.mark.parametrize("bad", ["abc", None, True, float("nan"), object()])
    def test_non_numeric_rejected(self, engine, bad):
        with pytest.raises(ValidationError):
            engine.prorate_annual(bad, WagePeriodType.MONTHLY)

    def test_unknown_type_rejected(self, engine):
        with pytest.raises(InvalidPeriodTypeError):
            engine.prorate_annual(100, "biweekly")


class TestConvert:
    """Test conversion between wage period types."""

    def test_monthly_to_yearly(self, engine):
        assert engine.convert(5000, WagePeriodType.MONTHLY, WagePeriodType.YEARLY) == Decimal(
            "60000.00"
        )

    def test_daily_to_monthly_follows_period_ratio(self, engine):
        # 100 * 364 / 12
        assert engine.convert(100, WagePeriodType.DAILY, WagePeriodType.MONTHLY) == Decimal(
            "3033.33"
        )

    def test_weekly_to_monthly(self, engine):
        # 1000 * 52 / 12 = 4333.333...
        assert engine.convert(1000, "weekly", "monthly") == Decimal("4333.33")

    def test_same_type_is_identity(self, engine):
        assert engine.convert(Decimal("12.345"), "daily", "daily") == Decimal("12.345")

    def test_rounds_half_away_from_zero(self, engine):
        # 0.125 * 12 / 12 would be identity; use yearly -> monthly: 0.30 / 12 = 0.025
        assert engine.convert(Decimal("0.30"), "yearly", "monthly") == Decimal("0.03")

    def test_negative_rejected(self, engine):
        with pytest.raises(ValidationError):
            engine.convert(-5, "monthly", "yearly")

    def test_unknown_type_rejected(self, engine):
        with pytest.raises(InvalidPeriodTypeError):
            engine.convert(5, "monthly", "hourly")


class TestClassify:
    """Test period classification."""

    def test_monthly_period(self, engine):
        metadata = engine.classify(date(2026, 1, 1), date(2026, 1, 31), WagePeriodType.MONTHLY)

        assert metadata.type == WagePeriodType.MONTHLY
        assert metadata.fraction == Fraction(1, 12)
        assert metadata.periods_per_year == 12
        assert metadata.days_in_period == 31
        assert metadata.period_start == date(2026, 1, 1)
        assert metadata.period_end == date(2026, 1, 31)

    def test_configured_type_is_authoritative(self, engine):
        # A 7-day span configured as monthly stays monthly
        metadata = engine.classify(date(2026, 1, 1), date(2026, 1, 7), "monthly")
        assert metadata.type == WagePeriodType.MONTHLY
        assert metadata.days_in_period == 7

    def test_end_before_start_rejected(self, engine):
        with pytest.raises(ValidationError, match="Period end must be after period start"):
            engine.classify(date(2026, 1, 31), date(2026, 1, 1), "monthly")

    def test_same_day_rejected_by_default(self, engine):
        with pytest.raises(ValidationError):
            engine.classify(date(2026, 1, 5), date(2026, 1, 5), "daily")

    def test_same_day_allowed_when_opted_in(self, engine):
        metadata = engine.classify(
            date(2026, 1, 5), date(2026, 1, 5), "daily", allow_single_day=True
        )
        assert metadata.days_in_period == 1

    def test_unknown_type_rejected(self, engine):
        with pytest.raises(InvalidPeriodTypeError):
            engine.classify(date(2026, 1, 1), date(2026, 1, 31), "semimonthly")


class TestValidatePeriodLength:
    """Test the advisory period-length check."""

    def test_monthly_within_tolerance(self, engine):
        check = engine.validate_period_length(31, WagePeriodType.MONTHLY)
        assert check.is_valid
        assert check.expected_days == Decimal("30.33")
        assert check.warning is None

    def test_monthly_outside_tolerance_warns(self, engine, caplog):
        with caplog.at_level(logging.WARNING, logger="loontijdvak"):
            check = engine.validate_period_length(20, WagePeriodType.MONTHLY)

        assert not check.is_valid
        assert check.actual_days == 20
        assert "20 days" in check.warning
        assert "mismatch" in caplog.text

    def test_weekly_tolerance_is_one_day(self, engine):
        assert engine.validate_period_length(8, "weekly").is_valid
        assert not engine.validate_period_length(9, "weekly").is_valid

    def test_daily(self, engine):
        assert engine.validate_period_length(1, "daily").is_valid
        assert not engine.validate_period_length(3, "daily").is_valid

    def test_unknown_type_still_raises(self, engine):
        with pytest.raises(InvalidPeriodTypeError):
            engine.validate_period_length(30, "lunar")


amounts = st.decimals(min_value=0, max_value=1_000_000, places=2, allow_nan=False)


class TestConversionProperties:
    """Property-based checks of conversion behavior."""

    @given(amount=amounts, period_type=st.sampled_from(ALL_TYPES))
    @settings(max_examples=200)
    def test_identity_conversion(self, amount, period_type):
        engine = LoontijdvakEngine()
        assert engine.convert(amount, period_type, period_type) == amount

    @given(
        amount=amounts,
        types=st.sampled_from(
            [
                (WagePeriodType.DAILY, WagePeriodType.WEEKLY),
                (WagePeriodType.DAILY, WagePeriodType.MONTHLY),
                (WagePeriodType.DAILY, WagePeriodType.YEARLY),
                (WagePeriodType.WEEKLY, WagePeriodType.MONTHLY),
                (WagePeriodType.WEEKLY, WagePeriodType.YEARLY),
                (WagePeriodType.MONTHLY, WagePeriodType.YEARLY),
            ]
        ),
    )
    @settings(max_examples=300)
    def test_round_trip_through_coarser_type(self, amount, types):
        engine = LoontijdvakEngine()
        finer, coarser = types
        there = engine.convert(amount, finer, coarser)
        back = engine.convert(there, coarser, finer)
        assert abs(back - amount) <= Decimal("0.01")

    @given(amount=amounts, period_type=st.sampled_from(ALL_TYPES))
    @settings(max_examples=200)
    def test_prorate_matches_conversion_from_yearly(self, amount, period_type):
        engine = LoontijdvakEngine()
        assert engine.prorate_annual(amount, period_type) == engine.convert(
            amount, WagePeriodType.YEARLY, period_type
        )
