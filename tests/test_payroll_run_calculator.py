"""Unit tests for the payroll run calculation workflow."""

from __future__ import annotations

from datetime import date
from decimal import Decimal
from uuid import uuid4

import pytest

from loontijdvak.calculators.engine import PayrollRunCalculator, PayrollRunRequest
from loontijdvak.calculators.prorating import ProratingCalculator
from loontijdvak.calculators.types import (
    ComponentAmount,
    ComponentType,
    EmployeeComponentSet,
    WagePeriodType,
)
from loontijdvak.errors import InvalidPeriodTypeError, ValidationError


@pytest.fixture
def calculator(engine, fixed_clock) -> PayrollRunCalculator:
    return PayrollRunCalculator(
        engine,
        ProratingCalculator(engine),
        clock=fixed_clock,
        engine_version="1.0.0",
    )


def _monthly_request(**overrides) -> PayrollRunRequest:
    data = {
        "pay_period_start": "2026-01-01",
        "pay_period_end": "2026-01-31",
        "pay_date": "2026-01-31",
        "configured_frequency": "monthly",
    }
    data.update(overrides)
    return PayrollRunRequest(**data)


def _employee(salary: str, deduction: str = "0.00", **kwargs) -> EmployeeComponentSet:
    return EmployeeComponentSet(
        employee_id=kwargs.pop("employee_id", uuid4()),
        components=[
            ComponentAmount(ComponentType.EARNING, Decimal(salary), component_code="SALARY"),
            ComponentAmount(ComponentType.DEDUCTION, Decimal(deduction), component_code="AOV"),
        ],
        **kwargs,
    )


class TestValidateRunData:
    """Test payroll run boundary validation."""

    @pytest.mark.parametrize(
        "field, message",
        [
            ("pay_period_start", "Pay period start date is required"),
            ("pay_period_end", "Pay period end date is required"),
            ("pay_date", "Pay date is required"),
            ("configured_frequency", "Configured pay frequency is required"),
        ],
    )
    def test_required_fields(self, calculator, field, message):
        with pytest.raises(ValidationError) as exc_info:
            calculator.validate_run_data(_monthly_request(**{field: None}))
        assert exc_info.value.message == message

    def test_invalid_start_date(self, calculator):
        with pytest.raises(ValidationError, match="Invalid pay period start date"):
            calculator.validate_run_data(_monthly_request(pay_period_start="not-a-date"))

    def test_invalid_end_date(self, calculator):
        with pytest.raises(ValidationError, match="Invalid pay period end date"):
            calculator.validate_run_data(_monthly_request(pay_period_end="2026-02-30"))

    def test_start_after_end(self, calculator):
        with pytest.raises(ValidationError, match="Pay period start date must be before end date"):
            calculator.validate_run_data(
                _monthly_request(pay_period_start="2026-02-01", pay_period_end="2026-01-01")
            )

    def test_unknown_frequency(self, calculator):
        with pytest.raises(InvalidPeriodTypeError):
            calculator.validate_run_data(_monthly_request(configured_frequency="biweekly"))

    def test_actual_period_defaults_to_pay_period(self, calculator):
        period = calculator.validate_run_data(_monthly_request())

        assert period.actual_period_start == date(2026, 1, 1)
        assert period.actual_period_end == date(2026, 1, 31)
        assert period.configured_frequency == WagePeriodType.MONTHLY

    def test_accepts_date_objects(self, calculator):
        period = calculator.validate_run_data(
            _monthly_request(pay_period_start=date(2026, 1, 1), pay_period_end=date(2026, 1, 31))
        )
        assert period.pay_period_start == date(2026, 1, 1)


class TestCalculate:
    """Test the end-to-end run calculation."""

    def test_partial_month_prorates_every_employee(self, calculator, fixed_clock):
        employees = [_employee("3000.00", "300.00"), _employee("6000.00", "600.00")]

        result = calculator.calculate(
            _monthly_request(actual_period_end="2026-01-30"), employees
        )

        assert result.loontijdvak.type == WagePeriodType.MONTHLY
        assert result.loontijdvak.days_in_period == 31
        assert result.prorating.actual_days == 30
        assert result.prorating.needs_prorating is True
        assert result.calculated_at == fixed_clock()

        first, second = result.employees
        assert first.gross_pay == Decimal("2967.03")
        assert first.deductions == Decimal("296.70")
        assert first.net_pay == Decimal("2670.33")
        assert second.gross_pay == Decimal("5934.07")
        assert first.was_prorated and second.was_prorated

        assert result.total_gross == first.gross_pay + second.gross_pay
        assert result.total_net == first.net_pay + second.net_pay

    def test_every_line_carries_the_run_loontijdvak(self, calculator):
        result = calculator.calculate(_monthly_request(), [_employee("1000.00")])

        assert all(
            line.loontijdvak == WagePeriodType.MONTHLY
            for line in result.employees[0].components
        )
        assert result.employees[0].loontijdvak == WagePeriodType.MONTHLY

    def test_period_check_is_advisory(self, calculator):
        # A 10-day span configured as monthly still calculates
        result = calculator.calculate(
            _monthly_request(pay_period_end="2026-01-10"), [_employee("1000.00")]
        )

        assert result.period_check.is_valid is False
        assert result.period_check.warning is not None
        assert result.employees[0].gross_pay > 0

    def test_refund_increases_net(self, calculator):
        result = calculator.calculate(
            _monthly_request(
                configured_frequency="weekly",
                pay_period_start="2026-01-05",
                pay_period_end="2026-01-11",
                pay_date="2026-01-12",
            ),
            [_employee("700.00", "-25.00")],
        )

        assert result.prorating.needs_prorating is False
        assert result.employees[0].net_pay == Decimal("725.00")

    def test_single_day_daily_run(self, calculator):
        result = calculator.calculate(
            _monthly_request(
                configured_frequency="daily",
                pay_period_start="2026-01-05",
                pay_period_end="2026-01-05",
                pay_date="2026-01-05",
            ),
            [_employee("150.00")],
        )

        assert result.loontijdvak.days_in_period == 1
        assert result.prorating.factor == Decimal("1")
        assert result.employees[0].gross_pay == Decimal("150.00")

    def test_single_day_monthly_run_rejected(self, calculator):
        with pytest.raises(ValidationError):
            calculator.calculate(
                _monthly_request(pay_period_start="2026-01-05", pay_period_end="2026-01-05"),
                [_employee("150.00")],
            )

    def test_calculation_id_is_deterministic(self, calculator):
        employee_id = uuid4()
        first = calculator.calculate(
            _monthly_request(), [_employee("1000.00", employee_id=employee_id)]
        )
        second = calculator.calculate(
            _monthly_request(), [_employee("1000.00", employee_id=employee_id)]
        )
        changed = calculator.calculate(
            _monthly_request(), [_employee("1000.01", employee_id=employee_id)]
        )

        assert first.calculation_id == second.calculation_id
        assert first.calculation_id != changed.calculation_id

    def test_no_employees(self, calculator):
        result = calculator.calculate(_monthly_request(), [])

        assert result.employees == []
        assert result.total_gross == Decimal("0.00")
