"""Payroll run calculation - main orchestrator."""

from __future__ import annotations

import hashlib
import json
import logging
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Iterable
from uuid import UUID

from loontijdvak.calculators.calendar import PeriodCalendar
from loontijdvak.calculators.line_builder import ComponentLineBuilder
from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.calculators.prorating import ProratingCalculator, ProratingConfig
from loontijdvak.calculators.rounding import round2
from loontijdvak.calculators.types import (
    EmployeeComponentSet,
    EmployeePayResult,
    LoontijdvakMetadata,
    PayrollRunCalculation,
    PayrollRunPeriod,
    ProratingMetadata,
    WagePeriodType,
)
from loontijdvak.clock import Clock, utc_now
from loontijdvak.config import get_settings
from loontijdvak.errors import ValidationError

logger = logging.getLogger(__name__)


@dataclass
class PayrollRunRequest:
    """Raw payroll run boundaries as supplied by the caller.

    The actual worked span defaults to the pay period when omitted.
    """

    pay_period_start: date | str | None
    pay_period_end: date | str | None
    pay_date: date | str | None
    configured_frequency: WagePeriodType | str | None
    actual_period_start: date | str | None = None
    actual_period_end: date | str | None = None


class PayrollRunCalculator:
    """Payroll run calculation workflow.

    Calculation pipeline (stable order, once per run):
    1) Validate run boundaries and frequency
    2) Classify the loontijdvak from the configured frequency
    3) Advisory period-length check (logged, never blocking)
    4) Compute the prorating factor
    5) Per employee: prorate components, aggregate gross/deductions/net

    Steps 2-4 happen exactly once; their results are passed by value into every
    employee computation.
    """

    def __init__(
        self,
        engine: LoontijdvakEngine | None = None,
        prorating: ProratingCalculator | None = None,
        clock: Clock = utc_now,
        engine_version: str | None = None,
    ):
        self.engine = engine or LoontijdvakEngine()
        self.prorating = prorating or ProratingCalculator(
            self.engine, ProratingConfig(tolerance=get_settings().prorating_tolerance)
        )
        self.clock = clock
        self.engine_version = engine_version or get_settings().engine_version

    def validate_run_data(self, request: PayrollRunRequest) -> PayrollRunPeriod:
        """Validate and normalize payroll run boundaries."""
        if not request.pay_period_start:
            raise ValidationError("Pay period start date is required")
        if not request.pay_period_end:
            raise ValidationError("Pay period end date is required")
        if not request.pay_date:
            raise ValidationError("Pay date is required")
        if not request.configured_frequency:
            raise ValidationError("Configured pay frequency is required")

        start = PeriodCalendar.parse_date(
            request.pay_period_start, "Invalid pay period start date"
        )
        end = PeriodCalendar.parse_date(request.pay_period_end, "Invalid pay period end date")
        pay_date = PeriodCalendar.parse_date(request.pay_date, "Invalid pay date")
        frequency = self.engine.period_table.coerce(request.configured_frequency)

        if start > end:
            raise ValidationError("Pay period start date must be before end date")

        actual_start = (
            PeriodCalendar.parse_date(request.actual_period_start, "Invalid actual period start date")
            if request.actual_period_start
            else start
        )
        actual_end = (
            PeriodCalendar.parse_date(request.actual_period_end, "Invalid actual period end date")
            if request.actual_period_end
            else end
        )
        if actual_start > actual_end:
            raise ValidationError("Actual period start date must be before end date")

        return PayrollRunPeriod(
            pay_period_start=start,
            pay_period_end=end,
            pay_date=pay_date,
            configured_frequency=frequency,
            actual_period_start=actual_start,
            actual_period_end=actual_end,
        )

    def calculate(
        self,
        request: PayrollRunRequest,
        employees: Iterable[EmployeeComponentSet],
    ) -> PayrollRunCalculation:
        """Calculate prorated components and totals for every employee in a run."""
        period = self.validate_run_data(request)

        loontijdvak = self.engine.classify(
            period.pay_period_start,
            period.pay_period_end,
            period.configured_frequency,
            allow_single_day=period.configured_frequency == WagePeriodType.DAILY,
        )
        period_check = self.engine.validate_period_length(
            loontijdvak.days_in_period, loontijdvak.type
        )
        prorating = self.prorating.compute_factor(
            loontijdvak, period.actual_period_start, period.actual_period_end
        )

        logger.info(
            "Loontijdvak determined for payroll run: type=%s days=%s factor=%s prorating=%s",
            loontijdvak.type.value,
            loontijdvak.days_in_period,
            prorating.factor,
            prorating.needs_prorating,
        )

        employee_sets = list(employees)
        results = [
            self._calculate_employee(employee, loontijdvak, prorating)
            for employee in employee_sets
        ]

        total_gross = round2(sum((r.gross_pay for r in results), Decimal("0")))
        total_deductions = round2(sum((r.deductions for r in results), Decimal("0")))
        total_net = round2(sum((r.net_pay for r in results), Decimal("0")))

        calculation_id = self._generate_calculation_id(
            period, self._compute_inputs_fingerprint(employee_sets)
        )

        return PayrollRunCalculation(
            calculation_id=calculation_id,
            loontijdvak=loontijdvak,
            prorating=prorating,
            period_check=period_check,
            employees=results,
            calculated_at=self.clock(),
            total_gross=total_gross,
            total_deductions=total_deductions,
            total_net=total_net,
        )

    def _calculate_employee(
        self,
        employee: EmployeeComponentSet,
        loontijdvak: LoontijdvakMetadata,
        prorating: ProratingMetadata,
    ) -> EmployeePayResult:
        """Prorate and aggregate a single employee's components."""
        lines = self.prorating.apply_to_components(employee.components, prorating, loontijdvak)

        return EmployeePayResult(
            employee_id=employee.employee_id,
            loontijdvak=loontijdvak.type,
            components=lines,
            gross_pay=ComponentLineBuilder.calculate_gross(lines),
            deductions=ComponentLineBuilder.calculate_deductions(lines),
            net_pay=ComponentLineBuilder.calculate_net(lines),
            employee_name=employee.employee_name,
            employee_number=employee.employee_number,
        )

    def _generate_calculation_id(self, period: PayrollRunPeriod, inputs_fingerprint: str) -> UUID:
        """Generate deterministic calculation ID."""
        data = {
            "pay_period_start": str(period.pay_period_start),
            "pay_period_end": str(period.pay_period_end),
            "actual_period_start": str(period.actual_period_start),
            "actual_period_end": str(period.actual_period_end),
            "frequency": period.configured_frequency.value,
            "engine_version": self.engine_version,
            "inputs_fingerprint": inputs_fingerprint,
        }
        json_str = json.dumps(data, sort_keys=True)
        hash_bytes = hashlib.sha256(json_str.encode()).digest()
        return UUID(bytes=hash_bytes[:16])

    def _compute_inputs_fingerprint(self, employees: list[EmployeeComponentSet]) -> str:
        """Compute fingerprint of all component inputs used in calculation."""
        inputs_data: list[dict[str, Any]] = [
            {
                "employee_id": str(employee.employee_id),
                "components": [
                    {
                        "component_type": c.component_type.value,
                        "component_id": str(c.component_id) if c.component_id else None,
                        "amount": str(c.amount),
                        "should_prorate": c.should_prorate,
                    }
                    for c in employee.components
                ],
            }
            for employee in employees
        ]
        json_str = json.dumps(inputs_data, sort_keys=True)
        return hashlib.sha256(json_str.encode()).hexdigest()[:32]
