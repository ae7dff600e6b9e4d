"""Forfait (benefit-in-kind) valuation for a payroll run.

A forfait component carries its valuation in
``calculation_metadata["forfait_calculation"]``:

    {
        "calculation_type": "percentage_of_catalog_value",
        "rate": "2",            # percent
        "fixed_amount": null,
        "brackets": [{"min_value": "0", "max_value": "1000", "rate": "5"}, ...]
    }

Catalog values are yearly; rental values, meal counts, fixed amounts and
progressive valuations are monthly. Every amount is expressed in the run's
loontijdvak before it is returned.
"""

from __future__ import annotations

import logging
from datetime import date
from decimal import Decimal
from typing import Any, Iterable, Mapping
from uuid import UUID

from loontijdvak.calculators.calendar import PeriodCalendar
from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.calculators.rounding import round2, to_decimal
from loontijdvak.calculators.types import (
    EmployeeForfait,
    ForfaitBracket,
    ForfaitItem,
    WagePeriodType,
)
from loontijdvak.services.ports import (
    AssignmentRecord,
    AssignmentStore,
    ComponentLookup,
    ComponentRecord,
)

logger = logging.getLogger(__name__)

FORFAIT_CALCULATION_KEY = "forfait_calculation"

PERCENTAGE_OF_CATALOG_VALUE = "percentage_of_catalog_value"
PERCENTAGE_OF_RENTAL_VALUE = "percentage_of_rental_value"
FIXED_PER_MEAL = "fixed_per_meal"
PROGRESSIVE_SCALE = "progressive_scale"
FIXED_MONTHLY = "fixed_monthly"

HUNDRED = Decimal("100")


class ForfaitAmountCalculator:
    """Values live forfait assignments for one pay period."""

    def __init__(
        self,
        components: ComponentLookup,
        assignments: AssignmentStore,
        engine: LoontijdvakEngine | None = None,
    ):
        self.components = components
        self.assignments = assignments
        self.engine = engine or LoontijdvakEngine()

    async def calculate_for_run(
        self,
        employee_ids: Iterable[UUID],
        period_start: date,
        period_end: date,
        period_type: WagePeriodType | str,
        organization_id: UUID,
    ) -> list[EmployeeForfait]:
        employee_ids = list(employee_ids)
        logger.info(
            "Calculating forfait for %d employees (%s to %s)",
            len(employee_ids),
            period_start,
            period_end,
            extra={"organization_id": str(organization_id)},
        )
        results = [
            await self.calculate_for_employee(
                employee_id, period_start, period_end, period_type, organization_id
            )
            for employee_id in employee_ids
        ]
        logger.info(
            "Forfait calculation completed: %d employees with forfait items",
            sum(1 for r in results if r.items),
        )
        return results

    async def calculate_for_employee(
        self,
        employee_id: UUID,
        period_start: date,
        period_end: date,
        period_type: WagePeriodType | str,
        organization_id: UUID,
    ) -> EmployeeForfait:
        run_type = self.engine.period_table.coerce(period_type)
        result = EmployeeForfait(employee_id=employee_id)

        for assignment in await self.assignments.find_for_employee(employee_id, organization_id):
            if not PeriodCalendar.is_active_in(
                assignment.effective_from, assignment.effective_to, period_start, period_end
            ):
                continue

            component = await self.components.find_by_id(assignment.component_id, organization_id)
            if component is None:
                continue

            config = (component.calculation_metadata or {}).get(FORFAIT_CALCULATION_KEY)
            if not config:
                continue

            amount = round2(self.calculate_amount(assignment, component, config, run_type))
            if amount <= 0:
                continue

            result.items.append(
                ForfaitItem(
                    assignment_id=assignment.id,
                    component_id=component.id,
                    component_code=component.code,
                    amount=amount,
                    calculation_type=str(config.get("calculation_type")),
                    base_value=self._base_value(assignment.configuration),
                    rate=_optional_decimal(config.get("rate"), "rate"),
                    taxable=True,
                )
            )

        return result

    def calculate_amount(
        self,
        assignment: AssignmentRecord,
        component: ComponentRecord,
        config: Mapping[str, Any],
        run_type: WagePeriodType,
    ) -> Decimal:
        """Unrounded amount for one assignment in the run's loontijdvak."""
        if assignment.override_amount is not None:
            return to_decimal(assignment.override_amount, "override_amount")

        values = assignment.configuration or {}
        calculation_type = config.get("calculation_type")
        rate = _optional_decimal(config.get("rate"), "rate") or Decimal("0")
        fixed_amount = _optional_decimal(config.get("fixed_amount"), "fixed_amount") or Decimal("0")

        if calculation_type == PERCENTAGE_OF_CATALOG_VALUE:
            catalog_value = _config_decimal(values, "catalogValue")
            return self.engine.prorate_annual(catalog_value * rate / HUNDRED, run_type)

        if calculation_type == PERCENTAGE_OF_RENTAL_VALUE:
            rental_value = _config_decimal(values, "rentalValue")
            return self._from_monthly(rental_value * rate / HUNDRED, run_type)

        if calculation_type == FIXED_PER_MEAL:
            meals = _config_decimal(values, "mealsPerMonth")
            return self._from_monthly(meals * fixed_amount, run_type)

        if calculation_type == PROGRESSIVE_SCALE:
            package_value = _config_decimal(values, "packageValue", "baseValue")
            brackets = self.parse_brackets(config.get("brackets") or [])
            return self._from_monthly(self.progressive_amount(package_value, brackets), run_type)

        if calculation_type == FIXED_MONTHLY:
            return self._from_monthly(fixed_amount, run_type)

        logger.warning(
            "Unknown forfait calculation type %r on component %s",
            calculation_type,
            component.code,
        )
        return Decimal("0")

    @staticmethod
    def parse_brackets(raw: Iterable[Mapping[str, Any]]) -> list[ForfaitBracket]:
        return [
            ForfaitBracket(
                min_value=_optional_decimal(b.get("min_value"), "min_value") or Decimal("0"),
                max_value=_optional_decimal(b.get("max_value"), "max_value"),
                rate=_optional_decimal(b.get("rate"), "rate"),
                fixed_amount=_optional_decimal(b.get("fixed_amount"), "fixed_amount"),
            )
            for b in raw
        ]

    @staticmethod
    def progressive_amount(value: Decimal, brackets: list[ForfaitBracket]) -> Decimal:
        """Value a benefit against progressive brackets.

        The value is consumed bracket by bracket from the lowest minimum up.
        A bracket with a rate charges that percentage of the part of the value
        that falls inside it; a bracket without one adds its fixed amount.
        """
        if value <= 0 or not brackets:
            return Decimal("0")

        total = Decimal("0")
        remaining = value

        for bracket in sorted(brackets, key=lambda b: b.min_value):
            if remaining <= 0:
                break

            if bracket.max_value is None:
                in_bracket = remaining
            else:
                in_bracket = min(remaining, bracket.max_value - bracket.min_value)

            if bracket.rate:
                total += in_bracket * bracket.rate / HUNDRED
            elif bracket.fixed_amount:
                total += bracket.fixed_amount

            remaining -= in_bracket

        return total

    def _from_monthly(self, amount: Decimal, run_type: WagePeriodType) -> Decimal:
        if amount <= 0:
            return Decimal("0")
        return self.engine.convert(amount, WagePeriodType.MONTHLY, run_type)

    @staticmethod
    def _base_value(configuration: Mapping[str, Any] | None) -> Decimal | None:
        values = configuration or {}
        for key in ("catalogValue", "rentalValue", "packageValue"):
            if values.get(key) is not None:
                return to_decimal(values[key], key)
        return None


def _optional_decimal(value: Any, name: str) -> Decimal | None:
    if value is None:
        return None
    return to_decimal(value, name)


def _config_decimal(values: Mapping[str, Any], *keys: str) -> Decimal:
    for key in keys:
        if values.get(key) is not None:
            return to_decimal(values[key], key)
    return Decimal("0")
