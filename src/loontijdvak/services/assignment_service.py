"""Benefit assignment lifecycle.

Entry point for assigning benefits to employees. Every lifecycle action runs
forfait propagation after the source change is persisted; the propagation
outcome is reported alongside the assignment and never fails it.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Callable, Mapping
from uuid import UUID, uuid4

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from loontijdvak.calculators.calendar import PeriodCalendar
from loontijdvak.calculators.rounding import round2, to_decimal
from loontijdvak.clock import Clock, utc_now
from loontijdvak.errors import NotFoundError, ValidationError
from loontijdvak.services.forfait_propagation import ForfaitPropagationEngine
from loontijdvak.services.ports import (
    AssignmentRecord,
    AssignmentStore,
    ComponentLookup,
    FormulaEvaluator,
)
from loontijdvak.services.types import PropagationResult

logger = logging.getLogger(__name__)


class AssignmentCreate(BaseModel):
    """Input for assigning a benefit component to an employee."""

    model_config = ConfigDict(extra="ignore")

    employee_id: UUID
    component_code: str = Field(min_length=1, max_length=50)
    effective_from: date
    effective_to: date | None = None
    configuration: dict[str, Any] = Field(default_factory=dict)
    override_amount: Decimal | None = None
    override_formula: str | None = None
    notes: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_dates(self) -> AssignmentCreate:
        if self.effective_to is not None and self.effective_to <= self.effective_from:
            raise ValueError("effective_to must be after effective_from")
        return self


@dataclass(frozen=True)
class AssignmentOutcome:
    """A persisted source assignment and what propagation did with it."""

    assignment: AssignmentRecord
    propagation: PropagationResult


@dataclass(frozen=True)
class BenefitCalculation:
    employee_id: UUID
    component_code: str
    component_name: str | None
    amount: Decimal
    is_taxable: bool
    method: str
    variables_used: tuple[str, ...]
    calculated_at: datetime


class BenefitAssignmentService:
    """Assigns, reconfigures and removes employee benefits."""

    def __init__(
        self,
        components: ComponentLookup,
        assignments: AssignmentStore,
        propagation: ForfaitPropagationEngine,
        formulas: FormulaEvaluator | None = None,
        clock: Clock = utc_now,
        id_factory: Callable[[], UUID] = uuid4,
    ):
        self.components = components
        self.assignments = assignments
        self.propagation = propagation
        self.formulas = formulas
        self.clock = clock
        self.id_factory = id_factory

    async def assign(
        self,
        data: AssignmentCreate | Mapping[str, Any],
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> AssignmentOutcome:
        validated = self._validate(data)

        logger.info(
            "Assigning benefit %s to employee %s",
            validated.component_code,
            validated.employee_id,
            extra={"organization_id": str(organization_id)},
        )

        component = await self.components.find_by_code(validated.component_code, organization_id)
        if component is None:
            raise NotFoundError("Component", validated.component_code)

        existing = await self.assignments.find_for_employee(
            validated.employee_id, organization_id, component_id=component.id
        )
        for other in existing:
            if PeriodCalendar.ranges_overlap(
                validated.effective_from,
                validated.effective_to,
                other.effective_from,
                other.effective_to,
            ):
                raise ValidationError(
                    "Assignment overlaps an existing assignment for this component",
                    {
                        "conflicting_assignment_id": str(other.id),
                        "component_code": component.code,
                    },
                )

        assignment = await self.assignments.create(
            AssignmentRecord(
                id=self.id_factory(),
                employee_id=validated.employee_id,
                component_id=component.id,
                component_code=component.code,
                effective_from=validated.effective_from,
                effective_to=validated.effective_to,
                configuration=validated.configuration,
                override_amount=validated.override_amount,
                override_formula=validated.override_formula,
                notes=validated.notes,
                created_by=actor_id,
            ),
            organization_id,
        )
        logger.info("Benefit assignment %s created", assignment.id)

        propagation = await self.propagation.on_created(assignment, organization_id, actor_id)
        return AssignmentOutcome(assignment, propagation)

    async def update_configuration(
        self,
        assignment_id: UUID,
        configuration: Mapping[str, Any],
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> AssignmentOutcome:
        current = await self.assignments.get(assignment_id, organization_id)
        if current is None:
            raise NotFoundError("Assignment", assignment_id)

        updated = await self.assignments.update_configuration(
            assignment_id, dict(configuration), organization_id
        )
        logger.info("Benefit assignment %s reconfigured", assignment_id)

        propagation = await self.propagation.on_updated(updated, organization_id, actor_id)
        return AssignmentOutcome(updated, propagation)

    async def remove(
        self,
        assignment_id: UUID,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> AssignmentOutcome:
        current = await self.assignments.get(assignment_id, organization_id)
        if current is None:
            raise NotFoundError("Assignment", assignment_id)

        await self.assignments.soft_delete(assignment_id, organization_id, actor_id)
        logger.info("Benefit assignment %s removed", assignment_id)

        propagation = await self.propagation.on_deleted(assignment_id, organization_id, actor_id)
        return AssignmentOutcome(current, propagation)

    async def employee_benefits(
        self,
        employee_id: UUID,
        organization_id: UUID,
        as_of: date | None = None,
    ) -> list[AssignmentRecord]:
        """Live assignments of an employee that are in effect on a date."""
        on = as_of or self.clock().date()
        return [
            a
            for a in await self.assignments.find_for_employee(employee_id, organization_id)
            if a.effective_from <= on and (a.effective_to is None or on < a.effective_to)
        ]

    async def calculate_benefit(
        self,
        employee_id: UUID,
        component_code: str,
        variables: Mapping[str, Any],
        organization_id: UUID,
        as_of: date | None = None,
    ) -> BenefitCalculation:
        """Value a benefit for an employee.

        Precedence: employee override amount, employee override formula,
        component formula, component default amount.
        """
        component = await self.components.find_by_code(component_code, organization_id)
        if component is None:
            raise NotFoundError("Component", component_code)

        on = as_of or self.clock().date()
        assignment = next(
            (
                a
                for a in await self.assignments.find_for_employee(
                    employee_id, organization_id, component_id=component.id
                )
                if a.effective_from <= on and (a.effective_to is None or on < a.effective_to)
            ),
            None,
        )

        variables_used: tuple[str, ...] = ()
        if assignment is not None and assignment.override_amount is not None:
            amount = to_decimal(assignment.override_amount, "override_amount")
            method = "employee_override_amount"
        elif assignment is not None and assignment.override_formula:
            result = await self._evaluate(assignment.override_formula, variables)
            amount, variables_used = result.value, result.variables_used
            method = "employee_override_formula"
        elif component.formula:
            result = await self._evaluate(component.formula, variables)
            amount, variables_used = result.value, result.variables_used
            method = "component_formula"
        elif component.default_amount is not None:
            amount = component.default_amount
            method = "fixed_amount"
        else:
            raise ValidationError(
                "Component has no calculation method defined",
                {"component_code": component_code},
            )

        calculation = BenefitCalculation(
            employee_id=employee_id,
            component_code=component.code,
            component_name=component.name,
            amount=round2(to_decimal(amount)),
            is_taxable=component.is_taxable,
            method=method,
            variables_used=tuple(variables_used),
            calculated_at=self.clock(),
        )
        logger.info(
            "Benefit %s calculated for employee %s using %s",
            component_code,
            employee_id,
            method,
        )
        return calculation

    async def _evaluate(self, formula: str, variables: Mapping[str, Any]):
        if self.formulas is None:
            raise ValidationError("No formula evaluator configured", {"formula": formula})
        return await self.formulas.evaluate(formula, variables)

    @staticmethod
    def _validate(data: AssignmentCreate | Mapping[str, Any]) -> AssignmentCreate:
        if isinstance(data, AssignmentCreate):
            return data
        try:
            return AssignmentCreate.model_validate(data)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                "Invalid assignment",
                {"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc
