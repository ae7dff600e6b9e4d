"""SQLAlchemy implementations of the component and assignment ports.

Stores flush but never commit; the caller owns the transaction. Assignment
writes run in a savepoint, so a constraint violation on one row rolls back
only that write. JSON columns are always reassigned with a fresh dict so the
ORM sees the change.
"""

from __future__ import annotations

import copy
from typing import Any, Mapping
from uuid import UUID

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from loontijdvak.calculators.types import CalculationKind, ComponentType
from loontijdvak.clock import Clock, utc_now
from loontijdvak.errors import NotFoundError
from loontijdvak.models import EmployeeComponentAssignment, WageComponent
from loontijdvak.services.ports import AssignmentRecord, ComponentRecord


def component_record(row: WageComponent) -> ComponentRecord:
    return ComponentRecord(
        id=row.component_id,
        code=row.code,
        component_type=ComponentType(row.component_type),
        calculation_kind=CalculationKind(row.calculation_kind),
        name=row.name,
        formula=row.formula,
        default_amount=row.default_amount,
        is_taxable=row.is_taxable,
        active=row.is_active,
        is_system=row.is_system,
        calculation_metadata=copy.deepcopy(row.calculation_metadata or {}),
    )


def assignment_record(row: EmployeeComponentAssignment) -> AssignmentRecord:
    return AssignmentRecord(
        id=row.assignment_id,
        employee_id=row.employee_id,
        component_id=row.component_id,
        component_code=row.component_code,
        effective_from=row.effective_from,
        effective_to=row.effective_to,
        configuration=copy.deepcopy(row.configuration or {}),
        override_amount=row.override_amount,
        override_formula=row.override_formula,
        notes=row.notes,
        metadata=copy.deepcopy(row.assignment_metadata or {}),
        created_by=row.created_by,
        deleted_at=row.deleted_at,
    )


class SqlComponentStore:
    """Wage component lookup over an async session."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def find_by_code(self, code: str, organization_id: UUID) -> ComponentRecord | None:
        row = await self._find_row(WageComponent.code == code, organization_id)
        return component_record(row) if row else None

    async def find_by_id(self, component_id: UUID, organization_id: UUID) -> ComponentRecord | None:
        row = await self._find_row(WageComponent.component_id == component_id, organization_id)
        return component_record(row) if row else None

    async def update_metadata(
        self,
        component_id: UUID,
        calculation_metadata: Mapping[str, Any],
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> ComponentRecord:
        row = await self._find_row(WageComponent.component_id == component_id, organization_id)
        if row is None:
            raise NotFoundError("Component", component_id)

        row.calculation_metadata = copy.deepcopy(dict(calculation_metadata))
        row.updated_by = actor_id
        await self.session.flush()
        return component_record(row)

    async def _find_row(self, criterion: Any, organization_id: UUID) -> WageComponent | None:
        result = await self.session.execute(
            select(WageComponent).where(
                criterion,
                WageComponent.organization_id == organization_id,
                WageComponent.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()


class SqlAssignmentStore:
    """Employee component assignment persistence over an async session."""

    def __init__(self, session: AsyncSession, clock: Clock = utc_now):
        self.session = session
        self.clock = clock

    async def create(self, assignment: AssignmentRecord, organization_id: UUID) -> AssignmentRecord:
        row = EmployeeComponentAssignment(
            assignment_id=assignment.id,
            organization_id=organization_id,
            employee_id=assignment.employee_id,
            component_id=assignment.component_id,
            component_code=assignment.component_code,
            effective_from=assignment.effective_from,
            effective_to=assignment.effective_to,
            configuration=copy.deepcopy(assignment.configuration),
            override_amount=assignment.override_amount,
            override_formula=assignment.override_formula,
            notes=assignment.notes,
            assignment_metadata=copy.deepcopy(assignment.metadata),
            linked_benefit_assignment_id=assignment.linked_benefit_assignment_id,
            created_by=assignment.created_by,
        )
        async with self.session.begin_nested():
            self.session.add(row)
        return assignment_record(row)

    async def get(self, assignment_id: UUID, organization_id: UUID) -> AssignmentRecord | None:
        row = await self._get_row(assignment_id, organization_id)
        return assignment_record(row) if row else None

    async def update_configuration(
        self,
        assignment_id: UUID,
        configuration: Mapping[str, Any],
        organization_id: UUID,
    ) -> AssignmentRecord:
        row = await self._get_row(assignment_id, organization_id)
        if row is None:
            raise NotFoundError("Assignment", assignment_id)

        async with self.session.begin_nested():
            row.configuration = copy.deepcopy(dict(configuration))
        return assignment_record(row)

    async def soft_delete(
        self, assignment_id: UUID, organization_id: UUID, actor_id: UUID | None
    ) -> None:
        row = await self._get_row(assignment_id, organization_id)
        if row is None:
            raise NotFoundError("Assignment", assignment_id)

        row.deleted_at = self.clock()
        row.deleted_by = actor_id
        await self.session.flush()

    async def find_linked(
        self, source_assignment_id: UUID, organization_id: UUID
    ) -> AssignmentRecord | None:
        result = await self.session.execute(
            select(EmployeeComponentAssignment).where(
                EmployeeComponentAssignment.linked_benefit_assignment_id == source_assignment_id,
                EmployeeComponentAssignment.organization_id == organization_id,
                EmployeeComponentAssignment.deleted_at.is_(None),
            )
        )
        row = result.scalar_one_or_none()
        return assignment_record(row) if row else None

    async def find_for_employee(
        self,
        employee_id: UUID,
        organization_id: UUID,
        component_id: UUID | None = None,
    ) -> list[AssignmentRecord]:
        query = select(EmployeeComponentAssignment).where(
            EmployeeComponentAssignment.employee_id == employee_id,
            EmployeeComponentAssignment.organization_id == organization_id,
            EmployeeComponentAssignment.deleted_at.is_(None),
        )
        if component_id is not None:
            query = query.where(EmployeeComponentAssignment.component_id == component_id)

        result = await self.session.execute(
            query.order_by(EmployeeComponentAssignment.effective_from)
        )
        return [assignment_record(row) for row in result.scalars().all()]

    async def _get_row(
        self, assignment_id: UUID, organization_id: UUID
    ) -> EmployeeComponentAssignment | None:
        result = await self.session.execute(
            select(EmployeeComponentAssignment).where(
                EmployeeComponentAssignment.assignment_id == assignment_id,
                EmployeeComponentAssignment.organization_id == organization_id,
                EmployeeComponentAssignment.deleted_at.is_(None),
            )
        )
        return result.scalar_one_or_none()
