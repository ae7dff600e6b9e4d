"""Collaborator protocols and the records exchanged with them.

Persistence and formula evaluation live outside the core. Services depend on
these protocols only; ``loontijdvak.services.stores`` provides SQLAlchemy
implementations.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from typing import Any, Mapping, Protocol
from uuid import UUID

from loontijdvak.calculators.types import CalculationKind, ComponentType
from loontijdvak.clock import Clock, utc_now

__all__ = [
    "AssignmentRecord",
    "AssignmentStore",
    "Clock",
    "ComponentLookup",
    "ComponentRecord",
    "FormulaEvaluator",
    "FormulaResult",
    "utc_now",
]


@dataclass(frozen=True)
class ComponentRecord:
    """A wage component as seen by the core."""

    id: UUID
    code: str
    component_type: ComponentType
    calculation_kind: CalculationKind = CalculationKind.FIXED
    name: str | None = None
    formula: str | None = None
    default_amount: Decimal | None = None
    is_taxable: bool = True
    active: bool = True
    is_system: bool = False
    calculation_metadata: Mapping[str, Any] = field(default_factory=dict)


@dataclass
class AssignmentRecord:
    """An employee component assignment as seen by the core."""

    id: UUID
    employee_id: UUID
    component_id: UUID
    component_code: str
    effective_from: date
    effective_to: date | None = None
    configuration: dict[str, Any] = field(default_factory=dict)
    override_amount: Decimal | None = None
    override_formula: str | None = None
    notes: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)
    created_by: UUID | None = None
    deleted_at: datetime | None = None

    @property
    def linked_benefit_assignment_id(self) -> UUID | None:
        linked = self.metadata.get("linked_benefit_assignment_id")
        if linked is None:
            return None
        return linked if isinstance(linked, UUID) else UUID(str(linked))

    @property
    def is_auto_generated(self) -> bool:
        return bool(self.metadata.get("auto_generated"))


@dataclass(frozen=True)
class FormulaResult:
    """Outcome of evaluating a formula expression."""

    value: Decimal
    variables_used: tuple[str, ...] = ()


class ComponentLookup(Protocol):
    """Resolves wage components and persists their calculation metadata."""

    async def find_by_code(self, code: str, organization_id: UUID) -> ComponentRecord | None:
        """Return the live component with this code, or None."""
        ...

    async def find_by_id(self, component_id: UUID, organization_id: UUID) -> ComponentRecord | None:
        """Return the live component with this id, or None."""
        ...

    async def update_metadata(
        self,
        component_id: UUID,
        calculation_metadata: Mapping[str, Any],
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> ComponentRecord:
        """Replace the component's calculation metadata."""
        ...


class AssignmentStore(Protocol):
    """Persists employee component assignments."""

    async def create(self, assignment: AssignmentRecord, organization_id: UUID) -> AssignmentRecord:
        ...

    async def get(self, assignment_id: UUID, organization_id: UUID) -> AssignmentRecord | None:
        """Return the live assignment with this id, or None."""
        ...

    async def update_configuration(
        self,
        assignment_id: UUID,
        configuration: Mapping[str, Any],
        organization_id: UUID,
    ) -> AssignmentRecord:
        ...

    async def soft_delete(
        self, assignment_id: UUID, organization_id: UUID, actor_id: UUID | None
    ) -> None:
        ...

    async def find_linked(
        self, source_assignment_id: UUID, organization_id: UUID
    ) -> AssignmentRecord | None:
        """Return the live derived assignment linked to a source, or None."""
        ...

    async def find_for_employee(
        self,
        employee_id: UUID,
        organization_id: UUID,
        component_id: UUID | None = None,
    ) -> list[AssignmentRecord]:
        """Return live assignments for an employee, optionally for one component."""
        ...


class FormulaEvaluator(Protocol):
    """Black-box formula evaluation; the core never parses formula syntax."""

    async def evaluate(self, formula: str, variables: Mapping[str, Any]) -> FormulaResult:
        ...
