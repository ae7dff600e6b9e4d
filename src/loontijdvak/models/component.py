"""Wage component definitions."""

from __future__ import annotations

from datetime import datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import Boolean, CheckConstraint, Numeric, String, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column, relationship

from loontijdvak.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from loontijdvak.models.assignment import EmployeeComponentAssignment


class WageComponent(Base, TimestampMixin):
    """A reusable wage component definition, unique by code per organization.

    ``code`` and ``calculation_kind`` are immutable after creation.
    ``calculation_metadata`` holds the forfait rule (on benefit components) and
    the forfait calculation config (on forfait components).
    """

    __tablename__ = "wage_component"

    component_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    code: Mapped[str] = mapped_column(String(50), nullable=False)
    name: Mapped[str] = mapped_column(String(100), nullable=False)
    component_type: Mapped[str] = mapped_column(String, nullable=False)
    calculation_kind: Mapped[str] = mapped_column(String, nullable=False, default="fixed")
    formula: Mapped[str | None] = mapped_column(String, nullable=True)
    default_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    is_taxable: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    is_system: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    calculation_metadata: Mapped[dict[str, Any]] = mapped_column(nullable=False, default=dict)
    updated_by: Mapped[UUID | None] = mapped_column(nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)

    __table_args__ = (
        UniqueConstraint("organization_id", "code", name="wage_component_org_code_unique"),
        CheckConstraint(
            "component_type IN ('earning', 'deduction', 'benefit', 'tax', 'reimbursement')",
            name="wage_component_type_check",
        ),
        CheckConstraint(
            "calculation_kind IN ('fixed', 'percentage', 'hours_based', 'formula', 'unit_based')",
            name="wage_component_calculation_kind_check",
        ),
    )

    # Relationships
    assignments: Mapped[list[EmployeeComponentAssignment]] = relationship(
        back_populates="component"
    )
