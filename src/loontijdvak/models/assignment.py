"""Employee component assignments, including derived forfait assignments."""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from typing import TYPE_CHECKING, Any
from uuid import UUID, uuid4

from sqlalchemy import CheckConstraint, Date, ForeignKey, Index, Numeric, String, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from loontijdvak.models.base import Base, TimestampMixin

if TYPE_CHECKING:
    from loontijdvak.models.component import WageComponent


class EmployeeComponentAssignment(Base, TimestampMixin):
    """Links one employee to one wage component for an effective date range.

    A derived forfait assignment carries ``linked_benefit_assignment_id``.
    The partial unique index on that column over live rows guarantees at most
    one live derived assignment per source, even when two propagation events
    for the same source race.
    """

    __tablename__ = "employee_component_assignment"

    assignment_id: Mapped[UUID] = mapped_column(primary_key=True, default=uuid4)
    organization_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    employee_id: Mapped[UUID] = mapped_column(nullable=False, index=True)
    component_id: Mapped[UUID] = mapped_column(
        ForeignKey("wage_component.component_id", ondelete="RESTRICT"),
        nullable=False,
    )
    component_code: Mapped[str] = mapped_column(String(50), nullable=False)
    effective_from: Mapped[date] = mapped_column(Date, nullable=False)
    effective_to: Mapped[date | None] = mapped_column(Date, nullable=True)
    configuration: Mapped[dict[str, Any]] = mapped_column(nullable=False, default=dict)
    override_amount: Mapped[Decimal | None] = mapped_column(Numeric(14, 2), nullable=True)
    override_formula: Mapped[str | None] = mapped_column(String, nullable=True)
    notes: Mapped[str | None] = mapped_column(String(500), nullable=True)
    # "metadata" is reserved on declarative classes
    assignment_metadata: Mapped[dict[str, Any]] = mapped_column(
        "metadata", nullable=False, default=dict
    )
    linked_benefit_assignment_id: Mapped[UUID | None] = mapped_column(
        ForeignKey("employee_component_assignment.assignment_id"),
        nullable=True,
    )
    created_by: Mapped[UUID | None] = mapped_column(nullable=True)
    deleted_at: Mapped[datetime | None] = mapped_column(nullable=True)
    deleted_by: Mapped[UUID | None] = mapped_column(nullable=True)

    __table_args__ = (
        CheckConstraint(
            "effective_to IS NULL OR effective_to > effective_from",
            name="assignment_dates_check",
        ),
        Index(
            "assignment_live_link_unique",
            "linked_benefit_assignment_id",
            unique=True,
            postgresql_where=text("deleted_at IS NULL"),
            sqlite_where=text("deleted_at IS NULL"),
        ),
    )

    # Relationships
    component: Mapped[WageComponent] = relationship(back_populates="assignments")
