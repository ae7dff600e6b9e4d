"""Type definitions for the wage period and proration pipeline."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from fractions import Fraction
from uuid import UUID


class WagePeriodType(str, Enum):
    """Statutory wage period (loontijdvak) variants."""

    DAILY = "daily"
    WEEKLY = "weekly"
    MONTHLY = "monthly"
    YEARLY = "yearly"


class ComponentType(str, Enum):
    """Wage component types."""

    EARNING = "earning"
    DEDUCTION = "deduction"
    BENEFIT = "benefit"
    TAX = "tax"
    REIMBURSEMENT = "reimbursement"


class CalculationKind(str, Enum):
    """How a wage component's amount is derived."""

    FIXED = "fixed"
    PERCENTAGE = "percentage"
    HOURS_BASED = "hours_based"
    FORMULA = "formula"
    UNIT_BASED = "unit_based"


@dataclass(frozen=True)
class LoontijdvakMetadata:
    """Classification of one concrete wage period instance.

    ``days_in_period`` is the actual calendar span of the classified period.
    It is not the standard day count used for proration.
    """

    type: WagePeriodType
    fraction: Fraction
    periods_per_year: int
    days_in_period: int
    period_start: date
    period_end: date


@dataclass(frozen=True)
class ProratingMetadata:
    """Run-wide proration decision, shared read-only by every employee."""

    standard_days: Decimal  # 364 / periods_per_year
    actual_days: int
    factor: Decimal
    needs_prorating: bool
    reason: str


@dataclass(frozen=True)
class PeriodLengthCheck:
    """Advisory result of comparing an actual period length to the legal one."""

    is_valid: bool
    expected_days: Decimal
    actual_days: int
    warning: str | None = None


@dataclass
class ComponentAmount:
    """A raw component amount supplied for one employee in a payroll run."""

    component_type: ComponentType
    amount: Decimal
    component_id: UUID | str | None = None
    component_code: str | None = None
    component_name: str | None = None
    # None means "not specified"; only an explicit False opts out
    should_prorate: bool | None = None


@dataclass(frozen=True)
class ProratedComponent:
    """A component amount after proration, with its provenance."""

    component_type: ComponentType
    original_amount: Decimal
    final_amount: Decimal
    was_prorated: bool
    factor: Decimal
    loontijdvak: WagePeriodType | None = None
    component_id: UUID | str | None = None
    component_code: str | None = None
    component_name: str | None = None


@dataclass
class EmployeeComponentSet:
    """All raw components for one employee in a payroll run."""

    employee_id: UUID | str
    components: list[ComponentAmount] = field(default_factory=list)
    employee_name: str | None = None
    employee_number: str | None = None


@dataclass
class EmployeePayResult:
    """Prorated components and aggregates for one employee."""

    employee_id: UUID | str
    loontijdvak: WagePeriodType
    components: list[ProratedComponent]
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal
    employee_name: str | None = None
    employee_number: str | None = None

    @property
    def was_prorated(self) -> bool:
        return any(c.was_prorated for c in self.components)


@dataclass(frozen=True)
class PayrollRunPeriod:
    """Validated period boundaries and frequency for a payroll run."""

    pay_period_start: date
    pay_period_end: date
    pay_date: date
    configured_frequency: WagePeriodType
    actual_period_start: date
    actual_period_end: date


@dataclass
class PayrollRunCalculation:
    """Result of calculating an entire payroll run."""

    calculation_id: UUID
    loontijdvak: LoontijdvakMetadata
    prorating: ProratingMetadata
    period_check: PeriodLengthCheck
    employees: list[EmployeePayResult]
    calculated_at: datetime
    total_gross: Decimal = Decimal("0")
    total_deductions: Decimal = Decimal("0")
    total_net: Decimal = Decimal("0")


@dataclass(frozen=True)
class ForfaitBracket:
    """Valuation bracket for progressive forfait scales.

    ``rate`` is a percentage (7.5 means 7.5%). A bracket with no rate
    contributes its ``fixed_amount`` once the value reaches it.
    """

    min_value: Decimal
    max_value: Decimal | None = None  # None = no upper limit
    rate: Decimal | None = None
    fixed_amount: Decimal | None = None


@dataclass(frozen=True)
class ForfaitItem:
    """Taxable benefit-in-kind amount for one forfait assignment."""

    assignment_id: UUID
    component_id: UUID
    component_code: str
    amount: Decimal
    calculation_type: str
    base_value: Decimal | None = None
    rate: Decimal | None = None
    taxable: bool = True


@dataclass
class EmployeeForfait:
    """All forfait items for one employee in a payroll run."""

    employee_id: UUID
    items: list[ForfaitItem] = field(default_factory=list)

    @property
    def total(self) -> Decimal:
        return sum((i.amount for i in self.items), Decimal("0"))
