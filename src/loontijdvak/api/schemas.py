"""Pydantic schemas for API request/response models."""

from datetime import date, datetime
from decimal import Decimal
from typing import Any
from uuid import UUID

from pydantic import BaseModel, ConfigDict, Field

from loontijdvak.calculators.types import ComponentType, WagePeriodType


class ErrorResponse(BaseModel):
    """Standard error response."""

    detail: str
    code: str
    details: dict[str, Any] = Field(default_factory=dict)


# ============================================================================
# Loontijdvak schemas
# ============================================================================


class PeriodTypeInfo(BaseModel):
    type: WagePeriodType
    periods_per_year: int
    fraction: str
    standard_days: Decimal


class ConvertRequest(BaseModel):
    """Convert a per-period amount between wage period types."""

    amount: Decimal = Field(ge=0)
    from_type: WagePeriodType
    to_type: WagePeriodType


class ConvertResponse(BaseModel):
    amount: Decimal
    from_type: WagePeriodType
    to_type: WagePeriodType
    converted_amount: Decimal


class ProrateAnnualRequest(BaseModel):
    annual_amount: Decimal = Field(ge=0)
    period_type: WagePeriodType


class ProrateAnnualResponse(BaseModel):
    annual_amount: Decimal
    period_type: WagePeriodType
    period_amount: Decimal


class ClassifyRequest(BaseModel):
    period_start: date
    period_end: date
    period_type: WagePeriodType


class PeriodCheckResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    is_valid: bool
    expected_days: Decimal
    actual_days: int
    warning: str | None = None


class LoontijdvakResponse(BaseModel):
    """Classification of one concrete period."""

    type: WagePeriodType
    fraction: str
    periods_per_year: int
    days_in_period: int
    period_start: date
    period_end: date


class ClassifyResponse(BaseModel):
    loontijdvak: LoontijdvakResponse
    standard_days: Decimal
    period_check: PeriodCheckResponse


# ============================================================================
# Payroll run schemas
# ============================================================================


class ComponentInput(BaseModel):
    component_type: ComponentType
    amount: Decimal
    component_id: str | None = None
    component_code: str | None = None
    component_name: str | None = None
    should_prorate: bool | None = None


class EmployeeInput(BaseModel):
    employee_id: str
    employee_name: str | None = None
    employee_number: str | None = None
    components: list[ComponentInput] = Field(default_factory=list)


class PayrollRunCalculateRequest(BaseModel):
    """Preview calculation of a payroll run.

    Dates are accepted as strings so malformed values surface as domain
    validation errors.
    """

    pay_period_start: str | None = None
    pay_period_end: str | None = None
    pay_date: str | None = None
    configured_frequency: str | None = None
    actual_period_start: str | None = None
    actual_period_end: str | None = None
    employees: list[EmployeeInput] = Field(default_factory=list)


class ProratingResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    standard_days: Decimal
    actual_days: int
    factor: Decimal
    needs_prorating: bool
    reason: str


class ComponentLineResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    component_type: ComponentType
    component_id: str | None = None
    component_code: str | None = None
    component_name: str | None = None
    original_amount: Decimal
    final_amount: Decimal
    was_prorated: bool
    factor: Decimal
    loontijdvak: WagePeriodType | None = None


class EmployeeResultResponse(BaseModel):
    employee_id: str
    employee_name: str | None = None
    employee_number: str | None = None
    loontijdvak: WagePeriodType
    components: list[ComponentLineResponse]
    gross_pay: Decimal
    deductions: Decimal
    net_pay: Decimal
    was_prorated: bool


class PayrollRunCalculationResponse(BaseModel):
    calculation_id: UUID
    calculated_at: datetime
    loontijdvak: LoontijdvakResponse
    prorating: ProratingResponse
    period_check: PeriodCheckResponse
    employees: list[EmployeeResultResponse]
    total_gross: Decimal
    total_deductions: Decimal
    total_net: Decimal


# ============================================================================
# Forfait rule schemas
# ============================================================================


class ValueMappingResponse(BaseModel):
    source_field: str
    target_field: str
    required: bool


class ForfaitRuleResponse(BaseModel):
    enabled: bool
    target_component_code: str | None = None
    value_mapping: dict[str, ValueMappingResponse]
    conditions: dict[str, Any] | None = None
    description: str | None = None
    configured_at: datetime | None = None
    configured_by: UUID | None = None


class ForfaitRuleEnvelope(BaseModel):
    """An enabled rule, or null when the component has none."""

    component_code: str
    rule: ForfaitRuleResponse | None = None


class ForfaitTemplateResponse(BaseModel):
    name: str
    benefit_type: str
    target_component_code: str
    value_mapping: dict[str, ValueMappingResponse]
    description: str
    legal_reference: str


class ApplyTemplateRequest(BaseModel):
    template_name: str = Field(min_length=1)


# ============================================================================
# Assignment schemas
# ============================================================================


class AssignmentResponse(BaseModel):
    id: UUID
    employee_id: UUID
    component_id: UUID
    component_code: str
    effective_from: date
    effective_to: date | None = None
    configuration: dict[str, Any]
    override_amount: Decimal | None = None
    override_formula: str | None = None
    notes: str | None = None
    metadata: dict[str, Any]


class PropagationResponse(BaseModel):
    outcome: str
    derived_assignment: AssignmentResponse | None = None
    reason: str | None = None


class AssignmentOutcomeResponse(BaseModel):
    assignment: AssignmentResponse
    propagation: PropagationResponse


class ConfigurationUpdate(BaseModel):
    configuration: dict[str, Any]


class BenefitCalculationRequest(BaseModel):
    employee_id: UUID
    component_code: str = Field(min_length=1, max_length=50)
    variables: dict[str, Any] = Field(default_factory=dict)
    as_of: date | None = None


class BenefitCalculationResponse(BaseModel):
    employee_id: UUID
    component_code: str
    component_name: str | None = None
    amount: Decimal
    is_taxable: bool
    method: str
    variables_used: list[str]
    calculated_at: datetime
