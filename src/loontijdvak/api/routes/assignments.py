"""Benefit assignment endpoints."""

from datetime import date
from typing import Annotated
from uuid import UUID

from fastapi import APIRouter, Path, Query, status

from loontijdvak.api.dependencies import ActorId, AssignmentService, OrganizationId
from loontijdvak.api.schemas import (
    AssignmentOutcomeResponse,
    AssignmentResponse,
    BenefitCalculationRequest,
    BenefitCalculationResponse,
    ConfigurationUpdate,
    ErrorResponse,
    PropagationResponse,
)
from loontijdvak.services.assignment_service import AssignmentCreate, AssignmentOutcome
from loontijdvak.services.ports import AssignmentRecord

router = APIRouter(prefix="/assignments", tags=["assignments"])


def assignment_response(record: AssignmentRecord) -> AssignmentResponse:
    return AssignmentResponse(
        id=record.id,
        employee_id=record.employee_id,
        component_id=record.component_id,
        component_code=record.component_code,
        effective_from=record.effective_from,
        effective_to=record.effective_to,
        configuration=record.configuration,
        override_amount=record.override_amount,
        override_formula=record.override_formula,
        notes=record.notes,
        metadata=record.metadata,
    )


def outcome_response(outcome: AssignmentOutcome) -> AssignmentOutcomeResponse:
    propagation = outcome.propagation
    return AssignmentOutcomeResponse(
        assignment=assignment_response(outcome.assignment),
        propagation=PropagationResponse(
            outcome=propagation.outcome.value,
            derived_assignment=(
                assignment_response(propagation.derived_assignment)
                if propagation.derived_assignment
                else None
            ),
            reason=propagation.reason,
        ),
    )


@router.post(
    "",
    response_model=AssignmentOutcomeResponse,
    status_code=status.HTTP_201_CREATED,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def create_assignment(
    payload: AssignmentCreate,
    service: AssignmentService,
    organization_id: OrganizationId,
    actor_id: ActorId,
) -> AssignmentOutcomeResponse:
    """Assign a benefit to an employee and derive its forfait."""
    outcome = await service.assign(payload, organization_id, actor_id)
    return outcome_response(outcome)


@router.get("", response_model=list[AssignmentResponse])
async def list_employee_benefits(
    service: AssignmentService,
    organization_id: OrganizationId,
    employee_id: Annotated[UUID, Query()],
    as_of: Annotated[date | None, Query()] = None,
) -> list[AssignmentResponse]:
    """List an employee's assignments in effect on a date."""
    records = await service.employee_benefits(employee_id, organization_id, as_of)
    return [assignment_response(r) for r in records]


@router.put(
    "/{assignment_id}/configuration",
    response_model=AssignmentOutcomeResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def update_configuration(
    assignment_id: Annotated[UUID, Path()],
    payload: ConfigurationUpdate,
    service: AssignmentService,
    organization_id: OrganizationId,
    actor_id: ActorId,
) -> AssignmentOutcomeResponse:
    """Replace an assignment's configuration and resync its forfait."""
    outcome = await service.update_configuration(
        assignment_id, payload.configuration, organization_id, actor_id
    )
    return outcome_response(outcome)


@router.delete(
    "/{assignment_id}",
    response_model=AssignmentOutcomeResponse,
    responses={404: {"model": ErrorResponse}},
)
async def remove_assignment(
    assignment_id: Annotated[UUID, Path()],
    service: AssignmentService,
    organization_id: OrganizationId,
    actor_id: ActorId,
) -> AssignmentOutcomeResponse:
    """Remove an assignment and its derived forfait."""
    outcome = await service.remove(assignment_id, organization_id, actor_id)
    return outcome_response(outcome)


@router.post(
    "/calculate-benefit",
    response_model=BenefitCalculationResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def calculate_benefit(
    payload: BenefitCalculationRequest,
    service: AssignmentService,
    organization_id: OrganizationId,
) -> BenefitCalculationResponse:
    """Value a benefit for an employee."""
    result = await service.calculate_benefit(
        payload.employee_id,
        payload.component_code,
        payload.variables,
        organization_id,
        as_of=payload.as_of,
    )
    return BenefitCalculationResponse(
        employee_id=result.employee_id,
        component_code=result.component_code,
        component_name=result.component_name,
        amount=result.amount,
        is_taxable=result.is_taxable,
        method=result.method,
        variables_used=list(result.variables_used),
        calculated_at=result.calculated_at,
    )
