"""Payroll run preview endpoints."""

from fastapi import APIRouter

from loontijdvak.api.dependencies import Engine
from loontijdvak.api.routes.loontijdvak import loontijdvak_response
from loontijdvak.api.schemas import (
    ComponentLineResponse,
    EmployeeResultResponse,
    ErrorResponse,
    PayrollRunCalculateRequest,
    PayrollRunCalculationResponse,
    PeriodCheckResponse,
    ProratingResponse,
)
from loontijdvak.calculators.engine import PayrollRunCalculator, PayrollRunRequest
from loontijdvak.calculators.types import ComponentAmount, EmployeeComponentSet

router = APIRouter(prefix="/payroll-runs", tags=["payroll-runs"])


@router.post(
    "/calculate",
    response_model=PayrollRunCalculationResponse,
    responses={422: {"model": ErrorResponse}},
)
async def calculate_payroll_run(
    engine: Engine,
    payload: PayrollRunCalculateRequest,
) -> PayrollRunCalculationResponse:
    """Calculate prorated pay for a run without persisting anything."""
    calculator = PayrollRunCalculator(engine)
    run = PayrollRunRequest(
        pay_period_start=payload.pay_period_start,
        pay_period_end=payload.pay_period_end,
        pay_date=payload.pay_date,
        configured_frequency=payload.configured_frequency,
        actual_period_start=payload.actual_period_start,
        actual_period_end=payload.actual_period_end,
    )
    employees = [
        EmployeeComponentSet(
            employee_id=employee.employee_id,
            employee_name=employee.employee_name,
            employee_number=employee.employee_number,
            components=[
                ComponentAmount(
                    component_type=c.component_type,
                    amount=c.amount,
                    component_id=c.component_id,
                    component_code=c.component_code,
                    component_name=c.component_name,
                    should_prorate=c.should_prorate,
                )
                for c in employee.components
            ],
        )
        for employee in payload.employees
    ]

    result = calculator.calculate(run, employees)

    return PayrollRunCalculationResponse(
        calculation_id=result.calculation_id,
        calculated_at=result.calculated_at,
        loontijdvak=loontijdvak_response(result.loontijdvak),
        prorating=ProratingResponse.model_validate(result.prorating),
        period_check=PeriodCheckResponse.model_validate(result.period_check),
        employees=[
            EmployeeResultResponse(
                employee_id=str(r.employee_id),
                employee_name=r.employee_name,
                employee_number=r.employee_number,
                loontijdvak=r.loontijdvak,
                components=[
                    ComponentLineResponse(
                        component_type=line.component_type,
                        component_id=str(line.component_id) if line.component_id else None,
                        component_code=line.component_code,
                        component_name=line.component_name,
                        original_amount=line.original_amount,
                        final_amount=line.final_amount,
                        was_prorated=line.was_prorated,
                        factor=line.factor,
                        loontijdvak=line.loontijdvak,
                    )
                    for line in r.components
                ],
                gross_pay=r.gross_pay,
                deductions=r.deductions,
                net_pay=r.net_pay,
                was_prorated=r.was_prorated,
            )
            for r in result.employees
        ],
        total_gross=result.total_gross,
        total_deductions=result.total_deductions,
        total_net=result.total_net,
    )
