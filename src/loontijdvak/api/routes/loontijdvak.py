"""Loontijdvak lookup and conversion endpoints."""

from fastapi import APIRouter

from loontijdvak.api.dependencies import Engine
from loontijdvak.api.schemas import (
    ClassifyRequest,
    ClassifyResponse,
    ConvertRequest,
    ConvertResponse,
    ErrorResponse,
    LoontijdvakResponse,
    PeriodCheckResponse,
    PeriodTypeInfo,
    ProrateAnnualRequest,
    ProrateAnnualResponse,
)
from loontijdvak.calculators.rounding import round2
from loontijdvak.calculators.types import LoontijdvakMetadata, WagePeriodType

router = APIRouter(prefix="/loontijdvak", tags=["loontijdvak"])


def loontijdvak_response(metadata: LoontijdvakMetadata) -> LoontijdvakResponse:
    return LoontijdvakResponse(
        type=metadata.type,
        fraction=str(metadata.fraction),
        periods_per_year=metadata.periods_per_year,
        days_in_period=metadata.days_in_period,
        period_start=metadata.period_start,
        period_end=metadata.period_end,
    )


@router.get("/periods", response_model=list[PeriodTypeInfo])
async def list_period_types(engine: Engine) -> list[PeriodTypeInfo]:
    """List the wage period types with their statutory constants."""
    return [
        PeriodTypeInfo(
            type=period_type,
            periods_per_year=engine.periods_per_year(period_type),
            fraction=str(engine.fraction_of_year(period_type)),
            standard_days=round2(engine.standard_period_days(period_type)),
        )
        for period_type in WagePeriodType
    ]


@router.post(
    "/convert",
    response_model=ConvertResponse,
    responses={422: {"model": ErrorResponse}},
)
async def convert_amount(engine: Engine, payload: ConvertRequest) -> ConvertResponse:
    """Convert a per-period amount to another wage period type."""
    return ConvertResponse(
        amount=payload.amount,
        from_type=payload.from_type,
        to_type=payload.to_type,
        converted_amount=engine.convert(payload.amount, payload.from_type, payload.to_type),
    )


@router.post(
    "/prorate-annual",
    response_model=ProrateAnnualResponse,
    responses={422: {"model": ErrorResponse}},
)
async def prorate_annual(engine: Engine, payload: ProrateAnnualRequest) -> ProrateAnnualResponse:
    """Apportion an annual amount to one period."""
    return ProrateAnnualResponse(
        annual_amount=payload.annual_amount,
        period_type=payload.period_type,
        period_amount=engine.prorate_annual(payload.annual_amount, payload.period_type),
    )


@router.post(
    "/classify",
    response_model=ClassifyResponse,
    responses={422: {"model": ErrorResponse}},
)
async def classify_period(engine: Engine, payload: ClassifyRequest) -> ClassifyResponse:
    """Classify a concrete period and check its length."""
    metadata = engine.classify(payload.period_start, payload.period_end, payload.period_type)
    check = engine.validate_period_length(metadata.days_in_period, metadata.type)
    return ClassifyResponse(
        loontijdvak=loontijdvak_response(metadata),
        standard_days=round2(engine.standard_period_days(metadata.type)),
        period_check=PeriodCheckResponse.model_validate(check),
    )
