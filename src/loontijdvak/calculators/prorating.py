"""Run-wide proration of component amounts."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Iterable

from loontijdvak.calculators.calendar import PeriodCalendar
from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.calculators.rounding import round2
from loontijdvak.calculators.types import (
    ComponentAmount,
    LoontijdvakMetadata,
    ProratedComponent,
    ProratingMetadata,
)
from loontijdvak.errors import ValidationError

ONE = Decimal("1")


@dataclass(frozen=True)
class ProratingConfig:
    """
    Proration behavior configuration.

    Attributes:
        tolerance: A factor within this distance of 1 is treated as a full
            period. Default 0.001.
    """

    tolerance: Decimal = Decimal("0.001")

    def __post_init__(self) -> None:
        """Validate configuration."""
        if self.tolerance < 0:
            raise ValueError("tolerance must not be negative")
        if self.tolerance >= 1:
            raise ValueError("tolerance must be below 1")


class ProratingCalculator:
    """Scales component amounts when a run's worked span is not a full period.

    The factor is computed once per payroll run and the same ProratingMetadata
    value is handed to every employee, so all employees in a run are prorated
    identically.
    """

    def __init__(
        self,
        engine: LoontijdvakEngine | None = None,
        config: ProratingConfig | None = None,
    ):
        self.engine = engine or LoontijdvakEngine()
        self.config = config or ProratingConfig()

    def compute_factor(
        self,
        metadata: LoontijdvakMetadata,
        actual_period_start: date,
        actual_period_end: date,
    ) -> ProratingMetadata:
        """Compare the actual worked span to the standard period length."""
        actual_days = PeriodCalendar.inclusive_days(actual_period_start, actual_period_end)
        if actual_days < 1:
            raise ValidationError(
                "Actual period end must not be before actual period start",
                {
                    "actual_period_start": str(actual_period_start),
                    "actual_period_end": str(actual_period_end),
                },
            )

        standard_days = self.engine.standard_period_days(metadata.type)
        if standard_days == 0:
            factor = ONE
        else:
            # actual * ppy / 364 keeps the division exact for whole-day inputs
            factor = (
                Decimal(actual_days)
                * metadata.periods_per_year
                / self.engine.period_table.reference_year_days
            )

        needs_prorating = abs(factor - ONE) > self.config.tolerance
        if needs_prorating:
            reason = (
                f"Actual period of {actual_days} days differs from the standard "
                f"{round2(standard_days)} days of a {metadata.type.value} loontijdvak"
            )
        else:
            reason = f"Full {metadata.type.value} loontijdvak, no prorating"

        return ProratingMetadata(
            standard_days=standard_days,
            actual_days=actual_days,
            factor=factor,
            needs_prorating=needs_prorating,
            reason=reason,
        )

    def apply_to_components(
        self,
        components: Iterable[ComponentAmount],
        prorating: ProratingMetadata,
        loontijdvak: LoontijdvakMetadata | None = None,
    ) -> list[ProratedComponent]:
        """Apply the run factor to each component that does not opt out."""
        period_type = loontijdvak.type if loontijdvak else None
        results: list[ProratedComponent] = []

        for component in components:
            original = component.amount
            prorate = prorating.needs_prorating and component.should_prorate is not False
            results.append(
                ProratedComponent(
                    component_type=component.component_type,
                    original_amount=original,
                    final_amount=round2(original * prorating.factor) if prorate else original,
                    was_prorated=prorate,
                    factor=prorating.factor if prorate else ONE,
                    loontijdvak=period_type,
                    component_id=component.component_id,
                    component_code=component.component_code,
                    component_name=component.component_name,
                )
            )

        return results
