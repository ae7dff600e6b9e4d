"""Per-employee aggregation of prorated component lines."""

from __future__ import annotations

from decimal import Decimal

from loontijdvak.calculators.rounding import round2
from loontijdvak.calculators.types import ComponentType, ProratedComponent


class ComponentLineBuilder:
    """Aggregates prorated component lines into pay totals.

    Sign conventions:
    - EARNING and DEDUCTION amounts are carried as supplied (positive in the
      normal case; a negative deduction is a refund)
    - NET = GROSS - DEDUCTIONS

    Rounding:
    - GROSS and DEDUCTIONS are summed at full precision, then rounded to
      cents once; NET is rounded again after subtracting them
    """

    @staticmethod
    def sum_by_type(lines: list[ProratedComponent]) -> dict[ComponentType, Decimal]:
        """Sum final amounts by component type (unrounded)."""
        totals: dict[ComponentType, Decimal] = {ct: Decimal("0") for ct in ComponentType}
        for line in lines:
            totals[line.component_type] += line.final_amount
        return totals

    @staticmethod
    def calculate_gross(lines: list[ProratedComponent]) -> Decimal:
        """GROSS = Σ(EARNING final amounts)."""
        return round2(ComponentLineBuilder.sum_by_type(lines)[ComponentType.EARNING])

    @staticmethod
    def calculate_deductions(lines: list[ProratedComponent]) -> Decimal:
        """DEDUCTIONS = Σ(DEDUCTION final amounts)."""
        return round2(ComponentLineBuilder.sum_by_type(lines)[ComponentType.DEDUCTION])

    @staticmethod
    def calculate_net(lines: list[ProratedComponent]) -> Decimal:
        """NET = GROSS - DEDUCTIONS."""
        return round2(
            ComponentLineBuilder.calculate_gross(lines)
            - ComponentLineBuilder.calculate_deductions(lines)
        )
