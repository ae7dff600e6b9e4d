"""Predefined forfait rule templates (Article 11 Wet Loonbelasting, Suriname).

Reference data only: a template seeds a ForfaitRule through
ForfaitRuleRegistry.apply_template and adds no runtime behavior of its own.
"""

from __future__ import annotations

from dataclasses import dataclass
from types import MappingProxyType
from typing import Mapping

from loontijdvak.services.types import ValueMapping


@dataclass(frozen=True)
class ForfaitTemplate:
    """A named, known benefit type and the forfait component it derives."""

    name: str
    benefit_type: str
    target_component_code: str
    value_mapping: tuple[tuple[str, ValueMapping], ...]
    description: str
    legal_reference: str


def _same_field(field_name: str) -> tuple[tuple[str, ValueMapping], ...]:
    return (
        (
            field_name,
            ValueMapping(source_field=field_name, target_field=field_name, required=True),
        ),
    )


PREDEFINED_TEMPLATES: tuple[ForfaitTemplate, ...] = (
    ForfaitTemplate(
        name="Company Car 2% (Article 11)",
        benefit_type="company_car",
        target_component_code="CAR_FORFAIT_2PCT",
        value_mapping=_same_field("catalogValue"),
        description="2% of catalog value per year (Article 11 Wet Loonbelasting)",
        legal_reference="Article 11, Wet Loonbelasting (Suriname)",
    ),
    ForfaitTemplate(
        name="Company Car 3% (Higher Use)",
        benefit_type="company_car_high_use",
        target_component_code="CAR_FORFAIT_3PCT",
        value_mapping=_same_field("catalogValue"),
        description="3% for high-use or luxury vehicles",
        legal_reference="Article 11, Wet Loonbelasting (Suriname)",
    ),
    ForfaitTemplate(
        name="Housing Benefit 7.5%",
        benefit_type="housing",
        target_component_code="HOUSING_FORFAIT_7_5PCT",
        value_mapping=_same_field("rentalValue"),
        description="7.5% of monthly rental value",
        legal_reference="Article 11, Wet Loonbelasting (Suriname)",
    ),
    ForfaitTemplate(
        name="Meal Benefit (Hot Meal)",
        benefit_type="hot_meal",
        target_component_code="MEAL_FORFAIT_HOT",
        value_mapping=_same_field("mealsPerMonth"),
        description="Fixed amount per hot meal provided",
        legal_reference="Ministerial Regulation (Suriname)",
    ),
    ForfaitTemplate(
        name="Medical Coverage (Progressive)",
        benefit_type="medical_coverage",
        target_component_code="MEDICAL_FORFAIT_PROGRESSIVE",
        value_mapping=_same_field("packageValue"),
        description="Progressive scale based on coverage value",
        legal_reference="Ministerial Regulation (Suriname)",
    ),
)

TEMPLATES_BY_NAME: Mapping[str, ForfaitTemplate] = MappingProxyType(
    {t.name: t for t in PREDEFINED_TEMPLATES}
)
TEMPLATES_BY_BENEFIT_TYPE: Mapping[str, ForfaitTemplate] = MappingProxyType(
    {t.benefit_type: t for t in PREDEFINED_TEMPLATES}
)
