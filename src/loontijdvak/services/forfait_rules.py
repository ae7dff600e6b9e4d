"""Forfait rule registry.

Forfait rules are stored on benefit components (under
``calculation_metadata["forfait_rule"]``) and tell the propagation engine which
forfait component to derive and how benefit configuration maps onto it.
"""

from __future__ import annotations

import logging
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID

import pydantic
from pydantic import BaseModel, ConfigDict, Field, model_validator

from loontijdvak.calculators.types import ComponentType
from loontijdvak.clock import Clock, utc_now
from loontijdvak.config_tree import split_path
from loontijdvak.errors import NotFoundError, ValidationError
from loontijdvak.services.forfait_templates import (
    PREDEFINED_TEMPLATES,
    TEMPLATES_BY_BENEFIT_TYPE,
    TEMPLATES_BY_NAME,
    ForfaitTemplate,
)
from loontijdvak.services.ports import ComponentLookup, ComponentRecord
from loontijdvak.services.types import ForfaitConditions, ForfaitRule, ValueMapping

logger = logging.getLogger(__name__)

RULE_METADATA_KEY = "forfait_rule"

FORFAIT_TARGET_TYPES = frozenset(
    {ComponentType.TAX, ComponentType.DEDUCTION, ComponentType.BENEFIT}
)


class ValueMappingInput(BaseModel):
    """One mapping entry of a forfait rule."""

    model_config = ConfigDict(extra="ignore")

    source_field: str = Field(min_length=1)
    target_field: str = Field(min_length=1)
    required: bool = True

    @model_validator(mode="after")
    def check_paths(self) -> ValueMappingInput:
        split_path(self.source_field)
        split_path(self.target_field)
        return self


class ForfaitConditionsInput(BaseModel):
    model_config = ConfigDict(extra="ignore")

    min_value: Decimal | None = None
    max_value: Decimal | None = None
    requires_approval: bool = False


class ForfaitRuleInput(BaseModel):
    """Shape of a forfait rule as configured by an administrator."""

    model_config = ConfigDict(extra="ignore")

    enabled: bool
    target_component_code: str | None = Field(default=None, max_length=50)
    value_mapping: dict[str, ValueMappingInput] = Field(default_factory=dict)
    conditions: ForfaitConditionsInput | None = None
    description: str | None = Field(default=None, max_length=500)

    @model_validator(mode="after")
    def check_enabled_rule(self) -> ForfaitRuleInput:
        if self.enabled:
            if not self.target_component_code:
                raise ValueError("target_component_code is required when the rule is enabled")
            if not self.value_mapping:
                raise ValueError("value_mapping must not be empty when the rule is enabled")
        return self


class ForfaitRuleRegistry:
    """Holds the forfait rule for each benefit component.

    Rules are replaced wholesale, never merged. Removing a rule only disables
    it; the previous configuration stays on the component for audit.
    """

    def __init__(self, components: ComponentLookup, clock: Clock = utc_now):
        self.components = components
        self.clock = clock

    async def set_rule(
        self,
        benefit_component_code: str,
        rule: ForfaitRuleInput | Mapping[str, Any],
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> ForfaitRule:
        """Validate and store a rule, overwriting any previous one."""
        validated = self._validate_input(rule)

        logger.info(
            "Setting forfait rule on component %s (enabled=%s, target=%s)",
            benefit_component_code,
            validated.enabled,
            validated.target_component_code,
            extra={"organization_id": str(organization_id)},
        )

        component = await self._require_component(benefit_component_code, organization_id)

        if validated.enabled:
            target = await self.components.find_by_code(
                validated.target_component_code, organization_id
            )
            if target is None:
                raise NotFoundError("Forfait component", validated.target_component_code)
            if target.component_type not in FORFAIT_TARGET_TYPES:
                raise ValidationError(
                    "Forfait component must be of type: tax, deduction, or benefit",
                    {
                        "target_component_code": target.code,
                        "component_type": target.component_type.value,
                    },
                )

        resolved = ForfaitRule(
            enabled=validated.enabled,
            target_component_code=validated.target_component_code,
            value_mapping={
                name: ValueMapping(
                    source_field=entry.source_field,
                    target_field=entry.target_field,
                    required=entry.required,
                )
                for name, entry in validated.value_mapping.items()
            },
            conditions=(
                ForfaitConditions(**validated.conditions.model_dump())
                if validated.conditions
                else None
            ),
            description=validated.description,
            configured_at=self.clock(),
            configured_by=actor_id,
        )

        await self._store_rule(component, resolved.to_metadata(), organization_id, actor_id)

        logger.info(
            "Forfait rule set on component %s",
            benefit_component_code,
            extra={"organization_id": str(organization_id)},
        )
        return resolved

    async def get_rule(
        self, benefit_component_code: str, organization_id: UUID
    ) -> ForfaitRule | None:
        """Return the enabled rule, or None when absent or disabled.

        Raises NotFoundError only when the benefit component itself is unknown.
        """
        component = await self._require_component(benefit_component_code, organization_id)
        return self.rule_for(component)

    @staticmethod
    def rule_for(component: ComponentRecord) -> ForfaitRule | None:
        stored = (component.calculation_metadata or {}).get(RULE_METADATA_KEY)
        if not stored or not stored.get("enabled"):
            return None
        return ForfaitRule.from_metadata(stored)

    async def get_stored_rule(
        self, benefit_component_code: str, organization_id: UUID
    ) -> ForfaitRule | None:
        """Return the stored rule including a disabled one, for audit views."""
        component = await self._require_component(benefit_component_code, organization_id)
        stored = (component.calculation_metadata or {}).get(RULE_METADATA_KEY)
        return ForfaitRule.from_metadata(stored) if stored else None

    async def remove_rule(
        self,
        benefit_component_code: str,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> None:
        """Disable the rule in place, keeping its configuration."""
        component = await self._require_component(benefit_component_code, organization_id)
        stored = dict((component.calculation_metadata or {}).get(RULE_METADATA_KEY) or {})
        stored["enabled"] = False
        stored["disabled_at"] = self.clock().isoformat()
        stored["disabled_by"] = str(actor_id) if actor_id else None

        await self._store_rule(component, stored, organization_id, actor_id)

        logger.info(
            "Forfait rule removed from component %s",
            benefit_component_code,
            extra={"organization_id": str(organization_id)},
        )

    @staticmethod
    def predefined_templates() -> tuple[ForfaitTemplate, ...]:
        return PREDEFINED_TEMPLATES

    async def apply_template(
        self,
        template_name: str,
        benefit_component_code: str,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> ForfaitRule:
        """Seed a benefit component's rule from a predefined template.

        The template is looked up by display name, then by benefit type key
        (``company_car``, ``housing``, ...).
        """
        template = TEMPLATES_BY_NAME.get(template_name) or TEMPLATES_BY_BENEFIT_TYPE.get(
            template_name
        )
        if template is None:
            raise NotFoundError("Forfait template", template_name)

        return await self.set_rule(
            benefit_component_code,
            {
                "enabled": True,
                "target_component_code": template.target_component_code,
                "value_mapping": {name: m.to_dict() for name, m in template.value_mapping},
                "description": template.description,
            },
            organization_id,
            actor_id,
        )

    def _validate_input(self, rule: ForfaitRuleInput | Mapping[str, Any]) -> ForfaitRuleInput:
        if isinstance(rule, ForfaitRuleInput):
            return rule
        try:
            return ForfaitRuleInput.model_validate(rule)
        except pydantic.ValidationError as exc:
            raise ValidationError(
                "Invalid forfait rule",
                {"errors": exc.errors(include_url=False, include_context=False)},
            ) from exc

    async def _require_component(self, code: str, organization_id: UUID) -> ComponentRecord:
        component = await self.components.find_by_code(code, organization_id)
        if component is None:
            raise NotFoundError("Component", code)
        return component

    async def _store_rule(
        self,
        component: ComponentRecord,
        rule_metadata: dict[str, Any],
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> None:
        metadata = dict(component.calculation_metadata or {})
        metadata[RULE_METADATA_KEY] = rule_metadata
        await self.components.update_metadata(component.id, metadata, organization_id, actor_id)
