"""Forfait propagation.

Keeps the derived forfait assignment of a benefit assignment in sync with its
source across create, update and delete. Propagation never fails the source
operation: faults are logged and reported as ``PropagationOutcome.FAILED``.
"""

from __future__ import annotations

import copy
import logging
from typing import Any, Callable, Mapping
from uuid import UUID, uuid4

from loontijdvak.config_tree import ConfigTree, get_path, is_present, set_path
from loontijdvak.errors import MissingMappedValuesError, NotFoundError
from loontijdvak.services.forfait_rules import ForfaitRuleRegistry
from loontijdvak.services.ports import AssignmentRecord, AssignmentStore, ComponentLookup
from loontijdvak.services.types import (
    ForfaitRule,
    PropagationEvent,
    PropagationOutcome,
    PropagationResult,
    ValueMapping,
)

logger = logging.getLogger(__name__)

PROPAGATION_ACTOR = "forfait_propagation"


class ForfaitPropagationEngine:
    """Derives forfait assignments from benefit assignments.

    At most one live derived assignment exists per source. A create that finds
    an existing link updates it in place instead of adding a second one.
    """

    def __init__(
        self,
        rules: ForfaitRuleRegistry,
        components: ComponentLookup,
        assignments: AssignmentStore,
        id_factory: Callable[[], UUID] = uuid4,
    ):
        self.rules = rules
        self.components = components
        self.assignments = assignments
        self.id_factory = id_factory

    async def propagate(
        self,
        event: PropagationEvent,
        source: AssignmentRecord,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> PropagationResult:
        """Dispatch a lifecycle event to its handler."""
        if event == PropagationEvent.CREATED:
            return await self.on_created(source, organization_id, actor_id)
        if event == PropagationEvent.UPDATED:
            return await self.on_updated(source, organization_id, actor_id)
        return await self.on_deleted(source.id, organization_id, actor_id)

    async def on_created(
        self,
        source: AssignmentRecord,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> PropagationResult:
        try:
            return await self._create_derived(source, organization_id, actor_id)
        except Exception as exc:
            logger.exception(
                "Forfait derivation failed for benefit assignment %s",
                source.id,
                extra={
                    "benefit_assignment_id": str(source.id),
                    "component_code": source.component_code,
                    "organization_id": str(organization_id),
                },
            )
            return PropagationResult.failure(source.id, str(exc))

    async def on_updated(
        self,
        source: AssignmentRecord,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> PropagationResult:
        try:
            return await self._update_derived(source, organization_id)
        except Exception as exc:
            logger.exception(
                "Forfait update failed for benefit assignment %s",
                source.id,
                extra={
                    "benefit_assignment_id": str(source.id),
                    "organization_id": str(organization_id),
                },
            )
            return PropagationResult.failure(source.id, str(exc))

    async def on_deleted(
        self,
        source_assignment_id: UUID,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> PropagationResult:
        try:
            derived = await self.assignments.find_linked(source_assignment_id, organization_id)
            if derived is None:
                logger.debug("No linked forfait assignment for %s", source_assignment_id)
                return PropagationResult.skipped(
                    source_assignment_id, "No linked forfait assignment"
                )

            await self.assignments.soft_delete(derived.id, organization_id, actor_id)
            logger.info(
                "Linked forfait assignment %s deleted",
                derived.id,
                extra={"benefit_assignment_id": str(source_assignment_id)},
            )
            return PropagationResult(
                PropagationOutcome.DELETED, source_assignment_id, derived_assignment=derived
            )
        except Exception as exc:
            logger.exception(
                "Forfait delete failed for benefit assignment %s",
                source_assignment_id,
                extra={
                    "benefit_assignment_id": str(source_assignment_id),
                    "organization_id": str(organization_id),
                },
            )
            return PropagationResult.failure(source_assignment_id, str(exc))

    @staticmethod
    def map_values(
        source_config: Mapping[str, Any] | None,
        value_mapping: Mapping[str, ValueMapping],
    ) -> ConfigTree:
        """Copy present source values to their target paths.

        Missing and null source values are left out of the result. The result
        never shares containers with the source.
        """
        result: ConfigTree = {}
        for mapping in value_mapping.values():
            value = get_path(source_config or {}, mapping.source_field)
            if is_present(value):
                set_path(result, mapping.target_field, copy.deepcopy(value))
        return result

    @staticmethod
    def validate_mapped_values(
        mapped: Mapping[str, Any], value_mapping: Mapping[str, ValueMapping]
    ) -> None:
        """Raise MissingMappedValuesError naming every absent required target."""
        missing = [
            mapping.target_field
            for mapping in value_mapping.values()
            if mapping.required and not is_present(get_path(mapped, mapping.target_field))
        ]
        if missing:
            raise MissingMappedValuesError(missing)

    async def _create_derived(
        self,
        source: AssignmentRecord,
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> PropagationResult:
        if source.is_auto_generated:
            return PropagationResult.skipped(source.id, "Source is itself a derived assignment")

        rule = await self.rules.get_rule(source.component_code, organization_id)
        if rule is None:
            logger.debug("No forfait rule for component %s", source.component_code)
            return PropagationResult.skipped(source.id, "No enabled forfait rule")

        target = await self.components.find_by_code(rule.target_component_code, organization_id)
        if target is None:
            raise NotFoundError("Forfait component", rule.target_component_code)

        configuration = self.map_values(source.configuration, rule.value_mapping)
        self.validate_mapped_values(configuration, rule.value_mapping)

        existing = await self.assignments.find_linked(source.id, organization_id)
        if existing is not None:
            updated = await self.assignments.update_configuration(
                existing.id, configuration, organization_id
            )
            logger.info(
                "Forfait assignment %s already linked to %s, updated in place",
                existing.id,
                source.id,
            )
            return PropagationResult(
                PropagationOutcome.UPDATED, source.id, derived_assignment=updated
            )

        logger.info(
            "Auto-creating forfait assignment for benefit assignment %s",
            source.id,
            extra={
                "employee_id": str(source.employee_id),
                "forfait_component_code": target.code,
            },
        )

        derived = AssignmentRecord(
            id=self.id_factory(),
            employee_id=source.employee_id,
            component_id=target.id,
            component_code=target.code,
            effective_from=source.effective_from,
            effective_to=source.effective_to,
            configuration=configuration,
            notes=f"Auto-generated from {source.component_code} benefit",
            metadata=self._derived_metadata(source, rule),
            created_by=actor_id,
        )
        created = await self.assignments.create(derived, organization_id)

        logger.info(
            "Forfait assignment %s auto-created",
            created.id,
            extra={"benefit_assignment_id": str(source.id)},
        )
        return PropagationResult(PropagationOutcome.CREATED, source.id, derived_assignment=created)

    async def _update_derived(
        self, source: AssignmentRecord, organization_id: UUID
    ) -> PropagationResult:
        derived = await self.assignments.find_linked(source.id, organization_id)
        if derived is None:
            logger.debug("No linked forfait assignment for %s", source.id)
            return PropagationResult.skipped(source.id, "No linked forfait assignment")

        rule = await self.rules.get_rule(source.component_code, organization_id)
        if rule is None:
            return PropagationResult.skipped(source.id, "Forfait rule no longer enabled")

        configuration = self.map_values(source.configuration, rule.value_mapping)
        self.validate_mapped_values(configuration, rule.value_mapping)

        updated = await self.assignments.update_configuration(
            derived.id, configuration, organization_id
        )
        logger.info(
            "Linked forfait assignment %s updated",
            derived.id,
            extra={"benefit_assignment_id": str(source.id)},
        )
        return PropagationResult(PropagationOutcome.UPDATED, source.id, derived_assignment=updated)

    @staticmethod
    def _derived_metadata(source: AssignmentRecord, rule: ForfaitRule) -> dict[str, Any]:
        return {
            "auto_generated": True,
            "linked_benefit_assignment_id": str(source.id),
            "created_by": PROPAGATION_ACTOR,
            "requires_approval": bool(rule.conditions and rule.conditions.requires_approval),
        }
