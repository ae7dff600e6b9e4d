"""Type definitions for forfait rules and propagation."""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Mapping
from uuid import UUID

from loontijdvak.services.ports import AssignmentRecord


@dataclass(frozen=True)
class ValueMapping:
    """Copies one dot-path value from a benefit to its forfait configuration."""

    source_field: str
    target_field: str
    required: bool = True

    def to_dict(self) -> dict[str, Any]:
        return {
            "source_field": self.source_field,
            "target_field": self.target_field,
            "required": self.required,
        }


@dataclass(frozen=True)
class ForfaitConditions:
    """Optional bounds recorded with a rule."""

    min_value: Decimal | None = None
    max_value: Decimal | None = None
    requires_approval: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "min_value": str(self.min_value) if self.min_value is not None else None,
            "max_value": str(self.max_value) if self.max_value is not None else None,
            "requires_approval": self.requires_approval,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> ForfaitConditions:
        min_value = data.get("min_value")
        max_value = data.get("max_value")
        return cls(
            min_value=Decimal(str(min_value)) if min_value is not None else None,
            max_value=Decimal(str(max_value)) if max_value is not None else None,
            requires_approval=bool(data.get("requires_approval", False)),
        )


@dataclass(frozen=True)
class ForfaitRule:
    """Forfait rule attached to a benefit component.

    ``value_mapping`` keeps insertion order; mapping runs entry by entry.
    A disabled rule keeps its last configuration for audit.
    """

    enabled: bool
    target_component_code: str | None = None
    value_mapping: Mapping[str, ValueMapping] = field(default_factory=dict)
    conditions: ForfaitConditions | None = None
    description: str | None = None
    configured_at: datetime | None = None
    configured_by: UUID | None = None

    def to_metadata(self) -> dict[str, Any]:
        """Serialize for storage in component calculation metadata."""
        return {
            "enabled": self.enabled,
            "target_component_code": self.target_component_code,
            "value_mapping": {name: m.to_dict() for name, m in self.value_mapping.items()},
            "conditions": self.conditions.to_dict() if self.conditions else None,
            "description": self.description,
            "configured_at": self.configured_at.isoformat() if self.configured_at else None,
            "configured_by": str(self.configured_by) if self.configured_by else None,
        }

    @classmethod
    def from_metadata(cls, data: Mapping[str, Any]) -> ForfaitRule:
        """Rebuild a rule from stored calculation metadata."""
        mapping = {
            name: ValueMapping(
                source_field=entry["source_field"],
                target_field=entry["target_field"],
                required=bool(entry.get("required", True)),
            )
            for name, entry in (data.get("value_mapping") or {}).items()
        }
        configured_at = data.get("configured_at")
        configured_by = data.get("configured_by")
        conditions = data.get("conditions")
        return cls(
            enabled=bool(data.get("enabled", False)),
            target_component_code=data.get("target_component_code"),
            value_mapping=mapping,
            conditions=ForfaitConditions.from_dict(conditions) if conditions else None,
            description=data.get("description"),
            configured_at=datetime.fromisoformat(configured_at) if configured_at else None,
            configured_by=UUID(str(configured_by)) if configured_by else None,
        )


class PropagationEvent(str, Enum):
    """Benefit assignment lifecycle events that drive forfait propagation."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"


class PropagationOutcome(str, Enum):
    """What a propagation event did to the derived forfait assignment."""

    CREATED = "created"
    UPDATED = "updated"
    DELETED = "deleted"
    SKIPPED = "skipped"
    FAILED = "failed"


@dataclass(frozen=True)
class PropagationResult:
    """Result of one propagation event.

    Expected no-ops are SKIPPED; swallowed faults are FAILED with a reason.
    """

    outcome: PropagationOutcome
    source_assignment_id: UUID
    derived_assignment: AssignmentRecord | None = None
    reason: str | None = None

    @property
    def failed(self) -> bool:
        return self.outcome == PropagationOutcome.FAILED

    @classmethod
    def skipped(cls, source_assignment_id: UUID, reason: str) -> PropagationResult:
        return cls(PropagationOutcome.SKIPPED, source_assignment_id, reason=reason)

    @classmethod
    def failure(cls, source_assignment_id: UUID, reason: str) -> PropagationResult:
        return cls(PropagationOutcome.FAILED, source_assignment_id, reason=reason)
