"""Forfait rule, propagation and benefit assignment services."""

from loontijdvak.services.assignment_service import (
    AssignmentCreate,
    AssignmentOutcome,
    BenefitAssignmentService,
)
from loontijdvak.services.forfait_propagation import ForfaitPropagationEngine
from loontijdvak.services.forfait_rules import ForfaitRuleInput, ForfaitRuleRegistry
from loontijdvak.services.stores import SqlAssignmentStore, SqlComponentStore
from loontijdvak.services.types import (
    ForfaitRule,
    PropagationEvent,
    PropagationOutcome,
    PropagationResult,
    ValueMapping,
)

__all__ = [
    "AssignmentCreate",
    "AssignmentOutcome",
    "BenefitAssignmentService",
    "ForfaitPropagationEngine",
    "ForfaitRule",
    "ForfaitRuleInput",
    "ForfaitRuleRegistry",
    "PropagationEvent",
    "PropagationOutcome",
    "PropagationResult",
    "SqlAssignmentStore",
    "SqlComponentStore",
    "ValueMapping",
]
