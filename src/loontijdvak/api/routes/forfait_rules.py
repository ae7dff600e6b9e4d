"""Forfait rule configuration endpoints."""

from fastapi import APIRouter, Response, status

from loontijdvak.api.dependencies import ActorId, OrganizationId, RuleRegistry
from loontijdvak.api.schemas import (
    ApplyTemplateRequest,
    ErrorResponse,
    ForfaitRuleEnvelope,
    ForfaitRuleResponse,
    ForfaitTemplateResponse,
    ValueMappingResponse,
)
from loontijdvak.services.forfait_rules import ForfaitRuleInput
from loontijdvak.services.types import ForfaitRule

router = APIRouter(prefix="/forfait-rules", tags=["forfait-rules"])


def rule_response(rule: ForfaitRule) -> ForfaitRuleResponse:
    return ForfaitRuleResponse(
        enabled=rule.enabled,
        target_component_code=rule.target_component_code,
        value_mapping={
            name: ValueMappingResponse(**mapping.to_dict())
            for name, mapping in rule.value_mapping.items()
        },
        conditions=rule.conditions.to_dict() if rule.conditions else None,
        description=rule.description,
        configured_at=rule.configured_at,
        configured_by=rule.configured_by,
    )


@router.get("/templates", response_model=list[ForfaitTemplateResponse])
async def list_templates(registry: RuleRegistry) -> list[ForfaitTemplateResponse]:
    """List the predefined forfait rule templates."""
    return [
        ForfaitTemplateResponse(
            name=t.name,
            benefit_type=t.benefit_type,
            target_component_code=t.target_component_code,
            value_mapping={
                name: ValueMappingResponse(**mapping.to_dict()) for name, mapping in t.value_mapping
            },
            description=t.description,
            legal_reference=t.legal_reference,
        )
        for t in registry.predefined_templates()
    ]


@router.get(
    "/{component_code}",
    response_model=ForfaitRuleEnvelope,
    responses={404: {"model": ErrorResponse}},
)
async def get_rule(
    component_code: str,
    registry: RuleRegistry,
    organization_id: OrganizationId,
) -> ForfaitRuleEnvelope:
    """Get the enabled forfait rule of a benefit component."""
    rule = await registry.get_rule(component_code, organization_id)
    return ForfaitRuleEnvelope(
        component_code=component_code,
        rule=rule_response(rule) if rule else None,
    )


@router.put(
    "/{component_code}",
    response_model=ForfaitRuleResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def set_rule(
    component_code: str,
    payload: ForfaitRuleInput,
    registry: RuleRegistry,
    organization_id: OrganizationId,
    actor_id: ActorId,
) -> ForfaitRuleResponse:
    """Set or replace the forfait rule of a benefit component."""
    rule = await registry.set_rule(component_code, payload, organization_id, actor_id)
    return rule_response(rule)


@router.delete(
    "/{component_code}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses={404: {"model": ErrorResponse}},
)
async def remove_rule(
    component_code: str,
    registry: RuleRegistry,
    organization_id: OrganizationId,
    actor_id: ActorId,
) -> Response:
    """Disable the forfait rule of a benefit component."""
    await registry.remove_rule(component_code, organization_id, actor_id)
    return Response(status_code=status.HTTP_204_NO_CONTENT)


@router.post(
    "/{component_code}/apply-template",
    response_model=ForfaitRuleResponse,
    responses={404: {"model": ErrorResponse}, 422: {"model": ErrorResponse}},
)
async def apply_template(
    component_code: str,
    payload: ApplyTemplateRequest,
    registry: RuleRegistry,
    organization_id: OrganizationId,
    actor_id: ActorId,
) -> ForfaitRuleResponse:
    """Seed a benefit component's forfait rule from a predefined template."""
    rule = await registry.apply_template(
        payload.template_name, component_code, organization_id, actor_id
    )
    return rule_response(rule)
