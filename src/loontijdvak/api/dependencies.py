"""FastAPI dependencies for dependency injection."""

from collections.abc import AsyncGenerator
from typing import Annotated
from uuid import UUID

from fastapi import Depends, Header, HTTPException, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.database import get_session
from loontijdvak.services.assignment_service import BenefitAssignmentService
from loontijdvak.services.forfait_propagation import ForfaitPropagationEngine
from loontijdvak.services.forfait_rules import ForfaitRuleRegistry
from loontijdvak.services.stores import SqlAssignmentStore, SqlComponentStore


async def get_db_session() -> AsyncGenerator[AsyncSession, None]:
    """Get database session dependency; commits when the request succeeds."""
    async with get_session() as session:
        yield session


async def get_organization_id(
    x_organization_id: Annotated[str | None, Header()] = None
) -> UUID:
    """Extract organization ID from header."""
    if not x_organization_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="X-Organization-ID header is required",
        )
    try:
        return UUID(x_organization_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-Organization-ID format",
        )


async def get_actor_id(x_user_id: Annotated[str | None, Header()] = None) -> UUID | None:
    """Extract the acting user from header; anonymous when absent."""
    if not x_user_id:
        return None
    try:
        return UUID(x_user_id)
    except ValueError:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Invalid X-User-ID format",
        )


def get_loontijdvak_engine(request: Request) -> LoontijdvakEngine:
    return request.app.state.loontijdvak_engine


DbSession = Annotated[AsyncSession, Depends(get_db_session)]
OrganizationId = Annotated[UUID, Depends(get_organization_id)]
ActorId = Annotated[UUID | None, Depends(get_actor_id)]
Engine = Annotated[LoontijdvakEngine, Depends(get_loontijdvak_engine)]


def get_rule_registry(db: DbSession) -> ForfaitRuleRegistry:
    return ForfaitRuleRegistry(SqlComponentStore(db))


def get_assignment_service(request: Request, db: DbSession) -> BenefitAssignmentService:
    components = SqlComponentStore(db)
    assignments = SqlAssignmentStore(db)
    propagation = ForfaitPropagationEngine(
        ForfaitRuleRegistry(components), components, assignments
    )
    return BenefitAssignmentService(
        components,
        assignments,
        propagation,
        formulas=getattr(request.app.state, "formula_evaluator", None),
    )


RuleRegistry = Annotated[ForfaitRuleRegistry, Depends(get_rule_registry)]
AssignmentService = Annotated[BenefitAssignmentService, Depends(get_assignment_service)]
