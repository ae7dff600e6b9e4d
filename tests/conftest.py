"""Pytest fixtures for loontijdvak engine tests."""

from __future__ import annotations

import copy
from collections.abc import AsyncGenerator
from dataclasses import replace
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Mapping
from uuid import UUID, uuid4

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import StaticPool

from loontijdvak.api.app import create_app
from loontijdvak.api.dependencies import get_db_session
from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.calculators.types import CalculationKind, ComponentType
from loontijdvak.database import create_schema, enable_sqlite_savepoints
from loontijdvak.errors import NotFoundError
from loontijdvak.services.assignment_service import BenefitAssignmentService
from loontijdvak.services.forfait_propagation import ForfaitPropagationEngine
from loontijdvak.services.forfait_rules import ForfaitRuleRegistry
from loontijdvak.services.ports import AssignmentRecord, ComponentRecord, FormulaResult

# In-memory SQLite shared by every connection of one engine
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"

ORG_ID = UUID("00000000-0000-0000-0000-00000000a001")
OTHER_ORG_ID = UUID("00000000-0000-0000-0000-00000000a002")
ACTOR_ID = UUID("00000000-0000-0000-0000-00000000b001")
FIXED_NOW = datetime(2026, 1, 15, 9, 30, tzinfo=timezone.utc)


# ============================================================================
# In-memory collaborators
# ============================================================================


class InMemoryComponentStore:
    """ComponentLookup over a dict, scoped by organization."""

    def __init__(self) -> None:
        self.rows: dict[UUID, tuple[UUID, ComponentRecord]] = {}
        self.metadata_updates = 0

    def add(
        self,
        code: str,
        component_type: ComponentType,
        organization_id: UUID = ORG_ID,
        **fields: Any,
    ) -> ComponentRecord:
        record = ComponentRecord(
            id=fields.pop("id", uuid4()),
            code=code,
            component_type=component_type,
            calculation_kind=fields.pop("calculation_kind", CalculationKind.FIXED),
            name=fields.pop("name", code.replace("_", " ").title()),
            **fields,
        )
        self.rows[record.id] = (organization_id, record)
        return record

    async def find_by_code(self, code: str, organization_id: UUID) -> ComponentRecord | None:
        for org, record in self.rows.values():
            if org == organization_id and record.code == code:
                return copy.deepcopy(record)
        return None

    async def find_by_id(self, component_id: UUID, organization_id: UUID) -> ComponentRecord | None:
        row = self.rows.get(component_id)
        if row is None or row[0] != organization_id:
            return None
        return copy.deepcopy(row[1])

    async def update_metadata(
        self,
        component_id: UUID,
        calculation_metadata: Mapping[str, Any],
        organization_id: UUID,
        actor_id: UUID | None,
    ) -> ComponentRecord:
        row = self.rows.get(component_id)
        if row is None or row[0] != organization_id:
            raise NotFoundError("Component", component_id)
        updated = replace(row[1], calculation_metadata=copy.deepcopy(dict(calculation_metadata)))
        self.rows[component_id] = (organization_id, updated)
        self.metadata_updates += 1
        return copy.deepcopy(updated)


class DuplicateLinkError(Exception):
    """Stands in for the live-link unique index violation."""


def _clone(record: AssignmentRecord, **changes: Any) -> AssignmentRecord:
    """Deep copy so tests never share configuration trees with the store."""
    return replace(copy.deepcopy(record), **changes)


class InMemoryAssignmentStore:
    """AssignmentStore over a dict, enforcing the live-link unique index."""

    def __init__(self) -> None:
        self.rows: dict[UUID, tuple[UUID, AssignmentRecord]] = {}
        self.fail_on_create: Exception | None = None
        self.soft_deletes: list[UUID] = []

    def live(self, organization_id: UUID = ORG_ID) -> list[AssignmentRecord]:
        return [r for org, r in self.rows.values() if org == organization_id and r.deleted_at is None]

    async def create(self, assignment: AssignmentRecord, organization_id: UUID) -> AssignmentRecord:
        if self.fail_on_create is not None and assignment.is_auto_generated:
            raise self.fail_on_create
        link = assignment.linked_benefit_assignment_id
        if link is not None and await self.find_linked(link, organization_id) is not None:
            raise DuplicateLinkError(f"live link to {link} already exists")
        self.rows[assignment.id] = (organization_id, _clone(assignment))
        return _clone(assignment)

    async def get(self, assignment_id: UUID, organization_id: UUID) -> AssignmentRecord | None:
        row = self.rows.get(assignment_id)
        if row is None or row[0] != organization_id or row[1].deleted_at is not None:
            return None
        return _clone(row[1])

    async def update_configuration(
        self,
        assignment_id: UUID,
        configuration: Mapping[str, Any],
        organization_id: UUID,
    ) -> AssignmentRecord:
        current = await self.get(assignment_id, organization_id)
        if current is None:
            raise NotFoundError("Assignment", assignment_id)
        updated = _clone(current, configuration=copy.deepcopy(dict(configuration)))
        self.rows[assignment_id] = (organization_id, updated)
        return _clone(updated)

    async def soft_delete(
        self, assignment_id: UUID, organization_id: UUID, actor_id: UUID | None
    ) -> None:
        current = await self.get(assignment_id, organization_id)
        if current is None:
            raise NotFoundError("Assignment", assignment_id)
        self.rows[assignment_id] = (organization_id, _clone(current, deleted_at=FIXED_NOW))
        self.soft_deletes.append(assignment_id)

    async def find_linked(
        self, source_assignment_id: UUID, organization_id: UUID
    ) -> AssignmentRecord | None:
        for record in self.live(organization_id):
            if record.linked_benefit_assignment_id == source_assignment_id:
                return _clone(record)
        return None

    async def find_for_employee(
        self,
        employee_id: UUID,
        organization_id: UUID,
        component_id: UUID | None = None,
    ) -> list[AssignmentRecord]:
        return [
            _clone(r)
            for r in sorted(self.live(organization_id), key=lambda r: r.effective_from)
            if r.employee_id == employee_id
            and (component_id is None or r.component_id == component_id)
        ]


class StubFormulaEvaluator:
    """Returns canned values per formula and records each call."""

    def __init__(self, results: Mapping[str, Decimal] | None = None) -> None:
        self.results = dict(results or {})
        self.calls: list[tuple[str, dict[str, Any]]] = []

    async def evaluate(self, formula: str, variables: Mapping[str, Any]) -> FormulaResult:
        self.calls.append((formula, dict(variables)))
        return FormulaResult(
            value=self.results[formula],
            variables_used=tuple(sorted(variables)),
        )


# ============================================================================
# Fixtures
# ============================================================================


@pytest.fixture
def org_id() -> UUID:
    return ORG_ID


@pytest.fixture
def other_org_id() -> UUID:
    return OTHER_ORG_ID


@pytest.fixture
def actor_id() -> UUID:
    return ACTOR_ID


@pytest.fixture
def fixed_clock():
    return lambda: FIXED_NOW


@pytest.fixture
def engine() -> LoontijdvakEngine:
    return LoontijdvakEngine()


@pytest.fixture
def components() -> InMemoryComponentStore:
    return InMemoryComponentStore()


@pytest.fixture
def assignments() -> InMemoryAssignmentStore:
    return InMemoryAssignmentStore()


@pytest.fixture
def formulas() -> StubFormulaEvaluator:
    return StubFormulaEvaluator()


@pytest.fixture
def registry(components, fixed_clock) -> ForfaitRuleRegistry:
    return ForfaitRuleRegistry(components, clock=fixed_clock)


@pytest.fixture
def propagation(registry, components, assignments) -> ForfaitPropagationEngine:
    return ForfaitPropagationEngine(registry, components, assignments)


@pytest.fixture
def service(components, assignments, propagation, formulas, fixed_clock) -> BenefitAssignmentService:
    return BenefitAssignmentService(
        components, assignments, propagation, formulas=formulas, clock=fixed_clock
    )


@pytest.fixture
def car_components(components) -> dict[str, ComponentRecord]:
    """Company car benefit plus its 2% forfait tax component."""
    return {
        "benefit": components.add("COMPANY_CAR", ComponentType.BENEFIT),
        "forfait": components.add(
            "CAR_FORFAIT_2PCT",
            ComponentType.TAX,
            calculation_metadata={
                "forfait_calculation": {
                    "calculation_type": "percentage_of_catalog_value",
                    "rate": "2",
                }
            },
        ),
    }


@pytest.fixture
def car_rule_input() -> dict[str, Any]:
    return {
        "enabled": True,
        "target_component_code": "CAR_FORFAIT_2PCT",
        "value_mapping": {
            "catalog": {
                "source_field": "vehicle.catalogValue",
                "target_field": "catalogValue",
            },
            "plate": {
                "source_field": "vehicle.plate",
                "target_field": "vehicle.plate",
                "required": False,
            },
        },
        "description": "2% of catalog value per year",
    }


@pytest_asyncio.fixture
async def db_engine():
    """Create test database engine with the schema in place."""
    engine = enable_sqlite_savepoints(
        create_async_engine(TEST_DATABASE_URL, echo=False, poolclass=StaticPool)
    )

    await create_schema(engine)

    yield engine

    await engine.dispose()


@pytest_asyncio.fixture
async def session_factory(db_engine) -> async_sessionmaker[AsyncSession]:
    return async_sessionmaker(
        db_engine,
        class_=AsyncSession,
        expire_on_commit=False,
        autoflush=False,
    )


@pytest_asyncio.fixture
async def session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    """Create a database session for each test."""
    async with session_factory() as session:
        yield session
        await session.rollback()


@pytest_asyncio.fixture
async def client(session_factory) -> AsyncGenerator[AsyncClient, None]:
    """HTTP client against the app, with requests bound to the test database."""
    app = create_app()

    async def override_db_session() -> AsyncGenerator[AsyncSession, None]:
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db_session] = override_db_session

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as ac:
        yield ac
