"""API routes."""

from loontijdvak.api.routes.assignments import router as assignments_router
from loontijdvak.api.routes.forfait_rules import router as forfait_rules_router
from loontijdvak.api.routes.health import router as health_router
from loontijdvak.api.routes.loontijdvak import router as loontijdvak_router
from loontijdvak.api.routes.payroll_runs import router as payroll_runs_router

__all__ = [
    "assignments_router",
    "forfait_rules_router",
    "health_router",
    "loontijdvak_router",
    "payroll_runs_router",
]
