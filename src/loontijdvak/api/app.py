"""FastAPI application factory."""

from contextlib import asynccontextmanager
from collections.abc import AsyncGenerator

from fastapi import FastAPI, Request, status
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from loontijdvak import __version__
from loontijdvak.api.routes import (
    assignments_router,
    forfait_rules_router,
    health_router,
    loontijdvak_router,
    payroll_runs_router,
)
from loontijdvak.calculators.loontijdvak import LoontijdvakEngine
from loontijdvak.database import create_schema, dispose_db, init_db
from loontijdvak.errors import NotFoundError, ValidationError
from loontijdvak.services.ports import FormulaEvaluator


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler."""
    engine, _ = init_db()
    if engine.url.get_backend_name() == "sqlite":
        await create_schema(engine)
    yield
    await dispose_db()


def create_app(formula_evaluator: FormulaEvaluator | None = None) -> FastAPI:
    """Create and configure the FastAPI application."""
    app = FastAPI(
        title="Loontijdvak Engine API",
        description="Wage period classification, prorating and forfait propagation",
        version=__version__,
        lifespan=lifespan,
    )
    app.state.loontijdvak_engine = LoontijdvakEngine()
    app.state.formula_evaluator = formula_evaluator

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    # Exception handlers
    @app.exception_handler(ValidationError)
    async def validation_exception_handler(
        request: Request, exc: ValidationError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=422,
            content=jsonable_encoder(
                {"detail": exc.message, "code": "VALIDATION_ERROR", "details": exc.details}
            ),
        )

    @app.exception_handler(NotFoundError)
    async def not_found_exception_handler(
        request: Request, exc: NotFoundError
    ) -> JSONResponse:
        return JSONResponse(
            status_code=status.HTTP_404_NOT_FOUND,
            content={"detail": str(exc), "code": "NOT_FOUND", "details": {}},
        )

    @app.exception_handler(Exception)
    async def general_exception_handler(
        request: Request, exc: Exception
    ) -> JSONResponse:
        """Handle unexpected exceptions."""
        return JSONResponse(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            content={
                "detail": "An unexpected error occurred",
                "code": "INTERNAL_ERROR",
            },
        )

    # Include routers
    app.include_router(health_router)
    app.include_router(loontijdvak_router, prefix="/api/v1")
    app.include_router(payroll_runs_router, prefix="/api/v1")
    app.include_router(forfait_rules_router, prefix="/api/v1")
    app.include_router(assignments_router, prefix="/api/v1")

    return app


# Default app instance for uvicorn
app = create_app()
