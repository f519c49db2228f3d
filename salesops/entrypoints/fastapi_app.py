# salesops/entrypoints/fastapi_app.py
from __future__ import annotations

from fastapi import FastAPI, Request
from fastapi.responses import JSONResponse

from ..db import engine
from ..domain.errors import InvalidTransition, LeadNotFound, LossReasonRequired, ProhibitedTermFound
from ..models import Base
from ..service_layer.use_cases.deals import DealNotFound
from ..service_layer.use_cases.proposals import ProposalNotFound
from .api.routers import (
    calls,
    deals,
    diagnosis,
    health,
    jobs,
    lead_generator,
    leads,
    proposals,
    rules,
    settings,
    stats,
)


def _install_error_handlers(app: FastAPI) -> None:
    async def not_found(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=404, content={"detail": str(exc)})

    async def conflict(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=409, content={"detail": str(exc)})

    async def bad_request(request: Request, exc: Exception) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc)})

    async def prohibited(request: Request, exc: ProhibitedTermFound) -> JSONResponse:
        return JSONResponse(status_code=400, content={"detail": str(exc), "prohibited_term": exc.term})

    app.add_exception_handler(LeadNotFound, not_found)
    app.add_exception_handler(DealNotFound, not_found)
    app.add_exception_handler(ProposalNotFound, not_found)
    app.add_exception_handler(InvalidTransition, conflict)
    app.add_exception_handler(LossReasonRequired, bad_request)
    app.add_exception_handler(ProhibitedTermFound, prohibited)


def create_app() -> FastAPI:
    app = FastAPI(title="SalesOps - Lead Console")

    @app.on_event("startup")
    async def _startup() -> None:
        # Single place where DB tables are created in dev.
        async with engine.begin() as conn:
            await conn.run_sync(Base.metadata.create_all)

    _install_error_handlers(app)

    # Routers
    app.include_router(health.router)
    app.include_router(leads.router)
    app.include_router(calls.router)
    app.include_router(diagnosis.router)
    app.include_router(deals.router)
    app.include_router(settings.router)
    app.include_router(rules.router)
    app.include_router(lead_generator.router)
    app.include_router(proposals.router)
    app.include_router(stats.router)
    app.include_router(jobs.router)

    return app
