# type: ignore
# pyright: reportMissingImports=false, reportGeneralTypeErrors=false
"""
Volunteer Registry Service
==========================
Groups advertise a volunteer service; individuals join or leave them.
Every group is reachable by name, by the service it offers and by its
country, and the three lookups stay consistent on every write.

Port: 8010
"""
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from volunteer_registry.controllers import (
    catalog_controller,
    group_controller,
    membership_controller,
    system_controller,
)
from volunteer_registry.core.config import settings
from volunteer_registry.core.dependencies import get_registry_service
from volunteer_registry.core.logging import get_logger
from volunteer_registry.middleware import MetricsMiddleware, RequestIDMiddleware
from volunteer_registry.schemas.registry import ErrorResponse
from volunteer_registry.services.exceptions import RegistryError

logger = get_logger(settings.SERVICE_NAME)


# ── Lifespan ──────────────────────────────────────────────────────────────
@asynccontextmanager
async def lifespan(application: FastAPI):
    """Provision storage on startup and optionally seed demo groups."""
    registry = get_registry_service()
    registry.startup()
    if settings.SEED_DEMO_GROUPS:
        registry.seed_demo_groups()
    logger.info(
        "Volunteer registry starting: backend=%s, groups=%d",
        registry.store.backend, registry.store.groups.count(),
    )
    yield
    logger.info("Volunteer registry shutting down")


# ── FastAPI App ───────────────────────────────────────────────────────────
app = FastAPI(
    title="Volunteer Registry",
    description="Register volunteer groups, search them by name, service or country, and join or leave them.",
    version=settings.SERVICE_VERSION,
    lifespan=lifespan,
    responses={
        400: {"model": ErrorResponse, "description": "Missing credentials"},
        500: {"model": ErrorResponse, "description": "Internal server error"},
    },
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.CORS_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)
app.add_middleware(MetricsMiddleware)
app.add_middleware(RequestIDMiddleware)


# ── Exception handlers ────────────────────────────────────────────────────
@app.exception_handler(RegistryError)
async def registry_error_handler(request: Request, exc: RegistryError):
    req_id = getattr(request.state, "request_id", None)
    return JSONResponse(
        status_code=exc.status_code,
        content={**exc.to_dict(), "request_id": req_id},
    )


@app.exception_handler(Exception)
async def global_exception_handler(request: Request, exc: Exception):
    req_id = getattr(request.state, "request_id", None)
    logger.exception("Unhandled exception", extra={"request_id": req_id})
    return JSONResponse(
        status_code=500,
        content={"error": "internal_server_error", "detail": str(exc), "request_id": req_id},
    )


# ── Routers ───────────────────────────────────────────────────────────────
app.include_router(system_controller.router)
app.include_router(group_controller.router)
app.include_router(membership_controller.router)
app.include_router(catalog_controller.router)


# ── Entrypoint ────────────────────────────────────────────────────────────
if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=settings.SERVICE_PORT, log_level="info")
