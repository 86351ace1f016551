"""Main FastAPI application."""

import time

from fastapi import Depends, FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from update_manager.api import agent, devices, errors, metrics, rollouts
from update_manager.core import settings, setup_logging
from update_manager.core.logging import get_logger
from update_manager.core.metrics import (
    HTTP_REQUEST_DURATION_SECONDS,
    HTTP_REQUESTS_IN_PROGRESS,
    HTTP_REQUESTS_TOTAL,
    normalize_endpoint,
    set_app_info,
)
from update_manager.db import SessionLocal, get_db, init_db
from update_manager.domain.exceptions import DomainError
from update_manager.services.storage import new_reference

setup_logging()
logger = get_logger(__name__)

app = FastAPI(
    title=settings.api_title,
    version=settings.api_version,
)

set_app_info(version=settings.api_version, environment=settings.environment)

# CORS
app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["*"],
    allow_headers=["*"],
)

AGENT_PATHS = frozenset(settings.api_prefix + path for path in agent.AGENT_ROUTES)


@app.middleware("http")
async def answer_agent_preflight(request: Request, call_next):
    """Agent endpoints accept preflight from any origin."""
    if request.method == "OPTIONS" and request.url.path in AGENT_PATHS:
        return agent.preflight_response()
    return await call_next(request)


@app.middleware("http")
async def record_request_metrics(request: Request, call_next):
    """Count and time every request except scrapes of /metrics."""
    if request.url.path == "/metrics":
        return await call_next(request)

    method = request.method
    endpoint = normalize_endpoint(request.url.path)

    HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).inc()
    started = time.perf_counter()

    try:
        response = await call_next(request)
        status_code = str(response.status_code)
    except Exception:
        status_code = "500"
        raise
    finally:
        elapsed = time.perf_counter() - started
        HTTP_REQUESTS_IN_PROGRESS.labels(method=method, endpoint=endpoint).dec()
        HTTP_REQUEST_DURATION_SECONDS.labels(method=method, endpoint=endpoint).observe(elapsed)
        HTTP_REQUESTS_TOTAL.labels(method=method, endpoint=endpoint, status_code=status_code).inc()

    return response


# Routers
app.include_router(metrics.router)
app.include_router(agent.router, prefix=settings.api_prefix)
app.include_router(devices.router, prefix=settings.api_prefix)
app.include_router(rollouts.router, prefix=settings.api_prefix)


@app.on_event("startup")
def bootstrap_schema() -> None:
    """Create tables and seed defaults for local runs; migrations own production."""
    if settings.testing:
        return
    db = SessionLocal()
    try:
        init_db(db)
    except SQLAlchemyError as exc:
        db.rollback()
        logger.warning("Skipping schema bootstrap (database error): %s", exc)
    finally:
        db.close()


@app.get("/health")
async def health() -> dict:
    """Basic health check endpoint (alias for /health/live)."""
    return {"status": "healthy"}


@app.get("/health/live")
async def health_live() -> dict:
    """Liveness probe; only verifies the app responds."""
    return {"status": "healthy"}


@app.get("/health/ready")
def health_ready(db: Session = Depends(get_db)):
    """Readiness probe; 503 when the database is unreachable."""
    try:
        db.execute(text("SELECT 1"))
    except SQLAlchemyError as exc:
        logger.warning("Readiness check failed: %s", exc)
        return JSONResponse(
            status_code=503,
            content={
                "status": "unhealthy",
                "dependencies": {"database": {"status": "unhealthy"}},
            },
        )
    return {"status": "healthy", "dependencies": {"database": {"status": "healthy"}}}


@app.get("/")
async def root() -> dict:
    """Root endpoint."""
    return {
        "message": settings.api_title,
        "version": settings.api_version,
        "docs": "/docs",
    }


def error_response(request: Request, status_code: int, content: dict) -> Response:
    """JSON error envelope; agent paths keep their CORS headers on failures too."""
    headers = agent.CORS_HEADERS if request.url.path in AGENT_PATHS else None
    return JSONResponse(status_code=status_code, content=content, headers=headers)


@app.exception_handler(DomainError)
async def domain_exception_handler(request: Request, exc: DomainError):
    """Translate domain errors to HTTP responses globally."""
    http_exc = errors.to_http(exc)
    return error_response(request, http_exc.status_code, errors.error_body(exc))


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    """Malformed bodies are client errors: 400 with the field errors."""
    return error_response(
        request,
        400,
        {
            "error": "Invalid request payload",
            "details": jsonable_encoder(exc.errors()),
        },
    )


@app.exception_handler(Exception)
async def unhandled_exception_handler(request: Request, exc: Exception):
    """Log anything unexpected under a reference; the client only sees the reference."""
    reference = new_reference()
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=exc,
        extra={"reference": reference},
    )
    return error_response(
        request,
        500,
        {"error": "Internal server error", "details": f"Reference: {reference}"},
    )
