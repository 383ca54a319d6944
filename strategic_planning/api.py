"""
FastAPI application for the Strategic Planning backend.
"""

from __future__ import annotations

import importlib.metadata
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from typing import Any, Dict

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from .config import get_settings
from .db.base import init_database
from .errors import PlanningError, StorageError, ValidationError
from .logging_config import configure_logging
from .records.routes import routers

# Initialize structured logging
logger = structlog.get_logger()

settings = get_settings()


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan manager."""
    configure_logging(settings)
    logger.info("Starting Strategic Planning backend", environment=settings.environment)

    try:
        init_database()
    except SQLAlchemyError as e:
        logger.error("Failed to initialize database", error=str(e))
        raise

    yield

    logger.info("Shutdown complete")


app = FastAPI(
    title=settings.app_name,
    description="Records backend for strategic issues, strategies and projects",
    version=importlib.metadata.version("strategic-planning-backend"),
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.allowed_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# =============================================================================
# Error handlers
# =============================================================================


@app.exception_handler(PlanningError)
async def planning_error_handler(request: Request, exc: PlanningError) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


@app.exception_handler(RequestValidationError)
async def request_validation_handler(
    request: Request, exc: RequestValidationError
) -> JSONResponse:
    error = ValidationError("Invalid request data")
    content = error.to_dict()
    content["errors"] = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=error.status_code, content=content)


@app.exception_handler(SQLAlchemyError)
async def storage_error_handler(request: Request, exc: SQLAlchemyError) -> JSONResponse:
    logger.error("Storage error", path=request.url.path, error=str(exc))
    error = StorageError("A storage error occurred")
    content = error.to_dict()
    if not settings.is_production:
        content["detail"] = str(exc)
    return JSONResponse(status_code=error.status_code, content=content)


@app.exception_handler(Exception)
async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error", path=request.url.path)
    content: Dict[str, Any] = {
        "success": False,
        "message": "Internal server error",
        "error": "INTERNAL_ERROR",
    }
    if not settings.is_production:
        content["detail"] = str(exc)
    return JSONResponse(status_code=500, content=content)


# =============================================================================
# Routes
# =============================================================================


@app.get("/health", tags=["system"])
async def health() -> dict:
    """Liveness check."""
    return {"status": "ok", "version": importlib.metadata.version("strategic-planning-backend")}


for router in routers:
    app.include_router(router, prefix="/api")
