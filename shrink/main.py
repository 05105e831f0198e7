"""Main application module.

This module initializes the FastAPI application, includes routes,
and configures middleware and exception handlers.
"""

import uuid
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from shrink.api import api_router
from shrink.core.config import settings
from shrink.core.logging import setup_logging
from shrink.db.base import create_tables, engine

# Setup logging
logger = setup_logging()


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Run startup and shutdown tasks."""
    logger.info(f"Starting {settings.APP_NAME} v{settings.APP_VERSION}")
    logger.info(f"Environment: {settings.ENVIRONMENT.value}")
    logger.info(f"Debug mode: {settings.DEBUG}")

    await create_tables()
    logger.info("Database tables ready")

    yield

    logger.info(f"Shutting down {settings.APP_NAME}")
    await engine.dispose()


def create_app() -> FastAPI:
    app = FastAPI(
        title=settings.APP_NAME,
        description=settings.APP_DESCRIPTION,
        version=settings.APP_VERSION,
        lifespan=lifespan,
    )

    # Configure CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.CORS_ORIGINS,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(api_router)

    @app.exception_handler(StarletteHTTPException)
    async def http_exception_handler(request: Request, exc: StarletteHTTPException):
        return JSONResponse(
            status_code=exc.status_code,
            content={"detail": exc.detail},
            headers=getattr(exc, "headers", None),
        )

    @app.exception_handler(RequestValidationError)
    async def validation_exception_handler(request: Request, exc: RequestValidationError):
        """Handle validation errors with detailed information."""
        logger.info(f"Request validation error on {request.method} {request.url.path}: {exc}")
        return JSONResponse(
            status_code=400,
            content={"detail": "Validation error", "errors": _jsonable_errors(exc)},
        )

    @app.exception_handler(Exception)
    async def global_exception_handler(request: Request, exc: Exception):
        """Catch and log all unhandled exceptions."""
        error_id = f"error-{uuid.uuid4().hex[:12]}"
        logger.opt(exception=exc).error(
            f"Unhandled exception in {request.method} {request.url.path} [{error_id}]"
        )
        return JSONResponse(
            status_code=500,
            content={
                "detail": str(exc) if settings.DEBUG else "Internal server error",
                "error_id": error_id,
            },
        )

    return app


def _jsonable_errors(exc: RequestValidationError):
    # ctx may hold exception instances that JSON cannot encode
    errors = []
    for error in exc.errors():
        error = dict(error)
        if "ctx" in error:
            error["ctx"] = {key: str(value) for key, value in error["ctx"].items()}
        errors.append(error)
    return errors


app = create_app()

__all__ = ["app", "create_app"]
