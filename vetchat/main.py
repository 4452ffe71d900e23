"""
FastAPI application bootstrap with: \n
- Lifespan-managed logging setup and optional schema creation \n
- CORS configured for the frontend \n
- Chat router under `/api/chat` \n
- Exception handlers mapping chat errors to stable HTTP responses \n
- Liveness endpoint \n

Error mapping: \n
- EntityNotFoundError → 404, AccessDeniedError → 403, ConflictError → 409,
  DomainValidationError → 422, UnauthorizedError → 401 \n
- Malformed bodies or query parameters → 422 with the same body shape; `detail`
  carries pydantic's per-field errors. \n
- Anything else → 500 with a generic body; the traceback is logged, never returned. \n

Environment contract (from `settings`): \n
- FRONTEND_URL: allowed CORS origin. \n
- LOG_LEVEL: level of the `vetchat` loggers. \n
- CREATE_SCHEMA: create missing tables on startup (local dev). \n
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from vetchat.api.fast_api import router
from vetchat.database.config.config import settings
from vetchat.database.config.connection_engine import connection_engine, metadata
from vetchat.exceptions import (
    AccessDeniedError,
    ChatError,
    ConflictError,
    DomainValidationError,
    EntityNotFoundError,
    UnauthorizedError,
)
from vetchat.logging_config import setup_logging

logger = logging.getLogger(__name__)

STATUS_BY_ERROR = [
    (EntityNotFoundError, 404),
    (AccessDeniedError, 403),
    (ConflictError, 409),
    (DomainValidationError, 422),
    (UnauthorizedError, 401),
]
"""Ordered (exception type, HTTP status) pairs; the first matching type wins."""


@asynccontextmanager
async def lifespan(app: FastAPI):
    """
    App lifespan manager.

    - On startup: configure logging; create missing tables when CREATE_SCHEMA is set.
    - On shutdown: dispose of the engine's connection pool.
    """
    setup_logging(settings.LOG_LEVEL)
    logger.info("Chat service starting (driver=%s)", settings.DB_DRIVER_NAME)
    if settings.CREATE_SCHEMA:
        metadata.create_all(connection_engine)
        logger.info("Database schema ensured")
    try:
        yield
    finally:
        connection_engine.dispose()
        logger.info("Chat service shut down")


def status_for(error: ChatError) -> int:
    for error_type, status in STATUS_BY_ERROR:
        if isinstance(error, error_type):
            return status
    return 400


async def chat_error_handler(request: Request, exc: ChatError) -> JSONResponse:
    status = status_for(exc)
    logger.info("%s %s -> %d %s: %s", request.method, request.url.path, status, exc.kind, exc.message)
    headers = {"WWW-Authenticate": "Bearer"} if status == 401 else None
    return JSONResponse(status_code=status, content={"error": exc.kind, "detail": exc.message}, headers=headers)


async def request_validation_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    errors = jsonable_encoder(exc.errors())
    logger.info("%s %s -> 422 validation_error: %d invalid field(s)", request.method, request.url.path, len(errors))
    return JSONResponse(status_code=422, content={"error": DomainValidationError.kind, "detail": errors})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "internal_error", "detail": "An unexpected error occurred."})


def create_app() -> FastAPI:
    """Build the FastAPI application."""
    app = FastAPI(title="VetChat", lifespan=lifespan)

    app.add_middleware(
        CORSMiddleware,
        allow_origins=[settings.FRONTEND_URL],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    app.include_router(router)
    app.add_exception_handler(ChatError, chat_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    @app.get("/health")
    def health():
        """Liveness probe."""
        return {"status": "ok"}

    return app


app = create_app()
"""ASGI application object (``uvicorn vetchat.main:app``)."""
