"""SealFlow Backend - Main FastAPI Application

Seal usage and seal creation approval service.

This module creates and configures the main FastAPI application, including:
- API routers (applications, seal registry, users, files, system)
- Middleware (request ID correlation, CORS)
- Exception handlers mapping every error to the response envelope
- Metrics endpoint
"""

import logging
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError
from starlette.exceptions import HTTPException as StarletteHTTPException

from . import __version__
from .config import settings
from .database import init_db
from .common.responses import error_response

# Observability
from .observability.logging_config import configure_logging
from .observability.middleware import RequestIDMiddleware
from .observability.router import metrics_router, system_router

# Domain Routers
from .applications.router import creation_router, usage_router
from .files.router import router as files_router
from .seals.router import router as seals_router
from .users.router import router as users_router
from .workflow.errors import ApplicationError

configure_logging(level=settings.LOG_LEVEL, json_format=settings.LOG_JSON)

logger = logging.getLogger(__name__)

API_PREFIX = "/api"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Create missing tables on startup."""
    logger.info("SealFlow API starting up...")
    logger.info(f"Environment: {settings.ENV}")
    init_db()

    yield

    logger.info("SealFlow API shutting down...")


app = FastAPI(
    title="SealFlow API",
    description="Seal usage and creation approval workflows",
    version=__version__,
    docs_url="/docs" if settings.ENV != "production" else None,
    redoc_url="/redoc" if settings.ENV != "production" else None,
    openapi_url="/openapi.json" if settings.ENV != "production" else None,
    lifespan=lifespan,
)


# =============================================================================
# MIDDLEWARE CONFIGURATION
# =============================================================================

app.add_middleware(RequestIDMiddleware)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
    expose_headers=["X-Request-ID"],
)


# =============================================================================
# EXCEPTION HANDLERS
# =============================================================================

@app.exception_handler(ApplicationError)
async def application_exception_handler(
    request: Request,
    exc: ApplicationError
) -> JSONResponse:
    """Workflow errors carry their own status code and user-facing message."""
    log = logger.error if exc.code >= 500 else logger.info
    log(
        f"{exc.kind} on {request.method} {request.url.path}: {exc.message}",
        extra={"error_kind": exc.kind}
    )
    return error_response(exc.code, exc.message)


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(
    request: Request,
    exc: RequestValidationError
) -> JSONResponse:
    """Malformed request bodies and query parameters are reported as 400."""
    details = [
        {
            "field": ".".join(str(part) for part in error.get("loc", ())),
            "message": error.get("msg"),
        }
        for error in exc.errors()
    ]
    logger.warning(
        f"Validation error on {request.method} {request.url.path}",
        extra={"errors": details}
    )
    message = "请求参数错误"
    if details:
        message = f"{message}: {details[0]['field']} {details[0]['message']}"
    return error_response(status.HTTP_400_BAD_REQUEST, message, details)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(
    request: Request,
    exc: StarletteHTTPException
) -> JSONResponse:
    return error_response(exc.status_code, str(exc.detail))


@app.exception_handler(SQLAlchemyError)
async def database_exception_handler(
    request: Request,
    exc: SQLAlchemyError
) -> JSONResponse:
    """Log the full error but return a generic message."""
    logger.error(
        f"Database error on {request.method} {request.url.path}",
        exc_info=exc
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "数据库操作失败，请稍后重试")


@app.exception_handler(Exception)
async def generic_exception_handler(
    request: Request,
    exc: Exception
) -> JSONResponse:
    logger.error(
        f"Unhandled exception on {request.method} {request.url.path}",
        exc_info=exc
    )
    return error_response(status.HTTP_500_INTERNAL_SERVER_ERROR, "系统内部错误，请稍后重试")


# =============================================================================
# ROUTER REGISTRATION
# =============================================================================

app.include_router(metrics_router)
app.include_router(system_router, prefix=API_PREFIX)

app.include_router(usage_router, prefix=API_PREFIX)
app.include_router(creation_router, prefix=API_PREFIX)
app.include_router(seals_router, prefix=API_PREFIX)
app.include_router(users_router, prefix=API_PREFIX)
app.include_router(files_router, prefix=API_PREFIX)


def create_app() -> FastAPI:
    """Return the configured application (used by tests and ASGI servers)."""
    return app


if __name__ == "__main__":
    import os

    import uvicorn

    uvicorn.run(
        "sealflow.main:app",
        host=os.getenv("HOST", "0.0.0.0"),
        port=int(os.getenv("PORT", "8000")),
        reload=settings.ENV == "development",
        log_level=settings.LOG_LEVEL.lower(),
    )
