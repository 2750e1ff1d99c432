"""
FastAPI application factory
"""
import logging
import os

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse, PlainTextResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.sessions import SessionMiddleware

from pocketpilot.api.routers import budgets, export, goals, recurring, rules, templates, transactions
from pocketpilot.domain.errors import (
    ConflictError,
    DependencyError,
    DomainError,
    NotFoundError,
    UnauthorizedError,
    ValidationError,
)

logger = logging.getLogger(__name__)

SECRET_KEY_ENV = "POCKETPILOT_SECRET_KEY"

_STATUS_CODES = (
    (ValidationError, 400),
    (UnauthorizedError, 401),
    (NotFoundError, 404),
    (ConflictError, 409),
    (DependencyError, 409),
)


def status_for(error: DomainError) -> int:
    """HTTP status code of a domain error."""
    for error_type, status_code in _STATUS_CODES:
        if isinstance(error, error_type):
            return status_code
    return 400


async def domain_error_handler(request: Request, exc: DomainError) -> JSONResponse:
    return JSONResponse(status_code=status_for(exc), content={"error": str(exc)})


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    details = [
        {
            "field": ".".join(str(part) for part in err["loc"][1:]) or str(err["loc"][0]),
            "message": err["msg"],
        }
        for err in exc.errors()
    ]
    return JSONResponse(status_code=400, content={"error": "Validation failed", "details": details})


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(status_code=exc.status_code, content={"error": exc.detail})


async def unexpected_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.exception("Unhandled error on %s %s", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"error": "Internal server error"})


def create_app(secret_key: str | None = None) -> FastAPI:
    """
    Build the Pocket Pilot API

    Args:
        secret_key: session signing key (defaults to POCKETPILOT_SECRET_KEY)

    Returns:
        Configured FastAPI app
    """
    logging.basicConfig(level=logging.INFO)

    secret_key = secret_key or os.environ.get(SECRET_KEY_ENV)
    if not secret_key:
        logger.warning("%s is not set; using an insecure development key", SECRET_KEY_ENV)
        secret_key = "pocketpilot-dev-secret"

    app = FastAPI(title="Pocket Pilot")
    app.add_middleware(SessionMiddleware, secret_key=secret_key)

    app.add_exception_handler(DomainError, domain_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(Exception, unexpected_error_handler)

    app.include_router(goals.router)
    app.include_router(budgets.router)
    app.include_router(rules.router)
    app.include_router(recurring.router)
    app.include_router(templates.router)
    app.include_router(transactions.router)
    app.include_router(export.router)

    @app.get("/health", response_class=PlainTextResponse, tags=["system"])
    def health():
        """Health check endpoint"""
        return "ok"

    return app
