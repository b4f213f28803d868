"""
api/main.py -- FastAPI application entry point for TicketDesk.

Run with:  uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware   -- adds CORS headers for the frontend origins
  2. log_requests     -- one log line per request with latency

Lifespan builds the process-wide collaborators once and hangs them on
app.state: UserStore, AuthService, UserService. Nothing reads
them from module globals; dependencies in api/dependencies.py and
auth/dependencies.py fetch them from the request's app.

Error mapping happens here and only here. Services raise core.errors
subclasses; the handlers below turn every failure into the same envelope:
    {"error": {"code", "message", "status", "data"}}
"""

from __future__ import annotations

import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.auth import router as auth_router
from api.routes.roles import router as roles_router
from api.routes.users import router as users_router
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenCodec
from core.config import get_settings
from core.errors import AppError, InternalError, ValidationError
from users.service import UserService

VERSION = "0.1.0"

settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=settings.log_level.upper(),
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("ticketdesk.api")


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build and tear down the app-scoped collaborators.

    Everything before yield runs on startup; everything after yield runs on
    shutdown.
    """
    logger.info("TicketDesk API starting up")
    store = UserStore(settings.database_url)
    codec = TokenCodec(
        settings.secret_key,
        access_ttl=settings.access_token_expire_seconds,
        refresh_ttl=settings.refresh_token_expire_seconds,
        login_ttl=settings.login_token_expire_seconds,
    )
    app.state.user_store = store
    app.state.auth_service = AuthService(store, codec)
    app.state.user_service = UserService(store)
    logger.info("Store initialized")

    yield

    store.close()
    logger.info("TicketDesk API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="TicketDesk API",
    description="Authentication, user and role management for the TicketDesk admin console.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_methods=["GET", "POST", "PUT", "DELETE"],
    allow_headers=["Content-Type", "Authorization"],
    max_age=3600,
)


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix=settings.base_api_url, tags=["Auth"])
app.include_router(users_router, prefix=settings.base_api_url, tags=["Users"])
app.include_router(roles_router, prefix=settings.base_api_url, tags=["Roles"])


# ---------------------------------------------------------------------------
# Exception handlers
#
# Every handler returns the ErrorResponse envelope.
# ---------------------------------------------------------------------------


def _error_response(error: AppError) -> JSONResponse:
    return JSONResponse(
        status_code=error.status_code,
        content=ErrorResponse(error=ErrorDetail(**error.to_dict())).model_dump(),
    )


@app.exception_handler(AppError)
async def app_error_handler(request: Request, exc: AppError) -> JSONResponse:
    """Map a domain error raised anywhere below the routes."""
    if exc.status_code >= 500:
        logger.error("%s on %s %s: %s", exc.code, request.method, request.url.path, exc.message)
    return _error_response(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report body, path and query validation failures as VALIDATION_ERROR.

    Field errors go into data.fields as {"field": dotted location, "message"}.
    Input values are never echoed back.
    """
    fields = [
        {
            "field": ".".join(str(part) for part in err.get("loc", ()) if part != "body"),
            "message": err.get("msg", ""),
        }
        for err in exc.errors()
    ]
    return _error_response(ValidationError(data={"fields": fields}))


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Unknown routes, wrong methods and other framework-level HTTP errors."""
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(
                code=f"HTTP_{exc.status_code}",
                message=str(exc.detail),
                status=exc.status_code,
            )
        ).model_dump(),
        headers=getattr(exc, "headers", None),
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body. The
    client receives INTERNAL_ERROR with a generic message.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return _error_response(InternalError())


# ---------------------------------------------------------------------------
# Health endpoint
# ---------------------------------------------------------------------------


@app.get(f"{settings.base_api_url}/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version and database reachability."""
    try:
        database = "ok" if request.app.state.user_store.ping() else "error"
    except Exception:
        logger.exception("Health check database probe failed")
        database = "error"
    return HealthResponse(version=VERSION, components={"app": "ok", "database": database})
