"""
api/main.py -- FastAPI application for authapi.

Run with:  python asgi.py
           uvicorn asgi:app --reload

Middleware stack (outermost to innermost):
  1. CORSMiddleware  -- open CORS, matching a plain cors() default
  2. log_requests    -- one access-log line per request with latency

Lifespan owns every shared resource. Startup builds them in dependency
order and stores them on app.state; shutdown disposes the engine. Nothing
is created at import time, so importing this module never needs a database
or a secret.

Error boundary:
  The exception handlers below are the only place a failure becomes an HTTP
  status. Route handlers and services raise; they never build error bodies.
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
from sqlalchemy.exc import IntegrityError
from starlette.exceptions import HTTPException as StarletteHTTPException

from api import errors
from api.models import HealthResponse
from api.routes.auth import router as auth_router
from api.routes.users import router as users_router
from auth.service import AuthService
from auth.store import UserStore
from auth.tokens import TokenIssuer
from core.config import get_settings
from core.errors import ServiceError
from users.service import UserService

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("authapi.api")

VERSION = "1.0.0"


# ---------------------------------------------------------------------------
# Lifespan -- startup / shutdown
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Build and tear down application-level resources.

    Startup order matters:
      1. Settings -- raises on missing configuration, before anything binds.
      2. UserStore -- owns the engine; ping() surfaces a bad DSN at startup
         instead of on the first request.
      3. TokenIssuer and the services, which depend on the store.

    The document store URI is validated by Settings but never connected.
    """
    settings = get_settings()
    logger.info("authapi starting up")

    store = UserStore(settings.sqlalchemy_url, echo=settings.debug)
    store.ping()
    tokens = TokenIssuer(settings.jwt_secret, settings.token_expire_seconds)

    app.state.user_store = store
    app.state.tokens = tokens
    app.state.auth_service = AuthService(store, tokens, bcrypt_rounds=settings.bcrypt_rounds)
    app.state.user_service = UserService(store)
    logger.info("Document store configured but not connected (no feature reads or writes it)")
    logger.info("Token expiry set to %d seconds", settings.token_expire_seconds)

    yield

    store.close()
    logger.info("authapi shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="authapi",
    description="Email/password registration, JWT sessions, and user management.",
    version=VERSION,
    lifespan=lifespan,
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
    allow_headers=["Content-Type", "Authorization"],
)


# ---------------------------------------------------------------------------
# Request logging middleware
# ---------------------------------------------------------------------------


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

app.include_router(auth_router, prefix="/api", tags=["Auth"])
app.include_router(users_router, prefix="/api", tags=["Users"])


# ---------------------------------------------------------------------------
# Exception handlers -- the error boundary
#
# All handlers return the same {"ok": false, "message": ...} envelope so
# clients can parse errors uniformly.
# ---------------------------------------------------------------------------


@app.exception_handler(ServiceError)
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %r", request.method, request.url.path, exc)
    return errors.from_service_error(exc)


@app.exception_handler(StarletteHTTPException)
async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Echo status + detail for framework-raised errors (unknown route, wrong method)."""
    return errors.from_http_exception(exc.status_code, exc.detail)


@app.exception_handler(IntegrityError)
async def integrity_error_handler(request: Request, exc: IntegrityError) -> JSONResponse:
    """Constraint violations no service anticipated."""
    logger.warning("Integrity error on %s %s: %s", request.method, request.url.path, exc.orig)
    return errors.from_integrity_error(exc)


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    return errors.from_validation_errors(exc.errors())


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The traceback goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return errors.internal_error()


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state. No authentication.
# ---------------------------------------------------------------------------


@app.get("/api/health", tags=["Health"])
async def health() -> HealthResponse:
    return HealthResponse()
