"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

get_current_identity() is the request gate for every protected route:

  no Authorization header          -> 401 "Token no proporcionado"
  header not "Bearer <token>"      -> 401 "Token no proporcionado"
  token present, verify():
      valid                        -> Identity on request.state.user
      expired                      -> 401 "Token expirado"
      anything else                -> 401 "Token inválido"

Verification is a single deterministic check -- no retry, no database lookup.
A deleted user's token stays valid until it expires; routes that need the
row (GET /auth/me) look it up and 404 themselves.

require_role() is the only role-based authorization helper. It wraps the
gate and raises 403 when the identity's role is not allowed.

Failures are raised as ServiceError so the single error boundary in
api/main.py renders them.

Layer rule: no imports from api/ or users/. fastapi is allowed because this
module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from collections.abc import Callable

from fastapi import Depends, Request

from auth.models import Identity
from auth.tokens import TokenExpiredError, TokenInvalidError, TokenIssuer
from core.errors import MSG_TOKEN_EXPIRED, MSG_TOKEN_INVALID, MSG_TOKEN_MISSING, forbidden, unauthorized

_BEARER_PREFIX = "Bearer "


def _extract_bearer(request: Request) -> str | None:
    header = request.headers.get("Authorization", "")
    if not header.startswith(_BEARER_PREFIX):
        return None
    token = header[len(_BEARER_PREFIX) :].strip()
    return token or None


def get_current_identity(request: Request) -> Identity:
    """Require a valid bearer token and return the caller's Identity.

    Use as a FastAPI dependency:
        @router.get("/protected")
        def route(identity: Identity = Depends(get_current_identity)): ...
    """
    token = _extract_bearer(request)
    if token is None:
        raise unauthorized(MSG_TOKEN_MISSING)

    tokens: TokenIssuer = request.app.state.tokens
    try:
        claims = tokens.verify(token)
    except TokenExpiredError as exc:
        raise unauthorized(MSG_TOKEN_EXPIRED) from exc
    except TokenInvalidError as exc:
        raise unauthorized(MSG_TOKEN_INVALID) from exc

    try:
        identity = Identity(id=int(claims["id"]), email=str(claims["email"]), role=str(claims.get("role", "user")))
    except (TypeError, ValueError) as exc:
        raise unauthorized(MSG_TOKEN_INVALID) from exc
    request.state.user = identity
    return identity


def require_role(*roles: str) -> Callable[..., Identity]:
    """Build a dependency that admits only identities whose role is in `roles`.

    Usage:
        @router.delete("/things/{id}")
        def route(identity: Identity = Depends(require_role("admin"))): ...
    """
    allowed = frozenset(roles)

    def _check(identity: Identity = Depends(get_current_identity)) -> Identity:
        if identity.role not in allowed:
            raise forbidden(role=identity.role)
        return identity

    return _check
