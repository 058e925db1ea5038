"""
api/errors.py -- The single mapping from failures to HTTP responses.

api/main.py registers one exception handler per failure family, and each
handler is a thin wrapper around a function here:

  ServiceError                 -> its ErrorKind's status, its message
  HTTPException                -> its status, its detail
  IntegrityError (unique)      -> 400 "Ya existe un registro con esos datos"
  IntegrityError (foreign key) -> 400 "Referencia a un registro que no existe"
  RequestValidationError       -> 422 "Datos de entrada inválidos" + errors
  anything else                -> 500 "Error interno del servidor"

Services catch the IntegrityErrors they expect (duplicate email) and raise
ServiceError themselves; the IntegrityError mapping covers writes nobody
anticipated. Raw exception text never reaches the response body.
"""

from __future__ import annotations

from fastapi.responses import JSONResponse
from sqlalchemy.exc import IntegrityError

from api.models import ErrorResponse
from core.errors import (
    MSG_DUPLICATE,
    MSG_INTERNAL,
    MSG_MISSING_REFERENCE,
    MSG_VALIDATION,
    ServiceError,
)

# PostgreSQL SQLSTATE codes
_UNIQUE_VIOLATION = "23505"
_FOREIGN_KEY_VIOLATION = "23503"


def error_response(status_code: int, message: str, errors: list[dict] | None = None) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content=ErrorResponse(message=message, errors=errors).model_dump(exclude_none=True),
    )


def integrity_violation(exc: IntegrityError) -> str | None:
    """Classify an IntegrityError as "unique", "foreign_key", or None.

    PostgreSQL drivers expose the SQLSTATE (psycopg2: pgcode, psycopg 3:
    sqlstate). SQLite only has the message text.
    """
    orig = exc.orig
    code = getattr(orig, "pgcode", None) or getattr(orig, "sqlstate", None)
    if code == _UNIQUE_VIOLATION:
        return "unique"
    if code == _FOREIGN_KEY_VIOLATION:
        return "foreign_key"
    text = str(orig).upper()
    if "UNIQUE CONSTRAINT" in text:
        return "unique"
    if "FOREIGN KEY CONSTRAINT" in text:
        return "foreign_key"
    return None


def from_service_error(exc: ServiceError) -> JSONResponse:
    return error_response(exc.status_code, exc.message)


def from_http_exception(status_code: int, detail) -> JSONResponse:
    message = detail if isinstance(detail, str) else str(detail)
    return error_response(status_code, message)


def from_integrity_error(exc: IntegrityError) -> JSONResponse:
    kind = integrity_violation(exc)
    if kind == "unique":
        return error_response(400, MSG_DUPLICATE)
    if kind == "foreign_key":
        return error_response(400, MSG_MISSING_REFERENCE)
    return internal_error()


def from_validation_errors(errors: list[dict]) -> JSONResponse:
    """422 with a trimmed copy of Pydantic's error list.

    Only loc/msg/type are kept -- ctx can hold exception objects that are
    not JSON-serializable, and input can echo a submitted password.
    """
    trimmed = [{"loc": list(e.get("loc", ())), "msg": e.get("msg", ""), "type": e.get("type", "")} for e in errors]
    return error_response(422, MSG_VALIDATION, trimmed)


def internal_error() -> JSONResponse:
    return error_response(500, MSG_INTERNAL)
