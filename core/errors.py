"""
core/errors.py -- Closed error taxonomy shared by services and the HTTP boundary.

Services raise ServiceError with one of the ErrorKind members; route handlers
let it propagate untouched; api/errors.py is the only place that turns a kind
into an HTTP status. Adding a kind means adding it to _STATUS below -- the
lookup is exhaustive by construction.

Layer rule: core/ is the kernel. No imports from api/, auth/, or users/.
"""

from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    CONFLICT = "conflict"
    UNAUTHORIZED = "unauthorized"
    FORBIDDEN = "forbidden"
    NOT_FOUND = "not_found"
    INTERNAL = "internal"


_STATUS: dict[ErrorKind, int] = {
    ErrorKind.CONFLICT: 400,
    ErrorKind.UNAUTHORIZED: 401,
    ErrorKind.FORBIDDEN: 403,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.INTERNAL: 500,
}


class ServiceError(Exception):
    """A failure the service layer anticipated.

    `message` is safe to show to API clients. `context` carries structured
    data for logs (e.g. user_id, email) and is never serialized to clients.
    """

    def __init__(self, kind: ErrorKind, message: str, **context) -> None:
        super().__init__(message)
        self.kind = kind
        self.message = message
        self.context = context

    @property
    def status_code(self) -> int:
        return _STATUS[self.kind]

    def __repr__(self) -> str:
        return f"ServiceError({self.kind.value!r}, {self.message!r}, context={self.context!r})"


# ---------------------------------------------------------------------------
# Client-facing messages
# ---------------------------------------------------------------------------

MSG_EMAIL_TAKEN = "El email ya está registrado"
MSG_BAD_CREDENTIALS = "Credenciales inválidas"
MSG_USER_NOT_FOUND = "Usuario no encontrado"
MSG_TOKEN_MISSING = "Token no proporcionado"
MSG_TOKEN_EXPIRED = "Token expirado"
MSG_TOKEN_INVALID = "Token inválido"
MSG_FORBIDDEN = "You do not have permission to perform this action."
MSG_DUPLICATE = "Ya existe un registro con esos datos"
MSG_MISSING_REFERENCE = "Referencia a un registro que no existe"
MSG_VALIDATION = "Datos de entrada inválidos"
MSG_INTERNAL = "Error interno del servidor"


def conflict(message: str = MSG_EMAIL_TAKEN, **context) -> ServiceError:
    return ServiceError(ErrorKind.CONFLICT, message, **context)


def unauthorized(message: str = MSG_BAD_CREDENTIALS, **context) -> ServiceError:
    return ServiceError(ErrorKind.UNAUTHORIZED, message, **context)


def forbidden(message: str = MSG_FORBIDDEN, **context) -> ServiceError:
    return ServiceError(ErrorKind.FORBIDDEN, message, **context)


def not_found(message: str = MSG_USER_NOT_FOUND, **context) -> ServiceError:
    return ServiceError(ErrorKind.NOT_FOUND, message, **context)
