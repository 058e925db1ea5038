"""
API request and response models for the authapi REST endpoints.

These Pydantic v2 models define the HTTP transport contract. They are
intentionally separate from the dataclasses in auth/models.py, which own the
internal domain representation. Route handlers map between the two.

The outbound user shape is exactly {id, name, email}. hashed_password and
role exist on the domain dataclass but have no field here, so they can never
be serialized by accident.

Every success body is {"ok": true, ...}; every error body is
{"ok": false, "message": ...}.
"""

from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, StringConstraints, field_validator

from auth.models import User

# Deliberately loose: one "@" with something on each side, no whitespace.
EMAIL_PATTERN = r"^[^@\s]+@[^@\s]+$"

# bcrypt only accepts 72 bytes of input; bcrypt 5 raises past that.
_BCRYPT_MAX_BYTES = 72

# Names and emails are trimmed; passwords are taken byte-for-byte.
_Name = Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
_Email = Annotated[str, StringConstraints(strip_whitespace=True, min_length=3, max_length=255, pattern=EMAIL_PATTERN)]


# ---------------------------------------------------------------------------
# Request models
# ---------------------------------------------------------------------------


class RegisterRequest(BaseModel):
    """Request body for POST /api/auth/register."""

    name: _Name
    email: _Email
    password: str = Field(min_length=1, max_length=_BCRYPT_MAX_BYTES)

    @field_validator("password")
    @classmethod
    def password_fits_bcrypt(cls, value: str) -> str:
        """Reject passwords bcrypt cannot hash (multi-byte characters count per byte)."""
        if len(value.encode("utf-8")) > _BCRYPT_MAX_BYTES:
            raise ValueError(f"Password must be at most {_BCRYPT_MAX_BYTES} bytes.")
        return value


class LoginRequest(BaseModel):
    """Request body for POST /api/auth/login.

    No pattern on email: a malformed address must get the same 401 as an
    unknown one, not a 422 that reveals validation rules.
    """

    email: Annotated[str, StringConstraints(strip_whitespace=True, min_length=1, max_length=255)]
    password: str = Field(min_length=1, max_length=255)


class UserUpdate(BaseModel):
    """Request body for PUT /api/users/{id}. Both fields are required -- full overwrite."""

    name: _Name
    email: _Email


# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserOut(BaseModel):
    """Public view of a user."""

    model_config = ConfigDict(frozen=True)

    id: int
    name: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> "UserOut":
        return cls(id=user.id, name=user.name, email=user.email)


class UserResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    data: UserOut


class UserListResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    data: list[UserOut]


class LoginData(BaseModel):
    model_config = ConfigDict(frozen=True)

    user: UserOut
    token: str


class LoginResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    ok: bool = True
    data: LoginData


class MessageResponse(BaseModel):
    """Success envelope for operations with nothing to return (logout, delete)."""

    model_config = ConfigDict(frozen=True)

    ok: bool = True
    message: str


class ErrorResponse(BaseModel):
    """Error envelope returned on every 4xx/5xx response.

    errors is only populated for request validation failures.
    """

    model_config = ConfigDict(frozen=True)

    ok: bool = False
    message: str
    errors: Optional[list[dict]] = None


class HealthResponse(BaseModel):
    """Response for GET /api/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "OK"
    message: str = "Server running"
