"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; stores, services and routes do the work. The outbound HTTP shape lives
in api/models.py and never includes hashed_password or role.

Layer rule: no imports from api/ or users/.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class User:
    """A registered identity.

    hashed_password is None only on User objects built from projections that
    deliberately skip the column (list queries). The row itself always has one.
    """

    name: str
    email: str
    id: int | None = None
    hashed_password: str | None = None
    role: str = "user"
    created_at: str | None = None


@dataclass(frozen=True)
class Identity:
    """The verified claims of a bearer token, attached to request.state.user."""

    id: int
    email: str
    role: str = "user"
