"""
auth/service.py -- Registration, login, and identity lookup.

AuthService orchestrates the credential store and the token issuer. It raises
core.errors.ServiceError for every anticipated failure and never builds HTTP
responses itself.

Login timing [C1]:
  bcrypt always runs, whether or not the email exists. Unknown emails are
  checked against a dummy hash computed with the same cost factor, so
  response time does not reveal which check failed. Both failures raise the
  identical Unauthorized error.

Registration race:
  There is no existence check before the insert. The UNIQUE(email)
  constraint is the only arbiter; its IntegrityError becomes a Conflict.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from auth.tokens import TokenIssuer, hash_password, verify_password
from core.errors import conflict, not_found, unauthorized

logger = logging.getLogger("authapi.auth")


class AuthService:
    def __init__(self, store: UserStore, tokens: TokenIssuer, bcrypt_rounds: int = 10) -> None:
        self.store = store
        self.tokens = tokens
        self.bcrypt_rounds = bcrypt_rounds
        # Same cost factor as real hashes, otherwise timing equalization leaks.
        self._dummy_hash = hash_password("authapi_timing_dummy", rounds=bcrypt_rounds)

    def register(self, name: str, email: str, password: str) -> User:
        """Create a user. Raises Conflict if the email is already registered."""
        hashed = hash_password(password, rounds=self.bcrypt_rounds)
        try:
            user = self.store.create_user(name, email, hashed)
        except IntegrityError as exc:
            logger.info("Registration rejected: email already registered")
            raise conflict(email=email) from exc
        logger.info("Registered user id=%s", user.id)
        return user

    def login(self, email: str, password: str) -> tuple[User, str]:
        """Verify credentials and mint a token.

        Returns (user, token); user.hashed_password is cleared before return.
        Raises Unauthorized with the same message for unknown email and wrong
        password.
        """
        user = self.store.get_by_email(email)
        if user is None or user.hashed_password is None:
            verify_password(password, self._dummy_hash)
            logger.info("Login failed: bad credentials")
            raise unauthorized()
        if not verify_password(password, user.hashed_password):
            logger.info("Login failed: bad credentials")
            raise unauthorized()

        token = self.tokens.issue({"id": user.id, "email": user.email, "role": user.role})
        user.hashed_password = None
        logger.info("Login succeeded for user id=%s", user.id)
        return user, token

    def get_by_id(self, user_id: int) -> User:
        user = self.store.get_by_id(user_id)
        if user is None:
            raise not_found(user_id=user_id)
        return user
