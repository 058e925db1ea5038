"""
users/service.py -- Read, update, and delete operations on user records.

Every lookup by id that misses raises NotFound ("Usuario no encontrado").
Email collisions on update raise Conflict, same as registration.
"""

from __future__ import annotations

import logging

from sqlalchemy.exc import IntegrityError

from auth.models import User
from auth.store import UserStore
from core.errors import conflict, not_found

logger = logging.getLogger("authapi.users")


class UserService:
    def __init__(self, store: UserStore) -> None:
        self.store = store

    def get_all(self) -> list[User]:
        return self.store.list_users()

    def get_by_id(self, user_id: int) -> User:
        user = self.store.get_by_id(user_id)
        if user is None:
            raise not_found(user_id=user_id)
        return user

    def update(self, user_id: int, name: str, email: str) -> User:
        """Overwrite both name and email.

        Raises NotFound when user_id is absent (nothing is written) and
        Conflict when email already belongs to another user.
        """
        try:
            user = self.store.update_user(user_id, name, email)
        except IntegrityError as exc:
            logger.info("Update of user id=%s rejected: email already registered", user_id)
            raise conflict(user_id=user_id, email=email) from exc
        if user is None:
            raise not_found(user_id=user_id)
        logger.info("Updated user id=%s", user_id)
        return user

    def remove(self, user_id: int) -> None:
        """Hard-delete a user. Raises NotFound if user_id is absent."""
        if not self.store.delete_user(user_id):
            raise not_found(user_id=user_id)
        logger.info("Deleted user id=%s", user_id)
