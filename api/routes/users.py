"""
api/routes/users.py -- User CRUD endpoints.

Routes:
  GET    /api/users         -- list users
  GET    /api/users/{id}    -- user detail
  PUT    /api/users/{id}    -- overwrite name + email
  DELETE /api/users/{id}    -- hard delete

Every route requires a valid bearer token. Any authenticated caller may act
on any user record; there is no ownership check.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request

from api.models import MessageResponse, UserListResponse, UserOut, UserResponse, UserUpdate
from auth.dependencies import get_current_identity
from users.service import UserService

# Router-level dependency applies the bearer gate to every route below.
router = APIRouter(prefix="/users", dependencies=[Depends(get_current_identity)])


def _service(request: Request) -> UserService:
    return request.app.state.user_service


@router.get("", response_model=UserListResponse)
def list_users(request: Request) -> UserListResponse:
    users = _service(request).get_all()
    return UserListResponse(data=[UserOut.from_user(u) for u in users])


@router.get("/{user_id}", response_model=UserResponse)
def get_user(request: Request, user_id: int) -> UserResponse:
    user = _service(request).get_by_id(user_id)
    return UserResponse(data=UserOut.from_user(user))


@router.put("/{user_id}", response_model=UserResponse)
def update_user(request: Request, user_id: int, body: UserUpdate) -> UserResponse:
    """Overwrite both fields. 404 if absent, 400 if the email is taken."""
    user = _service(request).update(user_id, body.name, body.email)
    return UserResponse(data=UserOut.from_user(user))


@router.delete("/{user_id}", response_model=MessageResponse)
def delete_user(request: Request, user_id: int) -> MessageResponse:
    _service(request).remove(user_id)
    return MessageResponse(message="Usuario eliminado")
