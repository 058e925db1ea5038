"""
api/routes/auth.py -- Registration, login, logout, and current-user endpoints.

Routes:
  POST /api/auth/register   -- create account (public)
  POST /api/auth/login      -- email/password login; returns user + token (public)
  POST /api/auth/logout     -- acknowledge logout (requires auth)
  GET  /api/auth/me         -- current user record (requires auth)

Handlers translate between HTTP and AuthService. They do not catch
ServiceError -- it propagates to the error boundary in api/main.py.

Security:
  [C1] AuthService.login() equalizes timing for unknown emails -- never
       inline get_by_email() + verify_password() here.
  [M5] Cache-Control: no-store on login responses (they carry a token).
  Logout is stateless: tokens cannot be revoked, the client discards its copy.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request, Response

from api.models import LoginData, LoginRequest, LoginResponse, MessageResponse, RegisterRequest, UserOut, UserResponse
from auth.dependencies import get_current_identity
from auth.models import Identity
from auth.service import AuthService

router = APIRouter(prefix="/auth")


@router.post("/register", response_model=UserResponse, status_code=201)
def register(request: Request, body: RegisterRequest) -> UserResponse:
    """Create an account. 400 if the email is already registered."""
    auth_service: AuthService = request.app.state.auth_service
    user = auth_service.register(body.name, body.email, body.password)
    return UserResponse(data=UserOut.from_user(user))


@router.post("/login", response_model=LoginResponse)
def login(request: Request, response: Response, body: LoginRequest) -> LoginResponse:
    """Authenticate with email and password.

    Unknown email and wrong password both return 401 "Credenciales inválidas".
    """
    auth_service: AuthService = request.app.state.auth_service
    response.headers["Cache-Control"] = "no-store"  # [M5]
    user, token = auth_service.login(body.email, body.password)
    return LoginResponse(data=LoginData(user=UserOut.from_user(user), token=token))


@router.post("/logout", response_model=MessageResponse)
async def logout(identity: Identity = Depends(get_current_identity)) -> MessageResponse:
    return MessageResponse(message="Sesión cerrada")


@router.get("/me", response_model=UserResponse)
def me(request: Request, identity: Identity = Depends(get_current_identity)) -> UserResponse:
    """Return the caller's user record. 404 if the account was deleted after the token was issued."""
    auth_service: AuthService = request.app.state.auth_service
    user = auth_service.get_by_id(identity.id)
    return UserResponse(data=UserOut.from_user(user))
