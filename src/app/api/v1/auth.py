"""Authentication endpoints."""

from fastapi import APIRouter, status
from starlette.requests import Request

from src.app.api.dependencies import AuthServiceDep
from src.app.core.rate_limit import auth_rate_limit, limiter
from src.app.schemas.auth import (
    LoginRequest,
    LogoutRequest,
    RefreshRequest,
    RegisterRequest,
    RegisterResponse,
    TokenPair,
)
from src.app.schemas.user import ProfileRead

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post(
    "/register",
    response_model=RegisterResponse,
    status_code=status.HTTP_201_CREATED,
    responses={
        201: {
            "description": "User and profile created",
            "content": {
                "application/json": {
                    "example": {
                        "email": "ana@example.com",
                        "profile": {
                            "id": "550e8400-e29b-41d4-a716-446655440000",
                            "full_name": "Ana Ruiz",
                            "role": "client",
                            "avatar_url": None,
                            "created_at": "2025-01-01T00:00:00",
                            "updated_at": "2025-01-01T00:00:00",
                        },
                    }
                }
            },
        },
        409: {"description": "Email already registered"},
        422: {"description": "Invalid email, weak password or unknown role"},
    },
)
@limiter.limit(auth_rate_limit)
async def register(
    request: Request,
    register_data: RegisterRequest,
    service: AuthServiceDep,
) -> RegisterResponse:
    """Register a user with the requested role (client by default)."""
    user, profile = await service.register(register_data)
    return RegisterResponse(email=user.email, profile=ProfileRead.model_validate(profile))


@router.post(
    "/login",
    response_model=TokenPair,
    responses={
        200: {
            "description": "Successful authentication",
            "content": {
                "application/json": {
                    "example": {
                        "access_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                        "refresh_token": "eyJhbGciOiJIUzI1NiIsInR5cCI6IkpXVCJ9...",
                        "token_type": "bearer",
                    }
                }
            },
        },
        401: {"description": "Invalid credentials"},
    },
)
@limiter.limit(auth_rate_limit)
async def login(request: Request, login_data: LoginRequest, service: AuthServiceDep) -> TokenPair:
    """Authenticate and return an access/refresh token pair."""
    return await service.login(login_data.email, login_data.password)


@router.post(
    "/refresh",
    response_model=TokenPair,
    responses={
        200: {"description": "Token refreshed with rotation"},
        401: {"description": "Invalid or expired refresh token"},
    },
)
@limiter.limit(auth_rate_limit)
async def refresh(
    request: Request, refresh_data: RefreshRequest, service: AuthServiceDep
) -> TokenPair:
    """Exchange a refresh token for a new pair.

    The presented refresh token is revoked; replaying it fails.
    """
    return await service.refresh(refresh_data.refresh_token)


@router.post("/logout", status_code=status.HTTP_204_NO_CONTENT)
async def logout(request: Request, logout_data: LogoutRequest, service: AuthServiceDep) -> None:
    """Revoke a refresh token (logout). Unknown tokens are ignored."""
    await service.logout(logout_data.refresh_token)
