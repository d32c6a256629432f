"""HTTP routes for registration, login and profile management."""

from __future__ import annotations

from fastapi import APIRouter, Body, Depends, Request, Response, status

from storefront.common import ApiResponse, ServiceSettings, create_response
from storefront.common.security import Principal

from ..dependencies import get_app_settings, get_current_user, get_user_service
from ..schemas import (
    AuthResponse,
    RefreshRequest,
    TokenResponse,
    UserCreate,
    UserLogin,
    UserResponse,
    UserUpdate,
)
from ..services.users import AuthenticatedUser, UserService

router = APIRouter(prefix="/users", tags=["users"])

REFRESH_COOKIE = "refreshToken"


def _serialize_user(user) -> dict[str, object]:
    return {
        "id": user.id,
        "name": user.name,
        "email": user.email,
        "role": user.role,
        "isActive": user.is_active,
        "createdAt": user.created_at,
    }


def _serialize_auth(result: AuthenticatedUser) -> dict[str, object]:
    return {
        "user": _serialize_user(result.user),
        "accessToken": result.tokens.access_token,
        "refreshToken": result.tokens.refresh_token,
    }


def _set_refresh_cookie(response: Response, token: str, settings: ServiceSettings) -> None:
    response.set_cookie(
        REFRESH_COOKIE,
        token,
        max_age=settings.refresh_token_expire_minutes * 60,
        httponly=True,
        secure=settings.environment == "prod",
        samesite="strict",
    )


@router.post("/register", response_model=ApiResponse[AuthResponse], status_code=status.HTTP_201_CREATED)
async def register_user(
    payload: UserCreate,
    response: Response,
    service: UserService = Depends(get_user_service),
    settings: ServiceSettings = Depends(get_app_settings),
) -> ApiResponse[AuthResponse]:
    result = await service.register(payload)
    _set_refresh_cookie(response, result.tokens.refresh_token, settings)
    return create_response(AuthResponse.model_validate(_serialize_auth(result)), "User registered successfully")


@router.post("/login", response_model=ApiResponse[AuthResponse])
async def login_user(
    payload: UserLogin,
    response: Response,
    service: UserService = Depends(get_user_service),
    settings: ServiceSettings = Depends(get_app_settings),
) -> ApiResponse[AuthResponse]:
    result = await service.login(payload)
    _set_refresh_cookie(response, result.tokens.refresh_token, settings)
    return create_response(AuthResponse.model_validate(_serialize_auth(result)), "User logged in successfully")


@router.post("/refresh", response_model=ApiResponse[TokenResponse])
async def refresh_access_token(
    request: Request,
    payload: RefreshRequest | None = Body(default=None),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[TokenResponse]:
    token = payload.refresh_token if payload is not None and payload.refresh_token else None
    access_token = await service.refresh(token or request.cookies.get(REFRESH_COOKIE))
    return create_response(TokenResponse(accessToken=access_token), "Access token refreshed")


@router.post("/logout", response_model=ApiResponse[None])
async def logout_user(
    response: Response,
    principal: Principal = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[None]:
    await service.logout(principal.user_id)
    response.delete_cookie(REFRESH_COOKIE, httponly=True, samesite="strict")
    return create_response(None, "User logged out successfully")


@router.get("/profile", response_model=ApiResponse[UserResponse])
async def get_profile(
    principal: Principal = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await service.get_profile(principal.user_id)
    return create_response(UserResponse.model_validate(_serialize_user(user)), "User profile fetched")


@router.put("/profile", response_model=ApiResponse[UserResponse])
async def update_profile(
    payload: UserUpdate,
    principal: Principal = Depends(get_current_user),
    service: UserService = Depends(get_user_service),
) -> ApiResponse[UserResponse]:
    user = await service.update_profile(principal.user_id, payload)
    return create_response(UserResponse.model_validate(_serialize_user(user)), "User profile updated")
