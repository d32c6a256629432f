"""Registration, login and token lifecycle for user accounts."""

from __future__ import annotations

import logging
from dataclasses import dataclass

from sqlalchemy.exc import IntegrityError

from storefront.common.config import ServiceSettings
from storefront.common.errors import AuthorizationError, ConflictError, NotFoundError, PermissionDeniedError
from storefront.common.security import (
    Principal,
    TokenPair,
    create_token,
    create_token_pair,
    decode_token,
    hash_password,
    verify_password,
)

from ..models import User
from ..repositories.users import UserRepository
from ..schemas import UserCreate, UserLogin, UserUpdate

_LOGGER = logging.getLogger(__name__)


@dataclass
class AuthenticatedUser:
    user: User
    tokens: TokenPair


def principal_for(user: User) -> Principal:
    return Principal(user_id=user.id, email=user.email, role=user.role)


class UserService:
    def __init__(self, repository: UserRepository, settings: ServiceSettings) -> None:
        self.repository = repository
        self.settings = settings

    async def register(self, payload: UserCreate) -> AuthenticatedUser:
        if payload.role == "ADMIN" and not self.settings.allow_admin_registration:
            raise PermissionDeniedError("Admin accounts cannot be self-registered")
        if await self.repository.get_by_email(payload.email) is not None:
            raise ConflictError("User already exists")

        try:
            user = await self.repository.create_user(
                name=payload.name,
                email=payload.email,
                password_hash=hash_password(payload.password),
                role=payload.role,
            )
        except IntegrityError as exc:
            await self.repository.rollback()
            _LOGGER.info("Registration for %s hit the unique email constraint", payload.email)
            raise ConflictError("User already exists") from exc
        return await self._issue_tokens(user)

    async def login(self, payload: UserLogin) -> AuthenticatedUser:
        user = await self.repository.get_by_email(payload.email)
        if user is None or not user.is_active or not verify_password(payload.password, user.password_hash):
            _LOGGER.info("Failed login for %s", payload.email)
            raise AuthorizationError("Invalid credentials")
        return await self._issue_tokens(user)

    async def refresh(self, refresh_token: str | None) -> str:
        if not refresh_token:
            raise AuthorizationError("Refresh token required")
        principal = decode_token(refresh_token, self.settings, token_type="refresh")
        user = await self.repository.get_user(principal.user_id)
        if user is None or not user.is_active or user.refresh_token != refresh_token:
            raise AuthorizationError("Invalid or expired refresh token")
        return create_token(principal_for(user), self.settings, token_type="access")

    async def logout(self, user_id: int) -> None:
        user = await self.repository.get_user(user_id)
        if user is None:
            return
        await self.repository.set_refresh_token(user, None)
        await self.repository.commit()

    async def get_profile(self, user_id: int) -> User:
        user = await self.repository.get_user(user_id)
        if user is None:
            raise NotFoundError("User not found")
        return user

    async def update_profile(self, user_id: int, payload: UserUpdate) -> User:
        user = await self.get_profile(user_id)
        if payload.email is not None and payload.email != user.email:
            if await self.repository.get_by_email(payload.email) is not None:
                raise ConflictError("Email already in use")
        user = await self.repository.update_user(
            user,
            name=payload.name,
            email=payload.email,
            password_hash=hash_password(payload.password) if payload.password is not None else None,
        )
        await self.repository.commit()
        return user

    async def _issue_tokens(self, user: User) -> AuthenticatedUser:
        tokens = create_token_pair(principal_for(user), self.settings)
        user = await self.repository.set_refresh_token(user, tokens.refresh_token)
        await self.repository.commit()
        return AuthenticatedUser(user=user, tokens=tokens)
