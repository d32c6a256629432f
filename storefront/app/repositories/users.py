"""Persistence helpers for user accounts."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import User


class UserRepository:
    def __init__(self, session: AsyncSession) -> None:
        self.session = session

    async def create_user(self, *, name: str, email: str, password_hash: str, role: str) -> User:
        user = User(name=name, email=email, password_hash=password_hash, role=role, is_active=True)
        self.session.add(user)
        await self.session.flush()
        await self.session.refresh(user, attribute_names=["created_at", "updated_at"])
        return user

    async def get_user(self, user_id: int) -> User | None:
        result = await self.session.execute(select(User).where(User.id == user_id))
        return result.scalar_one_or_none()

    async def get_by_email(self, email: str) -> User | None:
        result = await self.session.execute(select(User).where(User.email == email.lower()))
        return result.scalar_one_or_none()

    async def update_user(
        self,
        user: User,
        *,
        name: str | None = None,
        email: str | None = None,
        password_hash: str | None = None,
    ) -> User:
        if name is not None:
            user.name = name
        if email is not None:
            user.email = email
        if password_hash is not None:
            user.password_hash = password_hash
        await self.session.flush()
        await self.session.refresh(user, attribute_names=["updated_at"])
        return user

    async def set_refresh_token(self, user: User, refresh_token: str | None) -> User:
        user.refresh_token = refresh_token
        await self.session.flush()
        await self.session.refresh(user, attribute_names=["updated_at"])
        return user

    async def commit(self) -> None:
        await self.session.commit()

    async def rollback(self) -> None:
        await self.session.rollback()
