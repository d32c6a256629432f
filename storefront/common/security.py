"""Password hashing and JWT issuance/verification.

Secrets and lifetimes always come from the injected ``ServiceSettings``; nothing
here reads the process environment.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import datetime, timedelta, timezone
from typing import Any, Literal

from jose import JWTError, jwt
from passlib.context import CryptContext

from .config import ServiceSettings
from .errors import AuthorizationError

TokenType = Literal["access", "refresh"]

_LOGGER = logging.getLogger(__name__)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")


@dataclass(frozen=True)
class Principal:
    """Authenticated caller identity carried by an access token."""

    user_id: int
    email: str
    role: str

    @property
    def is_admin(self) -> bool:
        return self.role == "ADMIN"


@dataclass(frozen=True)
class TokenPair:
    access_token: str
    refresh_token: str


def hash_password(password: str) -> str:
    return pwd_context.hash(password)


def verify_password(plain_password: str, hashed_password: str) -> bool:
    return pwd_context.verify(plain_password, hashed_password)


def _secret_for(token_type: TokenType, settings: ServiceSettings) -> str:
    if token_type == "refresh":
        return settings.jwt_refresh_secret_key
    return settings.jwt_secret_key


def create_token(principal: Principal, settings: ServiceSettings, *, token_type: TokenType = "access") -> str:
    now = datetime.now(timezone.utc)
    minutes = (
        settings.refresh_token_expire_minutes if token_type == "refresh" else settings.access_token_expire_minutes
    )
    claims: dict[str, Any] = {
        "sub": str(principal.user_id),
        "email": principal.email,
        "role": principal.role,
        "type": token_type,
        "iat": now,
        "exp": now + timedelta(minutes=minutes),
    }
    return jwt.encode(claims, _secret_for(token_type, settings), algorithm=settings.jwt_algorithm)


def create_token_pair(principal: Principal, settings: ServiceSettings) -> TokenPair:
    return TokenPair(
        access_token=create_token(principal, settings, token_type="access"),
        refresh_token=create_token(principal, settings, token_type="refresh"),
    )


def decode_token(token: str, settings: ServiceSettings, *, token_type: TokenType = "access") -> Principal:
    """Verify ``token`` and return its principal, raising AuthorizationError otherwise."""

    try:
        claims = jwt.decode(token, _secret_for(token_type, settings), algorithms=[settings.jwt_algorithm])
    except JWTError as exc:
        _LOGGER.info("Rejected %s token: %s", token_type, exc)
        raise AuthorizationError(f"Invalid or expired {token_type} token") from exc

    if claims.get("type") != token_type:
        raise AuthorizationError(f"Invalid or expired {token_type} token")
    try:
        user_id = int(claims["sub"])
    except (KeyError, TypeError, ValueError) as exc:
        raise AuthorizationError(f"Invalid or expired {token_type} token") from exc
    return Principal(user_id=user_id, email=str(claims.get("email", "")), role=str(claims.get("role", "CUSTOMER")))
