"""Dependency helpers for the storefront API."""

from __future__ import annotations

from collections.abc import AsyncIterator

from fastapi import Depends, Request
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from storefront.common import AuthorizationError, PermissionDeniedError, ServiceSettings, lifespan_session
from storefront.common.security import Principal, decode_token

from .locks import CartLocks
from .repositories.carts import CartRepository
from .repositories.catalog import CatalogRepository
from .repositories.orders import OrderRepository
from .repositories.users import UserRepository
from .services.carts import CartService
from .services.catalog import CatalogService
from .services.orders import OrderService
from .services.payments import PaymentService
from .services.users import UserService

_bearer = HTTPBearer(auto_error=False)


async def get_session(request: Request) -> AsyncIterator[AsyncSession]:
    """Yield an AsyncSession for the current request lifecycle."""

    session_factory: async_sessionmaker[AsyncSession] = request.app.state.session_factory
    async with lifespan_session(session_factory) as session:
        yield session


def get_app_settings(request: Request) -> ServiceSettings:
    return request.app.state.settings


def get_cart_locks(request: Request) -> CartLocks:
    return request.app.state.cart_locks


def get_catalog_service(session: AsyncSession = Depends(get_session)) -> CatalogService:
    return CatalogService(CatalogRepository(session))


def get_user_service(
    session: AsyncSession = Depends(get_session),
    settings: ServiceSettings = Depends(get_app_settings),
) -> UserService:
    return UserService(UserRepository(session), settings)


def get_cart_service(
    session: AsyncSession = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service),
    locks: CartLocks = Depends(get_cart_locks),
) -> CartService:
    return CartService(CartRepository(session), catalog, locks)


def get_order_service(
    session: AsyncSession = Depends(get_session),
    catalog: CatalogService = Depends(get_catalog_service),
    locks: CartLocks = Depends(get_cart_locks),
) -> OrderService:
    """Order and cart repositories share one session so checkout commits atomically."""

    return OrderService(OrderRepository(session), CartRepository(session), catalog, locks)


def get_payment_service(settings: ServiceSettings = Depends(get_app_settings)) -> PaymentService:
    return PaymentService(settings.payment_amount_limit)


def get_current_user(
    credentials: HTTPAuthorizationCredentials | None = Depends(_bearer),
    settings: ServiceSettings = Depends(get_app_settings),
) -> Principal:
    """Resolve the caller from the ``Authorization: Bearer`` access token."""

    if credentials is None or credentials.scheme.lower() != "bearer":
        raise AuthorizationError("Not authorized, no token")
    return decode_token(credentials.credentials, settings, token_type="access")


def require_admin(principal: Principal = Depends(get_current_user)) -> Principal:
    if not principal.is_admin:
        raise PermissionDeniedError("Admin access required")
    return principal
