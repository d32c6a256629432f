import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI

from storefront.common import (
    ServiceSettings,
    build_app,
    close_redis_connections,
    configure_logging,
    create_schema,
    dispose_engines,
    get_session_factory,
    get_settings,
    resolve_database_url,
    resolve_redis,
)
from storefront.common.tracing import flush_tracing

from .api.carts import router as carts_router
from .api.health import router as health_router
from .api.orders import router as orders_router
from .api.payments import router as payments_router
from .api.products import router as products_router
from .api.users import router as users_router
from .locks import CartLocks
from .models import Base

_LOGGER = logging.getLogger(__name__)


def create_app(settings: ServiceSettings | None = None) -> FastAPI:
    """Create the storefront FastAPI application."""

    resolved_settings = settings or get_settings()
    configure_logging(resolved_settings)
    database_url = resolve_database_url(resolved_settings)
    session_factory = get_session_factory(database_url, echo=resolved_settings.database_echo)

    redis_client = resolve_redis(resolved_settings)
    cart_locks = CartLocks(
        redis_client,
        timeout=resolved_settings.cart_lock_timeout_seconds,
        blocking_timeout=resolved_settings.cart_lock_blocking_timeout_seconds,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        app.state.session_factory = session_factory
        app.state.cart_locks = cart_locks
        try:
            if resolved_settings.database_auto_create:
                await create_schema(database_url, Base.metadata)
            _LOGGER.info(
                "Storefront started (environment=%s, distributed cart locks=%s)",
                resolved_settings.environment,
                cart_locks.distributed,
            )
            yield
        finally:
            app.state.session_factory = None  # type: ignore[assignment]
            app.state.cart_locks = None
            if resolved_settings.enable_tracing:
                flush_tracing()
            await dispose_engines()
            if redis_client is not None:
                await close_redis_connections()

    app = build_app(resolved_settings, lifespan=lifespan)
    app.include_router(health_router)
    app.include_router(users_router)
    app.include_router(products_router)
    app.include_router(carts_router)
    app.include_router(orders_router)
    app.include_router(payments_router)
    return app


app = create_app()

if __name__ == "__main__":
    uvicorn.run(app, host=app.state.settings.service_host, port=app.state.settings.service_port)
