"""Shared infrastructure for the storefront API."""

from .config import DEFAULT_APP_NAME, ServiceSettings, get_settings
from .instrumentation import build_app, instrument_app
from .logging import configure_logging
from .database import (
    DEFAULT_DATABASE_URL,
    create_engine,
    create_schema,
    dispose_engines,
    get_session_factory,
    lifespan_session,
    resolve_database_url,
)
from .cache import close_redis_connections, get_redis_client, resolve_redis
from .errors import (
    AuthorizationError,
    ConflictError,
    DependencyError,
    NotFoundError,
    PermissionDeniedError,
    ServiceError,
    ValidationError,
)
from .responses import ApiResponse, create_response, register_exception_handlers

__all__ = [
    "ServiceSettings",
    "get_settings",
    "build_app",
    "instrument_app",
    "configure_logging",
    "DEFAULT_APP_NAME",
    "DEFAULT_DATABASE_URL",
    "create_engine",
    "create_schema",
    "dispose_engines",
    "get_session_factory",
    "lifespan_session",
    "resolve_database_url",
    "get_redis_client",
    "resolve_redis",
    "close_redis_connections",
    "ServiceError",
    "ValidationError",
    "AuthorizationError",
    "PermissionDeniedError",
    "NotFoundError",
    "ConflictError",
    "DependencyError",
    "ApiResponse",
    "create_response",
    "register_exception_handlers",
]
