from decimal import Decimal
from functools import lru_cache
from typing import Literal

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_APP_NAME = "storefront"


class ServiceSettings(BaseSettings):
    """Settings for the storefront API, resolved once at startup."""

    app_name: str = Field(default=DEFAULT_APP_NAME)
    environment: Literal["local", "dev", "staging", "prod"] = Field(default="local")
    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"] = Field(default="INFO")
    service_host: str = Field(default="0.0.0.0")
    service_port: int = Field(default=8000)
    enable_metrics: bool = Field(default=True)
    enable_tracing: bool = Field(default=False)
    tracing_endpoint: str | None = Field(default=None)
    tracing_protocol: Literal["http/protobuf", "grpc"] = Field(default="http/protobuf")
    tracing_insecure: bool = Field(default=True)
    tracing_sample_rate: float = Field(default=1.0, ge=0.0, le=1.0)
    database_url: str | None = Field(default=None)
    database_auto_create: bool = Field(default=True)
    database_echo: bool = Field(default=False)
    redis_url: str | None = Field(default=None)
    jwt_secret_key: str = Field(default="storefront-access-secret", min_length=8)
    jwt_refresh_secret_key: str = Field(default="storefront-refresh-secret", min_length=8)
    jwt_algorithm: str = Field(default="HS256")
    access_token_expire_minutes: int = Field(default=15, ge=1)
    refresh_token_expire_minutes: int = Field(default=60 * 24 * 7, ge=1)
    allow_admin_registration: bool = Field(default=False)
    cart_lock_timeout_seconds: float = Field(default=5.0, gt=0.0)
    cart_lock_blocking_timeout_seconds: float = Field(default=2.0, gt=0.0)
    payment_amount_limit: Decimal = Field(default=Decimal("1000"), gt=Decimal("0"))

    model_config = SettingsConfigDict(
        env_file=(".env", ".env.local"), env_prefix="STOREFRONT_", extra="ignore"
    )


@lru_cache
def get_settings() -> ServiceSettings:
    """Return cached service settings."""

    return ServiceSettings()
