"""
Shared configuration management for Identidock services.
"""

from typing import Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="IDENTIDOCK_",
        env_file=".env",
        case_sensitive=False,
        extra="ignore",
        frozen=True,
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # Cache
    redis_url: str = Field(default="redis://redis:6379/0")
    redis_max_connections: int = Field(default=10, ge=1)
    redis_pool_timeout: Optional[float] = Field(default=5.0)
    redis_socket_timeout: Optional[float] = Field(default=5.0)

    # Image generation backend
    generator_url: str = Field(default="http://dnmonster:8080")
    generator_timeout: Optional[float] = Field(default=10.0)
    image_size: int = Field(default=80, ge=1)

    # Identity derivation
    identity_salt: str = Field(default="UNIQUE_SAL")
    default_name: str = Field(default="Joe Bloggs")

    # Resolver
    single_flight: bool = Field(default=True)


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str
    port: int
    host: str = "0.0.0.0"

    def __init__(self, service_name: str, port: int, **kwargs):
        super().__init__(service_name=service_name, port=port, **kwargs)


def get_config(service_name: str, port: int, **overrides) -> ServiceConfig:
    """Get configuration for a specific service."""
    return ServiceConfig(service_name=service_name, port=port, **overrides)
