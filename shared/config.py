"""
Shared configuration management for the Buch catalog backend.
"""

from functools import lru_cache
from typing import Optional

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class BaseConfig(BaseSettings):
    """Base configuration class with common settings."""

    model_config = SettingsConfigDict(
        env_prefix="BUCH_",
        env_file=".env",
        case_sensitive=False,
        extra="allow",
    )

    # Environment
    env: str = Field(default="local")
    log_level: str = Field(default="info")

    # HTTP server
    host: str = Field(default="0.0.0.0")
    port: int = Field(default=8443)

    # Document store
    store_backend: str = Field(default="mongo")
    mongo_uri: str = Field(default="mongodb://admin:p@localhost:27017/?authSource=admin")
    mongo_db: str = Field(default="hska")

    # Catalog
    max_rating: int = Field(default=5)

    # Security
    jwt_algorithm: str = Field(default="HS256")
    jwt_secret: Optional[str] = Field(default="p")
    jwt_private_key_file: Optional[str] = Field(default=None)
    jwt_public_key_file: Optional[str] = Field(default=None)
    jwt_issuer: str = Field(default="https://hska.de/shop/JuergenZimmermann")
    jwt_type: str = Field(default="JWT")
    jwt_expiration: int = Field(default=3600)
    salt_rounds: int = Field(default=10)
    users_file: Optional[str] = Field(default=None)

    # Notifications
    mail_host: Optional[str] = Field(default=None)
    mail_port: int = Field(default=25)
    mail_sender: str = Field(default="buch@acme.com")
    mail_recipient: str = Field(default="joe@doe.mail")

    @field_validator("store_backend")
    @classmethod
    def _check_store_backend(cls, value: str) -> str:
        value = value.lower()
        if value not in ("mongo", "memory"):
            raise ValueError(f"Unsupported store backend: {value}")
        return value

    @field_validator("jwt_expiration", "salt_rounds")
    @classmethod
    def _check_positive(cls, value: int) -> int:
        if value <= 0:
            raise ValueError("must be a positive integer")
        return value


class ServiceConfig(BaseConfig):
    """Service-specific configuration."""

    service_name: str

    def __init__(self, service_name: str, **kwargs):
        super().__init__(service_name=service_name, **kwargs)


@lru_cache(maxsize=None)
def get_config(service_name: str) -> ServiceConfig:
    """Get configuration for a specific service.

    The settings are read once per process and shared afterwards.
    """
    return ServiceConfig(service_name=service_name)
