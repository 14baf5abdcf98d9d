"""
Auth service for the Buch catalog backend.
"""

from typing import Optional

from shared.base_service import BaseService
from shared.config import BaseConfig, ServiceConfig
from shared.metrics import MetricsCollector

from .auth_service import AuthService
from .routes import create_auth_router
from .tokens.keys import load_key_material
from .users.store import UserStore


def build_auth_service(config: BaseConfig, metrics: Optional[MetricsCollector] = None) -> AuthService:
    """Create an ``AuthService`` from configuration.

    Unsupported algorithms and unreadable key files fail here, at startup.
    """
    return AuthService(
        load_key_material(config),
        UserStore.from_file(config.users_file),
        issuer=config.jwt_issuer,
        expiration=config.jwt_expiration,
        token_type=config.jwt_type,
        salt_rounds=config.salt_rounds,
        metrics=metrics,
    )


class AuthApplication(BaseService):
    """Standalone auth service exposing the login route."""

    def __init__(self, config: Optional[ServiceConfig] = None, auth_service: Optional[AuthService] = None):
        super().__init__("auth", config)
        self.auth_service = auth_service or build_auth_service(self.config, self.metrics)
        self._setup_auth_routes()

    def _setup_auth_routes(self):
        """Set up auth-specific routes."""

        @self.app.get("/")
        async def root():
            """Root endpoint."""
            return {
                "service": "auth",
                "message": "Buch catalog backend - Auth Service",
                "version": "1.0.0",
                "algorithm": self.auth_service.key_material.algorithm,
            }

        self.app.include_router(create_auth_router(self.auth_service))


def create_app():
    """Create the ASGI application."""
    return AuthApplication().app


if __name__ == "__main__":
    AuthApplication().run()
