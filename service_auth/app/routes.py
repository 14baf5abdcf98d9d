"""
HTTP routes and request dependencies for authentication.
"""

from typing import Iterable, Optional

from fastapi import APIRouter, Depends, Form, Request, Response

from shared.errors import AuthorizationError
from shared.logging import get_logger, set_user_context

from .auth_service import AuthContext, AuthService, LoginResult

logger = get_logger("auth.routes")


def create_auth_router(auth_service: AuthService) -> APIRouter:
    """Routes for logging in and inspecting the current token."""
    router = APIRouter(prefix="/auth", tags=["auth"])
    authenticated = Authenticated(auth_service)

    @router.post("/login", response_model=LoginResult)
    async def login(
        username: Optional[str] = Form(None),
        password: Optional[str] = Form(None),
    ):
        """Exchange form-encoded credentials for a bearer token."""
        result = await auth_service.login(username, password)
        if result is None:
            return Response(status_code=401)
        return result

    @router.get("/me")
    async def me(context: AuthContext = Depends(authenticated)):
        """Return the subject of a valid bearer token with its roles."""
        user = await auth_service.user_store.find_by_id(context.subject_id)
        return {
            "subject": context.subject_id,
            "username": user.username,
            "roles": list(user.roles),
            "expires_at": context.claims.get("exp"),
        }

    return router


class Authenticated:
    """FastAPI dependency that validates the bearer token of a request.

    The resulting ``AuthContext`` is bound to ``request.state.auth_context``
    and to the logging context for downstream handlers.
    """

    def __init__(self, auth_service: AuthService):
        self.auth_service = auth_service

    async def __call__(self, request: Request) -> AuthContext:
        context = await self.auth_service.validate(request.headers.get("Authorization"))
        request.state.auth_context = context
        set_user_context(context.subject_id)
        return context


class RolesAllowed(Authenticated):
    """Dependency that additionally requires one of ``roles``."""

    def __init__(self, auth_service: AuthService, roles: Iterable[str]):
        super().__init__(auth_service)
        self.roles = tuple(roles)

    async def __call__(self, request: Request) -> AuthContext:
        context = await super().__call__(request)
        if not await self.auth_service.has_any_role(context.subject_id, self.roles):
            logger.info("Access denied", user_id=context.subject_id, required_roles=list(self.roles))
            raise AuthorizationError(
                "Missing required role",
                details={"required_roles": list(self.roles)},
            )
        return context
