"""
Login and bearer token validation.
"""

import secrets
import time
import uuid
from dataclasses import dataclass
from typing import Any, Callable, Dict, Iterable, List, Optional

from pydantic import BaseModel

from shared.errors import AuthenticationError
from shared.logging import get_logger
from shared.metrics import MetricsCollector

from .exceptions import (
    AlgorithmMismatch,
    AuthorizationMalformed,
    AuthorizationMissing,
    IssuerInvalid,
    SchemeInvalid,
    SignatureInvalid,
    SubjectUnknown,
    TokenExpired,
    TokenMalformed,
)
from .passwords import check_password, hash_password, password_cost
from .tokens.codec import TokenCodec
from .tokens.keys import KeyMaterial
from .users.store import User, UserStore

BEARER = "Bearer"


class LoginResult(BaseModel):
    """Response model for a successful login."""
    token: str
    token_type: str = BEARER
    expires_in: int
    roles: List[str]


@dataclass(frozen=True)
class AuthContext:
    """Authenticated request context derived from a verified token."""

    subject_id: str
    claims: Dict[str, Any]
    token: str


def normalize_roles(roles: Iterable[str]) -> set:
    """Lower-case role names so that ``Admin`` and ``admin`` match."""
    return {role.strip().lower() for role in roles if role and role.strip()}


class AuthService:
    """Issues tokens for valid credentials and validates bearer tokens."""

    def __init__(
        self,
        key_material: KeyMaterial,
        user_store: UserStore,
        *,
        issuer: str,
        expiration: int,
        token_type: str = "JWT",
        salt_rounds: int = 10,
        clock: Callable[[], float] = time.time,
        metrics: Optional[MetricsCollector] = None,
    ):
        self.key_material = key_material
        self.user_store = user_store
        self.issuer = issuer
        self.expiration = expiration
        self.salt_rounds = salt_rounds
        self.codec = TokenCodec(key_material, token_type)
        self.metrics = metrics
        self.logger = get_logger("auth.service")
        self._clock = clock
        # Checked for unknown usernames at the cost of the stored hashes
        costs = [password_cost(user.password_hash) for user in user_store]
        dummy_rounds = max((cost for cost in costs if cost is not None), default=salt_rounds)
        self._dummy_hash = hash_password(secrets.token_urlsafe(16), dummy_rounds)

    def _now(self) -> int:
        return int(self._clock())

    def hash_password(self, password: str) -> str:
        """Hash a new password with the configured cost factor."""
        return hash_password(password, self.salt_rounds)

    async def login(self, username: Optional[str], password: Optional[str]) -> Optional[LoginResult]:
        """Check credentials and issue a signed token.

        Returns None for an unknown user and for a wrong password alike.
        """
        if not username or password is None:
            self._count("logins_total", status="rejected")
            return None

        user = await self.user_store.find_by_username(username)
        password_hash = user.password_hash if user is not None else self._dummy_hash
        password_ok = await check_password(password, password_hash)
        if user is None or not password_ok:
            self.logger.info("Login rejected")
            self._count("logins_total", status="rejected")
            return None

        now = self._now()
        payload = {
            "iat": now,
            "iss": self.issuer,
            "sub": user.id,
            "jti": str(uuid.uuid4()),
            "exp": now + self.expiration,
        }
        token = self.codec.encode(payload)

        self.logger.info("Login succeeded", user_id=user.id, jti=payload["jti"])
        self._count("logins_total", status="success")
        return LoginResult(
            token=token,
            token_type=BEARER,
            expires_in=self.expiration,
            roles=list(user.roles),
        )

    async def validate(self, authorization: Optional[str]) -> AuthContext:
        """Validate the value of an ``Authorization`` header.

        Each stage fails with its own ``AuthenticationError`` subclass, in
        this order: missing header, malformed header, wrong scheme, malformed
        token, undecodable token, algorithm mismatch, bad signature, expired
        token, wrong issuer, unknown subject.
        """
        if not authorization:
            self._reject(AuthorizationMissing())

        parts = authorization.split(" ")
        if len(parts) != 2 or not parts[0] or not parts[1]:
            self._reject(AuthorizationMalformed())
        scheme, token = parts

        if scheme.lower() != BEARER.lower():
            self._reject(SchemeInvalid(details={"scheme": scheme}))

        segments = token.split(".")
        if len(segments) != 3:
            self._reject(TokenMalformed())
        if not segments[1].strip():
            self._reject(TokenMalformed("Token payload is empty"))
        if not segments[2].strip():
            self._reject(TokenMalformed("Token signature is empty"))

        try:
            decoded = self.codec.decode(token)
        except AuthenticationError as exc:
            self._reject(exc)

        algorithm = decoded.header.get("alg")
        if algorithm != self.key_material.algorithm:
            self._reject(AlgorithmMismatch(details={"alg": algorithm}))

        if not self.codec.verify(token):
            self._reject(SignatureInvalid())

        claims = decoded.payload
        expires_at = claims.get("exp")
        if (not isinstance(expires_at, (int, float)) or isinstance(expires_at, bool)
                or self._now() >= expires_at):
            self._reject(TokenExpired(details={"exp": expires_at}))

        if claims.get("iss") != self.issuer:
            self._reject(IssuerInvalid(details={"iss": claims.get("iss")}))

        subject_id = claims.get("sub")
        user = await self.user_store.find_by_id(subject_id) if isinstance(subject_id, str) else None
        if user is None:
            self._reject(SubjectUnknown(details={"sub": subject_id}))

        self._count("token_validations_total", status="valid")
        self.logger.debug("Token validated", user_id=subject_id)
        return AuthContext(subject_id=subject_id, claims=claims, token=token)

    async def has_any_role(self, subject_id: Optional[str], roles: Iterable[str]) -> bool:
        """True if the subject holds at least one of ``roles``.

        An empty ``roles`` collection is satisfied by every known subject.
        """
        if not subject_id:
            return False
        user = await self.user_store.find_by_id(subject_id)
        return self.user_has_any_role(user, roles)

    @staticmethod
    def user_has_any_role(user: Optional[User], roles: Iterable[str]) -> bool:
        if user is None:
            return False
        required = normalize_roles(roles)
        if not required:
            return True
        return not required.isdisjoint(normalize_roles(user.roles))

    def _reject(self, exc: AuthenticationError):
        self.logger.debug("Token rejected", code=exc.code, reason=exc.message)
        self._count("token_validations_total", status=exc.code.lower())
        raise exc

    def _count(self, metric_name: str, **labels):
        if self.metrics is not None:
            self.metrics.increment_counter(metric_name, **labels)
