"""
Shared fixtures for the auth tests.
"""

import pytest
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec, rsa

from service_auth.app.auth_service import AuthService
from service_auth.app.passwords import hash_password
from service_auth.app.tokens.keys import KeyMaterial
from service_auth.app.users.store import User, UserStore

ISSUER = "https://hska.de/shop/JuergenZimmermann"
ADMIN_ID = "20000000-0000-0000-0000-000000000000"
KUNDE_ID = "20000000-0000-0000-0000-000000000001"


def _pem_pair(private_key):
    private_pem = private_key.private_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PrivateFormat.PKCS8,
        encryption_algorithm=serialization.NoEncryption(),
    )
    public_pem = private_key.public_key().public_bytes(
        encoding=serialization.Encoding.PEM,
        format=serialization.PublicFormat.SubjectPublicKeyInfo,
    )
    return private_pem, public_pem


@pytest.fixture(scope="session")
def rsa_pem_pair():
    return _pem_pair(rsa.generate_private_key(public_exponent=65537, key_size=2048))


@pytest.fixture(scope="session")
def ec_pem_pair():
    return _pem_pair(ec.generate_private_key(ec.SECP256R1()))


@pytest.fixture
def hmac_keys():
    return KeyMaterial.from_secret("HS256", "p")


@pytest.fixture
def rsa_keys(rsa_pem_pair):
    return KeyMaterial.from_pem("RS256", *rsa_pem_pair)


@pytest.fixture
def ec_keys(ec_pem_pair):
    return KeyMaterial.from_pem("ES256", *ec_pem_pair)


@pytest.fixture(scope="session")
def password_hash():
    """Hash of the password ``p`` with a low cost factor."""
    return hash_password("p", rounds=4)


@pytest.fixture
def user_store(password_hash):
    return UserStore([
        User(ADMIN_ID, "admin", password_hash, ("admin", "mitarbeiter"), "admin@acme.com"),
        User(KUNDE_ID, "dirk.delta", password_hash, ("kunde",), "dirk.delta@acme.com"),
    ])


class FakeClock:
    """Settable replacement for ``time.time``."""

    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def auth_service(hmac_keys, user_store, clock):
    return AuthService(
        hmac_keys,
        user_store,
        issuer=ISSUER,
        expiration=3600,
        salt_rounds=4,
        clock=clock,
    )
