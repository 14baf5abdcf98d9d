"""
Shared fixtures for the catalog tests.
"""

from decimal import Decimal
from unittest.mock import AsyncMock

import pytest

from service_auth.app.auth_service import AuthService
from service_auth.app.passwords import hash_password
from service_auth.app.tokens.keys import KeyMaterial
from service_auth.app.users.store import User, UserStore
from service_buch.app.model.buch import Author, Buch
from service_buch.app.notify.mailer import BackgroundNotifications, Notifier
from service_buch.app.persistence.memory import MemoryBuchStore
from service_buch.app.service.buch_service import BuchService


@pytest.fixture
def buch():
    """A valid, not yet persisted book."""
    return Buch(
        title="Alpha",
        rating=4,
        kind="PRINT",
        publisher="PUBLISHER_A",
        price=Decimal("10.00"),
        discount=Decimal("0.1"),
        available=True,
        email="alpha@acme.com",
        homepage="https://acme.com/alpha",
        keywords=["JAVASCRIPT", "TYPESCRIPT"],
        authors=[Author(last_name="Alpha", first_name="Adriana")],
    )


@pytest.fixture
def store():
    return MemoryBuchStore()


@pytest.fixture
def notifier():
    return AsyncMock(spec=Notifier)


@pytest.fixture
def notifications(notifier):
    return BackgroundNotifications(notifier)


@pytest.fixture
def buch_service(store, notifications):
    return BuchService(store, notifications)


@pytest.fixture(scope="session")
def password_hash():
    return hash_password("p", rounds=4)


@pytest.fixture
def auth_service(password_hash):
    users = UserStore([
        User("20000000-0000-0000-0000-000000000000", "admin", password_hash, ("admin", "mitarbeiter")),
        User("20000000-0000-0000-0000-000000000002", "alfred.alpha", password_hash, ("mitarbeiter",)),
        User("20000000-0000-0000-0000-000000000004", "dirk.delta", password_hash, ("kunde",)),
    ])
    return AuthService(
        KeyMaterial.from_secret("HS256", "p"),
        users,
        issuer="https://hska.de/shop/JuergenZimmermann",
        expiration=3600,
        salt_rounds=4,
    )
