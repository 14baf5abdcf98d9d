"""
Unit tests for the credential store.
"""

import json

import pytest

from service_auth.app.passwords import password_cost
from service_auth.app.users.store import User, UserStore


class TestUserStore:
    """Test cases for UserStore."""

    @pytest.mark.asyncio
    async def test_bundled_users(self):
        store = UserStore.from_file()
        admin = await store.find_by_username("admin")

        assert len(store) == 4
        assert admin.id == "20000000-0000-0000-0000-000000000001"
        assert await store.find_by_id(admin.id) is admin
        assert {password_cost(user.password_hash) for user in store} == {12}

    @pytest.mark.asyncio
    async def test_from_file_path(self, tmp_path):
        path = tmp_path / "users.json"
        path.write_text(json.dumps([
            {"id": "u1", "username": "anna", "password": "$2b$04$x", "roles": ["kunde"]},
        ]), encoding="utf-8")

        store = UserStore.from_file(str(path))
        user = await store.find_by_username("anna")

        assert user.roles == ("kunde",)
        assert user.email is None

    @pytest.mark.asyncio
    async def test_unknown_lookups(self, user_store):
        assert await user_store.find_by_username("nobody") is None
        assert await user_store.find_by_id("nobody") is None

    def test_iterates_users(self, user_store):
        assert sorted(user.username for user in user_store) == ["admin", "dirk.delta"]

    @pytest.mark.parametrize("second", [
        User("u1", "bert", "h"),
        User("u2", "anna", "h"),
    ])
    def test_duplicates_rejected(self, second):
        with pytest.raises(ValueError):
            UserStore([User("u1", "anna", "h"), second])

    def test_password_hash_not_in_repr(self):
        assert "secret-hash" not in repr(User("u1", "anna", "secret-hash"))
