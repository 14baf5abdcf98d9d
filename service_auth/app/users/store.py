"""
Read-only credential store backed by a JSON document.
"""

import json
from dataclasses import dataclass, field
from importlib import resources
from pathlib import Path
from typing import Any, Dict, Iterable, Iterator, List, Optional, Tuple

from shared.logging import get_logger

logger = get_logger("auth.users")


@dataclass(frozen=True)
class User:
    """A user as stored in the credential store."""

    id: str
    username: str
    password_hash: str = field(repr=False)
    roles: Tuple[str, ...] = ()
    email: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "User":
        return cls(
            id=str(data["id"]),
            username=data["username"],
            password_hash=data["password"],
            roles=tuple(data.get("roles", ())),
            email=data.get("email"),
        )


class UserStore:
    """Lookup of users by username or id.

    The store is filled once and never mutated, so concurrent readers need
    no synchronisation.
    """

    def __init__(self, users: Iterable[User]):
        self._by_id: Dict[str, User] = {}
        self._by_username: Dict[str, User] = {}
        for user in users:
            if user.id in self._by_id:
                raise ValueError(f"Duplicate user id: {user.id}")
            if user.username in self._by_username:
                raise ValueError(f"Duplicate username: {user.username}")
            self._by_id[user.id] = user
            self._by_username[user.username] = user

    @classmethod
    def from_records(cls, records: List[Dict[str, Any]]) -> "UserStore":
        return cls(User.from_dict(record) for record in records)

    @classmethod
    def from_file(cls, path: Optional[str] = None) -> "UserStore":
        """Load users from ``path`` or from the bundled ``users.json``."""
        if path:
            raw = Path(path).read_text(encoding="utf-8")
        else:
            raw = resources.files(__package__).joinpath("users.json").read_text(encoding="utf-8")
        store = cls.from_records(json.loads(raw))
        logger.info("Users loaded", count=len(store), source=path or "bundled")
        return store

    def __len__(self) -> int:
        return len(self._by_id)

    def __iter__(self) -> Iterator[User]:
        return iter(self._by_id.values())

    async def find_by_username(self, username: str) -> Optional[User]:
        return self._by_username.get(username)

    async def find_by_id(self, user_id: str) -> Optional[User]:
        return self._by_id.get(user_id)
