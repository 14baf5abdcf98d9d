"""
Store adapter interface for catalog entries.
"""

from abc import ABC, abstractmethod
from typing import List, Optional

from ..model.buch import Buch, BuchQuery


class BuchStore(ABC):
    """Persistence of catalog entries with a per-entry version counter.

    Implementations must apply ``update_if_version`` atomically per entry id
    and reject a second entry with an existing title, raising
    ``TitelExistsError``.
    """

    @abstractmethod
    async def find_by_id(self, buch_id: str) -> Optional[Buch]:
        """Return the entry with ``buch_id`` or None."""

    @abstractmethod
    async def find_by_title(self, title: str) -> Optional[Buch]:
        """Return the entry with exactly ``title`` or None."""

    @abstractmethod
    async def find(self, query: BuchQuery) -> List[Buch]:
        """Return all entries matching ``query``, sorted by title."""

    @abstractmethod
    async def insert(self, buch: Buch) -> Buch:
        """Persist a new entry; ``buch.id`` is already assigned."""

    @abstractmethod
    async def update_if_version(self, buch: Buch, version: int) -> Optional[Buch]:
        """Replace the entry if its stored version is at least ``version``.

        The stored version is incremented by exactly one. Returns the updated
        entry, or None if no entry with the id and such a version exists.
        """

    @abstractmethod
    async def delete(self, buch_id: str) -> bool:
        """Delete the entry; returns False if there was none."""

    async def ping(self) -> bool:
        return True

    async def close(self):
        pass
