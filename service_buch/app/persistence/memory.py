"""
In-memory store adapter, used for local development and tests.
"""

import asyncio
from typing import Dict, List, Optional

from ..model.buch import Buch, BuchQuery
from ..service.exceptions import TitelExistsError
from .base import BuchStore


class MemoryBuchStore(BuchStore):
    """Dictionary backed store.

    Writes are serialised with one lock, which gives the same per-entry
    atomicity as the document store's find-and-modify.
    """

    def __init__(self):
        self._entries: Dict[str, Buch] = {}
        self._lock = asyncio.Lock()

    async def find_by_id(self, buch_id: str) -> Optional[Buch]:
        buch = self._entries.get(buch_id)
        return buch.model_copy(deep=True) if buch is not None else None

    async def find_by_title(self, title: str) -> Optional[Buch]:
        for buch in self._entries.values():
            if buch.title == title:
                return buch.model_copy(deep=True)
        return None

    async def find(self, query: BuchQuery) -> List[Buch]:
        found = [buch.model_copy(deep=True) for buch in self._entries.values() if query.matches(buch)]
        return sorted(found, key=lambda buch: buch.title or "")

    async def insert(self, buch: Buch) -> Buch:
        async with self._lock:
            self._check_title(buch)
            self._entries[buch.id] = buch.model_copy(deep=True)
        return buch.model_copy(deep=True)

    async def update_if_version(self, buch: Buch, version: int) -> Optional[Buch]:
        async with self._lock:
            current = self._entries.get(buch.id)
            if current is None or current.version < version:
                return None
            self._check_title(buch)
            stored = buch.model_copy(
                update={"version": current.version + 1, "created": current.created},
                deep=True,
            )
            self._entries[buch.id] = stored
        return stored.model_copy(deep=True)

    async def delete(self, buch_id: str) -> bool:
        async with self._lock:
            return self._entries.pop(buch_id, None) is not None

    def _check_title(self, buch: Buch):
        for other in self._entries.values():
            if other.title == buch.title and other.id != buch.id:
                raise TitelExistsError(buch.title, other.id)
