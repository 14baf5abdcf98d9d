"""
Catalog service: create, update and remove with optimistic concurrency.
"""

import datetime as dt
import re
import uuid
from contextlib import nullcontext
from typing import Callable, List, Optional

from shared.logging import get_logger
from shared.metrics import MetricsCollector

from ..model.buch import MAX_RATING, Buch, BuchQuery, validate_buch
from ..notify.mailer import BackgroundNotifications
from ..persistence.base import BuchStore
from .exceptions import TitelExistsError, ValidationError, VersionInvalid, VersionInvalidError, VersionMissing

_VERSION_PATTERN = re.compile(r"\d+")


def parse_version(version: Optional[str]) -> int:
    """Parse a client supplied version such as ``3`` or ``"3"``.

    Raises:
        VersionMissing: if no version was supplied.
        VersionInvalid: if it is not a non-negative integer.
    """
    if version is None:
        raise VersionMissing()
    candidate = version.strip()
    if len(candidate) >= 2 and candidate[0] == candidate[-1] == '"':
        candidate = candidate[1:-1]
    if not _VERSION_PATTERN.fullmatch(candidate):
        raise VersionInvalid(version)
    return int(candidate)


def _utcnow() -> dt.datetime:
    return dt.datetime.now(dt.timezone.utc)


class BuchService:
    """Orchestrates validation, uniqueness and conditional writes."""

    def __init__(
        self,
        store: BuchStore,
        notifications: Optional[BackgroundNotifications] = None,
        *,
        max_rating: int = MAX_RATING,
        metrics: Optional[MetricsCollector] = None,
        clock: Callable[[], dt.datetime] = _utcnow,
    ):
        self.store = store
        self.notifications = notifications or BackgroundNotifications()
        self.max_rating = max_rating
        self.metrics = metrics
        self.logger = get_logger("buch.service")
        self._clock = clock

    async def find_by_id(self, buch_id: str) -> Optional[Buch]:
        return await self.store.find_by_id(buch_id)

    async def find(self, query: Optional[BuchQuery] = None) -> List[Buch]:
        """Entries matching ``query`` (all entries without one), sorted by title."""
        result = await self.store.find(query or BuchQuery())
        self.logger.debug("Books found", count=len(result))
        return result

    async def create(self, buch: Buch) -> Buch:
        """Validate and persist a new entry with a fresh id and version 0.

        Raises:
            ValidationError: with every field violation.
            TitelExistsError: if another entry has the title.
        """
        errors = validate_buch(buch, self.max_rating)
        if errors:
            self.logger.debug("Book rejected", errors=errors)
            self._count("create", "invalid")
            raise ValidationError(errors)

        if await self.store.find_by_title(buch.title) is not None:
            self._count("create", "duplicate")
            raise TitelExistsError(buch.title)

        now = self._clock()
        new_buch = buch.model_copy(update={
            "id": str(uuid.uuid4()),
            "version": 0,
            "created": now,
            "updated": now,
        })

        with self._timed("create"):
            try:
                saved = await self.store.insert(new_buch)
            except TitelExistsError:
                self._count("create", "duplicate")
                raise

        self.logger.info("Book created", buch_id=saved.id, title=saved.title)
        self._count("create", "created")
        self.notifications.buch_created(saved)
        return saved

    async def update(self, buch: Buch, version: Optional[str]) -> Buch:
        """Replace an entry if its stored version is at least ``version``.

        Raises:
            VersionMissing: if no version was supplied.
            VersionInvalid: if the version is not a non-negative integer.
            ValidationError: with every field violation.
            TitelExistsError: if a different entry has the title.
            VersionInvalidError: if no entry with the id and at least that
                version exists.
        """
        try:
            expected = parse_version(version)
        except (VersionMissing, VersionInvalid):
            self._count("update", "invalid")
            raise

        errors = validate_buch(buch, self.max_rating, is_new=False)
        if errors:
            self.logger.debug("Book rejected", buch_id=buch.id, errors=errors)
            self._count("update", "invalid")
            raise ValidationError(errors)

        existing = await self.store.find_by_title(buch.title)
        if existing is not None and existing.id != buch.id:
            self._count("update", "duplicate")
            raise TitelExistsError(buch.title, existing.id)

        changed = buch.model_copy(update={"updated": self._clock()})
        with self._timed("update"):
            try:
                updated = await self.store.update_if_version(changed, expected)
            except TitelExistsError:
                self._count("update", "duplicate")
                raise

        if updated is None:
            self.logger.info("Update conflict", buch_id=buch.id, version=expected)
            self._count("update", "conflict")
            raise VersionInvalidError(buch.id, expected)

        self.logger.info("Book updated", buch_id=updated.id, version=updated.version)
        self._count("update", "updated")
        return updated

    async def remove(self, buch_id: str) -> None:
        """Delete an entry; deleting an absent id is a no-op."""
        with self._timed("remove"):
            deleted = await self.store.delete(buch_id)
        self.logger.info("Book removed" if deleted else "Book to remove not found", buch_id=buch_id)
        self._count("remove", "removed" if deleted else "absent")

    def _count(self, operation: str, outcome: str):
        if self.metrics is not None:
            self.metrics.increment_counter("catalog_writes_total", operation=operation, outcome=outcome)

    def _timed(self, operation: str):
        if self.metrics is None:
            return nullcontext()
        return self.metrics.time_operation("catalog_write_duration_seconds", operation=operation)

