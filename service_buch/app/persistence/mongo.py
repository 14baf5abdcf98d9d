"""
MongoDB store adapter.

Documents use the entry id as ``_id`` and carry a ``version`` counter. A
unique index on ``title`` enforces title uniqueness across concurrent
writers.
"""

import datetime as dt
import re
from decimal import Decimal
from typing import Any, Dict, List, Optional

from bson.decimal128 import Decimal128
from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, ReturnDocument
from pymongo.errors import DuplicateKeyError, PyMongoError

from shared.logging import get_logger

from ..model.buch import Buch, BuchQuery
from ..service.exceptions import TitelExistsError
from .base import BuchStore

logger = get_logger("buch.persistence")

COLLECTION = "buecher"


def to_document(buch: Buch) -> Dict[str, Any]:
    """Convert an entry into a BSON compatible document."""
    document = buch.model_dump(exclude={"id"})
    document["_id"] = buch.id
    for field in ("price", "discount"):
        if isinstance(document.get(field), Decimal):
            document[field] = Decimal128(document[field])
    if isinstance(document.get("date"), dt.date):
        document["date"] = dt.datetime.combine(document["date"], dt.time())
    return document


def from_document(document: Dict[str, Any]) -> Buch:
    """Convert a stored document back into an entry."""
    data = dict(document)
    data["id"] = data.pop("_id")
    for field in ("price", "discount"):
        if isinstance(data.get(field), Decimal128):
            data[field] = data[field].to_decimal()
    if isinstance(data.get("date"), dt.datetime):
        data["date"] = data["date"].date()
    return Buch.model_validate(data)


def to_filter(query: BuchQuery) -> Dict[str, Any]:
    """Translate search criteria into a MongoDB filter."""
    mongo_filter: Dict[str, Any] = {}
    if query.title is not None:
        mongo_filter["title"] = {"$regex": re.escape(query.title), "$options": "i"}
    if query.keywords:
        mongo_filter["keywords"] = {"$all": list(query.keywords)}
    if query.kind is not None:
        mongo_filter["kind"] = query.kind
    if query.publisher is not None:
        mongo_filter["publisher"] = query.publisher
    return mongo_filter


class MongoBuchStore(BuchStore):
    """Store adapter on a motor collection."""

    def __init__(self, collection, client: Optional[AsyncIOMotorClient] = None):
        self.collection = collection
        self.client = client

    @classmethod
    def from_uri(cls, uri: str, db_name: str, collection: str = COLLECTION) -> "MongoBuchStore":
        client = AsyncIOMotorClient(uri, tz_aware=True)
        return cls(client[db_name][collection], client)

    async def initialize(self):
        """Create the indexes the adapter relies on."""
        await self.collection.create_index([("title", ASCENDING)], unique=True, name="title_unique")
        await self.collection.create_index([("keywords", ASCENDING)], name="keywords")
        logger.info("Indexes ensured", collection=self.collection.name)

    async def find_by_id(self, buch_id: str) -> Optional[Buch]:
        document = await self.collection.find_one({"_id": buch_id})
        return from_document(document) if document is not None else None

    async def find_by_title(self, title: str) -> Optional[Buch]:
        document = await self.collection.find_one({"title": title})
        return from_document(document) if document is not None else None

    async def find(self, query: BuchQuery) -> List[Buch]:
        cursor = self.collection.find(to_filter(query)).sort("title", ASCENDING)
        return [from_document(document) async for document in cursor]

    async def insert(self, buch: Buch) -> Buch:
        try:
            await self.collection.insert_one(to_document(buch))
        except DuplicateKeyError:
            raise TitelExistsError(buch.title) from None
        return buch

    async def update_if_version(self, buch: Buch, version: int) -> Optional[Buch]:
        changes = to_document(buch)
        for field in ("_id", "version", "created"):
            changes.pop(field, None)
        try:
            document = await self.collection.find_one_and_update(
                {"_id": buch.id, "version": {"$gte": version}},
                {"$set": changes, "$inc": {"version": 1}},
                return_document=ReturnDocument.AFTER,
            )
        except DuplicateKeyError:
            raise TitelExistsError(buch.title) from None
        return from_document(document) if document is not None else None

    async def delete(self, buch_id: str) -> bool:
        result = await self.collection.delete_one({"_id": buch_id})
        return result.deleted_count > 0

    async def ping(self) -> bool:
        if self.client is None:
            return True
        try:
            await self.client.admin.command("ping")
        except PyMongoError as e:
            logger.warning("MongoDB ping failed", error=str(e))
            return False
        return True

    async def close(self):
        if self.client is not None:
            self.client.close()
