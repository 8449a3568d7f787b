"""
Ledger repositories - the record store for both ledgers.

Documents are keyed by an integer ``_id`` drawn from a per-ledger sequence in
the counters collection. Records are written whole: the derived fields travel
with their inputs, so the store never holds a half-updated row.

Driver errors and stored rows that no longer validate are wrapped in
RecordStoreError; callers do not look at MongoDB error codes.
"""

import logging
from typing import Generic, List, Optional, Type, TypeVar

from motor.motor_asyncio import AsyncIOMotorDatabase
from pydantic import ValidationError
from pymongo.errors import PyMongoError

from app.core.config import settings
from app.db.mongo import next_sequence
from app.models.ledger import IncomingRecord, OutgoingRecord
from app.services.calculator import backfill_residuals

logger = logging.getLogger(__name__)

RecordT = TypeVar("RecordT", IncomingRecord, OutgoingRecord)


class RecordStoreError(Exception):
    """The record store could not complete an operation."""
    pass


class LedgerRepository(Generic[RecordT]):
    """Shared CRUD for a ledger collection."""

    record_type: Type[RecordT]
    collection_name: str
    sequence_name: str
    total_field: str

    def __init__(self, db: AsyncIOMotorDatabase):
        self.db = db
        self.collection = db[self.collection_name]
        self.counters = db[settings.COUNTERS_COLLECTION]

    async def list_records(self) -> List[RecordT]:
        """All records in ascending id order."""
        try:
            docs = await self.collection.find({}).sort("_id", 1).to_list(None)
        except PyMongoError as exc:
            raise self._store_error("list", exc) from exc
        return [self._from_document(doc) for doc in docs]

    async def get(self, record_id: int) -> Optional[RecordT]:
        try:
            doc = await self.collection.find_one({"_id": record_id})
        except PyMongoError as exc:
            raise self._store_error("get", exc) from exc
        if doc:
            return self._from_document(doc)
        return None

    async def create(self, record: RecordT) -> int:
        """Insert a record under a freshly allocated id and return the id."""
        try:
            record_id = await next_sequence(self.counters, self.sequence_name)
            await self.collection.insert_one(self._to_document(record, record_id))
        except PyMongoError as exc:
            raise self._store_error("create", exc) from exc
        return record_id

    async def update(self, record_id: int, record: RecordT) -> bool:
        """Replace the stored record. Returns False if the id does not exist."""
        try:
            result = await self.collection.replace_one(
                {"_id": record_id},
                self._to_document(record, record_id)
            )
        except PyMongoError as exc:
            raise self._store_error("update", exc) from exc
        return result.matched_count > 0

    async def delete(self, record_id: int) -> bool:
        """Remove a record. Returns False if the id does not exist."""
        try:
            result = await self.collection.delete_one({"_id": record_id})
        except PyMongoError as exc:
            raise self._store_error("delete", exc) from exc
        return result.deleted_count > 0

    def _to_document(self, record: RecordT, record_id: int) -> dict:
        doc = record.model_dump(exclude={"id"})
        doc["_id"] = record_id
        doc["branch"] = record.branch.value
        return doc

    def _from_document(self, doc: dict) -> RecordT:
        try:
            return self.record_type.model_validate(backfill_residuals(doc, self.total_field))
        except ValidationError as exc:
            # one unreadable row fails the whole read; the snapshot stays as it was
            logger.error(
                "%s document %r is unreadable: %s",
                self.collection_name, doc.get("_id"), exc
            )
            raise RecordStoreError(f"Stored record {doc.get('_id')!r} is unreadable") from exc

    def _store_error(self, operation: str, exc: PyMongoError) -> RecordStoreError:
        logger.error("%s %s failed: %s", self.collection_name, operation, exc)
        return RecordStoreError(f"Record store {operation} failed")


class IncomingRepository(LedgerRepository[IncomingRecord]):
    """Incoming payments ledger."""

    record_type = IncomingRecord
    collection_name = settings.INCOMING_COLLECTION
    sequence_name = "incoming"
    total_field = "total_owed"


class OutgoingRepository(LedgerRepository[OutgoingRecord]):
    """Outgoing expenses ledger."""

    record_type = OutgoingRecord
    collection_name = settings.OUTGOING_COLLECTION
    sequence_name = "outgoing"
    total_field = "total_due"
