import asyncio
import logging
from typing import List, Optional, Tuple

from app.models.ledger import IncomingRecord, OutgoingRecord
from app.repositories.ledger_repo import IncomingRepository, OutgoingRepository
from app.schemas.ledger import (
    IncomingCreate,
    IncomingFilter,
    IncomingTotals,
    OutgoingCreate,
    OutgoingFilter,
    OutgoingTotals,
)
from app.services.aggregator import incoming_totals, is_reconciled, outgoing_totals
from app.services.calculator import derive_incoming, derive_outgoing
from app.services.export import INCOMING_COLUMNS, OUTGOING_COLUMNS, render_csv
from app.services.filters import filter_incoming, filter_outgoing
from app.utils.ledger_validation import validate_incoming, validate_outgoing

logger = logging.getLogger(__name__)


class RecordNotFoundError(Exception):
    """No record with the requested id exists in the ledger."""
    pass


class LedgerService:
    """
    Holds the last loaded snapshot of both ledgers.

    The record store is the source of truth. Every successful mutation is
    followed by a full reload; a failed mutation (or a failed reload) leaves
    the snapshot exactly as it was and the error propagates to the caller.
    """

    def __init__(self, incoming_repo: IncomingRepository, outgoing_repo: OutgoingRepository):
        self.incoming_repo = incoming_repo
        self.outgoing_repo = outgoing_repo
        self.incoming: List[IncomingRecord] = []
        self.outgoing: List[OutgoingRecord] = []
        self.loaded = False

    async def refresh(self) -> None:
        """Reload both ledgers. The snapshot is replaced only if both reads succeed."""
        incoming, outgoing = await asyncio.gather(
            self.incoming_repo.list_records(),
            self.outgoing_repo.list_records(),
        )
        self.incoming = incoming
        self.outgoing = outgoing
        self.loaded = True
        logger.debug("Ledgers reloaded: %d incoming, %d outgoing", len(incoming), len(outgoing))

    async def ensure_loaded(self) -> None:
        if not self.loaded:
            await self.refresh()

    # ------------------------------------------------------------------
    # Incoming ledger
    # ------------------------------------------------------------------
    async def get_incoming(self, record_id: int) -> IncomingRecord:
        """Read one record straight from the store."""
        record = await self.incoming_repo.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Incoming record {record_id} not found")
        return record

    async def add_incoming(self, data: IncomingCreate) -> IncomingRecord:
        validate_incoming(data)
        record = derive_incoming(data)
        record_id = await self.incoming_repo.create(record)
        logger.info("Incoming record %d created", record_id)
        await self.refresh()
        return record.model_copy(update={"id": record_id})

    async def update_incoming(self, record_id: int, data: IncomingCreate) -> IncomingRecord:
        validate_incoming(data)
        record = derive_incoming(data, record_id=record_id)
        if not await self.incoming_repo.update(record_id, record):
            raise RecordNotFoundError(f"Incoming record {record_id} not found")
        logger.info("Incoming record %d updated", record_id)
        await self.refresh()
        return record

    async def delete_incoming(self, record_id: int) -> None:
        if not await self.incoming_repo.delete(record_id):
            raise RecordNotFoundError(f"Incoming record {record_id} not found")
        logger.info("Incoming record %d deleted", record_id)
        await self.refresh()

    def incoming_view(self, spec: Optional[IncomingFilter] = None) -> Tuple[List[IncomingRecord], IncomingTotals]:
        records = filter_incoming(self.incoming, spec or IncomingFilter())
        totals = incoming_totals(records)
        if not is_reconciled(totals):
            logger.warning("Incoming totals do not reconcile: %s", totals)
        return records, totals

    def export_incoming(self, spec: Optional[IncomingFilter] = None) -> str:
        records, _ = self.incoming_view(spec)
        return render_csv(records, INCOMING_COLUMNS)

    # ------------------------------------------------------------------
    # Outgoing ledger
    # ------------------------------------------------------------------
    async def get_outgoing(self, record_id: int) -> OutgoingRecord:
        record = await self.outgoing_repo.get(record_id)
        if record is None:
            raise RecordNotFoundError(f"Outgoing record {record_id} not found")
        return record

    async def add_outgoing(self, data: OutgoingCreate) -> OutgoingRecord:
        validate_outgoing(data)
        record = derive_outgoing(data)
        record_id = await self.outgoing_repo.create(record)
        logger.info("Outgoing record %d created", record_id)
        await self.refresh()
        return record.model_copy(update={"id": record_id})

    async def update_outgoing(self, record_id: int, data: OutgoingCreate) -> OutgoingRecord:
        validate_outgoing(data)
        record = derive_outgoing(data, record_id=record_id)
        if not await self.outgoing_repo.update(record_id, record):
            raise RecordNotFoundError(f"Outgoing record {record_id} not found")
        logger.info("Outgoing record %d updated", record_id)
        await self.refresh()
        return record

    async def delete_outgoing(self, record_id: int) -> None:
        if not await self.outgoing_repo.delete(record_id):
            raise RecordNotFoundError(f"Outgoing record {record_id} not found")
        logger.info("Outgoing record %d deleted", record_id)
        await self.refresh()

    def outgoing_view(self, spec: Optional[OutgoingFilter] = None) -> Tuple[List[OutgoingRecord], OutgoingTotals]:
        records = filter_outgoing(self.outgoing, spec or OutgoingFilter())
        totals = outgoing_totals(records)
        if not is_reconciled(totals):
            logger.warning("Outgoing totals do not reconcile: %s", totals)
        return records, totals

    def export_outgoing(self, spec: Optional[OutgoingFilter] = None) -> str:
        records, _ = self.outgoing_view(spec)
        return render_csv(records, OUTGOING_COLUMNS)
