from datetime import date, datetime, timezone
from typing import Dict
from unittest.mock import MagicMock

import pytest
from fastapi.testclient import TestClient

from app.api.deps import get_ledger_service
from app.main import app
from app.repositories.ledger_repo import RecordStoreError
from app.schemas.ledger import IncomingCreate, OutgoingCreate
from app.services.calculator import derive_incoming, derive_outgoing
from app.services.ledger_service import LedgerService

FIXED_NOW = datetime(2024, 5, 10, 9, 30, tzinfo=timezone.utc)


class FakeLedgerRepository:
    """In-memory stand-in for a ledger repository.

    Operations named in ``fail_on`` raise RecordStoreError, the same way the
    Mongo repository reports driver failures.
    """

    def __init__(self):
        self.rows: Dict[int, object] = {}
        self.next_id = 1
        self.fail_on = set()
        self.calls = []

    def _check(self, operation: str):
        self.calls.append(operation)
        if operation in self.fail_on:
            raise RecordStoreError(f"Record store {operation} failed")

    def seed(self, record):
        record_id = self.next_id
        self.next_id += 1
        self.rows[record_id] = record.model_copy(update={"id": record_id})
        return record_id

    async def list_records(self):
        self._check("list")
        return [self.rows[record_id] for record_id in sorted(self.rows)]

    async def get(self, record_id):
        self._check("get")
        return self.rows.get(record_id)

    async def create(self, record):
        self._check("create")
        return self.seed(record)

    async def update(self, record_id, record):
        self._check("update")
        if record_id not in self.rows:
            return False
        self.rows[record_id] = record.model_copy(update={"id": record_id})
        return True

    async def delete(self, record_id):
        self._check("delete")
        return self.rows.pop(record_id, None) is not None


@pytest.fixture
def incoming_repo():
    return FakeLedgerRepository()


@pytest.fixture
def outgoing_repo():
    return FakeLedgerRepository()


@pytest.fixture
def ledger(incoming_repo, outgoing_repo):
    return LedgerService(incoming_repo, outgoing_repo)


@pytest.fixture
def client(ledger):
    """API client wired to the in-memory ledger; no MongoDB connection is made."""
    app.dependency_overrides[get_ledger_service] = lambda: ledger
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture
def mock_db():
    """Motor database double whose collections are distinct MagicMocks."""
    collections = {}
    db = MagicMock()
    db.__getitem__.side_effect = lambda name: collections.setdefault(name, MagicMock(name=name))
    return db


@pytest.fixture
def make_incoming():
    """Build a derived incoming record from raw input overrides."""
    def _make(record_id=None, now=FIXED_NOW, **overrides):
        raw = {
            "counterparty_name": "Orzu Savdo MChJ",
            "tax_id": "301234567",
            "contact_name": "Dilshod Karimov",
            "staff_name": "Malika",
        }
        raw.update(overrides)
        return derive_incoming(IncomingCreate(**raw), record_id=record_id, now=now)
    return _make


@pytest.fixture
def make_outgoing():
    """Build a derived outgoing record from raw input overrides."""
    def _make(record_id=None, now=FIXED_NOW, **overrides):
        raw = {
            "entry_date": date(2024, 5, 10),
            "payee": "Elektr tarmoqlari",
            "category": "Utilities",
        }
        raw.update(overrides)
        return derive_outgoing(OutgoingCreate(**raw), record_id=record_id, now=now)
    return _make
