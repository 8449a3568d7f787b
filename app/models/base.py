from datetime import date, datetime, timezone
from decimal import Decimal

from pydantic import BaseModel, ConfigDict


ZERO = Decimal("0.00")


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _today() -> date:
    return _utcnow().date()


class LedgerModel(BaseModel):
    """Base for persisted ledger documents keyed by an integer ``_id``."""

    model_config = ConfigDict(
        populate_by_name=True,
    )
