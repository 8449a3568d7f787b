"""Ledger validation utilities."""
from app.schemas.ledger import IncomingCreate, OutgoingCreate


class LedgerValidationError(Exception):
    """Raised when a ledger row is missing identifying fields."""
    pass


def _require(value: str, label: str) -> None:
    if not value or not value.strip():
        raise LedgerValidationError(f"{label} is required")


def validate_incoming(data: IncomingCreate) -> None:
    """
    Validate an incoming row before it reaches the store.

    Rules:
    - counterparty name must be non-blank
    - tax id must be non-blank

    Amounts are not validated here; the calculator coerces them.
    """
    _require(data.counterparty_name, "Counterparty name")
    _require(data.tax_id, "Tax ID")


def validate_outgoing(data: OutgoingCreate) -> None:
    """
    Validate an outgoing row before it reaches the store.

    Rules:
    - payee must be non-blank
    - expense category must be non-blank
    """
    _require(data.payee, "Payee")
    _require(data.category, "Category")
