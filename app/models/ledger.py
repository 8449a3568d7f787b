"""
Ledger models - rows of the incoming (payments) and outgoing (expenses) ledgers.

Design principles:
- One incoming record per payer and period, one outgoing record per expense line
- Integer ids allocated by the record store
- Derived fields (totals, residuals) are always written together with their
  inputs; see app.services.calculator
- All amounts are Decimal with two places
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_serializer, field_validator

from app.models.base import LedgerModel, ZERO, _utcnow

# Filter sentinel: matches records of every branch
ALL_BRANCHES = "all"


class Branch(str, Enum):
    ZARKENT = "Zarkent Filiali"
    NABREJNIY = "Nabrejniy Filiali"

    @classmethod
    def _missing_(cls, value: object):
        # Older rows were written with inconsistent capitalisation
        if isinstance(value, str):
            folded = value.strip().casefold()
            for member in cls:
                if member.value.casefold() == folded:
                    return member
        return None


def _coerce_branch(value: Any) -> Any:
    if isinstance(value, str):
        try:
            return Branch(value)
        except ValueError:
            return value
    return value

BranchField = Annotated[Branch, BeforeValidator(_coerce_branch)]


class PaymentStatus(str, Enum):
    ANY = "any"
    PAID = "paid"      # paid.total > 0
    UNPAID = "unpaid"  # paid.total == 0


def parse_calendar_date(value: Any) -> Any:
    """
    Accept ISO ``yyyy-mm-dd`` as well as the ``dd/mm/yyyy`` form used by
    older outgoing rows. Anything else is left for pydantic to reject.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, str) and "/" in value:
        parts = value.strip().split("/")
        if len(parts) == 3 and all(p.isdigit() for p in parts):
            day, month, year = (int(p) for p in parts)
            return date(year, month, day)
    return value


# Embedded documents (no separate _id)
class PriorMonths(BaseModel):
    count: int = 0
    amount: Decimal = ZERO

class Payment(BaseModel):
    """Amount paid, split by channel. ``total`` is always the channel sum."""
    total: Decimal = ZERO
    cash: Decimal = ZERO
    wire_transfer: Decimal = ZERO
    card: Decimal = ZERO


class IncomingRecord(LedgerModel):
    """
    Money owed to the business by one counterparty.

    Invariants:
    - total_owed == prior_months.amount + monthly_charge
    - paid.total == paid.cash + paid.wire_transfer + paid.card
    - at most one of residual_debt / residual_advance is nonzero
    """
    id: Optional[int] = Field(default=None, validation_alias="_id", serialization_alias="id")

    counterparty_name: str
    tax_id: str
    phone: str = ""
    contact_name: str = ""
    service_type: str = ""
    branch: BranchField = Branch.ZARKENT
    staff_name: str = ""

    prior_months: PriorMonths = Field(default_factory=PriorMonths)
    monthly_charge: Decimal = ZERO
    total_owed: Decimal = ZERO
    paid: Payment = Field(default_factory=Payment)
    residual_debt: Decimal = ZERO
    residual_advance: Decimal = ZERO

    last_updated: datetime = Field(default_factory=_utcnow)


class OutgoingRecord(LedgerModel):
    """
    One expense line paid out by a branch.

    Same invariants as IncomingRecord with total_due in place of total_owed.
    """
    id: Optional[int] = Field(default=None, validation_alias="_id", serialization_alias="id")

    entry_date: date
    payee: str
    branch: BranchField = Branch.ZARKENT
    category: str

    carried_forward: Decimal = ZERO
    monthly_charge: Decimal = ZERO
    total_due: Decimal = ZERO
    paid: Payment = Field(default_factory=Payment)
    residual_debt: Decimal = ZERO
    residual_advance: Decimal = ZERO

    last_updated: datetime = Field(default_factory=_utcnow)

    @field_validator("entry_date", mode="before")
    @classmethod
    def _parse_entry_date(cls, value: Any) -> Any:
        return parse_calendar_date(value)

    @field_serializer("entry_date")
    def _serialize_entry_date(self, value: date) -> str:
        # BSON has no date-only type
        return value.isoformat()
