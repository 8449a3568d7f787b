from datetime import date
from decimal import Decimal
from typing import Annotated, List, Optional

from pydantic import BaseModel, BeforeValidator, Field, field_validator

from app.models.base import ZERO
from app.models.ledger import (
    ALL_BRANCHES,
    Branch,
    BranchField,
    IncomingRecord,
    OutgoingRecord,
    PaymentStatus,
    parse_calendar_date,
)
from app.services.calculator import to_amount, to_count

# Lenient numeric inputs: bad or negative values become 0 instead of a 422
Amount = Annotated[Decimal, BeforeValidator(to_amount)]
Count = Annotated[int, BeforeValidator(to_count)]


class PriorMonthsIn(BaseModel):
    count: Count = 0
    amount: Amount = ZERO

class PaymentIn(BaseModel):
    """Paid amounts per channel. A client-supplied total is ignored."""
    cash: Amount = ZERO
    wire_transfer: Amount = ZERO
    card: Amount = ZERO


class IncomingCreate(BaseModel):
    """Raw inputs of an incoming ledger row (create and full update)."""
    counterparty_name: str
    tax_id: str
    phone: str = ""
    contact_name: str = ""
    service_type: str = ""
    branch: BranchField = Branch.ZARKENT
    staff_name: str = ""
    prior_months: PriorMonthsIn = Field(default_factory=PriorMonthsIn)
    monthly_charge: Amount = ZERO
    paid: PaymentIn = Field(default_factory=PaymentIn)


class OutgoingCreate(BaseModel):
    """Raw inputs of an outgoing ledger row (create and full update)."""
    entry_date: Optional[date] = None
    payee: str
    branch: BranchField = Branch.ZARKENT
    category: str
    carried_forward: Amount = ZERO
    monthly_charge: Amount = ZERO
    paid: PaymentIn = Field(default_factory=PaymentIn)

    @field_validator("entry_date", mode="before")
    @classmethod
    def _parse_entry_date(cls, value):
        if value == "":
            return None
        return parse_calendar_date(value)


class IncomingFilter(BaseModel):
    """Filter criteria for the incoming ledger. Defaults match everything."""
    search: str = ""
    branch: str = ALL_BRANCHES
    payment_status: PaymentStatus = PaymentStatus.ANY
    start_date: Optional[date] = None
    end_date: Optional[date] = None

class OutgoingFilter(BaseModel):
    """Filter criteria for the outgoing ledger. Defaults match everything."""
    search: str = ""
    branch: str = ALL_BRANCHES
    category: str = ""
    start_date: Optional[date] = None
    end_date: Optional[date] = None


class IncomingTotals(BaseModel):
    count: int = 0
    months_count: int = 0
    prior_amount: Decimal = ZERO
    monthly_charge: Decimal = ZERO
    total_owed: Decimal = ZERO
    paid_total: Decimal = ZERO
    cash: Decimal = ZERO
    wire_transfer: Decimal = ZERO
    card: Decimal = ZERO
    residual_debt: Decimal = ZERO
    residual_advance: Decimal = ZERO

class OutgoingTotals(BaseModel):
    count: int = 0
    carried_forward: Decimal = ZERO
    monthly_charge: Decimal = ZERO
    total_due: Decimal = ZERO
    paid_total: Decimal = ZERO
    cash: Decimal = ZERO
    wire_transfer: Decimal = ZERO
    card: Decimal = ZERO
    residual_debt: Decimal = ZERO
    residual_advance: Decimal = ZERO


class IncomingLedgerResponse(BaseModel):
    records: List[IncomingRecord]
    totals: IncomingTotals

class OutgoingLedgerResponse(BaseModel):
    records: List[OutgoingRecord]
    totals: OutgoingTotals


class RefreshResponse(BaseModel):
    incoming_count: int
    outgoing_count: int
