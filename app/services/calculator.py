"""
Balance calculator - derived fields of ledger records.

Every derived field is a pure function of the raw inputs:

    total      = prior + current
    paid.total = cash + wire_transfer + card
    difference = total - paid.total
    residual_debt    = difference   if difference >= 0 else 0
    residual_advance = -difference  if difference <  0 else 0

Raw inputs are coerced here rather than rejected: missing, non-numeric or
negative amounts count as 0. Amounts are quantized to two places once, on the
way in; sums of quantized amounts need no further rounding.
"""

from __future__ import annotations

import logging
from datetime import date, datetime
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import TYPE_CHECKING, Any, NamedTuple, Optional

from bson.decimal128 import Decimal128

from app.models.base import ZERO, _today, _utcnow
from app.models.ledger import IncomingRecord, OutgoingRecord, Payment, PriorMonths

if TYPE_CHECKING:
    from app.schemas.ledger import IncomingCreate, OutgoingCreate

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")
# largest integer BSON can store
MAX_COUNT = 2 ** 63 - 1


class Residual(NamedTuple):
    debt: Decimal
    advance: Decimal


def to_amount(value: Any) -> Decimal:
    """Coerce a raw monetary input to a non-negative two-place Decimal."""
    if value is None or isinstance(value, bool):
        return ZERO
    if isinstance(value, Decimal128):
        value = value.to_decimal()
    if isinstance(value, str):
        value = value.replace(",", "").replace(" ", "").strip()
        if not value:
            return ZERO
    try:
        amount = value if isinstance(value, Decimal) else Decimal(str(value))
    except (InvalidOperation, ValueError, TypeError):
        logger.debug("Non-numeric amount %r treated as 0", value)
        return ZERO
    if not amount.is_finite() or amount < 0:
        logger.debug("Out of range amount %r treated as 0", value)
        return ZERO
    try:
        return amount.quantize(CENT, rounding=ROUND_HALF_UP)
    except InvalidOperation:
        # more digits than the decimal context can hold
        logger.debug("Oversized amount %r treated as 0", value)
        return ZERO


def to_count(value: Any) -> int:
    """Coerce a raw month count to a non-negative int."""
    if value is None or isinstance(value, bool):
        return 0
    try:
        count = int(Decimal(str(value).strip()))
    except (InvalidOperation, ValueError, TypeError, OverflowError):
        return 0
    if count > MAX_COUNT:
        logger.debug("Oversized month count %r treated as 0", value)
        return 0
    return max(count, 0)


def total_owed(prior: Any, current: Any) -> Decimal:
    return to_amount(prior) + to_amount(current)


def paid_total(cash: Any, wire_transfer: Any, card: Any) -> Decimal:
    return to_amount(cash) + to_amount(wire_transfer) + to_amount(card)


def split_residual(total: Decimal, paid: Decimal) -> Residual:
    """Split ``total - paid`` into residual debt and residual advance."""
    difference = total - paid
    if difference >= 0:
        return Residual(debt=difference, advance=ZERO)
    return Residual(debt=ZERO, advance=-difference)


def derive_payment(cash: Any, wire_transfer: Any, card: Any) -> Payment:
    cash, wire_transfer, card = to_amount(cash), to_amount(wire_transfer), to_amount(card)
    return Payment(
        total=cash + wire_transfer + card,
        cash=cash,
        wire_transfer=wire_transfer,
        card=card,
    )


def derive_incoming(
    data: IncomingCreate,
    *,
    record_id: Optional[int] = None,
    now: Optional[datetime] = None,
) -> IncomingRecord:
    """Build a complete incoming record from raw inputs."""
    prior = PriorMonths(
        count=to_count(data.prior_months.count),
        amount=to_amount(data.prior_months.amount),
    )
    monthly_charge = to_amount(data.monthly_charge)
    owed = prior.amount + monthly_charge
    paid = derive_payment(data.paid.cash, data.paid.wire_transfer, data.paid.card)
    residual = split_residual(owed, paid.total)

    return IncomingRecord(
        id=record_id,
        counterparty_name=data.counterparty_name.strip(),
        tax_id=data.tax_id.strip(),
        phone=data.phone,
        contact_name=data.contact_name,
        service_type=data.service_type,
        branch=data.branch,
        staff_name=data.staff_name,
        prior_months=prior,
        monthly_charge=monthly_charge,
        total_owed=owed,
        paid=paid,
        residual_debt=residual.debt,
        residual_advance=residual.advance,
        last_updated=now or _utcnow(),
    )


def derive_outgoing(
    data: OutgoingCreate,
    *,
    record_id: Optional[int] = None,
    now: Optional[datetime] = None,
    today: Optional[date] = None,
) -> OutgoingRecord:
    """Build a complete outgoing record from raw inputs. A missing date means today."""
    carried_forward = to_amount(data.carried_forward)
    monthly_charge = to_amount(data.monthly_charge)
    due = carried_forward + monthly_charge
    paid = derive_payment(data.paid.cash, data.paid.wire_transfer, data.paid.card)
    residual = split_residual(due, paid.total)

    return OutgoingRecord(
        id=record_id,
        entry_date=data.entry_date or today or _today(),
        payee=data.payee.strip(),
        branch=data.branch,
        category=data.category.strip(),
        carried_forward=carried_forward,
        monthly_charge=monthly_charge,
        total_due=due,
        paid=paid,
        residual_debt=residual.debt,
        residual_advance=residual.advance,
        last_updated=now or _utcnow(),
    )


def backfill_residuals(doc: dict, total_field: str) -> dict:
    """
    Fill residual fields on a stored document written before the advance
    field existed. Documents that already carry both fields are returned as is.
    """
    if "residual_advance" in doc and "residual_debt" in doc:
        return doc
    paid = doc.get("paid") or {}
    residual = split_residual(to_amount(doc.get(total_field)), to_amount(paid.get("total")))
    return {**doc, "residual_debt": residual.debt, "residual_advance": residual.advance}
