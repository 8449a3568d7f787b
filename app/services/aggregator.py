"""
Ledger totals.

Totals sum each record's already-derived fields in a single pass from an
all-zero baseline; nothing is re-derived from the sums.

Summed residuals versus residuals of sums
-----------------------------------------
For every record ``debt_i - advance_i == total_i - paid_i``, so the net identity

    sum(debt) - sum(advance) == sum(total) - sum(paid)

always holds (see ``is_reconciled``). The stronger statement

    sum(debt) == split_residual(sum(total), sum(paid)).debt

only holds when every record's difference has the same sign. With one record
owing 100 and another 100 in advance, the summed debt is 100 while the
residual of the sums is 0.
"""

from decimal import Decimal
from typing import Callable, Dict, Iterable, Union

from app.models.base import ZERO
from app.models.ledger import IncomingRecord, OutgoingRecord
from app.schemas.ledger import IncomingTotals, OutgoingTotals

INCOMING_FIELDS: Dict[str, Callable[[IncomingRecord], Union[int, Decimal]]] = {
    "months_count": lambda r: r.prior_months.count,
    "prior_amount": lambda r: r.prior_months.amount,
    "monthly_charge": lambda r: r.monthly_charge,
    "total_owed": lambda r: r.total_owed,
    "paid_total": lambda r: r.paid.total,
    "cash": lambda r: r.paid.cash,
    "wire_transfer": lambda r: r.paid.wire_transfer,
    "card": lambda r: r.paid.card,
    "residual_debt": lambda r: r.residual_debt,
    "residual_advance": lambda r: r.residual_advance,
}

OUTGOING_FIELDS: Dict[str, Callable[[OutgoingRecord], Decimal]] = {
    "carried_forward": lambda r: r.carried_forward,
    "monthly_charge": lambda r: r.monthly_charge,
    "total_due": lambda r: r.total_due,
    "paid_total": lambda r: r.paid.total,
    "cash": lambda r: r.paid.cash,
    "wire_transfer": lambda r: r.paid.wire_transfer,
    "card": lambda r: r.paid.card,
    "residual_debt": lambda r: r.residual_debt,
    "residual_advance": lambda r: r.residual_advance,
}


# month counts are whole numbers, everything else is money
INTEGER_FIELDS = {"months_count"}


def _accumulate(records: Iterable, fields: Dict[str, Callable]) -> Dict[str, Union[int, Decimal]]:
    sums = {name: 0 if name in INTEGER_FIELDS else ZERO for name in fields}
    count = 0
    for record in records:
        count += 1
        for name, extract in fields.items():
            sums[name] += extract(record)
    sums["count"] = count
    return sums


def incoming_totals(records: Iterable[IncomingRecord]) -> IncomingTotals:
    return IncomingTotals(**_accumulate(records, INCOMING_FIELDS))


def outgoing_totals(records: Iterable[OutgoingRecord]) -> OutgoingTotals:
    return OutgoingTotals(**_accumulate(records, OUTGOING_FIELDS))


def is_reconciled(totals: Union[IncomingTotals, OutgoingTotals]) -> bool:
    """Check that summed residuals net to summed totals minus summed payments."""
    total = totals.total_owed if isinstance(totals, IncomingTotals) else totals.total_due
    return totals.residual_debt - totals.residual_advance == total - totals.paid_total
