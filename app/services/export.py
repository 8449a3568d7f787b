"""CSV export of ledger records, formatted the way amounts are displayed."""

import csv
import io
from dataclasses import dataclass
from datetime import date
from decimal import Decimal
from typing import Any, Callable, Iterable, List, Optional, Sequence, Union

from app.core.config import settings
from app.models.ledger import IncomingRecord, OutgoingRecord


@dataclass(frozen=True)
class Column:
    header: str
    extract: Callable[[Any], Any]
    numeric: bool = False


def format_amount(value: Union[int, Decimal], separator: Optional[str] = None) -> str:
    """
    Group digits in threes. Whole amounts drop their decimals, anything else
    keeps the stored precision: 1500000.00 -> "1,500,000", 1234.50 -> "1,234.50".
    """
    separator = settings.AMOUNT_SEPARATOR if separator is None else separator
    amount = Decimal(value)
    if amount == amount.to_integral_value():
        amount = amount.quantize(Decimal(1))
    text = f"{amount:,}"
    if separator != ",":
        text = text.replace(",", separator)
    return text


INCOMING_COLUMNS: List[Column] = [
    Column("Counterparty", lambda r: r.counterparty_name),
    Column("Tax ID", lambda r: r.tax_id),
    Column("Phone", lambda r: r.phone),
    Column("Contact name", lambda r: r.contact_name),
    Column("Service type", lambda r: r.service_type),
    Column("Branch", lambda r: r.branch.value),
    Column("Staff", lambda r: r.staff_name),
    Column("Prior months", lambda r: r.prior_months.count, numeric=True),
    Column("Prior amount", lambda r: r.prior_months.amount, numeric=True),
    Column("Monthly charge", lambda r: r.monthly_charge, numeric=True),
    Column("Total owed", lambda r: r.total_owed, numeric=True),
    Column("Paid total", lambda r: r.paid.total, numeric=True),
    Column("Cash", lambda r: r.paid.cash, numeric=True),
    Column("Wire transfer", lambda r: r.paid.wire_transfer, numeric=True),
    Column("Card", lambda r: r.paid.card, numeric=True),
    Column("Residual debt", lambda r: r.residual_debt, numeric=True),
    Column("Residual advance", lambda r: r.residual_advance, numeric=True),
]

OUTGOING_COLUMNS: List[Column] = [
    Column("Date", lambda r: r.entry_date.isoformat()),
    Column("Payee", lambda r: r.payee),
    Column("Branch", lambda r: r.branch.value),
    Column("Category", lambda r: r.category),
    Column("Carried forward", lambda r: r.carried_forward, numeric=True),
    Column("Monthly charge", lambda r: r.monthly_charge, numeric=True),
    Column("Total due", lambda r: r.total_due, numeric=True),
    Column("Paid total", lambda r: r.paid.total, numeric=True),
    Column("Cash", lambda r: r.paid.cash, numeric=True),
    Column("Wire transfer", lambda r: r.paid.wire_transfer, numeric=True),
    Column("Card", lambda r: r.paid.card, numeric=True),
    Column("Residual debt", lambda r: r.residual_debt, numeric=True),
    Column("Residual advance", lambda r: r.residual_advance, numeric=True),
]


def render_csv(
    records: Iterable[Union[IncomingRecord, OutgoingRecord]],
    columns: Sequence[Column],
) -> str:
    # Every field is quoted: grouped amounts contain the delimiter
    buffer = io.StringIO()
    writer = csv.writer(buffer, quoting=csv.QUOTE_ALL, lineterminator="\n")
    writer.writerow([column.header for column in columns])
    for record in records:
        writer.writerow([
            format_amount(column.extract(record)) if column.numeric else column.extract(record)
            for column in columns
        ])
    return buffer.getvalue()


def export_filename(prefix: str, day: date) -> str:
    return f"{prefix}_{day.isoformat()}.csv"
