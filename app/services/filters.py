"""Record filtering for both ledgers. Filters are pure and keep input order."""

from datetime import date
from typing import Iterable, List, Optional

from app.models.ledger import ALL_BRANCHES, Branch, IncomingRecord, OutgoingRecord, PaymentStatus
from app.schemas.ledger import IncomingFilter, OutgoingFilter


def matches_search(term: str, fields: Iterable[Optional[str]]) -> bool:
    """Case-insensitive substring match against any field. Empty term matches."""
    needle = term.strip().casefold()
    if not needle:
        return True
    return any(needle in (field or "").casefold() for field in fields)


def matches_branch(branch_filter: str, branch) -> bool:
    """Exact branch match, case-insensitive like branch input. Unknown names match nothing."""
    if not branch_filter or branch_filter == ALL_BRANCHES:
        return True
    try:
        wanted = Branch(branch_filter)
    except ValueError:
        return False
    return branch == wanted


def matches_date_range(value: date, start: Optional[date], end: Optional[date]) -> bool:
    """Inclusive calendar-date containment; a missing bound is open."""
    if start is not None and value < start:
        return False
    if end is not None and value > end:
        return False
    return True


def matches_payment_status(status: PaymentStatus, paid_total) -> bool:
    if status == PaymentStatus.PAID:
        return paid_total > 0
    if status == PaymentStatus.UNPAID:
        return paid_total == 0
    return True


def matches_incoming(record: IncomingRecord, spec: IncomingFilter) -> bool:
    return (
        matches_search(
            spec.search,
            (record.counterparty_name, record.tax_id, record.contact_name, record.staff_name),
        )
        and matches_branch(spec.branch, record.branch)
        and matches_payment_status(spec.payment_status, record.paid.total)
        # incoming rows are dated by their last update
        and matches_date_range(record.last_updated.date(), spec.start_date, spec.end_date)
    )


def matches_outgoing(record: OutgoingRecord, spec: OutgoingFilter) -> bool:
    return (
        matches_search(spec.search, (record.payee, record.category, record.branch.value))
        and matches_search(spec.category, (record.category,))
        and matches_branch(spec.branch, record.branch)
        and matches_date_range(record.entry_date, spec.start_date, spec.end_date)
    )


def filter_incoming(records: Iterable[IncomingRecord], spec: IncomingFilter) -> List[IncomingRecord]:
    return [record for record in records if matches_incoming(record, spec)]


def filter_outgoing(records: Iterable[OutgoingRecord], spec: OutgoingFilter) -> List[OutgoingRecord]:
    return [record for record in records if matches_outgoing(record, spec)]
