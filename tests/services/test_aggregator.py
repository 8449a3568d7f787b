from decimal import Decimal

from app.schemas.ledger import IncomingTotals, OutgoingTotals
from app.services.aggregator import incoming_totals, is_reconciled, outgoing_totals
from app.services.calculator import split_residual


def test_empty_ledger_totals_are_zero():
    totals = incoming_totals([])

    assert totals == IncomingTotals()
    assert totals.count == 0
    assert totals.residual_debt == Decimal("0.00")
    assert outgoing_totals([]) == OutgoingTotals()


def test_incoming_totals_sum_every_field(make_incoming):
    records = [
        make_incoming(prior_months={"count": 2, "amount": 1000000}, monthly_charge=500000,
                      paid={"cash": 1000000, "wire_transfer": 200000}),
        make_incoming(prior_months={"count": 1, "amount": 100000}, monthly_charge=100000,
                      paid={"card": 50000}),
    ]

    totals = incoming_totals(records)

    assert totals.count == 2
    assert totals.months_count == 3
    assert totals.prior_amount == Decimal("1100000.00")
    assert totals.monthly_charge == Decimal("600000.00")
    assert totals.total_owed == Decimal("1700000.00")
    assert totals.paid_total == Decimal("1250000.00")
    assert totals.cash == Decimal("1000000.00")
    assert totals.wire_transfer == Decimal("200000.00")
    assert totals.card == Decimal("50000.00")
    assert totals.residual_debt == Decimal("450000.00")
    assert totals.residual_advance == Decimal("0.00")


def test_outgoing_totals_sum_every_field(make_outgoing):
    records = [
        make_outgoing(carried_forward=100, monthly_charge=200, paid={"cash": 300}),
        make_outgoing(carried_forward=0, monthly_charge=50, paid={"wire_transfer": 80}),
    ]

    totals = outgoing_totals(records)

    assert totals.count == 2
    assert totals.carried_forward == Decimal("100.00")
    assert totals.total_due == Decimal("350.00")
    assert totals.paid_total == Decimal("380.00")
    assert totals.residual_debt == Decimal("0.00")
    assert totals.residual_advance == Decimal("30.00")


def test_totals_accept_any_iterable(make_outgoing):
    records = (make_outgoing(monthly_charge=10) for _ in range(3))

    totals = outgoing_totals(records)

    assert totals.count == 3
    assert totals.total_due == Decimal("30.00")


def test_same_sign_residuals_match_residual_of_sums(make_incoming):
    owing = [
        make_incoming(monthly_charge=100, paid={"cash": 40}),
        make_incoming(monthly_charge=250, paid={"cash": 250}),
        make_incoming(monthly_charge=70),
    ]

    totals = incoming_totals(owing)
    residual = split_residual(totals.total_owed, totals.paid_total)

    assert totals.residual_debt == residual.debt
    assert totals.residual_advance == residual.advance


def test_mixed_sign_residuals_do_not_net_out(make_incoming):
    records = [
        make_incoming(monthly_charge=100),
        make_incoming(paid={"cash": 100}),
    ]

    totals = incoming_totals(records)

    assert totals.residual_debt == Decimal("100.00")
    assert totals.residual_advance == Decimal("100.00")
    assert split_residual(totals.total_owed, totals.paid_total).debt == Decimal("0.00")
    assert is_reconciled(totals)


def test_derived_records_always_reconcile(make_incoming, make_outgoing):
    incoming = [
        make_incoming(prior_months={"amount": "1,000.10"}, monthly_charge="33.33", paid={"cash": "2000"}),
        make_incoming(monthly_charge="999.99", paid={"card": "0.99"}),
    ]
    outgoing = [
        make_outgoing(carried_forward="12.34", paid={"cash": "5"}),
        make_outgoing(monthly_charge="7", paid={"card": "10"}),
    ]

    assert is_reconciled(incoming_totals(incoming))
    assert is_reconciled(outgoing_totals(outgoing))


def test_tampered_totals_do_not_reconcile():
    totals = OutgoingTotals(total_due=Decimal("100.00"), paid_total=Decimal("40.00"), residual_debt=Decimal("50.00"))

    assert not is_reconciled(totals)
