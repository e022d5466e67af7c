"""Shared BDD fixtures and step definitions for the Giving domain."""

import pytest
from giving.donation.donation import Donation, DonationStatus
from giving.donation.pending import list_pending_by_nonprofit
from giving.donation.recording import RecordDonation
from giving.errors import ConflictError, LedgerError
from giving.payout.creation import create_payout
from giving.payout.payout import NonprofitPayout
from protean import current_domain
from pytest_bdd import given, parsers, then, when

_SUBTOTAL_FIELDS = {
    "Seller_Contribution": "seller_contribution_amount",
    "Buyer_Direct": "buyer_direct_amount",
    "Platform_Revenue": "platform_revenue_amount",
}


@pytest.fixture()
def ledger():
    """What the scenario has done so far."""
    return {"donations": [], "last_batch": [], "payout": None, "summary": None, "error": None}


def _pay(ledger, nonprofit_id, donation_ids):
    ledger["last_batch"] = list(donation_ids)
    try:
        ledger["payout"] = create_payout(nonprofit_id, donation_ids, method="manual")
        ledger["error"] = None
    except LedgerError as exc:
        ledger["error"] = exc


def _pending_ids(nonprofit_id):
    summaries = list_pending_by_nonprofit(nonprofit_id=nonprofit_id)
    return summaries[0].donation_ids if summaries else []


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('a pending "{donor_type}" donation of {amount:d} cents for "{nonprofit_id}"'))
def _pending_donation(ledger, donor_type, amount, nonprofit_id):
    donation_id = current_domain.process(
        RecordDonation(
            nonprofit_id=nonprofit_id,
            order_id=f"ord-bdd-{len(ledger['donations']) + 1:03d}",
            shop_id="shop-bdd",
            amount=amount,
            donor_type=donor_type,
        ),
        asynchronous=False,
    )
    ledger["donations"].append(donation_id)


@given(parsers.cfparse('the operator has paid out the pending donations for "{nonprofit_id}"'))
def _already_paid(ledger, nonprofit_id):
    _pay(ledger, nonprofit_id, _pending_ids(nonprofit_id))
    assert ledger["error"] is None


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('the operator reviews pending donations for "{nonprofit_id}"'))
def _review(ledger, nonprofit_id):
    ledger["summary"] = list_pending_by_nonprofit(nonprofit_id=nonprofit_id)[0]


@when(parsers.cfparse('the operator pays out the pending donations for "{nonprofit_id}"'))
def _pay_pending(ledger, nonprofit_id):
    _pay(ledger, nonprofit_id, _pending_ids(nonprofit_id))


@when("the operator pays out the same donations again")
def _pay_again(ledger):
    _pay(ledger, str(ledger["payout"].nonprofit_id), ledger["last_batch"])


@when(parsers.cfparse('the operator pays out every recorded donation under "{nonprofit_id}"'))
def _pay_everything(ledger, nonprofit_id):
    _pay(ledger, nonprofit_id, ledger["donations"])


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse("the pending total is {amount:d} cents across {count:d} donations"))
def _pending_total(ledger, amount, count):
    assert ledger["summary"].total_amount == amount
    assert ledger["summary"].donation_count == count


@then(parsers.cfparse('the "{donor_type}" subtotal is {amount:d} cents'))
def _subtotal(ledger, donor_type, amount):
    assert getattr(ledger["summary"], _SUBTOTAL_FIELDS[donor_type]) == amount


@then(parsers.cfparse("a payout of {amount:d} cents covering {count:d} donations is recorded"))
def _payout_recorded(ledger, amount, count):
    assert ledger["error"] is None
    stored = current_domain.repository_for(NonprofitPayout).get(ledger["payout"].id)
    assert stored.amount == amount
    assert stored.donation_count == count


@then("every settled donation references the payout")
def _settled_reference_payout(ledger):
    repo = current_domain.repository_for(Donation)
    for donation_id in ledger["last_batch"]:
        donation = repo.get(donation_id)
        assert donation.status == DonationStatus.PAID.value
        assert str(donation.payout_id) == str(ledger["payout"].id)


@then(parsers.cfparse('nothing is pending for "{nonprofit_id}"'))
def _nothing_pending(nonprofit_id):
    assert list_pending_by_nonprofit(nonprofit_id=nonprofit_id) == []


@then("the payout is rejected as a conflict")
def _rejected(ledger):
    assert isinstance(ledger["error"], ConflictError)


@then(parsers.re(r"(?P<count>\d+) payouts? exists?"), converters={"count": int})
def _payout_count(count):
    assert len(list(current_domain.repository_for(NonprofitPayout).scan())) == count


@then(parsers.cfparse("{count:d} donations are still pending"))
def _still_pending(count):
    assert len(current_domain.repository_for(Donation).pending()) == count
