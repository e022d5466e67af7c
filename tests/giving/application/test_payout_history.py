"""Application tests for the paginated payout history."""

import pytest
from giving.payout.creation import create_payout
from giving.payout.history import MAX_PAGE_SIZE, list_payouts
from giving.payout.payout import PayoutStatus
from protean.exceptions import ValidationError


@pytest.fixture()
def make_payout(record_donation):
    def _make(nonprofit_id="np-001", amounts=(1000,), method="manual"):
        ids = [record_donation(nonprofit_id=nonprofit_id, amount=a) for a in amounts]
        return create_payout(nonprofit_id, ids, method=method)

    return _make


class TestPayoutHistory:
    def test_empty(self):
        page = list_payouts()
        assert page.payouts == []
        assert page.total_count == 0
        assert page.total_pages == 0

    def test_newest_first(self, make_payout):
        first = make_payout(amounts=(100,))
        second = make_payout(amounts=(200,))
        third = make_payout(amounts=(300,))

        page = list_payouts()

        assert [p.payout_id for p in page.payouts] == [str(third.id), str(second.id), str(first.id)]

    def test_record_fields(self, make_payout):
        payout = make_payout(amounts=(1000, 500), method="ach")

        record = list_payouts().payouts[0]

        assert record.payout_id == str(payout.id)
        assert record.nonprofit_id == "np-001"
        assert record.amount == 1500
        assert record.donation_count == 2
        assert record.status == PayoutStatus.PAID.value
        assert record.method == "ach"
        assert record.period_start <= record.period_end

    def test_filter_by_nonprofit(self, make_payout):
        make_payout(nonprofit_id="np-001")
        other = make_payout(nonprofit_id="np-002")

        page = list_payouts(nonprofit_id="np-002")

        assert page.total_count == 1
        assert page.payouts[0].payout_id == str(other.id)

    def test_filter_by_status(self, make_payout):
        make_payout()
        assert list_payouts(status=PayoutStatus.PAID.value).total_count == 1
        assert list_payouts(status=PayoutStatus.FAILED.value).total_count == 0

    def test_status_filter_is_case_insensitive(self, make_payout):
        make_payout()
        assert list_payouts(status="paid").total_count == 1

    def test_unknown_status_rejected(self):
        with pytest.raises(ValidationError):
            list_payouts(status="Refunded")

    def test_includes_nonprofit_profile(self, make_payout, directory):
        make_payout(nonprofit_id="np-002")
        record = list_payouts().payouts[0]
        assert record.nonprofit.name == "City Food Bank"
        assert record.nonprofit.logo is None


class TestPayoutHistoryPaging:
    def test_pages(self, make_payout):
        for _ in range(5):
            make_payout()

        first = list_payouts(page=1, page_size=2)
        last = list_payouts(page=3, page_size=2)

        assert first.total_count == 5
        assert first.total_pages == 3
        assert len(first.payouts) == 2
        assert len(last.payouts) == 1

    def test_pages_do_not_overlap(self, make_payout):
        for _ in range(4):
            make_payout()

        seen = [p.payout_id for n in (1, 2) for p in list_payouts(page=n, page_size=2).payouts]

        assert len(set(seen)) == 4

    def test_page_past_the_end_is_empty(self, make_payout):
        make_payout()
        page = list_payouts(page=5, page_size=10)
        assert page.payouts == []
        assert page.total_count == 1

    def test_page_must_be_positive(self):
        with pytest.raises(ValidationError):
            list_payouts(page=0)

    def test_page_size_is_bounded(self):
        with pytest.raises(ValidationError):
            list_payouts(page_size=MAX_PAGE_SIZE + 1)
        with pytest.raises(ValidationError):
            list_payouts(page_size=0)
