"""Integration tests for the NonprofitDonationStats projection."""

import pytest
from giving.errors import ConflictError
from giving.payout.creation import create_payout
from giving.projections.nonprofit_stats import NonprofitDonationStats
from protean import current_domain


def _stats(nonprofit_id="np-001"):
    return current_domain.repository_for(NonprofitDonationStats).get(nonprofit_id)


class TestNonprofitDonationStats:
    def test_recorded_donations_are_pending(self, record_donation):
        record_donation(amount=1000)
        record_donation(amount=250)

        stats = _stats()

        assert stats.total_amount == 1250
        assert stats.total_count == 2
        assert stats.pending_amount == 1250
        assert stats.pending_count == 2
        assert stats.paid_amount == 0
        assert stats.last_donation_at is not None

    def test_payout_moves_pending_to_paid(self, record_donation):
        ids = [record_donation(amount=1000), record_donation(amount=250)]
        record_donation(amount=75)

        create_payout("np-001", ids)

        stats = _stats()
        assert stats.total_amount == 1325
        assert stats.pending_amount == 75
        assert stats.pending_count == 1
        assert stats.paid_amount == 1250
        assert stats.paid_count == 2
        assert stats.payout_count == 1
        assert stats.last_payout_at is not None

    def test_failed_payout_changes_nothing(self, record_donation):
        ids = [record_donation(nonprofit_id="np-001"), record_donation(nonprofit_id="np-002")]

        with pytest.raises(ConflictError):
            create_payout("np-001", ids)

        stats = _stats()
        assert stats.paid_count == 0
        assert stats.payout_count == 0
        assert stats.pending_count == 1

    def test_kept_per_nonprofit(self, record_donation):
        record_donation(nonprofit_id="np-001", amount=100)
        record_donation(nonprofit_id="np-002", amount=900)

        assert _stats("np-001").total_amount == 100
        assert _stats("np-002").total_amount == 900
