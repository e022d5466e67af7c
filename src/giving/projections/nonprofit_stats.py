"""Nonprofit donation stats: lifetime giving per nonprofit.

Totals for the nonprofit administration pages: everything donated, what is
still pending and what has been paid out. A reporting view only; payout
decisions always read live donations, never this projection.
"""

from protean.core.projector import on
from protean.exceptions import ObjectNotFoundError
from protean.fields import DateTime, Identifier, Integer
from protean.utils.globals import current_domain

from giving.domain import giving
from giving.donation.donation import Donation
from giving.donation.events import DonationRecorded, DonationSettled
from giving.payout.events import PayoutCreated
from giving.payout.payout import NonprofitPayout


@giving.projection
class NonprofitDonationStats:
    nonprofit_id = Identifier(identifier=True, required=True)
    total_amount = Integer(default=0)
    total_count = Integer(default=0)
    pending_amount = Integer(default=0)
    pending_count = Integer(default=0)
    paid_amount = Integer(default=0)
    paid_count = Integer(default=0)
    payout_count = Integer(default=0)
    last_donation_at = DateTime()
    last_payout_at = DateTime()


def _get_or_create(nonprofit_id):
    repo = current_domain.repository_for(NonprofitDonationStats)
    try:
        return repo.get(nonprofit_id)
    except ObjectNotFoundError:
        return NonprofitDonationStats(nonprofit_id=nonprofit_id)


@giving.projector(projector_for=NonprofitDonationStats, aggregates=[Donation, NonprofitPayout])
class NonprofitDonationStatsProjector:
    @on(DonationRecorded)
    def on_donation_recorded(self, event):
        record = _get_or_create(str(event.nonprofit_id))
        record.total_amount = (record.total_amount or 0) + event.amount
        record.total_count = (record.total_count or 0) + 1
        record.pending_amount = (record.pending_amount or 0) + event.amount
        record.pending_count = (record.pending_count or 0) + 1
        record.last_donation_at = event.recorded_at
        current_domain.repository_for(NonprofitDonationStats).add(record)

    @on(DonationSettled)
    def on_donation_settled(self, event):
        record = _get_or_create(str(event.nonprofit_id))
        record.pending_amount = (record.pending_amount or 0) - event.amount
        record.pending_count = (record.pending_count or 0) - 1
        record.paid_amount = (record.paid_amount or 0) + event.amount
        record.paid_count = (record.paid_count or 0) + 1
        current_domain.repository_for(NonprofitDonationStats).add(record)

    @on(PayoutCreated)
    def on_payout_created(self, event):
        record = _get_or_create(str(event.nonprofit_id))
        record.payout_count = (record.payout_count or 0) + 1
        record.last_payout_at = event.paid_at
        current_domain.repository_for(NonprofitDonationStats).add(record)
