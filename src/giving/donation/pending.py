"""Pending donation aggregator: what is owed, to whom, and why.

A pure read. Totals are folded from the live Pending rows on every call;
there is no cached balance anywhere. The per-donor-type sub-totals always
add up to the nonprofit total because every donation falls into exactly
one donor type bucket.
"""

from collections.abc import Iterable
from dataclasses import dataclass, field, replace
from datetime import datetime

from protean.utils.globals import current_domain

from giving.donation.donation import Donation, DonorType
from giving.nonprofit import get_directory
from giving.nonprofit.port import NonprofitProfile


@dataclass(frozen=True)
class PendingDonation:
    """One pending donation, with what a payout request needs to reference it."""

    donation_id: str
    amount: int
    donor_type: str
    created_at: datetime
    order_id: str
    shop_id: str | None = None


@dataclass(frozen=True)
class PendingNonprofitSummary:
    """Everything currently owed to a single nonprofit."""

    nonprofit_id: str
    total_amount: int
    donation_count: int
    seller_contribution_amount: int
    seller_contribution_count: int
    buyer_direct_amount: int
    buyer_direct_count: int
    platform_revenue_amount: int
    platform_revenue_count: int
    oldest_donation_at: datetime
    newest_donation_at: datetime
    donations: tuple[PendingDonation, ...] = field(default_factory=tuple)
    nonprofit: NonprofitProfile | None = None

    @property
    def donation_ids(self) -> list[str]:
        return [d.donation_id for d in self.donations]


def summarize(donations: Iterable[Donation]) -> list[PendingNonprofitSummary]:
    """Group pending donations by nonprofit and fold them into summaries.

    Summaries are ordered by the age of their oldest donation, longest owed
    first.
    """
    groups: dict[str, list[Donation]] = {}
    for donation in donations:
        groups.setdefault(str(donation.nonprofit_id), []).append(donation)

    summaries = []
    for nonprofit_id, members in groups.items():
        amounts = {donor_type: 0 for donor_type in DonorType}
        counts = {donor_type: 0 for donor_type in DonorType}
        for donation in members:
            donor_type = DonorType(donation.donor_type)
            amounts[donor_type] += donation.amount
            counts[donor_type] += 1

        members.sort(key=lambda d: (d.created_at, str(d.id)))
        summaries.append(
            PendingNonprofitSummary(
                nonprofit_id=nonprofit_id,
                total_amount=sum(d.amount for d in members),
                donation_count=len(members),
                seller_contribution_amount=amounts[DonorType.SELLER_CONTRIBUTION],
                seller_contribution_count=counts[DonorType.SELLER_CONTRIBUTION],
                buyer_direct_amount=amounts[DonorType.BUYER_DIRECT],
                buyer_direct_count=counts[DonorType.BUYER_DIRECT],
                platform_revenue_amount=amounts[DonorType.PLATFORM_REVENUE],
                platform_revenue_count=counts[DonorType.PLATFORM_REVENUE],
                oldest_donation_at=members[0].created_at,
                newest_donation_at=members[-1].created_at,
                donations=tuple(
                    PendingDonation(
                        donation_id=str(d.id),
                        amount=d.amount,
                        donor_type=d.donor_type,
                        created_at=d.created_at,
                        order_id=str(d.order_id),
                        shop_id=str(d.shop_id) if d.shop_id else None,
                    )
                    for d in members
                ),
            )
        )

    summaries.sort(key=lambda s: (s.oldest_donation_at, s.nonprofit_id))
    return summaries


def list_pending_by_nonprofit(nonprofit_id: str | None = None) -> list[PendingNonprofitSummary]:
    """Summaries of pending donations, for every nonprofit or just one."""
    donations = current_domain.repository_for(Donation).pending(nonprofit_id=nonprofit_id)
    summaries = summarize(donations)

    profiles = get_directory().profiles(s.nonprofit_id for s in summaries)
    return [
        replace(summary, nonprofit=profiles.get(summary.nonprofit_id))
        for summary in summaries
    ]
