"""Repository for the Donation aggregate.

Reads only. Donations change state exclusively through the payout
transaction in ``giving.payout.creation``.
"""

from collections.abc import Iterator

from giving.domain import giving
from giving.donation.donation import Donation, DonationStatus

SCAN_BATCH_SIZE = 500


@giving.repository(part_of=Donation)
class DonationRepository:
    def scan(self, **criteria) -> Iterator[Donation]:
        """Yield every donation matching ``criteria``, oldest first, in batches."""
        offset = 0
        while True:
            queryset = self._dao.query
            if criteria:
                queryset = queryset.filter(**criteria)
            batch = queryset.order_by("created_at").offset(offset).limit(SCAN_BATCH_SIZE).all().items
            yield from batch
            if len(batch) < SCAN_BATCH_SIZE:
                return
            offset += SCAN_BATCH_SIZE

    def pending(self, nonprofit_id: str | None = None) -> list[Donation]:
        """All donations not yet included in a payout."""
        criteria = {"status": DonationStatus.PENDING.value}
        if nonprofit_id:
            criteria["nonprofit_id"] = nonprofit_id
        return list(self.scan(**criteria))

    def settleable(self, nonprofit_id: str, donation_ids: list[str]) -> list[Donation]:
        """The subset of ``donation_ids`` that belongs to the nonprofit and is still pending."""
        return (
            self._dao.query.filter(
                id__in=list(donation_ids),
                nonprofit_id=nonprofit_id,
                status=DonationStatus.PENDING.value,
            )
            .limit(len(donation_ids))
            .all()
            .items
        )

    def attributed_to(self, payout_id: str) -> list[Donation]:
        """Donations settled by the given payout."""
        return list(self.scan(payout_id=payout_id))
