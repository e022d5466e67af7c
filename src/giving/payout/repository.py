"""Repository for the NonprofitPayout aggregate. Payouts are append-only."""

from collections.abc import Iterator

from giving.domain import giving
from giving.payout.payout import NonprofitPayout

SCAN_BATCH_SIZE = 200


@giving.repository(part_of=NonprofitPayout)
class NonprofitPayoutRepository:
    def newest_first(self, offset: int, limit: int, **criteria):
        """One page of payouts, newest first. Returns ``(payouts, total_count)``."""
        queryset = self._dao.query
        if criteria:
            queryset = queryset.filter(**criteria)
        results = queryset.order_by("-created_at").offset(offset).limit(limit).all()
        return results.items, results.total

    def scan(self, **criteria) -> Iterator[NonprofitPayout]:
        """Yield every payout matching ``criteria``, oldest first, in batches."""
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
