"""NonprofitPayout aggregate: a settled batch of donations.

A payout is a snapshot: ``amount`` and ``donation_count`` are fixed at
creation from the donations it settles and never change afterwards. The
period covers the creation times of those donations, not the wall clock.

Payouts are recorded as Paid straight away because disbursement happens
off-system (``method`` and ``notes`` say how). Pending and Failed exist so
that a tracked disbursement step can be added later without a schema change.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String, Text

from giving.domain import giving
from giving.payout.events import PayoutCreated


class PayoutStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"
    FAILED = "Failed"


DEFAULT_METHOD = "manual"


@giving.aggregate
class NonprofitPayout:
    nonprofit_id = Identifier(required=True)
    amount = Integer(required=True, min_value=0)  # cents
    donation_count = Integer(required=True, min_value=1)
    status = String(
        max_length=50,
        choices=PayoutStatus,
        default=PayoutStatus.PAID.value,
    )
    period_start = DateTime(required=True)
    period_end = DateTime(required=True)
    method = String(max_length=50, default=DEFAULT_METHOD)  # free-form: check, ach, wire, manual
    notes = Text()
    created_at = DateTime()
    paid_at = DateTime()

    @invariant.post
    def period_must_be_ordered(self):
        if self.period_start and self.period_end and self.period_start > self.period_end:
            raise ValidationError({"period_end": ["Payout period cannot end before it starts"]})

    @classmethod
    def settle(cls, nonprofit_id: str, donations: list, method: str, notes: str | None = None):
        """Create a paid payout covering exactly ``donations``.

        Amount, count and period are derived from the donations themselves,
        never from caller input.
        """
        if not donations:
            raise ValidationError({"donation_ids": ["A payout must settle at least one donation"]})

        now = datetime.now(UTC)
        created = sorted(d.created_at for d in donations)
        payout = cls(
            nonprofit_id=nonprofit_id,
            amount=sum(d.amount for d in donations),
            donation_count=len(donations),
            status=PayoutStatus.PAID.value,
            period_start=created[0],
            period_end=created[-1],
            method=method or DEFAULT_METHOD,
            notes=notes,
            created_at=now,
            paid_at=now,
        )
        payout.raise_(
            PayoutCreated(
                payout_id=str(payout.id),
                nonprofit_id=nonprofit_id,
                amount=payout.amount,
                donation_count=payout.donation_count,
                status=payout.status,
                method=payout.method,
                period_start=payout.period_start,
                period_end=payout.period_end,
                paid_at=now,
            )
        )
        return payout
