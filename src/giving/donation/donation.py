"""Donation aggregate: one unit of money owed to a nonprofit.

A donation is written once by checkout, always Pending, and changes exactly
once afterwards: the payout transaction moves it to Paid and stamps the
payout that settled it. Nothing else about it ever changes and it is never
deleted.

State Machine:
    PENDING → PAID (terminal, only via the payout transaction)

Invariant:
    status == PAID  <=>  payout_id is set
"""

from datetime import UTC, datetime
from enum import Enum

from protean import atomic_change, invariant
from protean.exceptions import ValidationError
from protean.fields import DateTime, Identifier, Integer, String

from giving.domain import giving
from giving.donation.events import DonationRecorded, DonationSettled


class DonationStatus(Enum):
    PENDING = "Pending"
    PAID = "Paid"


class DonorType(Enum):
    """Whose money a donation represents. Reporting only, never eligibility."""

    SELLER_CONTRIBUTION = "Seller_Contribution"
    BUYER_DIRECT = "Buyer_Direct"
    PLATFORM_REVENUE = "Platform_Revenue"


_VALID_TRANSITIONS = {
    DonationStatus.PENDING: {DonationStatus.PAID},
    DonationStatus.PAID: set(),  # Terminal
}


@giving.aggregate
class Donation:
    nonprofit_id = Identifier(required=True)
    shop_id = Identifier()
    order_id = Identifier(required=True)
    buyer_id = Identifier()
    amount = Integer(required=True, min_value=0)  # cents
    donor_type = String(max_length=50, choices=DonorType, required=True)
    status = String(
        max_length=50,
        choices=DonationStatus,
        default=DonationStatus.PENDING.value,
    )
    payout_id = Identifier()
    created_at = DateTime()
    settled_at = DateTime()

    @invariant.post
    def payout_is_set_exactly_when_paid(self):
        paid = self.status == DonationStatus.PAID.value
        if paid and not self.payout_id:
            raise ValidationError({"payout_id": ["Paid donations must reference a payout"]})
        if not paid and self.payout_id:
            raise ValidationError({"payout_id": ["Pending donations cannot reference a payout"]})

    def _assert_can_transition(self, target_status: DonationStatus) -> None:
        current = DonationStatus(self.status)
        if target_status not in _VALID_TRANSITIONS.get(current, set()):
            raise ValidationError({"status": [f"Cannot transition from {current.value} to {target_status.value}"]})

    @classmethod
    def record(
        cls,
        nonprofit_id: str,
        order_id: str,
        amount: int,
        donor_type: str,
        shop_id: str | None = None,
        buyer_id: str | None = None,
    ):
        """Record a new pending donation generated by an order."""
        if amount is None or amount < 0:
            raise ValidationError({"amount": ["Donation amount cannot be negative"]})

        now = datetime.now(UTC)
        donation = cls(
            nonprofit_id=nonprofit_id,
            order_id=order_id,
            shop_id=shop_id,
            buyer_id=buyer_id,
            amount=amount,
            donor_type=donor_type,
            status=DonationStatus.PENDING.value,
            created_at=now,
        )
        donation.raise_(
            DonationRecorded(
                donation_id=str(donation.id),
                nonprofit_id=nonprofit_id,
                order_id=order_id,
                shop_id=shop_id,
                buyer_id=buyer_id,
                amount=amount,
                donor_type=donation.donor_type,
                recorded_at=now,
            )
        )
        return donation

    @property
    def is_pending(self) -> bool:
        return self.status == DonationStatus.PENDING.value

    def settle(self, payout_id: str) -> None:
        """Attribute this donation to a payout. Only the payout transaction calls this."""
        self._assert_can_transition(DonationStatus.PAID)
        if not payout_id:
            raise ValidationError({"payout_id": ["A payout is required to settle a donation"]})

        now = datetime.now(UTC)
        # Both fields change together so the post invariant sees a consistent state
        with atomic_change(self):
            self.status = DonationStatus.PAID.value
            self.payout_id = payout_id
            self.settled_at = now
        self.raise_(
            DonationSettled(
                donation_id=str(self.id),
                nonprofit_id=str(self.nonprofit_id),
                payout_id=str(payout_id),
                amount=self.amount,
                donor_type=self.donor_type,
                settled_at=now,
            )
        )
