"""Domain events for the NonprofitPayout aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from giving.domain import giving


@giving.event(part_of="NonprofitPayout")
class PayoutCreated:
    """A batch of pending donations was settled into a nonprofit payout."""

    __version__ = 1

    payout_id = Identifier(required=True)
    nonprofit_id = Identifier(required=True)
    amount = Integer(required=True)  # cents
    donation_count = Integer(required=True)
    status = String(required=True)
    method = String(required=True)
    period_start = DateTime(required=True)
    period_end = DateTime(required=True)
    paid_at = DateTime()
