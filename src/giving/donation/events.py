"""Domain events for the Donation aggregate."""

from protean.fields import DateTime, Identifier, Integer, String

from giving.domain import giving


@giving.event(part_of="Donation")
class DonationRecorded:
    """A donation was generated by an order and is pending payout."""

    __version__ = 1

    donation_id = Identifier(required=True)
    nonprofit_id = Identifier(required=True)
    order_id = Identifier(required=True)
    shop_id = Identifier()
    buyer_id = Identifier()
    amount = Integer(required=True)  # cents
    donor_type = String(required=True)
    recorded_at = DateTime(required=True)


@giving.event(part_of="Donation")
class DonationSettled:
    """A pending donation was included in a nonprofit payout."""

    __version__ = 1

    donation_id = Identifier(required=True)
    nonprofit_id = Identifier(required=True)
    payout_id = Identifier(required=True)
    amount = Integer(required=True)  # cents
    donor_type = String(required=True)
    settled_at = DateTime(required=True)
