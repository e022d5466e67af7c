"""Cross-domain event contracts for checkout settlement events.

These classes define the event shape the Giving domain consumes when an
order settles. They are registered as external events via
domain.register_external_event() with matching __type__ strings so
Protean's stream deserialization works correctly.

Amounts are in major currency units, as published by checkout.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Float, Identifier, String


class ShopOrderSettled(BaseEvent):
    """A shop's portion of an order was paid and settled.

    The shop pledges ``donation_percentage`` of its subtotal to the
    nonprofit it supports.
    """

    __version__ = 1

    order_id = Identifier(required=True)
    shop_id = Identifier(required=True)
    nonprofit_id = Identifier()  # None when the shop supports no nonprofit
    subtotal = Float(required=True)
    donation_percentage = Float(default=0.0)
    settled_at = DateTime(required=True)


class OrderDonationPledged(BaseEvent):
    """A buyer add-on or platform revenue share was pledged at checkout."""

    __version__ = 1

    order_id = Identifier(required=True)
    nonprofit_id = Identifier(required=True)
    buyer_id = Identifier()
    donor_type = String(required=True)  # Buyer_Direct, Platform_Revenue
    amount = Float(required=True)
    pledged_at = DateTime(required=True)
