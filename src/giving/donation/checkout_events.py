"""Inbound cross-domain event handler: Giving reacts to checkout settlement.

Turns settled orders into pending donations:
- ShopOrderSettled: the shop's contribution, a percentage of its subtotal
- OrderDonationPledged: a buyer add-on or the platform's revenue share

Zero pledges record nothing, the same as checkout itself.
"""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.checkout import OrderDonationPledged, ShopOrderSettled

from giving.domain import giving
from giving.donation.donation import Donation, DonorType
from giving.donation.recording import RecordDonation
from giving.shared.money import seller_contribution, to_cents

logger = structlog.get_logger(__name__)

# Register external events so Protean can deserialize them
giving.register_external_event(ShopOrderSettled, "Checkout.ShopOrderSettled.v1")
giving.register_external_event(OrderDonationPledged, "Checkout.OrderDonationPledged.v1")


@giving.event_handler(part_of=Donation, stream_category="checkout::order")
class CheckoutDonationEventHandler:
    """Records donations pledged by settled orders."""

    @handle(ShopOrderSettled)
    def on_shop_order_settled(self, event: ShopOrderSettled) -> None:
        if not event.nonprofit_id:
            return

        amount = seller_contribution(to_cents(event.subtotal), event.donation_percentage or 0)
        if amount <= 0:
            logger.debug("Shop pledged nothing for order", order_id=str(event.order_id), shop_id=str(event.shop_id))
            return

        current_domain.process(
            RecordDonation(
                nonprofit_id=str(event.nonprofit_id),
                order_id=str(event.order_id),
                shop_id=str(event.shop_id),
                amount=amount,
                donor_type=DonorType.SELLER_CONTRIBUTION.value,
            ),
            asynchronous=False,
        )

    @handle(OrderDonationPledged)
    def on_order_donation_pledged(self, event: OrderDonationPledged) -> None:
        amount = to_cents(event.amount)
        if amount <= 0:
            return

        current_domain.process(
            RecordDonation(
                nonprofit_id=str(event.nonprofit_id),
                order_id=str(event.order_id),
                buyer_id=str(event.buyer_id) if event.buyer_id else None,
                amount=amount,
                donor_type=event.donor_type,
            ),
            asynchronous=False,
        )
