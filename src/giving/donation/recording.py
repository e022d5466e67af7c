"""Donation recording: command and handler.

Checkout writes one donation per pledge when an order settles. Donations
always start Pending.
"""

import structlog
from protean import handle
from protean.fields import Identifier, Integer, String
from protean.utils.globals import current_domain

from giving.domain import giving
from giving.donation.donation import Donation

logger = structlog.get_logger(__name__)


@giving.command(part_of="Donation")
class RecordDonation:
    """Record a pending donation generated by an order."""

    nonprofit_id = Identifier(required=True)
    order_id = Identifier(required=True)
    shop_id = Identifier()
    buyer_id = Identifier()
    amount = Integer(required=True, min_value=0)  # cents
    donor_type = String(required=True, max_length=50)


@giving.command_handler(part_of=Donation)
class RecordDonationHandler:
    @handle(RecordDonation)
    def record_donation(self, command):
        donation = Donation.record(
            nonprofit_id=command.nonprofit_id,
            order_id=command.order_id,
            shop_id=command.shop_id,
            buyer_id=command.buyer_id,
            amount=command.amount,
            donor_type=command.donor_type,
        )
        current_domain.repository_for(Donation).add(donation)
        logger.info(
            "Donation recorded",
            donation_id=str(donation.id),
            nonprofit_id=str(command.nonprofit_id),
            order_id=str(command.order_id),
            amount=command.amount,
            donor_type=command.donor_type,
        )
        return str(donation.id)
