"""Integration tests for CheckoutDonationEventHandler — Giving reacts to checkout events.

Covers:
- ShopOrderSettled records the shop's percentage as a seller contribution
- shops without a nonprofit, or pledging nothing, record nothing
- OrderDonationPledged records buyer and platform donations in cents
"""

from datetime import UTC, datetime

from giving.donation.checkout_events import CheckoutDonationEventHandler
from giving.donation.donation import Donation, DonationStatus, DonorType
from protean import current_domain
from shared.events.checkout import OrderDonationPledged, ShopOrderSettled


def _pending():
    return current_domain.repository_for(Donation).pending()


class TestShopOrderSettled:
    def test_records_seller_contribution(self):
        CheckoutDonationEventHandler().on_shop_order_settled(
            ShopOrderSettled(
                order_id="ord-chk-001",
                shop_id="shop-001",
                nonprofit_id="np-001",
                subtotal=84.50,
                donation_percentage=10.0,
                settled_at=datetime.now(UTC),
            )
        )

        donations = _pending()
        assert len(donations) == 1
        donation = donations[0]
        assert donation.amount == 845
        assert donation.donor_type == DonorType.SELLER_CONTRIBUTION.value
        assert donation.status == DonationStatus.PENDING.value
        assert str(donation.shop_id) == "shop-001"
        assert str(donation.order_id) == "ord-chk-001"

    def test_shop_without_nonprofit_records_nothing(self):
        CheckoutDonationEventHandler().on_shop_order_settled(
            ShopOrderSettled(
                order_id="ord-chk-002",
                shop_id="shop-002",
                subtotal=100.0,
                donation_percentage=5.0,
                settled_at=datetime.now(UTC),
            )
        )
        assert _pending() == []

    def test_zero_percentage_records_nothing(self):
        CheckoutDonationEventHandler().on_shop_order_settled(
            ShopOrderSettled(
                order_id="ord-chk-003",
                shop_id="shop-003",
                nonprofit_id="np-001",
                subtotal=100.0,
                donation_percentage=0.0,
                settled_at=datetime.now(UTC),
            )
        )
        assert _pending() == []


class TestOrderDonationPledged:
    def test_records_buyer_donation(self):
        CheckoutDonationEventHandler().on_order_donation_pledged(
            OrderDonationPledged(
                order_id="ord-chk-010",
                nonprofit_id="np-002",
                buyer_id="buyer-010",
                donor_type=DonorType.BUYER_DIRECT.value,
                amount=5.0,
                pledged_at=datetime.now(UTC),
            )
        )

        donation = _pending()[0]
        assert donation.amount == 500
        assert donation.donor_type == DonorType.BUYER_DIRECT.value
        assert str(donation.buyer_id) == "buyer-010"
        assert str(donation.nonprofit_id) == "np-002"

    def test_records_platform_revenue(self):
        CheckoutDonationEventHandler().on_order_donation_pledged(
            OrderDonationPledged(
                order_id="ord-chk-011",
                nonprofit_id="np-002",
                donor_type=DonorType.PLATFORM_REVENUE.value,
                amount=1.255,
                pledged_at=datetime.now(UTC),
            )
        )

        donation = _pending()[0]
        assert donation.amount == 126
        assert donation.buyer_id is None

    def test_zero_pledge_records_nothing(self):
        CheckoutDonationEventHandler().on_order_donation_pledged(
            OrderDonationPledged(
                order_id="ord-chk-012",
                nonprofit_id="np-002",
                donor_type=DonorType.BUYER_DIRECT.value,
                amount=0.0,
                pledged_at=datetime.now(UTC),
            )
        )
        assert _pending() == []
