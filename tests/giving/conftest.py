import itertools

import pytest
from giving.donation.donation import DonorType
from giving.donation.recording import RecordDonation
from giving.nonprofit import set_directory
from giving.nonprofit.fake_adapter import InMemoryNonprofitDirectory
from protean import current_domain
from protean.integrations.pytest import DomainFixture


@pytest.fixture(scope="session")
def giving_bed():
    from giving.domain import giving

    bed = DomainFixture(giving)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(giving_bed):
    with giving_bed.domain_context():
        yield


_orders = itertools.count(1)


@pytest.fixture()
def record_donation():
    """Record a pending donation through the command path and return its id."""

    def _record(
        nonprofit_id="np-001",
        amount=1000,
        donor_type=DonorType.SELLER_CONTRIBUTION.value,
        order_id=None,
        shop_id="shop-001",
        buyer_id=None,
    ):
        return current_domain.process(
            RecordDonation(
                nonprofit_id=nonprofit_id,
                order_id=order_id or f"ord-{next(_orders):05d}",
                shop_id=shop_id,
                buyer_id=buyer_id,
                amount=amount,
                donor_type=donor_type,
            ),
            asynchronous=False,
        )

    return _record


@pytest.fixture()
def directory():
    directory = InMemoryNonprofitDirectory()
    directory.register("np-001", "Ocean Cleanup Fund", ein="12-3456789", logo="https://cdn.example.org/ocean.png")
    directory.register("np-002", "City Food Bank", ein="98-7654321")
    set_directory(directory)
    return directory
