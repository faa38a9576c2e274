import pytest
from marketplace.checkout.service import CheckoutService
from marketplace.notification import reset_notifier, set_notifier
from marketplace.notification.fake_adapter import FakeNotifier
from marketplace.product.management import AddProduct
from marketplace.storage import reset_file_store, set_file_store
from marketplace.storage.memory_adapter import InMemoryFileStore
from protean import current_domain
from protean.integrations.pytest import DomainFixture

SAN_NICOLAS = "San Nicolas Market"
PAMPANG = "Pampang Public Market"


@pytest.fixture(scope="session")
def marketplace_bed():
    from marketplace.domain import marketplace

    bed = DomainFixture(marketplace)
    bed.setup()
    yield bed
    bed.teardown()


@pytest.fixture(autouse=True)
def _ctx(marketplace_bed):
    with marketplace_bed.domain_context():
        yield

        for _, provider in current_domain.providers.items():
            provider._data_reset()


@pytest.fixture(autouse=True)
def notifier():
    fake = FakeNotifier()
    set_notifier(fake)
    yield fake
    reset_notifier()


@pytest.fixture(autouse=True)
def file_store():
    store = InMemoryFileStore()
    set_file_store(store)
    yield store
    reset_file_store()


@pytest.fixture()
def checkout(notifier, file_store):
    return CheckoutService(notifier=notifier, file_store=file_store)


@pytest.fixture()
def add_product():
    """Factory: list a product through the AddProduct command and return its id."""

    def _add(
        seller_id="seller-x",
        name="Tomatoes",
        price=50.0,
        quantity=20,
        market_location=SAN_NICOLAS,
        unit="kg",
        low_stock_threshold=10,
        is_available=True,
        image=None,
        category=None,
    ):
        return current_domain.process(
            AddProduct(
                seller_id=seller_id,
                name=name,
                price=price,
                quantity=quantity,
                market_location=market_location,
                unit=unit,
                low_stock_threshold=low_stock_threshold,
                is_available=is_available,
                image=image,
                category=category,
            ),
            asynchronous=False,
        )

    return _add
