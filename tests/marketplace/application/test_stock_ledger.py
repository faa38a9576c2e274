"""Application tests for StockLedger: the single writer of product stock."""

import gc
from concurrent.futures import ThreadPoolExecutor

import pytest
from marketplace.domain import marketplace
from marketplace.errors import InsufficientStockError, NotAuthorizedError
from marketplace.product.ledger import StockLedger, _locks
from marketplace.product.product import Product
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


@pytest.fixture()
def ledger():
    return StockLedger()


def _quantity(product_id):
    return current_domain.repository_for(Product).get(product_id).quantity


class TestWithdraw:
    def test_decrements_and_persists(self, ledger, add_product):
        product_id = add_product(quantity=20)

        movement = ledger.withdraw(product_id, 6)

        assert movement.previous_quantity == 20
        assert movement.new_quantity == 14
        assert _quantity(product_id) == 14

    def test_reports_low_stock(self, ledger, add_product):
        product_id = add_product(quantity=12, low_stock_threshold=10)
        assert ledger.withdraw(product_id, 1).low_stock is False
        assert ledger.withdraw(product_id, 2).low_stock is True

    def test_failed_check_writes_nothing(self, ledger, add_product):
        product_id = add_product(quantity=4)
        with pytest.raises(InsufficientStockError):
            ledger.withdraw(product_id, 5)
        assert _quantity(product_id) == 4

    def test_zero_quantity_rejected(self, ledger, add_product):
        product_id = add_product(quantity=4)
        with pytest.raises(ValidationError):
            ledger.withdraw(product_id, 0)

    def test_unknown_product(self, ledger):
        with pytest.raises(ObjectNotFoundError):
            ledger.withdraw("no-such-product", 1)

    def test_locks_are_not_kept_after_movements(self, ledger, add_product):
        product_id = add_product(quantity=5)
        ledger.withdraw(product_id, 1)
        with pytest.raises(ObjectNotFoundError):
            ledger.withdraw("ghost", 1)

        gc.collect()

        assert product_id not in _locks
        assert "ghost" not in _locks

    def test_rereads_stock_before_each_withdrawal(self, ledger, add_product):
        product_id = add_product(quantity=5)
        stale = current_domain.repository_for(Product).get(product_id)

        ledger.withdraw(product_id, 4)

        assert stale.quantity == 5
        with pytest.raises(InsufficientStockError):
            ledger.withdraw(product_id, 4)
        assert _quantity(product_id) == 1

    def test_concurrent_withdrawals_never_oversell(self, ledger, add_product):
        product_id = add_product(quantity=20)

        def attempt(_):
            with marketplace.domain_context():
                try:
                    ledger.withdraw(product_id, 3)
                except InsufficientStockError:
                    return False
                return True

        with ThreadPoolExecutor(max_workers=8) as pool:
            results = list(pool.map(attempt, range(10)))

        assert results.count(True) == 6
        assert _quantity(product_id) == 2


class TestRestore:
    def test_puts_units_back(self, ledger, add_product):
        product_id = add_product(quantity=10)
        ledger.withdraw(product_id, 4)

        movement = ledger.restore(product_id, 4, reason="order_cancelled")

        assert movement.new_quantity == 10
        assert _quantity(product_id) == 10

    def test_unknown_product(self, ledger):
        with pytest.raises(ObjectNotFoundError):
            ledger.restore("no-such-product", 1, reason="order_cancelled")


class TestRestock:
    def test_owner_restocks(self, ledger, add_product):
        product_id = add_product(seller_id="seller-x", quantity=3)

        movement = ledger.restock(product_id, "seller-x", 25)

        assert movement.previous_quantity == 3
        assert _quantity(product_id) == 28

    def test_other_seller_rejected(self, ledger, add_product):
        product_id = add_product(seller_id="seller-x", quantity=3)

        with pytest.raises(NotAuthorizedError):
            ledger.restock(product_id, "seller-y", 25)

        assert _quantity(product_id) == 3
