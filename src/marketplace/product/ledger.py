"""StockLedger: the only writer of ``Product.quantity``.

Each movement re-reads the product, checks and writes it while holding a
lock dedicated to that product. The ledger must be called outside a unit of
work: ``repository.add`` then commits before the lock is released, so a
concurrent withdrawal always sees the previous one's result.

The locks are per process. Deployments running several worker processes
against one database need a conditional ``UPDATE ... WHERE quantity >= n``
in the repository instead.
"""

import threading
import weakref
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass

import structlog
from protean.exceptions import ObjectNotFoundError
from protean.utils.globals import current_domain

from marketplace.product.product import Product

logger = structlog.get_logger(__name__)

# Entries disappear once no movement holds the lock.
_locks: weakref.WeakValueDictionary[str, threading.Lock] = weakref.WeakValueDictionary()
_locks_guard = threading.Lock()


def _lock_for(product_id: str) -> threading.Lock:
    with _locks_guard:
        lock = _locks.get(product_id)
        if lock is None:
            lock = _locks[product_id] = threading.Lock()
        return lock


@dataclass(frozen=True)
class StockMovement:
    """Outcome of one ledger operation, carrying the product as written."""

    product: Product
    quantity: int
    previous_quantity: int

    @property
    def product_id(self) -> str:
        return str(self.product.id)

    @property
    def new_quantity(self) -> int:
        return self.product.quantity

    @property
    def low_stock(self) -> bool:
        return self.product.is_low_stock


class StockLedger:
    @contextmanager
    def _locked(self, product_id) -> Iterator[Product]:
        with _lock_for(str(product_id)):
            yield self._load(product_id)

    def _load(self, product_id) -> Product:
        try:
            return current_domain.repository_for(Product).get(str(product_id))
        except ObjectNotFoundError:
            raise ObjectNotFoundError(f"Product not found: {product_id}") from None

    def withdraw(self, product_id, quantity: int) -> StockMovement:
        """Decrement stock iff the product is available and holds ``quantity`` units.

        Raises ``ObjectNotFoundError`` for an unknown product and
        ``InsufficientStockError`` when the check fails. Nothing is written on
        failure.
        """
        with self._locked(product_id) as product:
            previous = product.quantity
            product.withdraw(quantity)
            current_domain.repository_for(Product).add(product)

        logger.debug(
            "Stock withdrawn",
            product_id=str(product_id),
            quantity=quantity,
            remaining=product.quantity,
        )
        return StockMovement(product=product, quantity=quantity, previous_quantity=previous)

    def restore(self, product_id, quantity: int, reason: str) -> StockMovement:
        """Put units back, e.g. after a cancellation or an aborted checkout."""
        with self._locked(product_id) as product:
            previous = product.quantity
            product.replenish(quantity, reason=reason)
            current_domain.repository_for(Product).add(product)

        logger.info(
            "Stock restored",
            product_id=str(product_id),
            quantity=quantity,
            reason=reason,
            new_quantity=product.quantity,
        )
        return StockMovement(product=product, quantity=quantity, previous_quantity=previous)

    def restock(self, product_id, seller_id, quantity: int) -> StockMovement:
        """Seller-initiated restock. Only the owning seller may add stock."""
        with self._locked(product_id) as product:
            product.ensure_owned_by(seller_id)
            previous = product.quantity
            product.replenish(quantity, reason="restock")
            current_domain.repository_for(Product).add(product)

        logger.info(
            "Product restocked",
            product_id=str(product_id),
            seller_id=str(seller_id),
            quantity=quantity,
            new_quantity=product.quantity,
        )
        return StockMovement(product=product, quantity=quantity, previous_quantity=previous)
