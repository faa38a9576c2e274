"""Checkout: split a buyer's cart into one order per seller.

Flow:
    1. Validate the whole request (cart, note, payment methods, delivery)
       before any stock moves.
    2. Stage payment proofs in the file store.
    3. Withdraw each line through the StockLedger, in cart order, and add a
       snapshot of the product to its seller's bucket.
    4. Issue one ``CreateOrder`` per bucket.
    5. Alert sellers of products left at low stock, then of their new order.

If anything fails after stock has moved, orders already placed are removed
and earlier withdrawals are put back. Staged proofs only outlive a checkout
whose orders were all placed. With ``PRESERVE_PARTIAL_WITHDRAWALS`` the
withdrawals are kept instead, as older deployments did.

The service calls the ledger directly and must run outside a unit of work.
"""

import json
from collections.abc import Iterator
from contextlib import contextmanager
from dataclasses import dataclass, field
from datetime import UTC, datetime

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.utils.globals import current_domain

from marketplace.notification import get_notifier
from marketplace.notification.port import LowStockAlert, NewOrderAlert, NotificationPort
from marketplace.order.creation import CreateOrder
from marketplace.order.order import DeliveryAddress, DeliveryType, Order, PaymentMethod
from marketplace.product.ledger import StockLedger
from marketplace.product.product import Product
from marketplace.settings import setting
from marketplace.storage import get_file_store
from marketplace.storage.port import FileStore

logger = structlog.get_logger(__name__)


@dataclass(frozen=True)
class CartLine:
    product_id: str
    quantity: int


@dataclass(frozen=True)
class Delivery:
    type: str = DeliveryType.PICKUP.value
    address: dict | None = None
    fee: float = 0.0


@dataclass(frozen=True)
class ProofUpload:
    content: bytes
    filename: str


@dataclass
class _SellerBucket:
    seller_id: str
    market_location: str
    lines: list[dict] = field(default_factory=list)
    total: float = 0.0


class CheckoutService:
    def __init__(
        self,
        ledger: StockLedger | None = None,
        notifier: NotificationPort | None = None,
        file_store: FileStore | None = None,
        preserve_partial_withdrawals: bool | None = None,
    ) -> None:
        self.ledger = ledger or StockLedger()
        self.notifier = notifier or get_notifier()
        self.file_store = file_store or get_file_store()
        if preserve_partial_withdrawals is None:
            preserve_partial_withdrawals = bool(setting("PRESERVE_PARTIAL_WITHDRAWALS"))
        self.preserve_partial_withdrawals = preserve_partial_withdrawals

    # -------------------------------------------------------------------
    # Entry point
    # -------------------------------------------------------------------
    def place_orders(
        self,
        buyer_id,
        cart,
        note: str | None = None,
        payment_methods: dict | None = None,
        delivery: Delivery | None = None,
        proofs: dict | None = None,
        buyer_name: str | None = None,
    ) -> list[Order]:
        """Place one order per seller for ``cart`` and return them in seller order of first appearance.

        Args:
            cart: ``CartLine`` objects or dicts with product_id and quantity.
            payment_methods: seller id → ``"qr"`` or ``"cod"``; sellers not
                listed get ``DEFAULT_PAYMENT_METHOD``.
            proofs: seller id → ``ProofUpload`` with the buyer's payment proof.

        Raises:
            ValidationError: malformed request; nothing was changed.
            ObjectNotFoundError: a product does not exist.
            InsufficientStockError: a product cannot cover its line.
        """
        lines = [self._coerce_line(line) for line in cart or []]
        delivery = delivery or Delivery()
        payment_methods = {str(seller): method for seller, method in (payment_methods or {}).items()}
        self._validate(lines, note, payment_methods, delivery)

        withdrawals: list[tuple[str, int]] = []
        order_ids: list[str] = []
        with self._staged_proofs(proofs or {}) as proof_refs:
            try:
                buckets, low_stock = self._split(lines, withdrawals)
                for bucket in buckets.values():
                    order_ids.append(
                        self._create_order(buyer_id, bucket, note, payment_methods, delivery, proof_refs)
                    )
            except Exception:
                self._discard_orders(order_ids)
                self._compensate(withdrawals)
                raise

            for seller_id, reference in proof_refs.items():
                if seller_id not in buckets:
                    self._discard_proof(reference)

        for product in low_stock:
            self._notify_low_stock(product)

        repo = current_domain.repository_for(Order)
        orders = [repo.get(order_id) for order_id in order_ids]
        for order in orders:
            self._notify_new_order(order, buyer_name)

        logger.info(
            "Checkout completed",
            buyer_id=str(buyer_id),
            order_count=len(orders),
            line_count=len(lines),
        )
        return orders

    # -------------------------------------------------------------------
    # Validation
    # -------------------------------------------------------------------
    @staticmethod
    def _coerce_line(line) -> CartLine:
        if isinstance(line, CartLine):
            return line
        try:
            return CartLine(product_id=str(line["product_id"]), quantity=int(line["quantity"]))
        except (KeyError, TypeError, ValueError):
            raise ValidationError({"items": ["Each item needs a product_id and a quantity"]}) from None

    def _validate(self, lines, note, payment_methods, delivery) -> None:
        errors: dict[str, list[str]] = {}

        if not lines:
            errors.setdefault("items", []).append("Order must contain at least one item")
        if any(line.quantity < 1 for line in lines):
            errors.setdefault("items", []).append("Quantity must be at least 1")

        max_note = int(setting("MAX_NOTE_LENGTH"))
        if note and len(note) > max_note:
            errors.setdefault("note", []).append(f"Note cannot exceed {max_note} characters")

        accepted_methods = {method.value for method in PaymentMethod}
        for seller_id, method in payment_methods.items():
            if method not in accepted_methods:
                errors.setdefault("payment_methods", []).append(
                    f"Invalid payment method '{method}' for seller {seller_id}"
                )

        if delivery.type not in {delivery_type.value for delivery_type in DeliveryType}:
            errors.setdefault("delivery", []).append(f"Invalid delivery type '{delivery.type}'")
        elif delivery.type == DeliveryType.DELIVERY.value:
            if not delivery.address or not delivery.address.get("full_address"):
                errors.setdefault("delivery", []).append("Delivery address is required for delivery orders")
            else:
                try:
                    DeliveryAddress(**delivery.address)
                except ValidationError as exc:
                    errors.setdefault("delivery", []).extend(
                        f"{key}: {message}" for key, messages in exc.messages.items() for message in messages
                    )
                except TypeError:
                    errors.setdefault("delivery", []).append("Delivery address has unknown fields")
        if (delivery.fee or 0.0) < 0:
            errors.setdefault("delivery", []).append("Delivery fee cannot be negative")

        if errors:
            raise ValidationError(errors)

    # -------------------------------------------------------------------
    # Payment proofs
    # -------------------------------------------------------------------
    @contextmanager
    def _staged_proofs(self, proofs: dict) -> Iterator[dict[str, str]]:
        """Store proofs for the duration of the checkout and delete them all if it aborts."""
        refs: dict[str, str] = {}
        try:
            for seller_id, upload in proofs.items():
                refs[str(seller_id)] = self.file_store.store(upload.content, upload.filename)
            yield refs
        except BaseException:
            for reference in refs.values():
                self._discard_proof(reference)
            raise

    def _discard_proof(self, reference: str) -> None:
        try:
            self.file_store.delete(reference)
        except Exception:
            logger.exception("Failed to delete staged payment proof", reference=reference)

    # -------------------------------------------------------------------
    # Splitting
    # -------------------------------------------------------------------
    def _split(
        self, lines: list[CartLine], withdrawals: list[tuple[str, int]]
    ) -> tuple[dict[str, _SellerBucket], list[Product]]:
        """Withdraw every line and group the snapshots by seller.

        Returns the buckets and the products the withdrawals left at low stock.
        """
        buckets: dict[str, _SellerBucket] = {}
        low_stock: list[Product] = []
        for line in lines:
            movement = self.ledger.withdraw(line.product_id, line.quantity)
            withdrawals.append((movement.product_id, line.quantity))

            product = movement.product
            seller_id = str(product.seller_id)
            bucket = buckets.get(seller_id)
            if bucket is None:
                bucket = buckets[seller_id] = _SellerBucket(seller_id=seller_id, market_location=product.market_location)

            bucket.lines.append(
                {
                    "product_id": str(product.id),
                    "name": product.name,
                    "price": product.price,
                    "quantity": line.quantity,
                    "unit": product.unit,
                    "image": product.image,
                }
            )
            bucket.total += product.price * line.quantity

            if movement.low_stock:
                low_stock.append(product)
        return buckets, low_stock

    def _create_order(self, buyer_id, bucket: _SellerBucket, note, payment_methods, delivery, proof_refs) -> str:
        command = CreateOrder(
            buyer_id=str(buyer_id),
            seller_id=bucket.seller_id,
            lines=json.dumps(bucket.lines),
            total=bucket.total,
            market_location=bucket.market_location,
            payment_method=payment_methods.get(bucket.seller_id, setting("DEFAULT_PAYMENT_METHOD")),
            payment_proof=proof_refs.get(bucket.seller_id),
            note=note,
            delivery_type=delivery.type,
            delivery_address=json.dumps(delivery.address) if delivery.address else None,
            delivery_fee=delivery.fee or 0.0,
        )
        return current_domain.process(command, asynchronous=False)

    def _discard_orders(self, order_ids: list[str]) -> None:
        """Remove orders already placed by a checkout that is being aborted."""
        if not order_ids:
            return
        repo = current_domain.repository_for(Order)
        for order_id in order_ids:
            try:
                repo._dao.delete(repo.get(order_id))
            except ObjectNotFoundError:
                pass  # Never committed
        logger.warning("Checkout aborted, removed placed orders", order_ids=order_ids)

    def _compensate(self, withdrawals: list[tuple[str, int]]) -> None:
        if not withdrawals:
            return
        if self.preserve_partial_withdrawals:
            logger.warning("Checkout aborted, keeping earlier withdrawals", withdrawals=len(withdrawals))
            return

        for product_id, quantity in reversed(withdrawals):
            try:
                self.ledger.restore(product_id, quantity, reason="checkout_aborted")
            except ObjectNotFoundError:
                logger.warning("Product vanished during checkout rollback", product_id=product_id, quantity=quantity)

    # -------------------------------------------------------------------
    # Notifications (fire-and-forget)
    # -------------------------------------------------------------------
    def _notify_low_stock(self, product: Product) -> None:
        alert = LowStockAlert(
            product_id=str(product.id),
            product_name=product.name,
            current_stock=product.quantity,
            threshold=product.low_stock_threshold,
            timestamp=datetime.now(UTC),
        )
        try:
            self.notifier.low_stock(str(product.seller_id), alert)
        except Exception:
            logger.exception("Low stock notification failed", product_id=str(product.id))

    def _notify_new_order(self, order: Order, buyer_name: str | None) -> None:
        alert = NewOrderAlert(
            order_id=str(order.id),
            buyer_name=buyer_name or "A customer",
            item_count=order.item_count,
            total=order.total,
            market_location=order.market_location,
            timestamp=datetime.now(UTC),
        )
        try:
            self.notifier.new_order(str(order.seller_id), alert)
        except Exception:
            logger.exception("New order notification failed", order_id=str(order.id))
