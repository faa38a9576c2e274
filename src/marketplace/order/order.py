"""Order aggregate: one seller's share of a buyer's checkout.

Lines are price/name snapshots taken at checkout and are never edited
afterwards, so ``total`` always equals the sum of the lines' price times
quantity. ``delivery_fee`` is charged on top and kept outside ``total``.

Lifecycle (``completed`` and ``cancelled`` are terminal):
    pending → confirmed → preparing → ready → completed
    any open status → cancelled

Who may move an order where is recorded in ``_TRANSITIONS``, keyed by
``(current status, actor)``. Seller status updates only consult it when
strict transitions are switched on; cancellations always do.
"""

from datetime import UTC, datetime
from enum import Enum

from protean import invariant
from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, HasMany, Identifier, Integer, String, ValueObject

from marketplace.domain import marketplace
from marketplace.errors import InvalidStateError, NotAuthorizedError
from marketplace.order.events import (
    OrderArchiveToggled,
    OrderCancelled,
    OrderHiddenByBuyer,
    OrderPlaced,
    OrderStatusChanged,
    PaymentVerified,
)


# ---------------------------------------------------------------------------
# Enums
# ---------------------------------------------------------------------------
class OrderStatus(Enum):
    PENDING = "pending"
    CONFIRMED = "confirmed"
    PREPARING = "preparing"
    READY = "ready"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class PaymentMethod(Enum):
    QR = "qr"
    COD = "cod"


class DeliveryType(Enum):
    PICKUP = "pickup"
    DELIVERY = "delivery"


class Actor(Enum):
    SELLER = "seller"
    CUSTOMER = "customer"
    SYSTEM = "system"


TERMINAL_STATES = frozenset({OrderStatus.COMPLETED, OrderStatus.CANCELLED})
OPEN_STATES = frozenset(set(OrderStatus) - TERMINAL_STATES)
CUSTOMER_CANCELLABLE_STATES = frozenset({OrderStatus.PENDING, OrderStatus.CONFIRMED})

_TRANSITIONS = {
    (OrderStatus.PENDING, Actor.SELLER): {OrderStatus.CONFIRMED, OrderStatus.PREPARING, OrderStatus.CANCELLED},
    (OrderStatus.CONFIRMED, Actor.SELLER): {OrderStatus.PREPARING, OrderStatus.READY, OrderStatus.CANCELLED},
    (OrderStatus.PREPARING, Actor.SELLER): {OrderStatus.READY, OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    (OrderStatus.READY, Actor.SELLER): {OrderStatus.COMPLETED, OrderStatus.CANCELLED},
    (OrderStatus.PENDING, Actor.CUSTOMER): {OrderStatus.CANCELLED},
    (OrderStatus.CONFIRMED, Actor.CUSTOMER): {OrderStatus.CANCELLED},
    **{(status, Actor.SYSTEM): {OrderStatus.CANCELLED} for status in OPEN_STATES},
}


def allowed_transitions(current: OrderStatus, actor: Actor) -> frozenset[OrderStatus]:
    """Statuses ``actor`` may move an order to from ``current``."""
    return frozenset(_TRANSITIONS.get((current, actor), set()))


def parse_status(value) -> OrderStatus:
    try:
        return value if isinstance(value, OrderStatus) else OrderStatus(value)
    except ValueError:
        raise ValidationError({"status": ["Invalid status"]}) from None


# ---------------------------------------------------------------------------
# Value Objects
# ---------------------------------------------------------------------------
@marketplace.value_object(part_of="Order")
class DeliveryAddress:
    """Where a delivery order goes, as entered at checkout."""

    full_address = String(required=True, max_length=500)
    barangay = String(max_length=100)
    city = String(max_length=100)
    province = String(max_length=100)
    postal_code = String(max_length=20)
    contact_phone = String(max_length=30)


# ---------------------------------------------------------------------------
# Entities
# ---------------------------------------------------------------------------
@marketplace.entity(part_of="Order")
class OrderLine:
    """Snapshot of a product at checkout: name, price, unit and image as they were then."""

    product_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(required=True, min_value=1)
    unit = String(required=True, max_length=20)
    image = String(max_length=500)

    @property
    def subtotal(self) -> float:
        return self.price * self.quantity


@marketplace.entity(part_of="Order")
class StatusEntry:
    status = String(required=True, choices=OrderStatus)
    note = String(max_length=500)
    timestamp = DateTime(required=True)


# ---------------------------------------------------------------------------
# Aggregate Root
# ---------------------------------------------------------------------------
@marketplace.aggregate
class Order:
    buyer_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    lines = HasMany(OrderLine)
    total = Float(required=True, min_value=0.0)
    status = String(choices=OrderStatus, default=OrderStatus.PENDING.value)
    payment_method = String(choices=PaymentMethod, default=PaymentMethod.QR.value)
    payment_proof = String(max_length=500)
    payment_verified = Boolean(default=False)
    market_location = String(required=True, max_length=100)
    note = String(max_length=500)
    status_history = HasMany(StatusEntry)
    is_archived = Boolean(default=False)
    is_hidden_by_buyer = Boolean(default=False)
    delivery_type = String(choices=DeliveryType, default=DeliveryType.PICKUP.value)
    delivery_address = ValueObject(DeliveryAddress)
    delivery_fee = Float(default=0.0, min_value=0.0)
    created_at = DateTime()
    updated_at = DateTime()

    @invariant.post
    def total_must_match_line_snapshots(self):
        if not self.lines:
            return
        expected = 0.0
        for line in self.lines:
            expected += line.price * line.quantity
        if abs(expected - (self.total or 0.0)) > 1e-6:
            raise ValidationError({"total": [f"Order total {self.total} does not match its lines ({expected})"]})

    @invariant.post
    def delivery_orders_need_an_address(self):
        if self.delivery_type == DeliveryType.DELIVERY.value and self.delivery_address is None:
            raise ValidationError({"delivery_address": ["Delivery address is required for delivery orders"]})

    # -------------------------------------------------------------------
    # Factory method
    # -------------------------------------------------------------------
    @classmethod
    def place(
        cls,
        buyer_id,
        seller_id,
        lines,
        market_location,
        total=None,
        payment_method=None,
        payment_proof=None,
        note=None,
        delivery_type=None,
        delivery_address=None,
        delivery_fee=0.0,
        placed_at=None,
    ):
        """Create a pending order from checkout line snapshots.

        Args:
            lines: dicts with product_id, name, price, quantity, unit and image.
            total: the splitter's running total; computed from ``lines`` when
                omitted and checked against them by the aggregate invariant.
            delivery_address: dict of ``DeliveryAddress`` fields, or None.
            placed_at: creation time, defaults to now (UTC).
        """
        if not lines:
            raise ValidationError({"lines": ["Order must contain at least one item"]})

        now = placed_at or datetime.now(UTC)
        snapshots = [OrderLine(**line) for line in lines]
        if total is None:
            total = 0.0
            for line in snapshots:
                total += line.price * line.quantity

        address = None
        if delivery_address:
            address = (
                delivery_address
                if isinstance(delivery_address, DeliveryAddress)
                else DeliveryAddress(**delivery_address)
            )

        order = cls(
            buyer_id=buyer_id,
            seller_id=seller_id,
            lines=snapshots,
            total=total,
            status=OrderStatus.PENDING.value,
            payment_method=payment_method or PaymentMethod.QR.value,
            payment_proof=payment_proof,
            market_location=market_location,
            note=note,
            status_history=[StatusEntry(status=OrderStatus.PENDING.value, note="Order placed", timestamp=now)],
            delivery_type=delivery_type or DeliveryType.PICKUP.value,
            delivery_address=address,
            delivery_fee=delivery_fee or 0.0,
            created_at=now,
            updated_at=now,
        )
        order.raise_(
            OrderPlaced(
                order_id=str(order.id),
                buyer_id=str(buyer_id),
                seller_id=str(seller_id),
                item_count=order.item_count,
                total=order.total,
                market_location=market_location,
                payment_method=order.payment_method,
                delivery_type=order.delivery_type,
                placed_at=now,
            )
        )
        return order

    # -------------------------------------------------------------------
    # Read helpers
    # -------------------------------------------------------------------
    @property
    def item_count(self) -> int:
        return sum(line.quantity for line in self.lines)

    @property
    def current_status(self) -> OrderStatus:
        return OrderStatus(self.status)

    @property
    def is_terminal(self) -> bool:
        return self.current_status in TERMINAL_STATES

    def history(self) -> list[StatusEntry]:
        """Status history, oldest first."""
        return sorted(self.status_history, key=lambda entry: entry.timestamp)

    def ensure_seller(self, seller_id) -> None:
        if str(self.seller_id) != str(seller_id):
            raise NotAuthorizedError("Not authorized to update this order")

    def ensure_buyer(self, buyer_id) -> None:
        if str(self.buyer_id) != str(buyer_id):
            raise NotAuthorizedError("Not authorized to update this order")

    def ensure_party(self, principal_id) -> None:
        if str(principal_id) not in (str(self.buyer_id), str(self.seller_id)):
            raise NotAuthorizedError("Not authorized to view this order")

    # -------------------------------------------------------------------
    # Status transitions
    # -------------------------------------------------------------------
    def _record(self, status: OrderStatus, note: str) -> datetime:
        now = datetime.now(UTC)
        self.status = status.value
        self.add_status_history(StatusEntry(status=status.value, note=note, timestamp=now))
        self.updated_at = now
        return now

    def update_status(self, new_status, note=None, strict=False):
        """Seller sets a new status.

        Any valid status is accepted unless ``strict`` is set, in which case
        the seller's transition table is enforced.
        """
        target = parse_status(new_status)
        current = self.current_status
        if strict and target not in allowed_transitions(current, Actor.SELLER):
            raise InvalidStateError(f"Cannot change order status from '{current.value}' to '{target.value}'")

        note = note or f"Status updated to {target.value}"
        now = self._record(target, note)

        self.raise_(
            OrderStatusChanged(
                order_id=str(self.id),
                seller_id=str(self.seller_id),
                previous_status=current.value,
                new_status=target.value,
                note=note,
                changed_at=now,
            )
        )

    def verify_payment(self, strict=False):
        """Mark payment as received and move the order to preparing.

        Repeating the verification is allowed. Under ``strict`` a terminal
        order can no longer be verified.
        """
        current = self.current_status
        if strict and current in TERMINAL_STATES:
            raise InvalidStateError(f"Cannot verify payment for order with status '{current.value}'")

        self.payment_verified = True
        now = self._record(OrderStatus.PREPARING, "Payment verified by seller")

        self.raise_(
            PaymentVerified(
                order_id=str(self.id),
                seller_id=str(self.seller_id),
                payment_method=self.payment_method,
                previous_status=current.value,
                verified_at=now,
            )
        )

    def cancel_by_customer(self, reason=None):
        current = self.current_status
        if OrderStatus.CANCELLED not in allowed_transitions(current, Actor.CUSTOMER):
            raise InvalidStateError(
                f"Cannot cancel order with status '{current.value}'. "
                "Only pending or confirmed orders can be cancelled."
            )

        note = "Cancelled by customer"
        if reason:
            note = f"{note}. Reason: {reason}"
        now = self._record(OrderStatus.CANCELLED, note)

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                seller_id=str(self.seller_id),
                cancelled_by=Actor.CUSTOMER.value,
                previous_status=current.value,
                reason=reason,
                restock_required=True,
                cancelled_at=now,
            )
        )

    def cancel_for_removed_account(self, role: str):
        """System cancellation after the seller or buyer account was removed. Stock stays as is."""
        current = self.current_status
        if OrderStatus.CANCELLED not in allowed_transitions(current, Actor.SYSTEM):
            raise InvalidStateError(f"Cannot cancel order with status '{current.value}'")

        reason = f"{role.capitalize()} account was removed"
        now = self._record(OrderStatus.CANCELLED, f"Cancelled by system. Reason: {reason}")

        self.raise_(
            OrderCancelled(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                seller_id=str(self.seller_id),
                cancelled_by=Actor.SYSTEM.value,
                previous_status=current.value,
                reason=reason,
                restock_required=False,
                cancelled_at=now,
            )
        )

    # -------------------------------------------------------------------
    # Visibility
    # -------------------------------------------------------------------
    def ensure_archivable(self) -> None:
        if not self.is_terminal:
            raise InvalidStateError("Only completed or cancelled orders can be archived")

    def set_archived(self, archived=True):
        self.ensure_archivable()

        now = datetime.now(UTC)
        self.is_archived = archived
        self.updated_at = now

        self.raise_(
            OrderArchiveToggled(
                order_id=str(self.id),
                seller_id=str(self.seller_id),
                archived=archived,
                changed_at=now,
            )
        )

    def ensure_hideable(self) -> None:
        if not self.is_terminal:
            raise InvalidStateError("Only completed or cancelled orders can be hidden")

    def hide_for_buyer(self):
        self.ensure_hideable()

        now = datetime.now(UTC)
        self.is_hidden_by_buyer = True
        self.updated_at = now

        self.raise_(
            OrderHiddenByBuyer(
                order_id=str(self.id),
                buyer_id=str(self.buyer_id),
                hidden_at=now,
            )
        )
