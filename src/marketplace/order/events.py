"""Domain events for the Order aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Order")
class OrderPlaced:
    """A checkout produced this order for one seller."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    item_count = Integer(required=True)
    total = Float(required=True)
    market_location = String(required=True)
    payment_method = String(required=True)
    delivery_type = String(required=True)
    placed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderStatusChanged:
    __version__ = 1

    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    previous_status = String(required=True)
    new_status = String(required=True)
    note = String(max_length=500)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class PaymentVerified:
    """The seller confirmed receipt of payment; the order moved to preparing."""

    __version__ = 1

    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    payment_method = String(required=True)
    previous_status = String(required=True)
    verified_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderCancelled:
    """The order was cancelled by its buyer or by the system."""

    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    cancelled_by = String(required=True)
    previous_status = String(required=True)
    reason = String(max_length=500)
    restock_required = Boolean(default=False)
    cancelled_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderArchiveToggled:
    __version__ = 1

    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    archived = Boolean(required=True)
    changed_at = DateTime(required=True)


@marketplace.event(part_of="Order")
class OrderHiddenByBuyer:
    __version__ = 1

    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    hidden_at = DateTime(required=True)
