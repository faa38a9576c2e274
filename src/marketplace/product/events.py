"""Domain events for the Product aggregate."""

from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace


@marketplace.event(part_of="Product")
class ProductAdded:
    """A seller listed a new product in one of the markets."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    quantity = Integer(required=True)
    market_location = String(required=True)
    added_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class ProductDetailsUpdated:
    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(required=True)
    price = Float(required=True)
    is_available = Boolean(required=True)
    updated_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class StockWithdrawn:
    """Units were taken out of stock for a buyer's order."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    withdrawn_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class StockReplenished:
    """Units were put back into stock by a restock, a cancellation or an aborted checkout."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    quantity = Integer(required=True)
    previous_quantity = Integer(required=True)
    new_quantity = Integer(required=True)
    reason = String(required=True, max_length=100)
    replenished_at = DateTime(required=True)


@marketplace.event(part_of="Product")
class LowStockDetected:
    """A withdrawal left the product above zero but at or below its threshold."""

    __version__ = 1

    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(required=True)
    current_quantity = Integer(required=True)
    threshold = Integer(required=True)
    detected_at = DateTime(required=True)
