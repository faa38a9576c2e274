"""Product aggregate: a seller's listing and its sellable stock.

``quantity`` is the single source of truth for what can be sold. It is only
changed through ``withdraw`` and ``replenish``, and in practice only by the
StockLedger, which serialises those calls per product.
"""

from datetime import UTC, datetime
from enum import Enum

from protean.exceptions import ValidationError
from protean.fields import Boolean, DateTime, Float, Identifier, Integer, String

from marketplace.domain import marketplace
from marketplace.errors import InsufficientStockError, NotAuthorizedError
from marketplace.product.events import (
    LowStockDetected,
    ProductAdded,
    ProductDetailsUpdated,
    StockReplenished,
    StockWithdrawn,
)


class Unit(Enum):
    KG = "kg"
    G = "g"
    PIECE = "piece"
    BUNDLE = "bundle"
    PACK = "pack"
    DOZEN = "dozen"
    LITER = "liter"
    ML = "ml"


class Market(Enum):
    SAN_NICOLAS = "San Nicolas Market"
    PAMPANG = "Pampang Public Market"


DEFAULT_LOW_STOCK_THRESHOLD = 10


@marketplace.aggregate
class Product:
    seller_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    description = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(default=0, min_value=0)
    unit = String(choices=Unit, default=Unit.PIECE.value)
    category = String(max_length=50, default="others")
    market_location = String(required=True, choices=Market)
    is_available = Boolean(default=True)
    image = String(max_length=500)
    low_stock_threshold = Integer(default=DEFAULT_LOW_STOCK_THRESHOLD, min_value=0)
    created_at = DateTime()
    updated_at = DateTime()

    @classmethod
    def add(
        cls,
        seller_id,
        name,
        price,
        market_location,
        quantity=0,
        unit=None,
        category=None,
        description=None,
        image=None,
        low_stock_threshold=None,
        is_available=True,
    ):
        now = datetime.now(UTC)
        product = cls(
            seller_id=seller_id,
            name=name,
            description=description,
            price=price,
            quantity=quantity,
            unit=unit or Unit.PIECE.value,
            category=category or "others",
            market_location=market_location,
            is_available=is_available,
            image=image,
            low_stock_threshold=(
                low_stock_threshold if low_stock_threshold is not None else DEFAULT_LOW_STOCK_THRESHOLD
            ),
            created_at=now,
            updated_at=now,
        )
        product.raise_(
            ProductAdded(
                product_id=str(product.id),
                seller_id=str(seller_id),
                name=name,
                price=price,
                quantity=product.quantity,
                market_location=market_location,
                added_at=now,
            )
        )
        return product

    @property
    def is_low_stock(self) -> bool:
        return 0 < self.quantity <= self.low_stock_threshold

    def ensure_owned_by(self, seller_id, action: str = "manage") -> None:
        if str(self.seller_id) != str(seller_id):
            raise NotAuthorizedError(f"Not authorized to {action} this product")

    def can_supply(self, quantity: int) -> bool:
        return bool(self.is_available) and self.quantity >= quantity

    def withdraw(self, quantity: int) -> None:
        """Take ``quantity`` units out of stock, or raise without changing anything."""
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})
        if not self.can_supply(quantity):
            raise InsufficientStockError(str(self.id), self.name, quantity, self.quantity)

        previous = self.quantity
        now = datetime.now(UTC)
        self.quantity = previous - quantity
        self.updated_at = now

        self.raise_(
            StockWithdrawn(
                product_id=str(self.id),
                seller_id=str(self.seller_id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                withdrawn_at=now,
            )
        )
        if self.is_low_stock:
            self.raise_(
                LowStockDetected(
                    product_id=str(self.id),
                    seller_id=str(self.seller_id),
                    name=self.name,
                    current_quantity=self.quantity,
                    threshold=self.low_stock_threshold,
                    detected_at=now,
                )
            )

    def replenish(self, quantity: int, reason: str) -> None:
        if quantity < 1:
            raise ValidationError({"quantity": ["Quantity must be at least 1"]})

        previous = self.quantity
        now = datetime.now(UTC)
        self.quantity = previous + quantity
        self.updated_at = now

        self.raise_(
            StockReplenished(
                product_id=str(self.id),
                seller_id=str(self.seller_id),
                quantity=quantity,
                previous_quantity=previous,
                new_quantity=self.quantity,
                reason=reason,
                replenished_at=now,
            )
        )

    def update_details(
        self,
        name=None,
        description=None,
        price=None,
        image=None,
        is_available=None,
        low_stock_threshold=None,
    ):
        """Change listing details. Orders already placed keep their own snapshots."""
        if name is not None:
            self.name = name
        if description is not None:
            self.description = description
        if price is not None:
            self.price = price
        if image is not None:
            self.image = image
        if is_available is not None:
            self.is_available = is_available
        if low_stock_threshold is not None:
            self.low_stock_threshold = low_stock_threshold

        now = datetime.now(UTC)
        self.updated_at = now

        self.raise_(
            ProductDetailsUpdated(
                product_id=str(self.id),
                seller_id=str(self.seller_id),
                name=self.name,
                price=self.price,
                is_available=self.is_available,
                updated_at=now,
            )
        )
