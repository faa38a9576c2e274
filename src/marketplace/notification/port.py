"""Seller notification port (abstract interface).

Checkout publishes two kinds of seller alerts: a product fell to low stock,
and a new order arrived. Adapters deliver them (sockets, push, logs).
Callers treat delivery as fire-and-forget.
"""

from abc import ABC, abstractmethod
from dataclasses import dataclass
from datetime import datetime


@dataclass(frozen=True)
class LowStockAlert:
    product_id: str
    product_name: str
    current_stock: int
    threshold: int
    timestamp: datetime


@dataclass(frozen=True)
class NewOrderAlert:
    order_id: str
    buyer_name: str
    item_count: int
    total: float
    market_location: str
    timestamp: datetime


class NotificationPort(ABC):
    """Abstract seller notification channel."""

    @abstractmethod
    def low_stock(self, seller_id: str, alert: LowStockAlert) -> None:
        """Tell the seller a product is running low."""
        ...

    @abstractmethod
    def new_order(self, seller_id: str, alert: NewOrderAlert) -> None:
        """Tell the seller an order was placed with them."""
        ...
