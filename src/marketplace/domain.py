"""Marketplace bounded context: products, stock and per-seller orders.

A buyer's cart is split into one Order per seller at checkout. Stock is
withdrawn through the StockLedger, orders move through a seller/customer/
system status lifecycle, and sellers read analytics over their orders.
"""

import structlog
from protean.domain import Domain

marketplace = Domain(name="marketplace")

logger = structlog.get_logger(__name__)
