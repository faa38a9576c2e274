"""Marketplace API package."""

from marketplace.api.errors import register_error_handlers
from marketplace.api.routes import order_router, product_router

__all__ = ["order_router", "product_router", "register_error_handlers"]
