"""Marketplace exceptions that Protean does not already provide.

Protean's ``ValidationError`` and ``ObjectNotFoundError`` cover malformed
input and missing aggregates. The classes below cover ownership, lifecycle
and stock failures. Every class carries a stable ``code`` that the API layer
puts in the error body.
"""

from protean.exceptions import ValidationError


class MarketplaceError(Exception):
    code = "internal_error"

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotAuthorizedError(MarketplaceError):
    """The principal is not allowed to act on the resource."""

    code = "unauthorized"


class NotAuthenticatedError(NotAuthorizedError):
    """No principal was supplied with the request."""


class InvalidStateError(MarketplaceError):
    """The operation is not allowed in the order's current status."""

    code = "invalid_state"


class InternalError(MarketplaceError):
    """Anything unexpected. Callers see a generic message, never the cause."""

    code = "internal_error"

    def __init__(self, message: str = "Server error") -> None:
        super().__init__(message)


class InsufficientStockError(ValidationError):
    """A product cannot cover the requested quantity.

    Raised by the stock ledger's availability check. The message names the
    product so the buyer knows which line to fix.
    """

    code = "insufficient_stock"

    def __init__(self, product_id: str, product_name: str, requested: int, available: int) -> None:
        self.product_id = product_id
        self.product_name = product_name
        self.requested = requested
        self.available = available
        super().__init__({"quantity": [f"{product_name} is not available in the requested quantity"]})
