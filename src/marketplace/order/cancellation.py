"""Order cancellation: customer cancellation and cascade cancellation.

A customer cancellation puts every line's quantity back on its product.
The command only cancels the order; ``cancel_by_customer`` runs it and then
restores stock through the StockLedger once the order change is committed.
A second cancellation is rejected by the aggregate, so stock is restored
at most once.

Cascade cancellation (an account was removed) does not touch stock.
"""

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.product.ledger import StockLedger

logger = structlog.get_logger(__name__)

ACCOUNT_ROLES = ("seller", "customer")


@marketplace.command(part_of="Order")
class CancelOrderByCustomer:
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)
    reason = String(max_length=500)


@marketplace.command(part_of="Order")
class CancelOrdersForRemovedAccount:
    account_id = Identifier(required=True)
    role = String(required=True, max_length=20)


@marketplace.command_handler(part_of=Order)
class CancelOrderHandler:
    @handle(CancelOrderByCustomer)
    def cancel_order_by_customer(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.ensure_buyer(command.buyer_id)
        order.cancel_by_customer(reason=command.reason)
        repo.add(order)

    @handle(CancelOrdersForRemovedAccount)
    def cancel_orders_for_removed_account(self, command):
        if command.role not in ACCOUNT_ROLES:
            raise ValidationError({"role": [f"Unknown account role: {command.role}"]})

        repo = current_domain.repository_for(Order)
        orders = repo.open_for_account(command.account_id, command.role)
        for order in orders:
            order.cancel_for_removed_account(command.role)
            repo.add(order)

        logger.info(
            "Cancelled orders of removed account",
            account_id=str(command.account_id),
            role=command.role,
            count=len(orders),
        )
        return len(orders)


def restore_stock(order: Order, ledger: StockLedger) -> int:
    """Put each line's quantity back on its product. Returns the number of lines restored."""
    restored = 0
    for line in order.lines:
        try:
            ledger.restore(line.product_id, line.quantity, reason=f"order_cancelled:{order.id}")
        except ObjectNotFoundError:
            logger.warning(
                "Product no longer exists, skipping stock restore",
                order_id=str(order.id),
                product_id=str(line.product_id),
                quantity=line.quantity,
            )
            continue
        restored += 1
    return restored


def cancel_by_customer(order_id, buyer_id, reason=None, ledger: StockLedger | None = None) -> Order:
    """Cancel a pending or confirmed order on the buyer's behalf and restore its stock.

    Must be called outside a unit of work (see ``StockLedger``).
    """
    current_domain.process(
        CancelOrderByCustomer(order_id=str(order_id), buyer_id=str(buyer_id), reason=reason),
        asynchronous=False,
    )
    order = current_domain.repository_for(Order).find(order_id)
    restore_stock(order, ledger or StockLedger())
    return order
