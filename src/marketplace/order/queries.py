"""Read-side order queries used by the API and by tests."""

from dataclasses import dataclass, field

from protean.utils.globals import current_domain

from marketplace.order.order import Order, OrderStatus, parse_status


@dataclass(frozen=True)
class SellerOrders:
    orders: list[Order]
    status_counts: dict[str, int] = field(default_factory=dict)

    @property
    def count(self) -> int:
        return len(self.orders)


def zero_filled_counts(orders) -> dict[str, int]:
    counts = {status.value: 0 for status in OrderStatus}
    for order in orders:
        counts[order.status] += 1
    return counts


def get_order(order_id, requester_id) -> Order:
    """Load an order for its buyer or its seller."""
    order = current_domain.repository_for(Order).find(order_id)
    order.ensure_party(requester_id)
    return order


def list_my_orders(buyer_id) -> list[Order]:
    """A buyer's orders, newest first, without the ones the buyer has hidden."""
    return current_domain.repository_for(Order).for_buyer(buyer_id)


def list_seller_orders(seller_id, status=None, archived=None) -> SellerOrders:
    """A seller's orders, newest first.

    ``status`` of None or ``"all"`` disables the status filter. ``archived``
    of None returns archived and active orders alike. ``status_counts``
    always covers every status over all of the seller's orders.
    """
    repo = current_domain.repository_for(Order)
    status_filter = None
    if status is not None and status != "all":
        status_filter = parse_status(status).value

    orders = repo.for_seller(seller_id, status=status_filter, archived=archived)
    return SellerOrders(orders=orders, status_counts=zero_filled_counts(repo.for_seller(seller_id)))
