"""Query methods for orders.

Every list method pages through the DAO so that results are never cut at
the provider's default page size.
"""

from datetime import datetime

from protean.exceptions import ObjectNotFoundError

from marketplace.domain import marketplace
from marketplace.order.order import OPEN_STATES, Order

_PAGE_SIZE = 100


@marketplace.repository(part_of=Order)
class OrderRepository:
    def _collect(self, **filters) -> list[Order]:
        query = self._dao.query.filter(**filters).order_by("-created_at")
        orders: list[Order] = []
        offset = 0
        while True:
            batch = query.offset(offset).limit(_PAGE_SIZE).all().items
            orders.extend(batch)
            if len(batch) < _PAGE_SIZE:
                return orders
            offset += _PAGE_SIZE

    def find(self, order_id) -> Order:
        """Load an order, raising ``ObjectNotFoundError`` when absent."""
        try:
            return self.get(str(order_id))
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Order not found") from None

    def by_ids(self, order_ids) -> list[Order]:
        """Orders among ``order_ids`` that exist, in no particular order."""
        ids = [str(order_id) for order_id in order_ids]
        if not ids:
            return []
        return self._collect(id__in=ids)

    def for_buyer(self, buyer_id, include_hidden=False) -> list[Order]:
        filters = {"buyer_id": str(buyer_id)}
        if not include_hidden:
            filters["is_hidden_by_buyer"] = False
        return self._collect(**filters)

    def for_seller(self, seller_id, status=None, archived=None) -> list[Order]:
        filters = {"seller_id": str(seller_id)}
        if status is not None:
            filters["status"] = status
        if archived is not None:
            filters["is_archived"] = archived
        return self._collect(**filters)

    def open_for_account(self, account_id, role: str) -> list[Order]:
        """Non-terminal orders where the account is the seller (``role="seller"``) or the buyer."""
        owner_field = "seller_id" if role == "seller" else "buyer_id"
        return self._collect(
            **{owner_field: str(account_id)},
            status__in=[status.value for status in OPEN_STATES],
        )

    def placed_between(
        self,
        start: datetime | None,
        end: datetime | None,
        seller_id=None,
        status=None,
    ) -> list[Order]:
        """Orders created in ``[start, end]``; a missing bound leaves that side open."""
        filters = {}
        if seller_id is not None:
            filters["seller_id"] = str(seller_id)
        if status is not None:
            filters["status"] = status
        if start is not None:
            filters["created_at__gte"] = start
        if end is not None:
            filters["created_at__lte"] = end
        return self._collect(**filters)
