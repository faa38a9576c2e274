"""Seller archival and buyer hiding: commands and handler.

The single-order commands raise on any violation. The bulk variants differ
on purpose: bulk archive is all or nothing (``StrictBatch``), bulk hide
skips orders that do not qualify (``BestEffortBatch``).
"""

import json

import structlog
from protean import handle
from protean.exceptions import ObjectNotFoundError, ValidationError
from protean.fields import Boolean, Identifier, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.batch import BestEffortBatch, StrictBatch
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Order")
class ArchiveOrder:
    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    archive = Boolean(default=True)


@marketplace.command(part_of="Order")
class BulkArchiveOrders:
    seller_id = Identifier(required=True)
    order_ids = Text(required=True)  # JSON: list of order ids
    archive = Boolean(default=True)


@marketplace.command(part_of="Order")
class HideOrderForBuyer:
    order_id = Identifier(required=True)
    buyer_id = Identifier(required=True)


@marketplace.command(part_of="Order")
class BulkHideOrdersForBuyer:
    buyer_id = Identifier(required=True)
    order_ids = Text(required=True)  # JSON: list of order ids


def _parse_ids(raw) -> list[str]:
    order_ids = json.loads(raw) if isinstance(raw, str) else raw
    if not isinstance(order_ids, list) or not order_ids:
        raise ValidationError({"order_ids": ["Order IDs array is required"]})
    return [str(order_id) for order_id in order_ids]


def _archive_flag(command) -> bool:
    return True if command.archive is None else bool(command.archive)


@marketplace.command_handler(part_of=Order)
class OrderVisibilityHandler:
    @handle(ArchiveOrder)
    def archive_order(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.ensure_seller(command.seller_id)
        order.set_archived(_archive_flag(command))
        repo.add(order)

    @handle(BulkArchiveOrders)
    def bulk_archive_orders(self, command):
        order_ids = _parse_ids(command.order_ids)
        repo = current_domain.repository_for(Order)
        orders = repo.by_ids(order_ids)

        missing = sorted(set(order_ids) - {str(order.id) for order in orders})
        if missing:
            raise ObjectNotFoundError(f"Orders not found: {', '.join(missing)}")

        archive = _archive_flag(command)

        def check(order):
            order.ensure_seller(command.seller_id)
            order.ensure_archivable()

        def mutate(order):
            order.set_archived(archive)
            repo.add(order)

        count = StrictBatch(check).run(orders, mutate)
        logger.info("Orders archived", seller_id=str(command.seller_id), count=count, archive=archive)
        return count

    @handle(HideOrderForBuyer)
    def hide_order_for_buyer(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.ensure_buyer(command.buyer_id)
        order.hide_for_buyer()
        repo.add(order)

    @handle(BulkHideOrdersForBuyer)
    def bulk_hide_orders_for_buyer(self, command):
        order_ids = _parse_ids(command.order_ids)
        repo = current_domain.repository_for(Order)

        def accept(order):
            return str(order.buyer_id) == str(command.buyer_id) and order.is_terminal and not order.is_hidden_by_buyer

        def mutate(order):
            order.hide_for_buyer()
            repo.add(order)

        count = BestEffortBatch(accept).run(repo.by_ids(order_ids), mutate)
        logger.info(
            "Orders hidden for buyer",
            buyer_id=str(command.buyer_id),
            requested=len(order_ids),
            hidden=count,
        )
        return count
