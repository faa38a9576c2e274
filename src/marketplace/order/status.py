"""Seller-driven status changes: commands and handler."""

from protean import handle
from protean.fields import Identifier, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order
from marketplace.settings import setting


@marketplace.command(part_of="Order")
class UpdateOrderStatus:
    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    status = String(required=True, max_length=20)
    note = String(max_length=500)


@marketplace.command(part_of="Order")
class VerifyPayment:
    order_id = Identifier(required=True)
    seller_id = Identifier(required=True)


@marketplace.command_handler(part_of=Order)
class OrderStatusHandler:
    @handle(UpdateOrderStatus)
    def update_status(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.ensure_seller(command.seller_id)
        order.update_status(
            command.status,
            note=command.note,
            strict=bool(setting("STRICT_STATUS_TRANSITIONS")),
        )
        repo.add(order)

    @handle(VerifyPayment)
    def verify_payment(self, command):
        repo = current_domain.repository_for(Order)
        order = repo.find(command.order_id)
        order.ensure_seller(command.seller_id)
        order.verify_payment(strict=bool(setting("STRICT_STATUS_TRANSITIONS")))
        repo.add(order)
