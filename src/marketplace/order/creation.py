"""Order creation: command and handler.

Called once per seller by the checkout service after stock has been
withdrawn. The handler trusts the line snapshots it is given; the Order
invariant checks that ``total`` matches them.
"""

import json

from protean import handle
from protean.fields import DateTime, Float, Identifier, String, Text
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.order.order import Order


@marketplace.command(part_of="Order")
class CreateOrder:
    buyer_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    lines = Text(required=True)  # JSON: list of line snapshot dicts
    total = Float(required=True, min_value=0.0)
    market_location = String(required=True, max_length=100)
    payment_method = String(max_length=10)
    payment_proof = String(max_length=500)
    note = String(max_length=500)
    delivery_type = String(max_length=20)
    delivery_address = Text()  # JSON: address dict
    delivery_fee = Float(default=0.0, min_value=0.0)
    placed_at = DateTime()


@marketplace.command_handler(part_of=Order)
class CreateOrderHandler:
    @handle(CreateOrder)
    def create_order(self, command):
        lines = json.loads(command.lines) if isinstance(command.lines, str) else command.lines
        delivery_address = (
            json.loads(command.delivery_address)
            if isinstance(command.delivery_address, str)
            else command.delivery_address
        )

        order = Order.place(
            buyer_id=command.buyer_id,
            seller_id=command.seller_id,
            lines=lines,
            total=command.total,
            market_location=command.market_location,
            payment_method=command.payment_method,
            payment_proof=command.payment_proof,
            note=command.note,
            delivery_type=command.delivery_type,
            delivery_address=delivery_address,
            delivery_fee=command.delivery_fee,
            placed_at=command.placed_at,
        )
        current_domain.repository_for(Order).add(order)
        return str(order.id)
