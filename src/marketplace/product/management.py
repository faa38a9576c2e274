"""Product listing: commands and handler for adding, editing and deleting products.

Stock levels are not edited here. Restocking goes through the StockLedger
(see ``marketplace.product.ledger``) so that it serialises with checkouts.
"""

import structlog
from protean import handle
from protean.fields import Boolean, Float, Identifier, Integer, String
from protean.utils.globals import current_domain

from marketplace.domain import marketplace
from marketplace.product.product import Product

logger = structlog.get_logger(__name__)


@marketplace.command(part_of="Product")
class AddProduct:
    seller_id = Identifier(required=True)
    name = String(required=True, max_length=100)
    description = String(max_length=500)
    price = Float(required=True, min_value=0.0)
    quantity = Integer(default=0, min_value=0)
    unit = String(max_length=20)
    category = String(max_length=50)
    market_location = String(required=True, max_length=100)
    image = String(max_length=500)
    low_stock_threshold = Integer(min_value=0)
    is_available = Boolean(default=True)


@marketplace.command(part_of="Product")
class UpdateProductDetails:
    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)
    name = String(max_length=100)
    description = String(max_length=500)
    price = Float(min_value=0.0)
    image = String(max_length=500)
    is_available = Boolean()
    low_stock_threshold = Integer(min_value=0)


@marketplace.command(part_of="Product")
class DeleteProduct:
    product_id = Identifier(required=True)
    seller_id = Identifier(required=True)


@marketplace.command_handler(part_of=Product)
class ProductManagementHandler:
    @handle(AddProduct)
    def add_product(self, command):
        product = Product.add(
            seller_id=command.seller_id,
            name=command.name,
            description=command.description,
            price=command.price,
            quantity=command.quantity or 0,
            unit=command.unit,
            category=command.category,
            market_location=command.market_location,
            image=command.image,
            low_stock_threshold=command.low_stock_threshold,
            is_available=command.is_available if command.is_available is not None else True,
        )
        current_domain.repository_for(Product).add(product)
        return str(product.id)

    @handle(UpdateProductDetails)
    def update_product_details(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.get(command.product_id)
        product.ensure_owned_by(command.seller_id)
        product.update_details(
            name=command.name,
            description=command.description,
            price=command.price,
            image=command.image,
            is_available=command.is_available,
            low_stock_threshold=command.low_stock_threshold,
        )
        repo.add(product)

    @handle(DeleteProduct)
    def delete_product(self, command):
        repo = current_domain.repository_for(Product)
        product = repo.find(command.product_id)
        product.ensure_owned_by(command.seller_id, action="delete")
        repo._dao.delete(product)
        logger.info("Product deleted", product_id=str(product.id), seller_id=str(product.seller_id))
