"""Read-side product queries."""

from dataclasses import dataclass

from protean.utils.globals import current_domain

from marketplace.product.product import Product


@dataclass(frozen=True)
class SellerProducts:
    products: list[Product]
    low_stock_count: int


def list_seller_products(seller_id) -> SellerProducts:
    products = current_domain.repository_for(Product).for_seller(seller_id)
    return SellerProducts(
        products=products,
        low_stock_count=sum(1 for product in products if product.is_low_stock),
    )


def list_products(market=None, category=None, search=None) -> list[Product]:
    """The public catalogue, optionally narrowed to one market or category."""
    return current_domain.repository_for(Product).in_catalogue(market=market, category=category, search=search)


def get_product(product_id) -> Product:
    return current_domain.repository_for(Product).find(product_id)
