"""Query methods for products."""

from protean.exceptions import ObjectNotFoundError

from marketplace.domain import marketplace
from marketplace.product.product import Product

_PAGE_SIZE = 100


@marketplace.repository(part_of=Product)
class ProductRepository:
    def _collect(self, **filters) -> list[Product]:
        query = self._dao.query.filter(**filters).order_by("-created_at")
        products: list[Product] = []
        offset = 0
        while True:
            batch = query.offset(offset).limit(_PAGE_SIZE).all().items
            products.extend(batch)
            if len(batch) < _PAGE_SIZE:
                return products
            offset += _PAGE_SIZE

    def find(self, product_id) -> Product:
        """Load a product, raising ``ObjectNotFoundError`` when absent."""
        try:
            return self.get(str(product_id))
        except ObjectNotFoundError:
            raise ObjectNotFoundError("Product not found") from None

    def for_seller(self, seller_id) -> list[Product]:
        """All of a seller's products, newest first."""
        return self._collect(seller_id=str(seller_id))

    def in_catalogue(self, market=None, category=None, search=None) -> list[Product]:
        """Products a buyer can order right now, newest first.

        Only available products with stock left are listed. ``category`` of
        ``"all"`` means no category filter; ``search`` matches a part of the
        name regardless of case.
        """
        filters = {"is_available": True}
        if market:
            filters["market_location"] = market
        if category and category != "all":
            filters["category"] = category

        products = [product for product in self._collect(**filters) if product.quantity > 0]
        if search:
            needle = search.lower()
            products = [product for product in products if needle in product.name.lower()]
        return products
