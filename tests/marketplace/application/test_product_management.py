import pytest
from marketplace.checkout.service import CartLine
from marketplace.errors import NotAuthorizedError
from marketplace.order.order import Order
from marketplace.product.management import AddProduct, DeleteProduct, UpdateProductDetails
from marketplace.product.product import Product
from marketplace.product.queries import get_product, list_products, list_seller_products
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


class TestAddProduct:
    def test_returns_id_of_persisted_product(self):
        product_id = current_domain.process(
            AddProduct(
                seller_id="seller-x",
                name="Bangus",
                price=180.0,
                quantity=15,
                unit="kg",
                category="fish",
                market_location="Pampang Public Market",
            ),
            asynchronous=False,
        )

        product = current_domain.repository_for(Product).get(product_id)
        assert product.name == "Bangus"
        assert product.quantity == 15
        assert product.low_stock_threshold == 10
        assert product.is_available is True

    def test_unknown_market_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(
                AddProduct(seller_id="seller-x", name="Bangus", price=180.0, market_location="Somewhere Else"),
                asynchronous=False,
            )

    def test_negative_price_rejected(self):
        with pytest.raises(ValidationError):
            current_domain.process(
                AddProduct(seller_id="seller-x", name="Bangus", price=-1.0, market_location="San Nicolas Market"),
                asynchronous=False,
            )


class TestUpdateProductDetails:
    def test_owner_updates_details(self, add_product):
        product_id = add_product(price=50.0)

        current_domain.process(
            UpdateProductDetails(product_id=product_id, seller_id="seller-x", price=55.0, is_available=False),
            asynchronous=False,
        )

        product = current_domain.repository_for(Product).get(product_id)
        assert product.price == 55.0
        assert product.is_available is False
        assert product.name == "Tomatoes"

    def test_other_seller_rejected(self, add_product):
        product_id = add_product(price=50.0)

        with pytest.raises(NotAuthorizedError):
            current_domain.process(
                UpdateProductDetails(product_id=product_id, seller_id="seller-y", price=1.0),
                asynchronous=False,
            )

        assert current_domain.repository_for(Product).get(product_id).price == 50.0

    def test_price_change_does_not_touch_placed_orders(self, checkout, add_product):
        product_id = add_product(name="Tomatoes", price=50.0)
        order = checkout.place_orders("buyer-1", [CartLine(product_id, 2)])[0]

        current_domain.process(
            UpdateProductDetails(product_id=product_id, seller_id="seller-x", name="Roma Tomatoes", price=80.0),
            asynchronous=False,
        )

        stored = current_domain.repository_for(Order).get(order.id)
        assert stored.lines[0].name == "Tomatoes"
        assert stored.lines[0].price == 50.0
        assert stored.total == 100.0


class TestSellerProducts:
    def test_lists_own_products_with_low_stock_count(self, add_product):
        add_product(name="Okra", quantity=5, low_stock_threshold=10)
        add_product(name="Squash", quantity=40)
        add_product(name="Sold out", quantity=0)
        add_product(seller_id="seller-y", name="Eggplant", quantity=3)

        result = list_seller_products("seller-x")

        assert {product.name for product in result.products} == {"Okra", "Squash", "Sold out"}
        assert result.low_stock_count == 1


class TestDeleteProduct:
    def test_owner_deletes_product(self, add_product):
        product_id = add_product()

        current_domain.process(DeleteProduct(product_id=product_id, seller_id="seller-x"), asynchronous=False)

        with pytest.raises(ObjectNotFoundError):
            current_domain.repository_for(Product).get(product_id)

    def test_other_seller_rejected(self, add_product):
        product_id = add_product()

        with pytest.raises(NotAuthorizedError) as exc:
            current_domain.process(DeleteProduct(product_id=product_id, seller_id="seller-y"), asynchronous=False)

        assert exc.value.message == "Not authorized to delete this product"
        assert current_domain.repository_for(Product).get(product_id).name == "Tomatoes"

    def test_unknown_product(self):
        with pytest.raises(ObjectNotFoundError) as exc:
            current_domain.process(DeleteProduct(product_id="ghost", seller_id="seller-x"), asynchronous=False)
        assert str(exc.value) == "Product not found"

    def test_placed_orders_keep_their_snapshot(self, checkout, add_product):
        product_id = add_product(name="Tomatoes", price=50.0)
        order = checkout.place_orders("buyer-1", [CartLine(product_id, 2)])[0]

        current_domain.process(DeleteProduct(product_id=product_id, seller_id="seller-x"), asynchronous=False)

        stored = current_domain.repository_for(Order).get(order.id)
        assert stored.lines[0].name == "Tomatoes"
        assert stored.total == 100.0


class TestCatalogue:
    def test_lists_only_orderable_products(self, add_product):
        add_product(name="Okra", quantity=5)
        add_product(name="Sold out", quantity=0)
        add_product(name="Hidden", is_available=False)
        add_product(seller_id="seller-y", name="Eggplant", quantity=3)

        products = list_products()

        assert {product.name for product in products} == {"Okra", "Eggplant"}

    def test_filters_by_market_and_category(self, add_product):
        add_product(name="Bangus", category="fish", market_location="Pampang Public Market")
        add_product(name="Tilapia", category="fish")
        add_product(name="Okra", category="vegetables")

        assert [product.name for product in list_products(market="Pampang Public Market")] == ["Bangus"]
        assert {product.name for product in list_products(category="fish")} == {"Bangus", "Tilapia"}
        assert len(list_products(category="all")) == 3

    def test_search_matches_part_of_name(self, add_product):
        add_product(name="Roma Tomatoes")
        add_product(name="Cherry tomatoes")
        add_product(name="Okra")

        assert {product.name for product in list_products(search="TOMATO")} == {"Roma Tomatoes", "Cherry tomatoes"}

    def test_get_product(self, add_product):
        product_id = add_product(name="Calamansi")
        assert get_product(product_id).name == "Calamansi"

    def test_get_unknown_product(self):
        with pytest.raises(ObjectNotFoundError) as exc:
            get_product("ghost")
        assert str(exc.value) == "Product not found"
