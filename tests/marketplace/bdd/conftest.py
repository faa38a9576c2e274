"""Shared BDD fixtures and step definitions for checkout and cancellation."""

import pytest
from marketplace.checkout.service import CartLine
from marketplace.errors import InsufficientStockError, MarketplaceError
from marketplace.order.order import Order
from marketplace.order.status import UpdateOrderStatus
from marketplace.product.product import Product
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError
from pytest_bdd import given, parsers, then, when


# ---------------------------------------------------------------------------
# Scenario state
# ---------------------------------------------------------------------------
@pytest.fixture()
def products():
    """Product name → id, filled by the listing steps."""
    return {}


@pytest.fixture()
def cart():
    return []


@pytest.fixture()
def outcome():
    return {"orders": [], "exc": None}


def _checkout(checkout, buyer, cart, outcome):
    try:
        outcome["orders"] = checkout.place_orders(buyer, list(cart))
    except (ValidationError, ObjectNotFoundError) as exc:
        outcome["exc"] = exc


def _reload(order):
    return current_domain.repository_for(Order).get(order.id)


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('seller "{seller}" lists "{name}" at {price:f} with {quantity:d} in stock'))
def list_product(add_product, products, seller, name, price, quantity):
    products[name] = add_product(seller_id=seller, name=name, price=price, quantity=quantity)


@given(parsers.cfparse('the cart holds {quantity:d} "{name}"'))
def fill_cart(cart, products, quantity, name):
    cart.append(CartLine(products[name], quantity))


@given(parsers.cfparse('"{buyer}" has checked out'))
def has_checked_out(checkout, cart, outcome, buyer):
    _checkout(checkout, buyer, cart, outcome)
    assert outcome["exc"] is None


@given(parsers.cfparse('the seller moves the order to "{status}"'))
def seller_moves_order(outcome, status):
    order = outcome["orders"][0]
    current_domain.process(
        UpdateOrderStatus(order_id=str(order.id), seller_id=str(order.seller_id), status=status),
        asynchronous=False,
    )


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{buyer}" checks out'))
def checks_out(checkout, cart, outcome, buyer):
    _checkout(checkout, buyer, cart, outcome)


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('"{name}" has {quantity:d} in stock'))
def stock_level(products, name, quantity):
    assert current_domain.repository_for(Product).get(products[name]).quantity == quantity


@then(parsers.cfparse("{count:d} orders are created"))
def orders_created(outcome, count):
    assert outcome["exc"] is None
    assert len(outcome["orders"]) == count


@then(parsers.cfparse('the checkout fails because "{name}" is not available in the requested quantity'))
def checkout_fails_for(outcome, name):
    assert isinstance(outcome["exc"], InsufficientStockError)
    assert outcome["exc"].product_name == name


@then("the order is cancelled")
def order_is_cancelled(outcome):
    assert _reload(outcome["orders"][0]).status == "cancelled"


@then("the cancellation is rejected")
def cancellation_rejected(outcome):
    assert isinstance(outcome["exc"], MarketplaceError)
