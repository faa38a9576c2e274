"""BDD tests for checkout."""

import pytest
from marketplace.order.order import Order
from protean import current_domain
from pytest_bdd import parsers, scenarios, then

scenarios("features/order_checkout.feature")


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the order for "{seller}" totals {total:f}'))
def order_total(outcome, seller, total):
    order = next(order for order in outcome["orders"] if order.seller_id == seller)
    assert order.total == pytest.approx(total)


@then("no orders exist")
def no_orders():
    assert current_domain.repository_for(Order)._dao.query.all().total == 0


@then(parsers.cfparse('seller "{seller}" is alerted that "{name}" is down to {quantity:d}'))
def low_stock_alert(notifier, seller, name, quantity):
    alerts = notifier.alerts("low_stock", seller)
    assert [(alert.product_name, alert.current_stock) for alert in alerts] == [(name, quantity)]
