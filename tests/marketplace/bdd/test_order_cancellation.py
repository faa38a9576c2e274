"""BDD tests for order cancellation."""

from datetime import UTC, datetime

from marketplace.errors import MarketplaceError
from marketplace.order.cancellation import cancel_by_customer
from marketplace.order.identity_events import IdentityOrderEventHandler
from marketplace.order.order import Order
from protean import current_domain
from pytest_bdd import given, parsers, scenarios, then, when
from shared.events.identity import AccountRemoved

scenarios("features/order_cancellation.feature")


# ---------------------------------------------------------------------------
# Given steps
# ---------------------------------------------------------------------------
@given(parsers.cfparse('"{buyer}" has cancelled the order'))
def has_cancelled(outcome, buyer):
    cancel_by_customer(outcome["orders"][0].id, buyer)


# ---------------------------------------------------------------------------
# When steps
# ---------------------------------------------------------------------------
@when(parsers.cfparse('"{buyer}" cancels the order'))
def cancels(outcome, buyer):
    try:
        cancel_by_customer(outcome["orders"][0].id, buyer)
    except MarketplaceError as exc:
        outcome["exc"] = exc


@when(parsers.cfparse('the account of seller "{seller}" is removed'))
def seller_removed(seller):
    IdentityOrderEventHandler().on_account_removed(
        AccountRemoved(account_id=seller, role="seller", removed_at=datetime.now(UTC))
    )


# ---------------------------------------------------------------------------
# Then steps
# ---------------------------------------------------------------------------
@then(parsers.cfparse('the last note reads "{note}"'))
def last_note(outcome, note):
    order = current_domain.repository_for(Order).get(outcome["orders"][0].id)
    assert order.history()[-1].note == note
