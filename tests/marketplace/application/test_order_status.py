import pytest
from marketplace.checkout.service import CartLine
from marketplace.errors import InvalidStateError, NotAuthorizedError
from marketplace.order.order import Order
from marketplace.order.status import UpdateOrderStatus, VerifyPayment
from protean import current_domain
from protean.exceptions import ObjectNotFoundError, ValidationError


@pytest.fixture()
def order(checkout, add_product):
    product_id = add_product(seller_id="seller-x")
    return checkout.place_orders("buyer-1", [CartLine(product_id, 2)])[0]


def _update(order_id, status, seller_id="seller-x", note=None):
    current_domain.process(
        UpdateOrderStatus(order_id=str(order_id), seller_id=seller_id, status=status, note=note),
        asynchronous=False,
    )
    return current_domain.repository_for(Order).get(order_id)


class TestUpdateOrderStatus:
    def test_seller_moves_order_forward(self, order):
        updated = _update(order.id, "confirmed")

        assert updated.status == "confirmed"
        assert updated.history()[-1].status == "confirmed"
        assert updated.history()[-1].note == "Status updated to confirmed"

    def test_custom_note_recorded(self, order):
        updated = _update(order.id, "ready", note="Packed and waiting at stall 12")
        assert updated.history()[-1].note == "Packed and waiting at stall 12"

    def test_history_accumulates(self, order):
        _update(order.id, "confirmed")
        _update(order.id, "preparing")
        updated = _update(order.id, "completed")

        assert [entry.status for entry in updated.history()] == ["pending", "confirmed", "preparing", "completed"]

    def test_permissive_by_default(self, order):
        _update(order.id, "completed")
        reopened = _update(order.id, "pending")
        assert reopened.status == "pending"

    def test_other_seller_rejected(self, order):
        with pytest.raises(NotAuthorizedError):
            _update(order.id, "confirmed", seller_id="seller-y")

        assert current_domain.repository_for(Order).get(order.id).status == "pending"

    def test_invalid_status_rejected(self, order):
        with pytest.raises(ValidationError) as exc:
            _update(order.id, "shipped")
        assert exc.value.messages == {"status": ["Invalid status"]}

    def test_unknown_order(self):
        with pytest.raises(ObjectNotFoundError):
            _update("missing-order", "confirmed")


class TestStrictTransitions:
    @pytest.fixture(autouse=True)
    def strict(self, monkeypatch):
        monkeypatch.setitem(current_domain.config["custom"], "STRICT_STATUS_TRANSITIONS", True)

    def test_allowed_transition(self, order):
        assert _update(order.id, "confirmed").status == "confirmed"

    def test_leaving_terminal_state_rejected(self, order):
        _update(order.id, "cancelled")
        with pytest.raises(InvalidStateError):
            _update(order.id, "pending")

    def test_verifying_terminal_order_rejected(self, order):
        _update(order.id, "cancelled")
        with pytest.raises(InvalidStateError):
            current_domain.process(VerifyPayment(order_id=str(order.id), seller_id="seller-x"), asynchronous=False)


class TestVerifyPayment:
    def test_marks_verified_and_preparing(self, order):
        current_domain.process(VerifyPayment(order_id=str(order.id), seller_id="seller-x"), asynchronous=False)

        updated = current_domain.repository_for(Order).get(order.id)
        assert updated.payment_verified is True
        assert updated.status == "preparing"
        assert updated.history()[-1].note == "Payment verified by seller"

    def test_only_owning_seller(self, order):
        with pytest.raises(NotAuthorizedError):
            current_domain.process(VerifyPayment(order_id=str(order.id), seller_id="seller-y"), asynchronous=False)
