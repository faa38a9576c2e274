"""Recording notifier for tests and local development.

Keeps every alert it is given, and can be configured to fail so that
callers' fire-and-forget handling can be exercised.
"""

from marketplace.notification.port import LowStockAlert, NewOrderAlert, NotificationPort


class FakeNotifier(NotificationPort):
    def __init__(self) -> None:
        self.should_succeed: bool = True
        self.failure_reason: str = "Notification channel unavailable"
        self.sent: list[tuple[str, str, object]] = []

    def configure(self, should_succeed: bool, failure_reason: str = "Notification channel unavailable") -> None:
        self.should_succeed = should_succeed
        self.failure_reason = failure_reason

    def _deliver(self, kind: str, seller_id: str, alert) -> None:
        if not self.should_succeed:
            raise ConnectionError(self.failure_reason)
        self.sent.append((kind, str(seller_id), alert))

    def low_stock(self, seller_id: str, alert: LowStockAlert) -> None:
        self._deliver("low_stock", seller_id, alert)

    def new_order(self, seller_id: str, alert: NewOrderAlert) -> None:
        self._deliver("new_order", seller_id, alert)

    def alerts(self, kind: str, seller_id: str | None = None) -> list:
        return [
            alert
            for sent_kind, sent_seller, alert in self.sent
            if sent_kind == kind and (seller_id is None or sent_seller == str(seller_id))
        ]
