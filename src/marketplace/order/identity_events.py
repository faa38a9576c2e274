"""Inbound identity events: cancel the open orders of removed accounts."""

import structlog
from protean.utils.globals import current_domain
from protean.utils.mixins import handle
from shared.events.identity import AccountRemoved

from marketplace.domain import marketplace
from marketplace.order.cancellation import CancelOrdersForRemovedAccount
from marketplace.order.order import Order

logger = structlog.get_logger(__name__)

marketplace.register_external_event(AccountRemoved, "Identity.AccountRemoved.v1")


@marketplace.event_handler(part_of=Order, stream_category="identity::account")
class IdentityOrderEventHandler:
    @handle(AccountRemoved)
    def on_account_removed(self, event: AccountRemoved) -> int:
        logger.info(
            "Account removed, cancelling its open orders",
            account_id=str(event.account_id),
            role=event.role,
        )
        return current_domain.process(
            CancelOrdersForRemovedAccount(account_id=str(event.account_id), role=event.role),
            asynchronous=False,
        )
