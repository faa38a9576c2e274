"""Cross-domain event contract for account removal.

Published by the identity service when an admin removes a seller or customer
account. The marketplace registers it as an external event with the matching
``__type__`` string so that stream deserialisation works.
"""

from protean.core.event import BaseEvent
from protean.fields import DateTime, Identifier, String


class AccountRemoved(BaseEvent):
    """A seller or customer account was removed from the platform."""

    __version__ = 1

    account_id = Identifier(required=True)
    role = String(required=True)  # "seller" or "customer"
    removed_at = DateTime(required=True)
