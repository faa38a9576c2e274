"""Seller notification adapters.

``get_notifier()`` returns the adapter named by ``NOTIFIER_ADAPTER``
(``logging`` by default, or ``fake``). ``set_notifier()`` overrides it,
which tests use to install a ``FakeNotifier``.
"""

import os

from marketplace.notification.port import NotificationPort

_current_notifier: NotificationPort | None = None


def get_notifier() -> NotificationPort:
    global _current_notifier
    if _current_notifier is None:
        adapter = os.environ.get("NOTIFIER_ADAPTER", "logging")
        if adapter == "logging":
            from marketplace.notification.logging_adapter import LoggingNotifier

            _current_notifier = LoggingNotifier()
        elif adapter == "fake":
            from marketplace.notification.fake_adapter import FakeNotifier

            _current_notifier = FakeNotifier()
        else:
            raise ValueError(f"Unknown notifier adapter: {adapter}")
    return _current_notifier


def set_notifier(notifier: NotificationPort) -> None:
    global _current_notifier
    _current_notifier = notifier


def reset_notifier() -> None:
    global _current_notifier
    _current_notifier = None
