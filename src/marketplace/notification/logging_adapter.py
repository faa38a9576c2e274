"""Notifier that writes seller alerts to the structured log."""

from dataclasses import asdict

import structlog

from marketplace.notification.port import LowStockAlert, NewOrderAlert, NotificationPort

logger = structlog.get_logger(__name__)


class LoggingNotifier(NotificationPort):
    def low_stock(self, seller_id: str, alert: LowStockAlert) -> None:
        logger.warning("Low stock alert", seller_id=str(seller_id), **asdict(alert))

    def new_order(self, seller_id: str, alert: NewOrderAlert) -> None:
        logger.info("New order alert", seller_id=str(seller_id), **asdict(alert))
