import logging

import pytest
import structlog
from marketplace.utils.logging import bind_request_context, clear_request_context, configure_logging


@pytest.fixture()
def restore_logging():
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    yield
    structlog.reset_defaults()
    root.handlers[:] = handlers
    root.setLevel(level)


def test_request_context_is_bound_until_cleared():
    clear_request_context()
    bind_request_context(principal_id="seller-x", path="/orders/seller")

    assert structlog.contextvars.get_contextvars() == {"principal_id": "seller-x", "path": "/orders/seller"}

    clear_request_context()
    assert structlog.contextvars.get_contextvars() == {}


def test_production_emits_json(monkeypatch, restore_logging):
    monkeypatch.setenv("ENVIRONMENT", "production")
    monkeypatch.delenv("LOG_LEVEL", raising=False)

    configure_logging()

    assert isinstance(structlog.get_config()["processors"][-1], structlog.processors.JSONRenderer)
    assert logging.getLogger().level == logging.INFO


def test_explicit_level_wins(monkeypatch, restore_logging):
    monkeypatch.setenv("ENVIRONMENT", "development")

    configure_logging("warning")

    assert logging.getLogger().level == logging.WARNING
    assert isinstance(structlog.get_config()["processors"][-1], structlog.dev.ConsoleRenderer)
