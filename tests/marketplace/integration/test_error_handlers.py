"""Error bodies produced by the registered exception handlers."""

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from marketplace.api import register_error_handlers
from marketplace.errors import InvalidStateError
from protean.exceptions import ObjectNotFoundError


@pytest.fixture()
def client():
    app = FastAPI()
    register_error_handlers(app)

    @app.get("/boom")
    async def boom():
        raise RuntimeError("connection pool exhausted")

    @app.get("/missing")
    async def missing():
        raise ObjectNotFoundError("Order not found")

    @app.get("/closed")
    async def closed():
        raise InvalidStateError("Cannot cancel order with status: completed")

    return TestClient(app, raise_server_exceptions=False)


def test_unexpected_error_hides_cause(client):
    response = client.get("/boom")

    assert response.status_code == 500
    assert response.json() == {"success": False, "message": "Server error", "code": "internal_error"}


def test_not_found_message(client):
    response = client.get("/missing")

    assert response.status_code == 404
    assert response.json() == {"success": False, "message": "Order not found", "code": "not_found"}


def test_invalid_state_is_conflict(client):
    response = client.get("/closed")

    assert response.status_code == 409
    assert response.json()["code"] == "invalid_state"
