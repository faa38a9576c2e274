"""Translate domain exceptions into ``{"success": false, "message", "code"}`` responses."""

import structlog
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from protean.exceptions import ObjectNotFoundError, ValidationError

from marketplace.errors import (
    InsufficientStockError,
    InternalError,
    InvalidStateError,
    MarketplaceError,
    NotAuthenticatedError,
    NotAuthorizedError,
)

logger = structlog.get_logger(__name__)


def _first_message(messages) -> str:
    if isinstance(messages, dict):
        for value in messages.values():
            found = _first_message(value)
            if found:
                return found
        return ""
    if isinstance(messages, list | tuple):
        return _first_message(messages[0]) if messages else ""
    return str(messages) if messages else ""


def error_body(message: str, code: str, errors=None) -> dict:
    body = {"success": False, "message": message, "code": code}
    if errors:
        body["errors"] = errors
    return body


def _respond(status_code: int, message: str, code: str, errors=None) -> JSONResponse:
    return JSONResponse(status_code=status_code, content=error_body(message, code, errors))


def register_error_handlers(app: FastAPI) -> None:
    @app.exception_handler(ValidationError)
    async def validation_error(request: Request, exc: ValidationError) -> JSONResponse:
        messages = exc.messages if isinstance(exc.messages, dict) else None
        return _respond(400, _first_message(exc.messages) or "Invalid request", "validation_error", messages)

    @app.exception_handler(InsufficientStockError)
    async def insufficient_stock(request: Request, exc: InsufficientStockError) -> JSONResponse:
        return _respond(409, _first_message(exc.messages), InsufficientStockError.code, {"product_id": exc.product_id})

    @app.exception_handler(RequestValidationError)
    async def request_validation_error(request: Request, exc: RequestValidationError) -> JSONResponse:
        errors = [{"loc": list(error["loc"]), "msg": error["msg"]} for error in exc.errors()]
        message = errors[0]["msg"] if errors else "Invalid request"
        return _respond(422, message, "validation_error", errors)

    @app.exception_handler(ObjectNotFoundError)
    async def not_found(request: Request, exc: ObjectNotFoundError) -> JSONResponse:
        message = str(exc) or "Not found"
        return _respond(404, message, "not_found")

    @app.exception_handler(NotAuthenticatedError)
    async def not_authenticated(request: Request, exc: NotAuthenticatedError) -> JSONResponse:
        return _respond(401, exc.message, exc.code)

    @app.exception_handler(NotAuthorizedError)
    async def not_authorized(request: Request, exc: NotAuthorizedError) -> JSONResponse:
        return _respond(403, exc.message, exc.code)

    @app.exception_handler(InvalidStateError)
    async def invalid_state(request: Request, exc: InvalidStateError) -> JSONResponse:
        return _respond(409, exc.message, exc.code)

    @app.exception_handler(MarketplaceError)
    async def marketplace_error(request: Request, exc: MarketplaceError) -> JSONResponse:
        logger.error("Request failed", path=request.url.path, code=exc.code, error=exc.message)
        return _respond(500, exc.message, exc.code)

    @app.exception_handler(Exception)
    async def internal_error(request: Request, exc: Exception) -> JSONResponse:
        logger.exception("Unhandled error", path=request.url.path)
        error = InternalError()
        return _respond(500, error.message, error.code)
