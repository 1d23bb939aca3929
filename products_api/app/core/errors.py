"""
Error taxonomy for the products service and its HTTP mapping.

Services raise subclasses of ``ProductError``; a single exception
handler registered on the application turns them into a JSON body of
the form ``{"error": "<message>"}`` with the status code carried by the
exception class.  Request bodies that are not valid JSON are reported
in the same shape instead of FastAPI's default 422 payload.
"""

import logging
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, status
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

logger = logging.getLogger(__name__)


class ProductError(Exception):
    """Base class for errors surfaced by the products API."""

    status_code: int = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message: str = "Internal server error"

    def __init__(self, message: Optional[str] = None) -> None:
        self.message = message or self.default_message
        super().__init__(self.message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message}


class ProductValidationError(ProductError):
    """Required fields are missing or a field has the wrong type."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Product validation failed"

    def __init__(self, errors: Dict[str, str]) -> None:
        self.errors = dict(errors)
        details = ", ".join(f"{name}: {reason}" for name, reason in self.errors.items())
        message = f"{self.default_message}: {details}" if details else self.default_message
        super().__init__(message)

    def to_body(self) -> Dict[str, Any]:
        return {"error": self.message, "fields": self.errors}


class ProductNotFound(ProductError):
    status_code = status.HTTP_404_NOT_FOUND
    default_message = "Product not found"


class InvalidIdentifier(ProductError):
    """The identifier cannot be parsed by the document store."""

    status_code = status.HTTP_400_BAD_REQUEST
    default_message = "Invalid ID"


class StoreUnavailable(ProductError):
    """The document store could not be reached or a query failed."""

    status_code = status.HTTP_500_INTERNAL_SERVER_ERROR
    default_message = "Document store unavailable"


async def product_error_handler(request: Request, exc: ProductError) -> JSONResponse:
    if exc.status_code >= 500:
        logger.error("%s %s failed: %s", request.method, request.url.path, exc.message)
    else:
        logger.warning("%s %s rejected (%s): %s", request.method, request.url.path, exc.status_code, exc.message)
    return JSONResponse(status_code=exc.status_code, content=exc.to_body())


async def request_validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Report unparseable request bodies as a product validation failure."""
    errors: Dict[str, str] = {}
    for error in exc.errors():
        if error.get("type") == "json_invalid":
            errors["body"] = "is not valid JSON"
            continue
        location = ".".join(str(part) for part in error.get("loc", ()) if part != "body") or "body"
        errors[location] = error.get("msg", "invalid value")
    return await product_error_handler(request, ProductValidationError(errors))


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(ProductError, product_error_handler)
    app.add_exception_handler(RequestValidationError, request_validation_error_handler)
