# Overview: Domain error kinds raised by services and translated to JSON by routes.

from __future__ import annotations


class ConsoleError(Exception):
    """
    Base class for operator-facing domain errors.

    Each subclass carries a stable `code` and the HTTP status the routes
    answer with. `details` holds structured context (e.g. per-product stock).
    """
    code = "ERROR"
    status_code = 400

    def __init__(self, message: str, details: dict | None = None):
        super().__init__(message)
        self.details = details or {}

    def to_dict(self) -> dict:
        return {"error": str(self), "code": self.code, "details": self.details}


class NotFound(ConsoleError):
    """SKU / product / brand / sale lookup miss."""
    code = "NOT_FOUND"
    status_code = 404


class OutOfStock(ConsoleError):
    """No unit left to add to the cart."""
    code = "OUT_OF_STOCK"
    status_code = 409


class InsufficientStock(ConsoleError):
    """Requested quantity exceeds what is on hand."""
    code = "INSUFFICIENT_STOCK"
    status_code = 409


class DuplicateSKU(ConsoleError):
    code = "DUPLICATE_SKU"
    status_code = 409


class EmptyCart(ConsoleError):
    code = "EMPTY_CART"
    status_code = 400


class MissingCustomerPhone(ConsoleError):
    code = "MISSING_CUSTOMER_PHONE"
    status_code = 400


class PersistenceFailure(ConsoleError):
    """The store could not complete a write; nothing was committed."""
    code = "PERSISTENCE_FAILURE"
    status_code = 503


class ExternalServiceFailure(ConsoleError):
    """Text-generation call failed or is not configured."""
    code = "EXTERNAL_SERVICE_FAILURE"
    status_code = 502


class BrandInUse(ConsoleError):
    """Brand still has products on the floor and cannot be removed."""
    code = "BRAND_IN_USE"
    status_code = 409
