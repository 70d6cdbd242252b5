"""
Cart error kinds, user-facing messages and exceptions.

Messages are centralized so the store, the CLI and the tests agree on the
exact text shown to the user.
"""
from enum import Enum
from typing import Any

# User-facing messages
ERROR_OUT_OF_STOCK = "Requested quantity exceeds available stock."
ERROR_ADD_PRODUCT = "Could not add product."
ERROR_REMOVE_PRODUCT = "Could not remove product."
ERROR_UPDATE_AMOUNT = "Could not update product quantity."


class CartErrorKind(str, Enum):
    """
    Classification of a failed cart operation.

    - out_of_stock: requested quantity exceeds reported availability
    - product_not_found: unknown to the catalog/stock service, or not in the cart
    - transient_failure: network or unexpected collaborator error
    """
    OUT_OF_STOCK = "out_of_stock"
    PRODUCT_NOT_FOUND = "product_not_found"
    TRANSIENT_FAILURE = "transient_failure"


class CartError(Exception):
    """Failed cart operation, carrying its kind and user-facing message."""

    def __init__(self, message: str, kind: CartErrorKind) -> None:
        super().__init__(message)
        self.message = message
        self.kind = kind


class OutOfStockError(CartError):
    """Requested quantity exceeds available stock."""

    def __init__(self, message: str = ERROR_OUT_OF_STOCK) -> None:
        super().__init__(message, CartErrorKind.OUT_OF_STOCK)


class ProductNotFoundError(CartError):
    """Product is unknown remotely or absent from the cart."""

    def __init__(self, message: str) -> None:
        super().__init__(message, CartErrorKind.PRODUCT_NOT_FOUND)


class TransientFailureError(CartError):
    """Collaborator failed for a reason other than not-found."""

    def __init__(self, message: str) -> None:
        super().__init__(message, CartErrorKind.TRANSIENT_FAILURE)


class CollaboratorError(Exception):
    """Error raised by a stock/product service implementation."""

    def __init__(self, message: str, status_code: int | None = None, raw_error: Any = None) -> None:
        super().__init__(message)
        self.status_code = status_code
        self.raw_error = raw_error


class NotFoundError(CollaboratorError):
    """Remote service does not know the requested product."""

    def __init__(self, message: str = "Not found", raw_error: Any = None) -> None:
        super().__init__(message, status_code=404, raw_error=raw_error)


class ServiceError(CollaboratorError):
    """Network failure, unexpected status or invalid payload."""


class SnapshotError(ValueError):
    """Persisted cart snapshot cannot be decoded."""


class ConfigError(ValueError):
    """Invalid configuration value."""


__all__ = [
    "ERROR_OUT_OF_STOCK",
    "ERROR_ADD_PRODUCT",
    "ERROR_REMOVE_PRODUCT",
    "ERROR_UPDATE_AMOUNT",
    "CartErrorKind",
    "CartError",
    "OutOfStockError",
    "ProductNotFoundError",
    "TransientFailureError",
    "CollaboratorError",
    "NotFoundError",
    "ServiceError",
    "SnapshotError",
    "ConfigError",
]
