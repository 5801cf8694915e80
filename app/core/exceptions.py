"""
Application error taxonomy.

Services raise these; `app.core.error_handlers` turns them into JSON
responses of the form ``{"error": message, **details}``.
"""

from typing import Any


class AppError(Exception):
    """
    Base exception for all business-rule failures.

    Attributes:
        message: Short human-readable error message
        details: Extra keys merged into the response body
                 (e.g. available / requested for stock errors)
    """

    status_code: int = 500

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        return self.message

    def __repr__(self) -> str:
        if self.details:
            details_str = ", ".join(f"{k}={v}" for k, v in self.details.items())
            return f"{self.__class__.__name__}('{self.message}', {details_str})"
        return f"{self.__class__.__name__}('{self.message}')"


class ValidationError(AppError):
    """Malformed or semantically invalid input."""

    status_code = 400


class EmptyCartError(ValidationError):
    """Checkout attempted without an active cart or with no items."""


class AuthenticationError(AppError):
    """Missing, invalid or expired credentials."""

    status_code = 401


class AuthorizationError(AppError):
    """Authenticated, but role or ownership does not allow the action."""

    status_code = 403


class NotFoundError(AppError):
    status_code = 404


class ConflictError(AppError):
    """Duplicate unique value or an operation not allowed in the current state."""

    status_code = 400


class StockError(AppError):
    """Requested quantity exceeds the product's stock."""

    status_code = 400

    def __init__(
        self,
        message: str,
        available: int,
        requested: int | None = None,
        in_cart: int | None = None,
    ):
        details: dict[str, Any] = {"available": available}
        if requested is not None:
            details["requested"] = requested
        if in_cart is not None:
            details["in_cart"] = in_cart
        super().__init__(message, details=details)
        self.available = available
        self.requested = requested
        self.in_cart = in_cart


class InternalError(AppError):
    status_code = 500
