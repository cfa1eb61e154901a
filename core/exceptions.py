"""
Custom exceptions for the storefront backend.

Exception Hierarchy:
    StorefrontError (base)
    ├── ConfigurationError         - Missing/invalid settings (startup failure)
    ├── InvalidRequestError        - Malformed or missing request fields (400)
    ├── EmptyCartError             - No valid line items after filtering (404)
    ├── IntegrityError             - Order hash mismatch on resubmission (400)
    ├── ProductNotFoundError       - Single product lookup missed (404)
    ├── DuplicateSubscriptionError - Email already on the newsletter (409)
    ├── AuthenticationError        - Missing client token (401)
    │   └── InvalidTokenError      - Bad or expired client token (403)
    ├── ProductLookupFailure       - Catalog query failed (500)
    └── StorageError               - Persistence failed (500)

Usage:
    ConfigurationError causes the app to fail fast in create_app().
    Every other error is raised by domain code and turned into the
    {"success": false, "message": ...} envelope by the Flask error handler,
    using the class's ``status_code``.
"""

from typing import Optional, Dict, Any


# Shared by IntegrityError and malformed resubmissions so the two cannot be
# told apart from the response.
VERIFICATION_FAILED_MESSAGE = "Order verification failed."


class StorefrontError(Exception):
    """
    Base exception for all storefront errors.

    Attributes:
        message: Human-readable message, safe to return to the client
        details: Extra context for logs only, never rendered in responses
        status_code: HTTP status the request boundary should answer with
    """

    status_code = 500

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


# =============================================================================
# STARTUP ERRORS - Application will not start if these occur
# =============================================================================

class ConfigurationError(StorefrontError):
    """
    A required setting is missing or invalid.

    Typical causes:
    - ORDER_SIGNING_KEY or TOKEN_SECRET not set in production
    - PRICING_RULES names an unknown rule set
    - STORAGE_BACKEND is neither "json" nor "memory"
    """

    def __init__(self, setting: str, problem: str):
        message = f"Invalid configuration for {setting}: {problem}"
        super().__init__(message, {"setting": setting})
        self.setting = setting


# =============================================================================
# CLIENT ERRORS - request is rejected, nothing is written
# =============================================================================

class InvalidRequestError(StorefrontError):
    """Request body is missing required fields or has the wrong shape."""

    status_code = 400


class EmptyCartError(StorefrontError):
    """
    No cart line survived validation and catalog lookup.

    Raised by the pricing engine when every line was malformed or referenced
    an unknown product code.
    """

    status_code = 404

    def __init__(self, message: str = "No valid items in cart", dropped: int = 0):
        super().__init__(message, {"dropped_lines": dropped})
        self.dropped = dropped


class IntegrityError(StorefrontError):
    """
    A resubmitted order does not match its signature.

    The client changed the cart, address or pricing after checkout, or the
    hash was never issued by this server. The message is deliberately the
    same as for a malformed resubmission, and neither the expected nor the
    received hash is attached.
    """

    status_code = 400

    def __init__(self, message: str = VERIFICATION_FAILED_MESSAGE):
        super().__init__(message)


class ProductNotFoundError(StorefrontError):
    """A single-product lookup found nothing for the given code."""

    status_code = 404

    def __init__(self, product_code: str):
        super().__init__("Product not found", {"product_code": product_code})
        self.product_code = product_code


class DuplicateSubscriptionError(StorefrontError):
    """The email address is already subscribed."""

    status_code = 409

    def __init__(self, email: str):
        super().__init__("This email is already subscribed", {"email": email})
        self.email = email


class AuthenticationError(StorefrontError):
    """The Authorization header or bearer token is missing."""

    status_code = 401


class InvalidTokenError(AuthenticationError):
    """The bearer token failed signature or expiry checks."""

    status_code = 403

    def __init__(self, message: str = "Invalid or expired token"):
        super().__init__(message)


# =============================================================================
# SERVER ERRORS - collaborator failed, request cannot complete
# =============================================================================

class ProductLookupFailure(StorefrontError):
    """The catalog query itself failed (store unreachable, unreadable data)."""

    status_code = 500

    def __init__(self, message: str = "Server error looking up products", cause: Optional[str] = None):
        super().__init__(message, {"cause": cause} if cause else None)


class StorageError(StorefrontError):
    """Writing to the order or subscriber store failed; nothing was committed."""

    status_code = 500

    def __init__(self, message: str = "Server error saving order", cause: Optional[str] = None):
        super().__init__(message, {"cause": cause} if cause else None)
