"""
Core module for the storefront backend.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- signer: HMAC order signing and canonicalization
- auth: Client bearer tokens
- document_store: In-memory and JSON-file document collections
"""

from .exceptions import (
    StorefrontError,
    ConfigurationError,
    InvalidRequestError,
    EmptyCartError,
    IntegrityError,
    ProductNotFoundError,
    DuplicateSubscriptionError,
    AuthenticationError,
    InvalidTokenError,
    ProductLookupFailure,
    StorageError,
)
from .signer import OrderSigner
from .auth import ClientTokenIssuer
from .document_store import (
    DocumentCollection,
    DocumentStoreError,
    DuplicateKeyError,
    InMemoryCollection,
    JsonFileCollection,
)

__all__ = [
    "StorefrontError",
    "ConfigurationError",
    "InvalidRequestError",
    "EmptyCartError",
    "IntegrityError",
    "ProductNotFoundError",
    "DuplicateSubscriptionError",
    "AuthenticationError",
    "InvalidTokenError",
    "ProductLookupFailure",
    "StorageError",
    "OrderSigner",
    "ClientTokenIssuer",
    "DocumentCollection",
    "DocumentStoreError",
    "DuplicateKeyError",
    "InMemoryCollection",
    "JsonFileCollection",
]
