"""
Services layer for the storefront backend.

This module contains the business logic services:
- CatalogService: Product lookups over the catalog collection
- OrderStore: Append-only persistence of verified orders
- SubscriptionService: Newsletter sign-ups
- CheckoutService: Prices and signs carts (phase one)
- VerificationGate: Verifies resubmitted quotes and stores them (phase two)

Request Model:
    Services are built once in create_app() and shared by all request
    threads. None of them keeps per-request state; the document collections
    they wrap do their own locking.
"""

from .catalog_service import CatalogService
from .checkout_service import CheckoutService
from .order_store import OrderStore
from .subscription_service import SubscriptionService
from .verification_service import VerificationGate

__all__ = [
    "CatalogService",
    "CheckoutService",
    "OrderStore",
    "SubscriptionService",
    "VerificationGate",
]
