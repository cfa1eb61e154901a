"""
Data models for the storefront backend.

This module contains dataclasses for:
- Product: Read-only catalog entry
- CartLineInput / PricedLine / PricingSummary / PricedCart: Pricing input and output
- SignedOrder: Priced quote plus its signature
- PersistedOrder / OrderStatus: Verified order as stored

Quote models are frozen so a signed order cannot drift from its hash.
"""

from .catalog import Product
from .order import (
    CartLineInput,
    OrderStatus,
    PersistedOrder,
    PricedCart,
    PricedLine,
    PricingSummary,
    SignedOrder,
)

__all__ = [
    # Catalog
    "Product",
    # Pricing
    "CartLineInput",
    "PricedLine",
    "PricingSummary",
    "PricedCart",
    # Orders
    "SignedOrder",
    "PersistedOrder",
    "OrderStatus",
]
