"""
Order data models.

These models follow an order through the two-phase checkout:

    CartLineInput  (client, untrusted)
        -> PricedLine + PricingSummary   (pricing engine)
        -> SignedOrder                   (checkout, returned to the client)
        -> PersistedOrder                (verification gate, stored)

PricedLine, PricingSummary and SignedOrder are frozen: once a quote is built
nothing can change it without producing a new object (and a new signature).
"""

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple

from core.exceptions import InvalidRequestError
from models.money import ZERO, money_to_json, parse_money


class OrderStatus(Enum):
    """
    Status of a stored order.

    Only PENDING is ever assigned by this service; the other values exist so
    stored orders written by back-office tooling still load.
    """

    PENDING = "pending"
    CONFIRMED = "confirmed"
    SHIPPED = "shipped"
    DELIVERED = "delivered"
    CANCELLED = "cancelled"


# =============================================================================
# FIELD COERCION
# =============================================================================

def _is_scalar(value: Any) -> bool:
    return value is None or isinstance(value, (str, int, float, Decimal))


def coerce_text(value: Any, field_name: str) -> str:
    """
    Coerce a scalar to a string.

    None becomes "", booleans become "true"/"false", numbers use their plain
    decimal form.

    Raises:
        InvalidRequestError: If the value is a mapping, list or other object
    """
    if value is None:
        return ""
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)):
        number = money_to_json(parse_money(value))
        return str(number)
    raise InvalidRequestError(
        "Order contains invalid field values", {"field": field_name}
    )


def coerce_money(value: Any, field_name: str) -> Decimal:
    """
    Coerce a scalar amount to Decimal (unparseable amounts count as zero).

    Raises:
        InvalidRequestError: If the value is a mapping, list or other object
    """
    if not _is_scalar(value):
        raise InvalidRequestError(
            "Order contains invalid field values", {"field": field_name}
        )
    return parse_money(value)


def coerce_address(raw: Any) -> Dict[str, str]:
    """
    Flatten a free-form shipping address into string fields.

    Raises:
        InvalidRequestError: If the address is not a mapping or any value is
            itself an object or list
    """
    if not isinstance(raw, Mapping):
        raise InvalidRequestError("Invalid request. Address details are required.")
    return {
        str(key): coerce_text(value, f"address.{key}")
        for key, value in raw.items()
    }


# =============================================================================
# CART AND PRICING
# =============================================================================

@dataclass(frozen=True)
class CartLineInput:
    """One line of a client cart: a product code and a size."""

    product_code: str
    size: str

    @classmethod
    def from_raw(cls, raw: Any) -> Optional["CartLineInput"]:
        """
        Parse an untrusted cart entry.

        Returns None for anything malformed: non-mapping entries, non-string
        or blank code/size.
        """
        if not isinstance(raw, Mapping):
            return None
        code = raw.get("productCode")
        size = raw.get("size")
        if not isinstance(code, str) or not isinstance(size, str):
            return None
        code, size = code.strip(), size.strip()
        if not code or not size:
            return None
        return cls(product_code=code, size=size)


@dataclass(frozen=True)
class PricedLine:
    """A cart line resolved against the catalog."""

    product_code: str
    product_name: str
    price: Decimal
    image_url: str
    size: str

    def to_dict(self) -> Dict[str, Any]:
        return {
            "productCode": self.product_code,
            "productName": self.product_name,
            "price": money_to_json(self.price),
            "imageUrl": self.image_url,
            "size": self.size,
        }

    def to_document(self) -> Dict[str, Any]:
        data = self.to_dict()
        data["price"] = str(self.price)
        return data

    @classmethod
    def coerce(cls, raw: Any) -> "PricedLine":
        """
        Rebuild a line from a verified resubmission.

        Raises:
            InvalidRequestError: If the line is not a mapping or a field holds
                an object where a scalar is expected
        """
        if not isinstance(raw, Mapping):
            raise InvalidRequestError("Order contains invalid field values", {"field": "cart"})
        return cls(
            product_code=coerce_text(raw.get("productCode"), "productCode"),
            product_name=coerce_text(raw.get("productName"), "productName"),
            price=coerce_money(raw.get("price"), "price"),
            image_url=coerce_text(raw.get("imageUrl"), "imageUrl"),
            size=coerce_text(raw.get("size"), "size"),
        )


@dataclass(frozen=True)
class PricingSummary:
    """Totals for a priced cart."""

    subtotal: Decimal
    discount: Decimal
    delivery: Decimal
    total: Decimal

    def to_dict(self) -> Dict[str, Any]:
        return {
            "subtotal": money_to_json(self.subtotal),
            "discount": money_to_json(self.discount),
            "delivery": money_to_json(self.delivery),
            "total": money_to_json(self.total),
        }

    def to_document(self) -> Dict[str, Any]:
        return {
            "subtotal": str(self.subtotal),
            "discount": str(self.discount),
            "delivery": str(self.delivery),
            "total": str(self.total),
        }

    @classmethod
    def coerce(cls, raw: Any) -> "PricingSummary":
        """Rebuild totals from a verified resubmission."""
        if not isinstance(raw, Mapping):
            raise InvalidRequestError("Order contains invalid field values", {"field": "pricing"})
        return cls(
            subtotal=coerce_money(raw.get("subtotal", ZERO), "subtotal"),
            discount=coerce_money(raw.get("discount", ZERO), "discount"),
            delivery=coerce_money(raw.get("delivery", ZERO), "delivery"),
            total=coerce_money(raw.get("total", ZERO), "total"),
        )


@dataclass(frozen=True)
class PricedCart:
    """Output of the pricing engine."""

    lines: Tuple[PricedLine, ...]
    summary: PricingSummary
    dropped: int = 0
    """Number of input lines discarded as malformed or unknown."""


# =============================================================================
# ORDERS
# =============================================================================

@dataclass(frozen=True)
class SignedOrder:
    """
    A priced quote plus its signature.

    Invariant: ``hash == OrderSigner.sign(cart, address, pricing)`` for the
    dict forms of these fields.
    """

    cart: Tuple[PricedLine, ...]
    address: Dict[str, str]
    pricing: PricingSummary
    hash: str

    def signed_fields(self) -> Tuple[list, Dict[str, str], Dict[str, Any]]:
        """The (cart, address, pricing) triple exactly as the client sees it."""
        return (
            [line.to_dict() for line in self.cart],
            dict(self.address),
            self.pricing.to_dict(),
        )

    def to_dict(self) -> Dict[str, Any]:
        cart, address, pricing = self.signed_fields()
        return {
            "cart": cart,
            "address": address,
            "pricing": pricing,
            "hash": self.hash,
        }


@dataclass
class PersistedOrder:
    """
    A verified order as written to the order store.

    Lifecycle:
        1. Built by the verification gate after the hash matched
        2. Inserted once; ``order_id`` is set from the store
    """

    order: SignedOrder
    order_date: datetime
    status: OrderStatus = OrderStatus.PENDING
    order_id: Optional[str] = field(default=None)

    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored document layout."""
        return {
            "cart": [line.to_document() for line in self.order.cart],
            "address": dict(self.order.address),
            "pricing": self.order.pricing.to_document(),
            "hash": self.order.hash,
            "orderDate": self.order_date.isoformat(),
            "status": self.status.value,
        }
