"""
Order signing for the two-phase checkout.

Checkout prices a cart and returns it with an HMAC-SHA256 signature. When the
client sends the order back, the signature is recomputed from the submitted
values and must match before anything is stored.

Canonical form:
    The signature covers ``{"cart": [...], "address": {...}, "pricing": {...}}``
    serialized as compact JSON with sorted keys. Cart lines contribute only
    productCode, productName, price and size. Numbers are normalized through
    Decimal, so 720, 720.0 and Decimal("720.00") serialize identically and a
    price survives a round trip through a browser unchanged.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from decimal import Decimal, InvalidOperation
from typing import Any, Dict, Mapping, Sequence, Union


SIGNED_LINE_FIELDS = ("productCode", "productName", "price", "size")


def _canonical_number(value: Union[int, float, Decimal]) -> Union[int, float, str]:
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value))
    except InvalidOperation:
        return str(value)
    if not number.is_finite():
        return str(number)
    if number == number.to_integral_value():
        return int(number)
    return float(number)


def canonical_value(value: Any) -> Any:
    """Recursively convert a value into its canonical JSON-compatible form."""
    if isinstance(value, bool) or value is None or isinstance(value, str):
        return value
    if isinstance(value, (int, float, Decimal)):
        return _canonical_number(value)
    if isinstance(value, Mapping):
        return {str(k): canonical_value(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [canonical_value(v) for v in value]
    return str(value)


def _signed_line(line: Any) -> Dict[str, Any]:
    if not isinstance(line, Mapping):
        return {field: None for field in SIGNED_LINE_FIELDS}
    return {field: canonical_value(line.get(field)) for field in SIGNED_LINE_FIELDS}


def canonical_bytes(
    cart: Sequence[Any],
    address: Mapping[str, Any],
    pricing: Mapping[str, Any],
) -> bytes:
    """
    Serialize the signed part of an order.

    Logically equal inputs always produce the same bytes, whatever the
    insertion order of their mapping keys.
    """
    payload = {
        "cart": [_signed_line(line) for line in cart],
        "address": canonical_value(address),
        "pricing": canonical_value(pricing),
    }
    return json.dumps(
        payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False
    ).encode("utf-8")


class OrderSigner:
    """
    Computes and checks order signatures with a server-held key.

    The key is fixed when the signer is built and never leaves the server.

    Args:
        secret: HMAC key (str is encoded as UTF-8)

    Raises:
        ValueError: If the secret is empty
    """

    def __init__(self, secret: Union[str, bytes]):
        key = secret.encode("utf-8") if isinstance(secret, str) else bytes(secret)
        if not key:
            raise ValueError("Order signing key must not be empty")
        self._key = key

    def sign(
        self,
        cart: Sequence[Any],
        address: Mapping[str, Any],
        pricing: Mapping[str, Any],
    ) -> str:
        """Return the 64-character hex HMAC-SHA256 of the order."""
        return hmac.new(
            self._key, canonical_bytes(cart, address, pricing), hashlib.sha256
        ).hexdigest()

    def verify(
        self,
        cart: Sequence[Any],
        address: Mapping[str, Any],
        pricing: Mapping[str, Any],
        candidate: str,
    ) -> bool:
        """
        Check a submitted hash in constant time.

        A non-string or wrongly sized candidate is still compared against the
        full digest so rejection takes the same path as a plain mismatch.
        """
        expected = self.sign(cart, address, pricing)
        submitted = candidate if isinstance(candidate, str) else ""
        return hmac.compare_digest(
            expected.encode("ascii"), submitted.encode("utf-8", "replace")
        )
