"""
Verification gate: phase two of the two-phase order flow.

The client resubmits the quote it received from checkout. The signature is
recomputed from the submitted cart, address and pricing; only a match lets
the order through to the store.

State Machine:
    Received
    ├── Rejected       (malformed payload or hash mismatch, nothing written)
    └── HashValidated
        ├── Persisted  (insert succeeded)
        └── failed     (StorageError, nothing committed)

Malformed payloads and mismatches raise errors with the same message so a
client cannot tell which check it failed. No deduplication is done: each
verified submission is stored as a new order.
"""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Any, Callable, Mapping, Optional, Tuple

from core.exceptions import IntegrityError, InvalidRequestError, VERIFICATION_FAILED_MESSAGE
from core.signer import OrderSigner
from logging_config import get_logger
from models.order import (
    OrderStatus,
    PersistedOrder,
    PricedLine,
    PricingSummary,
    SignedOrder,
    coerce_address,
)
from services.order_store import OrderStore


logger = get_logger(__name__)


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class VerificationGate:
    """
    Checks resubmitted quotes and persists the genuine ones.

    Args:
        signer: Signer holding the same key checkout used
        order_store: Destination for verified orders
        clock: Source of ``orderDate`` (defaults to current UTC time)
    """

    def __init__(
        self,
        signer: OrderSigner,
        order_store: OrderStore,
        clock: Optional[Callable[[], datetime]] = None,
    ):
        self._signer = signer
        self._order_store = order_store
        self._clock = clock or _utcnow

    def verify_and_persist(self, payload: Any) -> PersistedOrder:
        """
        Verify a resubmitted order and store it.

        Accepts either ``{cart, address, pricing, hash}`` or
        ``{order: {cart, address, pricing}, orderHash}``.

        Returns:
            The stored PersistedOrder, with ``order_id`` set

        Raises:
            InvalidRequestError: Payload malformed, or a verified field holds
                an object where a scalar is expected
            IntegrityError: Recomputed hash differs from the submitted one
            StorageError: Insert failed
        """
        cart, address, pricing, submitted_hash = self._unpack(payload)

        # Received -> Rejected | HashValidated
        if not self._signer.verify(cart, address, pricing, submitted_hash):
            logger.warning(f"Order rejected: hash mismatch ({len(cart)} cart lines)")
            raise IntegrityError()

        # HashValidated -> Persisted
        order = SignedOrder(
            cart=tuple(PricedLine.coerce(line) for line in cart),
            address=coerce_address(address),
            pricing=PricingSummary.coerce(pricing),
            hash=submitted_hash,
        )
        persisted = PersistedOrder(
            order=order,
            order_date=self._clock(),
            status=OrderStatus.PENDING,
        )
        order_id = self._order_store.insert_order(persisted)

        logger.info(f"Order {order_id[:8]} saved: total={order.pricing.total}")
        return persisted

    @staticmethod
    def _unpack(payload: Any) -> Tuple[list, Mapping, Mapping, str]:
        if not isinstance(payload, Mapping):
            raise InvalidRequestError(VERIFICATION_FAILED_MESSAGE, {"reason": "body"})

        nested = payload.get("order")
        if isinstance(nested, Mapping):
            body = nested
            submitted_hash = payload.get("orderHash", nested.get("hash"))
        else:
            body = payload
            submitted_hash = payload.get("hash")

        cart = body.get("cart")
        address = body.get("address")
        pricing = body.get("pricing")

        if not isinstance(cart, list) or not cart:
            raise InvalidRequestError(VERIFICATION_FAILED_MESSAGE, {"reason": "cart"})
        if not isinstance(address, Mapping) or not isinstance(pricing, Mapping):
            raise InvalidRequestError(VERIFICATION_FAILED_MESSAGE, {"reason": "address/pricing"})
        if not isinstance(submitted_hash, str) or not submitted_hash:
            raise InvalidRequestError(VERIFICATION_FAILED_MESSAGE, {"reason": "hash"})

        return cart, address, pricing, submitted_hash
