"""
Checkout: phase one of the two-phase order flow.

The client sends product codes, sizes and a shipping address. This service
prices the cart from the catalog (client prices are never trusted), signs
the result and hands it back. Nothing is written; the order only reaches
the store after the client resubmits it through the verification gate.

Flow:
    1. Validate cart/address shape
    2. Price the cart (PricingEngine + CatalogService)
    3. Assemble the quote
    4. Sign (cart, address, pricing) exactly as the client will see them
    5. Return the SignedOrder
"""

from __future__ import annotations

from dataclasses import replace
from typing import Any, Mapping

from core.exceptions import InvalidRequestError
from core.signer import OrderSigner
from logging_config import get_logger
from models.order import SignedOrder, coerce_address
from modules.pricing import PricingEngine
from services.catalog_service import CatalogService


logger = get_logger(__name__)


class CheckoutService:
    """
    Produces signed quotes.

    Holds no per-request state; one instance serves every request thread.

    Args:
        pricing_engine: Engine configured with the active pricing rules
        signer: Signer holding the server key
        catalog: Product lookup
    """

    def __init__(
        self,
        pricing_engine: PricingEngine,
        signer: OrderSigner,
        catalog: CatalogService,
    ):
        self._pricing_engine = pricing_engine
        self._signer = signer
        self._catalog = catalog

    def checkout(self, cart: Any, address: Any) -> SignedOrder:
        """
        Price and sign a cart.

        Args:
            cart: List of {productCode, size} entries (sanitized, untrusted)
            address: Shipping address mapping (sanitized, untrusted)

        Returns:
            SignedOrder whose hash covers its cart, address and pricing

        Raises:
            InvalidRequestError: Cart empty/not a list, address not a mapping
            EmptyCartError: No line could be priced
            ProductLookupFailure: Catalog unavailable
        """
        if not isinstance(cart, list) or not cart:
            raise InvalidRequestError("Invalid request. Cart items are required.")
        if not isinstance(address, Mapping):
            raise InvalidRequestError("Invalid request. Address details are required.")

        shipping_address = coerce_address(address)
        priced = self._pricing_engine.price(cart, self._catalog.find_products_by_code)

        quote = SignedOrder(
            cart=priced.lines,
            address=shipping_address,
            pricing=priced.summary,
            hash="",
        )
        signed = replace(quote, hash=self._signer.sign(*quote.signed_fields()))

        logger.info(
            f"Quote signed: {len(signed.cart)} lines, total={signed.pricing.total}, "
            f"rules={self._pricing_engine.rules.name}"
        )
        return signed
