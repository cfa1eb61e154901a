"""Server-side cart pricing."""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal, ROUND_FLOOR, ROUND_HALF_UP
from typing import Any, Callable, Dict, Iterable, List, Optional, Sequence, Tuple

from core.exceptions import ConfigurationError, EmptyCartError
from logging_config import get_logger
from models.catalog import Product
from models.money import CENT, ZERO, round_money
from models.order import CartLineInput, PricedCart, PricedLine, PricingSummary


logger = get_logger(__name__)

# Catalog lookup: product codes in, matching products out.
ProductLookup = Callable[[Sequence[str]], List[Product]]


@dataclass(frozen=True)
class DiscountTier:
    """
    One band of the discount schedule.

    A tier applies when ``floor <= subtotal <= ceiling`` (``floor < subtotal``
    when ``floor_inclusive`` is False; no upper limit when ``ceiling`` is None).
    The discount is ``flat + subtotal * percent`` rounded to ``quantum``.
    """

    floor: Decimal
    ceiling: Optional[Decimal] = None
    percent: Decimal = ZERO
    flat: Decimal = ZERO
    quantum: Decimal = CENT
    rounding: str = ROUND_HALF_UP
    floor_inclusive: bool = True

    def applies_to(self, subtotal: Decimal) -> bool:
        if self.floor_inclusive:
            above_floor = subtotal >= self.floor
        else:
            above_floor = subtotal > self.floor
        below_ceiling = self.ceiling is None or subtotal <= self.ceiling
        return above_floor and below_ceiling

    def discount_for(self, subtotal: Decimal) -> Decimal:
        raw = self.flat + subtotal * self.percent
        return raw.quantize(self.quantum, rounding=self.rounding)


@dataclass(frozen=True)
class PricingRules:
    """
    Discount and delivery rules, selected by name from config.

    Delivery is free only when the subtotal is strictly greater than
    ``free_delivery_above``.
    """

    name: str
    discount_tiers: Tuple[DiscountTier, ...]
    free_delivery_above: Decimal
    delivery_fee: Decimal

    def discount_for(self, subtotal: Decimal) -> Decimal:
        for tier in self.discount_tiers:
            if tier.applies_to(subtotal):
                return tier.discount_for(subtotal)
        return ZERO

    def delivery_for(self, subtotal: Decimal) -> Decimal:
        return ZERO if subtotal > self.free_delivery_above else self.delivery_fee


# The three backends: 10% off everything, free delivery above 700.
FLAT_RULES = PricingRules(
    name="flat",
    discount_tiers=(DiscountTier(floor=ZERO, percent=Decimal("0.10")),),
    free_delivery_above=Decimal("700"),
    delivery_fee=Decimal("150"),
)

# The browser cart: flat 300 off from 2599 to 4999, 10% (whole rupees,
# rounded down) above 4999, free delivery above 1699.
TIERED_RULES = PricingRules(
    name="tiered",
    discount_tiers=(
        DiscountTier(floor=Decimal("2599"), ceiling=Decimal("4999"), flat=Decimal("300")),
        DiscountTier(
            floor=Decimal("4999"),
            percent=Decimal("0.10"),
            quantum=Decimal("1"),
            rounding=ROUND_FLOOR,
            floor_inclusive=False,
        ),
    ),
    free_delivery_above=Decimal("1699"),
    delivery_fee=Decimal("70"),
)

PRICING_RULES: Dict[str, PricingRules] = {
    FLAT_RULES.name: FLAT_RULES,
    TIERED_RULES.name: TIERED_RULES,
}


def get_pricing_rules(name: str) -> PricingRules:
    """
    Look up a rule set by its config name.

    Raises:
        ConfigurationError: If no rule set has that name
    """
    try:
        return PRICING_RULES[name]
    except KeyError:
        raise ConfigurationError(
            "PRICING_RULES", f"unknown rule set {name!r}, expected one of {sorted(PRICING_RULES)}"
        ) from None


class PricingEngine:
    """
    Turns an untrusted cart into priced lines and totals.

    Malformed lines and unknown product codes are dropped rather than
    failing the whole cart; only an empty result is an error.
    """

    def __init__(self, rules: PricingRules = FLAT_RULES):
        self.rules = rules

    def price(self, raw_cart: Iterable[Any], lookup: ProductLookup) -> PricedCart:
        """
        Price a cart against the catalog.

        Args:
            raw_cart: Client cart entries ({productCode, size})
            lookup: Catalog query for a list of product codes

        Returns:
            PricedCart with the surviving lines and their totals

        Raises:
            EmptyCartError: If no line survives validation and lookup
            ProductLookupFailure: Propagated from ``lookup``
        """
        raw_lines = list(raw_cart)
        inputs = [CartLineInput.from_raw(raw) for raw in raw_lines]
        valid = [line for line in inputs if line is not None]

        products: Dict[str, List[Product]] = {}
        if valid:
            codes = sorted({line.product_code for line in valid})
            for product in lookup(codes):
                products.setdefault(product.product_code, []).append(product)

        priced: List[PricedLine] = []
        for line in valid:
            matches = products.get(line.product_code, [])
            if len(matches) != 1:
                if matches:
                    logger.warning(
                        f"Product code {line.product_code!r} matches {len(matches)} catalog entries, line dropped"
                    )
                continue
            product = matches[0]
            priced.append(PricedLine(
                product_code=product.product_code,
                product_name=product.name,
                price=product.price,
                image_url=product.image_url,
                size=line.size,
            ))

        dropped = len(raw_lines) - len(priced)
        if not priced:
            raise EmptyCartError(dropped=dropped)
        if dropped:
            logger.info(f"Dropped {dropped} of {len(raw_lines)} cart lines")

        return PricedCart(
            lines=tuple(priced),
            summary=self.summarize(line.price for line in priced),
            dropped=dropped,
        )

    def summarize(self, prices: Iterable[Decimal]) -> PricingSummary:
        """Compute subtotal, discount, delivery and total for line prices."""
        subtotal = sum(prices, ZERO)
        discount = self.rules.discount_for(subtotal)
        delivery = self.rules.delivery_for(subtotal)
        total = round_money(subtotal + delivery - discount)
        return PricingSummary(
            subtotal=subtotal,
            discount=discount,
            delivery=delivery,
            total=total,
        )
