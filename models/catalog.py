"""
Catalog data model.

Products are owned by the catalog collection and are read-only here. Stored
documents keep the storefront's historical field names (product_code,
product_name, product_price, product_imageurl).
"""

from __future__ import annotations

from dataclasses import dataclass
from decimal import Decimal
from typing import Any, Dict, Optional

from models.money import money_to_json, parse_money


@dataclass(frozen=True)
class Product:
    """A catalog entry."""

    product_code: str
    name: str
    price: Decimal
    image_url: str = ""

    @classmethod
    def from_document(cls, document: Dict[str, Any]) -> Optional["Product"]:
        """
        Build a Product from a stored document.

        Returns None when the document has no usable product code.
        """
        code = document.get("product_code")
        if not isinstance(code, str) or not code.strip():
            return None
        name = document.get("product_name")
        image_url = document.get("product_imageurl")
        return cls(
            product_code=code.strip(),
            name=name if isinstance(name, str) else "",
            price=parse_money(document.get("product_price")),
            image_url=image_url if isinstance(image_url, str) else "",
        )

    def to_document(self) -> Dict[str, Any]:
        """Convert to the stored document layout."""
        return {
            "product_code": self.product_code,
            "product_name": self.name,
            "product_price": money_to_json(self.price),
            "product_imageurl": self.image_url,
        }

    def to_dict(self) -> Dict[str, Any]:
        """Convert to the API representation."""
        return {
            "productCode": self.product_code,
            "productName": self.name,
            "price": money_to_json(self.price),
            "imageUrl": self.image_url,
        }
