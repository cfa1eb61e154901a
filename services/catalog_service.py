"""
Catalog lookups over the product collection.

Product text is passed through the request sanitizer on the way out. Quotes
are built from these strings and the browser renders them as HTML, and a
sanitized string is left unchanged by a second pass, so a quote still
verifies after the resubmitted body is sanitized again.
"""

from __future__ import annotations

from typing import List, Optional, Sequence

from core.document_store import DocumentCollection, DocumentStoreError
from core.exceptions import ProductLookupFailure
from logging_config import get_logger
from models.catalog import Product
from modules.sanitizer import sanitize_text


logger = get_logger(__name__)


class CatalogService:
    """
    Read-only access to products by code.

    Args:
        collection: Collection holding product documents
    """

    def __init__(self, collection: DocumentCollection):
        self._collection = collection

    def find_products_by_code(self, codes: Sequence[str]) -> List[Product]:
        """
        Return every product whose code is in ``codes``.

        Raises:
            ProductLookupFailure: If the catalog cannot be queried
        """
        wanted = [str(code) for code in codes]
        try:
            documents = self._collection.find_by_field("product_code", wanted)
        except DocumentStoreError as e:
            logger.error(f"Catalog query failed: {e}")
            raise ProductLookupFailure(cause=str(e)) from e
        return [p for p in (self._to_product(d) for d in documents) if p is not None]

    def find_product_by_code(self, code: str) -> Optional[Product]:
        """
        Return the product with this code, or None.

        Raises:
            ProductLookupFailure: If the catalog cannot be queried
        """
        try:
            document = self._collection.find_one("product_code", str(code))
        except DocumentStoreError as e:
            logger.error(f"Catalog query failed: {e}")
            raise ProductLookupFailure(cause=str(e)) from e
        return self._to_product(document) if document else None

    def count(self) -> int:
        return self._collection.count()

    @staticmethod
    def _to_product(document: dict) -> Optional[Product]:
        product = Product.from_document(document)
        if product is None:
            return None
        return Product(
            product_code=product.product_code,
            name=sanitize_text(product.name),
            price=product.price,
            image_url=sanitize_text(product.image_url),
        )
