"""Persistence of verified orders."""

from __future__ import annotations

from core.document_store import DocumentCollection, DocumentStoreError
from core.exceptions import StorageError
from logging_config import get_logger
from models.order import PersistedOrder


logger = get_logger(__name__)


class OrderStore:
    """Append-only order collection."""

    def __init__(self, collection: DocumentCollection):
        self._collection = collection

    def insert_order(self, order: PersistedOrder) -> str:
        """
        Write an order and return its id.

        Raises:
            StorageError: If the write fails; nothing is committed
        """
        try:
            order_id = self._collection.insert_one(order.to_document())
        except DocumentStoreError as e:
            logger.error(f"Order insert failed: {e}")
            raise StorageError(cause=str(e)) from e
        order.order_id = order_id
        return order_id

    def count(self) -> int:
        return self._collection.count()
