"""Newsletter subscriptions."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from typing import Any

from core.document_store import DocumentCollection, DocumentStoreError, DuplicateKeyError
from core.exceptions import DuplicateSubscriptionError, InvalidRequestError, StorageError
from logging_config import get_logger


logger = get_logger(__name__)

EMAIL_PATTERN = re.compile(r"^[\w.-]+@([\w-]+\.)+[\w-]{2,4}$")


class SubscriptionService:
    """
    Adds email addresses to the newsletter list.

    The subscriber collection must declare ``email`` as a unique field; the
    duplicate check and the insert then happen under one lock.
    """

    def __init__(self, collection: DocumentCollection):
        self._collection = collection

    def subscribe(self, email: Any) -> str:
        """
        Subscribe an address and return it in normalized form.

        Raises:
            InvalidRequestError: Not a string, empty or not an email address
            DuplicateSubscriptionError: Already subscribed
            StorageError: Subscriber collection could not be written
        """
        if not isinstance(email, str):
            raise InvalidRequestError("Invalid email format")

        normalized = email.strip().lower()
        if not normalized:
            raise InvalidRequestError("Email is required")
        if not EMAIL_PATTERN.match(normalized):
            raise InvalidRequestError("Please enter a valid email address")

        try:
            self._collection.insert_one({
                "email": normalized,
                "subscriptionDate": datetime.now(timezone.utc).isoformat(),
            })
        except DuplicateKeyError:
            raise DuplicateSubscriptionError(normalized) from None
        except DocumentStoreError as e:
            logger.error(f"Saving subscription failed: {e}")
            raise StorageError("Server error, please try again later", cause=str(e)) from e

        logger.info("New newsletter subscription")
        return normalized
