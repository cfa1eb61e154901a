"""
Sanitization of inbound request bodies.

Every JSON body passes through RequestSanitizer before domain code sees it:
    - strings lose any HTML markup (bleach, no tags allowed) and are trimmed
    - mapping keys starting with "$" are rejected, so a body can never smuggle
      a document-store operator into a query
    - nesting deeper than MAX_DEPTH is rejected

Numbers, booleans and null pass through untouched.
"""

from __future__ import annotations

from typing import Any, Optional

import bleach

from core.exceptions import InvalidRequestError


MAX_DEPTH = 16


def sanitize_text(text: str, max_length: Optional[int] = None) -> str:
    """Strip markup and surrounding whitespace from user text."""
    if not text:
        return ""
    text = bleach.clean(text.strip(), tags=[], strip=True).strip()
    if max_length and len(text) > max_length:
        text = text[:max_length]
    return text


class RequestSanitizer:
    """
    Cleans untrusted JSON structures.

    Args:
        max_string_length: Optional cap applied to every string value
        error_message: Message for InvalidRequestError on rejection
    """

    def __init__(
        self,
        max_string_length: Optional[int] = None,
        error_message: str = "Invalid request format",
    ):
        self.max_string_length = max_string_length
        self.error_message = error_message

    def clean(self, value: Any) -> Any:
        """
        Return a sanitized copy of ``value``.

        Raises:
            InvalidRequestError: On operator keys or excessive nesting
        """
        return self._clean(value, depth=0)

    def _clean(self, value: Any, depth: int) -> Any:
        if depth > MAX_DEPTH:
            raise InvalidRequestError(self.error_message, {"reason": "nesting too deep"})

        if isinstance(value, str):
            return sanitize_text(value, self.max_string_length)

        if isinstance(value, dict):
            cleaned = {}
            for key, item in value.items():
                key = str(key)
                if key.startswith("$"):
                    raise InvalidRequestError(self.error_message, {"reason": "operator key", "key": key})
                cleaned[key] = self._clean(item, depth + 1)
            return cleaned

        if isinstance(value, list):
            return [self._clean(item, depth + 1) for item in value]

        return value
