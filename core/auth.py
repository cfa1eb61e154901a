"""
Client tokens for the public API.

A browser asks for a token once (POST /api/get-token) and sends it back as
``Authorization: Bearer <token>``. The token is an itsdangerous timed
signature over a random client id, so the server keeps no session table.
"""

from __future__ import annotations

import secrets
from typing import Optional, Tuple

from itsdangerous import BadSignature, SignatureExpired, URLSafeTimedSerializer

from core.exceptions import AuthenticationError, InvalidTokenError
from logging_config import get_logger


logger = get_logger(__name__)

TOKEN_SALT = "storefront-client-token"


class ClientTokenIssuer:
    """
    Issues and checks bearer tokens.

    Args:
        secret: Signing secret for the tokens (separate from the order key)
        max_age_seconds: Token lifetime
    """

    def __init__(self, secret: str, max_age_seconds: int = 3600):
        if not secret:
            raise ValueError("Token secret must not be empty")
        self._serializer = URLSafeTimedSerializer(secret, salt=TOKEN_SALT)
        self.max_age_seconds = max_age_seconds

    def issue(self) -> Tuple[str, str]:
        """
        Create a token for a new anonymous client.

        Returns:
            (client_id, token)
        """
        client_id = secrets.token_hex(16)
        token = self._serializer.dumps({"clientId": client_id})
        logger.debug(f"Issued token for client {client_id[:8]}")
        return client_id, token

    def verify(self, token: str) -> str:
        """
        Return the client id carried by a token.

        Raises:
            InvalidTokenError: If the token is tampered with, malformed or expired
        """
        try:
            payload = self._serializer.loads(token, max_age=self.max_age_seconds)
        except SignatureExpired:
            logger.info("Rejected expired client token")
            raise InvalidTokenError() from None
        except BadSignature:
            raise InvalidTokenError() from None

        client_id = payload.get("clientId") if isinstance(payload, dict) else None
        if not isinstance(client_id, str):
            raise InvalidTokenError()
        return client_id

    def verify_header(self, header: Optional[str]) -> str:
        """
        Check an ``Authorization`` header value.

        Raises:
            AuthenticationError: Header missing or carries no token (401)
            InvalidTokenError: Token present but invalid (403)
        """
        if not header:
            raise AuthenticationError("Authorization header missing")

        parts = header.split(" ", 1)
        token = parts[1].strip() if len(parts) == 2 and parts[0] == "Bearer" else ""
        if not token:
            raise AuthenticationError("Token not provided")

        return self.verify(token)
