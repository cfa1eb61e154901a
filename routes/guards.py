"""
Request guards shared by the API blueprints.

- token_required: bearer-token check (skipped when AUTH_REQUIRED is off)
- read_json_body: parse and sanitize the JSON body
"""

from functools import wraps
from typing import Any, Dict, Optional

from flask import current_app, g, request

from core.exceptions import InvalidRequestError


def token_required(view):
    """
    Require a valid client token on a view.

    Sets ``g.client_id`` when a token was checked.
    """

    @wraps(view)
    def wrapper(*args, **kwargs):
        if current_app.config.get("AUTH_REQUIRED", True):
            issuer = current_app.config["TOKEN_ISSUER"]
            g.client_id = issuer.verify_header(request.headers.get("Authorization"))
        return view(*args, **kwargs)

    return wrapper


def read_json_body(error_message: Optional[str] = None) -> Dict[str, Any]:
    """
    Return the sanitized JSON object sent with the request.

    Args:
        error_message: Replaces the message of any rejection, for endpoints
            that must not reveal which check failed

    Raises:
        InvalidRequestError: Body missing, not a JSON object, or rejected by
            the sanitizer
    """
    body = request.get_json(silent=True)
    if not isinstance(body, dict):
        raise InvalidRequestError(error_message or "Request body must be a JSON object")

    sanitizer = current_app.config["REQUEST_SANITIZER"]
    try:
        return sanitizer.clean(body)
    except InvalidRequestError as e:
        if error_message:
            raise InvalidRequestError(error_message, e.details) from None
        raise
