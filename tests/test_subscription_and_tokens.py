"""
Unit tests for newsletter subscriptions and client tokens.
"""

from unittest.mock import MagicMock

import pytest

from core.auth import ClientTokenIssuer
from core.document_store import DocumentStoreError, InMemoryCollection
from core.exceptions import (
    AuthenticationError,
    DuplicateSubscriptionError,
    InvalidRequestError,
    InvalidTokenError,
    StorageError,
)
from services.subscription_service import SubscriptionService


@pytest.fixture
def emails():
    return InMemoryCollection("emails", unique_fields=("email",))


@pytest.fixture
def service(emails):
    return SubscriptionService(emails)


@pytest.fixture
def issuer():
    return ClientTokenIssuer("unit-token-secret")


class TestSubscribe:

    def test_stores_normalized_email(self, service, emails):
        result = service.subscribe("  Asha.Rao@Example.COM ")

        assert result == "asha.rao@example.com"
        stored = emails.find_one("email", "asha.rao@example.com")
        assert stored is not None
        assert "subscriptionDate" in stored

    @pytest.mark.parametrize("value,message", [
        (None, "Invalid email format"),
        (42, "Invalid email format"),
        (["a@b.com"], "Invalid email format"),
        ("   ", "Email is required"),
        ("not-an-email", "Please enter a valid email address"),
        ("a@b", "Please enter a valid email address"),
        ("a@b.toolongtld", "Please enter a valid email address"),
    ])
    def test_rejects_bad_input(self, service, emails, value, message):
        with pytest.raises(InvalidRequestError) as exc_info:
            service.subscribe(value)

        assert exc_info.value.message == message
        assert emails.count() == 0

    def test_duplicate_is_case_insensitive(self, service, emails):
        service.subscribe("reader@example.com")

        with pytest.raises(DuplicateSubscriptionError) as exc_info:
            service.subscribe("READER@example.com")

        assert exc_info.value.status_code == 409
        assert emails.count() == 1

    def test_store_failure(self):
        broken = MagicMock()
        broken.insert_one.side_effect = DocumentStoreError("disk full")

        with pytest.raises(StorageError):
            SubscriptionService(broken).subscribe("reader@example.com")


class TestClientTokens:

    def test_issue_and_verify(self, issuer):
        client_id, token = issuer.issue()

        assert len(client_id) == 32
        assert issuer.verify(token) == client_id

    def test_tokens_are_unique(self, issuer):
        assert issuer.issue()[1] != issuer.issue()[1]

    def test_tampered_token(self, issuer):
        _, token = issuer.issue()

        with pytest.raises(InvalidTokenError):
            issuer.verify(token[:-2] + ("AA" if not token.endswith("AA") else "BB"))

    def test_token_from_other_secret(self, issuer):
        _, token = ClientTokenIssuer("another-secret").issue()

        with pytest.raises(InvalidTokenError):
            issuer.verify(token)

    def test_expired_token(self):
        issuer = ClientTokenIssuer("unit-token-secret", max_age_seconds=-1)
        _, token = issuer.issue()

        with pytest.raises(InvalidTokenError) as exc_info:
            issuer.verify(token)

        assert exc_info.value.status_code == 403

    def test_empty_secret_refused(self):
        with pytest.raises(ValueError):
            ClientTokenIssuer("")

    @pytest.mark.parametrize("header", [None, "", "Bearer", "Bearer   ", "Basic abc", "Token abc"])
    def test_missing_token_is_401(self, issuer, header):
        with pytest.raises(AuthenticationError) as exc_info:
            issuer.verify_header(header)

        assert not isinstance(exc_info.value, InvalidTokenError)
        assert exc_info.value.status_code == 401

    def test_garbage_token_is_403(self, issuer):
        with pytest.raises(InvalidTokenError):
            issuer.verify_header("Bearer garbage")

    def test_valid_header(self, issuer):
        client_id, token = issuer.issue()

        assert issuer.verify_header(f"Bearer {token}") == client_id
