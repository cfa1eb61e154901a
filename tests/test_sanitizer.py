"""
Unit tests for request sanitization.
"""

import pytest

from core.exceptions import InvalidRequestError
from modules.sanitizer import MAX_DEPTH, RequestSanitizer, sanitize_text


@pytest.fixture
def sanitizer():
    return RequestSanitizer()


class TestSanitizeText:

    def test_strips_markup_and_whitespace(self):
        assert sanitize_text("  <b>Main</b> Street ") == "Main Street"

    def test_empty(self):
        assert sanitize_text("") == ""

    def test_truncates(self):
        assert sanitize_text("abcdef", max_length=3) == "abc"

    def test_idempotent(self):
        once = sanitize_text("Tom & Jerry <i>Lane</i> a < b")

        assert "<i>" not in once
        assert sanitize_text(once) == once


class TestRequestSanitizer:

    def test_cleans_nested_strings(self, sanitizer):
        body = {
            "cart": [{"productCode": "<em>P1</em>", "size": "M"}],
            "address": {"city": "<script>x</script>Pune", "pin": 411001},
        }

        cleaned = sanitizer.clean(body)

        assert cleaned["cart"][0]["productCode"] == "P1"
        assert "<script>" not in cleaned["address"]["city"]
        assert cleaned["address"]["pin"] == 411001

    def test_scalars_untouched(self, sanitizer):
        assert sanitizer.clean({"a": 1.5, "b": True, "c": None}) == {"a": 1.5, "b": True, "c": None}

    def test_does_not_modify_input(self, sanitizer):
        body = {"name": "<b>Asha</b>"}

        sanitizer.clean(body)

        assert body == {"name": "<b>Asha</b>"}

    @pytest.mark.parametrize("body", [
        {"$where": "1 == 1"},
        {"email": {"$gt": ""}},
        {"cart": [{"productCode": {"$ne": None}, "size": "M"}]},
    ])
    def test_operator_keys_rejected(self, sanitizer, body):
        with pytest.raises(InvalidRequestError):
            sanitizer.clean(body)

    def test_custom_error_message(self):
        sanitizer = RequestSanitizer(error_message="Order verification failed.")

        with pytest.raises(InvalidRequestError) as exc_info:
            sanitizer.clean({"$or": []})

        assert exc_info.value.message == "Order verification failed."

    def test_excessive_nesting_rejected(self, sanitizer):
        body = {}
        node = body
        for _ in range(MAX_DEPTH + 2):
            node["next"] = {}
            node = node["next"]

        with pytest.raises(InvalidRequestError):
            sanitizer.clean(body)

    def test_string_cap(self):
        sanitizer = RequestSanitizer(max_string_length=5)

        assert sanitizer.clean({"note": "abcdefgh"}) == {"note": "abcde"}
