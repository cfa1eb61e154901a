"""
HTTP tests for the API blueprints, using the Flask test client against an
app built with TestingConfig (in-memory collections, auth off unless a test
turns it on).
"""

import pytest

from app import create_app
from core.exceptions import ConfigurationError, VERIFICATION_FAILED_MESSAGE


PRODUCTS = [
    {"product_code": "P1", "product_name": "Silk Kurta", "product_price": 800,
     "product_imageurl": "images/p1.jpg"},
    {"product_code": "P2", "product_name": "Cotton Dupatta", "product_price": 450,
     "product_imageurl": "images/p2.jpg"},
    {"product_code": "P3", "product_name": "Salt & Pepper Stole", "product_price": 199.5,
     "product_imageurl": "images/p3.jpg"},
]

ADDRESS = {"name": "Asha Rao", "phone": "9876543210", "address": "12 MG Road",
           "city": "Pune", "state": "MH", "pin": "411001"}


# Fixtures

def _seeded_app(**overrides):
    app = create_app("config.TestingConfig", **overrides)
    app.config["CATALOG_COLLECTION"].insert_many(PRODUCTS)
    return app


@pytest.fixture
def app():
    return _seeded_app()


@pytest.fixture
def client(app):
    return app.test_client()


@pytest.fixture
def quote(client):
    """A signed order exactly as the checkout endpoint returns it."""
    response = client.post("/api/checkout", json={
        "cart": [{"productCode": "P1", "size": "M"}],
        "address": ADDRESS,
    })
    assert response.status_code == 200
    return response.get_json()["order"]


# Tests

class TestHealth:

    def test_health_ok(self, client):
        response = client.get("/api/health")

        assert response.status_code == 200
        data = response.get_json()
        assert data["status"] == "ok"
        assert data["environment"] == "testing"
        assert data["checks"] == {"catalog": "ok", "orders": "ok"}

    def test_unknown_route_uses_envelope(self, client):
        response = client.get("/api/nope")

        assert response.status_code == 404
        assert response.get_json()["success"] is False


class TestCheckoutEndpoint:

    def test_single_item_scenario(self, client):
        response = client.post("/api/checkout", json={
            "cart": [{"productCode": "P1", "size": "M"}],
            "address": ADDRESS,
        })

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        order = data["order"]
        assert order["pricing"] == {"subtotal": 800, "discount": 80, "delivery": 0, "total": 720}
        assert len(order["hash"]) == 64
        assert order["cart"][0]["productName"] == "Silk Kurta"

    def test_client_price_is_ignored(self, client):
        response = client.post("/api/checkout", json={
            "cart": [{"productCode": "P2", "size": "S", "price": 1}],
            "address": ADDRESS,
        })

        order = response.get_json()["order"]
        assert order["cart"][0]["price"] == 450
        assert order["pricing"] == {"subtotal": 450, "discount": 45, "delivery": 150, "total": 555}

    def test_unknown_codes_give_404(self, client):
        response = client.post("/api/checkout", json={
            "cart": [{"productCode": "NOPE", "size": "M"}],
            "address": ADDRESS,
        })

        assert response.status_code == 404
        assert response.get_json() == {"success": False, "message": "No valid items in cart"}

    def test_missing_cart_is_400(self, client):
        response = client.post("/api/checkout", json={"address": ADDRESS})

        assert response.status_code == 400
        assert response.get_json()["success"] is False

    def test_non_json_body_is_400(self, client):
        response = client.post("/api/checkout", data="cart=P1", content_type="text/plain")

        assert response.status_code == 400

    def test_operator_keys_are_rejected(self, client):
        response = client.post("/api/checkout", json={
            "cart": [{"productCode": {"$ne": ""}, "size": "M"}],
            "address": ADDRESS,
        })

        assert response.status_code == 400

    def test_tiered_rules(self):
        client = _seeded_app(PRICING_RULES="tiered").test_client()

        response = client.post("/api/checkout", json={
            "cart": [{"productCode": "P1", "size": "M"}] * 4,
            "address": ADDRESS,
        })

        assert response.get_json()["order"]["pricing"] == {
            "subtotal": 3200, "discount": 300, "delivery": 0, "total": 2900,
        }


class TestVerifyAndSave:

    def test_round_trip_saves_order(self, app, client, quote):
        response = client.post("/api/verify-and-save", json=quote)

        assert response.status_code == 200
        data = response.get_json()
        assert data["success"] is True
        assert data["message"] == "Order saved successfully"
        assert data["orderId"]
        assert app.config["ORDER_STORE"].count() == 1

    def test_save_order_nested_shape(self, app, client, quote):
        response = client.post("/api/save-order", json={
            "order": {"cart": quote["cart"], "address": quote["address"], "pricing": quote["pricing"]},
            "orderHash": quote["hash"],
        })

        assert response.status_code == 200
        assert app.config["ORDER_STORE"].count() == 1

    def test_tampered_total_rejected(self, app, client, quote):
        quote["pricing"]["total"] = 1

        response = client.post("/api/verify-and-save", json=quote)

        assert response.status_code == 400
        assert response.get_json() == {"success": False, "message": VERIFICATION_FAILED_MESSAGE}
        assert app.config["ORDER_STORE"].count() == 0

    def test_response_never_contains_hash(self, client, quote):
        genuine = quote["hash"]
        quote["cart"][0]["price"] = 1

        response = client.post("/api/verify-and-save", json=quote)

        assert genuine not in response.get_data(as_text=True)

    @pytest.mark.parametrize("body", [
        {"cart": [{"productCode": "P1"}], "address": {}, "pricing": {}},
        {"hash": "abc"},
        {"cart": [{"productCode": {"$gt": ""}}], "address": {}, "pricing": {}, "hash": "abc"},
    ])
    def test_malformed_body_gets_same_answer(self, app, client, body):
        response = client.post("/api/verify-and-save", json=body)

        assert response.status_code == 400
        assert response.get_json() == {"success": False, "message": VERIFICATION_FAILED_MESSAGE}
        assert app.config["ORDER_STORE"].count() == 0

    def test_quote_from_another_server_rejected(self, quote):
        other = _seeded_app(ORDER_SIGNING_KEY="a-different-key").test_client()

        response = other.post("/api/verify-and-save", json=quote)

        assert response.status_code == 400

    def test_markup_in_address_is_stripped_and_verifies(self, client):
        address = dict(ADDRESS, address="<b>12</b> MG Road<script>x</script>")
        checkout = client.post("/api/checkout", json={
            "cart": [{"productCode": "P1", "size": "M"}], "address": address,
        })
        quote = checkout.get_json()["order"]

        assert "<" not in quote["address"]["address"]
        assert client.post("/api/verify-and-save", json=quote).status_code == 200

    def test_catalog_text_with_ampersand_verifies(self, client):
        checkout = client.post("/api/checkout", json={
            "cart": [{"productCode": "P3", "size": "Free"}], "address": ADDRESS,
        })
        quote = checkout.get_json()["order"]

        assert quote["cart"][0]["price"] == 199.5
        assert client.post("/api/verify-and-save", json=quote).status_code == 200


class TestAuthentication:

    @pytest.fixture
    def secured_client(self):
        return _seeded_app(AUTH_REQUIRED=True).test_client()

    def test_missing_header_is_401(self, secured_client):
        response = secured_client.post("/api/subscribe", json={"email": "a@example.com"})

        assert response.status_code == 401
        assert response.get_json()["message"] == "Authorization header missing"

    def test_bad_token_is_403(self, secured_client):
        response = secured_client.post(
            "/api/subscribe",
            json={"email": "a@example.com"},
            headers={"Authorization": "Bearer not-a-real-token"},
        )

        assert response.status_code == 403

    def test_issued_token_is_accepted(self, secured_client):
        token = secured_client.post("/api/get-token").get_json()["token"]

        response = secured_client.post(
            "/api/checkout",
            json={"cart": [{"productCode": "P1", "size": "M"}], "address": ADDRESS},
            headers={"Authorization": f"Bearer {token}"},
        )

        assert response.status_code == 200

    def test_health_needs_no_token(self, secured_client):
        assert secured_client.get("/api/health").status_code == 200


class TestNewsletterAndCollection:

    def test_subscribe_then_duplicate(self, client):
        first = client.post("/api/subscribe", json={"email": "reader@example.com"})
        second = client.post("/api/subscribe", json={"email": "Reader@Example.com"})

        assert first.status_code == 201
        assert first.get_json()["message"] == "Successfully subscribed to newsletter!"
        assert second.status_code == 409
        assert second.get_json()["message"] == "This email is already subscribed"

    def test_subscribe_invalid_email(self, client):
        response = client.post("/api/subscribe", json={"email": "nope"})

        assert response.status_code == 400

    def test_add_to_collection(self, client):
        response = client.post("/api/add-to-collection", json={"productName": "P2", "size": "L"})

        assert response.status_code == 200
        data = response.get_json()
        assert data["product"]["productCode"] == "P2"
        assert data["product"]["price"] == 450
        assert data["size"] == "L"

    def test_add_unknown_product(self, client):
        response = client.post("/api/add-to-collection", json={"productCode": "ZZ", "size": "L"})

        assert response.status_code == 404
        assert response.get_json()["message"] == "Product not found"

    def test_add_without_size(self, client):
        response = client.post("/api/add-to-collection", json={"productCode": "P1"})

        assert response.status_code == 400


class TestAppConfiguration:

    def test_production_requires_signing_key(self):
        with pytest.raises(ConfigurationError):
            create_app("config.TestingConfig", ENVIRONMENT="production", ORDER_SIGNING_KEY="")

    def test_unknown_pricing_rules(self):
        with pytest.raises(ConfigurationError):
            create_app("config.TestingConfig", PRICING_RULES="bogus")

    def test_unknown_storage_backend(self):
        with pytest.raises(ConfigurationError):
            create_app("config.TestingConfig", STORAGE_BACKEND="mongo")

    def test_json_backend_persists_orders(self, tmp_path):
        app = _seeded_app(STORAGE_BACKEND="json", DATA_DIR=str(tmp_path))
        client = app.test_client()
        quote = client.post("/api/checkout", json={
            "cart": [{"productCode": "P1", "size": "M"}], "address": ADDRESS,
        }).get_json()["order"]

        response = client.post("/api/verify-and-save", json=quote)

        assert response.status_code == 200
        assert (tmp_path / "orders.json").exists()
        assert app.config["ORDER_STORE"].count() == 1
