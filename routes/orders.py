"""
Order routes (two-phase checkout).

Handles:
- /api/checkout        - Price and sign a cart
- /api/verify-and-save - Verify a signed order and store it
- /api/save-order      - Same as verify-and-save (nested payload variant)
"""

from flask import Blueprint, current_app

from core.exceptions import VERIFICATION_FAILED_MESSAGE
from routes.guards import read_json_body, token_required


orders_bp = Blueprint("orders", __name__, url_prefix="/api")


@orders_bp.route("/checkout", methods=["POST"])
@token_required
def checkout():
    """
    Build a signed quote.

    Body: {"cart": [{"productCode", "size"}], "address": {...}}
    Response: {"success": true, "order": {cart, address, pricing, hash}}
    """
    body = read_json_body()
    checkout_service = current_app.config["CHECKOUT_SERVICE"]

    order = checkout_service.checkout(body.get("cart"), body.get("address"))

    return {"success": True, "order": order.to_dict()}, 200


@orders_bp.route("/verify-and-save", methods=["POST"])
@orders_bp.route("/save-order", methods=["POST"])
@token_required
def verify_and_save():
    """
    Verify a resubmitted quote and store it.

    Body: {"cart", "address", "pricing", "hash"}
       or {"order": {"cart", "address", "pricing"}, "orderHash"}
    Response: {"success": true, "message", "orderId"}
    """
    body = read_json_body(error_message=VERIFICATION_FAILED_MESSAGE)
    gate = current_app.config["VERIFICATION_GATE"]

    persisted = gate.verify_and_persist(body)

    return {
        "success": True,
        "message": "Order saved successfully",
        "orderId": persisted.order_id,
    }, 200
