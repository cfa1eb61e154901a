"""
Newsletter routes.

Handles:
- /api/subscribe - Add an email address to the newsletter list
"""

from flask import Blueprint, current_app

from routes.guards import read_json_body, token_required


newsletter_bp = Blueprint("newsletter", __name__, url_prefix="/api")


@newsletter_bp.route("/subscribe", methods=["POST"])
@token_required
def subscribe():
    """Body: {"email"}. Answers 201 on success, 409 if already subscribed."""
    body = read_json_body()
    subscriptions = current_app.config["SUBSCRIPTION_SERVICE"]

    subscriptions.subscribe(body.get("email"))

    return {"success": True, "message": "Successfully subscribed to newsletter!"}, 201
