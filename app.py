"""
Storefront backend - Flask Application Entry Point.

This is a slim app factory that:
1. Loads configuration (.env + config classes)
2. Configures thread-aware logging
3. Builds the document collections (JSON files or in-memory)
4. Builds the services (catalog, checkout, verification, newsletter, tokens)
5. Registers route blueprints and JSON error handlers

ARCHITECTURE:
    Flask request threads
    ├── routes/*          parse + sanitize body, call one service
    ├── services/*        shared, stateless between requests
    └── core/document_store   one lock per collection

Secrets (order signing key, token secret) are read once here and handed to
the objects that need them; nothing else reads them from the environment.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict

from dotenv import load_dotenv
from flask import Flask
from werkzeug.exceptions import HTTPException

from logging_config import setup_logging, get_logger
from core.auth import ClientTokenIssuer
from core.document_store import DocumentCollection, InMemoryCollection, JsonFileCollection
from core.exceptions import ConfigurationError, StorefrontError
from core.signer import OrderSigner
from modules.pricing import PricingEngine, get_pricing_rules
from modules.sanitizer import RequestSanitizer
from routes import register_blueprints
from services.catalog_service import CatalogService
from services.checkout_service import CheckoutService
from services.order_store import OrderStore
from services.subscription_service import SubscriptionService
from services.verification_service import VerificationGate


# Module logger (configured after setup_logging)
logger = get_logger(__name__)

DEV_ORDER_SIGNING_KEY = "dev-order-signing-key"
DEV_TOKEN_SECRET = "dev-token-secret"

# Longest string accepted anywhere in a request body
MAX_FIELD_LENGTH = 1000


def create_app(config_object: str = "config.Config", **overrides: Any) -> Flask:
    """
    Application factory - creates and configures the Flask app.

    Args:
        config_object: Import path of the config class
        **overrides: Config keys applied on top of the config class

    Returns:
        Configured Flask application

    Raises:
        ConfigurationError: Secrets missing in production, or an unknown
            pricing rule set / storage backend
    """
    env_file = Path(__file__).parent / ".env"
    if env_file.exists():
        load_dotenv(env_file)

    app = Flask(__name__)
    app.config.from_object(config_object)
    app.config.update(overrides)

    # Configure logging
    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = (
        app.config.get("ENVIRONMENT") == "production" and not app.config.get("TESTING")
    )

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting storefront in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # SECRETS AND RULES (FAIL-FAST)
    # =========================================================================

    signing_key = _require_secret(app, "ORDER_SIGNING_KEY", DEV_ORDER_SIGNING_KEY)
    token_secret = _require_secret(app, "TOKEN_SECRET", DEV_TOKEN_SECRET)
    pricing_rules = get_pricing_rules(app.config.get("PRICING_RULES", "flat"))
    logger.info(f"Pricing rules: {pricing_rules.name}")

    # =========================================================================
    # STORAGE
    # =========================================================================

    collections = _build_collections(app)
    app.config["CATALOG_COLLECTION"] = collections["product"]

    # =========================================================================
    # SERVICES INITIALIZATION
    # =========================================================================

    signer = OrderSigner(signing_key)
    catalog_service = CatalogService(collections["product"])
    order_store = OrderStore(collections["orders"])

    app.config["REQUEST_SANITIZER"] = RequestSanitizer(max_string_length=MAX_FIELD_LENGTH)
    app.config["TOKEN_ISSUER"] = ClientTokenIssuer(
        token_secret, max_age_seconds=app.config.get("TOKEN_MAX_AGE_SECONDS", 3600)
    )
    app.config["CATALOG_SERVICE"] = catalog_service
    app.config["ORDER_STORE"] = order_store
    app.config["SUBSCRIPTION_SERVICE"] = SubscriptionService(collections["emails"])
    app.config["CHECKOUT_SERVICE"] = CheckoutService(
        PricingEngine(pricing_rules), signer, catalog_service
    )
    app.config["VERIFICATION_GATE"] = VerificationGate(signer, order_store)
    logger.info("Services initialized")

    # =========================================================================
    # REGISTER BLUEPRINTS
    # =========================================================================

    register_blueprints(app)

    # =========================================================================
    # ERROR HANDLERS
    # =========================================================================

    @app.errorhandler(StorefrontError)
    def handle_storefront_error(e: StorefrontError):
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__}: {e}")
        else:
            logger.warning(f"Request rejected ({e.status_code}) {type(e).__name__}: {e.message}")
        return {"success": False, "message": e.message}, e.status_code

    @app.errorhandler(HTTPException)
    def handle_http_error(e: HTTPException):
        return {"success": False, "message": e.description}, e.code

    @app.errorhandler(Exception)
    def handle_unexpected_error(e: Exception):
        logger.error(f"500 error: {e}", exc_info=True)
        return {"success": False, "message": "Server error, please try again later"}, 500

    logger.info("Application initialized successfully")
    return app


def _require_secret(app: Flask, key: str, dev_default: str) -> str:
    """Return a secret from config; only non-production may fall back to a dev value."""
    value = app.config.get(key)
    if value:
        return value
    if app.config.get("ENVIRONMENT") == "production":
        raise ConfigurationError(key, "must be set in production")
    logger.warning(f"{key} not set - using development default")
    app.config[key] = dev_default
    return dev_default


def _build_collections(app: Flask) -> Dict[str, DocumentCollection]:
    """Create the product, orders and emails collections for the configured backend."""
    backend = app.config.get("STORAGE_BACKEND", "json")

    if backend == "memory":
        return {
            "product": InMemoryCollection("product"),
            "orders": InMemoryCollection("orders"),
            "emails": InMemoryCollection("emails", unique_fields=("email",)),
        }

    if backend == "json":
        data_dir = Path(app.config["DATA_DIR"])
        logger.info(f"Using JSON collections in {data_dir}")
        return {
            "product": JsonFileCollection("product", data_dir),
            "orders": JsonFileCollection("orders", data_dir),
            "emails": JsonFileCollection("emails", data_dir, unique_fields=("email",)),
        }

    raise ConfigurationError("STORAGE_BACKEND", f"unknown backend {backend!r}, expected 'json' or 'memory'")


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    app.run(debug=debug_mode, threaded=True)
