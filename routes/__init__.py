"""
Flask route blueprints for the storefront backend.

This module contains all route handlers organized by functionality:
- api: Client tokens and health check
- catalog: Product lookup for the browser cart
- newsletter: Email subscriptions
- orders: Checkout and order verification

Each blueprint is registered with the Flask app in create_app().
"""

from .api import api_bp
from .catalog import catalog_bp
from .newsletter import newsletter_bp
from .orders import orders_bp

__all__ = [
    "api_bp",
    "catalog_bp",
    "newsletter_bp",
    "orders_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(api_bp)
    app.register_blueprint(catalog_bp)
    app.register_blueprint(newsletter_bp)
    app.register_blueprint(orders_bp)
