"""
Configuration for the storefront backend.

All secrets come from the environment (or a .env file next to the app).
Production refuses to start without its signing secrets; see
``_require_secret`` in app.py.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
load_dotenv()

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


def _env_flag(name: str, default: str) -> bool:
    return os.environ.get(name, default).strip().lower() in ("1", "true", "yes", "on")


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    MAX_CONTENT_LENGTH = 1 * 1024 * 1024  # 1 MB JSON bodies
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")
    DEBUG = _env_flag("FLASK_DEBUG", "1")

    # ==========================================================================
    # Order integrity
    # ==========================================================================
    # ORDER_SIGNING_KEY: HMAC key for checkout quotes. Never sent to clients.
    # Changing it invalidates every quote that has not been saved yet.
    # ==========================================================================
    ORDER_SIGNING_KEY = os.environ.get("ORDER_SIGNING_KEY", "")

    # ==========================================================================
    # Client tokens
    # ==========================================================================
    TOKEN_SECRET = os.environ.get("TOKEN_SECRET", "")
    TOKEN_MAX_AGE_SECONDS = int(os.environ.get("TOKEN_MAX_AGE_SECONDS", "3600"))
    AUTH_REQUIRED = _env_flag("AUTH_REQUIRED", "1")

    # ==========================================================================
    # Pricing
    # ==========================================================================
    # PRICING_RULES: "flat"   - 10% off, free delivery above 700, else 150
    #                "tiered" - flat 300 off from 2599 to 4999, 10% above,
    #                           free delivery above 1699, else 70
    # ==========================================================================
    PRICING_RULES = os.environ.get("PRICING_RULES", "flat")

    # ==========================================================================
    # Storage
    # ==========================================================================
    # STORAGE_BACKEND: "json" keeps collections as JSON files under DATA_DIR,
    #                  "memory" keeps them in process (lost on restart)
    # ==========================================================================
    STORAGE_BACKEND = os.environ.get("STORAGE_BACKEND", "json")
    DATA_DIR = os.environ.get("DATA_DIR", str(BASE_DIR / "data"))


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    ENVIRONMENT = "production"


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    ENVIRONMENT = "testing"
    ORDER_SIGNING_KEY = "test-order-signing-key"
    TOKEN_SECRET = "test-token-secret"
    AUTH_REQUIRED = False
    STORAGE_BACKEND = "memory"
    PRICING_RULES = "flat"
