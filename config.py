"""
Configuration for BrewOrderEntry.

Values are read from the environment (and a local .env file) so the same
build can point at a test ERP or the production one.
"""

import os
from pathlib import Path

from dotenv import load_dotenv

# Load .env file early so environment variables are available for Config class
load_dotenv(override=True)

# Base directory (where this file lives)
BASE_DIR = Path(__file__).resolve().parent


class Config:
    """Default configuration for the Flask application."""

    # Flask settings
    SECRET_KEY = os.environ.get("FLASK_SECRET_KEY", "dev-secret-key")
    SESSION_COOKIE_NAME = "brew_order_session"
    ENVIRONMENT = os.environ.get("FLASK_ENV", "development")

    # Debug mode
    DEBUG = os.environ.get("FLASK_DEBUG", "1") == "1"
    TESTING = False

    # ==========================================================================
    # Remote ERP
    # ==========================================================================
    # ERP_BASE_URL: root of the business system's JSON API
    #   (GET /stock, GET /customers, POST /orders)
    # ERP_API_KEY: sent as a Bearer token, empty disables the header
    # ==========================================================================
    ERP_BASE_URL = os.environ.get("ERP_BASE_URL", "http://localhost:8069/api")
    ERP_API_KEY = os.environ.get("ERP_API_KEY", "")
    ERP_TIMEOUT_SECONDS = float(os.environ.get("ERP_TIMEOUT_SECONDS", "10"))

    # Seconds between background stock refreshes
    STOCK_REFRESH_SECONDS = float(os.environ.get("STOCK_REFRESH_SECONDS", "60"))

    # Pending orders are kept here until the ERP confirms them
    PENDING_ORDERS_FILE = os.environ.get(
        "PENDING_ORDERS_FILE", str(BASE_DIR / "data" / "pending_orders.json")
    )

    # Shared staff password for the order form
    ORDER_ENTRY_PASSWORD = os.environ.get("ORDER_ENTRY_PASSWORD", "brewery")

    MAX_ORDER_TEXT_LENGTH = int(os.environ.get("MAX_ORDER_TEXT_LENGTH", "2000"))


class ProductionConfig(Config):
    """Production configuration."""
    DEBUG = False
    TESTING = False
    SESSION_COOKIE_SECURE = True
    SESSION_COOKIE_HTTPONLY = True
    SESSION_COOKIE_SAMESITE = 'Lax'
    PERMANENT_SESSION_LIFETIME = 8 * 3600  # one working day


class DevelopmentConfig(Config):
    """Development configuration."""
    DEBUG = True
    TESTING = False


class TestingConfig(Config):
    """Testing configuration."""
    DEBUG = False
    TESTING = True
    SECRET_KEY = "test-secret-key"
    ORDER_ENTRY_PASSWORD = "test-password"
    STOCK_REFRESH_SECONDS = 3600.0
