"""
Flask route blueprints for BrewOrderEntry.

- auth: Password gate (login/logout)
- api: Stock, customers, live parse preview, health
- orders: Pending order list, create/delete/reopen, ERP sync

Each blueprint is registered with the Flask app in create_app().
"""

from .auth import auth_bp
from .api import api_bp
from .orders import orders_bp

__all__ = [
    "auth_bp",
    "api_bp",
    "orders_bp",
]


def register_blueprints(app):
    """
    Register all blueprints with the Flask app.

    Args:
        app: Flask application instance
    """
    app.register_blueprint(auth_bp)
    app.register_blueprint(api_bp)
    app.register_blueprint(orders_bp)
