"""
API routes (JSON).

Handles:
- /api/stock     - Current stock snapshot
- /api/customers - Customer list (?refresh=1 reloads from the ERP)
- /api/parse     - Live preview of typed order text
- /health        - Health check endpoint
"""

from flask import Blueprint, current_app, request

from logging_config import get_logger
from .auth import login_required
from .orders import sanitize_order_text


# Module logger
logger = get_logger(__name__)

api_bp = Blueprint("api", __name__)


@api_bp.route("/api/stock", methods=["GET"])
@login_required
def stock():
    stock_service = current_app.config["STOCK_SERVICE"]
    snapshot = stock_service.get_snapshot()
    data = snapshot.to_dict()
    data["is_stale"] = snapshot.is_stale(3 * stock_service.refresh_interval_seconds)
    return data


@api_bp.route("/api/customers", methods=["GET"])
@login_required
def customers():
    order_service = current_app.config["ORDER_SERVICE"]
    if request.args.get("refresh") == "1":
        order_service.load_customers()
    return {"customers": [customer.to_dict() for customer in order_service.customers]}


@api_bp.route("/api/parse", methods=["POST"])
@login_required
def parse():
    """
    Parse order text for the live form.

    Called on every keystroke. Never changes stock; unknown tokens are
    simply missing from the returned lines.
    """
    payload = request.get_json(silent=True) or {}
    text = sanitize_order_text(payload.get("text"))
    return current_app.config["ORDER_SERVICE"].preview(text)


@api_bp.route("/health", methods=["GET"])
def health():
    stock_service = current_app.config.get("STOCK_SERVICE")
    order_service = current_app.config.get("ORDER_SERVICE")

    stock_loaded = bool(stock_service) and not stock_service.get_snapshot().is_empty
    return {
        "status": "ok" if stock_loaded else "degraded",
        "stock_loaded": stock_loaded,
        "stock_refresh_running": bool(stock_service) and stock_service.is_running,
        "pending_orders": len(order_service.store) if order_service else 0,
    }
