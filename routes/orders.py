"""
Order routes (JSON).

Handles:
- GET    /api/orders                     - Pending orders
- POST   /api/orders                     - Queue a new order
- DELETE /api/orders/<local_id>          - Drop a pending order
- POST   /api/orders/<local_id>/reopen   - Take an order back for editing
- POST   /api/sync                       - Submit pending orders to the ERP
"""

import bleach
from flask import Blueprint, current_app, request

from models.order import SubmittedOrder
from modules.order_formatter import format_order_lines
from modules.order_totals import summarize_lines
from logging_config import get_logger
from .auth import login_required


# Module logger
logger = get_logger(__name__)

orders_bp = Blueprint("orders", __name__)


def sanitize_order_text(text) -> str:
    """
    Strip markup and clamp order text to MAX_ORDER_TEXT_LENGTH.

    Over-long text is cut at the last comma within the limit, so the last kept
    token is always whole.
    """
    if not text:
        return ""
    text = bleach.clean(str(text).strip(), tags=[], strip=True)
    max_length = current_app.config.get("MAX_ORDER_TEXT_LENGTH")
    if max_length and len(text) > max_length:
        cut = text.rfind(",", 0, max_length + 1)
        text = text[:cut] if cut > 0 else ""
        logger.warning(f"Order text longer than {max_length} characters truncated")
    return text


def order_view(order: SubmittedOrder) -> dict:
    """JSON view of a pending order for the orders list."""
    view = order.to_dict()
    view["text"] = format_order_lines(order.lines)
    view["summary"] = summarize_lines(order.lines).to_dict()
    return view


@orders_bp.route("/api/orders", methods=["GET"])
@login_required
def list_orders():
    order_service = current_app.config["ORDER_SERVICE"]
    return {"orders": [order_view(order) for order in order_service.store.list()]}


@orders_bp.route("/api/orders", methods=["POST"])
@login_required
def create_order():
    """
    Queue an order.

    Body: {"customer": "<exact customer name>", "text": "10ST20, 3NM75"}
    Responds 201 with the order and any items it oversold.
    """
    payload = request.get_json(silent=True) or {}
    customer_name = str(payload.get("customer", ""))
    text = sanitize_order_text(payload.get("text"))

    order_service = current_app.config["ORDER_SERVICE"]
    order = order_service.create_order(customer_name, text)

    oversold = order_service.oversold_for(order)
    if oversold:
        logger.warning(
            f"Order {order.local_id} oversells: {', '.join(item.code for item in oversold)}"
        )

    return {
        "order": order_view(order),
        "oversold": [item.to_dict() for item in oversold],
    }, 201


@orders_bp.route("/api/orders/<local_id>", methods=["DELETE"])
@login_required
def delete_order(local_id: str):
    order = current_app.config["ORDER_SERVICE"].delete_order(local_id)
    return {"order": order_view(order)}


@orders_bp.route("/api/orders/<local_id>/reopen", methods=["POST"])
@login_required
def reopen_order(local_id: str):
    """Remove the order from the list and return its text for the input field."""
    order, text = current_app.config["ORDER_SERVICE"].reopen_order(local_id)
    return {
        "customer": order.customer.to_dict(),
        "text": text,
    }


@orders_bp.route("/api/sync", methods=["POST"])
@login_required
def sync():
    result = current_app.config["ORDER_SERVICE"].sync_pending()
    return result.to_dict()
