"""
Password gate.

The order form is used on a shared brewery machine; a single staff password
(ORDER_ENTRY_PASSWORD) unlocks the session. Every /api route is wrapped in
login_required.
"""

import hmac
from functools import wraps

from flask import Blueprint, current_app, request, session

from logging_config import get_logger


# Module logger
logger = get_logger(__name__)

auth_bp = Blueprint("auth", __name__)

SESSION_KEY = "authenticated"


def login_required(view):
    """Reject the request with 401 unless the session is unlocked."""
    @wraps(view)
    def wrapped(*args, **kwargs):
        if not session.get(SESSION_KEY):
            return {"error": "Unauthorized", "message": "Login required"}, 401
        return view(*args, **kwargs)
    return wrapped


@auth_bp.route("/login", methods=["POST"])
def login():
    payload = request.get_json(silent=True) or {}
    password = str(payload.get("password", ""))
    expected = current_app.config.get("ORDER_ENTRY_PASSWORD", "")

    if not expected or not hmac.compare_digest(password.encode(), expected.encode()):
        logger.warning(f"Failed login from {request.remote_addr}")
        return {"error": "Unauthorized", "message": "Wrong password"}, 401

    session[SESSION_KEY] = True
    session.permanent = True
    logger.info(f"Login from {request.remote_addr}")
    return {"status": "ok"}


@auth_bp.route("/logout", methods=["POST"])
def logout():
    session.pop(SESSION_KEY, None)
    return {"status": "ok"}
