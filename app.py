"""
BrewOrderEntry - Flask Application Entry Point.

A slim app factory that:
1. Loads configuration (.env + config.Config)
2. Creates the ERP client, pending order store and services
3. Loads customers and starts the stock refresh thread
4. Registers route blueprints and JSON error handlers

ARCHITECTURE:
    Main Thread
    ├── Flask request handling (parse preview, order list, sync)
    └── Cleanup on shutdown

    StockRefresh Thread (background)
    └── Re-fetches stock from the ERP, re-applies pending orders
"""

from __future__ import annotations

import atexit
import logging
import os
import sys
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from logging_config import setup_logging, get_logger
from core.erp_client import ERPClient
from core.exceptions import ERPUnavailableError, OrderEntryError
from modules.id_generator import IdGenerator
from services.order_service import OrderService, PendingOrderStore
from services.stock_service import StockService
from routes import register_blueprints


# Module logger (configured after setup_logging)
logger = get_logger(__name__)


def _get_base_path() -> Path:
    """Directory holding the executable (frozen build) or this file."""
    if getattr(sys, 'frozen', False):
        return Path(sys.executable).parent
    return Path(__file__).parent


def create_app(
    config_object: str = "config.Config",
    test_config: Optional[dict] = None,
    erp_client: Optional[ERPClient] = None,
    id_generator: Optional[IdGenerator] = None,
    start_background: Optional[bool] = None,
) -> Flask:
    """
    Application factory - creates and configures the Flask app.

    The app still starts when the ERP is down: stock and customers stay
    empty until the refresh thread (or a ?refresh=1 call) succeeds, and
    orders can't be created before that.

    Args:
        config_object: Import path of the config class
        test_config: Values overriding the config class (tests)
        erp_client: ERP client to use (default: built from config)
        id_generator: Local order id source (default: uuid4)
        start_background: Start the stock refresh thread (default: not TESTING)

    Returns:
        Configured Flask application
    """
    env_file = _get_base_path() / '.env'
    if env_file.exists():
        load_dotenv(env_file, override=True)
    else:
        load_dotenv(override=True)

    app = Flask(__name__)
    app.config.from_object(config_object)
    if test_config:
        app.config.update(test_config)

    log_level = logging.DEBUG if app.config.get("DEBUG") else logging.INFO
    enable_file_logging = app.config.get("ENVIRONMENT") == "production"

    root_logger = setup_logging(
        log_level=log_level,
        enable_file_logging=enable_file_logging
    )
    app.logger.handlers = root_logger.handlers
    app.logger.setLevel(log_level)

    logger.info(f"Starting BrewOrderEntry in {app.config.get('ENVIRONMENT')} mode")

    # =========================================================================
    # SERVICES
    # =========================================================================

    if erp_client is None:
        erp_client = ERPClient.from_config(app.config, logger=get_logger("core.erp_client"))

    store = PendingOrderStore(Path(app.config["PENDING_ORDERS_FILE"]))

    stock_service = StockService(
        erp_client,
        refresh_interval_seconds=app.config["STOCK_REFRESH_SECONDS"],
        pending_lines=store.pending_lines,
    )
    order_service = OrderService(stock_service, store, erp_client, id_generator=id_generator)

    app.config["ERP_CLIENT"] = erp_client
    app.config["STOCK_SERVICE"] = stock_service
    app.config["ORDER_SERVICE"] = order_service

    if start_background is None:
        start_background = not app.config.get("TESTING")

    if start_background:
        try:
            order_service.load_customers()
        except ERPUnavailableError as e:
            logger.warning(f"Customers not loaded at startup: {e}")

        stock_service.start()
        atexit.register(stock_service.stop)

    # =========================================================================
    # ROUTES & ERROR HANDLERS
    # =========================================================================

    register_blueprints(app)

    @app.errorhandler(OrderEntryError)
    def handle_order_entry_error(e: OrderEntryError):
        if e.status_code >= 500:
            logger.error(f"{type(e).__name__}: {e}")
        else:
            logger.info(f"{type(e).__name__}: {e.message}")
        return e.to_dict(), e.status_code

    @app.errorhandler(404)
    def handle_not_found(e):
        return {"error": "NotFound", "message": "Not found"}, 404

    @app.errorhandler(500)
    def handle_server_error(e):
        logger.error(f"500 error: {e}", exc_info=True)
        return {"error": "InternalServerError", "message": "An unexpected error occurred"}, 500

    logger.info("Application initialized successfully")
    return app


if __name__ == "__main__":
    app = create_app()
    debug_mode = os.environ.get("FLASK_DEBUG", "1") == "1"
    # The reloader would start a second refresh thread
    app.run(debug=debug_mode, use_reloader=False)
