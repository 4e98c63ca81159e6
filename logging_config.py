"""
Centralized logging configuration for BrewOrderEntry.

Every record carries the name of the thread that produced it, so lines from
the background stock refresh can be told apart from request handling.

Log Format:
    2026-03-02 09:15:30 [INFO    ] [MainThread] brew_order_entry.app - Starting application
    2026-03-02 09:15:31 [DEBUG   ] [StockRefresh] brew_order_entry.services.stock_service - Stock refreshed: 14 items
    2026-03-02 09:16:02 [INFO    ] [MainThread] brew_order_entry.services.order_service - Order 3f9a1c2e queued

Usage:
    # At application startup
    from logging_config import setup_logging, get_logger

    setup_logging(log_level=logging.INFO, enable_file_logging=True)

    # In modules
    logger = get_logger(__name__)
"""

import logging
import sys
import threading
from logging.handlers import RotatingFileHandler
from pathlib import Path
from typing import Optional

APP_LOGGER_NAME = "brew_order_entry"


class ThreadContextFilter(logging.Filter):
    """Adds ``thread_name`` and ``thread_id`` to every log record."""

    def filter(self, record: logging.LogRecord) -> bool:
        current_thread = threading.current_thread()
        record.thread_name = current_thread.name
        record.thread_id = threading.get_ident()
        return True


def _rotating_handler(
    path: Path,
    level: int,
    formatter: logging.Formatter,
    thread_filter: logging.Filter,
) -> RotatingFileHandler:
    handler = RotatingFileHandler(
        filename=path,
        maxBytes=5 * 1024 * 1024,  # 5 MB per file
        backupCount=5,
        encoding="utf-8"
    )
    handler.setLevel(level)
    handler.setFormatter(formatter)
    handler.addFilter(thread_filter)
    return handler


def setup_logging(
    app_name: str = APP_LOGGER_NAME,
    log_level: int = logging.INFO,
    log_dir: Optional[Path] = None,
    enable_file_logging: bool = True,
) -> logging.Logger:
    """
    Configure application logging with thread context.

    Sets up a console handler and, optionally, a rotating application log
    plus a separate ERROR-only log.

    Args:
        app_name: Name of the root logger (default: "brew_order_entry")
        log_level: Minimum log level (default: INFO)
        log_dir: Directory for log files (default: ./logs next to this file)
        enable_file_logging: Whether to write to log files

    Returns:
        Configured root logger instance
    """
    logger = logging.getLogger(app_name)
    logger.setLevel(log_level)
    logger.propagate = False  # Prevent duplicate logs to root logger

    # Allows re-configuration (app factory called more than once in tests)
    logger.handlers.clear()

    formatter = logging.Formatter(
        fmt="%(asctime)s [%(levelname)-8s] [%(thread_name)s] %(name)s - %(message)s",
        datefmt="%Y-%m-%d %H:%M:%S"
    )
    thread_filter = ThreadContextFilter()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.setFormatter(formatter)
    console_handler.addFilter(thread_filter)
    logger.addHandler(console_handler)

    if enable_file_logging:
        if log_dir is None:
            log_dir = Path(__file__).parent / "logs"
        log_dir.mkdir(parents=True, exist_ok=True)

        app_log_file = log_dir / f"{app_name}.log"
        logger.addHandler(_rotating_handler(app_log_file, log_level, formatter, thread_filter))

        error_log_file = log_dir / f"{app_name}_error.log"
        logger.addHandler(_rotating_handler(error_log_file, logging.ERROR, formatter, thread_filter))

        logger.info(f"File logging enabled: {app_log_file}")

    logger.info(f"Logging configured at level {logging.getLevelName(log_level)}")
    return logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a child logger under the application namespace.

    Example:
        # In services/stock_service.py
        logger = get_logger(__name__)
        # Logger name: "brew_order_entry.services.stock_service"
    """
    if not name.startswith(APP_LOGGER_NAME):
        name = f"{APP_LOGGER_NAME}.{name}"
    return logging.getLogger(name)


def set_thread_name(name: str) -> None:
    """Rename the current thread so it shows up in the [thread_name] field."""
    threading.current_thread().name = name
