"""
Core module for BrewOrderEntry.

Contains fundamental infrastructure components:
- exceptions: Custom exception hierarchy
- erp_client: HTTP client for the remote business system
"""

from .exceptions import (
    OrderEntryError,
    ERPUnavailableError,
    StockNotReadyError,
    UnknownCustomerError,
    EmptyOrderError,
    OrderNotFoundError,
    OrderSubmissionError,
    ERPTimeoutError,
)
from .erp_client import ERPClient

__all__ = [
    "OrderEntryError",
    "ERPUnavailableError",
    "StockNotReadyError",
    "UnknownCustomerError",
    "EmptyOrderError",
    "OrderNotFoundError",
    "OrderSubmissionError",
    "ERPTimeoutError",
    "ERPClient",
]
