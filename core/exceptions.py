"""
Custom exceptions for BrewOrderEntry.

Exception Hierarchy:
    OrderEntryError (base)
    ├── ERPUnavailableError    - ERP unreachable or answered with an HTTP error
    ├── StockNotReadyError     - No stock snapshot loaded yet (runtime, graceful)
    ├── UnknownCustomerError   - Customer name has no exact match
    ├── EmptyOrderError        - Order text produced no order lines
    ├── OrderNotFoundError     - Local id is not in the pending list
    └── OrderSubmissionError   - ERP rejected an order
        └── ERPTimeoutError    - Submission timed out

The parsing and stock engine never raises any of these: malformed order
text is dropped token by token and stale stock codes are ignored. These
errors belong to the services and routes around it.
"""

from typing import Optional, Dict, Any


class OrderEntryError(Exception):
    """
    Base exception for all BrewOrderEntry errors.

    Routes catch this class to turn any application error into a JSON
    error response.
    """

    status_code = 400

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message

    def to_dict(self) -> Dict[str, Any]:
        """Error body for JSON responses."""
        return {
            "error": type(self).__name__,
            "message": self.message,
            "details": self.details,
        }


class ERPUnavailableError(OrderEntryError):
    """
    The remote business system could not be reached or returned an error.

    Typical causes:
    - ERP_BASE_URL wrong in .env
    - Network down at the brewery
    - ERP maintenance window
    """

    status_code = 503

    def __init__(self, message: str = "ERP is not available", url: Optional[str] = None):
        details = {"resolution": "Check ERP_BASE_URL and network connectivity"}
        if url:
            details["url"] = url
        super().__init__(message, details)
        self.url = url


class StockNotReadyError(OrderEntryError):
    """
    No stock snapshot has been loaded from the ERP yet.

    The form should show a loading state and retry.
    """

    status_code = 503

    def __init__(self, message: str = "Stock not yet loaded"):
        details = {"resolution": "Wait for stock refresh or check ERP connectivity"}
        super().__init__(message, details)


class UnknownCustomerError(OrderEntryError):
    """The typed customer name does not exactly match a known customer."""

    status_code = 404

    def __init__(self, customer_name: str):
        super().__init__(
            f"Unknown customer: {customer_name!r}",
            {"customer_name": customer_name},
        )
        self.customer_name = customer_name


class EmptyOrderError(OrderEntryError):
    """The order text did not contain a single recognisable order line."""

    def __init__(self, text: str):
        super().__init__("Order contains no recognised lines", {"text": text})
        self.text = text


class OrderNotFoundError(OrderEntryError):
    """No pending order carries the given local id."""

    status_code = 404

    def __init__(self, local_id: str):
        super().__init__(f"No pending order {local_id}", {"local_id": local_id})
        self.local_id = local_id


class OrderSubmissionError(OrderEntryError):
    """
    Base class for order submission failures.

    The order stays in the pending list and is retried on the next sync.
    """

    status_code = 502

    def __init__(
        self,
        message: str,
        local_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        error_details = details or {}
        if local_id:
            error_details["local_id"] = local_id
        super().__init__(message, error_details)
        self.local_id = local_id


class ERPTimeoutError(OrderSubmissionError):
    """The ERP did not answer within ERP_TIMEOUT_SECONDS."""

    status_code = 504

    def __init__(
        self,
        operation: str,
        timeout_seconds: float,
        local_id: Optional[str] = None
    ):
        message = f"ERP {operation} timed out after {timeout_seconds:.1f}s"
        details = {
            "operation": operation,
            "timeout_seconds": timeout_seconds,
            "resolution": "The order stays pending and will be retried on next sync",
        }
        super().__init__(message, local_id, details)
        self.operation = operation
        self.timeout_seconds = timeout_seconds
