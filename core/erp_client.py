"""
HTTP client for the brewery's remote business system (ERP).

The ERP is the source of truth for stock levels and customers, and the
destination for submitted orders. This client only moves JSON; turning
records into StockCatalog/Customer values is done by the callers.

Endpoints (relative to ERP_BASE_URL):
    GET  /stock      -> [{code, name, format, available_quantity}, ...]
    GET  /customers  -> [{id, name}, ...]
    POST /orders     -> {id, reference}

Usage:
    client = ERPClient(base_url, api_key="...", timeout_seconds=10)
    records = client.fetch_stock()
    remote_id = client.submit_order(order.to_dict())
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

import requests

from .exceptions import ERPTimeoutError, ERPUnavailableError, OrderSubmissionError


class ERPClient:
    """
    Thin JSON-over-HTTP wrapper around the ERP API.

    One requests.Session per client. The stock refresh thread and the
    request-handling code each create their own client.
    """

    def __init__(
        self,
        base_url: str,
        api_key: str = "",
        timeout_seconds: float = 10.0,
        session: Optional[requests.Session] = None,
        logger: Optional[logging.Logger] = None,
    ):
        if not base_url:
            raise ValueError("base_url is required for ERPClient")

        self.base_url = base_url.rstrip("/")
        self.timeout_seconds = timeout_seconds
        self.logger = logger or logging.getLogger(__name__)

        self._session = session or requests.Session()
        self._session.headers.update({"Accept": "application/json"})
        if api_key:
            self._session.headers.update({"Authorization": f"Bearer {api_key}"})

    @classmethod
    def from_config(cls, config: Dict[str, Any], logger: Optional[logging.Logger] = None) -> "ERPClient":
        """Build a client from a Flask config mapping."""
        return cls(
            base_url=config.get("ERP_BASE_URL", ""),
            api_key=config.get("ERP_API_KEY", ""),
            timeout_seconds=float(config.get("ERP_TIMEOUT_SECONDS", 10.0)),
            logger=logger,
        )

    def _url(self, path: str) -> str:
        return f"{self.base_url}/{path.lstrip('/')}"

    def _get_list(self, path: str) -> List[Dict[str, Any]]:
        url = self._url(path)
        try:
            response = self._session.get(url, timeout=self.timeout_seconds)
            response.raise_for_status()
            data = response.json()
        except requests.exceptions.Timeout as e:
            raise ERPUnavailableError(
                f"ERP request timed out after {self.timeout_seconds:.1f}s", url=url
            ) from e
        except requests.exceptions.RequestException as e:
            raise ERPUnavailableError(f"ERP request failed: {e}", url=url) from e
        except ValueError as e:
            raise ERPUnavailableError(f"ERP returned invalid JSON: {e}", url=url) from e

        if not isinstance(data, list):
            raise ERPUnavailableError(
                f"ERP returned {type(data).__name__}, expected a list", url=url
            )
        return data

    def fetch_stock(self) -> List[Dict[str, Any]]:
        """
        Fetch current stock records.

        Raises:
            ERPUnavailableError: On network/HTTP failure or malformed response
        """
        records = self._get_list("stock")
        self.logger.debug(f"Fetched {len(records)} stock records")
        return records

    def fetch_customers(self) -> List[Dict[str, Any]]:
        """
        Fetch the customer list.

        Raises:
            ERPUnavailableError: On network/HTTP failure or malformed response
        """
        records = self._get_list("customers")
        self.logger.debug(f"Fetched {len(records)} customers")
        return records

    def submit_order(self, payload: Dict[str, Any]) -> int:
        """
        Submit one order and return the id the ERP assigned to it.

        The payload's ``reference`` (the local order id) must come back
        unchanged in the response so the answer can be matched to the order.

        Args:
            payload: Order body (see OrderService.build_payload)

        Returns:
            Remote order id

        Raises:
            ERPTimeoutError: If the ERP does not answer in time
            OrderSubmissionError: On HTTP error, bad response or reference mismatch
        """
        url = self._url("orders")
        reference = payload.get("reference")

        try:
            response = self._session.post(url, json=payload, timeout=self.timeout_seconds)
        except requests.exceptions.Timeout as e:
            raise ERPTimeoutError("order submission", self.timeout_seconds, reference) from e
        except requests.exceptions.RequestException as e:
            raise OrderSubmissionError(f"Order submission failed: {e}", reference) from e

        if response.status_code not in (200, 201):
            raise OrderSubmissionError(
                f"ERP rejected order: HTTP {response.status_code}",
                reference,
                {"response": response.text[:200]},
            )

        try:
            data = response.json()
            remote_id = int(data["id"])
        except (ValueError, KeyError, TypeError) as e:
            raise OrderSubmissionError(f"ERP returned an invalid order response: {e}", reference) from e

        if data.get("reference") != reference:
            raise OrderSubmissionError(
                "ERP response does not match the submitted order",
                reference,
                {"returned_reference": data.get("reference")},
            )

        self.logger.info(f"Order {reference} accepted by ERP as #{remote_id}")
        return remote_id
