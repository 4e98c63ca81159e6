"""
Order service: from typed text to orders confirmed by the ERP.

Flow:
    1. Staff type order text; preview() parses it on every keystroke
    2. create_order() freezes the order, queues it in the PendingOrderStore
       and commits its lines against the stock snapshot
    3. sync_pending() submits queued orders to the ERP; an order leaves the
       pending list once the ERP answers with its remote id
    4. delete_order()/reopen_order() take an order off the list and put its
       stock back; reopening also returns the shorthand text for editing

Thread Safety:
    - PendingOrderStore guards its list and file with its own lock
    - Changes to the pending list that must stay in step with the stock
      snapshot run under StockService.lock
    - Only one sync runs at a time; a second caller gets a skipped result
"""

from __future__ import annotations

import json
import threading
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Dict, List, Optional, Tuple

from core.erp_client import ERPClient
from core.exceptions import (
    EmptyOrderError,
    OrderEntryError,
    OrderNotFoundError,
    UnknownCustomerError,
)
from models.order import Customer, Order, OrderLine, SubmittedOrder, find_customer_by_name
from models.stock import StockCatalog, StockItem
from modules.id_generator import IdGenerator, UuidIdGenerator
from modules.order_formatter import format_order_lines
from modules.order_parser import parse_order_lines
from modules.order_totals import find_oversold, summarize_lines
from modules.stock_reconciler import commit_lines
from services.stock_service import StockService
from logging_config import get_logger


# Module logger
logger = get_logger(__name__)


class PendingOrderStore:
    """
    Orders waiting for the ERP, persisted as a JSON list.

    The file survives restarts and network outages. A file that cannot be
    read is moved aside with a ``.corrupted`` suffix and the store starts
    empty.
    """

    def __init__(self, path: Path):
        self._path = Path(path)
        self._lock = threading.Lock()
        self._orders: List[SubmittedOrder] = self._load()

    @property
    def path(self) -> Path:
        return self._path

    def _load(self) -> List[SubmittedOrder]:
        if not self._path.exists():
            return []

        try:
            content = self._path.read_text(encoding="utf-8").strip()
            if not content:
                return []
            orders = [SubmittedOrder.from_dict(entry) for entry in json.loads(content)]
        except (ValueError, TypeError, KeyError, AttributeError) as e:
            backup_path = self._path.with_suffix(self._path.suffix + ".corrupted")
            logger.error(f"Pending orders file unreadable ({e}); moved to {backup_path}")
            self._path.replace(backup_path)
            return []

        logger.info(f"Loaded {len(orders)} pending orders from {self._path}")
        return orders

    def _save(self, orders: List[SubmittedOrder]) -> None:
        """Write ``orders`` to disk, then make them the in-memory list."""
        self._path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = self._path.with_suffix(self._path.suffix + ".tmp")
        tmp_path.write_text(
            json.dumps([order.to_dict() for order in orders], ensure_ascii=False, indent=2),
            encoding="utf-8",
        )
        tmp_path.replace(self._path)
        self._orders = orders

    def list(self) -> List[SubmittedOrder]:
        with self._lock:
            return list(self._orders)

    def get(self, local_id: str) -> Optional[SubmittedOrder]:
        with self._lock:
            for order in self._orders:
                if order.local_id == local_id:
                    return order
            return None

    def add(self, order: SubmittedOrder) -> None:
        with self._lock:
            self._save(self._orders + [order])

    def discard(self, local_id: str) -> Optional[SubmittedOrder]:
        """Remove and return an order, or None if it is not pending."""
        with self._lock:
            for index, order in enumerate(self._orders):
                if order.local_id == local_id:
                    self._save(self._orders[:index] + self._orders[index + 1:])
                    return order
            return None

    def remove(self, local_id: str) -> SubmittedOrder:
        """
        Remove and return an order.

        Raises:
            OrderNotFoundError: If no pending order has this id
        """
        order = self.discard(local_id)
        if order is None:
            raise OrderNotFoundError(local_id)
        return order

    def pending_lines(self) -> List[OrderLine]:
        """Lines of every pending order, in queue order."""
        with self._lock:
            return [line for order in self._orders for line in order.lines]

    def __len__(self) -> int:
        with self._lock:
            return len(self._orders)


@dataclass
class SyncResult:
    """Outcome of one sync_pending() run."""

    synced: List[SubmittedOrder] = field(default_factory=list)
    failed: Dict[str, str] = field(default_factory=dict)
    skipped: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "synced": [
                {"local_id": order.local_id, "remote_id": order.remote_id}
                for order in self.synced
            ],
            "failed": dict(self.failed),
            "skipped": self.skipped,
        }


class OrderService:
    """
    Business logic around orders.

    Attributes:
        customers: Customers last loaded from the ERP
    """

    def __init__(
        self,
        stock_service: StockService,
        store: PendingOrderStore,
        erp_client: ERPClient,
        id_generator: Optional[IdGenerator] = None,
    ):
        self._stock_service = stock_service
        self._store = store
        self._erp_client = erp_client
        self._id_generator = id_generator or UuidIdGenerator()
        self._customers: Tuple[Customer, ...] = ()
        self._sync_lock = threading.Lock()

    @property
    def customers(self) -> Tuple[Customer, ...]:
        return self._customers

    @property
    def store(self) -> PendingOrderStore:
        return self._store

    def load_customers(self) -> Tuple[Customer, ...]:
        """
        Fetch customers from the ERP and cache them.

        Records that do not describe a customer (missing or non-numeric id)
        are skipped with a warning.

        Raises:
            ERPUnavailableError: If the ERP cannot be reached
        """
        customers = []
        for record in self._erp_client.fetch_customers():
            try:
                customers.append(Customer.from_dict(record))
            except (KeyError, ValueError, TypeError, AttributeError) as e:
                logger.warning(f"Skipping malformed customer record {record!r}: {e}")
                continue
        self._customers = tuple(customers)
        logger.info(f"Loaded {len(self._customers)} customers")
        return self._customers

    def find_customer(self, name: str) -> Customer:
        """
        Exact-name customer lookup.

        Raises:
            UnknownCustomerError: If no customer has exactly this name
        """
        customer = find_customer_by_name(self._customers, name.strip())
        if customer is None:
            raise UnknownCustomerError(name)
        return customer

    def preview(self, text: str) -> Dict[str, Any]:
        """
        Parse order text for the live form without changing any state.

        Returns the parsed lines, canonical text, totals and the items the
        order would oversell against the current snapshot.
        """
        snapshot = self._stock_service.get_snapshot()
        lines = parse_order_lines(text, snapshot.items)
        return {
            "lines": [_line_view(line) for line in lines],
            "text": format_order_lines(lines),
            "summary": summarize_lines(lines).to_dict(),
            "oversold": [item.to_dict() for item in _oversold_by(snapshot, lines)],
        }

    def create_order(self, customer_name: str, text: str) -> SubmittedOrder:
        """
        Queue a new order and take its lines out of stock.

        Raises:
            StockNotReadyError: If no stock has been loaded yet
            UnknownCustomerError: If the customer name is unknown
            EmptyOrderError: If the text has no recognised lines
        """
        snapshot = self._stock_service.get_snapshot_or_raise()
        customer = self.find_customer(customer_name)

        lines = parse_order_lines(text, snapshot.items)
        if not any(not line.is_deposit for line in lines):
            raise EmptyOrderError(text)

        draft = Order(customer=customer, local_id=self._id_generator.new_id())
        draft.set_lines(lines)
        order = draft.freeze()

        with self._stock_service.lock:
            self._store.add(order)
            self._stock_service.commit(order.lines)

        logger.info(
            f"Order {order.local_id} queued for {customer.name}: {format_order_lines(order.lines)}"
        )
        return order

    def oversold_for(self, order: SubmittedOrder) -> List[StockItem]:
        """Items of ``order`` whose availability is now negative."""
        return find_oversold(
            self._stock_service.get_snapshot(),
            codes=[line.code for line in order.real_lines],
        )

    def delete_order(self, local_id: str) -> SubmittedOrder:
        """
        Drop a pending order and put its stock back.

        Raises:
            OrderNotFoundError: If the order is not pending
        """
        with self._stock_service.lock:
            order = self._store.remove(local_id)
            self._stock_service.revert(order.lines)

        logger.info(f"Order {local_id} removed, stock reverted")
        return order

    def reopen_order(self, local_id: str) -> Tuple[SubmittedOrder, str]:
        """
        Take an order back into the form for editing.

        Returns:
            (order, shorthand text to put back in the input field)

        Raises:
            OrderNotFoundError: If the order is not pending
        """
        order = self.delete_order(local_id)
        return order, format_order_lines(order.lines)

    @staticmethod
    def build_payload(order: SubmittedOrder) -> Dict[str, Any]:
        """ERP request body for an order."""
        return {
            "reference": order.local_id,
            "customer_id": order.customer.id,
            "customer_name": order.customer.name,
            "timestamp": order.timestamp.isoformat(),
            "lines": [line.to_dict() for line in order.lines],
            "summary": summarize_lines(order.lines).to_dict(),
        }

    def sync_pending(self) -> SyncResult:
        """
        Submit every pending order to the ERP.

        Orders the ERP accepts leave the pending list. A failed order stays
        queued for the next sync and does not stop the others.
        """
        if not self._sync_lock.acquire(blocking=False):
            logger.info("Sync already running, skipping")
            return SyncResult(skipped=True)

        result = SyncResult()
        try:
            pending = self._store.list()
            logger.info(f"Syncing {len(pending)} pending orders")

            for order in pending:
                try:
                    remote_id = self._erp_client.submit_order(self.build_payload(order))
                except OrderEntryError as e:
                    logger.warning(f"Order {order.local_id} not synced: {e.message}")
                    result.failed[order.local_id] = e.message
                    continue

                with self._stock_service.lock:
                    if self._store.discard(order.local_id) is None:
                        logger.warning(
                            f"Order {order.local_id} was removed during sync (ERP #{remote_id})"
                        )
                    self._stock_service.confirm(order.lines)
                result.synced.append(order.with_remote_id(remote_id))

            logger.info(
                f"Sync finished: {len(result.synced)} synced, {len(result.failed)} failed"
            )
            return result
        finally:
            self._sync_lock.release()


def _line_view(line: OrderLine) -> Dict[str, Any]:
    view = line.to_dict()
    view["boxes"] = line.box_count
    view["is_deposit"] = line.is_deposit
    return view


def _oversold_by(snapshot: StockCatalog, lines: List[OrderLine]) -> List[StockItem]:
    return find_oversold(
        commit_lines(snapshot, lines),
        codes=[line.code for line in lines if not line.is_deposit],
    )
