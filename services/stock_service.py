"""
Stock service with background refresh thread.

Keeps the current stock snapshot for the order form. A background thread
re-fetches stock from the ERP at a fixed interval; orders taken locally but
not yet synced are subtracted from every fresh snapshot so the form never
shows stock that has already been promised.

Thread Safety:
    - Snapshots are immutable StockCatalog values
    - Readers call get_snapshot() without locking
    - Orders the ERP confirms while a fetch is in flight are recorded
      against that fetch and committed onto its result, since the fetched
      records may predate the confirmation
    - Every read-modify-write of the snapshot (refresh, commit, revert)
      runs under ``lock``; callers that must change their own state in step
      with the stock (the order service) hold the same lock around both

Usage:
    # At app startup
    stock_service = StockService(erp_client, refresh_interval_seconds=60,
                                 pending_lines=order_store.pending_lines)
    stock_service.start()

    # In routes
    snapshot = stock_service.get_snapshot()

    # At app shutdown
    stock_service.stop()
"""

from __future__ import annotations

import itertools
import threading
from typing import Callable, Dict, Iterable, List, Optional

from core.erp_client import ERPClient
from core.exceptions import StockNotReadyError
from models.order import OrderLine
from models.stock import StockCatalog
from modules.stock_reconciler import commit_lines, revert_lines
from logging_config import get_logger, set_thread_name


# Module logger
logger = get_logger(__name__)

PendingLines = Callable[[], Iterable[OrderLine]]


class StockService:
    """
    Owner of the live stock snapshot.

    Attributes:
        refresh_interval_seconds: Time between ERP refreshes
        is_running: Whether the background thread is active
        lock: Re-entrant lock serializing snapshot updates
    """

    def __init__(
        self,
        erp_client: ERPClient,
        refresh_interval_seconds: float = 60.0,
        pending_lines: Optional[PendingLines] = None,
    ):
        """
        Initialize stock service.

        Args:
            erp_client: Client used to fetch stock records
            refresh_interval_seconds: Seconds between stock refreshes
            pending_lines: Returns the lines of orders not yet accepted by
                the ERP; they are committed onto every fresh snapshot
        """
        self._erp_client = erp_client
        self._refresh_interval = refresh_interval_seconds
        self._pending_lines = pending_lines or (lambda: ())

        # Thread control
        self._thread: Optional[threading.Thread] = None
        self._stop_event = threading.Event()
        self._is_running = False

        self.lock = threading.RLock()

        # Never None, so readers don't have to check
        self._current_snapshot: StockCatalog = StockCatalog.create_empty()

        self._consecutive_failures = 0

        # Lines confirmed by the ERP, keyed by the fetch they overlapped
        self._fetch_ids = itertools.count(1)
        self._confirmed_in_flight: Dict[int, List[OrderLine]] = {}

        logger.info(f"StockService initialized (refresh interval: {refresh_interval_seconds}s)")

    @property
    def is_running(self) -> bool:
        return self._is_running

    @property
    def refresh_interval_seconds(self) -> float:
        return self._refresh_interval

    def start(self) -> None:
        """
        Start the background refresh thread.

        Safe to call multiple times - only starts if not already running.
        """
        if self._is_running:
            logger.warning("StockService already running")
            return

        logger.info("Starting stock refresh thread...")

        self._stop_event.clear()
        self._thread = threading.Thread(
            target=self._refresh_loop,
            name="StockRefresh",
            daemon=True
        )
        self._is_running = True
        self._thread.start()

    def stop(self) -> None:
        """Stop the background refresh thread and wait for it to exit."""
        if not self._is_running:
            return

        logger.info("Stopping stock refresh thread...")
        self._stop_event.set()

        if self._thread and self._thread.is_alive():
            self._thread.join(timeout=5.0)

            if self._thread.is_alive():
                logger.warning("Stock refresh thread did not stop cleanly")

        self._is_running = False
        self._thread = None

        logger.info("Stock refresh thread stopped")

    def get_snapshot(self) -> StockCatalog:
        """Current snapshot (possibly empty or stale, never None)."""
        return self._current_snapshot

    def get_snapshot_or_raise(self) -> StockCatalog:
        """
        Current snapshot, raising if no stock has been loaded.

        Raises:
            StockNotReadyError: If the snapshot is empty
        """
        snapshot = self._current_snapshot
        if snapshot.is_empty:
            raise StockNotReadyError("Stock not yet loaded. Please wait for initial fetch.")
        return snapshot

    def commit(self, lines: Iterable[OrderLine]) -> StockCatalog:
        """Subtract ``lines`` from the current snapshot and return the new one."""
        with self.lock:
            self._current_snapshot = commit_lines(self._current_snapshot, lines)
            return self._current_snapshot

    def revert(self, lines: Iterable[OrderLine]) -> StockCatalog:
        """Add ``lines`` back to the current snapshot and return the new one."""
        with self.lock:
            self._current_snapshot = revert_lines(self._current_snapshot, lines)
            return self._current_snapshot

    def confirm(self, lines: Iterable[OrderLine]) -> None:
        """
        Record lines the ERP has just accepted.

        The snapshot is left alone; the lines are only committed onto the
        result of any refresh whose fetch is still running.
        """
        with self.lock:
            if not self._confirmed_in_flight:
                return
            lines = list(lines)
            for confirmed in self._confirmed_in_flight.values():
                confirmed.extend(lines)

    def force_refresh(self) -> bool:
        """
        Refresh immediately in the calling thread.

        Returns:
            True if refresh succeeded, False otherwise
        """
        logger.info("Forcing stock refresh...")
        return self._do_refresh()

    def _refresh_loop(self) -> None:
        set_thread_name("StockRefresh")
        logger.info("Stock refresh loop starting")

        self._do_refresh()

        while not self._stop_event.is_set():
            if self._stop_event.wait(timeout=self._refresh_interval):
                break
            self._do_refresh()

        logger.info("Stock refresh loop exiting")

    def _do_refresh(self) -> bool:
        """
        Perform a single stock refresh.

        The ERP fetch runs outside the lock; only the swap (with pending
        orders and orders confirmed during the fetch re-applied) holds it.
        """
        logger.debug("Refreshing stock...")

        with self.lock:
            fetch_id = next(self._fetch_ids)
            self._confirmed_in_flight[fetch_id] = []

        try:
            records = self._erp_client.fetch_stock()
            fresh = StockCatalog.from_records(records)

            with self.lock:
                confirmed = self._confirmed_in_flight.pop(fetch_id)
                lines = list(self._pending_lines()) + confirmed
                self._current_snapshot = commit_lines(fresh, lines)
                snapshot = self._current_snapshot

            if self._consecutive_failures > 0:
                logger.info(
                    f"Stock refresh recovered after {self._consecutive_failures} failures"
                )
            self._consecutive_failures = 0

            logger.debug(
                f"Stock refreshed: {len(snapshot.items)} items in {len(snapshot.products)} products"
            )
            return True

        except Exception as e:
            with self.lock:
                self._confirmed_in_flight.pop(fetch_id, None)
            self._consecutive_failures += 1

            if self._consecutive_failures == 1:
                logger.warning(f"Stock refresh failed: {e}")
            elif self._consecutive_failures <= 3:
                logger.error(f"Stock refresh failed ({self._consecutive_failures} consecutive): {e}")
            elif self._consecutive_failures % 5 == 0:
                logger.error(
                    f"Stock refresh still failing ({self._consecutive_failures} consecutive): {e}"
                )

            return False
