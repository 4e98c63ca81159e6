"""
Services layer for BrewOrderEntry.

- StockService: live stock snapshot with background ERP refresh thread
- OrderService: order creation, pending list, ERP sync
- PendingOrderStore: JSON-file backed list of orders awaiting the ERP

Thread Model:
    Main Thread (Flask)
    └── StockService thread (refresh loop, own ERP client)
"""

from .stock_service import StockService
from .order_service import OrderService, PendingOrderStore, SyncResult

__all__ = [
    "StockService",
    "OrderService",
    "PendingOrderStore",
    "SyncResult",
]
