"""
Data models for BrewOrderEntry.

This module contains immutable dataclasses for:
- StockItem / StockCatalog: point-in-time stock state from the ERP
- OrderLine: one parsed line of an order, in stock units
- Order / SubmittedOrder: an order being typed, and its frozen form
- Customer: ERP customer reference
"""

from .stock import (
    ContainerFormat,
    StockItem,
    StockCatalog,
    DEPOSIT_KEG,
    KEG_FORMATS,
    convert_to_units,
    convert_to_boxes,
)
from .order import Customer, Order, OrderLine, SubmittedOrder, find_customer_by_name

__all__ = [
    # Stock models
    "ContainerFormat",
    "StockItem",
    "StockCatalog",
    "DEPOSIT_KEG",
    "KEG_FORMATS",
    "convert_to_units",
    "convert_to_boxes",
    # Order models
    "Customer",
    "Order",
    "OrderLine",
    "SubmittedOrder",
    "find_customer_by_name",
]
