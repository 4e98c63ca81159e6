"""
Stock data models.

These models represent the brewery's stock catalog as fetched from the ERP:
each beer (product name) comes in one or more container formats, and each
format variant is a StockItem with its own shorthand code.

Units vs boxes:
    Staff order in boxes (kegs, cases). Stock is counted in units. The
    conversion factor is fixed per container format and only applied at
    the parse/format boundary, so reconciliation is plain integer math.

Thread Safety:
    - StockItem and StockCatalog are frozen dataclasses
    - A changed quantity means a new StockItem inside a new StockCatalog
    - Services swap whole catalogs by reference, readers never lock
"""

from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Iterable, List, Optional, Tuple

logger = logging.getLogger(__name__)


class ContainerFormat(str, Enum):
    """Packaging type of a stock item."""

    KEG_20L = "keg20"
    KEG_30L = "keg30"
    BOX_75CL = "box75cl"
    BOX_33CL = "box33cl"
    NO_FORMAT = "none"

    @classmethod
    def from_value(cls, value: Any) -> "ContainerFormat":
        """Map an ERP format string to a ContainerFormat (unknown -> NO_FORMAT)."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).strip().lower())
        except ValueError:
            return cls.NO_FORMAT

    @property
    def is_keg(self) -> bool:
        return self in KEG_FORMATS


# Units counted in stock for one ordered box
UNITS_PER_BOX: Dict[ContainerFormat, int] = {
    ContainerFormat.KEG_20L: 1,
    ContainerFormat.KEG_30L: 1,
    ContainerFormat.BOX_75CL: 6,
    ContainerFormat.BOX_33CL: 24,
    ContainerFormat.NO_FORMAT: 0,
}

# Volume of one unit, for order totals
LITRES_PER_UNIT: Dict[ContainerFormat, float] = {
    ContainerFormat.KEG_20L: 20.0,
    ContainerFormat.KEG_30L: 30.0,
    ContainerFormat.BOX_75CL: 0.75,
    ContainerFormat.BOX_33CL: 0.33,
    ContainerFormat.NO_FORMAT: 0.0,
}

# Formats that carry a returnable-keg deposit
KEG_FORMATS = frozenset({ContainerFormat.KEG_20L, ContainerFormat.KEG_30L})


def convert_to_units(container_format: ContainerFormat, box_count: int) -> int:
    """Convert an ordered box count to stock units (0 for NO_FORMAT)."""
    return box_count * UNITS_PER_BOX.get(container_format, 0)


def convert_to_boxes(container_format: ContainerFormat, units: int) -> int:
    """Convert stock units back to whole boxes, truncating toward zero."""
    factor = UNITS_PER_BOX.get(container_format, 0)
    if factor <= 0:
        return 0
    boxes = abs(units) // factor
    return boxes if units >= 0 else -boxes


@dataclass(frozen=True)
class StockItem:
    """
    One container-format variant of a beer.

    Immutable; use with_quantity() to get a copy with a new availability.
    """

    code: str
    """Shorthand code typed by staff (e.g., 'ST20'). Unique in a catalog."""

    name: str
    """Product name shared by all formats of the same beer (e.g., 'Stout')."""

    container_format: ContainerFormat = ContainerFormat.NO_FORMAT
    """Packaging type, drives box/unit conversion and deposits."""

    available_quantity: int = 0
    """Units in stock. Negative means the item has been oversold."""

    @property
    def is_keg(self) -> bool:
        return self.container_format.is_keg

    def with_quantity(self, available_quantity: int) -> "StockItem":
        """Copy of this item with a different availability."""
        return replace(self, available_quantity=available_quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.code,
            "name": self.name,
            "format": self.container_format.value,
            "available_quantity": self.available_quantity,
            "available_boxes": convert_to_boxes(self.container_format, self.available_quantity),
        }

    @classmethod
    def from_record(cls, record: Dict[str, Any]) -> "StockItem":
        """
        Create a StockItem from an ERP stock record.

        Args:
            record: {code, name, format, available_quantity}
        """
        return cls(
            code=str(record.get("code", "")).strip(),
            name=str(record.get("name", "")).strip(),
            container_format=ContainerFormat.from_value(record.get("format")),
            available_quantity=int(record.get("available_quantity", 0) or 0),
        )


DEPOSIT_KEG = StockItem(
    code="DEPOSIT",
    name="Keg deposit",
    container_format=ContainerFormat.NO_FORMAT,
    available_quantity=0,
)
"""Pseudo-item for the returnable-keg deposit line. Never part of a catalog."""


@dataclass(frozen=True)
class StockCatalog:
    """
    Point-in-time snapshot of the brewery's stock.

    Maps product name to the tuple of its format variants, in ERP order.
    The same type serves as the live catalog for parsing and as the
    snapshot passed through reconciliation.

    Usage:
        catalog = StockCatalog.from_records(erp_client.fetch_stock())
        item = catalog.find_by_code("10ST20")      # -> StockItem 'ST20'
        units = catalog.convert_to_units(item.container_format, 10)
    """

    products: Dict[str, Tuple[StockItem, ...]] = field(default_factory=dict)
    """Product name -> format variants. Treated as read-only."""

    fetched_at: Optional[datetime] = field(default=None, compare=False)
    """When this snapshot was fetched from the ERP (None = never)."""

    @property
    def items(self) -> Tuple[StockItem, ...]:
        """All variants of all products, flattened in catalog order."""
        return tuple(item for variants in self.products.values() for item in variants)

    @property
    def is_empty(self) -> bool:
        return not any(self.products.values())

    @property
    def age_seconds(self) -> float:
        if self.fetched_at is None:
            return float("inf")
        return (datetime.now(timezone.utc) - self.fetched_at).total_seconds()

    def is_stale(self, max_age_seconds: float) -> bool:
        return self.age_seconds > max_age_seconds

    def find_by_code(self, query: str) -> Optional[StockItem]:
        """
        Find the single item whose code appears inside ``query``.

        The order shorthand puts the code right after the box count, so
        "10ST20" finds the item coded "ST20". Zero or several matching
        codes both return None.
        """
        return find_item_by_code(self.items, query)

    def get_item(self, name: str, code: str) -> Optional[StockItem]:
        """Find an item by exact code within one product bucket."""
        for item in self.products.get(name, ()):
            if item.code == code:
                return item
        return None

    convert_to_units = staticmethod(convert_to_units)
    convert_to_boxes = staticmethod(convert_to_boxes)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "fetched_at": self.fetched_at.isoformat() if self.fetched_at else None,
            "products": {
                name: [item.to_dict() for item in variants]
                for name, variants in self.products.items()
            },
        }

    @classmethod
    def from_items(
        cls,
        items: Iterable[StockItem],
        fetched_at: Optional[datetime] = None,
    ) -> "StockCatalog":
        """
        Group items by product name, keeping first-seen order.

        Items without a code, or whose code is already taken, are skipped:
        codes must stay unique for substring lookup to work. The deposit
        pseudo-item's code is reserved and skipped as well.
        """
        products: Dict[str, List[StockItem]] = {}
        seen_codes = set()

        for item in items:
            if not item.code:
                logger.warning(f"Skipping stock item without code: {item.name!r}")
                continue
            if item.code == DEPOSIT_KEG.code:
                logger.warning(f"Skipping stock item with reserved code {item.code!r} ({item.name!r})")
                continue
            if item.code in seen_codes:
                logger.warning(f"Skipping duplicate stock code {item.code!r} ({item.name!r})")
                continue
            seen_codes.add(item.code)
            products.setdefault(item.name, []).append(item)

        return cls(
            products={name: tuple(variants) for name, variants in products.items()},
            fetched_at=fetched_at,
        )

    @classmethod
    def from_records(
        cls,
        records: Iterable[Dict[str, Any]],
        fetched_at: Optional[datetime] = None,
    ) -> "StockCatalog":
        """Create a catalog from ERP stock records."""
        return cls.from_items(
            (StockItem.from_record(record) for record in records),
            fetched_at=fetched_at or datetime.now(timezone.utc),
        )

    @classmethod
    def create_empty(cls) -> "StockCatalog":
        """Empty catalog used before the first ERP fetch."""
        return cls(products={}, fetched_at=None)


def find_item_by_code(items: Iterable[StockItem], query: str) -> Optional[StockItem]:
    """Linear scan for the unique item whose code is a substring of ``query``."""
    match: Optional[StockItem] = None
    for item in items:
        if not item.code or item.code not in query:
            continue
        if match is not None:
            return None
        match = item
    return match
