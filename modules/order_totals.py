"""Totals for an order: boxes, units and litres per container format."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Optional

from models.order import OrderLine
from models.stock import (
    LITRES_PER_UNIT,
    ContainerFormat,
    StockCatalog,
    StockItem,
    convert_to_boxes,
)


@dataclass(frozen=True)
class OrderSummary:
    """Aggregated view of an order's real lines, for display and sync."""

    boxes_by_format: Dict[str, int] = field(default_factory=dict)
    units_by_format: Dict[str, int] = field(default_factory=dict)
    total_litres: float = 0.0
    deposit_kegs: int = 0
    line_count: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return {
            "boxes_by_format": dict(self.boxes_by_format),
            "units_by_format": dict(self.units_by_format),
            "total_litres": self.total_litres,
            "deposit_kegs": self.deposit_kegs,
            "line_count": self.line_count,
        }


def summarize_lines(lines: Iterable[OrderLine]) -> OrderSummary:
    """
    Summarize order lines.

    The deposit line only feeds ``deposit_kegs``; lines without a container
    format are not counted.
    """
    boxes: Dict[str, int] = {}
    units: Dict[str, int] = {}
    litres = 0.0
    deposit = 0
    count = 0

    for line in lines:
        if line.is_deposit:
            deposit += line.quantity
            continue

        container_format = line.stock_item.container_format
        if container_format is ContainerFormat.NO_FORMAT:
            continue

        key = container_format.value
        boxes[key] = boxes.get(key, 0) + convert_to_boxes(container_format, line.quantity)
        units[key] = units.get(key, 0) + line.quantity
        litres += line.quantity * LITRES_PER_UNIT[container_format]
        count += 1

    return OrderSummary(
        boxes_by_format=boxes,
        units_by_format=units,
        total_litres=round(litres, 2),
        deposit_kegs=deposit,
        line_count=count,
    )


def find_oversold(
    snapshot: StockCatalog,
    codes: Optional[Iterable[str]] = None,
) -> List[StockItem]:
    """
    Items whose availability has gone negative.

    Args:
        snapshot: Stock snapshot, usually after commit_lines()
        codes: Only report these codes (default: every item)
    """
    wanted = set(codes) if codes is not None else None
    return [
        item
        for item in snapshot.items
        if item.available_quantity < 0 and (wanted is None or item.code in wanted)
    ]
