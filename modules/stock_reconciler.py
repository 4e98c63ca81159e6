"""
Apply order lines to a stock snapshot.

Committing an order subtracts its lines from stock, reverting it (deleting
or reopening an order) adds them back. Both go through reconcile() with a
different combine function, and neither touches the snapshot passed in:
every changed product bucket is rebuilt and a new StockCatalog is returned.

Availability is never clamped at zero. A negative quantity is how an
oversell shows up, and it keeps subtract-then-add an exact inverse.
"""

from __future__ import annotations

from dataclasses import replace
from functools import reduce
from typing import Callable, Iterable

from models.order import OrderLine
from models.stock import StockCatalog

Combine = Callable[[int, int], int]


def subtract(available: int, quantity: int) -> int:
    return available - quantity


def add(available: int, quantity: int) -> int:
    return available + quantity


def apply_line(snapshot: StockCatalog, line: OrderLine, combine: Combine) -> StockCatalog:
    """
    Apply one line to the snapshot.

    The item is looked up by code inside the bucket named after the line's
    product. A line whose product or code is missing from the snapshot
    (stale catalog, deposit line) leaves the snapshot unchanged.
    """
    name = line.stock_item.name
    variants = snapshot.products.get(name)
    if not variants:
        return snapshot

    for index, item in enumerate(variants):
        if item.code == line.stock_item.code:
            break
    else:
        return snapshot

    updated = item.with_quantity(combine(item.available_quantity, line.quantity))
    products = dict(snapshot.products)
    products[name] = variants[:index] + (updated,) + variants[index + 1:]
    return replace(snapshot, products=products)


def reconcile(
    snapshot: StockCatalog,
    lines: Iterable[OrderLine],
    combine: Combine,
) -> StockCatalog:
    """Fold ``lines`` into ``snapshot`` left to right with ``combine``."""
    return reduce(lambda current, line: apply_line(current, line, combine), lines, snapshot)


def commit_lines(snapshot: StockCatalog, lines: Iterable[OrderLine]) -> StockCatalog:
    """Take an order's lines out of stock."""
    return reconcile(snapshot, lines, subtract)


def revert_lines(snapshot: StockCatalog, lines: Iterable[OrderLine]) -> StockCatalog:
    """Put an order's lines back into stock."""
    return reconcile(snapshot, lines, add)
