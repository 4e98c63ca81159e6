"""Render order lines back into shorthand order text (used when editing)."""

from __future__ import annotations

from typing import Iterable

from models.order import OrderLine
from models.stock import ContainerFormat, convert_to_boxes

LINE_SEPARATOR = ", "


def format_order_line(line: OrderLine) -> str:
    """``<boxes><code>`` for one line."""
    boxes = convert_to_boxes(line.stock_item.container_format, line.quantity)
    return f"{boxes}{line.stock_item.code}"


def format_order_lines(lines: Iterable[OrderLine]) -> str:
    """
    Canonical shorthand for a list of lines.

    Lines without a container format are left out, which drops the keg
    deposit line: it is recomputed when the text is parsed again.
    """
    return LINE_SEPARATOR.join(
        format_order_line(line)
        for line in lines
        if line.stock_item.container_format is not ContainerFormat.NO_FORMAT
    )
