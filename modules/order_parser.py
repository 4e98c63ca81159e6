"""
Parser for shorthand order text.

Staff type orders as comma-separated ``<boxes><code>`` tokens, for example
``"10ST20, 3NM75"``: ten boxes of ST20 and three of NM75. The parser is run
on every keystroke, so half-typed or unknown tokens are expected and are
dropped quietly instead of raising.

Keg orders imply a returnable-keg deposit. The deposit line is derived from
the parsed keg lines on every call and always comes first.
"""

from __future__ import annotations

from typing import Iterable, List, Optional, Sequence

from models.order import OrderLine
from models.stock import (
    DEPOSIT_KEG,
    StockItem,
    convert_to_units,
    find_item_by_code,
)

TOKEN_SEPARATOR = ","


def split_tokens(text: Optional[str]) -> List[str]:
    """Split order text on commas and trim each token. Blank input -> []."""
    if not text or not text.strip():
        return []
    return [token.strip() for token in text.split(TOKEN_SEPARATOR)]


def _parse_box_count(prefix: str) -> Optional[int]:
    prefix = prefix.strip()
    if not prefix.isdecimal():
        return None
    return int(prefix)


def parse_token(token: str, items: Sequence[StockItem]) -> Optional[OrderLine]:
    """
    Parse a single ``<boxes><code>`` token.

    The box count is everything left of the matched code. Returns None when
    the code is unknown or ambiguous, the count is not a positive integer,
    or the converted quantity is not positive.
    """
    if not token:
        return None

    item = find_item_by_code(items, token)
    if item is None:
        return None

    box_count = _parse_box_count(token[:token.index(item.code)])
    if not box_count:
        return None

    quantity = convert_to_units(item.container_format, box_count)
    if quantity <= 0:
        return None

    return OrderLine(quantity=quantity, stock_item=item)


def deposit_line(lines: Iterable[OrderLine]) -> Optional[OrderLine]:
    """Deposit line for the keg lines in ``lines``, summed in units."""
    keg_units = sum(line.quantity for line in lines if line.stock_item.is_keg)
    if keg_units <= 0:
        return None
    return OrderLine(quantity=keg_units, stock_item=DEPOSIT_KEG)


def parse_order_lines(text: Optional[str], items: Iterable[StockItem]) -> List[OrderLine]:
    """
    Parse order text into order lines against the known stock items.

    Args:
        text: Raw order text, e.g. "10ST20, 3NM75" (None or blank allowed)
        items: Every known stock item, all products and formats

    Returns:
        The deposit line (if any keg was ordered) followed by one line per
        accepted token, in typing order
    """
    items = tuple(items)
    lines = [
        line
        for line in (parse_token(token, items) for token in split_tokens(text))
        if line is not None
    ]

    deposit = deposit_line(lines)
    if deposit is not None:
        lines.insert(0, deposit)
    return lines
