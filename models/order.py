"""
Order data models.

An order flows through the application like this:
    typed on the form -> parsed into lines -> frozen into the pending list
    -> submitted to the ERP -> removed once the ERP confirms its id

Thread Safety:
    - Order is mutable: lines are replaced on every re-parse while typing
    - Use Order.freeze() to get the immutable SubmittedOrder kept in the
      pending list and handed to the sync code
"""

from __future__ import annotations

from dataclasses import dataclass, field, replace
from datetime import datetime, timezone
from typing import Any, Dict, Iterable, List, Optional, Tuple

from .stock import DEPOSIT_KEG, ContainerFormat, StockItem, convert_to_boxes


@dataclass(frozen=True)
class Customer:
    """A customer as supplied by the ERP. Read-only."""

    id: int
    name: str

    def to_dict(self) -> Dict[str, Any]:
        return {"id": self.id, "name": self.name}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Customer":
        return cls(id=int(data["id"]), name=str(data.get("name", "")))


def find_customer_by_name(customers: Iterable[Customer], name: str) -> Optional[Customer]:
    """Return the customer whose name matches exactly, or None."""
    for customer in customers:
        if customer.name == name:
            return customer
    return None


@dataclass(frozen=True)
class OrderLine:
    """
    One line of an order.

    ``quantity`` is in stock units, the same unit system as
    StockItem.available_quantity. The stock item is referenced, not owned.
    """

    quantity: int
    stock_item: StockItem

    @property
    def code(self) -> str:
        return self.stock_item.code

    @property
    def container_format(self) -> ContainerFormat:
        return self.stock_item.container_format

    @property
    def is_deposit(self) -> bool:
        return self.stock_item is DEPOSIT_KEG

    @property
    def box_count(self) -> int:
        """Ordered boxes, as typed by staff."""
        return convert_to_boxes(self.stock_item.container_format, self.quantity)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "code": self.stock_item.code,
            "name": self.stock_item.name,
            "format": self.stock_item.container_format.value,
            "quantity": self.quantity,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "OrderLine":
        """
        Rebuild a line from stored data.

        The stock item is recreated from the stored code/name/format with
        zero availability; stock levels always come from the live snapshot.
        """
        code = str(data.get("code", ""))
        if code == DEPOSIT_KEG.code:
            item = DEPOSIT_KEG
        else:
            item = StockItem(
                code=code,
                name=str(data.get("name", "")),
                container_format=ContainerFormat.from_value(data.get("format")),
            )
        return cls(quantity=int(data.get("quantity", 0)), stock_item=item)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


@dataclass
class Order:
    """
    An order being typed on the form.

    Lifecycle:
        1. Created empty when staff start typing
        2. Lines replaced on every keystroke (set_lines)
        3. Frozen into a SubmittedOrder when added to the orders list
    """

    customer: Optional[Customer] = None
    lines: List[OrderLine] = field(default_factory=list)
    timestamp: datetime = field(default_factory=_utc_now)
    local_id: Optional[str] = None
    remote_id: Optional[int] = None

    def set_lines(self, lines: Iterable[OrderLine]) -> None:
        """Replace all lines with a fresh parse result."""
        self.lines = list(lines)

    @property
    def real_lines(self) -> List[OrderLine]:
        """Lines for actual stock items (deposit excluded)."""
        return [line for line in self.lines if not line.is_deposit]

    def freeze(self) -> "SubmittedOrder":
        """
        Create an immutable snapshot of this order.

        Raises:
            ValueError: If no customer has been selected
        """
        if self.customer is None:
            raise ValueError("Cannot freeze an order without a customer")
        return SubmittedOrder(
            customer=self.customer,
            lines=tuple(self.lines),
            timestamp=self.timestamp,
            local_id=self.local_id,
            remote_id=self.remote_id,
        )


@dataclass(frozen=True)
class SubmittedOrder:
    """
    Immutable order as kept in the pending list.

    ``local_id`` is assigned when the order is queued and is sent to the ERP
    as the order reference; ``remote_id`` is the id the ERP hands back.
    """

    customer: Customer
    lines: Tuple[OrderLine, ...]
    timestamp: datetime
    local_id: Optional[str] = None
    remote_id: Optional[int] = None

    @property
    def is_synced(self) -> bool:
        return self.remote_id is not None

    @property
    def real_lines(self) -> Tuple[OrderLine, ...]:
        return tuple(line for line in self.lines if not line.is_deposit)

    def with_remote_id(self, remote_id: int) -> "SubmittedOrder":
        return replace(self, remote_id=remote_id)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-ready dict for local storage and the ERP."""
        return {
            "local_id": self.local_id,
            "remote_id": self.remote_id,
            "timestamp": self.timestamp.isoformat(),
            "customer": self.customer.to_dict(),
            "lines": [line.to_dict() for line in self.lines],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubmittedOrder":
        timestamp = data.get("timestamp")
        return cls(
            customer=Customer.from_dict(data.get("customer", {})),
            lines=tuple(OrderLine.from_dict(line) for line in data.get("lines", [])),
            timestamp=datetime.fromisoformat(timestamp) if timestamp else _utc_now(),
            local_id=data.get("local_id"),
            remote_id=data.get("remote_id"),
        )
