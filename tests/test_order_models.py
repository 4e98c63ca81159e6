"""Unit tests for Order, SubmittedOrder, OrderLine and Customer."""

from dataclasses import FrozenInstanceError
from datetime import datetime, timezone

import pytest

from models.order import (
    Customer,
    Order,
    OrderLine,
    SubmittedOrder,
    find_customer_by_name,
)
from models.stock import DEPOSIT_KEG, ContainerFormat, StockItem
from modules.order_parser import parse_order_lines


@pytest.fixture
def crown():
    return Customer(id=1, name="The Crown")


class TestCustomer:

    def test_find_by_exact_name(self, customers):
        assert find_customer_by_name(customers, "Red Lion").id == 2

    def test_no_partial_or_case_insensitive_match(self, customers):
        assert find_customer_by_name(customers, "Red") is None
        assert find_customer_by_name(customers, "red lion") is None

    def test_from_dict(self):
        assert Customer.from_dict({"id": "7", "name": "Swan"}) == Customer(7, "Swan")

    def test_from_dict_requires_id(self):
        with pytest.raises(KeyError):
            Customer.from_dict({"name": "Swan"})
        with pytest.raises(TypeError):
            Customer.from_dict({"id": None, "name": "Swan"})


class TestOrderLine:

    def test_properties(self, items):
        deposit, keg = parse_order_lines("3ST20", items)
        assert deposit.is_deposit
        assert not keg.is_deposit
        assert keg.code == "ST20"
        assert keg.container_format is ContainerFormat.KEG_20L
        assert keg.box_count == 3

    def test_dict_round_trip_keeps_code_and_format(self, items):
        line = parse_order_lines("2NM33", items)[0]
        restored = OrderLine.from_dict(line.to_dict())
        assert restored.quantity == 48
        assert restored.code == "NM33"
        assert restored.container_format is ContainerFormat.BOX_33CL
        assert restored.stock_item.available_quantity == 0

    def test_deposit_from_dict_is_sentinel(self):
        restored = OrderLine.from_dict({"code": "DEPOSIT", "quantity": 2})
        assert restored.stock_item is DEPOSIT_KEG

    def test_only_the_sentinel_is_a_deposit(self):
        lookalike = StockItem("DEPOSIT", "Deposit Porter", ContainerFormat.BOX_33CL, 24)
        assert not OrderLine(quantity=24, stock_item=lookalike).is_deposit
        assert OrderLine(quantity=2, stock_item=DEPOSIT_KEG).is_deposit


class TestOrder:

    def test_set_lines_replaces(self, items, crown):
        order = Order(customer=crown)
        order.set_lines(parse_order_lines("2ST20", items))
        order.set_lines(parse_order_lines("1NM75", items))
        assert [line.code for line in order.lines] == ["NM75"]

    def test_real_lines_exclude_deposit(self, items, crown):
        order = Order(customer=crown, lines=parse_order_lines("2ST20, 1NM75", items))
        assert [line.code for line in order.real_lines] == ["ST20", "NM75"]

    def test_freeze(self, items, crown):
        order = Order(customer=crown, lines=parse_order_lines("2ST20", items), local_id="abc")
        frozen = order.freeze()

        assert isinstance(frozen, SubmittedOrder)
        assert frozen.lines == tuple(order.lines)
        assert frozen.local_id == "abc"
        assert not frozen.is_synced
        with pytest.raises(FrozenInstanceError):
            frozen.local_id = "other"

    def test_freeze_requires_customer(self):
        with pytest.raises(ValueError):
            Order().freeze()

    def test_frozen_order_detached_from_draft(self, items, crown):
        order = Order(customer=crown, lines=parse_order_lines("2ST20", items))
        frozen = order.freeze()
        order.set_lines([])
        assert len(frozen.lines) == 2


class TestSubmittedOrder:

    def test_with_remote_id(self, items, crown):
        order = Order(customer=crown, lines=parse_order_lines("1ST75", items), local_id="x1").freeze()
        synced = order.with_remote_id(42)
        assert synced.remote_id == 42
        assert synced.is_synced
        assert order.remote_id is None

    def test_dict_round_trip(self, items, crown):
        timestamp = datetime(2026, 3, 2, 9, 30, tzinfo=timezone.utc)
        order = Order(
            customer=crown,
            lines=parse_order_lines("2ST20, 3NM75", items),
            timestamp=timestamp,
            local_id="x1",
        ).freeze()

        data = order.to_dict()
        assert data["customer"] == {"id": 1, "name": "The Crown"}
        assert data["timestamp"] == "2026-03-02T09:30:00+00:00"
        assert [line["code"] for line in data["lines"]] == ["DEPOSIT", "ST20", "NM75"]

        restored = SubmittedOrder.from_dict(data)
        assert restored.to_dict() == data
        assert restored.timestamp == timestamp
