"""Unit tests for rendering order lines back to shorthand text."""

from models.order import OrderLine
from models.stock import DEPOSIT_KEG, ContainerFormat, StockItem
from modules.order_formatter import format_order_line, format_order_lines
from modules.order_parser import parse_order_lines


class TestFormatOrderLines:

    def test_empty(self):
        assert format_order_lines([]) == ""

    def test_units_rendered_as_boxes(self, catalog):
        line = OrderLine(quantity=18, stock_item=catalog.get_item("Nightmare IPA", "NM75"))
        assert format_order_line(line) == "3NM75"

    def test_deposit_line_left_out(self, catalog):
        lines = [
            OrderLine(quantity=2, stock_item=DEPOSIT_KEG),
            OrderLine(quantity=2, stock_item=catalog.get_item("Stout", "ST20")),
        ]
        assert format_order_lines(lines) == "2ST20"

    def test_no_format_items_left_out(self):
        lines = [
            OrderLine(quantity=5, stock_item=StockItem("GL", "Glass", ContainerFormat.NO_FORMAT)),
            OrderLine(quantity=24, stock_item=StockItem("NM33", "Nightmare IPA", ContainerFormat.BOX_33CL)),
        ]
        assert format_order_lines(lines) == "1NM33"

    def test_partial_box_truncates(self, catalog):
        line = OrderLine(quantity=8, stock_item=catalog.get_item("Stout", "ST75"))
        assert format_order_line(line) == "1ST75"


class TestRoundTrip:

    def test_format_of_parse_reproduces_text(self, items):
        text = "2ST20, 1ST30, 3NM75, 1NM33"
        assert format_order_lines(parse_order_lines(text, items)) == text

    def test_formatting_normalizes_spacing_and_drops_junk(self, items):
        assert format_order_lines(parse_order_lines(" 2ST20,junk ,  4NM75", items)) == "2ST20, 4NM75"

    def test_parse_of_format_reproduces_lines(self, items):
        lines = parse_order_lines("4PA20, 2ST75", items)
        again = parse_order_lines(format_order_lines(lines), items)
        assert again == lines
