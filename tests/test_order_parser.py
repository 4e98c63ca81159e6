"""
Unit tests for the shorthand order parser.

The parser runs on every keystroke, so most of these check that partial or
wrong input is dropped quietly rather than raising.
"""

import pytest

from models.stock import DEPOSIT_KEG, ContainerFormat, StockItem, convert_to_units
from modules.order_parser import deposit_line, parse_order_lines, parse_token, split_tokens


def _codes(lines):
    return [line.code for line in lines]


class TestSplitTokens:

    @pytest.mark.parametrize("text", [None, "", "   ", "\t\n"])
    def test_blank(self, text):
        assert split_tokens(text) == []

    def test_trims_tokens(self):
        assert split_tokens(" 10ST20 ,3NM75,  ") == ["10ST20", "3NM75", ""]


class TestParseToken:

    def test_valid_token(self, items):
        line = parse_token("10ST20", items)
        assert line.quantity == 10
        assert line.stock_item.code == "ST20"

    def test_box_format_converts_to_units(self, items):
        line = parse_token("3NM75", items)
        assert line.quantity == convert_to_units(ContainerFormat.BOX_75CL, 3) == 18

    def test_space_between_count_and_code(self, items):
        assert parse_token("2 PA20", items).quantity == 2

    def test_trailing_text_after_code_is_ignored(self, items):
        assert parse_token("2PA20x", items).quantity == 2

    @pytest.mark.parametrize("token", [
        "ST20",      # no count
        "0ST20",     # zero
        "-2ST20",    # negative
        "x2ST20",    # junk before the count
        "1.5ST20",   # not an integer
        "10",        # count only, still typing
        "5ZZZ",      # unknown code
        "",
    ])
    def test_rejected_tokens(self, items, token):
        assert parse_token(token, items) is None

    def test_no_format_item_is_rejected(self):
        items = [StockItem("GL", "Glass", ContainerFormat.NO_FORMAT, 100)]
        assert parse_token("4GL", items) is None

    def test_ambiguous_code_is_rejected(self):
        items = [
            StockItem("ST2", "Stout", ContainerFormat.KEG_20L, 1),
            StockItem("ST20", "Stout", ContainerFormat.KEG_20L, 1),
        ]
        assert parse_token("1ST20", items) is None


class TestParseOrderLines:

    @pytest.mark.parametrize("text", [None, "", "   ", " , , "])
    def test_blank_input(self, items, text):
        assert parse_order_lines(text, items) == []

    def test_single_box_token(self, items):
        lines = parse_order_lines("3NM75", items)
        assert len(lines) == 1
        assert lines[0].quantity == 18
        assert lines[0].code == "NM75"

    def test_unknown_code_dropped(self, items):
        assert parse_order_lines("5ZZZ", items) == []

    def test_bad_tokens_dropped_good_kept(self, items):
        lines = parse_order_lines("3NM75, 5ZZZ, 0ST75, 1NM33", items)
        assert _codes(lines) == ["NM75", "NM33"]

    def test_order_of_lines_preserved(self, items):
        lines = parse_order_lines("1NM33, 2ST75, 3NM75", items)
        assert _codes(lines) == ["NM33", "ST75", "NM75"]

    def test_deposit_line_for_mixed_keg_sizes(self, items):
        lines = parse_order_lines("2ST20,1ST30", items)

        expected = (
            convert_to_units(ContainerFormat.KEG_20L, 2)
            + convert_to_units(ContainerFormat.KEG_30L, 1)
        )
        assert len(lines) == 3
        assert lines[0].stock_item is DEPOSIT_KEG
        assert lines[0].quantity == expected == 3
        assert _codes(lines[1:]) == ["ST20", "ST30"]

    def test_deposit_ignores_box_lines(self, items):
        lines = parse_order_lines("2NM75, 4PA20, 1ST75", items)
        assert lines[0].is_deposit
        assert lines[0].quantity == 4
        assert _codes(lines[1:]) == ["NM75", "PA20", "ST75"]

    def test_no_deposit_without_kegs(self, items):
        lines = parse_order_lines("2NM75, 1ST75", items)
        assert not any(line.is_deposit for line in lines)

    def test_deposit_recomputed_from_scratch(self, items):
        first = parse_order_lines("2ST20", items)
        second = parse_order_lines("1ST20", items)
        assert first[0].quantity == 2
        assert second[0].quantity == 1

    def test_repeated_parse_is_identical(self, items):
        text = "2ST20, 3NM75, junk, 1ST30"
        assert parse_order_lines(text, items) == parse_order_lines(text, items)

    def test_deposit_code_is_never_parsed(self, items):
        assert parse_order_lines("3DEPOSIT", items) == []

    def test_accepts_catalog_items_generator(self, catalog):
        lines = parse_order_lines("1ST75", (item for item in catalog.items))
        assert _codes(lines) == ["ST75"]


class TestDepositLine:

    def test_none_without_kegs(self, items):
        assert deposit_line(parse_order_lines("1NM75", items)) is None

    def test_sums_in_unit_space(self, items):
        line = deposit_line(parse_order_lines("2PA20, 3ST30", items))
        assert line.quantity == 5
        assert line.stock_item is DEPOSIT_KEG
