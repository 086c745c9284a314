"""Tests for layout primitives and pagination"""

import pytest
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

from legal_forms.services.layout import (
    BLANK,
    BlockKind,
    PageGeometry,
    PageLayout,
    display_value,
    format_currency,
    wrap_text,
)


@pytest.fixture
def geometry():
    return PageGeometry()


@pytest.fixture
def layout(geometry):
    return PageLayout(geometry)


def _assert_never_split(layout: PageLayout):
    geometry = layout.geometry
    for block in layout.blocks:
        assert block.bottom <= geometry.page_height or block.y == geometry.top_margin


class TestFormatCurrency:

    @pytest.mark.parametrize("amount,expected", [
        (1234.5, "$1,234.50"),
        (500000, "$500,000.00"),
        (0, "$0.00"),
        ("1,500", "$1,500.00"),
        ("$75000", "$75,000.00"),
        ("abc", "$0.00"),
        (None, "$0.00"),
        (True, "$0.00"),
        (float("nan"), "$0.00"),
        (0.125, "$0.13"),
        (1000.125, "$1,000.13"),
        ("2.675", "$2.68"),
    ])
    def test_format(self, amount, expected):
        assert format_currency(amount) == expected


class TestDisplayValue:

    def test_placeholder_for_missing(self):
        assert display_value(None) == BLANK
        assert display_value("", "n/a") == "n/a"

    def test_values(self):
        assert display_value(True) == "Yes"
        assert display_value(False) == "No"
        assert display_value(30.0) == "30"
        assert display_value(6.5) == "6.5"
        assert display_value(0) == "0"

    def test_list_items_are_joined(self):
        assert display_value(["stove", "fridge"]) == "stove, fridge"
        assert display_value(["", None], "n/a") == "n/a"


class TestWrapText:

    def test_lines_fit_width(self):
        text = "The property and improvements which the Seller is agreeing to sell " * 5
        width = 170 * mm
        lines = wrap_text(text, width, "Helvetica", 10)
        assert len(lines) > 1
        for line in lines:
            assert stringWidth(line, "Helvetica", 10) <= width

    def test_newlines_start_new_lines(self):
        assert wrap_text("one\ntwo", 500, "Helvetica", 10) == ["one", "two"]

    def test_long_word_is_split(self):
        lines = wrap_text("_" * 200, 100, "Helvetica", 10)
        assert len(lines) > 1
        assert "".join(lines) == "_" * 200

    def test_empty_text_keeps_one_line(self):
        assert wrap_text("", 100, "Helvetica", 10) == [""]


class TestPagination:
    """A block goes to a new page when it would pass the page bottom"""

    def test_break_before_overflowing_block(self, layout, geometry):
        for i in range(44):
            layout.add_text(f"Line {i}")
        blocks = layout.blocks
        # 20 + 43 * 6 = 278; the 44th line would end at 284
        assert blocks[42].page == 1
        assert blocks[42].bottom == 278
        assert blocks[43].page == 2
        assert blocks[43].y == geometry.top_margin
        assert layout.page_count == 2

    def test_exact_fit_stays_on_page(self, layout, geometry):
        layout.skip(254)
        block = layout.add_text("fits")[0]
        assert block.page == 1
        assert block.bottom == geometry.page_height

    def test_never_split(self, layout):
        for i in range(30):
            layout.add_section(f"Section {i}")
            layout.add_text("Body text " * 40)
            layout.add_field("Label", "Value", inline=True)
            layout.add_signature_line("Seller")
        assert layout.page_count > 1
        _assert_never_split(layout)

    def test_no_break_at_page_top(self, layout, geometry):
        layout.check_page_break(1000)
        assert layout.page_count == 1
        assert layout.y == geometry.top_margin

    def test_oversized_text_continues_on_fresh_pages(self, layout, geometry):
        layout.add_text("intro")
        text = "\n".join(f"clause {i}" for i in range(100))
        blocks = layout.add_text(text)
        per_page = int(geometry.usable_height // geometry.line_height)
        assert [len(b.lines) for b in blocks] == [per_page, per_page, 100 - 2 * per_page]
        assert [b.page for b in blocks] == [2, 3, 4]
        _assert_never_split(layout)

    def test_signature_block_moves_whole(self, layout, geometry):
        layout.skip(240)
        block = layout.add_signature_line("Buyer", "2024-06-01")
        assert block.page == 2
        assert block.y == geometry.top_margin
        assert block.height == geometry.signature_height
        assert block.date == "2024-06-01"


class TestBlocks:

    def test_inline_field(self, layout):
        block = layout.add_field("Name of Seller(s)", "Jane Seller", inline=True)[0]
        assert block.kind == BlockKind.FIELD
        assert block.text == "Name of Seller(s): Jane Seller"
        assert block.label == "Name of Seller(s): "

    def test_inline_field_blank(self, layout):
        block = layout.add_field("Property Address", None, inline=True)[0]
        assert block.value == BLANK

    def test_stacked_field_keeps_label_with_value(self, layout, geometry):
        layout.skip(250)
        label, value = layout.add_field("B. Residing at", "12 Elm Street")
        assert label.page == value.page == 2
        assert label.bold
        assert value.x == geometry.left_margin + 5

    def test_title_height(self, layout, geometry):
        block = layout.add_title("Counteroffer to Purchase")
        assert block.height == 15
        assert layout.y == geometry.top_margin + 15

    def test_long_title_wraps(self, layout):
        block = layout.add_title("STANDARD FORM CONTRACT FOR PURCHASE AND SALE OF REAL ESTATE")
        assert len(block.lines) == 2
        assert block.height == 15 + 8

    def test_section_spacing(self, layout, geometry):
        block = layout.add_section("EXPIRATION")
        assert block.y == geometry.top_margin + 5
        assert layout.y == block.bottom + 2
