"""Page layout primitives shared by all document routines.

Coordinates are layout units (millimetres) measured from the top-left corner
of the page. ``PageLayout`` keeps a vertical cursor; every block is checked
against the page bottom before it is placed, so a block is never split
across a page boundary.
"""

import math
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth

BLANK = "________________________"
SHORT_BLANK = "_________________"

TITLE_HEIGHT = 15
TITLE_EXTRA_LINE = 8
SUBTITLE_HEIGHT = 10
STACKED_FIELD_GAP = 3
STACKED_VALUE_INDENT = 5
SECTION_GAP_BEFORE = 5
SECTION_GAP_AFTER = 2


class PageGeometry(BaseModel):
    """Fixed page geometry used for layout"""
    page_height: float = 280
    top_margin: float = 20
    left_margin: float = 20
    right_margin: float = 190
    line_height: float = 6
    signature_height: float = 25

    @property
    def content_width(self) -> float:
        return self.right_margin - self.left_margin

    @property
    def usable_height(self) -> float:
        return self.page_height - self.top_margin


class BlockKind(str, Enum):
    TITLE = "title"
    SUBTITLE = "subtitle"
    TEXT = "text"
    FIELD = "field"
    SIGNATURE = "signature"


class Block(BaseModel):
    """A laid-out block. ``y`` is the block top, which is also the first baseline."""
    kind: BlockKind
    page: int
    x: float
    y: float
    height: float
    lines: list[str] = Field(default_factory=list)
    font_size: float = 10
    bold: bool = False
    label: Optional[str] = None
    value: Optional[str] = None
    date: Optional[str] = None

    @property
    def bottom(self) -> float:
        return self.y + self.height

    @property
    def text(self) -> str:
        return "\n".join(self.lines)


class Page(BaseModel):
    number: int
    blocks: list[Block] = Field(default_factory=list)


def format_currency(amount: Any) -> str:
    """Format as US dollars, e.g. 1234.5 -> '$1,234.50'. Unparsable input gives '$0.00'."""
    if isinstance(amount, bool) or amount is None:
        return "$0.00"
    if isinstance(amount, str):
        try:
            amount = float(amount.strip().lstrip("$").replace(",", ""))
        except ValueError:
            return "$0.00"
    try:
        num = float(amount)
    except (TypeError, ValueError):
        return "$0.00"
    if not math.isfinite(num):
        return "$0.00"
    try:
        cents = Decimal(repr(num)).quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    except InvalidOperation:
        return f"${num:,.2f}"
    return f"${cents:,.2f}"


def display_value(value: Any, placeholder: str = BLANK) -> str:
    """Render a record value as document text"""
    if value is None or value == "":
        return placeholder
    if isinstance(value, bool):
        return "Yes" if value else "No"
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    if isinstance(value, (list, tuple)):
        items = [display_value(item, "") for item in value]
        return ", ".join(item for item in items if item) or placeholder
    return str(value)


def wrap_text(text: str, width: float, font_name: str, font_size: float) -> list[str]:
    """Greedy word wrap to ``width`` points using the font's metrics.

    Newlines always start a new line; a word wider than the line is split.
    """
    def fits(candidate: str) -> bool:
        return stringWidth(candidate, font_name, font_size) <= width

    lines = []
    for paragraph in text.split("\n"):
        current = ""
        for word in paragraph.split():
            candidate = f"{current} {word}" if current else word
            if fits(candidate):
                current = candidate
                continue
            if current:
                lines.append(current)
            current = ""
            while not fits(word):
                cut = len(word) - 1
                while cut > 1 and not fits(word[:cut]):
                    cut -= 1
                lines.append(word[:cut])
                word = word[cut:]
            current = word
        lines.append(current)
    return lines


class PageLayout:
    """Cursor-based layout builder producing pages of positioned blocks"""

    def __init__(self, geometry: PageGeometry, font_name: str = "Helvetica",
                 font_bold: str = "Helvetica-Bold"):
        self.geometry = geometry
        self.font_name = font_name
        self.font_bold = font_bold
        self.pages: list[Page] = [Page(number=1)]
        self.y = geometry.top_margin

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def blocks(self) -> list[Block]:
        return [block for page in self.pages for block in page.blocks]

    def _font(self, bold: bool) -> str:
        return self.font_bold if bold else self.font_name

    def new_page(self) -> None:
        self.pages.append(Page(number=len(self.pages) + 1))
        self.y = self.geometry.top_margin

    def check_page_break(self, height: float = 10) -> None:
        """Start a new page if a block of this height would pass the page bottom"""
        if self.y + height > self.geometry.page_height and self.y > self.geometry.top_margin:
            self.new_page()

    def skip(self, units: float) -> None:
        """Advance the cursor by vertical spacing"""
        self.y += units

    def _emit(self, block: Block) -> Block:
        self.pages[-1].blocks.append(block)
        self.y += block.height
        return block

    def _wrap(self, text: str, x: float, font_size: float, bold: bool) -> list[str]:
        width = (self.geometry.right_margin - x) * mm
        return wrap_text(text, width, self._font(bold), font_size)

    def add_text(self, text: str, x: Optional[float] = None, font_size: float = 10,
                 bold: bool = False) -> list[Block]:
        """Wrapped paragraph. Paragraphs taller than a page continue on fresh pages."""
        x = self.geometry.left_margin if x is None else x
        lines = self._wrap(text, x, font_size, bold)
        per_page = max(1, int(self.geometry.usable_height // self.geometry.line_height))

        blocks = []
        for start in range(0, len(lines), per_page):
            chunk = lines[start:start + per_page]
            height = len(chunk) * self.geometry.line_height
            self.check_page_break(height)
            blocks.append(self._emit(Block(
                kind=BlockKind.TEXT, page=len(self.pages), x=x, y=self.y,
                height=height, lines=chunk, font_size=font_size, bold=bold,
            )))
        return blocks

    def _heading(self, kind: BlockKind, text: str, font_size: float,
                 height: float, extra_line: float) -> Block:
        lines = self._wrap(text, self.geometry.left_margin, font_size, True)
        height = height + (len(lines) - 1) * extra_line
        self.check_page_break(height)
        return self._emit(Block(
            kind=kind, page=len(self.pages), x=self.geometry.left_margin, y=self.y,
            height=height, lines=lines, font_size=font_size, bold=True,
        ))

    def add_title(self, text: str) -> Block:
        return self._heading(BlockKind.TITLE, text, 16, TITLE_HEIGHT, TITLE_EXTRA_LINE)

    def add_subtitle(self, text: str) -> Block:
        return self._heading(BlockKind.SUBTITLE, text, 12, SUBTITLE_HEIGHT, self.geometry.line_height)

    def add_section(self, title: str) -> Block:
        self.skip(SECTION_GAP_BEFORE)
        block = self.add_subtitle(title)
        self.skip(SECTION_GAP_AFTER)
        return block

    def add_field(self, label: str, value: Optional[str], inline: bool = False) -> list[Block]:
        """Labeled value, either 'Label: value' on one line or label above value"""
        value = value or BLANK
        if inline:
            self.check_page_break(self.geometry.line_height)
            return [self._emit(Block(
                kind=BlockKind.FIELD, page=len(self.pages), x=self.geometry.left_margin,
                y=self.y, height=self.geometry.line_height, lines=[f"{label}: {value}"],
                label=f"{label}: ", value=value,
            ))]

        # Keep the label with its value when both fit on one page
        value_x = self.geometry.left_margin + STACKED_VALUE_INDENT
        label_lines = self._wrap(f"{label}:", self.geometry.left_margin, 10, True)
        value_lines = self._wrap(value, value_x, 10, False)
        together = (len(label_lines) + len(value_lines)) * self.geometry.line_height
        if together <= self.geometry.usable_height:
            self.check_page_break(together)

        blocks = self.add_text(f"{label}:", bold=True)
        blocks += self.add_text(value, x=value_x)
        self.skip(STACKED_FIELD_GAP)
        return blocks

    def add_signature_line(self, label: str, date: Optional[str] = None) -> Block:
        """Signature rule with label, and a date rule with optional pre-filled date"""
        height = self.geometry.signature_height
        self.check_page_break(height)
        return self._emit(Block(
            kind=BlockKind.SIGNATURE, page=len(self.pages), x=self.geometry.left_margin,
            y=self.y, height=height, lines=[label], font_size=9, label=label,
            date=date or None,
        ))
