"""Render laid-out pages to PDF bytes with the ReportLab canvas"""

import io
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.lib.units import mm
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas

from legal_forms.services.layout import Block, BlockKind, Page

# Signature block geometry, relative to the block top
SIGNATURE_RULE_OFFSET = 10
SIGNATURE_LABEL_OFFSET = 16
SIGNATURE_RULE_WIDTH = 60
DATE_RULE_START = 80
DATE_RULE_END = 120
DATE_TEXT_OFFSET = 8


class PDFRenderer:
    """Draw pages of blocks onto A4 pages.

    The canvas runs in invariant mode so that identical pages always
    produce identical bytes.
    """

    def __init__(self, font_name: str = "Helvetica", font_bold: str = "Helvetica-Bold",
                 line_height: float = 6):
        self.font_name = font_name
        self.font_bold = font_bold
        self.line_height = line_height
        self.page_width, self.page_height = A4

    def render(self, pages: list[Page], title: Optional[str] = None) -> bytes:
        buffer = io.BytesIO()
        pdf = canvas.Canvas(buffer, pagesize=A4, invariant=1, pageCompression=0)
        if title:
            pdf.setTitle(title)
            pdf.setSubject(title)
        pdf.setCreator("legal-forms")

        for page in pages:
            for block in page.blocks:
                self._draw_block(pdf, block)
            pdf.showPage()

        pdf.save()
        return buffer.getvalue()

    def _point(self, x: float, y: float) -> tuple[float, float]:
        """Layout units from the top-left to PDF points from the bottom-left"""
        return x * mm, self.page_height - y * mm

    def _draw_block(self, pdf: canvas.Canvas, block: Block) -> None:
        if block.kind == BlockKind.SIGNATURE:
            self._draw_signature(pdf, block)
        elif block.kind == BlockKind.FIELD:
            self._draw_inline_field(pdf, block)
        else:
            font = self.font_bold if block.bold else self.font_name
            pdf.setFont(font, block.font_size)
            for index, line in enumerate(block.lines):
                pdf.drawString(*self._point(block.x, block.y + index * self.line_height), line)

    def _draw_inline_field(self, pdf: canvas.Canvas, block: Block) -> None:
        x, y = self._point(block.x, block.y)
        pdf.setFont(self.font_bold, block.font_size)
        pdf.drawString(x, y, block.label)
        label_width = stringWidth(block.label, self.font_bold, block.font_size)
        pdf.setFont(self.font_name, block.font_size)
        pdf.drawString(x + label_width, y, block.value)

    def _draw_signature(self, pdf: canvas.Canvas, block: Block) -> None:
        left = block.x
        rule_y = block.y + SIGNATURE_RULE_OFFSET
        label_y = block.y + SIGNATURE_LABEL_OFFSET

        pdf.setLineWidth(0.5)
        pdf.line(*self._point(left, rule_y), *self._point(left + SIGNATURE_RULE_WIDTH, rule_y))
        pdf.setFont(self.font_name, block.font_size)
        pdf.drawString(*self._point(left, label_y), block.label)

        pdf.line(*self._point(left + DATE_RULE_START, rule_y), *self._point(left + DATE_RULE_END, rule_y))
        pdf.drawString(*self._point(left + DATE_RULE_START, label_y), "Date")
        if block.date:
            pdf.drawString(*self._point(left + DATE_RULE_START, block.y + DATE_TEXT_OFFSET), block.date)
