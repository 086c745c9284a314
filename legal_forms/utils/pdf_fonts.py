"""Font resolution for layout metrics and PDF rendering.

The standard Helvetica family is always available. A TrueType family can be
registered instead by pointing ``FONT_DIR`` at a directory holding
``Regular.ttf`` and ``Bold.ttf``.
"""

import logging
from pathlib import Path
from typing import Optional

from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.ttfonts import TTFont

logger = logging.getLogger(__name__)

_CUSTOM_FAMILY = "DocumentSans"

# font_dir -> (regular, bold) names, or None when the directory has no usable family
_registered_dirs: dict[str, Optional[tuple[str, str]]] = {}


def register_fonts(font_dir: Optional[str]) -> Optional[tuple[str, str]]:
    """Register the TrueType family in font_dir.

    Each directory gets its own font names, so faces of one directory never
    stand in for another's. Returns the (regular, bold) names, or None.
    """
    if not font_dir:
        return None
    if font_dir in _registered_dirs:
        return _registered_dirs[font_dir]

    regular = Path(font_dir) / "Regular.ttf"
    bold = Path(font_dir) / "Bold.ttf"
    if not regular.exists():
        logger.warning(f"No Regular.ttf in {font_dir}; using standard fonts")
        _registered_dirs[font_dir] = None
        return None

    family = f"{_CUSTOM_FAMILY}{len(_registered_dirs) + 1}"
    regular_name = family
    pdfmetrics.registerFont(TTFont(regular_name, str(regular)))
    bold_name = regular_name
    if bold.exists():
        bold_name = f"{family}-Bold"
        pdfmetrics.registerFont(TTFont(bold_name, str(bold)))
    pdfmetrics.registerFontFamily(
        family,
        normal=regular_name,
        bold=bold_name,
        italic=regular_name,
        boldItalic=bold_name,
    )
    _registered_dirs[font_dir] = (regular_name, bold_name)
    return regular_name, bold_name


def resolve_fonts(settings) -> tuple[str, str]:
    """Return the (regular, bold) font names to use for the given settings"""
    names = register_fonts(settings.font_dir)
    if names is not None:
        return names
    return settings.font_name, settings.font_bold_name
