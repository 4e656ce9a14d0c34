"""Design tokens and font registration for the bulletin PDF."""

import logging
from dataclasses import dataclass, replace
from pathlib import Path
from typing import Optional

from reportlab.lib.pagesizes import A4
from reportlab.pdfbase import pdfmetrics
from reportlab.pdfbase.pdfmetrics import registerFont, registerFontFamily
from reportlab.pdfbase.ttfonts import TTFont

logger = logging.getLogger(__name__)

# ─── Colors ──────────────────────────────────────────────────────────────────

TEAL       = "#005F73"
RED        = "#C00000"
BLACK      = "#1A1A1A"
GRAY       = "#666666"
LINK_BLUE  = "#1155CC"
RULE_GRAY  = "#999999"
CELL_GRAY  = "#BBBBBB"

# ─── Page geometry (points, origin at the top-left corner) ──────────────────

PAGE_WIDTH, PAGE_HEIGHT = A4
MARGIN = 60
CONTENT_WIDTH = PAGE_WIDTH - 2 * MARGIN

# ─── Articles ────────────────────────────────────────────────────────────────

MIN_REMAINING_HEIGHT = 120
IMAGE_BOX_WIDTH = 160
IMAGE_BOX_HEIGHT = 110
IMAGE_GUTTER = 15
IMAGE_GAP = 5

# ─── Table of contents ───────────────────────────────────────────────────────

TOC_TOP = 55
TOC_BOTTOM_MARGIN = 70
TOC_NUM_WIDTH = 35
TOC_PAGE_WIDTH = 35
TOC_TITLE_WIDTH = CONTENT_WIDTH - TOC_NUM_WIDTH - TOC_PAGE_WIDTH
TOC_ROW_PADDING = 4
TOC_MIN_ROW_HEIGHT = 22

# ─── Page numbers ────────────────────────────────────────────────────────────

PAGE_NUMBER_Y = 25

# Built-in fallback when no TrueType family is bundled
BUILTIN_FAMILY = ("Times-Roman", "Times-Bold", "Times-Italic", "Times-BoldItalic")

FONT_SUFFIXES = ("Regular", "Bold", "Italic", "BoldItalic")


@dataclass(frozen=True)
class TextStyle:
    """Font, size, colour and alignment for a block of text."""

    font: str
    size: float
    color: str = BLACK
    align: str = "left"
    underline: bool = False
    link: Optional[str] = None
    line_height: float = 1.2

    @property
    def leading(self) -> float:
        return self.size * self.line_height

    def with_(self, **changes) -> "TextStyle":
        return replace(self, **changes)


@dataclass(frozen=True)
class FontSet:
    """Registered font names for the four faces of one family."""

    regular: str
    bold: str
    italic: str
    bold_italic: str

    def style(self, face: str, size: float, **options) -> TextStyle:
        return TextStyle(font=getattr(self, face), size=size, **options)


def register_fonts(fonts_dir: Optional[Path] = None, family: str = "Cambria") -> FontSet:
    """Register a bundled TTF family. Falls back to Times if any face is missing."""
    if fonts_dir is None:
        return FontSet(*BUILTIN_FAMILY)

    fonts_dir = Path(fonts_dir)
    paths = [fonts_dir / f"{family}-{suffix}.ttf" for suffix in FONT_SUFFIXES]
    missing = [path.name for path in paths if not path.is_file()]
    if missing:
        logger.warning(
            f"{family} fonts incomplete in {fonts_dir} (missing {', '.join(missing)}), "
            f"using Times"
        )
        return FontSet(*BUILTIN_FAMILY)

    names = [f"{family}-{suffix}" for suffix in FONT_SUFFIXES]
    registered = pdfmetrics.getRegisteredFontNames()
    for name, path in zip(names, paths):
        if name not in registered:
            registerFont(TTFont(name, str(path)))
    registerFontFamily(
        family,
        normal=names[0],
        bold=names[1],
        italic=names[2],
        boldItalic=names[3],
    )
    logger.debug(f"Registered {family} fonts from {fonts_dir}")
    return FontSet(*names)
