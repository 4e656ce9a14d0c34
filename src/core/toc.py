"""Table of contents layout and backfilling."""

import logging
from dataclasses import dataclass, field
from typing import List, Optional, Sequence

from .canvas import DocumentCanvas
from .styles import (
    BLACK,
    CELL_GRAY,
    CONTENT_WIDTH,
    RED,
    RULE_GRAY,
    TEAL,
    TOC_BOTTOM_MARGIN,
    TOC_MIN_ROW_HEIGHT,
    TOC_NUM_WIDTH,
    TOC_PAGE_WIDTH,
    TOC_ROW_PADDING,
    TOC_TITLE_WIDTH,
    TOC_TOP,
    FontSet,
)

logger = logging.getLogger(__name__)

HEADER_RULE_Y = 90
SECTION_LABEL_Y = HEADER_RULE_Y + 3
SECTION_RULE_Y = SECTION_LABEL_Y + 18
FIRST_ROW_Y = SECTION_RULE_Y + 3


@dataclass
class TocRow:
    position: int
    title: str
    top: float
    height: float

    @property
    def bottom(self) -> float:
        return self.top + self.height


@dataclass
class TocResult:
    """Outcome of the backfill pass."""

    rows_drawn: int
    dropped: int
    pages_used: List[int] = field(default_factory=list)

    @property
    def overflowed(self) -> bool:
        return self.dropped > 0


class TocLayout:
    """Row geometry for the table of contents.

    Row heights depend only on the titles, so the same layout serves the
    virtual pass that sizes the reservation and the drawing pass.
    """

    def __init__(self, canvas: DocumentCanvas, fonts: FontSet):
        self.canvas = canvas
        self.fonts = fonts
        self.title_style = fonts.style("bold", 10, color=BLACK)
        self.title_width = TOC_TITLE_WIDTH - 10
        self.bottom = canvas.page_height - TOC_BOTTOM_MARGIN

    def row_height(self, title: str) -> float:
        title_height = self.canvas.measure_height(title, self.title_width, self.title_style)
        return max(title_height + TOC_ROW_PADDING * 2, TOC_MIN_ROW_HEIGHT)

    def paginate(self, titles: Sequence[str]) -> List[List[TocRow]]:
        """Distribute rows over as many TOC pages as they need."""
        pages: List[List[TocRow]] = [[]]
        top = FIRST_ROW_Y
        for position, title in enumerate(titles, start=1):
            height = self.row_height(title)
            if top + height > self.bottom and pages[-1]:
                pages.append([])
                top = TOC_TOP
            pages[-1].append(TocRow(position, title, top, height))
            top += height
        return pages


class TocBackfiller:
    """Draws TOC rows onto pages reserved before the articles were rendered."""

    def __init__(
        self, canvas: DocumentCanvas, fonts: FontSet, layout: Optional[TocLayout] = None
    ):
        self.canvas = canvas
        self.fonts = fonts
        self.layout = layout or TocLayout(canvas, fonts)

    def backfill(
        self,
        toc_pages: Sequence[int],
        titles: Sequence[str],
        page_numbers: Sequence[int],
    ) -> TocResult:
        """Fill the reserved pages in order; rows that do not fit are dropped.

        Args:
            toc_pages: 0-based indices of the reserved pages, in creation order
            titles: article titles in input order
            page_numbers: 1-indexed page of each article's title block

        Returns:
            TocResult with drawn and dropped row counts
        """
        if len(titles) != len(page_numbers):
            raise ValueError(
                f"{len(titles)} titles but {len(page_numbers)} page numbers"
            )

        layout_pages = self.layout.paginate(titles)
        drawn = 0
        used = []
        for slot, page_index in enumerate(toc_pages):
            self.canvas.activate_page(page_index)
            if slot == 0:
                self._draw_header()
            if slot >= len(layout_pages) or not layout_pages[slot]:
                continue
            for row in layout_pages[slot]:
                self._draw_row(row, page_numbers[row.position - 1], first=row is layout_pages[slot][0])
                drawn += 1
            used.append(page_index)

        dropped = len(titles) - drawn
        if dropped:
            logger.warning(
                f"Table of contents overflow: {dropped} of {len(titles)} rows did not fit "
                f"in {len(toc_pages)} reserved pages"
            )
        return TocResult(rows_drawn=drawn, dropped=dropped, pages_used=used)

    def _draw_header(self) -> None:
        left = self.canvas.content_rect.x0
        self.canvas.write(
            "Table of Contents",
            self.fonts.style("bold", 16, color=TEAL, align="center"),
            x=left,
            y=TOC_TOP,
            width=CONTENT_WIDTH,
            flow=False,
        )
        self.canvas.line(left, HEADER_RULE_Y, left + CONTENT_WIDTH, HEADER_RULE_Y, RULE_GRAY, 0.8)
        self.canvas.write(
            "NEWS",
            self.fonts.style("bold", 11, color=RED, align="center"),
            x=left,
            y=SECTION_LABEL_Y,
            width=CONTENT_WIDTH,
            flow=False,
        )
        self.canvas.line(left, SECTION_RULE_Y, left + CONTENT_WIDTH, SECTION_RULE_Y, RULE_GRAY, 0.8)

    def _draw_row(self, row: TocRow, page_number: int, first: bool) -> None:
        canvas = self.canvas
        left = canvas.content_rect.x0
        title_x = left + TOC_NUM_WIDTH
        page_x = title_x + TOC_TITLE_WIDTH
        right = left + CONTENT_WIDTH
        text_y = row.top + TOC_ROW_PADDING

        if first:
            canvas.line(left, row.top, right, row.top, CELL_GRAY, 0.4)
        for x in (left, title_x, page_x, right):
            canvas.line(x, row.top, x, row.bottom, CELL_GRAY, 0.4)
        canvas.line(left, row.bottom, right, row.bottom, CELL_GRAY, 0.4)

        canvas.write(
            str(row.position),
            self.fonts.style("bold", 10, color=BLACK, align="center"),
            x=left,
            y=text_y,
            width=TOC_NUM_WIDTH,
            flow=False,
        )
        canvas.write(
            row.title,
            self.layout.title_style,
            x=title_x + 5,
            y=text_y,
            width=self.layout.title_width,
            flow=False,
        )
        canvas.write(
            str(page_number),
            self.fonts.style("regular", 10, color=RED, align="center"),
            x=page_x,
            y=text_y,
            width=TOC_PAGE_WIDTH,
            flow=False,
        )
