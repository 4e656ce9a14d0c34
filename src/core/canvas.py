"""Document canvas: a growable arena of pages with a movable write cursor.

Pages record draw operations instead of painting them immediately, so any
page created earlier can be re-activated and drawn on again (the table of
contents is filled in after the articles). ``render`` replays every page onto
a ReportLab canvas once layout is final.

Coordinates are points measured from the top-left corner of the page; the
flip to PDF space happens only during replay.
"""

import io
import logging
import re
from dataclasses import dataclass, field
from typing import List, Optional, Sequence, Tuple, Union

from reportlab.lib.colors import HexColor
from reportlab.lib.utils import ImageReader, simpleSplit
from reportlab.pdfbase.pdfmetrics import stringWidth
from reportlab.pdfgen import canvas as rl_canvas

from .styles import MARGIN, PAGE_HEIGHT, PAGE_WIDTH, TextStyle

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rect:
    x0: float
    y0: float
    x1: float
    y1: float

    @property
    def width(self) -> float:
        return self.x1 - self.x0

    @property
    def height(self) -> float:
        return self.y1 - self.y0


@dataclass
class TextOp:
    """One line (or one styled run of a line) of text."""

    text: str
    x: float
    y: float
    width: float
    style: TextStyle
    word_space: float = 0.0


@dataclass
class ImageOp:
    data: bytes
    rect: Rect


@dataclass
class LineOp:
    x0: float
    y0: float
    x1: float
    y1: float
    color: str
    width: float


DrawOp = Union[TextOp, ImageOp, LineOp]


@dataclass
class Page:
    """A page in the arena: content rectangle, cursor and recorded operations."""

    index: int
    content: Rect
    cursor: float
    ops: List[DrawOp] = field(default_factory=list)

    @property
    def number(self) -> int:
        """1-indexed page number."""
        return self.index + 1

    @property
    def remaining(self) -> float:
        return self.content.y1 - self.cursor

    @property
    def text_ops(self) -> List[TextOp]:
        return [op for op in self.ops if isinstance(op, TextOp)]

    @property
    def image_ops(self) -> List[ImageOp]:
        return [op for op in self.ops if isinstance(op, ImageOp)]

    def texts(self) -> List[str]:
        return [op.text for op in self.text_ops]


class DocumentCanvas:
    """Ordered page sequence with an active-page pointer and per-page cursors."""

    def __init__(
        self,
        page_width: float = PAGE_WIDTH,
        page_height: float = PAGE_HEIGHT,
        margin: float = MARGIN,
        title: str = "",
        author: str = "",
    ):
        self.page_width = page_width
        self.page_height = page_height
        self.margin = margin
        self.title = title
        self.author = author
        self.pages: List[Page] = []
        self._active: Optional[int] = None
        self._last_leading = 12 * 1.2

    @property
    def content_rect(self) -> Rect:
        return Rect(
            self.margin,
            self.margin,
            self.page_width - self.margin,
            self.page_height - self.margin,
        )

    @property
    def page_count(self) -> int:
        return len(self.pages)

    @property
    def active_page(self) -> Page:
        if self._active is None:
            raise RuntimeError("Canvas has no pages yet")
        return self.pages[self._active]

    def new_page(self) -> Page:
        """Append a page and make it the active one."""
        content = self.content_rect
        page = Page(index=len(self.pages), content=content, cursor=content.y0)
        self.pages.append(page)
        self._active = page.index
        return page

    def activate_page(self, index: int) -> Page:
        """Switch drawing to an existing page (0-based index)."""
        if not 0 <= index < len(self.pages):
            raise IndexError(f"Page index {index} out of range (0..{len(self.pages) - 1})")
        self._active = index
        return self.pages[index]

    def move_down(self, lines: float = 1.0, leading: Optional[float] = None) -> None:
        """Advance the cursor by a number of lines of the last written style."""
        self.active_page.cursor += lines * (leading or self._last_leading)

    # ─── Measuring ───────────────────────────────────────────────────────────

    def wrap(self, text: str, width: float, style: TextStyle) -> List[Tuple[str, bool]]:
        """Split text into lines; the flag marks the last line of a paragraph."""
        lines = []
        for paragraph in text.split("\n"):
            wrapped = simpleSplit(paragraph, style.font, style.size, width) or [""]
            lines.extend((line, i == len(wrapped) - 1) for i, line in enumerate(wrapped))
        return lines

    def measure_height(self, text: str, width: float, style: TextStyle) -> float:
        """Height ``write`` would use for this text, without drawing it."""
        return len(self.wrap(text, width, style)) * style.leading

    def text_width(self, text: str, style: TextStyle) -> float:
        return stringWidth(text, style.font, style.size)

    # ─── Drawing ─────────────────────────────────────────────────────────────

    def write(
        self,
        text: str,
        style: TextStyle,
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        flow: bool = True,
    ) -> float:
        """Draw a wrapped text block at the cursor and advance past it.

        With ``flow`` enabled, lines that would cross the bottom of the
        content rectangle continue at the top of a new page. Returns the
        height of the block.
        """
        page = self.active_page
        x = page.content.x0 if x is None else x
        width = page.content.x1 - x if width is None else width
        if y is not None:
            page.cursor = y

        lines = self.wrap(text, width, style)
        for line, ends_paragraph in lines:
            page = self._line_page(style.leading, flow)
            word_space = 0.0
            if style.align == "justify" and not ends_paragraph:
                gaps = line.count(" ")
                if gaps:
                    word_space = max(0.0, (width - self.text_width(line, style)) / gaps)
            page.ops.append(TextOp(line, x, page.cursor, width, style, word_space))
            page.cursor += style.leading

        self._last_leading = style.leading
        return len(lines) * style.leading

    def write_runs(
        self,
        runs: Sequence[Tuple[str, TextStyle]],
        x: Optional[float] = None,
        y: Optional[float] = None,
        width: Optional[float] = None,
        align: str = "left",
        flow: bool = True,
    ) -> float:
        """Flow differently styled runs across shared lines ("continued" text).

        Returns the height of the block.
        """
        page = self.active_page
        x = page.content.x0 if x is None else x
        width = page.content.x1 - x if width is None else width
        if y is not None:
            page.cursor = y
        if not runs:
            return 0.0

        leading = max(style.leading for _, style in runs)
        lines = self._flow_runs(runs, width)
        for pieces in lines:
            page = self._line_page(leading, flow)
            line_width = sum(piece_width for _, _, _, piece_width in pieces)
            shift = (width - line_width) / 2 if align == "center" else 0.0
            for text, style, offset, piece_width in pieces:
                page.ops.append(TextOp(text, x + shift + offset, page.cursor, piece_width, style))
            page.cursor += leading

        self._last_leading = leading
        return len(lines) * leading

    def place_image(self, data: bytes, box: Rect, align: str = "right") -> Rect:
        """Draw an image scaled to fit ``box``; the cursor does not move.

        Raises when the data cannot be decoded as an image.
        """
        image_width, image_height = ImageReader(io.BytesIO(data)).getSize()
        if image_width <= 0 or image_height <= 0:
            raise ValueError("Image has no size")

        scale = min(box.width / image_width, box.height / image_height)
        draw_width, draw_height = image_width * scale, image_height * scale
        if align == "right":
            left = box.x1 - draw_width
        elif align == "center":
            left = box.x0 + (box.width - draw_width) / 2
        else:
            left = box.x0

        rect = Rect(left, box.y0, left + draw_width, box.y0 + draw_height)
        self.active_page.ops.append(ImageOp(data, rect))
        return rect

    def line(
        self,
        x0: float,
        y0: float,
        x1: float,
        y1: float,
        color: str = "#000000",
        width: float = 0.5,
    ) -> None:
        self.active_page.ops.append(LineOp(x0, y0, x1, y1, color, width))

    def _line_page(self, leading: float, flow: bool) -> Page:
        page = self.active_page
        if (
            flow
            and page.cursor + leading > page.content.y1
            and page.cursor > page.content.y0
        ):
            page = self.new_page()
        return page

    def _flow_runs(self, runs, width: float):
        """Lay runs out into lines of (text, style, x offset, width) pieces."""
        lines = []
        pieces = []
        line_x = 0.0

        def flush():
            nonlocal pieces, line_x
            lines.append(_merge_pieces(pieces))
            pieces = []
            line_x = 0.0

        for text, style in runs:
            for token in re.findall(r"\S+|\s+", text):
                token_width = self.text_width(token, style)
                if token.isspace():
                    if line_x == 0.0:
                        continue
                    if line_x + token_width > width:
                        flush()
                        continue
                elif line_x + token_width > width and line_x > 0.0:
                    flush()

                if not token.isspace() and token_width > width:
                    # Break words longer than a whole line (URLs) by character
                    chunk = ""
                    for char in token:
                        char_width = self.text_width(chunk + char, style)
                        if line_x + char_width > width and (chunk or line_x > 0.0):
                            if chunk:
                                pieces.append((chunk, style, line_x, self.text_width(chunk, style)))
                            flush()
                            chunk = char
                        else:
                            chunk += char
                    if chunk:
                        chunk_width = self.text_width(chunk, style)
                        pieces.append((chunk, style, line_x, chunk_width))
                        line_x += chunk_width
                    continue

                pieces.append((token, style, line_x, token_width))
                line_x += token_width

        if pieces:
            flush()
        return lines

    # ─── Output ──────────────────────────────────────────────────────────────

    def render(self) -> bytes:
        """Replay every page onto a ReportLab canvas and return the PDF bytes."""
        buffer = io.BytesIO()
        pdf = rl_canvas.Canvas(buffer, pagesize=(self.page_width, self.page_height))
        pdf.setTitle(self.title)
        pdf.setAuthor(self.author)

        for page in self.pages:
            for op in page.ops:
                if isinstance(op, TextOp):
                    self._draw_text(pdf, op)
                elif isinstance(op, ImageOp):
                    self._draw_image(pdf, op)
                else:
                    self._draw_line(pdf, op)
            pdf.showPage()

        pdf.save()
        logger.debug(f"Rendered {len(self.pages)} pages")
        return buffer.getvalue()

    def _draw_text(self, pdf: rl_canvas.Canvas, op: TextOp) -> None:
        style = op.style
        baseline = self.page_height - op.y - style.size
        pdf.setFont(style.font, style.size)
        pdf.setFillColor(HexColor(style.color))

        text_width = self.text_width(op.text, style)
        left = op.x
        if op.word_space:
            space = self.text_width(" ", style)
            word_x = left
            for word in op.text.split(" "):
                pdf.drawString(word_x, baseline, word)
                word_x += self.text_width(word, style) + space + op.word_space
            text_width = op.width
        else:
            if style.align == "center":
                left += (op.width - text_width) / 2
            elif style.align == "right":
                left += op.width - text_width
            pdf.drawString(left, baseline, op.text)

        if style.underline:
            pdf.setStrokeColor(HexColor(style.color))
            pdf.setLineWidth(0.5)
            pdf.line(left, baseline - 1.5, left + text_width, baseline - 1.5)
        if style.link:
            pdf.linkURL(
                style.link,
                (left, baseline - 2, left + text_width, baseline + style.size),
                relative=0,
            )

    def _draw_image(self, pdf: rl_canvas.Canvas, op: ImageOp) -> None:
        rect = op.rect
        pdf.drawImage(
            ImageReader(io.BytesIO(op.data)),
            rect.x0,
            self.page_height - rect.y1,
            width=rect.width,
            height=rect.height,
            mask="auto",
        )

    def _draw_line(self, pdf: rl_canvas.Canvas, op: LineOp) -> None:
        pdf.setStrokeColor(HexColor(op.color))
        pdf.setLineWidth(op.width)
        pdf.line(op.x0, self.page_height - op.y0, op.x1, self.page_height - op.y1)


def _merge_pieces(pieces):
    """Join adjacent pieces that share a style into one run."""
    merged = []
    for text, style, offset, width in pieces:
        if merged and merged[-1][1] == style:
            prev_text, _, prev_offset, prev_width = merged[-1]
            merged[-1] = (prev_text + text, style, prev_offset, prev_width + width)
        else:
            merged.append((text, style, offset, width))
    # Trailing spaces do not count towards the line width
    if merged:
        text, style, offset, _ = merged[-1]
        stripped = text.rstrip()
        if stripped != text:
            merged[-1] = (stripped, style, offset, stringWidth(stripped, style.font, style.size))
    return merged
