"""Cover page and article body rendering."""

import logging
from datetime import datetime
from pathlib import Path
from typing import List, Optional, Sequence, Tuple

from ..models.content import ArticleRecord
from .canvas import DocumentCanvas, Rect
from .styles import (
    BLACK,
    GRAY,
    IMAGE_BOX_HEIGHT,
    IMAGE_BOX_WIDTH,
    IMAGE_GAP,
    IMAGE_GUTTER,
    LINK_BLUE,
    MIN_REMAINING_HEIGHT,
    RED,
    TEAL,
    FontSet,
)
from .utils import format_long_date, source_label

logger = logging.getLogger(__name__)

NO_DESCRIPTION = "No description available."

COVER_TITLE_Y = 120
LOGO_BOX_HEIGHT = 60
LOGO_BOX_WIDTH = 160
COVER_ORGANIZATION_OFFSET = 180
COVER_CITY_OFFSET = 155


class ContentRenderer:
    """Draws the cover and the article blocks onto a document canvas."""

    def __init__(self, canvas: DocumentCanvas, fonts: FontSet, settings=None):
        self.canvas = canvas
        self.fonts = fonts
        self.bulletin_title = (
            settings.bulletin_title if settings else "Weekly Bulletin of IT News\nand Articles"
        )
        self.organization = (
            settings.organization if settings else "Department of Strategy and Analysis"
        )
        self.city = settings.city if settings else "Tashkent"
        self.logo_path: Optional[Path] = settings.logo_path if settings else None

        self.title_style = fonts.style("bold", 12, color=BLACK)
        self.source_style = fonts.style("italic", 10, color=GRAY, align="center")
        self.body_style = fonts.style("regular", 11, color=BLACK, align="justify")
        self.footer_style = fonts.style("italic", 9, color=GRAY)

    def render_cover(self, date_range: Tuple[datetime, datetime]) -> None:
        """Draw the cover on a new first page."""
        canvas = self.canvas
        page = canvas.new_page()
        content = page.content
        start, end = date_range

        self._draw_logo()

        canvas.write(
            self.bulletin_title,
            self.fonts.style("bold", 28, color=TEAL, align="center"),
            y=COVER_TITLE_Y,
        )
        canvas.move_down(0.8)
        canvas.write(
            f"({format_long_date(start)} – {format_long_date(end)})",
            self.fonts.style("italic", 14, color=RED, align="center"),
        )

        canvas.write(
            self.organization,
            self.fonts.style("bold", 13, color=BLACK, align="center"),
            y=canvas.page_height - COVER_ORGANIZATION_OFFSET,
            flow=False,
        )
        canvas.write_runs(
            [
                (f"{self.city}, {end.strftime('%B')} ", self.fonts.style("regular", 13, color=BLACK)),
                (str(end.year), self.fonts.style("regular", 13, color=RED)),
            ],
            x=content.x0,
            y=canvas.page_height - COVER_CITY_OFFSET,
            width=content.width,
            align="center",
            flow=False,
        )

    def _draw_logo(self) -> None:
        if self.logo_path is None or not self.logo_path.is_file():
            return
        content = self.canvas.content_rect
        left = content.x0 + (content.width - LOGO_BOX_WIDTH) / 2
        box = Rect(left, 40, left + LOGO_BOX_WIDTH, 40 + LOGO_BOX_HEIGHT)
        try:
            self.canvas.place_image(self.logo_path.read_bytes(), box, align="center")
        except Exception as e:
            logger.warning(f"Could not draw logo {self.logo_path}: {e}")

    def render_articles(
        self,
        articles: Sequence[ArticleRecord],
        images: Sequence[Optional[bytes]],
    ) -> List[int]:
        """Draw every article in input order.

        Returns:
            The 1-indexed page number on which each article's title starts
        """
        if len(images) != len(articles):
            raise ValueError(f"{len(articles)} articles but {len(images)} image slots")

        canvas = self.canvas
        canvas.new_page()
        canvas.write("NEWS", self.fonts.style("bold", 14, color=RED, align="center"))
        canvas.move_down(1)

        page_numbers = []
        for position, (article, image) in enumerate(zip(articles, images), start=1):
            page_numbers.append(self.render_article(position, article, image))
        return page_numbers

    def render_article(self, position: int, article: ArticleRecord, image: Optional[bytes]) -> int:
        """Draw one article block and return the page its title starts on."""
        canvas = self.canvas
        content = canvas.content_rect
        title = f"{position}.  {article.title}"

        title_height = canvas.measure_height(title, content.width, self.title_style)
        if canvas.active_page.remaining < max(MIN_REMAINING_HEIGHT, title_height):
            canvas.new_page()

        page_number = canvas.active_page.number
        canvas.write(title, self.title_style, x=content.x0, width=content.width)
        canvas.write(
            f"({source_label(article.source, article.url)})",
            self.source_style,
            x=content.x0,
            width=content.width,
        )
        canvas.move_down(0.5)

        self._render_body(article, image)

        if article.url:
            canvas.move_down(0.3)
            canvas.write_runs(
                [
                    ("(Read full article at ", self.footer_style),
                    (
                        article.url,
                        self.footer_style.with_(color=LINK_BLUE, underline=True, link=article.url),
                    ),
                    (")", self.footer_style),
                ],
                x=content.x0,
                width=content.width,
            )
        canvas.move_down(1.5)
        return page_number

    def _render_body(self, article: ArticleRecord, image: Optional[bytes]) -> None:
        canvas = self.canvas
        content = canvas.content_rect
        text = article.body_text or NO_DESCRIPTION

        if image is not None and canvas.active_page.remaining < IMAGE_BOX_HEIGHT + IMAGE_GAP:
            canvas.new_page()

        image_page = canvas.active_page
        body_y = image_page.cursor
        placed = False
        if image is not None:
            box = Rect(content.x1 - IMAGE_BOX_WIDTH, body_y, content.x1, body_y + IMAGE_BOX_HEIGHT)
            try:
                canvas.place_image(image, box, align="right")
                placed = True
            except Exception as e:
                logger.debug(f"Image for '{article.title}' could not be decoded: {e}")

        width = content.width - IMAGE_BOX_WIDTH - IMAGE_GUTTER if placed else content.width
        canvas.write(text, self.body_style, x=content.x0, y=body_y, width=width)

        # The image does not move the cursor; clear its box before continuing
        if placed and canvas.active_page is image_page:
            image_page.cursor = max(image_page.cursor, body_y + IMAGE_BOX_HEIGHT + IMAGE_GAP)
