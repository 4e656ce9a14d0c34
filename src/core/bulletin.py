"""Bulletin generation: image resolution, layout passes and PDF serialisation."""

import logging
from dataclasses import dataclass, field
from datetime import datetime
from typing import List, Optional, Sequence, Tuple

from ..models.content import ArticleRecord
from .canvas import DocumentCanvas
from .numbering import number_pages
from .pagination import PaginationPlanner, TocPageSet
from .renderer import ContentRenderer
from .styles import FontSet, register_fonts
from .toc import TocBackfiller, TocLayout, TocResult
from .utils import parse_published_date

logger = logging.getLogger(__name__)


class BulletinError(Exception):
    """Base error for bulletin generation."""


class EmptySelectionError(BulletinError):
    """Raised when a bulletin is requested without any article."""


@dataclass
class BulletinLayout:
    """A fully laid out bulletin, ready to serialise."""

    canvas: DocumentCanvas
    toc_pages: TocPageSet
    article_pages: List[int]
    toc: TocResult
    page_labels: List[str]
    date_range: Tuple[datetime, datetime]

    @property
    def page_count(self) -> int:
        return self.canvas.page_count


@dataclass
class BulletinResult:
    """Serialised bulletin plus the layout facts callers report on."""

    content: bytes
    page_count: int
    toc_pages: TocPageSet
    article_pages: List[int]
    toc: TocResult
    page_labels: List[str] = field(default_factory=list)
    date_range: Optional[Tuple[datetime, datetime]] = None


def compute_date_range(
    articles: Sequence[ArticleRecord], now: Optional[datetime] = None
) -> Tuple[datetime, datetime]:
    """Earliest and latest parseable publish date; ``now`` when none parse."""
    dates = [
        parsed
        for parsed in (parse_published_date(article.published_at) for article in articles)
        if parsed is not None
    ]
    if not dates:
        now = now or datetime.now()
        return now, now
    return min(dates), max(dates)


class BulletinGenerator:
    """Builds the PDF bulletin for a list of selected articles."""

    def __init__(self, settings=None, image_resolver=None, fonts: Optional[FontSet] = None):
        """Initialize bulletin generator.

        Args:
            settings: Settings instance for configuration values
            image_resolver: ImageResolver used by ``generate``
            fonts: Registered fonts; resolved from settings when omitted
        """
        self.settings = settings
        self.image_resolver = image_resolver
        self.fonts = fonts or register_fonts(
            settings.fonts_dir if settings else None,
            settings.font_family if settings else "Cambria",
        )
        self.toc_strategy = settings.toc_strategy if settings else "measured"
        self.rows_per_page = settings.toc_rows_per_page if settings else 25
        self.resolve_images = settings.resolve_images if settings else True
        self.document_title = " ".join(
            (settings.bulletin_title if settings else "Weekly Bulletin of IT News and Articles").split()
        )
        self.author = settings.author if settings else "IT Park"

    async def generate(self, articles: Sequence[ArticleRecord]) -> BulletinResult:
        """Resolve article images concurrently, then assemble the PDF."""
        self._check_selection(articles)

        images: List[Optional[bytes]] = [None] * len(articles)
        if self.resolve_images and self.image_resolver is not None:
            images = await self.image_resolver.resolve_all(articles)

        return self.assemble(articles, images)

    def assemble(
        self, articles: Sequence[ArticleRecord], images: Sequence[Optional[bytes]]
    ) -> BulletinResult:
        """Lay out and serialise the bulletin."""
        layout = self.build(articles, images)
        content = layout.canvas.render()
        logger.info(
            f"Bulletin assembled: {len(articles)} articles, {layout.page_count} pages, "
            f"{len(content)} bytes"
        )
        return BulletinResult(
            content=content,
            page_count=layout.page_count,
            toc_pages=layout.toc_pages,
            article_pages=layout.article_pages,
            toc=layout.toc,
            page_labels=layout.page_labels,
            date_range=layout.date_range,
        )

    def build(
        self, articles: Sequence[ArticleRecord], images: Sequence[Optional[bytes]]
    ) -> BulletinLayout:
        """Run the layout passes in order: cover, reservation, articles, TOC, numbers."""
        self._check_selection(articles)
        if len(images) != len(articles):
            raise ValueError(f"{len(articles)} articles but {len(images)} image slots")

        canvas = DocumentCanvas(title=self.document_title, author=self.author)
        renderer = ContentRenderer(canvas, self.fonts, self.settings)
        toc_layout = TocLayout(canvas, self.fonts)
        planner = PaginationPlanner(canvas, self.rows_per_page)
        titles = [article.title for article in articles]

        date_range = compute_date_range(articles)
        renderer.render_cover(date_range)

        if self.toc_strategy == "estimate":
            toc_pages = planner.reserve(len(articles), self.rows_per_page)
        else:
            toc_pages = planner.reserve_measured(titles, toc_layout)

        article_pages = renderer.render_articles(articles, images)
        toc = TocBackfiller(canvas, self.fonts, toc_layout).backfill(toc_pages, titles, article_pages)
        page_labels = number_pages(canvas, self.fonts)

        return BulletinLayout(
            canvas=canvas,
            toc_pages=toc_pages,
            article_pages=article_pages,
            toc=toc,
            page_labels=page_labels,
            date_range=date_range,
        )

    @staticmethod
    def _check_selection(articles: Sequence[ArticleRecord]) -> None:
        if not articles:
            raise EmptySelectionError("No news selected")
