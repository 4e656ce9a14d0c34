"""Reservation of table-of-contents pages ahead of article rendering."""

import logging
import math
from dataclasses import dataclass, field
from typing import Iterator, List, Sequence

from .canvas import DocumentCanvas
from .toc import TocLayout

logger = logging.getLogger(__name__)


@dataclass
class TocPageSet:
    """Pages reserved for the table of contents, in creation order."""

    indices: List[int] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.indices)

    def __iter__(self) -> Iterator[int]:
        return iter(self.indices)

    def __getitem__(self, slot: int) -> int:
        return self.indices[slot]

    @property
    def numbers(self) -> List[int]:
        """1-indexed page numbers of the reserved pages."""
        return [index + 1 for index in self.indices]


class PaginationPlanner:
    """Creates the TOC pages right after the cover, before any article."""

    def __init__(self, canvas: DocumentCanvas, rows_per_page: int = 25):
        self.canvas = canvas
        self.rows_per_page = rows_per_page

    @staticmethod
    def pages_needed(article_count: int, rows_per_page: int) -> int:
        if rows_per_page < 1:
            raise ValueError("rows_per_page must be positive")
        return max(1, math.ceil(article_count / rows_per_page))

    def reserve(self, article_count: int, estimated_rows_per_page: int = None) -> TocPageSet:
        """Reserve ``max(1, ceil(n / rows))`` pages from a row-count estimate.

        Long titles wrap to taller rows than the estimate assumes, so the
        reservation can be too small; the backfill pass reports the rows it
        had to drop.
        """
        rows = estimated_rows_per_page or self.rows_per_page
        count = self.pages_needed(article_count, rows)
        logger.debug(f"Reserving {count} TOC pages for {article_count} articles ({rows} rows/page)")
        return self._reserve_pages(count)

    def reserve_measured(self, titles: Sequence[str], layout: TocLayout) -> TocPageSet:
        """Reserve exactly the pages a virtual TOC layout needs."""
        count = len(layout.paginate(titles))
        logger.debug(f"Reserving {count} TOC pages for {len(titles)} articles (measured)")
        return self._reserve_pages(count)

    def _reserve_pages(self, count: int) -> TocPageSet:
        reserved = TocPageSet()
        for _ in range(count):
            reserved.indices.append(self.canvas.new_page().index)
        return reserved
