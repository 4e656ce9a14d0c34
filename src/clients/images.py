"""Article image resolution: aggregator redirects, og:image scraping, downloads."""

import asyncio
import logging
import re
from typing import List, Optional, Sequence, Tuple
from urllib.parse import urljoin, urlparse

import aiohttp
from bs4 import BeautifulSoup

from ..models.content import ArticleRecord

logger = logging.getLogger(__name__)


class ImageResolver:
    """Finds and downloads a representative image for each article.

    Every public coroutine degrades to ``None`` (or the input URL) on failure
    instead of raising, so one bad host never breaks a bulletin.
    """

    # Aggregators whose links redirect to the real article
    AGGREGATOR_PATTERNS = {
        "google_news": r"https?://news\.google\.com/",
    }

    # Image URLs that are site branding rather than article images
    PLACEHOLDER_MARKERS = ["google.com/logos", "gstatic.com/images/branding"]

    META_IMAGE_SELECTORS = [
        'meta[property="og:image"]',
        'meta[name="twitter:image"]',
        'meta[name="twitter:image:src"]',
    ]

    CONTENT_IMAGE_SELECTOR = (
        "article img[src], .article img[src], .post img[src], figure img[src], "
        '.story img[src], [role="main"] img[src]'
    )

    OUTBOUND_LINK_SELECTORS = ["a[data-n-au]", 'c-wiz a[href^="http"]']

    SKIPPED_IMAGE_MARKERS = ["logo", "icon", "avatar"]
    MAX_INLINE_CANDIDATES = 5
    MIN_INLINE_WIDTH = 200

    def __init__(self, settings=None):
        """Initialize image resolver.

        Args:
            settings: Settings instance for configuration values
        """
        # Timeout configuration
        self.redirect_timeout = settings.redirect_timeout if settings else 5.0
        self.page_timeout = settings.page_timeout if settings else 8.0
        self.image_timeout = settings.image_timeout if settings else 5.0
        self.article_timeout = settings.article_timeout if settings else 15.0
        self.min_image_bytes = settings.min_image_bytes if settings else 500
        self.user_agent = (
            settings.default_user_agent
            if settings
            else "Mozilla/5.0 (Windows NT 10.0; Win64; x64) AppleWebKit/537.36"
        )

    async def resolve_all(self, articles: Sequence[ArticleRecord]) -> List[Optional[bytes]]:
        """Resolve images for all articles concurrently.

        Returns:
            One entry per article, in input order; None where no image was found
        """
        if not articles:
            return []

        async with aiohttp.ClientSession(headers={"User-Agent": self.user_agent}) as session:
            tasks = [self._resolve_bounded(session, article) for article in articles]
            results = await asyncio.gather(*tasks, return_exceptions=True)

        images: List[Optional[bytes]] = []
        for article, result in zip(articles, results):
            if isinstance(result, BaseException):
                logger.warning(f"Image resolution failed for '{article.title}': {result}")
                images.append(None)
            else:
                images.append(result)

        found = sum(1 for image in images if image is not None)
        logger.info(f"Resolved images for {found} of {len(articles)} articles")
        return images

    async def _resolve_bounded(
        self, session: aiohttp.ClientSession, article: ArticleRecord
    ) -> Optional[bytes]:
        try:
            return await asyncio.wait_for(
                self.resolve(session, article), timeout=self.article_timeout
            )
        except asyncio.TimeoutError:
            logger.warning(f"Image resolution timed out for '{article.title}'")
            return None

    async def resolve(
        self, session: aiohttp.ClientSession, article: ArticleRecord
    ) -> Optional[bytes]:
        """Resolve one article's image bytes."""
        try:
            image_url = article.image
            if not image_url and article.url:
                page_url = await self.resolve_url(session, article.url)
                image_url = await self.scrape_image_url(session, page_url)
            if not image_url:
                return None
            return await self.fetch_image(session, image_url)
        except Exception as e:
            logger.warning(f"Unexpected image resolution error for '{article.title}': {e}")
            return None

    async def find_image_url(self, url: str) -> Optional[str]:
        """Resolve an article URL and return its representative image URL."""
        async with aiohttp.ClientSession(headers={"User-Agent": self.user_agent}) as session:
            page_url = await self.resolve_url(session, url)
            return await self.scrape_image_url(session, page_url)

    def is_aggregator_url(self, url: str) -> bool:
        return any(
            re.search(pattern, url or "", re.IGNORECASE)
            for pattern in self.AGGREGATOR_PATTERNS.values()
        )

    async def resolve_url(self, session: aiohttp.ClientSession, url: str) -> str:
        """Follow an aggregator redirect to the real article URL.

        Non-aggregator URLs are returned untouched; any failure returns the
        input URL.
        """
        if not url or not self.is_aggregator_url(url):
            return url

        try:
            final_url, html = await self._fetch_page(session, url, self.redirect_timeout)
            if final_url and not self.is_aggregator_url(final_url):
                logger.debug(f"Resolved redirect: {url} -> {final_url}")
                return final_url

            # Still on the aggregator: look for the outbound article link
            link = self.extract_outbound_link(html or "")
            return link or url

        except asyncio.TimeoutError:
            logger.debug(f"Timeout resolving redirect: {url}")
            return url
        except aiohttp.ClientError as e:
            logger.debug(f"Network error resolving redirect {url}: {e}")
            return url
        except Exception as e:
            logger.debug(f"Unexpected error resolving redirect {url}: {e}")
            return url

    async def scrape_image_url(self, session: aiohttp.ClientSession, page_url: str) -> Optional[str]:
        """Fetch an article page and pick its representative image URL."""
        if not page_url:
            return None

        try:
            final_url, html = await self._fetch_page(session, page_url, self.page_timeout)
            if html is None:
                return None
            return self.extract_image_url(html, final_url or page_url)

        except asyncio.TimeoutError:
            logger.debug(f"Timeout fetching article page: {page_url}")
            return None
        except aiohttp.ClientError as e:
            logger.debug(f"Network error fetching article page {page_url}: {e}")
            return None
        except (ValueError, TypeError, UnicodeDecodeError) as e:
            logger.debug(f"Could not parse article page {page_url}: {e}")
            return None
        except Exception as e:
            logger.debug(f"Unexpected error scraping {page_url}: {e}")
            return None

    async def fetch_image(self, session: aiohttp.ClientSession, image_url: str) -> Optional[bytes]:
        """Download an image; None unless it is a real, non-trivial image."""
        if not image_url:
            return None
        if image_url.startswith("//"):
            image_url = "https:" + image_url

        try:
            content_type, data = await self._fetch_bytes(session, image_url, self.image_timeout)
            if data is None:
                return None
            if not (content_type or "").lower().startswith("image/"):
                logger.debug(f"Not an image ({content_type}): {image_url}")
                return None
            if len(data) < self.min_image_bytes:
                logger.debug(f"Image too small ({len(data)} bytes): {image_url}")
                return None
            return data

        except asyncio.TimeoutError:
            logger.debug(f"Timeout downloading image: {image_url}")
            return None
        except aiohttp.ClientError as e:
            logger.debug(f"Network error downloading image {image_url}: {e}")
            return None
        except Exception as e:
            logger.debug(f"Unexpected error downloading image {image_url}: {e}")
            return None

    async def _fetch_page(
        self, session: aiohttp.ClientSession, url: str, timeout: float
    ) -> Tuple[Optional[str], Optional[str]]:
        """GET a page following redirects. Returns (final URL, HTML or None)."""
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with session.get(url, timeout=client_timeout, allow_redirects=True) as response:
            final_url = str(response.url)
            if response.status != 200:
                logger.debug(f"HTTP {response.status} for {url}")
                return final_url, None
            try:
                html = await response.text()
            except UnicodeDecodeError:
                raw_content = await response.read()
                html = raw_content.decode("latin-1", errors="ignore")
            return final_url, html

    async def _fetch_bytes(
        self, session: aiohttp.ClientSession, url: str, timeout: float
    ) -> Tuple[Optional[str], Optional[bytes]]:
        """GET binary content. Returns (content type, body or None)."""
        client_timeout = aiohttp.ClientTimeout(total=timeout)
        async with session.get(url, timeout=client_timeout) as response:
            content_type = response.headers.get("Content-Type", "")
            if response.status != 200:
                logger.debug(f"HTTP {response.status} for {url}")
                return content_type, None
            return content_type, await response.read()

    def extract_outbound_link(self, html: str) -> Optional[str]:
        """First outbound article link on an aggregator page."""
        soup = BeautifulSoup(html, "html.parser")
        for selector in self.OUTBOUND_LINK_SELECTORS:
            link = soup.select_one(selector)
            if link and link.get("href"):
                return link["href"]
        return None

    def extract_image_url(self, html: str, page_url: str) -> Optional[str]:
        """Pick the representative image of an article page.

        Tries og:image and twitter:image meta tags first, then the first
        large enough inline image inside the main content.
        """
        soup = BeautifulSoup(html, "html.parser")

        for selector in self.META_IMAGE_SELECTORS:
            tag = soup.select_one(selector)
            image = tag.get("content", "").strip() if tag else ""
            if image:
                if any(marker in image for marker in self.PLACEHOLDER_MARKERS):
                    break
                return self._absolute(image, page_url)

        candidates = soup.select(self.CONTENT_IMAGE_SELECTOR)
        for img in candidates[: self.MAX_INLINE_CANDIDATES]:
            src = (img.get("src") or "").strip()
            if not src:
                continue
            if any(marker in src.lower() for marker in self.SKIPPED_IMAGE_MARKERS):
                continue
            width = self._declared_width(img.get("width"))
            if width and width < self.MIN_INLINE_WIDTH:
                continue
            return self._absolute(src, page_url)

        return None

    @staticmethod
    def _declared_width(value) -> int:
        match = re.match(r"\s*(\d+)", str(value or ""))
        return int(match.group(1)) if match else 0

    @staticmethod
    def _absolute(url: str, page_url: str) -> str:
        if url.startswith("//"):
            scheme = urlparse(page_url).scheme or "https"
            return f"{scheme}:{url}"
        return urljoin(page_url, url)
