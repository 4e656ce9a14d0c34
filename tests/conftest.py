import io

import pytest

from src.core.canvas import DocumentCanvas
from src.core.styles import FontSet, register_fonts
from src.models.content import ArticleRecord


@pytest.fixture
def fonts() -> FontSet:
    """Built-in Times family, no bundled TTF files needed."""
    return register_fonts(None)


@pytest.fixture
def canvas() -> DocumentCanvas:
    return DocumentCanvas(title="Test Bulletin", author="Tests")


@pytest.fixture
def make_article():
    """Factory for article records with sensible defaults."""

    def _make(position: int = 1, **overrides) -> ArticleRecord:
        data = {
            "id": f"article-{position}",
            "title": f"Article {position} headline",
            "description": "A short summary of the article.",
            "url": f"https://example.com/news/{position}",
            "source": "Example News",
            "topic": "Technology",
            "publishedAt": "2026-01-05T10:00:00Z",
        }
        data.update(overrides)
        return ArticleRecord(**data)

    return _make


@pytest.fixture
def png_bytes():
    """Factory for real PNG images of a given size."""
    from PIL import Image

    def _png(width: int = 320, height: int = 220) -> bytes:
        buffer = io.BytesIO()
        Image.new("RGB", (width, height), (0, 95, 115)).save(buffer, format="PNG")
        return buffer.getvalue()

    return _png


@pytest.fixture
def mock_settings(monkeypatch):
    """Settings isolated from the developer's environment."""
    from src.models.settings import Settings

    for name in ("TOC_STRATEGY", "TOC_ROWS_PER_PAGE", "FONTS_DIR", "LOGO_PATH", "RESOLVE_IMAGES"):
        monkeypatch.delenv(name, raising=False)
    return Settings(_env_file=None, resolve_images=False)
