"""Tests for data models."""

import pytest
from pydantic import ValidationError

from src.models.content import ArticleRecord, BulletinRequest


def test_article_record_creation():
    """Test creating an ArticleRecord with the selection UI's field names."""
    article = ArticleRecord(
        id=42,
        title="  New digital economy law adopted ",
        description="Summary",
        url="https://lex.uz/docs/1",
        source="Lex.uz",
        topic="Legislation",
        publishedAt="2026-01-12",
    )

    assert article.id == "42"
    assert article.title == "New digital economy law adopted"
    assert article.published_at == "2026-01-12"
    assert article.image is None


def test_article_record_accepts_snake_case_date():
    article = ArticleRecord(title="Title", published_at="2026-01-12")
    assert article.published_at == "2026-01-12"


def test_article_record_blank_optionals_become_none():
    """Absent values are None, never empty-string sentinels."""
    article = ArticleRecord(title="Title", image="", source="  ", url="")
    assert article.image is None
    assert article.source is None
    assert article.url is None


def test_article_record_requires_title():
    with pytest.raises(ValidationError):
        ArticleRecord(description="No title")
    with pytest.raises(ValidationError):
        ArticleRecord(title="   ")


def test_article_record_is_immutable():
    article = ArticleRecord(title="Title")
    with pytest.raises(ValidationError):
        article.title = "Changed"


@pytest.mark.parametrize(
    "description,content,expected",
    [
        ("Summary", "Full text", "Summary"),
        ("", "Full text", "Full text"),
        (None, "  ", None),
        (None, None, None),
    ],
)
def test_article_body_text(description, content, expected):
    article = ArticleRecord(title="Title", description=description, content=content)
    assert article.body_text == expected


def test_bulletin_request_missing_news():
    assert BulletinRequest.model_validate({}).news is None
    assert BulletinRequest.model_validate({"news": []}).news == []


def test_bulletin_request_parses_articles():
    request = BulletinRequest.model_validate(
        {"news": [{"title": "One"}, {"title": "Two", "publishedAt": "bad date"}]}
    )
    assert [article.title for article in request.news] == ["One", "Two"]
