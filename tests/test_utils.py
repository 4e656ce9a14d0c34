from datetime import datetime

import pytest

from src.core.utils import (
    extract_source_from_url,
    format_long_date,
    parse_published_date,
    source_label,
)


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://www.example.com/article", "Example"),
        ("https://lex.uz/docs/123", "Lex.uz"),
        ("https://adilet.zan.kz/rus/docs/V2300032", "Adilet"),
        ("https://www.legislation.gov.uk/ukpga/2024/1", "Legislation.gov.uk"),
        ("https://news.google.com/rss/articles/abc", "Google News"),
        ("https://blog.example.co.uk/story", "Blog"),
        ("", ""),
    ],
)
def test_extract_source_from_url(url, expected):
    assert extract_source_from_url(url) == expected


@pytest.mark.parametrize(
    "source,url,expected",
    [
        ("Reuters", "https://example.com", "Reuters"),
        (None, "https://techcrunch.com/2026/01/01/x", "TechCrunch"),
        ("  ", None, "Unknown source"),
        (None, None, "Unknown source"),
    ],
)
def test_source_label(source, url, expected):
    assert source_label(source, url) == expected


@pytest.mark.parametrize(
    "value,expected",
    [
        ("2026-01-05", datetime(2026, 1, 5)),
        ("2026-01-05T10:30:00Z", datetime(2026, 1, 5, 10, 30)),
        ("2026-01-05T10:30:00+05:00", datetime(2026, 1, 5, 5, 30)),
        ("Mon, 05 Jan 2026 10:30:00 GMT", datetime(2026, 1, 5, 10, 30)),
        ("not a date", None),
        ("", None),
        (None, None),
    ],
)
def test_parse_published_date(value, expected):
    assert parse_published_date(value) == expected


@pytest.mark.parametrize(
    "value",
    [
        "0001-01-01T00:00:00+01:00",
        "9999-12-31T23:00:00-05:00",
        "Fri, 02 Jan 99999999999 08:00:00 GMT",
    ],
)
def test_parse_published_date_out_of_range(value):
    assert parse_published_date(value) is None


def test_format_long_date():
    assert format_long_date(datetime(2026, 1, 5)) == "05 January 2026"
