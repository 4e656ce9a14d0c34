"""Utility functions for URL, date and text processing."""

from __future__ import annotations

import re
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Optional
from urllib.parse import urlparse


def extract_source_from_url(url: str) -> str:
    """Extract a human friendly source name from a URL.

    Removes common subdomains and TLDs, applies known mappings and
    returns a title-cased domain name. Returns an empty string if the
    URL cannot be parsed.
    """
    if not url:
        return ""

    try:
        parsed = urlparse(url)
        domain = parsed.netloc.lower()
        if not domain:
            return ""

        domain = re.sub(r"^(www\.|m\.|mobile\.)", "", domain)
        domain = re.sub(r"\.(com|org|net|edu|gov|io|uz|kz|ru|co\.uk|gov\.uk|ai)$", "", domain)

        source_mapping = {
            "lex": "Lex.uz",
            "adilet.zan": "Adilet",
            "legislation": "Legislation.gov.uk",
            "kun": "Kun.uz",
            "gazeta": "Gazeta.uz",
            "techcrunch": "TechCrunch",
            "theverge": "The Verge",
            "reuters": "Reuters",
            "bbc": "BBC",
            "news.google": "Google News",
        }

        if domain in source_mapping:
            return source_mapping[domain]

        parts = domain.split(".")
        if parts:
            main_domain = parts[0]
            return main_domain.replace("-", " ").replace("_", " ").title()

        return domain.title()
    except Exception:
        return ""


def source_label(source: Optional[str], url: Optional[str]) -> str:
    """Source text shown under an article title."""
    if source and source.strip():
        return source.strip()
    return extract_source_from_url(url or "") or "Unknown source"


def parse_published_date(value: Optional[str]) -> Optional[datetime]:
    """Parse an ISO or RFC 2822 date string into a naive UTC datetime.

    Returns None when the value is missing or cannot be parsed.
    """
    if not value or not value.strip():
        return None

    value = value.strip()
    try:
        parsed = datetime.fromisoformat(value.replace("Z", "+00:00"))
    except ValueError:
        try:
            parsed = parsedate_to_datetime(value)
        except (TypeError, ValueError, IndexError, OverflowError):
            return None
        if parsed is None:
            return None

    if parsed.tzinfo is not None:
        # Offsets near datetime.min/max overflow when shifted to UTC
        try:
            parsed = parsed.astimezone(timezone.utc).replace(tzinfo=None)
        except (OverflowError, ValueError):
            return None
    return parsed


def format_long_date(value: datetime) -> str:
    """Format a date as '05 January 2026'."""
    return value.strftime("%d %B %Y")
