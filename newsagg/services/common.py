"""Text, date and URL helpers shared by the normalizer, deduplicator and enricher."""
from __future__ import annotations

import re
from datetime import datetime, timezone
from urllib.parse import parse_qsl, urlencode, urlsplit, urlunsplit

from bs4 import BeautifulSoup
from dateutil import parser as date_parser

IMAGE_URL_RE = re.compile(
    r"^https?://[^\s/?#]+/[^\s?#]*\.(?:jpe?g|png|gif|webp|avif)(?:\?[^\s#]*)?$",
    re.IGNORECASE,
)
TRACKING_PARAM_PREFIXES = ("utm_", "fbclid", "gclid", "mc_", "ref_src")
NON_LATIN_LETTER_RE = re.compile(r"[^\W\d_\u0000-\u024F]")
HEBREW_RE = re.compile(r"[\u0590-\u05FF]")


def parse_datetime(value: str | None) -> datetime | None:
    if not value:
        return None
    try:
        parsed = date_parser.parse(value)
    except (ValueError, TypeError, OverflowError):
        return None
    if parsed.tzinfo is None:
        return parsed.replace(tzinfo=timezone.utc)
    return parsed.astimezone(timezone.utc)


def strip_markup(value: str | None) -> str:
    if not value:
        return ""
    if "<" not in value and "&" not in value:
        return " ".join(value.split())
    text = BeautifulSoup(value, "lxml").get_text(" ", strip=True)
    return " ".join(text.split())


def truncate(text: str, limit: int) -> str:
    if len(text) <= limit:
        return text
    return text[:limit].rstrip()


def is_valid_image_url(url: str | None) -> bool:
    """Absolute http(s) URL whose path ends in a known image extension."""
    if not url or not isinstance(url, str):
        return False
    return bool(IMAGE_URL_RE.match(url.strip()))


def extract_image_from_markup(markup: str | None) -> str | None:
    if not markup or "<img" not in markup.lower():
        return None
    img = BeautifulSoup(markup, "lxml").find("img", src=True)
    if img is None:
        return None
    return img["src"].strip() or None


def normalize_url(url: str) -> str:
    """Comparison key for a link: lower-cased host, no fragment or tracking params."""
    parts = urlsplit(url.strip())
    host = parts.netloc.lower()
    if host.startswith("www."):
        host = host[4:]
    path = parts.path.rstrip("/") or "/"
    query = urlencode(
        [
            (key, value)
            for key, value in parse_qsl(parts.query, keep_blank_values=True)
            if not key.lower().startswith(TRACKING_PARAM_PREFIXES)
        ]
    )
    return urlunsplit((parts.scheme.lower(), host, path, query, ""))


def has_non_latin_letters(text: str) -> bool:
    return bool(NON_LATIN_LETTER_RE.search(text))


def is_hebrew(text: str | None) -> bool:
    return bool(text) and bool(HEBREW_RE.search(text))
