from __future__ import annotations

import logging
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urljoin

import orjson
from bs4 import BeautifulSoup, Tag

from ..config import Settings, get_settings
from ..errors import ParseFailure
from ..models.article import Article, make_article_id
from ..models.source import RawPayload
from .common import (
    extract_image_from_markup,
    is_valid_image_url,
    parse_datetime,
    strip_markup,
    truncate,
)

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class EntryFields:
    title: str | None
    link: str | None
    summary_html: str | None
    published: str | None
    image_candidates: list[str]


Extractor = Callable[[Any], EntryFields]


@dataclass(slots=True)
class FeedNormalizer:
    """Turns raw RSS, Atom or JSON feed payloads into canonical articles."""

    settings: Settings | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    def normalize(
        self, payload: RawPayload, retrieved_at: datetime | None = None
    ) -> list[Article]:
        retrieved_at = retrieved_at or datetime.now(timezone.utc)
        try:
            entries = self._parse_entries(payload)
        except ParseFailure as exc:
            logger.warning("Unparseable payload from %s: %s", payload.source.name, exc)
            return []

        articles: list[Article] = []
        for index, (extract, raw) in enumerate(entries):
            try:
                article = self._build_article(payload, extract(raw), retrieved_at)
            except Exception as exc:
                logger.warning(
                    "Skipping entry %d from %s: %s", index, payload.source.name, exc
                )
                continue
            if article is not None:
                articles.append(article)
        logger.debug("Normalized %d articles from %s", len(articles), payload.source.name)
        return articles

    def _parse_entries(self, payload: RawPayload) -> list[tuple[Extractor, Any]]:
        if _is_json(payload):
            return self._parse_json(payload.body)
        return self._parse_xml(payload.body)

    def _parse_json(self, body: str) -> list[tuple[Extractor, Any]]:
        try:
            data = orjson.loads(body)
        except orjson.JSONDecodeError as exc:
            raise ParseFailure(f"invalid JSON feed: {exc}") from exc

        if isinstance(data, dict):
            status = data.get("status")
            if status is not None and status != "ok":
                raise ParseFailure(f"feed service reported {status!r}: {data.get('message')}")
            items = data.get("items")
        else:
            items = data
        if not isinstance(items, list):
            raise ParseFailure("JSON feed has no item list")
        return [(_json_entry, item) for item in items]

    def _parse_xml(self, body: str) -> list[tuple[Extractor, Any]]:
        soup = BeautifulSoup(body, "xml")
        entries = soup.find_all("item")
        if entries:
            return [(_rss_entry, entry) for entry in entries]
        entries = soup.find_all("entry")
        if entries:
            return [(_atom_entry, entry) for entry in entries]
        if soup.find(["rss", "feed", "RDF", "channel"]) is None:
            raise ParseFailure("no feed root element")
        return []

    def _build_article(
        self, payload: RawPayload, fields: EntryFields, retrieved_at: datetime
    ) -> Article | None:
        title = strip_markup(fields.title)
        link = (fields.link or "").strip()
        if not title or not link:
            return None
        url = urljoin(payload.source.endpoint, link)
        if not url.startswith(("http://", "https://")):
            return None

        description = truncate(
            strip_markup(fields.summary_html), self.settings.description_max_length
        )
        image = _select_image(fields)
        published = parse_datetime(fields.published) or retrieved_at

        return Article(
            id=make_article_id(payload.source.name, url, title),
            source=payload.source.name,
            title=title,
            url=url,
            description=description,
            image=image,
            published_at=published,
        )


def _is_json(payload: RawPayload) -> bool:
    content_type = (payload.content_type or "").lower()
    if "json" in content_type:
        return True
    return payload.body.lstrip()[:1] in ("{", "[")


def _select_image(fields: EntryFields) -> str | None:
    for candidate in fields.image_candidates:
        if is_valid_image_url(candidate):
            return candidate.strip()
    embedded = extract_image_from_markup(fields.summary_html)
    if is_valid_image_url(embedded):
        return embedded
    return None


def _text(entry: Tag, *names: str) -> str | None:
    for name in names:
        tag = entry.find(name)
        if tag is not None:
            value = tag.get_text(strip=True)
            if value:
                return value
    return None


def _media_candidates(entry: Tag) -> list[str]:
    candidates: list[str] = []
    for tag in entry.find_all(["media:content", "media:thumbnail", "content", "thumbnail"]):
        url = tag.get("url")
        if not url:
            continue
        medium = (tag.get("medium") or tag.get("type") or "image").lower()
        if medium.startswith("image"):
            candidates.append(url)
    for tag in entry.find_all("enclosure"):
        url = tag.get("url") or tag.get("href")
        kind = (tag.get("type") or "image").lower()
        if url and kind.startswith("image"):
            candidates.append(url)
    return candidates


def _rss_entry(entry: Tag) -> EntryFields:
    link = _text(entry, "link")
    if not link:
        guid = _text(entry, "guid")
        if guid and guid.startswith(("http://", "https://")):
            link = guid
    return EntryFields(
        title=_text(entry, "title"),
        link=link,
        summary_html=_text(entry, "description", "content:encoded", "encoded"),
        published=_text(entry, "pubDate", "dc:date", "date"),
        image_candidates=_media_candidates(entry),
    )


def _atom_entry(entry: Tag) -> EntryFields:
    link = None
    for tag in entry.find_all("link"):
        href = tag.get("href")
        if href and tag.get("rel", "alternate") == "alternate":
            link = href
            break
    candidates = _media_candidates(entry)
    for tag in entry.find_all("link", rel="enclosure"):
        if (tag.get("type") or "").startswith("image") and tag.get("href"):
            candidates.append(tag["href"])
    return EntryFields(
        title=_text(entry, "title"),
        link=link,
        summary_html=_text(entry, "summary", "content"),
        published=_text(entry, "published", "updated"),
        image_candidates=candidates,
    )


def _json_entry(item: dict[str, Any]) -> EntryFields:
    candidates: list[str] = []
    for key in ("thumbnail", "image", "banner_image"):
        value = item.get(key)
        if isinstance(value, str):
            candidates.append(value)
    enclosure = item.get("enclosure")
    if isinstance(enclosure, dict):
        enclosure_url = enclosure.get("link") or enclosure.get("url")
        if isinstance(enclosure_url, str):
            candidates.append(enclosure_url)
    for attachment in item.get("attachments") or []:
        if isinstance(attachment, dict) and str(
            attachment.get("mime_type", "")
        ).startswith("image"):
            candidates.append(str(attachment.get("url", "")))

    summary = (
        item.get("description")
        or item.get("summary")
        or item.get("content")
        or item.get("content_html")
    )
    return EntryFields(
        title=_as_str(item.get("title")),
        link=_as_str(item.get("link") or item.get("url")),
        summary_html=_as_str(summary),
        published=_as_str(
            item.get("pubDate") or item.get("date_published") or item.get("published")
        ),
        image_candidates=candidates,
    )


def _as_str(value: Any) -> str | None:
    if value is None:
        return None
    return value if isinstance(value, str) else str(value)
