from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass
from fnmatch import fnmatch
from typing import TypeVar
from urllib.parse import urljoin, urlsplit

import httpx
from bs4 import BeautifulSoup

from ..config import Settings, get_settings
from ..errors import NewsAggError
from ..http_client import get_http_client, get_public
from ..models.article import Article

logger = logging.getLogger(__name__)

ArticleT = TypeVar("ArticleT", bound=Article)

META_IMAGE_KEYS = (
    ("property", "og:image"),
    ("property", "og:image:secure_url"),
    ("name", "twitter:image"),
    ("name", "twitter:image:src"),
    ("property", "twitter:image"),
)


def _bare_host(url: str) -> str:
    host = (urlsplit(url).hostname or "").lower()
    return host[4:] if host.startswith("www.") else host


def extract_page_images(html: str, page_url: str) -> list[str]:
    """Image candidates in preference order: Open Graph/Twitter meta, then first content image."""
    soup = BeautifulSoup(html, "lxml")
    candidates: list[str] = []
    for attr, key in META_IMAGE_KEYS:
        tag = soup.find("meta", attrs={attr: key})
        if tag and tag.get("content"):
            candidates.append(urljoin(page_url, tag["content"].strip()))

    scope = soup.find("article") or soup.find("main") or soup.body or soup
    img = scope.find("img", src=True)
    if img:
        candidates.append(urljoin(page_url, img["src"].strip()))
    return candidates


@dataclass(slots=True)
class ImageEnricher:
    """Backfills missing images from the article page for a small result set."""

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()

    def is_acceptable(self, image_url: str, *page_urls: str) -> bool:
        """Same host as the article page (before or after redirects), or a known CDN."""
        parts = urlsplit(image_url)
        if parts.scheme not in ("http", "https") or not parts.hostname:
            return False
        host = _bare_host(image_url)
        if any(host == _bare_host(page_url) for page_url in page_urls):
            return True
        return any(fnmatch(host, pattern) for pattern in self.settings.enrichment_cdn_patterns)

    async def enrich(self, articles: Sequence[ArticleT]) -> list[ArticleT]:
        missing = [article for article in articles if not article.image]
        if not missing:
            return list(articles)

        client = self.client or await get_http_client()
        semaphore = asyncio.Semaphore(self.settings.enrichment_concurrency)

        async def bounded(article: ArticleT) -> str | None:
            async with semaphore:
                return await self._find_image(client, article)

        results = await asyncio.gather(
            *(bounded(article) for article in missing), return_exceptions=True
        )
        found: dict[str, str] = {}
        for article, result in zip(missing, results, strict=True):
            if isinstance(result, str):
                found[article.id] = result
            elif isinstance(result, BaseException) and not isinstance(result, Exception):
                raise result
            elif result is not None:
                logger.debug("Image enrichment failed for %s: %s", article.url, result)

        if found:
            logger.info("Enriched %d/%d articles with page images", len(found), len(missing))
        return [
            article.model_copy(update={"image": found[article.id]})
            if article.id in found
            else article
            for article in articles
        ]

    async def _find_image(
        self, client: httpx.AsyncClient, article: Article
    ) -> str | None:
        page_url = str(article.url)
        try:
            response = await asyncio.wait_for(
                get_public(client, page_url, headers={"Accept": "text/html"}),
                timeout=self.settings.http_timeout,
            )
            response.raise_for_status()
        except (NewsAggError, httpx.HTTPError, asyncio.TimeoutError) as exc:
            logger.debug("Could not load %s for images: %s", page_url, exc)
            return None

        final_url = str(response.url)
        for candidate in extract_page_images(response.text, final_url):
            if self.is_acceptable(candidate, page_url, final_url):
                return candidate
        return None
