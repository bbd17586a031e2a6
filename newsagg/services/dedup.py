from __future__ import annotations

from collections.abc import Iterable, Sequence

from ..models.article import Article
from .common import normalize_url


def dedup_key(article: Article) -> tuple[str, str]:
    return normalize_url(str(article.url)), " ".join(article.title.lower().split())


def merge(article_lists: Iterable[Sequence[Article]]) -> list[Article]:
    """Flatten per-source lists, keeping the first occurrence of each article.

    An article is a duplicate when its normalized URL or its lower-cased
    title was already seen. Tracking redirects change the URL on every fetch
    but keep the title, so the title catches what the URL misses.
    """
    seen_urls: set[str] = set()
    seen_titles: set[str] = set()
    unique: list[Article] = []
    for articles in article_lists:
        for article in articles:
            url_key, title_key = dedup_key(article)
            if url_key in seen_urls or title_key in seen_titles:
                continue
            seen_urls.add(url_key)
            seen_titles.add(title_key)
            unique.append(article)
    return unique
