import hashlib
from datetime import datetime, timedelta, timezone

import pytest

from newsagg.config import Settings
from newsagg.models import Article, Script, Source, make_article_id

NOW = datetime(2026, 10, 19, 12, 0, tzinfo=timezone.utc)


def make_article(
    title: str,
    *,
    source: str = "Test",
    url: str | None = None,
    description: str = "",
    hours_old: float = 1.0,
    image: str | None = None,
) -> Article:
    url = url or f"https://news.example/{hashlib.md5(title.encode()).hexdigest()[:10]}"
    return Article(
        id=make_article_id(source, url, title),
        source=source,
        title=title,
        url=url,
        description=description,
        image=image,
        published_at=NOW - timedelta(hours=hours_old),
    )


@pytest.fixture
def settings() -> Settings:
    return Settings(relay_templates=[], enrichment_enabled=False)


@pytest.fixture
def latin_source() -> Source:
    return Source(name="Wire", endpoint="https://wire.example/rss.xml", script=Script.LATIN)


@pytest.fixture
def hebrew_source() -> Source:
    return Source(name="Yomon", endpoint="https://yomon.example/rss", script=Script.HEBREW)
