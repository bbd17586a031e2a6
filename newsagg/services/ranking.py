from __future__ import annotations

from collections.abc import Iterable, Sequence
from datetime import datetime, timedelta, timezone

from ..models.article import Article, Query, ScoredArticle
from .common import has_non_latin_letters
from .expander import QueryExpander

TITLE_WEIGHT = 10
DESCRIPTION_WEIGHT = 5
RECENCY_BONUS = 2
DEFAULT_LIMIT = 20


def variant_matches(variant: str, text: str) -> bool:
    """Substring test; case folded only for Latin-script variants."""
    if not variant or not text:
        return False
    if has_non_latin_letters(variant):
        return variant in text
    return variant.lower() in text.lower()


def score_article(
    article: Article,
    variants: Iterable[str],
    now: datetime,
    recency_window: timedelta = timedelta(hours=24),
) -> float:
    """Summed title/description hits over every variant, zero if none match."""
    score = 0
    for variant in variants:
        if variant_matches(variant, article.title):
            score += TITLE_WEIGHT
        if variant_matches(variant, article.description):
            score += DESCRIPTION_WEIGHT
    if score and now - article.published_at < recency_window:
        score += RECENCY_BONUS
    return score


def rank(
    corpus: Sequence[Article],
    query: Query,
    limit: int = DEFAULT_LIMIT,
    *,
    expander: QueryExpander | None = None,
    now: datetime | None = None,
    recency_window: timedelta = timedelta(hours=24),
) -> list[ScoredArticle]:
    now = now or datetime.now(timezone.utc)
    if query.is_empty:
        recent = sorted(corpus, key=lambda a: a.published_at, reverse=True)
        return [_scored(article, 0) for article in recent[:limit]]

    variants = sorted((expander or QueryExpander()).expand(query.raw))
    scored = [
        _scored(article, score)
        for article in corpus
        if (score := score_article(article, variants, now, recency_window)) > 0
    ]
    scored.sort(key=lambda item: (item.score, item.published_at), reverse=True)
    return scored[:limit]


def _scored(article: Article, score: float) -> ScoredArticle:
    return ScoredArticle(**article.model_dump(), score=score)
