from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

import httpx

from ..config import Settings, get_settings
from ..errors import TotalAggregationFailure
from ..models.article import Query
from ..models.corpus import CorpusSnapshot, CorpusStats, SearchResult
from ..models.source import Source
from ..sources import DEFAULT_SOURCES, load_sources
from .common import is_hebrew
from .dedup import merge
from .enrichment import ImageEnricher
from .expander import QueryExpander, TermDictionary, get_term_dictionary
from .normalizer import FeedNormalizer
from .ranking import rank
from .retrieval import RetrievalOrchestrator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class SearchSession:
    """Caller-owned search state; the aggregator keeps none of its own."""

    last_query: str = ""

    def remember(self, raw: str) -> None:
        if raw.strip():
            self.last_query = raw.strip()


@dataclass(slots=True)
class NewsAggregator:
    settings: Settings | None = None
    client: httpx.AsyncClient | None = None
    sources: Sequence[Source] | None = None
    orchestrator: RetrievalOrchestrator | None = None
    normalizer: FeedNormalizer | None = None
    expander: QueryExpander | None = None
    enricher: ImageEnricher | None = None
    _snapshot: CorpusSnapshot | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.sources is None:
            self.sources = (
                load_sources(self.settings.sources_path)
                if self.settings.sources_path
                else DEFAULT_SOURCES
            )
        if self.orchestrator is None:
            self.orchestrator = RetrievalOrchestrator(
                settings=self.settings, client=self.client
            )
        if self.normalizer is None:
            self.normalizer = FeedNormalizer(settings=self.settings)
        if self.expander is None:
            terms = (
                TermDictionary.load(self.settings.terms_path)
                if self.settings.terms_path
                else get_term_dictionary()
            )
            self.expander = QueryExpander(terms)
        if self.enricher is None and self.settings.enrichment_enabled:
            self.enricher = ImageEnricher(settings=self.settings, client=self.client)

    @property
    def snapshot(self) -> CorpusSnapshot | None:
        return self._snapshot

    async def refresh(self) -> CorpusSnapshot:
        """Run one aggregation cycle and publish the new corpus.

        Raises :class:`TotalAggregationFailure` when no source yielded
        content; the previously published corpus is left untouched.
        """
        report = await self.orchestrator.fetch_all(self.sources)
        if report.status == "failed":
            raise TotalAggregationFailure(report.attempted, report.failures)

        retrieved_at = datetime.now(timezone.utc)
        per_source = [
            self.normalizer.normalize(payload, retrieved_at) for payload in report.payloads
        ]
        articles = merge(per_source)
        snapshot = CorpusSnapshot(
            articles=tuple(articles),
            built_at=datetime.now(timezone.utc),
            attempted=report.attempted,
            succeeded=report.succeeded,
            failures=report.failures,
        )
        self._snapshot = snapshot
        logger.info(
            "Corpus rebuilt: %d articles from %d/%d sources",
            len(articles),
            report.succeeded,
            report.attempted,
        )
        return snapshot

    def stats(self) -> CorpusStats:
        snapshot = self._snapshot
        if snapshot is None:
            return CorpusStats(attempted=0, succeeded=0, articles=0)
        return CorpusStats(
            attempted=snapshot.attempted,
            succeeded=snapshot.succeeded,
            articles=len(snapshot.articles),
            built_at=snapshot.built_at,
            degraded=snapshot.degraded,
            failures=snapshot.failures,
        )

    async def search(
        self,
        raw: str | None = None,
        limit: int | None = None,
        *,
        session: SearchSession | None = None,
        refresh: bool = False,
        now: datetime | None = None,
    ) -> SearchResult:
        if raw is None:
            raw = session.last_query if session else ""
        elif session is not None:
            session.remember(raw)
        limit = min(limit or self.settings.search_default_limit, self.settings.search_max_limit)

        snapshot = self._snapshot
        if refresh or snapshot is None:
            snapshot = await self.refresh()

        query = Query(raw=raw)
        articles = rank(
            snapshot.articles,
            query,
            limit,
            expander=self.expander,
            now=now,
            recency_window=timedelta(hours=self.settings.recency_window_hours),
        )
        if self.enricher is not None and articles:
            articles = await self.enricher.enrich(articles)

        return SearchResult(
            query=raw.strip(),
            variants=sorted(self.expander.expand(raw)),
            direction="rtl" if is_hebrew(raw) else "ltr",
            articles=articles,
            stats=self.stats(),
        )
