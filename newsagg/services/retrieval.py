from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field
from urllib.parse import quote, urlsplit

import httpx

from ..config import Settings, get_settings
from ..errors import NewsAggError, RetrievalFailure, ValidationRejection
from ..http_client import get_http_client, get_public
from ..models.corpus import FetchReport
from ..models.source import RawPayload, Source
from ..security import ensure_public_url

logger = logging.getLogger(__name__)

FEED_ROOT_MARKERS = ("<rss", "<feed", "<rdf:rdf", "<channel")
FEED_ACCEPT = "application/rss+xml, application/atom+xml, application/xml, application/json;q=0.9, */*;q=0.8"


def looks_like_feed(body: str) -> bool:
    """Minimal sanity check: the body carries a recognizable feed root."""
    head = body.lstrip()[:4096]
    if not head:
        return False
    if head[0] in "{[":
        return head[0] == "[" or '"items"' in body
    lowered = head.lower()
    return any(marker in lowered for marker in FEED_ROOT_MARKERS)


@dataclass(slots=True)
class Relay:
    template: str

    @property
    def name(self) -> str:
        return urlsplit(self.template.replace("{url}", "")).hostname or self.template

    def build_url(self, target: str) -> str:
        return self.template.replace("{url}", quote(target, safe=""))


@dataclass(slots=True)
class RetrievalStrategy:
    """Direct request first, then each relay in priority order.

    Every attempt is bounded by ``timeout`` and must return 2xx content that
    passes :func:`looks_like_feed`.
    """

    relays: Sequence[Relay] = field(default_factory=tuple)
    timeout: float = 10.0

    @classmethod
    def from_settings(cls, settings: Settings) -> RetrievalStrategy:
        return cls(
            relays=tuple(Relay(template) for template in settings.relay_templates),
            timeout=settings.http_timeout,
        )

    async def fetch(self, client: httpx.AsyncClient, source: Source) -> RawPayload:
        ensure_public_url(source.endpoint)
        reasons: list[str] = []
        attempts = [("direct", source.endpoint)] + [
            (relay.name, relay.build_url(source.endpoint)) for relay in self.relays
        ]
        for via, url in attempts:
            try:
                response = await asyncio.wait_for(
                    get_public(client, url, headers={"Accept": FEED_ACCEPT}),
                    timeout=self.timeout,
                )
            except ValidationRejection as exc:
                reasons.append(f"{via}: {exc}")
                continue
            except asyncio.TimeoutError:
                reasons.append(f"{via}: timed out after {self.timeout:g}s")
                continue
            except httpx.HTTPError as exc:
                reasons.append(f"{via}: {type(exc).__name__} {exc}")
                continue

            if not response.is_success:
                reasons.append(f"{via}: HTTP {response.status_code}")
                continue
            body = response.text
            if not looks_like_feed(body):
                reasons.append(f"{via}: response is not a feed")
                continue

            if via != "direct":
                logger.info("Fetched %s via relay %s", source.name, via)
            return RawPayload(
                source=source,
                body=body,
                content_type=response.headers.get("content-type"),
                via=via,
            )
        raise RetrievalFailure(source.name, reasons)


@dataclass(slots=True)
class RetrievalOrchestrator:
    settings: Settings | None = None
    client: httpx.AsyncClient | None = None
    strategy: RetrievalStrategy | None = None

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.strategy is None:
            self.strategy = RetrievalStrategy.from_settings(self.settings)

    async def fetch_all(self, sources: Sequence[Source]) -> FetchReport:
        client = self.client or await get_http_client()
        tasks = [self.strategy.fetch(client, source) for source in sources]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        report = FetchReport(attempted=len(sources))
        for source, result in zip(sources, results, strict=True):
            if isinstance(result, RawPayload):
                report.payloads.append(result)
                continue
            if not isinstance(result, Exception):
                raise result
            if not isinstance(result, NewsAggError):
                logger.error(
                    "Unexpected error retrieving %s", source.name, exc_info=result
                )
            report.failures[source.name] = str(result)
            logger.warning("Retrieval failed for %s: %s", source.name, result)

        report.succeeded = len(report.payloads)
        if report.status == "failed":
            logger.error("Retrieval failed for all %d sources", report.attempted)
        elif report.status == "degraded":
            logger.warning(
                "Retrieval degraded: %d/%d sources succeeded",
                report.succeeded,
                report.attempted,
            )
        else:
            logger.info("Retrieved all %d sources", report.attempted)
        return report
