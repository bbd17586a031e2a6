from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from .article import Article, ScoredArticle
from .source import RawPayload

FetchStatus = Literal["ok", "degraded", "failed"]


class FetchReport(BaseModel):
    payloads: list[RawPayload] = Field(default_factory=list)
    attempted: int = Field(0, description="Number of sources a task was started for")
    succeeded: int = Field(0, description="Sources that yielded sane feed content")
    failures: dict[str, str] = Field(
        default_factory=dict, description="Failure reason per source name"
    )

    @property
    def ratio(self) -> float:
        if not self.attempted:
            return 0.0
        return self.succeeded / self.attempted

    @property
    def status(self) -> FetchStatus:
        if self.succeeded == 0:
            return "failed"
        if self.succeeded < self.attempted:
            return "degraded"
        return "ok"


class CorpusSnapshot(BaseModel):
    model_config = ConfigDict(frozen=True)

    articles: tuple[Article, ...] = Field(default_factory=tuple)
    built_at: datetime = Field(description="UTC timestamp when the cycle finished")
    attempted: int = 0
    succeeded: int = 0
    failures: dict[str, str] = Field(default_factory=dict)

    @property
    def degraded(self) -> bool:
        return self.succeeded < self.attempted


class CorpusStats(BaseModel):
    attempted: int
    succeeded: int
    articles: int
    built_at: datetime | None = None
    degraded: bool = False
    failures: dict[str, str] = Field(default_factory=dict)


class SearchResult(BaseModel):
    query: str = Field(description="Query as supplied (trimmed)")
    variants: list[str] = Field(default_factory=list)
    direction: Literal["rtl", "ltr"] = "ltr"
    articles: list[ScoredArticle] = Field(default_factory=list)
    stats: CorpusStats
