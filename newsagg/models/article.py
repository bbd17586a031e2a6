from __future__ import annotations

import hashlib
from datetime import datetime

from pydantic import BaseModel, ConfigDict, Field, HttpUrl


def make_article_id(source: str, url: str, title: str) -> str:
    """Content-derived identity: refetching the same entry yields the same id."""
    key = f"{source}|{url}|{title}".encode("utf-8", "ignore")
    return hashlib.blake2b(key, digest_size=8).hexdigest()


class Article(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Stable id derived from source, url and title")
    source: str = Field(description="Originating source name")
    title: str = Field(min_length=1, description="Article headline")
    url: HttpUrl = Field(description="Canonical absolute article URL")
    description: str = Field(default="", description="Markup-free summary")
    image: str | None = Field(
        default=None, description="Validated absolute illustrative image URL"
    )
    published_at: datetime = Field(
        description="Publication timestamp in UTC, retrieval time if unknown"
    )


class ScoredArticle(Article):
    score: float = Field(default=0.0, description="Relevance score for the query")


class Query(BaseModel):
    raw: str = Field(default="", description="Free-text search string")

    @property
    def is_empty(self) -> bool:
        return not self.raw.strip()
