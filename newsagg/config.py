from functools import lru_cache
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_RELAY_TEMPLATES = [
    "https://api.allorigins.win/raw?url={url}",
    "https://corsproxy.io/?url={url}",
    "https://api.rss2json.com/v1/api.json?rss_url={url}",
]

DEFAULT_CDN_PATTERNS = [
    "*.cloudfront.net",
    "*.akamaized.net",
    "*.imgix.net",
    "*.wp.com",
    "*.twimg.com",
    "*.bbci.co.uk",
    "*.guim.co.uk",
    "*.yit.co.il",
    "*.walla.co.il",
    "*.israelhayom.co.il",
    "*.globes.co.il",
]


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", populate_by_name=True
    )

    http_timeout: float = Field(10.0, gt=0, alias="HTTP_TIMEOUT")
    http_max_connections: int = Field(20, ge=1, alias="HTTP_MAX_CONNECTIONS")
    http_max_keepalive: int = Field(10, ge=1, alias="HTTP_MAX_KEEPALIVE")
    http_user_agent: str = Field(
        "Mozilla/5.0 (compatible; NewsAggregator/1.0)",
        alias="HTTP_USER_AGENT",
    )

    relay_templates: list[str] = Field(
        default_factory=lambda: list(DEFAULT_RELAY_TEMPLATES),
        alias="RELAY_TEMPLATES",
    )

    search_default_limit: int = Field(20, ge=1, alias="SEARCH_DEFAULT_LIMIT")
    search_max_limit: int = Field(100, ge=1, alias="SEARCH_MAX_LIMIT")
    description_max_length: int = Field(220, ge=1, alias="DESCRIPTION_MAX_LENGTH")
    recency_window_hours: float = Field(24.0, gt=0, alias="RECENCY_WINDOW_HOURS")

    enrichment_enabled: bool = Field(True, alias="ENRICHMENT_ENABLED")
    enrichment_concurrency: int = Field(5, ge=1, alias="ENRICHMENT_CONCURRENCY")
    enrichment_cdn_patterns: list[str] = Field(
        default_factory=lambda: list(DEFAULT_CDN_PATTERNS),
        alias="ENRICHMENT_CDN_PATTERNS",
    )

    sources_path: Path | None = Field(default=None, alias="SOURCES_PATH")
    terms_path: Path | None = Field(default=None, alias="TERMS_PATH")
    log_level: str = Field("INFO", alias="LOG_LEVEL")


@lru_cache
def get_settings() -> Settings:
    return Settings()
