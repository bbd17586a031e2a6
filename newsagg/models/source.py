from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field


class Script(str, Enum):
    HEBREW = "hebrew"
    LATIN = "latin"
    MIXED = "mixed"


class Source(BaseModel):
    model_config = ConfigDict(frozen=True)

    name: str = Field(description="Publisher name shown on results")
    endpoint: str = Field(description="Feed URL (RSS, Atom or JSON item list)")
    script: Script = Field(description="Writing system the feed is published in")


class RawPayload(BaseModel):
    source: Source = Field(description="Source the payload was retrieved for")
    body: str = Field(description="Undecoded feed text")
    content_type: str | None = Field(
        default=None, description="Content-Type reported by the responder"
    )
    via: str = Field(
        default="direct", description="'direct' or the relay host that answered"
    )
