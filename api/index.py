from __future__ import annotations

import logging
from functools import lru_cache

from fastapi import Depends, FastAPI, Query, Request
from fastapi.responses import ORJSONResponse
from mangum import Mangum

from newsagg.config import get_settings
from newsagg.errors import TotalAggregationFailure
from newsagg.http_client import shutdown_http_client
from newsagg.models import CorpusStats, SearchResult
from newsagg.services import NewsAggregator

logging.basicConfig(
    level=get_settings().log_level,
    format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
)

app = FastAPI(
    title="Bilingual News Aggregator API",
    version="0.1.0",
    description=(
        "Merged Hebrew and English news feeds with bilingual search and ranking."
    ),
    default_response_class=ORJSONResponse,
)


@lru_cache
def get_aggregator() -> NewsAggregator:
    return NewsAggregator()


@app.exception_handler(TotalAggregationFailure)
async def total_failure_handler(
    request: Request, exc: TotalAggregationFailure
) -> ORJSONResponse:
    return ORJSONResponse(
        status_code=503,
        content={
            "error": "All news sources failed",
            "attempted": exc.attempted,
            "failures": exc.failures,
        },
    )


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/search", tags=["news"], response_model=SearchResult)
async def search(
    q: str = Query("", max_length=200, description="Search text in Hebrew or English"),
    limit: int = Query(20, ge=1, le=100, description="Maximum articles to return"),
    refresh: bool = Query(False, description="Rebuild the corpus before searching"),
    aggregator: NewsAggregator = Depends(get_aggregator),
):
    return await aggregator.search(q, limit, refresh=refresh)


@app.get("/corpus/stats", tags=["news"], response_model=CorpusStats)
async def corpus_stats(aggregator: NewsAggregator = Depends(get_aggregator)):
    return aggregator.stats()


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await shutdown_http_client()


handler = Mangum(app)
