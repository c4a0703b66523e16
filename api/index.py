from __future__ import annotations

from fastapi import Depends, FastAPI, Query
from fastapi.responses import ORJSONResponse
from mangum import Mangum

from khabari.config import get_settings
from khabari.http_client import shutdown_http_client
from khabari.logging_setup import configure_logging
from khabari.models.news import Category, FeedResponse
from khabari.services.aggregator import FallbackAggregator

configure_logging(get_settings().log_level)

app = FastAPI(
    title="Khabari News API",
    version="0.1.0",
    description=(
        "Category and search news feeds aggregated from several providers, "
        "with fallback between them."
    ),
    default_response_class=ORJSONResponse,
)


def get_aggregator() -> FallbackAggregator:
    return FallbackAggregator()


@app.get("/health", tags=["system"])
async def healthcheck() -> dict[str, str]:
    return {"status": "ok"}


@app.get("/categories", tags=["news"])
async def categories() -> list[str]:
    return [category.value for category in Category]


@app.get("/news", tags=["news"], response_model=FeedResponse)
async def news(
    category: str = Query(
        Category.GENERAL.value, description="Feed category; unknown values read as general"
    ),
    q: str = Query("", max_length=200, description="Optional search query"),
    aggregator: FallbackAggregator = Depends(get_aggregator),
):
    selected = Category.coerce(category)
    query = q.strip()
    articles = await aggregator.fetch(selected, query)
    return FeedResponse(
        category=selected, query=query, count=len(articles), articles=articles
    )


@app.on_event("shutdown")
async def on_shutdown() -> None:
    await shutdown_http_client()


handler = Mangum(app)
