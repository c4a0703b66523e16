from __future__ import annotations

import asyncio
import logging
from datetime import datetime, timezone
from itertools import chain
from typing import Any

import httpx

from ..errors import ProviderError
from ..models.news import Category, RawPayload, parse_datetime
from .base import ProviderClient

logger = logging.getLogger(__name__)

FEEDS_PER_CATEGORY = 3

CATEGORY_FEEDS: dict[Category, tuple[str, ...]] = {
    Category.GENERAL: (
        "http://rss.cnn.com/rss/edition.rss",
        "https://feeds.bbci.co.uk/news/rss.xml",
        "https://www.theguardian.com/world/rss",
    ),
    Category.TECHNOLOGY: (
        "http://rss.cnn.com/rss/edition_technology.rss",
        "https://feeds.feedburner.com/TechCrunch",
        "https://www.wired.com/feed/rss",
    ),
    Category.BUSINESS: (
        "http://rss.cnn.com/rss/money_latest.rss",
        "https://feeds.bloomberg.com/markets/news.rss",
        "https://feeds.reuters.com/reuters/businessNews",
    ),
    Category.SPORTS: (
        "http://rss.cnn.com/rss/edition_sport.rss",
        "https://feeds.skysports.com/feeds/11095",
        "https://www.espn.com/espn/rss/news",
    ),
    Category.HEALTH: (
        "http://rss.cnn.com/rss/edition_health.rss",
        "https://feeds.medicalnewstoday.com/medicalnewstoday",
        "https://www.reuters.com/rssFeed/healthNews",
    ),
}

_OLDEST = datetime.min.replace(tzinfo=timezone.utc)


def feeds_for(category: Category, query: str) -> tuple[str, ...]:
    if query:
        pooled = tuple(chain.from_iterable(CATEGORY_FEEDS.values()))
        return pooled[:FEEDS_PER_CATEGORY]
    return CATEGORY_FEEDS.get(category, CATEGORY_FEEDS[Category.GENERAL])


def matches_query(item: dict[str, Any], query: str) -> bool:
    needle = query.lower()
    for key in ("title", "description", "content"):
        value = item.get(key)
        if isinstance(value, str) and needle in value.lower():
            return True
    return False


def _published_sort_key(item: dict[str, Any]) -> datetime:
    return parse_datetime(item.get("pubDate")) or _OLDEST


def rank_items(items: list[dict[str, Any]], query: str, limit: int) -> list[dict[str, Any]]:
    """Filter by query, newest first, then cut to ``limit``."""
    if query.strip():
        items = [item for item in items if matches_query(item, query.strip())]
    ordered = sorted(items, key=_published_sort_key, reverse=True)
    return ordered[:limit]


class FeedAggregatorProvider(ProviderClient):
    """RSS feeds converted to JSON by rss2json, combined and ranked locally."""

    name = "rss"

    async def fetch(
        self, client: httpx.AsyncClient, category: Category, query: str
    ) -> RawPayload:
        feeds = feeds_for(category, query)
        semaphore = asyncio.Semaphore(self.settings.feed_concurrency)

        async def bounded(feed_url: str) -> list[dict[str, Any]]:
            async with semaphore:
                return await self._fetch_feed(client, feed_url)

        results = await asyncio.gather(
            *(bounded(feed_url) for feed_url in feeds), return_exceptions=True
        )
        combined: list[dict[str, Any]] = []
        for feed_url, result in zip(feeds, results, strict=False):
            if isinstance(result, BaseException):
                logger.warning("Dropping feed %s: %s", feed_url, result)
                continue
            combined.extend(result)

        ranked = rank_items(combined, query, self.settings.page_size)
        if query:
            logger.info("%d feed items match %r", len(ranked), query)
        return self.payload("rss", ranked)

    async def _fetch_feed(
        self, client: httpx.AsyncClient, feed_url: str
    ) -> list[dict[str, Any]]:
        try:
            data = await self.get_json(
                client,
                self.settings.rss_to_json_url,
                {"rss_url": feed_url, "count": self.settings.page_size},
            )
        except ProviderError as exc:
            logger.warning("Feed %s unavailable: %s", feed_url, exc)
            return []
        if not isinstance(data, dict) or data.get("status") != "ok":
            logger.warning("Feed conversion failed for %s", feed_url)
            return []
        items = data.get("items") or []
        return [item for item in items if isinstance(item, dict)]
