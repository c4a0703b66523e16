from __future__ import annotations

import asyncio
import logging

import httpx

from ..errors import ProviderError, ProviderErrorKind
from ..models.news import Category, RawPayload
from .base import ProviderClient

logger = logging.getLogger(__name__)


class DiscussionSearchProvider(ProviderClient):
    """Hacker News: Algolia search for queries, top stories otherwise.

    A failed search degrades to the top-stories listing. A failure while
    loading any single story fails the whole attempt.
    """

    name = "hackernews"

    async def fetch(
        self, client: httpx.AsyncClient, category: Category, query: str
    ) -> RawPayload:
        if query:
            try:
                return await self._search(client, query)
            except ProviderError as exc:
                logger.warning("Hacker News search failed, using top stories: %s", exc)
                return await self._top_stories(client, Category.GENERAL)
        return await self._top_stories(client, category)

    async def _search(self, client: httpx.AsyncClient, query: str) -> RawPayload:
        data = await self.get_json(
            client,
            self.settings.hn_search_url,
            {"query": query, "tags": "story", "hitsPerPage": self.settings.page_size},
        )
        if not isinstance(data, dict):
            raise ProviderError(
                ProviderErrorKind.PARSE_FAILURE, self.name, "unexpected search body"
            )
        hits = data.get("hits") or []
        logger.info("Hacker News search found %d results for %r", len(hits), query)
        return self.payload("hn_search", hits)

    async def _top_stories(
        self, client: httpx.AsyncClient, category: Category
    ) -> RawPayload:
        base = self.settings.hn_api_base_url.rstrip("/")
        story_ids = await self.get_json(client, f"{base}/topstories.json")
        if not isinstance(story_ids, list):
            raise ProviderError(
                ProviderErrorKind.PARSE_FAILURE, self.name, "unexpected story id list"
            )
        selected = story_ids[: self.settings.hn_story_limit]
        tasks = [
            asyncio.ensure_future(self.get_json(client, f"{base}/item/{story_id}.json"))
            for story_id in selected
        ]
        try:
            stories = await asyncio.gather(*tasks)
        except BaseException:
            for task in tasks:
                task.cancel()
            raise
        logger.debug("Loaded %d Hacker News stories for %s", len(stories), category.value)
        return self.payload("hn_item", list(stories))
