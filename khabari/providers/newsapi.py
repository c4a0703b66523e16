from __future__ import annotations

import httpx

from ..errors import ProviderError, ProviderErrorKind
from ..models.news import Category, RawPayload
from .base import ProviderClient


class PrimaryNewsProvider(ProviderClient):
    """NewsAPI.org: ``/everything`` for searches, ``/top-headlines`` otherwise."""

    name = "newsapi"

    @property
    def enabled(self) -> bool:
        return self.settings.has_news_api_key

    async def fetch(
        self, client: httpx.AsyncClient, category: Category, query: str
    ) -> RawPayload:
        settings = self.settings
        base = settings.newsapi_base_url.rstrip("/")
        if query:
            url = f"{base}/everything"
            params = {
                "q": query,
                "pageSize": settings.page_size,
                "sortBy": "publishedAt",
                "language": settings.default_language,
                "apiKey": settings.news_api_key,
            }
        else:
            url = f"{base}/top-headlines"
            params = {
                "country": settings.default_country,
                "pageSize": settings.page_size,
                "apiKey": settings.news_api_key,
            }
            if category is not Category.GENERAL:
                params["category"] = category.value

        data = await self.get_json(client, url, params)
        if not isinstance(data, dict) or data.get("status") != "ok":
            message = data.get("message") if isinstance(data, dict) else None
            raise ProviderError(
                ProviderErrorKind.PARSE_FAILURE,
                self.name,
                message or "NewsAPI returned an error",
            )
        return self.payload("newsapi", data.get("articles"))
