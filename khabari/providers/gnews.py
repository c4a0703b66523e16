from __future__ import annotations

import httpx

from ..errors import ProviderError, ProviderErrorKind
from ..models.news import Category, RawPayload
from .base import ProviderClient


class SecondaryNewsProvider(ProviderClient):
    """GNews.io. The body carries no status flag, so only HTTP status is checked."""

    name = "gnews"

    @property
    def enabled(self) -> bool:
        return self.settings.has_gnews_api_key

    async def fetch(
        self, client: httpx.AsyncClient, category: Category, query: str
    ) -> RawPayload:
        settings = self.settings
        base = settings.gnews_base_url.rstrip("/")
        if query:
            url = f"{base}/search"
            params = {
                "q": query,
                "token": settings.gnews_api_key,
                "lang": settings.default_language,
                "max": settings.page_size,
            }
        else:
            url = f"{base}/top-headlines"
            params = {
                "token": settings.gnews_api_key,
                "lang": settings.default_language,
                "country": settings.default_country,
                "max": settings.page_size,
            }
            if category is not Category.GENERAL:
                params["category"] = category.value

        data = await self.get_json(client, url, params)
        if not isinstance(data, dict):
            raise ProviderError(
                ProviderErrorKind.PARSE_FAILURE, self.name, "unexpected response body"
            )
        return self.payload("gnews", data.get("articles"))
