from __future__ import annotations

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import httpx

from ..config import Settings, get_settings
from ..errors import ProviderError
from ..http_client import get_http_client
from ..models.news import Article, Category
from ..providers import ProviderClient, default_providers
from .synthetic import SyntheticNewsGenerator

logger = logging.getLogger(__name__)


@dataclass(slots=True)
class FallbackAggregator:
    """Tries providers in priority order and returns the first non-empty result.

    Each provider gets exactly one attempt per call. When every provider fails
    or comes back empty, synthetic articles are generated so :meth:`fetch`
    always returns ``page_size`` or fewer real articles, or exactly
    ``page_size`` synthetic ones.
    """

    settings: Settings | None = None
    client: httpx.AsyncClient | None = None
    providers: Sequence[ProviderClient] | None = None
    synthetic: SyntheticNewsGenerator | None = None
    last_provider: str | None = field(default=None, init=False)

    def __post_init__(self) -> None:
        if self.settings is None:
            self.settings = get_settings()
        if self.providers is None:
            self.providers = default_providers(self.settings)
        if self.synthetic is None:
            self.synthetic = SyntheticNewsGenerator(
                page_size=self.settings.page_size,
                delay=self.settings.synthetic_delay,
                seed=self.settings.synthetic_seed,
            )

    @property
    def page_size(self) -> int:
        return self.settings.page_size

    async def fetch(self, category: Category | str, query: str = "") -> list[Article]:
        category = Category.coerce(category)
        query = (query or "").strip()
        client = self.client or await get_http_client()
        logger.info("Fetching %s news (query=%r)", category.value, query)

        for provider in self.providers:
            if not provider.enabled:
                logger.info("Skipping %s: not configured", provider.name)
                continue
            articles = await self._attempt(provider, client, category, query)
            if articles:
                self.last_provider = provider.name
                logger.info("%s returned %d articles", provider.name, len(articles))
                return articles[: self.page_size]
            logger.info("%s returned no articles", provider.name)

        logger.warning("All providers failed or were empty; using synthetic articles")
        self.last_provider = "synthetic"
        return await self.synthetic.fetch(category, query)

    async def _attempt(
        self,
        provider: ProviderClient,
        client: httpx.AsyncClient,
        category: Category,
        query: str,
    ) -> list[Article]:
        try:
            payload = await provider.fetch(client, category, query)
        except (ProviderError, httpx.HTTPError) as exc:
            logger.warning("Provider %s failed: %s", provider.name, exc)
            return []
        return provider.normalize(payload)
