from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any

import httpx

from ..config import Settings, get_settings
from ..errors import ProviderError, ProviderErrorKind
from ..models.news import Article, Category, RawPayload
from ..services.normalize import normalize_payload

logger = logging.getLogger(__name__)


class ProviderClient(ABC):
    """One external news source in the fallback chain."""

    name: str = "provider"

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or get_settings()

    @property
    def enabled(self) -> bool:
        return True

    @abstractmethod
    async def fetch(
        self, client: httpx.AsyncClient, category: Category, query: str
    ) -> RawPayload:
        """Issue the provider request(s) and return the raw items."""

    def normalize(self, payload: RawPayload) -> list[Article]:
        return normalize_payload(payload)

    def payload(self, shape: str, items: Any) -> RawPayload:
        if not isinstance(items, list):
            items = []
        return RawPayload(provider=self.name, shape=shape, items=items)

    async def get_json(
        self,
        client: httpx.AsyncClient,
        url: str,
        params: dict[str, Any] | None = None,
    ) -> Any:
        try:
            response = await client.get(url, params=params)
        except httpx.HTTPError as exc:
            raise ProviderError(
                ProviderErrorKind.HTTP_STATUS, self.name, f"transport error: {exc}"
            ) from exc
        if not response.is_success:
            raise ProviderError.from_status(
                self.name, response.status_code, response.reason_phrase
            )
        try:
            return response.json()
        except ValueError as exc:
            raise ProviderError(
                ProviderErrorKind.PARSE_FAILURE, self.name, "response body is not JSON"
            ) from exc
