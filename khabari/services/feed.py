from __future__ import annotations

import logging
from dataclasses import dataclass, field
from enum import Enum

from ..models.news import Article, Category
from .aggregator import FallbackAggregator

logger = logging.getLogger(__name__)


class FetchStatus(str, Enum):
    IDLE = "idle"
    FETCHING = "fetching"


@dataclass(slots=True)
class FeedState:
    category: Category = Category.GENERAL
    query: str = ""
    articles: list[Article] = field(default_factory=list)
    page_size: int = 12
    status: FetchStatus = FetchStatus.IDLE
    error: str | None = None
    exhausted: bool = False


@dataclass(frozen=True, slots=True)
class FeedUpdate:
    """What a renderer needs: replace or append, and whether to offer more."""

    articles: tuple[Article, ...]
    is_loading_more: bool = False
    error: str | None = None
    has_more: bool = False


@dataclass(slots=True)
class FeedSession:
    """Per-user feed context driving one :class:`FallbackAggregator`.

    Every public operation returns ``None`` when another fetch is in flight.
    """

    aggregator: FallbackAggregator
    state: FeedState = field(default_factory=FeedState)

    def __post_init__(self) -> None:
        self.state.page_size = self.aggregator.page_size

    @property
    def is_fetching(self) -> bool:
        return self.state.status is FetchStatus.FETCHING

    def _begin(self) -> bool:
        # No await between the check and the set.
        if self.state.status is FetchStatus.FETCHING:
            return False
        self.state.status = FetchStatus.FETCHING
        return True

    def _finish(self) -> None:
        self.state.status = FetchStatus.IDLE

    def _has_more(self) -> bool:
        state = self.state
        return not state.exhausted and len(state.articles) >= state.page_size

    def _update(self, is_loading_more: bool = False) -> FeedUpdate:
        return FeedUpdate(
            articles=tuple(self.state.articles),
            is_loading_more=is_loading_more,
            error=self.state.error,
            has_more=self._has_more(),
        )

    async def load(
        self, category: Category | str | None = None, query: str | None = None
    ) -> FeedUpdate | None:
        if not self._begin():
            logger.debug("Ignoring load while a fetch is in flight")
            return None
        state = self.state
        if category is not None:
            state.category = Category.coerce(category)
        state.query = (query or "").strip()
        try:
            articles = await self.aggregator.fetch(state.category, state.query)
        except Exception as exc:
            logger.exception("Feed load failed for %s", state.category.value)
            state.articles = []
            state.error = str(exc) or exc.__class__.__name__
            return self._update()
        else:
            state.articles = list(articles)
            state.error = None
            state.exhausted = False
            return self._update()
        finally:
            self._finish()

    async def change_category(self, category: Category | str) -> FeedUpdate | None:
        category = Category.coerce(category)
        if self.is_fetching or category is self.state.category:
            return None
        return await self.load(category, "")

    async def search(self, query: str) -> FeedUpdate | None:
        return await self.load(self.state.category, query)

    async def refresh(self) -> FeedUpdate | None:
        return await self.load(self.state.category, self.state.query)

    async def load_more(self) -> FeedUpdate | None:
        if not self._begin():
            return None
        state = self.state
        try:
            fetched = await self.aggregator.fetch(state.category, state.query)
        except Exception as exc:
            logger.exception("Loading more %s articles failed", state.category.value)
            state.error = str(exc) or exc.__class__.__name__
            return self._update(is_loading_more=True)
        else:
            fresh = list(fetched)[len(state.articles):]
            if fresh:
                state.articles.extend(fresh)
            else:
                state.exhausted = True
            state.error = None
            return self._update(is_loading_more=True)
        finally:
            self._finish()
