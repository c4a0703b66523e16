from datetime import datetime, timezone

import httpx
import pytest
import respx

from khabari.config import Settings
from khabari.errors import ProviderError, ProviderErrorKind
from khabari.models.news import Category, RawPayload
from khabari.providers import ProviderClient
from khabari.services.aggregator import FallbackAggregator
from khabari.services.synthetic import SOURCE_ROSTER, SyntheticNewsGenerator


class StubProvider(ProviderClient):
    def __init__(self, name, settings, items=None, error=None, enabled=True):
        super().__init__(settings)
        self.name = name
        self._items = items or []
        self._error = error
        self._enabled = enabled
        self.calls = 0

    @property
    def enabled(self) -> bool:
        return self._enabled

    async def fetch(self, client, category, query) -> RawPayload:
        self.calls += 1
        if self._error is not None:
            raise self._error
        return self.payload("newsapi", self._items)


def headline(index: int) -> dict:
    return {
        "title": f"Headline {index}",
        "url": f"https://example.com/{index}",
        "urlToImage": f"https://cdn.example.com/{index}.jpg",
        "publishedAt": "2024-05-20T12:00:00Z",
        "source": {"name": "Example"},
    }


def make_settings(**overrides) -> Settings:
    values = {"synthetic_delay": 0, "synthetic_seed": 7}
    values.update(overrides)
    return Settings(**values)


def failure(name: str) -> ProviderError:
    return ProviderError(ProviderErrorKind.HTTP_STATUS, name, status_code=500)


@pytest.mark.asyncio
async def test_primary_success_short_circuits_and_truncates() -> None:
    settings = make_settings()
    primary = StubProvider("primary", settings, items=[headline(i) for i in range(15)])
    others = [StubProvider(name, settings) for name in ("secondary", "rss", "hn")]
    async with httpx.AsyncClient() as client:
        aggregator = FallbackAggregator(
            settings=settings, client=client, providers=[primary, *others]
        )
        articles = await aggregator.fetch("technology", "")

    assert len(articles) == 12
    assert primary.calls == 1
    assert [provider.calls for provider in others] == [0, 0, 0]
    assert aggregator.last_provider == "primary"


@pytest.mark.asyncio
async def test_failures_and_empty_results_advance_in_order() -> None:
    settings = make_settings()
    primary = StubProvider("primary", settings, error=failure("primary"))
    secondary = StubProvider("secondary", settings, items=[{"title": "[Removed]"}])
    feeds = StubProvider("rss", settings, items=[headline(1), headline(2)])
    hn = StubProvider("hn", settings, items=[headline(3)])
    async with httpx.AsyncClient() as client:
        aggregator = FallbackAggregator(
            settings=settings, client=client, providers=[primary, secondary, feeds, hn]
        )
        articles = await aggregator.fetch(Category.GENERAL, "")

    assert [a.title for a in articles] == ["Headline 1", "Headline 2"]
    assert (primary.calls, secondary.calls, feeds.calls, hn.calls) == (1, 1, 1, 0)


@pytest.mark.asyncio
async def test_disabled_providers_are_not_called() -> None:
    settings = make_settings()
    primary = StubProvider("primary", settings, items=[headline(1)], enabled=False)
    secondary = StubProvider("secondary", settings, items=[headline(2)])
    async with httpx.AsyncClient() as client:
        aggregator = FallbackAggregator(
            settings=settings, client=client, providers=[primary, secondary]
        )
        articles = await aggregator.fetch(Category.GENERAL, "")

    assert primary.calls == 0
    assert [a.title for a in articles] == ["Headline 2"]


@pytest.mark.asyncio
async def test_transport_errors_are_treated_as_provider_failure() -> None:
    settings = make_settings()
    broken = StubProvider("broken", settings, error=httpx.ReadTimeout("slow"))
    working = StubProvider("working", settings, items=[headline(1)])
    async with httpx.AsyncClient() as client:
        aggregator = FallbackAggregator(
            settings=settings, client=client, providers=[broken, working]
        )
        articles = await aggregator.fetch(Category.GENERAL, "")

    assert len(articles) == 1


@pytest.mark.asyncio
async def test_all_failing_providers_yield_synthetic_query_articles() -> None:
    settings = make_settings()
    providers = [
        StubProvider(name, settings, error=failure(name))
        for name in ("primary", "secondary", "rss", "hn")
    ]
    async with httpx.AsyncClient() as client:
        aggregator = FallbackAggregator(settings=settings, client=client, providers=providers)
        articles = await aggregator.fetch("general", "rockets")

    assert len(articles) == 12
    assert all("rockets" in article.title for article in articles)
    assert all(article.source_name in SOURCE_ROSTER for article in articles)
    assert all(article.image_url.startswith("https://") for article in articles)
    assert aggregator.last_provider == "synthetic"


@pytest.mark.asyncio
async def test_all_real_providers_down_end_to_end() -> None:
    settings = make_settings(news_api_key="news-key", gnews_api_key="gnews-key")
    async with httpx.AsyncClient() as client:
        aggregator = FallbackAggregator(settings=settings, client=client)
        with respx.mock(assert_all_called=False) as mock:
            newsapi = mock.get("https://newsapi.org/v2/everything").respond(500)
            gnews = mock.get("https://gnews.io/api/v4/search").respond(429)
            feeds = mock.get("https://api.rss2json.com/v1/api.json").respond(503)
            search = mock.get("https://hn.algolia.com/api/v1/search").respond(500)
            top = mock.get("https://hacker-news.firebaseio.com/v0/topstories.json").mock(
                side_effect=httpx.ConnectError("offline")
            )
            articles = await aggregator.fetch("general", "rockets")

    assert newsapi.call_count == 1
    assert gnews.call_count == 1
    assert feeds.call_count == 3
    assert search.call_count == 1
    assert top.call_count == 1
    assert len(articles) == 12
    assert all("rockets" in article.title for article in articles)


@pytest.mark.asyncio
async def test_unconfigured_keys_skip_headline_providers() -> None:
    settings = make_settings(news_api_key="YOUR_NEWS_API_KEY_HERE", gnews_api_key=None)
    async with httpx.AsyncClient() as client:
        aggregator = FallbackAggregator(settings=settings, client=client)
        with respx.mock(assert_all_called=True) as mock:
            mock.get("https://api.rss2json.com/v1/api.json").respond(
                200,
                json={
                    "status": "ok",
                    "items": [
                        {
                            "title": "Feed headline",
                            "link": "https://www.bbc.co.uk/news/1",
                            "pubDate": "2024-05-20 10:00:00",
                        }
                    ],
                },
            )
            articles = await aggregator.fetch("general", "")

    assert aggregator.last_provider == "rss"
    assert {a.title for a in articles} == {"Feed headline"}


def test_synthetic_generator_is_deterministic_with_seed() -> None:
    now = datetime(2024, 5, 20, 12, tzinfo=timezone.utc)
    first = SyntheticNewsGenerator(page_size=12, seed=42).generate(Category.SPORTS, "", now)
    second = SyntheticNewsGenerator(page_size=12, seed=42).generate(Category.SPORTS, "", now)

    assert first == second
    assert len(first) == 12
    assert first[0].published_at == "2024-05-20T11:00:00Z"
    assert first[11].published_at == "2024-05-20T00:00:00Z"
    assert all(article.url == "#" for article in first)
    assert all(article.title.endswith("Major developments reported by industry experts") for article in first)


def test_synthetic_query_templates_cycle_past_twelve() -> None:
    articles = SyntheticNewsGenerator(page_size=14, seed=1).generate(Category.GENERAL, "mars")

    assert len(articles) == 14
    assert articles[12].title == articles[0].title == "mars Latest Breaking News"
