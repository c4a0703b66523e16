from khabari.models.news import DEFAULT_DESCRIPTION, Category, RawPayload
from khabari.services import normalize
from khabari.services.images import CATEGORY_IMAGES


def test_newsapi_filters_missing_and_removed_titles() -> None:
    articles = normalize.normalize_newsapi(
        [
            {"title": "[Removed]", "url": "https://removed.com", "source": {"name": "X"}},
            {"title": None, "url": "https://none.example"},
            {"title": "   ", "url": "https://blank.example"},
            "not a mapping",
            {
                "title": "Rocket launch succeeds",
                "description": None,
                "url": "https://news.example.com/rocket",
                "urlToImage": "https://cdn.example.com/rocket.jpg",
                "publishedAt": "2024-05-20T12:00:00Z",
                "source": {"name": "Space Daily"},
            },
        ]
    )

    assert len(articles) == 1
    article = articles[0]
    assert article.title == "Rocket launch succeeds"
    assert article.description == DEFAULT_DESCRIPTION
    assert article.image_url == "https://cdn.example.com/rocket.jpg"
    assert article.source_name == "Space Daily"
    assert article.published_datetime is not None


def test_gnews_uses_image_field_and_derives_missing_source() -> None:
    articles = normalize.normalize_gnews(
        [
            {
                "title": "Budget passes",
                "description": "Lawmakers agree.",
                "url": "https://www.reuters.com/budget",
                "image": "https://cdn.example.com/budget.png",
                "publishedAt": "2024-05-20T09:00:00Z",
                "source": {},
            }
        ]
    )

    assert articles[0].image_url == "https://cdn.example.com/budget.png"
    assert articles[0].source_name == "REUTERS"


def test_rss_description_is_stripped_and_capped() -> None:
    long_text = "<p>" + ("word " * 80) + "</p>"
    articles = normalize.normalize_rss(
        [
            {
                "title": "Feed story",
                "link": "https://feeds.bbci.co.uk/news/story",
                "pubDate": "2024-05-20 10:00:00",
                "description": long_text,
            },
            {
                "title": "Short story",
                "link": "https://www.wired.com/story",
                "pubDate": "2024-05-20 09:00:00",
                "description": "<b>Bold</b> claim",
            },
        ]
    )

    first, second = articles
    assert "<" not in first.description
    assert first.description.endswith("...")
    assert len(first.description) == normalize.DESCRIPTION_LIMIT + 3
    assert first.source_name == "BBCI"
    assert first.published_at == "2024-05-20T10:00:00Z"
    assert second.description == "Bold claim..."
    assert second.source_name == "WIRED"


def test_rss_without_description_uses_default() -> None:
    articles = normalize.normalize_rss(
        [{"title": "Bare item", "link": "", "pubDate": "sometime"}]
    )

    article = articles[0]
    assert article.description == DEFAULT_DESCRIPTION
    assert article.url == "#"
    assert not article.has_link
    assert article.source_name == normalize.FALLBACK_SOURCE
    assert article.published_at == "sometime"
    assert article.published_datetime is None
    assert article.age_label() == "0m ago"


def test_hn_items_formatting() -> None:
    articles = normalize.normalize_hn_items(
        [
            None,
            {"id": 2, "title": "Show HN: A tiny database", "score": 120, "descendants": 33, "time": 1716200000},
            {"id": 3, "title": "Ask HN: Hiring?", "time": 1716200000},
        ]
    )

    first, second = articles
    assert first.description == "Score: 120 points | Comments: 33 | Discussion"
    assert first.url == "https://news.ycombinator.com/item?id=2"
    assert first.published_at == "2024-05-20T10:13:20Z"
    assert first.source_name == "Hacker News"
    assert second.description == "Score: 0 points | Comments: 0 | Discussion"


def test_hn_search_hits_formatting() -> None:
    articles = normalize.normalize_hn_search(
        [
            {
                "objectID": "99",
                "title": "Rockets are getting cheaper",
                "url": "https://blog.example.com/rockets",
                "points": 10,
                "num_comments": 4,
                "created_at": "2024-05-20T12:34:56.000Z",
            }
        ]
    )

    article = articles[0]
    assert article.url == "https://blog.example.com/rockets"
    assert article.description.endswith("| External Link")
    assert article.published_at == "2024-05-20T12:34:56Z"
    assert article.source_name == "Hacker News Search"
    assert article.image_url == CATEGORY_IMAGES[Category.GENERAL]


def test_normalize_payload_dispatches_by_shape() -> None:
    payload = RawPayload(
        provider="gnews",
        shape="gnews",
        items=[{"title": "One", "url": "https://a.example.com/1", "source": {"name": "A"}}],
    )
    assert [a.title for a in normalize.normalize_payload(payload)] == ["One"]
    assert normalize.normalize_payload(RawPayload(provider="x", shape="unknown", items=[{}])) == []


def test_rss_pub_date_is_normalized_to_iso() -> None:
    articles = normalize.normalize_rss(
        [
            {
                "title": "Market sentiment flips",
                "link": "https://www.bbc.co.uk/news/markets",
                "pubDate": "Mon, 20 May 2024 15:20:00 +0000",
            }
        ]
    )

    assert articles[0].published_at == "2024-05-20T15:20:00Z"
    assert articles[0].source_name == "BBC"


def test_newsapi_offset_timestamp_is_converted_to_utc() -> None:
    articles = normalize.normalize_newsapi(
        [
            {
                "title": "Offset story",
                "url": "https://example.com/offset",
                "publishedAt": "2024-05-20T17:00:00+02:00",
                "source": {"name": "Example"},
            }
        ]
    )

    assert articles[0].published_at == "2024-05-20T15:00:00Z"


def test_uppercase_image_scheme_keeps_the_article() -> None:
    articles = normalize.normalize_newsapi(
        [
            {
                "title": "Valid story",
                "url": "https://example.com/valid",
                "urlToImage": "HTTPS://cdn.example.com/a.jpg",
                "publishedAt": "2024-05-20T12:00:00Z",
                "source": {"name": "Example"},
            }
        ]
    )

    assert len(articles) == 1
    assert articles[0].image_url == "https://cdn.example.com/a.jpg"


def test_source_name_skips_country_registry_labels() -> None:
    assert normalize.source_name_from_url("https://www.abc.net.au/news") == "ABC"
    assert normalize.source_name_from_url("https://www.espn.com/nfl") == "ESPN"
    assert normalize.source_name_from_url("not a url") == normalize.FALLBACK_SOURCE
