from __future__ import annotations

import logging
import re
from collections.abc import Callable, Iterable, Mapping
from datetime import datetime, timezone
from typing import Any
from urllib.parse import urlparse

from bs4 import BeautifulSoup
from pydantic import ValidationError

from ..models.news import (
    DEFAULT_DESCRIPTION,
    NO_LINK,
    REMOVED_TITLE,
    Article,
    RawPayload,
    isoformat,
    parse_datetime,
)
from .images import resolve_image

logger = logging.getLogger(__name__)

DESCRIPTION_LIMIT = 200
FALLBACK_SOURCE = "News Source"
HN_ITEM_URL = "https://news.ycombinator.com/item?id={id}"

_WHITESPACE = re.compile(r"\s+")

# Registry labels under country-code domains, as in bbc.co.uk or abc.net.au.
SECOND_LEVEL_LABELS = frozenset({"co", "com", "org", "net", "gov", "ac", "edu"})


def _text(value: Any) -> str:
    return value.strip() if isinstance(value, str) else ""


def usable_title(value: Any) -> str | None:
    title = _text(value)
    if not title or title == REMOVED_TITLE:
        return None
    return title


def strip_html(value: str) -> str:
    if "<" not in value:
        return _WHITESPACE.sub(" ", value).strip()
    text = BeautifulSoup(value, "lxml").get_text(" ")
    return _WHITESPACE.sub(" ", text).strip()


def clean_feed_description(value: Any) -> str:
    text = _text(value)
    if not text:
        return DEFAULT_DESCRIPTION
    return strip_html(text)[:DESCRIPTION_LIMIT] + "..."


def source_name_from_url(url: Any) -> str:
    """``https://www.wired.com/feed/rss`` -> ``WIRED``, ``https://www.bbc.co.uk`` -> ``BBC``."""
    try:
        host = urlparse(_text(url)).hostname
    except ValueError:
        return FALLBACK_SOURCE
    if not host:
        return FALLBACK_SOURCE
    parts = host.split(".")
    if len(parts) > 2 and len(parts[-1]) == 2 and parts[-2] in SECOND_LEVEL_LABELS:
        parts = parts[:-1]
    label = parts[-2] if len(parts) > 1 else host
    return label.upper()


def published_timestamp(value: Any) -> str:
    """ISO 8601 in UTC when parseable, otherwise the raw text."""
    raw = _text(value)
    parsed = parse_datetime(raw)
    return isoformat(parsed) if parsed else raw


def _source_field(entry: Mapping[str, Any]) -> str:
    source = entry.get("source")
    if isinstance(source, Mapping):
        return _text(source.get("name"))
    return _text(source)


def _build(entries: Iterable[Any], convert: Callable[[Mapping[str, Any]], Article | None]) -> list[Article]:
    articles: list[Article] = []
    for entry in entries:
        if not isinstance(entry, Mapping):
            continue
        try:
            article = convert(entry)
        except (ValidationError, ValueError, TypeError, OverflowError, OSError) as exc:
            logger.debug("Skipping malformed entry %r: %s", entry.get("title"), exc)
            continue
        if article is not None:
            articles.append(article)
    return articles


def _headline_article(entry: Mapping[str, Any], image_field: str) -> Article | None:
    title = usable_title(entry.get("title"))
    if title is None:
        return None
    url = _text(entry.get("url")) or NO_LINK
    return Article(
        title=title,
        description=_text(entry.get("description")) or DEFAULT_DESCRIPTION,
        url=url,
        image_url=resolve_image(entry.get(image_field), title),
        published_at=published_timestamp(entry.get("publishedAt")),
        source_name=_source_field(entry) or source_name_from_url(url),
    )


def normalize_newsapi(entries: Iterable[Any]) -> list[Article]:
    return _build(entries, lambda entry: _headline_article(entry, "urlToImage"))


def normalize_gnews(entries: Iterable[Any]) -> list[Article]:
    return _build(entries, lambda entry: _headline_article(entry, "image"))


def _rss_article(item: Mapping[str, Any]) -> Article | None:
    title = usable_title(item.get("title"))
    if title is None:
        return None
    link = _text(item.get("link")) or NO_LINK
    return Article(
        title=title,
        description=clean_feed_description(item.get("description")),
        url=link,
        image_url=resolve_image(None, title, item),
        published_at=published_timestamp(item.get("pubDate")),
        source_name=source_name_from_url(link),
    )


def normalize_rss(items: Iterable[Any]) -> list[Article]:
    return _build(items, _rss_article)


def _discussion_description(points: Any, comments: Any, has_url: bool) -> str:
    kind = "External Link" if has_url else "Discussion"
    return f"Score: {points or 0} points | Comments: {comments or 0} | {kind}"


def _hn_search_article(hit: Mapping[str, Any]) -> Article | None:
    title = usable_title(hit.get("title"))
    if title is None:
        return None
    url = _text(hit.get("url"))
    return Article(
        title=title,
        description=_discussion_description(
            hit.get("points"), hit.get("num_comments"), bool(url)
        ),
        url=url or HN_ITEM_URL.format(id=hit.get("objectID")),
        image_url=resolve_image(None, title),
        published_at=published_timestamp(hit.get("created_at")),
        source_name="Hacker News Search",
    )


def normalize_hn_search(hits: Iterable[Any]) -> list[Article]:
    return _build(hits, _hn_search_article)


def _hn_item_article(story: Mapping[str, Any]) -> Article | None:
    title = usable_title(story.get("title"))
    if title is None:
        return None
    url = _text(story.get("url"))
    timestamp = story.get("time")
    if isinstance(timestamp, (int, float)):
        published = isoformat(datetime.fromtimestamp(timestamp, tz=timezone.utc))
    else:
        published = _text(timestamp)
    return Article(
        title=title,
        description=_discussion_description(
            story.get("score"), story.get("descendants"), bool(url)
        ),
        url=url or HN_ITEM_URL.format(id=story.get("id")),
        image_url=resolve_image(None, title),
        published_at=published,
        source_name="Hacker News",
    )


def normalize_hn_items(stories: Iterable[Any]) -> list[Article]:
    return _build(stories, _hn_item_article)


NORMALIZERS: dict[str, Callable[[Iterable[Any]], list[Article]]] = {
    "newsapi": normalize_newsapi,
    "gnews": normalize_gnews,
    "rss": normalize_rss,
    "hn_search": normalize_hn_search,
    "hn_item": normalize_hn_items,
}


def normalize_payload(payload: RawPayload) -> list[Article]:
    normalizer = NORMALIZERS.get(payload.shape)
    if normalizer is None:
        logger.warning("No normalizer for %s payload shape %r", payload.provider, payload.shape)
        return []
    return normalizer(payload.items)
