"""Display-image resolution for normalized articles.

Strategies are tried in order and the first usable URL wins. The final
category placeholder always succeeds, so :func:`resolve_image` is total.
"""

from __future__ import annotations

import logging
import re
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any
from urllib.parse import urlsplit, urlunsplit

from bs4 import BeautifulSoup

from ..models.news import Category

logger = logging.getLogger(__name__)

PLACEHOLDER_TOKENS: tuple[str, ...] = ("placeholder", "no-image")

CATEGORY_IMAGES: dict[Category, str] = {
    Category.GENERAL: "https://images.unsplash.com/photo-1504711434969-e33886168f5c?w=400&h=250&fit=crop",
    Category.TECHNOLOGY: "https://images.unsplash.com/photo-1518186285589-2f7649de83e0?w=400&h=250&fit=crop",
    Category.BUSINESS: "https://images.unsplash.com/photo-1507003211169-0a1dd7228f2d?w=400&h=250&fit=crop",
    Category.SPORTS: "https://images.unsplash.com/photo-1461896836934-ffe607ba8211?w=400&h=250&fit=crop",
    Category.HEALTH: "https://images.unsplash.com/photo-1559757148-5c350d0d3c56?w=400&h=250&fit=crop",
}

# First matching bucket wins.
TITLE_KEYWORDS: tuple[tuple[Category, tuple[str, ...]], ...] = (
    (Category.TECHNOLOGY, ("tech", "ai", "software")),
    (Category.BUSINESS, ("business", "market", "economy")),
    (Category.SPORTS, ("sport", "game", "team")),
    (Category.HEALTH, ("health", "medical", "hospital")),
)

_KEYWORD_PATTERNS: tuple[tuple[Category, re.Pattern[str]], ...] = tuple(
    (category, re.compile(r"\b(?:" + "|".join(words) + r")", re.IGNORECASE))
    for category, words in TITLE_KEYWORDS
)

IMAGE_FILE_PATTERN = re.compile(
    r"https?://[^\s<>\"']+?\.(?:jpg|jpeg|png|gif|webp)\b", re.IGNORECASE
)


@dataclass(frozen=True, slots=True)
class ImageStrategy:
    name: str
    try_extract: Callable[[Mapping[str, Any]], str | None]


def absolute_image_url(url: Any, *, secure_only: bool = False) -> str | None:
    """Return ``url`` rewritten to a lowercase ``https`` scheme, or ``None``.

    Requires an http(s) scheme, a host, and no placeholder token.
    """
    if not isinstance(url, str):
        return None
    url = url.strip()
    try:
        parts = urlsplit(url)
    except ValueError:
        return None
    allowed = ("https",) if secure_only else ("https", "http")
    if parts.scheme.lower() not in allowed or not parts.hostname:
        return None
    if any(token in url.lower() for token in PLACEHOLDER_TOKENS):
        return None
    return urlunsplit(parts._replace(scheme="https"))


def _candidate(url: Any) -> str | None:
    return absolute_image_url(url)


def _from_direct(item: Mapping[str, Any]) -> str | None:
    return absolute_image_url(item.get("image"), secure_only=True)


def _from_enclosure(item: Mapping[str, Any]) -> str | None:
    enclosure = item.get("enclosure")
    if not isinstance(enclosure, Mapping):
        return None
    mime = enclosure.get("type")
    if not isinstance(mime, str) or not mime.lower().startswith("image/"):
        return None
    return _candidate(enclosure.get("link") or enclosure.get("url"))


def _from_thumbnail(item: Mapping[str, Any]) -> str | None:
    return _candidate(item.get("thumbnail"))


def _from_media(item: Mapping[str, Any]) -> str | None:
    for key in ("media:content", "media:thumbnail"):
        media = item.get(key)
        if isinstance(media, Mapping):
            found = _candidate(media.get("url"))
            if found:
                return found
    return None


def _from_inline_img(item: Mapping[str, Any]) -> str | None:
    for key in ("content", "description"):
        html = item.get(key)
        if not isinstance(html, str) or "<img" not in html.lower():
            continue
        soup = BeautifulSoup(html, "lxml")
        tag = soup.find("img", src=True)
        if tag:
            found = _candidate(tag.get("src"))
            if found:
                return found
    return None


def _from_bare_url(item: Mapping[str, Any]) -> str | None:
    text = item.get("content") or item.get("description")
    if not isinstance(text, str):
        return None
    for match in IMAGE_FILE_PATTERN.finditer(text):
        found = _candidate(match.group(0))
        if found:
            return found
    return None


STRATEGIES: tuple[ImageStrategy, ...] = (
    ImageStrategy("direct", _from_direct),
    ImageStrategy("enclosure", _from_enclosure),
    ImageStrategy("thumbnail", _from_thumbnail),
    ImageStrategy("media", _from_media),
    ImageStrategy("inline_img", _from_inline_img),
    ImageStrategy("bare_url", _from_bare_url),
)


def classify_title(title: str | None) -> Category:
    text = title or ""
    for category, pattern in _KEYWORD_PATTERNS:
        if pattern.search(text):
            return category
    return Category.GENERAL


def placeholder_image(title: str | None) -> str:
    return CATEGORY_IMAGES[classify_title(title)]


def resolve_image(
    direct: Any,
    title: str | None = "",
    item: Mapping[str, Any] | None = None,
) -> str:
    """Return a display image for an article.

    ``direct`` is the provider's own image field; ``item`` is the raw feed
    entry for feed-derived articles.
    """
    source: dict[str, Any] = dict(item or {})
    source["image"] = direct
    for strategy in STRATEGIES:
        url = strategy.try_extract(source)
        if url:
            logger.debug("Image for %r from %s strategy", (title or "")[:40], strategy.name)
            return url
    return placeholder_image(title)
