from ..config import Settings
from .base import ProviderClient
from .feeds import FeedAggregatorProvider
from .gnews import SecondaryNewsProvider
from .hackernews import DiscussionSearchProvider
from .newsapi import PrimaryNewsProvider

__all__ = [
    "DiscussionSearchProvider",
    "FeedAggregatorProvider",
    "PrimaryNewsProvider",
    "ProviderClient",
    "SecondaryNewsProvider",
    "default_providers",
]


def default_providers(settings: Settings | None = None) -> list[ProviderClient]:
    """Providers in fallback priority order."""
    return [
        PrimaryNewsProvider(settings),
        SecondaryNewsProvider(settings),
        FeedAggregatorProvider(settings),
        DiscussionSearchProvider(settings),
    ]
