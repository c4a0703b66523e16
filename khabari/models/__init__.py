from .news import Article, Category, FeedResponse, RawPayload

__all__ = ["Article", "Category", "FeedResponse", "RawPayload"]
