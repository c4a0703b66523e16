from functools import lru_cache

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

NEWS_API_KEY_PLACEHOLDER = "YOUR_NEWS_API_KEY_HERE"
GNEWS_API_KEY_PLACEHOLDER = "YOUR_GNEWS_API_KEY_HERE"


class Settings(BaseSettings):
    model_config = SettingsConfigDict(
        env_prefix="", extra="ignore", populate_by_name=True
    )

    http_timeout: float = Field(10.0, gt=0, alias="HTTP_TIMEOUT")
    http_max_connections: int = Field(20, ge=1, alias="HTTP_MAX_CONNECTIONS")
    http_max_keepalive: int = Field(10, ge=1, alias="HTTP_MAX_KEEPALIVE")
    http_user_agent: str = Field(
        "Khabari/0.1 (+https://example.com; contact=admin@example.com)",
        alias="HTTP_USER_AGENT",
    )

    news_api_key: str | None = Field(default=None, alias="NEWS_API_KEY")
    gnews_api_key: str | None = Field(default=None, alias="GNEWS_API_KEY")

    newsapi_base_url: str = Field("https://newsapi.org/v2", alias="NEWSAPI_BASE_URL")
    gnews_base_url: str = Field("https://gnews.io/api/v4", alias="GNEWS_BASE_URL")
    rss_to_json_url: str = Field(
        "https://api.rss2json.com/v1/api.json", alias="RSS_TO_JSON_URL"
    )
    hn_search_url: str = Field(
        "https://hn.algolia.com/api/v1/search", alias="HN_SEARCH_URL"
    )
    hn_api_base_url: str = Field(
        "https://hacker-news.firebaseio.com/v0", alias="HN_API_BASE_URL"
    )

    default_country: str = Field("us", min_length=2, alias="DEFAULT_COUNTRY")
    default_language: str = Field("en", min_length=2, alias="DEFAULT_LANGUAGE")
    page_size: int = Field(12, ge=1, le=100, alias="ARTICLES_PER_PAGE")

    feed_concurrency: int = Field(2, ge=1, alias="FEED_CONCURRENCY")
    hn_story_limit: int = Field(10, ge=1, alias="HN_STORY_LIMIT")

    synthetic_delay: float = Field(0.8, ge=0, alias="SYNTHETIC_DELAY")
    synthetic_seed: int | None = Field(default=None, alias="SYNTHETIC_SEED")

    log_level: str = Field("INFO", alias="LOG_LEVEL")

    @property
    def has_news_api_key(self) -> bool:
        return _usable_key(self.news_api_key, NEWS_API_KEY_PLACEHOLDER)

    @property
    def has_gnews_api_key(self) -> bool:
        return _usable_key(self.gnews_api_key, GNEWS_API_KEY_PLACEHOLDER)


def _usable_key(value: str | None, placeholder: str) -> bool:
    if not value or not value.strip():
        return False
    return value.strip() != placeholder


@lru_cache
def get_settings() -> Settings:
    return Settings()
