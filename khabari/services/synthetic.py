from __future__ import annotations

import asyncio
import logging
import random
from dataclasses import dataclass, field
from datetime import datetime, timedelta, timezone

from ..models.news import NO_LINK, Article, Category, isoformat
from .images import placeholder_image

logger = logging.getLogger(__name__)

SOURCE_ROSTER: tuple[str, ...] = (
    "Reuters",
    "Associated Press",
    "BBC News",
    "CNN",
    "The Guardian",
    "NPR",
    "ABC News",
    "CBS News",
)

SEARCH_TEMPLATES: tuple[str, ...] = (
    "{query} Latest Breaking News",
    "{query} Updates and Analysis",
    "{query} Industry Impact Report",
    "{query} Expert Opinion and Commentary",
    "{query} Market Response and Trends",
    "{query} Global Implications Study",
    "{query} Future Outlook and Predictions",
    "{query} Stakeholder Reactions",
    "{query} Policy Changes and Regulations",
    "{query} Technology and Innovation Impact",
    "{query} Economic Effects Analysis",
    "{query} Social Media Response Compilation",
)

CATEGORY_TOPICS: dict[Category, tuple[str, ...]] = {
    Category.GENERAL: ("Breaking News", "World Updates", "International Affairs", "Current Events"),
    Category.TECHNOLOGY: ("Tech Innovation", "Software Updates", "AI Development", "Cybersecurity", "Startup News"),
    Category.BUSINESS: ("Market Analysis", "Economic Trends", "Corporate News", "Financial Reports", "Industry Updates"),
    Category.SPORTS: ("Game Results", "Player Transfers", "Championship News", "Sports Analysis", "Team Updates"),
    Category.HEALTH: ("Medical Breakthrough", "Health Study", "Public Health", "Healthcare News", "Wellness Tips"),
}


@dataclass(slots=True)
class SyntheticNewsGenerator:
    """Last-resort placeholder articles built locally; cannot fail."""

    page_size: int = 12
    delay: float = 0.0
    seed: int | None = None
    rng: random.Random = field(init=False, repr=False)

    def __post_init__(self) -> None:
        self.rng = random.Random(self.seed)

    def generate(
        self, category: Category, query: str, now: datetime | None = None
    ) -> list[Article]:
        now = now or datetime.now(timezone.utc)
        query = query.strip()
        articles: list[Article] = []
        for index in range(self.page_size):
            source = self.rng.choice(SOURCE_ROSTER)
            if query:
                title = SEARCH_TEMPLATES[index % len(SEARCH_TEMPLATES)].format(query=query)
                description = (
                    f"Comprehensive coverage of {query} from {source}. This breaking story "
                    "includes expert analysis, eyewitness accounts, and the latest "
                    "developments as they unfold."
                )
            else:
                topic = self.rng.choice(CATEGORY_TOPICS[category])
                title = f"{topic}: Major developments reported by industry experts"
                description = (
                    f"Comprehensive coverage of {topic.lower()} with detailed analysis "
                    f"from {source}. This developing story includes expert commentary "
                    "and the latest updates from our newsroom correspondents."
                )
            articles.append(
                Article(
                    title=title,
                    description=description,
                    url=NO_LINK,
                    image_url=placeholder_image(title),
                    published_at=isoformat(now - timedelta(hours=index + 1)),
                    source_name=source,
                )
            )
        return articles

    async def fetch(self, category: Category, query: str) -> list[Article]:
        if self.delay:
            await asyncio.sleep(self.delay)
        articles = self.generate(category, query)
        logger.info(
            "Generated %d synthetic articles for %s %r",
            len(articles),
            category.value,
            query,
        )
        return articles
