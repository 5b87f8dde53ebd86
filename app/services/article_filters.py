"""
In-memory article filtering and dashboard statistics

Articles are listed in full and narrowed here, per request.
"""

from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from typing import List, Optional

from dateutil.relativedelta import relativedelta

from app.models.article import Article, ArticleCategory, ArticleStatus
from app.models.user import UserProfile

RECENT_LIMIT = 5


class DateRange(str, Enum):
    ALL = "all"
    DAY = "1d"
    WEEK = "1w"
    MONTH = "1m"
    HALF_YEAR = "6m"
    YEAR = "1y"


_RANGE_DELTAS = {
    DateRange.DAY: relativedelta(days=1),
    DateRange.WEEK: relativedelta(weeks=1),
    DateRange.MONTH: relativedelta(months=1),
    DateRange.HALF_YEAR: relativedelta(months=6),
    DateRange.YEAR: relativedelta(years=1),
}


@dataclass
class ArticleFilter:
    search: str = ""
    category: Optional[ArticleCategory] = None
    status: Optional[ArticleStatus] = None
    topics: List[str] = field(default_factory=list)
    date_range: DateRange = DateRange.ALL

    @classmethod
    def for_viewer(cls, viewer: UserProfile, search: Optional[str] = None, **kwargs) -> "ArticleFilter":
        """
        Build a filter for a viewer.

        Without an explicit search term a non-admin sees their own articles
        first: the search defaults to their display name. Passing an empty
        string clears it.
        """
        if search is None:
            search = "" if viewer.is_admin else viewer.display_name
        topics = [t.strip().lower() for t in kwargs.pop("topics", None) or [] if t.strip()]
        return cls(search=search, topics=topics, **kwargs)

    def matches(self, article: Article, now: Optional[datetime] = None) -> bool:
        term = self.search.lower()
        if term and term not in article.title.lower() and term not in (article.author or "").lower():
            return False
        if self.category and article.category != self.category:
            return False
        if self.status and article.status != self.status:
            return False
        if self.date_range != DateRange.ALL and article.created_at is not None:
            now = now or datetime.now(timezone.utc)
            created = article.created_at
            if created.tzinfo is None:
                created = created.replace(tzinfo=timezone.utc)
            if created <= now - _RANGE_DELTAS[self.date_range]:
                return False
        if self.topics and not any(tag.lower() in self.topics for tag in article.tags):
            return False
        return True

    def apply(self, articles: List[Article], now: Optional[datetime] = None) -> List[Article]:
        return [a for a in articles if self.matches(a, now)]


@dataclass
class DashboardStats:
    total_articles: int
    published_count: int
    my_drafts: int
    user_count: Optional[int]
    recent_articles: List[Article]


def build_dashboard(
    viewer: UserProfile, articles: List[Article], user_count: Optional[int] = None
) -> DashboardStats:
    """
    Global counts plus the viewer's own drafts.

    Articles are expected newest first. Only the viewer's own drafts are
    counted; admins see the newest articles overall, staff only their own.
    """
    mine = [a for a in articles if a.author == viewer.display_name]
    return DashboardStats(
        total_articles=len(articles),
        published_count=sum(1 for a in articles if a.status == ArticleStatus.PUBLISHED),
        my_drafts=sum(1 for a in mine if a.status == ArticleStatus.DRAFT),
        user_count=user_count if viewer.is_admin else None,
        recent_articles=(articles if viewer.is_admin else mine)[:RECENT_LIMIT],
    )
