"""User behaviour model loading, history search and query recording"""

from collections import Counter
from datetime import datetime, timedelta
from typing import List, Optional, Sequence

import structlog

from .config import settings
from .models import (
    PageContext, PageVisit, QueryPattern, QueryRecord, SmartQuery, Suggestion,
    SuggestionType, TimeBasedHabit, UserBehaviorModel,
)
from .store import QueryStore

logger = structlog.get_logger(__name__)

MAX_FREQUENT_QUERIES = 20


def default_user_model() -> UserBehaviorModel:
    """Sample profile used for anonymous users and as a fallback"""
    return UserBehaviorModel(
        user_id="anonymous",
        frequent_queries=[
            "GitHub",
            "天气",
            "AI 新闻",
            "JavaScript 教程",
            "React 文档",
        ],
        common_patterns=[
            QueryPattern(
                pattern="search:github",
                frequency=10,
                success_rate=0.9,
                time_of_day=[9, 18],
                day_of_week=[1, 2, 3, 4, 5]
            )
        ],
        preferred_sources=["github.com", "stackoverflow.com", "developer.mozilla.org"],
        time_based_habits=[
            TimeBasedHabit(
                time_range=(9, 12),
                common_actions=["search:github", "open:email"],
                preferred_sites=["github.com", "gmail.com"]
            ),
            TimeBasedHabit(
                time_range=(14, 18),
                common_actions=["search:news", "search:weather"],
                preferred_sites=["news.ycombinator.com", "weather.com"]
            ),
        ],
        last_updated=datetime.utcnow()
    )


def frequent_queries(records: Sequence[QueryRecord], limit: int = MAX_FREQUENT_QUERIES) -> List[str]:
    """Query texts by descending count, ties in first-seen order"""
    counts = Counter(record.query_text for record in records)
    return [query for query, _ in counts.most_common(limit)]


async def load_user_model(store: Optional[QueryStore], user_id: Optional[str]) -> UserBehaviorModel:
    """Build a model from stored history; the default model on any failure"""
    if not user_id or store is None:
        return default_user_model()
    
    try:
        records = await store.recent_queries(user_id, limit=settings.query_history_limit)
        return UserBehaviorModel(
            user_id=user_id,
            frequent_queries=frequent_queries(records),
            common_patterns=[],
            preferred_sources=[],
            time_based_habits=[],
            last_updated=datetime.utcnow()
        )
    except Exception as e:
        logger.warning("Failed to load user behaviour model", user_id=user_id, error=str(e))
        return default_user_model()


def get_time_filter(modifiers: Sequence[str], now: Optional[datetime] = None) -> Optional[datetime]:
    """Earliest visit time implied by a time:<word> modifier"""
    modifier = next((m for m in modifiers if m.startswith("time:")), None)
    if modifier is None:
        return None
    
    now = now or datetime.utcnow()
    midnight = now.replace(hour=0, minute=0, second=0, microsecond=0)
    value = modifier.split(":", 1)[1]
    
    if value == "今天":
        return midnight
    if value == "昨天":
        return midnight - timedelta(days=1)
    if value == "上周":
        return now - timedelta(days=7)
    if value == "最近":
        return now - timedelta(days=3)
    return None


def format_date(date: Optional[datetime], now: Optional[datetime] = None) -> str:
    """Relative day label for a visit"""
    if date is None:
        return ""
    
    now = now or datetime.utcnow()
    days = (now - date).days
    if days == 0:
        return "今天"
    if days == 1:
        return "昨天"
    if days < 7:
        return f"{days}天前"
    return date.strftime("%Y/%m/%d")


async def search_history(
    store: Optional[QueryStore],
    target: str,
    modifiers: Sequence[str],
    user_id: Optional[str],
    now: Optional[datetime] = None
) -> List[Suggestion]:
    """Visited pages matching the target, as history suggestions"""
    if not user_id or store is None:
        return []
    
    try:
        since = get_time_filter(modifiers, now)
        visits = await store.find_pages(target, since=since, limit=settings.history_lookup_limit)
    except Exception as e:
        logger.warning("History search failed", user_id=user_id, error=str(e))
        return []
    
    return [
        Suggestion(
            id=f"history-{visit.id}",
            type=SuggestionType.HISTORY,
            title=visit.title or visit.url,
            description=f"{format_date(visit.last_visit, now)} 访问",
            action=f"open:{visit.url}",
            icon="📚",
            confidence=max(0.0, round(0.8 - index * 0.1, 2))
        )
        for index, visit in enumerate(visits)
    ]


async def record_query_history(store: Optional[QueryStore], query: SmartQuery, user_id: str) -> None:
    """Best-effort write of the query to the user's history"""
    if store is None:
        return
    try:
        await store.record_query(QueryRecord(
            user_id=user_id,
            query_text=query.input,
            query_type=query.type,
            intent=query.intent,
            created_at=datetime.utcnow()
        ))
    except Exception as e:
        logger.error("Error recording query history", user_id=user_id, error=str(e))


async def record_page_visit(store: Optional[QueryStore], context: PageContext) -> None:
    """Best-effort refresh of the visited-page cache searched by history intents"""
    if store is None or not context.url:
        return
    try:
        await store.record_page_visit(PageVisit(
            id=context.url,
            url=context.url,
            title=context.title,
            content=context.content,
            last_visit=context.timestamp
        ))
    except Exception as e:
        logger.error("Error recording page visit", url=context.url, error=str(e))
