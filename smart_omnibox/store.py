"""Storage for query history, page visits and saved links"""

from abc import ABC, abstractmethod
from datetime import datetime
from typing import List, Optional

import redis.asyncio as redis
import structlog

from .config import settings
from .models import PageVisit, QueryRecord, SavedLink

logger = structlog.get_logger(__name__)


class QueryStore(ABC):
    """Persistence boundary used by the suggestion service"""
    
    @abstractmethod
    async def recent_queries(self, user_id: str, limit: int = 100) -> List[QueryRecord]:
        """Most recent queries of a user, newest first"""
    
    @abstractmethod
    async def record_query(self, record: QueryRecord) -> None:
        """Append a query to the user's history"""
    
    @abstractmethod
    async def record_page_visit(self, visit: PageVisit) -> None:
        """Insert or refresh a cached page visit, keyed by visit id"""
    
    @abstractmethod
    async def find_pages(
        self,
        target: str = "",
        since: Optional[datetime] = None,
        limit: int = 5
    ) -> List[PageVisit]:
        """Visited pages matching target, most recent first"""
    
    @abstractmethod
    async def save_link(self, url: str) -> SavedLink:
        """Store a link"""
    
    @abstractmethod
    async def list_links(self) -> List[SavedLink]:
        """Saved links, newest first"""
    
    async def ping(self) -> bool:
        return True


def page_matches(visit: PageVisit, target: str, since: Optional[datetime]) -> bool:
    """Shared filter: visited after `since` and target in title or content"""
    if since is not None and (visit.last_visit is None or visit.last_visit < since):
        return False
    if target:
        needle = target.lower()
        return needle in visit.title.lower() or needle in visit.content.lower()
    return True


class RedisQueryStore(QueryStore):
    """QueryStore on top of redis lists and hashes"""
    
    def __init__(self, client: redis.Redis, key_prefix: Optional[str] = None, history_limit: Optional[int] = None):
        self.client = client
        self.key_prefix = key_prefix if key_prefix is not None else settings.redis_key_prefix
        self.history_limit = history_limit if history_limit is not None else settings.query_history_limit
    
    def _key(self, *parts: str) -> str:
        return self.key_prefix + ":".join(parts)
    
    async def recent_queries(self, user_id: str, limit: int = 100) -> List[QueryRecord]:
        raw = await self.client.lrange(self._key("queries", user_id), 0, limit - 1)
        return [QueryRecord.model_validate_json(item) for item in raw]
    
    async def record_query(self, record: QueryRecord) -> None:
        key = self._key("queries", record.user_id)
        async with self.client.pipeline(transaction=True) as pipe:
            pipe.lpush(key, record.model_dump_json())
            pipe.ltrim(key, 0, self.history_limit - 1)
            await pipe.execute()
        logger.debug("Query recorded", user_id=record.user_id, query_type=record.query_type.value)
    
    async def record_page_visit(self, visit: PageVisit) -> None:
        await self.client.hset(self._key("pages"), visit.id, visit.model_dump_json())
    
    async def find_pages(
        self,
        target: str = "",
        since: Optional[datetime] = None,
        limit: int = 5
    ) -> List[PageVisit]:
        raw = await self.client.hvals(self._key("pages"))
        visits = [PageVisit.model_validate_json(item) for item in raw]
        matches = [v for v in visits if page_matches(v, target, since)]
        matches.sort(key=lambda v: v.last_visit or datetime.min, reverse=True)
        return matches[:limit]
    
    async def save_link(self, url: str) -> SavedLink:
        link = SavedLink(url=url)
        await self.client.lpush(self._key("links"), link.model_dump_json())
        logger.info("Link saved", url=url)
        return link
    
    async def list_links(self) -> List[SavedLink]:
        raw = await self.client.lrange(self._key("links"), 0, -1)
        return [SavedLink.model_validate_json(item) for item in raw]
    
    async def ping(self) -> bool:
        try:
            await self.client.ping()
            return True
        except Exception as e:
            logger.error("Redis health check failed", error=str(e))
            return False
