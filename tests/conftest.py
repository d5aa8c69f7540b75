"""Shared fixtures"""

from datetime import datetime
from typing import Dict, List, Optional

import pytest

from smart_omnibox.models import PageContext, PageVisit, QueryRecord, SavedLink
from smart_omnibox.store import QueryStore, page_matches


class InMemoryQueryStore(QueryStore):
    """QueryStore kept in dicts, for tests"""
    
    def __init__(self):
        self.queries: Dict[str, List[QueryRecord]] = {}
        self.pages: Dict[str, PageVisit] = {}
        self.links: List[SavedLink] = []
    
    async def recent_queries(self, user_id: str, limit: int = 100) -> List[QueryRecord]:
        return self.queries.get(user_id, [])[:limit]
    
    async def record_query(self, record: QueryRecord) -> None:
        self.queries.setdefault(record.user_id, []).insert(0, record)
    
    async def record_page_visit(self, visit: PageVisit) -> None:
        self.pages[visit.id] = visit
    
    async def find_pages(self, target: str = "", since: Optional[datetime] = None, limit: int = 5) -> List[PageVisit]:
        matches = [v for v in self.pages.values() if page_matches(v, target, since)]
        matches.sort(key=lambda v: v.last_visit or datetime.min, reverse=True)
        return matches[:limit]
    
    async def save_link(self, url: str) -> SavedLink:
        link = SavedLink(url=url)
        self.links.insert(0, link)
        return link
    
    async def list_links(self) -> List[SavedLink]:
        return list(self.links)


class BrokenQueryStore(InMemoryQueryStore):
    """Every read and write fails"""
    
    async def recent_queries(self, user_id: str, limit: int = 100):
        raise ConnectionError("store down")
    
    async def record_query(self, record):
        raise ConnectionError("store down")
    
    async def find_pages(self, target: str = "", since=None, limit: int = 5):
        raise ConnectionError("store down")
    
    async def save_link(self, url: str):
        raise ConnectionError("store down")


@pytest.fixture
def store():
    return InMemoryQueryStore()


@pytest.fixture
def broken_store():
    return BrokenQueryStore()


@pytest.fixture
def empty_context():
    return PageContext()


@pytest.fixture
def article_context():
    return PageContext(
        url="https://blog.example.com/posts/closures",
        title="Understanding Closures",
        content="A closure is a function bundled with its lexical environment. " * 30,
        headings=["Understanding Closures", "Lexical scope"],
        links=["https://blog.example.com/"]
    )
