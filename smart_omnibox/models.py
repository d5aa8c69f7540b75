"""Data models for the smart omnibox service"""

from datetime import datetime
from enum import Enum
from typing import Any, Dict, List, Optional, Tuple
from urllib.parse import urlparse

from pydantic import BaseModel, ConfigDict, Field, field_validator
from pydantic.alias_generators import to_camel

MAX_CONTENT_LENGTH = 5000
MAX_HEADINGS = 20
MAX_LINKS = 50


def is_web_link(url: str) -> bool:
    try:
        return urlparse(url).scheme in ("http", "https")
    except ValueError:
        return False


class CamelModel(BaseModel):
    """Base model speaking camelCase on the wire"""
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class SuggestionType(str, Enum):
    """Kind of suggestion offered to the user"""
    URL = "url"
    SEARCH = "search"
    HISTORY = "history"
    COMMAND = "command"
    AI_ANSWER = "ai_answer"
    BOOKMARK = "bookmark"


class QueryType(str, Enum):
    """Coarse query category derived from the intent"""
    URL = "url"
    SEARCH = "search"
    COMMAND = "command"
    QUESTION = "question"
    NAVIGATION = "navigation"
    HISTORY_SEARCH = "history_search"


class IntentAction(str, Enum):
    """Action recognised in the raw input"""
    NAVIGATE = "navigate"
    HISTORY_SEARCH = "history_search"
    SUMMARIZE = "summarize"
    TRANSLATE = "translate"
    EXPLAIN = "explain"
    SEARCH = "search"
    QUESTION = "question"


class QueryIntent(CamelModel):
    """Structured interpretation of the input"""
    model_config = ConfigDict(frozen=True)

    action: IntentAction
    target: str
    modifiers: Tuple[str, ...] = ()
    confidence: float = Field(ge=0.0, le=1.0)


class PageContext(CamelModel):
    """Snapshot of the page the user is looking at

    Limits hold for every instance, whether built by the analyzer or
    posted by a client.
    """
    url: str = ""
    title: str = ""
    content: str = ""
    headings: List[str] = []
    links: List[str] = []
    timestamp: datetime = Field(default_factory=datetime.utcnow)
    
    @field_validator("content")
    @classmethod
    def truncate_content(cls, v: str) -> str:
        return v[:MAX_CONTENT_LENGTH]
    
    @field_validator("headings")
    @classmethod
    def cap_headings(cls, v: List[str]) -> List[str]:
        return v[:MAX_HEADINGS]
    
    @field_validator("links")
    @classmethod
    def keep_web_links(cls, v: List[str]) -> List[str]:
        """Only http(s) targets, in order, capped"""
        return [link for link in v if is_web_link(link)][:MAX_LINKS]


class Suggestion(CamelModel):
    """One candidate completion or action"""
    id: str
    type: SuggestionType
    title: str
    description: str = ""
    action: str
    icon: str = ""
    confidence: float = Field(ge=0.0, le=1.0)
    metadata: Optional[Dict[str, Any]] = None


class QueryPattern(CamelModel):
    """A recurring query and how well it worked"""
    pattern: str
    frequency: int = Field(default=0, ge=0)
    success_rate: float = Field(default=0.0, ge=0.0, le=1.0)
    time_of_day: List[int] = []
    day_of_week: List[int] = []


class TimeBasedHabit(CamelModel):
    """Actions a user tends to take within an hour range"""
    time_range: Tuple[int, int]
    common_actions: List[str] = []
    preferred_sites: List[str] = []


class UserBehaviorModel(CamelModel):
    """Per-user query profile"""
    user_id: str
    frequent_queries: List[str] = []
    common_patterns: List[QueryPattern] = []
    preferred_sources: List[str] = []
    time_based_habits: List[TimeBasedHabit] = []
    last_updated: datetime = Field(default_factory=datetime.utcnow)


class SmartQuery(CamelModel):
    """One classify-and-suggest cycle"""
    id: str
    input: str
    type: QueryType
    intent: QueryIntent
    context: PageContext
    suggestions: List[Suggestion] = []
    confidence: float
    timestamp: datetime = Field(default_factory=datetime.utcnow)


class QueryRecord(CamelModel):
    """Query history entry kept by the store"""
    user_id: str
    query_text: str
    query_type: QueryType
    intent: QueryIntent
    created_at: datetime = Field(default_factory=datetime.utcnow)


class PageVisit(CamelModel):
    """Cached page visit used for history search"""
    id: str
    url: str
    title: str = ""
    content: str = ""
    last_visit: Optional[datetime] = None


# API request/response models

class SmartSuggestionsRequest(CamelModel):
    """Suggestion request"""
    input: Optional[str] = None
    context: PageContext = Field(default_factory=PageContext)
    user_id: Optional[str] = None
    
    @field_validator("context", mode="before")
    @classmethod
    def missing_context(cls, v: Any) -> Any:
        """A null context is the same as no page"""
        return PageContext() if v is None else v


class SmartSuggestionsResponse(CamelModel):
    """Suggestion response"""
    query: SmartQuery
    suggestions: List[Suggestion]
    timestamp: str


class ErrorResponse(BaseModel):
    """Error body"""
    error: str


class AnalyzePageRequest(CamelModel):
    """DOM snapshot to analyse"""
    url: str = ""
    title: Optional[str] = None
    html: Optional[str] = None


class ChatMessage(BaseModel):
    """Chat message"""
    role: str
    content: str


class AskRequest(BaseModel):
    """Chat request"""
    messages: List[ChatMessage] = []
    attachments: List[str] = []


class AskResponse(BaseModel):
    """Chat answer"""
    text: str
    model: str


class OmniboxRequest(CamelModel):
    """Plain omnibox submission"""
    input: Optional[str] = None
    user_id: Optional[str] = None


class OmniboxResponse(BaseModel):
    """Where the omnibox should take the user"""
    action: str
    target: Optional[str] = None
    url: Optional[str] = None


class SavedLink(BaseModel):
    """Saved link"""
    url: str
    created_at: datetime = Field(default_factory=datetime.utcnow)
