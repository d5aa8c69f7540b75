"""Suggestion request handling: classify, gather candidates, rank"""

import asyncio
import time
import uuid
from datetime import datetime
from typing import List, Optional

import structlog

from .config import settings
from .context_suggestions import ContextAwareSuggestionProvider
from .exceptions import InputValidationError
from .intent_classifier import IntentClassifier
from .metrics import record_suggestion_request, suggestion_fallbacks_total
from .models import (
    IntentAction, PageContext, QueryType, SmartQuery, SmartSuggestionsRequest,
    SmartSuggestionsResponse, Suggestion, SuggestionType,
)
from .prediction_engine import PredictionEngine
from .ranker import rank_and_limit
from .search_engines import encode_component, get_search_suggestions
from .store import QueryStore
from .user_model import load_user_model, search_history

logger = structlog.get_logger(__name__)


def ai_answer_suggestion(text: str) -> Suggestion:
    """Direct AI answer for a question"""
    return Suggestion(
        id="ai-answer",
        type=SuggestionType.AI_ANSWER,
        title=f"AI 回答：{text}",
        description="使用 DeepSeek 直接回答你的问题",
        action=f"ask:{encode_component(text)}",
        icon="🤖",
        confidence=0.9
    )


def default_suggestions(text: str) -> List[Suggestion]:
    """Minimal set returned when suggestion generation breaks"""
    return [
        Suggestion(
            id="default-search",
            type=SuggestionType.SEARCH,
            title=f"搜索 \"{text}\"",
            description="在 Google 中搜索",
            action=f"open:https://www.google.com/search?q={encode_component(text)}",
            icon="🔍",
            confidence=0.7
        ),
        Suggestion(
            id="default-ai",
            type=SuggestionType.AI_ANSWER,
            title=f"AI 回答：{text}",
            description="使用 AI 回答问题",
            action=f"ask:{encode_component(text)}",
            icon="🤖",
            confidence=0.8
        ),
    ]


class SuggestionService:
    """Orchestrates classification, candidate sources and ranking
    
    The store is injected so that tests can substitute an in-memory one;
    when it is missing every user is served the default behaviour model
    and history lookups return nothing.
    """
    
    def __init__(
        self,
        store: Optional[QueryStore] = None,
        classifier: Optional[IntentClassifier] = None,
        context_provider: Optional[ContextAwareSuggestionProvider] = None
    ):
        self.store = store
        self.classifier = classifier or IntentClassifier()
        self.context_provider = context_provider or ContextAwareSuggestionProvider()
    
    def create_query(self, text: str, context: Optional[PageContext] = None) -> SmartQuery:
        """Classify the input into a fresh SmartQuery"""
        intent = self.classifier.classify(text)
        query_type = self.classifier.determine_query_type(intent)
        
        return SmartQuery(
            id=f"query-{int(time.time() * 1000)}-{uuid.uuid4().hex[:9]}",
            input=text.strip(),
            type=query_type,
            intent=intent,
            context=context or PageContext(),
            suggestions=[],
            confidence=intent.confidence,
            timestamp=datetime.utcnow()
        )
    
    async def generate_suggestions(
        self,
        query: SmartQuery,
        user_id: Optional[str] = None,
        now: Optional[datetime] = None
    ) -> List[Suggestion]:
        """Collect candidates from every source and rank them"""
        try:
            # I/O first, then the synchronous engines
            if query.intent.action == IntentAction.HISTORY_SEARCH:
                user_model, history = await asyncio.gather(
                    load_user_model(self.store, user_id),
                    search_history(self.store, query.intent.target, query.intent.modifiers, user_id, now)
                )
            else:
                user_model = await load_user_model(self.store, user_id)
                history = []
            
            suggestions: List[Suggestion] = []
            
            predictor = PredictionEngine(user_model)
            suggestions.extend(predictor.predict_next(query.input, query.context, now))
            
            suggestions.extend(
                self.context_provider.generate_context_suggestions(query.context, query.input)
            )
            suggestions.extend(history)
            suggestions.extend(get_search_suggestions(query.input))
            
            if query.type == QueryType.QUESTION or query.intent.action == IntentAction.QUESTION:
                suggestions.append(ai_answer_suggestion(query.input))
            
            return rank_and_limit(suggestions, limit=settings.max_suggestions)
        
        except Exception as e:
            logger.error("Error generating suggestions", error=str(e), query_id=query.id, exc_info=True)
            suggestion_fallbacks_total.inc()
            return default_suggestions(query.input)
    
    async def handle(
        self,
        request: SmartSuggestionsRequest,
        now: Optional[datetime] = None
    ) -> SmartSuggestionsResponse:
        """Serve one suggestions request"""
        if not request.input or not request.input.strip():
            raise InputValidationError("Input is required")
        
        start_time = time.time()
        query = self.create_query(request.input, request.context)
        suggestions = await self.generate_suggestions(query, request.user_id, now)
        query.suggestions = suggestions
        
        record_suggestion_request(
            "success",
            time.time() - start_time,
            count=len(suggestions),
            intent_type=query.intent.action.value
        )
        logger.info(
            "Suggestions generated",
            query_id=query.id,
            intent=query.intent.action.value,
            query_type=query.type.value,
            count=len(suggestions)
        )
        
        return SmartSuggestionsResponse(
            query=query,
            suggestions=suggestions,
            timestamp=datetime.utcnow().isoformat() + "Z"
        )
