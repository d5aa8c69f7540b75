"""Behaviour-driven prediction of the next omnibox action"""

import re
from datetime import datetime
from typing import Dict, List, Optional

import structlog

from .config import settings
from .models import PageContext, Suggestion, SuggestionType, UserBehaviorModel

logger = structlog.get_logger(__name__)

TECH_KEYWORDS = (
    "API", "JavaScript", "Python", "React", "Vue", "Node.js",
    "Docker", "Kubernetes", "AWS", "算法", "数据结构", "机器学习",
    "AI", "人工智能", "深度学习", "神经网络",
)

CJK_PATTERN = re.compile(r"[\u4e00-\u9fa5]")

ACTION_TITLES: Dict[str, str] = {
    "search:github": "搜索 GitHub",
    "open:email": "打开邮箱",
    "search:news": "查看新闻",
    "open:calendar": "打开日历",
    "search:weather": "查看天气",
}

ACTION_ICONS: Dict[str, str] = {
    "search:github": "📂",
    "open:email": "📧",
    "search:news": "📰",
    "open:calendar": "📅",
    "search:weather": "🌤️",
}


class PredictionEngine:
    """Prediction over a user's behaviour model
    
    Four independent strategies each emit candidates; the union is
    de-duplicated by title and ranked by confidence.
    """
    
    def __init__(self, user_model: UserBehaviorModel, max_predictions: Optional[int] = None):
        self.user_model = user_model
        self.max_predictions = max_predictions if max_predictions is not None else settings.max_predictions
    
    def predict_next(
        self,
        text: str,
        context: PageContext,
        now: Optional[datetime] = None
    ) -> List[Suggestion]:
        """Predict what the user is about to do"""
        now = now or datetime.now()
        
        predictions: List[Suggestion] = []
        predictions.extend(self.predict_by_prefix(text))
        predictions.extend(self.predict_by_time(now))
        predictions.extend(self.predict_by_context(context))
        predictions.extend(self.predict_by_frequency(text))
        
        ranked = self.rank_and_dedupe(predictions)
        logger.debug(
            "Predictions generated",
            user_id=self.user_model.user_id,
            candidates=len(predictions),
            returned=len(ranked)
        )
        return ranked
    
    def predict_by_prefix(self, text: str) -> List[Suggestion]:
        """Frequent queries starting with the input"""
        if len(text) < 2:
            return []
        
        prefix = text.lower()
        matches = [q for q in self.user_model.frequent_queries if q.lower().startswith(prefix)]
        
        return [
            Suggestion(
                id=f"prefix-{query}-{index}",
                type=SuggestionType.SEARCH,
                title=query,
                description="基于历史查询",
                action=f"search:{query}",
                icon="🔍",
                confidence=round(0.7 - index * 0.1, 2)
            )
            for index, query in enumerate(matches[:3])
        ]
    
    def predict_by_time(self, now: datetime) -> List[Suggestion]:
        """Habitual actions for the current hour"""
        hour = now.hour
        habit = next(
            (h for h in self.user_model.time_based_habits
             if h.time_range[0] <= hour <= h.time_range[1]),
            None
        )
        if habit is None:
            return []
        
        return [
            Suggestion(
                id=f"time-{action}-{index}",
                type=SuggestionType.COMMAND,
                title=ACTION_TITLES.get(action, action),
                description=f"{hour}点常用操作",
                action=action,
                icon=ACTION_ICONS.get(action, "⚡"),
                confidence=round(0.6 - index * 0.1, 2)
            )
            for index, action in enumerate(habit.common_actions[:2])
        ]
    
    def predict_by_context(self, context: PageContext) -> List[Suggestion]:
        """Summarize, explain or translate the current page"""
        suggestions = []
        
        if len(context.content) > 1000:
            suggestions.append(Suggestion(
                id="context-summarize",
                type=SuggestionType.AI_ANSWER,
                title="总结这个页面",
                description="使用 AI 生成页面摘要",
                action="summarize:current_page",
                icon="📝",
                confidence=0.8
            ))
        
        if self.is_technical_content(context):
            suggestions.append(Suggestion(
                id="context-explain",
                type=SuggestionType.AI_ANSWER,
                title="解释技术概念",
                description="用简单语言解释页面中的技术内容",
                action="explain:current_page",
                icon="💡",
                confidence=0.75
            ))
        
        if self.is_foreign_language(context):
            suggestions.append(Suggestion(
                id="context-translate",
                type=SuggestionType.AI_ANSWER,
                title="翻译页面内容",
                description="将页面翻译成中文",
                action="translate:current_page:zh",
                icon="🌐",
                confidence=0.7
            ))
        
        return suggestions
    
    def predict_by_frequency(self, text: str) -> List[Suggestion]:
        """Common patterns overlapping the input, most frequent first"""
        if not text:
            return []
        
        needle = text.lower()
        # TODO: normalise whitespace and punctuation so "git" stops matching "digital"
        similar = [
            p for p in self.user_model.common_patterns
            if needle in p.pattern.lower() or p.pattern.lower() in needle
        ]
        similar.sort(key=lambda p: p.frequency, reverse=True)
        
        return [
            Suggestion(
                id=f"frequency-{pattern.pattern}-{index}",
                type=SuggestionType.SEARCH,
                title=pattern.pattern,
                description=f"使用频率 {pattern.frequency} 次",
                action=f"search:{pattern.pattern}",
                icon="📊",
                confidence=min(0.9, round(pattern.success_rate + 0.1, 2))
            )
            for index, pattern in enumerate(similar[:2])
        ]
    
    def rank_and_dedupe(self, suggestions: List[Suggestion]) -> List[Suggestion]:
        """First title wins, then confidence descending, capped"""
        seen = set()
        unique = []
        for suggestion in suggestions:
            if suggestion.title not in seen:
                seen.add(suggestion.title)
                unique.append(suggestion)
        
        unique.sort(key=lambda s: s.confidence, reverse=True)
        return unique[:self.max_predictions]
    
    @staticmethod
    def is_technical_content(context: PageContext) -> bool:
        content = context.content.lower()
        title = context.title.lower()
        return any(
            keyword.lower() in content or keyword.lower() in title
            for keyword in TECH_KEYWORDS
        )
    
    @staticmethod
    def is_foreign_language(context: PageContext) -> bool:
        """Less than 30% CJK characters; pages under 100 chars are not judged"""
        total = len(context.content)
        if total < 100:
            return False
        chinese = len(CJK_PATTERN.findall(context.content))
        return chinese / total < 0.3
