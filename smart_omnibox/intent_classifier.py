"""Rule-based intent classification for omnibox input"""

import re
from typing import List, Optional, Tuple
from urllib.parse import urlparse

import structlog

from .models import IntentAction, QueryIntent, QueryType

logger = structlog.get_logger(__name__)


URL_CONFIDENCE = 0.95
RULE_CONFIDENCE = 0.8
QUESTION_CONFIDENCE = 0.7
DEFAULT_CONFIDENCE = 0.5

# Ordered (intent, patterns) table; the first intent with a matching pattern wins
INTENT_RULES: Tuple[Tuple[IntentAction, Tuple[re.Pattern, ...]], ...] = tuple(
    (action, tuple(re.compile(p) for p in patterns))
    for action, patterns in (
        (IntentAction.HISTORY_SEARCH, (
            r"帮我找.*昨天.*的",
            r"找.*之前.*看过的",
            r"上次.*浏览的",
            r"搜索.*历史",
            r"昨天.*访问",
            r"前天.*打开",
            r"最近.*看过",
        )),
        (IntentAction.SUMMARIZE, (
            r"总结.*这个页面",
            r"这篇文章.*要点",
            r"概括.*内容",
            r"摘要",
            r"总结当前页面",
            r"页面摘要",
        )),
        (IntentAction.TRANSLATE, (
            r"翻译.*这个",
            r"把.*翻译成",
            r".*的中文是什么",
            r".*用英文怎么说",
            r"翻译成.*语",
        )),
        (IntentAction.NAVIGATE, (
            r"打开.*",
            r"跳转到.*",
            r"访问.*",
            r"去.*网站",
            r"进入.*",
        )),
        (IntentAction.EXPLAIN, (
            r"解释.*",
            r"什么是.*",
            r".*是什么意思",
            r".*怎么理解",
            r"说明.*",
            r"为什么.*",
            r"怎么.*",
            r"如何.*",
            r"哪里.*",
            r"哪个.*",
            r".*？$",
            r".*\?$",
        )),
        (IntentAction.SEARCH, (
            r"搜索.*",
            r"查找.*",
            r"找.*",
            r".*在哪里",
            r".*怎么.*",
        )),
    )
)

TIME_MODIFIERS = ("昨天", "今天", "前天", "上周", "最近", "刚才", "之前")
TOPIC_MODIFIERS = ("关于", "有关", "涉及", "相关")
AI_KEYWORDS = ("AI", "人工智能")

URL_PATTERNS = (
    re.compile(r"^https?://"),
    re.compile(r"^[a-zA-Z0-9-]+\.[a-zA-Z]{2,}"),
    re.compile(r"^www\."),
    re.compile(r"\.com$|\.org$|\.net$|\.cn$|\.io$"),
)

QUERY_TYPES = {
    IntentAction.NAVIGATE: QueryType.URL,
    IntentAction.HISTORY_SEARCH: QueryType.HISTORY_SEARCH,
    IntentAction.SUMMARIZE: QueryType.COMMAND,
    IntentAction.TRANSLATE: QueryType.COMMAND,
    IntentAction.EXPLAIN: QueryType.QUESTION,
    IntentAction.QUESTION: QueryType.QUESTION,
}


class IntentClassifier:
    """Maps raw omnibox text to a QueryIntent"""
    
    def __init__(self, rules=INTENT_RULES):
        self.rules = rules
    
    def classify(self, text: str) -> QueryIntent:
        """Classify the input, first matching stage wins"""
        normalized = text.lower().strip()
        
        if self.is_url(text):
            return QueryIntent(
                action=IntentAction.NAVIGATE,
                target=text,
                modifiers=(),
                confidence=URL_CONFIDENCE
            )
        
        match = self.match_rule(normalized)
        if match:
            action, pattern = match
            logger.debug("Intent rule matched", action=action.value, pattern=pattern.pattern)
            return QueryIntent(
                action=action,
                target=self._extract_target(text, pattern),
                modifiers=tuple(self.extract_modifiers(text)),
                confidence=RULE_CONFIDENCE
            )
        
        if "？" in text or "?" in text:
            return QueryIntent(
                action=IntentAction.QUESTION,
                target=text,
                modifiers=tuple(self.extract_modifiers(text)),
                confidence=QUESTION_CONFIDENCE
            )
        
        return QueryIntent(
            action=IntentAction.SEARCH,
            target=text,
            modifiers=tuple(self.extract_modifiers(text)),
            confidence=DEFAULT_CONFIDENCE
        )
    
    def match_rule(self, normalized: str) -> Optional[Tuple[IntentAction, re.Pattern]]:
        """Return the (action, pattern) of the first rule matching the normalized input"""
        for action, patterns in self.rules:
            for pattern in patterns:
                if pattern.search(normalized):
                    return action, pattern
        return None

    @staticmethod
    def is_url(text: str) -> bool:
        """Absolute URL or something that looks like a bare domain"""
        try:
            parsed = urlparse(text)
        except ValueError:
            return False
        if parsed.scheme and parsed.netloc:
            return True
        return any(pattern.search(text) for pattern in URL_PATTERNS)
    
    @staticmethod
    def _extract_target(text: str, pattern: re.Pattern) -> str:
        cleaned = pattern.sub("", text, count=1).strip()
        return cleaned or text
    
    @staticmethod
    def extract_modifiers(text: str) -> List[str]:
        """Time and topic tags in encounter order of the word tables"""
        modifiers = [f"time:{word}" for word in TIME_MODIFIERS if word in text]
        modifiers.extend(f"topic:{word}" for word in TOPIC_MODIFIERS if word in text)
        if any(keyword in text for keyword in AI_KEYWORDS):
            modifiers.append("topic:AI")
        return modifiers
    
    @staticmethod
    def determine_query_type(intent: QueryIntent) -> QueryType:
        """Lookup the query type for an intent action"""
        return QUERY_TYPES.get(intent.action, QueryType.SEARCH)
    
    def get_supported_intents(self) -> List[str]:
        """Rule names in precedence order"""
        return [action.value for action, _ in self.rules]
