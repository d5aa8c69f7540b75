"""Tests for the rule-based intent classifier"""

import pytest

from smart_omnibox.intent_classifier import INTENT_RULES, IntentClassifier
from smart_omnibox.models import IntentAction, QueryIntent, QueryType


@pytest.fixture
def classifier():
    return IntentClassifier()


class TestUrlDetection:
    """URL-like input always navigates"""
    
    @pytest.mark.parametrize("text", [
        "https://example.com",
        "http://localhost:8080/path",
        "www.python.org",
        "github.com",
        "docs.python.org/3/library",
        "something.io",
    ])
    def test_url_like_input_navigates(self, classifier, text):
        intent = classifier.classify(text)
        
        assert intent.action == IntentAction.NAVIGATE
        assert intent.target == text
        assert intent.confidence == 0.95
        assert intent.modifiers == ()
    
    def test_example_com_scenario(self, classifier):
        intent = classifier.classify("https://example.com")
        
        assert intent == QueryIntent(
            action=IntentAction.NAVIGATE,
            target="https://example.com",
            modifiers=(),
            confidence=0.95
        )
    
    def test_plain_word_is_not_url(self, classifier):
        assert classifier.is_url("gith") is False


class TestRuleMatching:
    """Ordered rule table, first match wins"""
    
    def test_history_search_with_modifiers(self, classifier):
        intent = classifier.classify("帮我找昨天看过的AI文章")
        
        assert intent.action == IntentAction.HISTORY_SEARCH
        assert "time:昨天" in intent.modifiers
        assert "topic:AI" in intent.modifiers
        assert intent.confidence == 0.8
        assert intent.target == "AI文章"
    
    def test_summarize(self, classifier):
        intent = classifier.classify("总结当前页面")
        
        assert intent.action == IntentAction.SUMMARIZE
        # Whole input consumed by the pattern, target falls back to input
        assert intent.target == "总结当前页面"
    
    def test_translate(self, classifier):
        assert classifier.classify("把这段话翻译成英文").action == IntentAction.TRANSLATE
    
    def test_navigate_rule(self, classifier):
        assert classifier.classify("打开邮箱").action == IntentAction.NAVIGATE
    
    def test_explain_question(self, classifier):
        intent = classifier.classify("什么是闭包？")
        
        assert intent.action == IntentAction.EXPLAIN
        assert intent.confidence == 0.8
    
    def test_history_takes_precedence_over_search(self, classifier):
        # Also matches SEARCH's "搜索.*" but HISTORY_SEARCH comes first
        assert classifier.classify("搜索浏览历史").action == IntentAction.HISTORY_SEARCH
    
    def test_rule_order(self):
        assert [action for action, _ in INTENT_RULES] == [
            IntentAction.HISTORY_SEARCH,
            IntentAction.SUMMARIZE,
            IntentAction.TRANSLATE,
            IntentAction.NAVIGATE,
            IntentAction.EXPLAIN,
            IntentAction.SEARCH,
        ]
    
    def test_match_rule_uses_lowercased_input(self, classifier):
        match = classifier.match_rule("搜索 react hooks")
        
        assert match is not None
        assert match[0] == IntentAction.SEARCH


class TestFallbacks:
    """Question mark and default search"""
    
    def test_default_search(self, classifier):
        intent = classifier.classify("python tutorial")
        
        assert intent.action == IntentAction.SEARCH
        assert intent.target == "python tutorial"
        assert intent.confidence == 0.5
    
    def test_default_search_keeps_modifiers(self, classifier):
        intent = classifier.classify("最近的AI新闻")
        
        assert intent.modifiers == ("time:最近", "topic:AI")
    
    def test_modifier_order_follows_word_tables(self, classifier):
        modifiers = classifier.extract_modifiers("关于人工智能 今天 昨天")
        
        assert modifiers == ["time:昨天", "time:今天", "topic:关于", "topic:AI"]
    
    def test_question_mark_mid_input(self, classifier):
        intent = classifier.classify("rust? or go")
        
        assert intent.action == IntentAction.QUESTION
        assert intent.target == "rust? or go"
        assert intent.confidence == 0.7
        assert intent.modifiers == ()
    
    def test_question_keeps_modifiers(self, classifier):
        intent = classifier.classify("今天 rust？ or go")
        
        assert intent.action == IntentAction.QUESTION
        assert intent.modifiers == ("time:今天",)
    
    def test_classify_is_idempotent(self, classifier):
        assert classifier.classify("帮我找昨天看过的AI文章") == classifier.classify("帮我找昨天看过的AI文章")


class TestQueryType:
    
    @pytest.mark.parametrize("action,expected", [
        (IntentAction.NAVIGATE, QueryType.URL),
        (IntentAction.HISTORY_SEARCH, QueryType.HISTORY_SEARCH),
        (IntentAction.SUMMARIZE, QueryType.COMMAND),
        (IntentAction.TRANSLATE, QueryType.COMMAND),
        (IntentAction.EXPLAIN, QueryType.QUESTION),
        (IntentAction.QUESTION, QueryType.QUESTION),
        (IntentAction.SEARCH, QueryType.SEARCH),
    ])
    def test_determine_query_type(self, classifier, action, expected):
        intent = QueryIntent(action=action, target="x", confidence=0.5)
        assert classifier.determine_query_type(intent) == expected
