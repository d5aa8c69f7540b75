"""Suggestions derived from the page the user is viewing"""

from typing import List

from .models import PageContext, Suggestion, SuggestionType

VIDEO_SITES = ("youtube.com", "bilibili.com", "youku.com")
SHOPPING_SITES = ("taobao.com", "jd.com", "tmall.com", "amazon.com")
SHOPPING_KEYWORDS = ("购买", "价格", "商品", "添加到购物车", "立即购买", "¥", "$")
QUESTION_WORDS = ("什么", "为什么", "怎么", "如何", "哪里", "哪个", "谁", "何时", "多少")


class ContextAwareSuggestionProvider:
    """Page-type and input-relevance heuristics"""
    
    def generate_context_suggestions(self, context: PageContext, text: str) -> List[Suggestion]:
        """Suggestions for the page, biased by what has been typed so far"""
        suggestions: List[Suggestion] = []
        
        # Page-level suggestions only while the input is still short
        if len(text.strip()) < 3:
            if self.is_article_page(context):
                suggestions.extend(self._article_suggestions(context))
            if self.is_video_page(context):
                suggestions.extend(self._video_suggestions(context))
            if self.is_shopping_page(context):
                suggestions.extend(self._shopping_suggestions(context))
        else:
            suggestions.extend(self._input_suggestions(text, context))
        
        if self.is_github_page(context):
            suggestions.extend(self._github_suggestions(context))
        
        if text and self.has_related_content(text, context):
            suggestions.extend(self._related_content_suggestions(text))
        
        return suggestions
    
    def is_article_page(self, context: PageContext) -> bool:
        return (
            len(context.content) > 1000
            and len(context.headings) > 0
            and not self.is_video_page(context)
        )
    
    def is_video_page(self, context: PageContext) -> bool:
        return (
            any(site in context.url for site in VIDEO_SITES)
            or "视频" in context.title
            or "播放" in context.content
            or "video" in context.content
        )
    
    def is_shopping_page(self, context: PageContext) -> bool:
        return (
            any(site in context.url for site in SHOPPING_SITES)
            or any(
                keyword in context.content or keyword in context.title
                for keyword in SHOPPING_KEYWORDS
            )
        )
    
    def is_github_page(self, context: PageContext) -> bool:
        return "github.com" in context.url
    
    def has_related_content(self, text: str, context: PageContext) -> bool:
        """Case-insensitive overlap of the input with title, content or any heading"""
        needle = text.lower()
        return (
            needle in context.content.lower()
            or needle in context.title.lower()
            or any(needle in heading.lower() for heading in context.headings)
        )
    
    @staticmethod
    def is_question(text: str) -> bool:
        lowered = text.lower()
        return (
            any(word in lowered for word in QUESTION_WORDS)
            or "?" in lowered
            or "？" in lowered
        )
    
    def _article_suggestions(self, context: PageContext) -> List[Suggestion]:
        return [
            Suggestion(
                id="article-summarize",
                type=SuggestionType.AI_ANSWER,
                title="总结这篇文章",
                description="生成文章要点摘要",
                action="summarize:current_page",
                icon="📄",
                confidence=0.85
            ),
            Suggestion(
                id="article-keypoints",
                type=SuggestionType.AI_ANSWER,
                title="提取关键观点",
                description="识别文章中的核心观点",
                action="extract_keypoints:current_page",
                icon="🎯",
                confidence=0.8
            ),
            Suggestion(
                id="article-related",
                type=SuggestionType.SEARCH,
                title=f"搜索相关内容：{context.title[:20]}",
                description="查找相关文章和资源",
                action=f"search:{context.title}",
                icon="🔗",
                confidence=0.75
            ),
        ]
    
    def _video_suggestions(self, context: PageContext) -> List[Suggestion]:
        return [
            Suggestion(
                id="video-summarize",
                type=SuggestionType.AI_ANSWER,
                title="总结视频内容",
                description="基于视频标题和描述生成摘要",
                action="summarize:current_video",
                icon="🎬",
                confidence=0.8
            ),
            Suggestion(
                id="video-transcript",
                type=SuggestionType.COMMAND,
                title="获取视频字幕",
                description="尝试提取视频字幕内容",
                action="get_transcript:current_video",
                icon="📝",
                confidence=0.7
            ),
        ]
    
    def _shopping_suggestions(self, context: PageContext) -> List[Suggestion]:
        return [
            Suggestion(
                id="price-compare",
                type=SuggestionType.SEARCH,
                title="比较商品价格",
                description="在其他平台查找相同商品",
                action=f"price_compare:{context.title}",
                icon="💰",
                confidence=0.8
            ),
            Suggestion(
                id="product-reviews",
                type=SuggestionType.SEARCH,
                title="查看商品评价",
                description="搜索用户评价和使用体验",
                action=f"search:{context.title} 评价 评测",
                icon="⭐",
                confidence=0.75
            ),
        ]
    
    def _input_suggestions(self, text: str, context: PageContext) -> List[Suggestion]:
        if not self.is_question(text):
            return [
                Suggestion(
                    id="learn-about",
                    type=SuggestionType.AI_ANSWER,
                    title=f"了解更多：{text}",
                    description="获取相关知识和信息",
                    action=f"learn:{text}",
                    icon="📚",
                    confidence=0.8
                )
            ]
        
        suggestions = [
            Suggestion(
                id="explain-topic",
                type=SuggestionType.AI_ANSWER,
                title=f"详细解释：{text}",
                description="获得深入的解答和分析",
                action=f"explain:{text}",
                icon="🧠",
                confidence=0.9
            )
        ]
        if self.has_related_content(text, context):
            suggestions.append(Suggestion(
                id="relate-to-page",
                type=SuggestionType.AI_ANSWER,
                title=f"结合当前页面回答：{text}",
                description="基于页面内容提供相关答案",
                action=f"ask_with_context:{text}",
                icon="📖",
                confidence=0.8
            ))
        return suggestions
    
    def _github_suggestions(self, context: PageContext) -> List[Suggestion]:
        suggestions = [
            Suggestion(
                id="github-readme",
                type=SuggestionType.AI_ANSWER,
                title="总结项目说明",
                description="解释项目用途和特点",
                action="explain:github_project",
                icon="📚",
                confidence=0.8
            )
        ]
        
        # Code file view
        if "/blob/" in context.url or "function" in context.content or "class" in context.content:
            suggestions.append(Suggestion(
                id="code-explain",
                type=SuggestionType.AI_ANSWER,
                title="解释代码功能",
                description="分析代码逻辑和功能",
                action="explain:code",
                icon="💻",
                confidence=0.85
            ))
        return suggestions
    
    def _related_content_suggestions(self, text: str) -> List[Suggestion]:
        return [
            Suggestion(
                id="explain-in-context",
                type=SuggestionType.AI_ANSWER,
                title=f"在当前页面中解释\"{text}\"",
                description="基于页面内容解释概念",
                action=f"explain:{text}:current_page",
                icon="💡",
                confidence=0.8
            ),
            Suggestion(
                id="find-in-page",
                type=SuggestionType.COMMAND,
                title=f"在页面中查找\"{text}\"",
                description="高亮显示相关内容",
                action=f"find_in_page:{text}",
                icon="🔍",
                confidence=0.75
            ),
        ]
