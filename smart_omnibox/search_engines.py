"""Search engine link suggestions"""

from typing import List, NamedTuple
from urllib.parse import quote

from .models import Suggestion, SuggestionType


class SearchEngine(NamedTuple):
    name: str
    icon: str
    url_template: str


SEARCH_ENGINES = (
    SearchEngine("Google", "🔍", "https://www.google.com/search?q={query}"),
    SearchEngine("Bing", "🔍", "https://www.bing.com/search?q={query}"),
    SearchEngine("百度", "🔍", "https://www.baidu.com/s?wd={query}"),
)


def encode_component(text: str) -> str:
    """Percent-encode like a URI component"""
    return quote(text, safe="-_.!~*'()")


def search_url(engine: SearchEngine, text: str) -> str:
    return engine.url_template.format(query=encode_component(text))


def get_search_suggestions(text: str) -> List[Suggestion]:
    """One link per engine, confidence stepping down in engine order"""
    return [
        Suggestion(
            id=f"search-{engine.name.lower()}",
            type=SuggestionType.SEARCH,
            title=f"在 {engine.name} 搜索",
            description=f"\"{text}\"",
            action=f"open:{search_url(engine, text)}",
            icon=engine.icon,
            confidence=round(0.6 - index * 0.05, 2)
        )
        for index, engine in enumerate(SEARCH_ENGINES)
    ]
