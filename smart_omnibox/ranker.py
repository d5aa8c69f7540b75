"""Final ranking and merging of candidate suggestions"""

from typing import Callable, Dict, List, NamedTuple, Optional, Tuple

from .models import Suggestion, SuggestionType

MAX_SUGGESTIONS = 8


def _any(suggestion: Suggestion) -> bool:
    return True


def _title_contains(word: str) -> Callable[[Suggestion], bool]:
    def matches(suggestion: Suggestion) -> bool:
        return word in suggestion.title
    return matches


class BucketRule(NamedTuple):
    """Take up to `limit` unused suggestions of one type that satisfy `matches`

    `limit=None` means as many as there is room for; `only_below` skips the
    rule once the result already holds that many items.
    """
    suggestion_type: SuggestionType
    limit: Optional[int]
    matches: Callable[[Suggestion], bool] = _any
    only_below: Optional[int] = None


RANKING_RULES: Tuple[BucketRule, ...] = (
    BucketRule(SuggestionType.AI_ANSWER, 1),
    BucketRule(SuggestionType.SEARCH, 1, _title_contains("Google")),
    BucketRule(SuggestionType.SEARCH, 1, _title_contains("Bing")),
    BucketRule(SuggestionType.SEARCH, 1, _title_contains("百度"), only_below=6),
    BucketRule(SuggestionType.HISTORY, 2),
    BucketRule(SuggestionType.COMMAND, 2),
    BucketRule(SuggestionType.URL, 2),
    BucketRule(SuggestionType.BOOKMARK, 2),
    BucketRule(SuggestionType.AI_ANSWER, None),
)


def dedupe(suggestions: List[Suggestion]) -> List[Suggestion]:
    """Drop repeated (title, action) pairs, first occurrence wins"""
    seen = set()
    unique = []
    for suggestion in suggestions:
        key = (suggestion.title, suggestion.action)
        if key not in seen:
            seen.add(key)
            unique.append(suggestion)
    return unique


def group_by_type(suggestions: List[Suggestion]) -> Dict[SuggestionType, List[Tuple[int, Suggestion]]]:
    """Bucket by type, each bucket sorted by confidence (stable)"""
    groups: Dict[SuggestionType, List[Tuple[int, Suggestion]]] = {}
    for index, suggestion in enumerate(suggestions):
        groups.setdefault(suggestion.type, []).append((index, suggestion))
    for members in groups.values():
        members.sort(key=lambda item: item[1].confidence, reverse=True)
    return groups


def rank_and_limit(
    suggestions: List[Suggestion],
    limit: int = MAX_SUGGESTIONS,
    rules: Tuple[BucketRule, ...] = RANKING_RULES
) -> List[Suggestion]:
    """Merge candidates into a bounded, de-duplicated and diverse list"""
    groups = group_by_type(dedupe(suggestions))
    result: List[Suggestion] = []
    taken = set()
    
    for rule in rules:
        room = limit - len(result)
        if room <= 0:
            break
        if rule.only_below is not None and len(result) >= rule.only_below:
            continue
        
        count = room if rule.limit is None else min(rule.limit, room)
        picked = [
            (index, suggestion)
            for index, suggestion in groups.get(rule.suggestion_type, [])
            if index not in taken and rule.matches(suggestion)
        ][:count]
        
        for index, suggestion in picked:
            taken.add(index)
            result.append(suggestion)
    
    return result[:limit]
