"""
Match predicates for the three note search dialects.

``create_match_predicate`` turns a query string and a search type into a pure
function ``content -> MatchOutcome``. The predicate is built once per search
and then applied to every file body, line or entry name.
"""

import re
import logging
from typing import Callable, Union

from ..models.search_query import SearchType
from ..models.search_results import MatchOutcome
from . import time_util
from .expression import (
    ContentSearcher,
    ExpressionError,
    build_scope,
    compile_expression,
    count_occurrences_lower,
)


logger = logging.getLogger(__name__)

# Upper bound on the characters a single ``*`` may span in wildcard queries
WILDCARD_MAX_SPAN = 25

MatchPredicate = Callable[[str], MatchOutcome]


def count_occurrences(content: str, query: str) -> int:
    """Count case-insensitive, non-overlapping occurrences of query in content."""
    return count_occurrences_lower(content.lower(), query.lower())


def wildcard_to_regex(pattern: str) -> re.Pattern:
    """
    Compile a wildcard query into a case-insensitive regex.

    Each ``*`` lazily matches at most WILDCARD_MAX_SPAN characters, so a gap
    stops at the nearest continuation and never joins occurrences far apart.
    """
    regex = re.escape(pattern).replace(r'\*', '.{0,%d}?' % WILDCARD_MAX_SPAN)
    return re.compile(regex, re.IGNORECASE)


def _no_match(content: str) -> MatchOutcome:
    return MatchOutcome(matches=False, match_count=0)


def create_literal_predicate(query_text: str) -> MatchPredicate:
    query_lower = query_text.lower()

    def predicate(content: str) -> MatchOutcome:
        match_count = count_occurrences_lower(content.lower(), query_lower)
        return MatchOutcome(matches=match_count > 0, match_count=match_count)

    return predicate


def create_wildcard_predicate(query_text: str) -> MatchPredicate:
    regex = wildcard_to_regex(query_text)

    def predicate(content: str) -> MatchOutcome:
        if not regex.search(content):
            return MatchOutcome(matches=False, match_count=0)
        match_count = sum(1 for _ in regex.finditer(content))
        return MatchOutcome(matches=True, match_count=match_count)

    return predicate


def create_advanced_predicate(query_text: str) -> MatchPredicate:
    """
    Build a predicate evaluating a sandboxed advanced expression.

    The expression is parsed once. Text that does not parse yields a predicate
    that never matches; evaluation failures on a given content string count as
    a non-match for that string only.
    """
    try:
        expression = compile_expression(query_text)
    except ExpressionError as e:
        logger.warning(f"Invalid advanced search expression {query_text!r}: {e}")
        return _no_match

    def predicate(content: str) -> MatchOutcome:
        timestamp = time_util.extract_timestamp(content)
        searcher = ContentSearcher(content)
        try:
            matches = bool(expression.evaluate(build_scope(searcher, timestamp)))
        except ExpressionError as e:
            logger.debug(f"Advanced expression failed: {e}")
            return MatchOutcome(matches=False, match_count=0)

        return MatchOutcome(
            matches=matches,
            match_count=max(searcher.match_count, 1) if matches else 0,
            found_time=timestamp if timestamp > 0 else None
        )

    return predicate


def create_match_predicate(query_text: str,
                           search_type: Union[SearchType, str] = SearchType.LITERAL) -> MatchPredicate:
    """
    Create the match predicate for a query.

    Args:
        query_text: Literal text, wildcard pattern or advanced expression
        search_type: Which dialect query_text is written in

    Returns:
        Function mapping a content string to its MatchOutcome
    """
    search_type = SearchType(search_type)

    if not query_text:
        logger.debug("Empty search query matches nothing")
        return _no_match

    if search_type == SearchType.ADVANCED:
        return create_advanced_predicate(query_text)
    if search_type == SearchType.WILDCARD:
        return create_wildcard_predicate(query_text)
    return create_literal_predicate(query_text)
