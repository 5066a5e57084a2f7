"""
Unit tests for the match predicate builder.

Tests literal, wildcard and advanced predicates on plain strings, without
touching the filesystem.
"""

from unittest.mock import patch

import pytest

from notesearch.models.search_query import SearchType
from notesearch.models.search_results import MatchOutcome
from notesearch.tools.matchers import (
    WILDCARD_MAX_SPAN,
    count_occurrences,
    create_match_predicate,
    wildcard_to_regex,
)


class TestLiteralPredicate:
    """Test cases for literal matching."""

    def test_counts_occurrences(self):
        outcome = create_match_predicate("apple", SearchType.LITERAL)("apple apple apple")
        assert outcome == MatchOutcome(matches=True, match_count=3)

    def test_case_insensitive(self):
        outcome = create_match_predicate("APPLE", "literal")("Apple pie")
        assert outcome.matches
        assert outcome.match_count == 1

    def test_no_match(self):
        outcome = create_match_predicate("pear", "literal")("apple")
        assert not outcome.matches
        assert outcome.match_count == 0
        assert outcome.found_time is None

    def test_non_overlapping(self):
        assert count_occurrences("aaaaa", "aa") == 2

    def test_regex_characters_are_literal(self):
        predicate = create_match_predicate("(H2O)", "literal")
        assert predicate("Water (H2O) is wet").match_count == 1
        assert not predicate("H2O").matches

    def test_unicode(self):
        assert create_match_predicate("CAFÉ", "literal")("un café noir").matches

    @pytest.mark.parametrize('content', ["", "abc", "apple"])
    def test_matches_iff_count_positive(self, content):
        outcome = create_match_predicate("a", "literal")(content)
        assert outcome.matches == (outcome.match_count > 0)


class TestWildcardPredicate:
    """Test cases for bounded wildcard matching."""

    def test_both_phrases_match(self):
        outcome = create_match_predicate("hel*world", "wildcard")("Hello World hello world")
        assert outcome.matches
        assert outcome.match_count == 2

    def test_gap_limit(self):
        predicate = create_match_predicate("A*B", "wildcard")
        assert predicate("A" + "x" * WILDCARD_MAX_SPAN + "B").matches
        assert not predicate("A" + "x" * (WILDCARD_MAX_SPAN + 1) + "B").matches

    def test_gap_does_not_cross_lines(self):
        assert not create_match_predicate("start*end", "wildcard")("start\nend").matches

    def test_multiple_wildcards(self):
        assert create_match_predicate("c*t*mat", "wildcard")("the cat sat on the mat").matches

    def test_leading_and_trailing_wildcards(self):
        assert create_match_predicate("*world", "wildcard")("hello world").matches
        assert create_match_predicate("hello*", "wildcard")("hello world").matches

    def test_metacharacters_are_escaped(self):
        predicate = create_match_predicate("$19*", "wildcard")
        assert predicate("Price is $19.99 plus tax").matches
        assert not create_match_predicate("a.c", "wildcard")("abc").matches

    def test_regex_shape(self):
        assert wildcard_to_regex("a*b").pattern == "a.{0,25}?b"

    def test_no_match(self):
        outcome = create_match_predicate("zzz*qqq", "wildcard")("nothing here")
        assert outcome == MatchOutcome(matches=False, match_count=0)


class TestAdvancedPredicate:
    """Test cases for sandboxed advanced expressions."""

    def test_content_query_without_date_is_not_past(self):
        outcome = create_match_predicate('contains("TODO") && past(ts)', "advanced")("TODO: write tests")
        assert not outcome.matches
        assert outcome.match_count == 0
        assert outcome.found_time is None

    def test_content_query_with_past_date(self):
        content = "TODO 1/1/2020 review, todo again"
        outcome = create_match_predicate('$("todo") && past(ts)', "advanced")(content)
        assert outcome.matches
        assert outcome.match_count == 2
        assert outcome.found_time is not None and outcome.found_time > 0

    def test_boolean_only_expression_ranks_one(self):
        outcome = create_match_predicate("true", "advanced")("anything")
        assert outcome.matches
        assert outcome.match_count == 1

    def test_false_expression(self):
        outcome = create_match_predicate("false", "advanced")("anything")
        assert not outcome.matches

    def test_truthy_values(self):
        assert create_match_predicate("42", "advanced")("x").matches
        assert create_match_predicate("'text'", "advanced")("x").matches
        assert not create_match_predicate("0", "advanced")("x").matches

    def test_found_time_reported_even_without_content_calls(self):
        with patch('notesearch.tools.time_util.now_ms', return_value=0):
            outcome = create_match_predicate("future(ts)", "advanced")("due 6/1/2030")
        assert outcome.matches
        assert outcome.found_time > 0

    def test_syntax_error_never_raises(self):
        predicate = create_match_predicate('$("a" &&', "advanced")
        assert predicate("a") == MatchOutcome(matches=False, match_count=0)

    def test_runtime_error_is_a_non_match(self):
        predicate = create_match_predicate('$("a") && missing(ts)', "advanced")
        assert not predicate("a").matches
        assert not predicate("b").matches

    def test_string_day_window_is_a_non_match(self):
        predicate = create_match_predicate('past(ts, "' + "x" * 20000 + '")', "advanced")
        assert predicate("TODO 1/1/2020") == MatchOutcome(matches=False, match_count=0)

    def test_oversized_number_never_raises(self):
        predicate = create_match_predicate("9" * 5000 + " > 1", "advanced")
        assert not predicate("anything").matches


class TestEmptyQuery:
    """Empty query text never matches."""

    @pytest.mark.parametrize('search_type', ["literal", "wildcard", "advanced"])
    def test_empty_query(self, search_type):
        outcome = create_match_predicate("", search_type)("some content")
        assert not outcome.matches
        assert outcome.match_count == 0

    def test_single_space_is_a_real_query(self):
        assert create_match_predicate(" ", "literal")("a b c").match_count == 2

    def test_invalid_search_type(self):
        with pytest.raises(ValueError):
            create_match_predicate("x", "regex")
