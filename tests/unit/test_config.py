"""
Unit tests for configuration data models.

Tests defaults, normalization of ignore patterns, saved search definitions
and resource limits.
"""

import pytest
from pydantic import ValidationError

from notesearch.models.config import (
    DEFAULT_IGNORED_PATHS,
    LimitsConfig,
    NoteSearchConfig,
    SearchDefinition,
)
from notesearch.models.search_query import SearchBlock, SearchMode, SearchType


class TestLimitsConfig:
    """Test cases for LimitsConfig."""

    def test_default_config(self):
        config = LimitsConfig()
        assert config.max_concurrent == 4
        assert config.max_bytes_per_file is None

    @pytest.mark.parametrize('kwargs', [
        {'max_concurrent': 0},
        {'max_concurrent': -2},
        {'max_bytes_per_file': 0},
    ])
    def test_invalid_limits(self, kwargs):
        with pytest.raises(ValidationError):
            LimitsConfig(**kwargs)


class TestSearchDefinition:
    """Test cases for SearchDefinition."""

    def test_defaults(self):
        definition = SearchDefinition(name="Apples", search_text="apple")
        assert definition.search_target == SearchMode.CONTENT
        assert definition.search_mode == SearchType.LITERAL
        assert definition.search_block == SearchBlock.ENTIRE_FILE

    def test_name_is_stripped(self):
        assert SearchDefinition(name="  Todo  ", search_text="x").name == "Todo"

    def test_blank_name_rejected(self):
        with pytest.raises(ValidationError):
            SearchDefinition(name="   ", search_text="x")

    def test_to_query_maps_fields(self):
        definition = SearchDefinition(
            name="Open TODOs",
            search_text='$("TODO") && !$("DONE")',
            search_target="content",
            search_mode="advanced",
            search_block="file-lines"
        )
        query = definition.to_query("/notes", [".git"])

        assert query.folder_path == "/notes"
        assert query.text == '$("TODO") && !$("DONE")'
        assert query.search_type == SearchType.ADVANCED
        assert query.search_mode == SearchMode.CONTENT
        assert query.search_block == SearchBlock.FILE_LINES
        assert query.ignored_paths == [".git"]

    def test_to_query_filenames_target(self):
        definition = SearchDefinition(name="Drafts", search_text="draft*", search_target="filenames",
                                      search_mode="wildcard")
        query = definition.to_query("/notes")

        assert query.search_mode == SearchMode.FILENAMES
        assert query.search_type == SearchType.WILDCARD
        assert query.ignored_paths == []


class TestNoteSearchConfig:
    """Test cases for NoteSearchConfig."""

    def test_default_config(self):
        config = NoteSearchConfig()

        assert config.ignored_paths == DEFAULT_IGNORED_PATHS
        assert config.ignored_paths is not DEFAULT_IGNORED_PATHS
        assert config.search_definitions == []
        assert config.limits.max_concurrent == 4

    def test_ignored_paths_from_text_block(self):
        config = NoteSearchConfig(ignored_paths="archive\n\n  *.tmp \n")
        assert config.ignored_paths == ["archive", "*.tmp"]

    def test_ignored_paths_none(self):
        assert NoteSearchConfig(ignored_paths=None).ignored_paths == []

    def test_ignored_paths_wrong_type(self):
        with pytest.raises(ValidationError):
            NoteSearchConfig(ignored_paths=42)

    def test_duplicate_definition_names(self):
        with pytest.raises(ValidationError):
            NoteSearchConfig(search_definitions=[
                {'name': "Todo", 'search_text': "a"},
                {'name': "Todo", 'search_text': "b"},
            ])

    def test_definition_lookup_and_order(self):
        config = NoteSearchConfig(search_definitions=[
            {'name': "zeta", 'search_text': "z"},
            {'name': "Alpha", 'search_text': "a"},
            {'name': "beta", 'search_text': "b"},
        ])

        assert [d.name for d in config.get_sorted_definitions()] == ["Alpha", "beta", "zeta"]
        assert config.get_definition("beta").search_text == "b"
        assert config.get_definition("missing") is None

    def test_merge_ignored_paths(self):
        config = NoteSearchConfig(ignored_paths=[".git", "archive"])
        assert config.merge_ignored_paths(["archive", "*.log"]) == [".git", "archive", "*.log"]
        assert config.merge_ignored_paths() == [".git", "archive"]

    def test_dict_round_trip(self):
        config = NoteSearchConfig(
            ignored_paths=["a"],
            search_definitions=[{'name': "n", 'search_text': "t", 'search_block': "file-lines"}],
            limits={'max_concurrent': 2}
        )
        data = config.to_dict()

        assert data['search_definitions'][0]['search_block'] == "file-lines"
        assert data['limits'] == {'max_concurrent': 2, 'max_bytes_per_file': None}
        assert NoteSearchConfig.from_dict(data) == config

    def test_str(self):
        assert str(NoteSearchConfig()) == "NoteSearchConfig(ignored=6, definitions=0, workers=4)"
