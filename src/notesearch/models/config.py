"""
Configuration data models for notesearch.

This module defines the settings the search engine reads: default ignore
patterns, saved search definitions and resource limits for folder scans.
"""

from typing import Dict, List, Optional, Any
from pydantic import BaseModel, Field, field_validator, model_validator

from .search_query import SearchBlock, SearchMode, SearchQuery, SearchType


DEFAULT_IGNORED_PATHS = [
    ".git",
    ".svn",
    ".hg",
    "node_modules",
    "__pycache__",
    ".DS_Store",
]


class SearchDefinition(BaseModel):
    """
    A named, saved search.

    Field names follow the saved-settings schema of the note browser, where
    the search *target* is content/filenames and the search *mode* is the
    query dialect.

    Attributes:
        name: Display name, unique within a configuration
        search_text: Query text or advanced expression
        search_target: Search file contents or entry names
        search_mode: Query dialect
        search_block: Whole file or per line
    """

    name: str = Field(..., min_length=1, description="Display name")
    search_text: str = Field(..., description="Query text")
    search_target: SearchMode = Field(SearchMode.CONTENT, description="Contents or names")
    search_mode: SearchType = Field(SearchType.LITERAL, description="Query dialect")
    search_block: SearchBlock = Field(SearchBlock.ENTIRE_FILE, description="Whole file or per line")

    @field_validator('name')
    @classmethod
    def validate_name(cls, v: str) -> str:
        if not v.strip():
            raise ValueError("Search definition name cannot be empty")
        return v.strip()

    def to_query(self, folder_path: str, ignored_paths: Optional[List[str]] = None) -> SearchQuery:
        """Build the query this definition describes for a given folder."""
        return SearchQuery(
            folder_path=folder_path,
            text=self.search_text,
            search_type=self.search_mode,
            search_mode=self.search_target,
            search_block=self.search_block,
            ignored_paths=ignored_paths or []
        )


class LimitsConfig(BaseModel):
    """
    Resource limits for a folder scan.

    Attributes:
        max_concurrent: Worker threads used to read and match files
        max_bytes_per_file: Files larger than this are skipped (None = no limit)
    """

    max_concurrent: int = Field(4, gt=0, description="Maximum concurrent file reads")
    max_bytes_per_file: Optional[int] = Field(None, gt=0, description="Maximum file size to read (bytes)")

    def to_dict(self) -> Dict[str, Any]:
        return self.model_dump()


class NoteSearchConfig(BaseModel):
    """
    Main configuration for notesearch.

    Attributes:
        ignored_paths: Ignore patterns applied to every search
        search_definitions: Saved searches
        limits: Resource limits
    """

    ignored_paths: List[str] = Field(
        default_factory=lambda: list(DEFAULT_IGNORED_PATHS),
        description="Ignore patterns (list or newline-separated text)"
    )
    search_definitions: List[SearchDefinition] = Field(default_factory=list, description="Saved searches")
    limits: LimitsConfig = Field(default_factory=LimitsConfig, description="Resource limits")

    @field_validator('ignored_paths', mode='before')
    @classmethod
    def validate_ignored_paths(cls, v: Any) -> List[str]:
        """Accept the newline-separated settings form as well as a list."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split('\n')
        if not isinstance(v, list):
            raise ValueError("ignored_paths must be a list or a newline-separated string")
        return [str(p).strip() for p in v if p is not None and str(p).strip()]

    @model_validator(mode='after')
    def validate_definition_names(self):
        """Saved search names must be unique."""
        seen = set()
        for definition in self.search_definitions:
            if definition.name in seen:
                raise ValueError(f"Duplicate search definition name: {definition.name}")
            seen.add(definition.name)
        return self

    def get_definition(self, name: str) -> Optional[SearchDefinition]:
        for definition in self.search_definitions:
            if definition.name == name:
                return definition
        return None

    def get_sorted_definitions(self) -> List[SearchDefinition]:
        """Saved searches in case-insensitive alphabetical order, as menus list them."""
        return sorted(self.search_definitions, key=lambda d: d.name.lower())

    def merge_ignored_paths(self, extra: Optional[List[str]] = None) -> List[str]:
        """Configured ignore patterns followed by any extra ones, without duplicates."""
        merged = list(self.ignored_paths)
        for pattern in extra or []:
            if pattern not in merged:
                merged.append(pattern)
        return merged

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return self.model_dump(mode='json')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'NoteSearchConfig':
        return cls.model_validate(data)

    def __str__(self) -> str:
        return (f"NoteSearchConfig(ignored={len(self.ignored_paths)}, "
                f"definitions={len(self.search_definitions)}, "
                f"workers={self.limits.max_concurrent})")
