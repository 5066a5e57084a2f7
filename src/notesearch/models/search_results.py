"""
Search results data models for notesearch.

This module defines the outcome of applying a match predicate to one piece of
content, the result records returned to callers and the hashtag analysis
summary.
"""

from typing import Dict, List, Optional, Any
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, model_validator
from pydantic.alias_generators import to_camel


class MatchOutcome(BaseModel):
    """
    Result of testing one content string against a query.

    Attributes:
        matches: Whether the content satisfies the query
        match_count: Number of occurrences found, used for ranking
        found_time: Timestamp extracted by an advanced query (epoch ms)
    """

    model_config = ConfigDict(frozen=True)

    matches: bool
    match_count: int = Field(0, ge=0)
    found_time: Optional[int] = None


class SearchResult(BaseModel):
    """
    One match site: a file, a folder, or a single line of a file.

    Serialized with camelCase keys for the UI layer; optional fields that were
    not determined are left out of ``to_dict()``.

    Attributes:
        path: Absolute path of the matched file or folder
        relative_path: Path relative to the searched folder
        match_count: Number of occurrences, the ranking key
        line_number: 1-based line number (per-line searches only)
        line_text: Raw text of the matching line (per-line searches only)
        found_time: Timestamp extracted by an advanced query (epoch ms)
        modified_time: Last modification time (epoch ms), if stat succeeded
        created_time: Creation time (epoch ms), if stat succeeded
    """

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    path: str = Field(..., min_length=1, description="Absolute path to the match")
    relative_path: str = Field(..., description="Path relative to the search root")
    match_count: int = Field(..., ge=0, description="Number of occurrences")
    line_number: Optional[int] = Field(None, ge=1, description="1-based line number")
    line_text: Optional[str] = Field(None, description="Text of the matching line")
    found_time: Optional[int] = Field(None, description="Extracted timestamp (ms)")
    modified_time: Optional[float] = Field(None, description="Last modified (ms)")
    created_time: Optional[float] = Field(None, description="Created (ms)")

    @model_validator(mode='after')
    def validate_line_fields(self):
        """Line number and line text are reported together."""
        if (self.line_number is None) != (self.line_text is None):
            raise ValueError("line_number and line_text must be set together")
        return self

    def get_filename(self) -> str:
        """Get just the entry name without directory path."""
        return Path(self.path).name

    def is_line_match(self) -> bool:
        return self.line_number is not None

    def to_dict(self) -> Dict[str, Any]:
        """Convert to a JSON-serializable dict with camelCase keys."""
        return self.model_dump(by_alias=True, exclude_none=True)

    def __str__(self) -> str:
        location = self.relative_path
        if self.is_line_match():
            location = f"{location}:{self.line_number}"
        return f"{location} (matches: {self.match_count})"


class HashtagCount(BaseModel):
    """A hashtag and how many times it occurs across a folder."""

    tag: str = Field(..., min_length=2)
    count: int = Field(..., ge=1)


class FolderAnalysisResult(BaseModel):
    """
    Hashtag summary of a folder.

    Attributes:
        hashtags: Tags with their counts, most frequent first
        total_files: Number of note files scanned
    """

    hashtags: List[HashtagCount] = Field(default_factory=list)
    total_files: int = Field(0, ge=0)

    def get_top_tags(self, n: int = 10) -> List[HashtagCount]:
        return self.hashtags[:n]

    def to_dict(self) -> Dict[str, Any]:
        return {
            'hashtags': [tag.model_dump() for tag in self.hashtags],
            'totalFiles': self.total_files,
        }


def sort_by_match_count(results: List[SearchResult]) -> List[SearchResult]:
    """Order results by match count, highest first, keeping discovery order for ties."""
    return sorted(results, key=lambda r: r.match_count, reverse=True)
