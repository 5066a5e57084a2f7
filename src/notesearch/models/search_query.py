"""
Search query data models for notesearch.

This module defines the parameters of one folder search: the root folder, the
query text, which dialect the query is written in, what is searched (file
contents or entry names), the search block and the ignore patterns.
"""

from typing import Dict, List, Any
from enum import Enum
from pathlib import Path
from pydantic import BaseModel, ConfigDict, Field, field_validator


class SearchType(str, Enum):
    """Query dialects."""
    LITERAL = "literal"
    WILDCARD = "wildcard"
    ADVANCED = "advanced"


class SearchMode(str, Enum):
    """What a search is matched against."""
    CONTENT = "content"
    FILENAMES = "filenames"


class SearchBlock(str, Enum):
    """Unit of content a match predicate is applied to (content mode only)."""
    ENTIRE_FILE = "entire-file"
    FILE_LINES = "file-lines"


class SearchQuery(BaseModel):
    """
    Represents one folder search invocation.

    Attributes:
        folder_path: Root folder to scan
        text: Literal text, wildcard pattern or advanced expression
        search_type: Dialect the text is written in
        search_mode: Search file contents or file/folder names
        search_block: Match whole files or individual lines
        ignored_paths: Name/path patterns excluded from the scan (``*`` wildcards)
    """

    model_config = ConfigDict(frozen=True)

    folder_path: str = Field(..., min_length=1, description="Root folder to search")
    text: str = Field(..., description="Search text or advanced expression")
    search_type: SearchType = Field(SearchType.LITERAL, description="Query dialect")
    search_mode: SearchMode = Field(SearchMode.CONTENT, description="Search contents or names")
    search_block: SearchBlock = Field(SearchBlock.ENTIRE_FILE, description="Whole file or per line")
    ignored_paths: List[str] = Field(default_factory=list, description="Ignore patterns")

    @field_validator('folder_path')
    @classmethod
    def validate_folder_path(cls, v: str) -> str:
        """Normalize the root folder to an absolute path."""
        if not v.strip():
            raise ValueError("Folder path cannot be empty")
        return str(Path(v).expanduser().absolute())

    @field_validator('ignored_paths', mode='before')
    @classmethod
    def validate_ignored_paths(cls, v: Any) -> List[str]:
        """Accept a list or a newline-separated block; drop blank entries."""
        if v is None:
            return []
        if isinstance(v, str):
            v = v.split('\n')
        return [p.strip() for p in v if isinstance(p, str) and p.strip()]

    def is_content_search(self) -> bool:
        return self.search_mode == SearchMode.CONTENT

    def is_line_search(self) -> bool:
        """Check if matches are reported per line rather than per file."""
        return self.is_content_search() and self.search_block == SearchBlock.FILE_LINES

    def to_dict(self) -> Dict[str, Any]:
        """Convert the search query to a dictionary representation."""
        return self.model_dump(mode='json')

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'SearchQuery':
        """Create a SearchQuery instance from a dictionary."""
        return cls.model_validate(data)

    def __str__(self) -> str:
        parts = [f"Query: '{self.text}'"]
        parts.append(f"Folder: {self.folder_path}")
        parts.append(f"Type: {self.search_type.value}")
        parts.append(f"Mode: {self.search_mode.value}")

        if self.is_content_search():
            parts.append(f"Block: {self.search_block.value}")

        if self.ignored_paths:
            parts.append(f"Ignored: {len(self.ignored_paths)} patterns")

        return " | ".join(parts)
