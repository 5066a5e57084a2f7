"""
Data models for notesearch.

This module contains all the core data structures used throughout the system.
"""

from .search_query import SearchQuery, SearchType, SearchMode, SearchBlock
from .search_results import MatchOutcome, SearchResult, HashtagCount, FolderAnalysisResult
from .config import NoteSearchConfig, LimitsConfig, SearchDefinition

__all__ = [
    'SearchQuery',
    'SearchType',
    'SearchMode',
    'SearchBlock',
    'MatchOutcome',
    'SearchResult',
    'HashtagCount',
    'FolderAnalysisResult',
    'NoteSearchConfig',
    'LimitsConfig',
    'SearchDefinition',
]
