"""
Search tools for notesearch.

This module contains the folder walker, the query dialect implementations and
the search orchestrator built on top of them.
"""

from .fs_walker import FSWalker, CancellationToken, SearchCancelled
from .folder_search import FolderSearcher, search_folder, run_definition
from .folder_analysis import analyze_folder_hashtags

__all__ = [
    'FSWalker',
    'CancellationToken',
    'SearchCancelled',
    'FolderSearcher',
    'search_folder',
    'run_definition',
    'analyze_folder_hashtags',
]
