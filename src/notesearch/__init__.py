"""
notesearch - Core Package

Folder search engine for a Markdown/text note browser: literal, wildcard and
sandboxed advanced-expression queries over note contents or entry names.
"""

__version__ = "0.1.0"
__author__ = "notesearch Team"

from .tools.folder_search import search_folder, FolderSearcher

__all__ = ['search_folder', 'FolderSearcher']
