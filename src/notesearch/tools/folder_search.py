"""
Folder search orchestration for notesearch.

``FolderSearcher`` runs one query over a folder tree: it compiles the
exclusion rules and the match predicate once, walks the tree, applies the
predicate to entry names or note contents and returns results ranked by
match count. Failures on individual entries never abort the scan.
"""

import os
import re
import threading
import time
import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Dict, List, Optional, Tuple

from ..models.config import NoteSearchConfig, SearchDefinition
from ..models.search_query import SearchBlock, SearchMode, SearchQuery, SearchType
from ..models.search_results import SearchResult, sort_by_match_count
from .fs_walker import CancellationToken, FSWalker
from .ignore import build_exclude_predicate
from .matchers import MatchPredicate, create_match_predicate


logger = logging.getLogger(__name__)

NOTE_EXTENSIONS = ('.md', '.txt')

LINE_SPLIT_REGEX = re.compile(r'\r?\n')

FileTimes = Tuple[Optional[float], Optional[float]]


def is_note_file(path: str) -> bool:
    """Check whether a path has a searchable note extension."""
    return os.path.splitext(path)[1].lower() in NOTE_EXTENSIONS


def stat_times(path: str) -> FileTimes:
    """
    Get (modified, created) times in epoch milliseconds, best effort.

    Creation time comes from st_birthtime and is None on platforms that do
    not record it. Returns (None, None) if the entry cannot be stat'ed.
    """
    try:
        stat_result = os.stat(path)
    except OSError as e:
        logger.debug(f"Cannot stat {path}: {e}")
        return None, None

    created = getattr(stat_result, 'st_birthtime', None)
    return stat_result.st_mtime * 1000, (created * 1000 if created is not None else None)


class FolderSearcher:
    """
    Executes folder searches.

    The searcher holds no state between searches apart from its statistics
    counters; exclusion rules and predicates are built fresh for every query.
    """

    def __init__(self, config: Optional[NoteSearchConfig] = None):
        """
        Initialize the folder searcher.

        Args:
            config: Configuration providing resource limits (defaults apply if None)
        """
        self.config = config or NoteSearchConfig()
        self._lock = threading.Lock()
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'entries_scanned': 0,
            'files_read': 0,
            'results': 0,
            'errors': 0
        }

    def search(self, query: SearchQuery,
               cancel_token: Optional[CancellationToken] = None) -> List[SearchResult]:
        """
        Run a search and return results ranked by match count.

        Args:
            query: Search parameters
            cancel_token: Optional token to stop the scan early

        Returns:
            Results sorted by match count, highest first; ties keep discovery order

        Raises:
            SearchCancelled: If cancel_token fires before the search completes
        """
        started = time.monotonic()
        logger.info(f"Searching {query}")

        should_exclude = build_exclude_predicate(query.ignored_paths)
        predicate = create_match_predicate(query.text, query.search_type)

        if query.search_mode == SearchMode.FILENAMES:
            results = self._search_filenames(query.folder_path, should_exclude, predicate, cancel_token)
        else:
            results = self._search_content(query, should_exclude, predicate, cancel_token)

        results = sort_by_match_count(results)
        self._count('results', len(results))

        logger.info(f"Search finished with {len(results)} results in {time.monotonic() - started:.2f}s")
        return results

    def _search_filenames(self, root: str, should_exclude, predicate: MatchPredicate,
                          cancel_token: Optional[CancellationToken]) -> List[SearchResult]:
        """Match entry names of all files and folders under root."""
        def descend(name: str, path: str) -> bool:
            return not should_exclude(name, path)

        files_walker = FSWalker(descend, descend, cancel_token)
        dirs_walker = FSWalker(descend, None, cancel_token)

        # The two listings share no state, so they run side by side
        with ThreadPoolExecutor(max_workers=2) as executor:
            files_future = executor.submit(lambda: list(files_walker.walk(root, include_files=True)))
            dirs_future = executor.submit(
                lambda: list(dirs_walker.walk(root, include_files=False, include_dirs=True))
            )
            entries = files_future.result() + dirs_future.result()

        for walker in (files_walker, dirs_walker):
            self._count('errors', walker.get_stats()['errors'])

        results = []
        for entry_path in entries:
            self._count('entries_scanned')
            outcome = predicate(os.path.basename(entry_path))
            if not outcome.matches:
                continue

            modified_time, created_time = stat_times(entry_path)
            results.append(SearchResult(
                path=entry_path,
                relative_path=os.path.relpath(entry_path, root),
                match_count=outcome.match_count,
                found_time=outcome.found_time,
                modified_time=modified_time,
                created_time=created_time
            ))

        return results

    def _search_content(self, query: SearchQuery, should_exclude, predicate: MatchPredicate,
                        cancel_token: Optional[CancellationToken]) -> List[SearchResult]:
        """Match the contents of note files under the query root."""
        root = query.folder_path

        def descend(name: str, path: str) -> bool:
            return not should_exclude(name, path)

        def include(name: str, path: str) -> bool:
            return not should_exclude(name, path) and is_note_file(path)

        walker = FSWalker(descend, include, cancel_token)
        files = list(walker.walk(root))
        self._count('errors', walker.get_stats()['errors'])
        logger.debug(f"Found {len(files)} note files to search under {root}")

        def search_one(file_path: str) -> List[SearchResult]:
            if cancel_token is not None:
                cancel_token.raise_if_cancelled()
            return self._search_file(file_path, root, query.search_block, predicate)

        results: List[SearchResult] = []
        with ThreadPoolExecutor(max_workers=self.config.limits.max_concurrent) as executor:
            # map() yields in submission order, which keeps tie order stable
            for file_results in executor.map(search_one, files):
                results.extend(file_results)

        return results

    def _search_file(self, file_path: str, root: str, block: SearchBlock,
                     predicate: MatchPredicate) -> List[SearchResult]:
        """Read one note file and match it; unreadable files yield nothing."""
        self._count('entries_scanned')
        content = self._read_file(file_path)
        if content is None:
            return []

        relative_path = os.path.relpath(file_path, root)

        if block == SearchBlock.FILE_LINES:
            matched_lines = []
            for line_number, line in enumerate(LINE_SPLIT_REGEX.split(content), 1):
                outcome = predicate(line)
                if outcome.matches:
                    matched_lines.append((line_number, line, outcome))
            if not matched_lines:
                return []

            modified_time, created_time = stat_times(file_path)
            return [
                SearchResult(
                    path=file_path,
                    relative_path=relative_path,
                    match_count=outcome.match_count,
                    line_number=line_number,
                    line_text=line,
                    found_time=outcome.found_time,
                    modified_time=modified_time,
                    created_time=created_time
                )
                for line_number, line, outcome in matched_lines
            ]

        outcome = predicate(content)
        if not outcome.matches:
            return []

        modified_time, created_time = stat_times(file_path)
        return [SearchResult(
            path=file_path,
            relative_path=relative_path,
            match_count=outcome.match_count,
            found_time=outcome.found_time,
            modified_time=modified_time,
            created_time=created_time
        )]

    def _read_file(self, file_path: str) -> Optional[str]:
        """Read a note as UTF-8, returning None if it cannot be read."""
        max_bytes = self.config.limits.max_bytes_per_file
        try:
            if max_bytes is not None and os.path.getsize(file_path) > max_bytes:
                logger.debug(f"Skipping large file: {file_path}")
                return None
            with open(file_path, 'r', encoding='utf-8', errors='replace', newline='') as f:
                content = f.read()
        except OSError as e:
            logger.debug(f"Skipping unreadable file {file_path}: {e}")
            self._count('errors')
            return None

        self._count('files_read')
        return content

    def _count(self, key: str, amount: int = 1) -> None:
        with self._lock:
            self._stats[key] += amount

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics accumulated across searches run by this searcher.

        Returns:
            Dictionary containing operation statistics
        """
        with self._lock:
            return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        with self._lock:
            self._stats = self._empty_stats()


def search_folder(folder_path: str,
                  query: str,
                  search_type: str = SearchType.LITERAL.value,
                  search_mode: str = SearchMode.CONTENT.value,
                  search_block: str = SearchBlock.ENTIRE_FILE.value,
                  ignored_paths: Optional[List[str]] = None,
                  *,
                  config: Optional[NoteSearchConfig] = None,
                  cancel_token: Optional[CancellationToken] = None) -> List[SearchResult]:
    """
    Search a folder for notes or entries matching a query.

    Args:
        folder_path: Root folder to search
        query: Search text, wildcard pattern or advanced expression
        search_type: 'literal', 'wildcard' or 'advanced'
        search_mode: 'content' (note bodies) or 'filenames'
        search_block: 'entire-file' or 'file-lines'
        ignored_paths: Name/path patterns to exclude (``*`` wildcards)
        config: Optional configuration supplying resource limits
        cancel_token: Optional token to stop the scan early

    Returns:
        List of SearchResult sorted by match count, highest first
    """
    search_query = SearchQuery(
        folder_path=folder_path,
        text=query,
        search_type=search_type,
        search_mode=search_mode,
        search_block=search_block,
        ignored_paths=ignored_paths or []
    )
    return FolderSearcher(config).search(search_query, cancel_token)


def run_definition(definition: SearchDefinition,
                   folder_path: str,
                   config: Optional[NoteSearchConfig] = None,
                   cancel_token: Optional[CancellationToken] = None) -> List[SearchResult]:
    """
    Run a saved search against a folder using the configured ignore patterns.

    Args:
        definition: Saved search to run
        folder_path: Root folder to search
        config: Configuration supplying ignore patterns and limits

    Returns:
        List of SearchResult sorted by match count, highest first
    """
    config = config or NoteSearchConfig()
    query = definition.to_query(folder_path, config.ignored_paths)
    logger.info(f"Running saved search '{definition.name}'")
    return FolderSearcher(config).search(query, cancel_token)
