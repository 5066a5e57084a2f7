"""
Filesystem walker for notesearch.

This module provides recursive directory traversal with two hooks: one that
decides whether a directory is entered at all (so ignored subtrees cost no
I/O) and one that decides whether an entry is yielded. Traversal errors in a
subtree are logged and skipped, never raised.
"""

import os
import threading
import logging
from pathlib import Path
from typing import Callable, Dict, Iterator, Optional, Union


logger = logging.getLogger(__name__)

EntryFilter = Callable[[str, str], bool]


class SearchCancelled(Exception):
    """Raised when a scan is stopped through its CancellationToken."""
    pass


class CancellationToken:
    """
    Cooperative cancellation flag shared between a caller and a running scan.

    The walker checks it between directory entries and the searcher between
    files; ``cancel()`` may be called from any thread.
    """

    def __init__(self):
        self._event = threading.Event()

    def cancel(self) -> None:
        self._event.set()

    @property
    def is_cancelled(self) -> bool:
        return self._event.is_set()

    def raise_if_cancelled(self) -> None:
        if self._event.is_set():
            raise SearchCancelled("Search was cancelled")


def _always(name: str, path: str) -> bool:
    return True


class FSWalker:
    """
    Recursive directory walker with subtree pruning.

    Args:
        should_descend: ``(dir_name, dir_path) -> bool``; False prunes the subtree
        should_include: ``(entry_name, entry_path) -> bool``; False skips the entry
        cancel_token: Optional token checked between directory entries
    """

    def __init__(self,
                 should_descend: Optional[EntryFilter] = None,
                 should_include: Optional[EntryFilter] = None,
                 cancel_token: Optional[CancellationToken] = None):
        self._should_descend = should_descend or _always
        self._should_include = should_include or _always
        self.cancel_token = cancel_token
        self._lock = threading.Lock()
        self._stats = self._empty_stats()

    @staticmethod
    def _empty_stats() -> Dict[str, int]:
        return {
            'directories_traversed': 0,
            'directories_pruned': 0,
            'entries_yielded': 0,
            'errors': 0
        }

    def should_descend(self, dir_path: Union[str, Path]) -> bool:
        """Check whether the walker enters a directory."""
        dir_path = str(dir_path)
        return self._should_descend(os.path.basename(dir_path), dir_path)

    def should_include(self, entry_path: Union[str, Path]) -> bool:
        """Check whether the walker yields an entry."""
        entry_path = str(entry_path)
        return self._should_include(os.path.basename(entry_path), entry_path)

    def walk(self, root: Union[str, Path],
             include_files: bool = True,
             include_dirs: bool = False) -> Iterator[str]:
        """
        Walk a directory tree and yield full entry paths.

        Directories are yielded when include_dirs is set and they pass both
        hooks; the root itself is never yielded. Entries of each directory are
        visited in name order. Symlinked directories are listed but not
        followed.

        Args:
            root: Directory to walk
            include_files: Yield files
            include_dirs: Yield directories

        Yields:
            Absolute paths of matching entries

        Raises:
            SearchCancelled: If the cancel token fires during the walk
        """
        root_path = os.path.abspath(str(root))
        if not os.path.isdir(root_path):
            logger.warning(f"Search root is not a readable directory: {root_path}")
            self._count('errors')
            return

        for current_dir, subdirs, files in os.walk(root_path, onerror=self._on_walk_error):
            self._count('directories_traversed')

            kept_dirs = []
            for dir_name in sorted(subdirs):
                self._check_cancelled()
                dir_path = os.path.join(current_dir, dir_name)
                if not self._should_descend(dir_name, dir_path):
                    self._count('directories_pruned')
                    continue
                kept_dirs.append(dir_name)
                if include_dirs and self._should_include(dir_name, dir_path):
                    self._count('entries_yielded')
                    yield dir_path

            # Prune ignored subtrees before os.walk enters them
            subdirs[:] = kept_dirs

            if not include_files:
                continue

            for file_name in sorted(files):
                self._check_cancelled()
                file_path = os.path.join(current_dir, file_name)
                if self._should_include(file_name, file_path):
                    self._count('entries_yielded')
                    yield file_path

    def _check_cancelled(self) -> None:
        if self.cancel_token is not None:
            self.cancel_token.raise_if_cancelled()

    def _on_walk_error(self, error: OSError) -> None:
        logger.warning(f"Skipping unreadable directory {getattr(error, 'filename', '')}: {error}")
        self._count('errors')

    def _count(self, key: str) -> None:
        with self._lock:
            self._stats[key] += 1

    def get_stats(self) -> Dict[str, int]:
        """
        Get statistics about the walk.

        Returns:
            Dictionary containing traversal counters
        """
        with self._lock:
            return self._stats.copy()

    def reset_stats(self) -> None:
        """Reset the statistics counters."""
        with self._lock:
            self._stats = self._empty_stats()
