"""
Unit tests for the filesystem walker module.

Tests directory traversal, subtree pruning, entry filtering, error
tolerance and cancellation of the FSWalker class.
"""

import os
import tempfile
import shutil
from pathlib import Path
from unittest.mock import patch

import pytest

from notesearch.tools.fs_walker import CancellationToken, FSWalker, SearchCancelled


class TestFSWalker:
    """Test cases for the FSWalker class."""

    def setup_method(self):
        """Set up test fixtures."""
        self.temp_dir = tempfile.mkdtemp()
        self.test_root = Path(self.temp_dir)
        self._create_test_structure()

    def teardown_method(self):
        """Clean up test fixtures."""
        if os.path.exists(self.temp_dir):
            shutil.rmtree(self.temp_dir)

    def _create_test_structure(self):
        """Create a small tree of notes and tool directories."""
        test_files = [
            "b.md",
            "a.txt",
            "docs/guide.md",
            "docs/deep/nested/leaf.md",
            ".git/config",
            ".git/objects/pack.md",
            "images/photo.jpg",
        ]

        for file_path in test_files:
            full_path = self.test_root / file_path
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_text(f"Content of {file_path}")

    def _rel(self, paths):
        return [os.path.relpath(p, self.temp_dir) for p in paths]

    def test_walk_files(self):
        """Files are yielded as full paths in name order per directory."""
        walker = FSWalker()
        paths = list(walker.walk(self.temp_dir))

        assert all(os.path.isabs(p) for p in paths)
        assert self._rel(paths)[:2] == ["a.txt", "b.md"]
        assert os.path.join("docs", "deep", "nested", "leaf.md") in self._rel(paths)
        assert len(paths) == 7

    def test_walk_dirs_only(self):
        walker = FSWalker()
        paths = self._rel(walker.walk(self.temp_dir, include_files=False, include_dirs=True))

        assert "docs" in paths
        assert os.path.join("docs", "deep", "nested") in paths
        assert "." not in paths
        assert not any(p.endswith(".md") for p in paths)

    def test_root_is_never_yielded(self):
        walker = FSWalker()
        paths = list(walker.walk(self.temp_dir, include_files=True, include_dirs=True))
        assert os.path.abspath(self.temp_dir) not in paths

    def test_pruned_subtree_is_not_entered(self):
        seen = []

        def descend(name, path):
            return name != ".git"

        def include(name, path):
            seen.append(path)
            return True

        walker = FSWalker(descend, include)
        paths = self._rel(walker.walk(self.temp_dir, include_dirs=True))

        assert not any(p.startswith(".git") for p in paths)
        assert not any(os.sep + ".git" in p for p in seen)
        assert walker.get_stats()['directories_pruned'] == 1

    def test_include_filter(self):
        walker = FSWalker(should_include=lambda name, path: name.endswith(".md"))
        paths = self._rel(walker.walk(self.temp_dir))

        assert "a.txt" not in paths
        assert "b.md" in paths
        assert os.path.join(".git", "objects", "pack.md") in paths

    def test_hook_helpers(self):
        walker = FSWalker(lambda name, path: name != "skip", lambda name, path: name.endswith(".md"))
        assert walker.should_descend(self.test_root / "docs")
        assert not walker.should_descend(self.test_root / "skip")
        assert walker.should_include(self.test_root / "b.md")
        assert not walker.should_include(self.test_root / "a.txt")

    def test_nonexistent_root(self):
        walker = FSWalker()
        assert list(walker.walk(os.path.join(self.temp_dir, "missing"))) == []
        assert walker.get_stats()['errors'] == 1

    def test_root_is_a_file(self):
        walker = FSWalker()
        assert list(walker.walk(self.test_root / "b.md")) == []

    def test_unreadable_subtree_is_skipped(self):
        real_scandir = os.scandir
        locked = str(self.test_root / "docs")

        def fake_scandir(path='.'):
            if str(path) == locked:
                raise PermissionError(13, "Permission denied", str(path))
            return real_scandir(path)

        walker = FSWalker()
        with patch('os.scandir', side_effect=fake_scandir):
            paths = self._rel(walker.walk(self.temp_dir))

        assert "b.md" in paths
        assert not any(p.startswith("docs") for p in paths)
        assert walker.get_stats()['errors'] == 1

    def test_cancellation(self):
        token = CancellationToken()
        walker = FSWalker(cancel_token=token)
        iterator = walker.walk(self.temp_dir)
        next(iterator)
        token.cancel()

        with pytest.raises(SearchCancelled):
            list(iterator)

    def test_stats_reset(self):
        walker = FSWalker()
        list(walker.walk(self.temp_dir))
        assert walker.get_stats()['entries_yielded'] == 7
        assert walker.get_stats()['directories_traversed'] > 0

        walker.reset_stats()
        assert walker.get_stats() == {
            'directories_traversed': 0,
            'directories_pruned': 0,
            'entries_yielded': 0,
            'errors': 0
        }


class TestCancellationToken:
    """Test cases for CancellationToken."""

    def test_initial_state(self):
        token = CancellationToken()
        assert not token.is_cancelled
        token.raise_if_cancelled()

    def test_cancel(self):
        token = CancellationToken()
        token.cancel()
        assert token.is_cancelled
        with pytest.raises(SearchCancelled):
            token.raise_if_cancelled()
