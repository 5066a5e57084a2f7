"""
Hashtag analysis over a folder of notes.

Scans the same files a content search would (``.md``/``.txt`` that survive
the ignore patterns) and counts ``#tag`` tokens across all of them.
"""

import re
import logging
from collections import Counter
from typing import List, Optional

from ..models.search_results import FolderAnalysisResult, HashtagCount
from .folder_search import is_note_file
from .fs_walker import CancellationToken, FSWalker
from .ignore import build_exclude_predicate


logger = logging.getLogger(__name__)

# '#' followed by a letter or digit, then letters, digits, '_' or '-'
HASHTAG_REGEX = re.compile(r'#[a-zA-Z0-9][a-zA-Z0-9_-]*')


def extract_hashtags(content: str) -> List[str]:
    return HASHTAG_REGEX.findall(content)


def analyze_folder_hashtags(folder_path: str,
                            ignored_paths: Optional[List[str]] = None,
                            cancel_token: Optional[CancellationToken] = None) -> FolderAnalysisResult:
    """
    Count hashtags in every note file under a folder.

    Args:
        folder_path: Root folder to scan
        ignored_paths: Name/path patterns to exclude (``*`` wildcards)
        cancel_token: Optional token to stop the scan early

    Returns:
        FolderAnalysisResult with tags sorted by count (ties keep first-seen
        order) and the number of note files found
    """
    should_exclude = build_exclude_predicate(ignored_paths or [])
    walker = FSWalker(
        lambda name, path: not should_exclude(name, path),
        lambda name, path: not should_exclude(name, path) and is_note_file(path),
        cancel_token
    )
    files = list(walker.walk(folder_path))

    counts: Counter = Counter()
    for file_path in files:
        if cancel_token is not None:
            cancel_token.raise_if_cancelled()
        try:
            with open(file_path, 'r', encoding='utf-8', errors='replace') as f:
                counts.update(extract_hashtags(f.read()))
        except OSError as e:
            logger.debug(f"Skipping unreadable file {file_path}: {e}")

    # Counter preserves insertion order, so the stable sort keeps first-seen order for ties
    hashtags = [HashtagCount(tag=tag, count=count)
                for tag, count in sorted(counts.items(), key=lambda item: item[1], reverse=True)]

    logger.info(f"Analyzed {len(files)} files under {folder_path}: {len(hashtags)} distinct hashtags")
    return FolderAnalysisResult(hashtags=hashtags, total_files=len(files))
