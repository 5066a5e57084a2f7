"""
Exclusion rules for folder scans.

Ignore patterns are plain names or paths where ``*`` matches any run of
characters. A pattern must match the whole bare name or the whole path,
case-insensitively, for the entry to be excluded.
"""

import re
from typing import Callable, Iterable, List


ExcludePredicate = Callable[[str, str], bool]


def compile_ignore_pattern(pattern: str) -> re.Pattern:
    """Compile one ignore pattern into an anchored, case-insensitive regex."""
    regex = re.escape(pattern).replace(r'\*', '.*')
    return re.compile(regex, re.IGNORECASE | re.DOTALL)


def compile_ignore_patterns(patterns: Iterable[str]) -> List[re.Pattern]:
    return [compile_ignore_pattern(p.strip()) for p in patterns if p and p.strip()]


def build_exclude_predicate(patterns: Iterable[str]) -> ExcludePredicate:
    """
    Build a predicate telling whether an entry should be skipped.

    Args:
        patterns: Ignore patterns such as ``.git``, ``node_*`` or ``*.log``

    Returns:
        Function of (name, full_path) returning True when any pattern matches
        either the bare name or the full path
    """
    compiled = compile_ignore_patterns(patterns)

    def should_exclude(name: str, full_path: str) -> bool:
        return any(p.fullmatch(name) or p.fullmatch(full_path) for p in compiled)

    return should_exclude
