"""
Copyright (c) 2025 initumX (initum.x@gmail.com)
Licensed under the MIT License

core/filters.py
Inclusion predicates applied by discovery before a file is dispatched to a worker.
"""

import fnmatch
import re
from enum import Enum
from typing import Optional, Pattern

from duplicates.core.errors import ScanSetupError

MATCH_ALL_PATTERNS = (None, "", "*")


class PatternSyntax(Enum):
    GLOB = "glob"
    REGEX = "regex"


class NameFilter:
    """
    Matches file names against a glob or a regular expression.

    Glob patterns must match the whole name (case-sensitive).
    Regular expressions are searched anywhere in the name.
    '*', empty string and None match every name regardless of syntax.
    """

    def __init__(self, pattern: Optional[str] = "*", syntax: Optional[PatternSyntax] = None):
        self.pattern = pattern
        self.syntax = syntax or PatternSyntax.GLOB
        self._regex: Optional[Pattern] = None

        if pattern in MATCH_ALL_PATTERNS:
            return

        try:
            if self.syntax == PatternSyntax.REGEX:
                self._regex = re.compile(pattern)
            else:
                self._regex = re.compile(fnmatch.translate(pattern))
        except re.error as e:
            raise ScanSetupError(f"Invalid name pattern '{pattern}': {e}") from e

    @property
    def matches_all(self) -> bool:
        return self._regex is None

    def matches(self, name: str) -> bool:
        if self._regex is None:
            return True
        if self.syntax == PatternSyntax.REGEX:
            return self._regex.search(name) is not None
        return self._regex.match(name) is not None

    def __repr__(self):
        return f"<NameFilter {self.syntax.value}:{self.pattern!r}>"


class FileFilter:
    """
    The inclusion predicate `(size, name) -> bool` used by discovery.
    Files strictly smaller than min_size are rejected.
    """

    def __init__(self, min_size: int = 0, name_filter: Optional[NameFilter] = None):
        self.min_size = min_size
        self.name_filter = name_filter or NameFilter()

    def size_passes(self, size: int) -> bool:
        return size >= self.min_size

    def name_passes(self, name: str) -> bool:
        return self.name_filter.matches(name)

    def __call__(self, size: int, name: str) -> bool:
        return self.size_passes(size) and self.name_passes(name)
