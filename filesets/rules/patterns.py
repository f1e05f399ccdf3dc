#!/usr/bin/env python3
r"""Text pattern matching for entry names and paths.

This module provides the pattern primitive behind name and path conditions:
- Regex patterns compiled once, at construction
- Exact, substring, suffix, extension and glob comparison for plain text
- Case-sensitive and case-insensitive modes
- Path separator normalization for consistent matching

Example:
    >>> TextPattern("*.exe", mode=MatchMode.SUFFIX).matches("SETUP.EXE")
    True
    >>> TextPattern(r"^report_\d+\.pdf$", is_regex=True).matches("report_7.pdf")
    True
"""

import fnmatch
import re
from typing import Optional, Pattern

from filesets.core.constants import MatchMode


class MalformedPatternError(ValueError):
    """A regular expression pattern failed to compile."""

    def __init__(self, pattern: str, reason: str):
        self.pattern = pattern
        self.reason = reason
        super().__init__(f"Malformed pattern {pattern!r}: {reason}")


def normalize_separators(path: str) -> str:
    """Use forward slashes as the only path separator."""
    return path.replace("\\", "/")


def name_extension(name: str) -> Optional[str]:
    """Return the text after the last dot of a name, or None without one."""
    base, dot, extension = name.rpartition(".")
    if not dot or not base:
        return None
    return extension


class TextPattern:
    """A single name or path pattern.

    Regex patterns use ``search`` semantics: the pattern may match anywhere
    unless it is anchored. Plain patterns are compared according to their
    ``MatchMode``:

    - EXACT: the whole text equals the pattern
    - SUBSTRING: the pattern occurs in the text
    - SUFFIX: the text ends with the pattern; leading ``*`` are ignored
    - EXTENSION: the text equals the pattern with any leading ``*.``/``.``
      removed; used against a name's extension
    - GLOB: shell-style wildcards (``*``, ``?``, ``[...]``)
    """

    def __init__(
        self,
        pattern: str,
        is_regex: bool = False,
        mode: MatchMode = MatchMode.EXACT,
        case_sensitive: bool = False,
        normalize_paths: bool = False,
    ):
        """Initialize pattern.

        Args:
            pattern: Pattern text
            is_regex: Whether pattern is a regular expression
            mode: Comparison mode for plain patterns
            case_sensitive: Whether comparison is case-sensitive
            normalize_paths: Convert backslashes to forward slashes first

        Raises:
            MalformedPatternError: If a regex pattern does not compile
        """
        if not isinstance(pattern, str):
            raise TypeError(f"Pattern must be a string, got {type(pattern).__name__}")

        self.pattern = pattern
        self.is_regex = is_regex
        self.mode = mode
        self.case_sensitive = case_sensitive
        self.normalize_paths = normalize_paths
        self._compiled: Optional[Pattern] = None
        self._text = ""

        if is_regex:
            flags = 0 if case_sensitive else re.IGNORECASE
            try:
                self._compiled = re.compile(pattern, flags)
            except re.error as e:
                raise MalformedPatternError(pattern, str(e)) from e
        else:
            self._text = self._normalize_pattern(pattern)

    def _normalize_pattern(self, pattern: str) -> str:
        if self.normalize_paths:
            pattern = normalize_separators(pattern)

        if self.mode == MatchMode.SUFFIX:
            pattern = pattern.lstrip("*")
        elif self.mode == MatchMode.EXTENSION:
            pattern = pattern.lstrip("*").lstrip(".")

        if not self.case_sensitive:
            pattern = pattern.lower()

        return pattern

    def _normalize_text(self, text: str) -> str:
        if self.normalize_paths:
            text = normalize_separators(text)
        if not self.case_sensitive:
            text = text.lower()
        return text

    def matches(self, text: Optional[str]) -> bool:
        """Check if text matches the pattern.

        Args:
            text: Name, path or extension to test; None never matches

        Returns:
            True if text matches
        """
        if text is None:
            return False

        if self._compiled is not None:
            if self.normalize_paths:
                text = normalize_separators(text)
            return bool(self._compiled.search(text))

        text = self._normalize_text(text)

        if self.mode == MatchMode.EXACT or self.mode == MatchMode.EXTENSION:
            return text == self._text
        elif self.mode == MatchMode.SUBSTRING:
            return self._text in text
        elif self.mode == MatchMode.SUFFIX:
            return text.endswith(self._text)
        elif self.mode == MatchMode.GLOB:
            # Both sides are already case-folded when case-insensitive
            return fnmatch.fnmatchcase(text, self._text)

        return False

    def __repr__(self) -> str:
        kind = "regex" if self.is_regex else self.mode.value
        return f"TextPattern({self.pattern!r}, {kind}, case_sensitive={self.case_sensitive})"
