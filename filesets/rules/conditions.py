#!/usr/bin/env python3
"""Conditions evaluated against filesystem entries.

Each condition is a single immutable predicate over one aspect of a
``FileEntry``. Evaluation is pure and never raises: an entry lacking the
attribute a condition needs simply does not match.

Example:
    >>> cond = NameCondition("*.exe", mode=MatchMode.SUFFIX)
    >>> cond.matches(FileEntry(name="setup.exe", path="/tmp/setup.exe"))
    True
"""

import os
import time
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Optional, Union

from filesets.core.constants import Comparator, EntryKind, MatchMode, MetaType, SizeUnit
from filesets.rules.patterns import TextPattern, name_extension

SECONDS_PER_DAY = 24 * 60 * 60


@dataclass(frozen=True)
class FileEntry:
    """Metadata of one filesystem entry."""

    name: str
    path: str  # Full path, including the name
    kind: EntryKind = EntryKind.FILE
    size: Optional[int] = None
    mtime: Optional[float] = None  # Epoch seconds
    mime_type: Optional[str] = None
    known: bool = False  # Entry is a known, standard item
    unallocated: bool = False  # Entry stands for unallocated space

    @property
    def is_file(self) -> bool:
        return self.kind == EntryKind.FILE

    @property
    def is_dir(self) -> bool:
        return self.kind == EntryKind.DIRECTORY

    @property
    def extension(self) -> Optional[str]:
        return name_extension(self.name)


def get_file_entry(path: str, mime_type: Optional[str] = None) -> Optional[FileEntry]:
    """Build a FileEntry from a path on the local filesystem.

    Symlinks are described, not followed.

    Args:
        path: File path
        mime_type: Optional MIME type, when already detected

    Returns:
        FileEntry, or None if the path cannot be stat'ed
    """
    try:
        st = os.lstat(path)
    except OSError:
        return None

    kind = EntryKind.from_mode(st.st_mode)
    return FileEntry(
        name=os.path.basename(os.path.normpath(path)),
        path=os.path.abspath(path),
        kind=kind,
        size=st.st_size if kind == EntryKind.FILE else None,
        mtime=st.st_mtime,
        mime_type=mime_type,
    )


class Condition(ABC):
    """A predicate over one attribute of a FileEntry."""

    @abstractmethod
    def matches(self, entry: FileEntry) -> bool:
        """Check if entry satisfies the condition."""


@dataclass(frozen=True)
class _TextCondition(Condition):
    pattern: str
    is_regex: bool = False
    mode: MatchMode = MatchMode.EXACT
    case_sensitive: bool = False
    _matcher: TextPattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "_matcher", self._build_matcher())

    def _build_matcher(self) -> TextPattern:
        return TextPattern(
            self.pattern,
            is_regex=self.is_regex,
            mode=self.mode,
            case_sensitive=self.case_sensitive,
        )

    @abstractmethod
    def _subject(self, entry: FileEntry) -> Optional[str]:
        """Text of the entry the pattern is tested against."""

    def matches(self, entry: FileEntry) -> bool:
        return self._matcher.matches(self._subject(entry))


@dataclass(frozen=True)
class NameCondition(_TextCondition):
    """Matches the entry's base name (or its extension in EXTENSION mode)."""

    def _subject(self, entry: FileEntry) -> Optional[str]:
        if self.mode == MatchMode.EXTENSION:
            return entry.extension
        return entry.name


@dataclass(frozen=True)
class PathCondition(_TextCondition):
    """Matches the entry's full path; separators are normalized to ``/``."""

    mode: MatchMode = MatchMode.SUBSTRING

    def _build_matcher(self) -> TextPattern:
        return TextPattern(
            self.pattern,
            is_regex=self.is_regex,
            mode=self.mode,
            case_sensitive=self.case_sensitive,
            normalize_paths=True,
        )

    def _subject(self, entry: FileEntry) -> Optional[str]:
        return entry.path


@dataclass(frozen=True)
class MetaTypeCondition(Condition):
    """Matches entries of the given kind."""

    meta_type: MetaType = MetaType.FILES

    def matches(self, entry: FileEntry) -> bool:
        if self.meta_type == MetaType.ALL:
            return True
        if self.meta_type == MetaType.FILES:
            return entry.kind == EntryKind.FILE
        return entry.kind == EntryKind.DIRECTORY


def _coerce_comparator(condition: Condition, comparator: Union[Comparator, str]) -> None:
    if not isinstance(comparator, Comparator):
        object.__setattr__(condition, "comparator", Comparator.from_symbol(comparator))


@dataclass(frozen=True)
class SizeCondition(Condition):
    """Compares the entry's size in bytes."""

    comparator: Comparator
    size_in_bytes: int

    def __post_init__(self) -> None:
        _coerce_comparator(self, self.comparator)
        if self.size_in_bytes < 0:
            raise ValueError(f"Size must be non-negative: {self.size_in_bytes}")

    @classmethod
    def of(
        cls, comparator: Union[Comparator, str], size: int, unit: SizeUnit = SizeUnit.BYTE
    ) -> "SizeCondition":
        """Build a condition from a size expressed in the given unit."""
        return cls(comparator, size * int(unit))

    def matches(self, entry: FileEntry) -> bool:
        if entry.size is None:
            return False
        return self.comparator.compare(entry.size, self.size_in_bytes)


@dataclass(frozen=True)
class DateCondition(Condition):
    """Compares the entry's modification time, in epoch seconds."""

    comparator: Comparator
    epoch_seconds: float

    def __post_init__(self) -> None:
        _coerce_comparator(self, self.comparator)

    @classmethod
    def modified_within(cls, days: int, now: Optional[float] = None) -> "DateCondition":
        """Entries modified during the last ``days`` days."""
        if days <= 0:
            raise ValueError(f"Days must be positive: {days}")
        now = time.time() if now is None else now
        return cls(Comparator.GREATER_THAN_EQUAL, now - days * SECONDS_PER_DAY)

    def matches(self, entry: FileEntry) -> bool:
        if entry.mtime is None:
            return False
        return self.comparator.compare(entry.mtime, self.epoch_seconds)


@dataclass(frozen=True)
class MimeTypeCondition(Condition):
    """Matches the entry's detected MIME type, ignoring case."""

    mime_type: str

    def matches(self, entry: FileEntry) -> bool:
        if not entry.mime_type:
            return False
        return entry.mime_type.lower() == self.mime_type.lower()
