"""Filesets Rules System.

This module provides entry classification:
- TextPattern: name and path pattern matching
- Conditions: single predicates over entry metadata
- Rule / FilesSet: ordered, first-match-wins classification

A FilesSet classifies a FileEntry by returning the name of its first
matching rule.
"""

from .conditions import (
    Condition,
    DateCondition,
    FileEntry,
    MetaTypeCondition,
    MimeTypeCondition,
    NameCondition,
    PathCondition,
    SizeCondition,
    get_file_entry,
)
from .engine import FilesSet, Rule
from .patterns import MalformedPatternError, TextPattern

__all__ = [
    # Pattern matching
    "MalformedPatternError",
    "TextPattern",
    # Conditions
    "Condition",
    "DateCondition",
    "FileEntry",
    "MetaTypeCondition",
    "MimeTypeCondition",
    "NameCondition",
    "PathCondition",
    "SizeCondition",
    "get_file_entry",
    # Rules
    "FilesSet",
    "Rule",
]
