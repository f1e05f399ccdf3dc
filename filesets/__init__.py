"""Filesets - rule-based file classification.

Named files sets classify filesystem entries with ordered, first-match-wins
rules. The FilesSetsManager owns, persists and publishes the interesting
items and ingest filter definitions.
"""

from filesets.core.constants import (
    FILESETS_VERSION,
    Comparator,
    EntryKind,
    MatchMode,
    MetaType,
    SizeUnit,
)
from filesets.manager import DefinitionsKind, FilesSetsManager, Subscription
from filesets.rules import (
    DateCondition,
    FileEntry,
    FilesSet,
    MalformedPatternError,
    MetaTypeCondition,
    MimeTypeCondition,
    NameCondition,
    PathCondition,
    Rule,
    SizeCondition,
    get_file_entry,
)
from filesets.settings import DefinitionsIOError

__version__ = FILESETS_VERSION

__all__ = [
    "Comparator",
    "DateCondition",
    "DefinitionsIOError",
    "DefinitionsKind",
    "EntryKind",
    "FileEntry",
    "FilesSet",
    "FilesSetsManager",
    "MalformedPatternError",
    "MatchMode",
    "MetaType",
    "MetaTypeCondition",
    "MimeTypeCondition",
    "NameCondition",
    "PathCondition",
    "Rule",
    "SizeCondition",
    "SizeUnit",
    "Subscription",
    "get_file_entry",
]
