"""
Filesets Core: Constants and Type Definitions

This module provides package-wide constants, error codes, and the enumerations
shared by the rule engine, the persistence layer and the manager.
"""
import operator
from enum import Enum, IntEnum
from typing import Any, Tuple

# Version information
FILESETS_VERSION = "1.0.0"


# Error codes
class ErrorCode(IntEnum):
    """Standardized error codes for filesets operations."""

    INVALID_INPUT = 1  # Malformed document, invalid configuration
    NOT_FOUND = 2  # File or resource doesn't exist
    PERMISSION_DENIED = 3  # Insufficient permissions
    INTERNAL_ERROR = 6  # Unexpected failure


# Characters the editor rejects in a files set name (Windows file names)
ILLEGAL_FILE_NAME_CHARS: Tuple[str, ...] = ("\\", "/", ":", "*", "?", '"', "<", ">")

# Characters the editor rejects in a path condition segment
ILLEGAL_FILE_PATH_CHARS: Tuple[str, ...] = ("\\", ":", "*", "?", '"', "<", ">")


# Settings file names
class SettingsFile:
    """File names used under the per-user settings directory."""

    LEGACY_INTERESTING_FILES_SETS = "InterestingFilesSetDefs.xml"
    INTERESTING_FILES_SETS = "InterestingFileSets.settings"
    FILE_INGEST_FILTERS = "FileIngestFilterDefs.settings"


# Entry classification
class EntryKind(Enum):
    """Kind of a filesystem entry being classified."""

    FILE = "file"
    DIRECTORY = "directory"
    OTHER = "other"  # Symlinks, devices, sockets

    @classmethod
    def from_mode(cls, mode: int) -> "EntryKind":
        """Determine entry kind from a stat mode."""
        import stat

        if stat.S_ISREG(mode):
            return cls.FILE
        elif stat.S_ISDIR(mode):
            return cls.DIRECTORY
        return cls.OTHER


class MetaType(Enum):
    """Entry kinds a rule applies to."""

    FILES = "file"
    DIRECTORIES = "dir"
    ALL = "files_and_dirs"


class MatchMode(Enum):
    """How a non-regex name or path pattern is compared."""

    EXACT = "exact"
    SUBSTRING = "substring"
    SUFFIX = "suffix"
    EXTENSION = "extension"  # Compared with the text after the last dot
    GLOB = "glob"


class Comparator(Enum):
    """Comparison operators for size and date conditions."""

    LESS_THAN = "<"
    LESS_THAN_EQUAL = "<="
    EQUAL = "="
    GREATER_THAN_EQUAL = ">="
    GREATER_THAN = ">"

    @classmethod
    def from_symbol(cls, symbol: str) -> "Comparator":
        """Look up a comparator by symbol, accepting "==" for equality."""
        if symbol == "==":
            symbol = "="
        return cls(symbol)

    def compare(self, actual: Any, expected: Any) -> bool:
        """Apply the comparator as ``actual <op> expected``."""
        return _COMPARATOR_FUNCS[self](actual, expected)


_COMPARATOR_FUNCS: dict = {
    Comparator.LESS_THAN: operator.lt,
    Comparator.LESS_THAN_EQUAL: operator.le,
    Comparator.EQUAL: operator.eq,
    Comparator.GREATER_THAN_EQUAL: operator.ge,
    Comparator.GREATER_THAN: operator.gt,
}


class SizeUnit(IntEnum):
    """Size units accepted by size conditions, valued in bytes."""

    BYTE = 1
    KILOBYTE = 1024
    MEGABYTE = 1024 * 1024
    GIGABYTE = 1024 * 1024 * 1024


# Configuration keys
class ConfigKey:
    """Configuration key constants (relative to the ``filesets`` root)."""

    SETTINGS_DIRECTORY = "settings.directory"
    LEGACY_FILE = "settings.legacy_file"
    CASE_SENSITIVE = "matching.case_sensitive"
    LOG_LEVEL = "logging.level"
    LOG_FILE = "logging.file"


# Default configuration values
DEFAULT_SETTINGS_DIRECTORY = "~/.config/filesets"

DEFAULT_CONFIG = {
    "settings": {
        "directory": DEFAULT_SETTINGS_DIRECTORY,
        "legacy_file": None,
    },
    "matching": {
        "case_sensitive": False,
    },
    "logging": {
        "level": "INFO",
        "file": None,
    },
}
