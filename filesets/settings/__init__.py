"""Filesets definitions persistence.

Two formats hold files set definitions:
- SerializedDefinitions: the current format, read and written
- LegacyDefinitions: the older XML document, read only for migration

Both raise DefinitionsIOError on failure and return None when their file
does not exist.
"""

from .base import Definitions, DefinitionsIOError, DefinitionsReader
from .legacy import LegacyDefinitions
from .serialized import SerializedDefinitions

__all__ = [
    "Definitions",
    "DefinitionsIOError",
    "DefinitionsReader",
    "LegacyDefinitions",
    "SerializedDefinitions",
]
