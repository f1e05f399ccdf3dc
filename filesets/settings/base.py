#!/usr/bin/env python3
"""Base classes for definitions persistence.

This module provides the foundation for both definitions formats:
- DefinitionsIOError for every read or write failure
- DefinitionsReader, the "produce a named collection" contract
"""

import errno
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Dict, Optional

from filesets.core.constants import ErrorCode
from filesets.rules.engine import FilesSet

Definitions = Dict[str, FilesSet]


class DefinitionsIOError(Exception):
    """Reading or writing a definitions file failed.

    Attributes:
        message: Description of the failed operation
        path: File involved
        cause: Underlying exception, if any
        error_code: Classification of the failure
    """

    def __init__(
        self,
        message: str,
        path: Optional[Path] = None,
        cause: Optional[BaseException] = None,
        error_code: Optional[ErrorCode] = None,
    ):
        self.message = message
        self.path = path
        self.cause = cause
        self.error_code = error_code if error_code is not None else error_code_for(cause)
        super().__init__(message)


def error_code_for(cause: Optional[BaseException]) -> ErrorCode:
    """Map an underlying exception to an error code."""
    if isinstance(cause, FileNotFoundError):
        return ErrorCode.NOT_FOUND
    if isinstance(cause, PermissionError):
        return ErrorCode.PERMISSION_DENIED
    if isinstance(cause, OSError) and cause.errno in (errno.EACCES, errno.EPERM):
        return ErrorCode.PERMISSION_DENIED
    if isinstance(cause, OSError):
        return ErrorCode.INTERNAL_ERROR
    return ErrorCode.INVALID_INPUT


class DefinitionsReader(ABC):
    """A source of files set definitions."""

    def __init__(self, path: Path):
        self.path = Path(path)

    @abstractmethod
    def read(self) -> Optional[Definitions]:
        """Read the definitions.

        Returns:
            Mapping of set name to FilesSet, or None if the source is absent

        Raises:
            DefinitionsIOError: If the source exists but cannot be read
        """

    def exists(self) -> bool:
        return self.path.is_file()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}({str(self.path)!r})"
