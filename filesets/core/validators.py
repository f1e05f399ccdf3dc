"""
Filesets Core: Input Validators.

Validation helpers for editor input: files set names, path condition
segments and regular expressions. Matching and persistence never call these;
the editor uses them before submitting a collection.
"""
import re
from typing import Iterable, List

from filesets.core.constants import ILLEGAL_FILE_NAME_CHARS, ILLEGAL_FILE_PATH_CHARS, ErrorCode


class ValidationError(Exception):
    """Base exception for validation errors."""

    def __init__(self, message: str, error_code: ErrorCode = ErrorCode.INVALID_INPUT):
        """Initialize ValidationError.

        Args:
            message: Error message
            error_code: Associated error code
        """
        super().__init__(message)
        self.error_code = error_code


def find_illegal_chars(text: str, illegal: Iterable[str]) -> List[str]:
    """Return the illegal characters present in text, in list order."""
    return [char for char in illegal if char in text]


def validate_set_name(name: str) -> bool:
    """Validate a files set or rule name.

    Args:
        name: Name entered by the user

    Returns:
        True if valid

    Raises:
        ValidationError: If name is blank or holds an illegal character
    """
    if not isinstance(name, str) or not name.strip():
        raise ValidationError("Name must be a non-empty string")

    found = find_illegal_chars(name, ILLEGAL_FILE_NAME_CHARS)
    if found:
        raise ValidationError(f"Name contains illegal characters: {' '.join(found)}")

    return True


def validate_path_segment(path: str) -> bool:
    """Validate the text of a non-regex path condition.

    Forward slashes are allowed, they separate path segments.

    Raises:
        ValidationError: If path is blank or holds an illegal character
    """
    if not isinstance(path, str) or not path.strip():
        raise ValidationError("Path must be a non-empty string")

    found = find_illegal_chars(path, ILLEGAL_FILE_PATH_CHARS)
    if found:
        raise ValidationError(f"Path contains illegal characters: {' '.join(found)}")

    return True


def validate_regex(pattern: str) -> bool:
    """Check if a pattern compiles as a regular expression."""
    if not isinstance(pattern, str) or not pattern:
        return False

    try:
        re.compile(pattern)
        return True
    except re.error:
        return False
