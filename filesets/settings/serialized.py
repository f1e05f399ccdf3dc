#!/usr/bin/env python3
"""Current definitions format: one pickled mapping per file.

The whole ``set name -> FilesSet`` mapping is written as a single object.
Writes go to a temporary file in the target directory which then replaces
the target, so a reader never sees a partially written file.
"""

import os
import pickle
import tempfile
from pathlib import Path
from typing import Any, Mapping, Optional

from filesets.core.logging import Logger, get_logger
from filesets.rules.engine import FilesSet
from filesets.settings.base import Definitions, DefinitionsIOError, DefinitionsReader

# Globals a definitions file may reference besides filesets classes
_ALLOWED_GLOBALS = {
    ("re", "_compile"),
    ("builtins", "dict"),
    ("builtins", "list"),
    ("builtins", "tuple"),
    ("builtins", "set"),
    ("builtins", "frozenset"),
    ("collections", "OrderedDict"),
    ("copyreg", "_reconstructor"),
    ("builtins", "object"),
}


class _DefinitionsUnpickler(pickle.Unpickler):
    """Unpickler restricted to the types a definitions file holds."""

    def find_class(self, module: str, name: str) -> Any:
        if module == "filesets" or module.startswith("filesets."):
            return super().find_class(module, name)
        if (module, name) in _ALLOWED_GLOBALS:
            return super().find_class(module, name)
        raise pickle.UnpicklingError(f"Forbidden global in definitions file: {module}.{name}")


class SerializedDefinitions(DefinitionsReader):
    """Reads and writes definitions in the current, serialized format."""

    def __init__(self, path: Path, logger: Optional[Logger] = None):
        super().__init__(path)
        self._logger = logger

    @property
    def logger(self) -> Logger:
        return self._logger or get_logger()

    def read(self) -> Optional[Definitions]:
        """Read the definitions file.

        Returns:
            Mapping of set name to FilesSet, or None if the file is absent

        Raises:
            DefinitionsIOError: If the file cannot be read or deserialized
        """
        if not self.path.exists():
            return None

        try:
            with open(self.path, "rb") as f:
                definitions = _DefinitionsUnpickler(f).load()
        except Exception as e:
            raise DefinitionsIOError(f"Failed to read settings from {self.path}", self.path, e)

        self._check_definitions(definitions)
        self.logger.debug("Read definitions", path=str(self.path), sets=len(definitions))
        return dict(definitions)

    def _check_definitions(self, definitions: Any) -> None:
        if not isinstance(definitions, Mapping):
            raise DefinitionsIOError(
                f"Settings file {self.path} does not hold a definitions mapping", self.path
            )
        for name, files_set in definitions.items():
            if not isinstance(name, str) or not isinstance(files_set, FilesSet):
                raise DefinitionsIOError(
                    f"Settings file {self.path} holds an invalid entry for {name!r}", self.path
                )

    def write(self, definitions: Mapping[str, FilesSet]) -> None:
        """Replace the definitions file with the given mapping.

        Args:
            definitions: Mapping of set name to FilesSet

        Raises:
            DefinitionsIOError: If the file cannot be written
        """
        tmp_path: Optional[str] = None
        try:
            self.path.parent.mkdir(parents=True, exist_ok=True)
            with tempfile.NamedTemporaryFile(
                "wb", dir=self.path.parent, prefix=f".{self.path.name}.", delete=False
            ) as tmp:
                tmp_path = tmp.name
                pickle.dump(dict(definitions), tmp, protocol=pickle.HIGHEST_PROTOCOL)
                tmp.flush()
                os.fsync(tmp.fileno())
            os.replace(tmp_path, self.path)
            tmp_path = None
        except (OSError, pickle.PicklingError, TypeError, AttributeError) as e:
            raise DefinitionsIOError(f"Failed to write settings to {self.path}", self.path, e)
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

        self.logger.debug("Wrote definitions", path=str(self.path), sets=len(definitions))
