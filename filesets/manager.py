#!/usr/bin/env python3
"""Files sets definitions manager.

This module provides the FilesSetsManager, the process-wide owner of the
two definitions collections:

- Interesting items: sets that flag noteworthy entries during analysis
- File ingest filters: sets that restrict which entries an ingest pass reads

Clients receive deep copies of the most recent definitions, so definitions
can be published to any number of threads. Each collection has its own lock;
reads and writes of one collection never wait on the other. Writes replace a
whole collection, persist it, then notify subscribers once the lock has been
released.

Example:
    >>> manager = FilesSetsManager.get_instance()
    >>> filters = manager.get_custom_file_ingest_filters()
    >>> filters["Documents"] = documents_set
    >>> manager.set_custom_file_ingest_filters(filters)
"""

import copy
import itertools
import threading
from enum import Enum
from pathlib import Path
from typing import Callable, Dict, List, Mapping, Optional, Tuple

from filesets.core.config import ConfigManager, get_config_manager
from filesets.core.constants import (
    ILLEGAL_FILE_NAME_CHARS,
    ILLEGAL_FILE_PATH_CHARS,
    MetaType,
    SettingsFile,
)
from filesets.core.logging import Logger, get_logger
from filesets.rules.conditions import MetaTypeCondition
from filesets.rules.engine import FilesSet, Rule
from filesets.settings.base import Definitions
from filesets.settings.legacy import LegacyDefinitions
from filesets.settings.serialized import SerializedDefinitions

ALL_FILES_AND_DIRECTORIES = "All Files and Directories"
ALL_FILES_DIRECTORIES_AND_UNALLOCATED = "All Files, Directories, and Unallocated Space"


def _match_everything(name: str, includes_unallocated_space: bool) -> FilesSet:
    return FilesSet(
        name,
        description=name,
        ignores_known_files=False,
        includes_unallocated_space=includes_unallocated_space,
        rules=[Rule(name=name, meta_type_condition=MetaTypeCondition(MetaType.ALL))],
    )


FILES_DIRS_INGEST_FILTER = _match_everything(ALL_FILES_AND_DIRECTORIES, False)
FILES_DIRS_UNALLOC_INGEST_FILTER = _match_everything(ALL_FILES_DIRECTORIES_AND_UNALLOCATED, True)


class DefinitionsKind(Enum):
    """The two definitions collections owned by the manager."""

    INTERESTING_ITEMS = "interesting_items"
    INGEST_FILTERS = "ingest_filters"


Listener = Callable[[DefinitionsKind], None]


class _DefinitionsCollection:
    """One lock-guarded, lazily loaded definitions collection."""

    def __init__(
        self,
        kind: DefinitionsKind,
        store: SerializedDefinitions,
        logger: Logger,
        legacy: Optional[LegacyDefinitions] = None,
    ):
        self.kind = kind
        self.lock = threading.RLock()
        self._store = store
        self._legacy = legacy
        self._logger = logger
        self._cache: Optional[Definitions] = None

    def get(self) -> Definitions:
        with self.lock:
            if self._cache is None:
                self._cache = self._load()
            return copy.deepcopy(self._cache)

    def _load(self) -> Definitions:
        definitions = self._store.read()
        if definitions is not None:
            self._logger.info("Loaded definitions", collection=self.kind.value, sets=len(definitions))
            return definitions

        if self._legacy is not None:
            definitions = self._legacy.read()
            if definitions is not None:
                # Migrate forward; the legacy document stays in place
                self._store.write(definitions)
                self._logger.info(
                    "Migrated legacy definitions",
                    collection=self.kind.value,
                    source=str(self._legacy.path),
                    target=str(self._store.path),
                    sets=len(definitions),
                )
                return definitions

        self._logger.debug("No stored definitions", collection=self.kind.value)
        return {}

    def set(self, definitions: Mapping[str, FilesSet]) -> None:
        snapshot = copy.deepcopy(dict(definitions))
        with self.lock:
            self._store.write(snapshot)
            self._cache = snapshot
        self._logger.info("Saved definitions", collection=self.kind.value, sets=len(snapshot))

    def invalidate(self) -> None:
        with self.lock:
            self._cache = None


class Subscription:
    """Handle returned by ``FilesSetsManager.subscribe``."""

    def __init__(self, manager: "FilesSetsManager", token: int):
        self._manager = manager
        self._token = token

    @property
    def active(self) -> bool:
        return self._manager._has_listener(self._token)

    def unsubscribe(self) -> None:
        """Stop receiving notifications. Calling it twice is harmless."""
        self._manager._remove_listener(self._token)


class FilesSetsManager:
    """Process-wide owner of the files set definitions.

    Use ``get_instance()`` for the shared instance. Constructing a manager
    directly is for callers that need an isolated settings directory.
    """

    _instance: Optional["FilesSetsManager"] = None
    _instance_lock = threading.Lock()

    def __init__(
        self,
        settings_dir: Optional[str] = None,
        legacy_file: Optional[str] = None,
        config: Optional[ConfigManager] = None,
        logger: Optional[Logger] = None,
    ):
        """Initialize manager.

        Args:
            settings_dir: Directory holding the definitions files; defaults
                          to the ``settings.directory`` configuration value
            legacy_file: Legacy XML document; defaults to
                         ``settings.legacy_file`` or a file in settings_dir
            config: Configuration manager (global one by default)
            logger: Logger; by default built from the ``logging`` section
                    of config, or the global logger when config is omitted
        """
        self._config = config or get_config_manager()
        if logger is None:
            logger = get_logger() if config is None else Logger.from_config(self._config)
        self._logger = logger

        if settings_dir is not None:
            directory = Path(settings_dir).expanduser()
            legacy = directory / SettingsFile.LEGACY_INTERESTING_FILES_SETS
        else:
            directory = self._config.settings_directory()
            legacy = self._config.legacy_file()
        if legacy_file is not None:
            legacy = Path(legacy_file).expanduser()

        self.settings_dir = directory
        self._collections: Dict[DefinitionsKind, _DefinitionsCollection] = {
            DefinitionsKind.INTERESTING_ITEMS: _DefinitionsCollection(
                DefinitionsKind.INTERESTING_ITEMS,
                SerializedDefinitions(directory / SettingsFile.INTERESTING_FILES_SETS, self._logger),
                self._logger,
                legacy=LegacyDefinitions(legacy, self._config.case_sensitive(), self._logger),
            ),
            DefinitionsKind.INGEST_FILTERS: _DefinitionsCollection(
                DefinitionsKind.INGEST_FILTERS,
                SerializedDefinitions(directory / SettingsFile.FILE_INGEST_FILTERS, self._logger),
                self._logger,
            ),
        }

        self._listeners: Dict[int, Listener] = {}
        self._listeners_lock = threading.Lock()
        self._tokens = itertools.count(1)

    @classmethod
    def get_instance(cls) -> "FilesSetsManager":
        """Get the shared manager, creating it on first use."""
        if cls._instance is None:
            with cls._instance_lock:
                if cls._instance is None:
                    cls._instance = cls()
        return cls._instance

    @classmethod
    def reset_instance(cls) -> None:
        """Drop the shared manager; the next ``get_instance`` builds a new one."""
        with cls._instance_lock:
            cls._instance = None

    @staticmethod
    def get_illegal_file_name_chars() -> Tuple[str, ...]:
        """Characters not allowed in a files set name (Windows file names)."""
        return ILLEGAL_FILE_NAME_CHARS

    @staticmethod
    def get_illegal_file_path_chars() -> Tuple[str, ...]:
        """Characters not allowed in a path condition."""
        return ILLEGAL_FILE_PATH_CHARS

    @staticmethod
    def get_standard_file_ingest_filters() -> List[FilesSet]:
        """The built-in ingest filters, never persisted."""
        return [FILES_DIRS_UNALLOC_INGEST_FILTER, FILES_DIRS_INGEST_FILTER]

    @staticmethod
    def get_default_filter() -> FilesSet:
        """Ingest filter to use when none was chosen."""
        return FILES_DIRS_UNALLOC_INGEST_FILTER

    def get_interesting_files_sets(self) -> Definitions:
        """Get a copy of the interesting files set definitions.

        Returns:
            Mapping of set name to FilesSet, possibly empty

        Raises:
            DefinitionsIOError: If the definitions cannot be read or migrated
        """
        return self._collections[DefinitionsKind.INTERESTING_ITEMS].get()

    def set_interesting_files_sets(self, files_sets: Mapping[str, FilesSet]) -> None:
        """Replace the interesting files set definitions.

        Args:
            files_sets: Mapping of set name to FilesSet

        Raises:
            DefinitionsIOError: If the definitions cannot be written
        """
        self._set(DefinitionsKind.INTERESTING_ITEMS, files_sets)

    def get_custom_file_ingest_filters(self) -> Definitions:
        """Get a copy of the user-defined ingest filters.

        The standard filters are not included, so they never show up in an
        editor.

        Raises:
            DefinitionsIOError: If the definitions cannot be read
        """
        return self._collections[DefinitionsKind.INGEST_FILTERS].get()

    def set_custom_file_ingest_filters(self, files_sets: Mapping[str, FilesSet]) -> None:
        """Replace the user-defined ingest filters.

        Raises:
            DefinitionsIOError: If the definitions cannot be written
        """
        self._set(DefinitionsKind.INGEST_FILTERS, files_sets)

    def get_file_ingest_filters(self) -> List[FilesSet]:
        """All ingest filters a user can choose from: custom ones, then standard ones."""
        custom = list(self.get_custom_file_ingest_filters().values())
        return custom + self.get_standard_file_ingest_filters()

    def get_definitions(self, kind: DefinitionsKind) -> Definitions:
        return self._collections[kind].get()

    def set_definitions(self, kind: DefinitionsKind, files_sets: Mapping[str, FilesSet]) -> None:
        self._set(kind, files_sets)

    def reload(self, kind: Optional[DefinitionsKind] = None) -> None:
        """Forget cached definitions so the next read goes to disk."""
        kinds = [kind] if kind is not None else list(self._collections)
        for each in kinds:
            self._collections[each].invalidate()

    def _set(self, kind: DefinitionsKind, files_sets: Mapping[str, FilesSet]) -> None:
        self._collections[kind].set(files_sets)
        self._notify(kind)

    def subscribe(self, listener: Listener) -> Subscription:
        """Register a listener called after every successful write.

        The listener receives the DefinitionsKind that changed. Listeners run
        on the writing thread, after the collection lock is released, in no
        particular order.

        Args:
            listener: Callable taking a DefinitionsKind

        Returns:
            Subscription handle
        """
        with self._listeners_lock:
            token = next(self._tokens)
            self._listeners[token] = listener
        return Subscription(self, token)

    def _has_listener(self, token: int) -> bool:
        with self._listeners_lock:
            return token in self._listeners

    def _remove_listener(self, token: int) -> None:
        with self._listeners_lock:
            self._listeners.pop(token, None)

    def _notify(self, kind: DefinitionsKind) -> None:
        with self._listeners_lock:
            listeners = list(self._listeners.values())

        for listener in listeners:
            try:
                listener(kind)
            except Exception as e:
                self._logger.exception("Definitions listener failed", e, collection=kind.value)
