"""Shared pytest fixtures for filesets tests."""
from pathlib import Path
from typing import Dict

import pytest

from filesets.core.config import ConfigManager, set_global_config
from filesets.core.constants import EntryKind, MatchMode, MetaType
from filesets.core.logging import Logger, LogLevel, set_global_logger
from filesets.manager import FilesSetsManager
from filesets.rules.conditions import FileEntry, MetaTypeCondition, NameCondition, PathCondition
from filesets.rules.engine import FilesSet, Rule


@pytest.fixture
def settings_dir(tmp_path: Path) -> Path:
    """Empty per-test settings directory."""
    directory = tmp_path / "settings"
    directory.mkdir()
    return directory


@pytest.fixture
def config(settings_dir: Path) -> ConfigManager:
    """Configuration isolated from the environment, pointing at settings_dir."""
    manager = ConfigManager(load_environment=False)
    manager.set("settings.directory", str(settings_dir))
    return manager


@pytest.fixture
def logger() -> Logger:
    """Quiet logger for tests."""
    return Logger(name="filesets.tests", level=LogLevel.DEBUG, handlers=[])


@pytest.fixture
def manager(settings_dir: Path, config: ConfigManager, logger: Logger) -> FilesSetsManager:
    """Manager with its own settings directory."""
    return FilesSetsManager(settings_dir=str(settings_dir), config=config, logger=logger)


@pytest.fixture
def exe_file() -> FileEntry:
    return FileEntry(name="setup.exe", path="/downloads/setup.exe", kind=EntryKind.FILE, size=2048)


@pytest.fixture
def exe_dir() -> FileEntry:
    return FileEntry(name="setup.exe", path="/downloads/setup.exe", kind=EntryKind.DIRECTORY)


@pytest.fixture
def text_file() -> FileEntry:
    return FileEntry(name="readme.txt", path="/docs/readme.txt", kind=EntryKind.FILE, size=120)


@pytest.fixture
def executables_set() -> FilesSet:
    """Set flagging executables and anything under a temp directory."""
    return FilesSet(
        "Executables",
        description="Windows executables",
        ignores_known_files=True,
        rules=[
            Rule(
                name="exe files",
                meta_type_condition=MetaTypeCondition(MetaType.FILES),
                name_condition=NameCondition("*.exe", mode=MatchMode.SUFFIX),
            ),
            Rule(
                name="temp content",
                meta_type_condition=MetaTypeCondition(MetaType.ALL),
                path_condition=PathCondition("/temp/"),
            ),
        ],
    )


@pytest.fixture
def documents_set() -> FilesSet:
    return FilesSet(
        "Documents",
        description="Office documents",
        rules=[
            Rule(
                name="pdf",
                meta_type_condition=MetaTypeCondition(MetaType.FILES),
                name_condition=NameCondition(r"\.pdf$", is_regex=True),
            ),
        ],
    )


@pytest.fixture
def collection(executables_set: FilesSet, documents_set: FilesSet) -> Dict[str, FilesSet]:
    return {executables_set.name: executables_set, documents_set.name: documents_set}


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset global instances between tests."""
    FilesSetsManager.reset_instance()
    set_global_config(None)
    set_global_logger(None)
    yield
    FilesSetsManager.reset_instance()
    set_global_config(None)
    set_global_logger(None)
