#!/usr/bin/env python3
"""Legacy definitions format: a read-only XML document.

Older releases stored interesting files sets as XML. The document is only
read, to migrate its sets to the current format; it is never written or
removed.

Document layout::

    <INTERESTING_FILE_SETS>
      <INTERESTING_FILE_SET name="Executables" description="..." ignoreKnown="true">
        <EXTENSION name="exe files" typeFilter="file">exe</EXTENSION>
        <NAME name="autorun" pathFilter="/windows/" pathRegex="false">autorun.inf</NAME>
      </INTERESTING_FILE_SET>
    </INTERESTING_FILE_SETS>

``NAME`` rules compare the whole file name, ``EXTENSION`` rules the text
after the last dot. ``regex="true"`` makes the element text a regular
expression. ``typeFilter`` is one of ``file`` (default), ``dir`` or
``files_and_dirs``.
"""

import xml.etree.ElementTree as ET
from pathlib import Path
from typing import Dict, Iterator, List, Optional

from filesets.core.constants import ErrorCode, MatchMode, MetaType
from filesets.core.logging import Logger, get_logger
from filesets.rules.conditions import MetaTypeCondition, NameCondition, PathCondition
from filesets.rules.engine import FilesSet, Rule
from filesets.rules.patterns import MalformedPatternError
from filesets.settings.base import Definitions, DefinitionsIOError, DefinitionsReader

FILE_SET_TAG = "INTERESTING_FILE_SET"
NAME_RULE_TAG = "NAME"
EXTENSION_RULE_TAG = "EXTENSION"

NAME_ATTR = "name"
RULE_NAME_ATTR = "ruleName"
DESC_ATTR = "description"
IGNORE_KNOWN_FILES_ATTR = "ignoreKnown"
# Older documents spell the attribute "ingoreUnallocated"
IGNORE_UNALLOCATED_ATTRS = ("ignoreUnallocated", "ingoreUnallocated")
TYPE_FILTER_ATTR = "typeFilter"
PATH_FILTER_ATTR = "pathFilter"
PATH_REGEX_ATTR = "pathRegex"
REGEX_ATTR = "regex"

TYPE_FILTERS = {
    "file": MetaType.FILES,
    "dir": MetaType.DIRECTORIES,
    "files_and_dirs": MetaType.ALL,
}

UNNAMED_LEGACY_RULE_PREFIX = "Unnamed Rule "


class _SkipFilesSet(Exception):
    """A set in the document is unusable and is discarded."""


def _parse_bool(value: Optional[str]) -> bool:
    return value is not None and value.strip().lower() == "true"


class LegacyDefinitions(DefinitionsReader):
    """Reads interesting files sets from the legacy XML document."""

    def __init__(self, path: Path, case_sensitive: bool = False, logger: Optional[Logger] = None):
        """Initialize reader.

        Args:
            path: Location of the XML document
            case_sensitive: Case policy given to the migrated name and path conditions
            logger: Optional logger
        """
        super().__init__(path)
        self.case_sensitive = case_sensitive
        self._logger = logger
        self._unnamed_rules = 0

    @property
    def logger(self) -> Logger:
        return self._logger or get_logger()

    def read(self) -> Optional[Definitions]:
        """Parse the document.

        Returns:
            Mapping of set name to FilesSet, or None if the document is absent

        Raises:
            DefinitionsIOError: If the document cannot be read or parsed, or
                holds a malformed regular expression
        """
        if not self.path.exists():
            return None

        try:
            root = ET.parse(self.path).getroot()
        except ET.ParseError as e:
            raise DefinitionsIOError(
                f"Malformed legacy definitions document {self.path}: {e}",
                self.path,
                e,
                ErrorCode.INVALID_INPUT,
            )
        except OSError as e:
            raise DefinitionsIOError(f"Failed to read legacy definitions from {self.path}", self.path, e)

        self._unnamed_rules = 0
        definitions: Dict[str, FilesSet] = {}
        for set_elem in self._files_set_elements(root):
            try:
                files_set = self._read_files_set(set_elem)
            except _SkipFilesSet as e:
                self.logger.warning("Discarding legacy files set", path=str(self.path), reason=str(e))
                continue

            if files_set.name in definitions:
                self.logger.warning(
                    "Discarding duplicate legacy files set", path=str(self.path), name=files_set.name
                )
                continue
            definitions[files_set.name] = files_set

        self.logger.info("Read legacy definitions", path=str(self.path), sets=len(definitions))
        return definitions

    def _files_set_elements(self, root: ET.Element) -> Iterator[ET.Element]:
        if root.tag == FILE_SET_TAG:
            yield root
        else:
            yield from root.iter(FILE_SET_TAG)

    def _read_files_set(self, set_elem: ET.Element) -> FilesSet:
        name = (set_elem.get(NAME_ATTR) or "").strip()
        if not name:
            raise _SkipFilesSet(f"{FILE_SET_TAG} element without a {NAME_ATTR} attribute")

        ignore_unallocated = False
        for attr in IGNORE_UNALLOCATED_ATTRS:
            if set_elem.get(attr):
                ignore_unallocated = _parse_bool(set_elem.get(attr))
                break

        rules: List[Rule] = []
        rule_names = set()
        for rule_elem in set_elem:
            if rule_elem.tag not in (NAME_RULE_TAG, EXTENSION_RULE_TAG):
                continue
            rule = self._read_rule(name, rule_elem)
            if rule.name in rule_names:
                self.logger.warning("Discarding duplicate legacy rule", set=name, rule=rule.name)
                continue
            rule_names.add(rule.name)
            rules.append(rule)

        return FilesSet(
            name,
            description=set_elem.get(DESC_ATTR) or "",
            ignores_known_files=_parse_bool(set_elem.get(IGNORE_KNOWN_FILES_ATTR)),
            includes_unallocated_space=not ignore_unallocated,
            rules=rules,
        )

    def _read_rule(self, set_name: str, rule_elem: ET.Element) -> Rule:
        text = (rule_elem.text or "").strip()
        if not text:
            raise _SkipFilesSet(f"{rule_elem.tag} rule without a pattern in set {set_name!r}")

        rule_name = (rule_elem.get(NAME_ATTR) or rule_elem.get(RULE_NAME_ATTR) or "").strip()
        if not rule_name:
            self._unnamed_rules += 1
            rule_name = f"{UNNAMED_LEGACY_RULE_PREFIX}{self._unnamed_rules}"

        type_filter = (rule_elem.get(TYPE_FILTER_ATTR) or "file").strip().lower()
        if type_filter not in TYPE_FILTERS:
            raise _SkipFilesSet(f"unknown {TYPE_FILTER_ATTR} {type_filter!r} in set {set_name!r}")

        mode = MatchMode.EXACT if rule_elem.tag == NAME_RULE_TAG else MatchMode.EXTENSION

        try:
            name_condition = NameCondition(
                text,
                is_regex=_parse_bool(rule_elem.get(REGEX_ATTR)),
                mode=mode,
                case_sensitive=self.case_sensitive,
            )

            path_condition = None
            path_filter = (rule_elem.get(PATH_FILTER_ATTR) or "").strip()
            if path_filter:
                path_condition = PathCondition(
                    path_filter,
                    is_regex=_parse_bool(rule_elem.get(PATH_REGEX_ATTR)),
                    case_sensitive=self.case_sensitive,
                )
        except MalformedPatternError as e:
            # Fails the whole document; other unusable sets are only skipped
            raise DefinitionsIOError(
                f"Malformed pattern in legacy rule {rule_name!r} of set {set_name!r}: {e.reason}",
                self.path,
                e,
                ErrorCode.INVALID_INPUT,
            )

        return Rule(
            name=rule_name,
            meta_type_condition=MetaTypeCondition(TYPE_FILTERS[type_filter]),
            name_condition=name_condition,
            path_condition=path_condition,
        )
