#!/usr/bin/env python3
"""Rules and files sets.

This module provides rule-based classification for filesets:
- A Rule is a named conjunction of conditions
- A FilesSet is a named, ordered collection of rules
- First-match-wins evaluation in declared rule order
- Known-file and unallocated-space filtering per set

Example:
    >>> rule = Rule(
    ...     name="Executables",
    ...     meta_type_condition=MetaTypeCondition(MetaType.FILES),
    ...     name_condition=NameCondition("*.exe", mode=MatchMode.SUFFIX),
    ... )
    >>> files_set = FilesSet("Suspicious", rules=[rule])
    >>> files_set.matches(FileEntry(name="setup.exe", path="/setup.exe"))
    'Executables'
"""

from dataclasses import dataclass
from typing import Any, Dict, Iterable, Iterator, List, Mapping, Optional, Union

from filesets.rules.conditions import (
    Condition,
    DateCondition,
    FileEntry,
    MetaTypeCondition,
    MimeTypeCondition,
    NameCondition,
    PathCondition,
    SizeCondition,
)


@dataclass(frozen=True)
class Rule:
    """A named conjunction of conditions.

    The meta-type condition is mandatory; every other condition is optional
    and only evaluated when present. A rule matches an entry if all of its
    conditions match.
    """

    name: str
    meta_type_condition: MetaTypeCondition
    name_condition: Optional[NameCondition] = None
    path_condition: Optional[PathCondition] = None
    mime_type_condition: Optional[MimeTypeCondition] = None
    size_condition: Optional[SizeCondition] = None
    date_condition: Optional[DateCondition] = None

    def __post_init__(self) -> None:
        if not isinstance(self.name, str):
            raise TypeError(f"Rule name must be a string, got {type(self.name).__name__}")
        if not isinstance(self.meta_type_condition, MetaTypeCondition):
            raise ValueError(f"Rule {self.name!r} requires a meta-type condition")

    def get_conditions(self) -> List[Condition]:
        """Present conditions in evaluation order, meta-type first."""
        conditions: List[Optional[Condition]] = [
            self.meta_type_condition,
            self.name_condition,
            self.path_condition,
            self.mime_type_condition,
            self.size_condition,
            self.date_condition,
        ]
        return [condition for condition in conditions if condition is not None]

    def matches(self, entry: FileEntry) -> bool:
        """Check if every condition of the rule holds for the entry."""
        for condition in self.get_conditions():
            if not condition.matches(entry):
                return False
        return True


RulesArg = Union[Mapping[str, Rule], Iterable[Rule], None]


class FilesSet:
    """A named, described, ordered collection of rules.

    Rules are kept in declared order, which is also evaluation order: the
    first rule that matches an entry names the classification.

    Attributes:
        name: Set name, unique within its collection
        description: Free text shown to the user
        ignores_known_files: Skip entries flagged as known
        includes_unallocated_space: Consider entries for unallocated space
    """

    def __init__(
        self,
        name: str,
        description: str = "",
        ignores_known_files: bool = False,
        includes_unallocated_space: bool = True,
        rules: RulesArg = None,
    ):
        """Initialize files set.

        Args:
            name: Set name
            description: Set description
            ignores_known_files: Whether known entries never match
            includes_unallocated_space: Whether unallocated entries may match
            rules: Rules in declared order, as a sequence or a mapping
                   (mapping keys are ignored, rule names are used)

        Raises:
            ValueError: If the name is empty or two rules share a name
        """
        if not isinstance(name, str) or not name:
            raise ValueError("Files set name must be a non-empty string")

        self._name = name
        self._description = description or ""
        self._ignores_known_files = bool(ignores_known_files)
        self._includes_unallocated_space = bool(includes_unallocated_space)
        self._rules: Dict[str, Rule] = {}

        if isinstance(rules, Mapping):
            rules = rules.values()
        for rule in rules or ():
            if rule.name in self._rules:
                raise ValueError(f"Duplicate rule {rule.name!r} in files set {name!r}")
            self._rules[rule.name] = rule

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def ignores_known_files(self) -> bool:
        return self._ignores_known_files

    @property
    def includes_unallocated_space(self) -> bool:
        return self._includes_unallocated_space

    @property
    def rules(self) -> Dict[str, Rule]:
        """Copy of the rules, keyed by name, in declared order."""
        return dict(self._rules)

    def get_rule(self, name: str) -> Optional[Rule]:
        return self._rules.get(name)

    def matches(self, entry: FileEntry) -> Optional[str]:
        """Classify an entry.

        Args:
            entry: Entry to classify

        Returns:
            Name of the first rule, in declared order, matching the entry;
            None if no rule matches or the entry is filtered out by the
            set's known-file or unallocated-space settings
        """
        if self._ignores_known_files and entry.known:
            return None

        if not self._includes_unallocated_space and entry.unallocated:
            return None

        for rule in self._rules.values():
            if rule.matches(entry):
                return rule.name

        return None

    classify = matches

    def __len__(self) -> int:
        """Return number of rules."""
        return len(self._rules)

    def __iter__(self) -> Iterator[Rule]:
        return iter(self._rules.values())

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, FilesSet):
            return NotImplemented
        return (
            self._name == other._name
            and self._description == other._description
            and self._ignores_known_files == other._ignores_known_files
            and self._includes_unallocated_space == other._includes_unallocated_space
            # Declared order is part of a set's meaning
            and list(self._rules.items()) == list(other._rules.items())
        )

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"FilesSet(name={self._name!r}, rules={list(self._rules)!r})"

    def __str__(self) -> str:
        return self._name
