#!/usr/bin/env python3
"""Tests for shared constants and enums."""

import stat

import pytest

from filesets.core.constants import Comparator, EntryKind, SizeUnit


class TestComparator:
    """Tests for Comparator."""

    @pytest.mark.parametrize("symbol", ["<", "<=", "=", ">=", ">"])
    def test_from_symbol(self, symbol):
        assert Comparator.from_symbol(symbol).value == symbol

    def test_double_equals_accepted(self):
        assert Comparator.from_symbol("==") is Comparator.EQUAL

    def test_unknown_symbol(self):
        with pytest.raises(ValueError):
            Comparator.from_symbol("!=")

    def test_compare(self):
        assert Comparator.LESS_THAN.compare(1, 2)
        assert not Comparator.GREATER_THAN.compare(1, 2)
        assert Comparator.EQUAL.compare(2, 2)


class TestEntryKind:
    """Tests for EntryKind."""

    def test_from_mode(self):
        assert EntryKind.from_mode(stat.S_IFREG | 0o644) is EntryKind.FILE
        assert EntryKind.from_mode(stat.S_IFDIR | 0o755) is EntryKind.DIRECTORY
        assert EntryKind.from_mode(stat.S_IFLNK | 0o777) is EntryKind.OTHER


def test_size_units():
    assert SizeUnit.KILOBYTE * 3 == 3072
    assert SizeUnit.GIGABYTE == 1024 ** 3
