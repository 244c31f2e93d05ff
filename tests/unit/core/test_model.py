"""
Tests for the row, family and cell value types
"""

import pytest

from littlebt.core.model import Cell, ColumnFamily, Family, Item, Row, to_key


def test_row_key_normalisation():
    """Text keys are stored as UTF-8 bytes"""
    assert Row("abc").key() == b"abc"
    assert Row(bytearray(b"\x00\xff")).key() == b"\x00\xff"
    assert to_key("é") == "é".encode("utf-8")

    with pytest.raises(TypeError):
        to_key(42)


def test_empty_row_is_absent():
    row = Row(b"missing")
    assert row.is_empty()
    assert row.families == {}
    assert isinstance(row, Item)


def test_set_cell_keeps_newest_first():
    fam = Family("cf", order=0)
    fam.set_cell("col", Cell(10, b"ten"))
    fam.set_cell("col", Cell(30, b"thirty"))
    fam.set_cell("col", Cell(20, b"twenty"))

    assert [c.timestamp for c in fam.cells["col"]] == [30, 20, 10]


def test_set_cell_replaces_same_timestamp():
    fam = Family("cf")
    fam.set_cell("col", Cell(10, b"old"))
    fam.set_cell("col", Cell(10, b"new"))

    assert len(fam.cells["col"]) == 1
    assert fam.cells["col"][0].value == b"new"


def test_col_names_sorted_and_delete_column():
    fam = Family("cf")
    fam.set_cell("zeta", Cell(1, b"z"))
    fam.set_cell("alpha", Cell(1, b"a"))

    assert fam.col_names == ["alpha", "zeta"]
    assert fam.delete_column("zeta")
    assert not fam.delete_column("zeta")
    assert fam.col_names == ["alpha"]


def test_sorted_families_follow_order():
    row = Row(b"k")
    row.get_or_create_family("late", 5)
    row.get_or_create_family("early", 1)
    row.get_or_create_family("middle", 3)

    assert [f.name for f in row.sorted_families()] == ["early", "middle", "late"]


def test_get_or_create_family_returns_existing():
    row = Row(b"k")
    first = row.get_or_create_family("cf", 0)
    again = row.get_or_create_family("cf", 9)

    assert first is again
    assert again.order == 0


def test_row_copy_is_deep():
    row = Row(b"k")
    row.get_or_create_family("cf", 0).set_cell("c", Cell(1, b"v", ["l"]))

    clone = row.copy()
    clone.families["cf"].set_cell("c", Cell(2, b"w"))
    clone.families["cf"].cells["c"][1].labels.append("changed")

    assert row == Row(b"k", {"cf": Family("cf", 0, {"c": [Cell(1, b"v", ["l"])]})})
    assert clone != row


def test_column_family_defaults():
    cf = ColumnFamily("cf", 3)
    assert cf.gc_rule is None
    assert cf.order == 3
