"""
Behaviour shared by every ordered row store (SQL backed and in-memory)
"""

import random

from conftest import make_row
from littlebt.core.model import Row


def _collect(scan, *pivots):
    seen = []

    def visit(row):
        seen.append(row.key())
        return True

    scan(*pivots, visit)
    return seen


def _load(rows, keys):
    for key in keys:
        rows.upsert(make_row(key, {"cf": (0, {"col": [(1, key)]})}))


def test_get_returns_what_was_upserted(ordered_rows):
    row = make_row(b"user#1", {
        "cf1": (0, {"name": [(2, b"alice"), (1, b"al")], "age": [(1, b"30")]}),
        "cf2": (1, {"tag": [(5, b"x")]}),
    })
    ordered_rows.upsert(row)

    fetched = ordered_rows.get(b"user#1")
    assert fetched == row
    assert fetched is not row


def test_get_missing_key_returns_empty_row(ordered_rows):
    fetched = ordered_rows.get(b"nope")

    assert isinstance(fetched, Row)
    assert fetched.key() == b"nope"
    assert fetched.is_empty()


def test_get_accepts_row_pivot(ordered_rows):
    _load(ordered_rows, [b"a"])
    assert not ordered_rows.get(Row(b"a")).is_empty()


def test_ascend_visits_in_byte_order(ordered_rows):
    keys = [b"b", b"a", b"\xff", b"a\x01", b"ab", b"\x01", b"B", b"\x7f", b"\x80"]
    shuffled = list(keys)
    random.Random(7).shuffle(shuffled)
    _load(ordered_rows, shuffled)

    assert _collect(ordered_rows.ascend) == sorted(keys)


def test_ascend_range_is_half_open(ordered_rows):
    _load(ordered_rows, [b"a", b"b", b"c", b"d"])

    assert _collect(ordered_rows.ascend_range, b"b", b"d") == [b"b", b"c"]


def test_ascend_range_empty_when_bounds_cross(ordered_rows):
    _load(ordered_rows, [b"a", b"b", b"c"])

    assert _collect(ordered_rows.ascend_range, b"c", b"a") == []
    assert _collect(ordered_rows.ascend_range, b"b", b"b") == []


def test_ascend_from_includes_pivot(ordered_rows):
    _load(ordered_rows, [b"a", b"b", b"c", b"d"])

    assert _collect(ordered_rows.ascend_from, b"b") == [b"b", b"c", b"d"]
    assert _collect(ordered_rows.ascend_from, b"bb") == [b"c", b"d"]


def test_ascend_before_excludes_pivot(ordered_rows):
    _load(ordered_rows, [b"a", b"b", b"c", b"d"])

    assert _collect(ordered_rows.ascend_before, b"c") == [b"a", b"b"]
    assert _collect(ordered_rows.ascend_before, b"a") == []


def test_visitor_returning_false_stops_scan(ordered_rows):
    _load(ordered_rows, [b"a", b"b", b"c", b"d"])
    seen = []

    def visit(row):
        seen.append(row.key())
        return len(seen) < 2

    ordered_rows.ascend(visit)
    assert seen == [b"a", b"b"]


def test_count_tracks_inserts_and_deletes(ordered_rows):
    keys = [f"row-{i:03d}".encode() for i in range(20)]
    _load(ordered_rows, keys)
    for key in keys[:7]:
        ordered_rows.delete(key)

    assert ordered_rows.count() == 13
    assert len(ordered_rows) == 13


def test_upsert_same_key_does_not_grow_count(ordered_rows):
    _load(ordered_rows, [b"a", b"a", b"a"])
    assert ordered_rows.count() == 1


def test_delete_missing_key_is_noop(ordered_rows):
    _load(ordered_rows, [b"a"])
    ordered_rows.delete(b"zzz")

    assert ordered_rows.count() == 1


def test_delete_all_empties_the_table(ordered_rows):
    _load(ordered_rows, [b"a", b"b", b"c"])
    ordered_rows.delete_all()

    assert ordered_rows.count() == 0
    assert _collect(ordered_rows.ascend) == []


def test_upsert_replaces_instead_of_merging(ordered_rows):
    ordered_rows.upsert(make_row(b"k", {
        "cf": (0, {"old": [(1, b"1")], "shared": [(1, b"before")]}),
        "gone": (1, {"x": [(1, b"x")]}),
    }))
    replacement = make_row(b"k", {"cf": (0, {"shared": [(2, b"after")]})})
    ordered_rows.upsert(replacement)

    fetched = ordered_rows.get(b"k")
    assert fetched == replacement
    assert "old" not in fetched.families["cf"].cells
    assert "gone" not in fetched.families


def test_keys_helper_lists_sorted_keys(ordered_rows):
    _load(ordered_rows, [b"c", b"a", b"b"])
    assert ordered_rows.keys() == [b"a", b"b", b"c"]


def test_text_pivots_match_utf8_keys(ordered_rows):
    _load(ordered_rows, ["apple".encode(), "banana".encode(), "cherry".encode()])
    assert _collect(ordered_rows.ascend_range, "b", "c") == [b"banana"]
