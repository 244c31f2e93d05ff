"""
Tests specific to the in-memory row store
"""

from conftest import make_row
from littlebt.monitoring.observer import NullObserver
from littlebt.storage.memory_rows import MemoryRows


def test_defaults_to_silent_observer():
    assert isinstance(MemoryRows().observer, NullObserver)


def test_writes_during_scan_do_not_break_iteration():
    rows = MemoryRows("p", "t")
    for key in (b"a", b"b", b"c"):
        rows.upsert(make_row(key))
    seen = []

    def visit(row):
        seen.append(row.key())
        rows.delete(b"c")
        rows.upsert(make_row(b"0"))
        return True

    rows.ascend(visit)

    assert seen == [b"a", b"b"]
    assert rows.keys() == [b"0", b"a", b"b"]


def test_stored_rows_are_copies():
    rows = MemoryRows()
    row = make_row(b"k", {"cf": (0, {"c": [(1, b"v")]})})
    rows.upsert(row)

    row.families["cf"].cells["c"][0].value = b"mutated"

    assert rows.get(b"k").families["cf"].cells["c"][0].value == b"v"
