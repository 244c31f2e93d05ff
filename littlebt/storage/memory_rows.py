"""
Memory Row Storage for LittleBT

In-memory sorted implementation of the ordered-tree interface. It keeps
encoded payloads rather than live Row objects, so callers get the same
copy semantics as from the SQL store. Useful for database-less runs and
as a reference when checking SqlRows behaviour.
"""

import bisect
import threading

from littlebt.core.model import Row
from littlebt.monitoring.observer import NullObserver, StoreObserver
from littlebt.storage.tree import OrderedRows, Pivot, RowIterator, pivot_key


class MemoryRows(OrderedRows):
    """Sorted in-memory row storage for one table"""

    def __init__(self, parent: str = "", table_id: str = "",
                 observer: StoreObserver | NullObserver | None = None):
        self.parent = parent
        self.table_id = table_id
        self.observer = observer or NullObserver()
        self._keys: list[bytes] = []
        self._data: dict[bytes, bytes] = {}
        self._lock = threading.Lock()

    @property
    def target(self) -> str:
        return f"{self.parent}/{self.table_id}"

    def _visit(self, lo: int, hi: int, iterator: RowIterator, stats) -> None:
        # Snapshot the slice so writers can proceed while the visitor runs
        keys = self._keys[lo:hi]
        for key in keys:
            payload = self._data.get(key)
            if payload is None:
                continue
            stats.rows += 1
            if not iterator(Row.decode(key, payload)):
                break

    def ascend(self, iterator: RowIterator) -> None:
        with self.observer.measure("Ascend", self.target) as stats:
            self._visit(0, len(self._keys), iterator, stats)

    def ascend_from(self, pivot: Pivot, iterator: RowIterator) -> None:
        key = pivot_key(pivot)
        with self.observer.measure("AscendGreaterOrEqual", self.target) as stats:
            self._visit(bisect.bisect_left(self._keys, key), len(self._keys), iterator, stats)

    def ascend_before(self, pivot: Pivot, iterator: RowIterator) -> None:
        key = pivot_key(pivot)
        with self.observer.measure("AscendLessThan", self.target) as stats:
            self._visit(0, bisect.bisect_left(self._keys, key), iterator, stats)

    def ascend_range(self, greater_or_equal: Pivot, less_than: Pivot, iterator: RowIterator) -> None:
        lo = bisect.bisect_left(self._keys, pivot_key(greater_or_equal))
        hi = bisect.bisect_left(self._keys, pivot_key(less_than))
        with self.observer.measure("AscendRange", self.target) as stats:
            if lo < hi:
                self._visit(lo, hi, iterator, stats)

    def get(self, key: Pivot) -> Row:
        row_key = pivot_key(key)
        with self.observer.measure("Get", self.target) as stats:
            payload = self._data.get(row_key)
            if payload is None:
                return Row(row_key)
            stats.rows = 1
            return Row.decode(row_key, payload)

    def count(self) -> int:
        with self.observer.measure("Len", self.target) as stats:
            stats.rows = len(self._data)
            return stats.rows

    def upsert(self, row: Row) -> Row:
        payload = row.encode()
        key = row.key()
        with self._lock:
            with self.observer.measure("ReplaceOrInsert", self.target) as stats:
                if key not in self._data:
                    bisect.insort(self._keys, key)
                self._data[key] = payload
                stats.rows = 1
        return row

    def delete(self, key: Pivot) -> None:
        row_key = pivot_key(key)
        with self._lock:
            with self.observer.measure("Delete", self.target) as stats:
                if self._data.pop(row_key, None) is None:
                    return
                pos = bisect.bisect_left(self._keys, row_key)
                del self._keys[pos]
                stats.rows = 1

    def delete_all(self) -> None:
        with self._lock:
            with self.observer.measure("DeleteAll", self.target) as stats:
                stats.rows = len(self._data)
                self._keys = []
                self._data.clear()
