"""
Ordered-tree interface shared by the row stores.

Mirrors the contract of a sorted in-memory tree: ascending traversal with
a visitor that returns False to stop, point lookup, replace-or-insert,
delete and count. Keys compare as raw bytes.
"""

from abc import ABC, abstractmethod
from typing import Callable, Union

from littlebt.core.model import Item, KeyLike, Row, to_key

# Visitor called once per row in ascending key order; a falsy return stops
RowIterator = Callable[[Row], bool]

Pivot = Union[Item, KeyLike]


def pivot_key(pivot: Pivot) -> bytes:
    """Key of a pivot given either as an Item or as a raw key."""
    if isinstance(pivot, Item):
        return to_key(pivot.key())
    return to_key(pivot)


class OrderedRows(ABC):
    """Row storage of a single table, ordered by row key."""

    @abstractmethod
    def ascend(self, iterator: RowIterator) -> None:
        """Visit every row in ascending key order."""

    @abstractmethod
    def ascend_from(self, pivot: Pivot, iterator: RowIterator) -> None:
        """Visit rows with key >= pivot in ascending order."""

    @abstractmethod
    def ascend_before(self, pivot: Pivot, iterator: RowIterator) -> None:
        """Visit rows with key < pivot in ascending order."""

    @abstractmethod
    def ascend_range(self, greater_or_equal: Pivot, less_than: Pivot, iterator: RowIterator) -> None:
        """Visit rows in [greater_or_equal, less_than) in ascending order."""

    @abstractmethod
    def get(self, key: Pivot) -> Row:
        """Return the row for `key`, or an empty Row if there is none."""

    @abstractmethod
    def count(self) -> int:
        """Exact number of rows."""

    @abstractmethod
    def upsert(self, row: Row) -> Row:
        """Store `row`, replacing any previous value under its key."""

    @abstractmethod
    def delete(self, key: Pivot) -> None:
        """Remove one row. Missing keys are ignored."""

    @abstractmethod
    def delete_all(self) -> None:
        """Remove every row."""

    def __len__(self) -> int:
        return self.count()

    def keys(self) -> list[bytes]:
        """All row keys in ascending order."""
        found: list[bytes] = []

        def collect(row: Row) -> bool:
            found.append(row.key())
            return True

        self.ascend(collect)
        return found
