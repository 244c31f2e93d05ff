"""
Row and family value types.

A row is addressed by a byte-string key and holds a mapping of family name
to Family. Each family groups columns; each column holds cells ordered
newest first. Family `order` tokens are assigned by the owning table's
catalog entry and are copied onto every row that uses the family.
"""

import bisect
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Any, Hashable, Union

KeyLike = Union[bytes, bytearray, memoryview, str]


def to_key(key: KeyLike) -> bytes:
    """Normalise a row key. Text keys are taken as UTF-8."""
    if isinstance(key, bytes):
        return key
    if isinstance(key, str):
        return key.encode("utf-8")
    if isinstance(key, (bytearray, memoryview)):
        return bytes(key)
    raise TypeError(f"row key must be bytes or str, not {type(key).__name__}")


class Item(ABC):
    """
    An entry that can be held by an ordered store.

    Implementations expose their identity through `key()` and their
    persisted payload through `encode()`.
    """

    @abstractmethod
    def key(self) -> Hashable:
        """Identity of the item inside its store."""

    @abstractmethod
    def encode(self) -> bytes:
        """Serialized payload of the item."""


@dataclass
class Cell:
    """A single timestamped value. `timestamp` is in microseconds."""
    timestamp: int
    value: bytes
    labels: list[str] = field(default_factory=list)


@dataclass
class Family:
    """A named column group inside one row."""
    name: str
    order: int = 0
    cells: dict[str, list[Cell]] = field(default_factory=dict)

    @property
    def col_names(self) -> list[str]:
        """Column qualifiers in ascending order."""
        return sorted(self.cells)

    def set_cell(self, column: str, cell: Cell) -> None:
        """
        Insert a cell, replacing any existing cell with the same timestamp.

        Cells within a column are kept newest first.
        """
        cells = self.cells.setdefault(column, [])
        neg_timestamps = [-c.timestamp for c in cells]
        pos = bisect.bisect_left(neg_timestamps, -cell.timestamp)
        if pos < len(cells) and cells[pos].timestamp == cell.timestamp:
            cells[pos] = cell
        else:
            cells.insert(pos, cell)

    def delete_column(self, column: str) -> bool:
        """Remove a column and all its cells. Returns False if absent."""
        return self.cells.pop(column, None) is not None

    def copy(self) -> 'Family':
        return Family(
            name=self.name,
            order=self.order,
            cells={
                col: [Cell(c.timestamp, c.value, list(c.labels)) for c in cells]
                for col, cells in self.cells.items()
            },
        )


class Row(Item):
    """
    A stored row.

    A row with no families is how absence is represented: looking up a
    missing key yields an empty Row rather than an error.
    """

    def __init__(self, key: KeyLike, families: dict[str, Family] | None = None):
        self._key = to_key(key)
        self.families: dict[str, Family] = families if families is not None else {}

    def key(self) -> bytes:
        return self._key

    def encode(self) -> bytes:
        from littlebt.core.codec import ValueCodec
        return ValueCodec.encode(self.families)

    @classmethod
    def decode(cls, key: KeyLike, payload: bytes | None) -> 'Row':
        """Materialise a row from its stored payload."""
        from littlebt.core.codec import ValueCodec
        return cls(key, ValueCodec.decode(payload))

    def is_empty(self) -> bool:
        return not self.families

    def sorted_families(self) -> list[Family]:
        """Families in ascending `order`."""
        return sorted(self.families.values(), key=lambda f: (f.order, f.name))

    def get_or_create_family(self, name: str, order: int) -> Family:
        fam = self.families.get(name)
        if fam is None:
            fam = Family(name=name, order=order)
            self.families[name] = fam
        return fam

    def copy(self) -> 'Row':
        return Row(self._key, {name: fam.copy() for name, fam in self.families.items()})

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, Row):
            return NotImplemented
        return self._key == other._key and self.families == other.families

    def __repr__(self) -> str:
        return f"Row(key={self._key!r}, families={sorted(self.families)})"


@dataclass
class ColumnFamily:
    """
    Catalog-level description of a family.

    `gc_rule` is an opaque serialized garbage-collection rule; it is kept
    as-is and never interpreted here.
    """
    name: str
    order: int
    gc_rule: bytes | None = None
