"""Value types and payload codecs."""

from littlebt.core.model import Cell, ColumnFamily, Family, Item, Row
from littlebt.core.codec import CatalogCodec, ValueCodec

__all__ = [
    "Cell",
    "ColumnFamily",
    "Family",
    "Item",
    "Row",
    "CatalogCodec",
    "ValueCodec",
]
