"""Relational storage for rows and the table catalog."""

from littlebt.storage.engine import create_store_engine
from littlebt.storage.memory_rows import MemoryRows
from littlebt.storage.models import RowModel, TableModel, describe_schema, initialize_schema
from littlebt.storage.sql_rows import SqlRows
from littlebt.storage.sql_tables import SqlTables, Table, next_order_counter
from littlebt.storage.tree import OrderedRows

__all__ = [
    "create_store_engine",
    "MemoryRows",
    "RowModel",
    "TableModel",
    "describe_schema",
    "initialize_schema",
    "SqlRows",
    "SqlTables",
    "Table",
    "next_order_counter",
    "OrderedRows",
]
