"""
Arrow Schemas for LittleBT payloads.

This module defines the Apache Arrow schemas used for:
- Row payloads: one record per family, columns and cells nested inside
- Catalog payloads: one record per column family of a table
"""

import pyarrow as pa

# Cell Schema - a single timestamped value
CELL_TYPE = pa.struct([
    ('timestamp', pa.int64()),
    ('value', pa.binary()),
    ('labels', pa.list_(pa.string())),
])

# Column Schema - qualifier plus its cells, newest first
COLUMN_TYPE = pa.struct([
    ('qualifier', pa.string()),
    ('cells', pa.list_(CELL_TYPE)),
])

# Row Families Schema
ROW_FAMILIES_SCHEMA = pa.schema([
    ('name', pa.string()),
    ('order', pa.uint64()),
    ('columns', pa.list_(COLUMN_TYPE)),
])

# Catalog Schema - family metadata of one table
CATALOG_SCHEMA = pa.schema([
    ('name', pa.string()),
    ('order', pa.uint64()),
    ('gc_rule', pa.binary()),
])

# Schema metadata key carrying the table's order high-water mark
NEXT_ORDER_KEY = b'next_order'


def get_row_families_schema() -> pa.Schema:
    """Return the Arrow schema for a row's family mapping."""
    return ROW_FAMILIES_SCHEMA


def get_catalog_schema() -> pa.Schema:
    """Return the Arrow schema for a table's catalog entry."""
    return CATALOG_SCHEMA
