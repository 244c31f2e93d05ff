"""
Payload codecs.

Row family mappings and table catalog entries are stored as opaque blobs.
Both are written as Arrow IPC streams against the fixed schemas in
littlebt.core.schemas. There is no embedded format version: a payload must
match the current schema exactly, otherwise decoding fails with
CorruptPayloadError.
"""

import logging
from typing import Any

import pyarrow as pa

from littlebt.core import schemas
from littlebt.core.model import Cell, ColumnFamily, Family
from littlebt.errors import CodecError, CorruptPayloadError

logger = logging.getLogger(__name__)


def _write_stream(table: pa.Table) -> bytes:
    sink = pa.BufferOutputStream()
    with pa.ipc.new_stream(sink, table.schema) as writer:
        writer.write_table(table)
    return sink.getvalue().to_pybytes()


def _read_stream(payload: bytes, expected: pa.Schema) -> pa.Table:
    try:
        table = pa.ipc.open_stream(pa.py_buffer(payload)).read_all()
    except (pa.ArrowException, OSError) as e:
        raise CorruptPayloadError(f"Unreadable payload ({len(payload)} bytes): {e}") from e

    if not table.schema.equals(expected, check_metadata=False):
        raise CorruptPayloadError(
            f"Payload schema does not match expected layout: {table.schema}"
        )
    return table


class ValueCodec:
    """Encodes a row's family mapping to bytes and back."""

    @staticmethod
    def encode(families: dict[str, Family] | None) -> bytes:
        """
        Serialize a family mapping.

        Args:
            families: family name -> Family, or None for a row that was
                never materialised

        Returns:
            Arrow IPC stream bytes; b"" when `families` is None
        """
        if families is None:
            return b""

        records = []
        for fam in sorted(families.values(), key=lambda f: (f.order, f.name)):
            records.append({
                'name': fam.name,
                'order': fam.order,
                'columns': [
                    {
                        'qualifier': col,
                        'cells': [
                            {'timestamp': c.timestamp, 'value': c.value, 'labels': c.labels}
                            for c in fam.cells[col]
                        ],
                    }
                    for col in fam.col_names
                ],
            })

        try:
            table = pa.Table.from_pylist(records, schema=schemas.get_row_families_schema())
        except (pa.ArrowException, TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode families {sorted(families)}: {e}") from e
        return _write_stream(table)

    @staticmethod
    def decode(payload: bytes | None) -> dict[str, Family]:
        """
        Rebuild a family mapping. An empty or missing payload decodes to {}.
        """
        if not payload:
            return {}

        table = _read_stream(bytes(payload), schemas.get_row_families_schema())
        families: dict[str, Family] = {}
        for record in table.to_pylist():
            fam = Family(name=record['name'], order=record['order'])
            for column in record['columns'] or []:
                fam.cells[column['qualifier']] = [
                    Cell(timestamp=c['timestamp'], value=c['value'], labels=c['labels'] or [])
                    for c in column['cells'] or []
                ]
            families[fam.name] = fam
        return families


class CatalogCodec:
    """Encodes a table's column-family metadata and order high-water mark."""

    @staticmethod
    def encode(families: dict[str, ColumnFamily], next_order: int = 0) -> bytes:
        records: list[dict[str, Any]] = [
            {'name': cf.name, 'order': cf.order, 'gc_rule': cf.gc_rule}
            for cf in sorted(families.values(), key=lambda f: (f.order, f.name))
        ]
        schema = schemas.get_catalog_schema().with_metadata(
            {schemas.NEXT_ORDER_KEY: str(next_order).encode('ascii')}
        )
        try:
            table = pa.Table.from_pylist(records, schema=schema)
        except (pa.ArrowException, TypeError, ValueError) as e:
            raise CodecError(f"Cannot encode catalog families {sorted(families)}: {e}") from e
        return _write_stream(table)

    @staticmethod
    def decode(payload: bytes | None) -> tuple[dict[str, ColumnFamily], int]:
        """
        Returns:
            (family name -> ColumnFamily, persisted next-order floor)
        """
        if not payload:
            return {}, 0

        table = _read_stream(bytes(payload), schemas.get_catalog_schema())
        families = {
            r['name']: ColumnFamily(name=r['name'], order=r['order'], gc_rule=r['gc_rule'])
            for r in table.to_pylist()
        }

        floor = 0
        metadata = table.schema.metadata or {}
        raw = metadata.get(schemas.NEXT_ORDER_KEY)
        if raw is not None:
            try:
                floor = int(raw.decode('ascii'))
            except (UnicodeDecodeError, ValueError) as e:
                raise CorruptPayloadError(f"Invalid next_order marker {raw!r}") from e
        return families, floor
