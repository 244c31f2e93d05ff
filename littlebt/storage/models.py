"""
SQLAlchemy Models for LittleBT Storage.

Two relations back the emulator:
- rows_t: one record per row, the family mapping stored as an opaque blob
- tables_t: one record per table, the catalog metadata stored as a blob

Deleting a tables_t record does not touch rows_t; the relations are
independent.
"""

import logging
from typing import Any

from sqlalchemy import Column, LargeBinary, Text, inspect
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base

from littlebt.config.settings import settings

logger = logging.getLogger(__name__)

Base = declarative_base()

# Row keys compare byte-wise; PostgreSQL needs the "C" collation for that.
# SQLite's default BINARY collation already compares raw bytes.
RowKeyType = Text().with_variant(Text(collation="C"), "postgresql")


class RowModel(Base):
    """
    Represents a single row of an emulated table.
    """
    __tablename__ = settings.ROWS_TABLE

    parent = Column(Text, primary_key=True, nullable=False)
    table_id = Column(Text, primary_key=True, nullable=False)
    row_key = Column(RowKeyType, primary_key=True, nullable=False)
    families = Column(LargeBinary, nullable=False)

    def __repr__(self):
        return f"<Row(parent='{self.parent}', table_id='{self.table_id}', row_key={self.row_key!r})>"


class TableModel(Base):
    """
    Represents the catalog entry of an emulated table.
    """
    __tablename__ = settings.TABLES_TABLE

    parent = Column(Text, primary_key=True, nullable=False)
    table_id = Column(Text, primary_key=True, nullable=False)
    metadata_blob = Column("metadata", LargeBinary, nullable=False)

    def __repr__(self):
        return f"<Table(parent='{self.parent}', table_id='{self.table_id}')>"


def initialize_schema(engine: Engine) -> None:
    """
    Create rows_t and tables_t if they do not exist.

    Safe to call on every start. Existing relations are left untouched,
    including when their shape differs from the models above.
    """
    Base.metadata.create_all(engine, checkfirst=True)
    logger.info(f"Schema ready on {engine.url.render_as_string(hide_password=True)}")


def describe_schema(engine: Engine) -> dict[str, Any]:
    """Return column names, types and primary keys of both relations."""
    inspector = inspect(engine)
    shape: dict[str, Any] = {}
    for name in (RowModel.__tablename__, TableModel.__tablename__):
        if not inspector.has_table(name):
            continue
        shape[name] = {
            "columns": [
                (col["name"], str(col["type"]), col["nullable"])
                for col in inspector.get_columns(name)
            ],
            "primary_key": list(inspector.get_pk_constraint(name)["constrained_columns"]),
        }
    return shape
