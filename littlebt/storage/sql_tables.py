"""
SQL table catalog for LittleBT.

SqlTables persists one tables_t record per (parent, table_id) holding the
table's column-family metadata. Loading a record rebuilds the Table,
recomputes its family-order counter and wires a SqlRows for its rows.

Deleting a catalog record leaves the table's rows in rows_t. Use
SqlTables.drop to clear both in the right order.
"""

import logging
import threading
from typing import Any

from sqlalchemy import delete, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.engine import Engine, URL
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from littlebt.core.codec import CatalogCodec
from littlebt.core.model import ColumnFamily, Item
from littlebt.errors import PersistenceError
from littlebt.monitoring.observer import NullObserver, StoreObserver
from littlebt.storage.engine import create_store_engine
from littlebt.storage.models import TableModel, initialize_schema
from littlebt.storage.sql_rows import SqlRows
from littlebt.storage.tree import OrderedRows

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def next_order_counter(families: dict[str, ColumnFamily], floor: int = 0) -> int:
    """
    Derive the next family order for a table.

    The result is at least the number of live families, one past the
    largest live order, and the persisted high-water mark `floor`, so an
    order handed out once is never handed out again.
    """
    counter = len(families)
    if families:
        counter = max(counter, 1 + max(f.order for f in families.values()))
    return max(counter, floor)


class Table(Item):
    """
    An emulated table: catalog metadata plus a handle on its rows.
    """

    def __init__(
        self,
        parent: str,
        table_id: str,
        rows: OrderedRows,
        families: dict[str, ColumnFamily] | None = None,
        counter: int | None = None
    ):
        self.parent = parent
        self.table_id = table_id
        self.rows = rows
        self.families: dict[str, ColumnFamily] = families or {}
        self.counter = next_order_counter(self.families, counter or 0)
        self._mu = threading.Lock()

    def key(self) -> tuple[str, str]:
        return self.parent, self.table_id

    def encode(self) -> bytes:
        return CatalogCodec.encode(self.families, self.counter)

    @property
    def path(self) -> str:
        return f"{self.parent}/tables/{self.table_id}"

    def family_names(self) -> list[str]:
        """Family names in ascending order."""
        return [cf.name for cf in sorted(self.families.values(), key=lambda f: f.order)]

    def create_family(self, name: str, gc_rule: bytes | None = None) -> ColumnFamily:
        """
        Add a family, assigning it the next order.

        Raises:
            ValueError: if the family already exists
        """
        with self._mu:
            if name in self.families:
                raise ValueError(f"Family {name!r} already exists in {self.path}")
            cf = ColumnFamily(name=name, order=self.counter, gc_rule=gc_rule)
            self.families[name] = cf
            self.counter += 1
            return cf

    def update_family(self, name: str, gc_rule: bytes | None) -> ColumnFamily:
        """Replace the GC rule of an existing family."""
        with self._mu:
            cf = self.families.get(name)
            if cf is None:
                raise ValueError(f"Family {name!r} not found in {self.path}")
            cf.gc_rule = gc_rule
            return cf

    def drop_family(self, name: str) -> bool:
        """Remove a family. Its order is not reused."""
        with self._mu:
            return self.families.pop(name, None) is not None

    def __repr__(self) -> str:
        return f"Table({self.path!r}, families={self.family_names()}, counter={self.counter})"


class SqlTables:
    """
    Catalog of tables persisted in tables_t.
    """

    def __init__(self, engine: Engine, observer: StoreObserver | NullObserver | None = None):
        """
        Args:
            engine: Engine bound to the backing database
            observer: Telemetry collaborator shared with every SqlRows
        """
        self.engine = engine
        self.Session = sessionmaker(bind=engine)
        self.observer = observer or StoreObserver()

    @classmethod
    def connect(
        cls,
        url: str | URL | None = None,
        initialize: bool = True,
        observer: StoreObserver | NullObserver | None = None,
        **engine_kwargs: Any
    ) -> 'SqlTables':
        """
        Create an engine from `url` (or settings) and optionally bootstrap
        the schema.
        """
        engine = create_store_engine(url, **engine_kwargs)
        if initialize:
            initialize_schema(engine)
        return cls(engine, observer=observer)

    def rows_for(self, parent: str, table_id: str) -> SqlRows:
        return SqlRows(self.Session, parent, table_id, observer=self.observer)

    def new_table(self, parent: str, table_id: str) -> Table:
        """An unsaved, empty table wired to its row store."""
        return Table(parent, table_id, self.rows_for(parent, table_id))

    def _load(self, parent: str, table_id: str, metadata: bytes) -> Table:
        families, floor = CatalogCodec.decode(metadata)
        return Table(
            parent,
            table_id,
            self.rows_for(parent, table_id),
            families=families,
            counter=next_order_counter(families, floor),
        )

    def get(self, parent: str, table_id: str) -> Table | None:
        """Load one table, or None if it is not in the catalog."""
        target = f"{parent}/{table_id}"
        with self.observer.measure("GetTable", target) as stats:
            stmt = select(TableModel.metadata_blob).where(
                TableModel.parent == parent, TableModel.table_id == table_id
            )
            session = self.Session()
            try:
                metadata = session.execute(stmt).scalar_one_or_none()
            except SQLAlchemyError as e:
                raise PersistenceError("GetTable", target, e) from e
            finally:
                session.close()

            if metadata is None:
                return None
            stats.rows = 1
            return self._load(parent, table_id, metadata)

    def get_all(self) -> list[Table]:
        """Load every table in the catalog."""
        with self.observer.measure("GetAllTables", "*") as stats:
            stmt = select(TableModel.parent, TableModel.table_id, TableModel.metadata_blob).order_by(
                TableModel.parent, TableModel.table_id
            )
            session = self.Session()
            try:
                records = session.execute(stmt).all()
            except SQLAlchemyError as e:
                raise PersistenceError("GetAllTables", "*", e) from e
            finally:
                session.close()

            tables = [self._load(parent, table_id, metadata) for parent, table_id, metadata in records]
            stats.rows = len(tables)
            return tables

    def save(self, table: Table) -> None:
        """Write the table's catalog entry, replacing any previous one."""
        target = f"{table.parent}/{table.table_id}"
        values = {
            "parent": table.parent,
            "table_id": table.table_id,
            "metadata": table.encode(),
        }
        with self.observer.measure("SaveTable", target) as stats:
            session = self.Session()
            try:
                insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
                if insert is None:
                    session.merge(TableModel(
                        parent=values["parent"],
                        table_id=values["table_id"],
                        metadata_blob=values["metadata"],
                    ))
                else:
                    stmt = insert(TableModel.__table__).values(**values)
                    stmt = stmt.on_conflict_do_update(
                        index_elements=["parent", "table_id"],
                        set_={"metadata": stmt.excluded["metadata"]},
                    )
                    session.execute(stmt)
                session.commit()
                stats.rows = 1
            except SQLAlchemyError as e:
                session.rollback()
                raise PersistenceError("SaveTable", target, e) from e
            finally:
                session.close()

    def delete(self, table: Table) -> None:
        """Remove the catalog entry only; rows stay in rows_t."""
        target = f"{table.parent}/{table.table_id}"
        with self.observer.measure("DeleteTable", target) as stats:
            session = self.Session()
            try:
                result = session.execute(
                    delete(TableModel).where(
                        TableModel.parent == table.parent, TableModel.table_id == table.table_id
                    )
                )
                session.commit()
                stats.rows = max(result.rowcount, 0)
            except SQLAlchemyError as e:
                session.rollback()
                raise PersistenceError("DeleteTable", target, e) from e
            finally:
                session.close()

    def drop(self, table: Table) -> None:
        """Clear the table's rows, then remove its catalog entry."""
        table.rows.delete_all()
        self.delete(table)
        logger.info(f"Dropped table {table.path}")

    def close(self) -> None:
        """Close connection pool."""
        self.engine.dispose()
