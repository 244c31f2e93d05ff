"""
SQL row store for LittleBT.

SqlRows exposes one table's rows (parent + table_id) through the
ordered-tree interface, backed by the rows_t relation.

Locking: upsert, delete and delete_all hold a per-table lock for the whole
round trip. Reads take no lock and see whatever the single SELECT sees
under the database's default read consistency; a scan is not a snapshot
across statements.
"""

import logging
import threading
from typing import Any

from sqlalchemy import delete, func, select
from sqlalchemy.dialects import postgresql, sqlite
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, sessionmaker

from littlebt.config.settings import settings
from littlebt.core.model import Row
from littlebt.errors import PersistenceError
from littlebt.monitoring.observer import NullObserver, OperationStats, StoreObserver
from littlebt.storage.models import RowModel
from littlebt.storage.tree import OrderedRows, Pivot, RowIterator, pivot_key

logger = logging.getLogger(__name__)

_UPSERT_DIALECTS = {
    "postgresql": postgresql.insert,
    "sqlite": sqlite.insert,
}


def to_db_key(key: bytes) -> str:
    """
    Map a row key onto the text column.

    Each byte becomes the code point of the same value, so ordering under
    a binary collation matches byte-wise ordering of the keys.
    """
    return key.decode("latin-1")


def from_db_key(value: str) -> bytes:
    return value.encode("latin-1")


def _describe_key(key: bytes) -> str:
    return key.decode("utf-8", errors="backslashreplace")


class SqlRows(OrderedRows):
    """
    Rows of one table persisted in rows_t.
    """

    def __init__(
        self,
        session_factory: sessionmaker,
        parent: str,
        table_id: str,
        observer: StoreObserver | NullObserver | None = None,
        batch_size: int | None = None
    ):
        """
        Args:
            session_factory: Session factory bound to the backing engine
            parent: Instance path, e.g. "projects/p/instances/i"
            table_id: Table name inside the instance
            observer: Telemetry collaborator, defaults to StoreObserver()
            batch_size: Rows fetched per round while streaming a scan
        """
        self.Session = session_factory
        self.parent = parent
        self.table_id = table_id
        self.observer = observer or StoreObserver()
        self.batch_size = batch_size or settings.SCAN_BATCH_SIZE
        self._lock = threading.Lock()

    @property
    def target(self) -> str:
        return f"{self.parent}/{self.table_id}"

    def _scope(self) -> list[Any]:
        return [RowModel.parent == self.parent, RowModel.table_id == self.table_id]

    def _query(self, operation: str, iterator: RowIterator, stats: OperationStats, *criteria: Any) -> None:
        """Run one ordered SELECT and feed the visitor until it stops."""
        stmt = (
            select(RowModel.row_key, RowModel.families)
            .where(*self._scope(), *criteria)
            .order_by(RowModel.row_key.asc())
        )
        session = self.Session()
        try:
            result = session.execute(stmt, execution_options={"yield_per": self.batch_size})
            for row_key, payload in result:
                stats.rows += 1
                if not iterator(Row.decode(from_db_key(row_key), payload)):
                    break
            result.close()
        except SQLAlchemyError as e:
            raise PersistenceError(operation, self.target, e) from e
        finally:
            session.close()

    def ascend(self, iterator: RowIterator) -> None:
        with self.observer.measure("Ascend", self.target) as stats:
            self._query("Ascend", iterator, stats)

    def ascend_from(self, pivot: Pivot, iterator: RowIterator) -> None:
        key = pivot_key(pivot)
        with self.observer.measure("AscendGreaterOrEqual", self.target, _describe_key(key)) as stats:
            self._query("AscendGreaterOrEqual", iterator, stats,
                        RowModel.row_key >= to_db_key(key))

    def ascend_before(self, pivot: Pivot, iterator: RowIterator) -> None:
        key = pivot_key(pivot)
        with self.observer.measure("AscendLessThan", self.target, _describe_key(key)) as stats:
            self._query("AscendLessThan", iterator, stats,
                        RowModel.row_key < to_db_key(key))

    def ascend_range(self, greater_or_equal: Pivot, less_than: Pivot, iterator: RowIterator) -> None:
        low = pivot_key(greater_or_equal)
        high = pivot_key(less_than)
        detail = f"{_describe_key(low)}/{_describe_key(high)}"
        with self.observer.measure("AscendRange", self.target, detail) as stats:
            self._query("AscendRange", iterator, stats,
                        RowModel.row_key >= to_db_key(low),
                        RowModel.row_key < to_db_key(high))

    def get(self, key: Pivot) -> Row:
        row_key = pivot_key(key)
        with self.observer.measure("Get", self.target, _describe_key(row_key)) as stats:
            stmt = select(RowModel.families).where(
                *self._scope(), RowModel.row_key == to_db_key(row_key)
            )
            session = self.Session()
            try:
                payload = session.execute(stmt).scalar_one_or_none()
            except SQLAlchemyError as e:
                raise PersistenceError("Get", self.target, e) from e
            finally:
                session.close()

            if payload is None:
                return Row(row_key)
            stats.rows = 1
            return Row.decode(row_key, payload)

    def count(self) -> int:
        with self.observer.measure("Len", self.target) as stats:
            stmt = select(func.count()).select_from(RowModel).where(*self._scope())
            session = self.Session()
            try:
                total = session.execute(stmt).scalar_one()
            except SQLAlchemyError as e:
                raise PersistenceError("Len", self.target, e) from e
            finally:
                session.close()
            stats.rows = total
            return total

    def _write(self, operation: str, detail: str, work) -> None:
        """Run `work(session)` in its own transaction under the table lock."""
        with self._lock:
            with self.observer.measure(operation, self.target, detail) as stats:
                session = self.Session()
                try:
                    stats.rows = work(session) or 0
                    session.commit()
                except SQLAlchemyError as e:
                    session.rollback()
                    raise PersistenceError(operation, self.target, e) from e
                finally:
                    session.close()

    def upsert(self, row: Row) -> Row:
        """
        Write `row`, fully replacing whatever was stored under its key.
        """
        payload = row.encode()
        values = {
            "parent": self.parent,
            "table_id": self.table_id,
            "row_key": to_db_key(row.key()),
            "families": payload,
        }

        def work(session: Session) -> int:
            insert = _UPSERT_DIALECTS.get(session.get_bind().dialect.name)
            if insert is None:
                session.merge(RowModel(**values))
                return 1
            stmt = insert(RowModel).values(**values)
            stmt = stmt.on_conflict_do_update(
                index_elements=["parent", "table_id", "row_key"],
                set_={"families": stmt.excluded.families},
            )
            session.execute(stmt)
            return 1

        self._write("ReplaceOrInsert", _describe_key(row.key()), work)
        return row

    def delete(self, key: Pivot) -> None:
        row_key = pivot_key(key)

        def work(session: Session) -> int:
            result = session.execute(
                delete(RowModel).where(*self._scope(), RowModel.row_key == to_db_key(row_key))
            )
            return max(result.rowcount, 0)

        self._write("Delete", _describe_key(row_key), work)

    def delete_all(self) -> None:
        def work(session: Session) -> int:
            return max(session.execute(delete(RowModel).where(*self._scope())).rowcount, 0)

        self._write("DeleteAll", "", work)

    def __repr__(self) -> str:
        return f"SqlRows({self.target!r})"
