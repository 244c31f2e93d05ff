"""
Pytest configuration for LittleBT.

Ensures the project root is on sys.path and provides stores backed by an
in-memory SQLite database.
"""

import os
import sys

import pytest
from sqlalchemy.orm import sessionmaker

# Compute project root (parent of this tests directory)
_PROJECT_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), os.pardir))
if _PROJECT_ROOT not in sys.path:
    sys.path.insert(0, _PROJECT_ROOT)

from littlebt.core.model import Cell, Row
from littlebt.monitoring.observer import StoreObserver
from littlebt.monitoring.performance_metrics import PerformanceMetrics
from littlebt.storage.engine import create_store_engine
from littlebt.storage.memory_rows import MemoryRows
from littlebt.storage.models import initialize_schema
from littlebt.storage.sql_rows import SqlRows
from littlebt.storage.sql_tables import SqlTables

PARENT = "projects/test/instances/emulator"


def make_row(key, families=None):
    """
    Build a Row from a compact description.

    families: {family: (order, {column: [(timestamp, value), ...]})}
    """
    row = Row(key)
    for fam_name, (order, columns) in (families or {}).items():
        fam = row.get_or_create_family(fam_name, order)
        for column, cells in columns.items():
            for timestamp, value in cells:
                fam.set_cell(column, Cell(timestamp, value))
    return row


@pytest.fixture
def engine():
    """In-memory SQLite engine with the schema in place"""
    eng = create_store_engine("sqlite://")
    initialize_schema(eng)
    yield eng
    eng.dispose()


@pytest.fixture
def metrics():
    return PerformanceMetrics()


@pytest.fixture
def observer(metrics):
    return StoreObserver(metrics=metrics, record_metrics=True)


@pytest.fixture
def sql_rows(engine, observer):
    return SqlRows(sessionmaker(bind=engine), PARENT, "table-1", observer=observer)


@pytest.fixture
def sql_tables(engine, observer):
    return SqlTables(engine, observer=observer)


@pytest.fixture(params=["sql", "memory"])
def ordered_rows(request, engine, observer):
    """Both ordered row stores, so they are held to the same behaviour"""
    if request.param == "sql":
        return SqlRows(sessionmaker(bind=engine), PARENT, "table-1", observer=observer)
    return MemoryRows(PARENT, "table-1", observer=observer)
