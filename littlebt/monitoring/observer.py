"""
Observability hooks for the storage layer.

Stores do not log or time themselves. They wrap each operation in
`observer.measure(...)` and report row counts through the yielded
OperationStats; the observer decides what to do with that.
"""

import time
import logging
from contextlib import contextmanager
from dataclasses import dataclass
from typing import Iterator

from littlebt.config.settings import settings
from littlebt.monitoring.performance_metrics import PerformanceMetrics, get_metrics_instance

logger = logging.getLogger(__name__)


@dataclass
class OperationStats:
    """Mutable counters filled in by the store while an operation runs."""
    rows: int = 0


class NullObserver:
    """Observer that records nothing."""

    @contextmanager
    def measure(self, operation: str, target: str, detail: str = "") -> Iterator[OperationStats]:
        yield OperationStats()


class StoreObserver:
    """
    Logs every storage operation and records its duration.

    Start and completion are logged at `level`; a failing operation is
    logged at WARNING with the exception and re-raised unchanged.
    """

    def __init__(
        self,
        metrics: PerformanceMetrics | None = None,
        level: int = logging.INFO,
        record_metrics: bool | None = None
    ):
        self.metrics = metrics or get_metrics_instance()
        self.level = level
        self.record_metrics = settings.METRICS_ENABLED if record_metrics is None else record_metrics

    @staticmethod
    def _describe(operation: str, target: str, detail: str) -> str:
        if detail:
            return f"{operation} for {detail} of table {target}"
        return f"{operation} for table {target}"

    @contextmanager
    def measure(self, operation: str, target: str, detail: str = "") -> Iterator[OperationStats]:
        description = self._describe(operation, target, detail)
        stats = OperationStats()
        logger.log(self.level, description)
        start = time.perf_counter()
        failed = False
        try:
            yield stats
        except Exception as e:
            failed = True
            logger.warning(f"{description} failed after {(time.perf_counter() - start) * 1000:.2f}ms: {e}")
            raise
        finally:
            duration_ms = (time.perf_counter() - start) * 1000
            if not failed:
                logger.log(self.level, f"{description} completed in {duration_ms:.2f}ms")
            if self.record_metrics:
                self.metrics.record(operation, target, duration_ms, row_count=stats.rows, failed=failed)
