"""
Storage operation metrics for LittleBT.

Every observed call (a scan, a point lookup, an upsert, a catalog load)
lands here as one sample. Samples are folded into per-operation totals:
calls, failures, time spent and rows touched. Rows are also tallied per
table so a long emulator session can show which tables it scanned most.
"""

import time
import logging
import threading
from collections import Counter, defaultdict, deque
from dataclasses import dataclass
from typing import Any, Optional

logger = logging.getLogger(__name__)


@dataclass
class MetricSample:
    """One observed storage call."""
    operation: str
    target: str
    duration_ms: float
    row_count: int = 0
    failed: bool = False
    timestamp: float = 0.0


@dataclass
class OperationTotals:
    """Running totals for one operation name."""
    calls: int = 0
    failures: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0
    rows: int = 0

    def add(self, sample: MetricSample) -> None:
        self.calls += 1
        self.failures += sample.failed
        self.total_ms += sample.duration_ms
        self.max_ms = max(self.max_ms, sample.duration_ms)
        self.rows += sample.row_count

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.calls if self.calls else 0.0

    @property
    def failure_rate(self) -> float:
        return self.failures / self.calls if self.calls else 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "calls": self.calls,
            "failures": self.failures,
            "failure_rate": round(self.failure_rate, 4),
            "avg_ms": round(self.avg_ms, 2),
            "max_ms": round(self.max_ms, 2),
            "rows": self.rows,
        }


class PerformanceMetrics:
    """
    Thread-safe sink for storage operation samples.

    Usage:
        metrics = PerformanceMetrics()
        metrics.record("Get", "projects/p/instances/i/t", duration_ms=1.2, row_count=1)
        metrics.get_metrics("Get")
    """

    def __init__(self, sample_limit: int = 1000):
        self._totals: dict[str, OperationTotals] = defaultdict(OperationTotals)
        self._recent: dict[str, deque[MetricSample]] = {}
        self._rows_by_table: Counter[str] = Counter()
        self._sample_limit = sample_limit
        self._data_lock = threading.Lock()
        self._enabled = True

    @property
    def enabled(self) -> bool:
        return self._enabled

    def enable(self) -> None:
        self._enabled = True

    def disable(self) -> None:
        self._enabled = False

    def reset(self) -> None:
        with self._data_lock:
            self._totals.clear()
            self._recent.clear()
            self._rows_by_table.clear()

    def record(
        self,
        operation: str,
        target: str,
        duration_ms: float,
        row_count: int = 0,
        failed: bool = False
    ) -> None:
        """
        Record one storage call.

        Args:
            operation: Store operation name, e.g. "AscendRange"
            target: Table path the call ran against ("*" for the whole catalog)
            duration_ms: Wall time of the call
            row_count: Rows visited, returned or written
            failed: Whether the call raised
        """
        if not self._enabled:
            return

        sample = MetricSample(operation, target, duration_ms, row_count, failed, time.time())
        with self._data_lock:
            self._totals[operation].add(sample)
            self._rows_by_table[target] += row_count
            recent = self._recent.get(operation)
            if recent is None:
                recent = self._recent[operation] = deque(maxlen=self._sample_limit)
            recent.append(sample)

    def get_metrics(self, operation: str | None = None) -> dict[str, dict[str, Any]]:
        """Totals per operation, or only for `operation` when given."""
        with self._data_lock:
            if operation is not None:
                totals = self._totals.get(operation)
                return {operation: totals.to_dict()} if totals else {}
            return {name: totals.to_dict() for name, totals in self._totals.items()}

    def get_recent_samples(self, operation: str, limit: int = 100) -> list[MetricSample]:
        """Newest samples of `operation`, oldest first."""
        with self._data_lock:
            return list(self._recent.get(operation, ()))[-limit:]

    def get_summary(self, top_tables: int = 5) -> dict[str, Any]:
        """
        Session-wide view: overall call and failure counts, the per-operation
        totals, and the tables with the most rows touched.
        """
        with self._data_lock:
            calls = sum(t.calls for t in self._totals.values())
            failures = sum(t.failures for t in self._totals.values())
            return {
                "calls": calls,
                "failures": failures,
                "rows": sum(t.rows for t in self._totals.values()),
                "operations": {name: t.to_dict() for name, t in sorted(self._totals.items())},
                "busiest_tables": [
                    (target, rows)
                    for target, rows in self._rows_by_table.most_common(top_tables)
                    if rows
                ],
            }

    def log_summary(self) -> None:
        """Log the session summary at INFO, one line per operation."""
        summary = self.get_summary()
        if not summary["calls"]:
            logger.info("No storage operations recorded")
            return

        logger.info(
            f"Storage operations: {summary['calls']} calls, "
            f"{summary['failures']} failed, {summary['rows']} rows"
        )
        for name, totals in summary["operations"].items():
            logger.info(
                f"  {name}: {totals['calls']} calls, {totals['rows']} rows, "
                f"avg {totals['avg_ms']:.2f}ms, max {totals['max_ms']:.2f}ms, "
                f"failure rate {totals['failure_rate']:.1%}"
            )
        for target, rows in summary["busiest_tables"]:
            logger.info(f"  table {target}: {rows} rows")


_default_metrics: Optional[PerformanceMetrics] = None
_default_lock = threading.Lock()


def get_metrics_instance() -> PerformanceMetrics:
    """Get the process-wide metrics instance."""
    global _default_metrics
    if _default_metrics is None:
        with _default_lock:
            if _default_metrics is None:
                _default_metrics = PerformanceMetrics()
    return _default_metrics
