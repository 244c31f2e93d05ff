from littlebt.monitoring.performance_metrics import PerformanceMetrics, get_metrics_instance
from littlebt.monitoring.observer import NullObserver, OperationStats, StoreObserver

__all__ = [
    "PerformanceMetrics",
    "get_metrics_instance",
    "NullObserver",
    "OperationStats",
    "StoreObserver",
]
