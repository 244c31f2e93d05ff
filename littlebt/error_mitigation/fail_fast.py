"""
Fail-fast policy for storage errors.

The stores raise StoreError and leave the decision to the caller. An
emulator process that would rather crash than keep serving after a failed
write wraps its stores (or single calls) with this module: any StoreError
is logged at CRITICAL and the process exits with status 1.
"""

import functools
import logging
import sys
from typing import Any, Callable, TypeVar

from littlebt.errors import StoreError

logger = logging.getLogger(__name__)

T = TypeVar("T")

EXIT_STATUS = 1


def _abort(error: StoreError, where: str) -> None:
    logger.critical(f"Unrecoverable storage error in {where}: {error}")
    sys.exit(EXIT_STATUS)


def fail_fast(func: Callable[..., T]) -> Callable[..., T]:
    """
    Decorator turning any StoreError raised by `func` into process exit.

    Usage:
        @fail_fast
        def load_tables(tables):
            return tables.get_all()
    """
    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        try:
            return func(*args, **kwargs)
        except StoreError as e:
            _abort(e, func.__qualname__)
    return wrapper


class FailFastProxy:
    """
    Wraps a store so every public method call exits the process on StoreError.

    Attribute reads pass through unchanged; only callables are wrapped.

    Usage:
        rows = FailFastProxy(table.rows)
        rows.upsert(row)  # exits on failure instead of raising
    """

    def __init__(self, target: Any):
        self._target = target

    @property
    def wrapped(self) -> Any:
        return self._target

    def __getattr__(self, name: str) -> Any:
        attr = getattr(self._target, name)
        if name.startswith("_") or not callable(attr):
            return attr

        @functools.wraps(attr)
        def call(*args, **kwargs):
            try:
                return attr(*args, **kwargs)
            except StoreError as e:
                _abort(e, f"{type(self._target).__name__}.{name}")
        return call

    def __len__(self) -> int:
        return self.__getattr__("count")()

    def __repr__(self) -> str:
        return f"FailFastProxy({self._target!r})"
