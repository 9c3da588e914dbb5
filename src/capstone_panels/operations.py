from __future__ import annotations

import logging
import threading
import time
from concurrent.futures import ThreadPoolExecutor, TimeoutError as FutureTimeout
from dataclasses import dataclass
from typing import Callable, Dict, Optional, TypeVar

from .config import MAX_BULK_WORKERS, OPERATION_TIMEOUT
from .errors import OperationInProgress, OperationTimeout
from .models.records import Context

logger = logging.getLogger("uvicorn.error")

T = TypeVar("T")


@dataclass
class BulkOperationRecord:
    context_key: str
    operation: str
    started_at: float


class BulkOperationGuard:
    """
    Single-flight guard for bulk operations.

    At most one bulk operation runs per context. A second call while one is
    in flight fails fast with ``OperationInProgress``. The in-flight flag is
    released by the worker itself, so a caller that gives up waiting does not
    free the context while the operation is still mutating it.
    """

    def __init__(self, max_workers: int = MAX_BULK_WORKERS) -> None:
        self._running: Dict[str, BulkOperationRecord] = {}
        self._lock = threading.Lock()
        self._executor = ThreadPoolExecutor(max_workers=max_workers, thread_name_prefix="bulk-op")

    def in_flight(self) -> Dict[str, BulkOperationRecord]:
        with self._lock:
            return dict(self._running)

    def is_running(self, context: Context) -> bool:
        with self._lock:
            return context.key in self._running

    def run(
        self,
        context: Context,
        operation: str,
        fn: Callable[[], T],
        timeout: Optional[float] = None,
    ) -> T:
        key = context.key
        with self._lock:
            current = self._running.get(key)
            if current is not None:
                raise OperationInProgress(str(context), current.operation)
            self._running[key] = BulkOperationRecord(key, operation, time.time())

        try:
            future = self._executor.submit(self._execute, key, operation, fn)
        except RuntimeError:
            self._release(key)
            raise

        limit = OPERATION_TIMEOUT if timeout is None else timeout
        try:
            return future.result(timeout=limit)
        except FutureTimeout:
            logger.error(f"{operation} for {context} exceeded {limit:.1f}s")
            raise OperationTimeout(f"{operation} for {context} did not finish within {limit:.1f}s")

    def _execute(self, key: str, operation: str, fn: Callable[[], T]) -> T:
        started = time.time()
        try:
            return fn()
        finally:
            self._release(key)
            logger.info(f"{operation} finished for {key} in {time.time() - started:.2f}s")

    def _release(self, key: str) -> None:
        with self._lock:
            self._running.pop(key, None)

    def shutdown(self) -> None:
        self._executor.shutdown(wait=True)


bulk_guard = BulkOperationGuard()

__all__ = ["BulkOperationGuard", "BulkOperationRecord", "bulk_guard"]
