"""
Fire-and-forget side effects (e.g. notifications) with isolated failures.

A task runs on its own daemon thread. Whatever it raises is logged and
dropped: the request that submitted it has already returned, and the process
keeps running. No retry or backoff is applied.
"""

from __future__ import annotations

import threading
from typing import Any, Callable, Optional, Set

from catalog_store.utils.logging import get_logger

log = get_logger(__name__)


class BackgroundTasks:
    def __init__(self, name: str = "catalog-bg") -> None:
        self._name = name
        self._lock = threading.Lock()
        self._threads: Set[threading.Thread] = set()

    def submit(self, fn: Callable[..., Any], *args: Any, **kwargs: Any) -> threading.Thread:
        """Start `fn(*args, **kwargs)` in the background and return its thread."""

        def _run() -> None:
            try:
                fn(*args, **kwargs)
            except Exception:  # noqa: BLE001
                log.exception(
                    "Background task failed",
                    extra={"task": getattr(fn, "__name__", repr(fn))},
                )
            finally:
                with self._lock:
                    self._threads.discard(threading.current_thread())

        thread = threading.Thread(target=_run, name=self._name, daemon=True)
        with self._lock:
            self._threads.add(thread)
        thread.start()
        return thread

    @property
    def pending(self) -> int:
        with self._lock:
            return len(self._threads)

    def wait(self, timeout: Optional[float] = None) -> None:
        """Join in-flight tasks; used for graceful shutdown."""
        with self._lock:
            threads = list(self._threads)
        for thread in threads:
            thread.join(timeout=timeout)


__all__ = ["BackgroundTasks"]
