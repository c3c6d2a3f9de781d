"""Profiling and tracing hooks for item resolution."""

import logging
import time
from contextvars import ContextVar
from typing import Protocol

_operations: ContextVar[tuple[tuple[str, float], ...]] = ContextVar("operations", default=())


class Profiler(Protocol):
    """Protocol for observability hooks called during resolution."""

    def start_operation(self, name: str) -> None: ...

    def end_operation(self) -> None: ...

    def trace(self, message: str) -> None: ...


class LoggingProfiler:
    """Profiler writing operation timings and traces to the log."""

    def __init__(self, name: str = "sitepath.profiler") -> None:
        self._logger = logging.getLogger(name)

    def start_operation(self, name: str) -> None:
        _operations.set((*_operations.get(), (name, time.perf_counter())))

    def end_operation(self) -> None:
        stack = _operations.get()
        if not stack:
            return
        _operations.set(stack[:-1])
        name, started = stack[-1]
        elapsed_ms = (time.perf_counter() - started) * 1000
        self._logger.debug(f"{name} took {elapsed_ms:.2f} ms")

    def trace(self, message: str) -> None:
        self._logger.info(message)


class NullProfiler:
    """Profiler that discards everything."""

    def start_operation(self, name: str) -> None:
        pass

    def end_operation(self) -> None:
        pass

    def trace(self, message: str) -> None:
        pass
