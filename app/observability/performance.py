"""Execution timing helpers: a scoped tracker and wrap-and-measure functions."""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from time import perf_counter
from types import TracebackType
from typing import Any, Generic, TypeVar

from app.observability.caller import CallSiteInfo, capture_call_site


T = TypeVar("T")


def _elapsed_ms(start: float) -> float:
    return round((perf_counter() - start) * 1000.0, 2)


class PerformanceTracker:
    """Measures the time between its creation and its first ``release()``.

    Use as a context manager (sync or async) so release happens on every exit
    path. Releasing more than once is a no-op.
    """

    def __init__(self, logger: Any, method_name: str, source_file: str, line_number: int) -> None:
        # Call-site fields go in as bound context; structlog reserves a
        # method_name call argument.
        self._logger = _bind_call_site(logger, method_name, source_file, line_number)
        self.method_name = method_name
        self.source_file = source_file
        self.line_number = line_number
        self._start = perf_counter()
        self._elapsed_ms: float | None = None

        self._logger.debug(
            f"Starting execution tracking for method {method_name} "
            f"[File: {source_file}, Line: {line_number}]"
        )

    @property
    def released(self) -> bool:
        return self._elapsed_ms is not None

    @property
    def elapsed_ms(self) -> float:
        if self._elapsed_ms is not None:
            return self._elapsed_ms
        return _elapsed_ms(self._start)

    def release(self) -> None:
        if self._elapsed_ms is not None:
            return

        self._elapsed_ms = _elapsed_ms(self._start)
        self._logger.info(
            f"Method {self.method_name} executed in {self._elapsed_ms}ms "
            f"[File: {self.source_file}, Line: {self.line_number}]",
            elapsed_ms=self._elapsed_ms,
        )

    close = release

    def __enter__(self) -> PerformanceTracker:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()

    async def __aenter__(self) -> PerformanceTracker:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.release()


def track_performance(
    logger: Any,
    method_name: str | None = None,
    source_file: str | None = None,
    line_number: int | None = None,
) -> PerformanceTracker:
    """Start a tracker; call-site values default to the caller's location."""

    site = capture_call_site()
    return PerformanceTracker(
        logger,
        method_name=method_name if method_name is not None else site.method_name,
        source_file=source_file if source_file is not None else site.source_file,
        line_number=line_number if line_number is not None else site.line_number,
    )


@dataclass(frozen=True)
class ExecutionOutcome(Generic[T]):
    operation_name: str
    elapsed_ms: float
    value: T | None = None
    error: Exception | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def unwrap(self) -> T | None:
        if self.error is not None:
            raise self.error
        return self.value


def _bind_call_site(logger: Any, method_name: str, source_file: str, line_number: int) -> Any:
    return logger.bind(method_name=method_name, source_file=source_file, line_number=line_number)


def _log_completed(logger: Any, label: str, operation_name: str, elapsed_ms: float, site: CallSiteInfo) -> None:
    _bind_call_site(logger, site.method_name, site.source_file, site.line_number).info(
        f"{label} '{operation_name}' completed in {elapsed_ms}ms "
        f"[Method: {site.method_name}, File: {site.source_file}, Line: {site.line_number}]",
        operation_name=operation_name,
        elapsed_ms=elapsed_ms,
    )


def _log_failed(
    logger: Any, label: str, operation_name: str, elapsed_ms: float, site: CallSiteInfo, exc: Exception
) -> None:
    _bind_call_site(logger, site.method_name, site.source_file, site.line_number).error(
        f"{label} '{operation_name}' failed after {elapsed_ms}ms "
        f"[Method: {site.method_name}, File: {site.source_file}, Line: {site.line_number}]",
        exc_info=exc,
        operation_name=operation_name,
        elapsed_ms=elapsed_ms,
    )


def log_execution_time(
    logger: Any,
    action: Callable[[], T],
    operation_name: str,
    call_site: CallSiteInfo | None = None,
) -> T:
    """Run ``action``, log how long it took, and return its result.

    Failures are logged at error level and re-raised unchanged.
    """

    site = call_site or capture_call_site()
    start = perf_counter()
    try:
        result = action()
    except Exception as exc:
        _log_failed(logger, "Operation", operation_name, _elapsed_ms(start), site, exc)
        raise

    _log_completed(logger, "Operation", operation_name, _elapsed_ms(start), site)
    return result


async def log_execution_time_async(
    logger: Any,
    action: Callable[[], Awaitable[T]],
    operation_name: str,
    call_site: CallSiteInfo | None = None,
) -> T:
    """Async counterpart of :func:`log_execution_time`.

    The default call site is read when the coroutine starts running, so it
    points at the ``await`` expression when awaited directly.
    """

    site = call_site or capture_call_site()
    start = perf_counter()
    try:
        result = await action()
    except Exception as exc:
        _log_failed(logger, "Async operation", operation_name, _elapsed_ms(start), site, exc)
        raise

    _log_completed(logger, "Async operation", operation_name, _elapsed_ms(start), site)
    return result


def measure_execution(
    logger: Any,
    action: Callable[[], T],
    operation_name: str,
    call_site: CallSiteInfo | None = None,
) -> ExecutionOutcome[T]:
    """Like :func:`log_execution_time` but hands the failure back instead of raising."""

    site = call_site or capture_call_site()
    start = perf_counter()
    try:
        value = action()
    except Exception as exc:
        elapsed_ms = _elapsed_ms(start)
        _log_failed(logger, "Operation", operation_name, elapsed_ms, site, exc)
        return ExecutionOutcome(operation_name=operation_name, elapsed_ms=elapsed_ms, error=exc)

    elapsed_ms = _elapsed_ms(start)
    _log_completed(logger, "Operation", operation_name, elapsed_ms, site)
    return ExecutionOutcome(operation_name=operation_name, elapsed_ms=elapsed_ms, value=value)
