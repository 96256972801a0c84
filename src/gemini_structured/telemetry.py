"""Telemetry context and reporter interfaces.

Provides no-op behavior when disabled and scoped timings plus metrics when
enabled via ``GEMINI_STRUCTURED_TELEMETRY=1`` (or ``DEBUG=1``).
"""

from __future__ import annotations

from collections import deque
from collections.abc import Iterator
from contextlib import AbstractContextManager, contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
import logging
import os
import time
from types import TracebackType
from typing import Any, Protocol, Self, TypeAlias, runtime_checkable

log = logging.getLogger(__name__)

# Context-aware scope stack, safe across concurrent tasks
_scope_stack_var: ContextVar[tuple[str, ...]] = ContextVar(
    "gemini_structured_scope_stack",
    default=(),
)

_TELEMETRY_ENABLED = (
    os.getenv("GEMINI_STRUCTURED_TELEMETRY") == "1" or os.getenv("DEBUG") == "1"
)


@runtime_checkable
class TelemetryReporter(Protocol):
    """Duck-typed protocol for telemetry reporters."""

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None: ...  # noqa: D102
    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None: ...  # noqa: D102


@dataclass(frozen=True, slots=True)
class _NoOpTelemetryContext:
    """An immutable and stateless no-op context."""

    def __call__(self, name: str, **metadata: Any) -> Self:  # noqa: ARG002
        return self

    def __enter__(self) -> Self:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc_value: BaseException | None,
        exc_tb: TracebackType | None,
    ) -> bool | None:
        return None

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        pass

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        pass

    def gauge(self, name: str, value: float, **metadata: Any) -> None:
        pass


class _EnabledTelemetryContext:
    """Records scope timings and metrics to every attached reporter.

    A reporter that raises is logged and skipped; telemetry never fails
    the query it observes.
    """

    __slots__ = ("reporters",)

    def __init__(self, *reporters: TelemetryReporter):
        self.reporters = reporters

    def __call__(
        self, name: str, **metadata: Any
    ) -> AbstractContextManager[_EnabledTelemetryContext]:
        if not name or not isinstance(name, str):
            raise ValueError("Scope name must be a non-empty string")
        return self._scope(name, metadata)

    @contextmanager
    def _scope(
        self, name: str, metadata: dict[str, Any]
    ) -> Iterator[_EnabledTelemetryContext]:
        parents = _scope_stack_var.get()
        token = _scope_stack_var.set((*parents, name))
        started = time.perf_counter()
        try:
            yield self
        finally:
            elapsed = time.perf_counter() - started
            _scope_stack_var.reset(token)
            self._emit("record_timing", parents, name, elapsed, metadata)

    def metric(self, name: str, value: Any, **metadata: Any) -> None:
        """Record a metric under the current scope path."""
        self._emit("record_metric", _scope_stack_var.get(), name, value, metadata)

    def count(self, name: str, increment: int = 1, **metadata: Any) -> None:
        """Record a counter metric."""
        self.metric(name, increment, metric_type="counter", **metadata)

    def gauge(self, name: str, value: float, **metadata: Any) -> None:
        """Record a gauge metric."""
        self.metric(name, value, metric_type="gauge", **metadata)

    def _emit(
        self,
        method: str,
        parents: tuple[str, ...],
        name: str,
        value: Any,
        metadata: dict[str, Any],
    ) -> None:
        path = ".".join((*parents, name))
        details = {
            "depth": len(parents),
            "parent_scope": ".".join(parents) or None,
            **metadata,
        }
        for reporter in self.reporters:
            try:
                getattr(reporter, method)(path, value, **details)
            except Exception as e:
                log.error(
                    "Telemetry reporter '%s' failed: %s",
                    type(reporter).__name__,
                    e,
                    exc_info=True,
                )


_NO_OP_SINGLETON = _NoOpTelemetryContext()

TelemetryContextProtocol: TypeAlias = _EnabledTelemetryContext | _NoOpTelemetryContext


def TelemetryContext(  # noqa: N802
    *reporters: TelemetryReporter, enabled: bool | None = None
) -> TelemetryContextProtocol:
    """Return a telemetry context.

    Returns a full-featured context when telemetry is enabled (by the
    environment flag, or explicitly via ``enabled``) and reporters are
    given; otherwise the shared no-op instance.
    """
    active = _TELEMETRY_ENABLED if enabled is None else enabled
    if active and reporters:
        return _EnabledTelemetryContext(*reporters)
    return _NO_OP_SINGLETON


class _SimpleReporter:
    """Built-in in-memory reporter for development use.

    Call ``get_report()`` to view the collected data.
    """

    def __init__(self, max_entries_per_scope: int = 1000):
        self.max_entries = max_entries_per_scope
        self.timings: dict[str, deque[tuple[float, dict[str, Any]]]] = {}
        self.metrics: dict[str, deque[tuple[Any, dict[str, Any]]]] = {}

    def record_timing(self, scope: str, duration: float, **metadata: Any) -> None:
        if scope not in self.timings:
            self.timings[scope] = deque(maxlen=self.max_entries)
        self.timings[scope].append((duration, metadata))

    def record_metric(self, scope: str, value: Any, **metadata: Any) -> None:
        if scope not in self.metrics:
            self.metrics[scope] = deque(maxlen=self.max_entries)
        self.metrics[scope].append((value, metadata))

    def total(self, scope: str) -> float:
        """Sum of the numeric values recorded for a metric scope."""
        return sum(
            v for v, _ in self.metrics.get(scope, ()) if isinstance(v, int | float)
        )

    def get_report(self) -> str:
        """Generate a flat telemetry report."""
        lines = ["=== Telemetry Report ===", "", "--- Timings ---"]
        for scope, values in sorted(self.timings.items()):
            durations = [v[0] for v in values]
            lines.append(
                f"{scope:<40} | Calls: {len(durations):<4} | "
                f"Avg: {sum(durations) / len(durations):.4f}s | "
                f"Total: {sum(durations):.4f}s"
            )
        if self.metrics:
            lines.append("")
            lines.append("--- Metrics ---")
            for scope, values in sorted(self.metrics.items()):
                lines.append(
                    f"{scope:<40} | Count: {len(values):<4} | "
                    f"Total: {self.total(scope):,.0f}"
                )
        return "\n".join(lines)
