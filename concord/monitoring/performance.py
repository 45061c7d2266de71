import logging
import time
from typing import (
    TYPE_CHECKING,
    Any,
    Awaitable,
    Callable,
    Dict,
    NamedTuple,
    Optional,
    Tuple,
    TypeVar,
)

from concord.db.models import MetricType, PerformanceMetric
from concord.db.store import StoreError

if TYPE_CHECKING:
    from logging import Logger
    from concord.db.store import TelemetryStore

T = TypeVar("T")


class Measurement(NamedTuple):
    result: Any
    duration: float
    error: Optional[Exception] = None


class Instrumentation:
    """Times traced operations and writes a :class:`PerformanceMetric` for each.

    The wrapper only observes: :meth:`measure` re-raises exceptions of the
    measured operation unchanged, :meth:`capture` hands them back instead.
    Failures of the store are logged and dropped.
    """

    def __init__(
        self,
        store: "TelemetryStore",
        logger: "Logger" = None,
        clock: Callable[[], float] = time.perf_counter,
    ):
        self.store = store
        self.logger = logger or logging.getLogger(__name__)
        self.clock = clock

    def elapsed(self, started: float) -> float:
        """Milliseconds since ``started``, never negative."""
        return max(0.0, round((self.clock() - started) * 1000, 3))

    async def record_metric(
        self,
        metric_type: MetricType,
        name: str,
        duration: float,
        success: bool,
        metadata: Optional[Dict[str, Any]] = None,
    ):
        try:
            await self.store.insert_performance(
                PerformanceMetric(
                    metric_type=metric_type,
                    name=name,
                    duration=duration,
                    success=success,
                    metadata=metadata,
                )
            )
        except StoreError:
            self.logger.error(
                f"Failed to record performance metric {metric_type}:{name}",
                exc_info=True,
            )

    async def capture(
        self,
        operation: Callable[[], Awaitable[T]],
        metric_type: MetricType,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Measurement:
        """Await ``operation()`` and return its result or exception together
        with the one duration written to the metric."""
        started = self.clock()
        try:
            result = await operation()
        except Exception as exc:
            duration = self.elapsed(started)
            await self.record_metric(metric_type, name, duration, False, metadata)
            return Measurement(None, duration, exc)
        duration = self.elapsed(started)
        await self.record_metric(metric_type, name, duration, True, metadata)
        return Measurement(result, duration)

    async def measure(
        self,
        operation: Callable[[], Awaitable[T]],
        metric_type: MetricType,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Tuple[T, float]:
        """Await ``operation()`` and return ``(result, duration_ms)``."""
        measurement = await self.capture(operation, metric_type, name, metadata)
        if measurement.error is not None:
            raise measurement.error
        return measurement.result, measurement.duration
