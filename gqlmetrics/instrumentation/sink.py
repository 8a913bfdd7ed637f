"""MetricsSink abstract interface."""

from abc import ABC, abstractmethod
from collections.abc import Mapping

from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)


class MetricsSink(ABC):
    """Destination for timers and counters.

    The sink owns storage and export; the instrumentation only forwards
    measurements to it.
    """

    @abstractmethod
    def record_timer(self, name: str, tags: Mapping[str, str], duration: float) -> None:
        """Record one duration, in seconds."""
        pass

    @abstractmethod
    def increment_counter(self, name: str, tags: Mapping[str, str]) -> None:
        """Increment a counter by one."""
        pass


def record_timer_safely(
    sink: MetricsSink, name: str, tags: Mapping[str, str], duration: float
) -> None:
    """Record a timer, logging instead of raising when the sink rejects it."""
    try:
        sink.record_timer(name, tags, duration)
    except Exception:
        logger.warning("metrics_sink_failed", metric=name, exc_info=True)


def increment_counter_safely(sink: MetricsSink, name: str, tags: Mapping[str, str]) -> None:
    """Increment a counter, logging instead of raising when the sink rejects it."""
    try:
        sink.increment_counter(name, tags)
    except Exception:
        logger.warning("metrics_sink_failed", metric=name, exc_info=True)
