"""In-memory implementation of MetricsSink."""

from collections.abc import Mapping
from dataclasses import dataclass, field
from threading import Lock

from gqlmetrics.instrumentation.sink import MetricsSink


@dataclass(frozen=True)
class TimerRecord:
    """One recorded duration."""

    name: str
    tags: dict[str, str] = field(default_factory=dict)
    duration: float = 0.0


@dataclass(frozen=True)
class CounterRecord:
    """One counter increment."""

    name: str
    tags: dict[str, str] = field(default_factory=dict)


class InMemoryMetricsSink(MetricsSink):
    """In-memory implementation of MetricsSink for testing and development."""

    def __init__(self) -> None:
        self._timers: list[TimerRecord] = []
        self._counters: list[CounterRecord] = []
        self._lock = Lock()

    def record_timer(self, name: str, tags: Mapping[str, str], duration: float) -> None:
        with self._lock:
            self._timers.append(TimerRecord(name=name, tags=dict(tags), duration=duration))

    def increment_counter(self, name: str, tags: Mapping[str, str]) -> None:
        with self._lock:
            self._counters.append(CounterRecord(name=name, tags=dict(tags)))

    def timers(self, name: str | None = None) -> list[TimerRecord]:
        """Recorded timers, optionally filtered by metric name."""
        with self._lock:
            return [t for t in self._timers if name is None or t.name == name]

    def counters(self, name: str | None = None) -> list[CounterRecord]:
        """Recorded counter increments, optionally filtered by metric name."""
        with self._lock:
            return [c for c in self._counters if name is None or c.name == name]

    def clear(self) -> None:
        with self._lock:
            self._timers.clear()
            self._counters.clear()
