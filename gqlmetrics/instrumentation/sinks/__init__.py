"""MetricsSink implementations."""

from gqlmetrics.instrumentation.sinks.inmemory import (
    CounterRecord,
    InMemoryMetricsSink,
    TimerRecord,
)
from gqlmetrics.instrumentation.sinks.prometheus import PrometheusMetricsSink

__all__ = ["CounterRecord", "InMemoryMetricsSink", "PrometheusMetricsSink", "TimerRecord"]
