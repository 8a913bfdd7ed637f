"""Prometheus implementation of MetricsSink.

Timers become histograms named `<name>_seconds`, counters become counters
(exported with the `_total` suffix). Dots in metric and tag names are
replaced with underscores.

Prometheus fixes the label names of a metric at registration, so the first
tag set seen for a name decides its labels. Later calls fill missing labels
with "" and drop tags that weren't part of the first set, logging a warning
each time the sets differ.

Collectors are cached per registry rather than per sink: every sink writing
to the same registry shares one collector per metric name.
"""

import re
from collections.abc import Callable, Mapping, Sequence
from threading import Lock
from typing import Any, cast
from weakref import WeakKeyDictionary

from prometheus_client import REGISTRY, CollectorRegistry, Counter, Histogram

from gqlmetrics.config.models.instrumentation import DEFAULT_TIMER_BUCKETS
from gqlmetrics.instrumentation.sink import MetricsSink
from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)

_INVALID_NAME_CHARS = re.compile(r"[^a-zA-Z0-9_]")

# (kind, exported name) -> (collector, label names), per registry
_CollectorCache = dict[tuple[str, str], tuple[Any, tuple[str, ...]]]
_collectors: "WeakKeyDictionary[CollectorRegistry, _CollectorCache]" = WeakKeyDictionary()
_collectors_lock = Lock()


def sanitize_name(name: str) -> str:
    """Convert a dotted metric or tag name into a valid Prometheus name."""
    sanitized = _INVALID_NAME_CHARS.sub("_", name)
    if not sanitized or sanitized[0].isdigit():
        sanitized = f"_{sanitized}"
    return sanitized


class PrometheusMetricsSink(MetricsSink):
    """Registers metrics lazily in a prometheus_client registry."""

    def __init__(
        self,
        registry: CollectorRegistry = REGISTRY,
        namespace: str = "",
        buckets: Sequence[float] = DEFAULT_TIMER_BUCKETS,
    ) -> None:
        self._registry = registry
        self._namespace = namespace
        self._buckets = tuple(buckets)

    def record_timer(self, name: str, tags: Mapping[str, str], duration: float) -> None:
        labels = _labels(tags)
        histogram, labelnames = self._collector(
            "histogram",
            name,
            tuple(labels),
            lambda labelnames: Histogram(
                sanitize_name(name),
                f"Timer {name}",
                labelnames=labelnames,
                namespace=self._namespace,
                unit="seconds",
                buckets=self._buckets,
                registry=self._registry,
            ),
        )
        cast(Histogram, _bind(name, histogram, labelnames, labels)).observe(duration)

    def increment_counter(self, name: str, tags: Mapping[str, str]) -> None:
        labels = _labels(tags)
        counter, labelnames = self._collector(
            "counter",
            name,
            tuple(labels),
            lambda labelnames: Counter(
                sanitize_name(name),
                f"Counter {name}",
                labelnames=labelnames,
                namespace=self._namespace,
                registry=self._registry,
            ),
        )
        cast(Counter, _bind(name, counter, labelnames, labels)).inc()

    def _collector(
        self,
        kind: str,
        name: str,
        labelnames: tuple[str, ...],
        create: Callable[[tuple[str, ...]], Any],
    ) -> tuple[Any, tuple[str, ...]]:
        exported = "_".join(part for part in (self._namespace, sanitize_name(name)) if part)
        with _collectors_lock:
            cache = _collectors.setdefault(self._registry, {})
            if (kind, exported) not in cache:
                cache[(kind, exported)] = (create(labelnames), labelnames)
            return cache[(kind, exported)]


def _bind(
    name: str,
    metric: Any,
    labelnames: tuple[str, ...],
    labels: dict[str, str],
) -> Any:
    dropped = labels.keys() - set(labelnames)
    missing = set(labelnames) - labels.keys()
    if dropped or missing:
        logger.warning(
            "prometheus_labels_mismatch",
            metric=name,
            dropped=sorted(dropped),
            missing=sorted(missing),
        )
    if not labelnames:
        return metric
    return metric.labels(**{label: labels.get(label, "") for label in labelnames})


def _labels(tags: Mapping[str, str]) -> dict[str, str]:
    return {sanitize_name(key): str(value) for key, value in tags.items()}
