"""Tests for MetricsSink implementations and safe recording helpers."""

from collections.abc import Mapping
from unittest.mock import patch

import pytest
from prometheus_client import CollectorRegistry

from gqlmetrics.instrumentation.sink import (
    MetricsSink,
    increment_counter_safely,
    record_timer_safely,
)
from gqlmetrics.instrumentation.sinks import InMemoryMetricsSink, PrometheusMetricsSink
from gqlmetrics.instrumentation.sinks.prometheus import sanitize_name


class FailingSink(MetricsSink):
    def record_timer(self, name: str, tags: Mapping[str, str], duration: float) -> None:
        raise RuntimeError("sink down")

    def increment_counter(self, name: str, tags: Mapping[str, str]) -> None:
        raise RuntimeError("sink down")


class TestSafeRecording:
    """Tests for record_timer_safely and increment_counter_safely."""

    def test_timer_failure_swallowed(self) -> None:
        record_timer_safely(FailingSink(), "gql.query", {}, 0.1)

    def test_counter_failure_swallowed(self) -> None:
        increment_counter_safely(FailingSink(), "gql.error", {})

    def test_forwards_to_sink(self, sink: InMemoryMetricsSink) -> None:
        record_timer_safely(sink, "gql.query", {"outcome": "success"}, 0.1)
        increment_counter_safely(sink, "gql.error", {"gql.path": "[]"})
        assert sink.timers()[0].tags == {"outcome": "success"}
        assert sink.counters()[0].tags == {"gql.path": "[]"}


class TestInMemoryMetricsSink:
    """Tests for InMemoryMetricsSink."""

    def test_records_timers(self, sink: InMemoryMetricsSink) -> None:
        sink.record_timer("gql.query", {"a": "1"}, 0.25)

        [timer] = sink.timers()
        assert timer.name == "gql.query"
        assert timer.tags == {"a": "1"}
        assert timer.duration == 0.25

    def test_filters_by_name(self, sink: InMemoryMetricsSink) -> None:
        sink.record_timer("gql.query", {}, 0.1)
        sink.record_timer("gql.resolver", {}, 0.1)
        sink.increment_counter("gql.error", {})

        assert len(sink.timers("gql.resolver")) == 1
        assert len(sink.counters("gql.error")) == 1
        assert sink.counters("gql.query") == []

    def test_tags_copied(self, sink: InMemoryMetricsSink) -> None:
        """Later changes to the caller's mapping don't affect records."""
        tags = {"a": "1"}
        sink.increment_counter("gql.error", tags)
        tags["a"] = "2"
        assert sink.counters()[0].tags == {"a": "1"}

    def test_clear(self, sink: InMemoryMetricsSink) -> None:
        sink.record_timer("gql.query", {}, 0.1)
        sink.increment_counter("gql.error", {})
        sink.clear()
        assert sink.timers() == []
        assert sink.counters() == []


class TestSanitizeName:
    """Tests for sanitize_name."""

    @pytest.mark.parametrize(
        ("name", "expected"),
        [
            ("gql.query", "gql_query"),
            ("gql.query.sig.hash", "gql_query_sig_hash"),
            ("outcome", "outcome"),
            ("9lives", "_9lives"),
        ],
    )
    def test_sanitize(self, name: str, expected: str) -> None:
        assert sanitize_name(name) == expected


class TestPrometheusMetricsSink:
    """Tests for PrometheusMetricsSink with an isolated registry."""

    @pytest.fixture
    def registry(self) -> CollectorRegistry:
        return CollectorRegistry()

    @pytest.fixture
    def prometheus_sink(self, registry: CollectorRegistry) -> PrometheusMetricsSink:
        return PrometheusMetricsSink(registry=registry)

    def test_timer_becomes_histogram(
        self, prometheus_sink: PrometheusMetricsSink, registry: CollectorRegistry
    ) -> None:
        prometheus_sink.record_timer("gql.query", {"gql.operation": "QUERY"}, 0.2)
        prometheus_sink.record_timer("gql.query", {"gql.operation": "QUERY"}, 0.3)

        labels = {"gql_operation": "QUERY"}
        assert registry.get_sample_value("gql_query_seconds_count", labels) == 2.0
        assert registry.get_sample_value("gql_query_seconds_sum", labels) == pytest.approx(0.5)

    def test_counter(
        self, prometheus_sink: PrometheusMetricsSink, registry: CollectorRegistry
    ) -> None:
        prometheus_sink.increment_counter("gql.error", {"gql.path": "[profile]"})
        prometheus_sink.increment_counter("gql.error", {"gql.path": "[profile]"})

        assert registry.get_sample_value("gql_error_total", {"gql_path": "[profile]"}) == 2.0

    def test_namespace_prefix(self, registry: CollectorRegistry) -> None:
        sink = PrometheusMetricsSink(registry=registry, namespace="api")
        sink.increment_counter("gql.error", {})
        assert registry.get_sample_value("api_gql_error_total") == 1.0

    def test_missing_labels_filled(
        self, prometheus_sink: PrometheusMetricsSink, registry: CollectorRegistry
    ) -> None:
        """Tags absent from a later call are exported as empty labels."""
        prometheus_sink.increment_counter("gql.error", {"a": "1", "b": "2"})
        prometheus_sink.increment_counter("gql.error", {"a": "1"})

        assert registry.get_sample_value("gql_error_total", {"a": "1", "b": ""}) == 1.0

    def test_extra_labels_dropped(
        self, prometheus_sink: PrometheusMetricsSink, registry: CollectorRegistry
    ) -> None:
        """Tags outside the first label set are dropped."""
        prometheus_sink.increment_counter("gql.error", {"a": "1"})
        prometheus_sink.increment_counter("gql.error", {"a": "1", "c": "3"})

        assert registry.get_sample_value("gql_error_total", {"a": "1"}) == 2.0

    def test_unlabelled_timer(
        self, prometheus_sink: PrometheusMetricsSink, registry: CollectorRegistry
    ) -> None:
        prometheus_sink.record_timer("gql.method.latency", {}, 0.01)
        assert registry.get_sample_value("gql_method_latency_seconds_count") == 1.0

    def test_custom_buckets(self, registry: CollectorRegistry) -> None:
        sink = PrometheusMetricsSink(registry=registry, buckets=(0.5, 1.0))
        sink.record_timer("gql.query", {}, 0.2)

        assert registry.get_sample_value("gql_query_seconds_bucket", {"le": "0.5"}) == 1.0
        assert registry.get_sample_value("gql_query_seconds_bucket", {"le": "1.0"}) == 1.0

    def test_label_mismatch_logged(
        self, prometheus_sink: PrometheusMetricsSink, registry: CollectorRegistry
    ) -> None:
        """A tag set that differs from the registered labels is reported."""
        prometheus_sink.record_timer("gql.resolver", {"gql.field": "Profile.name"}, 0.1)
        with patch("gqlmetrics.instrumentation.sinks.prometheus.logger") as logger:
            prometheus_sink.record_timer(
                "gql.resolver", {"gql.field": "Profile.name", "outcome": "success"}, 0.1
            )

        logger.warning.assert_called_once_with(
            "prometheus_labels_mismatch",
            metric="gql.resolver",
            dropped=["outcome"],
            missing=[],
        )

    def test_matching_labels_not_logged(
        self, prometheus_sink: PrometheusMetricsSink
    ) -> None:
        with patch("gqlmetrics.instrumentation.sinks.prometheus.logger") as logger:
            prometheus_sink.increment_counter("gql.error", {"a": "1"})
            prometheus_sink.increment_counter("gql.error", {"a": "2"})

        logger.warning.assert_not_called()


class TestSharedRegistry:
    """Tests for several Prometheus sinks writing to one registry."""

    def test_sinks_share_collectors(self) -> None:
        registry = CollectorRegistry()
        first = PrometheusMetricsSink(registry=registry)
        second = PrometheusMetricsSink(registry=registry)

        first.record_timer("gql.query", {"outcome": "success"}, 0.1)
        second.record_timer("gql.query", {"outcome": "success"}, 0.2)
        first.increment_counter("gql.error", {})
        second.increment_counter("gql.error", {})

        assert registry.get_sample_value("gql_query_seconds_count", {"outcome": "success"}) == 2.0
        assert registry.get_sample_value("gql_error_total") == 2.0

    def test_namespaces_stay_separate(self) -> None:
        registry = CollectorRegistry()
        PrometheusMetricsSink(registry=registry, namespace="shop").increment_counter(
            "gql.error", {}
        )
        PrometheusMetricsSink(registry=registry, namespace="admin").increment_counter(
            "gql.error", {}
        )

        assert registry.get_sample_value("shop_gql_error_total") == 1.0
        assert registry.get_sample_value("admin_gql_error_total") == 1.0

    def test_registries_stay_separate(self) -> None:
        first_registry = CollectorRegistry()
        second_registry = CollectorRegistry()
        PrometheusMetricsSink(registry=first_registry).increment_counter("gql.error", {})
        PrometheusMetricsSink(registry=second_registry).increment_counter("gql.error", {})

        assert first_registry.get_sample_value("gql_error_total") == 1.0
        assert second_registry.get_sample_value("gql_error_total") == 1.0
