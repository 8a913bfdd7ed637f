"""GraphQL execution instrumentation.

    from gqlmetrics.instrumentation import ExecutionObserver, InMemoryMetricsSink
"""

from gqlmetrics.instrumentation.complexity import QUERY_COMPLEXITY_BUCKETS, ComplexityEstimator
from gqlmetrics.instrumentation.context import (
    ExecutionContext,
    ExecutionParameters,
    FieldFetchParameters,
)
from gqlmetrics.instrumentation.dataloader import DataLoaderInstrumentation
from gqlmetrics.instrumentation.errors import ErrorPathSanitizer, ErrorRecord, ValidationError
from gqlmetrics.instrumentation.limiter import (
    OVERFLOW_VALUE,
    CardinalityLimiter,
    CardinalityLimiterProvider,
)
from gqlmetrics.instrumentation.metrics import GqlMetric, GqlTag, Outcome
from gqlmetrics.instrumentation.observer import ExecutionObserver
from gqlmetrics.instrumentation.signature import QuerySignature, QuerySignatureService
from gqlmetrics.instrumentation.sink import MetricsSink
from gqlmetrics.instrumentation.sinks import InMemoryMetricsSink, PrometheusMetricsSink
from gqlmetrics.instrumentation.tagging import (
    CollatedTagsProvider,
    ExecutionOutcomeTagCustomizer,
    FieldFetchOutcomeTagCustomizer,
    TagsProvider,
)

__all__ = [
    "OVERFLOW_VALUE",
    "QUERY_COMPLEXITY_BUCKETS",
    "CardinalityLimiter",
    "CardinalityLimiterProvider",
    "CollatedTagsProvider",
    "ComplexityEstimator",
    "DataLoaderInstrumentation",
    "ErrorPathSanitizer",
    "ErrorRecord",
    "ExecutionContext",
    "ExecutionObserver",
    "ExecutionOutcomeTagCustomizer",
    "ExecutionParameters",
    "FieldFetchOutcomeTagCustomizer",
    "FieldFetchParameters",
    "GqlMetric",
    "GqlTag",
    "InMemoryMetricsSink",
    "MetricsSink",
    "Outcome",
    "PrometheusMetricsSink",
    "QuerySignature",
    "QuerySignatureService",
    "TagsProvider",
    "ValidationError",
]
