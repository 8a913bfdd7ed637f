"""Builds an ExecutionObserver from configuration.

Example usage:

    from gqlmetrics.bootstrap import bootstrap
    from gqlmetrics.execution import InstrumentedExecutor

    observer = bootstrap()
    executor = InstrumentedExecutor(schema, observer)
    result = await executor.execute("{ hello }")
"""

from prometheus_client import REGISTRY, CollectorRegistry
from redis import Redis

from gqlmetrics.config import get_settings
from gqlmetrics.config.settings import Settings
from gqlmetrics.instrumentation.complexity import ComplexityEstimator
from gqlmetrics.instrumentation.dataloader import DataLoaderInstrumentation
from gqlmetrics.instrumentation.limiter import CardinalityLimiterProvider
from gqlmetrics.instrumentation.observer import ExecutionObserver
from gqlmetrics.instrumentation.signature.cache import QuerySignatureCache
from gqlmetrics.instrumentation.signature.caches import (
    InMemoryQuerySignatureCache,
    RedisQuerySignatureCache,
)
from gqlmetrics.instrumentation.signature.service import QuerySignatureService
from gqlmetrics.instrumentation.sink import MetricsSink
from gqlmetrics.instrumentation.sinks.prometheus import PrometheusMetricsSink
from gqlmetrics.instrumentation.tagging import (
    CollatedTagsProvider,
    ContextualTagCustomizer,
    ExecutionOutcomeTagCustomizer,
    ExecutionTagCustomizer,
    FieldFetchOutcomeTagCustomizer,
    FieldFetchTagCustomizer,
    StaticContextualTagCustomizer,
    TagsProvider,
)
from gqlmetrics.observability.logging import get_logger, setup_logging

logger = get_logger(__name__)


def create_tags_provider(settings: Settings) -> TagsProvider:
    """Collated provider with the customizers enabled in settings."""
    contextual: list[ContextualTagCustomizer] = []
    execution: list[ExecutionTagCustomizer] = []
    field_fetch: list[FieldFetchTagCustomizer] = []

    if settings.tag_customizers.contextual_tags:
        contextual.append(StaticContextualTagCustomizer(settings.tag_customizers.contextual_tags))
    if settings.tag_customizers.outcome.enabled:
        execution.append(ExecutionOutcomeTagCustomizer())
        field_fetch.append(FieldFetchOutcomeTagCustomizer())

    return CollatedTagsProvider(contextual, execution, field_fetch)


def create_signature_cache(settings: Settings, redis: Redis | None = None) -> QuerySignatureCache:
    """Signature cache for the configured backend.

    Raises:
        ValueError: If the redis backend is selected without a client or URL
    """
    config = settings.signature_cache
    if config.backend == "inmemory":
        return InMemoryQuerySignatureCache()

    if redis is None:
        if not config.redis_url:
            raise ValueError("signature_cache.redis_url is required for the redis backend")
        redis = Redis.from_url(config.redis_url)
    return RedisQuerySignatureCache(redis, config.key_prefix, config.ttl_seconds)


def create_observer(
    settings: Settings,
    sink: MetricsSink | None = None,
    tags_provider: TagsProvider | None = None,
    signature_cache: QuerySignatureCache | None = None,
    registry: CollectorRegistry = REGISTRY,
) -> ExecutionObserver | None:
    """Wire an ExecutionObserver from settings.

    Returns None when metrics or instrumentation are disabled. Explicit
    collaborators replace the ones that would be built from settings.
    """
    if not settings.enabled or not settings.instrumentation.enabled:
        logger.info("graphql_instrumentation_disabled")
        return None

    instrumentation = settings.instrumentation
    if sink is None:
        sink = create_sink(settings, registry)

    signature_service = None
    if instrumentation.signature_enabled:
        if signature_cache is None:
            signature_cache = create_signature_cache(settings)
        signature_service = QuerySignatureService(signature_cache, sink)

    if tags_provider is None:
        tags_provider = create_tags_provider(settings)

    return ExecutionObserver(
        sink=sink,
        tags_provider=tags_provider,
        signature_service=signature_service,
        complexity_estimator=ComplexityEstimator() if instrumentation.complexity_enabled else None,
        limiter_provider=CardinalityLimiterProvider(settings.cardinality.limit),
        resolver_enabled=instrumentation.resolver_enabled,
    )


def create_sink(settings: Settings, registry: CollectorRegistry = REGISTRY) -> MetricsSink:
    return PrometheusMetricsSink(
        registry=registry,
        namespace=settings.prometheus.namespace,
        buckets=settings.prometheus.timer_buckets,
    )


def create_data_loader_instrumentation(
    settings: Settings,
    sink: MetricsSink,
    tags_provider: TagsProvider | None = None,
) -> DataLoaderInstrumentation | None:
    """Batch loader instrumentation, None when disabled."""
    if not settings.enabled or not settings.data_loader_instrumentation.enabled:
        return None
    if tags_provider is None:
        tags_provider = create_tags_provider(settings)
    return DataLoaderInstrumentation(sink, tags_provider)


def bootstrap(settings: Settings | None = None) -> ExecutionObserver | None:
    """Load settings, configure logging and build the observer."""
    if settings is None:
        settings = get_settings()
    logging_config = settings.observability.logging
    setup_logging(
        level=logging_config.level,
        format=logging_config.format,
        redact=logging_config.redact,
        max_document_length=logging_config.max_document_length,
    )
    observer = create_observer(settings)
    logger.info(
        "graphql_instrumentation_ready",
        enabled=observer is not None,
        signature_cache=settings.signature_cache.backend,
        cardinality_limit=settings.cardinality.limit,
    )
    return observer
