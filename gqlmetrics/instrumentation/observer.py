"""Execution observer: turns the lifecycle of a GraphQL execution into metrics.

The engine calls the hooks in this order:

    context = observer.on_execution_start(params, operation)
    observer.on_validation_complete(context, params, errors, document)
    resolver = observer.wrap_field_resolution(context, resolver, field_params)  # per field
    observer.on_execution_complete(context, params, result, exc)

The observer never changes what the engine returns or raises. Failures of
its own (signature, complexity, sink) are logged and swallowed; resolver
exceptions are recorded and re-raised untouched.
"""

import inspect
import time
from collections.abc import Awaitable, Callable, Sequence
from typing import Any

from graphql import DocumentNode, ExecutionResult, GraphQLError

from gqlmetrics.instrumentation.complexity import ComplexityEstimator
from gqlmetrics.instrumentation.context import (
    ExecutionContext,
    ExecutionParameters,
    FieldFetchParameters,
)
from gqlmetrics.instrumentation.errors import ErrorPathSanitizer
from gqlmetrics.instrumentation.limiter import CardinalityLimiterProvider
from gqlmetrics.instrumentation.metrics import GqlMetric, GqlTag
from gqlmetrics.instrumentation.signature.service import QuerySignatureService
from gqlmetrics.instrumentation.sink import (
    MetricsSink,
    increment_counter_safely,
    record_timer_safely,
)
from gqlmetrics.instrumentation.tagging import Tags, TagsProvider, merge_tags
from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)

# Introspection fields and types; matched as substrings of "<Parent>.<field>"
INSTRUMENTATION_IGNORES: frozenset[str] = frozenset(
    {
        "__typename",
        "__schema",
        "__type",
        "__Schema",
        "__Type",
        "__Field",
        "__InputValue",
        "__EnumValue",
        "__Directive",
    }
)

Resolver = Callable[..., Any]


def should_ignore_field(field_tag: str) -> bool:
    return any(ignored in field_tag for ignored in INSTRUMENTATION_IGNORES)


class ExecutionObserver:
    """Emits query, resolver and error metrics for GraphQL executions."""

    def __init__(
        self,
        sink: MetricsSink,
        tags_provider: TagsProvider,
        signature_service: QuerySignatureService | None = None,
        complexity_estimator: ComplexityEstimator | None = None,
        limiter_provider: CardinalityLimiterProvider | None = None,
        error_sanitizer: ErrorPathSanitizer | None = None,
        resolver_enabled: bool = True,
    ) -> None:
        """Initialize the observer.

        Args:
            sink: Destination of all metrics
            tags_provider: Supplies contextual, execution and field fetch tags
            signature_service: Computes query signatures; None disables the signature tag
            complexity_estimator: Computes complexity; None disables the complexity tag
            limiter_provider: Source of the operation name and signature hash limiters
            error_sanitizer: Normalizes result errors
            resolver_enabled: Whether field resolvers are timed
        """
        self._sink = sink
        self._tags_provider = tags_provider
        self._signature_service = signature_service
        self._complexity_estimator = complexity_estimator
        self._error_sanitizer = error_sanitizer or ErrorPathSanitizer()
        self._resolver_enabled = resolver_enabled

        # Shared by every execution of this observer, one per tag
        limiter_provider = limiter_provider or CardinalityLimiterProvider()
        self._operation_name_limiter = limiter_provider.limiter()
        self._signature_hash_limiter = limiter_provider.limiter()

    def on_execution_start(
        self,
        params: ExecutionParameters,
        operation: str | None = None,
    ) -> ExecutionContext:
        """Start timing an execution.

        Args:
            params: Execution request
            operation: Operation kind (query, mutation, subscription) if known
        """
        return ExecutionContext(
            operation_name_limiter=self._operation_name_limiter,
            signature_hash_limiter=self._signature_hash_limiter,
            operation=operation,
            operation_name=params.operation_name,
        )

    def on_validation_complete(
        self,
        context: ExecutionContext,
        params: ExecutionParameters,
        errors: Sequence[GraphQLError] | None,
        document: DocumentNode | None,
        exc: BaseException | None = None,
    ) -> None:
        """Derive the signature and complexity of a valid document.

        Does nothing when validation reported errors or raised.
        """
        if errors or exc is not None or document is None:
            return

        if self._signature_service is not None:
            context.signature = self._signature_service.get(
                params.query, params.operation_name, document
            )
        if self._complexity_estimator is not None:
            context.complexity = self._complexity_estimator.estimate(
                document, params.operation_name, params.variables
            )

    def wrap_field_resolution(
        self,
        context: ExecutionContext,
        resolver: Resolver,
        params: FieldFetchParameters,
    ) -> Resolver:
        """Return a resolver that times each invocation of resolver.

        Trivial and introspection fields get the original resolver back.
        """
        field_tag = params.field_tag
        if not self._resolver_enabled or params.trivial or should_ignore_field(field_tag):
            return resolver

        def timed_resolver(*args: Any, **kwargs: Any) -> Any:
            base_tags = self._resolver_base_tags(context, field_tag)
            started = time.perf_counter()
            try:
                result = resolver(*args, **kwargs)
            except BaseException as exc:
                self._record_resolver(params, base_tags, started, exc)
                raise

            if inspect.isawaitable(result):
                return self._await_resolver(result, params, base_tags, started)

            self._record_resolver(params, base_tags, started, None)
            return result

        return timed_resolver

    def _resolver_base_tags(self, context: ExecutionContext, field_tag: str) -> dict[str, str]:
        field_tags: Tags = [(GqlTag.FIELD.value, field_tag)]
        try:
            return merge_tags(field_tags, self._tags_provider.contextual_tags(), context.tags())
        except Exception:
            logger.warning("contextual_tags_failed", field=field_tag, exc_info=True)
            return merge_tags(field_tags)

    async def _await_resolver(
        self,
        result: Awaitable[Any],
        params: FieldFetchParameters,
        base_tags: dict[str, str],
        started: float,
    ) -> Any:
        try:
            value = await result
        except BaseException as exc:
            self._record_resolver(params, base_tags, started, exc)
            raise
        self._record_resolver(params, base_tags, started, None)
        return value

    def _record_resolver(
        self,
        params: FieldFetchParameters,
        base_tags: dict[str, str],
        started: float,
        exc: BaseException | None,
    ) -> None:
        duration = time.perf_counter() - started
        try:
            tags = merge_tags(base_tags, self._tags_provider.field_fetch_tags(params, exc))
        except Exception:
            logger.warning("field_fetch_tags_failed", field=params.field_tag, exc_info=True)
            tags = base_tags
        record_timer_safely(self._sink, GqlMetric.RESOLVER.value, tags, duration)

    def on_execution_complete(
        self,
        context: ExecutionContext,
        params: ExecutionParameters,
        result: ExecutionResult | None,
        exc: BaseException | None = None,
    ) -> None:
        """Record the query timer and one error counter per distinct error."""
        duration = context.elapsed()
        try:
            tags = merge_tags(
                self._tags_provider.contextual_tags(),
                self._tags_provider.execution_tags(params, result, exc),
                context.tags(),
            )
        except Exception:
            logger.warning("execution_tags_failed", exc_info=True)
            tags = merge_tags(context.tags())

        record_timer_safely(self._sink, GqlMetric.QUERY.value, tags, duration)

        errors = result.errors if result is not None else None
        for record in self._error_sanitizer.sanitize(errors):
            error_tags: Tags = [
                (GqlTag.PATH.value, record.path_tag),
                (GqlTag.ERROR_CODE.value, record.classification),
                (GqlTag.ERROR_DETAIL.value, record.detail),
            ]
            increment_counter_safely(
                self._sink, GqlMetric.ERROR.value, merge_tags(tags, error_tags)
            )
