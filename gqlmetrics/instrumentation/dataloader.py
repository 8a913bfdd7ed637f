"""Timing of batch loader dispatches.

Resolvers backed by a batch loader return before the batch is fetched, so
their resolver timers don't include the fetch. The batch load function is
timed instead, once per dispatch.

Usage with aiodataloader or any loader taking an async batch function:

    instrumentation = DataLoaderInstrumentation(sink, tags_provider)
    loader = DataLoader(instrumentation.instrument("users", load_users))
"""

import time
from collections.abc import Awaitable, Callable, Sequence
from functools import wraps
from typing import TypeVar

from gqlmetrics.instrumentation.metrics import GqlMetric, GqlTag, Outcome
from gqlmetrics.instrumentation.sink import MetricsSink, record_timer_safely
from gqlmetrics.instrumentation.tagging import Tags, TagsProvider, merge_tags
from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)

K = TypeVar("K")
V = TypeVar("V")

BatchLoadFn = Callable[[Sequence[K]], Awaitable[Sequence[V]]]


class DataLoaderInstrumentation:
    """Wraps batch load functions with a gql.dataLoader timer."""

    def __init__(self, sink: MetricsSink, tags_provider: TagsProvider | None = None) -> None:
        self._sink = sink
        self._tags_provider = tags_provider

    def instrument(self, name: str, batch_load_fn: BatchLoadFn[K, V]) -> BatchLoadFn[K, V]:
        """Return batch_load_fn timed under the loader name.

        Exceptions from batch_load_fn propagate unchanged.
        """

        @wraps(batch_load_fn)
        async def timed_batch_load(keys: Sequence[K]) -> Sequence[V]:
            started = time.perf_counter()
            outcome = Outcome.SUCCESS
            try:
                return await batch_load_fn(keys)
            except BaseException:
                outcome = Outcome.FAILURE
                raise
            finally:
                self._record(name, len(keys), outcome, time.perf_counter() - started)

        return timed_batch_load

    def _record(self, name: str, batch_size: int, outcome: Outcome, duration: float) -> None:
        contextual: Tags = []
        if self._tags_provider is not None:
            try:
                contextual = self._tags_provider.contextual_tags()
            except Exception:
                logger.warning("contextual_tags_failed", loader=name, exc_info=True)
        tags = merge_tags(
            contextual,
            [
                (GqlTag.LOADER_NAME.value, name),
                (GqlTag.LOADER_BATCH_SIZE.value, str(batch_size)),
                (GqlTag.OUTCOME.value, outcome.value),
            ],
        )
        record_timer_safely(self._sink, GqlMetric.DATA_LOADER.value, tags, duration)
