"""Tag providers and customizers.

A TagsProvider supplies the tags that aren't derived from the execution
context itself. The default provider collates the tags of any number of
customizers, so applications add dimensions by registering a customizer.
"""

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping, Sequence
from typing import TYPE_CHECKING

from graphql import ExecutionResult

from gqlmetrics.instrumentation.metrics import GqlTag, Outcome

if TYPE_CHECKING:
    from gqlmetrics.instrumentation.context import ExecutionParameters, FieldFetchParameters

Tag = tuple[str, str]
Tags = Sequence[Tag]


def merge_tags(*groups: Iterable[Tag] | Mapping[str, str]) -> dict[str, str]:
    """Merge tag groups in order; a later value for a key replaces the earlier one."""
    merged: dict[str, str] = {}
    for group in groups:
        items = group.items() if isinstance(group, Mapping) else group
        for key, value in items:
            merged[key] = value
    return merged


class TagsProvider(ABC):
    """Supplies contextual, execution and field fetch tags."""

    @abstractmethod
    def contextual_tags(self) -> Tags:
        """Tags added to every metric."""
        pass

    @abstractmethod
    def execution_tags(
        self,
        params: "ExecutionParameters",
        result: ExecutionResult | None,
        exc: BaseException | None,
    ) -> Tags:
        """Tags added to the query timer and error counters."""
        pass

    @abstractmethod
    def field_fetch_tags(
        self,
        params: "FieldFetchParameters",
        exc: BaseException | None,
    ) -> Tags:
        """Tags added to resolver timers."""
        pass


class ContextualTagCustomizer(ABC):
    @abstractmethod
    def tags(self) -> Tags:
        pass


class ExecutionTagCustomizer(ABC):
    @abstractmethod
    def tags(
        self,
        params: "ExecutionParameters",
        result: ExecutionResult | None,
        exc: BaseException | None,
    ) -> Tags:
        pass


class FieldFetchTagCustomizer(ABC):
    @abstractmethod
    def tags(self, params: "FieldFetchParameters", exc: BaseException | None) -> Tags:
        pass


class CollatedTagsProvider(TagsProvider):
    """Concatenates the tags of registered customizers, in registration order."""

    def __init__(
        self,
        contextual: Iterable[ContextualTagCustomizer] = (),
        execution: Iterable[ExecutionTagCustomizer] = (),
        field_fetch: Iterable[FieldFetchTagCustomizer] = (),
    ) -> None:
        self._contextual = list(contextual)
        self._execution = list(execution)
        self._field_fetch = list(field_fetch)

    def contextual_tags(self) -> Tags:
        return [tag for customizer in self._contextual for tag in customizer.tags()]

    def execution_tags(
        self,
        params: "ExecutionParameters",
        result: ExecutionResult | None,
        exc: BaseException | None,
    ) -> Tags:
        return [
            tag for customizer in self._execution for tag in customizer.tags(params, result, exc)
        ]

    def field_fetch_tags(
        self,
        params: "FieldFetchParameters",
        exc: BaseException | None,
    ) -> Tags:
        return [tag for customizer in self._field_fetch for tag in customizer.tags(params, exc)]


class StaticContextualTagCustomizer(ContextualTagCustomizer):
    """Fixed tags, e.g. service name or region, from configuration."""

    def __init__(self, tags: Mapping[str, str]) -> None:
        self._tags = list(tags.items())

    def tags(self) -> Tags:
        return self._tags


class ExecutionOutcomeTagCustomizer(ExecutionTagCustomizer):
    """outcome=failure if the execution raised or its result carries errors."""

    def tags(
        self,
        params: "ExecutionParameters",  # noqa: ARG002
        result: ExecutionResult | None,
        exc: BaseException | None,
    ) -> Tags:
        failed = exc is not None or bool(result is not None and result.errors)
        return [_outcome_tag(failed)]


class FieldFetchOutcomeTagCustomizer(FieldFetchTagCustomizer):
    """outcome=failure if the resolver raised."""

    def tags(
        self,
        params: "FieldFetchParameters",  # noqa: ARG002
        exc: BaseException | None,
    ) -> Tags:
        return [_outcome_tag(exc is not None)]


def _outcome_tag(failed: bool) -> Tag:
    return (GqlTag.OUTCOME.value, (Outcome.FAILURE if failed else Outcome.SUCCESS).value)
