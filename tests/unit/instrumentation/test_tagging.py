"""Tests for tag providers and customizers."""

from graphql import ExecutionResult, GraphQLError

from gqlmetrics.instrumentation.context import ExecutionParameters, FieldFetchParameters
from gqlmetrics.instrumentation.tagging import (
    CollatedTagsProvider,
    ContextualTagCustomizer,
    ExecutionOutcomeTagCustomizer,
    FieldFetchOutcomeTagCustomizer,
    StaticContextualTagCustomizer,
    Tags,
    merge_tags,
)


class RegionCustomizer(ContextualTagCustomizer):
    def __init__(self, region: str) -> None:
        self._region = region

    def tags(self) -> Tags:
        return [("region", self._region)]


class TestMergeTags:
    """Tests for merge_tags."""

    def test_merges_in_order(self) -> None:
        assert merge_tags([("a", "1")], {"b": "2"}) == {"a": "1", "b": "2"}

    def test_later_value_wins(self) -> None:
        """A later group overrides earlier values for the same key."""
        assert merge_tags([("a", "1")], [("a", "2")]) == {"a": "2"}

    def test_no_groups(self) -> None:
        assert merge_tags() == {}


class TestCollatedTagsProvider:
    """Tests for CollatedTagsProvider."""

    def test_empty_provider(
        self,
        execution_params: ExecutionParameters,
        field_params: FieldFetchParameters,
    ) -> None:
        provider = CollatedTagsProvider()
        assert list(provider.contextual_tags()) == []
        assert list(provider.execution_tags(execution_params, None, None)) == []
        assert list(provider.field_fetch_tags(field_params, None)) == []

    def test_contextual_tags_concatenated(self) -> None:
        """Customizer tags are concatenated in registration order."""
        provider = CollatedTagsProvider(
            contextual=[
                StaticContextualTagCustomizer({"service": "catalog"}),
                RegionCustomizer("eu"),
            ]
        )
        assert list(provider.contextual_tags()) == [("service", "catalog"), ("region", "eu")]

    def test_execution_tags(self, execution_params: ExecutionParameters) -> None:
        provider = CollatedTagsProvider(execution=[ExecutionOutcomeTagCustomizer()])
        result = ExecutionResult(data={"profile": None})
        assert list(provider.execution_tags(execution_params, result, None)) == [
            ("outcome", "success")
        ]

    def test_field_fetch_tags(self, field_params: FieldFetchParameters) -> None:
        provider = CollatedTagsProvider(field_fetch=[FieldFetchOutcomeTagCustomizer()])
        assert list(provider.field_fetch_tags(field_params, ValueError("x"))) == [
            ("outcome", "failure")
        ]


class TestExecutionOutcomeTagCustomizer:
    """Tests for ExecutionOutcomeTagCustomizer."""

    def test_success(self, execution_params: ExecutionParameters) -> None:
        tags = ExecutionOutcomeTagCustomizer().tags(
            execution_params, ExecutionResult(data={}), None
        )
        assert tags == [("outcome", "success")]

    def test_result_errors_are_failure(self, execution_params: ExecutionParameters) -> None:
        """A result carrying errors is a failed execution."""
        result = ExecutionResult(data=None, errors=[GraphQLError("boom")])
        assert ExecutionOutcomeTagCustomizer().tags(execution_params, result, None) == [
            ("outcome", "failure")
        ]

    def test_exception_is_failure(self, execution_params: ExecutionParameters) -> None:
        tags = ExecutionOutcomeTagCustomizer().tags(execution_params, None, RuntimeError("x"))
        assert tags == [("outcome", "failure")]

    def test_no_result_no_exception(self, execution_params: ExecutionParameters) -> None:
        assert ExecutionOutcomeTagCustomizer().tags(execution_params, None, None) == [
            ("outcome", "success")
        ]


class TestFieldFetchOutcomeTagCustomizer:
    """Tests for FieldFetchOutcomeTagCustomizer."""

    def test_success(self, field_params: FieldFetchParameters) -> None:
        assert FieldFetchOutcomeTagCustomizer().tags(field_params, None) == [
            ("outcome", "success")
        ]

    def test_failure(self, field_params: FieldFetchParameters) -> None:
        assert FieldFetchOutcomeTagCustomizer().tags(field_params, KeyError("id")) == [
            ("outcome", "failure")
        ]
