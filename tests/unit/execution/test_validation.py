"""Tests for rule-attributed document validation."""

import pytest
from graphql import (
    GraphQLArgument,
    GraphQLField,
    GraphQLInt,
    GraphQLObjectType,
    GraphQLSchema,
    GraphQLString,
    parse,
    validate,
)
from graphql.validation import FieldsOnCorrectTypeRule, ScalarLeafsRule

from gqlmetrics.execution.validation import rule_name, validate_document
from gqlmetrics.instrumentation.errors import ValidationError


@pytest.fixture
def schema() -> GraphQLSchema:
    profile = GraphQLObjectType(
        "Profile",
        {
            "name": GraphQLField(GraphQLString),
            "friends": GraphQLField(
                GraphQLObjectType("Friend", {"name": GraphQLField(GraphQLString)}),
                args={"first": GraphQLArgument(GraphQLInt)},
            ),
        },
    )
    return GraphQLSchema(GraphQLObjectType("Query", {"profile": GraphQLField(profile)}))


class TestRuleName:
    """Tests for rule_name."""

    def test_strips_rule_suffix(self) -> None:
        assert rule_name(FieldsOnCorrectTypeRule) == "FieldsOnCorrectType"
        assert rule_name(ScalarLeafsRule) == "ScalarLeafs"


class TestValidateDocument:
    """Tests for validate_document."""

    def test_valid_document(self, schema: GraphQLSchema) -> None:
        assert validate_document(schema, parse("{ profile { name } }")) == []

    def test_unknown_field(self, schema: GraphQLSchema) -> None:
        """Errors name the rule and the field path where it fired."""
        [error] = validate_document(schema, parse("{ profile { nickname } }"))

        assert isinstance(error, ValidationError)
        assert error.validation_error_type == "FieldsOnCorrectType"
        assert error.query_path == ["profile", "nickname"]
        assert "nickname" in error.message

    def test_nested_path(self, schema: GraphQLSchema) -> None:
        [error] = validate_document(schema, parse("{ profile { friends { age } } }"))
        assert error.query_path == ["profile", "friends", "age"]

    def test_missing_selection(self, schema: GraphQLSchema) -> None:
        [error] = validate_document(schema, parse("{ profile }"))
        assert error.validation_error_type == "ScalarLeafs"
        assert error.query_path == ["profile"]

    def test_document_level_error_has_empty_path(self, schema: GraphQLSchema) -> None:
        """Errors raised outside any field report an empty path."""
        errors = validate_document(
            schema, parse("query A { profile { name } } query A { profile { name } }")
        )
        assert [error.validation_error_type for error in errors] == ["UniqueOperationNames"]
        assert errors[0].query_path == []

    def test_multiple_errors(self, schema: GraphQLSchema) -> None:
        errors = validate_document(schema, parse("{ profile { a b } }"))
        assert [error.query_path for error in errors] == [["profile", "a"], ["profile", "b"]]

    def test_same_messages_as_graphql_validate(self, schema: GraphQLSchema) -> None:
        """The same rules report the same errors as graphql.validate."""
        document = parse("{ profile { nickname friends(last: 1) { name } } }")

        ours = [error.message for error in validate_document(schema, document)]
        theirs = [error.message for error in validate(schema, document)]

        assert sorted(ours) == sorted(theirs)

    def test_custom_rules(self, schema: GraphQLSchema) -> None:
        """Only the given rules run."""
        errors = validate_document(schema, parse("{ profile }"), [FieldsOnCorrectTypeRule])
        assert errors == []

    def test_invalid_schema_raises(self) -> None:
        schema = GraphQLSchema(GraphQLObjectType("Query", {}))
        with pytest.raises(TypeError):
            validate_document(schema, parse("{ a }"))
