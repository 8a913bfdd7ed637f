"""Document validation with errors attributed to their rule.

Runs the same rules as `graphql.validate` in a single pass, but gives each
rule its own ValidationContext so every reported error can be wrapped in a
ValidationError naming the rule and the field path where it fired.
"""

from collections.abc import Collection
from typing import Any

from graphql import (
    DocumentNode,
    FieldNode,
    GraphQLError,
    GraphQLSchema,
    ParallelVisitor,
    TypeInfo,
    TypeInfoVisitor,
    Visitor,
    assert_valid_schema,
    specified_rules,
    visit,
)
from graphql.validation import ASTValidationRule, ValidationContext

from gqlmetrics.instrumentation.errors import ValidationError


class _QueryPath:
    def __init__(self) -> None:
        self.segments: list[str] = []


class _PushField(Visitor):
    def __init__(self, path: _QueryPath) -> None:
        super().__init__()
        self._path = path

    def enter_field(self, node: FieldNode, *_args: Any) -> None:
        self._path.segments.append(node.name.value)


class _PopField(Visitor):
    def __init__(self, path: _QueryPath) -> None:
        super().__init__()
        self._path = path

    def leave_field(self, node: FieldNode, *_args: Any) -> None:
        self._path.segments.pop()


def rule_name(rule: type[ASTValidationRule]) -> str:
    """`FieldsOnCorrectTypeRule` -> `FieldsOnCorrectType`."""
    return rule.__name__.removesuffix("Rule")


def validate_document(
    schema: GraphQLSchema,
    document: DocumentNode,
    rules: Collection[type[ASTValidationRule]] | None = None,
) -> list[GraphQLError]:
    """Validate document against schema.

    Raises:
        TypeError: If the schema itself is invalid
    """
    assert_valid_schema(schema)

    path = _QueryPath()
    type_info = TypeInfo(schema)
    errors: list[GraphQLError] = []

    def reporter(validation_error_type: str) -> Any:
        def on_error(error: GraphQLError) -> None:
            errors.append(ValidationError(error, validation_error_type, path.segments))

        return on_error

    # The path is pushed before any rule enters a field and popped after
    # every rule has left it
    visitors: list[Visitor] = [_PushField(path)]
    for rule in specified_rules if rules is None else rules:
        context = ValidationContext(schema, document, type_info, reporter(rule_name(rule)))
        visitors.append(rule(context))
    visitors.append(_PopField(path))

    visit(document, TypeInfoVisitor(type_info, ParallelVisitor(visitors)))
    return errors
