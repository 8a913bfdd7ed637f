"""Query complexity estimation.

The score follows the default field cost of graphql-java's
MaxQueryComplexityInstrumentation: every field costs one plus the cost of its
selections, `__typename` costs nothing. Scores are reported as buckets to
keep the tag bounded.
"""

from collections.abc import Iterator, Mapping, Sequence
from dataclasses import dataclass
from typing import Any

from graphql import (
    DocumentNode,
    FieldNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    GraphQLIncludeDirective,
    GraphQLSkipDirective,
    InlineFragmentNode,
    OperationDefinitionNode,
    SelectionSetNode,
)
from graphql.execution.values import get_directive_values
from graphql.utilities import get_operation_ast, value_from_ast_untyped

from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)

QUERY_COMPLEXITY_BUCKETS: tuple[int, ...] = (5, 10, 25, 50, 100, 200, 500, 1000, 2000, 5000, 10000)

TYPENAME_FIELD = "__typename"


@dataclass(eq=False)
class FieldVisit:
    """One occurrence of a field in the expanded query tree.

    Compared by identity: a field reached through two fragment spreads is two
    visits.
    """

    node: FieldNode
    parent: "FieldVisit | None"

    @property
    def is_typename_introspection(self) -> bool:
        return self.node.name.value == TYPENAME_FIELD


class ComplexityEstimator:
    """Computes the bucketed complexity of a GraphQL operation."""

    def __init__(self, buckets: Sequence[int] = QUERY_COMPLEXITY_BUCKETS) -> None:
        self._buckets = tuple(sorted(buckets))

    def estimate(
        self,
        document: DocumentNode,
        operation_name: str | None = None,
        variables: Mapping[str, Any] | None = None,
    ) -> int | None:
        """Return the complexity bucket of the operation, or None.

        None is returned when the score exceeds every bucket or when the
        document can't be traversed.
        """
        try:
            total = self.score(document, operation_name, variables)
        except Exception:
            logger.error(
                "query_complexity_failed",
                operation_name=operation_name,
                exc_info=True,
            )
            return None
        return self.bucket(total)

    def bucket(self, score: int) -> int | None:
        """Smallest bucket strictly greater than score."""
        for threshold in self._buckets:
            if score < threshold:
                return threshold
        return None

    def score(
        self,
        document: DocumentNode,
        operation_name: str | None = None,
        variables: Mapping[str, Any] | None = None,
    ) -> int:
        """Raw complexity score of the operation.

        Raises:
            ValueError: If the document has no operation matching operation_name
        """
        operation = get_operation_ast(document, operation_name)
        if operation is None:
            raise ValueError(f"No operation found for name {operation_name!r}")

        fragments = {
            definition.name.value: definition
            for definition in document.definitions
            if isinstance(definition, FragmentDefinitionNode)
        }
        walker = _FieldWalker(fragments, _variable_values(operation, variables))

        # Post-order: children are folded into their parent's entry before
        # the parent itself is visited
        totals: dict[FieldVisit | None, int] = {}
        for visit in walker.post_order(operation.selection_set):
            if visit.is_typename_introspection:
                cost = 0
            else:
                cost = 1 + totals.get(visit, 0)
            totals[visit.parent] = totals.get(visit.parent, 0) + cost
        return totals.get(None, 0)


class _FieldWalker:
    def __init__(
        self,
        fragments: Mapping[str, FragmentDefinitionNode],
        variables: Mapping[str, Any],
    ) -> None:
        self._fragments = fragments
        self._variables = variables

    def post_order(
        self,
        selection_set: SelectionSetNode,
        parent: FieldVisit | None = None,
        spreads: frozenset[str] = frozenset(),
    ) -> Iterator[FieldVisit]:
        for field, field_spreads in self._fields(selection_set, spreads):
            visit = FieldVisit(field, parent)
            if field.selection_set is not None:
                yield from self.post_order(field.selection_set, visit, field_spreads)
            yield visit

    def _fields(
        self,
        selection_set: SelectionSetNode,
        spreads: frozenset[str],
    ) -> Iterator[tuple[FieldNode, frozenset[str]]]:
        for selection in selection_set.selections:
            if not self._included(selection):
                continue
            if isinstance(selection, FieldNode):
                yield selection, spreads
            elif isinstance(selection, InlineFragmentNode):
                yield from self._fields(selection.selection_set, spreads)
            elif isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                if name in spreads:
                    continue
                fragment = self._fragments[name]
                yield from self._fields(fragment.selection_set, spreads | {name})
            else:
                raise TypeError(f"Unexpected selection node: {selection.kind}")

    def _included(self, node: Any) -> bool:
        skip = get_directive_values(GraphQLSkipDirective, node, self._variables)
        if skip and skip.get("if") is True:
            return False
        include = get_directive_values(GraphQLIncludeDirective, node, self._variables)
        if include and include.get("if") is False:
            return False
        return True


def _variable_values(
    operation: OperationDefinitionNode,
    variables: Mapping[str, Any] | None,
) -> dict[str, Any]:
    values: dict[str, Any] = {}
    for definition in operation.variable_definitions or ():
        if definition.default_value is not None:
            values[definition.variable.name.value] = value_from_ast_untyped(
                definition.default_value
            )
    values.update(variables or {})
    return values
