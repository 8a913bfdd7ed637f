"""Query signature computation and caching.

A signature groups executions of the same query shape: the selected
operation and the fragments it uses, with literals replaced by placeholders,
aliases removed and selections sorted. Queries differing only in literal
argument values share a signature.
"""

import hashlib
import time
from collections.abc import Callable
from copy import copy
from typing import Any

from graphql import (
    DocumentNode,
    FieldNode,
    FloatValueNode,
    FragmentDefinitionNode,
    FragmentSpreadNode,
    InlineFragmentNode,
    IntValueNode,
    ListValueNode,
    ObjectValueNode,
    SelectionNode,
    StringValueNode,
    Visitor,
    parse,
    print_ast,
    visit,
)
from graphql.utilities import get_operation_ast

from gqlmetrics.instrumentation.metrics import GqlMetric, GqlTag, Outcome
from gqlmetrics.instrumentation.signature.cache import QuerySignatureCache
from gqlmetrics.instrumentation.signature.models import QuerySignature
from gqlmetrics.instrumentation.sink import MetricsSink, record_timer_safely
from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)

SignatureFunction = Callable[[DocumentNode, str | None], QuerySignature]


def query_hash(query: str) -> str:
    """SHA-256 hex digest of the raw query text."""
    return hashlib.sha256(query.encode("utf-8")).hexdigest()


def compute_signature(document: DocumentNode, operation_name: str | None) -> QuerySignature:
    """Compute the signature of one operation of a document.

    Raises:
        ValueError: If the document has no operation matching operation_name
        KeyError: If the operation spreads an undefined fragment
    """
    operation = get_operation_ast(document, operation_name)
    if operation is None:
        raise ValueError(f"No operation found for name {operation_name!r}")

    fragments = {
        definition.name.value: definition
        for definition in document.definitions
        if isinstance(definition, FragmentDefinitionNode)
    }
    used = sorted(_used_fragments(operation, fragments))
    signature_document = DocumentNode(
        definitions=(operation, *(fragments[name] for name in used))
    )

    value = print_ast(visit(signature_document, _SignatureVisitor()))
    return QuerySignature(value=value, hash=query_hash(value))


def _used_fragments(node: Any, fragments: dict[str, FragmentDefinitionNode]) -> set[str]:
    used: set[str] = set()
    pending = [node]
    while pending:
        current = pending.pop()
        for selection in current.selection_set.selections if current.selection_set else ():
            if isinstance(selection, FragmentSpreadNode):
                name = selection.name.value
                if name not in used:
                    used.add(name)
                    pending.append(fragments[name])
            elif isinstance(selection, (FieldNode, InlineFragmentNode)):
                pending.append(selection)
    return used


def _selection_sort_key(selection: SelectionNode) -> tuple[int, str]:
    if isinstance(selection, FieldNode):
        return 0, selection.name.value
    if isinstance(selection, FragmentSpreadNode):
        return 1, selection.name.value
    if isinstance(selection, InlineFragmentNode) and selection.type_condition is not None:
        return 2, selection.type_condition.name.value
    return 2, ""


class _SignatureVisitor(Visitor):
    """Hides literals, drops aliases and sorts selections and arguments.

    Nodes are copied before being changed; the parsed document may be
    shared with the executing engine.
    """

    def leave_int_value(self, node: IntValueNode, *_args: Any) -> IntValueNode:
        return IntValueNode(value="0")

    def leave_float_value(self, node: FloatValueNode, *_args: Any) -> FloatValueNode:
        return FloatValueNode(value="0.0")

    def leave_string_value(self, node: StringValueNode, *_args: Any) -> StringValueNode:
        return StringValueNode(value="", block=False)

    def leave_list_value(self, node: ListValueNode, *_args: Any) -> ListValueNode:
        return ListValueNode(values=())

    def leave_object_value(self, node: ObjectValueNode, *_args: Any) -> ObjectValueNode:
        return ObjectValueNode(fields=())

    def leave_field(self, node: FieldNode, *_args: Any) -> FieldNode:
        field = copy(node)
        field.alias = None
        field.arguments = tuple(sorted(node.arguments or (), key=lambda a: a.name.value))
        return field

    def leave_directive(self, node: Any, *_args: Any) -> Any:
        directive = copy(node)
        directive.arguments = tuple(sorted(node.arguments or (), key=lambda a: a.name.value))
        return directive

    def leave_selection_set(self, node: Any, *_args: Any) -> Any:
        selection_set = copy(node)
        selection_set.selections = tuple(sorted(node.selections, key=_selection_sort_key))
        return selection_set


class QuerySignatureService:
    """Get-or-compute-and-store access to query signatures.

    Signatures are cached by (hash of the raw query text, operation name).
    Two executions racing on a miss both compute the signature; the result
    is identical so either stored value is correct.
    """

    def __init__(
        self,
        cache: QuerySignatureCache,
        sink: MetricsSink | None = None,
        compute: SignatureFunction = compute_signature,
    ) -> None:
        """Initialize the service.

        Args:
            cache: Cache holding computed signatures
            sink: Receives the lookup latency timer, if given
            compute: Signature function called on cache misses
        """
        self._cache = cache
        self._sink = sink
        self._compute = compute

    def get(
        self,
        query: str,
        operation_name: str | None = None,
        document: DocumentNode | None = None,
    ) -> QuerySignature | None:
        """Signature of the operation, None if it can't be computed.

        Args:
            query: Raw query text
            operation_name: Operation to sign, may be omitted for single-operation documents
            document: Parsed query; parsed from query when not given
        """
        started = time.perf_counter()
        outcome = Outcome.SUCCESS
        key_hash: str | None = None
        try:
            key_hash = query_hash(query)
            key = (key_hash, operation_name)
            signature = self._cache.get(key)
            if signature is None:
                signature = self._compute(
                    document if document is not None else parse(query), operation_name
                )
                self._cache.put(key, signature)
            return signature
        except Exception:
            outcome = Outcome.FAILURE
            logger.error(
                "query_signature_failed",
                query_hash=key_hash,
                operation_name=operation_name,
                exc_info=True,
            )
            return None
        finally:
            if self._sink is not None:
                record_timer_safely(
                    self._sink,
                    GqlMetric.METHOD_LATENCY.value,
                    {
                        GqlTag.METHOD.value: "QuerySignatureService.get",
                        GqlTag.OUTCOME.value: outcome.value,
                    },
                    time.perf_counter() - started,
                )
