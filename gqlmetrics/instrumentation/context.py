"""Per-execution state and the parameters passed to lifecycle hooks."""

import time
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from graphql import GraphQLNonNull, GraphQLOutputType, GraphQLResolveInfo, GraphQLSchema

from gqlmetrics.instrumentation.limiter import CardinalityLimiter
from gqlmetrics.instrumentation.metrics import (
    TAG_VALUE_ANONYMOUS,
    TAG_VALUE_NONE,
    GqlTag,
)
from gqlmetrics.instrumentation.signature.models import QuerySignature
from gqlmetrics.instrumentation.tagging import Tags


@dataclass(frozen=True)
class ExecutionParameters:
    """What the engine was asked to execute."""

    query: str
    operation_name: str | None = None
    variables: Mapping[str, Any] | None = None
    schema: GraphQLSchema | None = None


@dataclass(frozen=True)
class FieldFetchParameters:
    """The field about to be resolved."""

    parent_type: GraphQLOutputType
    field_name: str
    # Resolver only reads a value off the parent object
    trivial: bool = False
    info: GraphQLResolveInfo | None = None

    @classmethod
    def from_info(cls, info: GraphQLResolveInfo) -> "FieldFetchParameters":
        """Build parameters from graphql-core resolve info.

        Fields without a custom resolver use graphql-core's default
        resolver and count as trivial.
        """
        field_def = info.parent_type.fields.get(info.field_name)
        return cls(
            parent_type=info.parent_type,
            field_name=info.field_name,
            trivial=field_def is not None and field_def.resolve is None,
            info=info,
        )

    @property
    def field_tag(self) -> str:
        """`<ParentType>.<field>`, looking through one non-null wrapper."""
        parent = self.parent_type
        if isinstance(parent, GraphQLNonNull):
            parent = parent.of_type
        return f"{parent.name}.{self.field_name}"


@dataclass
class ExecutionContext:
    """State of one execution, owned by that execution only.

    complexity and signature are written once, when validation succeeds,
    before completion reads them.
    """

    operation_name_limiter: CardinalityLimiter = field(repr=False)
    signature_hash_limiter: CardinalityLimiter = field(repr=False)
    operation: str | None = None
    operation_name: str | None = None
    started_at: float = field(default_factory=time.perf_counter)
    complexity: int | None = None
    signature: QuerySignature | None = None

    def elapsed(self) -> float:
        """Seconds since the execution started."""
        return time.perf_counter() - self.started_at

    def tags(self) -> Tags:
        """Tags derived from this execution's state."""
        complexity = str(self.complexity) if self.complexity is not None else TAG_VALUE_NONE
        operation = self.operation.upper() if self.operation is not None else TAG_VALUE_NONE
        operation_name = (
            self.operation_name_limiter.limit(self.operation_name)
            if self.operation_name is not None
            else TAG_VALUE_ANONYMOUS
        )
        signature_hash = (
            self.signature_hash_limiter.limit(self.signature.hash)
            if self.signature is not None
            else TAG_VALUE_NONE
        )
        return [
            (GqlTag.QUERY_COMPLEXITY.value, complexity),
            (GqlTag.OPERATION.value, operation),
            (GqlTag.OPERATION_NAME.value, operation_name),
            (GqlTag.QUERY_SIG_HASH.value, signature_hash),
        ]
