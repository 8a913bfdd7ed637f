"""Normalization of GraphQL errors into bounded error tags.

Errors from list fields and batch loaders repeat the same failure once per
list index. Paths are normalized so `["items", 0, "name"]` and
`["items", 1, "name"]` report as one `[items, number, name]` error.
"""

import re
from collections.abc import Iterable, Sequence
from dataclasses import dataclass
from enum import Enum
from typing import Any

from graphql import GraphQLError, GraphQLSyntaxError

from gqlmetrics.instrumentation.metrics import TAG_VALUE_NONE, TAG_VALUE_UNKNOWN
from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)

NUMBER_SEGMENT = "number"

# Optional sign then ASCII digits; no whitespace or underscores
_INDEX_SEGMENT = re.compile(r"[+-]?[0-9]+")
_INT32_MIN, _INT32_MAX = -(2**31), 2**31 - 1

SYNTAX_ERROR_CLASSIFICATION = "InvalidSyntax"
ERROR_TYPE_EXTENSION = "errorType"
ERROR_DETAIL_EXTENSION = "errorDetail"


class ValidationError(GraphQLError):
    """A validation error attributed to the rule that reported it.

    graphql-core reports validation failures as plain GraphQLError; the
    execution adapter re-wraps them with the rule name and the field path
    inside the query document where the rule fired.
    """

    def __init__(
        self,
        error: GraphQLError,
        validation_error_type: str,
        query_path: Sequence[str] = (),
    ) -> None:
        super().__init__(
            error.message,
            nodes=error.nodes,
            source=error.source,
            positions=error.positions,
            path=error.path,
            original_error=error.original_error,
            extensions=error.extensions,
        )
        self.validation_error_type = validation_error_type
        self.query_path = list(query_path)


class ErrorKind(str, Enum):
    """Closed set of error shapes with their own extraction rules."""

    VALIDATION = "validation"
    SYNTAX = "syntax"
    GENERIC = "generic"


def classify(error: GraphQLError) -> ErrorKind:
    if isinstance(error, GraphQLSyntaxError):
        return ErrorKind.SYNTAX
    if isinstance(error, ValidationError):
        return ErrorKind.VALIDATION
    return ErrorKind.GENERIC


@dataclass(frozen=True)
class ErrorRecord:
    """Tag values for one reported error."""

    path: tuple[str, ...]
    classification: str
    detail: str

    @property
    def path_tag(self) -> str:
        return "[" + ", ".join(self.path) + "]"


def normalize_path(path: Iterable[Any]) -> tuple[str, ...]:
    """Replace list indices in an error path with NUMBER_SEGMENT."""
    return tuple(NUMBER_SEGMENT if _is_index(segment) else str(segment) for segment in path)


def _is_index(segment: Any) -> bool:
    if isinstance(segment, bool):
        return False
    if isinstance(segment, int):
        return True
    text = str(segment)
    if _INDEX_SEGMENT.fullmatch(text) is None:
        return False
    return _INT32_MIN <= int(text) <= _INT32_MAX


def _extension(error: GraphQLError, key: str, default: str) -> str:
    value = (error.extensions or {}).get(key)
    return default if value is None else str(value)


class ErrorPathSanitizer:
    """Turns the errors of one execution result into deduplicated ErrorRecords."""

    def sanitize(self, errors: Iterable[GraphQLError] | None) -> list[ErrorRecord]:
        """Normalize and deduplicate errors.

        Records are keyed on (normalized path, classification); the first
        error seen for a key wins and first-appearance order is kept.
        """
        records: dict[tuple[tuple[str, ...], str], ErrorRecord] = {}
        for error in errors or ():
            try:
                record = self.to_record(error)
            except Exception:
                logger.warning("error_sanitize_failed", error=str(error), exc_info=True)
                continue
            records.setdefault((record.path, record.classification), record)
        return list(records.values())

    def to_record(self, error: GraphQLError) -> ErrorRecord:
        detail = _extension(error, ERROR_DETAIL_EXTENSION, TAG_VALUE_NONE)
        kind = classify(error)

        if kind is ErrorKind.VALIDATION and isinstance(error, ValidationError):
            path: Sequence[Any] = error.query_path
            classification = error.validation_error_type or TAG_VALUE_UNKNOWN
        elif kind is ErrorKind.SYNTAX:
            path = ()
            classification = SYNTAX_ERROR_CLASSIFICATION
        else:
            path = error.path or ()
            classification = _extension(error, ERROR_TYPE_EXTENSION, TAG_VALUE_UNKNOWN)

        return ErrorRecord(
            path=normalize_path(path),
            classification=classification,
            detail=detail,
        )
