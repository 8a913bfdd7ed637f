"""Structured logging for the instrumentation.

JSON output for production, console output for development. Log events may
carry GraphQL documents, variables and error messages, so a redaction step
runs before rendering.
"""

import re
import sys
from collections.abc import Mapping
from typing import Any, cast

import structlog
from structlog.types import EventDict, WrappedLogger

LEVELS: dict[str, int] = {
    "DEBUG": 10,
    "INFO": 20,
    "WARNING": 30,
    "ERROR": 40,
    "CRITICAL": 50,
}

DOCUMENT_KEYS: frozenset[str] = frozenset({"query", "document"})
VARIABLE_KEYS: frozenset[str] = frozenset({"variables", "variable_values"})

EMAIL_PATTERN = re.compile(r"[a-zA-Z0-9._%+-]+@[a-zA-Z0-9.-]+\.[a-zA-Z]{2,}")


class GraphQLRedactor:
    """Processor that keeps request payloads out of log output.

    Documents are cut to `max_document_length` characters. Variables are
    replaced by their sorted names. Email addresses in any other string
    value, such as a coercion error message, become "[EMAIL]".
    """

    def __init__(self, max_document_length: int = 200) -> None:
        self._max_document_length = max_document_length

    def __call__(
        self,
        _logger: WrappedLogger,
        _method_name: str,
        event_dict: EventDict,
    ) -> EventDict:
        redacted = {key: self._redact(key, value) for key, value in event_dict.items()}
        return cast(EventDict, redacted)

    def _redact(self, key: str, value: Any) -> Any:
        key_lower = key.lower()
        if key_lower in VARIABLE_KEYS and isinstance(value, Mapping):
            return sorted(value)
        if key_lower in DOCUMENT_KEYS and isinstance(value, str):
            return self._truncate(value)
        if isinstance(value, str):
            return EMAIL_PATTERN.sub("[EMAIL]", value)
        if isinstance(value, Mapping):
            return {k: self._redact(k, v) for k, v in value.items()}
        return value

    def _truncate(self, document: str) -> str:
        # Collapse whitespace so multi-line documents stay on one log line
        compact = " ".join(document.split())
        if len(compact) <= self._max_document_length:
            return compact
        return compact[: self._max_document_length] + "..."


def setup_logging(
    level: str = "INFO",
    format: str = "json",
    redact: bool = True,
    max_document_length: int = 200,
) -> None:
    """Configure structured logging.

    Args:
        level: Minimum log level (DEBUG, INFO, WARNING, ERROR)
        format: Output format - "json" for production, "console" for development
        redact: Whether to redact GraphQL payloads from log events
        max_document_length: Longest document text kept when redacting
    """
    processors: list[Any] = [
        structlog.contextvars.merge_contextvars,
        structlog.processors.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
    ]
    if redact:
        processors.append(GraphQLRedactor(max_document_length))

    if format == "json":
        processors.append(structlog.processors.format_exc_info)
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer(colors=True))

    structlog.configure(
        processors=processors,
        wrapper_class=structlog.make_filtering_bound_logger(LEVELS.get(level.upper(), 20)),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(sys.stderr),
        cache_logger_on_first_use=True,
    )


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a logger instance bound to the given name (usually `__name__`)."""
    return cast(structlog.stdlib.BoundLogger, structlog.get_logger(name))
