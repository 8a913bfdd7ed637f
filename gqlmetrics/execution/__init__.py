"""graphql-core execution adapter."""

from gqlmetrics.execution.executor import InstrumentedExecutor, ObserverMiddleware
from gqlmetrics.execution.validation import validate_document

__all__ = ["InstrumentedExecutor", "ObserverMiddleware", "validate_document"]
