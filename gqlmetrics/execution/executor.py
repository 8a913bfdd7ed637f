"""graphql-core execution driven through an ExecutionObserver.

graphql-core has no instrumentation hooks, so this executor runs
parse, validate and execute itself and calls the observer between the
steps. Field resolvers are routed through the observer with a per-execution
middleware.
"""

from collections.abc import Collection, Mapping
from typing import Any

from graphql import (
    DocumentNode,
    ExecutionResult,
    GraphQLError,
    GraphQLResolveInfo,
    GraphQLSchema,
    GraphQLSyntaxError,
    execute,
    parse,
)
from graphql.pyutils import AwaitableOrValue, is_awaitable
from graphql.utilities import get_operation_ast
from graphql.validation import ASTValidationRule

from gqlmetrics.execution.validation import validate_document
from gqlmetrics.instrumentation.context import (
    ExecutionContext,
    ExecutionParameters,
    FieldFetchParameters,
)
from gqlmetrics.instrumentation.observer import ExecutionObserver


class ObserverMiddleware:
    """graphql-core middleware timing field resolvers of one execution."""

    def __init__(self, observer: ExecutionObserver, context: ExecutionContext) -> None:
        self._observer = observer
        self._context = context

    def resolve(self, next_: Any, root: Any, info: GraphQLResolveInfo, **args: Any) -> Any:
        resolver = self._observer.wrap_field_resolution(
            self._context, next_, FieldFetchParameters.from_info(info)
        )
        return resolver(root, info, **args)


class InstrumentedExecutor:
    """Executes GraphQL requests against a schema, reporting to an observer."""

    def __init__(
        self,
        schema: GraphQLSchema,
        observer: ExecutionObserver,
        validation_rules: Collection[type[ASTValidationRule]] | None = None,
    ) -> None:
        self._schema = schema
        self._observer = observer
        self._validation_rules = validation_rules

    async def execute(
        self,
        query: str,
        operation_name: str | None = None,
        variables: Mapping[str, Any] | None = None,
        root_value: Any = None,
        context_value: Any = None,
    ) -> ExecutionResult:
        """Execute a request, awaiting asynchronous resolvers."""
        params = ExecutionParameters(query, operation_name, variables, self._schema)
        prepared = self._prepare(params)
        if isinstance(prepared, ExecutionResult):
            return prepared

        context, document = prepared
        try:
            result = self._execute(context, document, params, root_value, context_value)
            if is_awaitable(result):
                result = await result
        except BaseException as exc:
            self._observer.on_execution_complete(context, params, None, exc)
            raise

        self._observer.on_execution_complete(context, params, result)
        return result

    def execute_sync(
        self,
        query: str,
        operation_name: str | None = None,
        variables: Mapping[str, Any] | None = None,
        root_value: Any = None,
        context_value: Any = None,
    ) -> ExecutionResult:
        """Execute a request whose resolvers are all synchronous.

        Raises:
            RuntimeError: If a resolver returned an awaitable
        """
        params = ExecutionParameters(query, operation_name, variables, self._schema)
        prepared = self._prepare(params)
        if isinstance(prepared, ExecutionResult):
            return prepared

        context, document = prepared
        try:
            result = self._execute(context, document, params, root_value, context_value)
            if is_awaitable(result):
                # Don't leave the coroutine un-awaited
                close = getattr(result, "close", None)
                if close is not None:
                    close()
                raise RuntimeError("GraphQL execution failed to complete synchronously.")
        except BaseException as exc:
            self._observer.on_execution_complete(context, params, None, exc)
            raise

        self._observer.on_execution_complete(context, params, result)
        return result

    def _prepare(
        self, params: ExecutionParameters
    ) -> ExecutionResult | tuple[ExecutionContext, DocumentNode]:
        """Parse and validate; a result is returned when execution must stop."""
        try:
            document = parse(params.query)
        except GraphQLSyntaxError as error:
            context = self._observer.on_execution_start(params)
            result = ExecutionResult(data=None, errors=[error])
            self._observer.on_execution_complete(context, params, result)
            return result

        operation = get_operation_ast(document, params.operation_name)
        context = self._observer.on_execution_start(
            params, operation.operation.value if operation is not None else None
        )

        try:
            errors: list[GraphQLError] = validate_document(
                self._schema, document, self._validation_rules
            )
        except BaseException as exc:
            self._observer.on_validation_complete(context, params, None, document, exc)
            self._observer.on_execution_complete(context, params, None, exc)
            raise

        self._observer.on_validation_complete(context, params, errors, document)
        if errors:
            result = ExecutionResult(data=None, errors=errors)
            self._observer.on_execution_complete(context, params, result)
            return result

        return context, document

    def _execute(
        self,
        context: ExecutionContext,
        document: DocumentNode,
        params: ExecutionParameters,
        root_value: Any,
        context_value: Any,
    ) -> AwaitableOrValue[ExecutionResult]:
        return execute(
            self._schema,
            document,
            root_value=root_value,
            context_value=context_value,
            variable_values=dict(params.variables) if params.variables is not None else None,
            operation_name=params.operation_name,
            middleware=[ObserverMiddleware(self._observer, context)],
        )
