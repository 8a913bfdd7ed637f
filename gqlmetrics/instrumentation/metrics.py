"""Names of the metrics and tags emitted for GraphQL executions."""

from enum import Enum


class GqlMetric(str, Enum):
    """Metrics emitted by the instrumentation."""

    # Timer: elapsed time of a whole query execution
    QUERY = "gql.query"
    # Counter: GraphQL errors seen in execution results
    ERROR = "gql.error"
    # Timer: elapsed time of each instrumented field resolver invocation
    RESOLVER = "gql.resolver"
    # Timer: elapsed time of one batch loader dispatch
    DATA_LOADER = "gql.dataLoader"
    # Timer: latency of internal helper methods such as signature lookup
    METHOD_LATENCY = "gql.method.latency"


class GqlTag(str, Enum):
    """Tags applied to the metrics in GqlMetric."""

    # QUERY, MUTATION or SUBSCRIPTION
    OPERATION = "gql.operation"
    # Operation name, "anonymous" when the document doesn't name one
    OPERATION_NAME = "gql.operation.name"
    # Sanitized error path
    PATH = "gql.path"
    ERROR_CODE = "gql.errorCode"
    ERROR_DETAIL = "gql.errorDetail"
    # "<ParentType>.<field>"
    FIELD = "gql.field"
    LOADER_BATCH_SIZE = "gql.loaderBatchSize"
    LOADER_NAME = "gql.loaderName"
    OUTCOME = "outcome"
    QUERY_COMPLEXITY = "gql.query.complexity"
    # Absent ("none") when the query failed validation
    QUERY_SIG_HASH = "gql.query.sig.hash"
    METHOD = "method"


class Outcome(str, Enum):
    """Values of the outcome tag."""

    SUCCESS = "success"
    FAILURE = "failure"


TAG_VALUE_UNKNOWN = "unknown"
TAG_VALUE_NONE = "none"
TAG_VALUE_ANONYMOUS = "anonymous"
