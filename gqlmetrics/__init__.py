"""gqlmetrics: latency and error metrics for GraphQL executions."""

__version__ = "0.1.0"
