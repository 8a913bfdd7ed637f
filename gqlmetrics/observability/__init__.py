"""Observability: structured logging for the instrumentation itself.

Metrics emitted about GraphQL executions live in gqlmetrics.instrumentation.
"""
