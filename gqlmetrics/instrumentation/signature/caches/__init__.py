"""QuerySignatureCache implementations."""

from gqlmetrics.instrumentation.signature.caches.inmemory import InMemoryQuerySignatureCache
from gqlmetrics.instrumentation.signature.caches.redis import RedisQuerySignatureCache

__all__ = ["InMemoryQuerySignatureCache", "RedisQuerySignatureCache"]
