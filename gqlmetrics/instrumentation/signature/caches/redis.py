"""Redis-backed QuerySignatureCache.

Shares computed signatures between processes. Values are stored as JSON
under `{prefix}:{query_hash}:{operation_name}`.
"""

from pydantic import ValidationError
from redis import Redis

from gqlmetrics.instrumentation.signature.cache import QuerySignatureCache
from gqlmetrics.instrumentation.signature.models import QuerySignature, SignatureCacheKey
from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)


class RedisQuerySignatureCache(QuerySignatureCache):
    """Redis signature cache with optional per-entry TTL."""

    def __init__(
        self,
        redis: Redis,
        key_prefix: str = "gqlsig",
        ttl_seconds: int | None = None,
    ) -> None:
        """Initialize Redis signature cache.

        Args:
            redis: Redis client instance
            key_prefix: Prefix for Redis keys
            ttl_seconds: Entry expiry, None keeps entries until evicted by Redis
        """
        self._redis = redis
        self._key_prefix = key_prefix
        self._ttl_seconds = ttl_seconds

    def _make_key(self, key: SignatureCacheKey) -> str:
        """Build Redis key.

        GraphQL names can't contain ':' or be empty, so an anonymous
        operation is stored with an empty name segment.
        """
        query_hash, operation_name = key
        return f"{self._key_prefix}:{query_hash}:{operation_name or ''}"

    def get(self, key: SignatureCacheKey) -> QuerySignature | None:
        value = self._redis.get(self._make_key(key))
        if value is None:
            return None

        try:
            return QuerySignature.model_validate_json(value)
        except ValidationError:
            # Corrupted value, treat as a miss
            logger.warning("query_signature_cache_corrupted", key=self._make_key(key))
            return None

    def put(self, key: SignatureCacheKey, value: QuerySignature) -> None:
        # nx: concurrent writers store identical values, keep the first
        self._redis.set(
            self._make_key(key),
            value.model_dump_json(),
            ex=self._ttl_seconds,
            nx=True,
        )
