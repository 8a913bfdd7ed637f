"""In-memory implementation of QuerySignatureCache."""

from threading import Lock

from gqlmetrics.instrumentation.signature.cache import QuerySignatureCache
from gqlmetrics.instrumentation.signature.models import QuerySignature, SignatureCacheKey


class InMemoryQuerySignatureCache(QuerySignatureCache):
    """Unbounded process-local signature cache.

    Entries are never evicted; the number of distinct queries a service
    receives is expected to stay small. Use the Redis cache otherwise.
    """

    def __init__(self) -> None:
        self._entries: dict[SignatureCacheKey, QuerySignature] = {}
        self._lock = Lock()

    def __len__(self) -> int:
        return len(self._entries)

    def get(self, key: SignatureCacheKey) -> QuerySignature | None:
        return self._entries.get(key)

    def put(self, key: SignatureCacheKey, value: QuerySignature) -> None:
        # First writer wins; racing writers computed the same value
        with self._lock:
            self._entries.setdefault(key, value)
