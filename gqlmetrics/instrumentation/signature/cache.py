"""QuerySignatureCache abstract interface."""

from abc import ABC, abstractmethod

from gqlmetrics.instrumentation.signature.models import QuerySignature, SignatureCacheKey


class QuerySignatureCache(ABC):
    """Key-value store memoizing query signatures.

    Implementations must tolerate concurrent get/put from many executions.
    Eviction and expiry are left to the implementation.
    """

    @abstractmethod
    def get(self, key: SignatureCacheKey) -> QuerySignature | None:
        """Get a stored signature, None on miss."""
        pass

    @abstractmethod
    def put(self, key: SignatureCacheKey, value: QuerySignature) -> None:
        """Store a signature."""
        pass
