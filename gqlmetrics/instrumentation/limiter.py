"""Cardinality limiting for user-controlled tag values.

Operation names and signature hashes come from clients, so each tag that
carries them is bounded to the first N distinct values seen by the process.
"""

from threading import Lock

from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)

# Value reported for anything past the limit
OVERFLOW_VALUE = "--others--"

DEFAULT_LIMIT = 100


class CardinalityLimiter:
    """Admits the first `limit` distinct values; later new values collapse to OVERFLOW_VALUE."""

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        if limit <= 0:
            raise ValueError(f"limit must be positive, got {limit}")
        self._limit = limit
        self._admitted: set[str] = set()
        self._lock = Lock()

    @property
    def capacity(self) -> int:
        return self._limit

    def __len__(self) -> int:
        return len(self._admitted)

    def __call__(self, value: str) -> str:
        return self.limit(value)

    def limit(self, value: str) -> str:
        """Return value unchanged if admitted, otherwise OVERFLOW_VALUE."""
        # Set membership reads are safe without the lock; admission is not
        if value in self._admitted:
            return value

        with self._lock:
            if value in self._admitted:
                return value
            if len(self._admitted) < self._limit:
                self._admitted.add(value)
                return value

        logger.debug("cardinality_limit_reached", limit=self._limit)
        return OVERFLOW_VALUE


class CardinalityLimiterProvider:
    """Creates independent limiters sharing one configured limit."""

    def __init__(self, limit: int = DEFAULT_LIMIT) -> None:
        self._limit = limit

    def limiter(self) -> CardinalityLimiter:
        return CardinalityLimiter(self._limit)
