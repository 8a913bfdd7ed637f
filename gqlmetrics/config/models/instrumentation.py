"""GraphQL instrumentation configuration models."""

from typing import Literal

from pydantic import BaseModel, Field

CacheBackendType = Literal["inmemory", "redis"]

# Upper bounds, in seconds, for resolver and query latency histograms
DEFAULT_TIMER_BUCKETS: tuple[float, ...] = (
    0.001,
    0.005,
    0.01,
    0.025,
    0.05,
    0.1,
    0.25,
    0.5,
    1.0,
    2.5,
    5.0,
    10.0,
)


class InstrumentationConfig(BaseModel):
    """Execution instrumentation switches."""

    enabled: bool = Field(default=True, description="Instrument query executions")
    resolver_enabled: bool = Field(
        default=True,
        description="Time individual field resolvers",
    )
    signature_enabled: bool = Field(
        default=True,
        description="Tag executions with the query signature hash",
    )
    complexity_enabled: bool = Field(
        default=True,
        description="Tag executions with the query complexity bucket",
    )


class DataLoaderInstrumentationConfig(BaseModel):
    """Batch loader instrumentation."""

    enabled: bool = Field(default=True, description="Time batch loader dispatches")


class OutcomeTagConfig(BaseModel):
    """Outcome tag customizer."""

    enabled: bool = Field(default=True, description="Add success/failure outcome tags")


class TagCustomizersConfig(BaseModel):
    """Tag customizer configuration."""

    outcome: OutcomeTagConfig = Field(
        default_factory=OutcomeTagConfig,
        description="Outcome tag customizer",
    )
    contextual_tags: dict[str, str] = Field(
        default_factory=dict,
        description="Static tags added to every metric",
    )


class CardinalityConfig(BaseModel):
    """Tag cardinality bounds."""

    limit: int = Field(
        default=100,
        gt=0,
        description="Distinct values admitted per limited tag",
    )


class SignatureCacheConfig(BaseModel):
    """Query signature cache backend."""

    backend: CacheBackendType = Field(default="inmemory", description="Cache backend")
    redis_url: str | None = Field(
        default=None,
        description="Redis connection URL (from env var)",
    )
    key_prefix: str = Field(default="gqlsig", description="Prefix for Redis keys")
    ttl_seconds: int | None = Field(
        default=86400,
        gt=0,
        description="Redis entry TTL in seconds, None keeps entries forever",
    )


class PrometheusConfig(BaseModel):
    """Prometheus sink configuration."""

    namespace: str = Field(default="", description="Prefix for every metric name")
    timer_buckets: tuple[float, ...] = Field(
        default=DEFAULT_TIMER_BUCKETS,
        description="Histogram buckets for timers (seconds)",
    )
