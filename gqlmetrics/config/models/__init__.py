"""Configuration model exports.

    from gqlmetrics.config.models import InstrumentationConfig, PrometheusConfig
"""

from gqlmetrics.config.models.instrumentation import (
    DEFAULT_TIMER_BUCKETS,
    CardinalityConfig,
    DataLoaderInstrumentationConfig,
    InstrumentationConfig,
    OutcomeTagConfig,
    PrometheusConfig,
    SignatureCacheConfig,
    TagCustomizersConfig,
)
from gqlmetrics.config.models.observability import LoggingConfig, ObservabilityConfig

__all__ = [
    "DEFAULT_TIMER_BUCKETS",
    "CardinalityConfig",
    "DataLoaderInstrumentationConfig",
    "InstrumentationConfig",
    "LoggingConfig",
    "ObservabilityConfig",
    "OutcomeTagConfig",
    "PrometheusConfig",
    "SignatureCacheConfig",
    "TagCustomizersConfig",
]
