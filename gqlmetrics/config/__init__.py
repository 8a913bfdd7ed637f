"""Instrumentation settings.

    from gqlmetrics.config import get_settings

    if get_settings().instrumentation.resolver_enabled:
        ...
"""

from functools import lru_cache

from gqlmetrics.config.loader import get_environment, load_config
from gqlmetrics.config.settings import Settings, set_toml_config
from gqlmetrics.observability.logging import get_logger

logger = get_logger(__name__)


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """Settings from the TOML files and environment, built once per process."""
    set_toml_config(load_config())
    settings = Settings()
    logger.debug(
        "settings_loaded",
        environment=get_environment(),
        enabled=settings.enabled,
        signature_cache=settings.signature_cache.backend,
    )
    return settings


def reload_settings() -> Settings:
    """Drop the cached settings and read the configuration again."""
    get_settings.cache_clear()
    return get_settings()


__all__ = ["Settings", "get_settings", "reload_settings"]
