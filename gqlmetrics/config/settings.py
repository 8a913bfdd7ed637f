"""Root settings model for the GraphQL instrumentation."""

from typing import Any

from pydantic import Field
from pydantic_settings import (
    BaseSettings,
    InitSettingsSource,
    PydanticBaseSettingsSource,
    SettingsConfigDict,
)

from gqlmetrics.config.models.instrumentation import (
    CardinalityConfig,
    DataLoaderInstrumentationConfig,
    InstrumentationConfig,
    PrometheusConfig,
    SignatureCacheConfig,
    TagCustomizersConfig,
)
from gqlmetrics.config.models.observability import ObservabilityConfig

# Merged TOML tables, installed by get_settings() before Settings is built
_toml_config: dict[str, Any] = {}


def set_toml_config(config: dict[str, Any]) -> None:
    """Install the TOML values that back every Settings built afterwards."""
    global _toml_config
    _toml_config = dict(config)


class TomlConfigSettingsSource(InitSettingsSource):
    """Serves the installed TOML tables as the lowest priority source."""

    def __init__(self, settings_cls: type[BaseSettings]) -> None:
        super().__init__(settings_cls, dict(_toml_config))

    def __repr__(self) -> str:
        return f"TomlConfigSettingsSource(sections={sorted(_toml_config)!r})"


class Settings(BaseSettings):
    """Instrumentation settings.

    Values resolve from constructor arguments, then GQLMETRICS_* environment
    variables (nested keys joined by "__"), then the TOML files, then the
    defaults below.
    """

    model_config = SettingsConfigDict(
        env_prefix="GQLMETRICS_",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore",
    )

    enabled: bool = Field(default=True, description="Master switch for GraphQL metrics")

    instrumentation: InstrumentationConfig = Field(default_factory=InstrumentationConfig)
    data_loader_instrumentation: DataLoaderInstrumentationConfig = Field(
        default_factory=DataLoaderInstrumentationConfig
    )
    tag_customizers: TagCustomizersConfig = Field(default_factory=TagCustomizersConfig)
    cardinality: CardinalityConfig = Field(default_factory=CardinalityConfig)
    signature_cache: SignatureCacheConfig = Field(default_factory=SignatureCacheConfig)
    prometheus: PrometheusConfig = Field(default_factory=PrometheusConfig)
    observability: ObservabilityConfig = Field(default_factory=ObservabilityConfig)

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls: type[BaseSettings],
        init_settings: PydanticBaseSettingsSource,
        env_settings: PydanticBaseSettingsSource,
        dotenv_settings: PydanticBaseSettingsSource,  # noqa: ARG003
        file_secret_settings: PydanticBaseSettingsSource,  # noqa: ARG003
    ) -> tuple[PydanticBaseSettingsSource, ...]:
        return init_settings, env_settings, TomlConfigSettingsSource(settings_cls)
