"""Shared test fixtures for the gqlmetrics test suite."""

import os
from collections.abc import Callable, Generator
from pathlib import Path

import pytest
from graphql import GraphQLNonNull, GraphQLObjectType

from gqlmetrics.config import get_settings
from gqlmetrics.config.settings import set_toml_config
from gqlmetrics.instrumentation.context import ExecutionParameters, FieldFetchParameters
from gqlmetrics.instrumentation.sinks.inmemory import InMemoryMetricsSink


@pytest.fixture(autouse=True)
def isolated_settings(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Start every test from code defaults.

    GQLMETRICS_* variables from the calling shell are hidden, and the cached
    Settings and installed TOML tables are reset on both sides of the test.
    """
    for name in list(os.environ):
        if name.startswith("GQLMETRICS_"):
            monkeypatch.delenv(name)
    get_settings.cache_clear()
    set_toml_config({})
    yield
    get_settings.cache_clear()
    set_toml_config({})


@pytest.fixture
def mock_toml_files(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> Callable[[dict[str, str]], Path]:
    """Write TOML files into a fresh config directory and point the loader at it.

        mock_toml_files({
            "default.toml": "enabled = true",
            "development.toml": "[cardinality]\\nlimit = 5",
        })

    Returns the directory, so a test can add or rewrite files later.
    """
    config_dir = tmp_path / "config"
    config_dir.mkdir()
    monkeypatch.setenv("GQLMETRICS_CONFIG_DIR", str(config_dir))

    def _write(files: dict[str, str]) -> Path:
        for filename, content in files.items():
            (config_dir / filename).write_text(content)
        return config_dir

    return _write


@pytest.fixture
def sink() -> InMemoryMetricsSink:
    return InMemoryMetricsSink()


@pytest.fixture
def execution_params() -> ExecutionParameters:
    return ExecutionParameters(
        query="query ShowProfile { profile { name } }",
        operation_name="ShowProfile",
    )


@pytest.fixture
def profile_type() -> GraphQLObjectType:
    return GraphQLObjectType("Profile", {})


@pytest.fixture
def field_params(profile_type: GraphQLObjectType) -> FieldFetchParameters:
    return FieldFetchParameters(parent_type=GraphQLNonNull(profile_type), field_name="name")
