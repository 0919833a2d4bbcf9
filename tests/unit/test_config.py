"""Tests for operator configuration loading."""

import pytest

from cache_operator.config import NAMESPACE_ENV, OperatorSettings
from cache_operator.exceptions import ConfigurationError


def test_defaults():
    """Test the default settings."""
    settings = OperatorSettings()

    assert settings.namespace == "default"
    assert settings.image == "redis:latest"
    assert settings.container_name == "redis"
    assert settings.status_update_attempts == 5
    assert settings.api_version == "cache.example.com/v1alpha1"


def test_save_and_load(tmp_path):
    """Test that settings survive a YAML save and load."""
    path = tmp_path / "operator.yaml"
    OperatorSettings(namespace="caches", image="redis:7.2", status_update_attempts=3).save(path)

    loaded = OperatorSettings.load(path)

    assert loaded.namespace == "caches"
    assert loaded.image == "redis:7.2"
    assert loaded.status_update_attempts == 3


def test_load_missing_file(tmp_path):
    """Test that a missing file is reported as a configuration error."""
    with pytest.raises(ConfigurationError) as exc_info:
        OperatorSettings.load(tmp_path / "missing.yaml")

    assert "not found" in exc_info.value.message


def test_load_empty_file_uses_defaults(tmp_path):
    """Test that an empty file yields the defaults."""
    path = tmp_path / "operator.yaml"
    path.write_text("")

    assert OperatorSettings.load(path) == OperatorSettings()


def test_load_non_mapping(tmp_path):
    """Test that a YAML list is rejected."""
    path = tmp_path / "operator.yaml"
    path.write_text("- namespace\n")

    with pytest.raises(ConfigurationError):
        OperatorSettings.load(path)


@pytest.mark.parametrize(
    "values",
    [
        {"namespace": ""},
        {"image": ""},
        {"container_name": "Redis_Main"},
        {"status_update_attempts": 0},
        {"watch_timeout_seconds": 0},
        {"retry_delay_seconds": -1},
    ],
)
def test_invalid_values(values):
    """Test that invalid values raise ConfigurationError with details."""
    with pytest.raises(ConfigurationError) as exc_info:
        OperatorSettings.create(**values)

    assert exc_info.value.details
    assert next(iter(values)) in exc_info.value.details


def test_namespace_from_environment(monkeypatch, tmp_path):
    """Test that WATCH_NAMESPACE overrides the file."""
    path = tmp_path / "operator.yaml"
    OperatorSettings(namespace="from-file").save(path)
    monkeypatch.setenv(NAMESPACE_ENV, "from-env")

    settings = OperatorSettings.from_env(path)

    assert settings.namespace == "from-env"


def test_empty_namespace_from_environment(monkeypatch):
    """Test that an empty WATCH_NAMESPACE cannot be resolved."""
    monkeypatch.setenv(NAMESPACE_ENV, "")

    with pytest.raises(ConfigurationError):
        OperatorSettings.from_env()
