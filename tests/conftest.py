"""Shared test fixtures for envvibe tests."""

import pytest

from envvibe.cli.app import get_settings
from envvibe.core.models import PortRange


@pytest.fixture
def default_range():
    return PortRange()


@pytest.fixture
def always_available(monkeypatch):
    """Treat every port as bindable so results do not depend on the host."""
    monkeypatch.setattr("envvibe.ports.allocator.is_port_available", lambda port: True)


@pytest.fixture
def settings_env(monkeypatch, tmp_path):
    """Point settings at a temporary registry and reset the cached settings."""
    registry = tmp_path / "registry" / "ports.json"
    monkeypatch.setenv("ENVVIBE_REGISTRY_PATH", str(registry))
    get_settings.cache_clear()
    yield registry
    get_settings.cache_clear()
