"""Pytest configuration for Lifecycle Toolkit."""

import os

import pytest


def pytest_configure(config):
    """Configure pytest with custom settings."""
    # Add custom markers
    config.addinivalue_line("markers", "bulk: mark test as a bulk operation test")


@pytest.fixture(autouse=True)
def isolated_config(monkeypatch):
    """Keep the global configuration independent of the host environment."""
    from lifecycle_toolkit import config as config_module

    for name in list(os.environ):
        if name.startswith("LIFECYCLE_"):
            monkeypatch.delenv(name, raising=False)
    monkeypatch.setattr(config_module, "_config", None)
    yield
