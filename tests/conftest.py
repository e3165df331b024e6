"""Pytest configuration and fixtures for apnea cluster tests."""

import pytest

from apnea_clusters.analysis.types import (
    ClusterParams,
    FalseNegativeOptions,
    FinalizeThresholds,
)


def pytest_configure(config):
    """Register custom test markers."""
    config.addinivalue_line(
        "markers", "unit: Unit tests that do not require external dependencies"
    )
    config.addinivalue_line(
        "markers", "business_logic: Tests for core business logic and algorithms"
    )
    config.addinivalue_line(
        "markers", "integration: Integration tests combining multiple components"
    )


def pytest_collection_modifyitems(items):
    """Apply unit or integration marker based on the test directory."""
    for item in items:
        path = str(item.fspath)
        if "/unit/" in path:
            item.add_marker(pytest.mark.unit)
        elif "/integration/" in path:
            item.add_marker(pytest.mark.integration)


@pytest.fixture
def default_params():
    """Default clustering parameters (bridged strategy)."""
    return ClusterParams()


@pytest.fixture
def permissive_thresholds():
    """Finalizer thresholds that keep every cluster."""
    return FinalizeThresholds(min_count=1, min_total_sec=0, max_cluster_sec=10**9)


@pytest.fixture
def fn_options():
    """Balanced false-negative options."""
    return FalseNegativeOptions()


# =============================================================================
# Config Isolation
# =============================================================================


@pytest.fixture
def config_path(tmp_path, monkeypatch):
    """Point the config loader at a temporary config.toml."""
    path = tmp_path / "config.toml"
    monkeypatch.setattr("apnea_clusters.config.get_config_path", lambda: path)
    return path
