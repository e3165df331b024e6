"""
Configuration management for apnea cluster analysis.

Settings are read from ``~/.apnea_clusters/config.toml``. Every table is
optional; missing keys keep their defaults::

    [clustering]            # ClusterParams fields
    algorithm = "kmeans"
    k = 4

    [finalize]              # FinalizeThresholds fields
    min_count = 3

    [false_negatives]
    preset = "strict"

    [logging]
    enabled = true
    level = "INFO"
    max_size_mb = 10
    backup_count = 5
"""

import logging
import os
import tomllib

from pathlib import Path
from typing import Any

import tomli_w

from pydantic import BaseModel, ConfigDict, Field

from apnea_clusters.analysis.presets import DEFAULT_PRESET, get_false_negative_options
from apnea_clusters.analysis.types import ClusterParams, FinalizeThresholds
from apnea_clusters.constants import (
    DEFAULT_CONFIG_DIR,
    DEFAULT_CONFIG_FILE,
    DEFAULT_LOG_BACKUP_COUNT,
)

logger = logging.getLogger(__name__)

# ============================================================================
# Settings Models
# ============================================================================


class FalseNegativeSettings(BaseModel):
    """[false_negatives] table."""

    model_config = ConfigDict(frozen=True)

    preset: str = Field(default=DEFAULT_PRESET, description="Detection preset name")


class LoggingSettings(BaseModel):
    """[logging] table controlling the rotating log file."""

    model_config = ConfigDict(frozen=True)

    enabled: bool = Field(default=True, description="Write the rotating log file")
    level: str = Field(default="DEBUG", description="File handler level")
    max_size_mb: float | None = Field(
        default=None, gt=0, description="Rotate after this size (MB)"
    )
    backup_count: int = Field(
        default=DEFAULT_LOG_BACKUP_COUNT, ge=0, description="Rotated files kept"
    )


class AnalysisSettings(BaseModel):
    """Typed view of the whole config file."""

    model_config = ConfigDict(frozen=True)

    clustering: ClusterParams = Field(default_factory=ClusterParams)
    finalize: FinalizeThresholds = Field(default_factory=FinalizeThresholds)
    false_negatives: FalseNegativeSettings = Field(
        default_factory=FalseNegativeSettings
    )
    logging: LoggingSettings = Field(default_factory=LoggingSettings)


SETTINGS_TABLES = tuple(AnalysisSettings.model_fields)

# ============================================================================
# Raw TOML Access
# ============================================================================


def get_config_path() -> Path:
    """
    Get the path to the configuration file.

    Returns:
        Path to ~/.apnea_clusters/config.toml
    """
    return DEFAULT_CONFIG_DIR / DEFAULT_CONFIG_FILE


def load_config() -> dict[str, Any]:
    """
    Load the raw configuration document.

    Returns:
        Parsed TOML, or an empty dict when the file is missing or unreadable
    """
    config_path = get_config_path()
    if not config_path.exists():
        return {}

    try:
        with open(config_path, "rb") as f:
            return tomllib.load(f)
    except (OSError, tomllib.TOMLDecodeError) as e:
        logger.warning(f"Failed to load config from {config_path}: {e}")
        return {}


def save_config(config: dict[str, Any]) -> None:
    """
    Write the raw configuration document atomically.

    The document is written to a sibling temp file and moved into place,
    so readers never see a partial file.

    Args:
        config: Configuration dictionary to save

    Raises:
        PermissionError: If the config directory or file is not writable
    """
    config_path = get_config_path()
    config_path.parent.mkdir(parents=True, exist_ok=True)
    temp_path = config_path.with_suffix(".toml.tmp")

    try:
        temp_path.write_text(tomli_w.dumps(config), encoding="utf-8")
        os.replace(temp_path, config_path)
    finally:
        temp_path.unlink(missing_ok=True)


# ============================================================================
# Typed Settings
# ============================================================================


def load_settings() -> AnalysisSettings:
    """
    Load and validate every known table of the config file.

    Tables that are not TOML tables are skipped with a warning; unknown
    tables are ignored.

    Raises:
        pydantic.ValidationError: If a configured value is out of range
    """
    tables: dict[str, dict[str, Any]] = {}
    for name, table in load_config().items():
        if name not in SETTINGS_TABLES:
            continue
        if not isinstance(table, dict):
            logger.warning(f"Ignoring [{name}] in config: expected a table")
            continue
        tables[name] = table

    return AnalysisSettings.model_validate(tables)


def get_cluster_params() -> ClusterParams:
    """Clustering parameters from [clustering]."""
    return load_settings().clustering


def get_finalize_thresholds() -> FinalizeThresholds:
    """Finalizer thresholds from [finalize]."""
    return load_settings().finalize


def get_logging_settings() -> LoggingSettings:
    """Log file settings from [logging]."""
    return load_settings().logging


def get_false_negative_preset() -> str:
    """Configured false-negative preset name (balanced when unset)."""
    return load_settings().false_negatives.preset


def set_false_negative_preset(name: str) -> None:
    """
    Persist the false-negative preset in config.

    Args:
        name: Preset name ("strict", "balanced" or "lenient")

    Raises:
        InvalidParameterError: If the preset name is not recognized
    """
    get_false_negative_options(name)

    config = load_config()
    config.setdefault("false_negatives", {})["preset"] = name
    save_config(config)
