"""
Configuration management for batch archiving runs.
YAML file with environment overrides, falling back to built-in defaults.
"""

import copy
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from colored_logger import get_colored_logger, resolve_level
from io_ops.archive_creators import DUPLICATE_POLICIES
from io_ops.errors import ConfigError

logger = get_colored_logger(__name__)

ENV_PREFIX = "ZIPBATCH_"
CONFIG_FILE_NAMES = ["zip-batcher.yml", ".zip-batcher.yml"]

DEFAULT_CONFIG = {
    "batch": {
        "max_files_per_archive": 1000,
        "archive_subdirectory": "zip",
        "manifest_name": "results.csv",
        "duplicate_names": "error",
    },
    "logging": {
        "level": "INFO",
    },
}


@dataclass(frozen=True)
class BatchSettings:
    """Validated settings for one run."""

    max_files_per_archive: int = 1000
    archive_subdirectory: str = "zip"
    manifest_name: str = "results.csv"
    duplicate_names: str = "error"
    log_level: str = "INFO"

    @classmethod
    def from_dict(cls, config: Dict[str, Any]) -> "BatchSettings":
        """
        Build settings from a merged configuration dictionary.

        Raises:
            ConfigError: If a value has the wrong type or is out of range
        """
        batch = config.get("batch", {}) or {}
        logging_section = config.get("logging", {}) or {}

        max_files = batch.get("max_files_per_archive", cls.max_files_per_archive)
        if isinstance(max_files, bool) or not isinstance(max_files, int) or max_files <= 0:
            raise ConfigError(
                f"batch.max_files_per_archive must be a positive integer, got {max_files!r}"
            )

        duplicate_names = str(batch.get("duplicate_names", cls.duplicate_names))
        if duplicate_names not in DUPLICATE_POLICIES:
            raise ConfigError(
                f"batch.duplicate_names must be one of {', '.join(DUPLICATE_POLICIES)},"
                f" got {duplicate_names!r}"
            )

        for key in ("archive_subdirectory", "manifest_name"):
            value = batch.get(key, getattr(cls, key))
            if not isinstance(value, str) or not value or "/" in value or "\\" in value:
                raise ConfigError(f"batch.{key} must be a plain file name, got {value!r}")

        log_level = str(logging_section.get("level", cls.log_level))
        try:
            resolve_level(log_level)
        except ValueError as e:
            raise ConfigError(f"logging.level: {e}") from e

        return cls(
            max_files_per_archive=max_files,
            archive_subdirectory=batch.get("archive_subdirectory", cls.archive_subdirectory),
            manifest_name=batch.get("manifest_name", cls.manifest_name),
            duplicate_names=duplicate_names,
            log_level=log_level.upper(),
        )


def _find_config_file(config_path: Optional[str]) -> Optional[Path]:
    if config_path:
        config_file = Path(config_path).expanduser()
        if not config_file.is_file():
            raise ConfigError(f"Configuration file not found: {config_path}")
        return config_file

    for name in CONFIG_FILE_NAMES:
        candidate = Path.cwd() / name
        if candidate.is_file():
            return candidate
    return None


def load_config(config_path: Optional[str] = None) -> Dict[str, Any]:
    """
    Load configuration from YAML with fallback to defaults.

    Args:
        config_path: Optional explicit config file; otherwise the current
            directory is searched for ``zip-batcher.yml``

    Returns:
        Configuration dictionary with environment overrides applied

    Raises:
        ConfigError: If an explicit file is missing or any file is unreadable
    """
    config = copy.deepcopy(DEFAULT_CONFIG)

    config_file = _find_config_file(config_path)
    if config_file is not None:
        try:
            with open(config_file, "r", encoding="utf-8") as f:
                user_config = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as e:
            raise ConfigError(f"Failed to load config from {config_file}: {e}") from e

        if not isinstance(user_config, dict):
            raise ConfigError(f"Config file {config_file} must contain a mapping")

        config = _deep_merge(config, user_config)
        logger.debug("Configuration loaded from %s", config_file)

    return _apply_env_overrides(config)


def load_settings(config_path: Optional[str] = None) -> BatchSettings:
    return BatchSettings.from_dict(load_config(config_path))


def _deep_merge(base: Dict[str, Any], override: Dict[str, Any]) -> Dict[str, Any]:
    result = base.copy()

    for key, value in override.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = _deep_merge(result[key], value)
        else:
            result[key] = value

    return result


def _apply_env_overrides(config: Dict[str, Any]) -> Dict[str, Any]:
    """
    Apply environment variable overrides to config.

    Environment variables follow pattern: ZIPBATCH_<SECTION>_<KEY>=value
    Example: ZIPBATCH_BATCH_MAX_FILES_PER_ARCHIVE=500

    Only the first underscore after the section splits; the rest of the name
    is the key, since keys themselves contain underscores.
    """
    for env_key, env_value in os.environ.items():
        if not env_key.startswith(ENV_PREFIX):
            continue

        section, _, key = env_key[len(ENV_PREFIX) :].lower().partition("_")
        if not section or not key:
            continue

        config.setdefault(section, {})
        if not isinstance(config[section], dict):
            continue
        config[section][key] = _convert_env_value(env_value)

    return config


def _convert_env_value(value: str) -> Any:
    if value.lower() in ("true", "yes", "on"):
        return True
    elif value.lower() in ("false", "no", "off"):
        return False

    try:
        return int(value)
    except ValueError:
        pass

    return value
