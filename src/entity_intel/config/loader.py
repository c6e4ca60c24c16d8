"""
Configuration loading.

Settings are layered, later layers winning:

1. Defaults declared on the settings models
2. A YAML file (given explicitly, or found by get_default_config_path)
3. Environment variables named ENTITY_INTEL__{SECTION}__{KEY}

Example:
    ENTITY_INTEL__KNOWLEDGE__RATE_LIMIT_DELAY_SECONDS=0.5
    ENTITY_INTEL__ANALYSIS__DEFAULT_STRATEGY=title

Environment values stay strings; pydantic coerces them to the field
types ("7" to 7, "false" to False) during validation.
"""

import os
from pathlib import Path
from typing import Any

import yaml

from entity_intel.config.settings import Settings
from entity_intel.core.exceptions import ConfigurationError

ENV_PREFIX = "ENTITY_INTEL"
CONFIG_FILE_NAME = "entity-intel.yaml"

_settings_instance: Settings | None = None


def _merge_sections(base: dict[str, Any], override: dict[str, Any]) -> dict[str, Any]:
    """Merge two section -> values mappings, override winning per key."""
    merged = {section: dict(values) for section, values in base.items()}
    for section, values in override.items():
        merged.setdefault(section, {}).update(values)
    return merged


def _read_yaml_sections(path: Path) -> dict[str, Any]:
    """
    Read a YAML configuration file into section mappings.

    Raises:
        FileNotFoundError: The file does not exist
        ConfigurationError: Invalid YAML, or a document or section that
            is not a mapping
    """
    if not path.is_file():
        raise FileNotFoundError(f"Configuration file not found: {path}")

    try:
        document = yaml.safe_load(path.read_text(encoding="utf-8"))
    except yaml.YAMLError as e:
        raise ConfigurationError(
            f"Invalid YAML in configuration file: {e}",
            details={"path": str(path)},
        ) from e

    if document is None:
        return {}
    if not isinstance(document, dict):
        raise ConfigurationError(
            f"Configuration file must contain a mapping, got: {type(document).__name__}",
            details={"path": str(path)},
        )

    for section, values in document.items():
        if not isinstance(values, dict):
            raise ConfigurationError(
                f"Section '{section}' must be a mapping",
                details={"path": str(path)},
            )
    return document


def _env_sections(prefix: str) -> dict[str, dict[str, str]]:
    """Collect {PREFIX}__{SECTION}__{KEY} variables for known sections."""
    marker = f"{prefix}__"
    sections: dict[str, dict[str, str]] = {}

    for name, value in os.environ.items():
        if not name.startswith(marker):
            continue
        section, sep, key = name[len(marker):].lower().partition("__")
        if not sep or not key:
            continue
        if section not in Settings.model_fields:
            raise ConfigurationError(
                f"Unknown configuration section in environment variable {name}",
                details={"known_sections": sorted(Settings.model_fields)},
            )
        sections.setdefault(section, {})[key] = value

    return sections


def load_config(
    config_path: Path | str | None = None,
    env_prefix: str = ENV_PREFIX,
) -> Settings:
    """
    Load settings from an optional YAML file plus environment overrides.

    Args:
        config_path: YAML file to read; None means defaults and environment only
        env_prefix: Prefix of overriding environment variables

    Raises:
        FileNotFoundError: config_path is given but does not exist
        ConfigurationError: Malformed file or unknown environment section
        pydantic.ValidationError: A value fails validation
    """
    sections: dict[str, Any] = {}
    if config_path is not None:
        sections = _read_yaml_sections(Path(config_path))

    sections = _merge_sections(sections, _env_sections(env_prefix))
    return Settings.model_validate(sections)


def get_settings(
    config_path: Path | str | None = None,
    reload: bool = False,
) -> Settings:
    """
    Get the process-wide Settings, loading them on first use.

    config_path only matters on the first load or when reload is set.
    """
    global _settings_instance

    if _settings_instance is None or reload:
        _settings_instance = load_config(config_path)

    return _settings_instance


def reset_settings() -> None:
    """Forget the cached settings so the next get_settings reloads."""
    global _settings_instance
    _settings_instance = None


def get_default_config_path() -> Path | None:
    """
    Find a configuration file in the usual places.

    Looks for entity-intel.yaml in the working directory, then in
    ~/.config/entity-intel/.
    """
    for path in (
        Path.cwd() / CONFIG_FILE_NAME,
        Path.home() / ".config" / "entity-intel" / CONFIG_FILE_NAME,
    ):
        if path.is_file():
            return path
    return None
