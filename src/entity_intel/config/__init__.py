"""
Configuration module for Entity Intelligence.

Provides Pydantic-based settings management with YAML file support
and environment variable overrides.
"""

from entity_intel.config.settings import (
    Settings,
    FetcherSettings,
    KnowledgeSourceSettings,
    LLMSettings,
    AnalysisSettings,
    LoggingSettings,
)
from entity_intel.config.loader import (
    load_config,
    get_settings,
    reset_settings,
    get_default_config_path,
)

__all__ = [
    "Settings",
    "FetcherSettings",
    "KnowledgeSourceSettings",
    "LLMSettings",
    "AnalysisSettings",
    "LoggingSettings",
    "load_config",
    "get_settings",
    "reset_settings",
    "get_default_config_path",
]
