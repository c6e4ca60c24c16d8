"""
Entity Intelligence - knowledge-graph entity recognition for web pages.

This package turns page content into ranked, knowledge-graph-linked
entities, a JSON-LD document, a single main topic and a topical
salience score with actionable advice.
"""

from entity_intel.config import Settings, load_config
from entity_intel.utils.logging import setup_logging, get_logger
from entity_intel.core.exceptions import EntityIntelError
from entity_intel.pipeline import AnalysisPipeline, PipelineResult

__version__ = "0.1.0"
__author__ = "Entity Intel Team"

__all__ = [
    "Settings",
    "load_config",
    "setup_logging",
    "get_logger",
    "EntityIntelError",
    "AnalysisPipeline",
    "PipelineResult",
]
