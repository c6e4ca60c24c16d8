"""
Pipeline module for Entity Intelligence.

Provides the end-to-end analysis pipeline and its result record.
"""

from entity_intel.pipeline.models import PipelineResult
from entity_intel.pipeline.pipeline import AnalysisPipeline

__all__ = [
    "AnalysisPipeline",
    "PipelineResult",
]
