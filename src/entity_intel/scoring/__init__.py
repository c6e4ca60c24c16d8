"""
Scoring module for Entity Intelligence.

Provides entity confidence scoring and the page-level salience score.
"""

from entity_intel.scoring.confidence import (
    ConfidenceScorer,
    calculate_confidence,
    position_score,
    source_bonus,
    type_bonus,
)
from entity_intel.scoring.salience import SalienceScorer

__all__ = [
    "ConfidenceScorer",
    "SalienceScorer",
    "calculate_confidence",
    "position_score",
    "source_bonus",
    "type_bonus",
]
