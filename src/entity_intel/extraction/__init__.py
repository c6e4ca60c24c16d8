"""
Extraction module for Entity Intelligence.

Provides:
- Content segmentation (title, meta description, headings, main body)
- Candidate entity extraction (delegated or local strategy)
"""

from entity_intel.extraction.content_segmenter import (
    ContentSegmenter,
    SegmentedContent,
)
from entity_intel.extraction.candidate_extractor import (
    CandidateExtractor,
    CandidateExtraction,
    CandidateStrategy,
    DelegatedStrategy,
    LocalStrategy,
    ScoredCandidate,
    classify_candidate,
    unique_candidates,
)

__all__ = [
    # Segmentation
    "ContentSegmenter",
    "SegmentedContent",
    # Candidates
    "CandidateExtractor",
    "CandidateExtraction",
    "CandidateStrategy",
    "DelegatedStrategy",
    "LocalStrategy",
    "ScoredCandidate",
    "classify_candidate",
    "unique_candidates",
]
