"""
Topics module for Entity Intelligence.

Provides:
- Main-topic resolution over four strategies
- Synonym table for phrase expansion
- URL-sourced candidate expansion
- Irrelevance detection, salience tips and recommendations
"""

from entity_intel.topics.expansion import expand_candidates
from entity_intel.topics.recommendations import Recommendation, RecommendationService
from entity_intel.topics.resolver import (
    STRATEGIES,
    TopicResolution,
    TopicResolver,
)
from entity_intel.topics.salience_tips import (
    find_entity,
    find_irrelevant_entities,
    generate_salience_tips,
    is_irrelevant,
)
from entity_intel.topics.synonyms import DEFAULT_SYNONYM_GROUPS, SynonymTable

__all__ = [
    # Resolution
    "TopicResolver",
    "TopicResolution",
    "STRATEGIES",
    "SynonymTable",
    "DEFAULT_SYNONYM_GROUPS",
    "expand_candidates",
    # Analysis
    "is_irrelevant",
    "find_irrelevant_entities",
    "find_entity",
    "generate_salience_tips",
    "Recommendation",
    "RecommendationService",
]
