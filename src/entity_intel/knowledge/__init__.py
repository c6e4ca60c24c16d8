"""
Knowledge module for Entity Intelligence.

Provides:
- Knowledge source clients (encyclopedia, knowledge base, knowledge graph,
  product ontology)
- Label similarity scoring
- Sequential, throttled candidate enrichment
"""

from entity_intel.knowledge.entity_types import (
    infer_type_from_description,
    is_contextual_type,
    is_person_or_organization,
    normalize_type,
    type_category,
)
from entity_intel.knowledge.matcher import KnowledgeMatcher
from entity_intel.knowledge.matching import (
    calculate_encyclopedia_match_score,
    calculate_kb_match_score,
    product_ontology_slugs,
    search_fallback_url,
    verify_against_extract,
)
from entity_intel.knowledge.models import EnrichedEntity, SourceMatch
from entity_intel.knowledge.rate_limiter import EnrichmentThrottle, ThrottleState
from entity_intel.knowledge.sources import (
    GoogleKnowledgeGraphSource,
    KnowledgeSource,
    ProductOntologySource,
    WikidataSource,
    WikipediaSource,
    build_sources,
)

__all__ = [
    # Matcher
    "KnowledgeMatcher",
    "EnrichedEntity",
    "SourceMatch",
    "EnrichmentThrottle",
    "ThrottleState",
    # Sources
    "KnowledgeSource",
    "WikipediaSource",
    "WikidataSource",
    "GoogleKnowledgeGraphSource",
    "ProductOntologySource",
    "build_sources",
    # Scoring
    "calculate_encyclopedia_match_score",
    "calculate_kb_match_score",
    "verify_against_extract",
    "product_ontology_slugs",
    "search_fallback_url",
    # Types
    "normalize_type",
    "type_category",
    "is_person_or_organization",
    "is_contextual_type",
    "infer_type_from_description",
]
