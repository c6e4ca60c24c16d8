"""
Confidence scoring for enriched entities.

Combines the candidate's extraction rank with source agreement and
entity type into a 0-100 score, then re-sorts the entities by it.
"""

from dataclasses import replace

from entity_intel.knowledge.entity_types import (
    CATEGORY_ORGANIZATION,
    CATEGORY_PERSON,
    CATEGORY_PLACE,
    CATEGORY_PRODUCT,
    type_category,
)
from entity_intel.knowledge.models import EnrichedEntity
from entity_intel.utils.text import round_half_up

MAX_CONFIDENCE = 100
POSITION_WEIGHT = 70.0

WIKIPEDIA_BONUS = 15
WIKIDATA_BONUS = 10
KNOWLEDGE_GRAPH_BONUS = 15
PRODUCT_ONTOLOGY_BONUS = 5

MULTI_SOURCE_BONUS = 20  # three or more sources
DUAL_SOURCE_BONUS = 10  # exactly two sources

TYPE_BONUSES = {
    CATEGORY_PERSON: 10,
    CATEGORY_ORGANIZATION: 10,
    CATEGORY_PLACE: 8,
    CATEGORY_PRODUCT: 6,
}
OTHER_TYPE_BONUS = 3


def position_score(rank: int, total: int) -> float:
    """Linear decay from 70 at rank 0 towards 0 at the last rank."""
    if total <= 0:
        return 0.0
    return (total - rank) / total * POSITION_WEIGHT


def source_bonus(entity: EnrichedEntity) -> int:
    """Per-source and agreement bonuses."""
    bonus = 0
    if entity.wikipedia_url:
        bonus += WIKIPEDIA_BONUS
    if entity.wikidata_url:
        bonus += WIKIDATA_BONUS
    if entity.has_knowledge_graph_match:
        bonus += KNOWLEDGE_GRAPH_BONUS
    if entity.product_ontology_url:
        bonus += PRODUCT_ONTOLOGY_BONUS

    matched = entity.matched_sources
    if matched >= 3:
        bonus += MULTI_SOURCE_BONUS
    elif matched == 2:
        bonus += DUAL_SOURCE_BONUS
    return bonus


def type_bonus(entity_type: str | None) -> int:
    category = type_category(entity_type)
    if category is None:
        return 0
    return TYPE_BONUSES.get(category, OTHER_TYPE_BONUS)


def calculate_confidence(entity: EnrichedEntity, rank: int, total: int) -> int:
    """
    Confidence for the entity at ``rank`` of ``total``.

    Returns:
        Integer in [0, 100], rounded half-up before capping
    """
    raw = position_score(rank, total) + source_bonus(entity) + type_bonus(entity.type)
    return max(0, min(MAX_CONFIDENCE, round_half_up(raw)))


class ConfidenceScorer:
    """
    Scores entities and orders them by confidence.

    Example:
        >>> ranked = ConfidenceScorer().score(entities)
        >>> [e.confidence_score for e in ranked]
        [100, 87, 52]
    """

    def score(self, entities: list[EnrichedEntity]) -> list[EnrichedEntity]:
        """
        Score entities given in extraction order.

        Args:
            entities: Enriched entities, rank 0 first

        Returns:
            New entity instances sorted by confidence, descending; ties
            keep extraction order
        """
        total = len(entities)
        scored = [
            replace(entity, confidence_score=calculate_confidence(entity, rank, total))
            for rank, entity in enumerate(entities)
        ]
        return sorted(scored, key=lambda entity: entity.confidence_score, reverse=True)
