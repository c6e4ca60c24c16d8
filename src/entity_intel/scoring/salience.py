"""Page-level topical salience score."""

from entity_intel.knowledge.models import EnrichedEntity
from entity_intel.utils.text import round_half_up

AVERAGE_WEIGHT = 0.5
HIGH_CONFIDENCE_WEIGHT = 0.35
KNOWLEDGE_GRAPH_WEIGHT = 0.15
HIGH_CONFIDENCE_THRESHOLD = 85


class SalienceScorer:
    """
    Scores how strongly a page's entities establish its topic.

    Mean confidence, the share of high-confidence entities and the share
    of genuine Knowledge Graph matches, weighted 50/35/15.
    """

    def score(self, entities: list[EnrichedEntity]) -> int:
        if not entities:
            return 0

        total = len(entities)
        average = sum(entity.confidence_score for entity in entities) / total
        high_ratio = sum(
            1 for entity in entities
            if entity.confidence_score >= HIGH_CONFIDENCE_THRESHOLD
        ) / total
        kg_ratio = sum(1 for entity in entities if entity.has_knowledge_graph_match) / total

        return round_half_up(
            average * AVERAGE_WEIGHT
            + high_ratio * 100 * HIGH_CONFIDENCE_WEIGHT
            + kg_ratio * 100 * KNOWLEDGE_GRAPH_WEIGHT
        )
