"""
Pipeline output record.
"""

from dataclasses import dataclass, field
from typing import Any

from entity_intel.knowledge.models import EnrichedEntity
from entity_intel.topics.recommendations import Recommendation

PASTED_CONTENT_SOURCE = "pasted content"


@dataclass
class PipelineResult:
    """
    Everything one analysis run produces.

    A plain record with no live handles, so it can be cached or
    serialized as is. Processing time is excluded from equality, so two
    runs over identical input compare equal.

    Attributes:
        url: Source URL, None for pasted content
        title: Page title (or its stand-in for pasted content)
        meta_description: Meta description of the page
        headings: h1-h3 texts in document order
        entities: Enriched entities sorted by confidence
        main_topic: Selected main topic
        main_topic_confidence: Confidence of the matching entity, 0 if none
        main_topic_strategy: Strategy that was requested
        main_topic_rule: Rule that produced the main topic
        irrelevant_entities: Weakly connected entity names
        salience_tips: Advice for strengthening the main topic
        topical_salience: Page-level salience score (0-100)
        recommendations: Content recommendations
        json_ld: Structured-data document
        extraction_method: Candidate strategy that produced the candidates
        candidate_groups: Local candidate buckets (empty for delegated runs)
        processing_time_seconds: Wall-clock time of the run
    """

    url: str | None
    title: str
    entities: list[EnrichedEntity]
    main_topic: str | None
    main_topic_confidence: int
    main_topic_strategy: str
    main_topic_rule: str
    irrelevant_entities: list[str]
    salience_tips: list[str]
    topical_salience: int
    recommendations: list[Recommendation]
    json_ld: dict[str, Any]
    extraction_method: str
    meta_description: str = ""
    headings: tuple[str, ...] = ()
    candidate_groups: dict[str, list[str]] = field(default_factory=dict)
    processing_time_seconds: float = field(default=0.0, compare=False)

    @property
    def source(self) -> str:
        """The URL, or "pasted content" for pasted runs."""
        return self.url if self.url is not None else PASTED_CONTENT_SOURCE

    @property
    def entities_count(self) -> int:
        return len(self.entities)

    @property
    def enriched_count(self) -> int:
        """Entities with at least one genuine knowledge-source link."""
        return sum(1 for entity in self.entities if entity.is_enriched)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a JSON-serializable dictionary."""
        return {
            "source": self.source,
            "url": self.url,
            "title": self.title,
            "meta_description": self.meta_description,
            "headings": list(self.headings),
            "entities": [entity.to_dict() for entity in self.entities],
            "main_topic": self.main_topic,
            "main_topic_confidence": self.main_topic_confidence,
            "main_topic_strategy": self.main_topic_strategy,
            "main_topic_rule": self.main_topic_rule,
            "irrelevant_entities": list(self.irrelevant_entities),
            "salience_tips": list(self.salience_tips),
            "topical_salience": self.topical_salience,
            "recommendations": [r.to_dict() for r in self.recommendations],
            "json_ld": self.json_ld,
            "extraction_method": self.extraction_method,
            "candidate_groups": {k: list(v) for k, v in self.candidate_groups.items()},
            "entities_count": self.entities_count,
            "enriched_count": self.enriched_count,
            "processing_time_seconds": round(self.processing_time_seconds, 3),
        }
