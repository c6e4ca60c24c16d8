"""
Entity records produced by the knowledge matcher.
"""

from dataclasses import asdict, dataclass

# Marker of a genuine Knowledge Graph entity link (vs. the search fallback)
KG_MATCH_MARKER = "kgmid="


@dataclass(frozen=True)
class SourceMatch:
    """Best accepted match from one knowledge source."""

    url: str
    label: str
    score: float
    description: str = ""
    entity_type: str | None = None


@dataclass(frozen=True)
class EnrichedEntity:
    """
    A candidate after knowledge-source lookups.

    One per unique candidate per pipeline run. The confidence score is
    assigned by the confidence scorer, which returns new instances.
    """

    name: str
    wikipedia_url: str | None = None
    wikidata_url: str | None = None
    knowledge_graph_url: str | None = None
    product_ontology_url: str | None = None
    type: str | None = None
    confidence_score: int = 0

    @property
    def has_knowledge_graph_match(self) -> bool:
        """True for a genuine Knowledge Graph link, False for the search fallback."""
        return bool(self.knowledge_graph_url) and KG_MATCH_MARKER in self.knowledge_graph_url

    @property
    def matched_sources(self) -> int:
        """Number of the four sources that produced a genuine match."""
        return sum((
            bool(self.wikipedia_url),
            bool(self.wikidata_url),
            self.has_knowledge_graph_match,
            bool(self.product_ontology_url),
        ))

    @property
    def is_enriched(self) -> bool:
        """True when at least one source matched."""
        return self.matched_sources > 0

    def to_dict(self) -> dict:
        """Convert to a plain dictionary."""
        return asdict(self)
