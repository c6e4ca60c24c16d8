"""
Knowledge matcher.

Links each candidate to encyclopedia, knowledge-base, knowledge-graph
and product-ontology identifiers. Candidates are processed strictly in
order, one at a time, with a fixed delay between candidates.
"""

import time
from typing import Callable

import httpx

from entity_intel.config.settings import KnowledgeSourceSettings
from entity_intel.core.exceptions import KnowledgeSourceError
from entity_intel.knowledge.entity_types import infer_type_from_description
from entity_intel.knowledge.matching import search_fallback_url
from entity_intel.knowledge.models import EnrichedEntity, SourceMatch
from entity_intel.knowledge.rate_limiter import EnrichmentThrottle
from entity_intel.knowledge.sources import (
    GoogleKnowledgeGraphSource,
    ProductOntologySource,
    WikidataSource,
    WikipediaSource,
    build_sources,
)
from entity_intel.utils.logging import get_logger, get_logger_with_context

logger = get_logger(__name__)


class KnowledgeMatcher:
    """
    Enriches candidates with knowledge-source identifiers.

    Example:
        >>> with KnowledgeMatcher.from_settings(settings.knowledge) as matcher:
        ...     entities = matcher.match_all(["Python", "Guido van Rossum"])
        >>> entities[0].wikipedia_url
        'https://en.wikipedia.org/wiki/Python_(programming_language)'
    """

    def __init__(
        self,
        wikipedia: WikipediaSource,
        wikidata: WikidataSource,
        knowledge_graph: GoogleKnowledgeGraphSource,
        product_ontology: ProductOntologySource,
        throttle: EnrichmentThrottle | None = None,
        client: httpx.Client | None = None,
    ) -> None:
        """
        Initialize the matcher.

        Args:
            wikipedia: Encyclopedia source
            wikidata: Knowledge-base source
            knowledge_graph: Knowledge Graph source (inert without a key)
            product_ontology: Product ontology prober
            throttle: Delay between candidates; none when omitted
            client: HTTP client owned by the matcher and closed with it
        """
        self.wikipedia = wikipedia
        self.wikidata = wikidata
        self.knowledge_graph = knowledge_graph
        self.product_ontology = product_ontology
        self.throttle = throttle or EnrichmentThrottle(delay_seconds=0.0)
        self._client = client

    @classmethod
    def from_settings(
        cls,
        settings: KnowledgeSourceSettings,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "KnowledgeMatcher":
        """
        Build a matcher whose sources share one HTTP client.

        Args:
            settings: Knowledge source settings
            transport: Optional httpx transport (tests inject a mock)
            sleep: Sleep function used by the throttle
        """
        client = httpx.Client(
            transport=transport,
            timeout=settings.timeout_seconds,
            follow_redirects=True,
            headers={"User-Agent": settings.user_agent},
        )
        api_key = settings.resolve_google_kg_api_key()
        if not api_key:
            logger.info(
                f"No Knowledge Graph key in ${settings.google_kg_api_key_env_var}, "
                "using search fallback links")

        wikipedia, wikidata, knowledge_graph, product_ontology = build_sources(
            client, settings, google_kg_api_key=api_key)

        return cls(
            wikipedia=wikipedia,
            wikidata=wikidata,
            knowledge_graph=knowledge_graph,
            product_ontology=product_ontology,
            throttle=EnrichmentThrottle(settings.rate_limit_delay_seconds, sleep=sleep),
            client=client,
        )

    def match(self, candidate: str) -> EnrichedEntity:
        """
        Look a single candidate up in every source.

        Never raises for source failures; a failing source just
        contributes no link.
        """
        wikipedia_match = self.wikipedia.find(candidate)
        wikidata_match = self._find_wikidata(candidate, wikipedia_match)
        kg_match = self.knowledge_graph.find(candidate)
        product_ontology_url = self.product_ontology.find(candidate)

        if kg_match is not None:
            knowledge_graph_url = kg_match.url
            entity_type = kg_match.entity_type
        else:
            knowledge_graph_url = search_fallback_url(candidate)
            entity_type = None

        if entity_type is None and wikidata_match is not None:
            entity_type = infer_type_from_description(wikidata_match.description)

        candidate_logger = get_logger_with_context(__name__, candidate=candidate)
        candidate_logger.debug(
            f"wikipedia={wikipedia_match is not None} wikidata={wikidata_match is not None} "
            f"kg={kg_match is not None} ontology={product_ontology_url is not None} "
            f"type={entity_type}")

        return EnrichedEntity(
            name=candidate,
            wikipedia_url=wikipedia_match.url if wikipedia_match else None,
            wikidata_url=wikidata_match.url if wikidata_match else None,
            knowledge_graph_url=knowledge_graph_url,
            product_ontology_url=product_ontology_url,
            type=entity_type,
        )

    def match_all(self, candidates: list[str]) -> list[EnrichedEntity]:
        """
        Enrich candidates sequentially, preserving input order.

        Args:
            candidates: Ordered candidate surface forms

        Returns:
            One entity per candidate, in the same order
        """
        entities: list[EnrichedEntity] = []

        for candidate in candidates:
            self.throttle.acquire()
            try:
                entities.append(self.match(candidate))
            finally:
                self.throttle.release()

        enriched = sum(1 for entity in entities if entity.is_enriched)
        logger.info(f"Enriched {enriched}/{len(entities)} candidates")
        return entities

    def _find_wikidata(
        self,
        candidate: str,
        wikipedia_match: SourceMatch | None,
    ) -> SourceMatch | None:
        # The item linked from the accepted article wins over a direct search
        if wikipedia_match is not None:
            try:
                item_id = self.wikipedia.linked_item_id(wikipedia_match.label)
            except KnowledgeSourceError as e:
                logger.warning(f"Linked item lookup failed for '{wikipedia_match.label}': {e}")
                item_id = None

            if item_id:
                linked = self.wikidata.find_linked(candidate, item_id)
                if linked is not None:
                    return linked

        return self.wikidata.find(candidate)

    def close(self) -> None:
        """Close the shared HTTP client if the matcher owns it."""
        if self._client is not None:
            self._client.close()

    def __enter__(self) -> "KnowledgeMatcher":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
