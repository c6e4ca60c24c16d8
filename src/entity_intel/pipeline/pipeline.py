"""
Analysis pipeline.

Runs the stages in order, each consuming the previous stage's output:

    markup -> segment -> extract candidates -> match -> score confidence
           -> resolve main topic -> (URL only) expand, match, re-score
           -> irrelevance, tips, salience, recommendations, JSON-LD

Only input validation and fetch failures propagate. Every knowledge
source and delegated LLM failure degrades inside its stage.
"""

import time
from typing import Callable

import httpx

from entity_intel.config.settings import Settings
from entity_intel.core.exceptions import InputValidationError
from entity_intel.extraction.candidate_extractor import CandidateExtractor
from entity_intel.extraction.content_segmenter import ContentSegmenter, SegmentedContent
from entity_intel.fetcher.page_fetcher import PageFetcher, validate_url
from entity_intel.knowledge.matcher import KnowledgeMatcher
from entity_intel.llm.api_client import ChatCompletionClient
from entity_intel.pipeline.models import PipelineResult
from entity_intel.schema.builder import SchemaBuilder
from entity_intel.scoring.confidence import ConfidenceScorer
from entity_intel.scoring.salience import SalienceScorer
from entity_intel.topics.expansion import expand_candidates
from entity_intel.topics.recommendations import RecommendationService
from entity_intel.topics.resolver import TopicResolver
from entity_intel.topics.salience_tips import (
    find_entity,
    find_irrelevant_entities,
    generate_salience_tips,
)
from entity_intel.topics.synonyms import SynonymTable
from entity_intel.utils.logging import get_logger
from entity_intel.utils.metrics import Metrics, time_stage

logger = get_logger(__name__)


class AnalysisPipeline:
    """
    Entity recognition, enrichment and topical-salience pipeline.

    Example:
        >>> with AnalysisPipeline.from_settings(get_settings()) as pipeline:
        ...     result = pipeline.analyze_url("https://example.com/seo-course")
        >>> result.main_topic, result.topical_salience
        ('SEO and PPC Course', 64)
    """

    def __init__(
        self,
        segmenter: ContentSegmenter,
        extractor: CandidateExtractor,
        matcher: KnowledgeMatcher,
        resolver: TopicResolver,
        recommender: RecommendationService,
        fetcher: PageFetcher | None = None,
        confidence_scorer: ConfidenceScorer | None = None,
        salience_scorer: SalienceScorer | None = None,
        schema_builder: SchemaBuilder | None = None,
        max_expanded_candidates: int = 10,
        llm_client: ChatCompletionClient | None = None,
    ) -> None:
        self.segmenter = segmenter
        self.extractor = extractor
        self.matcher = matcher
        self.resolver = resolver
        self.recommender = recommender
        self.fetcher = fetcher
        self.confidence_scorer = confidence_scorer or ConfidenceScorer()
        self.salience_scorer = salience_scorer or SalienceScorer()
        self.schema_builder = schema_builder or SchemaBuilder()
        self.max_expanded_candidates = max_expanded_candidates
        self._llm_client = llm_client

    @classmethod
    def from_settings(
        cls,
        settings: Settings | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ) -> "AnalysisPipeline":
        """
        Wire every stage from settings.

        Args:
            settings: Settings, defaults to a fresh default tree
            transport: Optional httpx transport shared by all HTTP
                collaborators (tests inject a mock)
            sleep: Sleep function for throttling and retries
        """
        settings = settings or Settings()

        llm_client = ChatCompletionClient.from_settings(settings.llm, transport=transport)
        extractor = CandidateExtractor.create(
            llm_client,
            max_candidates=settings.analysis.max_candidates,
            max_input_chars=settings.llm.max_input_chars,
            max_tokens=settings.llm.extraction_max_tokens,
            temperature=settings.llm.extraction_temperature,
        )
        resolver = TopicResolver(
            SynonymTable.default(settings.analysis.extra_synonym_groups),
            default_strategy=settings.analysis.default_strategy,
        )
        recommender = RecommendationService(
            llm_client,
            max_tokens=settings.llm.recommendation_max_tokens,
            temperature=settings.llm.recommendation_temperature,
        )

        return cls(
            segmenter=ContentSegmenter(),
            extractor=extractor,
            matcher=KnowledgeMatcher.from_settings(
                settings.knowledge, transport=transport, sleep=sleep),
            resolver=resolver,
            recommender=recommender,
            fetcher=PageFetcher(settings.fetcher, transport=transport),
            max_expanded_candidates=settings.analysis.max_expanded_candidates,
            llm_client=llm_client,
        )

    def analyze_url(self, url: str, strategy: str | None = None) -> PipelineResult:
        """
        Fetch and analyze a page.

        Raises:
            InputValidationError: Malformed URL or unknown strategy
            ContentFetchError: Page could not be retrieved
        """
        url = validate_url(url)
        self.resolver.validate_strategy(strategy or self.resolver.default_strategy)
        if self.fetcher is None:
            self.fetcher = PageFetcher()

        started = time.perf_counter()
        logger.info(f"Analyzing {url}")

        with time_stage("fetch"):
            html = self.fetcher.fetch(url)
        with time_stage("segment"):
            content = self.segmenter.segment(html)

        return self._run(content, url, strategy, started)

    def analyze_content(self, text: str, strategy: str | None = None) -> PipelineResult:
        """
        Analyze pasted markup or plain text.

        Raises:
            InputValidationError: Empty content or unknown strategy
        """
        if not text or not text.strip():
            raise InputValidationError("Please provide some content to analyze")
        self.resolver.validate_strategy(strategy or self.resolver.default_strategy)

        started = time.perf_counter()
        logger.info(f"Analyzing pasted content ({len(text)} characters)")

        with time_stage("segment"):
            content = self.segmenter.segment_text(text)

        return self._run(content, None, strategy, started)

    def _run(
        self,
        content: SegmentedContent,
        url: str | None,
        strategy: str | None,
        started: float,
    ) -> PipelineResult:
        with time_stage("extract"):
            extraction = self.extractor.extract_details(content)
        candidates = list(extraction.candidates)

        with time_stage("enrich"):
            matched = self.matcher.match_all(candidates)
        entities = self.confidence_scorer.score(matched)

        with time_stage("resolve"):
            resolution = self.resolver.resolve(candidates, content, entities, strategy)

        if url is not None:
            additions = expand_candidates(
                candidates, content, url, limit=self.max_expanded_candidates)
            if additions:
                logger.info(f"Expanded candidates with {len(additions)} URL-sourced phrases")
                candidates.extend(additions)
                with time_stage("enrich"):
                    matched.extend(self.matcher.match_all(additions))
                entities = self.confidence_scorer.score(matched)

        Metrics.get().increment("entities_enriched", sum(1 for e in entities if e.is_enriched))

        irrelevant = find_irrelevant_entities(entities, content)
        tips = generate_salience_tips(resolution.main_topic, entities, irrelevant)
        topic_entity = find_entity(entities, resolution.main_topic)

        with time_stage("recommend"):
            recommendations = self.recommender.recommend(content, entities)

        result = PipelineResult(
            url=url,
            title=content.title,
            meta_description=content.meta_description,
            headings=content.headings,
            entities=entities,
            main_topic=resolution.main_topic,
            main_topic_confidence=topic_entity.confidence_score if topic_entity else 0,
            main_topic_strategy=resolution.strategy,
            main_topic_rule=resolution.rule,
            irrelevant_entities=irrelevant,
            salience_tips=tips,
            topical_salience=self.salience_scorer.score(entities),
            recommendations=recommendations,
            json_ld=self.schema_builder.build(entities, url=url, main_topic=resolution.main_topic),
            extraction_method=extraction.method,
            candidate_groups=extraction.groups,
            processing_time_seconds=time.perf_counter() - started,
        )

        logger.info(
            f"Analysis complete: {result.entities_count} entities, "
            f"{result.enriched_count} enriched, salience {result.topical_salience}")
        return result

    def close(self) -> None:
        """Release HTTP clients."""
        self.matcher.close()
        if self.fetcher is not None:
            self.fetcher.close()
        if self._llm_client is not None:
            self._llm_client.close()

    def __enter__(self) -> "AnalysisPipeline":
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()
