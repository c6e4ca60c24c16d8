"""
Content recommendations.

Delegates to the chat-completion service when one is configured and
falls back to coverage heuristics on any failure, so callers always
receive advice.
"""

from dataclasses import asdict, dataclass

from entity_intel.core.exceptions import APILLMError
from entity_intel.extraction.content_segmenter import SegmentedContent
from entity_intel.knowledge.models import EnrichedEntity
from entity_intel.llm.api_client import ChatCompletionClient
from entity_intel.llm.prompt_templates import RecommendationPrompts
from entity_intel.utils.logging import get_logger
from entity_intel.utils.text import count_occurrences

logger = get_logger(__name__)

MAX_RECOMMENDATIONS = 5
MAX_PROMPT_ENTITIES = 5
PROMPT_MIN_CONFIDENCE = 50
RECOMMENDATION_INPUT_CHARS = 2500

CATEGORY_CONTENT_DEPTH = "Content Depth"
CATEGORY_STRUCTURED_DATA = "Structured Data"
CATEGORY_GENERAL = "General"


@dataclass(frozen=True)
class Recommendation:
    """One piece of advice."""

    category: str
    advice: str

    def to_dict(self) -> dict:
        return asdict(self)


class RecommendationService:
    """
    Produces up to five recommendations for a page.

    Example:
        >>> service = RecommendationService(client=None)
        >>> service.recommend(content, entities)[0].advice
        "Consider expanding coverage of 'Python' with additional context, ..."
    """

    def __init__(
        self,
        client: ChatCompletionClient | None = None,
        max_tokens: int = 800,
        temperature: float = 0.7,
    ) -> None:
        self.client = client
        self.max_tokens = max_tokens
        self.temperature = temperature

    def recommend(
        self,
        content: SegmentedContent,
        entities: list[EnrichedEntity],
    ) -> list[Recommendation]:
        """Delegated advice when available, heuristic advice otherwise."""
        if self.client is not None:
            delegated = self._delegated(content, entities)
            if delegated:
                return delegated
        return self.fallback(content, entities)

    def fallback(
        self,
        content: SegmentedContent,
        entities: list[EnrichedEntity],
    ) -> list[Recommendation]:
        """Suggest expanding every entity mentioned at most once."""
        text = content.combined_text()
        recommendations = [
            Recommendation(
                CATEGORY_CONTENT_DEPTH,
                f"Consider expanding coverage of '{entity.name}' with additional context, "
                "examples, or data to build more topical authority.",
            )
            for entity in entities
            if count_occurrences(text, entity.name) <= 1
        ]

        if not recommendations:
            recommendations.append(Recommendation(
                CATEGORY_STRUCTURED_DATA,
                "Content appears to have good entity coverage. Review the generated "
                "JSON-LD for inclusion in your page schema to improve SEO.",
            ))

        return recommendations[:MAX_RECOMMENDATIONS]

    def _delegated(
        self,
        content: SegmentedContent,
        entities: list[EnrichedEntity],
    ) -> list[Recommendation]:
        top = [e.name for e in entities if e.confidence_score > PROMPT_MIN_CONFIDENCE]
        prompt = RecommendationPrompts.SEO_RECOMMENDATIONS.format(
            text=content.combined_text(RECOMMENDATION_INPUT_CHARS),
            entities=", ".join(top[:MAX_PROMPT_ENTITIES]),
        )

        try:
            payload = self.client.complete_json(
                prompt["user"],
                system_prompt=prompt["system"],
                max_tokens=self.max_tokens,
                temperature=self.temperature,
            )
        except APILLMError as e:
            logger.warning(f"Delegated recommendations failed, using heuristics: {e}")
            return []

        raw = payload.get("recommendations")
        if not isinstance(raw, list):
            logger.warning("Delegated recommendations missing 'recommendations' list, using heuristics")
            return []

        recommendations = []
        for item in raw:
            if isinstance(item, dict) and isinstance(item.get("advice"), str) and item["advice"].strip():
                category = item.get("category")
                recommendations.append(Recommendation(
                    category.strip() if isinstance(category, str) and category.strip() else CATEGORY_GENERAL,
                    item["advice"].strip(),
                ))
            elif isinstance(item, str) and item.strip():
                recommendations.append(Recommendation(CATEGORY_GENERAL, item.strip()))

        return recommendations[:MAX_RECOMMENDATIONS]
