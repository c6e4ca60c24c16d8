"""
Prompt templates for the delegated LLM calls.

Provides structured prompts for:
- Ranked topic extraction
- Semantic SEO recommendations
"""

from dataclasses import dataclass
from typing import Any


@dataclass
class PromptTemplate:
    """
    A reusable prompt template with variable substitution.

    Example:
        >>> template = PromptTemplate(
        ...     name="rank_topics",
        ...     system="You are a Semantic SEO expert.",
        ...     user="Extract topics from:\\n\\n{text}",
        ... )
        >>> prompt = template.format(text="Page text here...")
    """

    name: str
    system: str
    user: str

    def format(self, **kwargs: Any) -> dict[str, str]:
        """
        Format the template with provided variables.

        Returns:
            Dictionary with formatted system and user prompts
        """
        return {
            "system": self.system.format(**kwargs) if kwargs else self.system,
            "user": self.user.format(**kwargs) if kwargs else self.user,
        }

    def format_user(self, **kwargs: Any) -> str:
        """Format just the user prompt."""
        return self.user.format(**kwargs) if kwargs else self.user


class ExtractionPrompts:
    """Prompt templates for ranked topic extraction."""

    RANK_TOPICS = PromptTemplate(
        name="rank_topics",
        system=(
            "You are a Semantic SEO expert. "
            "You identify the concepts a search engine's knowledge graph would "
            "associate with a web page."
        ),
        user=(
            "Extract the most topically relevant entities from the following webpage "
            "content. Focus on the primary, secondary, and tertiary topics that define "
            "the core subject matter of the page. Prioritize concepts that would have "
            "entries in knowledge graphs like Wikipedia. Return a JSON object with a "
            "single key 'entities' which contains an array of these topics, strictly "
            "ordered from most to least important. "
            'Example: {{"entities": ["Topic 1", "Topic 2"]}}\n\n'
            "---\n{text}\n---"
        ),
    )


class RecommendationPrompts:
    """Prompt templates for content recommendations."""

    SEO_RECOMMENDATIONS = PromptTemplate(
        name="seo_recommendations",
        system=(
            "You are a world-class Semantic SEO strategist, specializing in topical "
            "authority and schema optimization."
        ),
        user=(
            "Analyze the following webpage content and its most salient topical "
            "entities to provide expert, actionable recommendations for improving its "
            "semantic density and authority.\n\n"
            "Page text summary:\n{text}...\n\n"
            "Most salient topical entities identified:\n{entities}\n\n"
            "Return a JSON object with a single key 'recommendations'. Its value is an "
            "array of objects with two keys: 'category' (e.g. 'Semantic Gaps', "
            "'Content Depth', 'Strategic Guidance') and 'advice' (the specific "
            "recommendation). Return only the raw JSON object."
        ),
    )
