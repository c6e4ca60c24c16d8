"""
Irrelevance detection and salience-improvement tips.
"""

from entity_intel.extraction.content_segmenter import SegmentedContent
from entity_intel.knowledge.entity_types import (
    CATEGORY_PERSON,
    is_contextual_type,
    type_category,
)
from entity_intel.knowledge.models import EnrichedEntity
from entity_intel.utils.text import count_occurrences

# Body occurrences at or below this make an entity irrelevant
IRRELEVANT_MAX_BODY_OCCURRENCES = 1


def is_irrelevant(entity_name: str, content: SegmentedContent) -> bool:
    """
    True when an entity is absent from title and headings and appears
    at most once in the body.
    """
    name = entity_name.lower()
    if not name:
        return False
    if name in content.title.lower():
        return False
    if any(name in heading.lower() for heading in content.headings):
        return False
    return count_occurrences(content.body, entity_name) <= IRRELEVANT_MAX_BODY_OCCURRENCES


def find_irrelevant_entities(
    entities: list[EnrichedEntity],
    content: SegmentedContent,
) -> list[str]:
    """Names of weakly connected entities, in entity order. Nothing is dropped."""
    return [entity.name for entity in entities if is_irrelevant(entity.name, content)]


def find_entity(entities: list[EnrichedEntity], name: str | None) -> EnrichedEntity | None:
    """Entity whose name equals ``name`` case-insensitively."""
    if not name:
        return None
    key = name.lower()
    for entity in entities:
        if entity.name.lower() == key:
            return entity
    return None


def generate_salience_tips(
    main_topic: str | None,
    entities: list[EnrichedEntity],
    irrelevant: list[str],
) -> list[str]:
    """
    Ordered advice for strengthening the main topic.

    Args:
        main_topic: Resolved main topic
        entities: Enriched entities in confidence order
        irrelevant: Names reported as weakly connected

    Returns:
        Tips, empty when there is no main topic
    """
    if not main_topic:
        return []

    tips = [
        f"Increase the frequency and context of '{main_topic}': mention it in the "
        "introduction, in subheadings and in the conclusion."
    ]

    topic_entity = find_entity(entities, main_topic)
    contextual = [
        entity.name for entity in entities
        if entity is not topic_entity and is_contextual_type(entity.type)
    ]

    if topic_entity is not None and type_category(topic_entity.type) == CATEGORY_PERSON and contextual:
        tips.append(
            f"'{main_topic}' is a person. Use related entities such as "
            f"{', '.join(contextual)} to build narrative context around them."
        )
    elif irrelevant:
        tips.append(
            "Consider aligning or integrating these weakly connected entities with "
            f"'{main_topic}': {', '.join(irrelevant)}. They can stay if they support the page."
        )

    tips.append(
        f"Add depth about '{main_topic}' with concrete examples, FAQs and supporting data."
    )
    return tips
