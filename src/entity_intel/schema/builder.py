"""
JSON-LD document builder.

Maps ranked entities onto a schema.org ``WebPage`` with ``about`` and
``mentions`` lists of ``Thing`` items.
"""

from typing import Any

from entity_intel.knowledge.models import EnrichedEntity

SCHEMA_CONTEXT = "https://schema.org"
PAGE_TYPE = "WebPage"
ITEM_TYPE = "Thing"


def entity_to_thing(entity: EnrichedEntity) -> dict[str, Any]:
    """
    A ``Thing`` item for one entity.

    ``sameAs`` lists genuine identifiers only; the web-search fallback
    link is not an identifier and is left out.
    """
    thing: dict[str, Any] = {"@type": ITEM_TYPE, "name": entity.name}

    same_as = [url for url in (entity.wikipedia_url, entity.wikidata_url) if url]
    if entity.has_knowledge_graph_match:
        same_as.append(entity.knowledge_graph_url)
    if same_as:
        thing["sameAs"] = same_as

    if entity.product_ontology_url:
        thing["additionalType"] = entity.product_ontology_url

    return thing


class SchemaBuilder:
    """
    Builds the structured-data document for a page.

    The entity matching the main topic goes under ``about``; with no
    such entity the highest-ranked one does. Everything else goes under
    ``mentions``.

    Example:
        >>> doc = SchemaBuilder().build(entities, url="https://example.com", main_topic="Python")
        >>> doc["about"][0]["name"]
        'Python'
    """

    def build(
        self,
        entities: list[EnrichedEntity],
        url: str | None = None,
        main_topic: str | None = None,
    ) -> dict[str, Any]:
        document: dict[str, Any] = {"@context": SCHEMA_CONTEXT, "@type": PAGE_TYPE}
        if url:
            document["url"] = url

        about_index = self._about_index(entities, main_topic)
        document["about"] = (
            [entity_to_thing(entities[about_index])] if about_index is not None else []
        )
        document["mentions"] = [
            entity_to_thing(entity)
            for index, entity in enumerate(entities)
            if index != about_index
        ]
        return document

    @staticmethod
    def _about_index(entities: list[EnrichedEntity], main_topic: str | None) -> int | None:
        if not entities:
            return None
        if main_topic:
            key = main_topic.lower()
            for index, entity in enumerate(entities):
                if entity.name.lower() == key:
                    return index
        return 0
