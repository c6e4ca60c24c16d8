"""
Knowledge source clients.

Each client wraps one public service behind a ``find`` method returning
the best accepted match or None. Transport failures, error statuses
and unexpected payloads are raised internally as KnowledgeSourceError
and degraded to "no match" at the ``find`` boundary, so one failing
source never affects the others.
"""

from typing import Any
from urllib.parse import quote

import httpx

from entity_intel.config.settings import KnowledgeSourceSettings
from entity_intel.core.exceptions import KnowledgeSourceError, MalformedResponseError
from entity_intel.knowledge.matching import (
    ENCYCLOPEDIA_ACCEPT_SCORE,
    KB_SEARCH_ACCEPT_SCORE,
    KNOWLEDGE_GRAPH_ACCEPT_SCORE,
    LINKED_ITEM_ACCEPT_SCORE,
    VERIFICATION_TRIGGER,
    apply_verification,
    calculate_encyclopedia_match_score,
    calculate_kb_match_score,
    product_ontology_slugs,
    verify_against_extract,
)
from entity_intel.knowledge.models import SourceMatch
from entity_intel.utils.logging import get_logger
from entity_intel.utils.metrics import record_source_request

logger = get_logger(__name__)


class KnowledgeSource:
    """Shared request handling for the JSON knowledge sources."""

    name = "knowledge"

    def __init__(self, client: httpx.Client, timeout_seconds: float = 10.0) -> None:
        self.client = client
        self.timeout_seconds = timeout_seconds

    def _get_json(self, url: str, params: dict[str, Any]) -> Any:
        """
        GET a JSON document.

        Raises:
            KnowledgeSourceError: On transport failure or non-200 status
            MalformedResponseError: When the body is not JSON
        """
        try:
            response = self.client.get(url, params=params, timeout=self.timeout_seconds)
        except httpx.HTTPError as e:
            record_source_request(self.name, failed=True)
            raise KnowledgeSourceError(
                f"Request failed: {e}", source=self.name, url=url) from e

        if response.status_code != 200:
            record_source_request(self.name, failed=True)
            raise KnowledgeSourceError(
                f"Unexpected status {response.status_code}",
                source=self.name,
                url=url,
                details={"status_code": response.status_code},
            )

        try:
            data = response.json()
        except ValueError as e:
            record_source_request(self.name, failed=True)
            raise MalformedResponseError(
                "Response is not valid JSON", source=self.name, url=url) from e

        record_source_request(self.name)
        return data

    def _malformed(self, reason: str, url: str) -> MalformedResponseError:
        return MalformedResponseError(reason, source=self.name, url=url)

    def _object(self, value: Any, what: str, url: str) -> dict[str, Any]:
        """
        A nested JSON object, {} when absent.

        MediaWiki serialises an empty map as []; any other non-object
        raises MalformedResponseError.
        """
        if value is None or value == []:
            return {}
        if not isinstance(value, dict):
            raise self._malformed(f"{what} is not an object", url)
        return value


class WikipediaSource(KnowledgeSource):
    """
    Encyclopedia lookups against the MediaWiki action API.

    Search titles are scored against the candidate; strong titles are
    checked against the article's lead paragraph before acceptance.
    """

    name = "wikipedia"

    def __init__(
        self,
        client: httpx.Client,
        api_url: str = "https://en.wikipedia.org/w/api.php",
        search_limit: int = 5,
        timeout_seconds: float = 10.0,
    ) -> None:
        super().__init__(client, timeout_seconds)
        self.api_url = api_url
        self.search_limit = search_limit

    def search(self, query: str) -> list[tuple[str, str]]:
        """Opensearch titles and article URLs, in service order."""
        data = self._get_json(self.api_url, {
            "action": "opensearch",
            "search": query,
            "limit": self.search_limit,
            "namespace": 0,
            "format": "json",
        })

        if not isinstance(data, list) or len(data) < 4:
            raise self._malformed("Opensearch answer is not a 4-element array", self.api_url)
        titles, urls = data[1], data[3]
        if not isinstance(titles, list) or not isinstance(urls, list):
            raise self._malformed("Opensearch titles or URLs are not arrays", self.api_url)

        return [
            (title, url)
            for title, url in zip(titles, urls)
            if isinstance(title, str) and isinstance(url, str)
        ]

    def lead_extract(self, title: str) -> str:
        """Plain-text introduction of an article, '' when missing."""
        data = self._get_json(self.api_url, {
            "action": "query",
            "prop": "extracts",
            "exintro": 1,
            "explaintext": 1,
            "redirects": 1,
            "titles": title,
            "format": "json",
        })
        for page in self._pages(data):
            extract = page.get("extract")
            if isinstance(extract, str):
                return extract
        return ""

    def linked_item_id(self, title: str) -> str | None:
        """Wikidata item id attached to an article, if any."""
        data = self._get_json(self.api_url, {
            "action": "query",
            "prop": "pageprops",
            "ppprop": "wikibase_item",
            "redirects": 1,
            "titles": title,
            "format": "json",
        })
        for page in self._pages(data):
            pageprops = self._object(page.get("pageprops"), "pageprops", self.api_url)
            item = pageprops.get("wikibase_item")
            if isinstance(item, str) and item:
                return item
        return None

    def find(self, candidate: str) -> SourceMatch | None:
        """Best verified article for a candidate, or None."""
        try:
            results = self.search(candidate)
        except KnowledgeSourceError as e:
            logger.warning(f"Wikipedia search failed for '{candidate}': {e}")
            return None

        best: SourceMatch | None = None
        for title, url in results:
            score = calculate_encyclopedia_match_score(candidate, title)
            if score > VERIFICATION_TRIGGER:
                score = self._verify(candidate, title, score)
            if best is None or score > best.score:
                best = SourceMatch(url=url, label=title, score=score)

        if best is None or best.score < ENCYCLOPEDIA_ACCEPT_SCORE:
            return None

        logger.debug(f"Wikipedia match for '{candidate}': {best.label} ({best.score:.1f})")
        return best

    def _verify(self, candidate: str, title: str, score: float) -> float:
        try:
            extract = self.lead_extract(title)
        except KnowledgeSourceError as e:
            logger.warning(f"Could not verify '{title}' for '{candidate}': {e}")
            return score
        return apply_verification(score, verify_against_extract(candidate, extract))

    def _pages(self, data: Any) -> list[dict]:
        if not isinstance(data, dict):
            raise self._malformed("Query answer is not an object", self.api_url)
        query = self._object(data.get("query"), "Query", self.api_url)
        pages = self._object(query.get("pages"), "Query pages", self.api_url)
        return [page for page in pages.values() if isinstance(page, dict)]


class WikidataSource(KnowledgeSource):
    """Knowledge-base lookups against the Wikidata API."""

    name = "wikidata"

    def __init__(
        self,
        client: httpx.Client,
        api_url: str = "https://www.wikidata.org/w/api.php",
        entity_base_url: str = "https://www.wikidata.org/wiki/",
        search_limit: int = 5,
        timeout_seconds: float = 10.0,
    ) -> None:
        super().__init__(client, timeout_seconds)
        self.api_url = api_url
        self.entity_base_url = entity_base_url
        self.search_limit = search_limit

    def item_url(self, item_id: str) -> str:
        return self.entity_base_url + item_id

    def describe(self, item_id: str) -> tuple[str, str]:
        """English label and description of an item."""
        data = self._get_json(self.api_url, {
            "action": "wbgetentities",
            "ids": item_id,
            "props": "labels|descriptions",
            "languages": "en",
            "format": "json",
        })
        if not isinstance(data, dict) or not isinstance(data.get("entities"), dict):
            raise self._malformed("wbgetentities answer has no entities", self.api_url)

        entity = self._object(data["entities"].get(item_id), f"Entity {item_id}", self.api_url)
        return (
            self._english_value(entity, "labels"),
            self._english_value(entity, "descriptions"),
        )

    def _english_value(self, entity: dict[str, Any], field: str) -> str:
        terms = self._object(entity.get(field), field, self.api_url)
        english = self._object(terms.get("en"), f"English {field}", self.api_url)
        value = english.get("value", "")
        return value if isinstance(value, str) else ""

    def search(self, query: str) -> list[dict[str, str]]:
        """Items matching a query as ``{id, label, description}`` dicts."""
        data = self._get_json(self.api_url, {
            "action": "wbsearchentities",
            "search": query,
            "language": "en",
            "limit": self.search_limit,
            "format": "json",
        })
        if not isinstance(data, dict) or not isinstance(data.get("search", []), list):
            raise self._malformed("wbsearchentities answer has no search list", self.api_url)

        results = []
        for item in data.get("search", []):
            if not isinstance(item, dict) or not item.get("id"):
                continue
            results.append({
                "id": str(item["id"]),
                "label": str(item.get("label") or ""),
                "description": str(item.get("description") or ""),
            })
        return results

    def find_linked(self, candidate: str, item_id: str) -> SourceMatch | None:
        """Accept the item linked from an encyclopedia article if its label agrees."""
        try:
            label, description = self.describe(item_id)
        except KnowledgeSourceError as e:
            logger.warning(f"Wikidata lookup of {item_id} failed: {e}")
            return None

        score = calculate_kb_match_score(candidate, label, description)
        if score < LINKED_ITEM_ACCEPT_SCORE:
            logger.debug(f"Linked item {item_id} ({label}) rejected for '{candidate}'")
            return None
        return SourceMatch(
            url=self.item_url(item_id), label=label, score=score, description=description)

    def find(self, candidate: str) -> SourceMatch | None:
        """Best item from a direct search, or None."""
        try:
            results = self.search(candidate)
        except KnowledgeSourceError as e:
            logger.warning(f"Wikidata search failed for '{candidate}': {e}")
            return None

        best: SourceMatch | None = None
        for item in results:
            score = calculate_kb_match_score(candidate, item["label"], item["description"])
            if best is None or score > best.score:
                best = SourceMatch(
                    url=self.item_url(item["id"]),
                    label=item["label"],
                    score=score,
                    description=item["description"],
                )

        if best is None or best.score < KB_SEARCH_ACCEPT_SCORE:
            return None
        return best


class GoogleKnowledgeGraphSource(KnowledgeSource):
    """
    Google Knowledge Graph Search API lookups.

    Without an API key the source is inert and ``find`` returns None.
    """

    name = "knowledge_graph"
    ENTITY_URL = "https://www.google.com/search?kgmid="

    def __init__(
        self,
        client: httpx.Client,
        api_key: str | None,
        api_url: str = "https://kgsearch.googleapis.com/v1/entities:search",
        search_limit: int = 5,
        timeout_seconds: float = 10.0,
    ) -> None:
        super().__init__(client, timeout_seconds)
        self.api_key = api_key
        self.api_url = api_url
        self.search_limit = search_limit

    @property
    def enabled(self) -> bool:
        return bool(self.api_key)

    def search(self, query: str) -> list[dict[str, Any]]:
        """Raw ``result`` objects of the item list, in service order."""
        data = self._get_json(self.api_url, {
            "query": query,
            "key": self.api_key,
            "limit": self.search_limit,
        })
        if not isinstance(data, dict) or not isinstance(data.get("itemListElement", []), list):
            raise self._malformed("Answer has no itemListElement list", self.api_url)

        return [
            element["result"]
            for element in data.get("itemListElement", [])
            if isinstance(element, dict) and isinstance(element.get("result"), dict)
        ]

    def find(self, candidate: str) -> SourceMatch | None:
        """Best entity with a machine id, or None."""
        if not self.enabled:
            return None

        try:
            results = self.search(candidate)
        except KnowledgeSourceError as e:
            logger.warning(f"Knowledge Graph search failed for '{candidate}': {e}")
            return None

        best: SourceMatch | None = None
        for result in results:
            machine_id = _machine_id(result.get("@id"))
            if not machine_id:
                continue
            name = str(result.get("name") or "")
            description = str(result.get("description") or "")
            score = calculate_kb_match_score(candidate, name, description)
            if best is None or score > best.score:
                best = SourceMatch(
                    url=self.ENTITY_URL + machine_id,
                    label=name,
                    score=score,
                    description=description,
                    entity_type=_primary_type(result.get("@type")),
                )

        if best is None or best.score < KNOWLEDGE_GRAPH_ACCEPT_SCORE:
            return None
        return best


class ProductOntologySource(KnowledgeSource):
    """Existence probes against the product ontology with HEAD requests."""

    name = "product_ontology"
    PATHS = ("/id/", "/doc/")

    def __init__(
        self,
        client: httpx.Client,
        base_url: str = "http://www.productontology.org",
        timeout_seconds: float = 5.0,
    ) -> None:
        super().__init__(client, timeout_seconds)
        self.base_url = base_url.rstrip("/")

    def probe(self, url: str) -> bool:
        """True when the URL answers HEAD with status 200."""
        try:
            response = self.client.head(url, timeout=self.timeout_seconds)
        except httpx.HTTPError as e:
            record_source_request(self.name, failed=True)
            logger.debug(f"Probe of {url} failed: {e}")
            return False

        record_source_request(self.name)
        return response.status_code == 200

    def find(self, candidate: str) -> str | None:
        """First URL that exists, trying every slug under /id/ then /doc/."""
        for path in self.PATHS:
            for slug in product_ontology_slugs(candidate):
                url = self.base_url + path + quote(slug, safe="_-")
                if self.probe(url):
                    return url
        return None


def _machine_id(raw_id: Any) -> str:
    """'kg:/m/0dgw9r' to '/m/0dgw9r'."""
    if not isinstance(raw_id, str):
        return ""
    return raw_id.split(":", 1)[1] if raw_id.startswith("kg:") else raw_id


def _primary_type(raw_types: Any) -> str | None:
    """First type other than the catch-all 'Thing'."""
    if isinstance(raw_types, str):
        raw_types = [raw_types]
    if not isinstance(raw_types, list):
        return None
    for entity_type in raw_types:
        if isinstance(entity_type, str) and entity_type and entity_type != "Thing":
            return entity_type
    return None


def build_sources(
    client: httpx.Client,
    settings: KnowledgeSourceSettings,
    google_kg_api_key: str | None = None,
) -> tuple[WikipediaSource, WikidataSource, GoogleKnowledgeGraphSource, ProductOntologySource]:
    """All four sources configured from settings, sharing one HTTP client."""
    return (
        WikipediaSource(
            client,
            api_url=settings.wikipedia_api_url,
            search_limit=settings.search_limit,
            timeout_seconds=settings.timeout_seconds,
        ),
        WikidataSource(
            client,
            api_url=settings.wikidata_api_url,
            entity_base_url=settings.wikidata_entity_base_url,
            search_limit=settings.search_limit,
            timeout_seconds=settings.timeout_seconds,
        ),
        GoogleKnowledgeGraphSource(
            client,
            api_key=google_kg_api_key,
            api_url=settings.google_kg_api_url,
            search_limit=settings.search_limit,
            timeout_seconds=settings.timeout_seconds,
        ),
        ProductOntologySource(
            client,
            base_url=settings.product_ontology_base_url,
            timeout_seconds=settings.probe_timeout_seconds,
        ),
    )
