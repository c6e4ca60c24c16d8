"""
Main-topic resolution.

Selects the single phrase that best represents a page. A title
override rule is always checked first; otherwise one of four strategies
decides:

- strict: ordered 2-3 element combinations of the top candidates,
  expanded through synonyms, that occur in both title and body. A
  prominent person or organization overrides the combination.
- title: longest candidate found in the title.
- frequent: candidate with the most body occurrences.
- pattern: first run of capitalized words in the title.

Every strategy falls back to the top-ranked candidate.
"""

import itertools
import re
from dataclasses import dataclass

from entity_intel.core.exceptions import InputValidationError
from entity_intel.extraction.content_segmenter import SegmentedContent
from entity_intel.knowledge.entity_types import is_person_or_organization, normalize_type
from entity_intel.knowledge.models import EnrichedEntity
from entity_intel.topics.synonyms import SynonymTable
from entity_intel.utils.logging import get_logger
from entity_intel.utils.text import count_occurrences

logger = get_logger(__name__)

STRATEGY_STRICT = "strict"
STRATEGY_TITLE = "title"
STRATEGY_FREQUENT = "frequent"
STRATEGY_PATTERN = "pattern"
STRATEGIES = (STRATEGY_STRICT, STRATEGY_TITLE, STRATEGY_FREQUENT, STRATEGY_PATTERN)

RULE_OVERRIDE = "override"
RULE_BOOST = "entity_boost"
RULE_COMBO = "combo"
RULE_FALLBACK = "fallback"

# Bounds on the combinatorial search
MAX_COMBO_CANDIDATES = 5
MIN_COMBO_SIZE = 2
MAX_COMBO_SIZE = 3
MAX_ALIASES_PER_ELEMENT = 4
CONNECTORS = (" ", " and ", " & ")

COMBO_BASE_SCORE = 200
SAME_TYPE_BONUS = 100
BOOST_MIN_CONFIDENCE = 60

OVERRIDE_PATTERN = re.compile(
    r"\b(?:[A-Z][\w'&-]*[ \t]+){2,}(?i:course|program|certificate|workshop|seminar)\b"
)
TITLE_PHRASE_PATTERN = re.compile(r"[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+")


@dataclass(frozen=True)
class TopicResolution:
    """Selected main topic and the rule that produced it."""

    main_topic: str | None
    strategy: str
    rule: str


@dataclass(frozen=True)
class _Combo:
    phrase: str
    score: int


class TopicResolver:
    """
    Resolves a page's main topic.

    Example:
        >>> resolver = TopicResolver(SynonymTable.default())
        >>> resolver.resolve(["SEO", "PPC", "Course"], content, entities).main_topic
        'SEO and PPC Course'
    """

    def __init__(
        self,
        synonyms: SynonymTable | None = None,
        default_strategy: str = STRATEGY_STRICT,
    ) -> None:
        self.synonyms = synonyms or SynonymTable.default()
        self.default_strategy = self.validate_strategy(default_strategy)

    def resolve(
        self,
        candidates: list[str],
        content: SegmentedContent,
        entities: list[EnrichedEntity],
        strategy: str | None = None,
    ) -> TopicResolution:
        """
        Pick the main topic.

        Args:
            candidates: Raw candidates in extraction order
            content: Segmented page content
            entities: Enriched entities in confidence order
            strategy: Strategy name, defaults to the resolver's default

        Returns:
            The resolution; main_topic is None only without candidates

        Raises:
            InputValidationError: For an unknown strategy name
        """
        strategy = self.validate_strategy(strategy or self.default_strategy)

        override = self._title_override(content.title)
        if override:
            return self._resolved(override, strategy, RULE_OVERRIDE)

        if strategy == STRATEGY_TITLE:
            topic = self._by_title(candidates, content.title)
        elif strategy == STRATEGY_FREQUENT:
            topic = self._by_frequency(candidates, content.body)
        elif strategy == STRATEGY_PATTERN:
            topic = self._by_pattern(content.title)
        else:
            boosted = self._boosted_entity(entities, content)
            if boosted:
                return self._resolved(boosted, strategy, RULE_BOOST)
            combo = self.best_combo(candidates, content, entities)
            if combo is not None:
                return self._resolved(combo.phrase, strategy, RULE_COMBO)
            topic = None

        if topic:
            return self._resolved(topic, strategy, strategy)

        fallback = candidates[0] if candidates else None
        return self._resolved(fallback, strategy, RULE_FALLBACK)

    def best_combo(
        self,
        candidates: list[str],
        content: SegmentedContent,
        entities: list[EnrichedEntity],
    ) -> _Combo | None:
        """Highest-scoring combination phrase found in both title and body."""
        title = content.title
        title_lower = title.lower()
        body_lower = content.body.lower()
        if not title_lower or not body_lower:
            return None

        types = {entity.name.lower(): normalize_type(entity.type) for entity in entities}
        top = candidates[:MAX_COMBO_CANDIDATES]
        best: _Combo | None = None

        for size in range(MIN_COMBO_SIZE, MAX_COMBO_SIZE + 1):
            for elements in itertools.permutations(top, size):
                same_type = self._shares_person_or_org_type(elements, types)
                for phrase in self._phrases(elements):
                    needle = phrase.lower()
                    if needle not in title_lower or needle not in body_lower:
                        continue
                    score = COMBO_BASE_SCORE + len(phrase)
                    if same_type:
                        score += SAME_TYPE_BONUS
                    if best is None or score > best.score:
                        best = _Combo(_title_slice(title, needle) or phrase, score)

        return best

    def _phrases(self, elements: tuple[str, ...]):
        alias_sets = [
            self.synonyms.aliases(element, limit=MAX_ALIASES_PER_ELEMENT)
            for element in elements
        ]
        for aliases in itertools.product(*alias_sets):
            for connectors in itertools.product(CONNECTORS, repeat=len(aliases) - 1):
                parts = [aliases[0]]
                for connector, alias in zip(connectors, aliases[1:]):
                    parts.append(connector)
                    parts.append(alias)
                yield "".join(parts)

    @staticmethod
    def _shares_person_or_org_type(
        elements: tuple[str, ...],
        types: dict[str, str],
    ) -> bool:
        element_types = {types.get(element.lower(), "") for element in elements}
        if len(element_types) != 1:
            return False
        only = next(iter(element_types))
        return bool(only) and is_person_or_organization(only)

    @staticmethod
    def _title_override(title: str) -> str | None:
        matches = [m.group(0).strip() for m in OVERRIDE_PATTERN.finditer(title)]
        if not matches:
            return None
        return max(matches, key=len)

    @staticmethod
    def _boosted_entity(
        entities: list[EnrichedEntity],
        content: SegmentedContent,
    ) -> str | None:
        prominent = [content.title.lower(), content.meta_description.lower()]
        prominent.extend(heading.lower() for heading in content.headings)

        for entity in entities:
            if not is_person_or_organization(entity.type):
                continue
            if entity.confidence_score <= BOOST_MIN_CONFIDENCE:
                continue
            name = entity.name.lower()
            if any(name in text for text in prominent):
                return entity.name
        return None

    @staticmethod
    def _by_title(candidates: list[str], title: str) -> str | None:
        title_lower = title.lower()
        best: str | None = None
        for candidate in candidates:
            if candidate.lower() in title_lower and (best is None or len(candidate) > len(best)):
                best = candidate
        return best

    @staticmethod
    def _by_frequency(candidates: list[str], body: str) -> str | None:
        best: str | None = None
        best_count = -1
        for candidate in candidates:
            count = count_occurrences(body, candidate)
            if count > best_count:
                best, best_count = candidate, count
        return best

    @staticmethod
    def _by_pattern(title: str) -> str | None:
        match = TITLE_PHRASE_PATTERN.search(title)
        return match.group(0) if match else None

    @staticmethod
    def _resolved(topic: str | None, strategy: str, rule: str) -> TopicResolution:
        logger.info(f"Main topic: {topic!r} (strategy={strategy}, rule={rule})")
        return TopicResolution(main_topic=topic, strategy=strategy, rule=rule)

    @staticmethod
    def validate_strategy(strategy: str) -> str:
        if strategy not in STRATEGIES:
            raise InputValidationError(
                f"Unknown main-topic strategy '{strategy}'",
                value=strategy,
                details={"allowed": list(STRATEGIES)},
            )
        return strategy


def _title_slice(title: str, needle: str) -> str | None:
    """The title's own spelling of a lowercase phrase found in it."""
    lowered = title.lower()
    if len(lowered) != len(title):
        return None
    start = lowered.find(needle)
    if start < 0:
        return None
    return title[start:start + len(needle)]
