"""
Candidate entity extraction.

Produces the ordered list of surface forms that the knowledge matcher
will try to link. Two strategies share one interface:

- DelegatedStrategy asks the chat-completion service for topics ordered
  from most to least important.
- LocalStrategy finds capitalized phrases and product names with regular
  expressions, then ranks them by where they appear on the page.

The strategy is chosen once, by whether an LLM client is available, and
injected into CandidateExtractor.
"""

import re
from dataclasses import dataclass, field
from typing import Protocol

from entity_intel.core.exceptions import APILLMError, ExtractionError
from entity_intel.extraction.content_segmenter import SegmentedContent
from entity_intel.llm.api_client import ChatCompletionClient
from entity_intel.llm.prompt_templates import ExtractionPrompts
from entity_intel.utils.logging import get_logger
from entity_intel.utils.text import collapse_whitespace, count_occurrences

logger = get_logger(__name__)


PRODUCT_QUALIFIERS = (
    "Pro", "Max", "Plus", "Ultra", "Elite", "Premium", "Standard", "Basic",
    "Lite", "Mini", "Air", "Studio", "Enterprise", "Professional",
)

# Common capitalized function words that are never entities on their own
STOP_WORDS = frozenset({
    "The", "And", "Or", "But", "In", "On", "At", "To", "For", "Of", "With", "By",
    "From", "This", "That", "These", "Those", "All", "Some", "Any", "Each",
    "Every", "No", "Not", "Only", "Just", "Very", "More", "Most", "Less",
    "Least", "Much", "Many", "Few", "Several", "Various", "Different", "Same",
    "Similar", "Other", "Another", "Next", "Last", "First", "Second", "Third",
    "Fourth", "Fifth", "Sixth", "Seventh", "Eighth", "Ninth", "Tenth",
    "A", "An", "If", "It", "Is", "We", "You", "Our", "Your", "Their", "How",
    "What", "When", "Where", "Why", "Who",
})

GENERIC_PATTERNS = (
    re.compile(r"^\d+$"),
    re.compile(r"^[A-Za-z]$"),
    re.compile(r"^[A-Za-z]\s*[A-Za-z]$"),
)

# Runs never cross line breaks, which separate title, meta and headings
CAPITALIZED_RUN = re.compile(r"\b[A-Z][\w'&-]*(?:[ \t]+(?:&[ \t]+)?[A-Z][\w'&-]*)*")

PRODUCT_PHRASE = re.compile(
    r"\b[A-Z]\w+(?:[ \t]+[A-Z]\w+)*[ \t]+(?i:" + "|".join(PRODUCT_QUALIFIERS) + r")\b"
)

MIN_CANDIDATE_LENGTH = 3
MAX_CANDIDATE_LENGTH = 49

# Presence weights for local ranking
TITLE_WEIGHT = 30
META_WEIGHT = 15
HEADING_WEIGHT = 10
BODY_OCCURRENCE_WEIGHT = 2

GROUP_DOMAIN = "domain"
GROUP_THREAT = "threat"
GROUP_SOLUTION = "solution"
GROUP_OTHER = "other"

THREAT_TERMS = frozenset({
    "attack", "attacks", "breach", "malware", "ransomware", "phishing",
    "threat", "threats", "vulnerability", "exploit", "fraud", "virus",
    "risk", "risks", "scam", "spam", "hack", "botnet", "trojan", "spyware",
})
SOLUTION_TERMS = frozenset({
    "software", "platform", "solution", "solutions", "service", "services",
    "tool", "tools", "app", "system", "framework", "suite", "cloud", "api",
    "firewall", "antivirus", "course", "program",
} | {q.lower() for q in PRODUCT_QUALIFIERS})
DOMAIN_TERMS = frozenset({
    "security", "marketing", "finance", "health", "education", "technology",
    "engineering", "science", "management", "optimization", "analytics",
    "commerce", "design", "law", "medicine", "research", "seo", "data",
})


@dataclass
class ScoredCandidate:
    """A locally extracted candidate with its presence score and bucket."""

    text: str
    score: int
    group: str = GROUP_OTHER


@dataclass
class CandidateExtraction:
    """Outcome of one extraction run."""

    candidates: list[str]
    method: str
    groups: dict[str, list[str]] = field(default_factory=dict)


class CandidateStrategy(Protocol):
    """Interface shared by the extraction strategies."""

    name: str

    def extract(self, content: SegmentedContent) -> CandidateExtraction:
        ...


def unique_candidates(candidates: list[str], limit: int | None = None) -> list[str]:
    """Trim, drop empties and case-insensitive duplicates, keep order."""
    seen: set[str] = set()
    result: list[str] = []

    for candidate in candidates:
        text = collapse_whitespace(candidate)
        key = text.lower()
        if not text or key in seen:
            continue
        seen.add(key)
        result.append(text)
        if limit is not None and len(result) >= limit:
            break

    return result


def classify_candidate(candidate: str) -> str:
    """Bucket a candidate by the vocabulary it uses."""
    tokens = set(re.findall(r"[a-z0-9]+", candidate.lower()))

    if tokens & THREAT_TERMS:
        return GROUP_THREAT
    if tokens & SOLUTION_TERMS:
        return GROUP_SOLUTION
    if tokens & DOMAIN_TERMS:
        return GROUP_DOMAIN
    return GROUP_OTHER


class LocalStrategy:
    """
    Pattern-based extraction that needs no external service.

    Example:
        >>> strategy = LocalStrategy()
        >>> strategy.extract(content).candidates[:3]
        ['Python Software Foundation', 'Guido van Rossum', 'PyCon']
    """

    name = "local"

    def __init__(self, max_candidates: int = 40) -> None:
        self.max_candidates = max_candidates

    def extract(self, content: SegmentedContent) -> CandidateExtraction:
        scored = self.score(content)
        groups: dict[str, list[str]] = {
            GROUP_DOMAIN: [],
            GROUP_THREAT: [],
            GROUP_SOLUTION: [],
            GROUP_OTHER: [],
        }
        for candidate in scored:
            groups[candidate.group].append(candidate.text)

        return CandidateExtraction(
            candidates=[c.text for c in scored],
            method=self.name,
            groups=groups,
        )

    def find_candidates(self, text: str) -> list[str]:
        """
        Pattern matches in extraction order, filtered and truncated.

        Args:
            text: Plain text to scan

        Returns:
            At most max_candidates unique candidates
        """
        found: list[str] = []

        for match in CAPITALIZED_RUN.finditer(text):
            phrase = self._strip_stop_words(match.group(0))
            if MIN_CANDIDATE_LENGTH <= len(phrase) <= MAX_CANDIDATE_LENGTH:
                found.append(phrase)

        for match in PRODUCT_PHRASE.finditer(text):
            found.append(match.group(0).strip())

        filtered = [
            candidate for candidate in unique_candidates(found)
            if candidate not in STOP_WORDS and not self._is_generic(candidate)
        ]
        return filtered[: self.max_candidates]

    def score(self, content: SegmentedContent) -> list[ScoredCandidate]:
        """Rank candidates by presence in title, meta, headings and body."""
        candidates = self.find_candidates(content.combined_text())

        scored = [
            ScoredCandidate(
                text=candidate,
                score=self._presence_score(candidate, content),
                group=classify_candidate(candidate),
            )
            for candidate in candidates
        ]
        # sorted() is stable, so equal scores keep extraction order
        return sorted(scored, key=lambda c: c.score, reverse=True)

    def _presence_score(self, candidate: str, content: SegmentedContent) -> int:
        needle = candidate.lower()
        score = 0

        if needle in content.title.lower():
            score += TITLE_WEIGHT
        if needle in content.meta_description.lower():
            score += META_WEIGHT
        score += HEADING_WEIGHT * sum(
            1 for heading in content.headings if needle in heading.lower()
        )
        score += BODY_OCCURRENCE_WEIGHT * count_occurrences(content.body, candidate)

        return score

    @staticmethod
    def _strip_stop_words(phrase: str) -> str:
        tokens = phrase.split()
        while tokens and tokens[0] in STOP_WORDS:
            tokens.pop(0)
        while tokens and (tokens[-1] in STOP_WORDS or tokens[-1] == "&"):
            tokens.pop()
        return " ".join(tokens)

    @staticmethod
    def _is_generic(candidate: str) -> bool:
        return any(pattern.match(candidate) for pattern in GENERIC_PATTERNS)


class DelegatedStrategy:
    """
    Extraction delegated to the chat-completion service.

    Any failure, malformed answer or empty list falls through to the
    local strategy, so callers always get candidates.
    """

    name = "delegated"

    def __init__(
        self,
        client: ChatCompletionClient,
        fallback: LocalStrategy,
        max_input_chars: int = 8000,
        max_tokens: int = 700,
        temperature: float = 0.5,
        max_candidates: int = 40,
    ) -> None:
        self.client = client
        self.fallback = fallback
        self.max_input_chars = max_input_chars
        self.max_tokens = max_tokens
        self.temperature = temperature
        self.max_candidates = max_candidates

    def extract(self, content: SegmentedContent) -> CandidateExtraction:
        text = content.combined_text(self.max_input_chars)
        if not text:
            return self.fallback.extract(content)

        try:
            candidates = self._ranked_topics(text)
        except (APILLMError, ExtractionError) as e:
            logger.warning(f"Delegated extraction failed, using local strategy: {e}")
            return self.fallback.extract(content)

        return CandidateExtraction(candidates=candidates, method=self.name)

    def _ranked_topics(self, text: str) -> list[str]:
        """
        Topics from the service, most important first.

        Raises:
            APILLMError: The service call failed
            ExtractionError: The answer has no usable topics
        """
        prompt = ExtractionPrompts.RANK_TOPICS.format(text=text)
        payload = self.client.complete_json(
            prompt["user"],
            system_prompt=prompt["system"],
            max_tokens=self.max_tokens,
            temperature=self.temperature,
        )

        raw = payload.get("entities")
        if not isinstance(raw, list):
            raise ExtractionError(
                "Answer has no 'entities' list",
                details={"keys": sorted(payload)},
            )

        candidates = unique_candidates(
            [item for item in raw if isinstance(item, str)],
            limit=self.max_candidates,
        )
        if not candidates:
            raise ExtractionError("Answer lists no usable topics")
        return candidates


class CandidateExtractor:
    """
    Extracts candidate entities with an injected strategy.

    Example:
        >>> extractor = CandidateExtractor.create(llm_client, max_candidates=40)
        >>> extractor.extract(content)
        ['Search Engine Optimization', 'Google', ...]
    """

    def __init__(self, strategy: CandidateStrategy) -> None:
        self.strategy = strategy

    @classmethod
    def create(
        cls,
        client: ChatCompletionClient | None,
        max_candidates: int = 40,
        max_input_chars: int = 8000,
        max_tokens: int = 700,
        temperature: float = 0.5,
    ) -> "CandidateExtractor":
        """Pick the delegated strategy when a client is available, else local."""
        local = LocalStrategy(max_candidates=max_candidates)
        if client is None:
            return cls(local)

        return cls(
            DelegatedStrategy(
                client=client,
                fallback=local,
                max_input_chars=max_input_chars,
                max_tokens=max_tokens,
                temperature=temperature,
                max_candidates=max_candidates,
            )
        )

    def extract(self, content: SegmentedContent) -> list[str]:
        """Ordered, unique, non-empty candidate strings."""
        return self.extract_details(content).candidates

    def extract_details(self, content: SegmentedContent) -> CandidateExtraction:
        """Candidates plus the method that produced them and local groups."""
        extraction = self.strategy.extract(content)
        logger.info(
            f"Extracted {len(extraction.candidates)} candidates ({extraction.method})")
        return extraction
