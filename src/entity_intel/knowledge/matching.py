"""
Similarity scoring between a candidate and knowledge-source labels.

Scores are unbounded heuristics on a roughly 0-120 scale. An exact
case-insensitive label match always scores 100 and receives no further
adjustments. Every other label is scored by tier (label contains the
candidate, candidate contains the label, token overlap) and then
adjusted.
"""

import re
from urllib.parse import quote_plus

EXACT_MATCH_SCORE = 100.0
LABEL_CONTAINS_SCORE = 80.0
CANDIDATE_CONTAINS_SCORE = 70.0
TOKEN_OVERLAP_WEIGHT = 60.0

PROPER_NOUN_BONUS = 10.0
LONG_TITLE_PENALTY = 20.0
DISAMBIGUATION_PENALTY = 50.0
REDIRECT_OR_STUB_PENALTY = 30.0
DESCRIPTION_OVERLAP_WEIGHT = 20.0

# Encyclopedia lookups verify strong titles against the article lead
VERIFICATION_TRIGGER = 70.0
VERIFICATION_BONUS = 20.0
VERIFICATION_PENALTY = 30.0
VERIFICATION_TOKEN_RATIO = 0.5

ENCYCLOPEDIA_ACCEPT_SCORE = 50.0
LINKED_ITEM_ACCEPT_SCORE = 50.0
KB_SEARCH_ACCEPT_SCORE = 60.0
KNOWLEDGE_GRAPH_ACCEPT_SCORE = 60.0

SEARCH_FALLBACK_URL = "https://www.google.com/search?q="

_PROPER_NOUN_START = re.compile(r"^[A-Z][a-z]")
_TOKEN_EDGE_PUNCTUATION = "()[]{}\"'.,;:!?"


def word_tokens(text: str) -> list[str]:
    """Lowercased whitespace tokens with surrounding punctuation removed."""
    tokens = (token.strip(_TOKEN_EDGE_PUNCTUATION) for token in text.lower().split())
    return [token for token in tokens if token]


def token_overlap_ratio(candidate: str, other: str) -> float:
    """Share of the candidate's distinct tokens that also occur in ``other``."""
    candidate_tokens = set(word_tokens(candidate))
    if not candidate_tokens:
        return 0.0
    other_tokens = set(word_tokens(other))
    return len(candidate_tokens & other_tokens) / len(candidate_tokens)


def is_exact_match(candidate: str, label: str) -> bool:
    return bool(candidate.strip()) and candidate.strip().lower() == label.strip().lower()


def _tier_score(candidate: str, label: str) -> float:
    needle = candidate.strip().lower()
    haystack = label.strip().lower()

    if not needle or not haystack:
        return 0.0
    if needle in haystack:
        return LABEL_CONTAINS_SCORE
    if haystack in needle:
        return CANDIDATE_CONTAINS_SCORE
    return token_overlap_ratio(candidate, label) * TOKEN_OVERLAP_WEIGHT


def calculate_encyclopedia_match_score(candidate: str, title: str) -> float:
    """
    Score an encyclopedia article title against a candidate.

    Args:
        candidate: Candidate surface form
        title: Article title returned by the search

    Returns:
        Similarity score; 100 for an exact match
    """
    if is_exact_match(candidate, title):
        return EXACT_MATCH_SCORE

    score = _tier_score(candidate, title)

    if _PROPER_NOUN_START.match(title):
        score += PROPER_NOUN_BONUS
    if len(title) > 2 * len(candidate.strip()):
        score -= LONG_TITLE_PENALTY

    lowered = title.lower()
    if "disambiguation" in lowered:
        score -= DISAMBIGUATION_PENALTY
    if "redirect" in lowered or "stub" in lowered:
        score -= REDIRECT_OR_STUB_PENALTY

    return score


def calculate_kb_match_score(candidate: str, label: str, description: str = "") -> float:
    """
    Score a knowledge-base label and description against a candidate.

    Used for both Wikidata items and Knowledge Graph results. The
    description adds up to 20 points in proportion to how many of the
    candidate's tokens it mentions.
    """
    if is_exact_match(candidate, label):
        return EXACT_MATCH_SCORE

    score = _tier_score(candidate, label)
    if description:
        score += token_overlap_ratio(candidate, description) * DESCRIPTION_OVERLAP_WEIGHT
    return score


def verify_against_extract(candidate: str, extract: str) -> bool:
    """
    True when an article lead supports the candidate.

    The lead must contain the full candidate, or at least half of its
    tokens.
    """
    if not extract:
        return False
    if candidate.strip().lower() in extract.lower():
        return True
    return token_overlap_ratio(candidate, extract) >= VERIFICATION_TOKEN_RATIO


def apply_verification(score: float, verified: bool) -> float:
    return score + VERIFICATION_BONUS if verified else score - VERIFICATION_PENALTY


def product_ontology_slugs(candidate: str) -> list[str]:
    """
    Slug variants probed on the product ontology, in probe order.

    Title_Case_With_Underscores, lowercase-with-hyphens,
    lowercase_with_underscores, Capitalized_first_word, UPPER_CASE;
    duplicates removed keeping first occurrence.
    """
    words = candidate.split()
    lowered = [word.lower() for word in words]
    if not words:
        return []

    variants = [
        "_".join(word[:1].upper() + word[1:] for word in lowered),
        "-".join(lowered),
        "_".join(lowered),
        "_".join([lowered[0][:1].upper() + lowered[0][1:]] + lowered[1:]),
        "_".join(word.upper() for word in words),
    ]

    slugs: list[str] = []
    for variant in variants:
        if variant and variant not in slugs:
            slugs.append(variant)
    return slugs


def search_fallback_url(candidate: str) -> str:
    """Plain web search URL used when no Knowledge Graph entity matched."""
    return SEARCH_FALLBACK_URL + quote_plus(candidate)
