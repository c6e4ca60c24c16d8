"""
Candidate expansion for URL-sourced pages.

After the main topic is chosen, a fetched page gets a second chance to
surface entities the extractor missed: shorter phrases of multi-word
candidates that the page highlights, and capitalized n-grams from the
title, meta description, headings and URL path.
"""

import re
from urllib.parse import urlparse

from entity_intel.extraction.candidate_extractor import (
    MAX_CANDIDATE_LENGTH,
    MIN_CANDIDATE_LENGTH,
    STOP_WORDS,
)
from entity_intel.extraction.content_segmenter import SegmentedContent

MIN_NGRAM_WORDS = 2
MAX_NGRAM_WORDS = 3

_PATH_SEPARATORS = re.compile(r"[-_/]+")
_WORD = re.compile(r"[A-Za-z0-9][\w'&]*")


def _capitalized(word: str) -> bool:
    return word[:1].isupper()


def _acceptable(phrase: str) -> bool:
    words = phrase.split()
    if not words or not MIN_CANDIDATE_LENGTH <= len(phrase) <= MAX_CANDIDATE_LENGTH:
        return False
    if any(word in STOP_WORDS for word in words):
        return False
    return not phrase.replace(" ", "").isdigit()


def sub_phrases(candidate: str) -> list[str]:
    """Contiguous word runs shorter than the candidate, longest first."""
    words = candidate.split()
    phrases = []
    for size in range(len(words) - 1, 0, -1):
        for start in range(len(words) - size + 1):
            phrases.append(" ".join(words[start:start + size]))
    return phrases


def capitalized_ngrams(text: str) -> list[str]:
    """2-3 word n-grams made only of capitalized words, in text order."""
    ngrams = []
    for line in text.splitlines():
        words = _WORD.findall(line)
        for start in range(len(words)):
            for size in range(MIN_NGRAM_WORDS, MAX_NGRAM_WORDS + 1):
                chunk = words[start:start + size]
                if len(chunk) == size and all(_capitalized(word) for word in chunk):
                    ngrams.append(" ".join(chunk))
    return ngrams


def url_path_text(url: str) -> str:
    """URL path as title-cased words, one line per path segment."""
    path = urlparse(url).path
    lines = []
    for segment in path.split("/"):
        words = [w for w in _PATH_SEPARATORS.split(segment) if w]
        # File extensions carry no topic
        if words:
            words[-1] = words[-1].rsplit(".", 1)[0]
        words = [w[:1].upper() + w[1:] for w in words if w and not w.isdigit()]
        if words:
            lines.append(" ".join(words))
    return "\n".join(lines)


def expand_candidates(
    candidates: list[str],
    content: SegmentedContent,
    url: str,
    limit: int = 10,
) -> list[str]:
    """
    New candidates suggested by the page's prominent text and URL.

    Args:
        candidates: Existing candidates
        content: Segmented page content
        url: Page URL
        limit: Maximum number of additions

    Returns:
        Additions only, not already present (case-insensitive), in
        discovery order
    """
    if limit <= 0:
        return []

    prominent = "\n".join([content.title, content.meta_description, *content.headings])
    prominent_lower = prominent.lower()
    seen = {candidate.lower() for candidate in candidates}
    additions: list[str] = []

    def add(phrase: str) -> bool:
        key = phrase.lower()
        if key in seen or not _acceptable(phrase):
            return False
        seen.add(key)
        additions.append(phrase)
        return len(additions) >= limit

    for candidate in candidates:
        if len(candidate.split()) < 2:
            continue
        for phrase in sub_phrases(candidate):
            if phrase.lower() in prominent_lower and add(phrase):
                return additions

    for phrase in capitalized_ngrams(prominent + "\n" + url_path_text(url)):
        if add(phrase):
            return additions

    return additions
