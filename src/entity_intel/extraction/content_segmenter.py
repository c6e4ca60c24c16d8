"""
Content segmentation.

Turns raw (possibly malformed) markup into the structured text fields
every downstream stage reads: title, meta description, headings and the
main body text.
"""

import re
from dataclasses import dataclass, field

from bs4 import BeautifulSoup, Tag

from entity_intel.utils.logging import get_logger
from entity_intel.utils.text import collapse_whitespace

logger = get_logger(__name__)

MARKUP_PATTERN = re.compile(r"<[a-zA-Z][^>]*>")
MAX_DERIVED_TITLE_LENGTH = 200


@dataclass(frozen=True)
class SegmentedContent:
    """
    Structured text fields of one page.

    Produced once per input and never mutated afterwards.
    """

    title: str = ""
    meta_description: str = ""
    headings: tuple[str, ...] = field(default_factory=tuple)
    body: str = ""

    @property
    def is_empty(self) -> bool:
        """True when no field carries any text."""
        return not (self.title or self.meta_description or self.headings or self.body)

    @property
    def word_count(self) -> int:
        """Words in the main body."""
        return len(self.body.split())

    def combined_text(self, max_chars: int | None = None) -> str:
        """Title, meta, headings and body joined, optionally truncated."""
        parts = [self.title, self.meta_description, *self.headings, self.body]
        text = "\n".join(part for part in parts if part)
        if max_chars is not None:
            return text[:max_chars]
        return text

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {
            "title": self.title,
            "meta_description": self.meta_description,
            "headings": list(self.headings),
            "body": self.body,
        }


class ContentSegmenter:
    """
    Segments HTML into title, meta description, headings and body.

    Boilerplate (scripts, navigation, headers, footers, forms, sidebars,
    comment sections, cookie banners) is removed before headings and the
    body are read. The body comes from the content container with the
    most text.

    Example:
        >>> segmenter = ContentSegmenter()
        >>> content = segmenter.segment(html)
        >>> content.title, content.headings[:2]
    """

    # Subtrees removed outright
    REMOVE_TAGS = (
        "script",
        "style",
        "noscript",
        "template",
        "nav",
        "header",
        "footer",
        "aside",
        "form",
    )

    # Whole class/id tokens marking boilerplate
    BOILERPLATE_TOKENS = frozenset({"sidebar", "comment", "nav", "footer", "header"})

    # Document roots are never boilerplate, whatever plugins put on them
    PROTECTED_TAGS = frozenset({"html", "body"})

    # Matched within each class/id token to find consent banners
    CONSENT_PATTERN = re.compile(r"cookie|consent", re.I)

    # Content containers, highest priority first
    MAIN_CONTENT_SELECTORS = (
        "article",
        "main",
        "[role=main]",
        "[class*=post-content]",
        "[class*=entry-content]",
        "[id*=main]",
        "[class*=main]",
        "[id*=content]",
        "[class*=content]",
    )

    HEADING_TAGS = ("h1", "h2", "h3")

    def segment(self, html: str | None) -> SegmentedContent:
        """
        Segment markup into structured text fields.

        Args:
            html: Raw markup; may be empty or malformed

        Returns:
            SegmentedContent; all-empty for empty input
        """
        if not html or not html.strip():
            return SegmentedContent()

        soup = BeautifulSoup(html, "html.parser")

        title = self._extract_title(soup)
        meta_description = self._extract_meta_description(soup)

        self._remove_boilerplate(soup)

        headings = tuple(
            text
            for text in (self._get_text(h) for h in soup.find_all(self.HEADING_TAGS))
            if text
        )

        body = self._extract_body(soup)

        return SegmentedContent(
            title=title,
            meta_description=meta_description,
            headings=headings,
            body=body,
        )

    def segment_text(self, text: str | None) -> SegmentedContent:
        """
        Segment pasted content, which may be markup or plain text.

        Pasted content rarely has a ``<title>``; the first heading, or
        else the first non-empty line, stands in for it.
        """
        if not text or not text.strip():
            return SegmentedContent()

        if MARKUP_PATTERN.search(text):
            content = self.segment(text)
        else:
            content = SegmentedContent(body=collapse_whitespace(text))

        if content.title:
            return content

        if content.headings:
            title = content.headings[0]
        else:
            title = next(
                (collapse_whitespace(line) for line in text.splitlines() if line.strip()),
                "",
            )
            if MARKUP_PATTERN.search(title):
                title = collapse_whitespace(BeautifulSoup(title, "html.parser").get_text(" "))

        return SegmentedContent(
            title=title[:MAX_DERIVED_TITLE_LENGTH],
            meta_description=content.meta_description,
            headings=content.headings,
            body=content.body,
        )

    def _extract_title(self, soup: BeautifulSoup) -> str:
        title_tag = soup.find("title")
        if title_tag is None:
            return ""
        return collapse_whitespace(title_tag.get_text())

    def _extract_meta_description(self, soup: BeautifulSoup) -> str:
        for meta in soup.find_all("meta"):
            name = (meta.get("name") or "").strip().lower()
            if name == "description":
                return collapse_whitespace(meta.get("content") or "")
        return ""

    def _remove_boilerplate(self, soup: BeautifulSoup) -> None:
        """Remove boilerplate subtrees in place."""
        doomed = [
            tag for tag in soup.find_all(True)
            if self._is_boilerplate(tag)
        ]

        for tag in doomed:
            # Descendants of an already removed subtree are gone too
            if not tag.decomposed:
                tag.decompose()

    def _is_boilerplate(self, tag: Tag) -> bool:
        if tag.name in self.PROTECTED_TAGS:
            return False
        if tag.name in self.REMOVE_TAGS:
            return True

        classes = tag.get("class") or []
        if isinstance(classes, str):
            classes = classes.split()
        element_id = tag.get("id") or ""
        if not isinstance(element_id, str):
            element_id = " ".join(element_id)

        tokens = {c.lower() for c in classes} | {t.lower() for t in element_id.split()}
        if tokens & self.BOILERPLATE_TOKENS:
            return True

        if any(self.CONSENT_PATTERN.search(token) for token in tokens):
            return True

        return (tag.get("aria-label") or "").lower() == "cookieconsent"

    def _extract_body(self, soup: BeautifulSoup) -> str:
        """Text of the content container with the most text, else the whole body."""
        best_node: Tag | None = None
        best_length = 0

        for selector in self.MAIN_CONTENT_SELECTORS:
            for node in soup.select(selector):
                length = len(node.get_text().strip())
                if length > best_length:
                    best_length = length
                    best_node = node

        if best_node is None:
            best_node = soup.find("body") or soup
            logger.debug("No content container found, using whole body")

        return self._get_text(best_node)

    def _get_text(self, element: Tag | BeautifulSoup) -> str:
        return collapse_whitespace(element.get_text(separator=" "))
