"""
Tests for content segmentation.

Tests title/meta/heading/body extraction and boilerplate removal.
"""

from entity_intel.extraction import ContentSegmenter, SegmentedContent


class TestContentSegmenter:
    """Tests for ContentSegmenter.segment."""

    def test_empty_input(self):
        """Empty or whitespace input yields all-empty content."""
        segmenter = ContentSegmenter()

        for html in ("", "   \n  ", None):
            content = segmenter.segment(html)
            assert content == SegmentedContent()
            assert content.is_empty

    def test_extracts_title_and_meta(self, sample_html):
        """Title and meta description come from the head."""
        content = ContentSegmenter().segment(sample_html)

        assert content.title == "Best SEO and PPC Course"
        assert content.meta_description == "Learn SEO and PPC with Google experts."

    def test_extracts_headings_in_order(self, sample_html):
        """h1-h3 texts are kept in document order."""
        content = ContentSegmenter().segment(sample_html)

        assert content.headings == ("Best SEO and PPC Course", "Why Google Matters")

    def test_removes_boilerplate(self, sample_html):
        """Scripts, navigation, banners, sidebars and footers never reach the body."""
        content = ContentSegmenter().segment(sample_html)

        assert "SEO and PPC Course teaches" in content.body
        for noise in ("Ignore Me Script", "Home Page", "Cookie Consent", "Sidebar", "Example Academy"):
            assert noise not in content.body

    def test_body_whitespace_collapsed(self, sample_html):
        """Body text is a single whitespace-normalized string."""
        body = ContentSegmenter().segment(sample_html).body

        assert "  " not in body
        assert "\n" not in body

    def test_largest_container_wins(self):
        """The content container with the most text supplies the body."""
        html = """
        <html><body>
            <div class="content">Short teaser</div>
            <article>This article is the long and detailed main text of the page.</article>
        </body></html>
        """

        body = ContentSegmenter().segment(html).body

        assert body == "This article is the long and detailed main text of the page."

    def test_whole_body_without_container(self):
        """Without a known container the whole body is used."""
        html = "<html><body><p>First paragraph.</p><p>Second paragraph.</p></body></html>"

        assert ContentSegmenter().segment(html).body == "First paragraph. Second paragraph."

    def test_malformed_markup(self):
        """Unclosed tags do not break segmentation."""
        html = "<html><head><title>Broken Page<body><h1>Heading<p>Body text"

        content = ContentSegmenter().segment(html)

        assert "Broken Page" in content.title

    def test_comment_section_removed(self):
        """Elements whose class marks a comment section are boilerplate."""
        html = """
        <body><article>Main story text here.
            <div class="comment">Reader Comment Spam</div>
        </article></body>
        """

        assert "Reader Comment Spam" not in ContentSegmenter().segment(html).body

    def test_consent_class_on_body_keeps_page(self):
        """Cookie plugins flag <body>; only the banner itself is removed."""
        html = """
        <html class="consent-pending"><head><title>Python Guide</title></head>
        <body class="home cookies-not-set" id="cookie-state">
            <div class="cookie-notice">Accept All Cookies</div>
            <article>
                <h1>Python Guide</h1>
                <p>Python Software Foundation maintains Python.</p>
            </article>
        </body></html>
        """

        content = ContentSegmenter().segment(html)

        assert content.title == "Python Guide"
        assert content.headings == ("Python Guide",)
        assert content.body == "Python Guide Python Software Foundation maintains Python."
        assert "Accept All Cookies" not in content.body

    def test_consent_matched_per_token(self):
        html = """
        <body><article>
            <p>Cookie recipes for everyone.</p>
            <div class="banner gdpr-consent-box">Manage preferences</div>
        </article></body>
        """

        body = ContentSegmenter().segment(html).body

        assert "Cookie recipes for everyone." in body
        assert "Manage preferences" not in body


class TestSegmentText:
    """Tests for pasted-content segmentation."""

    def test_plain_text_title_from_first_line(self):
        """First non-empty line stands in for the title."""
        text = "\n\n  Kubernetes Cluster Guide  \nKubernetes runs containers.\n"

        content = ContentSegmenter().segment_text(text)

        assert content.title == "Kubernetes Cluster Guide"
        assert content.body == "Kubernetes Cluster Guide Kubernetes runs containers."

    def test_markup_without_title_uses_heading(self):
        """Pasted markup without <title> takes its first heading."""
        text = "<article><h1>Rust Ownership</h1><p>Ownership rules explained.</p></article>"

        content = ContentSegmenter().segment_text(text)

        assert content.title == "Rust Ownership"
        assert content.headings == ("Rust Ownership",)

    def test_markup_with_title_kept(self, sample_html):
        """A real <title> is never replaced."""
        content = ContentSegmenter().segment_text(sample_html)

        assert content.title == "Best SEO and PPC Course"

    def test_derived_title_truncated(self):
        """Derived titles are capped."""
        content = ContentSegmenter().segment_text("word " * 100)

        assert len(content.title) == 200

    def test_empty_text(self):
        assert ContentSegmenter().segment_text("  ").is_empty


class TestSegmentedContent:
    """Tests for SegmentedContent helpers."""

    def test_combined_text(self):
        content = SegmentedContent(
            title="Title",
            meta_description="Meta",
            headings=("H1", "H2"),
            body="Body",
        )

        assert content.combined_text() == "Title\nMeta\nH1\nH2\nBody"
        assert content.combined_text(max_chars=8) == "Title\nMe"

    def test_word_count_and_dict(self):
        content = SegmentedContent(title="T", body="one two three")

        assert content.word_count == 3
        assert content.to_dict()["headings"] == []
