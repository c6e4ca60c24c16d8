"""
Tests for main-topic resolution, synonyms, expansion, irrelevance and tips.
"""

import pytest

from entity_intel.core.exceptions import InputValidationError
from entity_intel.extraction import SegmentedContent
from entity_intel.knowledge import EnrichedEntity
from entity_intel.topics import (
    SynonymTable,
    TopicResolver,
    expand_candidates,
    find_entity,
    find_irrelevant_entities,
    generate_salience_tips,
    is_irrelevant,
)
from entity_intel.topics.expansion import capitalized_ngrams, sub_phrases, url_path_text


@pytest.fixture
def seo_content() -> SegmentedContent:
    return SegmentedContent(
        title="Best SEO and PPC Course",
        meta_description="Learn SEO and PPC with Google experts.",
        headings=("Best SEO and PPC Course", "Why Google Matters"),
        body=(
            "Our SEO and PPC Course teaches search marketing from scratch. "
            "The SEO and PPC Course covers keyword research and Google Ads."
        ),
    )


class TestSynonymTable:
    """Tests for SynonymTable."""

    def test_lookup_is_symmetric(self):
        table = SynonymTable.default()

        assert table.group("SEO") == table.group("search engine optimization")
        assert "seo" in table.group("Search Engine Optimization")

    def test_aliases_start_with_term(self):
        table = SynonymTable.default()

        assert table.aliases("SEO") == ("SEO", "search engine optimization")
        assert table.aliases("pay-per-click") == ("pay-per-click", "ppc", "pay per click")

    def test_aliases_limit(self):
        assert SynonymTable.default().aliases("PPC", limit=2) == ("PPC", "pay per click")

    def test_unknown_term(self):
        table = SynonymTable.default()

        assert table.aliases("Kubernetes") == ("Kubernetes",)
        assert "Kubernetes" not in table
        assert "SEO" in table

    def test_overlapping_groups_merged(self):
        table = SynonymTable.default([["seo", "organic search"]])

        assert "search engine optimization" in table.group("organic search")
        assert "organic search" in table.group("search engine optimization")


class TestStrictStrategy:
    """Tests for the default combination strategy."""

    def test_combination_of_candidates(self, seo_content):
        resolution = TopicResolver().resolve(["SEO", "PPC", "Course"], seo_content, [])

        assert resolution.main_topic == "SEO and PPC Course"
        assert resolution.strategy == "strict"
        assert resolution.rule == "combo"

    def test_combo_score(self, seo_content):
        combo = TopicResolver().best_combo(["SEO", "PPC", "Course"], seo_content, [])

        assert combo.score == 200 + len("SEO and PPC Course")

    def test_synonym_variants(self):
        content = SegmentedContent(
            title="SEO and PPC Guide",
            body="A practical seo and ppc handbook.",
        )

        resolution = TopicResolver().resolve(
            ["search engine optimization", "PPC"], content, [])

        assert resolution.main_topic == "SEO and PPC"

    def test_same_type_bonus(self):
        content = SegmentedContent(
            title="Google and Microsoft partnership",
            body="Google and Microsoft announced a deal.",
        )
        entities = [
            EnrichedEntity("Google", type="Corporation", confidence_score=50),
            EnrichedEntity("Microsoft", type="Corporation", confidence_score=50),
        ]

        combo = TopicResolver().best_combo(["Google", "Microsoft"], content, entities)

        assert combo.phrase == "Google and Microsoft"
        assert combo.score == 200 + len("Google and Microsoft") + 100

    def test_prominent_person_boosted(self):
        content = SegmentedContent(
            title="Gordon Ramsay Recipes for Beginners",
            body="Gordon Ramsay shares recipes.",
        )
        entities = [EnrichedEntity("Gordon Ramsay", type="Person", confidence_score=90)]

        resolution = TopicResolver().resolve(["Recipes", "Gordon Ramsay"], content, entities)

        assert resolution.main_topic == "Gordon Ramsay"
        assert resolution.rule == "entity_boost"

    def test_boost_requires_confidence_above_60(self):
        content = SegmentedContent(title="Gordon Ramsay Recipes", body="Recipes")
        entities = [EnrichedEntity("Gordon Ramsay", type="Person", confidence_score=60)]

        resolution = TopicResolver().resolve(["Recipes"], content, entities)

        assert resolution.rule != "entity_boost"

    def test_fallback_to_first_candidate(self):
        content = SegmentedContent(title="Nothing matches", body="Nothing at all")

        resolution = TopicResolver().resolve(["Alpha", "Beta"], content, [])

        assert resolution.main_topic == "Alpha"
        assert resolution.rule == "fallback"

    def test_no_candidates(self):
        resolution = TopicResolver().resolve([], SegmentedContent(title="Empty"), [])

        assert resolution.main_topic is None
        assert resolution.rule == "fallback"


class TestOtherStrategies:
    """Tests for title, frequent and pattern strategies."""

    def test_override_applies_to_every_strategy(self):
        content = SegmentedContent(title="Advanced Python Programming Course | Academy")

        for strategy in ("strict", "title", "frequent", "pattern"):
            resolution = TopicResolver().resolve(["Python"], content, [], strategy=strategy)
            assert resolution.main_topic == "Advanced Python Programming Course"
            assert resolution.rule == "override"

    def test_override_needs_two_capitalized_words(self, seo_content):
        resolution = TopicResolver().resolve(["SEO", "PPC", "Course"], seo_content, [])

        assert resolution.rule != "override"

    def test_title_strategy_longest(self):
        content = SegmentedContent(title="Python Programming for Beginners")

        resolution = TopicResolver().resolve(
            ["Python", "Python Programming", "Django"], content, [], strategy="title")

        assert resolution.main_topic == "Python Programming"
        assert resolution.rule == "title"

    def test_frequent_strategy(self):
        content = SegmentedContent(title="Web frameworks", body="Django Flask Django Django Flask")

        resolution = TopicResolver().resolve(["Flask", "Django"], content, [], strategy="frequent")

        assert resolution.main_topic == "Django"

    def test_frequent_ties_keep_rank(self):
        content = SegmentedContent(title="x", body="Flask Django")

        resolution = TopicResolver().resolve(["Flask", "Django"], content, [], strategy="frequent")

        assert resolution.main_topic == "Flask"

    def test_pattern_strategy(self):
        content = SegmentedContent(title="learn Machine Learning Basics today")

        resolution = TopicResolver().resolve(["ML"], content, [], strategy="pattern")

        assert resolution.main_topic == "Machine Learning Basics"
        assert resolution.rule == "pattern"

    def test_pattern_without_match_falls_back(self):
        content = SegmentedContent(title="all lowercase title")

        resolution = TopicResolver().resolve(["ML"], content, [], strategy="pattern")

        assert resolution.main_topic == "ML"
        assert resolution.rule == "fallback"

    def test_unknown_strategy(self, seo_content):
        with pytest.raises(InputValidationError):
            TopicResolver().resolve(["SEO"], seo_content, [], strategy="random")

        with pytest.raises(InputValidationError):
            TopicResolver(default_strategy="random")


class TestExpansion:
    """Tests for URL-sourced candidate expansion."""

    def test_sub_phrases(self):
        assert sub_phrases("Advanced Python Programming") == [
            "Advanced Python", "Python Programming", "Advanced", "Python", "Programming",
        ]

    def test_capitalized_ngrams(self):
        assert capitalized_ngrams("Python Programming Guide\nlearn Django Fast") == [
            "Python Programming",
            "Python Programming Guide",
            "Programming Guide",
            "Django Fast",
        ]

    def test_url_path_text(self):
        assert url_path_text("https://x.com/blog/2024/seo-tips.html") == "Blog\nSeo Tips"

    def test_expand_candidates(self):
        content = SegmentedContent(
            title="Python Programming Guide",
            headings=("Learn Django",),
        )

        additions = expand_candidates(
            ["Advanced Python Programming"],
            content,
            "https://example.com/courses/web-scraping-basics.html",
        )

        assert additions == [
            "Python Programming",
            "Python",
            "Programming",
            "Python Programming Guide",
            "Programming Guide",
            "Learn Django",
            "Web Scraping",
            "Web Scraping Basics",
            "Scraping Basics",
        ]

    def test_expansion_limit_and_existing(self):
        content = SegmentedContent(title="Python Programming Guide")

        additions = expand_candidates(
            ["Advanced Python Programming", "python"], content, "https://example.com/", limit=2)

        assert additions == ["Python Programming", "Programming"]

    def test_zero_limit(self):
        assert expand_candidates(["A B"], SegmentedContent(title="A B"), "https://e.com", limit=0) == []


class TestIrrelevance:
    """Tests for weakly connected entity detection."""

    @pytest.fixture
    def content(self) -> SegmentedContent:
        return SegmentedContent(
            title="Python Guide",
            headings=("Install Django",),
            body="Python is great. Flask is small. Django is big. Flask again. Rails once.",
        )

    def test_single_body_mention_is_irrelevant(self, content):
        assert is_irrelevant("Rails", content)
        assert is_irrelevant("Ruby", content)

    def test_two_body_mentions_are_relevant(self, content):
        assert not is_irrelevant("Flask", content)

    def test_title_and_heading_mentions_are_relevant(self, content):
        assert not is_irrelevant("Python", content)
        assert not is_irrelevant("Django", content)

    def test_find_irrelevant_keeps_order(self, content):
        entities = [EnrichedEntity(name) for name in ("Ruby", "Python", "Rails", "Flask")]

        assert find_irrelevant_entities(entities, content) == ["Ruby", "Rails"]

    def test_find_entity(self):
        entities = [EnrichedEntity("Python"), EnrichedEntity("Django")]

        assert find_entity(entities, "django").name == "Django"
        assert find_entity(entities, "Flask") is None
        assert find_entity(entities, None) is None


class TestSalienceTips:
    """Tests for salience tips."""

    def test_no_topic(self):
        assert generate_salience_tips(None, [], []) == []

    def test_person_with_contextual_entities(self):
        entities = [
            EnrichedEntity("Gordon Ramsay", type="Person"),
            EnrichedEntity("London", type="City"),
            EnrichedEntity("Hell's Kitchen", type="TVSeries"),
            EnrichedEntity("Knife", type="Product"),
        ]

        tips = generate_salience_tips("Gordon Ramsay", entities, ["Knife"])

        assert len(tips) == 3
        assert "Gordon Ramsay" in tips[0]
        assert "London, Hell's Kitchen" in tips[1]
        assert "Knife" not in tips[1]
        assert tips[2].startswith("Add depth about 'Gordon Ramsay'")

    def test_irrelevant_entities_tip(self):
        entities = [EnrichedEntity("Python", type="ProgrammingLanguage"), EnrichedEntity("Ruby")]

        tips = generate_salience_tips("Python", entities, ["Ruby"])

        assert len(tips) == 3
        assert tips[1].startswith("Consider aligning or integrating")
        assert "Ruby" in tips[1]

    def test_minimal_tips(self):
        tips = generate_salience_tips("Python", [EnrichedEntity("Python")], [])

        assert len(tips) == 2
        assert tips[-1].startswith("Add depth about 'Python'")
