"""
Tests for content recommendations.
"""

from entity_intel.extraction import SegmentedContent
from entity_intel.knowledge import EnrichedEntity
from entity_intel.llm import ChatCompletionClient
from entity_intel.topics import Recommendation, RecommendationService

from tests.conftest import chat_completion_response


def make_service(fake_web) -> RecommendationService:
    client = ChatCompletionClient(
        api_key="sk-test",
        max_retries=0,
        transport=fake_web.transport,
    )
    return RecommendationService(client=client)


class TestFallbackRecommendations:
    """Tests for the heuristic recommendations."""

    def test_rarely_mentioned_entities(self):
        content = SegmentedContent(title="Python Guide", body="Python is great. Ruby exists.")
        entities = [EnrichedEntity("Python"), EnrichedEntity("Ruby")]

        recommendations = RecommendationService().recommend(content, entities)

        assert recommendations == [Recommendation(
            "Content Depth",
            "Consider expanding coverage of 'Ruby' with additional context, examples, "
            "or data to build more topical authority.",
        )]

    def test_good_coverage(self):
        content = SegmentedContent(title="Python Guide", body="Python is great.")

        recommendations = RecommendationService().recommend(content, [EnrichedEntity("Python")])

        assert len(recommendations) == 1
        assert recommendations[0].category == "Structured Data"

    def test_at_most_five(self):
        entities = [EnrichedEntity(f"Topic{i}") for i in range(8)]

        recommendations = RecommendationService().recommend(SegmentedContent(title="x"), entities)

        assert len(recommendations) == 5
        assert "Topic0" in recommendations[0].advice

    def test_to_dict(self):
        assert Recommendation("General", "Do it").to_dict() == {
            "category": "General",
            "advice": "Do it",
        }


class TestDelegatedRecommendations:
    """Tests for recommendations from the chat-completion service."""

    def test_parses_objects_and_strings(self, fake_web):
        fake_web.llm_handler = lambda body: chat_completion_response({"recommendations": [
            {"category": "Semantic Gaps", "advice": "Cover keyword research."},
            "Add an FAQ section.",
            {"category": "Empty", "advice": "  "},
            {"advice": "Link to Google documentation."},
            7,
        ]})

        service = make_service(fake_web)
        recommendations = service.recommend(
            SegmentedContent(title="SEO"), [EnrichedEntity("SEO", confidence_score=90)])
        service.client.close()

        assert recommendations == [
            Recommendation("Semantic Gaps", "Cover keyword research."),
            Recommendation("General", "Add an FAQ section."),
            Recommendation("General", "Link to Google documentation."),
        ]

    def test_prompt_lists_confident_entities(self, fake_web):
        bodies = []

        def handler(body):
            bodies.append(body)
            return chat_completion_response({"recommendations": ["Fine."]})

        fake_web.llm_handler = handler
        entities = [
            EnrichedEntity("Confident Topic", confidence_score=80),
            EnrichedEntity("Weak Topic", confidence_score=50),
        ]

        make_service(fake_web).recommend(SegmentedContent(title="Page"), entities)

        prompt = bodies[0]["messages"][-1]["content"]
        assert "Confident Topic" in prompt
        assert "Weak Topic" not in prompt

    def test_service_failure_falls_back(self, fake_web):
        content = SegmentedContent(title="Python Guide", body="Python Python")

        recommendations = make_service(fake_web).recommend(content, [EnrichedEntity("Python")])

        assert recommendations[0].category == "Structured Data"

    def test_malformed_answer_falls_back(self, fake_web):
        fake_web.llm_handler = lambda body: chat_completion_response({"advice": "one"})

        recommendations = make_service(fake_web).recommend(
            SegmentedContent(title="x"), [EnrichedEntity("Ruby")])

        assert recommendations[0].category == "Content Depth"
