"""
Shared pytest fixtures for Entity Intelligence tests.

Provides reusable fixtures for:
- Configuration and settings
- Sample pages
- A fake knowledge web served through httpx.MockTransport
- Global state resets
"""

import json
import tempfile
from pathlib import Path
from typing import Any, Callable, Generator

import httpx
import pytest

from entity_intel.config import Settings, reset_settings
from entity_intel.utils.logging import reset_logging
from entity_intel.utils.metrics import Metrics


@pytest.fixture(autouse=True)
def reset_global_state(monkeypatch):
    """
    Reset global settings, metrics and logging around each test.

    API keys are removed from the environment so no test reaches a real
    service by accident.
    """
    monkeypatch.delenv("OPENAI_API_KEY", raising=False)
    monkeypatch.delenv("GOOGLE_KG_API_KEY", raising=False)
    reset_settings()
    Metrics.reset()
    yield
    reset_settings()
    Metrics.reset()
    reset_logging()


@pytest.fixture
def temp_dir() -> Generator[Path, None, None]:
    """Provide a temporary directory that's cleaned up after the test."""
    with tempfile.TemporaryDirectory() as tmpdir:
        yield Path(tmpdir)


@pytest.fixture
def test_settings() -> Settings:
    """
    Provide test settings.

    No throttling delay and no LLM, so runs are fast and local.
    """
    return Settings(
        knowledge={"rate_limit_delay_seconds": 0.0},
        llm={"enabled": False},
    )


@pytest.fixture
def sample_html() -> str:
    """Provide a course landing page with boilerplate around the content."""
    return """
    <!DOCTYPE html>
    <html lang="en">
    <head>
        <meta charset="UTF-8">
        <meta name="description" content="Learn SEO and PPC with Google experts.">
        <title>Best SEO and PPC Course</title>
        <script>var tracking = "Ignore Me Script";</script>
    </head>
    <body>
        <header>
            <nav>
                <a href="/home">Home Page</a>
                <a href="/about">About Us</a>
            </nav>
        </header>
        <div class="cookie-banner">We use Cookie Consent Manager cookies.</div>
        <main>
            <article>
                <h1>Best SEO and PPC Course</h1>
                <p>Our SEO and PPC Course teaches search marketing from scratch.
                Students learn how Google ranks pages and how paid campaigns work.</p>
                <h2>Why Google Matters</h2>
                <p>The SEO and PPC Course covers keyword research, Google Ads and
                analytics. Every module ends with a practical project.</p>
            </article>
        </main>
        <aside class="sidebar"><p>Related Sidebar Links</p></aside>
        <footer>
            <p>&copy; 2024 Example Academy</p>
        </footer>
    </body>
    </html>
    """


def _opensearch_url(title: str) -> str:
    return "https://en.wikipedia.org/wiki/" + title.replace(" ", "_")


class FakeKnowledgeWeb:
    """
    In-memory stand-in for every external HTTP service.

    Tests fill the dictionaries, then hand ``transport`` to the code
    under test. Unknown requests get a 404.
    """

    def __init__(self) -> None:
        self.pages: dict[str, str] = {}
        self.wikipedia_search: dict[str, list[str]] = {}
        self.wikipedia_extracts: dict[str, str] = {}
        self.wikipedia_items: dict[str, str] = {}
        self.wikidata_entities: dict[str, tuple[str, str]] = {}
        self.wikidata_search: dict[str, list[dict]] = {}
        self.kg_results: dict[str, list[dict]] = {}
        self.ontology_urls: set[str] = set()
        self.llm_handler: Callable[[dict], httpx.Response] | None = None
        self.failing_hosts: set[str] = set()
        # Verbatim JSON answers keyed by the "prop" or "action" parameter
        self.raw_answers: dict[str, Any] = {}
        self.requests: list[httpx.Request] = []

    @property
    def transport(self) -> httpx.MockTransport:
        return httpx.MockTransport(self.handle)

    def requested_urls(self, host: str | None = None, method: str | None = None) -> list[str]:
        return [
            str(request.url) for request in self.requests
            if (host is None or request.url.host == host)
            and (method is None or request.method == method)
        ]

    def handle(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        host = request.url.host

        if host in self.failing_hosts:
            raise httpx.ConnectError("connection refused", request=request)

        if host == "en.wikipedia.org":
            return self._wikipedia(request)
        if host == "www.wikidata.org":
            return self._wikidata(request)
        if host == "kgsearch.googleapis.com":
            return self._knowledge_graph(request)
        if host == "www.productontology.org":
            status = 200 if str(request.url) in self.ontology_urls else 404
            return httpx.Response(status)
        if host == "api.openai.com":
            if self.llm_handler is None:
                return httpx.Response(500)
            return self.llm_handler(json.loads(request.content))

        url = str(request.url)
        if url in self.pages:
            return httpx.Response(
                200,
                text=self.pages[url],
                headers={"content-type": "text/html; charset=utf-8"},
            )
        return httpx.Response(404, text="Not Found")

    def _raw_answer(self, request: httpx.Request) -> httpx.Response | None:
        params = request.url.params
        key = params.get("prop") or params.get("action")
        if key in self.raw_answers:
            return httpx.Response(200, json=self.raw_answers[key])
        return None

    def _wikipedia(self, request: httpx.Request) -> httpx.Response:
        raw = self._raw_answer(request)
        if raw is not None:
            return raw
        params = request.url.params
        if params.get("action") == "opensearch":
            titles = self.wikipedia_search.get(params["search"], [])
            return httpx.Response(200, json=[
                params["search"],
                titles,
                ["" for _ in titles],
                [_opensearch_url(t) for t in titles],
            ])

        title = params.get("titles", "")
        page: dict = {"title": title}
        if params.get("prop") == "extracts":
            page["extract"] = self.wikipedia_extracts.get(title, "")
        elif params.get("prop") == "pageprops" and title in self.wikipedia_items:
            page["pageprops"] = {"wikibase_item": self.wikipedia_items[title]}
        return httpx.Response(200, json={"query": {"pages": {"1": page}}})

    def _wikidata(self, request: httpx.Request) -> httpx.Response:
        raw = self._raw_answer(request)
        if raw is not None:
            return raw
        params = request.url.params
        if params.get("action") == "wbgetentities":
            item_id = params["ids"]
            label, description = self.wikidata_entities.get(item_id, ("", ""))
            return httpx.Response(200, json={"entities": {item_id: {
                "labels": {"en": {"value": label}},
                "descriptions": {"en": {"value": description}},
            }}})
        return httpx.Response(200, json={
            "search": self.wikidata_search.get(params.get("search", ""), []),
        })

    def _knowledge_graph(self, request: httpx.Request) -> httpx.Response:
        query = request.url.params.get("query", "")
        return httpx.Response(200, json={
            "itemListElement": [
                {"result": result} for result in self.kg_results.get(query, [])
            ],
        })


@pytest.fixture
def fake_web() -> FakeKnowledgeWeb:
    """Provide an empty fake knowledge web."""
    return FakeKnowledgeWeb()


def chat_completion_response(content: dict) -> httpx.Response:
    """A chat-completion answer whose message content is ``content`` as JSON."""
    return httpx.Response(200, json={
        "choices": [{"message": {"role": "assistant", "content": json.dumps(content)}}],
    })
