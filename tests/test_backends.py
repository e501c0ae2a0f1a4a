from __future__ import annotations

import json

import httpx
import pytest

from corroborate.backends.base import parse_fact_analysis, parse_json_block
from corroborate.backends.claude import ANTHROPIC_API_URL, ClaudeAnalyst
from corroborate.backends.exa import EXA_SEARCH_URL, ExaSearch
from corroborate.errors import EnrichmentUnavailable
from corroborate.models.source import FactCategory
from corroborate.models.synthesis import Consensus, Evidence, SynthesizedContent, Theme

ANALYSIS = {
    "keyFacts": [
        {"claim": "Rents fell 5% in 2023", "confidence": 0.85, "category": "statistic", "entities": ["NYC"]}
    ],
    "summary": "Rents fell.",
    "credibilityAssessment": "Reliable",
    "mainTopics": ["rent"],
    "sentiment": "negative",
}


def _claude_reply(text: str) -> httpx.Response:
    return httpx.Response(200, json={"content": [{"type": "text", "text": text}]})


def test_parse_json_block_strips_code_fences() -> None:
    assert parse_json_block('```json\n{"a": 1}\n```') == {"a": 1}
    assert parse_json_block('{"a": 1}') == {"a": 1}


def test_fact_analysis_schema_accepts_camel_case() -> None:
    analysis = parse_fact_analysis(json.dumps(ANALYSIS))
    [fact] = [payload.to_fact() for payload in analysis.key_facts]
    assert fact.category is FactCategory.STATISTIC
    assert fact.entities == ("NYC",)
    assert analysis.credibility_assessment == "Reliable"


@pytest.mark.parametrize(
    "raw",
    [
        "not json at all",
        json.dumps({"keyFacts": [{"claim": "x", "confidence": 3}]}),
        json.dumps({"keyFacts": [{"claim": "x", "category": "rumor"}]}),
        json.dumps(["a", "list"]),
    ],
)
def test_unusable_analysis_is_enrichment_unavailable(raw) -> None:
    with pytest.raises(EnrichmentUnavailable):
        parse_fact_analysis(raw)


async def test_claude_analyze_posts_to_messages_api() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return _claude_reply("```json\n" + json.dumps(ANALYSIS) + "\n```")

    analyst = ClaudeAnalyst(api_key="test-key", model="test-model", transport=httpx.MockTransport(handler))
    analysis = await analyst.analyze("Rents fell 5% in 2023.", "https://example.org/rents")

    assert analysis.key_facts[0].claim == "Rents fell 5% in 2023"
    [request] = seen
    assert str(request.url) == ANTHROPIC_API_URL
    assert request.headers["x-api-key"] == "test-key"
    body = json.loads(request.content)
    assert body["model"] == "test-model"
    assert "https://example.org/rents" in body["messages"][0]["content"]


async def test_claude_http_errors_become_enrichment_unavailable() -> None:
    transport = httpx.MockTransport(lambda request: httpx.Response(529, json={"error": "overloaded"}))
    analyst = ClaudeAnalyst(api_key="test-key", transport=transport)
    with pytest.raises(EnrichmentUnavailable):
        await analyst.analyze("text", "https://example.org")


async def test_claude_without_key_is_unavailable(monkeypatch) -> None:
    monkeypatch.setattr("corroborate.backends.claude.settings.anthropic_api_key", "")
    with pytest.raises(EnrichmentUnavailable):
        await ClaudeAnalyst(api_key="").analyze("text", "https://example.org")


async def test_claude_write_returns_plain_narrative() -> None:
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return _claude_reply("  Sources disagree on rents.  ")

    synthesis = SynthesizedContent(
        key_themes=[Theme("Economic Impact", [Evidence("a", "Rents fell", 0.8)], Consensus.CONFLICTING)]
    )
    analyst = ClaudeAnalyst(api_key="test-key", transport=httpx.MockTransport(handler))

    assert await analyst.write("rents", synthesis) == "Sources disagree on rents."
    assert "[Economic Impact] consensus: conflicting" in seen[0]["messages"][0]["content"]


async def test_exa_search_maps_results_to_documents() -> None:
    seen: list[httpx.Request] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(request)
        return httpx.Response(
            200,
            json={
                "results": [
                    {
                        "url": "https://example.org/a",
                        "title": "A",
                        "text": "Body of A.",
                        "publishedDate": "2024-01-02T00:00:00.000Z",
                        "author": "Jane Doe",
                    },
                    {"url": "https://example.org/empty", "title": "Empty", "text": ""},
                ]
            },
        )

    search = ExaSearch(api_key="exa-key", num_results=3, transport=httpx.MockTransport(handler))
    documents = await search.search("rents")

    assert [d.url for d in documents] == ["https://example.org/a"]
    assert documents[0].published_date == "2024-01-02T00:00:00.000Z"
    assert documents[0].author == "Jane Doe"
    [request] = seen
    assert str(request.url) == EXA_SEARCH_URL
    assert request.headers["x-api-key"] == "exa-key"
    assert json.loads(request.content)["numResults"] == 3


async def test_exa_search_propagates_http_errors() -> None:
    search = ExaSearch(
        api_key="exa-key", transport=httpx.MockTransport(lambda request: httpx.Response(401))
    )
    with pytest.raises(httpx.HTTPStatusError):
        await search.search("rents")
