from __future__ import annotations

import asyncio

import pytest
from conftest import GENERATED_AT, TODAY, make_source

from corroborate.backends.base import FactAnalysis, FactPayload
from corroborate.errors import EnrichmentUnavailable, InputError
from corroborate.models.source import FactCategory, RetrievedDocument, SourceType
from corroborate.models.synthesis import Consensus, SynthesizedContent
from corroborate.orchestrator.pipeline import (
    analyze_source,
    build_artifact,
    enrich_narrative,
    parse_sources,
    prepare_sources,
    run_research,
)

DOCUMENTS = [
    RetrievedDocument(
        url="https://www.reuters.com/markets/housing",
        title="Housing market shifts",
        text="Home prices rose 8% in suburban counties. The study used county data.",
        published_date="2024-06-01",
        author="Jane A. Doe",
    ),
    RetrievedDocument(
        url="https://example.com/blog/rents",
        title="Rents in the city",
        text="I think urban rents will decrease by 5% next year.",
    ),
]


class StaticAnalyzer:
    name = "static"

    def __init__(self, claim: str = "Analyzer claim about the market") -> None:
        self.claim = claim
        self.calls: list[str] = []

    async def analyze(self, text: str, url: str) -> FactAnalysis:
        self.calls.append(url)
        return FactAnalysis(
            key_facts=[FactPayload(claim=f"{self.claim} ({url})", confidence=0.9, category=FactCategory.CLAIM)],
            summary="LLM summary",
        )


class FailingAnalyzer:
    name = "failing"

    async def analyze(self, text: str, url: str) -> FactAnalysis:
        raise EnrichmentUnavailable("bad json")


class SlowAnalyzer:
    name = "slow"

    async def analyze(self, text: str, url: str) -> FactAnalysis:
        await asyncio.sleep(5)
        return FactAnalysis()


class CancellingAnalyzer:
    name = "cancelling"

    async def analyze(self, text: str, url: str) -> FactAnalysis:
        raise asyncio.CancelledError()


class StaticSearch:
    name = "static-search"

    def __init__(self, documents: list[RetrievedDocument]) -> None:
        self.documents = documents

    async def search(self, query: str) -> list[RetrievedDocument]:
        return list(self.documents)


class StaticWriter:
    name = "static-writer"

    async def write(self, query: str, synthesis: SynthesizedContent) -> str:
        return f"Narrative about {query}"


class FailingWriter:
    name = "failing-writer"

    async def write(self, query: str, synthesis: SynthesizedContent) -> str:
        raise EnrichmentUnavailable("timeout")


# parse_sources


def test_parse_sources_reads_camel_case(housing_payload) -> None:
    sources = parse_sources(housing_payload["query"], housing_payload["sources"])
    assert [s.id for s in sources] == ["s1", "s2", "s3"]
    assert sources[0].source_type is SourceType.NEWS
    assert sources[0].key_facts[0].confidence == 0.9


@pytest.mark.parametrize(
    "query, records, message",
    [
        ("", [{"id": "a", "url": "u"}], "query"),
        ("q", [], "At least one source"),
        ("q", [{"url": "u"}], "malformed"),
        ("q", [{"id": "a", "url": "u", "credibilityScore": 1.5}], "malformed"),
        ("q", [{"id": "a", "url": "u", "sourceType": "podcast"}], "malformed"),
        ("q", [{"id": "a", "url": "u", "keyFacts": ["just a string"]}], "malformed"),
        ("q", [{"id": "a", "url": "u", "keyFacts": [{"claim": "c", "confidence": 7}]}], "malformed"),
        ("q", [{"id": "a", "url": "u"}, {"id": "a", "url": "v"}], "Duplicate"),
        ("q", ["not a record"], "not an object"),
    ],
)
def test_parse_sources_rejects_bad_input(query, records, message) -> None:
    with pytest.raises(InputError, match=message):
        parse_sources(query, records)


# analyze_source


def test_source_without_text_is_degraded_to_zero_credibility() -> None:
    analyzed = analyze_source(make_source("a", content="", credibility=0.9))

    assert analyzed.quality.degraded
    assert analyzed.source.credibility_score == 0.0


def test_assessable_source_keeps_supplied_credibility() -> None:
    analyzed = analyze_source(make_source("a", ["Rents rose in the city."], credibility=0.9))

    assert not analyzed.quality.degraded
    assert analyzed.source.credibility_score == 0.9
    assert analyzed.source.key_facts[0].claim == "Rents rose in the city."


# prepare_sources


async def test_prepare_sources_keeps_input_order_and_scores_quality() -> None:
    analyzed = await prepare_sources(DOCUMENTS, today=TODAY)

    assert [a.source.id for a in analyzed] == ["s1", "s2"]
    first, second = (a.source for a in analyzed)
    assert first.source_type is SourceType.NEWS
    assert first.credibility_score == analyzed[0].quality.credibility_score
    assert first.credibility_score > second.credibility_score
    assert first.key_facts[0].category is FactCategory.STATISTIC
    assert analyzed[1].quality.bias_indicators == ["personal view"]


async def test_prepare_sources_drops_repeated_urls() -> None:
    analyzed = await prepare_sources([DOCUMENTS[0], DOCUMENTS[1], DOCUMENTS[0]], today=TODAY)
    assert [a.source.url for a in analyzed] == [DOCUMENTS[0].url, DOCUMENTS[1].url]


async def test_analyzer_facts_replace_heuristic_facts() -> None:
    analyzer = StaticAnalyzer()
    analyzed = await prepare_sources(DOCUMENTS, analyzer=analyzer, today=TODAY)

    assert sorted(analyzer.calls) == sorted(d.url for d in DOCUMENTS)
    assert analyzed[0].source.key_facts[0].claim.startswith("Analyzer claim")
    assert analyzed[0].extraction.summary == "LLM summary"


@pytest.mark.parametrize("analyzer", [FailingAnalyzer(), SlowAnalyzer()])
async def test_enrichment_failures_fall_back_to_heuristics(analyzer) -> None:
    enriched = await prepare_sources(DOCUMENTS, analyzer=analyzer, timeout=0.05, today=TODAY)
    plain = await prepare_sources(DOCUMENTS, today=TODAY)
    assert [a.source for a in enriched] == [a.source for a in plain]


async def test_cancellation_is_not_swallowed() -> None:
    with pytest.raises(asyncio.CancelledError):
        await prepare_sources(DOCUMENTS, analyzer=CancellingAnalyzer(), today=TODAY)


# build_artifact


def test_housing_artifact(housing_sources) -> None:
    artifact = build_artifact(
        "remote work housing", housing_sources, "apa", today=TODAY, generated_at=GENERATED_AT
    )

    [theme] = artifact.synthesis.key_themes
    assert theme.label == "Economic Impact"
    assert theme.consensus is Consensus.CONFLICTING
    assert len(artifact.synthesis.controversies) == 1
    assert artifact.report.metadata.source_count == 3
    assert [e.id for e in artifact.bibliography.entries] == ["s3", "s1", "s2"]
    assert artifact.bibliography.entries[1].formatted.startswith("Doe, J. A. (2023).")
    assert artifact.citation_warnings == ["Citation s3: At least one author is required"]


def test_artifact_is_deterministic(housing_sources) -> None:
    first = build_artifact("remote work housing", housing_sources, "mla", "json", today=TODAY, generated_at=GENERATED_AT)
    second = build_artifact("remote work housing", housing_sources, "mla", "json", today=TODAY, generated_at=GENERATED_AT)
    assert first.to_payload() == second.to_payload()


def test_artifact_payload_uses_camel_case(housing_sources) -> None:
    payload = build_artifact(
        "remote work housing", housing_sources, today=TODAY, generated_at=GENERATED_AT
    ).to_payload()
    assert set(payload) == {"report", "synthesis", "bibliography", "export", "citationWarnings"}
    assert "executiveSummary" in payload["report"]
    assert payload["synthesis"]["keyThemes"][0]["consensus"] == "conflicting"
    assert payload["bibliography"]["sortOrder"] == "alphabetical"
    assert payload["export"] is None


def test_build_artifact_rejects_unknown_style(housing_sources) -> None:
    with pytest.raises(InputError, match="Unsupported citation style"):
        build_artifact("q", housing_sources, "vancouver")
    with pytest.raises(InputError, match="Unsupported export format"):
        build_artifact("q", housing_sources, "apa", "docx")


# enrichment and run_research


async def test_enrich_narrative_keeps_heuristic_on_failure() -> None:
    synthesis = SynthesizedContent(narrative="heuristic")
    assert (await enrich_narrative("q", synthesis, FailingWriter())).narrative == "heuristic"
    assert (await enrich_narrative("q", synthesis, StaticWriter())).narrative == "Narrative about q"
    assert synthesis.narrative == "heuristic"


async def test_run_research_end_to_end() -> None:
    artifact = await run_research(
        "housing prices",
        StaticSearch(DOCUMENTS),
        writer=StaticWriter(),
        citation_style="ieee",
        export_format="markdown",
    )
    assert artifact.synthesis.narrative == "Narrative about housing prices"
    assert artifact.report.metadata.source_count == 2
    assert artifact.bibliography.style == "ieee"
    assert artifact.export is not None
    assert artifact.export.mime_type == "text/markdown"


async def test_run_research_without_results_is_an_input_error() -> None:
    with pytest.raises(InputError, match="No sources found"):
        await run_research("housing prices", StaticSearch([]))
