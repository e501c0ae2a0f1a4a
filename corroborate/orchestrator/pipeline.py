"""Research pipeline — validation, per-source preparation and the artifact build."""

from __future__ import annotations

import asyncio
import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Any, Sequence

from corroborate.backends.base import FactAnalyzer, NarrativeWriter, SearchProvider
from corroborate.citations.formatter import CitationFormatter
from corroborate.config import settings
from corroborate.errors import InputError
from corroborate.extraction.facts import extract_structured
from corroborate.extraction.quality import assess_quality
from corroborate.graph.builder import KnowledgeGraphBuilder
from corroborate.models.citation import CitationRecord, SortOrder
from corroborate.models.graph import Contradiction, KnowledgeGraph
from corroborate.models.report import ResearchArtifact
from corroborate.models.source import AnalyzedSource, RetrievedDocument, Source
from corroborate.models.synthesis import SynthesizedContent
from corroborate.orchestrator.exporter import MIME_TYPES, ReportExporter
from corroborate.report.structure import ReportStructureGenerator
from corroborate.synthesis.engine import ContentSynthesisEngine
from corroborate.synthesis.rules import ConsensusThresholds

logger = logging.getLogger(__name__)


# Input validation


def parse_sources(query: str, payloads: Sequence[dict[str, Any]]) -> list[Source]:
    """Turn camelCase request records into Sources.

    Raises InputError before any synthesis work when the query or any record
    is missing or malformed.
    """
    if not query or not query.strip():
        raise InputError("A research query is required")
    return parse_source_records(payloads)


def parse_source_records(payloads: Sequence[dict[str, Any]]) -> list[Source]:
    if not payloads:
        raise InputError("At least one source is required")

    sources: list[Source] = []
    seen: set[str] = set()
    for index, payload in enumerate(payloads):
        if not isinstance(payload, dict):
            raise InputError(f"Source {index} is not an object")
        try:
            source = Source.from_payload(payload)
        except (KeyError, TypeError, ValueError) as exc:
            raise InputError(f"Source {index} is malformed: {exc}") from exc
        if source.id in seen:
            raise InputError(f"Duplicate source id: {source.id}")
        seen.add(source.id)
        sources.append(source)
    return sources


def validate_options(citation_style: str, export_format: str | None = None) -> None:
    try:
        CitationFormatter(citation_style)
    except ValueError as exc:
        raise InputError(str(exc)) from exc
    if export_format is not None and export_format.lower() not in MIME_TYPES:
        raise InputError(f"Unsupported export format: {export_format}")


# Per-source preparation


def analyze_source(source: Source, today: date | None = None) -> AnalyzedSource:
    """Heuristic analysis of an already-built Source.

    Facts supplied with the source are kept as given; a source without any
    takes the extracted ones. A source whose text cannot be assessed drops
    to the degraded credibility of 0.
    """
    quality = assess_quality(source.url, source.content, source.published_date, today)
    extraction = extract_structured(source.content, source.url)
    if quality.degraded:
        source = replace(source, credibility_score=quality.credibility_score)
    if source.key_facts:
        extraction.key_facts = list(source.key_facts)
    else:
        source = replace(source, key_facts=tuple(extraction.key_facts))
    return AnalyzedSource(source=source, quality=quality, extraction=extraction)


async def prepare_sources(
    documents: Sequence[RetrievedDocument],
    analyzer: FactAnalyzer | None = None,
    timeout: float | None = None,
    today: date | None = None,
) -> list[AnalyzedSource]:
    """Analyze retrieved documents concurrently, keeping input order.

    Documents repeating an earlier URL are dropped. A failing or slow
    analyzer never fails the run: the heuristic facts stand in for it.
    """
    unique: dict[str, RetrievedDocument] = {}
    for document in documents:
        if document.url in unique:
            logger.debug("Dropping duplicate document %s", document.url)
            continue
        unique[document.url] = document

    timeout = timeout or settings.enrichment_timeout
    tasks = [
        _prepare_document(f"s{index}", document, analyzer, timeout, today)
        for index, document in enumerate(unique.values(), 1)
    ]
    prepared = await asyncio.gather(*tasks)
    logger.info("Prepared %d sources", len(prepared))
    return list(prepared)


async def _prepare_document(
    source_id: str,
    document: RetrievedDocument,
    analyzer: FactAnalyzer | None,
    timeout: float,
    today: date | None,
) -> AnalyzedSource:
    quality = assess_quality(document.url, document.text, document.published_date, today)
    extraction = extract_structured(document.text, document.url)

    if analyzer is not None and not extraction.degraded:
        try:
            analysis = await asyncio.wait_for(analyzer.analyze(document.text, document.url), timeout)
        except Exception as exc:
            logger.warning("Enrichment by %s failed for %s: %s", analyzer.name, document.url, exc)
        else:
            facts = [payload.to_fact() for payload in analysis.key_facts]
            if facts:
                extraction.key_facts = facts
            if analysis.summary:
                extraction.summary = analysis.summary

    source = Source(
        id=source_id,
        url=document.url,
        title=document.title,
        content=document.text,
        credibility_score=quality.credibility_score,
        source_type=quality.source_type,
        author=document.author,
        published_date=document.published_date,
        key_facts=tuple(extraction.key_facts),
    )
    return AnalyzedSource(source=source, quality=quality, extraction=extraction)


# Artifact build


def synthesize(sources: Sequence[Source]) -> SynthesizedContent:
    thresholds = ConsensusThresholds.from_settings(settings)
    return ContentSynthesisEngine(sources, thresholds).synthesize()


async def enrich_narrative(
    query: str, synthesis: SynthesizedContent, writer: NarrativeWriter, timeout: float | None = None
) -> SynthesizedContent:
    """Swap in an LLM narrative; the heuristic narrative stays on any failure."""
    try:
        narrative = await asyncio.wait_for(
            writer.write(query, synthesis), timeout or settings.enrichment_timeout
        )
    except Exception as exc:
        logger.warning("Narrative enrichment by %s failed: %s", writer.name, exc)
        return synthesis
    return replace(synthesis, narrative=narrative)


def build_graph(
    analyzed: Sequence[AnalyzedSource], contradictions: Sequence[Contradiction] = ()
) -> KnowledgeGraph:
    """Only the supplied contradiction records produce contradicts edges."""
    return KnowledgeGraphBuilder(analyzed, contradictions).build()


def build_artifact(
    query: str,
    sources: Sequence[Source],
    citation_style: str | None = None,
    export_format: str | None = None,
    synthesis: SynthesizedContent | None = None,
    today: date | None = None,
    generated_at: datetime | None = None,
) -> ResearchArtifact:
    """Synthesize, cite, structure and optionally export one run's sources.

    Pure given ``today`` and ``generated_at``: the same inputs always produce
    the same artifact.
    """
    citation_style = citation_style or settings.citation_style
    validate_options(citation_style, export_format)
    if not sources:
        raise InputError("At least one source is required")

    today = today or date.today()
    synthesis = synthesis or synthesize(sources)

    formatter = CitationFormatter(citation_style, today)
    for source in sources:
        formatter.add_source(CitationRecord.from_source(source, accessed_date=today.isoformat()))

    report = ReportStructureGenerator(synthesis, query, len(sources), formatter).generate(generated_at)
    bibliography = formatter.generate_bibliography(SortOrder.ALPHABETICAL)

    export = None
    if export_format:
        export = ReportExporter(export_format).export(report, bibliography, synthesis)

    return ResearchArtifact(
        report=report,
        synthesis=synthesis,
        bibliography=bibliography,
        export=export,
        citation_warnings=[str(w) for w in formatter.warnings],
    )


async def run_research(
    query: str,
    search: SearchProvider,
    analyzer: FactAnalyzer | None = None,
    writer: NarrativeWriter | None = None,
    citation_style: str | None = None,
    export_format: str | None = None,
) -> ResearchArtifact:
    """Search, prepare and build in one call."""
    if not query or not query.strip():
        raise InputError("A research query is required")
    validate_options(citation_style or settings.citation_style, export_format)

    logger.info("Searching %s for %r", search.name, query)
    documents = await search.search(query)
    if not documents:
        raise InputError(f"No sources found for query: {query}")

    analyzed = await prepare_sources(documents, analyzer)
    sources = [a.source for a in analyzed]
    synthesis = synthesize(sources)
    if writer is not None:
        synthesis = await enrich_narrative(query, synthesis, writer)

    return build_artifact(query, sources, citation_style, export_format, synthesis=synthesis)
