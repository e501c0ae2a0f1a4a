"""Corroborate — FastAPI application entry point."""

from __future__ import annotations

import logging
from typing import Any

import httpx
from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from corroborate.backends.claude import ClaudeAnalyst
from corroborate.backends.exa import ExaSearch
from corroborate.citations.formatter import CitationFormatter
from corroborate.config import settings
from corroborate.errors import InputError
from corroborate.models.citation import CitationRecord, SortOrder
from corroborate.models.graph import Contradiction
from corroborate.models.payload import to_payload
from corroborate.orchestrator.pipeline import (
    analyze_source,
    build_artifact,
    build_graph,
    parse_source_records,
    parse_sources,
    run_research,
)

logger = logging.getLogger(__name__)

app = FastAPI(
    title="Corroborate",
    description="Multi-source research synthesis",
    version="0.1.0",
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:5173"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


# --- Request / Response models ---


class CamelModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class ReportRequest(CamelModel):
    query: str
    sources: list[dict[str, Any]]
    citation_style: str | None = None
    export_format: str | None = None


class ContradictionRecord(CamelModel):
    claim: str
    source_urls: list[str] = Field(default_factory=list)


class KnowledgeGraphRequest(CamelModel):
    sources: list[dict[str, Any]]
    contradictions: list[ContradictionRecord] = Field(default_factory=list)


class BibliographyRequest(CamelModel):
    citations: list[dict[str, Any]] = Field(min_length=1)
    style: str = "apa"
    sort_order: str = SortOrder.ALPHABETICAL.value


class ResearchRequest(CamelModel):
    query: str
    citation_style: str | None = None
    export_format: str | None = None
    enhance: bool = True


# --- Routes ---


@app.get("/health")
async def health():
    return {"status": "ok"}


@app.post("/api/report")
async def create_report(req: ReportRequest):
    """Build a full research artifact from caller-supplied sources."""
    try:
        sources = parse_sources(req.query, req.sources)
        artifact = build_artifact(req.query, sources, req.citation_style, req.export_format)
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    return artifact.to_payload()


@app.post("/api/knowledge-graph")
async def create_knowledge_graph(req: KnowledgeGraphRequest):
    """Build the cross-source knowledge graph for caller-supplied sources."""
    try:
        sources = parse_source_records(req.sources)
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    contradictions = [
        Contradiction(claim=c.claim, source_urls=c.source_urls) for c in req.contradictions
    ]
    graph = build_graph([analyze_source(source) for source in sources], contradictions)
    return to_payload(graph)


@app.post("/api/bibliography")
async def create_bibliography(req: BibliographyRequest):
    """Format citation records as a bibliography in one style."""
    try:
        formatter = CitationFormatter(req.style)
        sort_order = SortOrder(req.sort_order)
        records = [CitationRecord.from_payload(c) for c in req.citations]
    except (KeyError, TypeError, ValueError) as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc

    for record in records:
        formatter.add_source(record)
    bibliography = formatter.generate_bibliography(sort_order)
    payload = to_payload(bibliography)
    payload["guidelines"] = formatter.guidelines()
    payload["warnings"] = [str(w) for w in formatter.warnings]
    return payload


@app.post("/api/research")
async def create_research(req: ResearchRequest):
    """Search the web for the query, then synthesize what comes back."""
    if not settings.exa_api_key:
        raise HTTPException(status_code=503, detail="Search is not configured")

    analyst = ClaudeAnalyst() if req.enhance and settings.anthropic_api_key else None
    try:
        artifact = await run_research(
            req.query,
            ExaSearch(),
            analyzer=analyst,
            writer=analyst,
            citation_style=req.citation_style,
            export_format=req.export_format,
        )
    except InputError as exc:
        raise HTTPException(status_code=400, detail=str(exc)) from exc
    except httpx.HTTPError as exc:
        logger.exception("Search failed for %r", req.query)
        raise HTTPException(status_code=502, detail="Search provider failed") from exc
    return artifact.to_payload()
