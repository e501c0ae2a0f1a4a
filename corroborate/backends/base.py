"""Protocols and response schemas for external collaborators."""

from __future__ import annotations

import json
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, ConfigDict, Field, ValidationError
from pydantic.alias_generators import to_camel

from corroborate.errors import EnrichmentUnavailable
from corroborate.models.source import Fact, FactCategory, RetrievedDocument
from corroborate.models.synthesis import SynthesizedContent


class FactPayload(BaseModel):
    """A fact as returned by an LLM analyzer."""

    claim: str = Field(min_length=1)
    confidence: float = Field(default=0.5, ge=0.0, le=1.0)
    category: FactCategory = FactCategory.CLAIM
    evidence: str | None = None
    entities: list[str] = Field(default_factory=list)

    def to_fact(self) -> Fact:
        return Fact(
            claim=self.claim,
            confidence=self.confidence,
            category=self.category,
            evidence=self.evidence,
            entities=tuple(self.entities),
        )


class FactAnalysis(BaseModel):
    """Schema an LLM fact analysis must satisfy before it is trusted."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    key_facts: list[FactPayload] = Field(default_factory=list)
    summary: str = ""
    credibility_assessment: str = ""
    main_topics: list[str] = Field(default_factory=list)
    sentiment: str = "neutral"


def parse_json_block(raw_text: str) -> Any:
    """Decode JSON from an LLM reply, tolerating a surrounding code fence."""
    text = raw_text.strip()
    if text.startswith("```"):
        text = text.split("\n", 1)[1] if "\n" in text else ""
        text = text.rsplit("```", 1)[0]
    return json.loads(text)


def parse_fact_analysis(raw_text: str) -> FactAnalysis:
    """Validate an LLM reply; raises EnrichmentUnavailable when it is unusable."""
    try:
        return FactAnalysis.model_validate(parse_json_block(raw_text))
    except (json.JSONDecodeError, ValidationError, TypeError) as exc:
        raise EnrichmentUnavailable(f"Unparseable fact analysis: {exc}") from exc


@runtime_checkable
class SearchProvider(Protocol):
    """Retrieves documents for a research query."""

    name: str

    async def search(self, query: str) -> list[RetrievedDocument]:
        ...


@runtime_checkable
class FactAnalyzer(Protocol):
    """Optional LLM-backed fact extraction for one document."""

    name: str

    async def analyze(self, text: str, url: str) -> FactAnalysis:
        ...


@runtime_checkable
class NarrativeWriter(Protocol):
    """Optional LLM-backed prose narrative over a finished synthesis."""

    name: str

    async def write(self, query: str, synthesis: SynthesizedContent) -> str:
        ...
