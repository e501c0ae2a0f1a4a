"""Report structure and research artifact data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from corroborate.models.citation import Bibliography
from corroborate.models.payload import to_payload
from corroborate.models.synthesis import SynthesizedContent


@dataclass
class ReportSection:
    id: str
    title: str
    content: str = ""
    citations: list[str] = field(default_factory=list)
    confidence: float = 0.5
    subsections: list[ReportSection] = field(default_factory=list)

    def walk(self):
        """Yield this section and all nested subsections, depth first."""
        yield self
        for sub in self.subsections:
            yield from sub.walk()


@dataclass
class TocEntry:
    section: str
    page: int
    subsections: list[str] = field(default_factory=list)


@dataclass
class ReportMetadata:
    generated_at: str
    query: str
    source_count: int
    confidence_score: float
    word_count: int
    estimated_reading_time: int


@dataclass
class ReportStructure:
    title: str
    executive_summary: str
    table_of_contents: list[TocEntry]
    sections: list[ReportSection]
    metadata: ReportMetadata


@dataclass
class ExportResult:
    content: str
    file_name: str
    mime_type: str


@dataclass
class ResearchArtifact:
    """Everything one run produces, ready to serialize."""

    report: ReportStructure
    synthesis: SynthesizedContent
    bibliography: Bibliography
    export: ExportResult | None = None
    citation_warnings: list[str] = field(default_factory=list)

    def to_payload(self) -> dict[str, Any]:
        return to_payload(self)
