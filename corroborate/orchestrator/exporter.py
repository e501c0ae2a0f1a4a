"""Report exporter — renders a finished artifact as Markdown or JSON."""

from __future__ import annotations

import json
import logging
import re

from corroborate.models.citation import Bibliography
from corroborate.models.payload import to_payload
from corroborate.models.report import ExportResult, ReportSection, ReportStructure
from corroborate.models.synthesis import SynthesizedContent

logger = logging.getLogger(__name__)

MIME_TYPES = {
    "markdown": "text/markdown",
    "json": "application/json",
    "pdf": "application/pdf",
    "html": "text/html",
}
EXTENSIONS = {"markdown": "md", "json": "json", "pdf": "pdf", "html": "html"}
# pdf and html need an external renderer
RENDERED_FORMATS = ("markdown", "json")


def slugify(text: str) -> str:
    slug = re.sub(r"[^a-z0-9]+", "-", text.lower()).strip("-")
    return slug or "report"


class ReportExporter:
    """Renders one report with its bibliography in a single output format."""

    def __init__(self, export_format: str = "markdown") -> None:
        export_format = export_format.lower()
        if export_format not in MIME_TYPES:
            raise ValueError(f"Unsupported export format: {export_format}")
        self.export_format = export_format

    def export(
        self,
        report: ReportStructure,
        bibliography: Bibliography,
        synthesis: SynthesizedContent | None = None,
    ) -> ExportResult | None:
        """Return the rendered document, or None when the format is not rendered here."""
        if self.export_format not in RENDERED_FORMATS:
            logger.info("Export format %s requires an external renderer; skipping", self.export_format)
            return None

        if self.export_format == "json":
            content = self.render_json(report, bibliography, synthesis)
        else:
            content = self.render_markdown(report, bibliography)

        return ExportResult(
            content=content,
            file_name=f"{slugify(report.title)}.{EXTENSIONS[self.export_format]}",
            mime_type=MIME_TYPES[self.export_format],
        )

    def render_markdown(self, report: ReportStructure, bibliography: Bibliography) -> str:
        lines: list[str] = [f"# {report.title}", ""]

        meta = report.metadata
        lines.append(
            f"*Generated {meta.generated_at} from {meta.source_count} sources. "
            f"{meta.word_count} words, about {meta.estimated_reading_time} min read.*"
        )
        lines.append("")

        lines.append("## Executive Summary")
        lines.append("")
        lines.append(report.executive_summary)
        lines.append("")

        if report.table_of_contents:
            lines.append("## Table of Contents")
            lines.append("")
            for entry in report.table_of_contents:
                lines.append(f"{entry.page}. {entry.section}")
                for sub in entry.subsections:
                    lines.append(f"    - {sub}")
            lines.append("")

        for section in report.sections:
            self._render_section(section, 2, lines)

        if bibliography.entries:
            lines.append("## References")
            lines.append("")
            for entry in bibliography.entries:
                lines.append(f"- {entry.formatted}")
            lines.append("")

        return "\n".join(lines).rstrip() + "\n"

    def render_json(
        self,
        report: ReportStructure,
        bibliography: Bibliography,
        synthesis: SynthesizedContent | None = None,
    ) -> str:
        document = {"report": to_payload(report), "bibliography": to_payload(bibliography)}
        if synthesis is not None:
            document["synthesis"] = to_payload(synthesis)
        return json.dumps(document, indent=2, ensure_ascii=False)

    def _render_section(self, section: ReportSection, level: int, lines: list[str]) -> None:
        lines.append(f"{'#' * min(level, 6)} {section.title}")
        lines.append("")
        if section.content:
            lines.append(section.content)
            lines.append("")
        for sub in section.subsections:
            self._render_section(sub, level + 1, lines)
