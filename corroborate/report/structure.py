"""Report structure generator — outline, templated section bodies and metadata."""

from __future__ import annotations

import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Callable

from corroborate.citations.formatter import CitationFormatter
from corroborate.models.report import ReportMetadata, ReportSection, ReportStructure, TocEntry
from corroborate.models.synthesis import Consensus, SynthesizedContent, Theme

logger = logging.getLogger(__name__)

WORDS_PER_MINUTE = 200
TOP_EVIDENCE = 3

CONSENSUS_PRIORITY = {
    Consensus.STRONG: 4,
    Consensus.MODERATE: 3,
    Consensus.WEAK: 2,
    Consensus.CONFLICTING: 1,
}
CONSENSUS_CONFIDENCE = {
    Consensus.STRONG: 0.9,
    Consensus.MODERATE: 0.7,
    Consensus.WEAK: 0.5,
    Consensus.CONFLICTING: 0.3,
}


def theme_priority(theme: Theme) -> int:
    return CONSENSUS_PRIORITY[theme.consensus] * len(theme.evidence)


def cite(source_ids: list[str]) -> str:
    return f"[CITE:{','.join(source_ids)}]" if source_ids else ""


@dataclass
class OutlineNode:
    id: str
    title: str
    level: int
    priority: int
    children: list[OutlineNode] = field(default_factory=list)
    theme: Theme | None = None


class ReportStructureGenerator:
    """Builds the report skeleton from one run's synthesized content.

    Section bodies come from fixed templates keyed by section id; nothing is
    free-form. When a formatter is supplied, ``[CITE:...]`` markers in the
    bodies are rendered in its style before words are counted.
    """

    def __init__(
        self,
        synthesis: SynthesizedContent,
        query: str,
        source_count: int,
        formatter: CitationFormatter | None = None,
    ) -> None:
        self.synthesis = synthesis
        self.query = query
        self.source_count = source_count
        self.formatter = formatter
        self._templates: dict[str, Callable[[OutlineNode], str]] = {
            "introduction": self._introduction,
            "background": self._background,
            "scope": self._scope,
            "findings": self._findings,
            "analysis": self._analysis,
            "trends": self._trends,
            "implications": self._implications,
            "timeline": self._timeline,
            "controversies": self._controversies,
            "conclusion": self._conclusion,
            "summary": self._summary,
            "recommendations": self._recommendations,
            "future-research": self._future_research,
        }

    def generate(self, generated_at: datetime | None = None) -> ReportStructure:
        outline = self.create_outline()
        sections = [self._build_section(child) for child in outline.children]
        if self.formatter is not None:
            for section in sections:
                for node in section.walk():
                    node.content = self.formatter.embed_citations(node.content)

        executive_summary = self.executive_summary()
        word_count = self.word_count(sections, executive_summary)
        confidence = self.overall_confidence()
        logger.info(
            "Report structure: %d sections, %d words, confidence %.2f",
            len(sections), word_count, confidence,
        )

        return ReportStructure(
            title=self.title(),
            executive_summary=executive_summary,
            table_of_contents=[
                TocEntry(section=s.title, page=i, subsections=[sub.title for sub in s.subsections])
                for i, s in enumerate(sections, 1)
            ],
            sections=sections,
            metadata=ReportMetadata(
                generated_at=(generated_at or datetime.now(timezone.utc)).isoformat(),
                query=self.query,
                source_count=self.source_count,
                confidence_score=round(confidence, 4),
                word_count=word_count,
                estimated_reading_time=math.ceil(word_count / WORDS_PER_MINUTE),
            ),
        )

    def ranked_themes(self) -> list[Theme]:
        """Themes by descending priority; ties keep synthesis order."""
        return sorted(self.synthesis.key_themes, key=theme_priority, reverse=True)

    def create_outline(self) -> OutlineNode:
        root = OutlineNode("root", "Research Report", 0, 1)
        root.children.append(
            OutlineNode("introduction", "Introduction", 1, 3, [
                OutlineNode("background", "Background and Context", 2, 3),
                OutlineNode("scope", "Scope and Methodology", 2, 2),
            ])
        )
        root.children.append(
            OutlineNode("findings", "Key Findings", 1, 5, [
                OutlineNode(f"finding-{i}", theme.label, 2, theme_priority(theme), theme=theme)
                for i, theme in enumerate(self.ranked_themes())
            ])
        )
        root.children.append(
            OutlineNode("analysis", "Analysis and Discussion", 1, 4, [
                OutlineNode("trends", "Emerging Trends", 2, 3),
                OutlineNode("implications", "Implications", 2, 4),
            ])
        )
        if self.synthesis.timeline:
            root.children.append(OutlineNode("timeline", "Chronological Development", 1, 3))
        if self.synthesis.controversies:
            root.children.append(
                OutlineNode("controversies", "Controversies and Conflicting Evidence", 1, 2)
            )
        root.children.append(
            OutlineNode("conclusion", "Conclusion and Recommendations", 1, 4, [
                OutlineNode("summary", "Summary of Findings", 2, 4),
                OutlineNode("recommendations", "Recommendations", 2, 3),
                OutlineNode("future-research", "Areas for Future Research", 2, 2),
            ])
        )
        return root

    def title(self) -> str:
        terms = [t[:1].upper() + t[1:] for t in self.query.split() if len(t) > 3][:4]
        return f"Research Report: {' '.join(terms)}".strip()

    def executive_summary(self) -> str:
        summary = (
            f'This research report examines "{self.query}" based on analysis of '
            f"{self.source_count} sources. "
        )
        leading = self._leading_themes()
        if leading:
            summary += f"The analysis reveals {len(leading)} major themes: "
            summary += ", ".join(t.label for t in leading[:3]) + ". "

        if self.synthesis.statistics:
            top = sorted(self.synthesis.statistics, key=lambda s: s.confidence, reverse=True)[:2]
            summary += "Notable findings include: "
            summary += "; ".join(f"{s.metric} ({s.value})" for s in top) + ". "

        if self.synthesis.controversies:
            summary += (
                f"The research identified {len(self.synthesis.controversies)} "
                "areas of conflicting evidence. "
            )

        summary += f"The overall confidence level of findings is {self._percent(self.overall_confidence())}."
        return summary

    def overall_confidence(self) -> float:
        themes = self.synthesis.key_themes
        total_evidence = sum(len(t.evidence) for t in themes)
        if not themes or total_evidence == 0:
            return 0.5
        weighted = sum(CONSENSUS_CONFIDENCE[t.consensus] * len(t.evidence) for t in themes)
        return weighted / total_evidence

    @staticmethod
    def word_count(sections: list[ReportSection], executive_summary: str) -> int:
        total = len(executive_summary.split())
        for section in sections:
            for node in section.walk():
                total += len(node.content.split())
        return total

    # Section assembly

    def _build_section(self, node: OutlineNode) -> ReportSection:
        if node.theme is not None:
            content = self._theme_content(node.theme)
            citations = node.theme.source_ids
            confidence = CONSENSUS_CONFIDENCE[node.theme.consensus]
        else:
            content = self._templates[node.id](node)
            citations = self._section_citations(node.id)
            confidence = self.overall_confidence()
        return ReportSection(
            id=node.id,
            title=node.title,
            content=content,
            citations=citations,
            confidence=round(confidence, 4),
            subsections=[self._build_section(child) for child in node.children],
        )

    def _section_citations(self, section_id: str) -> list[str]:
        if section_id == "timeline":
            ids = [sid for e in self.synthesis.timeline for sid in e.source_ids]
        elif section_id == "controversies":
            ids = [p.source_id for c in self.synthesis.controversies for p in c.conflicting_positions]
        else:
            return []
        return list(dict.fromkeys(ids))

    def _leading_themes(self) -> list[Theme]:
        return [
            t for t in self.ranked_themes()
            if t.consensus in (Consensus.STRONG, Consensus.MODERATE)
        ]

    @staticmethod
    def _percent(value: float) -> str:
        return f"{round(value * 100)}%"

    # Templates

    def _introduction(self, node: OutlineNode) -> str:
        return (
            f'This report presents a comprehensive analysis of "{self.query}" based on a '
            f"systematic review of {self.source_count} sources. The research uses automated "
            "content synthesis to identify key themes, trends, and insights while maintaining "
            "rigorous citation standards."
        )

    def _background(self, node: OutlineNode) -> str:
        themes = self.ranked_themes()
        if not themes:
            return "Background information is derived from the synthesized content analysis."
        main = themes[0]
        return (
            f"The topic of {main.label.lower()} has gained significant attention, with "
            f"{len(main.source_ids)} sources providing relevant insights. The analysis reveals "
            f"{main.consensus.value} consensus among sources."
        )

    def _scope(self, node: OutlineNode) -> str:
        return (
            f"This analysis encompasses {self.source_count} sources of various types and "
            "credibility levels. The methodology combines heuristic fact extraction with "
            "confidence scoring and consensus assessment across sources."
        )

    def _findings(self, node: OutlineNode) -> str:
        if not node.children:
            return "No thematic findings could be derived from the source material."
        return (
            "The following sections detail the key findings organized by the thematic areas "
            "identified through content synthesis."
        )

    def _theme_content(self, theme: Theme) -> str:
        lines = [
            f"Analysis of {len(theme.evidence)} pieces of evidence from {len(theme.source_ids)} "
            f"sources reveals {theme.consensus.value} consensus on {theme.label.lower()}.",
            "",
        ]
        top = sorted(theme.evidence, key=lambda e: e.confidence, reverse=True)[:TOP_EVIDENCE]
        for index, evidence in enumerate(top, 1):
            lines.append(
                f"{index}. {evidence.claim} {cite([evidence.source_id])} "
                f"(Confidence: {self._percent(evidence.confidence)})"
            )
        return "\n".join(lines)

    def _analysis(self, node: OutlineNode) -> str:
        return self.synthesis.narrative or (
            "Detailed analysis of the synthesized content reveals several important patterns "
            "and implications."
        )

    def _trends(self, node: OutlineNode) -> str:
        leading = self._leading_themes()
        if not leading:
            return "No theme reached moderate or strong agreement across sources."
        names = ", ".join(t.label.lower() for t in leading)
        return f"Sources converge on developments in {names}."

    def _implications(self, node: OutlineNode) -> str:
        contested = [t for t in self.synthesis.key_themes if t.consensus is Consensus.CONFLICTING]
        text = (
            f"The synthesis draws on {len(self.synthesis.statistics)} quantitative data points "
            f"across {len(self.synthesis.key_themes)} themes."
        )
        if contested:
            text += (
                f" Evidence on {', '.join(t.label.lower() for t in contested)} is divided, so "
                "conclusions in these areas should be treated with caution."
            )
        return text

    def _timeline(self, node: OutlineNode) -> str:
        lines = ["The following chronological development was identified:", ""]
        for event in self.synthesis.timeline:
            lines.append(
                f"**{event.date}**: {event.event} {cite(event.source_ids)} "
                f"(Sources: {len(event.source_ids)})"
            )
            lines.append("")
        return "\n".join(lines).strip()

    def _controversies(self, node: OutlineNode) -> str:
        lines = ["The analysis revealed several areas of conflicting evidence:", ""]
        for index, controversy in enumerate(self.synthesis.controversies, 1):
            lines.append(f"**{index}. {controversy.topic}**")
            for position in controversy.conflicting_positions:
                lines.append(f"- Source position: {position.position} {cite([position.source_id])}")
            lines.append("")
        return "\n".join(lines).strip()

    def _conclusion(self, node: OutlineNode) -> str:
        strong = [t for t in self.synthesis.key_themes if t.consensus is Consensus.STRONG]
        return (
            f"The analysis of {self.source_count} sources reveals {len(strong)} areas of strong "
            f"consensus. The overall research demonstrates "
            f"{self._percent(self.overall_confidence())} confidence in findings."
        )

    def _summary(self, node: OutlineNode) -> str:
        themes = self.ranked_themes()
        if not themes:
            return "No findings were synthesized."
        return " ".join(f"{t.label}: {t.consensus.value} consensus." for t in themes)

    def _recommendations(self, node: OutlineNode) -> str:
        weak = [
            t.label.lower() for t in self.ranked_themes()
            if t.consensus in (Consensus.WEAK, Consensus.CONFLICTING)
        ]
        if not weak:
            return "The findings are well supported and can inform decisions directly."
        return (
            f"Treat findings on {', '.join(weak)} as provisional and verify them against "
            "primary sources before relying on them."
        )

    def _future_research(self, node: OutlineNode) -> str:
        if self.synthesis.controversies:
            topics = ", ".join(c.topic.lower() for c in self.synthesis.controversies)
            return f"Further research should resolve the conflicting evidence on {topics}."
        return "Further research could broaden the source base to strengthen the consensus."
