from __future__ import annotations

import math

from conftest import GENERATED_AT, TODAY, make_source

from corroborate.citations.formatter import CitationFormatter
from corroborate.models.citation import CitationRecord
from corroborate.models.synthesis import Consensus, Evidence, SynthesizedContent, Theme
from corroborate.report.structure import ReportStructureGenerator, theme_priority
from corroborate.synthesis.engine import ContentSynthesisEngine


def _synthesis() -> SynthesizedContent:
    return SynthesizedContent(
        key_themes=[
            Theme("General", [Evidence("a", "Something happened", 0.5)], Consensus.WEAK),
            Theme(
                "Economic Impact",
                [Evidence(s, "Markets grew", 0.9) for s in ("a", "b", "c")],
                Consensus.STRONG,
            ),
        ]
    )


def test_outline_has_fixed_sections() -> None:
    outline = ReportStructureGenerator(_synthesis(), "housing costs", 3).create_outline()
    assert [c.id for c in outline.children] == ["introduction", "findings", "analysis", "conclusion"]
    assert [c.id for c in outline.children[2].children] == ["trends", "implications"]


def test_findings_are_ranked_by_priority() -> None:
    generator = ReportStructureGenerator(_synthesis(), "housing costs", 3)
    findings = generator.create_outline().children[1]
    assert [c.title for c in findings.children] == ["Economic Impact", "General"]
    assert [c.id for c in findings.children] == ["finding-0", "finding-1"]
    assert theme_priority(_synthesis().key_themes[1]) == 12


def test_optional_sections_follow_the_synthesis(housing_sources) -> None:
    synthesis = ContentSynthesisEngine(housing_sources).synthesize()
    outline = ReportStructureGenerator(synthesis, "remote work housing", 3).create_outline()
    assert "controversies" in [c.id for c in outline.children]
    assert "timeline" not in [c.id for c in outline.children]


def test_generate_without_formatter_keeps_markers() -> None:
    report = ReportStructureGenerator(_synthesis(), "housing costs", 3).generate(GENERATED_AT)
    finding = report.sections[1].subsections[0]
    assert "[CITE:a]" in finding.content
    assert finding.citations == ["a", "b", "c"]
    assert finding.confidence == 0.9


def test_generate_embeds_citations_and_counts_words() -> None:
    formatter = CitationFormatter("ieee", today=TODAY)
    for source_id in ("a", "b", "c"):
        formatter.add_source(CitationRecord.from_source(make_source(source_id)))

    generator = ReportStructureGenerator(_synthesis(), "housing costs", 3, formatter)
    report = generator.generate(GENERATED_AT)

    for section in report.sections:
        for node in section.walk():
            assert "[CITE:" not in node.content
    assert "Markets grew [1]" in report.sections[1].subsections[0].content

    words = ReportStructureGenerator.word_count(report.sections, report.executive_summary)
    assert report.metadata.word_count == words
    assert report.metadata.estimated_reading_time == math.ceil(words / 200)
    assert report.metadata.generated_at == GENERATED_AT.isoformat()
    assert report.metadata.source_count == 3


def test_title_and_table_of_contents() -> None:
    report = ReportStructureGenerator(_synthesis(), "how do housing costs change", 3).generate(GENERATED_AT)
    assert report.title == "Research Report: Housing Costs Change"
    assert [entry.page for entry in report.table_of_contents] == [1, 2, 3, 4]
    assert report.table_of_contents[1].subsections == ["Economic Impact", "General"]


def test_overall_confidence_is_evidence_weighted() -> None:
    generator = ReportStructureGenerator(_synthesis(), "housing costs", 3)
    assert generator.overall_confidence() == (0.5 * 1 + 0.9 * 3) / 4
    assert ReportStructureGenerator(SynthesizedContent(), "q", 0).overall_confidence() == 0.5


def test_executive_summary_mentions_leading_themes() -> None:
    summary = ReportStructureGenerator(_synthesis(), "housing costs", 3).executive_summary()
    assert summary.startswith('This research report examines "housing costs" based on analysis of 3 sources.')
    assert "1 major themes: Economic Impact." in summary
    assert summary.endswith("The overall confidence level of findings is 80%.")
