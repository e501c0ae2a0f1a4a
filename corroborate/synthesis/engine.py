"""Content synthesis engine — merges facts from many sources into one view."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Sequence

from corroborate.dates import MONTH_DATE_PATTERN, parse_date
from corroborate.extraction.facts import SENTENCE_BOUNDARY
from corroborate.models.source import Source
from corroborate.models.synthesis import (
    Consensus,
    Controversy,
    Evidence,
    Position,
    Statistic,
    SynthesizedContent,
    Theme,
    TimelineEvent,
)
from corroborate.synthesis.rules import (
    ConsensusThresholds,
    assess_consensus,
    categorize_theme,
    has_opposing_polarity,
)

logger = logging.getLogger(__name__)

EVENT_WINDOW = 100
STATISTIC_WINDOW = 50
NARRATIVE_ITEMS = 3

STATISTIC_PATTERN = re.compile(
    r"[$€£]\s?\d+(?:,\d{3})*(?:\.\d+)?(?:\s*(?:million|billion|thousand|trillion)\b)?"
    r"|\b\d+(?:,\d{3})*(?:\.\d+)?\s*(?:%|percent\b|million\b|billion\b|thousand\b|trillion\b)",
    re.IGNORECASE,
)


def event_context(content: str, start: int, end: int, date_str: str) -> str | None:
    """Return the sentence around a date mention, searched within ±100 chars."""
    window = content[max(0, start - EVENT_WINDOW): end + EVENT_WINDOW]
    for sentence in SENTENCE_BOUNDARY.split(window):
        if date_str in sentence:
            return sentence.strip() or None
    return None


def statistic_context(content: str, start: int, end: int) -> str:
    window = content[max(0, start - STATISTIC_WINDOW): end + STATISTIC_WINDOW]
    return re.sub(r"\s+", " ", window).strip()


class ContentSynthesisEngine:
    """Pure reads over one run's immutable source list.

    Sources are always visited in the order given, so every "first seen wins"
    tie-break is reproducible.
    """

    def __init__(
        self, sources: Sequence[Source], thresholds: ConsensusThresholds | None = None
    ) -> None:
        self.sources = tuple(sources)
        self.thresholds = thresholds or ConsensusThresholds()

    def synthesize(self) -> SynthesizedContent:
        themes = self.extract_themes()
        timeline = self.construct_timeline()
        statistics = self.aggregate_statistics()
        controversies = self.identify_controversies()
        narrative = self.generate_narrative(themes, timeline, statistics)

        logger.info(
            "Synthesized %d sources: %d themes, %d timeline events, %d statistics, %d controversies",
            len(self.sources), len(themes), len(timeline), len(statistics), len(controversies),
        )
        return SynthesizedContent(
            narrative=narrative,
            key_themes=themes,
            timeline=timeline,
            statistics=statistics,
            controversies=controversies,
        )

    def extract_themes(self) -> list[Theme]:
        grouped: dict[str, list[Evidence]] = {}
        for source in self.sources:
            for fact in source.key_facts:
                grouped.setdefault(categorize_theme(fact.claim), []).append(
                    Evidence(
                        source_id=source.id,
                        claim=fact.claim,
                        confidence=round(fact.confidence * source.credibility_score, 4),
                    )
                )
        return [
            Theme(label=label, evidence=evidence, consensus=assess_consensus(evidence, self.thresholds))
            for label, evidence in grouped.items()
        ]

    def construct_timeline(self) -> list[TimelineEvent]:
        merged: dict[str, TimelineEvent] = {}
        for source in self.sources:
            for match in MONTH_DATE_PATTERN.finditer(source.content):
                date_str = match.group(0)
                event = event_context(source.content, match.start(), match.end(), date_str)
                if not event:
                    continue
                existing = merged.get(date_str)
                if existing is None:
                    merged[date_str] = TimelineEvent(date=date_str, event=event, source_ids=[source.id])
                    continue
                if source.id not in existing.source_ids:
                    existing.source_ids.append(source.id)
                if len(event) > len(existing.event):
                    existing.event = event

        return sorted(merged.values(), key=lambda e: parse_date(e.date) or date.max)

    def aggregate_statistics(self) -> list[Statistic]:
        unique: dict[tuple[str, str], Statistic] = {}
        for source in self.sources:
            for match in STATISTIC_PATTERN.finditer(source.content):
                metric = statistic_context(source.content, match.start(), match.end())
                stat = Statistic(
                    metric=metric,
                    value=match.group(0).strip(),
                    source_id=source.id,
                    confidence=source.credibility_score,
                )
                key = (stat.metric, stat.value)
                if key not in unique or unique[key].confidence < stat.confidence:
                    unique[key] = stat
        return list(unique.values())

    def identify_controversies(self) -> list[Controversy]:
        controversies: list[Controversy] = []
        for topic, members in self._group_by_topic().items():
            if len(members) < 2:
                continue
            positions = [
                Position(source_id=source.id, position=self._position(source, topic))
                for source in members
            ]
            if has_opposing_polarity([p.position for p in positions]):
                controversies.append(Controversy(topic=topic, conflicting_positions=positions))
        return controversies

    def generate_narrative(
        self,
        themes: list[Theme],
        timeline: list[TimelineEvent],
        statistics: list[Statistic],
    ) -> str:
        parts: list[str] = []

        leading = [t for t in themes if t.consensus in (Consensus.STRONG, Consensus.MODERATE)]
        if leading:
            names = ", ".join(t.label for t in leading[:NARRATIVE_ITEMS])
            parts.append(
                f"Based on analysis of {len(self.sources)} sources, several key themes emerge. {names}."
            )

        if timeline:
            entries = " ".join(f"{e.date}: {e.event}." for e in timeline[:NARRATIVE_ITEMS])
            parts.append(f"The chronological development shows: {entries}")

        if statistics:
            entries = " ".join(f"{s.metric}: {s.value}." for s in statistics[:NARRATIVE_ITEMS])
            parts.append(f"Key metrics indicate: {entries}")

        return "\n\n".join(parts)

    # Helpers

    def _group_by_topic(self) -> dict[str, list[Source]]:
        groups: dict[str, dict[str, Source]] = {}
        for source in self.sources:
            for fact in source.key_facts:
                groups.setdefault(categorize_theme(fact.claim), {}).setdefault(source.id, source)
        return {topic: list(members.values()) for topic, members in groups.items()}

    def _position(self, source: Source, topic: str) -> str:
        relevant = [f for f in source.key_facts if categorize_theme(f.claim) == topic]
        if not relevant:
            return "No clear position"
        return max(relevant, key=lambda f: f.confidence).claim
