"""Cross-source synthesis data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum


class Consensus(Enum):
    STRONG = "strong"
    MODERATE = "moderate"
    WEAK = "weak"
    CONFLICTING = "conflicting"


@dataclass
class Evidence:
    source_id: str
    claim: str
    confidence: float


@dataclass
class Theme:
    """Facts from possibly many sources that fall in one topical bucket."""

    label: str
    evidence: list[Evidence] = field(default_factory=list)
    consensus: Consensus = Consensus.WEAK

    @property
    def source_ids(self) -> list[str]:
        return list(dict.fromkeys(e.source_id for e in self.evidence))


@dataclass
class TimelineEvent:
    date: str
    event: str
    source_ids: list[str] = field(default_factory=list)


@dataclass
class Statistic:
    metric: str
    value: str
    source_id: str
    confidence: float


@dataclass
class Position:
    source_id: str
    position: str


@dataclass
class Controversy:
    """A topic on which at least two sources hold opposed positions."""

    topic: str
    conflicting_positions: list[Position] = field(default_factory=list)


@dataclass
class SynthesizedContent:
    narrative: str = ""
    key_themes: list[Theme] = field(default_factory=list)
    timeline: list[TimelineEvent] = field(default_factory=list)
    statistics: list[Statistic] = field(default_factory=list)
    controversies: list[Controversy] = field(default_factory=list)
