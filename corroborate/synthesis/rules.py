"""Ordered rule tables and thresholds behind theme, consensus and polarity checks.

Theme buckets are checked top to bottom and the first match wins, so a claim
mentioning both markets and health lands in Economic Impact.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from corroborate.models.synthesis import Consensus, Evidence


@dataclass(frozen=True)
class ThemeRule:
    label: str
    keywords: tuple[str, ...]

    def matches(self, text: str) -> bool:
        return any(keyword in text for keyword in self.keywords)


THEME_RULES = (
    ThemeRule("Economic Impact", ("economic", "financial", "market")),
    ThemeRule("Health & Safety", ("health", "medical", "safety")),
    ThemeRule("Technology", ("technology", "digital", "innovation")),
    ThemeRule("Environmental", ("environment", "climate", "sustainability")),
    ThemeRule("Social Impact", ("social", "community", "society")),
)
GENERAL_THEME = "General"

POSITIVE_TERMS = ("increase", "improve", "benefit", "positive", "support")
NEGATIVE_TERMS = ("decrease", "worsen", "harm", "negative", "oppose")


def categorize_theme(claim: str) -> str:
    text = claim.lower()
    for rule in THEME_RULES:
        if rule.matches(text):
            return rule.label
    return GENERAL_THEME


def has_opposing_polarity(texts: Sequence[str]) -> bool:
    """True when the texts together hit both the positive and negative lexicon."""
    lowered = [t.lower() for t in texts]
    positive = any(term in t for t in lowered for term in POSITIVE_TERMS)
    negative = any(term in t for t in lowered for term in NEGATIVE_TERMS)
    return positive and negative


@dataclass(frozen=True)
class ConsensusThresholds:
    """Cut-offs for consensus tiers. Raising agreement never lowers the tier."""

    conflict_ratio: float = 0.7
    strong_confidence: float = 0.8
    strong_sources: int = 3
    moderate_confidence: float = 0.6
    moderate_sources: int = 2
    claim_prefix: int = 50

    @classmethod
    def from_settings(cls, settings) -> ConsensusThresholds:
        return cls(
            conflict_ratio=settings.conflict_ratio,
            strong_confidence=settings.strong_confidence,
            moderate_confidence=settings.moderate_confidence,
        )


def assess_consensus(
    evidence: Sequence[Evidence], thresholds: ConsensusThresholds | None = None
) -> Consensus:
    thresholds = thresholds or ConsensusThresholds()
    if not evidence:
        return Consensus.WEAK

    avg_confidence = sum(e.confidence for e in evidence) / len(evidence)
    source_count = len({e.source_id for e in evidence})

    unique_claims = {e.claim.lower()[: thresholds.claim_prefix] for e in evidence}
    if len(unique_claims) / len(evidence) > thresholds.conflict_ratio:
        return Consensus.CONFLICTING

    if avg_confidence > thresholds.strong_confidence and source_count >= thresholds.strong_sources:
        return Consensus.STRONG
    if avg_confidence > thresholds.moderate_confidence and source_count >= thresholds.moderate_sources:
        return Consensus.MODERATE
    return Consensus.WEAK
