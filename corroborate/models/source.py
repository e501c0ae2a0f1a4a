"""Source, fact and per-source analysis data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any


class SourceType(Enum):
    ACADEMIC = "academic"
    NEWS = "news"
    GOVERNMENT = "government"
    COMMERCIAL = "commercial"
    BLOG = "blog"
    SOCIAL = "social"
    UNKNOWN = "unknown"


class FactCategory(Enum):
    STATISTIC = "statistic"
    CLAIM = "claim"
    QUOTE = "quote"
    DEFINITION = "definition"
    RELATIONSHIP = "relationship"


class DomainAuthority(Enum):
    HIGH = "high"
    MEDIUM = "medium"
    LOW = "low"


class Freshness(Enum):
    FRESH = "fresh"
    RECENT = "recent"
    DATED = "dated"


@dataclass(frozen=True)
class Fact:
    """A single claim pulled from one source."""

    claim: str
    confidence: float
    category: FactCategory = FactCategory.CLAIM
    evidence: str | None = None
    entities: tuple[str, ...] = ()

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Fact:
        """Raises KeyError, TypeError or ValueError on a malformed record."""
        if not isinstance(data, dict):
            raise TypeError(f"fact must be an object, got {type(data).__name__}")
        confidence = float(data.get("confidence", 0.5))
        if not 0.0 <= confidence <= 1.0:
            raise ValueError(f"fact confidence {confidence} outside [0, 1]")
        category = data.get("category") or FactCategory.CLAIM.value
        try:
            category = FactCategory(category)
        except ValueError:
            category = FactCategory.CLAIM
        return cls(
            claim=str(data["claim"]),
            confidence=confidence,
            category=category,
            evidence=data.get("evidence"),
            entities=tuple(data.get("entities") or ()),
        )


@dataclass(frozen=True)
class Source:
    """A retrieved document, immutable for the duration of one run."""

    id: str
    url: str
    title: str
    content: str
    credibility_score: float = 0.5
    source_type: SourceType = SourceType.UNKNOWN
    author: str | None = None
    published_date: str | None = None
    key_facts: tuple[Fact, ...] = ()

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> Source:
        """Build a Source from a camelCase request record.

        Raises KeyError, TypeError or ValueError on malformed input.
        """
        score = float(data.get("credibilityScore", 0.5))
        if not 0.0 <= score <= 1.0:
            raise ValueError(f"credibilityScore {score} outside [0, 1]")
        return cls(
            id=str(data["id"]),
            url=str(data["url"]),
            title=str(data.get("title") or ""),
            content=str(data.get("content") or ""),
            credibility_score=score,
            source_type=SourceType(data.get("sourceType") or SourceType.UNKNOWN.value),
            author=data.get("author"),
            published_date=data.get("publishedDate"),
            key_facts=tuple(Fact.from_payload(f) for f in data.get("keyFacts") or ()),
        )


@dataclass
class RetrievedDocument:
    """A record returned by the search collaborator."""

    url: str
    title: str
    text: str
    published_date: str | None = None
    author: str | None = None


@dataclass
class SourceQuality:
    """Heuristic credibility assessment of one source."""

    credibility_score: float
    domain_authority: DomainAuthority = DomainAuthority.LOW
    content_freshness: Freshness = Freshness.DATED
    source_type: SourceType = SourceType.UNKNOWN
    factuality_indicators: list[str] = field(default_factory=list)
    bias_indicators: list[str] = field(default_factory=list)
    degraded: bool = False


@dataclass
class StructuredExtraction:
    """Facts, topics and entities extracted from one source's text."""

    key_facts: list[Fact] = field(default_factory=list)
    main_topics: list[str] = field(default_factory=list)
    named_entities: dict[str, list[str]] = field(default_factory=dict)
    summary: str = ""
    citations: list[str] = field(default_factory=list)
    degraded: bool = False


@dataclass
class AnalyzedSource:
    """A Source together with the analysis it was built from."""

    source: Source
    quality: SourceQuality
    extraction: StructuredExtraction
