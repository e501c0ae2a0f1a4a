"""Citation record and bibliography data models."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from corroborate.models.source import Source


class CitationType(Enum):
    ARTICLE = "article"
    BOOK = "book"
    WEBSITE = "website"
    JOURNAL = "journal"
    REPORT = "report"
    CONFERENCE = "conference"
    THESIS = "thesis"


class SortOrder(Enum):
    ALPHABETICAL = "alphabetical"
    CHRONOLOGICAL = "chronological"
    ORDER_OF_APPEARANCE = "order-of-appearance"


class ValidationIssue(Enum):
    MISSING_TITLE = "Title is required"
    MISSING_AUTHORS = "At least one author is required"
    MISSING_DATE = "Publication date or access date is required"
    MISSING_JOURNAL = "Journal name is required for journal articles"
    MISSING_URL = "URL is required for website citations"


@dataclass
class CitationRecord:
    """Bibliographic data for one source."""

    id: str
    title: str = ""
    authors: list[str] = field(default_factory=list)
    type: CitationType = CitationType.WEBSITE
    url: str | None = None
    doi: str | None = None
    published_date: str | None = None
    accessed_date: str | None = None
    publisher: str | None = None
    journal: str | None = None
    volume: str | None = None
    issue: str | None = None
    pages: str | None = None
    edition: str | None = None
    location: str | None = None
    isbn: str | None = None
    issn: str | None = None

    @classmethod
    def from_source(cls, source: Source, accessed_date: str | None = None) -> CitationRecord:
        return cls(
            id=source.id,
            title=source.title,
            authors=[source.author] if source.author else [],
            url=source.url,
            published_date=source.published_date,
            accessed_date=accessed_date,
        )

    @classmethod
    def from_payload(cls, data: dict[str, Any]) -> CitationRecord:
        return cls(
            id=str(data["id"]),
            title=str(data.get("title") or ""),
            authors=[str(a) for a in data.get("authors") or []],
            type=CitationType(data.get("type") or CitationType.WEBSITE.value),
            url=data.get("url"),
            doi=data.get("doi"),
            published_date=data.get("publishedDate"),
            accessed_date=data.get("accessedDate"),
            publisher=data.get("publisher"),
            journal=data.get("journal"),
            volume=data.get("volume"),
            issue=data.get("issue"),
            pages=data.get("pages"),
            edition=data.get("edition"),
            location=data.get("location"),
            isbn=data.get("isbn"),
            issn=data.get("issn"),
        )


@dataclass
class BibliographyEntry:
    id: str
    formatted: str


@dataclass
class Bibliography:
    style: str
    sort_order: SortOrder
    entries: list[BibliographyEntry] = field(default_factory=list)
