"""Citation registry, inline markers and bibliography generation."""

from __future__ import annotations

import logging
import re
from datetime import date
from typing import Sequence

from corroborate.citations.styles import STYLES, surname
from corroborate.dates import parse_date
from corroborate.errors import CitationValidationWarning
from corroborate.models.citation import (
    Bibliography,
    BibliographyEntry,
    CitationRecord,
    CitationType,
    SortOrder,
    ValidationIssue,
)

logger = logging.getLogger(__name__)

CITE_MARKER = re.compile(r"\[CITE:([^\]]+)\]")
URL_PATTERN = re.compile(r"https?://[^\s)\]]+")
UNDATED = date(1900, 1, 1)


def validate_record(record: CitationRecord) -> list[ValidationIssue]:
    issues: list[ValidationIssue] = []
    if not record.title:
        issues.append(ValidationIssue.MISSING_TITLE)
    if not record.authors:
        issues.append(ValidationIssue.MISSING_AUTHORS)
    if not record.published_date and not record.accessed_date:
        issues.append(ValidationIssue.MISSING_DATE)
    if record.type is CitationType.JOURNAL and not record.journal:
        issues.append(ValidationIssue.MISSING_JOURNAL)
    if record.type is CitationType.WEBSITE and not record.url:
        issues.append(ValidationIssue.MISSING_URL)
    return issues


class CitationFormatter:
    """Formats one report's citations in a single style.

    Owns the registry for the lifetime of a report. Registration order is
    significant: it fixes IEEE/Nature numbering and order-of-appearance
    bibliographies.
    """

    def __init__(self, style: str = "apa", today: date | None = None) -> None:
        try:
            style_cls = STYLES[style.lower()]
        except KeyError:
            raise ValueError(f"Unsupported citation style: {style}") from None
        self._records: dict[str, CitationRecord] = {}
        self.strategy = style_cls(self._records, today or date.today())
        self.warnings: list[CitationValidationWarning] = []

    @property
    def style(self) -> str:
        return self.strategy.name

    @property
    def records(self) -> list[CitationRecord]:
        return list(self._records.values())

    def add_source(self, record: CitationRecord) -> list[ValidationIssue]:
        """Register a record; missing fields are collected as warnings, never raised."""
        issues = validate_record(record)
        if issues:
            warning = CitationValidationWarning(record.id, issues)
            self.warnings.append(warning)
            logger.debug("%s", warning)
        self._records[record.id] = record
        return issues

    def format_inline_citation(self, ids: Sequence[str], page: str | None = None) -> str:
        return self.strategy.format_inline(list(ids), page)

    def format_entry(self, record_id: str) -> str:
        return self.strategy.format_entry(self._records[record_id])

    def generate_bibliography(
        self, sort_order: SortOrder | str = SortOrder.ALPHABETICAL
    ) -> Bibliography:
        sort_order = SortOrder(sort_order)
        records = list(self._records.values())
        if sort_order is SortOrder.ALPHABETICAL:
            records.sort(key=_alphabetical_key)
        elif sort_order is SortOrder.CHRONOLOGICAL:
            records.sort(key=lambda r: parse_date(r.published_date) or UNDATED, reverse=True)

        return Bibliography(
            style=self.style,
            sort_order=sort_order,
            entries=[
                BibliographyEntry(id=r.id, formatted=self.strategy.format_entry(r)) for r in records
            ],
        )

    def embed_citations(self, text: str) -> str:
        """Replace ``[CITE:id1,id2]`` markers with this style's inline form."""

        def replace(match: re.Match) -> str:
            ids = [part.strip() for part in match.group(1).split(",") if part.strip()]
            return self.format_inline_citation(ids)

        return CITE_MARKER.sub(replace, text)

    def link_urls(self, text: str) -> str:
        """Replace bare URLs of registered records with inline citations."""
        by_url = {r.url: r.id for r in self._records.values() if r.url}

        def replace(match: re.Match) -> str:
            url = match.group(0)
            record_id = by_url.get(url)
            return self.format_inline_citation([record_id]) if record_id else url

        return URL_PATTERN.sub(replace, text)

    def guidelines(self) -> str:
        return self.strategy.description


def _alphabetical_key(record: CitationRecord) -> tuple[str, str]:
    lead = surname(record.authors[0]) if record.authors else record.title
    return (lead or "").lower(), record.title.lower()
