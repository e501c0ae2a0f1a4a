"""Citation style strategies.

Each style renders inline markers and bibliography entries for the records
held by a ``CitationFormatter``. Numeric styles (IEEE, Nature) number a
record by its registry insertion position.
"""

from __future__ import annotations

from datetime import date
from typing import Mapping, Sequence

from corroborate.dates import MONTH_NAMES, parse_date
from corroborate.models.citation import CitationRecord, CitationType

UNKNOWN_AUTHOR = "Unknown"
UNTITLED = "Untitled"
NO_DATE = "n.d."


# Name and date helpers


def split_name(author: str) -> tuple[list[str], str]:
    """Split "Jane A. Doe" into (["Jane", "A."], "Doe")."""
    parts = author.split()
    if len(parts) < 2:
        return [], author.strip()
    return parts[:-1], parts[-1]


def surname(author: str) -> str:
    return split_name(author)[1]


def initials(given: Sequence[str], sep: str = " ") -> str:
    return sep.join(name[0].upper() + "." for name in given if name)


def year_of(value: str | None) -> str:
    parsed = parse_date(value)
    return str(parsed.year) if parsed else NO_DATE


def day_month_year(value: date) -> str:
    return f"{value.day} {MONTH_NAMES[value.month - 1][:3]} {value.year}"


def month_day_year(value: date) -> str:
    return f"{MONTH_NAMES[value.month - 1]} {value.day}, {value.year}"


def terminate(text: str) -> str:
    """Append a period unless the text already ends with one."""
    return text if text.endswith((".", "?", "!")) else text + "."


def join_with(names: Sequence[str], last_sep: str, sep: str = ", ") -> str:
    if len(names) <= 1:
        return "".join(names)
    return sep.join(names[:-1]) + last_sep + names[-1]


class CitationStyle:
    """Shared machinery; subclasses supply the style-specific rules."""

    name = ""
    description = ""

    def __init__(self, registry: Mapping[str, CitationRecord], today: date) -> None:
        self.registry = registry
        self.today = today

    def format_inline(self, ids: Sequence[str], page: str | None = None) -> str:
        raise NotImplementedError

    def format_entry(self, record: CitationRecord) -> str:
        raise NotImplementedError

    # Shared helpers

    def title_of(self, record: CitationRecord, quoted: bool = False) -> str:
        """Title with closing punctuation; books italicized, others optionally quoted."""
        title = record.title or UNTITLED
        if record.type is CitationType.BOOK:
            return f"*{title}*."
        return f'"{terminate(title)}"' if quoted else terminate(title)

    def accessed(self, record: CitationRecord) -> date:
        return parse_date(record.accessed_date) or self.today

    def position(self, record_id: str) -> int | None:
        for index, key in enumerate(self.registry, 1):
            if key == record_id:
                return index
        return None

    def inline_author(self, record: CitationRecord, pair_sep: str, et_al_from: int) -> str:
        names = [surname(a) for a in record.authors]
        if not names:
            return UNKNOWN_AUTHOR
        if len(names) >= et_al_from:
            return f"{names[0]} et al."
        if len(names) == 2:
            return f"{names[0]}{pair_sep}{names[1]}"
        return names[0]


class APAStyle(CitationStyle):
    name = "apa"
    description = (
        "American Psychological Association (APA) - Common in psychology, education, "
        "and social sciences"
    )
    max_listed = 7

    def format_inline(self, ids, page=None):
        parts = []
        for record_id in ids:
            record = self.registry.get(record_id)
            if record is None:
                parts.append(record_id)
                continue
            text = f"{self.inline_author(record, ' & ', 3)}, {year_of(record.published_date)}"
            parts.append(f"{text}, p. {page}" if page else text)
        return f"({'; '.join(parts)})"

    def invert(self, author: str) -> str:
        given, last = split_name(author)
        return f"{last}, {initials(given)}" if given else last

    def authors(self, authors: Sequence[str]) -> str:
        if not authors:
            return UNKNOWN_AUTHOR
        names = [self.invert(a) for a in authors]
        if len(names) == 1:
            return names[0]
        if len(names) <= self.max_listed:
            return join_with(names, ", & ")
        return ", ".join(names[:6]) + ", ... " + names[-1]

    def date_part(self, record: CitationRecord) -> str:
        return f"({year_of(record.published_date)})"

    def format_entry(self, record):
        text = f"{self.authors(record.authors)} {self.date_part(record)}. {self.title_of(record)}"
        if record.journal:
            text += f" *{record.journal}*"
            if record.volume:
                text += f", {record.volume}"
            if record.issue:
                text += f"({record.issue})"
            if record.pages:
                text += f", {record.pages}"
            text += "."
        if record.publisher and record.type is CitationType.BOOK:
            text += f" {terminate(record.publisher)}"
        if record.doi:
            text += f" https://doi.org/{record.doi}"
        elif record.url:
            text += f" Retrieved from {record.url}"
        return text


class HarvardStyle(APAStyle):
    name = "harvard"
    description = "Harvard Referencing - Common in social sciences and humanities"

    def format_inline(self, ids, page=None):
        parts = []
        for record_id in ids:
            record = self.registry.get(record_id)
            if record is None:
                parts.append(record_id)
                continue
            text = f"{self.inline_author(record, ' and ', 4)} {year_of(record.published_date)}"
            parts.append(f"{text}, p. {page}" if page else text)
        return f"({'; '.join(parts)})"

    def invert(self, author):
        given, last = split_name(author)
        return f"{last}, {initials(given, sep='')}" if given else last

    def authors(self, authors):
        if not authors:
            return UNKNOWN_AUTHOR
        if len(authors) >= 4:
            return f"{self.invert(authors[0])} et al."
        return join_with([self.invert(a) for a in authors], " and ")

    def format_entry(self, record):
        text = f"{self.authors(record.authors)} {self.date_part(record)} {self.title_of(record)}"
        if record.journal:
            text += f" *{record.journal}*"
            if record.volume:
                text += f", {record.volume}"
            if record.issue:
                text += f"({record.issue})"
            if record.pages:
                text += f", pp. {record.pages}"
            text += "."
        elif record.publisher:
            text += f" {terminate(record.publisher)}"
        if record.url:
            text += f" Available at: {record.url} (Accessed: {day_month_year(self.accessed(record))})."
        return text


class MLAStyle(CitationStyle):
    name = "mla"
    description = "Modern Language Association (MLA) - Common in literature, arts, and humanities"

    def format_inline(self, ids, page=None):
        parts = []
        for record_id in ids:
            record = self.registry.get(record_id)
            if record is None:
                parts.append(record_id)
                continue
            author = self.inline_author(record, " and ", 3)
            parts.append(f"{author} {page}" if page else author)
        return f"({'; '.join(parts)})"

    def invert(self, author: str) -> str:
        given, last = split_name(author)
        return f"{last}, {' '.join(given)}" if given else last

    def authors(self, authors: Sequence[str]) -> str:
        if not authors:
            return UNKNOWN_AUTHOR
        first = self.invert(authors[0])
        if len(authors) == 1:
            return first
        if len(authors) == 2:
            return f"{first}, and {authors[1]}"
        return f"{first}, et al."

    def format_entry(self, record):
        text = f"{terminate(self.authors(record.authors))} {self.title_of(record, quoted=True)}"
        published = parse_date(record.published_date)
        if record.journal:
            text += f" *{record.journal}*"
            if record.volume:
                text += f", vol. {record.volume}"
            if record.issue:
                text += f", no. {record.issue}"
            if published:
                text += f", {day_month_year(published)}"
            if record.pages:
                text += f", pp. {record.pages}"
            text += "."
        elif record.publisher:
            text += f" {record.publisher}"
            if published:
                text += f", {published.year}"
            text += "."
        if record.url:
            text += f" {record.url}. Accessed {day_month_year(self.accessed(record))}."
        return text


class ChicagoStyle(CitationStyle):
    name = "chicago"
    description = "Chicago Manual of Style - Common in history, literature, and arts"
    max_listed = 10

    def __init__(self, registry, today):
        super().__init__(registry, today)
        self.footnote_counter = 0

    def format_inline(self, ids, page=None):
        self.footnote_counter += 1
        return f"<sup>{self.footnote_counter}</sup>"

    def authors(self, authors: Sequence[str]) -> str:
        if not authors:
            return UNKNOWN_AUTHOR
        given, last = split_name(authors[0])
        first = f"{last}, {' '.join(given)}" if given else last
        if len(authors) == 1:
            return first
        if len(authors) > self.max_listed:
            return ", ".join([first, *authors[1:7]]) + ", et al."
        return join_with([first, *authors[1:]], ", and ")

    def format_entry(self, record):
        text = f"{terminate(self.authors(record.authors))} {self.title_of(record, quoted=True)}"
        published = parse_date(record.published_date)
        if record.journal:
            text += f" *{record.journal}*"
            if record.volume:
                text += f" {record.volume}"
            if record.issue:
                text += f", no. {record.issue}"
            if published:
                text += f" ({month_day_year(published)})"
            if record.pages:
                text += f": {record.pages}"
            text += "."
        elif record.publisher:
            if record.location:
                text += f" {record.location}:"
            text += f" {record.publisher}"
            if published:
                text += f", {published.year}"
            text += "."
        if record.url:
            text += f" Accessed {month_day_year(self.accessed(record))}. {record.url}."
        return text


class IEEEStyle(CitationStyle):
    name = "ieee"
    description = (
        "Institute of Electrical and Electronics Engineers (IEEE) - Common in engineering "
        "and computer science"
    )

    def format_inline(self, ids, page=None):
        numbers = []
        for record_id in ids:
            index = self.position(record_id)
            label = str(index) if index else "?"
            numbers.append(f"[{label}, p. {page}]" if page else f"[{label}]")
        return "".join(numbers)

    def name_of(self, author: str) -> str:
        given, last = split_name(author)
        return f"{initials(given)} {last}" if given else last

    def authors(self, authors: Sequence[str]) -> str:
        if not authors:
            return UNKNOWN_AUTHOR
        if len(authors) > 3:
            return f"{self.name_of(authors[0])} et al."
        return join_with([self.name_of(a) for a in authors], ", and " if len(authors) > 2 else " and ")

    def format_entry(self, record):
        parts = [self.authors(record.authors), f'"{record.title or UNTITLED}"']
        published = parse_date(record.published_date)
        if record.journal:
            parts.append(f"*{record.journal}*")
            if record.volume:
                parts.append(f"vol. {record.volume}")
            if record.issue:
                parts.append(f"no. {record.issue}")
            if record.pages:
                parts.append(f"pp. {record.pages}")
        elif record.publisher:
            parts.append(record.publisher)
        if published:
            parts.append(f"{MONTH_NAMES[published.month - 1][:3]} {published.year}")
        text = ", ".join(parts) + "."
        if record.url:
            text += f" [Online]. Available: {record.url}"
        return text


class NatureStyle(CitationStyle):
    name = "nature"
    description = "Nature Style - Common in natural sciences"
    max_listed = 5

    def format_inline(self, ids, page=None):
        numbers = []
        for record_id in ids:
            index = self.position(record_id)
            numbers.append(str(index) if index else "?")
        return ",".join(numbers)

    def invert(self, author: str) -> str:
        given, last = split_name(author)
        return f"{last}, {initials(given)}" if given else last

    def authors(self, authors: Sequence[str]) -> str:
        if not authors:
            return UNKNOWN_AUTHOR
        if len(authors) > self.max_listed:
            return f"{self.invert(authors[0])} et al."
        return join_with([self.invert(a) for a in authors], " & ")

    def format_entry(self, record):
        text = f"{self.authors(record.authors)} {terminate(record.title or UNTITLED)}"
        year = year_of(record.published_date)
        if record.journal:
            text += f" *{record.journal}*"
            if record.volume:
                text += f" **{record.volume}**"
            if record.pages:
                text += f", {record.pages}"
        elif record.url:
            text += f" {record.url}"
        return f"{text} ({year})."


STYLES: dict[str, type[CitationStyle]] = {
    style.name: style
    for style in (APAStyle, MLAStyle, ChicagoStyle, HarvardStyle, IEEEStyle, NatureStyle)
}
