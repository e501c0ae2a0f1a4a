"""Heuristic structured extraction: facts, topics, entities and summary.

Every classifier here is an ordered rule table. Order is part of the
contract: fact rules emit in table order for each sentence, and entity
categories claim a string in table order (the first category wins).
"""

from __future__ import annotations

import logging
import re
from collections import Counter
from dataclasses import dataclass

from corroborate.dates import MONTH_DATE_PATTERN, MONTH_NAMES
from corroborate.errors import ExtractionDegraded
from corroborate.models.source import Fact, FactCategory, StructuredExtraction

logger = logging.getLogger(__name__)

MAX_FACTS = 20
MAX_TOPICS = 10
MIN_SENTENCE_LENGTH = 10
SUMMARY_LENGTH = 300

# A period between two digits (12.5) is not a sentence boundary.
SENTENCE_BOUNDARY = re.compile(r"[.!?]+(?!\d)|(?<!\d)[.!?]+")


@dataclass(frozen=True)
class FactRule:
    category: FactCategory
    confidence: float
    pattern: re.Pattern

    def matches(self, sentence: str) -> bool:
        return self.pattern.search(sentence) is not None


FACT_RULES = (
    FactRule(
        FactCategory.STATISTIC,
        0.8,
        re.compile(
            r"\d+(?:\.\d+)?\s?%|\b\d+(?:\.\d+)?\s+percent\b|[$€£]\s?\d"
            r"|\b\d+(?:[.,]\d+)*\s+(?:million|billion|thousand|trillion)\b",
            re.IGNORECASE,
        ),
    ),
    FactRule(FactCategory.QUOTE, 0.7, re.compile(r"[\"“][^\"”]{3,}[\"”]")),
    FactRule(
        FactCategory.DEFINITION,
        0.75,
        re.compile(
            r"\b(?:is|are) (?:defined|described|known) as\b|\brefers? to\b|\bmeans that\b",
            re.IGNORECASE,
        ),
    ),
    FactRule(
        FactCategory.RELATIONSHIP,
        0.65,
        re.compile(
            r"\b(?:leads? to|led to|because of|results? in|resulted in|caused by|causes?"
            r"|due to|contributes? to|as a result of)\b",
            re.IGNORECASE,
        ),
    ),
)

_ORG_SUFFIXES = (
    "Corp", "Corporation", "Inc", "Ltd", "LLC", "Company", "Group", "University",
    "Institute", "Agency", "Association", "Foundation", "Bank", "Department",
    "Council", "Organization", "Commission",
)
ENTITY_RULES = (
    (
        "ORGANIZATION",
        re.compile(r"\b(?:[A-Z][A-Za-z&-]*\s+){1,4}(?:" + "|".join(_ORG_SUFFIXES) + r")\b"),
    ),
    ("NAME", re.compile(r"\b[A-Z][a-z]+(?:\s+[A-Z][a-z]+)+\b")),
    ("DATE", MONTH_DATE_PATTERN),
    ("MONEY", re.compile(r"[$€£]\s?\d+(?:,\d{3})*(?:\.\d+)?(?:\s+(?:million|billion|thousand|trillion)\b)?")),
    ("PERCENT", re.compile(r"\b\d+(?:\.\d+)?\s?%|\b\d+(?:\.\d+)?\s+percent\b")),
)

# Capitalized words that start a sentence rather than a name.
LEADING_WORDS = frozenset(
    {
        "The", "A", "An", "In", "On", "At", "By", "For", "From", "Of", "And", "But",
        "This", "That", "These", "Those", "However", "Meanwhile", "While", "When",
        "After", "Before", "Since", "Last", "Next", "According", "Many", "Some",
        "Most", "Our", "Their", "Its", "As", "If", "Although", "Despite",
    }
)

STOPWORDS = frozenset(
    """
    that this with from have were been their there which about would could should
    these those than then them they what when where while also into more most some
    such only other over after before said says will just your very each many much
    being does because between during through under within without among across
    here like make made makes including according however since still even well
    back first
    """.split()
)

URL_PATTERN = re.compile(r"https?://[^\s)\]>\"']+")
DOI_PATTERN = re.compile(r"\b10\.\d{4,9}/[^\s\"<>]+")


def split_sentences(text: str) -> list[str]:
    """Split text on . ! ? and drop fragments shorter than 10 characters."""
    parts = (part.strip() for part in SENTENCE_BOUNDARY.split(text))
    return [part for part in parts if len(part) >= MIN_SENTENCE_LENGTH]


def _strip_leading(run: str) -> str:
    words = run.split()
    while words and words[0] in LEADING_WORDS:
        words.pop(0)
    return " ".join(words)


def extract_entities(text: str) -> dict[str, list[str]]:
    """Group entity strings by category, each string claimed at most once."""
    seen: set[str] = set()
    entities: dict[str, list[str]] = {}
    for category, pattern in ENTITY_RULES:
        for match in pattern.finditer(text):
            value = match.group(0).strip()
            if category in ("ORGANIZATION", "NAME"):
                value = _strip_leading(value)
                if category == "NAME" and (
                    len(value.split()) < 2
                    or value.split()[0] in MONTH_NAMES
                    or any(value in org for org in entities.get("ORGANIZATION", ()))
                ):
                    continue
            if not value or value in seen:
                continue
            seen.add(value)
            entities.setdefault(category, []).append(value)
    return entities


def extract_facts(sentences: list[str], entities: list[str]) -> list[Fact]:
    facts: list[Fact] = []
    for sentence in sentences:
        mentioned = tuple(e for e in entities if e in sentence)
        for rule in FACT_RULES:
            if not rule.matches(sentence):
                continue
            facts.append(
                Fact(
                    claim=sentence,
                    confidence=rule.confidence,
                    category=rule.category,
                    evidence=sentence,
                    entities=mentioned,
                )
            )
            if len(facts) >= MAX_FACTS:
                return facts
    return facts


def extract_topics(text: str) -> list[str]:
    """Return the most frequent content words, ties broken by first appearance."""
    words = [w for w in re.findall(r"[a-z]+", text.lower()) if len(w) > 3 and w not in STOPWORDS]
    return [word for word, _ in Counter(words).most_common(MAX_TOPICS)]


def summarize(sentences: list[str]) -> str:
    summary = ""
    for sentence in sentences:
        candidate = f"{summary} {sentence}.".strip()
        if len(candidate) > SUMMARY_LENGTH:
            break
        summary = candidate
    if not summary and sentences:
        summary = sentences[0][: SUMMARY_LENGTH - 3] + "..."
    return summary


def extract_citations(text: str) -> list[str]:
    found = [url.rstrip(".,;:") for url in URL_PATTERN.findall(text)]
    found += [doi.rstrip(".,;:") for doi in DOI_PATTERN.findall(text)]
    return list(dict.fromkeys(found))


def _extract(text: str, url: str) -> StructuredExtraction:
    if not text or not text.strip():
        raise ExtractionDegraded(url, "empty text")

    sentences = split_sentences(text)
    named_entities = extract_entities(text)
    all_entities = [e for values in named_entities.values() for e in values]
    return StructuredExtraction(
        key_facts=extract_facts(sentences, all_entities),
        main_topics=extract_topics(text),
        named_entities=named_entities,
        summary=summarize(sentences),
        citations=extract_citations(text),
    )


def extract_structured(text: str, url: str) -> StructuredExtraction:
    """Extract facts, topics, entities, summary and citations from one source.

    Never raises: unusable text yields an empty, degraded extraction.
    """
    try:
        return _extract(text, url)
    except Exception as exc:
        degraded = exc if isinstance(exc, ExtractionDegraded) else ExtractionDegraded(url, str(exc))
        logger.warning("Structured extraction degraded: %s", degraded)
        return StructuredExtraction(degraded=True)
