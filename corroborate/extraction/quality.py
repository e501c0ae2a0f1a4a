"""Source credibility assessment from URL, text and publish date."""

from __future__ import annotations

import logging
import re
from datetime import date
from urllib.parse import urlparse

from corroborate.dates import parse_date
from corroborate.errors import ExtractionDegraded
from corroborate.models.source import DomainAuthority, Freshness, SourceQuality, SourceType

logger = logging.getLogger(__name__)

BASE_SCORE = 0.5
FACTUALITY_BONUS = 0.05
BIAS_PENALTY = 0.1
FRESH_DAYS = 7
RECENT_DAYS = 90

# Host suffixes, checked high before medium. A leading dot matches a TLD.
HIGH_AUTHORITY_DOMAINS = (
    ".edu", ".gov", ".mil", ".int", ".ac.uk",
    "nature.com", "science.org", "sciencedirect.com", "springer.com",
    "nih.gov", "arxiv.org", "jstor.org", "reuters.com", "apnews.com",
    "bbc.co.uk", "bbc.com",
)
MEDIUM_AUTHORITY_DOMAINS = (
    "nytimes.com", "washingtonpost.com", "theguardian.com", "wsj.com",
    "bloomberg.com", "economist.com", "ft.com", "npr.org", "cnn.com",
    "forbes.com", "wikipedia.org", "techcrunch.com", "wired.com",
    "theatlantic.com", "axios.com",
)
AUTHORITY_BONUS = {
    DomainAuthority.HIGH: 0.3,
    DomainAuthority.MEDIUM: 0.15,
    DomainAuthority.LOW: 0.0,
}

# Ordered: the first rule whose host suffix or URL marker matches wins.
SOURCE_TYPE_RULES: tuple[tuple[SourceType, tuple[str, ...], tuple[str, ...]], ...] = (
    (SourceType.GOVERNMENT, (".gov", ".mil", "europa.eu", "who.int", "un.org"), ()),
    (
        SourceType.ACADEMIC,
        (".edu", ".ac.uk", "arxiv.org", "nature.com", "science.org", "sciencedirect.com",
         "springer.com", "jstor.org", "doi.org", "researchgate.net", "ssrn.com"),
        ("scholar.", "journal"),
    ),
    (
        SourceType.NEWS,
        ("reuters.com", "apnews.com", "bbc.co.uk", "bbc.com", "nytimes.com",
         "washingtonpost.com", "theguardian.com", "wsj.com", "bloomberg.com", "cnn.com",
         "npr.org", "economist.com", "ft.com", "axios.com"),
        ("news",),
    ),
    (
        SourceType.SOCIAL,
        ("twitter.com", "x.com", "facebook.com", "reddit.com", "linkedin.com",
         "youtube.com", "instagram.com", "tiktok.com"),
        (),
    ),
    (SourceType.BLOG, ("medium.com", "substack.com", "wordpress.com", "blogspot.com"), ("/blog",)),
    (SourceType.COMMERCIAL, (".com", ".io", ".co", ".biz", ".shop"), ()),
)
SOURCE_TYPE_BONUS = {
    SourceType.ACADEMIC: 0.2,
    SourceType.GOVERNMENT: 0.15,
    SourceType.NEWS: 0.1,
}

FACTUALITY_INDICATORS = (
    ("study", re.compile(r"\bstud(?:y|ies)\b", re.IGNORECASE)),
    ("data", re.compile(r"\bdata\b", re.IGNORECASE)),
    ("citation", re.compile(r"\bcitations?\b", re.IGNORECASE)),
    ("peer-review", re.compile(r"\bpeer[- ]review(?:ed)?\b", re.IGNORECASE)),
)
BIAS_INDICATORS = (
    ("opinion", re.compile(r"\bopinion\b", re.IGNORECASE)),
    ("sponsored", re.compile(r"\bsponsored\b", re.IGNORECASE)),
    ("advertisement", re.compile(r"\badvertis(?:ement|ing)\b", re.IGNORECASE)),
    ("affiliate", re.compile(r"\baffiliate links?\b", re.IGNORECASE)),
    ("personal view", re.compile(r"\bi (?:think|believe|feel)\b", re.IGNORECASE)),
)


def _host_matches(host: str, suffix: str) -> bool:
    if suffix.startswith("."):
        return host.endswith(suffix)
    return host == suffix or host.endswith("." + suffix)


def _split_url(url: str) -> tuple[str, str]:
    parsed = urlparse(url if "://" in url else f"https://{url}")
    host = (parsed.hostname or "").lower()
    if host.startswith("www."):
        host = host[4:]
    return host, parsed.path.lower()


def domain_authority(url: str) -> DomainAuthority:
    host, _ = _split_url(url)
    if any(_host_matches(host, s) for s in HIGH_AUTHORITY_DOMAINS):
        return DomainAuthority.HIGH
    if any(_host_matches(host, s) for s in MEDIUM_AUTHORITY_DOMAINS):
        return DomainAuthority.MEDIUM
    return DomainAuthority.LOW


def detect_source_type(url: str) -> SourceType:
    host, path = _split_url(url)
    for source_type, suffixes, markers in SOURCE_TYPE_RULES:
        if any(_host_matches(host, s) for s in suffixes):
            return source_type
        if any(m in host or m in path for m in markers):
            return source_type
    return SourceType.UNKNOWN


def content_freshness(published_date: str | None, today: date | None = None) -> Freshness:
    published = parse_date(published_date)
    if published is None:
        return Freshness.DATED
    age = ((today or date.today()) - published).days
    if age <= FRESH_DAYS:
        return Freshness.FRESH
    if age <= RECENT_DAYS:
        return Freshness.RECENT
    return Freshness.DATED


def _score(url: str, text: str, published_date: str | None, today: date | None) -> SourceQuality:
    if not text or not text.strip():
        raise ExtractionDegraded(url, "empty text")

    authority = domain_authority(url)
    source_type = detect_source_type(url)
    factuality = [name for name, pattern in FACTUALITY_INDICATORS if pattern.search(text)]
    bias = [name for name, pattern in BIAS_INDICATORS if pattern.search(text)]

    score = BASE_SCORE
    score += AUTHORITY_BONUS[authority]
    score += SOURCE_TYPE_BONUS.get(source_type, 0.0)
    score += FACTUALITY_BONUS * len(factuality)
    score -= BIAS_PENALTY * len(bias)

    return SourceQuality(
        credibility_score=round(min(1.0, max(0.0, score)), 4),
        domain_authority=authority,
        content_freshness=content_freshness(published_date, today),
        source_type=source_type,
        factuality_indicators=factuality,
        bias_indicators=bias,
    )


def assess_quality(
    url: str,
    text: str,
    published_date: str | None = None,
    today: date | None = None,
) -> SourceQuality:
    """Score a source's credibility in [0, 1].

    Never raises: unusable text yields a degraded assessment with a
    credibility of 0 so the source cannot sway the synthesis.
    """
    try:
        return _score(url, text, published_date, today)
    except Exception as exc:
        degraded = exc if isinstance(exc, ExtractionDegraded) else ExtractionDegraded(url, str(exc))
        logger.warning("Quality assessment degraded: %s", degraded)
        return SourceQuality(credibility_score=0.0, degraded=True)
