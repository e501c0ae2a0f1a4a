from __future__ import annotations

from datetime import date

from corroborate.extraction.quality import (
    assess_quality,
    content_freshness,
    detect_source_type,
    domain_authority,
)
from corroborate.models.source import DomainAuthority, Freshness, SourceType


def test_domain_authority_tiers() -> None:
    assert domain_authority("https://www.reuters.com/world") is DomainAuthority.HIGH
    assert domain_authority("https://news.stanford.edu/story") is DomainAuthority.HIGH
    assert domain_authority("https://www.nytimes.com/2024/01/01/a.html") is DomainAuthority.MEDIUM
    assert domain_authority("https://randomsite.net/x") is DomainAuthority.LOW


def test_source_type_rules_are_ordered() -> None:
    assert detect_source_type("https://www.cdc.gov/flu") is SourceType.GOVERNMENT
    assert detect_source_type("https://arxiv.org/abs/2401.00001") is SourceType.ACADEMIC
    assert detect_source_type("https://www.bbc.com/news/1") is SourceType.NEWS
    assert detect_source_type("https://www.reddit.com/r/x") is SourceType.SOCIAL
    assert detect_source_type("https://someone.substack.com/p/post") is SourceType.BLOG
    assert detect_source_type("https://example.com/post") is SourceType.COMMERCIAL
    assert detect_source_type("https://example.org/page") is SourceType.UNKNOWN


def test_lookalike_host_is_not_a_suffix_match() -> None:
    assert detect_source_type("https://notx.com/thread") is SourceType.COMMERCIAL
    assert domain_authority("https://fakereuters.com/story") is DomainAuthority.LOW


def test_content_freshness_windows() -> None:
    today = date(2024, 6, 10)
    assert content_freshness("2024-06-05", today) is Freshness.FRESH
    assert content_freshness("2024-04-01", today) is Freshness.RECENT
    assert content_freshness("2023-01-01", today) is Freshness.DATED
    assert content_freshness(None, today) is Freshness.DATED


def test_credibility_combines_authority_type_and_indicators() -> None:
    quality = assess_quality("https://www.reuters.com/world", "Officials released data on Tuesday.")
    assert quality.domain_authority is DomainAuthority.HIGH
    assert quality.source_type is SourceType.NEWS
    assert quality.factuality_indicators == ["data"]
    assert quality.credibility_score == 0.95


def test_bias_indicators_lower_the_score() -> None:
    quality = assess_quality(
        "https://example.com/review", "I think this gadget is great. Sponsored content."
    )
    assert quality.bias_indicators == ["sponsored", "personal view"]
    assert quality.credibility_score == 0.3


def test_credibility_is_clamped() -> None:
    text = "This peer-reviewed study reports new data and a citation list."
    quality = assess_quality("https://arxiv.org/abs/1", text)
    assert quality.credibility_score == 1.0


def test_empty_text_is_degraded_with_zero_credibility() -> None:
    quality = assess_quality("https://www.reuters.com/world", "   ")
    assert quality.degraded
    assert quality.credibility_score == 0.0
