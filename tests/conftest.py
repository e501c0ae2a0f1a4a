from __future__ import annotations

from datetime import date, datetime, timezone

import pytest

from corroborate.models.source import Fact, FactCategory, Source, SourceType

TODAY = date(2024, 6, 10)
GENERATED_AT = datetime(2024, 6, 10, 12, 0, tzinfo=timezone.utc)


def make_source(
    source_id: str,
    claims: list[str] | None = None,
    content: str = "",
    credibility: float = 0.8,
    confidence: float = 0.9,
    **kwargs,
) -> Source:
    facts = tuple(Fact(claim=c, confidence=confidence) for c in claims or ())
    return Source(
        id=source_id,
        url=kwargs.pop("url", f"https://{source_id}.example.org/article"),
        title=kwargs.pop("title", f"Article {source_id}"),
        content=content or " ".join(claims or ()),
        credibility_score=credibility,
        key_facts=facts,
        **kwargs,
    )


HOUSING_CLAIMS = {
    "s1": "Suburban housing market prices increased 12% as remote work spread.",
    "s2": "Remote work lifted the housing market, with prices increased 12% year over year.",
    "s3": "Downtown housing market prices decreased as offices emptied.",
}
HOUSING_CREDIBILITY = {"s1": 0.8, "s2": 0.7, "s3": 0.6}


@pytest.fixture
def housing_sources() -> list[Source]:
    return [
        make_source(
            "s1",
            [HOUSING_CLAIMS["s1"]],
            credibility=HOUSING_CREDIBILITY["s1"],
            author="Jane A. Doe",
            published_date="2023-04-02",
        ),
        make_source(
            "s2",
            [HOUSING_CLAIMS["s2"]],
            credibility=HOUSING_CREDIBILITY["s2"],
            author="Raj Patel",
            published_date="2022-11-20",
        ),
        make_source(
            "s3",
            [HOUSING_CLAIMS["s3"]],
            credibility=HOUSING_CREDIBILITY["s3"],
            source_type=SourceType.NEWS,
        ),
    ]


@pytest.fixture
def housing_payload() -> dict:
    return {
        "query": "remote work housing",
        "sources": [
            {
                "id": source_id,
                "url": f"https://{source_id}.example.org/article",
                "title": f"Article {source_id}",
                "content": claim,
                "credibilityScore": HOUSING_CREDIBILITY[source_id],
                "sourceType": "news",
                "keyFacts": [
                    {"claim": claim, "confidence": 0.9, "category": FactCategory.CLAIM.value}
                ],
            }
            for source_id, claim in HOUSING_CLAIMS.items()
        ],
    }
